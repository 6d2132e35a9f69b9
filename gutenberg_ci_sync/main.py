"""CLI entry point: run one reconciliation pass."""

import asyncio
import sys

import click
import structlog

from gutenberg_ci_sync.config.settings import SyncSettings, load_token
from gutenberg_ci_sync.engine.reconciler import Reconciler
from gutenberg_ci_sync.exceptions import ConfigurationError, UpstreamQueryError
from gutenberg_ci_sync.models.domain import PassSummary, ReconcileAction
from gutenberg_ci_sync.providers.github_client import GitHubClient
from gutenberg_ci_sync.utils.logging_config import configure_logging

log = structlog.get_logger(__name__)


@click.command()
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False),
    default=None,
    help="Optional YAML configuration file (defaults target wordpress/gutenberg)",
)
@click.option("--log-level", default="INFO", help="Logging level")
@click.option(
    "--log-format",
    type=click.Choice(["json", "console"]),
    default="json",
    help="Log output format",
)
@click.option(
    "--concurrency",
    type=click.IntRange(1, 16),
    default=None,
    help="Pull requests reconciled at once (overrides configuration)",
)
@click.option("--dry-run", is_flag=True, help="Decide what to trigger without dispatching any workflow")
def cli(
    config_path: str | None,
    log_level: str,
    log_format: str,
    concurrency: int | None,
    dry_run: bool,
) -> None:
    """Trigger the Gutenberg mobile CI for out-of-date pull requests.

    Each run compares every open, labeled Gutenberg pull request against
    its mirror branch and dispatches the update workflow where the mirror
    lags behind. Meant to be run on a schedule.

    Examples:

        gutenberg-ci-sync

        gutenberg-ci-sync --dry-run --log-format console
    """
    configure_logging(log_level, log_format)  # type: ignore[arg-type]

    try:
        settings = SyncSettings.load(config_path)
        if concurrency is not None:
            settings = settings.model_copy(update={"max_concurrency": concurrency})
        token = load_token(settings)
    except ConfigurationError as e:
        click.echo(f"Error: {e}", err=True)
        log.debug("config_error", exc_info=True)
        sys.exit(1)

    try:
        summary = asyncio.run(_run_pass(settings, token, dry_run))
    except UpstreamQueryError as e:
        click.echo(f"Error: {e.message}", err=True)
        log.error("upstream_query_failed", error=e.message)
        sys.exit(1)
    except KeyboardInterrupt:
        click.echo("\nInterrupted by user", err=True)
        sys.exit(130)

    click.echo(_format_summary(summary, dry_run))


async def _run_pass(settings: SyncSettings, token: str, dry_run: bool) -> PassSummary:
    async with GitHubClient(
        token,
        base_url=settings.api_base_url,
        timeout=settings.request_timeout,
        max_connections=settings.max_concurrency,
    ) as client:
        reconciler = Reconciler.from_settings(settings, client, dry_run=dry_run)
        return await reconciler.run_pass()


def _format_summary(summary: PassSummary, dry_run: bool) -> str:
    if dry_run:
        triggered = f"would dispatch: {summary.count(ReconcileAction.WOULD_DISPATCH)}"
    else:
        triggered = f"dispatched: {summary.dispatched}"

    return (
        f"Checked {len(summary.results)} pull requests "
        f"({triggered}, in sync: {summary.in_sync}, skipped: {summary.skipped}, failed: {summary.failed})"
    )


if __name__ == "__main__":
    cli()
