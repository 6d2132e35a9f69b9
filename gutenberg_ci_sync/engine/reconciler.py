"""
Reconciliation of upstream pull requests against their CI mirrors.

For every candidate pull request the reconciler:

1. Skips it unless its head repository belongs to the canonical owner.
   Fork pull requests never trigger CI.
2. Derives the mirror branch name from the pull request number.
3. Looks up the commit recorded on the mirror branch.
4. Dispatches the CI workflow unless the mirror already records the head
   commit. A missing mirror and a failed lookup both count as "trigger
   owed"; a redundant CI run is preferred over a missed update.

Pull requests are independent: each is reconciled as its own task, and a
dispatch failure is logged and reported without affecting the others.
Nothing is retried; the next scheduled pass picks up whatever failed.
"""

import asyncio

import structlog

from gutenberg_ci_sync.config.settings import SyncSettings
from gutenberg_ci_sync.engine.parallel_executor import ExecutionTask, ParallelExecutor
from gutenberg_ci_sync.exceptions import DispatchError
from gutenberg_ci_sync.models.domain import (
    DEFAULT_MIRROR_SOURCE,
    DispatchRequest,
    MirrorLookupOutcome,
    MirrorLookupResult,
    PassSummary,
    PullRequestRecord,
    ReconcileAction,
    ReconcileResult,
    TriggerReason,
    mirror_branch_name,
)
from gutenberg_ci_sync.providers.dispatcher import WorkflowDispatcher
from gutenberg_ci_sync.providers.github_client import GitHubClient
from gutenberg_ci_sync.providers.mirror_state import MirrorStateResolver
from gutenberg_ci_sync.providers.pull_requests import PullRequestSource

log = structlog.get_logger(__name__)


class Reconciler:
    """Runs reconciliation passes.

    Attributes:
        source: Lists candidate pull requests
        resolver: Reads mirror state
        dispatcher: Triggers the CI workflow
        canonical_owner: Head repository owner allowed to trigger CI
        target_ref: Control repository branch the workflow runs on
        mirror_source: Source name used in mirror branch names
        lookup_timeout: Deadline for a single mirror lookup, in seconds
        dry_run: Log dispatches instead of sending them
    """

    def __init__(
        self,
        source: PullRequestSource,
        resolver: MirrorStateResolver,
        dispatcher: WorkflowDispatcher,
        canonical_owner: str,
        target_ref: str,
        mirror_source: str = DEFAULT_MIRROR_SOURCE,
        max_concurrency: int = 1,
        lookup_timeout: float = 30.0,
        task_timeout: float = 120.0,
        dry_run: bool = False,
    ) -> None:
        self.source = source
        self.resolver = resolver
        self.dispatcher = dispatcher
        self.canonical_owner = canonical_owner
        self.target_ref = target_ref
        self.mirror_source = mirror_source
        self.lookup_timeout = lookup_timeout
        self.task_timeout = task_timeout
        self.dry_run = dry_run
        self.executor = ParallelExecutor(max_workers=max_concurrency)

    @classmethod
    def from_settings(cls, settings: SyncSettings, client: GitHubClient, dry_run: bool = False) -> "Reconciler":
        """Wire up the components for a configured pass."""
        return cls(
            source=PullRequestSource(client, settings.upstream),
            resolver=MirrorStateResolver(client, settings.control),
            dispatcher=WorkflowDispatcher(client, settings.control),
            canonical_owner=settings.upstream.canonical_owner,
            target_ref=settings.control.default_branch,
            mirror_source=settings.mirror_source,
            max_concurrency=settings.max_concurrency,
            lookup_timeout=settings.request_timeout,
            # Lookup and dispatch each get a full request timeout, plus slack
            task_timeout=settings.request_timeout * 2 + 10,
            dry_run=dry_run,
        )

    async def run_pass(self) -> PassSummary:
        """Reconcile every open candidate pull request.

        Raises:
            UpstreamQueryError: If the candidate list cannot be fetched
        """
        pull_requests = await self.source.fetch_open_pull_requests()
        log.info("reconciliation_started", candidates=len(pull_requests), dry_run=self.dry_run)

        tasks = [
            ExecutionTask(id=f"pr-{pr.number}", func=self.reconcile, args=(pr,), timeout=self.task_timeout)
            for pr in pull_requests
        ]
        task_results = await self.executor.execute_tasks(tasks)

        summary = PassSummary()
        for pr, task_result in zip(pull_requests, task_results):
            if task_result.success:
                summary.results.append(task_result.result)
            else:
                summary.results.append(
                    ReconcileResult(
                        pr_number=pr.number,
                        action=ReconcileAction.ERRORED,
                        error=repr(task_result.error),
                    )
                )

        log.info(
            "reconciliation_complete",
            candidates=len(pull_requests),
            dispatched=summary.dispatched,
            in_sync=summary.in_sync,
            skipped=summary.skipped,
            failed=summary.failed,
        )
        return summary

    async def reconcile(self, pr: PullRequestRecord) -> ReconcileResult:
        """Reconcile a single pull request.

        Returns:
            What was done for the pull request. Dispatch failures are
            reported in the result rather than raised.
        """
        with structlog.contextvars.bound_contextvars(pr_number=pr.number):
            if pr.head_owner_login != self.canonical_owner:
                log.info("skip_foreign_owner", head_branch=pr.head_branch_name, owner=pr.head_owner_login)
                return ReconcileResult(pr_number=pr.number, action=ReconcileAction.SKIPPED_FOREIGN_OWNER)

            branch = mirror_branch_name(pr.number, self.mirror_source)
            lookup = await self._lookup(branch)

            if lookup.outcome == MirrorLookupOutcome.FOUND:
                assert lookup.state is not None
                log.info("mirror_state", branch=branch, head=pr.head_commit_hash, remote=lookup.state.commit_hash)
                if lookup.state.commit_hash == pr.head_commit_hash:
                    return ReconcileResult(pr_number=pr.number, action=ReconcileAction.IN_SYNC, mirror_branch=branch)
                reason = TriggerReason.MIRROR_STALE
            elif lookup.outcome == MirrorLookupOutcome.NOT_FOUND:
                reason = TriggerReason.MIRROR_MISSING
            else:
                # Fail open: an unknown mirror state still gets a CI run
                log.warning("mirror_state_unknown_triggering", branch=branch, error=lookup.error)
                reason = TriggerReason.LOOKUP_FAILED

            request = DispatchRequest(
                target_ref=self.target_ref,
                mirror_branch_name=branch,
                upstream_branch_name=pr.head_branch_name,
            )
            return await self._dispatch(pr, request, reason)

    async def _lookup(self, branch: str) -> MirrorLookupResult:
        try:
            async with asyncio.timeout(self.lookup_timeout):
                return await self.resolver.resolve(branch)
        except TimeoutError:
            return MirrorLookupResult.failed(branch, f"Mirror lookup timed out after {self.lookup_timeout}s")

    async def _dispatch(
        self, pr: PullRequestRecord, request: DispatchRequest, reason: TriggerReason
    ) -> ReconcileResult:
        if self.dry_run:
            log.info("dry_run_dispatch", payload=request.to_payload(), reason=reason.value)
            return ReconcileResult(
                pr_number=pr.number,
                action=ReconcileAction.WOULD_DISPATCH,
                mirror_branch=request.mirror_branch_name,
                reason=reason,
            )

        try:
            await self.dispatcher.dispatch(request, pr_number=pr.number)
        except DispatchError as e:
            log.error("dispatch_failed", branch=request.mirror_branch_name, status_code=e.status_code, error=e.message)
            return ReconcileResult(
                pr_number=pr.number,
                action=ReconcileAction.DISPATCH_FAILED,
                mirror_branch=request.mirror_branch_name,
                reason=reason,
                error=e.message,
            )

        return ReconcileResult(
            pr_number=pr.number,
            action=ReconcileAction.DISPATCHED,
            mirror_branch=request.mirror_branch_name,
            reason=reason,
        )
