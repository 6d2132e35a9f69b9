"""Environment variable credential backend for scheduled CI jobs."""

import os

import structlog

log = structlog.get_logger(__name__)


class EnvironmentBackend:
    """Read credentials injected as environment variables.

    Scheduled runs (cron jobs, GitHub Actions) receive the API token this
    way. The environment mapping can be swapped out, which keeps tests away
    from ``os.environ``.

    Example:
        >>> backend = EnvironmentBackend({"UPDATE_GUTENBERG_PR_GITHUB_TOKEN": "ghp_abc123"})
        >>> backend.get("UPDATE_GUTENBERG_PR_GITHUB_TOKEN")
        'ghp_abc123'
    """

    def __init__(self, environ: dict[str, str] | None = None) -> None:
        self._environ = environ

    @property
    def name(self) -> str:
        return "environment"

    def get(self, var_name: str) -> str | None:
        """Retrieve a credential, or None if the variable is not set."""
        environ = os.environ if self._environ is None else self._environ
        value = environ.get(var_name)

        if value is not None:
            log.debug("credential_loaded", backend=self.name, variable=var_name)

        return value
