"""Mirror state lookup in the control repository."""

import httpx
import structlog

from gutenberg_ci_sync.config.settings import ControlRepositoryConfig
from gutenberg_ci_sync.exceptions import MirrorLookupError
from gutenberg_ci_sync.models.domain import MirrorLookupResult
from gutenberg_ci_sync.providers.github_client import GitHubClient

log = structlog.get_logger(__name__)


class MirrorStateResolver:
    """Reads the upstream commit recorded on a mirror branch.

    The mirror path is a submodule entry, so the contents API reports the
    tracked upstream commit in its ``sha`` field.

    ``resolve`` never raises for HTTP or transport problems. A 404 means the
    mirror branch has not been created yet; every other failure is reported
    as ``LOOKUP_FAILED`` and logged as a warning so outages stay visible.
    """

    def __init__(self, client: GitHubClient, control: ControlRepositoryConfig) -> None:
        self.client = client
        self.control = control

    @property
    def contents_path(self) -> str:
        return f"/repos/{self.control.owner}/{self.control.name}/contents/{self.control.mirror_path}"

    async def resolve(self, branch_name: str) -> MirrorLookupResult:
        """Look up the mirror state for a branch."""
        try:
            commit_hash = await self._fetch_commit_hash(branch_name)
        except MirrorLookupError as e:
            if e.status_code == 404:
                log.info("mirror_not_found", branch=branch_name)
                return MirrorLookupResult.not_found(branch_name)

            log.warning("mirror_lookup_failed", branch=branch_name, status_code=e.status_code, error=e.message)
            return MirrorLookupResult.failed(branch_name, e.message)

        log.debug("mirror_found", branch=branch_name, remote=commit_hash)
        return MirrorLookupResult.found(branch_name, commit_hash)

    async def _fetch_commit_hash(self, branch_name: str) -> str:
        try:
            response = await self.client.get(self.contents_path, params={"ref": branch_name})
        except httpx.HTTPError as e:
            raise MirrorLookupError(f"Request failed: {e!r}", branch_name) from e

        if response.status_code != 200:
            raise MirrorLookupError(
                f"Contents request returned HTTP {response.status_code}",
                branch_name,
                status_code=response.status_code,
            )

        try:
            content = response.json()
        except ValueError as e:
            raise MirrorLookupError("Contents response is not valid JSON", branch_name) from e

        sha = content.get("sha") if isinstance(content, dict) else None
        if not isinstance(sha, str) or not sha:
            raise MirrorLookupError("Contents response has no sha", branch_name)

        return sha
