"""Workflow dispatch for the mobile CI in the control repository."""

import httpx
import structlog

from gutenberg_ci_sync.config.settings import ControlRepositoryConfig
from gutenberg_ci_sync.exceptions import DispatchError
from gutenberg_ci_sync.models.domain import DispatchRequest
from gutenberg_ci_sync.providers.github_client import GitHubClient

log = structlog.get_logger(__name__)


class WorkflowDispatcher:
    """Triggers the control repository's update workflow."""

    def __init__(self, client: GitHubClient, control: ControlRepositoryConfig) -> None:
        self.client = client
        self.control = control

    @property
    def dispatch_path(self) -> str:
        return (
            f"/repos/{self.control.owner}/{self.control.name}"
            f"/actions/workflows/{self.control.workflow_file}/dispatches"
        )

    async def dispatch(self, request: DispatchRequest, pr_number: int | None = None) -> None:
        """Send a workflow dispatch.

        Args:
            request: Workflow ref and inputs
            pr_number: Upstream pull request, for error context

        Raises:
            DispatchError: If the request fails or GitHub rejects it
        """
        log.info(
            "triggering_ci",
            branch=request.mirror_branch_name,
            upstream_branch=request.upstream_branch_name,
            workflow=self.control.workflow_file,
        )

        try:
            response = await self.client.post(self.dispatch_path, json=request.to_payload())
        except httpx.HTTPError as e:
            raise DispatchError(
                f"Workflow dispatch request failed: {e!r}",
                pr_number=pr_number,
                branch_name=request.mirror_branch_name,
            ) from e

        log.info(
            "dispatch_response",
            branch=request.mirror_branch_name,
            status_code=response.status_code,
            body=response.text,
        )

        if not response.is_success:
            raise DispatchError(
                f"Workflow dispatch returned HTTP {response.status_code}",
                pr_number=pr_number,
                branch_name=request.mirror_branch_name,
                status_code=response.status_code,
            )
