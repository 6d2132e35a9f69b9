"""Open upstream pull requests, fetched through the GitHub GraphQL API."""

import re
from typing import Any

import httpx
import structlog

from gutenberg_ci_sync.config.settings import UpstreamRepositoryConfig
from gutenberg_ci_sync.exceptions import UpstreamQueryError
from gutenberg_ci_sync.models.domain import PullRequestRecord
from gutenberg_ci_sync.providers.github_client import GitHubClient

log = structlog.get_logger(__name__)

OPEN_PULL_REQUESTS_QUERY = """
query($owner: String!, $name: String!, $labels: [String!], $first: Int!) {
  repository(owner: $owner, name: $name) {
    pullRequests(first: $first, states: [OPEN], labels: $labels) {
      nodes {
        headRefOid
        number
        headRefName
        headRepositoryOwner {
          login
        }
      }
      pageInfo {
        hasNextPage
      }
    }
  }
}
"""

_COMMIT_HASH = re.compile(r"^[0-9a-f]{40,}$")


class PullRequestSource:
    """Lists the candidate pull requests for a reconciliation pass.

    Only the first page (``page_size`` pull requests, at most 100) is read.
    When more are open a warning is logged and the rest are left for a
    later pagination-aware version of this query.
    """

    def __init__(self, client: GitHubClient, upstream: UpstreamRepositoryConfig) -> None:
        self.client = client
        self.upstream = upstream

    async def fetch_open_pull_requests(self) -> list[PullRequestRecord]:
        """Fetch open pull requests carrying the configured label.

        Returns:
            Pull request records in the order returned by GitHub

        Raises:
            UpstreamQueryError: If the request fails or the response does not
                have the expected shape
        """
        repository = self.upstream.full_name
        log.info("fetch_open_pull_requests", repository=repository, label=self.upstream.label)

        payload = {
            "query": OPEN_PULL_REQUESTS_QUERY,
            "variables": {
                "owner": self.upstream.owner,
                "name": self.upstream.name,
                "labels": [self.upstream.label],
                "first": self.upstream.page_size,
            },
        }

        try:
            response = await self.client.post("/graphql", json=payload)
            response.raise_for_status()
            body = response.json()
        except httpx.HTTPStatusError as e:
            raise UpstreamQueryError(
                f"GraphQL request returned HTTP {e.response.status_code}", repository=repository
            ) from e
        except httpx.HTTPError as e:
            raise UpstreamQueryError(f"GraphQL request failed: {e!r}", repository=repository) from e
        except ValueError as e:
            raise UpstreamQueryError("GraphQL response is not valid JSON", repository=repository) from e

        records = self._parse_response(body)
        log.info("open_pull_requests_fetched", repository=repository, count=len(records))
        return records

    def _parse_response(self, body: Any) -> list[PullRequestRecord]:
        repository = self.upstream.full_name

        if not isinstance(body, dict):
            raise UpstreamQueryError("GraphQL response is not an object", repository=repository)

        errors = body.get("errors")
        if errors and not isinstance(errors, list):
            raise UpstreamQueryError(f"GraphQL query returned errors: {errors}", repository=repository)
        if errors:
            messages = "; ".join(
                str(error.get("message", error)) if isinstance(error, dict) else str(error) for error in errors
            )
            raise UpstreamQueryError(f"GraphQL query returned errors: {messages}", repository=repository)

        try:
            connection = body["data"]["repository"]["pullRequests"]
            nodes = connection["nodes"]
        except (KeyError, TypeError) as e:
            raise UpstreamQueryError(
                f"GraphQL response is missing pull request nodes: {e!r}", repository=repository
            ) from e

        if not isinstance(nodes, list):
            raise UpstreamQueryError("GraphQL pull request nodes are not a list", repository=repository)

        page_info = connection.get("pageInfo") or {}
        if not isinstance(page_info, dict):
            raise UpstreamQueryError("GraphQL pageInfo is not an object", repository=repository)
        if page_info.get("hasNextPage"):
            log.warning(
                "upstream_results_truncated",
                repository=repository,
                page_size=self.upstream.page_size,
            )

        return [self._parse_node(node) for node in nodes]

    def _parse_node(self, node: Any) -> PullRequestRecord:
        repository = self.upstream.full_name

        try:
            number = node["number"]
            head_commit_hash = node["headRefOid"]
            head_branch_name = node["headRefName"]
            owner = node["headRepositoryOwner"]
        except (KeyError, TypeError) as e:
            raise UpstreamQueryError(f"Pull request node is missing a field: {e!r}", repository=repository) from e

        if isinstance(number, bool) or not isinstance(number, int) or number < 1:
            raise UpstreamQueryError(f"Invalid pull request number: {number!r}", repository=repository)
        if not isinstance(head_commit_hash, str) or not _COMMIT_HASH.match(head_commit_hash):
            raise UpstreamQueryError(
                f"Invalid head commit for pull request #{number}: {head_commit_hash!r}", repository=repository
            )
        if not isinstance(head_branch_name, str) or not head_branch_name:
            raise UpstreamQueryError(f"Invalid head branch for pull request #{number}", repository=repository)

        # GitHub reports no owner once the head fork has been deleted
        if owner is None:
            owner_login = ""
        else:
            try:
                owner_login = owner["login"]
            except (KeyError, TypeError) as e:
                raise UpstreamQueryError(
                    f"Pull request #{number} head owner has no login", repository=repository
                ) from e
            if not isinstance(owner_login, str):
                raise UpstreamQueryError(
                    f"Invalid head owner login for pull request #{number}", repository=repository
                )

        return PullRequestRecord(
            number=number,
            head_commit_hash=head_commit_hash,
            head_branch_name=head_branch_name,
            head_owner_login=owner_login,
        )
