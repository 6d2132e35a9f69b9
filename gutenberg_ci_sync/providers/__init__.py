"""GitHub-facing components of a reconciliation pass."""

from gutenberg_ci_sync.providers.dispatcher import WorkflowDispatcher
from gutenberg_ci_sync.providers.github_client import GitHubClient
from gutenberg_ci_sync.providers.mirror_state import MirrorStateResolver
from gutenberg_ci_sync.providers.pull_requests import PullRequestSource

__all__ = [
    "GitHubClient",
    "MirrorStateResolver",
    "PullRequestSource",
    "WorkflowDispatcher",
]
