"""Pytest configuration and shared fixtures."""

import os
from collections.abc import Callable, Iterator

import httpx
import pytest
import structlog

from gutenberg_ci_sync.config.settings import (
    ControlRepositoryConfig,
    SyncSettings,
    UpstreamRepositoryConfig,
)
from gutenberg_ci_sync.models.domain import PullRequestRecord
from gutenberg_ci_sync.providers.github_client import GitHubClient

HEAD_SHA = "3f786850e387550fdab836ed7e6dc881de23001b"


@pytest.fixture(autouse=True)
def reset_structlog() -> Iterator[None]:
    """Keep structlog configuration from leaking between tests."""
    yield
    structlog.reset_defaults()


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Drop host settings that would change defaults."""
    monkeypatch.delenv("UPDATE_GUTENBERG_PR_GITHUB_TOKEN", raising=False)
    for name in list(os.environ):
        if name.upper().startswith("GUTENBERG_CI_SYNC_"):
            monkeypatch.delenv(name)


@pytest.fixture
def upstream_config() -> UpstreamRepositoryConfig:
    return UpstreamRepositoryConfig()


@pytest.fixture
def control_config() -> ControlRepositoryConfig:
    return ControlRepositoryConfig()


@pytest.fixture
def settings() -> SyncSettings:
    """Default settings, independent of the host environment."""
    return SyncSettings(max_concurrency=2, request_timeout=5.0)


@pytest.fixture
def make_client() -> Callable[[Callable[[httpx.Request], httpx.Response]], GitHubClient]:
    """Build a GitHubClient whose requests are answered by a handler function."""

    def _make(handler: Callable[[httpx.Request], httpx.Response]) -> GitHubClient:
        return GitHubClient("test-token", transport=httpx.MockTransport(handler))

    return _make


@pytest.fixture
def canonical_pr() -> PullRequestRecord:
    """Pull request from a branch in the canonical repository."""
    return PullRequestRecord(
        number=42,
        head_commit_hash=HEAD_SHA,
        head_branch_name="rnmobile/fix-toolbar",
        head_owner_login="WordPress",
    )


@pytest.fixture
def fork_pr() -> PullRequestRecord:
    """Pull request from a community fork."""
    return PullRequestRecord(
        number=43,
        head_commit_hash=HEAD_SHA,
        head_branch_name="patch-1",
        head_owner_login="some-contributor",
    )
