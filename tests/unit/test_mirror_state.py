"""Tests for gutenberg_ci_sync/providers/mirror_state.py."""

from collections.abc import Callable

import httpx
import pytest
from structlog.testing import capture_logs

from gutenberg_ci_sync.config.settings import ControlRepositoryConfig
from gutenberg_ci_sync.models.domain import MirrorLookupOutcome
from gutenberg_ci_sync.providers.github_client import GitHubClient
from gutenberg_ci_sync.providers.mirror_state import MirrorStateResolver

BRANCH = "automated-gutenberg-update/for-pr-42"
REMOTE_SHA = "89e6c98d92887913cadf06b2adb97f26cde4849b"


@pytest.fixture
def make_resolver(
    make_client: Callable[..., GitHubClient], control_config: ControlRepositoryConfig
) -> Callable[[Callable[[httpx.Request], httpx.Response]], MirrorStateResolver]:
    def _make(handler: Callable[[httpx.Request], httpx.Response]) -> MirrorStateResolver:
        return MirrorStateResolver(make_client(handler), control_config)

    return _make


class TestResolveFound:
    """Mirror exists."""

    @pytest.mark.asyncio
    async def test_found_returns_sha(self, make_resolver: Callable[..., MirrorStateResolver]) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"type": "submodule", "name": "gutenberg", "sha": REMOTE_SHA})

        result = await make_resolver(handler).resolve(BRANCH)

        assert result.outcome == MirrorLookupOutcome.FOUND
        assert result.branch_name == BRANCH
        assert result.state is not None
        assert result.state.commit_hash == REMOTE_SHA

        request = seen[0]
        assert request.method == "GET"
        assert request.url.path == "/repos/oguzkocer/version-test-bin/contents/gutenberg"
        assert request.url.params["ref"] == BRANCH


class TestResolveNotFound:
    """A 404 means the mirror does not exist yet."""

    @pytest.mark.asyncio
    async def test_404_is_not_found(self, make_resolver: Callable[..., MirrorStateResolver]) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(404, json={"message": "No commit found for the ref"})

        with capture_logs() as logs:
            result = await make_resolver(handler).resolve(BRANCH)

        assert result.outcome == MirrorLookupOutcome.NOT_FOUND
        assert result.error is None
        events = [entry["event"] for entry in logs]
        assert "mirror_not_found" in events
        assert "mirror_lookup_failed" not in events


class TestResolveLookupFailed:
    """Any other failure is LOOKUP_FAILED and logged as a warning."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status_code", [401, 403, 500, 502])
    async def test_unexpected_status(
        self, make_resolver: Callable[..., MirrorStateResolver], status_code: int
    ) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(status_code, json={"message": "nope"})

        with capture_logs() as logs:
            result = await make_resolver(handler).resolve(BRANCH)

        assert result.outcome == MirrorLookupOutcome.LOOKUP_FAILED
        assert f"HTTP {status_code}" in (result.error or "")
        failures = [entry for entry in logs if entry["event"] == "mirror_lookup_failed"]
        assert len(failures) == 1
        assert failures[0]["log_level"] == "warning"
        assert failures[0]["status_code"] == status_code

    @pytest.mark.asyncio
    async def test_network_error(self, make_resolver: Callable[..., MirrorStateResolver]) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection reset", request=request)

        result = await make_resolver(handler).resolve(BRANCH)

        assert result.outcome == MirrorLookupOutcome.LOOKUP_FAILED
        assert "ConnectError" in (result.error or "")

    @pytest.mark.asyncio
    async def test_timeout(self, make_resolver: Callable[..., MirrorStateResolver]) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("timed out", request=request)

        result = await make_resolver(handler).resolve(BRANCH)

        assert result.outcome == MirrorLookupOutcome.LOOKUP_FAILED

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "response",
        [
            httpx.Response(200, text="not json"),
            httpx.Response(200, json=[{"name": "a-directory-listing"}]),
            httpx.Response(200, json={"type": "submodule"}),
            httpx.Response(200, json={"sha": ""}),
        ],
    )
    async def test_malformed_body(
        self, make_resolver: Callable[..., MirrorStateResolver], response: httpx.Response
    ) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return response

        result = await make_resolver(handler).resolve(BRANCH)

        assert result.outcome == MirrorLookupOutcome.LOOKUP_FAILED
