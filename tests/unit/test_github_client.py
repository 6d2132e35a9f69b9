"""Tests for gutenberg_ci_sync/providers/github_client.py."""

import httpx
import pytest

from gutenberg_ci_sync import __version__
from gutenberg_ci_sync.providers.github_client import GitHubClient


class TestGitHubClientInit:
    """Tests for client initialization."""

    def test_init_strips_token_and_trailing_slash(self) -> None:
        client = GitHubClient(" ghp_abc \n", base_url="https://github.example.com/api/v3/")

        assert client.token == "ghp_abc"
        assert client.base_url == "https://github.example.com/api/v3"
        assert client._client is None

    def test_headers(self) -> None:
        headers = GitHubClient("ghp_abc").headers

        assert headers["Authorization"] == "Bearer ghp_abc"
        assert headers["Accept"] == "application/vnd.github+json"
        assert headers["X-GitHub-Api-Version"] == "2022-11-28"
        assert headers["User-Agent"] == f"gutenberg-ci-sync/{__version__}"


class TestGitHubClientRequests:
    """Requests go to the base URL with auth headers."""

    @pytest.mark.asyncio
    async def test_get_sends_auth_and_params(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"ok": True})

        async with GitHubClient("ghp_abc", transport=httpx.MockTransport(handler)) as client:
            response = await client.get("/repos/o/r/contents/x", params={"ref": "a/b"})

        assert response.json() == {"ok": True}
        request = seen[0]
        assert request.method == "GET"
        assert request.url.host == "api.github.com"
        assert request.url.path == "/repos/o/r/contents/x"
        assert request.url.params["ref"] == "a/b"
        assert request.headers["Authorization"] == "Bearer ghp_abc"

    @pytest.mark.asyncio
    async def test_post_initializes_lazily(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(204)

        client = GitHubClient("ghp_abc", transport=httpx.MockTransport(handler))
        try:
            response = await client.post("/graphql", json={"query": "{}"})
            assert response.status_code == 204
            assert client._client is not None
        finally:
            await client.close()

        assert client._client is None

    @pytest.mark.asyncio
    async def test_close_when_not_initialized(self) -> None:
        client = GitHubClient("ghp_abc")

        await client.close()

        assert client._client is None
