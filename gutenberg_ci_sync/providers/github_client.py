"""
Shared HTTP client for the GitHub REST and GraphQL APIs.

One client serves a whole reconciliation pass. Connection limits follow the
pass concurrency so parallel pull requests reuse keep-alive connections
instead of opening new ones.
"""

import asyncio
from typing import Any

import httpx
import structlog

from gutenberg_ci_sync import __version__

log = structlog.get_logger(__name__)

GITHUB_API_VERSION = "2022-11-28"


class GitHubClient:
    """Authenticated ``httpx.AsyncClient`` wrapper for api.github.com."""

    def __init__(
        self,
        token: str,
        base_url: str = "https://api.github.com",
        timeout: float = 30.0,
        max_connections: int = 4,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            token: GitHub token sent as a bearer credential
            base_url: API base URL (GitHub Enterprise uses a different one)
            timeout: Per-request timeout in seconds
            max_connections: Upper bound on open connections
            transport: Optional transport override, used by tests
        """
        self.token = token.strip() if token else token
        # Normalize base_url by removing trailing slash
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.max_connections = max_connections
        self._transport = transport
        self._client: httpx.AsyncClient | None = None
        self._lock = asyncio.Lock()

    @property
    def headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self.token}",
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": GITHUB_API_VERSION,
            "User-Agent": f"gutenberg-ci-sync/{__version__}",
        }

    async def initialize(self) -> None:
        """Create the underlying client if needed."""
        async with self._lock:
            if self._client is None:
                limits = httpx.Limits(
                    max_connections=self.max_connections,
                    max_keepalive_connections=self.max_connections,
                    keepalive_expiry=30.0,
                )
                self._client = httpx.AsyncClient(
                    base_url=self.base_url,
                    limits=limits,
                    timeout=self.timeout,
                    http2=True,
                    headers=self.headers,
                    transport=self._transport,
                )
                log.debug("github_client_initialized", base_url=self.base_url, max_connections=self.max_connections)

    async def close(self) -> None:
        """Close the underlying client."""
        async with self._lock:
            if self._client:
                await self._client.aclose()
                self._client = None
                log.debug("github_client_closed", base_url=self.base_url)

    async def get(self, path: str, **kwargs: Any) -> httpx.Response:
        """Make GET request."""
        if self._client is None:
            await self.initialize()

        assert self._client is not None
        return await self._client.get(path, **kwargs)

    async def post(self, path: str, **kwargs: Any) -> httpx.Response:
        """Make POST request."""
        if self._client is None:
            await self.initialize()

        assert self._client is not None
        return await self._client.post(path, **kwargs)

    async def __aenter__(self) -> "GitHubClient":
        await self.initialize()
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()
