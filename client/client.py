"""Main UIGen client classes.

This module provides the main entry points for talking to a UIGen agent server:
- UIGenClient: Synchronous client
- AsyncUIGenClient: Asynchronous client

Both expose namespaced sub-clients (client.chat, client.projects).

Example:
    Synchronous usage::

        from client import UIGenClient

        with UIGenClient(base_url="http://localhost:8000") as client:
            project = client.projects.create("Counter")
            result = client.chat.send(
                [{"role": "user", "content": "Build a counter"}],
                project_id=project.id,
            )
            print(result.files["/App.jsx"]["content"])

    Asynchronous usage::

        from client import AsyncUIGenClient

        async with AsyncUIGenClient() as client:
            async for event in client.chat.stream(messages):
                ...
"""

from typing import Any

from client._chat import AsyncChatClient, ChatClient
from client._http import AsyncHTTPClient, HTTPClient
from client._projects import AsyncProjectsClient, ProjectsClient
from client.models import HealthResponse


class UIGenClient:
    """Synchronous client for the UIGen agent API.

    Attributes:
        base_url: The base URL of the server.
        timeout: Request timeout in seconds.
        retry_enabled: Whether automatic retry is enabled for JSON requests.
        max_retries: Maximum number of retry attempts.
    """

    def __init__(
        self,
        base_url: str = "http://localhost:8000",
        timeout: float = 120.0,
        retry_enabled: bool = False,
        max_retries: int = 3,
        transport: Any = None,
    ) -> None:
        """Initialize the UIGen client.

        Args:
            base_url: The base URL of the server (default: http://localhost:8000).
            timeout: Request timeout in seconds. Chat rounds run many model
                calls, so the default is generous (default: 120.0).
            retry_enabled: Whether to retry JSON requests on connection errors,
                timeouts, and HTTP 502/503/504. Chat streams are never retried.
            max_retries: Maximum number of retry attempts (default: 3).
            transport: Custom HTTP transport (e.g., MockTransport for testing).
        """
        self._base_url = base_url
        self._timeout = timeout
        self._retry_enabled = retry_enabled
        self._max_retries = max_retries

        self._http = HTTPClient(
            base_url=base_url,
            timeout=timeout,
            retry_enabled=retry_enabled,
            max_retries=max_retries,
            transport=transport,
        )

        # Sub-clients are created lazily
        self._chat: ChatClient | None = None
        self._projects: ProjectsClient | None = None

    def __enter__(self) -> "UIGenClient":
        """Enter context manager."""
        return self

    def __exit__(self, *args: Any) -> None:
        """Exit context manager and close the client."""
        self.close()

    def close(self) -> None:
        """Close the client and release resources."""
        self._http.close()

    @property
    def base_url(self) -> str:
        return self._base_url

    @property
    def timeout(self) -> float:
        return self._timeout

    @property
    def retry_enabled(self) -> bool:
        return self._retry_enabled

    @property
    def max_retries(self) -> int:
        return self._max_retries

    @property
    def chat(self) -> ChatClient:
        """Access the streaming chat endpoint."""
        if self._chat is None:
            self._chat = ChatClient(self._http)
        return self._chat

    @property
    def projects(self) -> ProjectsClient:
        """Access project endpoints."""
        if self._projects is None:
            self._projects = ProjectsClient(self._http)
        return self._projects

    def health(self) -> HealthResponse:
        """Check server health."""
        return HealthResponse(**self._http.get("/health"))


class AsyncUIGenClient:
    """Asynchronous client for the UIGen agent API.

    See UIGenClient for attribute descriptions.
    """

    def __init__(
        self,
        base_url: str = "http://localhost:8000",
        timeout: float = 120.0,
        retry_enabled: bool = False,
        max_retries: int = 3,
        transport: Any = None,
    ) -> None:
        """Initialize the async UIGen client.

        Args:
            base_url: The base URL of the server (default: http://localhost:8000).
            timeout: Request timeout in seconds (default: 120.0).
            retry_enabled: Whether to retry JSON requests on transient failures.
            max_retries: Maximum number of retry attempts (default: 3).
            transport: Custom HTTP transport (e.g., ASGITransport for testing).
        """
        self._base_url = base_url
        self._timeout = timeout
        self._retry_enabled = retry_enabled
        self._max_retries = max_retries

        self._http = AsyncHTTPClient(
            base_url=base_url,
            timeout=timeout,
            retry_enabled=retry_enabled,
            max_retries=max_retries,
            transport=transport,
        )

        self._chat: AsyncChatClient | None = None
        self._projects: AsyncProjectsClient | None = None

    async def __aenter__(self) -> "AsyncUIGenClient":
        """Enter async context manager."""
        return self

    async def __aexit__(self, *args: Any) -> None:
        """Exit async context manager and close the client."""
        await self.close()

    async def close(self) -> None:
        """Close the client and release resources."""
        await self._http.close()

    @property
    def base_url(self) -> str:
        return self._base_url

    @property
    def timeout(self) -> float:
        return self._timeout

    @property
    def chat(self) -> AsyncChatClient:
        """Access the streaming chat endpoint."""
        if self._chat is None:
            self._chat = AsyncChatClient(self._http)
        return self._chat

    @property
    def projects(self) -> AsyncProjectsClient:
        """Access project endpoints."""
        if self._projects is None:
            self._projects = AsyncProjectsClient(self._http)
        return self._projects

    async def health(self) -> HealthResponse:
        """Check server health."""
        return HealthResponse(**(await self._http.get("/health")))
