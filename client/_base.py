"""Base class for all sub-clients.

This module provides the base classes that the chat and project sub-clients
inherit from. They give access to the shared HTTP client and thin helpers for
making requests.

This is an internal module and should not be imported directly by users.
"""

from typing import TYPE_CHECKING, Any, AsyncIterator, Iterator

if TYPE_CHECKING:
    from client._http import AsyncHTTPClient, HTTPClient


class BaseClient:
    """Base class for synchronous sub-clients.

    Attributes:
        _http: The shared HTTP client for making requests.
    """

    def __init__(self, http_client: "HTTPClient") -> None:
        """Initialize the sub-client.

        Args:
            http_client: The shared HTTP client instance.
        """
        self._http = http_client

    def _get(self, path: str, params: dict[str, Any] | None = None) -> Any:
        """Make a GET request.

        Args:
            path: The URL path.
            params: Query parameters.

        Returns:
            The parsed JSON response.
        """
        return self._http.get(path, params=params)

    def _post(
        self,
        path: str,
        json: dict[str, Any] | None = None,
        params: dict[str, Any] | None = None,
    ) -> Any:
        """Make a POST request.

        Args:
            path: The URL path.
            json: JSON body to send.
            params: Query parameters.

        Returns:
            The parsed JSON response.
        """
        return self._http.post(path, json=json, params=params)

    def _stream(self, path: str, json: dict[str, Any] | None = None) -> Iterator[bytes]:
        """POST a JSON body and iterate over the raw response body."""
        return self._http.stream("POST", path, json=json)


class AsyncBaseClient:
    """Base class for asynchronous sub-clients.

    Attributes:
        _http: The shared async HTTP client for making requests.
    """

    def __init__(self, http_client: "AsyncHTTPClient") -> None:
        """Initialize the async sub-client.

        Args:
            http_client: The shared async HTTP client instance.
        """
        self._http = http_client

    async def _get(self, path: str, params: dict[str, Any] | None = None) -> Any:
        """Make an async GET request.

        Args:
            path: The URL path.
            params: Query parameters.

        Returns:
            The parsed JSON response.
        """
        return await self._http.get(path, params=params)

    async def _post(
        self,
        path: str,
        json: dict[str, Any] | None = None,
        params: dict[str, Any] | None = None,
    ) -> Any:
        """Make an async POST request.

        Args:
            path: The URL path.
            json: JSON body to send.
            params: Query parameters.

        Returns:
            The parsed JSON response.
        """
        return await self._http.post(path, json=json, params=params)

    def _stream(self, path: str, json: dict[str, Any] | None = None) -> AsyncIterator[bytes]:
        """POST a JSON body and iterate over the raw response body."""
        return self._http.stream("POST", path, json=json)
