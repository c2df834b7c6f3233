"""Transport layer shared by the UIGen sub-clients.

Two kinds of traffic go through here:

- JSON calls (project CRUD, health), which may be retried on gateway errors
  when the caller opts in.
- The chat stream, a single POST whose body is handed back as raw bytes. It is
  never retried because a chat round changes server-side project state.

Server errors come in two shapes: FastAPI's ``{"detail": ...}`` and the
``{"error": ..., "details": ...}`` bodies written by the chat and project
routes. Both are mapped onto the exceptions in client/exceptions.py.

This is an internal module and should not be imported directly by users.
"""

import asyncio
import time
from typing import Any, AsyncIterator, Iterator, Literal

import httpx

from client.exceptions import (
    APIError,
    ConnectionError,
    NotFoundError,
    ServerError,
    TimeoutError,
    UIGenClientError,
    ValidationError,
)

HttpMethod = Literal["GET", "POST"]

# Only answers a proxy gives while the app restarts; a 500 from the app itself
# means the model failed and repeating the call would not help.
RETRYABLE_STATUS_CODES = {502, 503, 504}

DEFAULT_RETRY_BACKOFF_BASE = 0.5  # seconds
DEFAULT_RETRY_BACKOFF_MAX = 30.0  # seconds


def _parse_error_response(response: httpx.Response) -> tuple[str, str | None, dict | None]:
    """Pull a readable message out of an error response.

    Args:
        response: The failed response. Its body must already be read.

    Returns:
        A tuple of (message, error_type, details).
    """
    try:
        body = response.json()
    except ValueError:
        text = response.text.strip()
        return (text or f"HTTP {response.status_code} error"), None, None

    if not isinstance(body, dict):
        return str(body), None, None

    detail = body.get("detail")
    if isinstance(detail, list):
        # Request validation failures, one entry per bad field
        fields = [
            f"{err.get('loc', ['unknown'])[-1]}: {err.get('msg', 'invalid')}" for err in detail
        ]
        return "; ".join(fields), "validation_error", {"errors": detail}

    if "error" in body:
        reason = body.get("details", detail)
        if isinstance(reason, str) and reason:
            return f"{body['error']}: {reason}", body.get("type"), body
        return body["error"], body.get("type"), reason

    if isinstance(detail, str):
        return detail, body.get("type"), body.get("details")

    return str(body), None, None


def _raise_for_status(response: httpx.Response) -> None:
    """Raise the client exception matching a non-2xx response.

    Args:
        response: The response to check. Its body must already be read.

    Raises:
        ValidationError: For HTTP 422 (malformed chat or project payload).
        NotFoundError: For HTTP 404 (unknown project).
        ServerError: For HTTP 5xx, including a model failure before streaming.
        APIError: For any other error status.
    """
    if response.is_success:
        return

    message, error_type, details = _parse_error_response(response)
    try:
        raw = response.json()
    except ValueError:
        raw = response.text

    code = response.status_code
    if code == 422:
        raise ValidationError(message=message, details=details, response_body=raw)
    if code == 404:
        raise NotFoundError(message=message, details=details, response_body=raw)
    if code >= 500:
        raise ServerError(message=message, status_code=code, details=details, response_body=raw)
    raise APIError(
        message=message,
        status_code=code,
        error_type=error_type,
        details=details,
        response_body=raw,
    )


def _calculate_backoff(attempt: int, base: float = DEFAULT_RETRY_BACKOFF_BASE) -> float:
    """Delay before retry ``attempt`` (0-indexed): doubling, capped."""
    return min(base * (2 ** attempt), DEFAULT_RETRY_BACKOFF_MAX)


def _transport_error(error: httpx.HTTPError, url: str, timeout: float) -> UIGenClientError:
    """Translate an httpx transport failure into a client exception."""
    if isinstance(error, httpx.TimeoutException):
        return TimeoutError(message=f"Request to {url} timed out", timeout=timeout, url=url)
    return ConnectionError(message=f"Failed to connect to {url}", url=url, cause=error)


def _json_body(response: httpx.Response) -> Any:
    _raise_for_status(response)
    return response.json() if response.content else None


def _without_none(params: dict[str, Any] | None) -> dict[str, Any] | None:
    if not params:
        return params
    return {key: value for key, value in params.items() if value is not None}


class HTTPClient:
    """Blocking transport over ``httpx.Client``.

    Attributes:
        base_url: Server root, without a trailing slash.
        timeout: Per-request timeout in seconds. Chat rounds run many model
            calls, hence the generous default.
        retry_enabled: Whether JSON calls are retried on gateway errors and
            connection failures.
        max_retries: Extra attempts allowed when retrying.
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 120.0,
        retry_enabled: bool = False,
        max_retries: int = 3,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.retry_enabled = retry_enabled
        self.max_retries = max_retries
        self._client = httpx.Client(base_url=self.base_url, timeout=timeout, transport=transport)

    @property
    def _attempts(self) -> int:
        return self.max_retries + 1 if self.retry_enabled else 1

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "HTTPClient":
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()

    def request(
        self,
        method: HttpMethod,
        path: str,
        params: dict[str, Any] | None = None,
        json: dict[str, Any] | None = None,
    ) -> Any:
        """Send a JSON call and return the decoded reply (None when empty).

        Raises:
            ConnectionError: If the server cannot be reached.
            TimeoutError: If the call times out.
            APIError: If the server answers with an error status.
        """
        url = f"{self.base_url}{path}"
        params = _without_none(params)

        for attempt in range(self._attempts):
            final = attempt == self._attempts - 1
            try:
                response = self._client.request(method, path, params=params, json=json)
            except (httpx.ConnectError, httpx.TimeoutException) as e:
                if final:
                    raise _transport_error(e, url, self.timeout) from e
            else:
                if final or response.status_code not in RETRYABLE_STATUS_CODES:
                    return _json_body(response)
            time.sleep(_calculate_backoff(attempt))

    def get(self, path: str, params: dict[str, Any] | None = None) -> Any:
        return self.request("GET", path, params=params)

    def post(
        self,
        path: str,
        json: dict[str, Any] | None = None,
        params: dict[str, Any] | None = None,
    ) -> Any:
        return self.request("POST", path, params=params, json=json)

    def stream(
        self,
        method: HttpMethod,
        path: str,
        json: dict[str, Any] | None = None,
    ) -> Iterator[bytes]:
        """Send one request and yield its body in fragments as they arrive.

        An error status is raised before the first fragment, with the JSON
        error body already parsed.
        """
        url = f"{self.base_url}{path}"
        try:
            with self._client.stream(method, path, json=json) as response:
                if not response.is_success:
                    response.read()
                    _raise_for_status(response)
                yield from response.iter_bytes()
        except (httpx.ConnectError, httpx.TimeoutException) as e:
            raise _transport_error(e, url, self.timeout) from e


class AsyncHTTPClient:
    """Asyncio transport over ``httpx.AsyncClient``; same contract as HTTPClient."""

    def __init__(
        self,
        base_url: str,
        timeout: float = 120.0,
        retry_enabled: bool = False,
        max_retries: int = 3,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.retry_enabled = retry_enabled
        self.max_retries = max_retries
        self._client = httpx.AsyncClient(
            base_url=self.base_url, timeout=timeout, transport=transport
        )

    @property
    def _attempts(self) -> int:
        return self.max_retries + 1 if self.retry_enabled else 1

    async def close(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "AsyncHTTPClient":
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()

    async def request(
        self,
        method: HttpMethod,
        path: str,
        params: dict[str, Any] | None = None,
        json: dict[str, Any] | None = None,
    ) -> Any:
        """Send a JSON call and return the decoded reply (None when empty)."""
        url = f"{self.base_url}{path}"
        params = _without_none(params)

        for attempt in range(self._attempts):
            final = attempt == self._attempts - 1
            try:
                response = await self._client.request(method, path, params=params, json=json)
            except (httpx.ConnectError, httpx.TimeoutException) as e:
                if final:
                    raise _transport_error(e, url, self.timeout) from e
            else:
                if final or response.status_code not in RETRYABLE_STATUS_CODES:
                    return _json_body(response)
            await asyncio.sleep(_calculate_backoff(attempt))

    async def get(self, path: str, params: dict[str, Any] | None = None) -> Any:
        return await self.request("GET", path, params=params)

    async def post(
        self,
        path: str,
        json: dict[str, Any] | None = None,
        params: dict[str, Any] | None = None,
    ) -> Any:
        return await self.request("POST", path, params=params, json=json)

    async def stream(
        self,
        method: HttpMethod,
        path: str,
        json: dict[str, Any] | None = None,
    ) -> AsyncIterator[bytes]:
        """Async counterpart of HTTPClient.stream."""
        url = f"{self.base_url}{path}"
        try:
            async with self._client.stream(method, path, json=json) as response:
                if not response.is_success:
                    await response.aread()
                    _raise_for_status(response)
                async for fragment in response.aiter_bytes():
                    yield fragment
        except (httpx.ConnectError, httpx.TimeoutException) as e:
            raise _transport_error(e, url, self.timeout) from e
