"""Unit tests for the UIGen client HTTP utilities.

This module tests the HTTP handling layer defined in client/_http.py:

1. Helper Functions:
   - _parse_error_response: Extracting error info from the server's error bodies
   - _raise_for_status: Mapping HTTP status codes to exception types
   - _calculate_backoff: Exponential backoff calculation for retries

2. HTTPClient / AsyncHTTPClient:
   - JSON requests, error mapping and retry
   - Streaming response bodies

Note: These tests use httpx's mock transport to avoid real network calls.
"""

import httpx
import pytest

from client._http import (
    DEFAULT_RETRY_BACKOFF_BASE,
    DEFAULT_RETRY_BACKOFF_MAX,
    RETRYABLE_STATUS_CODES,
    AsyncHTTPClient,
    HTTPClient,
    _calculate_backoff,
    _parse_error_response,
    _raise_for_status,
)
from client.exceptions import (
    APIError,
    ConnectionError,
    NotFoundError,
    ServerError,
    TimeoutError,
    ValidationError,
)

BASE_URL = "http://localhost:8000"


def mock_client(handler, **kwargs) -> HTTPClient:
    return HTTPClient(base_url=BASE_URL, transport=httpx.MockTransport(handler), **kwargs)


def mock_async_client(handler, **kwargs) -> AsyncHTTPClient:
    return AsyncHTTPClient(base_url=BASE_URL, transport=httpx.MockTransport(handler), **kwargs)


@pytest.fixture
def no_sleep(monkeypatch):
    """Make retry backoff instant."""
    monkeypatch.setattr("client._http.time.sleep", lambda seconds: None)


# =============================================================================
# Helper Function Tests
# =============================================================================


class TestParseErrorResponse:
    """Tests for the _parse_error_response helper function."""

    def test_parse_fastapi_detail_string(self) -> None:
        """Parse FastAPI error with string detail."""
        response = httpx.Response(status_code=400, json={"detail": "Invalid request"})

        assert _parse_error_response(response) == ("Invalid request", None, None)

    def test_parse_fastapi_validation_errors(self) -> None:
        """Parse FastAPI's validation error list format."""
        response = httpx.Response(
            status_code=422,
            json={"detail": [{"loc": ["body", "name"], "msg": "too short", "type": "string_too_short"}]},
        )
        message, error_type, details = _parse_error_response(response)

        assert message == "name: too short"
        assert error_type == "validation_error"
        assert "errors" in details

    def test_parse_chat_failure(self) -> None:
        """Parse the chat endpoint's model failure body."""
        response = httpx.Response(
            status_code=500,
            json={"error": "Failed to generate AI response.", "details": "overloaded"},
        )
        message, _error_type, _details = _parse_error_response(response)

        assert message == "Failed to generate AI response.: overloaded"

    def test_parse_project_not_found(self) -> None:
        """Parse the project 404 body."""
        response = httpx.Response(
            status_code=404,
            json={"error": "Project Not Found", "detail": "Project 'x' not found", "project_id": "x"},
        )
        message, _error_type, details = _parse_error_response(response)

        assert message == "Project Not Found: Project 'x' not found"
        assert details["project_id"] == "x"

    def test_parse_plain_text_response(self) -> None:
        """Parse error with plain text body (not JSON)."""
        response = httpx.Response(status_code=500, text="Internal Server Error")

        assert _parse_error_response(response) == ("Internal Server Error", None, None)

    def test_parse_empty_response(self) -> None:
        """Parse error with empty response body."""
        message, _error_type, _details = _parse_error_response(httpx.Response(404, text=""))

        assert "404" in message


class TestRaiseForStatus:
    """Tests for the _raise_for_status helper function."""

    def test_success_does_not_raise(self) -> None:
        """2xx responses pass through."""
        _raise_for_status(httpx.Response(200, json={}))

    @pytest.mark.parametrize(
        "status_code, exception",
        [(422, ValidationError), (404, NotFoundError), (500, ServerError), (503, ServerError), (400, APIError)],
    )
    def test_status_mapping(self, status_code, exception) -> None:
        """Status codes map onto the exception hierarchy."""
        with pytest.raises(exception) as exc_info:
            _raise_for_status(httpx.Response(status_code, json={"detail": "nope"}))

        assert exc_info.value.status_code == status_code

    def test_response_body_is_preserved(self) -> None:
        """The raw body is kept for debugging."""
        with pytest.raises(APIError) as exc_info:
            _raise_for_status(httpx.Response(400, json={"detail": "bad", "extra": 1}))

        assert exc_info.value.response_body == {"detail": "bad", "extra": 1}


class TestCalculateBackoff:
    """Tests for _calculate_backoff."""

    def test_exponential_growth(self) -> None:
        """Delays double per attempt."""
        assert _calculate_backoff(0) == DEFAULT_RETRY_BACKOFF_BASE
        assert _calculate_backoff(1) == DEFAULT_RETRY_BACKOFF_BASE * 2
        assert _calculate_backoff(2) == DEFAULT_RETRY_BACKOFF_BASE * 4

    def test_capped_at_max(self) -> None:
        """Delays never exceed the maximum."""
        assert _calculate_backoff(20) == DEFAULT_RETRY_BACKOFF_MAX

    def test_retryable_status_codes(self) -> None:
        """Only gateway-style failures are retried."""
        assert RETRYABLE_STATUS_CODES == {502, 503, 504}


# =============================================================================
# HTTPClient Tests
# =============================================================================


class TestHTTPClientRequests:
    """Tests for HTTPClient JSON requests."""

    def test_default_initialization(self) -> None:
        """HTTPClient initializes with default values."""
        client = HTTPClient(base_url="http://localhost:8000/")

        assert client.base_url == "http://localhost:8000"
        assert client.timeout == 120.0
        assert client.retry_enabled is False
        client.close()

    def test_post_request_with_json_body(self) -> None:
        """POST sends the JSON body and parses the reply."""
        received = {}

        def handler(request: httpx.Request) -> httpx.Response:
            received["method"] = request.method
            received["body"] = request.content
            return httpx.Response(201, json={"id": "p1"})

        with mock_client(handler) as client:
            result = client.post("/projects", json={"name": "Counter"})

        assert result == {"id": "p1"}
        assert received["method"] == "POST"
        assert b"Counter" in received["body"]

    def test_get_filters_none_params(self) -> None:
        """None-valued query parameters are dropped."""
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json=dict(request.url.params))

        with mock_client(handler) as client:
            assert client.get("/x", params={"a": "1", "b": None}) == {"a": "1"}

    def test_empty_response_returns_none(self) -> None:
        """Empty response body returns None."""
        with mock_client(lambda request: httpx.Response(204, content=b"")) as client:
            assert client.get("/x") is None

    def test_connection_error_raised(self) -> None:
        """Connection failures raise ConnectionError."""
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused")

        with mock_client(handler) as client:
            with pytest.raises(ConnectionError) as exc_info:
                client.get("/health")

        assert exc_info.value.url == f"{BASE_URL}/health"

    def test_timeout_error_raised(self) -> None:
        """Timeouts raise TimeoutError."""
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.TimeoutException("slow")

        with mock_client(handler, timeout=5.0) as client:
            with pytest.raises(TimeoutError) as exc_info:
                client.get("/health")

        assert exc_info.value.timeout == 5.0


class TestHTTPClientRetry:
    """Tests for HTTPClient retry logic."""

    def test_no_retry_by_default(self) -> None:
        """Retry is disabled by default."""
        attempts = 0

        def handler(request: httpx.Request) -> httpx.Response:
            nonlocal attempts
            attempts += 1
            return httpx.Response(503, json={"detail": "Unavailable"})

        with mock_client(handler) as client:
            with pytest.raises(ServerError):
                client.get("/health")

        assert attempts == 1

    def test_retry_on_503_when_enabled(self, no_sleep) -> None:
        """503 responses are retried when retry is enabled."""
        attempts = 0

        def handler(request: httpx.Request) -> httpx.Response:
            nonlocal attempts
            attempts += 1
            if attempts < 3:
                return httpx.Response(503, json={"detail": "Unavailable"})
            return httpx.Response(200, json={"status": "healthy"})

        with mock_client(handler, retry_enabled=True, max_retries=3) as client:
            assert client.get("/health") == {"status": "healthy"}

        assert attempts == 3

    def test_no_retry_on_500(self, no_sleep) -> None:
        """500 is not retried even when retry is enabled."""
        attempts = 0

        def handler(request: httpx.Request) -> httpx.Response:
            nonlocal attempts
            attempts += 1
            return httpx.Response(500, json={"detail": "boom"})

        with mock_client(handler, retry_enabled=True) as client:
            with pytest.raises(ServerError):
                client.get("/health")

        assert attempts == 1

    def test_max_retries_exhausted(self, no_sleep) -> None:
        """The last failure is raised once retries run out."""
        attempts = 0

        def handler(request: httpx.Request) -> httpx.Response:
            nonlocal attempts
            attempts += 1
            raise httpx.ConnectError("refused")

        with mock_client(handler, retry_enabled=True, max_retries=2) as client:
            with pytest.raises(ConnectionError):
                client.get("/health")

        assert attempts == 3


class TestHTTPClientStream:
    """Tests for HTTPClient.stream."""

    def test_yields_body(self) -> None:
        """The body is yielded as it arrives."""
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, content=b'0:"hi"\n1:{}\n')

        with mock_client(handler) as client:
            body = b"".join(client.stream("POST", "/api/chat", json={"messages": []}))

        assert body == b'0:"hi"\n1:{}\n'

    def test_error_status_raises_mapped_exception(self) -> None:
        """A 500 before streaming raises ServerError with the server's message."""
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(
                500, json={"error": "Failed to generate AI response.", "details": "overloaded"}
            )

        with mock_client(handler) as client:
            with pytest.raises(ServerError) as exc_info:
                list(client.stream("POST", "/api/chat", json={}))

        assert "overloaded" in exc_info.value.message

    def test_stream_is_never_retried(self, no_sleep) -> None:
        """Streams go out once even with retry enabled."""
        attempts = 0

        def handler(request: httpx.Request) -> httpx.Response:
            nonlocal attempts
            attempts += 1
            return httpx.Response(503, text="Unavailable")

        with mock_client(handler, retry_enabled=True) as client:
            with pytest.raises(ServerError):
                list(client.stream("POST", "/api/chat"))

        assert attempts == 1

    def test_connection_error(self) -> None:
        """Connection failures raise ConnectionError."""
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused")

        with mock_client(handler) as client:
            with pytest.raises(ConnectionError):
                list(client.stream("POST", "/api/chat"))


# =============================================================================
# AsyncHTTPClient Tests
# =============================================================================


class TestAsyncHTTPClient:
    """Tests for AsyncHTTPClient."""

    async def test_async_context_manager(self) -> None:
        """AsyncHTTPClient supports async context manager."""
        async with AsyncHTTPClient(base_url=BASE_URL) as client:
            assert isinstance(client, AsyncHTTPClient)

    async def test_async_get_request(self) -> None:
        """Async GET request returns parsed JSON response."""
        async with mock_async_client(lambda request: httpx.Response(200, json={"ok": True})) as client:
            assert await client.get("/health") == {"ok": True}

    async def test_async_404_raises_not_found(self) -> None:
        """HTTP 404 raises NotFoundError."""
        handler = lambda request: httpx.Response(404, json={"detail": "missing"})  # noqa: E731

        async with mock_async_client(handler) as client:
            with pytest.raises(NotFoundError):
                await client.get("/projects/missing")

    async def test_async_timeout_error(self) -> None:
        """Timeouts raise TimeoutError."""
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.TimeoutException("slow")

        async with mock_async_client(handler) as client:
            with pytest.raises(TimeoutError):
                await client.get("/health")

    async def test_async_retry_on_502(self, monkeypatch) -> None:
        """Gateway errors are retried by the async client too."""
        async def instant(seconds: float) -> None:
            return None

        monkeypatch.setattr("client._http.asyncio.sleep", instant)
        attempts = 0

        def handler(request: httpx.Request) -> httpx.Response:
            nonlocal attempts
            attempts += 1
            if attempts == 1:
                return httpx.Response(502, text="Bad Gateway")
            return httpx.Response(200, json={"status": "healthy"})

        async with mock_async_client(handler, retry_enabled=True) as client:
            assert await client.get("/health") == {"status": "healthy"}

        assert attempts == 2

    async def test_async_stream(self) -> None:
        """The async stream yields the body."""
        handler = lambda request: httpx.Response(200, content=b'0:"hi"\n')  # noqa: E731

        async with mock_async_client(handler) as client:
            chunks = [chunk async for chunk in client.stream("POST", "/api/chat", json={})]

        assert b"".join(chunks) == b'0:"hi"\n'

    async def test_async_stream_error_status(self) -> None:
        """An error status raises before any chunk is yielded."""
        handler = lambda request: httpx.Response(422, json={"detail": []})  # noqa: E731

        async with mock_async_client(handler) as client:
            with pytest.raises(ValidationError):
                async for _chunk in client.stream("POST", "/api/chat", json={}):
                    pass
