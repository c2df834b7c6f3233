"""Exception hierarchy for the UIGen API client.

Exception Hierarchy:
    UIGenClientError (base)
    ├── ConnectionError - Network/connection failures
    ├── TimeoutError - Request timeout
    ├── APIError - Server returned an error response
    │   ├── ValidationError (HTTP 422)
    │   ├── NotFoundError (HTTP 404)
    │   └── ServerError (HTTP 5xx)
    └── StreamError - The chat stream could not be consumed
        ├── StreamDecodeError - A chunk did not match the wire format
        └── StreamAbortedError - The server ended the stream with an error

Example:
    Catching a failed chat round::

        try:
            result = client.chat.send(messages)
        except StreamAbortedError as e:
            print(f"Model failed mid-stream: {e.message}")
        except APIError as e:
            print(f"API error {e.status_code}: {e.message}")
"""

from typing import Any


class UIGenClientError(Exception):
    """Base exception for all UIGen client errors.

    Attributes:
        message: Human-readable error description.
    """

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)

    def __str__(self) -> str:
        """Return string representation of the error."""
        return self.message


class ConnectionError(UIGenClientError):
    """Failed to connect to the UIGen server.

    Attributes:
        message: Human-readable error description.
        url: The URL that failed to connect.
        cause: The underlying exception that caused the connection failure.
    """

    def __init__(
        self,
        message: str,
        url: str | None = None,
        cause: Exception | None = None,
    ) -> None:
        self.url = url
        self.cause = cause
        super().__init__(message)

    def __str__(self) -> str:
        """Return string representation including URL if available."""
        if self.url:
            return f"{self.message} (url: {self.url})"
        return self.message


class TimeoutError(UIGenClientError):
    """Request timed out.

    Attributes:
        message: Human-readable error description.
        timeout: The timeout value in seconds.
        url: The URL that timed out.
    """

    def __init__(
        self,
        message: str,
        timeout: float | None = None,
        url: str | None = None,
    ) -> None:
        self.timeout = timeout
        self.url = url
        super().__init__(message)

    def __str__(self) -> str:
        """Return string representation including timeout if available."""
        parts = []
        if self.timeout is not None:
            parts.append(f"timeout: {self.timeout}s")
        if self.url:
            parts.append(f"url: {self.url}")
        if not parts:
            return self.message
        return f"{self.message} ({', '.join(parts)})"


class APIError(UIGenClientError):
    """Server returned an error response.

    Attributes:
        message: Human-readable error message.
        status_code: HTTP status code from the server.
        error_type: Error type/code from the response body (if available).
        details: Additional error details from the response (if available).
        response_body: Raw response body for debugging.
    """

    def __init__(
        self,
        message: str,
        status_code: int,
        error_type: str | None = None,
        details: dict[str, Any] | None = None,
        response_body: Any = None,
    ) -> None:
        self.status_code = status_code
        self.error_type = error_type
        self.details = details
        self.response_body = response_body
        super().__init__(message)

    def __str__(self) -> str:
        """Return string representation including status code."""
        if self.error_type:
            return f"[HTTP {self.status_code}] [{self.error_type}] {self.message}"
        return f"[HTTP {self.status_code}] {self.message}"


class ValidationError(APIError):
    """Request validation failed (HTTP 422)."""

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
        response_body: Any = None,
    ) -> None:
        super().__init__(
            message=message,
            status_code=422,
            error_type="validation_error",
            details=details,
            response_body=response_body,
        )


class NotFoundError(APIError):
    """Resource not found (HTTP 404), e.g. an unknown project id."""

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
        response_body: Any = None,
    ) -> None:
        super().__init__(
            message=message,
            status_code=404,
            error_type="not_found",
            details=details,
            response_body=response_body,
        )


class ServerError(APIError):
    """Server-side error (HTTP 5xx).

    The chat endpoint answers with a 500 when the model fails before any chunk
    was streamed.
    """

    def __init__(
        self,
        message: str,
        status_code: int = 500,
        details: dict[str, Any] | None = None,
        response_body: Any = None,
    ) -> None:
        super().__init__(
            message=message,
            status_code=status_code,
            error_type="server_error",
            details=details,
            response_body=response_body,
        )


class StreamError(UIGenClientError):
    """Base class for errors while consuming a chat stream."""


class StreamDecodeError(StreamError):
    """A stream line did not match the chunk format.

    Attributes:
        line: The offending line.
    """

    def __init__(self, message: str, line: str | None = None) -> None:
        self.line = line
        super().__init__(message)


class StreamAbortedError(StreamError):
    """The stream ended with an error chunk or without a file snapshot.

    Attributes:
        partial_text: Text received before the stream was aborted.
    """

    def __init__(self, message: str, partial_text: str = "") -> None:
        self.partial_text = partial_text
        super().__init__(message)
