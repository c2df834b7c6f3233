"""UIGen API Client Library.

This module provides a typed Python client for the UIGen agent server. It
supports both synchronous and asynchronous usage and decodes the chat stream
into events.

Example:
    Synchronous usage::

        from client import TextDelta, UIGenClient

        with UIGenClient(base_url="http://localhost:8000") as client:
            for event in client.chat.stream([{"role": "user", "content": "A todo list"}]):
                if isinstance(event, TextDelta):
                    print(event.text, end="")

Exports:
    UIGenClient: Synchronous client.
    AsyncUIGenClient: Asynchronous client.

    Stream events:
        TextDelta, FileSnapshot, StreamErrorEvent, ChatResult.

    Exceptions:
        UIGenClientError: Base exception for all client errors.
        ConnectionError: Failed to connect to the server.
        TimeoutError: Request timed out.
        APIError: Server returned an error response.
        ValidationError: Request validation failed (HTTP 422).
        NotFoundError: Resource not found (HTTP 404).
        ServerError: Server-side error (HTTP 5xx).
        StreamError: The chat stream could not be consumed.
        StreamDecodeError: A chunk did not match the wire format.
        StreamAbortedError: The stream ended with an error chunk.
"""

from client._chat import AsyncChatClient, ChatClient
from client._projects import AsyncProjectsClient, ProjectsClient
from client._stream import (
    ChatResult,
    FileSnapshot,
    StreamDecoder,
    StreamErrorEvent,
    StreamEvent,
    TextDelta,
    unescape_text,
)
from client.exceptions import (
    APIError,
    ConnectionError,
    NotFoundError,
    ServerError,
    StreamAbortedError,
    StreamDecodeError,
    StreamError,
    TimeoutError,
    UIGenClientError,
    ValidationError,
)
from client.models import HealthResponse, Project, SimpleMessage
from client.client import AsyncUIGenClient, UIGenClient

__all__ = [
    # Main clients
    "UIGenClient",
    "AsyncUIGenClient",
    # Sub-clients
    "ChatClient",
    "AsyncChatClient",
    "ProjectsClient",
    "AsyncProjectsClient",
    # Stream decoding
    "StreamDecoder",
    "StreamEvent",
    "TextDelta",
    "FileSnapshot",
    "StreamErrorEvent",
    "ChatResult",
    "unescape_text",
    # Exceptions
    "UIGenClientError",
    "ConnectionError",
    "TimeoutError",
    "APIError",
    "ValidationError",
    "NotFoundError",
    "ServerError",
    "StreamError",
    "StreamDecodeError",
    "StreamAbortedError",
    # Response models
    "Project",
    "SimpleMessage",
    "HealthResponse",
]
