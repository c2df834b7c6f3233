"""Chat sub-client for the UIGen API.

This module provides ChatClient and AsyncChatClient for the streaming chat
endpoint (POST /api/chat).

This is an internal module. Import from `client` instead.
"""

from typing import TYPE_CHECKING, Any, AsyncIterator, Iterator

from pydantic import BaseModel

from client._base import AsyncBaseClient, BaseClient
from client._stream import ChatResult, StreamDecoder, StreamEvent, collect_result

if TYPE_CHECKING:
    from client._http import AsyncHTTPClient, HTTPClient


def _build_request(
    messages: list[dict[str, Any] | BaseModel],
    files: dict[str, Any] | None,
    project_id: str | None,
) -> dict[str, Any]:
    """Build the chat request body.

    Messages may be plain dicts or pydantic models (for example
    ``ConversationTurn``); models are dumped without unset fields.
    """
    request_data: dict[str, Any] = {
        "messages": [
            m.model_dump(exclude_none=True) if isinstance(m, BaseModel) else m for m in messages
        ],
        "files": files or {},
    }
    if project_id is not None:
        request_data["projectId"] = project_id
    return request_data


class ChatClient(BaseClient):
    """Synchronous client for the chat endpoint.

    Example:
        with UIGenClient() as client:
            for event in client.chat.stream([{"role": "user", "content": "A counter"}]):
                if isinstance(event, TextDelta):
                    print(event.text, end="")
    """

    _PATH = "/api/chat"

    def __init__(self, http_client: "HTTPClient") -> None:
        """Initialize the chat client.

        Args:
            http_client: The shared HTTP client instance.
        """
        super().__init__(http_client)

    def stream(
        self,
        messages: list[dict[str, Any] | BaseModel],
        files: dict[str, Any] | None = None,
        project_id: str | None = None,
    ) -> Iterator[StreamEvent]:
        """Run one chat round and yield events as they arrive.

        Args:
            messages: Conversation so far, oldest first.
            files: Serialized file tree to start from.
            project_id: Project to save the result to, if any.

        Yields:
            TextDelta, FileSnapshot and StreamErrorEvent events in stream order.

        Raises:
            ServerError: If the model failed before anything was streamed.
            StreamDecodeError: If the server sent a malformed chunk.
        """
        decoder = StreamDecoder()
        body = _build_request(messages, files, project_id)
        for fragment in self._stream(self._PATH, json=body):
            yield from decoder.feed(fragment)
        yield from decoder.close()

    def send(
        self,
        messages: list[dict[str, Any] | BaseModel],
        files: dict[str, Any] | None = None,
        project_id: str | None = None,
    ) -> ChatResult:
        """Run one chat round and wait for the final text and file tree.

        Args:
            messages: Conversation so far, oldest first.
            files: Serialized file tree to start from.
            project_id: Project to save the result to, if any.

        Returns:
            The concatenated assistant text and the final file tree.

        Raises:
            ServerError: If the model failed before anything was streamed.
            StreamAbortedError: If the stream ended with an error chunk.
        """
        return collect_result(self.stream(messages, files=files, project_id=project_id))


class AsyncChatClient(AsyncBaseClient):
    """Asynchronous client for the chat endpoint.

    Example:
        async with AsyncUIGenClient() as client:
            result = await client.chat.send([{"role": "user", "content": "A counter"}])
            print(result.files)
    """

    _PATH = "/api/chat"

    def __init__(self, http_client: "AsyncHTTPClient") -> None:
        """Initialize the async chat client.

        Args:
            http_client: The shared async HTTP client instance.
        """
        super().__init__(http_client)

    async def stream(
        self,
        messages: list[dict[str, Any] | BaseModel],
        files: dict[str, Any] | None = None,
        project_id: str | None = None,
    ) -> AsyncIterator[StreamEvent]:
        """Run one chat round and yield events as they arrive.

        See ChatClient.stream.
        """
        decoder = StreamDecoder()
        body = _build_request(messages, files, project_id)
        async for fragment in self._stream(self._PATH, json=body):
            for event in decoder.feed(fragment):
                yield event
        for event in decoder.close():
            yield event

    async def send(
        self,
        messages: list[dict[str, Any] | BaseModel],
        files: dict[str, Any] | None = None,
        project_id: str | None = None,
    ) -> ChatResult:
        """Run one chat round and wait for the final text and file tree.

        See ChatClient.send.
        """
        events = [
            event async for event in self.stream(messages, files=files, project_id=project_id)
        ]
        return collect_result(events)
