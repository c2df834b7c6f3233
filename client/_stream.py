"""Incremental decoder for the chat stream format.

The server writes newline-terminated chunks:

    0:"<escaped text>"    assistant text
    1:<json>              file tree snapshot (last chunk of a successful stream)
    3:"<escaped text>"    terminal error

Network reads can split a chunk anywhere, including inside a multi-byte UTF-8
character, so the decoder buffers until it has a whole line.

This is an internal module. Import from `client` instead.
"""

import codecs
import json
import re
from typing import Any, Iterable, Literal, Union

from pydantic import BaseModel, Field

from client.exceptions import StreamAbortedError, StreamDecodeError

TEXT_PREFIX = "0"
SNAPSHOT_PREFIX = "1"
ERROR_PREFIX = "3"

_ESCAPE_SEQUENCE = re.compile(r"\\(.)", re.DOTALL)
_UNESCAPES = {"n": "\n", '"': '"', "\\": "\\"}


def unescape_text(payload: str) -> str:
    """Reverse the text chunk escaping in a single left-to-right pass.

    Processing each escape sequence once means an escaped backslash followed by
    ``n`` decodes to a backslash and an ``n``, never to a newline.
    """
    return _ESCAPE_SEQUENCE.sub(
        lambda match: _UNESCAPES.get(match.group(1), match.group(0)), payload
    )


# Stream events


class TextDelta(BaseModel):
    """A piece of assistant text, in arrival order."""

    type: Literal["text"] = "text"
    text: str


class FileSnapshot(BaseModel):
    """The serialized file tree sent at the end of a successful stream."""

    type: Literal["files"] = "files"
    files: dict[str, Any] = Field(default_factory=dict)


class StreamErrorEvent(BaseModel):
    """A terminal error reported by the server after streaming started."""

    type: Literal["error"] = "error"
    message: str


StreamEvent = Union[TextDelta, FileSnapshot, StreamErrorEvent]


class ChatResult(BaseModel):
    """Everything one chat round produced.

    Attributes:
        text: All assistant text, concatenated.
        files: Final serialized file tree.
    """

    text: str = ""
    files: dict[str, Any] = Field(default_factory=dict)


class StreamDecoder:
    """Turns raw stream fragments into events.

    Example:
        decoder = StreamDecoder()
        for fragment in response.iter_bytes():
            for event in decoder.feed(fragment):
                handle(event)
        for event in decoder.close():
            handle(event)
    """

    def __init__(self) -> None:
        self._buffer = ""
        self._utf8 = codecs.getincrementaldecoder("utf-8")()

    def feed(self, data: bytes | str) -> list[StreamEvent]:
        """Add a fragment and return the events for every completed line.

        Raises:
            StreamDecodeError: If a completed line is malformed.
        """
        if isinstance(data, bytes):
            try:
                data = self._utf8.decode(data)
            except UnicodeDecodeError as e:
                raise StreamDecodeError(f"Stream is not valid UTF-8: {e}") from e
        self._buffer += data

        events = []
        while "\n" in self._buffer:
            line, self._buffer = self._buffer.split("\n", 1)
            event = self._parse_line(line)
            if event is not None:
                events.append(event)
        return events

    def close(self) -> list[StreamEvent]:
        """Flush the decoder at end of stream.

        A final line without its trailing newline is still parsed.

        Raises:
            StreamDecodeError: If the stream ends mid-character or with a
                malformed line.
        """
        try:
            self._buffer += self._utf8.decode(b"", final=True)
        except UnicodeDecodeError as e:
            raise StreamDecodeError(f"Stream ended inside a UTF-8 sequence: {e}") from e

        line, self._buffer = self._buffer, ""
        event = self._parse_line(line)
        return [event] if event is not None else []

    def _parse_line(self, line: str) -> StreamEvent | None:
        line = line.rstrip("\r")
        if not line.strip():
            return None

        prefix, separator, payload = line.partition(":")
        if not separator:
            raise StreamDecodeError("Chunk is missing its type prefix", line=line)

        if prefix == TEXT_PREFIX:
            return TextDelta(text=self._parse_quoted(payload, line))
        if prefix == ERROR_PREFIX:
            return StreamErrorEvent(message=self._parse_quoted(payload, line))
        if prefix == SNAPSHOT_PREFIX:
            try:
                files = json.loads(payload)
            except ValueError as e:
                raise StreamDecodeError(f"Invalid snapshot JSON: {e}", line=line) from e
            if not isinstance(files, dict):
                raise StreamDecodeError("Snapshot chunk must be a JSON object", line=line)
            return FileSnapshot(files=files)

        raise StreamDecodeError(f"Unknown chunk type {prefix!r}", line=line)

    @staticmethod
    def _parse_quoted(payload: str, line: str) -> str:
        if len(payload) < 2 or not payload.startswith('"') or not payload.endswith('"'):
            raise StreamDecodeError("Text chunk payload must be a quoted string", line=line)
        return unescape_text(payload[1:-1])


def collect_result(events: Iterable[StreamEvent]) -> ChatResult:
    """Fold a complete event sequence into a ChatResult.

    Raises:
        StreamAbortedError: If the stream carried an error chunk or ended
            without a file snapshot.
    """
    parts: list[str] = []
    files: dict[str, Any] | None = None
    for event in events:
        if isinstance(event, TextDelta):
            parts.append(event.text)
        elif isinstance(event, FileSnapshot):
            files = event.files
        elif isinstance(event, StreamErrorEvent):
            raise StreamAbortedError(event.message, partial_text="".join(parts))

    if files is None:
        raise StreamAbortedError(
            "Stream ended without a file snapshot", partial_text="".join(parts)
        )
    return ChatResult(text="".join(parts), files=files)
