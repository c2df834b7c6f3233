"""Line-oriented stream format for chat responses.

One HTTP body carries three kinds of newline-terminated chunks:

    0:"<escaped text>"    assistant text, in order, as it is produced
    1:<json>              the serialized file tree, exactly once, after all text
    3:"<escaped text>"    terminal error; nothing follows it

Text payloads escape backslash first, then double quotes and newlines, so a chunk
never contains a raw newline and decodes back to the original string.
"""

import json
from typing import Any

TEXT_PREFIX = "0"
SNAPSHOT_PREFIX = "1"
ERROR_PREFIX = "3"

MEDIA_TYPE = "text/plain; charset=utf-8"


def escape_text(text: str) -> str:
    """Escape text for a quoted chunk payload."""
    return text.replace("\\", "\\\\").replace('"', '\\"').replace("\n", "\\n")


class StreamEncoder:
    """Encodes chunks for one response and enforces their ordering.

    Attributes:
        started: Whether any chunk has been produced yet.
        finished: Whether the terminal snapshot or error chunk was produced.
    """

    def __init__(self) -> None:
        self.started = False
        self.finished = False

    def _emit(self, line: str) -> bytes:
        if self.finished:
            raise RuntimeError("Cannot write to a stream after its final chunk")
        self.started = True
        # Lone surrogates from model output become "?" rather than abort the body.
        return f"{line}\n".encode("utf-8", errors="replace")

    def text(self, text: str) -> bytes:
        """Encode a text chunk."""
        return self._emit(f'{TEXT_PREFIX}:"{escape_text(text)}"')

    def snapshot(self, files: dict[str, Any]) -> bytes:
        """Encode the file tree snapshot chunk. Only one is allowed per stream."""
        chunk = self._emit(f"{SNAPSHOT_PREFIX}:{json.dumps(files, ensure_ascii=False)}")
        self.finished = True
        return chunk

    def error(self, message: str) -> bytes:
        """Encode a terminal error chunk."""
        chunk = self._emit(f'{ERROR_PREFIX}:"{escape_text(message)}"')
        self.finished = True
        return chunk
