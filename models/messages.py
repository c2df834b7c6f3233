"""Conversation turn and content block models.

Content blocks are a closed union discriminated on ``type``. Payloads coming from
clients are validated into these models once, at the request boundary, so the
agent loop can match on block classes instead of inspecting dict shapes.
"""

import json
import logging
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, Field, TypeAdapter, ValidationError

logger = logging.getLogger(__name__)

Role = Literal["user", "assistant"]


class TextBlock(BaseModel):
    """Plain text emitted by the model or sent by the user."""

    type: Literal["text"] = "text"
    text: str


class ToolUseBlock(BaseModel):
    """A model request to invoke a named tool.

    Args:
        id: Identifier the matching tool result must echo back.
        name: Tool name.
        input: Raw tool arguments, validated by the tool executor.
    """

    type: Literal["tool_use"] = "tool_use"
    id: str
    name: str
    input: dict[str, Any] = Field(default_factory=dict)


class ToolResultBlock(BaseModel):
    """A tool's output sent back to the model.

    Args:
        tool_use_id: Id of the ToolUseBlock this answers.
        content: Textual (or JSON-encoded) tool output.
        is_error: Optional flag marking the output as an error.
    """

    type: Literal["tool_result"] = "tool_result"
    tool_use_id: str
    content: str
    is_error: bool | None = None


ContentBlock = Annotated[
    Union[TextBlock, ToolUseBlock, ToolResultBlock],
    Field(discriminator="type"),
]

_content_blocks = TypeAdapter(list[ContentBlock])


class ConversationTurn(BaseModel):
    """One entry of the conversation replayed to the model.

    Args:
        role: "user" or "assistant".
        content: Plain text, or an ordered list of content blocks.
    """

    role: Role
    content: Union[str, list[ContentBlock]]

    def text(self) -> str:
        """Return the plain text of this turn (text blocks joined by newlines)."""
        if isinstance(self.content, str):
            return self.content
        return "\n".join(
            block.text for block in self.content if isinstance(block, TextBlock)
        )

    def is_empty(self) -> bool:
        if isinstance(self.content, str):
            return not self.content.strip()
        return not self.content

    def to_api(self) -> dict[str, Any]:
        """Return the provider-facing dict form of this turn."""
        return self.model_dump(exclude_none=True)


class IncomingMessage(BaseModel):
    """A loosely shaped message as posted by a client.

    Only used at the request boundary; see conversation_from_messages.
    """

    role: str
    content: Any = None


def _coerce_content(content: Any) -> Union[str, list[Any]]:
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        try:
            return _content_blocks.validate_python(content)
        except ValidationError as e:
            logger.debug(f"Content blocks did not validate, sending as JSON text: {e}")
    return json.dumps(content)


def conversation_from_messages(messages: list[IncomingMessage]) -> list[ConversationTurn]:
    """Validate client messages into conversation turns.

    Messages with no content are dropped. Any role other than "user" is treated as
    "assistant". Content that is neither text nor a valid list of content blocks is
    forwarded as its JSON text.

    Args:
        messages: Messages as posted by the client.

    Returns:
        The validated conversation, in order.
    """
    turns = []
    for message in messages:
        if message.content is None or not str(message.content).strip():
            continue
        turn = ConversationTurn(
            role="user" if message.role == "user" else "assistant",
            content=_coerce_content(message.content),
        )
        if not turn.is_empty():
            turns.append(turn)
    return turns
