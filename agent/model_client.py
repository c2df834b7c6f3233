"""Model collaborator boundary.

The agent loop only depends on the ModelClient protocol: given a system prompt,
the full conversation and the tool vocabulary, return ordered content blocks and
a stop reason. AnthropicModelClient implements it with the ``anthropic`` SDK.
"""

import logging
from typing import Annotated, Any, Protocol, Union

import anthropic
from pydantic import BaseModel, Field, ValidationError

from models.messages import ConversationTurn, TextBlock, ToolUseBlock
from models.tools import ToolDefinition

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "claude-3-5-haiku-latest"
DEFAULT_MAX_TOKENS = 8192

# Stop reasons after which the model expects no further round.
FINAL_STOP_REASONS = frozenset({"end_turn", "max_tokens"})


class ModelError(Exception):
    """Raised when the model call fails or returns something unusable.

    Args:
        message: Description of the failure.
        cause: The underlying exception, if any.
    """

    def __init__(self, message: str, cause: Exception | None = None) -> None:
        self.message = message
        self.cause = cause
        super().__init__(message)


class ModelResponse(BaseModel):
    """One model reply.

    Args:
        content: Ordered text and tool-use blocks.
        stop_reason: Why generation stopped ("end_turn", "tool_use", ...).
    """

    content: list[
        Annotated[Union[TextBlock, ToolUseBlock], Field(discriminator="type")]
    ] = Field(default_factory=list)
    stop_reason: str | None = None

    @property
    def is_final(self) -> bool:
        return self.stop_reason in FINAL_STOP_REASONS


class ModelClient(Protocol):
    """Anything that can answer one round of the conversation."""

    async def create_message(
        self,
        system: str,
        messages: list[ConversationTurn],
        tools: list[ToolDefinition],
    ) -> ModelResponse: ...


class AnthropicModelClient:
    """ModelClient backed by the Anthropic Messages API.

    Attributes:
        model: Model name sent with every request.
        max_tokens: Output token limit per call.
    """

    def __init__(
        self,
        api_key: str | None = None,
        model: str = DEFAULT_MODEL,
        max_tokens: int = DEFAULT_MAX_TOKENS,
        client: anthropic.AsyncAnthropic | None = None,
    ) -> None:
        self.model = model
        self.max_tokens = max_tokens
        self._client = client or anthropic.AsyncAnthropic(api_key=api_key)

    async def create_message(
        self,
        system: str,
        messages: list[ConversationTurn],
        tools: list[ToolDefinition],
    ) -> ModelResponse:
        """Send one non-streaming request and convert the reply.

        Raises:
            ModelError: On any API or transport failure, or a reply whose blocks
                cannot be interpreted.
        """
        try:
            response = await self._client.messages.create(
                model=self.model,
                max_tokens=self.max_tokens,
                system=system,
                messages=[turn.to_api() for turn in messages],
                tools=[tool.model_dump() for tool in tools],
            )
        except anthropic.APIError as e:
            raise ModelError(f"Anthropic API error: {e}", cause=e) from e

        return self._convert(response)

    def _convert(self, response: Any) -> ModelResponse:
        blocks = []
        for block in response.content:
            if block.type == "text":
                blocks.append({"type": "text", "text": block.text})
            elif block.type == "tool_use":
                blocks.append(
                    {"type": "tool_use", "id": block.id, "name": block.name, "input": block.input}
                )
            else:
                logger.debug(f"Ignoring unsupported content block type {block.type!r}")
        try:
            return ModelResponse(content=blocks, stop_reason=response.stop_reason)
        except ValidationError as e:
            raise ModelError(f"Malformed model response: {e}", cause=e) from e
