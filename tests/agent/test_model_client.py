"""Tests for the Anthropic model client adapter.

The SDK client is replaced by a small fake exposing ``messages.create`` so no
network calls are made.
"""

from types import SimpleNamespace

import anthropic
import httpx
import pytest

from agent.model_client import AnthropicModelClient, ModelError
from models.messages import ConversationTurn, TextBlock, ToolUseBlock
from models.tools import TOOL_DEFINITIONS


class FakeMessages:
    """Stands in for ``AsyncAnthropic().messages``."""

    def __init__(self, result):
        self.result = result
        self.kwargs = None

    async def create(self, **kwargs):
        self.kwargs = kwargs
        if isinstance(self.result, Exception):
            raise self.result
        return self.result


def make_client(result) -> tuple[AnthropicModelClient, FakeMessages]:
    messages = FakeMessages(result)
    client = AnthropicModelClient(
        model="test-model",
        max_tokens=128,
        client=SimpleNamespace(messages=messages),
    )
    return client, messages


class TestAnthropicModelClient:
    """Tests for AnthropicModelClient."""

    async def test_converts_response_blocks(self):
        """Test that SDK blocks become TextBlock and ToolUseBlock."""
        sdk_response = SimpleNamespace(
            content=[
                SimpleNamespace(type="text", text="Creating"),
                SimpleNamespace(
                    type="tool_use",
                    id="toolu_1",
                    name="str_replace_editor",
                    input={"command": "view", "path": "/"},
                ),
            ],
            stop_reason="tool_use",
        )
        client, _messages = make_client(sdk_response)

        response = await client.create_message(
            "system", [ConversationTurn(role="user", content="hi")], TOOL_DEFINITIONS
        )

        assert isinstance(response.content[0], TextBlock)
        assert isinstance(response.content[1], ToolUseBlock)
        assert response.content[1].input == {"command": "view", "path": "/"}
        assert response.stop_reason == "tool_use"
        assert not response.is_final

    async def test_sends_request_fields(self):
        """Test the request built for the SDK."""
        client, messages = make_client(SimpleNamespace(content=[], stop_reason="end_turn"))

        await client.create_message(
            "be helpful", [ConversationTurn(role="user", content="hi")], TOOL_DEFINITIONS
        )

        assert messages.kwargs["model"] == "test-model"
        assert messages.kwargs["max_tokens"] == 128
        assert messages.kwargs["system"] == "be helpful"
        assert messages.kwargs["messages"] == [{"role": "user", "content": "hi"}]
        assert [tool["name"] for tool in messages.kwargs["tools"]] == [
            "str_replace_editor",
            "file_manager",
        ]

    async def test_ignores_unknown_block_types(self):
        """Test that unsupported blocks are skipped."""
        client, _messages = make_client(
            SimpleNamespace(
                content=[SimpleNamespace(type="thinking"), SimpleNamespace(type="text", text="hi")],
                stop_reason="end_turn",
            )
        )

        response = await client.create_message("s", [], [])

        assert [block.type for block in response.content] == ["text"]
        assert response.is_final

    async def test_api_error_becomes_model_error(self):
        """Test that SDK errors are wrapped in ModelError."""
        request = httpx.Request("POST", "https://api.anthropic.com/v1/messages")
        client, _messages = make_client(anthropic.APIConnectionError(request=request))

        with pytest.raises(ModelError) as exc_info:
            await client.create_message("s", [], [])

        assert isinstance(exc_info.value.cause, anthropic.APIError)
