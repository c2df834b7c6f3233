"""UIGen agent package.

The agent loop drives a language model that edits a virtual file tree through
two tools, one call per model response.
"""

from agent.context import RequestContext
from agent.executors import ToolExecutors
from agent.loop import DEFAULT_MAX_ITERATIONS, AgentLoop, StopReason
from agent.model_client import (
    AnthropicModelClient,
    ModelClient,
    ModelError,
    ModelResponse,
)
from agent.prompts import GENERATION_PROMPT

__all__ = [
    "AgentLoop",
    "AnthropicModelClient",
    "DEFAULT_MAX_ITERATIONS",
    "GENERATION_PROMPT",
    "ModelClient",
    "ModelError",
    "ModelResponse",
    "RequestContext",
    "StopReason",
    "ToolExecutors",
]
