"""Agent orchestration loop.

Alternates model calls and tool execution over one conversation and one file
tree until the model stops asking for tools or the iteration cap is hit.

    start -> iterate -> model call -> dispatch blocks
        tool_use       -> execute first tool -> iterate
        text only/cap  -> end

At most one tool runs per iteration. Text blocks are yielded to the caller as
soon as the response containing them arrives.
"""

import asyncio
from enum import Enum
from typing import AsyncIterator, Awaitable, Callable

from agent.context import RequestContext
from agent.executors import ToolExecutors
from agent.model_client import ModelClient, ModelError
from agent.prompts import GENERATION_PROMPT
from models.messages import ConversationTurn, TextBlock, ToolResultBlock, ToolUseBlock

DEFAULT_MAX_ITERATIONS = 40


class StopReason(str, Enum):
    """Why the loop ended."""

    END_TURN = "end_turn"
    NO_TOOL_USE = "no_tool_use"
    MAX_ITERATIONS = "max_iterations"
    UNKNOWN_TOOL = "unknown_tool"
    CANCELLED = "cancelled"
    ERROR = "error"


class AgentLoop:
    """Drives model-call / tool-execution rounds for one request.

    Attributes:
        model: The model collaborator.
        executors: Tool executors bound to the request's file tree.
        conversation: Full ordered conversation, grown as the loop runs.
        max_iterations: Hard cap on model calls.
        iterations: Model calls made so far.
        tool_calls: Tool executions performed so far.
        stop_reason: Why the loop ended (None while running).
    """

    def __init__(
        self,
        model: ModelClient,
        executors: ToolExecutors,
        conversation: list[ConversationTurn],
        *,
        system_prompt: str = GENERATION_PROMPT,
        max_iterations: int = DEFAULT_MAX_ITERATIONS,
        context: RequestContext | None = None,
        is_cancelled: Callable[[], Awaitable[bool]] | None = None,
    ) -> None:
        if max_iterations < 1:
            raise ValueError(f"max_iterations must be at least 1, got {max_iterations}")
        self.model = model
        self.executors = executors
        self.conversation = list(conversation)
        self.system_prompt = system_prompt
        self.max_iterations = max_iterations
        self.context = context or RequestContext()
        self._is_cancelled = is_cancelled

        self.iterations = 0
        self.tool_calls = 0
        self.stop_reason: StopReason | None = None
        self._text_parts: list[str] = []
        self._started = False

    @property
    def text(self) -> str:
        """All text emitted so far, concatenated."""
        return "".join(self._text_parts)

    async def _cancelled(self) -> bool:
        if self._is_cancelled is None:
            return False
        return await self._is_cancelled()

    async def run(self) -> AsyncIterator[str]:
        """Run the loop, yielding text as the model produces it.

        Yields:
            Text blocks, in order.

        Raises:
            ModelError: If a model call fails. Tool effects applied before the
                failure stay applied.
            RuntimeError: If the loop has already been run.
        """
        if self._started:
            raise RuntimeError("AgentLoop.run() can only be called once")
        self._started = True
        log = self.context.logger

        try:
            while self.iterations < self.max_iterations:
                if await self._cancelled():
                    self.stop_reason = StopReason.CANCELLED
                    return

                self.iterations += 1
                log.info(f"Iteration {self.iterations}/{self.max_iterations}")
                response = await self.model.create_message(
                    self.system_prompt,
                    list(self.conversation),
                    self.executors.definitions,
                )
                log.debug(
                    f"Model returned {len(response.content)} block(s), "
                    f"stop_reason={response.stop_reason}"
                )

                tool_executed = False
                for index, block in enumerate(response.content):
                    if isinstance(block, TextBlock):
                        self._text_parts.append(block.text)
                        yield block.text
                        continue

                    if not isinstance(block, ToolUseBlock):
                        raise ModelError(f"Unexpected content block {type(block).__name__}")

                    if not self.executors.has_tool(block.name):
                        log.warning(f"Unknown tool requested: {block.name}")
                        self.stop_reason = StopReason.UNKNOWN_TOOL
                        return
                    if await self._cancelled():
                        self.stop_reason = StopReason.CANCELLED
                        return

                    log.info(f"Executing tool {block.name} ({block.id})")
                    result = self.executors.execute(block.name, block.input)
                    self.tool_calls += 1
                    log.debug(f"Tool {block.name} returned {len(result)} characters")

                    # Later blocks are dropped so every tool_use sent back has a result.
                    self.conversation.append(
                        ConversationTurn(role="assistant", content=response.content[: index + 1])
                    )
                    self.conversation.append(
                        ConversationTurn(
                            role="user",
                            content=[ToolResultBlock(tool_use_id=block.id, content=result)],
                        )
                    )
                    tool_executed = True
                    break

                if not tool_executed and response.content:
                    self.conversation.append(
                        ConversationTurn(role="assistant", content=list(response.content))
                    )

                if response.is_final:
                    self.stop_reason = StopReason.END_TURN
                    return
                if not tool_executed:
                    self.stop_reason = StopReason.NO_TOOL_USE
                    return

            self.stop_reason = StopReason.MAX_ITERATIONS
            log.info(f"Reached iteration cap of {self.max_iterations}")
        except ModelError:
            self.stop_reason = StopReason.ERROR
            raise
        except (GeneratorExit, asyncio.CancelledError):
            self.stop_reason = StopReason.CANCELLED
            raise
        finally:
            log.info(
                f"Loop finished: stop_reason={self.stop_reason and self.stop_reason.value}, "
                f"iterations={self.iterations}, tool_calls={self.tool_calls}"
            )

    async def run_to_completion(self) -> str:
        """Run the loop without streaming and return the accumulated text."""
        async for _text in self.run():
            pass
        return self.text
