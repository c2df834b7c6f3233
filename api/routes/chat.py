"""Chat endpoint.

Runs the agent loop against the posted conversation and file tree, streaming
assistant text as it is produced and the final file tree snapshot at the end
(see api/streaming.py for the wire format).
"""

from typing import Any, AsyncIterator

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse, StreamingResponse
from pydantic import BaseModel, Field

from agent.context import RequestContext
from agent.executors import ToolExecutors
from agent.loop import AgentLoop
from agent.model_client import ModelError
from api.dependencies import (
    DisconnectCheckDep,
    ModelClientDep,
    ProjectStoreDep,
    SettingsDep,
)
from api.streaming import MEDIA_TYPE, StreamEncoder
from models.file_tree import FileTree, SnapshotError
from models.messages import ConversationTurn, IncomingMessage, conversation_from_messages
from models.project import ProjectStore, SimpleMessage, simplify_messages

router = APIRouter(
    prefix="/api",
    tags=["chat"],
)


# ============================================================================
# Request Models
# ============================================================================


class ChatRequest(BaseModel):
    """Request model for a chat round.

    Attributes:
        messages: Conversation so far (role/content pairs).
        files: Serialized file tree. Anything that fails to load yields an empty tree.
        project_id: Project to save the result into, if any.
    """

    model_config = {"populate_by_name": True}

    messages: list[IncomingMessage] = Field(
        default_factory=list, description="Conversation so far"
    )
    files: Any = Field(default=None, description="Serialized file tree snapshot")
    project_id: str | None = Field(
        default=None, alias="projectId", description="Project to save into"
    )


# ============================================================================
# Helpers
# ============================================================================


def load_file_tree(files: Any, context: RequestContext) -> FileTree:
    """Rebuild the request's file tree, falling back to an empty tree.

    Args:
        files: The posted snapshot (may be missing or malformed).
        context: Request context for logging.

    Returns:
        The loaded tree, or an empty tree.
    """
    if not files:
        return FileTree()
    try:
        tree = FileTree.from_snapshot(files)
    except SnapshotError as e:
        context.logger.warning(f"Failed to deserialize files, starting empty: {e}")
        return FileTree()
    context.logger.info(f"Loaded file tree with {tree.file_count()} file(s)")
    return tree


def save_project(
    store: ProjectStore,
    context: RequestContext,
    conversation: list[ConversationTurn],
    assistant_text: str,
    snapshot: dict[str, Any],
) -> None:
    """Save the conversation and snapshot, logging instead of raising on failure.

    Args:
        store: The project store.
        context: Request context carrying the project id.
        conversation: The turns the client posted.
        assistant_text: All text the assistant produced this round.
        snapshot: Final file tree snapshot.
    """
    messages = simplify_messages(conversation)
    if assistant_text:
        messages.append(SimpleMessage(role="assistant", content=assistant_text))
    try:
        store.save(context.project_id, messages, snapshot)
    except Exception:
        context.logger.exception(f"Failed to save project {context.project_id}")
        return
    context.logger.info(f"Saved project {context.project_id}")


async def stream_chat(
    loop: AgentLoop,
    file_tree: FileTree,
    conversation: list[ConversationTurn],
    store: ProjectStore,
    context: RequestContext,
) -> AsyncIterator[bytes]:
    """Yield encoded chunks for one agent run.

    A model failure before any chunk was produced propagates so the caller can
    answer with a plain error response; after that it becomes an error chunk.
    """
    encoder = StreamEncoder()
    try:
        async for text in loop.run():
            yield encoder.text(text)
    except ModelError as e:
        if not encoder.started:
            raise
        context.logger.error(f"Model call failed mid-stream: {e.message}")
        yield encoder.error(e.message)
        return

    snapshot = file_tree.serialize()
    if context.project_id:
        save_project(store, context, conversation, loop.text, snapshot)
    yield encoder.snapshot(snapshot)


async def _prepend(first: bytes, rest: AsyncIterator[bytes]) -> AsyncIterator[bytes]:
    yield first
    async for chunk in rest:
        yield chunk


# ============================================================================
# Route Handlers
# ============================================================================


@router.post("/chat")
async def chat(
    body: ChatRequest,
    model: ModelClientDep,
    store: ProjectStoreDep,
    settings: SettingsDep,
    is_disconnected: DisconnectCheckDep,
):
    """Run one agent round and stream the result.

    Args:
        body: Conversation, file tree and optional project id.
        model: The model client dependency.
        store: The project store dependency.
        settings: Application settings.
        is_disconnected: Polled before each model call and tool execution.

    Returns:
        A chunked ``text/plain`` stream, or a JSON 500 response if the model
        failed before anything was streamed.
    """
    context = RequestContext(project_id=body.project_id)
    context.logger.info(
        f"Chat request: {len(body.messages)} message(s), "
        f"files={'yes' if body.files else 'no'}"
    )

    file_tree = load_file_tree(body.files, context)
    conversation = conversation_from_messages(body.messages)
    loop = AgentLoop(
        model,
        ToolExecutors(file_tree),
        conversation,
        max_iterations=settings.max_iterations,
        context=context,
        is_cancelled=is_disconnected,
    )

    chunks = stream_chat(loop, file_tree, conversation, store, context)
    try:
        first = await anext(chunks)
    except ModelError as e:
        context.logger.error(f"Failed to generate AI response: {e.message}")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "error": "Failed to generate AI response.",
                "details": e.message,
            },
        )

    return StreamingResponse(_prepend(first, chunks), media_type=MEDIA_TYPE)
