"""UIGen data models package.

This package contains the virtual file tree the agent edits, the conversation
and tool models exchanged with the language model, and project persistence.
"""

from models.file_tree import (
    FileNode,
    FileTree,
    FileTreeError,
    InvalidPathError,
    SerializedNode,
    SnapshotError,
    TreeInvariantError,
    normalize_path,
)
from models.messages import (
    ContentBlock,
    ConversationTurn,
    IncomingMessage,
    TextBlock,
    ToolResultBlock,
    ToolUseBlock,
    conversation_from_messages,
)
from models.project import (
    InMemoryProjectStore,
    Project,
    ProjectNotFoundError,
    ProjectStore,
    SimpleMessage,
    simplify_messages,
)
from models.tools import (
    FILE_MANAGER,
    STR_REPLACE_EDITOR,
    TOOL_DEFINITIONS,
    FileManagerInput,
    FileManagerResult,
    StrReplaceEditorInput,
    ToolDefinition,
)

__all__ = [
    "FileNode",
    "FileTree",
    "FileTreeError",
    "InvalidPathError",
    "SerializedNode",
    "SnapshotError",
    "TreeInvariantError",
    "normalize_path",
    "ContentBlock",
    "ConversationTurn",
    "IncomingMessage",
    "TextBlock",
    "ToolResultBlock",
    "ToolUseBlock",
    "conversation_from_messages",
    "InMemoryProjectStore",
    "Project",
    "ProjectNotFoundError",
    "ProjectStore",
    "SimpleMessage",
    "simplify_messages",
    "FILE_MANAGER",
    "STR_REPLACE_EDITOR",
    "TOOL_DEFINITIONS",
    "FileManagerInput",
    "FileManagerResult",
    "StrReplaceEditorInput",
    "ToolDefinition",
]
