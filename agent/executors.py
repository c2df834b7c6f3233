"""Tool executors bound to a FileTree.

Every executor returns a string. Tool-level problems (bad arguments, missing
files, failed renames) come back as text so the agent loop can feed them to the
model as an ordinary tool result. Only TreeInvariantError escapes.
"""

import logging
from typing import Any, Callable

from pydantic import ValidationError

from models.file_tree import FileTree, TreeInvariantError
from models.tools import (
    FILE_MANAGER,
    STR_REPLACE_EDITOR,
    TOOL_DEFINITIONS,
    UNDO_EDIT_UNSUPPORTED,
    FileManagerInput,
    FileManagerResult,
    StrReplaceEditorInput,
    ToolDefinition,
)

logger = logging.getLogger(__name__)


def _format_validation_error(error: ValidationError) -> str:
    return "; ".join(
        f"{'.'.join(str(part) for part in err['loc']) or 'input'}: {err['msg']}"
        for err in error.errors()
    )


class ToolExecutors:
    """Dispatches tool calls onto one FileTree.

    Attributes:
        file_tree: The tree every command operates on.
    """

    def __init__(self, file_tree: FileTree) -> None:
        self.file_tree = file_tree
        self._handlers: dict[str, Callable[[dict[str, Any]], str]] = {
            STR_REPLACE_EDITOR: self._str_replace_editor,
            FILE_MANAGER: self._file_manager,
        }

    @property
    def definitions(self) -> list[ToolDefinition]:
        return list(TOOL_DEFINITIONS)

    @property
    def tool_names(self) -> list[str]:
        return list(self._handlers)

    def has_tool(self, name: str) -> bool:
        return name in self._handlers

    def execute(self, name: str, tool_input: Any) -> str:
        """Run one tool call.

        Args:
            name: Tool name from the tool-use block.
            tool_input: Raw arguments from the tool-use block.

        Returns:
            The tool's textual result. Errors are returned, not raised.

        Raises:
            TreeInvariantError: If the tree is found in an impossible state.
        """
        handler = self._handlers.get(name)
        if handler is None:
            return f"Error: Unknown tool: {name}"

        try:
            return handler(tool_input if isinstance(tool_input, dict) else {})
        except TreeInvariantError:
            raise
        except Exception as e:
            logger.exception(f"Tool {name} failed unexpectedly")
            return f"Error: {name} failed: {e}"

    def _str_replace_editor(self, tool_input: dict[str, Any]) -> str:
        try:
            args = StrReplaceEditorInput.model_validate(tool_input)
        except ValidationError as e:
            return f"Error: Invalid input for {STR_REPLACE_EDITOR}: {_format_validation_error(e)}"

        tree = self.file_tree
        if args.command == "view":
            return tree.view_file(args.path, args.view_range)
        if args.command == "create":
            return tree.create_file_with_parents(args.path, args.file_text or "")
        if args.command == "str_replace":
            return tree.replace_in_file(args.path, args.old_str or "", args.new_str or "")
        if args.command == "insert":
            return tree.insert_in_file(args.path, args.insert_line or 0, args.new_str or "")
        if args.command == "undo_edit":
            return UNDO_EDIT_UNSUPPORTED
        return f"Error: Unknown command {args.command}"

    def _file_manager(self, tool_input: dict[str, Any]) -> str:
        try:
            args = FileManagerInput.model_validate(tool_input)
        except ValidationError as e:
            return FileManagerResult(
                success=False,
                error=f"Invalid input for {FILE_MANAGER}: {_format_validation_error(e)}",
            ).to_text()

        if args.command == "rename":
            if not args.new_path:
                return FileManagerResult(
                    success=False, error="new_path is required for rename command"
                ).to_text()
            if self.file_tree.rename(args.path, args.new_path):
                return FileManagerResult(
                    success=True,
                    message=f"Successfully renamed {args.path} to {args.new_path}",
                ).to_text()
            return FileManagerResult(
                success=False, error=f"Failed to rename {args.path} to {args.new_path}"
            ).to_text()

        if args.command == "delete":
            if self.file_tree.delete_file(args.path):
                return FileManagerResult(
                    success=True, message=f"Successfully deleted {args.path}"
                ).to_text()
            return FileManagerResult(
                success=False, error=f"Failed to delete {args.path}"
            ).to_text()

        return FileManagerResult(success=False, error="Invalid command").to_text()
