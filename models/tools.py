"""Tool vocabulary offered to the model.

Each tool has a pydantic input model. The same model produces the JSON schema
sent to the provider and validates the arguments the model sends back.
"""

from typing import Any, Literal

from pydantic import BaseModel, Field, field_validator

STR_REPLACE_EDITOR = "str_replace_editor"
FILE_MANAGER = "file_manager"

UNDO_EDIT_UNSUPPORTED = (
    "Error: undo_edit command is not supported in this version. "
    "Use str_replace to revert changes."
)

StrReplaceCommand = Literal["view", "create", "str_replace", "insert", "undo_edit"]
FileManagerCommand = Literal["rename", "delete"]


class StrReplaceEditorInput(BaseModel):
    """Arguments of the ``str_replace_editor`` tool."""

    model_config = {"extra": "ignore"}

    command: StrReplaceCommand = Field(
        description="The command to execute: view, create, str_replace, insert, or undo_edit"
    )
    path: str = Field(description="The file path to operate on")
    file_text: str | None = Field(
        default=None, description="The content of the file (for create command)"
    )
    insert_line: int | None = Field(
        default=None,
        description="The line number to insert text at (for insert command)",
    )
    new_str: str | None = Field(
        default=None, description="The new string to replace or insert"
    )
    old_str: str | None = Field(
        default=None, description="The old string to replace (for str_replace command)"
    )
    view_range: list[int] | None = Field(
        default=None, description="The line range to view [start, end] (for view command)"
    )

    @field_validator("view_range")
    @classmethod
    def validate_view_range(cls, value: list[int] | None) -> list[int] | None:
        """Require exactly two integers when a range is given.

        Raises:
            ValueError: If the range does not have two entries.
        """
        if value is not None and len(value) != 2:
            raise ValueError("view_range must contain exactly two integers [start, end]")
        return value


class FileManagerInput(BaseModel):
    """Arguments of the ``file_manager`` tool."""

    model_config = {"extra": "ignore"}

    command: FileManagerCommand = Field(description="The operation to perform")
    path: str = Field(
        description="The path to the file or directory to rename or delete"
    )
    new_path: str | None = Field(
        default=None,
        description="The new path. Only provide when renaming or moving a file.",
    )


class FileManagerResult(BaseModel):
    """Structured outcome of a ``file_manager`` command.

    Args:
        success: Whether the command changed the tree as requested.
        message: Human-readable success description.
        error: Failure description.
    """

    success: bool
    message: str | None = None
    error: str | None = None

    def to_text(self) -> str:
        return self.model_dump_json(exclude_none=True)


class ToolDefinition(BaseModel):
    """A tool declaration in the provider's format."""

    name: str
    description: str
    input_schema: dict[str, Any]


def _input_schema(model: type[BaseModel]) -> dict[str, Any]:
    schema = model.model_json_schema()
    schema.pop("title", None)
    for prop in schema.get("properties", {}).values():
        prop.pop("title", None)
    return schema


TOOL_DEFINITIONS = [
    ToolDefinition(
        name=STR_REPLACE_EDITOR,
        description=(
            "A text editor tool for viewing and editing files in the virtual file "
            "system. Supports viewing file contents, creating new files, replacing "
            "strings, inserting text at specific lines, and more."
        ),
        input_schema=_input_schema(StrReplaceEditorInput),
    ),
    ToolDefinition(
        name=FILE_MANAGER,
        description=(
            'Rename or delete files or folders in the file system. Rename can be used '
            'to "move" a file. Rename will recursively create folders as required.'
        ),
        input_schema=_input_schema(FileManagerInput),
    ),
]
