"""Unit tests for ToolExecutors.

Tests cover dispatch of both tools onto a FileTree and the textual results
returned for every failure mode.
"""

import json

import pytest

from agent.executors import ToolExecutors
from models.file_tree import TreeInvariantError
from models.tools import UNDO_EDIT_UNSUPPORTED
from tests.fixtures.file_trees import APP_SOURCE


class TestStrReplaceEditor:
    """Tests for the str_replace_editor tool."""

    def test_create_file(self, empty_tree):
        """Test that create stores the exact content."""
        executors = ToolExecutors(empty_tree)

        result = executors.execute(
            "str_replace_editor",
            {"command": "create", "path": "/App.jsx", "file_text": "export default () => null;"},
        )

        assert result == "File created successfully: /App.jsx"
        assert empty_tree.read_file("/App.jsx") == "export default () => null;"

    def test_create_without_text_makes_empty_file(self, empty_tree):
        """Test that a missing file_text creates an empty file."""
        ToolExecutors(empty_tree).execute("str_replace_editor", {"command": "create", "path": "/a.txt"})

        assert empty_tree.read_file("/a.txt") == ""

    def test_view(self, sample_tree):
        """Test that view returns numbered lines."""
        result = ToolExecutors(sample_tree).execute(
            "str_replace_editor", {"command": "view", "path": "/App.jsx", "view_range": [1, 1]}
        )

        assert result == "1\texport default function App() {"

    def test_str_replace(self, sample_tree):
        """Test a replacement through the tool."""
        result = ToolExecutors(sample_tree).execute(
            "str_replace_editor",
            {"command": "str_replace", "path": "/App.jsx", "old_str": "Counter", "new_str": "Timer"},
        )

        assert result == "Text replaced successfully in /App.jsx"
        assert "<Timer />" in sample_tree.read_file("/App.jsx")

    def test_insert(self, sample_tree):
        """Test an insert through the tool."""
        ToolExecutors(sample_tree).execute(
            "str_replace_editor",
            {"command": "insert", "path": "/App.jsx", "insert_line": 0, "new_str": "import React from 'react';"},
        )

        assert sample_tree.read_file("/App.jsx").startswith("import React from 'react';\n")

    def test_undo_edit_unsupported(self, sample_tree):
        """Test that undo_edit is answered with a fixed error."""
        result = ToolExecutors(sample_tree).execute(
            "str_replace_editor", {"command": "undo_edit", "path": "/App.jsx"}
        )

        assert result == UNDO_EDIT_UNSUPPORTED
        assert sample_tree.read_file("/App.jsx") == APP_SOURCE

    def test_invalid_input(self, empty_tree):
        """Test that arguments failing validation become an error result."""
        result = ToolExecutors(empty_tree).execute("str_replace_editor", {"command": "explode"})

        assert result.startswith("Error: Invalid input for str_replace_editor:")
        assert "command" in result
        assert "path" in result

    def test_non_dict_input(self, empty_tree):
        """Test that a non-object input is treated as empty."""
        result = ToolExecutors(empty_tree).execute("str_replace_editor", "not a dict")

        assert result.startswith("Error: Invalid input")


class TestFileManager:
    """Tests for the file_manager tool."""

    def test_rename(self, sample_tree):
        """Test a successful rename."""
        result = ToolExecutors(sample_tree).execute(
            "file_manager", {"command": "rename", "path": "/App.jsx", "new_path": "/src/App.jsx"}
        )

        assert json.loads(result) == {
            "success": True,
            "message": "Successfully renamed /App.jsx to /src/App.jsx",
        }
        assert sample_tree.is_file("/src/App.jsx")

    def test_rename_without_new_path(self, sample_tree):
        """Test that rename requires new_path."""
        result = ToolExecutors(sample_tree).execute(
            "file_manager", {"command": "rename", "path": "/App.jsx"}
        )

        assert json.loads(result) == {
            "success": False,
            "error": "new_path is required for rename command",
        }

    def test_failed_rename(self, sample_tree):
        """Test that a failed rename reports failure."""
        result = ToolExecutors(sample_tree).execute(
            "file_manager", {"command": "rename", "path": "/missing", "new_path": "/x"}
        )

        assert json.loads(result)["success"] is False

    def test_delete(self, sample_tree):
        """Test deleting a directory."""
        result = ToolExecutors(sample_tree).execute(
            "file_manager", {"command": "delete", "path": "/components"}
        )

        assert json.loads(result) == {"success": True, "message": "Successfully deleted /components"}
        assert not sample_tree.exists("/components/Counter.jsx")

    def test_failed_delete(self, empty_tree):
        """Test deleting a missing path."""
        result = ToolExecutors(empty_tree).execute("file_manager", {"command": "delete", "path": "/x"})

        assert json.loads(result) == {"success": False, "error": "Failed to delete /x"}

    def test_invalid_command(self, empty_tree):
        """Test that an unknown command fails validation."""
        result = ToolExecutors(empty_tree).execute("file_manager", {"command": "copy", "path": "/x"})

        assert json.loads(result)["success"] is False


class TestDispatch:
    """Tests for dispatch and error containment."""

    def test_unknown_tool(self, empty_tree):
        """Test that unknown tools return an error result."""
        executors = ToolExecutors(empty_tree)

        assert not executors.has_tool("web_search")
        assert executors.execute("web_search", {}) == "Error: Unknown tool: web_search"

    def test_tool_names(self, empty_tree):
        """Test the registered tool names."""
        assert ToolExecutors(empty_tree).tool_names == ["str_replace_editor", "file_manager"]

    def test_unexpected_failure_becomes_result(self, empty_tree):
        """Test that an unexpected exception is returned as text."""
        def explode(tool_input):
            raise OSError("disk on fire")

        executors = ToolExecutors(empty_tree)
        executors._handlers["str_replace_editor"] = explode

        result = executors.execute("str_replace_editor", {"command": "create", "path": "/a"})

        assert result == "Error: str_replace_editor failed: disk on fire"

    def test_invariant_error_propagates(self, sample_tree):
        """Test that a corrupted tree is never reported as a tool result."""
        sample_tree.root.children["ghost"] = 999

        with pytest.raises(TreeInvariantError):
            ToolExecutors(sample_tree).execute(
                "str_replace_editor", {"command": "view", "path": "/ghost"}
            )
