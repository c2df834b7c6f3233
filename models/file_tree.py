"""Virtual file system model.

The FileTree keeps every node in one owning table keyed by a stable integer id.
Parent and child links are ids into that table, so rename and delete only rewrite
edges; no node is ever reachable from two places.

Editing operations mirror the tools the agent is given. They return a message
string (success text, or text starting with ``Error:``) instead of raising, so the
caller can hand the result straight back to the model. Only broken internal
invariants raise, via TreeInvariantError.
"""

import logging
from typing import Any, Iterator, Literal

from pydantic import BaseModel, Field, ValidationError, field_validator

logger = logging.getLogger(__name__)

ROOT_PATH = "/"
ROOT_ID = 0

NodeType = Literal["file", "directory"]


class FileTreeError(Exception):
    """Base class for recoverable file tree errors."""


class InvalidPathError(FileTreeError, ValueError):
    """Raised when a path cannot be normalized into a safe absolute path."""


class SnapshotError(FileTreeError, ValueError):
    """Raised when a serialized snapshot cannot be loaded into a tree.

    The tree the snapshot was loaded into is left untouched.
    """


class TreeInvariantError(RuntimeError):
    """Raised when the node table stops describing a single rooted tree.

    This is a programming error, never a user error, and is deliberately not a
    FileTreeError so tool-level error handling does not absorb it.
    """


def normalize_path(path: str) -> str:
    """Normalize a path into the absolute form used as a tree key.

    Adds the leading slash when missing, collapses duplicate slashes and ``.``
    segments, and drops any trailing slash (except for the root).

    Args:
        path: Path as supplied by a tool call or snapshot.

    Returns:
        The normalized absolute path.

    Raises:
        InvalidPathError: If the path is not a string, contains a NUL character,
            or contains a ``..`` segment.
    """
    if not isinstance(path, str):
        raise InvalidPathError(f"Path must be a string, got {type(path).__name__}")
    if "\x00" in path:
        raise InvalidPathError("Path must not contain NUL characters")

    segments = []
    for segment in path.strip().split("/"):
        if segment in ("", "."):
            continue
        if segment == "..":
            raise InvalidPathError(f"Path must not contain '..' segments: {path}")
        segments.append(segment)

    return ROOT_PATH + "/".join(segments)


def split_path(path: str) -> list[str]:
    """Split a normalized path into its segments (empty for the root)."""
    return [segment for segment in path.split("/") if segment]


def join_path(parent: str, name: str) -> str:
    """Join a normalized directory path and a child name."""
    if parent == ROOT_PATH:
        return ROOT_PATH + name
    return f"{parent}/{name}"


class FileNode(BaseModel):
    """A single entry in the node table.

    Args:
        node_id: Stable identifier of this node within its tree.
        name: Last path segment ("" for the root).
        type: Either "file" or "directory".
        parent_id: Id of the owning directory (None only for the root).
        content: File content (files only).
        children: Ordered mapping of child name to child node id (directories only).
    """

    node_id: int = Field(description="Stable identifier of this node")
    name: str = Field(description="Last path segment")
    type: NodeType = Field(description="Node type")
    parent_id: int | None = Field(default=None, description="Owning directory id")
    content: str | None = Field(default=None, description="File content")
    children: dict[str, int] = Field(
        default_factory=dict, description="Child name to child node id"
    )

    @property
    def is_file(self) -> bool:
        return self.type == "file"

    @property
    def is_directory(self) -> bool:
        return self.type == "directory"


class SerializedNode(BaseModel):
    """Wire form of one node in a snapshot.

    Extra keys sent by older clients (for example nested ``children``) are ignored;
    the snapshot key is the authoritative path.

    Args:
        type: Either "file" or "directory".
        name: Last path segment.
        path: Normalized absolute path.
        content: File content (files only).
    """

    model_config = {"extra": "ignore"}

    type: NodeType
    name: str | None = None
    path: str | None = None
    content: str | None = None

    @field_validator("content")
    @classmethod
    def validate_content(cls, value: str | None) -> str | None:
        """Validate content is encodable as UTF-8.

        JSON escapes can smuggle lone surrogates into a string; such content
        could never be written back out.

        Raises:
            ValueError: If the content contains unencodable characters.
        """
        if value is not None:
            try:
                value.encode("utf-8")
            except UnicodeEncodeError as e:
                raise ValueError(f"content is not valid UTF-8 text: {e.reason}") from e
        return value


def _new_root() -> dict[int, FileNode]:
    return {ROOT_ID: FileNode(node_id=ROOT_ID, name="", type="directory")}


class FileTree(BaseModel):
    """In-memory, path-addressed hierarchy of files and directories.

    Args:
        nodes: The owning node table, keyed by node id.
        next_id: Next id to hand out.
    """

    nodes: dict[int, FileNode] = Field(default_factory=_new_root)
    next_id: int = Field(default=ROOT_ID + 1)

    @classmethod
    def from_snapshot(cls, snapshot: Any) -> "FileTree":
        """Build a tree from a serialized snapshot.

        Args:
            snapshot: A mapping of path to serialized node.

        Returns:
            The loaded tree.

        Raises:
            SnapshotError: If the snapshot is malformed.
        """
        tree = cls()
        tree.deserialize_from_nodes(snapshot)
        return tree

    # ===== Lookup =====

    @property
    def root(self) -> FileNode:
        return self.nodes[ROOT_ID]

    def _resolve(self, path: str) -> FileNode | None:
        node = self.root
        for segment in split_path(path):
            if not node.is_directory:
                return None
            child_id = node.children.get(segment)
            if child_id is None:
                return None
            node = self._node(child_id)
        return node

    def _node(self, node_id: int) -> FileNode:
        try:
            return self.nodes[node_id]
        except KeyError:
            raise TreeInvariantError(f"Dangling node id {node_id}") from None

    def _lookup(self, path: str) -> FileNode | None:
        try:
            return self._resolve(normalize_path(path))
        except InvalidPathError:
            return None

    def path_of(self, node: FileNode) -> str:
        """Rebuild the absolute path of a node by walking its parent links."""
        segments = []
        seen = set()
        current = node
        while current.parent_id is not None:
            if current.node_id in seen:
                raise TreeInvariantError(f"Cycle detected at node {current.node_id}")
            seen.add(current.node_id)
            segments.append(current.name)
            current = self._node(current.parent_id)
        if current.node_id != ROOT_ID:
            raise TreeInvariantError(f"Node {node.node_id} is not attached to the root")
        return ROOT_PATH + "/".join(reversed(segments))

    def exists(self, path: str) -> bool:
        return self._lookup(path) is not None

    def is_file(self, path: str) -> bool:
        node = self._lookup(path)
        return node is not None and node.is_file

    def is_directory(self, path: str) -> bool:
        node = self._lookup(path)
        return node is not None and node.is_directory

    def walk(self, node: FileNode | None = None) -> Iterator[tuple[str, FileNode]]:
        """Yield (path, node) pairs below ``node`` in pre-order.

        Children are visited in insertion order. The starting node itself is
        not yielded.
        """
        start = node or self.root
        stack = [(self.path_of(start), start)]
        while stack:
            path, current = stack.pop()
            ordered = [
                (join_path(path, name), self._node(child_id))
                for name, child_id in current.children.items()
            ]
            for child_path, child in reversed(ordered):
                stack.append((child_path, child))
            if current is not start:
                yield path, current

    def list_paths(self) -> list[str]:
        return [path for path, _node in self.walk()]

    def file_count(self) -> int:
        return sum(1 for _path, node in self.walk() if node.is_file)

    # ===== Arena primitives =====

    def _allocate(self, name: str, node_type: NodeType, content: str | None = None) -> FileNode:
        node = FileNode(
            node_id=self.next_id,
            name=name,
            type=node_type,
            content=content if node_type == "file" else None,
        )
        self.nodes[node.node_id] = node
        self.next_id += 1
        return node

    def _attach(self, parent: FileNode, node: FileNode) -> None:
        if not parent.is_directory:
            raise TreeInvariantError(f"Cannot attach node under file node {parent.node_id}")
        ancestor: FileNode | None = parent
        while ancestor is not None:
            if ancestor.node_id == node.node_id:
                raise TreeInvariantError(
                    f"Attaching node {node.node_id} under node {parent.node_id} would create a cycle"
                )
            ancestor = self._node(ancestor.parent_id) if ancestor.parent_id is not None else None
        if node.name in parent.children:
            raise TreeInvariantError(
                f"Directory node {parent.node_id} already has a child named {node.name!r}"
            )
        parent.children[node.name] = node.node_id
        node.parent_id = parent.node_id

    def _detach(self, node: FileNode) -> None:
        if node.parent_id is None:
            raise TreeInvariantError("The root cannot be detached")
        parent = self._node(node.parent_id)
        if parent.children.get(node.name) != node.node_id:
            raise TreeInvariantError(
                f"Node {node.node_id} is not registered with its parent {parent.node_id}"
            )
        del parent.children[node.name]
        node.parent_id = None

    def _subtree_ids(self, node: FileNode) -> list[int]:
        ids = [node.node_id]
        stack = [node]
        while stack:
            current = stack.pop()
            for child_id in current.children.values():
                ids.append(child_id)
                stack.append(self._node(child_id))
        return ids

    def _ensure_directory(self, path: str) -> FileNode | None:
        """Return the directory at ``path``, creating missing ancestors.

        Returns None when some prefix of the path is an existing file.
        """
        node = self.root
        for segment in split_path(path):
            child_id = node.children.get(segment)
            if child_id is None:
                child = self._allocate(segment, "directory")
                self._attach(node, child)
                node = child
                continue
            node = self._node(child_id)
            if not node.is_directory:
                return None
        return node

    # ===== Editing operations =====

    def create_file_with_parents(self, path: str, content: str = "") -> str:
        """Create or overwrite a file, creating missing parent directories.

        Args:
            path: Target file path.
            content: New file content.

        Returns:
            A success message, or an ``Error:`` message.
        """
        try:
            normalized = normalize_path(path)
        except InvalidPathError as e:
            return f"Error: {e}"
        if normalized == ROOT_PATH:
            return "Error: Cannot create a file at the root path"

        existing = self._resolve(normalized)
        if existing is not None:
            if existing.is_directory:
                return f"Error: Path is a directory: {normalized}"
            existing.content = content
            return f"File overwritten successfully: {normalized}"

        segments = split_path(normalized)
        parent = self._ensure_directory(ROOT_PATH + "/".join(segments[:-1]))
        if parent is None:
            return f"Error: A parent of {normalized} is a file"
        self._attach(parent, self._allocate(segments[-1], "file", content))
        return f"File created successfully: {normalized}"

    def read_file(self, path: str) -> str | None:
        """Return the content of a file, or None when there is no such file."""
        node = self._lookup(path)
        if node is None or not node.is_file:
            return None
        return node.content or ""

    def view_file(self, path: str, view_range: list[int] | tuple[int, int] | None = None) -> str:
        """Render a file with 1-based line numbers, or list a directory.

        Args:
            path: File or directory path.
            view_range: Optional inclusive ``[start, end]`` line range. An ``end``
                past the last line is clamped and ``-1`` means the last line.

        Returns:
            The numbered lines (tab separated), a directory listing, or an
            ``Error:`` message.
        """
        try:
            normalized = normalize_path(path)
        except InvalidPathError as e:
            return f"Error: {e}"
        node = self._resolve(normalized)
        if node is None:
            return f"Error: File not found: {normalized}"

        if node.is_directory:
            if not node.children:
                return "(empty directory)"
            entries = []
            for name, child_id in node.children.items():
                child = self._node(child_id)
                entries.append(f"{name}/" if child.is_directory else name)
            return "\n".join(entries)

        content = node.content or ""
        if content == "":
            if view_range:
                return f"Error: Cannot view a line range of an empty file: {normalized}"
            return "(empty file)"

        lines = content.split("\n")
        start, end = 1, len(lines)
        if view_range is not None:
            if len(view_range) != 2:
                return "Error: view_range must contain exactly two integers [start, end]"
            start, end = int(view_range[0]), int(view_range[1])
            if end == -1 or end > len(lines):
                end = len(lines)
            if start < 1 or start > len(lines):
                return (
                    f"Error: Invalid view_range start {start}; "
                    f"the file has {len(lines)} lines"
                )
            if start > end:
                return f"Error: Invalid view_range [{start}, {end}]: start is after end"

        return "\n".join(
            f"{number}\t{lines[number - 1]}" for number in range(start, end + 1)
        )

    def replace_in_file(self, path: str, old: str, new: str) -> str:
        """Replace the first occurrence of ``old`` with ``new`` in a file.

        Args:
            path: File path.
            old: Text to find. Must be non-empty and present in the file.
            new: Replacement text.

        Returns:
            A success message, or an ``Error:`` message (file left unchanged).
        """
        try:
            normalized = normalize_path(path)
        except InvalidPathError as e:
            return f"Error: {e}"
        node = self._resolve(normalized)
        if node is None or not node.is_file:
            return f"Error: File not found: {normalized}"
        if not old:
            return "Error: old_str must not be empty"

        content = node.content or ""
        occurrences = content.count(old)
        if occurrences == 0:
            return f'Error: String not found in file: "{old}"'

        node.content = content.replace(old, new, 1)
        if occurrences > 1:
            return (
                f"Replaced first of {occurrences} occurrences successfully in {normalized}"
            )
        return f"Text replaced successfully in {normalized}"

    def insert_in_file(self, path: str, line_number: int, text: str) -> str:
        """Insert ``text`` as a new line after 0-based ``line_number``.

        Args:
            path: File path.
            line_number: Line after which to insert (0 inserts before the first
                line). Values past the end of the file insert at the end.
            text: Text to insert.

        Returns:
            A success message, or an ``Error:`` message.
        """
        try:
            normalized = normalize_path(path)
        except InvalidPathError as e:
            return f"Error: {e}"
        node = self._resolve(normalized)
        if node is None or not node.is_file:
            return f"Error: File not found: {normalized}"
        if line_number < 0:
            return f"Error: Invalid line number {line_number}"

        content = node.content or ""
        lines = content.split("\n") if content else []
        position = min(line_number, len(lines))
        lines.insert(position, text)
        node.content = "\n".join(lines)
        return f"Text inserted successfully at line {position} in {normalized}"

    def rename(self, path: str, new_path: str) -> bool:
        """Move a file or directory subtree to ``new_path``.

        Missing ancestors of ``new_path`` are created. Descendants of a moved
        directory keep their structure under the new prefix.

        Returns:
            True on success. False, with nothing changed, when the source is
            missing, a path is invalid or the root, the destination exists, an
            ancestor of the destination is a file, or the destination lies inside
            the source.
        """
        try:
            source_path = normalize_path(path)
            target_path = normalize_path(new_path)
        except InvalidPathError as e:
            logger.debug(f"Rename rejected: {e}")
            return False
        if ROOT_PATH in (source_path, target_path):
            return False

        node = self._resolve(source_path)
        if node is None:
            return False
        if source_path == target_path:
            return True
        if target_path.startswith(source_path + "/"):
            return False
        if self._resolve(target_path) is not None:
            return False

        target_segments = split_path(target_path)
        parent_path = ROOT_PATH + "/".join(target_segments[:-1])

        # Check the destination ancestry before creating anything.
        probe = self.root
        for segment in split_path(parent_path):
            child_id = probe.children.get(segment)
            if child_id is None:
                break
            probe = self._node(child_id)
            if not probe.is_directory:
                return False

        parent = self._ensure_directory(parent_path)
        if parent is None:
            raise TreeInvariantError(f"Destination ancestry changed while renaming to {target_path}")
        self._detach(node)
        node.name = target_segments[-1]
        self._attach(parent, node)
        return True

    def delete_file(self, path: str) -> bool:
        """Delete a node and, for directories, its whole subtree.

        Returns:
            True on success, False for a missing path or the root.
        """
        try:
            normalized = normalize_path(path)
        except InvalidPathError:
            return False
        if normalized == ROOT_PATH:
            return False
        node = self._resolve(normalized)
        if node is None:
            return False

        subtree = self._subtree_ids(node)
        self._detach(node)
        for node_id in subtree:
            del self.nodes[node_id]
        return True

    # ===== Serialization =====

    def serialize(self) -> dict[str, dict[str, Any]]:
        """Return the flat snapshot of this tree.

        Keys are normalized paths in pre-order; the root is implicit.
        """
        snapshot: dict[str, dict[str, Any]] = {}
        for path, node in self.walk():
            entry: dict[str, Any] = {"type": node.type, "name": node.name, "path": path}
            if node.is_file:
                entry["content"] = node.content or ""
            snapshot[path] = entry
        return snapshot

    def deserialize_from_nodes(self, snapshot: Any) -> None:
        """Replace the contents of this tree with a snapshot.

        The snapshot is loaded into a fresh node table first and only swapped in
        once every entry has been accepted.

        Args:
            snapshot: Mapping of path to serialized node.

        Raises:
            SnapshotError: If the snapshot is malformed or self-contradictory.
        """
        if not isinstance(snapshot, dict):
            raise SnapshotError(
                f"Snapshot must be a mapping of path to node, got {type(snapshot).__name__}"
            )

        staged = FileTree()
        for raw_path, raw_node in snapshot.items():
            try:
                path = normalize_path(raw_path)
                entry = SerializedNode.model_validate(raw_node)
            except (InvalidPathError, ValidationError) as e:
                raise SnapshotError(f"Invalid snapshot entry {raw_path!r}: {e}") from e

            if path == ROOT_PATH:
                if entry.type != "directory":
                    raise SnapshotError("The root entry must be a directory")
                continue

            existing = staged._resolve(path)
            if entry.type == "directory":
                if existing is not None and not existing.is_directory:
                    raise SnapshotError(f"Snapshot declares {path} as both file and directory")
                if existing is None and staged._ensure_directory(path) is None:
                    raise SnapshotError(f"A parent of {path} is declared as a file")
                continue

            if existing is not None:
                if existing.is_directory:
                    raise SnapshotError(f"Snapshot declares {path} as both file and directory")
                raise SnapshotError(f"Snapshot declares {path} more than once")
            segments = split_path(path)
            parent = staged._ensure_directory(ROOT_PATH + "/".join(segments[:-1]))
            if parent is None:
                raise SnapshotError(f"A parent of {path} is declared as a file")
            staged._attach(parent, staged._allocate(segments[-1], "file", entry.content or ""))

        self.nodes = staged.nodes
        self.next_id = staged.next_id
