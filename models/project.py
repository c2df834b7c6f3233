"""Project persistence boundary.

A project pairs a simplified conversation (plain role/content turns) with the
latest file tree snapshot. The chat route saves into a ProjectStore at most once
per request, after the agent loop has finished.
"""

import logging
import threading
import uuid
from datetime import datetime, timezone
from typing import Any, Protocol

from pydantic import BaseModel, Field

from models.messages import ConversationTurn

logger = logging.getLogger(__name__)


class ProjectNotFoundError(Exception):
    """Raised when a project id is not known to the store.

    Args:
        project_id: The id that was looked up.
    """

    def __init__(self, project_id: str):
        self.project_id = project_id
        super().__init__(f"Project '{project_id}' not found")


class SimpleMessage(BaseModel):
    """A conversation turn reduced to plain text."""

    role: str
    content: str


class Project(BaseModel):
    """A stored project.

    Args:
        id: Unique project identifier.
        name: Display name.
        messages: Simplified conversation history.
        data: Latest serialized file tree.
        created_at: When the project was created.
        updated_at: When the project was last saved.
    """

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    name: str = Field(default="New project")
    messages: list[SimpleMessage] = Field(default_factory=list)
    data: dict[str, Any] = Field(default_factory=dict)
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


def simplify_messages(turns: list[ConversationTurn]) -> list[SimpleMessage]:
    """Reduce turns to their text, dropping turns with no text.

    Block-form turns keep only their text blocks, joined by newlines, so tool
    traffic never reaches the stored history.
    """
    simple = []
    for turn in turns:
        text = turn.text()
        if turn.role in ("user", "assistant") and text.strip():
            simple.append(SimpleMessage(role=turn.role, content=text))
    return simple


class ProjectStore(Protocol):
    """Durable storage for projects."""

    def create(self, name: str = "New project") -> Project: ...

    def save(
        self,
        project_id: str,
        conversation: list[SimpleMessage],
        file_tree_snapshot: dict[str, Any],
    ) -> Project: ...

    def get(self, project_id: str) -> Project: ...


class InMemoryProjectStore:
    """Process-local ProjectStore.

    Requests never share a file tree, but they do share this store, so access is
    serialized with a lock.
    """

    def __init__(self) -> None:
        self._projects: dict[str, Project] = {}
        self._lock = threading.Lock()

    def create(self, name: str = "New project") -> Project:
        project = Project(name=name)
        with self._lock:
            self._projects[project.id] = project
        logger.info(f"Created project {project.id}")
        return project

    def save(
        self,
        project_id: str,
        conversation: list[SimpleMessage],
        file_tree_snapshot: dict[str, Any],
    ) -> Project:
        """Replace a project's conversation and file tree.

        Raises:
            ProjectNotFoundError: If the project does not exist.
        """
        with self._lock:
            project = self._projects.get(project_id)
            if project is None:
                raise ProjectNotFoundError(project_id)
            project.messages = list(conversation)
            project.data = dict(file_tree_snapshot)
            project.updated_at = datetime.now(timezone.utc)
            return project.model_copy(deep=True)

    def get(self, project_id: str) -> Project:
        """Return a copy of a stored project.

        Raises:
            ProjectNotFoundError: If the project does not exist.
        """
        with self._lock:
            project = self._projects.get(project_id)
            if project is None:
                raise ProjectNotFoundError(project_id)
            return project.model_copy(deep=True)

    def __len__(self) -> int:
        return len(self._projects)
