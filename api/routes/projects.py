"""Project endpoints.

Create projects and read back their saved conversation and file tree.
"""

from datetime import datetime
from typing import Any

from fastapi import APIRouter
from pydantic import BaseModel, Field

from api.dependencies import ProjectStoreDep
from models.project import SimpleMessage

router = APIRouter(
    prefix="/projects",
    tags=["projects"],
)


class CreateProjectRequest(BaseModel):
    """Request model for creating a project.

    Attributes:
        name: Display name of the project.
    """

    name: str = Field(
        default="New project", min_length=1, max_length=200, description="Project name"
    )


class ProjectResponse(BaseModel):
    """Response model for a stored project.

    Attributes:
        id: Project identifier.
        name: Display name.
        messages: Saved conversation, reduced to plain text turns.
        data: Saved file tree snapshot.
        created_at: Creation time.
        updated_at: Last save time.
    """

    id: str
    name: str
    messages: list[SimpleMessage]
    data: dict[str, Any]
    created_at: datetime
    updated_at: datetime


@router.post("", response_model=ProjectResponse, status_code=201)
async def create_project(request: CreateProjectRequest, store: ProjectStoreDep) -> ProjectResponse:
    """Create an empty project.

    Args:
        request: Project name.
        store: The project store dependency.

    Returns:
        The new project.
    """
    project = store.create(request.name)
    return ProjectResponse(**project.model_dump())


@router.get("/{project_id}", response_model=ProjectResponse)
async def get_project(project_id: str, store: ProjectStoreDep) -> ProjectResponse:
    """Get a project's saved conversation and file tree.

    Raises ProjectNotFoundError (HTTP 404) for unknown ids.
    """
    project = store.get(project_id)
    return ProjectResponse(**project.model_dump())
