"""Client response models for the UIGen API client.

This module re-exports the stored project message model from the server layer
and defines the client-side response models.
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

# Re-export from the model layer for client convenience
from models.project import SimpleMessage

__all__ = [
    "SimpleMessage",
    "Project",
    "HealthResponse",
]


class Project(BaseModel):
    """A stored project as returned by the server.

    Attributes:
        id: Project identifier.
        name: Display name.
        messages: Saved conversation as plain text turns.
        data: Saved file tree snapshot.
        created_at: Creation time.
        updated_at: Last save time.
    """

    id: str
    name: str
    messages: list[SimpleMessage] = Field(default_factory=list)
    data: dict[str, Any] = Field(default_factory=dict)
    created_at: datetime
    updated_at: datetime


class HealthResponse(BaseModel):
    """Response model for the health check."""

    status: str = Field(..., description="Health status")
