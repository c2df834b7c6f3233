"""Dependency injection providers for the FastAPI application.

This module defines dependencies that can be injected into route handlers,
providing access to settings, the model client and the project store.
"""

from typing import Annotated, Awaitable, Callable

from fastapi import Depends, Request

from agent.model_client import AnthropicModelClient, ModelClient
from config import Settings, get_settings
from models.project import InMemoryProjectStore, ProjectStore


# Global state
# Projects live in process memory; a database-backed store can replace this.
_project_store: ProjectStore | None = None
_model_client: ModelClient | None = None


def get_project_store() -> ProjectStore:
    """Get the shared ProjectStore instance.

    Returns:
        The shared ProjectStore instance.

    Raises:
        RuntimeError: If the store hasn't been initialized yet.
    """
    if _project_store is None:
        raise RuntimeError(
            "ProjectStore not initialized. Call initialize_project_store() first."
        )

    return _project_store


def initialize_project_store() -> ProjectStore:
    """Initialize the shared ProjectStore instance.

    This should be called once when the FastAPI app starts up.

    Returns:
        The newly created store.
    """
    global _project_store

    _project_store = InMemoryProjectStore()
    return _project_store


def shutdown_project_store() -> None:
    """Drop the shared ProjectStore and model client."""
    global _project_store, _model_client

    _project_store = None
    _model_client = None


def get_model_client(settings: Annotated[Settings, Depends(get_settings)]) -> ModelClient:
    """Get the shared model client, creating it from settings on first use.

    Tests override this dependency with a scripted client.

    Args:
        settings: Application settings.

    Returns:
        The model client used by the agent loop.
    """
    global _model_client

    if _model_client is None:
        _model_client = AnthropicModelClient(
            api_key=settings.anthropic_api_key,
            model=settings.anthropic_model,
            max_tokens=settings.max_tokens,
        )
    return _model_client


DisconnectCheck = Callable[[], Awaitable[bool]]


def get_disconnect_check(request: Request) -> DisconnectCheck:
    """Get the check the agent loop polls to notice a departed client.

    Args:
        request: The incoming request.

    Returns:
        An async callable that is true once the client has disconnected.
    """
    return request.is_disconnected


# Type aliases for dependency injection
SettingsDep = Annotated[Settings, Depends(get_settings)]
ModelClientDep = Annotated[ModelClient, Depends(get_model_client)]
ProjectStoreDep = Annotated[ProjectStore, Depends(get_project_store)]
DisconnectCheckDep = Annotated[DisconnectCheck, Depends(get_disconnect_check)]
