"""Main entry point for the UIGen agent FastAPI application.

This module creates and configures the FastAPI app instance that serves the chat
stream and project endpoints.

To run the development server:
    uv run uvicorn main:app --reload

To run in production:
    uv run uvicorn main:app --host 0.0.0.0 --port 8000
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from pydantic import ValidationError

from api.dependencies import initialize_project_store, shutdown_project_store
from api.exceptions import (
    generic_exception_handler,
    project_not_found_handler,
    validation_exception_handler,
    value_error_handler,
)
from api.routes import chat as chat_routes
from api.routes import projects as project_routes
from config import configure_logging, get_settings
from models.project import ProjectNotFoundError

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage application lifespan events.

    Configures logging and creates the project store at startup, and drops the
    store at shutdown.

    Args:
        app: The FastAPI application instance.

    Yields:
        Control back to FastAPI to handle requests.
    """
    settings = get_settings()
    configure_logging(settings.log_level)
    logger.info(f"Starting UIGen agent (model={settings.anthropic_model})")
    initialize_project_store()

    yield  # App runs and handles requests here

    logger.info("Shutting down UIGen agent")
    shutdown_project_store()


# Create the FastAPI application instance
app = FastAPI(
    title="UIGen Agent",
    description="Streams an AI agent editing a virtual project of source files",
    version="0.1.0",
    lifespan=lifespan,
)

# Register exception handlers
# Order matters: specific exceptions before general ones
app.add_exception_handler(ProjectNotFoundError, project_not_found_handler)
app.add_exception_handler(ValidationError, validation_exception_handler)
app.add_exception_handler(ValueError, value_error_handler)
app.add_exception_handler(Exception, generic_exception_handler)

# Register route modules
app.include_router(chat_routes.router)
app.include_router(project_routes.router)


@app.get("/")
async def root():
    """Root endpoint - returns a welcome message.

    Returns:
        A dictionary with a welcome message.
    """
    return {
        "message": "Welcome to the UIGen agent API",
        "version": "0.1.0",
        "docs_url": "/docs",
    }


@app.get("/health")
async def health_check():
    """Health check endpoint for monitoring.

    Returns:
        A dictionary indicating the service is healthy.
    """
    return {"status": "healthy"}
