"""Exception handlers for the UIGen FastAPI application.

This module converts Python exceptions raised outside the chat stream into
consistent JSON responses. Errors inside a running stream are reported on the
stream itself (see api/routes/chat.py).
"""

import logging

from fastapi import Request, status
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from models.project import ProjectNotFoundError

logger = logging.getLogger(__name__)


# Exception Handlers
# These convert exceptions into JSON responses


async def project_not_found_handler(request: Request, exc: ProjectNotFoundError):
    """Handle ProjectNotFoundError exceptions.

    Args:
        request: The incoming request that triggered the error.
        exc: The ProjectNotFoundError exception.

    Returns:
        JSONResponse with 404 status naming the missing project.
    """
    return JSONResponse(
        status_code=status.HTTP_404_NOT_FOUND,
        content={
            "error": "Project Not Found",
            "detail": str(exc),
            "project_id": exc.project_id,
        },
    )


async def validation_exception_handler(request: Request, exc: ValidationError):
    """Handle Pydantic validation errors raised inside handlers.

    Args:
        request: The incoming request that triggered the error.
        exc: The ValidationError exception.

    Returns:
        JSONResponse with validation error details.
    """
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "error": "Validation Error",
            "detail": "The request data failed validation",
            "validation_errors": exc.errors(include_url=False, include_context=False),
        },
    )


async def value_error_handler(request: Request, exc: ValueError):
    """Handle ValueError exceptions.

    Args:
        request: The incoming request that triggered the error.
        exc: The ValueError exception.

    Returns:
        JSONResponse with 400 status.
    """
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={
            "error": "Invalid Value",
            "detail": str(exc),
            "type": "ValueError",
        },
    )


async def generic_exception_handler(request: Request, exc: Exception):
    """Handle any unhandled exceptions.

    Logs the full traceback and hides it from the client.

    Args:
        request: The incoming request that triggered the error.
        exc: The exception that was raised.

    Returns:
        JSONResponse with generic error message.
    """
    logger.error(f"Unhandled exception on {request.url.path}", exc_info=exc)

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error": "Internal Server Error",
            "detail": "An unexpected error occurred",
            "type": type(exc).__name__,
        },
    )
