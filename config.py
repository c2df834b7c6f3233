"""Application settings.

Settings come from environment variables. A ``.env`` file in the working
directory is loaded first (without overriding variables that are already set).
"""

import logging
import os
from functools import lru_cache
from typing import Mapping

from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator

from agent.loop import DEFAULT_MAX_ITERATIONS
from agent.model_client import DEFAULT_MAX_TOKENS, DEFAULT_MODEL

# Field name -> environment variable
ENV_VARS = {
    "anthropic_api_key": "ANTHROPIC_API_KEY",
    "anthropic_model": "UIGEN_MODEL",
    "max_tokens": "UIGEN_MAX_TOKENS",
    "max_iterations": "UIGEN_MAX_ITERATIONS",
    "log_level": "UIGEN_LOG_LEVEL",
}

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


class Settings(BaseModel):
    """Runtime configuration.

    Attributes:
        anthropic_api_key: API key for the model provider.
        anthropic_model: Model name used for every call.
        max_tokens: Output token limit per model call.
        max_iterations: Hard cap on agent loop iterations per request.
        log_level: Root log level name.
    """

    anthropic_api_key: str | None = Field(default=None, repr=False)
    anthropic_model: str = Field(default=DEFAULT_MODEL)
    max_tokens: int = Field(default=DEFAULT_MAX_TOKENS, ge=1)
    max_iterations: int = Field(default=DEFAULT_MAX_ITERATIONS, ge=1)
    log_level: str = Field(default="INFO")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        """Accept standard level names in any case.

        Raises:
            ValueError: If the level name is unknown.
        """
        level = value.strip().upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"Unknown log level: {value}")
        return level

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "Settings":
        """Build settings from environment variables.

        Args:
            environ: Mapping to read instead of ``os.environ``.
        """
        env = os.environ if environ is None else environ
        values = {field: env[var] for field, var in ENV_VARS.items() if env.get(var)}
        return cls(**values)


@lru_cache
def get_settings() -> Settings:
    """Return the process-wide settings, loading ``.env`` on first use."""
    load_dotenv()
    return Settings.from_env()


def configure_logging(level: str = "INFO") -> None:
    """Configure root logging for the service."""
    logging.basicConfig(level=level, format=LOG_FORMAT)
    logging.getLogger().setLevel(level)
