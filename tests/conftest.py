"""Pytest configuration and shared fixtures."""

# Load environment variables from .env file at test startup
# This ensures configuration is available before fixtures are created
from dotenv import load_dotenv
load_dotenv()

# Import all fixtures from fixture modules
pytest_plugins = [
    "tests.fixtures.file_trees",
    "tests.fixtures.model",
    "tests.fixtures.api",
]
