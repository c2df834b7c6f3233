"""Projects sub-client for the UIGen API.

This module provides ProjectsClient and AsyncProjectsClient for the project
endpoints (/projects/*).

This is an internal module. Import from `client` instead.
"""

from typing import TYPE_CHECKING

from client._base import AsyncBaseClient, BaseClient
from client.models import Project

if TYPE_CHECKING:
    from client._http import AsyncHTTPClient, HTTPClient


class ProjectsClient(BaseClient):
    """Synchronous client for project endpoints."""

    _BASE_PATH = "/projects"

    def __init__(self, http_client: "HTTPClient") -> None:
        super().__init__(http_client)

    def create(self, name: str = "New project") -> Project:
        """Create an empty project.

        Args:
            name: Display name of the project.

        Returns:
            The new project.

        Raises:
            ValidationError: If the name is empty or too long.
        """
        data = self._post(self._BASE_PATH, json={"name": name})
        return Project(**data)

    def get(self, project_id: str) -> Project:
        """Get a project's saved conversation and file tree.

        Raises:
            NotFoundError: If no project has this id.
        """
        data = self._get(f"{self._BASE_PATH}/{project_id}")
        return Project(**data)


class AsyncProjectsClient(AsyncBaseClient):
    """Asynchronous client for project endpoints."""

    _BASE_PATH = "/projects"

    def __init__(self, http_client: "AsyncHTTPClient") -> None:
        super().__init__(http_client)

    async def create(self, name: str = "New project") -> Project:
        """Create an empty project.

        Raises:
            ValidationError: If the name is empty or too long.
        """
        data = await self._post(self._BASE_PATH, json={"name": name})
        return Project(**data)

    async def get(self, project_id: str) -> Project:
        """Get a project's saved conversation and file tree.

        Raises:
            NotFoundError: If no project has this id.
        """
        data = await self._get(f"{self._BASE_PATH}/{project_id}")
        return Project(**data)
