"""Record store protocol.

Every persistence backend (in-memory, SQL) exposes these coroutines. Lookups
of a missing id raise NotFound; backend failures raise StoreUnavailable.
"""

from typing import Protocol

from api_doc_engine.model.base import (
    ApiVersion,
    Endpoint,
    Feedback,
    FeedbackType,
    HttpMethod,
    Json,
    Project,
)


class RecordStore(Protocol):
    async def get_project(self, project_id: str) -> Project: ...

    async def list_projects_by_owner(self, owner_id: str) -> list[Project]:
        """Projects owned by ``owner_id``, most recently updated first."""
        ...

    async def create_project(
        self, name: str, owner_id: str, description: str | None = None
    ) -> Project: ...

    async def update_project(
        self, project_id: str, name: str | None = None, description: str | None = None
    ) -> Project: ...

    async def get_api_version(self, version_id: str) -> ApiVersion:
        """The version with its owning project's name joined in."""
        ...

    async def list_api_versions_by_project(self, project_id: str) -> list[ApiVersion]:
        """Versions of ``project_id``, newest first."""
        ...

    async def create_api_version(
        self, project_id: str, version_name: str, spec: Json = None
    ) -> ApiVersion: ...

    async def update_api_version(self, version: ApiVersion) -> ApiVersion:
        """Persist status, spec and generated_docs of an existing version."""
        ...

    async def get_endpoint(self, endpoint_id: str) -> Endpoint: ...

    async def list_endpoints_by_version(self, api_version_id: str) -> list[Endpoint]:
        """Endpoints of ``api_version_id`` ordered by path ascending."""
        ...

    async def create_endpoint(
        self,
        api_version_id: str,
        path: str,
        method: HttpMethod | str,
        summary: str | None = None,
        description: str | None = None,
        request_body: Json = None,
        response_schema: Json = None,
        examples: Json = None,
    ) -> Endpoint: ...

    async def create_feedback(
        self,
        user_id: str,
        feedback_type: FeedbackType | str,
        content: str,
        endpoint_id: str | None = None,
        api_version_id: str | None = None,
    ) -> Feedback: ...

    async def list_feedback(
        self, endpoint_id: str | None = None, api_version_id: str | None = None
    ) -> list[Feedback]: ...
