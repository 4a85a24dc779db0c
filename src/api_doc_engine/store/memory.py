"""In-memory record store.

Backs the CLI (through the YAML catalog) and the test suite. Records are
kept as pydantic models and copied on the way in and out, so callers never
share mutable state with the store.
"""

import uuid
from collections.abc import Callable
from datetime import datetime

from pydantic import BaseModel

from api_doc_engine.errors import DuplicateRecord, NotFound
from api_doc_engine.model.base import (
    ApiVersion,
    Endpoint,
    Feedback,
    FeedbackType,
    HttpMethod,
    Json,
    Project,
    utcnow,
)


def _new_id() -> str:
    return str(uuid.uuid4())


class InMemoryRecordStore:
    """RecordStore kept entirely in process memory."""

    def __init__(self, clock: Callable[[], datetime] = utcnow):
        self.clock = clock
        self.projects: dict[str, Project] = {}
        self.api_versions: dict[str, ApiVersion] = {}
        self.endpoints: dict[str, Endpoint] = {}
        self.feedback: dict[str, Feedback] = {}

    # -- bulk access used by the catalog ---------------------------------

    def insert(self, record: BaseModel) -> None:
        """Insert a fully-formed record, keeping its id and timestamps."""
        if isinstance(record, Project):
            self.projects[record.id] = record.model_copy(deep=True)
        elif isinstance(record, ApiVersion):
            self._require_project(record.project_id)
            self._check_version_name(record.project_id, record.version_name, record.id)
            self.api_versions[record.id] = record.model_copy(
                update={"project_name": None}, deep=True
            )
        elif isinstance(record, Endpoint):
            self._require_version(record.api_version_id)
            self._check_route(record.api_version_id, record.path, record.method, record.id)
            self.endpoints[record.id] = record.model_copy(deep=True)
        elif isinstance(record, Feedback):
            self.feedback[record.id] = record.model_copy(deep=True)
        else:
            raise TypeError(f"Unsupported record type: {type(record).__name__}")

    # -- projects ---------------------------------------------------------

    async def get_project(self, project_id: str) -> Project:
        return self._require_project(project_id).model_copy(deep=True)

    async def list_projects_by_owner(self, owner_id: str) -> list[Project]:
        owned = [p for p in self.projects.values() if p.owner_id == owner_id]
        owned.sort(key=lambda p: p.updated_at, reverse=True)
        return [p.model_copy(deep=True) for p in owned]

    async def create_project(
        self, name: str, owner_id: str, description: str | None = None
    ) -> Project:
        now = self.clock()
        project = Project(
            id=_new_id(),
            owner_id=owner_id,
            name=name,
            description=description,
            created_at=now,
            updated_at=now,
        )
        self.projects[project.id] = project
        return project.model_copy(deep=True)

    async def update_project(
        self, project_id: str, name: str | None = None, description: str | None = None
    ) -> Project:
        project = self._require_project(project_id)
        changes: dict = {"updated_at": self.clock()}
        if name is not None:
            changes["name"] = name
        if description is not None:
            changes["description"] = description
        self.projects[project_id] = project.model_copy(update=changes)
        return self.projects[project_id].model_copy(deep=True)

    # -- versions ---------------------------------------------------------

    async def get_api_version(self, version_id: str) -> ApiVersion:
        version = self._require_version(version_id)
        project = self.projects.get(version.project_id)
        return version.model_copy(
            update={"project_name": project.name if project else None}, deep=True
        )

    async def list_api_versions_by_project(self, project_id: str) -> list[ApiVersion]:
        versions = [v for v in self.api_versions.values() if v.project_id == project_id]
        versions.sort(key=lambda v: v.created_at, reverse=True)
        return [v.model_copy(deep=True) for v in versions]

    async def create_api_version(
        self, project_id: str, version_name: str, spec: Json = None
    ) -> ApiVersion:
        self._require_project(project_id)
        self._check_version_name(project_id, version_name)
        now = self.clock()
        version = ApiVersion(
            id=_new_id(),
            project_id=project_id,
            version_name=version_name,
            spec=spec,
            created_at=now,
            updated_at=now,
        )
        self.api_versions[version.id] = version
        return version.model_copy(deep=True)

    async def update_api_version(self, version: ApiVersion) -> ApiVersion:
        current = self._require_version(version.id)
        self.api_versions[version.id] = current.model_copy(
            update={
                "status": version.status,
                "spec": version.spec,
                "generated_docs": version.generated_docs,
                "updated_at": version.updated_at,
            },
            deep=True,
        )
        return await self.get_api_version(version.id)

    # -- endpoints --------------------------------------------------------

    async def get_endpoint(self, endpoint_id: str) -> Endpoint:
        endpoint = self.endpoints.get(endpoint_id)
        if endpoint is None:
            raise NotFound("Endpoint", endpoint_id)
        return endpoint.model_copy(deep=True)

    async def list_endpoints_by_version(self, api_version_id: str) -> list[Endpoint]:
        endpoints = [e for e in self.endpoints.values() if e.api_version_id == api_version_id]
        endpoints.sort(key=lambda e: e.path)
        return [e.model_copy(deep=True) for e in endpoints]

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
    ) -> Endpoint:
        self._require_version(api_version_id)
        now = self.clock()
        endpoint = Endpoint(
            id=_new_id(),
            api_version_id=api_version_id,
            path=path,
            method=method,
            summary=summary,
            description=description,
            request_body=request_body,
            response_schema=response_schema,
            examples=examples,
            created_at=now,
            updated_at=now,
        )
        self._check_route(api_version_id, endpoint.path, endpoint.method)
        self.endpoints[endpoint.id] = endpoint
        return endpoint.model_copy(deep=True)

    # -- feedback ---------------------------------------------------------

    async def create_feedback(
        self,
        user_id: str,
        feedback_type: FeedbackType | str,
        content: str,
        endpoint_id: str | None = None,
        api_version_id: str | None = None,
    ) -> Feedback:
        item = Feedback(
            id=_new_id(),
            user_id=user_id,
            feedback_type=feedback_type,
            content=content,
            endpoint_id=endpoint_id,
            api_version_id=api_version_id,
            created_at=self.clock(),
        )
        self.feedback[item.id] = item
        return item.model_copy(deep=True)

    async def list_feedback(
        self, endpoint_id: str | None = None, api_version_id: str | None = None
    ) -> list[Feedback]:
        items = [
            f
            for f in self.feedback.values()
            if (endpoint_id is None or f.endpoint_id == endpoint_id)
            and (api_version_id is None or f.api_version_id == api_version_id)
        ]
        items.sort(key=lambda f: f.created_at, reverse=True)
        return [f.model_copy(deep=True) for f in items]

    # -- helpers ----------------------------------------------------------

    def _require_project(self, project_id: str) -> Project:
        project = self.projects.get(project_id)
        if project is None:
            raise NotFound("Project", project_id)
        return project

    def _require_version(self, version_id: str) -> ApiVersion:
        version = self.api_versions.get(version_id)
        if version is None:
            raise NotFound("ApiVersion", version_id)
        return version

    def _check_version_name(self, project_id: str, version_name: str, own_id: str | None = None):
        for v in self.api_versions.values():
            if v.project_id == project_id and v.version_name == version_name and v.id != own_id:
                raise DuplicateRecord("ApiVersion", version_name)

    def _check_route(self, api_version_id: str, path: str, method: HttpMethod, own_id: str | None = None):
        for e in self.endpoints.values():
            if (
                e.api_version_id == api_version_id
                and e.path == path
                and e.method == method
                and e.id != own_id
            ):
                raise DuplicateRecord("Endpoint", f"{method.value} {path}")
