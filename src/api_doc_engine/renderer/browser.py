"""Project browser — the dashboard (projects of an owner) and project page (its versions)."""

import logging
from datetime import datetime

from pydantic import BaseModel

from api_doc_engine.errors import NotFound, StoreUnavailable
from api_doc_engine.model.base import Project, VersionStatus
from api_doc_engine.renderer.view import GENERIC_ERROR, ViewPhase
from api_doc_engine.store.base import RecordStore

logger = logging.getLogger(__name__)


class ProjectListing(BaseModel):
    owner_id: str
    projects: list[Project] = []
    error: str | None = None


class VersionSummary(BaseModel):
    id: str
    version_name: str
    status: VersionStatus
    badge: str
    created_at: datetime


class ProjectPage(BaseModel):
    phase: ViewPhase
    project: Project | None = None
    versions: list[VersionSummary] = []
    error: str | None = None


def status_badge(status: VersionStatus | str) -> str:
    """Badge colour for a version status."""
    match VersionStatus(status):
        case VersionStatus.PUBLISHED:
            return "green"
        case VersionStatus.DRAFT:
            return "yellow"
        case VersionStatus.DEPRECATED:
            return "slate"


class ProjectBrowser:
    """Read-mostly views over an owner's projects and their versions."""

    def __init__(self, store: RecordStore):
        self.store = store

    async def dashboard(self, owner_id: str) -> ProjectListing:
        """Projects of ``owner_id``, most recently updated first."""
        try:
            projects = await self.store.list_projects_by_owner(owner_id)
        except StoreUnavailable:
            logger.exception("Could not list projects for %s", owner_id)
            return ProjectListing(owner_id=owner_id, error=GENERIC_ERROR)
        return ProjectListing(owner_id=owner_id, projects=projects)

    async def create_project(
        self, owner_id: str, name: str, description: str | None = None
    ) -> Project:
        name = name.strip()
        if not name:
            raise ValueError("Project name must not be empty")
        project = await self.store.create_project(
            name=name, owner_id=owner_id, description=description or None
        )
        logger.info("Created project %s (%s) for %s", project.name, project.id, owner_id)
        return project

    async def project_page(self, project_id: str) -> ProjectPage:
        try:
            project = await self.store.get_project(project_id)
            versions = await self.store.list_api_versions_by_project(project_id)
        except NotFound:
            return ProjectPage(phase=ViewPhase.NOT_FOUND)
        except StoreUnavailable:
            logger.exception("Could not load project %s", project_id)
            return ProjectPage(phase=ViewPhase.ERROR, error=GENERIC_ERROR)

        return ProjectPage(
            phase=ViewPhase.READY,
            project=project,
            versions=[
                VersionSummary(
                    id=v.id,
                    version_name=v.version_name,
                    status=v.status,
                    badge=status_badge(v.status),
                    created_at=v.created_at,
                )
                for v in versions
            ],
        )
