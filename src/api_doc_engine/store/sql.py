"""SQL record store backed by SQLAlchemy's async ORM.

Each operation runs in its own session: commit on success, rollback on
error. Driver and database errors are reported as StoreUnavailable so the
views can degrade instead of crashing.
"""

import logging
import uuid
from collections.abc import AsyncIterator, Callable
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from pydantic import ValidationError
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from api_doc_engine.config import get_settings
from api_doc_engine.errors import DuplicateRecord, NotFound, StoreUnavailable
from api_doc_engine.model.base import (
    ApiVersion,
    Endpoint,
    Feedback,
    FeedbackType,
    HttpMethod,
    Json,
    Project,
    VersionStatus,
    utcnow,
)
from api_doc_engine.store.tables import (
    ApiVersionRow,
    Base,
    EndpointRow,
    FeedbackRow,
    ProjectRow,
)

logger = logging.getLogger(__name__)


def _aware(value: datetime) -> datetime:
    # SQLite hands back naive datetimes even for timezone=True columns
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _to_project(row: ProjectRow) -> Project:
    return Project(
        id=row.id,
        owner_id=row.owner_id,
        name=row.name,
        description=row.description,
        logo_url=row.logo_url,
        created_at=_aware(row.created_at),
        updated_at=_aware(row.updated_at),
    )


def _to_version(row: ApiVersionRow, project_name: str | None = None) -> ApiVersion:
    return ApiVersion(
        id=row.id,
        project_id=row.project_id,
        version_name=row.version_name,
        spec=row.spec,
        generated_docs=row.generated_docs,
        status=row.status,
        created_at=_aware(row.created_at),
        updated_at=_aware(row.updated_at),
        project_name=project_name,
    )


def _to_endpoint(row: EndpointRow) -> Endpoint:
    return Endpoint(
        id=row.id,
        api_version_id=row.api_version_id,
        path=row.path,
        method=row.method,
        summary=row.summary,
        description=row.description,
        request_body=row.request_body,
        response_schema=row.response_schema,
        examples=row.examples,
        created_at=_aware(row.created_at),
        updated_at=_aware(row.updated_at),
    )


def _to_feedback(row: FeedbackRow) -> Feedback:
    return Feedback(
        id=row.id,
        user_id=row.user_id,
        endpoint_id=row.endpoint_id,
        api_version_id=row.api_version_id,
        feedback_type=row.feedback_type,
        content=row.content,
        status=row.status,
        created_at=_aware(row.created_at),
    )


class SqlRecordStore:
    """RecordStore persisted through an async SQLAlchemy engine."""

    def __init__(
        self,
        database_url: str | None = None,
        echo: bool | None = None,
        clock: Callable[[], datetime] = utcnow,
    ):
        settings = get_settings()
        self.engine = create_async_engine(
            database_url or settings.database_url,
            echo=settings.database_echo if echo is None else echo,
        )
        # expire_on_commit=False keeps row attributes readable after commit
        self.session_factory = async_sessionmaker(
            bind=self.engine, class_=AsyncSession, expire_on_commit=False
        )
        self.clock = clock

    async def create_all(self) -> None:
        """Create any missing tables."""
        try:
            async with self.engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)
        except SQLAlchemyError as exc:
            raise StoreUnavailable(f"Could not create schema: {exc}") from exc

    async def dispose(self) -> None:
        await self.engine.dispose()

    @asynccontextmanager
    async def _session(self) -> AsyncIterator[AsyncSession]:
        async with self.session_factory() as session:
            try:
                yield session
                await session.commit()
            except IntegrityError as exc:
                await session.rollback()
                raise DuplicateRecord("record", str(exc.orig)) from exc
            except SQLAlchemyError as exc:
                await session.rollback()
                logger.error("Record store operation failed: %s", exc)
                raise StoreUnavailable(str(exc)) from exc
            except (ValidationError, LookupError) as exc:
                # Row the domain model rejects
                await session.rollback()
                logger.error("Malformed record in store: %s", exc)
                raise StoreUnavailable(f"Malformed record: {exc}") from exc
            except Exception:
                await session.rollback()
                raise

    # -- projects ---------------------------------------------------------

    async def get_project(self, project_id: str) -> Project:
        async with self._session() as session:
            row = await session.get(ProjectRow, project_id)
            if row is None:
                raise NotFound("Project", project_id)
            return _to_project(row)

    async def list_projects_by_owner(self, owner_id: str) -> list[Project]:
        async with self._session() as session:
            result = await session.execute(
                select(ProjectRow)
                .where(ProjectRow.owner_id == owner_id)
                .order_by(ProjectRow.updated_at.desc())
            )
            return [_to_project(row) for row in result.scalars()]

    async def create_project(
        self, name: str, owner_id: str, description: str | None = None
    ) -> Project:
        now = self.clock()
        row = ProjectRow(
            id=str(uuid.uuid4()),
            owner_id=owner_id,
            name=name,
            description=description,
            created_at=now,
            updated_at=now,
        )
        async with self._session() as session:
            session.add(row)
        return _to_project(row)

    async def update_project(
        self, project_id: str, name: str | None = None, description: str | None = None
    ) -> Project:
        async with self._session() as session:
            row = await session.get(ProjectRow, project_id)
            if row is None:
                raise NotFound("Project", project_id)
            if name is not None:
                row.name = name
            if description is not None:
                row.description = description
            row.updated_at = self.clock()
        return _to_project(row)

    # -- versions ---------------------------------------------------------

    async def get_api_version(self, version_id: str) -> ApiVersion:
        async with self._session() as session:
            result = await session.execute(
                select(ApiVersionRow, ProjectRow.name)
                .outerjoin(ProjectRow, ApiVersionRow.project_id == ProjectRow.id)
                .where(ApiVersionRow.id == version_id)
            )
            found = result.first()
            if found is None:
                raise NotFound("ApiVersion", version_id)
            row, project_name = found
            return _to_version(row, project_name)

    async def list_api_versions_by_project(self, project_id: str) -> list[ApiVersion]:
        async with self._session() as session:
            result = await session.execute(
                select(ApiVersionRow)
                .where(ApiVersionRow.project_id == project_id)
                .order_by(ApiVersionRow.created_at.desc())
            )
            return [_to_version(row) for row in result.scalars()]

    async def create_api_version(
        self, project_id: str, version_name: str, spec: Json = None
    ) -> ApiVersion:
        now = self.clock()
        async with self._session() as session:
            project = await session.get(ProjectRow, project_id)
            if project is None:
                raise NotFound("Project", project_id)
            existing = await session.scalar(
                select(ApiVersionRow.id).where(
                    ApiVersionRow.project_id == project_id,
                    ApiVersionRow.version_name == version_name,
                )
            )
            if existing is not None:
                raise DuplicateRecord("ApiVersion", version_name)
            row = ApiVersionRow(
                id=str(uuid.uuid4()),
                project_id=project_id,
                version_name=version_name,
                spec=spec,
                status=VersionStatus.DRAFT,
                created_at=now,
                updated_at=now,
            )
            session.add(row)
        return _to_version(row)

    async def update_api_version(self, version: ApiVersion) -> ApiVersion:
        async with self._session() as session:
            row = await session.get(ApiVersionRow, version.id)
            if row is None:
                raise NotFound("ApiVersion", version.id)
            row.status = version.status
            row.spec = version.spec
            row.generated_docs = version.generated_docs
            row.updated_at = version.updated_at
        return await self.get_api_version(version.id)

    # -- endpoints --------------------------------------------------------

    async def get_endpoint(self, endpoint_id: str) -> Endpoint:
        async with self._session() as session:
            row = await session.get(EndpointRow, endpoint_id)
            if row is None:
                raise NotFound("Endpoint", endpoint_id)
            return _to_endpoint(row)

    async def list_endpoints_by_version(self, api_version_id: str) -> list[Endpoint]:
        async with self._session() as session:
            result = await session.execute(
                select(EndpointRow)
                .where(EndpointRow.api_version_id == api_version_id)
                .order_by(EndpointRow.path.asc(), EndpointRow.created_at.asc())
            )
            return [_to_endpoint(row) for row in result.scalars()]

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
        now = self.clock()
        # Validate path and method through the model before touching the DB
        endpoint = Endpoint(
            id=str(uuid.uuid4()),
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
        async with self._session() as session:
            version = await session.get(ApiVersionRow, api_version_id)
            if version is None:
                raise NotFound("ApiVersion", api_version_id)
            existing = await session.scalar(
                select(EndpointRow.id).where(
                    EndpointRow.api_version_id == api_version_id,
                    EndpointRow.path == endpoint.path,
                    EndpointRow.method == endpoint.method,
                )
            )
            if existing is not None:
                raise DuplicateRecord("Endpoint", f"{endpoint.method.value} {endpoint.path}")
            session.add(EndpointRow(**endpoint.model_dump()))
        return endpoint

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
            id=str(uuid.uuid4()),
            user_id=user_id,
            feedback_type=feedback_type,
            content=content,
            endpoint_id=endpoint_id,
            api_version_id=api_version_id,
            created_at=self.clock(),
        )
        async with self._session() as session:
            session.add(FeedbackRow(**item.model_dump()))
        return item

    async def list_feedback(
        self, endpoint_id: str | None = None, api_version_id: str | None = None
    ) -> list[Feedback]:
        query = select(FeedbackRow).order_by(FeedbackRow.created_at.desc())
        if endpoint_id is not None:
            query = query.where(FeedbackRow.endpoint_id == endpoint_id)
        if api_version_id is not None:
            query = query.where(FeedbackRow.api_version_id == api_version_id)
        async with self._session() as session:
            result = await session.execute(query)
            return [_to_feedback(row) for row in result.scalars()]
