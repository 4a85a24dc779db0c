"""SQLAlchemy ORM tables for the SQL record store.

    projects 1--N api_versions 1--N endpoints
    feedback -> endpoints / api_versions (both optional)

Structured documents use the generic JSON type, so the same schema works on
SQLite and PostgreSQL. Uniqueness of version names per project and of
(path, method) per version is enforced by constraints.
"""

from datetime import datetime
from typing import Any

from sqlalchemy import JSON, DateTime, Enum, ForeignKey, String, Text, UniqueConstraint
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship

from api_doc_engine.model.base import FeedbackStatus, FeedbackType, HttpMethod, VersionStatus


class Base(DeclarativeBase):
    pass


def _enum(enum_cls, name: str) -> Enum:
    # Store the enum values ("draft"), not the member names ("DRAFT")
    return Enum(enum_cls, name=name, values_callable=lambda e: [m.value for m in e])


class ProjectRow(Base):
    __tablename__ = "projects"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    owner_id: Mapped[str] = mapped_column(String(36), nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    logo_url: Mapped[str | None] = mapped_column(String(1024), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    versions: Mapped[list["ApiVersionRow"]] = relationship(
        back_populates="project", cascade="all, delete-orphan"
    )


class ApiVersionRow(Base):
    __tablename__ = "api_versions"
    __table_args__ = (UniqueConstraint("project_id", "version_name", name="uq_version_name"),)

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    project_id: Mapped[str] = mapped_column(
        ForeignKey("projects.id", ondelete="CASCADE"), nullable=False, index=True
    )
    version_name: Mapped[str] = mapped_column(String(100), nullable=False)
    spec: Mapped[Any] = mapped_column(JSON, nullable=True)
    generated_docs: Mapped[Any] = mapped_column(JSON, nullable=True)
    status: Mapped[VersionStatus] = mapped_column(
        _enum(VersionStatus, "version_status"), nullable=False, default=VersionStatus.DRAFT
    )
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    project: Mapped[ProjectRow] = relationship(back_populates="versions")
    endpoints: Mapped[list["EndpointRow"]] = relationship(
        back_populates="api_version", cascade="all, delete-orphan"
    )


class EndpointRow(Base):
    __tablename__ = "endpoints"
    __table_args__ = (
        UniqueConstraint("api_version_id", "path", "method", name="uq_endpoint_route"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    api_version_id: Mapped[str] = mapped_column(
        ForeignKey("api_versions.id", ondelete="CASCADE"), nullable=False, index=True
    )
    path: Mapped[str] = mapped_column(String(1024), nullable=False)
    method: Mapped[HttpMethod] = mapped_column(_enum(HttpMethod, "http_method"), nullable=False)
    summary: Mapped[str | None] = mapped_column(Text, nullable=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    request_body: Mapped[Any] = mapped_column(JSON, nullable=True)
    response_schema: Mapped[Any] = mapped_column(JSON, nullable=True)
    examples: Mapped[Any] = mapped_column(JSON, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    api_version: Mapped[ApiVersionRow] = relationship(back_populates="endpoints")


class FeedbackRow(Base):
    __tablename__ = "feedback"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    user_id: Mapped[str] = mapped_column(String(36), nullable=False)
    endpoint_id: Mapped[str | None] = mapped_column(
        ForeignKey("endpoints.id", ondelete="SET NULL"), nullable=True
    )
    api_version_id: Mapped[str | None] = mapped_column(
        ForeignKey("api_versions.id", ondelete="SET NULL"), nullable=True
    )
    feedback_type: Mapped[FeedbackType] = mapped_column(
        _enum(FeedbackType, "feedback_type"), nullable=False
    )
    content: Mapped[str] = mapped_column(Text, nullable=False)
    status: Mapped[FeedbackStatus] = mapped_column(
        _enum(FeedbackStatus, "feedback_status"), nullable=False, default=FeedbackStatus.OPEN
    )
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
