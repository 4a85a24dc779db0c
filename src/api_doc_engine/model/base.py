"""Data models for projects, API versions, endpoints, and feedback.

Every record store converts its rows into these models, and the lifecycle
manager, synthesizer, and views only ever see these types.
"""

import enum
from datetime import datetime, timezone

from pydantic import BaseModel, Field, JsonValue, field_validator

# Structured documents (request bodies, schemas, examples, specs) are
# arbitrary JSON trees. Mapping key order is preserved as inserted.
Json = JsonValue


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class HttpMethod(str, enum.Enum):
    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    DELETE = "DELETE"
    PATCH = "PATCH"

    @classmethod
    def parse(cls, value: "str | HttpMethod") -> "HttpMethod":
        """Case-insensitive lookup, e.g. ``HttpMethod.parse("post")``."""
        if isinstance(value, cls):
            return value
        return cls(str(value).strip().upper())


class VersionStatus(str, enum.Enum):
    """Lifecycle state of an ApiVersion: draft -> published -> deprecated."""

    DRAFT = "draft"
    PUBLISHED = "published"
    DEPRECATED = "deprecated"


class FeedbackType(str, enum.Enum):
    BUG = "bug"
    SUGGESTION = "suggestion"
    QUESTION = "question"
    OTHER = "other"


class FeedbackStatus(str, enum.Enum):
    OPEN = "open"
    RESOLVED = "resolved"
    DISMISSED = "dismissed"


class Project(BaseModel):
    """A documented API, owned by exactly one user."""

    id: str
    owner_id: str
    name: str
    description: str | None = None
    logo_url: str | None = None
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)


class ApiVersion(BaseModel):
    """A named snapshot of a project's documented surface."""

    id: str
    project_id: str
    version_name: str
    spec: Json = None
    generated_docs: Json = None
    status: VersionStatus = VersionStatus.DRAFT
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)
    # Owning project's name, filled in by get_api_version
    project_name: str | None = None


class Endpoint(BaseModel):
    """One documented route + method pair within an ApiVersion."""

    id: str
    api_version_id: str
    path: str
    method: HttpMethod
    summary: str | None = None
    description: str | None = None
    request_body: Json = None
    response_schema: Json = None
    examples: Json = None
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    @field_validator("method", mode="before")
    @classmethod
    def _normalize_method(cls, value):
        if isinstance(value, str):
            return value.strip().upper()
        return value

    @field_validator("path")
    @classmethod
    def _check_path(cls, value: str) -> str:
        if not value.startswith("/"):
            raise ValueError(f"Endpoint path must start with '/': {value!r}")
        return value


class Feedback(BaseModel):
    """Reader feedback attached to an endpoint or a version."""

    id: str
    user_id: str
    endpoint_id: str | None = None
    api_version_id: str | None = None
    feedback_type: FeedbackType
    content: str
    status: FeedbackStatus = FeedbackStatus.OPEN
    created_at: datetime = Field(default_factory=utcnow)


class Profile(BaseModel):
    id: str
    user_type: str
    full_name: str | None = None
    avatar_url: str | None = None
