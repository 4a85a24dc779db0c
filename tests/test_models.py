import pytest
from pydantic import ValidationError

from api_doc_engine.model.base import (
    ApiVersion,
    Endpoint,
    Feedback,
    FeedbackStatus,
    HttpMethod,
    Profile,
    Project,
    VersionStatus,
)


class TestHttpMethod:
    def test_parse_is_case_insensitive(self):
        assert HttpMethod.parse("post") is HttpMethod.POST
        assert HttpMethod.parse(" Patch ") is HttpMethod.PATCH

    def test_parse_rejects_unknown_verb(self):
        with pytest.raises(ValueError):
            HttpMethod.parse("OPTIONS")


class TestEndpoint:
    def test_method_normalized_to_uppercase(self):
        ep = Endpoint(id="e1", api_version_id="v1", path="/users", method="delete")
        assert ep.method is HttpMethod.DELETE

    def test_optional_fields_default_to_none(self):
        ep = Endpoint(id="e1", api_version_id="v1", path="/users", method="GET")
        assert ep.summary is None
        assert ep.request_body is None
        assert ep.response_schema is None
        assert ep.examples is None

    def test_path_must_start_with_slash(self):
        with pytest.raises(ValidationError):
            Endpoint(id="e1", api_version_id="v1", path="users", method="GET")

    def test_unknown_method_rejected(self):
        with pytest.raises(ValidationError):
            Endpoint(id="e1", api_version_id="v1", path="/users", method="TRACE")

    def test_request_body_keeps_key_order(self):
        body = {"zeta": 1, "alpha": {"b": [1, 2], "a": None}}
        ep = Endpoint(id="e1", api_version_id="v1", path="/x", method="POST", request_body=body)
        assert list(ep.request_body) == ["zeta", "alpha"]
        assert list(ep.request_body["alpha"]) == ["b", "a"]

    def test_serialization_roundtrip(self):
        ep = Endpoint(
            id="e1",
            api_version_id="v1",
            path="/users/{id}",
            method="PUT",
            request_body={"name": "Ada", "tags": ["x"], "active": True},
        )
        ep2 = Endpoint(**ep.model_dump())
        assert ep2 == ep


class TestApiVersion:
    def test_new_version_is_draft(self):
        v = ApiVersion(id="v1", project_id="p1", version_name="1.0")
        assert v.status is VersionStatus.DRAFT
        assert v.spec is None
        assert v.generated_docs is None

    def test_status_must_be_known(self):
        with pytest.raises(ValidationError):
            ApiVersion(id="v1", project_id="p1", version_name="1.0", status="archived")


class TestProjectAndFeedback:
    def test_project_minimal(self):
        p = Project(id="p1", owner_id="u1", name="Petstore")
        assert p.description is None
        assert p.created_at.tzinfo is not None

    def test_feedback_defaults_to_open(self):
        f = Feedback(id="f1", user_id="u1", feedback_type="bug", content="Typo", endpoint_id="e1")
        assert f.status is FeedbackStatus.OPEN
        assert f.api_version_id is None

    def test_feedback_type_is_closed(self):
        with pytest.raises(ValidationError):
            Feedback(id="f1", user_id="u1", feedback_type="rant", content="...")

    def test_profile_optional_fields(self):
        profile = Profile(id="u1", user_type="developer")
        assert profile.full_name is None
        assert profile.avatar_url is None
