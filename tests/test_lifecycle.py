import asyncio
from datetime import datetime, timezone

import pytest

from api_doc_engine.errors import InvalidTransition, NotFound
from api_doc_engine.model.base import ApiVersion, VersionStatus
from api_doc_engine.model.lifecycle import (
    VersionLifecycleManager,
    allowed_transitions,
    deprecate,
    publish,
    transition,
)

T0 = datetime(2026, 1, 1, tzinfo=timezone.utc)
T1 = datetime(2026, 3, 1, tzinfo=timezone.utc)


def _run(coro):
    return asyncio.run(coro)


def _version(status=VersionStatus.DRAFT) -> ApiVersion:
    return ApiVersion(
        id="v1", project_id="p1", version_name="1.0", status=status, created_at=T0, updated_at=T0
    )


class TestTransitions:
    def test_publish_then_deprecate(self):
        published = publish(_version(), now=T1)
        assert published.status is VersionStatus.PUBLISHED
        deprecated = deprecate(published)
        assert deprecated.status is VersionStatus.DEPRECATED

    def test_transition_refreshes_updated_at(self):
        published = publish(_version(), now=T1)
        assert published.updated_at == T1
        assert published.created_at == T0

    def test_published_back_to_draft_rejected(self):
        with pytest.raises(InvalidTransition):
            transition(_version(VersionStatus.PUBLISHED), "draft")

    def test_deprecated_back_to_draft_rejected(self):
        with pytest.raises(InvalidTransition):
            transition(_version(VersionStatus.DEPRECATED), VersionStatus.DRAFT)

    def test_deprecated_cannot_be_published(self):
        with pytest.raises(InvalidTransition):
            publish(_version(VersionStatus.DEPRECATED))

    def test_draft_cannot_skip_to_deprecated(self):
        with pytest.raises(InvalidTransition):
            deprecate(_version())

    def test_same_state_is_not_a_noop(self):
        with pytest.raises(InvalidTransition):
            publish(_version(VersionStatus.PUBLISHED))

    def test_unknown_status_rejected(self):
        with pytest.raises(InvalidTransition) as exc_info:
            transition(_version(), "archived")
        assert exc_info.value.target == "archived"

    def test_failed_transition_preserves_status(self):
        version = _version(VersionStatus.PUBLISHED)
        with pytest.raises(InvalidTransition):
            transition(version, VersionStatus.DRAFT)
        assert version.status is VersionStatus.PUBLISHED
        assert version.updated_at == T0

    def test_allowed_transitions(self):
        assert allowed_transitions(VersionStatus.DRAFT) == (VersionStatus.PUBLISHED,)
        assert allowed_transitions(VersionStatus.PUBLISHED) == (VersionStatus.DEPRECATED,)
        assert allowed_transitions(VersionStatus.DEPRECATED) == ()


class TestVersionLifecycleManager:
    def _setup(self, store):
        async def _create():
            project = await store.create_project(name="Petstore", owner_id="u1")
            return await store.create_api_version(project.id, "v1")

        return _run(_create())

    def test_publish_persists_status(self, store, clock):
        version = self._setup(store)
        manager = VersionLifecycleManager(store, clock=clock)

        saved = _run(manager.publish(version.id))
        assert saved.status is VersionStatus.PUBLISHED
        assert saved.updated_at > version.updated_at

        stored = _run(store.get_api_version(version.id))
        assert stored.status is VersionStatus.PUBLISHED

    def test_publish_stores_generated_docs(self, store):
        version = self._setup(store)
        docs = {"version": "v1", "endpoints": []}
        saved = _run(VersionLifecycleManager(store).publish(version.id, generated_docs=docs))
        assert saved.generated_docs == docs

    def test_deprecate_after_publish(self, store):
        version = self._setup(store)
        manager = VersionLifecycleManager(store)
        _run(manager.publish(version.id))
        saved = _run(manager.deprecate(version.id))
        assert saved.status is VersionStatus.DEPRECATED

    def test_set_draft_on_published_fails_and_keeps_status(self, store):
        version = self._setup(store)
        manager = VersionLifecycleManager(store)
        _run(manager.publish(version.id))

        with pytest.raises(InvalidTransition):
            _run(manager.set_status(version.id, VersionStatus.DRAFT))
        assert _run(store.get_api_version(version.id)).status is VersionStatus.PUBLISHED

    def test_missing_version(self, store):
        with pytest.raises(NotFound):
            _run(VersionLifecycleManager(store).publish("nope"))
