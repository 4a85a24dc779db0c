"""Version lifecycle — legal status transitions for an ApiVersion.

    draft --publish--> published --deprecate--> deprecated

No transition ever leads back to draft. Any other requested change raises
InvalidTransition and leaves the version untouched.
"""

import logging
from collections.abc import Callable
from datetime import datetime

from api_doc_engine.errors import InvalidTransition
from api_doc_engine.model.base import ApiVersion, Json, VersionStatus, utcnow
from api_doc_engine.store.base import RecordStore

logger = logging.getLogger(__name__)


def allowed_transitions(status: VersionStatus) -> tuple[VersionStatus, ...]:
    """Return the statuses a version in ``status`` may move to."""
    match status:
        case VersionStatus.DRAFT:
            return (VersionStatus.PUBLISHED,)
        case VersionStatus.PUBLISHED:
            return (VersionStatus.DEPRECATED,)
        case VersionStatus.DEPRECATED:
            return ()


def transition(
    version: ApiVersion,
    target: VersionStatus | str,
    now: datetime | None = None,
) -> ApiVersion:
    """Return a copy of ``version`` moved to ``target`` with a fresh updated_at.

    Raises InvalidTransition for anything not listed by allowed_transitions.
    """
    try:
        target = VersionStatus(target)
    except ValueError:
        raise InvalidTransition(version.status.value, str(target)) from None

    if target not in allowed_transitions(version.status):
        raise InvalidTransition(version.status.value, target.value)

    return version.model_copy(update={"status": target, "updated_at": now or utcnow()})


def publish(version: ApiVersion, now: datetime | None = None) -> ApiVersion:
    return transition(version, VersionStatus.PUBLISHED, now)


def deprecate(version: ApiVersion, now: datetime | None = None) -> ApiVersion:
    return transition(version, VersionStatus.DEPRECATED, now)


class VersionLifecycleManager:
    """Applies lifecycle transitions to versions held in a record store."""

    def __init__(self, store: RecordStore, clock: Callable[[], datetime] = utcnow):
        self.store = store
        self.clock = clock

    async def set_status(self, version_id: str, target: VersionStatus | str) -> ApiVersion:
        version = await self.store.get_api_version(version_id)
        updated = transition(version, target, self.clock())
        saved = await self.store.update_api_version(updated)
        logger.info(
            "Version %s (%s): %s -> %s",
            version.version_name, version_id, version.status.value, saved.status.value,
        )
        return saved

    async def publish(self, version_id: str, generated_docs: Json = None) -> ApiVersion:
        """Publish a draft version, optionally storing a generated docs snapshot."""
        version = await self.store.get_api_version(version_id)
        updated = publish(version, self.clock())
        if generated_docs is not None:
            updated = updated.model_copy(update={"generated_docs": generated_docs})
        saved = await self.store.update_api_version(updated)
        logger.info("Published version %s (%s)", version.version_name, version_id)
        return saved

    async def deprecate(self, version_id: str) -> ApiVersion:
        return await self.set_status(version_id, VersionStatus.DEPRECATED)
