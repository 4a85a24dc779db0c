from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

from api_doc_engine.store.memory import InMemoryRecordStore

FIXTURES = Path(__file__).parent / "fixtures"


class TickingClock:
    """Deterministic clock: every call is one second after the previous one."""

    def __init__(self, start: datetime | None = None):
        self.now = start or datetime(2026, 1, 1, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        self.now += timedelta(seconds=1)
        return self.now


@pytest.fixture
def clock():
    return TickingClock()


@pytest.fixture
def store(clock):
    return InMemoryRecordStore(clock=clock)


@pytest.fixture
def catalog_path(tmp_path):
    path = tmp_path / "catalog.yaml"
    path.write_text((FIXTURES / "catalog.yaml").read_text(encoding="utf-8"), encoding="utf-8")
    return path
