"""YAML catalog — a file snapshot of a record store.

Layout:

    projects:      [{id, owner_id, name, description, ...}]
    api_versions:  [{id, project_id, version_name, status, spec, generated_docs, ...}]
    endpoints:     [{id, api_version_id, path, method, summary, request_body, ...}]
    feedback:      [{id, user_id, feedback_type, content, ...}]

Mapping key order inside structured documents is kept on load and on dump.
"""

import logging
from pathlib import Path

import yaml
from pydantic import ValidationError

from api_doc_engine.errors import StoreUnavailable
from api_doc_engine.model.base import ApiVersion, Endpoint, Feedback, Project
from api_doc_engine.store.memory import InMemoryRecordStore

logger = logging.getLogger(__name__)

# Parents before children, so inserts can check their foreign keys
SECTIONS = (
    ("projects", Project),
    ("api_versions", ApiVersion),
    ("endpoints", Endpoint),
    ("feedback", Feedback),
)


def parse_catalog(text: str) -> InMemoryRecordStore:
    """Build an in-memory store from catalog YAML text."""
    try:
        data = yaml.safe_load(text) or {}
    except yaml.YAMLError as e:
        raise StoreUnavailable(f"Catalog is not valid YAML: {e}") from e
    if not isinstance(data, dict):
        raise StoreUnavailable("Catalog must be a mapping of record sections")

    store = InMemoryRecordStore()
    for section, model in SECTIONS:
        for item in data.get(section) or []:
            try:
                record = model.model_validate(item)
            except ValidationError as e:
                raise StoreUnavailable(f"Invalid record in {section}: {e}") from e
            store.insert(record)
    return store


def load_catalog(file_path: Path) -> InMemoryRecordStore:
    """Load a catalog file into an in-memory store."""
    store = parse_catalog(file_path.read_text(encoding="utf-8"))
    logger.debug(
        "Loaded catalog %s: %d projects, %d versions, %d endpoints",
        file_path, len(store.projects), len(store.api_versions), len(store.endpoints),
    )
    return store


def dump_catalog(store: InMemoryRecordStore) -> str:
    """Serialize every record of ``store`` as catalog YAML."""
    data = {
        "projects": [p.model_dump(mode="json") for p in store.projects.values()],
        "api_versions": [
            v.model_dump(mode="json", exclude={"project_name"})
            for v in store.api_versions.values()
        ],
        "endpoints": [e.model_dump(mode="json") for e in store.endpoints.values()],
        "feedback": [f.model_dump(mode="json") for f in store.feedback.values()],
    }
    return yaml.safe_dump(data, sort_keys=False, allow_unicode=True)


def save_catalog(store: InMemoryRecordStore, file_path: Path) -> None:
    file_path.parent.mkdir(parents=True, exist_ok=True)
    file_path.write_text(dump_catalog(store), encoding="utf-8")
