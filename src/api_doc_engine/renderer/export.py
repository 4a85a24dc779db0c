"""Generated docs export — the structured document stored as ApiVersion.generated_docs."""

from api_doc_engine.generator.example import ExampleSynthesizer
from api_doc_engine.model.base import ApiVersion, Endpoint
from api_doc_engine.store.base import RecordStore


def build_generated_docs(
    version: ApiVersion,
    endpoints: list[Endpoint],
    synthesizer: ExampleSynthesizer,
) -> dict:
    """Assemble the full documentation document for one version.

    Endpoints appear in path order and carry an example per supported
    language. Structured fields are copied through untouched.
    """
    return {
        "project": version.project_name,
        "version": version.version_name,
        "status": version.status.value,
        "base_url": synthesizer.base_url,
        "endpoints": [
            {
                "method": e.method.value,
                "path": e.path,
                "summary": e.summary,
                "description": e.description,
                "request_body": e.request_body,
                "response_schema": e.response_schema,
                "examples": e.examples,
                "code_examples": synthesizer.generate_all(e),
            }
            for e in sorted(endpoints, key=lambda e: e.path)
        ],
    }


class DocumentationExporter:
    """Reads a version from the store and builds its generated docs."""

    def __init__(self, store: RecordStore, synthesizer: ExampleSynthesizer | None = None):
        self.store = store
        self.synthesizer = synthesizer or ExampleSynthesizer()

    async def export(self, version_id: str) -> dict:
        version = await self.store.get_api_version(version_id)
        endpoints = await self.store.list_endpoints_by_version(version_id)
        return build_generated_docs(version, endpoints, self.synthesizer)
