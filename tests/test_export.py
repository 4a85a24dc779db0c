import asyncio

import pytest

from api_doc_engine.errors import NotFound
from api_doc_engine.generator.example import ExampleSynthesizer
from api_doc_engine.renderer.export import DocumentationExporter


def _run(coro):
    return asyncio.run(coro)


class TestDocumentationExporter:
    def test_export_document(self, store):
        async def scenario():
            project = await store.create_project(name="Petstore", owner_id="u1")
            version = await store.create_api_version(project.id, "v1")
            await store.create_endpoint(version.id, "/users", "POST", request_body={"name": "Ada"})
            await store.create_endpoint(
                version.id, "/pets", "GET", response_schema={"type": "array"}, examples={"200": []}
            )
            exporter = DocumentationExporter(store, ExampleSynthesizer(base_url="https://api.test"))
            return await exporter.export(version.id)

        doc = _run(scenario())
        assert doc["project"] == "Petstore"
        assert doc["version"] == "v1"
        assert doc["status"] == "draft"
        assert [e["path"] for e in doc["endpoints"]] == ["/pets", "/users"]

        pets, users = doc["endpoints"]
        assert pets["response_schema"] == {"type": "array"}
        assert pets["examples"] == {"200": []}
        assert set(users["code_examples"]) == {"curl", "javascript", "python"}
        assert users["code_examples"]["curl"].startswith('curl -X POST "https://api.test/users"')

    def test_missing_version(self, store):
        with pytest.raises(NotFound):
            _run(DocumentationExporter(store).export("nope"))
