import json
from unittest.mock import AsyncMock, patch

import yaml
from click.testing import CliRunner

from api_doc_engine.cli import main
from api_doc_engine.errors import StoreUnavailable
from api_doc_engine.store.catalog import load_catalog
from api_doc_engine.store.memory import InMemoryRecordStore


class TestCliLanguages:
    def test_lists_languages(self):
        result = CliRunner().invoke(main, ["languages"])
        assert result.exit_code == 0
        assert result.output.splitlines() == ["curl\tcURL", "javascript\tJavaScript", "python\tPython"]


class TestCliVersions:
    def test_lists_versions_newest_first(self, catalog_path):
        result = CliRunner().invoke(main, ["versions", str(catalog_path), "proj-pets"])
        assert result.exit_code == 0
        lines = result.output.splitlines()
        assert lines[0] == "Petstore"
        assert lines[1].split("\t")[:2] == ["  v2", "draft"]
        assert lines[2].split("\t")[:2] == ["  v1", "draft"]

    def test_unknown_project(self, catalog_path):
        result = CliRunner().invoke(main, ["versions", str(catalog_path), "nope"])
        assert result.exit_code == 1
        assert "not found" in result.output

    def test_store_failure_is_reported_not_raised(self, catalog_path):
        failing = AsyncMock(side_effect=StoreUnavailable("disk gone"))
        with patch.object(InMemoryRecordStore, "get_project", failing):
            result = CliRunner().invoke(main, ["versions", str(catalog_path), "proj-pets"])
        assert result.exit_code == 1
        assert isinstance(result.exception, SystemExit)
        assert "Could not load project 'proj-pets': Something went wrong" in result.output


class TestCliExample:
    def test_defaults_to_first_endpoint(self, catalog_path):
        result = CliRunner().invoke(main, [
            "example", str(catalog_path), "ver-1", "--base-url", "https://api.test",
        ])
        assert result.exit_code == 0
        assert result.output.strip() == 'curl -X GET "https://api.test/pets"'

    def test_by_path_and_method_in_python(self, catalog_path):
        result = CliRunner().invoke(main, [
            "example", str(catalog_path), "ver-1",
            "--path", "/users", "--method", "post",
            "-l", "python", "--base-url", "https://api.test",
        ])
        assert result.exit_code == 0
        assert "requests.post(" in result.output
        assert '"admin": false' in result.output

    def test_by_endpoint_id(self, catalog_path):
        result = CliRunner().invoke(main, [
            "example", str(catalog_path), "ver-1", "--endpoint", "ep-post-users", "-l", "javascript",
        ])
        assert result.exit_code == 0
        assert 'method: "POST"' in result.output

    def test_unknown_route(self, catalog_path):
        result = CliRunner().invoke(main, [
            "example", str(catalog_path), "ver-1", "--path", "/nope",
        ])
        assert result.exit_code == 1
        assert "No endpoint GET /nope" in result.output

    def test_version_without_endpoints(self, catalog_path):
        result = CliRunner().invoke(main, ["example", str(catalog_path), "ver-2"])
        assert result.exit_code == 0
        assert "No endpoint selected." in result.output

    def test_unknown_version(self, catalog_path):
        result = CliRunner().invoke(main, ["example", str(catalog_path), "nope"])
        assert result.exit_code == 1

    def test_language_choice_is_closed(self, catalog_path):
        result = CliRunner().invoke(main, ["example", str(catalog_path), "ver-1", "-l", "ruby"])
        assert result.exit_code == 2


class TestCliDocs:
    def test_json_to_file(self, catalog_path, tmp_path):
        output = tmp_path / "docs" / "v1.json"
        result = CliRunner().invoke(main, [
            "docs", str(catalog_path), "ver-1", "--format", "json", "-o", str(output),
        ])
        assert result.exit_code == 0
        doc = json.loads(output.read_text(encoding="utf-8"))
        assert doc["project"] == "Petstore"
        assert [e["path"] for e in doc["endpoints"]] == ["/pets", "/users"]

    def test_yaml_to_stdout(self, catalog_path):
        result = CliRunner().invoke(main, ["docs", str(catalog_path), "ver-1"])
        assert result.exit_code == 0
        doc = yaml.safe_load(result.output)
        assert doc["version"] == "v1"


class TestCliLifecycle:
    def test_publish_then_deprecate(self, catalog_path):
        runner = CliRunner()
        result = runner.invoke(main, ["publish", str(catalog_path), "ver-1"])
        assert result.exit_code == 0
        assert "v1 is now published" in result.output

        stored = load_catalog(catalog_path).api_versions["ver-1"]
        assert stored.status.value == "published"
        assert stored.generated_docs["version"] == "v1"

        result = runner.invoke(main, ["deprecate", str(catalog_path), "ver-1"])
        assert result.exit_code == 0
        assert load_catalog(catalog_path).api_versions["ver-1"].status.value == "deprecated"

    def test_illegal_transition_leaves_catalog_untouched(self, catalog_path):
        before = catalog_path.read_text(encoding="utf-8")
        result = CliRunner().invoke(main, ["deprecate", str(catalog_path), "ver-1"])
        assert result.exit_code == 1
        assert "Cannot move version" in result.output
        assert catalog_path.read_text(encoding="utf-8") == before

    def test_broken_catalog(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("projects: [unclosed", encoding="utf-8")
        result = CliRunner().invoke(main, ["versions", str(path), "p1"])
        assert result.exit_code == 1
        assert "Could not load catalog" in result.output
