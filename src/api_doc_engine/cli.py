"""CLI entry point for api-doc-engine."""

import asyncio
import json
from pathlib import Path

import click
import yaml

from api_doc_engine.config import configure_logging
from api_doc_engine.errors import ApiDocError
from api_doc_engine.generator.example import SUPPORTED_LANGUAGES, ExampleSynthesizer
from api_doc_engine.model.base import Endpoint, HttpMethod
from api_doc_engine.model.lifecycle import VersionLifecycleManager
from api_doc_engine.renderer.browser import ProjectBrowser
from api_doc_engine.renderer.export import DocumentationExporter
from api_doc_engine.renderer.view import DocumentationView, ViewPhase
from api_doc_engine.store.catalog import load_catalog, save_catalog

LANGUAGE_CHOICES = [lang.value for lang in SUPPORTED_LANGUAGES]
METHOD_CHOICES = [m.value for m in HttpMethod]

catalog_argument = click.argument("catalog", type=click.Path(exists=True, dir_okay=False, path_type=Path))


def _run(coro):
    """Run a coroutine, reporting engine errors as CLI errors."""
    try:
        return asyncio.run(coro)
    except ApiDocError as e:
        raise click.ClickException(str(e)) from e


def _load(catalog: Path):
    try:
        return load_catalog(catalog)
    except ApiDocError as e:
        raise click.ClickException(f"Could not load catalog {catalog}: {e}") from e


def _find_endpoint(endpoints: list[Endpoint], path: str, method: str) -> Endpoint | None:
    for endpoint in endpoints:
        if endpoint.path == path and endpoint.method == HttpMethod.parse(method):
            return endpoint
    return None


@click.group()
@click.option("--log-level", default=None, help="Logging level (default from APIDOC_LOG_LEVEL).")
def main(log_level: str | None):
    """API Doc Engine — browse versioned API docs and generate client call examples."""
    configure_logging(log_level)


@main.command()
def languages():
    """List the supported example languages."""
    for lang in SUPPORTED_LANGUAGES:
        click.echo(f"{lang.value}\t{lang.label}")


@main.command()
@catalog_argument
@click.argument("project_id")
def versions(catalog: Path, project_id: str):
    """List the versions of a project, newest first."""
    store = _load(catalog)
    page = _run(ProjectBrowser(store).project_page(project_id))
    if page.phase is ViewPhase.NOT_FOUND:
        raise click.ClickException(f"Project {project_id!r} not found")
    if page.phase is ViewPhase.ERROR:
        raise click.ClickException(f"Could not load project {project_id!r}: {page.error}")

    click.echo(f"{page.project.name}")
    if not page.versions:
        click.echo("  (no versions)")
    for v in page.versions:
        click.echo(f"  {v.version_name}\t{v.status.value}\t{v.id}")


@main.command()
@catalog_argument
@click.argument("version_id")
@click.option("--endpoint", "endpoint_id", default=None, help="Endpoint id (default: first by path).")
@click.option("--path", default=None, help="Endpoint path, used together with --method.")
@click.option("--method", default="GET", type=click.Choice(METHOD_CHOICES, case_sensitive=False), help="Endpoint method.")
@click.option("-l", "--language", default=None, type=click.Choice(LANGUAGE_CHOICES), help="Example language.")
@click.option("--base-url", default=None, help="Base URL used in the example.")
def example(catalog: Path, version_id: str, endpoint_id: str | None, path: str | None,
            method: str, language: str | None, base_url: str | None):
    """Print a client call example for an endpoint of a version."""
    store = _load(catalog)
    view = DocumentationView(store, ExampleSynthesizer(base_url=base_url), language=language)
    state = _run(view.load(version_id))
    if state.phase is ViewPhase.NOT_FOUND:
        raise click.ClickException(f"Version {version_id!r} not found")
    if state.phase is ViewPhase.ERROR:
        raise click.ClickException(f"Could not load version {version_id!r}: {state.error}")

    try:
        if endpoint_id:
            view.select_endpoint(endpoint_id)
        elif path:
            found = _find_endpoint(view.endpoints, path, method)
            if found is None:
                raise click.ClickException(f"No endpoint {method.upper()} {path} in version {version_id!r}")
            view.select_endpoint(found.id)
    except ApiDocError as e:
        raise click.ClickException(str(e)) from e

    code = view.example()
    view.close()
    if code is None:
        click.echo("No endpoint selected.", err=True)
        return
    click.echo(code)


@main.command()
@catalog_argument
@click.argument("version_id")
@click.option("-o", "--output", default=None, type=click.Path(path_type=Path), help="Write the document to a file instead of stdout.")
@click.option("--format", "fmt", default="yaml", type=click.Choice(["yaml", "json"]), help="Output format.")
@click.option("--base-url", default=None, help="Base URL used in the examples.")
def docs(catalog: Path, version_id: str, output: Path | None, fmt: str, base_url: str | None):
    """Export the generated documentation of a version."""
    store = _load(catalog)
    exporter = DocumentationExporter(store, ExampleSynthesizer(base_url=base_url))
    document = _run(exporter.export(version_id))

    if fmt == "json":
        text = json.dumps(document, indent=2, ensure_ascii=False) + "\n"
    else:
        text = yaml.safe_dump(document, sort_keys=False, allow_unicode=True)

    if output is None:
        click.echo(text, nl=False)
        return
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(text, encoding="utf-8")
    click.echo(f"Documentation saved to {output}")


@main.command()
@catalog_argument
@click.argument("version_id")
@click.option("--base-url", default=None, help="Base URL used in the stored examples.")
def publish(catalog: Path, version_id: str, base_url: str | None):
    """Publish a draft version and store its generated documentation."""
    store = _load(catalog)

    async def _publish():
        exporter = DocumentationExporter(store, ExampleSynthesizer(base_url=base_url))
        document = await exporter.export(version_id)
        return await VersionLifecycleManager(store).publish(version_id, generated_docs=document)

    version = _run(_publish())
    save_catalog(store, catalog)
    click.echo(f"Version {version.version_name} is now {version.status.value}")


@main.command()
@catalog_argument
@click.argument("version_id")
def deprecate(catalog: Path, version_id: str):
    """Deprecate a published version."""
    store = _load(catalog)
    version = _run(VersionLifecycleManager(store).deprecate(version_id))
    save_catalog(store, catalog)
    click.echo(f"Version {version.version_name} is now {version.status.value}")
