"""Documentation view — navigable, stateful rendering of one ApiVersion.

A DocumentationView owns its state (active endpoint, current language,
example cache) and only ever reads from the record store. Store failures are
turned into view phases here; they never escape load().
"""

import asyncio
import enum
import logging

from pydantic import BaseModel

from api_doc_engine.config import get_settings
from api_doc_engine.errors import NotFound, StoreUnavailable, UnsupportedLanguage
from api_doc_engine.generator.example import (
    SUPPORTED_LANGUAGES,
    ExampleSynthesizer,
    Language,
    parse_language,
    pretty_json,
)
from api_doc_engine.model.base import ApiVersion, Endpoint, HttpMethod, VersionStatus
from api_doc_engine.store.base import RecordStore

logger = logging.getLogger(__name__)

GENERIC_ERROR = "Something went wrong"


class ViewPhase(str, enum.Enum):
    IDLE = "idle"
    LOADING = "loading"
    READY = "ready"
    NOT_FOUND = "not_found"
    ERROR = "error"


class ViewState(BaseModel):
    """Serializable selection state of one documentation view."""

    version_id: str | None = None
    phase: ViewPhase = ViewPhase.IDLE
    active_endpoint_id: str | None = None
    language: Language = Language.CURL
    error: str | None = None


class NavItem(BaseModel):
    endpoint_id: str
    method: HttpMethod
    path: str
    badge: str
    active: bool


class EndpointDetail(BaseModel):
    id: str
    method: HttpMethod
    path: str
    badge: str
    summary: str | None = None
    description: str | None = None
    request_body: str | None = None
    response_schema: str | None = None


class LanguageOption(BaseModel):
    value: Language
    label: str


class DocumentationPage(BaseModel):
    """Everything needed to draw the documentation page for one version."""

    phase: ViewPhase
    title: str = ""
    project_name: str | None = None
    version_name: str | None = None
    status: VersionStatus | None = None
    error: str | None = None
    endpoints: list[NavItem] = []
    active: EndpointDetail | None = None
    language: Language
    languages: list[LanguageOption] = []
    example: str | None = None


def method_badge(method: HttpMethod | str) -> str:
    """Badge colour for an HTTP method."""
    match HttpMethod.parse(method):
        case HttpMethod.GET:
            return "green"
        case HttpMethod.POST:
            return "blue"
        case HttpMethod.PUT:
            return "yellow"
        case HttpMethod.DELETE:
            return "red"
        case HttpMethod.PATCH:
            return "purple"


class DocumentationView:
    """One session's view of an ApiVersion's documentation."""

    def __init__(
        self,
        store: RecordStore,
        synthesizer: ExampleSynthesizer | None = None,
        language: Language | str | None = None,
        concurrent_fetch: bool | None = None,
    ):
        settings = get_settings()
        self.store = store
        self.synthesizer = synthesizer or ExampleSynthesizer()
        self.concurrent_fetch = (
            settings.concurrent_fetch if concurrent_fetch is None else concurrent_fetch
        )
        initial = parse_language(language or settings.default_language)
        if initial is None:
            raise UnsupportedLanguage(str(language or settings.default_language))

        self.state = ViewState(language=initial)
        self.version: ApiVersion | None = None
        self.endpoints: list[Endpoint] = []
        self._examples: dict[tuple[str, Language], str] = {}
        # Bumped by every load() and by close(); older fetches check it and bail
        self._generation = 0
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def active_endpoint(self) -> Endpoint | None:
        for endpoint in self.endpoints:
            if endpoint.id == self.state.active_endpoint_id:
                return endpoint
        return None

    async def load(self, version_id: str) -> ViewState:
        """Fetch the version and its endpoints, then select the first endpoint."""
        self._check_open()
        self._generation += 1
        generation = self._generation
        self.state = self.state.model_copy(
            update={
                "version_id": version_id,
                "phase": ViewPhase.LOADING,
                "active_endpoint_id": None,
                "error": None,
            }
        )

        try:
            if self.concurrent_fetch:
                version, endpoints = await self._fetch_concurrently(version_id)
            else:
                version = await self.store.get_api_version(version_id)
                if self._is_stale(generation):
                    return self._discard(version_id)
                endpoints = await self.store.list_endpoints_by_version(version_id)
        except NotFound:
            if self._is_stale(generation):
                return self._discard(version_id)
            logger.info("Version %s not found", version_id)
            self._reset(ViewPhase.NOT_FOUND)
            return self.state
        except StoreUnavailable:
            if self._is_stale(generation):
                return self._discard(version_id)
            logger.exception("Could not load documentation for version %s", version_id)
            self._reset(ViewPhase.ERROR, GENERIC_ERROR)
            return self.state
        except Exception:
            # Unexpected store faults still end the LOADING phase
            if self._is_stale(generation):
                return self._discard(version_id)
            logger.exception("Unexpected failure loading version %s", version_id)
            self._reset(ViewPhase.ERROR, GENERIC_ERROR)
            return self.state

        if self._is_stale(generation):
            return self._discard(version_id)

        self.version = version
        self.endpoints = list(endpoints)
        self._examples.clear()
        self.state = self.state.model_copy(
            update={
                "phase": ViewPhase.READY,
                "active_endpoint_id": self.endpoints[0].id if self.endpoints else None,
            }
        )
        self._ensure_example()
        logger.debug("Loaded %d endpoints for version %s", len(self.endpoints), version_id)
        return self.state

    async def _fetch_concurrently(self, version_id: str) -> tuple[ApiVersion, list[Endpoint]]:
        """Run both reads at once; if either fails the other is cancelled before returning."""
        tasks = (
            asyncio.ensure_future(self.store.get_api_version(version_id)),
            asyncio.ensure_future(self.store.list_endpoints_by_version(version_id)),
        )
        try:
            await asyncio.wait(tasks, return_when=asyncio.FIRST_EXCEPTION)
        finally:
            pending = [task for task in tasks if not task.done()]
            for task in pending:
                task.cancel()
            await asyncio.gather(*pending, return_exceptions=True)

        failures = [
            task.exception() for task in tasks if not task.cancelled() and task.exception()
        ]
        if failures:
            raise failures[0]
        version_task, endpoints_task = tasks
        return version_task.result(), endpoints_task.result()

    def select_endpoint(self, endpoint_id: str) -> ViewState:
        self._check_open()
        if not any(e.id == endpoint_id for e in self.endpoints):
            raise NotFound("Endpoint", endpoint_id)
        self.state = self.state.model_copy(update={"active_endpoint_id": endpoint_id})
        self._ensure_example()
        return self.state

    def select_language(self, language: Language | str) -> ViewState:
        self._check_open()
        lang = parse_language(language)
        if lang is None:
            raise UnsupportedLanguage(str(language))
        self.state = self.state.model_copy(update={"language": lang})
        self._ensure_example()
        return self.state

    def example(self) -> str | None:
        """Example for the active endpoint in the current language, if any."""
        return self._ensure_example()

    def close(self) -> None:
        """Tear the view down; fetches still in flight are discarded."""
        self._closed = True
        self._generation += 1
        self._examples.clear()

    def navigation(self) -> list[NavItem]:
        return [
            NavItem(
                endpoint_id=e.id,
                method=e.method,
                path=e.path,
                badge=method_badge(e.method),
                active=e.id == self.state.active_endpoint_id,
            )
            for e in self.endpoints
        ]

    def page(self) -> DocumentationPage:
        version = self.version
        active = self.active_endpoint
        detail = None
        if active is not None:
            detail = EndpointDetail(
                id=active.id,
                method=active.method,
                path=active.path,
                badge=method_badge(active.method),
                summary=active.summary,
                description=active.description,
                request_body=_pretty_or_none(active.request_body),
                response_schema=_pretty_or_none(active.response_schema),
            )
        return DocumentationPage(
            phase=self.state.phase,
            title=f"{version.project_name or ''} - {version.version_name}" if version else "",
            project_name=version.project_name if version else None,
            version_name=version.version_name if version else None,
            status=version.status if version else None,
            error=self.state.error,
            endpoints=self.navigation(),
            active=detail,
            language=self.state.language,
            languages=[LanguageOption(value=lang, label=lang.label) for lang in SUPPORTED_LANGUAGES],
            example=self.example(),
        )

    def _ensure_example(self) -> str | None:
        endpoint = self.active_endpoint
        if endpoint is None:
            return None
        key = (endpoint.id, self.state.language)
        if key not in self._examples:
            self._examples[key] = self.synthesizer.generate_for(endpoint, self.state.language)
        return self._examples[key]

    def _is_stale(self, generation: int) -> bool:
        return self._closed or generation != self._generation

    def _discard(self, version_id: str) -> ViewState:
        logger.debug("Discarding stale fetch for version %s", version_id)
        return self.state

    def _reset(self, phase: ViewPhase, error: str | None = None) -> None:
        self.version = None
        self.endpoints = []
        self._examples.clear()
        self.state = self.state.model_copy(
            update={"phase": phase, "active_endpoint_id": None, "error": error}
        )

    def _check_open(self) -> None:
        if self._closed:
            raise RuntimeError("Documentation view is closed")


def _pretty_or_none(value) -> str | None:
    return None if value is None else pretty_json(value)
