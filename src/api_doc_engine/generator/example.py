"""Code example synthesizer — turns an endpoint description into client call snippets.

Output is a pure function of (path, method, request_body, language) and the
configured base URL: no timestamps, no randomness, and JSON keys keep their
insertion order, so the same endpoint always yields byte-identical text.
"""

import enum
import json
import logging

from api_doc_engine.config import get_settings
from api_doc_engine.errors import UnsupportedLanguage
from api_doc_engine.model.base import Endpoint, HttpMethod, Json

logger = logging.getLogger(__name__)


class Language(str, enum.Enum):
    CURL = "curl"
    JAVASCRIPT = "javascript"
    PYTHON = "python"

    @property
    def label(self) -> str:
        match self:
            case Language.CURL:
                return "cURL"
            case Language.JAVASCRIPT:
                return "JavaScript"
            case Language.PYTHON:
                return "Python"


# Display order for language pickers
SUPPORTED_LANGUAGES: tuple[Language, ...] = (Language.CURL, Language.JAVASCRIPT, Language.PYTHON)


def parse_language(value: "str | Language") -> Language | None:
    """Return the matching Language, or None when ``value`` is not supported."""
    if isinstance(value, Language):
        return value
    try:
        return Language(str(value).strip().lower())
    except ValueError:
        return None


def pretty_json(value: Json) -> str:
    """Serialize ``value`` as 2-space indented JSON, keys in insertion order."""
    return json.dumps(value, indent=2, ensure_ascii=False)


def _indent_tail(text: str, prefix: str) -> str:
    """Indent every line of ``text`` except the first."""
    lines = text.split("\n")
    return "\n".join([lines[0]] + [prefix + line for line in lines[1:]])


class ExampleSynthesizer:
    """Builds copy-and-run client snippets for documented endpoints."""

    def __init__(self, base_url: str | None = None, strict: bool | None = None):
        settings = get_settings()
        self.base_url = (base_url if base_url is not None else settings.base_url).rstrip("/")
        self.strict = settings.strict_languages if strict is None else strict

    def generate(
        self,
        path: str,
        method: HttpMethod | str,
        request_body: Json,
        language: Language | str,
    ) -> str:
        """Return example source for one request, or "" for an unsupported language."""
        if not path.startswith("/"):
            raise ValueError(f"Endpoint path must start with '/': {path!r}")
        method = HttpMethod.parse(method)

        lang = parse_language(language)
        if lang is None:
            if self.strict:
                raise UnsupportedLanguage(str(language))
            logger.debug("No example renderer for language %r", language)
            return ""

        url = f"{self.base_url}{path}"
        match lang:
            case Language.CURL:
                return self._render_curl(url, method, request_body)
            case Language.JAVASCRIPT:
                return self._render_javascript(url, method, request_body)
            case Language.PYTHON:
                return self._render_python(url, method, request_body)

    def generate_for(self, endpoint: Endpoint, language: Language | str) -> str:
        return self.generate(endpoint.path, endpoint.method, endpoint.request_body, language)

    def generate_all(self, endpoint: Endpoint) -> dict[str, str]:
        """Examples for every supported language, keyed by language id."""
        return {lang.value: self.generate_for(endpoint, lang) for lang in SUPPORTED_LANGUAGES}

    def _render_curl(self, url: str, method: HttpMethod, request_body: Json) -> str:
        parts = [f'curl -X {method.value} "{url}"']
        if request_body is not None:
            # Close, escape and reopen the single-quoted shell string
            body = pretty_json(request_body).replace("'", "'\\''")
            parts.append('-H "Content-Type: application/json"')
            parts.append(f"-d '{body}'")
        return " ".join(parts)

    def _render_javascript(self, url: str, method: HttpMethod, request_body: Json) -> str:
        lines = [
            f"fetch({json.dumps(url)}, {{",
            f'  method: "{method.value}",',
        ]
        if request_body is not None:
            body = _indent_tail(pretty_json(request_body), "  ")
            lines += [
                "  headers: {",
                '    "Content-Type": "application/json",',
                "  },",
                f"  body: JSON.stringify({body}),",
            ]
        lines += [
            "})",
            "  .then(response => response.json())",
            "  .then(data => console.log(data))",
            "  .catch(error => console.error('Error:', error));",
        ]
        return "\n".join(lines)

    def _render_python(self, url: str, method: HttpMethod, request_body: Json) -> str:
        verb = method.value.lower()
        lines = [
            "import requests",
            "",
            f"response = requests.{verb}(",
        ]
        url_arg = f"    {json.dumps(url)}"
        if request_body is None:
            lines.append(url_arg)
        else:
            lines += [url_arg + ",", f"    json={_indent_tail(pretty_json(request_body), '    ')},"]
        lines += [
            ")",
            "",
            "print(response.json())",
        ]
        return "\n".join(lines)
