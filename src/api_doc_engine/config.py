"""Application settings and logging setup.

Settings load from environment variables prefixed with ``APIDOC_`` and an
optional ``.env`` file, falling back to the defaults below.

Usage:
    from api_doc_engine.config import get_settings
    print(get_settings().base_url)
"""

import logging
from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


class Settings(BaseSettings):
    """Runtime configuration for the documentation engine."""

    # Base URL shown in generated client examples
    base_url: str = "https://api.example.com"

    # Example language selected when a documentation view opens
    default_language: str = "curl"

    # Raise UnsupportedLanguage instead of returning an empty example
    strict_languages: bool = False

    # Fetch the version and its endpoints concurrently when loading a view
    concurrent_fetch: bool = False

    # Any async SQLAlchemy URL works here
    database_url: str = "sqlite+aiosqlite:///api_doc.db"
    database_echo: bool = False

    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_prefix="APIDOC_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


@lru_cache
def get_settings() -> Settings:
    """Create and cache the Settings instance."""
    return Settings()


def configure_logging(level: str | None = None) -> None:
    """Configure root logging once for command-line use."""
    level = (level or get_settings().log_level).upper()
    logging.basicConfig(level=level, format=LOG_FORMAT)
    logging.getLogger().setLevel(level)
