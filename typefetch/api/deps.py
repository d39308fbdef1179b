"""Dependency injection — settings and extractor singletons."""

from __future__ import annotations

from typefetch.core.config import Settings
from typefetch.engines.typings_extractor import TypingsExtractor

# ---------------------------------------------------------------------------
# Singletons (initialised by create_app, or lazily from the environment)
# ---------------------------------------------------------------------------
_settings: Settings | None = None
_typings_extractor: TypingsExtractor | None = None


def init_extractor(settings: Settings | None = None) -> TypingsExtractor:
    """Build the process-wide extractor. Called once at app creation."""
    global _settings, _typings_extractor  # noqa: PLW0603
    _settings = settings or Settings.from_env()
    _typings_extractor = TypingsExtractor(_settings)
    return _typings_extractor


def get_settings() -> Settings:
    if _settings is None:
        return init_extractor().settings
    return _settings


def get_typings_extractor() -> TypingsExtractor:
    if _typings_extractor is None:
        return init_extractor()
    return _typings_extractor
