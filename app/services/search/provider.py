"""Builds the process-wide SearchService from configured data files."""

from __future__ import annotations

import logging
from pathlib import Path

from app.config import settings
from app.services.search.engine import SearchService
from app.services.search.lexicon import load_lexicon
from pipelines.io.entity_loader import load_entities

logger = logging.getLogger(__name__)


def _optional_path(value: str | None) -> Path | None:
    return Path(value).expanduser() if value else None


def build_search_service(
    *,
    people_path: Path | None = None,
    organizations_path: Path | None = None,
    lexicon_path: Path | None = None,
) -> SearchService:
    """Load entities and lexicon, falling back to settings and then to the bundled samples."""
    people, organizations = load_entities(
        people_path or _optional_path(settings.search_people_path),
        organizations_path or _optional_path(settings.search_organizations_path),
    )
    lexicon = load_lexicon(lexicon_path or _optional_path(settings.search_lexicon_path))
    return SearchService(people, organizations, lexicon=lexicon)


_SERVICE_INSTANCE: SearchService | None = None


def get_search_service() -> SearchService:
    """Singleton accessor used by API routes."""
    global _SERVICE_INSTANCE  # noqa: PLW0603
    if _SERVICE_INSTANCE is None:
        _SERVICE_INSTANCE = build_search_service()
    return _SERVICE_INSTANCE


def reset_search_service() -> None:
    """Drop the cached service so the next request reloads source data."""
    global _SERVICE_INSTANCE  # noqa: PLW0603
    if _SERVICE_INSTANCE is not None:
        logger.info("Discarding cached search service")
    _SERVICE_INSTANCE = None
