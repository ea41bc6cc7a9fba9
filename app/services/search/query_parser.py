"""Turn a raw SearchQuery into a normalized, synonym-expanded ParsedQuery."""

from __future__ import annotations

import logging
import re
from collections.abc import Sequence
from dataclasses import dataclass

from app.models.search import EntityType, SearchFilters, SearchQuery, SearchScope
from app.services.search.extraction import DEFAULT_EXTRACTORS, FilterExtractor
from app.services.search.lexicon import Lexicon, get_lexicon
from app.services.search.normalizers import normalize_funding_stage, normalize_location, normalize_title
from app.services.search.text import normalize_text

logger = logging.getLogger(__name__)

PERSON_HINTS = re.compile(r"\b(engineer|developer|cto|ceo|founder|people|person)\b")
ORGANIZATION_HINTS = re.compile(r"\b(company|startup|firm|agency)s?\b")


@dataclass(frozen=True)
class ParsedQuery:
    """Per-call view of a query; built once by the parser and then discarded."""

    original_text: str
    text: str
    filters: SearchFilters
    entity_type: EntityType | None
    scope: SearchScope | None
    expanded_text: tuple[str, ...]


def infer_entity_type(text: str, current: EntityType | None) -> EntityType | None:
    """Guess person vs organization from keywords when the caller left it open."""
    if current and current != "both":
        return current
    if PERSON_HINTS.search(text):
        return "person"
    if ORGANIZATION_HINTS.search(text):
        return "organization"
    return current


def expand_search_text(text: str, lexicon: Lexicon | None = None) -> tuple[str, ...]:
    """Return the query plus every synonym/nickname variant, original first.

    The whole phrase is looked up first, then each word on its own, so
    "senior dev" still picks up the variants of "dev".
    Empty text, including text emptied by filter extraction, yields no
    variants, so only filter reasons can make an entity match.
    """
    synonyms = (lexicon or get_lexicon()).synonyms
    lowered = text.lower().strip()
    variants: dict[str, None] = {}
    if lowered:
        variants[lowered] = None
    for variant in synonyms.get(lowered, ()):
        variants.setdefault(variant, None)
    for word in lowered.split():
        for variant in synonyms.get(word, ()):
            variants.setdefault(variant, None)
    return tuple(variants)


class QueryParser:
    """Normalizes text, infers entity type, extracts and normalizes filters."""

    def __init__(
        self,
        lexicon: Lexicon | None = None,
        extractors: Sequence[FilterExtractor] = DEFAULT_EXTRACTORS,
    ) -> None:
        self._lexicon = lexicon or get_lexicon()
        self._extractors = tuple(extractors)

    @property
    def lexicon(self) -> Lexicon:
        return self._lexicon

    def parse(self, query: SearchQuery) -> ParsedQuery:
        text = normalize_text(query.text)
        entity_type = infer_entity_type(text, query.entity_type)

        filters = (query.filters or SearchFilters()).model_dump()
        for extractor in self._extractors:
            if filters.get(extractor.field):
                continue
            extraction = extractor.extract(text)
            if extraction is None:
                continue
            logger.debug("Extracted %s=%r from query text", extractor.field, extraction.value)
            filters[extractor.field] = extraction.value
            text = extraction.residual

        if filters.get("location"):
            filters["location"] = normalize_location(filters["location"], self._lexicon)
        if filters.get("role"):
            filters["role"] = normalize_title(filters["role"], self._lexicon)
        if filters.get("funding_stage"):
            filters["funding_stage"] = normalize_funding_stage(filters["funding_stage"], self._lexicon)

        return ParsedQuery(
            original_text=query.text,
            text=text,
            filters=SearchFilters.model_validate(filters),
            entity_type=entity_type,
            scope=query.scope,
            expanded_text=expand_search_text(text, self._lexicon),
        )


def parse_query(query: SearchQuery, lexicon: Lexicon | None = None) -> ParsedQuery:
    return QueryParser(lexicon).parse(query)
