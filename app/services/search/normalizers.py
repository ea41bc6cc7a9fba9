"""Table-driven canonicalizers for location, title and funding-stage filters."""

from __future__ import annotations

import re
from collections.abc import Mapping
from functools import lru_cache

from app.services.search.lexicon import Lexicon, get_lexicon
from app.services.search.text import collapse_whitespace

STAGE_SEPARATORS = re.compile(r"[-_]")
ROUND_WORD = re.compile(r"\bround\b")
# Bounds title re-expansion when a lexicon maps aliases into each other.
MAX_TITLE_PASSES = 8


def normalize_location(location: str, lexicon: Lexicon | None = None) -> str:
    """Map a location alias ("sf", "nyc", ...) to its canonical city name."""
    aliases = (lexicon or get_lexicon()).location_aliases
    lower = location.lower().strip()
    return aliases.get(lower, lower)


def normalize_title(title: str, lexicon: Lexicon | None = None) -> str:
    """Expand abbreviations and role variants token by token.

    "senior dev" -> "senior software engineer", "cto" -> "chief technology officer".
    Substitution repeats until the title stops changing, so "senior eng"
    becomes "senior engineer" and then "senior software engineer".
    """
    aliases = (lexicon or get_lexicon()).title_aliases
    lower = title.lower().strip()
    if not aliases:
        return lower
    pattern = _alias_pattern(tuple(aliases))
    for _ in range(MAX_TITLE_PASSES):
        expanded = pattern.sub(lambda match: aliases[match.group(0)], lower)
        if expanded == lower:
            break
        lower = expanded
    return lower


def normalize_funding_stage(stage: str, lexicon: Lexicon | None = None) -> str:
    """Canonicalize "Series-A round", "pre_seed", "public", ... to a stage name."""
    stages: Mapping[str, str] = (lexicon or get_lexicon()).funding_stages
    lower = STAGE_SEPARATORS.sub(" ", stage.lower().strip())
    lower = collapse_whitespace(ROUND_WORD.sub("", lower))
    return stages.get(lower, lower)


@lru_cache(maxsize=8)
def _alias_pattern(keys: tuple[str, ...]) -> re.Pattern[str]:
    # Longest alias first so "backend dev" wins over "dev".
    ordered = sorted(keys, key=len, reverse=True)
    return re.compile(r"\b(?:" + "|".join(re.escape(key) for key in ordered) + r")\b")
