"""Text clean-up helpers shared by the parser and the engine."""

from __future__ import annotations

import re

PUNCTUATION_PATTERN = re.compile(r"[^\w\s$]")
WHITESPACE_PATTERN = re.compile(r"\s+")
SLUG_PATTERN = re.compile(r"[^a-z0-9]+")


def normalize_text(value: str) -> str:
    """Lowercase, replace punctuation (except ``$``) with spaces and collapse whitespace."""
    lowered = PUNCTUATION_PATTERN.sub(" ", value.lower())
    return WHITESPACE_PATTERN.sub(" ", lowered).strip()


def collapse_whitespace(value: str) -> str:
    return WHITESPACE_PATTERN.sub(" ", value).strip()


def tokenize(value: str) -> tuple[str, ...]:
    return tuple(value.split())


def slugify(name: str) -> str:
    """Create an id-friendly slug for a display name."""
    slug = SLUG_PATTERN.sub("-", name.lower()).strip("-")
    return slug or "unnamed"
