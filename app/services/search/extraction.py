"""Heuristic extraction of implicit filters from normalized query text.

Each extractor looks at the working text, returns the filter value it found
plus the text left once the matched phrase is removed, or ``None``. The
parser runs them in order, so an extractor only ever sees what earlier ones
left behind.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Protocol

from app.services.search.text import collapse_whitespace

LOCATION_PATTERN = re.compile(r"\bin\s+([a-z\s]{2,30})\b")
LOCATION_REJECT_PATTERN = re.compile(r"\b(startup|company|series)\b")
FUNDING_STAGE_PATTERN = re.compile(r"\b(series [a-e]|pre[\s-]?seed|seed|ipo)\b", re.IGNORECASE)
COMPANY_PATTERN = re.compile(r"\bat\s+([a-zA-Z0-9\s]{2,30})\b")
COMPANY_STOPWORDS = frozenset(
    {
        "least",
        "most",
        "the",
        "home",
        "work",
        "school",
        "university",
        "series",
        "funded",
        "company",
        "funded company",
        "startup",
        "startups",
        "a",
    }
)
GENERIC_COMPANY_PATTERN = re.compile(r"^(funded|a|the|any|some)\s+(company|startup|firm|org)s?$")


@dataclass(frozen=True)
class Extraction:
    value: str
    residual: str


class FilterExtractor(Protocol):
    """Strategy contract: text in, optional filter value plus residual text out."""

    field: str

    def extract(self, text: str) -> Extraction | None:
        ...


def _strip(text: str, phrase: str) -> str:
    return collapse_whitespace(text.replace(phrase, "", 1))


class LocationExtractor:
    """``in <place>`` unless the phrase talks about a company or round."""

    field = "location"

    def extract(self, text: str) -> Extraction | None:
        match = LOCATION_PATTERN.search(text)
        if not match:
            return None
        candidate = match.group(1).strip()
        if LOCATION_REJECT_PATTERN.search(candidate):
            return None
        return Extraction(value=candidate, residual=_strip(text, match.group(0)))


class FundingStageExtractor:
    """``series a``, ``seed``, ``pre-seed``, ``ipo``; also consumes a leading ``at``.

    Must run before :class:`CompanyExtractor` so "cto at series a" is not read
    as a company called "series a".
    """

    field = "funding_stage"

    def extract(self, text: str) -> Extraction | None:
        match = FUNDING_STAGE_PATTERN.search(text)
        if not match:
            return None
        stage = match.group(0)
        at_stage = re.search(rf"\bat\s+{re.escape(stage)}\b", text, re.IGNORECASE)
        phrase = at_stage.group(0) if at_stage else stage
        return Extraction(value=stage, residual=_strip(text, phrase))


class CompanyExtractor:
    """``at <company>`` minus generic phrases such as "at least" or "at a startup"."""

    field = "company"

    def extract(self, text: str) -> Extraction | None:
        match = COMPANY_PATTERN.search(text)
        if not match:
            return None
        candidate = match.group(1).strip()
        lowered = candidate.lower()
        if lowered in COMPANY_STOPWORDS or GENERIC_COMPANY_PATTERN.match(lowered):
            return None
        return Extraction(value=candidate, residual=_strip(text, match.group(0)))


DEFAULT_EXTRACTORS: tuple[FilterExtractor, ...] = (
    LocationExtractor(),
    FundingStageExtractor(),
    CompanyExtractor(),
)
