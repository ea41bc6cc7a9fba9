"""Relevance search over people, organizations and organization executives.

Every record is scanned once per query. A record collects points from
independent signals (free-text fields, filters, tags) plus small
completeness/recency boosts, and each signal that fires adds a fragment to
the human-readable explanation.

Filters come in two flavours:

- **hard** filters drop the record when they do not match, however well the
  free text scored;
- **soft** filters only add points.

The person and organization paths deliberately treat some filters
differently. ``funding_stage`` is hard for people (through their employer)
but soft for organizations, ``min_funding`` is soft for people but hard for
organizations, and only people are dropped when no signal fired at all.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Mapping, Sequence
from datetime import datetime, timezone
from typing import Any

from pydantic import ValidationError

from app.models.entities import Executive, Location, Organization, Person
from app.models.search import MatchGrade, SearchQuery, SearchResult
from app.services.search.errors import SearchValidationError
from app.services.search.indexer import ProcessedOrganization, ProcessedPerson, SearchIndex
from app.services.search.lexicon import Lexicon
from app.services.search.normalizers import normalize_title
from app.services.search.query_parser import ParsedQuery, QueryParser
from app.services.search.similarity import fuzzy_score
from app.services.search.text import slugify

logger = logging.getLogger(__name__)

NAME_WEIGHT = 0.4
TITLE_WEIGHT = 0.5
BIO_WEIGHT = 0.3
INDUSTRY_WEIGHT = 0.3
ROLE_WEIGHT = 0.3
TOKEN_MATCH_DISCOUNT = 0.9

FILTER_THRESHOLD = 0.5
ROLE_MIN_SCORE = 0.1
EXECUTIVE_ROLE_THRESHOLD = 0.3
INVESTOR_THRESHOLD = 0.6
ABBREVIATION_MAX_LENGTH = 3

LOCATION_BOOST = 0.2
FUNDING_STAGE_BOOST = 0.3
MIN_FUNDING_BOOST = 0.2
COMPANY_BOOST = 0.4
EXECUTIVE_COMPANY_BOOST = 0.3
EXECUTIVE_ROLE_BOOST = 0.3
EMPLOYER_CONTEXT_BOOST = 0.1
INDUSTRY_FILTER_BOOST = 0.2
INVESTOR_BOOST = 0.35
TAG_TEXT_BOOST = 0.25
TAG_FILTER_BOOST = 0.2

MAX_COMPLETENESS_BOOST = 0.1
COMPLETENESS_FACT_COUNT = 50
MAX_RECENCY_BOOST = 0.05
SECONDS_PER_MONTH = 60 * 60 * 24 * 30

GRADE_THRESHOLDS: tuple[tuple[float, MatchGrade], ...] = (
    (0.8, "perfect"),
    (0.6, "strong"),
    (0.4, "moderate"),
)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _as_utc(value: datetime) -> datetime:
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)


def assign_grade(score: float) -> MatchGrade:
    for threshold, grade in GRADE_THRESHOLDS:
        if score >= threshold:
            return grade
    return "weak"


def score_match(variants: Sequence[str], target: str, tokens: Sequence[str], weight: float) -> float:
    """Best score of any variant against ``target`` (or one of its tokens), times ``weight``."""
    if not target:
        return 0.0
    best = 0.0
    for variant in variants:
        if variant in target:
            best = 1.0
            break
        best = max(best, fuzzy_score(variant, target))
        for token in tokens:
            best = max(best, fuzzy_score(variant, token) * TOKEN_MATCH_DISCOUNT)
    return best * weight


def executive_title_score(variant: str, title: str) -> float:
    """Fuzzy title score, except that abbreviations ("cto", "ceo") only match by containment.

    Three-letter role codes sit one edit apart from each other, so a typo
    budget of two would read "cto" as "ceo".
    """
    if variant in title:
        return 1.0
    if min(len(variant), len(title)) <= ABBREVIATION_MAX_LENGTH:
        return 0.0
    return fuzzy_score(variant, title)


def best_field_score(query: str, fields: Iterable[str]) -> float:
    """Highest fuzzy score over the non-empty fields; missing data never matches."""
    return max((fuzzy_score(query, field) for field in fields if field), default=0.0)


def _location_fields(location: Location | None) -> tuple[str, ...]:
    if location is None:
        return ()
    return tuple((part or "").lower() for part in (location.city, location.state, location.country))


def _tag_matches(text: str, tag: str) -> bool:
    return tag in text or text in tag


def freshness_boost(enriched_at: datetime | None, fact_count: int, now: datetime) -> float:
    """Completeness (fact count) plus recency; a missing timestamp counts as fresh."""
    completeness = min(MAX_COMPLETENESS_BOOST, fact_count / COMPLETENESS_FACT_COUNT)
    now = _as_utc(now)
    stamp = _as_utc(enriched_at) if enriched_at else now
    age_months = max(0.0, (now - stamp).total_seconds() / SECONDS_PER_MONTH)
    recency = min(MAX_RECENCY_BOOST, 12 / (age_months + 1))
    return completeness + recency


class _ScoreCard:
    """Running score plus the explanation fragments that produced it."""

    def __init__(self) -> None:
        self.score = 0.0
        self.reasons: list[str] = []

    def add(self, points: float, reason: str) -> None:
        self.score += points
        self.reasons.append(reason)

    @property
    def explanation(self) -> str:
        return ", ".join(self.reasons)


class SearchService:
    """Ranks people and organizations for a query.

    The index is built once from the given collections and never mutated, so
    a new service has to be constructed when the source data changes.
    """

    def __init__(
        self,
        people: Iterable[Person] | None = None,
        organizations: Iterable[Organization] | None = None,
        *,
        lexicon: Lexicon | None = None,
        parser: QueryParser | None = None,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._parser = parser or QueryParser(lexicon)
        self._index = SearchIndex.build(people, organizations)
        self._clock = clock
        logger.info(
            "Search index built people=%d organizations=%d lexicon=%s",
            len(self._index.people),
            len(self._index.organizations),
            self._parser.lexicon.version,
        )

    @property
    def index(self) -> SearchIndex:
        return self._index

    @property
    def lexicon(self) -> Lexicon:
        return self._parser.lexicon

    def search(self, query: SearchQuery | Mapping[str, Any] | None) -> list[SearchResult]:
        """Return matching records sorted by score, highest first.

        Raises:
            SearchValidationError: when the query is missing, its text is empty
                or ``filters.min_funding`` is negative.
        """
        validated = self._validate(query)
        parsed = self._parser.parse(validated)
        results = self._execute(parsed)
        logger.debug(
            "Search complete text=%r entity_type=%s filters=%s results=%d",
            parsed.text,
            parsed.entity_type or "person",
            parsed.filters.model_dump(exclude_none=True),
            len(results),
        )
        return results

    @staticmethod
    def _validate(query: SearchQuery | Mapping[str, Any] | None) -> SearchQuery:
        if query is None:
            raise SearchValidationError("Search query is required.")
        if isinstance(query, Mapping):
            try:
                query = SearchQuery.model_validate(query)
            except ValidationError as exc:
                first = exc.errors()[0]
                location = ".".join(str(part) for part in first.get("loc", ()))
                raise SearchValidationError(f"Invalid search query ({location}): {first['msg']}") from exc
        if not isinstance(query, SearchQuery):
            raise SearchValidationError("Search query must be a SearchQuery or a mapping.")
        if not isinstance(query.text, str):
            raise SearchValidationError("Search query text is required and must be a string.")
        if not query.text.strip():
            raise SearchValidationError("Search query text cannot be empty.")
        filters = query.filters
        if filters is not None and filters.min_funding is not None and filters.min_funding < 0:
            raise SearchValidationError("min_funding filter cannot be negative.")
        return query

    def _execute(self, query: ParsedQuery) -> list[SearchResult]:
        now = self._clock()
        entity_type = query.entity_type or "person"
        results: list[SearchResult] = []

        if entity_type in ("person", "both"):
            for processed in self._index.processed_people:
                result = self._score_person(processed, query, now)
                if result:
                    results.append(result)

            seen_names = {result.person.full_name.lower() for result in results if result.person}
            for org in self._index.organizations:
                for executive in org.executives:
                    name_key = executive.name.lower()
                    if name_key in seen_names:
                        continue
                    result = self._score_executive(executive, org, query)
                    if result:
                        results.append(result)
                        seen_names.add(name_key)

        if entity_type in ("organization", "both"):
            for processed_org in self._index.processed_organizations:
                result = self._score_organization(processed_org, query, now)
                if result:
                    results.append(result)

        results.sort(key=lambda item: item.score, reverse=True)
        return results

    def _score_person(self, processed: ProcessedPerson, query: ParsedQuery, now: datetime) -> SearchResult | None:
        person = processed.original
        filters = query.filters
        variants = query.expanded_text
        card = _ScoreCard()

        name_score = score_match(variants, processed.full_name_lower, (), NAME_WEIGHT)
        if name_score > 0:
            card.add(name_score, f"name match ({name_score:.2f})")
        title_score = score_match(variants, processed.title_lower, processed.title_tokens, TITLE_WEIGHT)
        if title_score > 0:
            card.add(title_score, f"title match ({title_score:.2f})")
        bio_score = score_match(variants, processed.bio_lower, (), BIO_WEIGHT)
        if bio_score > 0:
            card.add(bio_score, f"bio match ({bio_score:.2f})")

        if filters.location:
            best = best_field_score(
                filters.location.lower(),
                (processed.city_lower, processed.state_lower, processed.country_lower),
            )
            if best < FILTER_THRESHOLD:
                return None
            card.add(best * LOCATION_BOOST, f"location match ({best:.2f})")

        if filters.role:
            role_score = score_match((filters.role.lower(),), processed.title_lower, processed.title_tokens, ROLE_WEIGHT)
            if role_score < ROLE_MIN_SCORE:
                return None
            card.add(role_score, f"role match ({role_score:.2f})")

        employer = processed.company_org
        if filters.funding_stage:
            stage = employer.latest_round_type if employer else None
            if not stage:
                return None
            stage_score = fuzzy_score(filters.funding_stage.lower(), stage.lower())
            if stage_score < FILTER_THRESHOLD:
                return None
            card.add(stage_score * FUNDING_STAGE_BOOST, f"company funding stage match ({stage})")

        if filters.min_funding and employer and employer.total_raised:
            amount = min(1.0, employer.total_raised / filters.min_funding) * MIN_FUNDING_BOOST
            card.add(amount, f"company funding amount match ({employer.total_raised:,.0f})")

        if filters.company:
            company_score = (
                fuzzy_score(filters.company.lower(), processed.company_lower) if processed.company_lower else 0.0
            )
            if company_score <= 0:
                return None
            card.add(company_score * COMPANY_BOOST, f"company match ({company_score:.2f})")
            # A bare company filter must not surface every employee.
            has_content = name_score > 0 or title_score > 0 or bio_score > 0
            if not has_content and not any(
                _tag_matches(variant, tag) for variant in variants for tag in processed.tags_lower
            ):
                return None

        for tag in processed.tags_lower:
            if any(_tag_matches(variant, tag) for variant in variants):
                card.add(TAG_TEXT_BOOST, f"tag match ({tag})")

        if filters.tags:
            wanted = [tag.lower() for tag in filters.tags]
            if not any(_tag_matches(want, tag) for want in wanted for tag in processed.tags_lower):
                return None
            card.add(TAG_FILTER_BOOST, "tags filter match")

        if not card.reasons:
            return None

        card.score += freshness_boost(person.enriched_at, person.fact_count, now)
        return SearchResult(
            person=person,
            score=card.score,
            match_grade=assign_grade(card.score),
            explanation=card.explanation,
        )

    def _score_executive(self, executive: Executive, org: Organization, query: ParsedQuery) -> SearchResult | None:
        filters = query.filters
        variants = query.expanded_text
        name_lower = executive.name.lower()
        title_lower = executive.title.lower()
        card = _ScoreCard()

        matched = False
        if any(variant in name_lower for variant in variants):
            card.add(NAME_WEIGHT, "executive name match")
            matched = True

        if title_lower:
            for variant in variants:
                title_score = executive_title_score(variant, title_lower)
                if title_score > 0:
                    card.add(title_score * TITLE_WEIGHT, f"executive title match ({executive.title})")
                    matched = True
                    break

        if filters.company:
            company_score = fuzzy_score(filters.company.lower(), org.name.lower())
            if company_score < FILTER_THRESHOLD:
                return None
            card.add(company_score * EXECUTIVE_COMPANY_BOOST, f"company match ({org.name})")
        else:
            card.add(EMPLOYER_CONTEXT_BOOST, f"at {org.name}")

        if filters.funding_stage:
            stage = org.latest_round_type
            if not stage:
                return None
            stage_score = fuzzy_score(filters.funding_stage.lower(), stage.lower())
            if stage_score < FILTER_THRESHOLD:
                return None
            card.add(stage_score * FUNDING_STAGE_BOOST, f"company funding stage ({stage})")

        if filters.location:
            best = best_field_score(filters.location.lower(), _location_fields(org.location))
            if best < FILTER_THRESHOLD:
                return None
            card.add(best * LOCATION_BOOST, f"location match ({best:.2f})")

        if filters.role:
            role = filters.role.lower()
            role_score = 0.0
            if title_lower:
                role_score = max(
                    executive_title_score(role, title_lower),
                    executive_title_score(role, normalize_title(title_lower, self.lexicon)),
                )
            if role_score < EXECUTIVE_ROLE_THRESHOLD:
                return None
            card.add(role_score * EXECUTIVE_ROLE_BOOST, f"role match ({executive.title})")
            matched = True

        # Employer context and org-level filters alone never surface an executive.
        if not matched or card.score <= 0:
            return None

        synthetic = Person(
            id=f"exec-{org.id}-{slugify(executive.name)}",
            full_name=executive.name,
            title=executive.title,
            company=org.name,
            location=org.location,
        )
        return SearchResult(
            person=synthetic,
            score=card.score,
            match_grade=assign_grade(card.score),
            explanation=card.explanation,
            derived=True,
        )

    def _score_organization(
        self, processed: ProcessedOrganization, query: ParsedQuery, now: datetime
    ) -> SearchResult | None:
        org = processed.original
        filters = query.filters
        variants = query.expanded_text
        card = _ScoreCard()

        name_score = score_match(variants, processed.name_lower, processed.name_tokens, NAME_WEIGHT)
        if name_score > 0:
            card.add(name_score, f"name match ({name_score:.2f})")
        industry_score = score_match(variants, processed.industry_lower, (), INDUSTRY_WEIGHT)
        if industry_score > 0:
            card.add(industry_score, f"industry match ({industry_score:.2f})")

        if filters.industry:
            industry_match = (
                fuzzy_score(filters.industry.lower(), processed.industry_lower) if processed.industry_lower else 0.0
            )
            if industry_match < FILTER_THRESHOLD:
                return None
            card.add(industry_match * INDUSTRY_FILTER_BOOST, f"industry filter match ({org.industry})")

        for investor, investor_lower in zip(org.investors, processed.investors_lower):
            investor_score = max((fuzzy_score(variant, investor_lower) for variant in variants), default=0.0)
            if investor_score > INVESTOR_THRESHOLD:
                card.add(investor_score * INVESTOR_BOOST, f"investor match ({investor})")

        stage = org.latest_round_type
        if filters.funding_stage and stage:
            stage_score = fuzzy_score(filters.funding_stage.lower(), stage.lower()) * FUNDING_STAGE_BOOST
            if stage_score > 0:
                card.add(stage_score, f"funding stage match ({stage})")

        if filters.min_funding:
            raised = org.total_raised
            if not raised or raised < filters.min_funding:
                return None
            amount = min(1.0, raised / filters.min_funding) * MIN_FUNDING_BOOST
            card.add(amount, f"funding amount match ({raised:,.0f})")

        card.score += freshness_boost(org.enriched_at, org.fact_count, now)
        if card.score <= 0:
            return None
        return SearchResult(
            organization=org,
            score=card.score,
            match_grade=assign_grade(card.score),
            explanation=card.explanation,
        )
