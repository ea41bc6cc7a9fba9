"""Request/response models for the relevance search engine."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field, computed_field

from app.models.entities import Organization, Person

EntityType = Literal["person", "organization", "both"]
SearchScope = Literal["all", "connections"]
MatchGrade = Literal["perfect", "strong", "moderate", "weak"]


class SearchFilters(BaseModel):
    """Structured constraints; unset fields are ignored."""

    location: str | None = Field(default=None, description="City, state or country.")
    role: str | None = Field(default=None, description="Job title or role.")
    company: str | None = None
    industry: str | None = None
    tags: list[str] | None = None
    funding_stage: str | None = Field(default=None, description='"Seed", "Series A", ...')
    min_funding: float | None = Field(default=None, description="Minimum total raised in USD.")


class SearchQuery(BaseModel):
    """Natural-language query plus optional filters.

    Text emptiness and the ``min_funding`` lower bound are checked by the
    search service so that every entry point fails the same way.
    """

    text: str
    filters: SearchFilters | None = None
    scope: SearchScope | None = None
    entity_type: EntityType | None = None


class SearchResult(BaseModel):
    """Single ranked hit with its grade and explanation."""

    person: Person | None = None
    organization: Organization | None = None
    score: float
    match_grade: MatchGrade
    explanation: str = ""
    derived: bool = Field(
        default=False,
        description="True when the person was materialized from an organization's executive list.",
    )

    @computed_field  # type: ignore[misc]
    @property
    def name(self) -> str:
        if self.person is not None:
            return self.person.full_name
        if self.organization is not None:
            return self.organization.name
        return ""
