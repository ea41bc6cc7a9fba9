"""Domain models for searchable people and organizations."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class Location(BaseModel):
    """City/state/country triple; every part is optional."""

    city: str | None = None
    state: str | None = None
    country: str | None = None

    model_config = ConfigDict(frozen=True)


class Person(BaseModel):
    """Person record supplied by the ingestion layer."""

    id: str
    full_name: str = Field(..., min_length=1)
    title: str | None = None
    company: str | None = None
    location: Location | None = None
    bio: str | None = None
    tags: list[str] = Field(default_factory=list)
    enriched_at: datetime | None = Field(default=None, description="When the record was last enriched.")
    fact_count: int = Field(default=0, ge=0, description="Number of known facts, used as a completeness proxy.")

    model_config = ConfigDict(frozen=True)


class LatestRound(BaseModel):
    type: str | None = None
    amount: float | None = None
    date: str | None = None

    model_config = ConfigDict(frozen=True)


class FundingRound(BaseModel):
    type: str
    amount: float
    date: str
    investors: list[str] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True)


class Funding(BaseModel):
    """Aggregated funding history (amounts in USD)."""

    total_raised: float | None = None
    valuation: float | None = None
    latest_round: LatestRound | None = None
    rounds: list[FundingRound] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True)


class Executive(BaseModel):
    name: str = Field(..., min_length=1)
    title: str
    email: str | None = None

    model_config = ConfigDict(frozen=True)


class Organization(BaseModel):
    """Organization record with funding, investor and executive data."""

    id: str
    name: str = Field(..., min_length=1)
    domain: str | None = None
    industry: str | None = None
    location: Location | None = None
    funding: Funding | None = None
    investors: list[str] = Field(default_factory=list)
    executives: list[Executive] = Field(default_factory=list)
    enriched_at: datetime | None = None
    fact_count: int = Field(default=0, ge=0)

    model_config = ConfigDict(frozen=True)

    @property
    def latest_round_type(self) -> str | None:
        if self.funding and self.funding.latest_round:
            return self.funding.latest_round.type or None
        return None

    @property
    def total_raised(self) -> float | None:
        return self.funding.total_raised if self.funding else None
