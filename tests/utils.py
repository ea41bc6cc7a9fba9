"""Builders for hand-made search fixtures."""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime, timezone
from typing import Any

from app.models.entities import Executive, Funding, LatestRound, Location, Organization, Person


def make_person(
    full_name: str = "Jordan Lee",
    *,
    id: str = "p-1",
    title: str | None = None,
    company: str | None = None,
    city: str | None = None,
    bio: str | None = None,
    tags: Sequence[str] = (),
    enriched_at: datetime | None = None,
    fact_count: int = 0,
) -> Person:
    """Person with only the fields a test cares about."""
    return Person(
        id=id,
        full_name=full_name,
        title=title,
        company=company,
        location=Location(city=city) if city else None,
        bio=bio,
        tags=list(tags),
        enriched_at=enriched_at,
        fact_count=fact_count,
    )


def make_organization(
    name: str = "Acme Robotics",
    *,
    id: str = "o-1",
    industry: str | None = None,
    city: str | None = None,
    stage: str | None = None,
    total_raised: float | None = None,
    investors: Sequence[str] = (),
    executives: Sequence[tuple[str, str]] = (),
    enriched_at: datetime | None = None,
    fact_count: int = 0,
) -> Organization:
    """Organization with optional latest round, raise and executives."""
    funding: dict[str, Any] | None = None
    if stage or total_raised is not None:
        funding = {
            "total_raised": total_raised,
            "latest_round": LatestRound(type=stage) if stage else None,
        }
    return Organization(
        id=id,
        name=name,
        industry=industry,
        location=Location(city=city) if city else None,
        funding=Funding(**funding) if funding else None,
        investors=list(investors),
        executives=[Executive(name=exec_name, title=exec_title) for exec_name, exec_title in executives],
        enriched_at=enriched_at,
        fact_count=fact_count,
    )


FIXED_NOW = datetime(2024, 2, 1, tzinfo=timezone.utc)


def utc(year: int, month: int, day: int) -> datetime:
    return datetime(year, month, day, tzinfo=timezone.utc)
