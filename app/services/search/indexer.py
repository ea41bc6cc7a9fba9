"""Precomputed, read-only projections of the searchable collections."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from types import MappingProxyType

from app.models.entities import Organization, Person
from app.services.search.text import tokenize


def _lower(value: str | None) -> str:
    return value.lower() if value else ""


@dataclass(frozen=True)
class ProcessedPerson:
    original: Person
    full_name_lower: str
    title_lower: str
    bio_lower: str
    city_lower: str
    state_lower: str
    country_lower: str
    company_lower: str
    tags_lower: tuple[str, ...]
    title_tokens: tuple[str, ...]
    # Employer as it was when the index was built; rebuild the index to refresh.
    company_org: Organization | None = None

    @classmethod
    def from_person(cls, person: Person, orgs_by_name: Mapping[str, Organization]) -> ProcessedPerson:
        title_lower = _lower(person.title)
        location = person.location
        return cls(
            original=person,
            full_name_lower=person.full_name.lower(),
            title_lower=title_lower,
            bio_lower=_lower(person.bio),
            city_lower=_lower(location.city if location else None),
            state_lower=_lower(location.state if location else None),
            country_lower=_lower(location.country if location else None),
            company_lower=_lower(person.company),
            tags_lower=tuple(tag.lower() for tag in person.tags),
            title_tokens=tokenize(title_lower),
            company_org=orgs_by_name.get(person.company.lower()) if person.company else None,
        )


@dataclass(frozen=True)
class ProcessedOrganization:
    original: Organization
    name_lower: str
    name_tokens: tuple[str, ...]
    industry_lower: str
    investors_lower: tuple[str, ...]

    @classmethod
    def from_organization(cls, organization: Organization) -> ProcessedOrganization:
        name_lower = organization.name.lower()
        return cls(
            original=organization,
            name_lower=name_lower,
            name_tokens=tokenize(name_lower),
            industry_lower=_lower(organization.industry),
            investors_lower=tuple(investor.lower() for investor in organization.investors),
        )


@dataclass(frozen=True)
class SearchIndex:
    """Everything the scoring loop reads, built once per service instance."""

    people: tuple[Person, ...]
    organizations: tuple[Organization, ...]
    processed_people: tuple[ProcessedPerson, ...]
    processed_organizations: tuple[ProcessedOrganization, ...]
    organizations_by_name: Mapping[str, Organization]

    @classmethod
    def build(
        cls,
        people: Iterable[Person] | None = None,
        organizations: Iterable[Organization] | None = None,
    ) -> SearchIndex:
        frozen_people = tuple(people or ())
        frozen_orgs = tuple(organizations or ())
        by_name: dict[str, Organization] = {}
        for org in frozen_orgs:
            by_name[org.name.lower()] = org
        return cls(
            people=frozen_people,
            organizations=frozen_orgs,
            processed_people=tuple(ProcessedPerson.from_person(person, by_name) for person in frozen_people),
            processed_organizations=tuple(ProcessedOrganization.from_organization(org) for org in frozen_orgs),
            organizations_by_name=MappingProxyType(by_name),
        )
