"""Command-line harness for the relevance search engine."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from collections.abc import Callable, Sequence
from pathlib import Path
from typing import Any, TextIO

from app.models.search import SearchFilters, SearchQuery, SearchResult
from app.services.search.engine import SearchService
from app.services.search.errors import LexiconError, SearchValidationError
from app.services.search.provider import build_search_service
from pipelines.io.entity_loader import EntityLoaderError

logger = logging.getLogger("tools.search_cli")

ENTITY_TYPES = ("person", "organization", "both")
PROMPT = "\nSearch > "
INLINE_HELP = 'Format: "text" or "text | role:foo | loc:sf | company:x | stage:seed | funding:1000000 | type:organization"'
INLINE_KEYS = {
    "role": "role",
    "loc": "location",
    "location": "location",
    "company": "company",
    "industry": "industry",
    "stage": "funding_stage",
    "tag": "tags",
    "funding": "min_funding",
}


def parse_inline_query(line: str) -> SearchQuery:
    """Parse the interactive ``text | key:value | ...`` syntax."""
    parts = line.split("|")
    text = parts[0].strip()
    filters: dict[str, Any] = {}
    entity_type: str | None = None
    for part in parts[1:]:
        key, _, value = part.partition(":")
        key = key.strip().lower()
        value = value.strip()
        if not key or not value:
            continue
        if key == "type":
            entity_type = value.lower()
            continue
        field = INLINE_KEYS.get(key)
        if field is None:
            logger.warning("Ignoring unknown filter key %r", key)
            continue
        if field == "min_funding":
            try:
                filters[field] = float(value)
            except ValueError:
                logger.warning("Ignoring non-numeric funding value %r", value)
            continue
        if field == "tags":
            filters.setdefault("tags", []).append(value)
            continue
        filters[field] = value
    if entity_type not in ENTITY_TYPES:
        entity_type = None
    return SearchQuery(
        text=text,
        filters=SearchFilters(**filters) if filters else None,
        entity_type=entity_type,  # type: ignore[arg-type]
    )


def format_results(results: Sequence[SearchResult]) -> str:
    if not results:
        return "No results found."
    lines = [f"Found {len(results)} results:"]
    for idx, result in enumerate(results, start=1):
        if result.person is not None:
            details = result.person.title or ""
        else:
            details = (result.organization.industry if result.organization else None) or ""
        marker = " [exec]" if result.derived else ""
        lines.append(
            f"{idx}. [{result.match_grade.upper()}] {result.name} ({details}){marker} - Score: {result.score:.2f}"
        )
        lines.append(f"   Why: {result.explanation}")
    return "\n".join(lines)


def run_query(service: SearchService, query: SearchQuery, *, as_json: bool = False, limit: int | None = None) -> str:
    results = service.search(query)
    if limit:
        results = results[:limit]
    if as_json:
        return json.dumps([result.model_dump(mode="json") for result in results], indent=2)
    return format_results(results)


def interactive_loop(
    service: SearchService,
    *,
    read: Callable[[str], str] = input,
    out: TextIO | None = None,
) -> None:
    """Prompt for queries until ``exit`` or end of input."""
    out = out or sys.stdout
    print("--- Search Service CLI ---", file=out)
    print('Enter a search query (or "exit" to quit).', file=out)
    print(INLINE_HELP, file=out)
    while True:
        try:
            line = read(PROMPT)
        except EOFError:
            break
        if line.strip().lower() == "exit":
            break
        query = parse_inline_query(line)
        try:
            print(run_query(service, query), file=out)
        except SearchValidationError as exc:
            logger.error("%s (code=%s)", exc, exc.code)
            print(f"Invalid query: {exc}", file=out)


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Rank people and organizations for a free-text query.")
    parser.add_argument("text", nargs="?", help="Query text. Omit to start an interactive prompt.")
    parser.add_argument("--type", dest="entity_type", choices=ENTITY_TYPES, help="Entity type to search.")
    parser.add_argument("--location", help="Location filter (city, state or country).")
    parser.add_argument("--role", help="Role/title filter.")
    parser.add_argument("--company", help="Company filter.")
    parser.add_argument("--industry", help="Industry filter (organizations).")
    parser.add_argument("--tag", dest="tags", action="append", help="Required tag (repeatable).")
    parser.add_argument("--funding-stage", help='Funding stage filter, e.g. "Series A".')
    parser.add_argument("--min-funding", type=float, help="Minimum total raised in USD.")
    parser.add_argument("--limit", type=int, help="Show at most this many results.")
    parser.add_argument("--people", type=Path, help="Path to a people JSON file.")
    parser.add_argument("--organizations", type=Path, help="Path to an organizations JSON file.")
    parser.add_argument("--lexicon", type=Path, help="Path to a lexicon YAML file.")
    parser.add_argument("--json", action="store_true", help="Print results as JSON.")
    parser.add_argument("--log-level", default="WARNING", help="Logging level (default: WARNING).")
    return parser.parse_args(argv)


def _query_from_args(args: argparse.Namespace) -> SearchQuery:
    filters = SearchFilters(
        location=args.location,
        role=args.role,
        company=args.company,
        industry=args.industry,
        tags=args.tags,
        funding_stage=args.funding_stage,
        min_funding=args.min_funding,
    )
    has_filters = any(value is not None for value in filters.model_dump().values())
    return SearchQuery(text=args.text, filters=filters if has_filters else None, entity_type=args.entity_type)


def main(argv: Sequence[str] | None = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, str(args.log_level).upper(), logging.WARNING),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
    try:
        service = build_search_service(
            people_path=args.people,
            organizations_path=args.organizations,
            lexicon_path=args.lexicon,
        )
    except (EntityLoaderError, LexiconError) as exc:
        logger.error("%s (code=%s)", exc, exc.code)
        return 1

    if args.text is None:
        interactive_loop(service)
        return 0

    try:
        output = run_query(service, _query_from_args(args), as_json=args.json, limit=args.limit)
    except SearchValidationError as exc:
        logger.error("%s (code=%s)", exc, exc.code)
        print(f"Invalid query: {exc}", file=sys.stderr)
        return 2
    print(output)
    return 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
