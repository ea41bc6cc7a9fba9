"""Loader/validator for the search lexicon (synonyms and alias tables)."""

from __future__ import annotations

import argparse
import hashlib
import json
import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType

import yaml

from app.services.search.errors import LexiconError

logger = logging.getLogger("app.services.search.lexicon")

DEFAULT_LEXICON_PATH = Path(__file__).resolve().parents[3] / "configs" / "search_lexicon.v1.yaml"
ALIAS_TABLES = ("location_aliases", "title_aliases", "funding_stages")


@dataclass(frozen=True)
class Lexicon:
    """Read-only lookup tables shared by the parser and normalizers."""

    version: str
    synonyms: Mapping[str, tuple[str, ...]]
    location_aliases: Mapping[str, str]
    title_aliases: Mapping[str, str]
    funding_stages: Mapping[str, str]
    sha256: str


_LEXICON_CACHE: dict[Path, Lexicon] = {}


def load_lexicon(path: Path | None = None) -> Lexicon:
    """Load, validate and cache a lexicon file."""
    target = (path or DEFAULT_LEXICON_PATH).expanduser().resolve()
    cached = _LEXICON_CACHE.get(target)
    if cached:
        return cached
    if not target.exists():
        raise LexiconError(f"Lexicon not found at {target}", code="LEXICON_LOAD_ERROR")
    try:
        parsed = yaml.safe_load(target.read_bytes().decode("utf-8"))
    except yaml.YAMLError as exc:
        raise LexiconError(f"Unable to parse YAML: {exc}", code="LEXICON_SCHEMA_INVALID") from exc
    lexicon = build_lexicon(parsed)
    _LEXICON_CACHE[target] = lexicon
    logger.info("Loaded search lexicon version=%s sha=%s path=%s", lexicon.version, lexicon.sha256, target)
    return lexicon


def build_lexicon(parsed: object) -> Lexicon:
    """Validate a parsed lexicon document and freeze its tables."""
    if not isinstance(parsed, Mapping):
        raise LexiconError("Lexicon must be a mapping.", code="LEXICON_SCHEMA_INVALID")

    version = str(parsed.get("version") or "").strip()
    if not version:
        raise LexiconError("version is required.", code="LEXICON_SCHEMA_INVALID")

    synonyms = parsed.get("synonyms")
    if not isinstance(synonyms, Mapping):
        raise LexiconError("synonyms must be a mapping.", code="LEXICON_SCHEMA_INVALID")
    normalized_synonyms: dict[str, tuple[str, ...]] = {}
    for key, variants in synonyms.items():
        if not isinstance(variants, Sequence) or isinstance(variants, str):
            raise LexiconError(f"synonyms[{key}] must be a list.", code="LEXICON_SCHEMA_INVALID")
        normalized_synonyms[_lower_key(key, "synonyms")] = tuple(str(item).strip().lower() for item in variants)

    tables: dict[str, Mapping[str, str]] = {}
    for name in ALIAS_TABLES:
        raw = parsed.get(name)
        if not isinstance(raw, Mapping):
            raise LexiconError(f"{name} must be a mapping.", code="LEXICON_SCHEMA_INVALID")
        table: dict[str, str] = {}
        for key, value in raw.items():
            if not isinstance(value, str) or not value.strip():
                raise LexiconError(f"{name}[{key}] must be a non-empty string.", code="LEXICON_SCHEMA_INVALID")
            table[_lower_key(key, name)] = value.strip().lower()
        tables[name] = MappingProxyType(table)

    canonical = json.dumps(parsed, sort_keys=True, separators=(",", ":"), ensure_ascii=False)
    return Lexicon(
        version=version,
        synonyms=MappingProxyType(normalized_synonyms),
        location_aliases=tables["location_aliases"],
        title_aliases=tables["title_aliases"],
        funding_stages=tables["funding_stages"],
        sha256=hashlib.sha256(canonical.encode("utf-8")).hexdigest(),
    )


def _lower_key(key: object, table: str) -> str:
    if not isinstance(key, str) or not key.strip():
        raise LexiconError(f"{table} contains an invalid key: {key!r}", code="LEXICON_SCHEMA_INVALID")
    return key.strip().lower()


def get_lexicon() -> Lexicon:
    """Default lexicon, loaded once per process."""
    return load_lexicon(DEFAULT_LEXICON_PATH)


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Search lexicon loader/validator.")
    parser.add_argument("--lexicon", type=Path, default=DEFAULT_LEXICON_PATH, help="Path to lexicon YAML.")
    parser.add_argument("--print-sha", action="store_true", help="Print the lexicon sha256 and exit.")
    return parser.parse_args(argv)


def main(argv: Sequence[str] | None = None) -> int:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s [%(name)s] %(message)s")
    args = parse_args(argv)
    try:
        lexicon = load_lexicon(args.lexicon)
    except LexiconError as exc:
        logger.error("%s (code=%s)", exc, exc.code)
        return 1
    if args.print_sha:
        print(lexicon.sha256)
    return 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
