"""Load person and organization collections from JSON fixtures."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, TypeVar

from pydantic import BaseModel, ValidationError

from app.models.entities import Organization, Person

logger = logging.getLogger("pipelines.io.entity_loader")

SAMPLE_DIR = Path(__file__).resolve().parents[2] / "fixtures" / "sample"
DEFAULT_PEOPLE_PATH = SAMPLE_DIR / "people.json"
DEFAULT_ORGANIZATIONS_PATH = SAMPLE_DIR / "organizations.json"

_ModelT = TypeVar("_ModelT", bound=BaseModel)


class EntityLoaderError(RuntimeError):
    """Raised when an entity file cannot be read or does not match the schema."""

    def __init__(self, code: str, message: str) -> None:
        super().__init__(message)
        self.code = code


def load_people(path: Path | None = None) -> list[Person]:
    return _load_models(path or DEFAULT_PEOPLE_PATH, Person)


def load_organizations(path: Path | None = None) -> list[Organization]:
    return _load_models(path or DEFAULT_ORGANIZATIONS_PATH, Organization)


def load_entities(
    people_path: Path | None = None,
    organizations_path: Path | None = None,
) -> tuple[list[Person], list[Organization]]:
    """Load both collections; defaults to the bundled sample data."""
    people = load_people(people_path)
    organizations = load_organizations(organizations_path)
    logger.info("Loaded entities people=%d organizations=%d", len(people), len(organizations))
    return people, organizations


def _load_models(path: Path, model: type[_ModelT]) -> list[_ModelT]:
    payload = _read_json(path)
    if isinstance(payload, dict) and "data" in payload:
        payload = payload["data"]
    if not isinstance(payload, list):
        raise EntityLoaderError("E_SCHEMA_INVALID", f"{path} must contain a JSON list or an object with data[].")
    records: list[_ModelT] = []
    for idx, item in enumerate(payload):
        try:
            records.append(model.model_validate(item))
        except ValidationError as exc:
            raise EntityLoaderError(
                "E_SCHEMA_INVALID",
                f"{path} item {idx} is not a valid {model.__name__}: {exc.errors()[0]['msg']}",
            ) from exc
    return records


def _read_json(path: Path) -> Any:
    target = path.expanduser()
    if not target.exists():
        raise EntityLoaderError("E_READ_ERROR", f"Entity file not found: {target}")
    try:
        raw = target.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise EntityLoaderError("E_READ_ERROR", f"Unable to read {target}: {exc}") from exc
    try:
        return json.loads(raw)
    except json.JSONDecodeError as exc:
        raise EntityLoaderError("E_SCHEMA_INVALID", f"Invalid JSON in {target}: {exc}") from exc
