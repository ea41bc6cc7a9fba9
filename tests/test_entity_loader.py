import json
from pathlib import Path

import pytest

from pipelines.io import entity_loader


def test_load_sample_entities():
    people, organizations = entity_loader.load_entities()

    assert [person.full_name for person in people] == ["Sarah Chen", "Michael Rodriguez", "Emily Johnson"]
    assert [org.name for org in organizations] == ["TechStart Inc", "StartupXYZ"]
    techstart = organizations[0]
    assert techstart.latest_round_type == "Series A"
    assert techstart.total_raised == 15_000_000
    assert [executive.name for executive in techstart.executives] == ["Michael Rodriguez", "John Smith"]
    assert people[0].enriched_at is not None and people[0].enriched_at.tzinfo is not None


def test_load_people_accepts_data_envelope(tmp_path: Path):
    path = tmp_path / "people.json"
    path.write_text(json.dumps({"data": [{"id": "p-1", "full_name": "Jordan Lee", "tags": ["ml"]}]}), encoding="utf-8")

    people = entity_loader.load_people(path)

    assert people[0].full_name == "Jordan Lee"
    assert people[0].tags == ["ml"]
    assert people[0].fact_count == 0


def test_missing_file_raises_read_error(tmp_path: Path):
    with pytest.raises(entity_loader.EntityLoaderError) as exc:
        entity_loader.load_organizations(tmp_path / "missing.json")
    assert exc.value.code == "E_READ_ERROR"


@pytest.mark.parametrize(
    "content",
    [
        "{not json",
        json.dumps({"people": []}),
        json.dumps([{"id": "p-1", "full_name": ""}]),
        json.dumps([{"id": "p-1", "full_name": "Jordan Lee", "fact_count": -3}]),
    ],
)
def test_invalid_people_file_raises_schema_error(tmp_path: Path, content: str):
    path = tmp_path / "people.json"
    path.write_text(content, encoding="utf-8")

    with pytest.raises(entity_loader.EntityLoaderError) as exc:
        entity_loader.load_people(path)
    assert exc.value.code == "E_SCHEMA_INVALID"


def test_undecodable_file_raises_read_error(tmp_path: Path):
    path = tmp_path / "people.json"
    path.write_bytes(b"\xff\xfe[not utf-8]")

    with pytest.raises(entity_loader.EntityLoaderError) as exc:
        entity_loader.load_people(path)
    assert exc.value.code == "E_READ_ERROR"


def test_directory_path_raises_read_error(tmp_path: Path):
    with pytest.raises(entity_loader.EntityLoaderError) as exc:
        entity_loader.load_people(tmp_path)
    assert exc.value.code == "E_READ_ERROR"
