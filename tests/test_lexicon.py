import hashlib
import json
from pathlib import Path

import pytest
import yaml

from app.services.search import lexicon as search_lexicon
from app.services.search.errors import LexiconError


def _expected_sha(sample: dict) -> str:
    canonical = json.dumps(sample, sort_keys=True, separators=(",", ":"), ensure_ascii=False)
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()


def _sample() -> dict:
    return {
        "version": "lexicon-test",
        "synonyms": {"Dev": ["Developer", "coder"]},
        "location_aliases": {"SF": "San Francisco"},
        "title_aliases": {"cto": "chief technology officer"},
        "funding_stages": {"public": "ipo"},
    }


def _write(tmp_path: Path, payload) -> Path:
    path = tmp_path / "search_lexicon.yaml"
    path.write_text(yaml.safe_dump(payload), encoding="utf-8")
    return path


def test_load_lexicon_returns_sha_and_lowercased_tables(tmp_path: Path):
    sample = _sample()
    lexicon = search_lexicon.load_lexicon(_write(tmp_path, sample))

    assert lexicon.version == "lexicon-test"
    assert lexicon.sha256 == _expected_sha(sample)
    assert lexicon.synonyms["dev"] == ("developer", "coder")
    assert lexicon.location_aliases["sf"] == "san francisco"


def test_lexicon_tables_are_read_only(tmp_path: Path):
    lexicon = search_lexicon.load_lexicon(_write(tmp_path, _sample()))

    with pytest.raises(TypeError):
        lexicon.location_aliases["la"] = "los angeles"  # type: ignore[index]


def test_load_lexicon_is_cached(tmp_path: Path):
    path = _write(tmp_path, _sample())

    assert search_lexicon.load_lexicon(path) is search_lexicon.load_lexicon(path)


def test_bundled_lexicon_loads():
    lexicon = search_lexicon.get_lexicon()

    assert lexicon.version == "search-lexicon.v1"
    assert lexicon.title_aliases["developer"] == "software engineer"
    assert lexicon.funding_stages["late stage"] == "series c"


def test_missing_lexicon_raises(tmp_path: Path):
    with pytest.raises(LexiconError) as exc:
        search_lexicon.load_lexicon(tmp_path / "absent.yaml")
    assert exc.value.code == "LEXICON_LOAD_ERROR"


@pytest.mark.parametrize(
    "mutate",
    [
        lambda doc: doc.pop("version"),
        lambda doc: doc.update(synonyms={"dev": "developer"}),
        lambda doc: doc.update(location_aliases=["sf"]),
        lambda doc: doc.update(title_aliases={"cto": ""}),
        lambda doc: doc.pop("funding_stages"),
    ],
)
def test_invalid_lexicon_schema(tmp_path: Path, mutate):
    sample = _sample()
    mutate(sample)

    with pytest.raises(LexiconError) as exc:
        search_lexicon.load_lexicon(_write(tmp_path, sample))
    assert exc.value.code == "LEXICON_SCHEMA_INVALID"


def test_build_lexicon_rejects_non_mapping():
    with pytest.raises(LexiconError) as exc:
        search_lexicon.build_lexicon(["not", "a", "mapping"])
    assert exc.value.code == "LEXICON_SCHEMA_INVALID"


def test_cli_print_sha(tmp_path: Path, capsys: pytest.CaptureFixture[str]):
    sample = _sample()
    path = _write(tmp_path, sample)

    exit_code = search_lexicon.main(["--lexicon", str(path), "--print-sha"])

    assert exit_code == 0
    assert capsys.readouterr().out.strip() == _expected_sha(sample)


def test_cli_reports_invalid_lexicon(tmp_path: Path):
    path = tmp_path / "broken.yaml"
    path.write_text("version: [unclosed", encoding="utf-8")

    assert search_lexicon.main(["--lexicon", str(path)]) == 1
