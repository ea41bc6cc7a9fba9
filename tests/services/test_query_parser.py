import pytest

from app.models.search import SearchFilters, SearchQuery
from app.services.search.extraction import (
    CompanyExtractor,
    Extraction,
    FundingStageExtractor,
    LocationExtractor,
)
from app.services.search.query_parser import QueryParser, expand_search_text, infer_entity_type, parse_query


def _parse(text: str, **kwargs):
    return parse_query(SearchQuery(text=text, **kwargs))


def test_location_is_extracted_and_normalized():
    parsed = _parse("Engineer in SF")

    assert parsed.filters.location == "san francisco"
    assert parsed.text == "engineer"
    assert parsed.original_text == "Engineer in SF"


def test_location_extractor_rejects_company_phrases():
    assert LocationExtractor().extract("investors in series a") is None
    assert LocationExtractor().extract("engineers in startup land") is None


def test_funding_stage_consumes_leading_at():
    parsed = _parse("CTO at Series A startup")

    assert parsed.filters.funding_stage == "series a"
    assert parsed.filters.company is None
    assert parsed.text == "cto startup"
    assert parsed.entity_type == "person"


@pytest.mark.parametrize("text", ["pre-seed founders", "preseed founders", "pre seed founders"])
def test_funding_stage_extractor_accepts_pre_seed_spellings(text: str):
    extraction = FundingStageExtractor().extract(text)
    assert extraction is not None
    assert extraction.residual == "founders"


def test_company_is_extracted():
    parsed = _parse("engineer at google")

    assert parsed.filters.company == "google"
    assert parsed.text == "engineer"


@pytest.mark.parametrize("text", ["worked at least", "engineer at a startup", "engineer at funded company"])
def test_company_extractor_skips_generic_phrases(text: str):
    assert CompanyExtractor().extract(text) is None


def test_explicit_filters_win_over_extraction():
    parsed = _parse("engineer in boston", filters=SearchFilters(location="SF"))

    assert parsed.filters.location == "san francisco"
    assert parsed.text == "engineer in boston"


def test_role_and_stage_filters_are_normalized():
    parsed = _parse("builder", filters=SearchFilters(role="CTO", funding_stage="Series-A round"))

    assert parsed.filters.role == "chief technology officer"
    assert parsed.filters.funding_stage == "series a"


@pytest.mark.parametrize(
    ("text", "current", "expected"),
    [
        ("senior engineer", None, "person"),
        ("founders", None, None),
        ("founder", "both", "person"),
        ("fintech startups", None, "organization"),
        ("design agency", "both", "organization"),
        ("engineer", "organization", "organization"),
        ("acme", None, None),
        ("acme", "both", "both"),
    ],
)
def test_infer_entity_type(text: str, current, expected):
    assert infer_entity_type(text, current) == expected


def test_expand_search_text_keeps_original_first():
    variants = expand_search_text("Developer")

    assert variants[0] == "developer"
    assert "software engineer" in variants
    assert len(variants) == len(set(variants))


def test_expand_search_text_uses_word_level_synonyms():
    variants = expand_search_text("senior dev")

    assert variants[0] == "senior dev"
    assert {"software engineer", "developer", "coder"} <= set(variants)


def test_expand_search_text_nicknames_and_empty():
    assert expand_search_text("mike") == ("mike", "michael")
    assert expand_search_text("   ") == ()


def test_custom_extractor_strategy():
    class IndustryExtractor:
        field = "industry"

        def extract(self, text: str):
            if "fintech" in text:
                return Extraction(value="fintech", residual=text.replace("fintech", "").strip())
            return None

    parser = QueryParser(extractors=(IndustryExtractor(),))
    parsed = parser.parse(SearchQuery(text="fintech in sf"))

    assert parsed.filters.industry == "fintech"
    assert parsed.filters.location is None
    assert parsed.text == "in sf"
