#!/usr/bin/env python3
"""
Catalog I/O and configuration tests

Covers:
- Tag parsing and family lookup
- Catalog loading from CSV and JSON (flat and admin export shapes)
- Event scopes, respondents and survey answer flattening
- Scoring weight overrides from the environment
"""

import json
import logging
import sys
from pathlib import Path

import pytest

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from core import (
    AgeTag,
    CatalogValidationError,
    ScoringWeights,
    ServiceTag,
    TagFamily,
    ThemeTag,
    Tier,
    flatten_survey_answers,
    load_catalog,
    load_companies_from_csv,
    load_companies_from_json,
    load_event_scopes,
    load_respondents,
    parse_interest_tag,
    parse_interest_tags,
    tag_family,
)

PROJECT_ROOT = Path(__file__).parent.parent
SAMPLE_CATALOG = PROJECT_ROOT / "data" / "sponsor_catalog.csv"
SAMPLE_EVENTS = PROJECT_ROOT / "data" / "event_scopes.json"

CSV_HEADER = "company_id,company_name,tier,tags,creative_short,creative_preview,creative_full\n"


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def write_file(tmp_path):
    def _write(name, content):
        path = tmp_path / name
        path.write_text(content, encoding="utf-8")
        return path
    return _write


# =============================================================================
# Tags
# =============================================================================


class TestTags:
    """Tests for tag parsing and families."""

    def test_families_are_resolved_by_type(self):
        assert tag_family(ThemeTag.EDUCATION) is TagFamily.THEME
        assert tag_family(ServiceTag.CAMERA) is TagFamily.SERVICE
        assert tag_family(AgeTag.AGE_13_PLUS) is TagFamily.AGE

    def test_tag_family_rejects_plain_strings(self):
        with pytest.raises(TypeError):
            tag_family("education")

    def test_parse_is_case_and_space_insensitive(self):
        assert parse_interest_tag(" Cram_School ") is ServiceTag.CRAM_SCHOOL
        assert parse_interest_tag("other") is ThemeTag.OTHER

    def test_parse_unknown_returns_none(self):
        assert parse_interest_tag("age_99") is None
        assert parse_interest_tag(None) is None

    def test_parse_tags_drops_unknown(self):
        tags = parse_interest_tags(["education", "bogus", ThemeTag.ART, "education"])
        assert tags == frozenset({ThemeTag.EDUCATION, ThemeTag.ART})

    def test_parse_tags_empty(self):
        assert parse_interest_tags(None) == frozenset()
        assert parse_interest_tags([]) == frozenset()

    def test_tier_parse(self):
        assert Tier.parse("Gold") is Tier.GOLD
        assert Tier.PLATINUM.rank > Tier.GOLD.rank > Tier.SILVER.rank > Tier.BRONZE.rank
        with pytest.raises(CatalogValidationError):
            Tier.parse("diamond")


# =============================================================================
# Catalog Loading
# =============================================================================


class TestCatalogLoading:
    """Tests for CSV/JSON catalog loaders."""

    def test_sample_catalog_loads(self):
        companies = load_companies_from_csv(SAMPLE_CATALOG)
        assert [c.company_id for c in companies] == [
            "co-platinum-1", "co-gold-1", "co-silver-1", "co-bronze-1",
        ]
        platinum = companies[0]
        assert platinum.tier is Tier.PLATINUM
        assert platinum.tags == {ThemeTag.EDUCATION, ServiceTag.CRAM_SCHOOL, ThemeTag.TECHNOLOGY}
        assert platinum.coupon_code == "VLSKIDS2026"
        assert companies[2].coupon_code is None

    def test_csv_accepts_both_separators(self, write_file):
        path = write_file("c.csv", CSV_HEADER + "x,X,silver,sports;lessons|age_7_9,s,p,f\n")
        company = load_companies_from_csv(path)[0]
        assert company.tags == {ThemeTag.SPORTS, ServiceTag.LESSONS, AgeTag.AGE_7_9}
        assert company.creatives.short == "s"
        assert company.creatives.full == "f"

    def test_unknown_catalog_tag_is_dropped_with_warning(self, write_file, caplog):
        path = write_file("c.csv", CSV_HEADER + "x,X,gold,food|space_travel,,,\n")
        with caplog.at_level(logging.WARNING):
            company = load_companies_from_csv(path)[0]
        assert company.tags == {ThemeTag.FOOD}
        assert "space_travel" in caplog.text

    def test_unknown_tier_raises(self, write_file):
        path = write_file("c.csv", CSV_HEADER + "x,X,diamond,food,,,\n")
        with pytest.raises(CatalogValidationError):
            load_companies_from_csv(path)

    def test_missing_id_raises(self, write_file):
        path = write_file("c.csv", CSV_HEADER + ",X,gold,food,,,\n")
        with pytest.raises(CatalogValidationError):
            load_companies_from_csv(path)

    def test_duplicate_id_raises(self, write_file):
        path = write_file("c.csv", CSV_HEADER + "x,X,gold,food,,,\nx,Y,silver,art,,,\n")
        with pytest.raises(CatalogValidationError):
            load_companies_from_csv(path)

    def test_json_admin_export_shape(self, write_file):
        data = [{
            "id": "co-1",
            "name": "Kids Learning",
            "tier": "platinum",
            "tags": ["education", "cram_school"],
            "videos": {"cm15": "v15", "cm30": "v30", "cm60": "v60"},
            "offerText": "Free trial",
            "couponCode": "KIDS",
        }]
        path = write_file("c.json", json.dumps(data))
        company = load_companies_from_json(path)[0]
        assert company.company_id == "co-1"
        assert company.company_name == "Kids Learning"
        assert company.creatives.preview == "v30"
        assert company.offer_text == "Free trial"
        assert company.coupon_code == "KIDS"

    def test_json_wrapped_in_companies_key(self, write_file):
        path = write_file("c.json", json.dumps({"companies": [
            {"company_id": "x", "company_name": "X", "tier": "bronze", "tags": []},
        ]}))
        assert [c.company_id for c in load_catalog(path)] == ["x"]

    def test_json_not_a_list_raises(self, write_file):
        path = write_file("c.json", json.dumps({"x": 1}))
        with pytest.raises(CatalogValidationError):
            load_companies_from_json(path)

    def test_load_catalog_dispatches_on_suffix(self):
        assert len(load_catalog(SAMPLE_CATALOG)) == 4


# =============================================================================
# Event Scopes and Respondents
# =============================================================================


class TestScopesAndRespondents:
    """Tests for event scope and respondent loaders."""

    def test_sample_event_scopes(self):
        scopes = load_event_scopes(SAMPLE_EVENTS)
        assert scopes["evt-sports"] == ["co-silver-1", "co-bronze-1"]
        assert scopes["evt-graduation"] is None

    def test_mapping_format(self, write_file):
        path = write_file("e.json", json.dumps({"evt-a": ["x"], "evt-b": []}))
        assert load_event_scopes(path) == {"evt-a": ["x"], "evt-b": None}

    def test_invalid_scope_format(self, write_file):
        path = write_file("e.json", json.dumps("nope"))
        with pytest.raises(ValueError):
            load_event_scopes(path)

    def test_bare_string_company_list_is_single_id(self, write_file):
        path = write_file("e.json", json.dumps({"evt-a": "co-gold-1"}))
        assert load_event_scopes(path) == {"evt-a": ["co-gold-1"]}

        path = write_file("l.json", json.dumps([{"id": "evt-b", "company_ids": "co-1"}]))
        assert load_event_scopes(path) == {"evt-b": ["co-1"]}

    def test_non_list_company_list_raises(self, write_file):
        path = write_file("e.json", json.dumps({"evt-a": {"co-1": True}}))
        with pytest.raises(ValueError):
            load_event_scopes(path)

    def test_flatten_survey_answers(self):
        tags = flatten_survey_answers({
            "q1": ["education", "sports"],
            "q2": ["other"],
            "q3": "age_4_6",
        })
        assert tags == {ThemeTag.EDUCATION, ThemeTag.SPORTS, ThemeTag.OTHER, AgeTag.AGE_4_6}

    def test_load_respondents(self, write_file):
        path = write_file("r.json", json.dumps({"respondents": [
            {"respondent_id": "r1", "tags": ["food"], "event_id": "evt-a"},
            {"answers": {"q1": ["art"], "q3": ["age_0_3"]}},
        ]}))
        respondents = load_respondents(path)
        assert respondents[0] == ("r1", frozenset({ThemeTag.FOOD}), "evt-a")
        assert respondents[1] == ("respondent_2", frozenset({ThemeTag.ART, AgeTag.AGE_0_3}), None)


# =============================================================================
# Configuration
# =============================================================================


class TestScoringWeights:
    """Tests for weight defaults and environment overrides."""

    def test_defaults(self):
        weights = ScoringWeights()
        assert weights.tag_match == 10
        assert weights.age_match == 15
        assert weights.category_breadth == 5
        assert [weights.bonus_for(t) for t in Tier] == [8, 6, 4, 2]

    def test_from_empty_env_uses_defaults(self):
        assert ScoringWeights.from_env({}) == ScoringWeights()

    def test_from_env_overrides(self):
        weights = ScoringWeights.from_env({
            "SPONSOR_MATCH_TAG_WEIGHT": "20",
            "SPONSOR_MATCH_TIER_BONUS_GOLD": "1",
            "SPONSOR_MATCH_AGE_BONUS": " ",
        })
        assert weights.tag_match == 20
        assert weights.bonus_for(Tier.GOLD) == 1
        assert weights.bonus_for(Tier.PLATINUM) == 8
        assert weights.age_match == 15

    def test_from_env_rejects_non_integer(self):
        with pytest.raises(ValueError):
            ScoringWeights.from_env({"SPONSOR_MATCH_BREADTH_BONUS": "five"})

    def test_weights_are_hashable(self):
        assert hash(ScoringWeights()) == hash(ScoringWeights.from_env({}))
        cache = {ScoringWeights(): "default"}
        assert cache[ScoringWeights()] == "default"

    def test_tier_bonus_is_read_only(self):
        source = {Tier.GOLD: 3}
        weights = ScoringWeights(tier_bonus=source)
        source[Tier.GOLD] = 99
        assert weights.bonus_for(Tier.GOLD) == 3
        with pytest.raises(TypeError):
            weights.tier_bonus[Tier.GOLD] = 1
