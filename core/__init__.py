"""
Core shared utilities for the sponsor creative matcher.

This package provides the shared data models, constants, weight
configuration and I/O utilities used by the matcher, the CLI and the API.

Usage:
    from core import Company, Tier, ThemeTag, ScoringWeights
    from core import load_catalog, load_event_scopes
"""

from .models import (
    AgeTag,
    CatalogValidationError,
    Company,
    CompanyScore,
    CreativeAssets,
    InterestTag,
    MatchDebug,
    MatchResult,
    ScoreBreakdown,
    ServiceTag,
    TagFamily,
    ThemeTag,
    Tier,
    parse_interest_tag,
    parse_interest_tags,
    tag_family,
)
from .config import ScoringWeights
from .data_io import (
    company_from_dict,
    flatten_survey_answers,
    load_catalog,
    load_companies_from_csv,
    load_companies_from_json,
    load_event_scopes,
    load_respondents,
)
from .constants import (
    DEFAULT_AGE_MATCH_BONUS,
    DEFAULT_CATEGORY_BREADTH_BONUS,
    DEFAULT_TAG_MATCH_WEIGHT,
    DEFAULT_TIER_BONUS,
    TAG_LABELS,
    TIER_RANK,
)

__all__ = [
    # Models
    "AgeTag",
    "CatalogValidationError",
    "Company",
    "CompanyScore",
    "CreativeAssets",
    "InterestTag",
    "MatchDebug",
    "MatchResult",
    "ScoreBreakdown",
    "ServiceTag",
    "TagFamily",
    "ThemeTag",
    "Tier",
    "parse_interest_tag",
    "parse_interest_tags",
    "tag_family",
    # Config
    "ScoringWeights",
    # Data I/O
    "company_from_dict",
    "flatten_survey_answers",
    "load_catalog",
    "load_companies_from_csv",
    "load_companies_from_json",
    "load_event_scopes",
    "load_respondents",
    # Constants
    "DEFAULT_AGE_MATCH_BONUS",
    "DEFAULT_CATEGORY_BREADTH_BONUS",
    "DEFAULT_TAG_MATCH_WEIGHT",
    "DEFAULT_TIER_BONUS",
    "TAG_LABELS",
    "TIER_RANK",
]
