"""
Shared data models for the sponsor creative matcher.

This module contains the tag enums, the company record and the score/result
types passed between the matcher, the CLI and the API.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import FrozenSet, Iterable, List, Optional, Union

from .constants import TIER_RANK


class CatalogValidationError(ValueError):
    """Raised when a catalog entry violates the company record contract."""


# ============================================================================
# Interest Tags
# ============================================================================

class ThemeTag(str, Enum):
    """Survey Q1: themes the family is interested in."""
    EDUCATION = "education"
    SPORTS = "sports"
    FOOD = "food"
    TRAVEL = "travel"
    TECHNOLOGY = "technology"
    ART = "art"
    NATURE = "nature"
    OTHER = "other"


class ServiceTag(str, Enum):
    """Survey Q2: services the family is considering."""
    CRAM_SCHOOL = "cram_school"
    LESSONS = "lessons"
    FOOD_PRODUCT = "food_product"
    TRAVEL_SERVICE = "travel_service"
    SMARTPHONE = "smartphone"
    CAMERA = "camera"
    INSURANCE = "insurance"


class AgeTag(str, Enum):
    """Survey Q3: age bracket of the child."""
    AGE_0_3 = "age_0_3"
    AGE_4_6 = "age_4_6"
    AGE_7_9 = "age_7_9"
    AGE_10_12 = "age_10_12"
    AGE_13_PLUS = "age_13_plus"


InterestTag = Union[ThemeTag, ServiceTag, AgeTag]


class TagFamily(str, Enum):
    THEME = "theme"
    SERVICE = "service"
    AGE = "age"


def tag_family(tag: InterestTag) -> TagFamily:
    """Return the family a tag belongs to."""
    if isinstance(tag, ThemeTag):
        return TagFamily.THEME
    if isinstance(tag, ServiceTag):
        return TagFamily.SERVICE
    if isinstance(tag, AgeTag):
        return TagFamily.AGE
    raise TypeError(f"Not an interest tag: {tag!r}")


_TAGS_BY_VALUE = {
    member.value: member
    for enum_cls in (ThemeTag, ServiceTag, AgeTag)
    for member in enum_cls
}


def parse_interest_tag(value: Union[str, InterestTag]) -> Optional[InterestTag]:
    """Map a loose tag string (or an enum member) to its InterestTag.

    Returns None for anything that is not a known tag.
    """
    if isinstance(value, (ThemeTag, ServiceTag, AgeTag)):
        return value
    if not isinstance(value, str):
        return None
    return _TAGS_BY_VALUE.get(value.strip().lower())


def parse_interest_tags(values: Optional[Iterable[Union[str, InterestTag]]]) -> FrozenSet[InterestTag]:
    """Parse a respondent's tags, silently dropping unrecognized values."""
    if not values:
        return frozenset()
    if isinstance(values, str):
        values = [values]

    tags = set()
    for value in values:
        tag = parse_interest_tag(value)
        if tag is None:
            logging.debug(f"Ignoring unrecognized respondent tag: {value!r}")
            continue
        tags.add(tag)
    return frozenset(tags)


# ============================================================================
# Tiers and Companies
# ============================================================================

class Tier(str, Enum):
    PLATINUM = "platinum"
    GOLD = "gold"
    SILVER = "silver"
    BRONZE = "bronze"

    @property
    def rank(self) -> int:
        return TIER_RANK[self.value]

    @classmethod
    def parse(cls, value: Union[str, "Tier"]) -> "Tier":
        """Parse a tier string, raising CatalogValidationError if unknown."""
        if isinstance(value, Tier):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise CatalogValidationError(f"Unknown tier: {value!r}") from None


@dataclass(frozen=True)
class CreativeAssets:
    """References to the three creative cuts (short/preview/full).

    Presence is not validated; rendering decides what to do with gaps.
    """
    short: str = ""
    preview: str = ""
    full: str = ""


@dataclass(frozen=True)
class Company:
    """A sponsor company as supplied by the admin catalog.

    Tags may mix all three families. Offer fields are passed through to the
    completion screen untouched.
    """
    company_id: str
    company_name: str
    tier: Tier
    tags: FrozenSet[InterestTag] = frozenset()
    creatives: CreativeAssets = field(default_factory=CreativeAssets)
    logo_url: str = ""
    offer_text: str = ""
    offer_url: str = ""
    coupon_code: Optional[str] = None

    def __post_init__(self):
        if not self.company_id:
            raise CatalogValidationError(f"Company {self.company_name!r} has no company_id")
        if not isinstance(self.tier, Tier):
            raise CatalogValidationError(
                f"Company {self.company_id} has invalid tier {self.tier!r}"
            )
        # Accept any iterable of tags but store an immutable set
        if not isinstance(self.tags, frozenset):
            object.__setattr__(self, "tags", frozenset(self.tags))
        for tag in self.tags:
            if not isinstance(tag, (ThemeTag, ServiceTag, AgeTag)):
                raise CatalogValidationError(
                    f"Company {self.company_id} has non-enum tag {tag!r}"
                )

    @property
    def is_platinum(self) -> bool:
        return self.tier is Tier.PLATINUM


# ============================================================================
# Scores and Results
# ============================================================================

@dataclass
class ScoreBreakdown:
    """Per-factor contribution to a company's total score."""
    tag_match_score: int = 0
    age_match_bonus: int = 0
    category_breadth: int = 0
    tier_bonus: int = 0
    tag_match_details: List[str] = field(default_factory=list)

    @property
    def total(self) -> int:
        return self.tag_match_score + self.age_match_bonus + self.category_breadth + self.tier_bonus


@dataclass
class CompanyScore:
    """A scored candidate. Exists only within one match call."""
    company_id: str
    company_name: str
    tier: Tier
    total_score: int
    breakdown: ScoreBreakdown


@dataclass
class MatchDebug:
    all_scores: List[CompanyScore] = field(default_factory=list)
    platinum_scores: List[CompanyScore] = field(default_factory=list)
    reason: str = ""


@dataclass
class MatchResult:
    """Selected creatives for one respondent.

    platinum_cm fills the fixed short slot; matched_cm fills the variable slot.
    debug is only populated when explicitly requested.
    """
    platinum_cm: Optional[Company] = None
    matched_cm: Optional[Company] = None
    debug: Optional[MatchDebug] = None
