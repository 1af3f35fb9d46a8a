"""
Shared constants for the sponsor creative matcher.

This module contains the scoring defaults, tier ordering and tag labels used
across the matcher, the CLI and the API.
"""

# ============================================================================
# Scoring Defaults
# ============================================================================

# Points per Theme/Service tag shared between respondent and company
DEFAULT_TAG_MATCH_WEIGHT = 10

# Bonus when the respondent picked exactly one age bracket and the company targets it
DEFAULT_AGE_MATCH_BONUS = 15

# Points per tag family (Theme, Service) with at least one overlap
DEFAULT_CATEGORY_BREADTH_BONUS = 5

# Flat per-tier bonus, kept small relative to a single tag match
DEFAULT_TIER_BONUS = {
    "platinum": 8,
    "gold": 6,
    "silver": 4,
    "bronze": 2,
}

# Higher rank wins tie-breaks
TIER_RANK = {
    "platinum": 4,
    "gold": 3,
    "silver": 2,
    "bronze": 1,
}

# Separators accepted in catalog CSV tag columns
TAG_SEPARATORS = ("|", ";")


# ============================================================================
# Tag Label Definitions (Japanese + English)
# ============================================================================

TAG_LABELS = {
    # Theme (Q1)
    "education": {"ja": "教育", "en": "Education"},
    "sports": {"ja": "スポーツ", "en": "Sports"},
    "food": {"ja": "食", "en": "Food"},
    "travel": {"ja": "旅行", "en": "Travel"},
    "technology": {"ja": "テクノロジー", "en": "Technology"},
    "art": {"ja": "アート", "en": "Art"},
    "nature": {"ja": "自然", "en": "Nature"},
    "other": {"ja": "その他", "en": "Other"},

    # Service (Q2)
    "cram_school": {"ja": "学習塾", "en": "Cram School"},
    "lessons": {"ja": "習い事", "en": "Lessons"},
    "food_product": {"ja": "食品", "en": "Food Products"},
    "travel_service": {"ja": "旅行", "en": "Travel Services"},
    "smartphone": {"ja": "スマホ", "en": "Smartphones"},
    "camera": {"ja": "カメラ", "en": "Cameras"},
    "insurance": {"ja": "保険", "en": "Insurance"},

    # Age (Q3)
    "age_0_3": {"ja": "0〜3歳", "en": "Age 0-3"},
    "age_4_6": {"ja": "4〜6歳", "en": "Age 4-6"},
    "age_7_9": {"ja": "7〜9歳", "en": "Age 7-9"},
    "age_10_12": {"ja": "10〜12歳", "en": "Age 10-12"},
    "age_13_plus": {"ja": "13歳以上", "en": "Age 13+"},
}
