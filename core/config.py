"""
Scoring weight configuration.

Weights are named constants that can be overridden per deployment through
environment variables (loaded from .env by the entry points):

    SPONSOR_MATCH_TAG_WEIGHT=10
    SPONSOR_MATCH_AGE_BONUS=15
    SPONSOR_MATCH_BREADTH_BONUS=5
    SPONSOR_MATCH_TIER_BONUS_PLATINUM=8
    SPONSOR_MATCH_TIER_BONUS_GOLD=6
    SPONSOR_MATCH_TIER_BONUS_SILVER=4
    SPONSOR_MATCH_TIER_BONUS_BRONZE=2
"""

import logging
import os
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Dict, Mapping, Optional

from .constants import (
    DEFAULT_AGE_MATCH_BONUS,
    DEFAULT_CATEGORY_BREADTH_BONUS,
    DEFAULT_TAG_MATCH_WEIGHT,
    DEFAULT_TIER_BONUS,
)
from .models import Tier

ENV_PREFIX = "SPONSOR_MATCH_"


def _default_tier_bonus() -> Dict[Tier, int]:
    return {Tier(name): bonus for name, bonus in DEFAULT_TIER_BONUS.items()}


@dataclass(frozen=True)
class ScoringWeights:
    """Per-unit weights used by the scoring function.

    Instances are immutable and hashable. ``tier_bonus`` is stored as a
    read-only mapping and is left out of the hash.
    """
    tag_match: int = DEFAULT_TAG_MATCH_WEIGHT
    age_match: int = DEFAULT_AGE_MATCH_BONUS
    category_breadth: int = DEFAULT_CATEGORY_BREADTH_BONUS
    tier_bonus: Mapping[Tier, int] = field(default_factory=_default_tier_bonus, hash=False)

    def __post_init__(self):
        object.__setattr__(self, "tier_bonus", MappingProxyType(dict(self.tier_bonus)))

    def bonus_for(self, tier: Tier) -> int:
        return self.tier_bonus.get(tier, 0)

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "ScoringWeights":
        """Build weights from environment variables, falling back to defaults.

        Args:
            environ: Mapping to read from (defaults to os.environ)

        Raises:
            ValueError: If a variable is set but is not an integer
        """
        env = os.environ if environ is None else environ

        def read_int(name: str, default: int) -> int:
            raw = env.get(ENV_PREFIX + name)
            if raw is None or not raw.strip():
                return default
            try:
                return int(raw)
            except ValueError:
                raise ValueError(f"{ENV_PREFIX}{name} must be an integer, got {raw!r}") from None

        tier_bonus = {
            tier: read_int(f"TIER_BONUS_{tier.name}", bonus)
            for tier, bonus in _default_tier_bonus().items()
        }
        weights = cls(
            tag_match=read_int("TAG_WEIGHT", DEFAULT_TAG_MATCH_WEIGHT),
            age_match=read_int("AGE_BONUS", DEFAULT_AGE_MATCH_BONUS),
            category_breadth=read_int("BREADTH_BONUS", DEFAULT_CATEGORY_BREADTH_BONUS),
            tier_bonus=tier_bonus,
        )
        if weights != cls():
            logging.info(f"Using overridden scoring weights: {weights}")
        return weights
