"""
Sponsor Matcher - sponsor creative selection for survey respondents

Given a respondent's interest tags, a sponsor catalog and an optional event
scope, pick at most two creatives:
1. platinum slot: the best-scoring platinum-tier company (fixed short cut)
2. matched slot: the best-scoring non-platinum company (preview/full cuts)

Scoring:
- tag_match_score: per shared Theme/Service tag
- age_match_bonus: respondent picked exactly one age bracket and the company targets it
- category_breadth: per family (Theme, Service) with any overlap
- tier_bonus: small flat bonus per sponsorship tier

Selection is deterministic: ties fall back to tier order, then catalog order.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple, Union

from core import (
    CatalogValidationError,
    Company,
    CompanyScore,
    InterestTag,
    MatchDebug,
    MatchResult,
    ScoreBreakdown,
    ScoringWeights,
    TagFamily,
    Tier,
    parse_interest_tags,
    tag_family,
)

TagsInput = Optional[Iterable[Union[str, InterestTag]]]


# ============================================================================
# Candidate Pool
# ============================================================================

def resolve_candidate_pool(
    catalog: Sequence[Company],
    event_company_ids: Optional[Iterable[str]] = None,
) -> List[Company]:
    """Restrict the catalog to an event's companies.

    Args:
        catalog: Full company catalog
        event_company_ids: Company ids attached to the event; None or empty means all.
            A bare string is treated as a single id.

    Returns:
        Eligible companies in catalog order. Ids not found in the catalog are dropped.
    """
    if isinstance(event_company_ids, str):
        event_company_ids = [event_company_ids]
    allowed = set(event_company_ids or ())
    if not allowed:
        return list(catalog)

    pool = [c for c in catalog if c.company_id in allowed]

    missing = allowed - {c.company_id for c in pool}
    if missing:
        logging.debug(f"Event scope references unknown company ids: {sorted(missing)}")
    return pool


# ============================================================================
# Scoring
# ============================================================================

def score_company(
    company: Company,
    user_tags: Iterable[InterestTag],
    weights: Optional[ScoringWeights] = None,
    with_details: bool = True,
) -> CompanyScore:
    """Score one company against the respondent's tag set.

    Args:
        company: Candidate company
        user_tags: Respondent tags (already parsed)
        weights: Scoring weights, defaults if None
        with_details: Build human-readable match entries (debug only)

    Returns:
        CompanyScore with the per-factor breakdown
    """
    weights = weights or ScoringWeights()
    user_tags = frozenset(user_tags)
    breakdown = ScoreBreakdown(tier_bonus=weights.bonus_for(company.tier))

    matched_families = set()
    for tag in sorted(company.tags, key=lambda t: t.value):
        family = tag_family(tag)
        if family is TagFamily.AGE:
            continue
        if tag in user_tags:
            breakdown.tag_match_score += weights.tag_match
            matched_families.add(family)
            if with_details:
                breakdown.tag_match_details.append(f"{tag.value} ({family.value} +{weights.tag_match})")

    user_ages = [t for t in user_tags if tag_family(t) is TagFamily.AGE]
    if len(user_ages) == 1 and user_ages[0] in company.tags:
        breakdown.age_match_bonus = weights.age_match

    breakdown.category_breadth = len(matched_families) * weights.category_breadth

    return CompanyScore(
        company_id=company.company_id,
        company_name=company.company_name,
        tier=company.tier,
        total_score=breakdown.total,
        breakdown=breakdown,
    )


# ============================================================================
# Slot Selection
# ============================================================================

def rank_scores(scores: Sequence[CompanyScore]) -> List[CompanyScore]:
    """Sort by total score, then tier, descending.

    sorted() is stable, so remaining ties keep pool (catalog) order.
    """
    return sorted(scores, key=lambda s: (-s.total_score, -s.tier.rank))


def select_slots(scores: Sequence[CompanyScore]) -> Tuple[List[CompanyScore], List[CompanyScore]]:
    """Split scored candidates into ranked platinum and non-platinum lists.

    The head of each list fills the corresponding slot.
    """
    platinum = rank_scores([s for s in scores if s.tier is Tier.PLATINUM])
    others = rank_scores([s for s in scores if s.tier is not Tier.PLATINUM])
    return platinum, others


# ============================================================================
# Debug Report
# ============================================================================

def _describe_slot(label: str, ranked: Sequence[CompanyScore]) -> str:
    """Summarize a slot winner.

    Only the winner and the runner-up are compared. When three or more
    candidates tie, the note names the rule that separated the first two.
    """
    if not ranked:
        return f"{label}: none"

    head = ranked[0]
    text = f"{label}: {head.company_name} ({head.company_id}) total={head.total_score}"
    if len(ranked) > 1 and ranked[1].total_score == head.total_score:
        if ranked[1].tier.rank != head.tier.rank:
            text += " [tie resolved by tier order]"
        else:
            text += " [tie resolved by catalog order]"
    return text


def build_debug_report(
    scores: Sequence[CompanyScore],
    platinum_ranked: Sequence[CompanyScore],
    others_ranked: Sequence[CompanyScore],
) -> MatchDebug:
    """Build the ranked score table and a one-line rationale."""
    if not scores:
        reason = "No eligible companies in candidate pool"
    else:
        reason = "; ".join([
            _describe_slot("platinum", platinum_ranked),
            _describe_slot("matched", others_ranked),
        ])

    return MatchDebug(
        all_scores=rank_scores(scores),
        platinum_scores=list(platinum_ranked),
        reason=reason,
    )


# ============================================================================
# Matcher
# ============================================================================

class SponsorMatcher:
    """Selects platinum and matched creatives from a fixed catalog snapshot.

    Example:
        matcher = SponsorMatcher(companies)
        result = matcher.match(["education", "cram_school", "age_4_6"])
        print(result.platinum_cm, result.matched_cm)
    """

    def __init__(self, catalog: Iterable[Company], weights: Optional[ScoringWeights] = None):
        """Initialize the matcher

        Args:
            catalog: Company records, in admin catalog order
            weights: Scoring weights (defaults if None)

        Raises:
            CatalogValidationError: If an entry is not a Company or ids repeat
        """
        companies = tuple(catalog)
        seen = set()
        for company in companies:
            if not isinstance(company, Company):
                raise CatalogValidationError(f"Catalog entry is not a Company: {company!r}")
            if company.company_id in seen:
                raise CatalogValidationError(f"Duplicate company_id in catalog: {company.company_id}")
            seen.add(company.company_id)

        self.catalog = companies
        self.weights = weights or ScoringWeights()

    def match(
        self,
        tags: TagsInput,
        event_company_ids: Optional[Iterable[str]] = None,
        include_debug: bool = False,
    ) -> MatchResult:
        """Select the creatives for one respondent.

        Args:
            tags: Respondent tags; unknown strings are ignored
            event_company_ids: Optional event scope
            include_debug: Attach the ranked score table and rationale

        Returns:
            MatchResult; both slots are None when the pool is empty
        """
        user_tags = parse_interest_tags(tags)
        pool = resolve_candidate_pool(self.catalog, event_company_ids)
        by_id = {c.company_id: c for c in pool}

        scores = [
            score_company(c, user_tags, self.weights, with_details=include_debug)
            for c in pool
        ]
        platinum_ranked, others_ranked = select_slots(scores)

        result = MatchResult(
            platinum_cm=by_id[platinum_ranked[0].company_id] if platinum_ranked else None,
            matched_cm=by_id[others_ranked[0].company_id] if others_ranked else None,
        )
        if include_debug:
            result.debug = build_debug_report(scores, platinum_ranked, others_ranked)
        return result


def match(
    catalog: Iterable[Company],
    tags: TagsInput,
    event_company_ids: Optional[Iterable[str]] = None,
    include_debug: bool = False,
    weights: Optional[ScoringWeights] = None,
) -> MatchResult:
    """One-shot convenience wrapper around SponsorMatcher.match()."""
    return SponsorMatcher(catalog, weights).match(tags, event_company_ids, include_debug)


def demo_match(
    catalog: Iterable[Company],
    tags: TagsInput,
    event_company_ids: Optional[Iterable[str]] = None,
) -> MatchResult:
    """Simplified matcher for the storage-less demo.

    Scores by raw tag overlap (all families, no weights) but keeps the same
    event scoping and platinum/matched slot contract.
    """
    user_tags = parse_interest_tags(tags)
    companies = resolve_candidate_pool(list(catalog), event_company_ids)

    def overlap(company: Company) -> int:
        return len(company.tags & user_tags)

    platinum = sorted((c for c in companies if c.is_platinum), key=lambda c: -overlap(c))
    others = sorted((c for c in companies if not c.is_platinum), key=lambda c: -overlap(c))

    return MatchResult(
        platinum_cm=platinum[0] if platinum else None,
        matched_cm=others[0] if others else None,
    )


# ============================================================================
# Utilities
# ============================================================================

def company_to_dict(company: Optional[Company]) -> Optional[Dict[str, Any]]:
    """Convert a Company to a JSON-ready dict (None stays None)."""
    if company is None:
        return None
    return {
        "company_id": company.company_id,
        "company_name": company.company_name,
        "tier": company.tier.value,
        "tags": sorted(t.value for t in company.tags),
        "creatives": {
            "short": company.creatives.short,
            "preview": company.creatives.preview,
            "full": company.creatives.full,
        },
        "logo_url": company.logo_url,
        "offer_text": company.offer_text,
        "offer_url": company.offer_url,
        "coupon_code": company.coupon_code,
    }


def company_score_to_dict(score: CompanyScore) -> Dict[str, Any]:
    return {
        "company_id": score.company_id,
        "company_name": score.company_name,
        "tier": score.tier.value,
        "total_score": score.total_score,
        "breakdown": {
            "tag_match_score": score.breakdown.tag_match_score,
            "age_match_bonus": score.breakdown.age_match_bonus,
            "category_breadth": score.breakdown.category_breadth,
            "tier_bonus": score.breakdown.tier_bonus,
            "tag_match_details": list(score.breakdown.tag_match_details),
        },
    }


def match_result_to_dict(result: MatchResult) -> Dict[str, Any]:
    """Convert a MatchResult to a dict; 'debug' only appears when present."""
    data: Dict[str, Any] = {
        "platinum_cm": company_to_dict(result.platinum_cm),
        "matched_cm": company_to_dict(result.matched_cm),
    }
    if result.debug is not None:
        data["debug"] = {
            "all_scores": [company_score_to_dict(s) for s in result.debug.all_scores],
            "platinum_scores": [company_score_to_dict(s) for s in result.debug.platinum_scores],
            "reason": result.debug.reason,
        }
    return data


def save_match_results(records: List[Dict[str, Any]], output_path: Path) -> None:
    """Save batch match records to a JSON file."""
    with open(output_path, "w", encoding="utf-8") as f:
        json.dump(records, f, ensure_ascii=False, indent=2)


def print_match_result(respondent_id: str, tags: Iterable[InterestTag], result: MatchResult) -> None:
    """Print a match result, including the score table when debug is present."""
    print("\n" + "=" * 70)
    print(f"Respondent: {respondent_id}")
    print(f"Tags: {', '.join(sorted(t.value for t in tags)) or '(none)'}")
    print("=" * 70)

    platinum = result.platinum_cm
    matched = result.matched_cm
    print(f"  Platinum CM: {platinum.company_name + ' (' + platinum.company_id + ')' if platinum else '-'}")
    print(f"  Matched CM:  {matched.company_name + ' (' + matched.company_id + ')' if matched else '-'}")

    if result.debug is None:
        return

    print(f"\n  Reason: {result.debug.reason}")
    print(f"\n  {'#':<3} {'Company':<28} {'Tier':<9} {'Total':>5} {'Tag':>4} {'Age':>4} {'Brd':>4} {'Tier':>4}  Matches")
    for i, s in enumerate(result.debug.all_scores, 1):
        b = s.breakdown
        details = ", ".join(b.tag_match_details) or "-"
        print(f"  {i:<3} {s.company_name[:28]:<28} {s.tier.value:<9} {s.total_score:>5} "
              f"{b.tag_match_score:>4} {b.age_match_bonus:>4} {b.category_breadth:>4} {b.tier_bonus:>4}  {details}")
