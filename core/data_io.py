"""
Shared data I/O utilities for the sponsor creative matcher.

This module loads the inputs the matcher consumes from the admin side
(company catalog, event scopes) and from the survey side (respondent tags).
"""

import csv
import json
import logging
import re
from pathlib import Path
from typing import Any, Dict, FrozenSet, Iterable, List, Mapping, Optional, Tuple, Union

from .constants import TAG_SEPARATORS
from .models import (
    CatalogValidationError,
    Company,
    CreativeAssets,
    InterestTag,
    Tier,
    parse_interest_tag,
    parse_interest_tags,
)

_TAG_SPLIT_PATTERN = re.compile("|".join(re.escape(sep) for sep in TAG_SEPARATORS))


def _parse_catalog_tags(raw: Union[str, Iterable[str], None], company_id: str) -> FrozenSet[InterestTag]:
    """Parse a company's tag column, dropping unknown values with a warning."""
    if raw is None:
        return frozenset()
    if isinstance(raw, str):
        values = [t.strip() for t in _TAG_SPLIT_PATTERN.split(raw)]
    else:
        values = [str(t).strip() for t in raw]

    tags = set()
    for value in values:
        if not value:
            continue
        tag = parse_interest_tag(value)
        if tag is None:
            logging.warning(f"Dropping unknown tag '{value}' for company {company_id}")
            continue
        tags.add(tag)
    return frozenset(tags)


def company_from_dict(item: Mapping[str, Any]) -> Company:
    """Build a Company from a loosely-typed record.

    Accepts both the flat CSV column names (company_id, creative_short, ...)
    and the admin export shape (id, name, videos.cm15/cm30/cm60).

    Raises:
        CatalogValidationError: If the id is missing or the tier is unknown
    """
    company_id = str(item.get("company_id") or item.get("id") or "").strip()
    company_name = str(item.get("company_name") or item.get("name") or "").strip()
    if not company_id:
        raise CatalogValidationError(f"Catalog entry without company_id: {dict(item)}")
    if not item.get("tier"):
        raise CatalogValidationError(f"Company {company_id} has no tier")

    videos = item.get("videos") or {}
    creatives = CreativeAssets(
        short=item.get("creative_short") or videos.get("cm15", ""),
        preview=item.get("creative_preview") or videos.get("cm30", ""),
        full=item.get("creative_full") or videos.get("cm60", ""),
    )

    return Company(
        company_id=company_id,
        company_name=company_name,
        tier=Tier.parse(item["tier"]),
        tags=_parse_catalog_tags(item.get("tags"), company_id),
        creatives=creatives,
        logo_url=item.get("logo_url") or item.get("logoUrl") or "",
        offer_text=item.get("offer_text") or item.get("offerText") or "",
        offer_url=item.get("offer_url") or item.get("offerUrl") or "",
        coupon_code=item.get("coupon_code") or item.get("couponCode") or None,
    )


def _check_unique_ids(companies: List[Company]) -> None:
    seen = set()
    for company in companies:
        if company.company_id in seen:
            raise CatalogValidationError(f"Duplicate company_id in catalog: {company.company_id}")
        seen.add(company.company_id)


def load_companies_from_csv(csv_path: Path) -> List[Company]:
    """Load the sponsor catalog from a CSV file.

    Args:
        csv_path: Path to CSV file with columns:
                  company_id, company_name, tier, tags, creative_short,
                  creative_preview, creative_full, logo_url, offer_text,
                  offer_url, coupon_code
                  Tags are separated by '|' or ';'.

    Returns:
        List of Company objects in file order

    Example:
        companies = load_companies_from_csv(Path("data/sponsors.csv"))
        for c in companies:
            print(f"{c.company_name}: {c.tier.value}")
    """
    companies = []
    with open(csv_path, "r", encoding="utf-8-sig") as f:
        reader = csv.DictReader(f)
        for row in reader:
            companies.append(company_from_dict(row))
    _check_unique_ids(companies)
    return companies


def load_companies_from_json(json_path: Path) -> List[Company]:
    """Load the sponsor catalog from a JSON list of company records."""
    with open(json_path, "r", encoding="utf-8") as f:
        data = json.load(f)

    if isinstance(data, dict) and "companies" in data:
        data = data["companies"]
    if not isinstance(data, list):
        raise CatalogValidationError(f"Expected a list of companies in {json_path}")

    companies = [company_from_dict(item) for item in data]
    _check_unique_ids(companies)
    return companies


def load_catalog(path: Path) -> List[Company]:
    """Load a catalog from CSV or JSON, chosen by file suffix."""
    path = Path(path)
    if path.suffix.lower() == ".csv":
        return load_companies_from_csv(path)
    return load_companies_from_json(path)


def _scope_company_ids(event_id: str, company_ids: Any, json_path: Path) -> Optional[List[str]]:
    """Normalize one event's company list; a bare string is a single id."""
    if not company_ids:
        return None
    if isinstance(company_ids, str):
        return [company_ids]
    if not isinstance(company_ids, list):
        raise ValueError(
            f"Invalid company list for event {event_id} in {json_path}: {company_ids!r}"
        )
    return [str(company_id) for company_id in company_ids]


def load_event_scopes(json_path: Path) -> Dict[str, Optional[List[str]]]:
    """Load event -> company id scopes.

    Accepts either a mapping ``{"evt-summer": ["co-1", "co-2"]}`` or a list
    of event records ``[{"id": "evt-summer", "company_ids": [...]}]``.
    An event with no company list maps to None (all companies eligible).

    Raises:
        ValueError: If the file or an event's company list has the wrong shape
    """
    with open(json_path, "r", encoding="utf-8") as f:
        data = json.load(f)

    scopes: Dict[str, Optional[List[str]]] = {}
    if isinstance(data, dict):
        for event_id, company_ids in data.items():
            scopes[str(event_id)] = _scope_company_ids(event_id, company_ids, json_path)
    elif isinstance(data, list):
        for event in data:
            event_id = event.get("id") or event.get("event_id")
            if not event_id:
                logging.warning(f"Skipping event without id in {json_path}: {event}")
                continue
            company_ids = event.get("company_ids") or event.get("companyIds")
            scopes[str(event_id)] = _scope_company_ids(event_id, company_ids, json_path)
    else:
        raise ValueError(f"Invalid event scope format in {json_path}")
    return scopes


def flatten_survey_answers(answers: Mapping[str, Iterable[str]]) -> FrozenSet[InterestTag]:
    """Flatten per-question survey answers into one respondent tag set.

    Example:
        flatten_survey_answers({"q1": ["education"], "q3": ["age_4_6"]})
    """
    values: List[str] = []
    for question_tags in answers.values():
        if isinstance(question_tags, str):
            values.append(question_tags)
        else:
            values.extend(question_tags)
    return parse_interest_tags(values)


def load_respondents(json_path: Path) -> List[Tuple[str, FrozenSet[InterestTag], Optional[str]]]:
    """Load respondent tag sets for batch matching.

    Each record needs a ``respondent_id`` plus either ``tags`` (flat list) or
    ``answers`` (question id -> tags). An optional ``event_id`` selects the
    event scope.

    Returns:
        List of (respondent_id, tags, event_id)
    """
    with open(json_path, "r", encoding="utf-8") as f:
        data = json.load(f)

    if isinstance(data, dict) and "respondents" in data:
        data = data["respondents"]
    if not isinstance(data, list):
        raise ValueError(f"Invalid JSON format: expected list or dict with 'respondents' key")

    respondents = []
    for i, item in enumerate(data):
        respondent_id = str(item.get("respondent_id") or item.get("id") or f"respondent_{i + 1}")
        if "answers" in item:
            tags = flatten_survey_answers(item["answers"])
        else:
            tags = parse_interest_tags(item.get("tags", []))
        respondents.append((respondent_id, tags, item.get("event_id")))
    return respondents
