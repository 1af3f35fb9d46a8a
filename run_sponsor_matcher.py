#!/usr/bin/env python3
"""
Sponsor Matcher CLI - select platinum/matched creatives for respondents

Usage:
    # Single respondent (print result with score table)
    python run_sponsor_matcher.py --tags education cram_school age_4_6 --debug --print-only

    # Restrict to an event's sponsors
    python run_sponsor_matcher.py --tags sports lessons --event-id evt-sports

    # Batch match a respondents file
    python run_sponsor_matcher.py --respondents-json data/respondents.json

    # Storage-less demo matcher
    python run_sponsor_matcher.py --tags food art --demo --print-only
"""

import argparse
import json
import sys
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional

from dotenv import load_dotenv
from tqdm import tqdm

from core import (
    CatalogValidationError,
    ScoringWeights,
    load_catalog,
    load_event_scopes,
    load_respondents,
    parse_interest_tags,
)
from sponsor_matcher import (
    SponsorMatcher,
    demo_match,
    match_result_to_dict,
    print_match_result,
    save_match_results,
)


# Default paths
DEFAULT_CATALOG = Path("data/sponsor_catalog.csv")
DEFAULT_EVENTS_JSON = Path("data/event_scopes.json")
DEFAULT_OUTPUT_DIR = Path("output_production/sponsor_match")


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command line arguments"""
    parser = argparse.ArgumentParser(
        description="Sponsor Matcher - pick platinum and matched creatives for respondents",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python run_sponsor_matcher.py --tags education cram_school age_4_6 --debug --print-only
  python run_sponsor_matcher.py --respondents-json data/respondents.json
        """
    )

    # Respondent selection
    respondent_group = parser.add_mutually_exclusive_group(required=True)
    respondent_group.add_argument(
        "--tags",
        nargs="*",
        type=str,
        help="Interest tags of a single respondent (may be empty)",
    )
    respondent_group.add_argument(
        "--respondents-json",
        type=Path,
        help="JSON file with respondents (tags or survey answers)",
    )

    # Data paths
    parser.add_argument(
        "--catalog",
        type=Path,
        default=DEFAULT_CATALOG,
        help=f"Sponsor catalog CSV or JSON (default: {DEFAULT_CATALOG})",
    )
    parser.add_argument(
        "--events-json",
        type=Path,
        default=DEFAULT_EVENTS_JSON,
        help=f"Event -> company id scopes (default: {DEFAULT_EVENTS_JSON})",
    )
    parser.add_argument(
        "--event-id",
        type=str,
        help="Event whose sponsors are eligible (single respondent mode)",
    )

    # Output
    parser.add_argument(
        "--output-dir",
        type=Path,
        default=DEFAULT_OUTPUT_DIR,
        help=f"Output directory (default: {DEFAULT_OUTPUT_DIR})",
    )
    parser.add_argument(
        "--print-only",
        action="store_true",
        help="Print results instead of saving them",
    )

    # Matching options
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Include the ranked score table and rationale",
    )
    parser.add_argument(
        "--demo",
        action="store_true",
        help="Use the simplified demo matcher (overlap count only)",
    )
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Reduce output",
    )

    return parser.parse_args(argv)


def save_run_metadata(
    output_dir: Path,
    args: argparse.Namespace,
    weights: ScoringWeights,
    records: List[Dict[str, Any]],
    start_time: datetime,
    end_time: datetime,
) -> None:
    """Save run metadata"""
    metadata = {
        "run_type": "sponsor_match_demo" if args.demo else "sponsor_match",
        "start_time": start_time.isoformat(),
        "end_time": end_time.isoformat(),
        "duration_seconds": (end_time - start_time).total_seconds(),
        "parameters": {
            "include_debug": args.debug,
            "weights": {
                "tag_match": weights.tag_match,
                "age_match": weights.age_match,
                "category_breadth": weights.category_breadth,
                "tier_bonus": {t.value: b for t, b in weights.tier_bonus.items()},
            },
        },
        "input_files": {
            "catalog": str(args.catalog),
            "events_json": str(args.events_json),
            "respondents_json": str(args.respondents_json) if args.respondents_json else None,
        },
        "results_summary": {
            "total_respondents": len(records),
            "with_platinum": sum(1 for r in records if r["platinum_cm"]),
            "with_matched": sum(1 for r in records if r["matched_cm"]),
        },
    }

    with open(output_dir / "run_metadata.json", "w", encoding="utf-8") as f:
        json.dump(metadata, f, ensure_ascii=False, indent=2)


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry"""
    load_dotenv()
    args = parse_args(argv)

    if not args.catalog.exists():
        print(f"Error: Catalog not found: {args.catalog}", file=sys.stderr)
        return 1

    try:
        weights = ScoringWeights.from_env()
        catalog = load_catalog(args.catalog)
        scopes = load_event_scopes(args.events_json) if args.events_json.exists() else {}
    except (CatalogValidationError, ValueError, OSError) as e:
        print(f"Error loading data: {e}", file=sys.stderr)
        return 1

    if not args.quiet:
        print(f"Loaded {len(catalog)} companies, {len(scopes)} event scopes")

    # (respondent_id, tags, event_id)
    if args.respondents_json:
        if not args.respondents_json.exists():
            print(f"Error: JSON file not found: {args.respondents_json}", file=sys.stderr)
            return 1
        try:
            respondents = load_respondents(args.respondents_json)
        except (ValueError, OSError) as e:
            print(f"Error loading respondents: {e}", file=sys.stderr)
            return 1
    else:
        respondents = [("cli", parse_interest_tags(args.tags), args.event_id)]

    if not respondents:
        print("No respondents to process!")
        return 0

    matcher = SponsorMatcher(catalog, weights)
    start_time = datetime.now()

    records: List[Dict[str, Any]] = []
    iterator = respondents
    if not args.quiet and len(respondents) > 10:
        iterator = tqdm(respondents, desc="Matching respondents")

    for respondent_id, tags, event_id in iterator:
        if event_id and event_id not in scopes:
            print(f"Warning: unknown event '{event_id}' for {respondent_id}, using full catalog", file=sys.stderr)
        event_company_ids = scopes.get(event_id) if event_id else None

        if args.demo:
            result = demo_match(matcher.catalog, tags, event_company_ids)
        else:
            result = matcher.match(tags, event_company_ids, include_debug=args.debug)

        if args.print_only:
            print_match_result(respondent_id, tags, result)

        records.append({
            "respondent_id": respondent_id,
            "event_id": event_id,
            "tags": sorted(t.value for t in tags),
            **match_result_to_dict(result),
        })

    end_time = datetime.now()

    if not args.print_only:
        args.output_dir.mkdir(parents=True, exist_ok=True)
        output_file = args.output_dir / "match_results.json"
        save_match_results(records, output_file)
        save_run_metadata(args.output_dir, args, weights, records, start_time, end_time)
        if not args.quiet:
            print(f"\nSaved results to: {output_file}")

    if not args.quiet:
        duration = (end_time - start_time).total_seconds()
        print(f"\n{'=' * 50}")
        print("SUMMARY")
        print(f"{'=' * 50}")
        print(f"Total respondents: {len(records)}")
        print(f"With platinum CM: {sum(1 for r in records if r['platinum_cm'])}")
        print(f"With matched CM: {sum(1 for r in records if r['matched_cm'])}")
        print(f"Total time: {duration:.3f}s")

    return 0


if __name__ == "__main__":
    sys.exit(main())
