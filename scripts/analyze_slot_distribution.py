#!/usr/bin/env python3
"""
Slot distribution analysis

Reads match_results.json written by run_sponsor_matcher.py and summarizes how
often each sponsor wins the platinum and matched slots.

Key questions:
1. Does one sponsor dominate the matched slot?
2. How are matched-slot wins split across gold/silver/bronze?
3. How many respondents get no creative for a slot?
"""

import argparse
import json
from pathlib import Path

import pandas as pd


def _parse_args() -> argparse.Namespace:
    default_results_path = Path(__file__).resolve().parents[1] / "output_production" / "sponsor_match" / "match_results.json"
    parser = argparse.ArgumentParser(description="Sponsor slot distribution analysis")
    parser.add_argument(
        "--results-path",
        type=Path,
        default=default_results_path,
        help=f"match_results.json path, default: {default_results_path}",
    )
    parser.add_argument(
        "--output-csv",
        type=Path,
        default=None,
        help="Optional path to write the per-sponsor summary as CSV",
    )
    return parser.parse_args()


def load_results_frame(results_path: Path) -> pd.DataFrame:
    """Flatten match records into one row per respondent."""
    with open(results_path, "r", encoding="utf-8") as f:
        records = json.load(f)

    rows = []
    for r in records:
        platinum = r.get("platinum_cm") or {}
        matched = r.get("matched_cm") or {}
        rows.append({
            "respondent_id": r.get("respondent_id"),
            "event_id": r.get("event_id"),
            "tag_count": len(r.get("tags", [])),
            "platinum_id": platinum.get("company_id"),
            "platinum_name": platinum.get("company_name"),
            "matched_id": matched.get("company_id"),
            "matched_name": matched.get("company_name"),
            "matched_tier": matched.get("tier"),
        })
    return pd.DataFrame(rows)


def summarize_sponsors(df: pd.DataFrame) -> pd.DataFrame:
    """Count slot wins per sponsor."""
    platinum_wins = df["platinum_name"].value_counts().rename("platinum_wins")
    matched_wins = df["matched_name"].value_counts().rename("matched_wins")
    summary = pd.concat([platinum_wins, matched_wins], axis=1).fillna(0).astype(int)
    summary["total_wins"] = summary["platinum_wins"] + summary["matched_wins"]
    summary["matched_share"] = (summary["matched_wins"] / max(len(df), 1)).round(3)
    return summary.sort_values("total_wins", ascending=False)


def main() -> None:
    args = _parse_args()
    df = load_results_frame(args.results_path)

    print("=" * 70)
    print("Sponsor Slot Distribution Analysis")
    print("=" * 70)
    print(f"\nRespondents: {len(df)}")
    print(f"Without platinum CM: {df['platinum_id'].isna().sum()}")
    print(f"Without matched CM: {df['matched_id'].isna().sum()}")
    print(f"Without any tags: {(df['tag_count'] == 0).sum()}")

    print("\n" + "=" * 50)
    print("Wins per sponsor")
    print("=" * 50)
    summary = summarize_sponsors(df)
    print(summary)

    print("\n" + "=" * 50)
    print("Matched slot by tier")
    print("=" * 50)
    print(df["matched_tier"].value_counts(normalize=True).round(3))

    if args.output_csv:
        summary.to_csv(args.output_csv, encoding="utf-8-sig")
        print(f"\nSaved summary to: {args.output_csv}")


if __name__ == "__main__":
    main()
