#!/usr/bin/env python3
"""
CLI tests for run_sponsor_matcher.py using the sample data in data/.
"""

import json
import sys
from pathlib import Path

import pytest

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from run_sponsor_matcher import main

PROJECT_ROOT = Path(__file__).parent.parent
SAMPLE_CATALOG = PROJECT_ROOT / "data" / "sponsor_catalog.csv"
SAMPLE_EVENTS = PROJECT_ROOT / "data" / "event_scopes.json"
SAMPLE_RESPONDENTS = PROJECT_ROOT / "data" / "respondents_sample.json"


@pytest.fixture
def base_args(tmp_path):
    return [
        "--catalog", str(SAMPLE_CATALOG),
        "--events-json", str(SAMPLE_EVENTS),
        "--output-dir", str(tmp_path / "out"),
        "--quiet",
    ]


def read_results(tmp_path):
    with open(tmp_path / "out" / "match_results.json", "r", encoding="utf-8") as f:
        return json.load(f)


class TestCli:
    """Tests for the matcher CLI."""

    def test_single_respondent(self, base_args, tmp_path):
        assert main(["--tags", "education"] + base_args) == 0
        records = read_results(tmp_path)
        assert len(records) == 1
        assert records[0]["platinum_cm"]["company_id"] == "co-platinum-1"
        assert records[0]["matched_cm"]["company_id"] == "co-silver-1"
        assert "debug" not in records[0]
        assert (tmp_path / "out" / "run_metadata.json").exists()

    def test_empty_tags(self, base_args, tmp_path):
        assert main(["--tags"] + base_args) == 0
        records = read_results(tmp_path)
        assert records[0]["tags"] == []
        assert records[0]["matched_cm"]["company_id"] == "co-gold-1"

    def test_batch_with_debug(self, base_args, tmp_path):
        assert main(["--respondents-json", str(SAMPLE_RESPONDENTS), "--debug"] + base_args) == 0
        records = {r["respondent_id"]: r for r in read_results(tmp_path)}
        assert len(records) == 6

        sports = records["r-002"]
        assert sports["platinum_cm"] is None
        assert sports["matched_cm"]["company_id"] == "co-silver-1"
        assert len(sports["debug"]["all_scores"]) == 2

        travel = records["r-004"]
        assert travel["matched_cm"]["company_id"] == "co-gold-1"

        metadata = json.loads((tmp_path / "out" / "run_metadata.json").read_text(encoding="utf-8"))
        assert metadata["results_summary"]["total_respondents"] == 6
        assert metadata["results_summary"]["with_platinum"] == 5

    def test_demo_mode(self, base_args, tmp_path):
        assert main(["--tags", "food", "food_product", "--demo"] + base_args) == 0
        record = read_results(tmp_path)[0]
        assert record["matched_cm"]["company_id"] == "co-bronze-1"

    def test_demo_mode_respects_event_scope(self, base_args, tmp_path):
        assert main(["--tags", "sports", "--event-id", "evt-sports", "--demo"] + base_args) == 0
        record = read_results(tmp_path)[0]
        assert record["event_id"] == "evt-sports"
        assert record["platinum_cm"] is None
        assert record["matched_cm"]["company_id"] == "co-silver-1"

    def test_print_only_does_not_write(self, base_args, tmp_path, capsys):
        assert main(["--tags", "sports", "--debug", "--print-only"] + base_args) == 0
        assert not (tmp_path / "out").exists()
        out = capsys.readouterr().out
        assert "Reason:" in out
        assert "co-silver-1" in out

    def test_missing_catalog(self, tmp_path):
        assert main(["--tags", "food", "--catalog", str(tmp_path / "none.csv")]) == 1
