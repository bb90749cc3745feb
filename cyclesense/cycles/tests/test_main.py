"""Tests for the command-line entry point."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from cyclesense.main import analysis_to_dict, load_profile, main
from cyclesense.cycles.analyzer import placeholder_analysis
from cyclesense.cycles.tests.conftest import FIXTURES_DIR, TEST_DATE


def test_analyzes_profile_export(capsys: pytest.CaptureFixture[str]) -> None:
    exit_code = main([str(FIXTURES_DIR / "profile_data.json"), "--as-of", "2024-03-10"])
    assert exit_code == 0

    output = json.loads(capsys.readouterr().out)
    assert output["cycle_count"] == 3
    assert output["average_cycle_length"] == 28
    assert output["current_phase"] == "ovulatory"
    assert output["cycle_regularity"] == "very_regular"
    assert output["regularity_description"] == "Your cycles are very consistent"
    assert output["next_period_prediction"]["predicted_start_date"] == "2024-03-25"


def test_missing_profile_returns_error(tmp_path: Path) -> None:
    assert main([str(tmp_path / "missing.json")]) == 1


def test_non_object_profile_rejected(tmp_path: Path) -> None:
    path = tmp_path / "profile.json"
    path.write_text("[1, 2, 3]")
    with pytest.raises(ValueError):
        load_profile(path)


def test_load_profile_defaults(tmp_path: Path) -> None:
    path = tmp_path / "profile.json"
    path.write_text('{"cycles": []}')
    assert load_profile(path) == {"cycles": [], "symptoms": [], "notes": [], "settings": None}


def test_placeholder_serializes() -> None:
    data = analysis_to_dict(placeholder_analysis(TEST_DATE))
    assert data["phase_description"] == "Phase unknown - Keep tracking to identify patterns"
    assert data["ovulation_prediction"] is None
