"""Shared fixtures for cycle analysis engine tests."""

from __future__ import annotations

import json
from datetime import date, timedelta
from pathlib import Path

import pytest

from cyclesense.cycles.config_loader import AnalysisConfig, load_analysis_config
from cyclesense.models.records import CycleRecord, SymptomIntensity, SymptomRecord

# Fixtures directory
FIXTURES_DIR = Path(__file__).parent / "fixtures"

# Reference "today" for the three-cycle scenario (day 14 of the Feb 26 cycle)
TEST_DATE = date(2024, 3, 10)
SCENARIO_STARTS = [date(2024, 1, 1), date(2024, 1, 29), date(2024, 2, 26)]


def make_cycle(start: date, period_length: int = 5, **kwargs) -> CycleRecord:
    return CycleRecord(
        start_date=start,
        period_days=[start + timedelta(days=i) for i in range(period_length)],
        **kwargs,
    )


def make_cycles(starts: list[date], period_length: int = 5) -> list[CycleRecord]:
    return [make_cycle(s, period_length) for s in starts]


def regular_starts(n: int, length: int = 28, first: date = date(2024, 1, 1)) -> list[date]:
    return [first + timedelta(days=i * length) for i in range(n)]


def make_symptom(day: date, *entries: tuple[str, int]) -> SymptomRecord:
    return SymptomRecord(
        date=day,
        symptoms=[SymptomIntensity(type=t, intensity=i) for t, i in entries],
    )


# ---------------------------------------------------------------------------
# Config fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def analysis_config() -> AnalysisConfig:
    """Load the bundled analysis config for tests."""
    return load_analysis_config()


# ---------------------------------------------------------------------------
# Record fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def profile_data() -> dict:
    return json.loads((FIXTURES_DIR / "profile_data.json").read_text())


@pytest.fixture
def scenario_cycles() -> list[CycleRecord]:
    """Three 28-day cycles starting 2024-01-01, five period days each."""
    return make_cycles(SCENARIO_STARTS)


@pytest.fixture
def frequent_cramps() -> list[SymptomRecord]:
    """Ten symptom logs; cramps (intensity ≥3) in four of them."""
    logs = []
    for i in range(10):
        day = date(2024, 1, 1) + timedelta(days=i * 5)
        if i < 4:
            logs.append(make_symptom(day, ("cramps", 3 + i % 2), ("bloating", 2)))
        elif i == 4:
            logs.append(make_symptom(day, ("headache", 2)))
        else:
            logs.append(make_symptom(day, ("fatigue", 1)))
    return logs
