"""Display helpers consumed by presentation layers."""

from __future__ import annotations

from datetime import date

from cyclesense.cycles.results import CyclePhase, RegularityLevel

_PHASE_DESCRIPTIONS = {
    CyclePhase.menstrual: "Menstrual phase - Your period is happening",
    CyclePhase.follicular: "Follicular phase - Your body is preparing for ovulation",
    CyclePhase.ovulatory: "Ovulatory phase - You may be ovulating",
    CyclePhase.luteal: "Luteal phase - Your body is preparing for your next period",
}

_REGULARITY_DESCRIPTIONS = {
    RegularityLevel.very_regular: "Your cycles are very consistent",
    RegularityLevel.regular: "Your cycles are fairly regular",
    RegularityLevel.somewhat_irregular: "Your cycles show some variation",
    RegularityLevel.irregular: "Your cycles are quite irregular",
    RegularityLevel.very_irregular: "Your cycles are very irregular",
}


def describe_phase(phase: CyclePhase | str) -> str:
    """One-line description of a cycle phase; unknown values get a fallback."""
    try:
        key = CyclePhase(phase)
    except ValueError:
        key = CyclePhase.unknown
    return _PHASE_DESCRIPTIONS.get(key, "Phase unknown - Keep tracking to identify patterns")


def describe_regularity(level: RegularityLevel | str) -> str:
    try:
        key = RegularityLevel(level)
    except ValueError:
        key = RegularityLevel.insufficient_data
    return _REGULARITY_DESCRIPTIONS.get(key, "Not enough data to assess regularity")


def format_date(day: date) -> str:
    """Format as ``MMM dd, yyyy`` (e.g. ``Jan 05, 2024``)."""
    return day.strftime("%b %d, %Y")


def format_symptom_name(symptom_type: str) -> str:
    """``mood_swings`` → ``Mood Swings``."""
    return " ".join(word[:1].upper() + word[1:] for word in symptom_type.split("_"))


def is_date_in_range(day: date, start: date, end: date) -> bool:
    """Inclusive range check."""
    return start <= day <= end
