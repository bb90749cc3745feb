"""Result types produced by the cycle analysis engine.

All results are frozen dataclasses holding tuples, so a ``CycleAnalysis``
can be shared freely and compared for equality.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from enum import Enum


class CyclePhase(str, Enum):
    menstrual = "menstrual"
    follicular = "follicular"
    ovulatory = "ovulatory"
    luteal = "luteal"
    unknown = "unknown"


class RegularityLevel(str, Enum):
    very_regular = "very_regular"
    regular = "regular"
    somewhat_irregular = "somewhat_irregular"
    irregular = "irregular"
    very_irregular = "very_irregular"
    insufficient_data = "insufficient_data"


class InsightType(str, Enum):
    info = "info"
    warning = "warning"
    tip = "tip"
    concern = "concern"


class DataMaturity(str, Enum):
    new = "new"
    developing = "developing"
    mature = "mature"
    extensive = "extensive"


class PredictionReliability(str, Enum):
    high = "high"
    moderate = "moderate"
    low = "low"
    insufficient = "insufficient"


@dataclass(frozen=True)
class CurrentState:
    """Where today falls in the most recent cycle.

    Attributes:
        phase:        Derived phase for today.
        day_in_cycle: 1-indexed day since the last cycle start (0 without data).
        is_on_period: Today is one of the last cycle's logged period days.
        period_day:   1-indexed day within the period, only when on period.
    """

    phase: CyclePhase
    day_in_cycle: int
    is_on_period: bool
    period_day: int | None = None


@dataclass(frozen=True)
class PeriodPrediction:
    """Forecast for the next period start.

    ``overdue_by`` is set only when ``is_overdue``; it always equals
    ``abs(days_until)`` in that case.
    """

    predicted_start_date: date
    predicted_end_date: date
    confidence_level: int
    confidence_reason: str
    earliest_possible_date: date
    latest_possible_date: date
    days_until: int
    is_overdue: bool
    overdue_by: int | None = None


@dataclass(frozen=True)
class OvulationPrediction:
    predicted_date: date
    fertile_window_start: date
    fertile_window_end: date
    confidence: int


@dataclass(frozen=True)
class HealthInsight:
    type: InsightType
    title: str
    message: str
    actionable: bool
    priority: int


@dataclass(frozen=True)
class SymptomPattern:
    """How often a symptom type shows up and in which phases.

    Attributes:
        type:              Symptom type slug (e.g. ``"cramps"``).
        frequency:         Share of symptom records containing this type.
        average_intensity: Mean logged intensity (1–5).
        phases:            Phases the occurrences fell in, most frequent first.
    """

    type: str
    frequency: float
    average_intensity: float
    phases: tuple[CyclePhase, ...] = ()


@dataclass(frozen=True)
class DataQuality:
    score: int
    completeness: int
    consistency: int
    suggestions: tuple[str, ...] = ()


@dataclass(frozen=True)
class CycleAnalysis:
    """Immutable snapshot of one analysis run.

    Created fresh by every ``analyze`` call; nothing in the engine holds a
    reference to it afterwards.
    """

    # Current state
    current_phase: CyclePhase
    day_in_cycle: int
    is_on_period: bool
    period_day: int | None
    phase_confidence: int
    is_in_fertile_window: bool
    ovulation_likelihood: int

    # Cycle metrics
    cycle_count: int
    average_cycle_length: int
    cycle_variation: float
    average_period_length: int
    period_variation: float
    median_cycle_length: float
    consistency_index: int

    # Forecasts
    next_period_prediction: PeriodPrediction
    ovulation_prediction: OvulationPrediction | None

    # Insights
    cycle_regularity: RegularityLevel
    health_insights: tuple[HealthInsight, ...]
    health_score: int
    symptom_patterns: tuple[SymptomPattern, ...]

    # Data quality
    data_quality: DataQuality
    recommended_actions: tuple[str, ...]
    data_maturity: DataMaturity
    prediction_reliability: PredictionReliability

    @property
    def has_ovulation_prediction(self) -> bool:
        return self.ovulation_prediction is not None
