"""Next-period and ovulation forecasting.

Calendar method only: the next period is the last cycle start plus the
personal average cycle length, and ovulation is placed a fixed luteal
phase length (14 days) before that.

Confidence grows with the number of logged cycles and shrinks with their
variation:

    cycles   variation   confidence
    0        -           20   (today + 28 days)
    1        -           35   (profile setting or 28 days)
    2-5      any         min(50 + 5·n, 70)
    ≥6       ≤3 days     90
    ≥6       ≤5 days     75
    ≥6       >5 days     60
"""

from __future__ import annotations

import logging
from datetime import date, timedelta
from typing import Sequence

from cyclesense.cycles.config_loader import AnalysisConfig
from cyclesense.cycles.cycle_stats import CycleStatistics, round_half_up
from cyclesense.cycles.results import OvulationPrediction, PeriodPrediction
from cyclesense.models.records import CycleRecord, ProfileSettings

logger = logging.getLogger("cyclesense.cycles.forecaster")


def _build_prediction(
    start: date,
    period_length: int,
    window_days: int,
    confidence: int,
    reason: str,
    today: date,
) -> PeriodPrediction:
    days_until = (start - today).days
    is_overdue = days_until < 0
    return PeriodPrediction(
        predicted_start_date=start,
        predicted_end_date=start + timedelta(days=period_length - 1),
        confidence_level=confidence,
        confidence_reason=reason,
        earliest_possible_date=start - timedelta(days=window_days),
        latest_possible_date=start + timedelta(days=window_days),
        days_until=days_until,
        is_overdue=is_overdue,
        overdue_by=abs(days_until) if is_overdue else None,
    )


def next_period_confidence(
    cycle_count: int, variation: float, config: AnalysisConfig
) -> tuple[int, str]:
    """Confidence level and reason for a forecast from ≥2 cycles."""
    fc = config.forecast
    if cycle_count >= fc.optimal_cycles:
        confidence = fc.next_period_confidence.lookup(variation)
        if confidence == fc.next_period_confidence.top:
            reason = "Very regular cycles with sufficient data"
        elif confidence == fc.next_period_confidence.fallback:
            reason = "Some irregularity detected"
        else:
            reason = "Regular cycles with good data"
        return confidence, reason

    confidence = min(fc.few_cycles_base + cycle_count * fc.few_cycles_step, fc.few_cycles_cap)
    return confidence, f"Based on {cycle_count} cycles"


def predict_next_period(
    cycles: Sequence[CycleRecord],
    stats: CycleStatistics,
    settings: ProfileSettings | None,
    today: date,
    config: AnalysisConfig,
) -> PeriodPrediction:
    """Predict the next period start and its uncertainty window.

    Args:
        cycles:   Validated cycles, oldest first.
        stats:    Statistics for the same cycles.
        settings: Profile settings; ``average_cycle_length`` is used when only
                  one cycle is logged.
        today:    Reference date for ``days_until`` / overdue.
        config:   Analysis configuration.

    Returns:
        PeriodPrediction.  Always returned, even with no data.
    """
    fc = config.forecast

    if not cycles:
        start = today + timedelta(days=config.cycle_length.default_days)
        return _build_prediction(
            start,
            config.period_length.default_days,
            fc.no_data_window_days,
            fc.no_data_confidence,
            "No historical data available",
            today,
        )

    if stats.cycle_count < fc.min_cycles:
        average = (
            settings.average_cycle_length
            if settings and settings.average_cycle_length
            else config.cycle_length.default_days
        )
        confidence = fc.single_cycle_confidence
        reason = "Based on one cycle and user settings"
    else:
        average = stats.average_cycle_length
        confidence, reason = next_period_confidence(
            stats.cycle_count, stats.cycle_variation, config
        )

    start = cycles[-1].start_date + timedelta(days=average)
    window = max(fc.min_window_days, int(round_half_up(stats.cycle_variation)))

    prediction = _build_prediction(
        start, stats.average_period_length, window, confidence, reason, today
    )
    logger.debug(
        "Next period %s (confidence %d, ±%d days, in %d days)",
        prediction.predicted_start_date, confidence, window, prediction.days_until,
    )
    return prediction


def predict_ovulation(
    stats: CycleStatistics,
    next_period: PeriodPrediction,
    config: AnalysisConfig,
) -> OvulationPrediction | None:
    """Place ovulation one luteal phase before the predicted period.

    Returns None (not a zero-confidence object) with fewer than two cycles.
    """
    fc = config.forecast
    if stats.cycle_count < fc.min_cycles:
        return None

    ovulation = next_period.predicted_start_date - timedelta(days=fc.luteal_phase_days)
    return OvulationPrediction(
        predicted_date=ovulation,
        fertile_window_start=ovulation - timedelta(days=fc.fertile_days_before_ovulation),
        fertile_window_end=ovulation,
        confidence=fc.ovulation_confidence.lookup(stats.cycle_variation),
    )


def ovulation_likelihood(
    stats: CycleStatistics, day_in_cycle: int, config: AnalysisConfig
) -> int:
    """Likelihood (0–95) that ``day_in_cycle`` is ovulation day."""
    fc = config.forecast
    if stats.cycle_count < fc.min_cycles:
        return 0

    ovulation_day = stats.average_cycle_length - fc.luteal_phase_days
    distance = abs(day_in_cycle - ovulation_day)
    if distance < len(fc.ovulation_likelihood):
        return fc.ovulation_likelihood[distance]
    return 0


def is_in_fertile_window(
    stats: CycleStatistics, day_in_cycle: int, config: AnalysisConfig
) -> bool:
    fc = config.forecast
    if stats.cycle_count < fc.min_cycles:
        return False

    ovulation_day = stats.average_cycle_length - fc.luteal_phase_days
    return ovulation_day - fc.fertile_days_before_ovulation <= day_in_cycle <= ovulation_day


def is_fertile_day(ovulation: OvulationPrediction | None, day: date) -> bool:
    """Whether ``day`` falls inside the predicted fertile window."""
    if ovulation is None:
        return False
    return ovulation.fertile_window_start <= day <= ovulation.fertile_window_end
