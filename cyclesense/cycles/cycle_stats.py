"""Cycle-length and period-length statistics.

Cycle lengths are never read from the records themselves: they are the
deltas between consecutive start dates of the sorted cycle list, kept only
when they fall inside the configured physiological bounds and then passed
through an interquartile-range outlier filter.

Every function degrades to a documented default when the sample is empty,
so downstream predictions keep working with sparse data.
"""

from __future__ import annotations

import logging
import math
import statistics
from dataclasses import dataclass
from typing import Sequence

from cyclesense.cycles.config_loader import (
    AnalysisConfig,
    CycleLengthConfig,
    OutlierConfig,
    PeriodLengthConfig,
)
from cyclesense.models.records import CycleRecord

logger = logging.getLogger("cyclesense.cycles.cycle_stats")


@dataclass(frozen=True)
class CycleStatistics:
    """All derived metrics for one set of cycles.

    Attributes:
        cycle_count:           Number of valid cycle records.
        average_cycle_length:  Rounded mean cycle length (days).
        cycle_variation:       Population std dev of cycle lengths (1 decimal).
        average_period_length: Rounded mean period length (days).
        period_variation:      Population std dev of period lengths (1 decimal).
        median_cycle_length:   Median cycle length (may be a half day).
        consistency_index:     0–100, higher = more consistent.
    """

    cycle_count: int
    average_cycle_length: int
    cycle_variation: float
    average_period_length: int
    period_variation: float
    median_cycle_length: float
    consistency_index: int


def round_half_up(value: float, digits: int = 0) -> float:
    """Round halves away from zero for positive values (29.5 → 30)."""
    factor = 10 ** digits
    return math.floor(value * factor + 0.5) / factor


def remove_outliers(
    values: Sequence[float], outliers: OutlierConfig = OutlierConfig()
) -> list[float]:
    """Drop values outside ``[Q1 - k·IQR, Q3 + k·IQR]`` (``k = iqr_fence``, 1.5).

    Quartiles are read at indices ``floor(n·0.25)`` and ``floor(n·0.75)`` of
    the sorted sample.  Samples smaller than ``min_sample`` (4) are returned
    unchanged.  Input order is preserved.
    """
    if len(values) < outliers.min_sample:
        return list(values)

    ordered = sorted(values)
    q1 = ordered[math.floor(len(ordered) * 0.25)]
    q3 = ordered[math.floor(len(ordered) * 0.75)]
    iqr = q3 - q1
    lower = q1 - outliers.iqr_fence * iqr
    upper = q3 + outliers.iqr_fence * iqr

    kept = [v for v in values if lower <= v <= upper]
    if len(kept) != len(values):
        logger.debug(
            "Removed %d outlier(s) outside [%.1f, %.1f]",
            len(values) - len(kept), lower, upper,
        )
    return kept


def cycle_lengths(cycles: Sequence[CycleRecord], bounds: CycleLengthConfig) -> list[int]:
    """Consecutive start-date deltas that fall inside the length bounds."""
    lengths = []
    for i in range(1, len(cycles)):
        delta = (cycles[i].start_date - cycles[i - 1].start_date).days
        if bounds.min_days <= delta <= bounds.max_days:
            lengths.append(delta)
    return lengths


def filtered_cycle_lengths(cycles: Sequence[CycleRecord], config: AnalysisConfig) -> list[int]:
    return remove_outliers(cycle_lengths(cycles, config.cycle_length), config.outliers)


def period_lengths(cycles: Sequence[CycleRecord], bounds: PeriodLengthConfig) -> list[int]:
    """Logged period-day counts that fall inside the period bounds."""
    return [
        len(c.period_days)
        for c in cycles
        if bounds.min_days <= len(c.period_days) <= bounds.max_days
    ]


def _pstdev(values: Sequence[float]) -> float:
    return statistics.pstdev(values) if len(values) >= 2 else 0.0


def average_cycle_length(cycles: Sequence[CycleRecord], config: AnalysisConfig) -> int:
    bounds = config.cycle_length
    if len(cycles) < 2:
        return bounds.default_days
    lengths = filtered_cycle_lengths(cycles, config)
    if not lengths:
        return bounds.default_days
    return int(round_half_up(statistics.mean(lengths)))


def cycle_variation(cycles: Sequence[CycleRecord], config: AnalysisConfig) -> float:
    """Std dev of cycle lengths, rounded to one decimal; 0 with fewer than 3 cycles."""
    if len(cycles) < 3:
        return 0.0
    lengths = filtered_cycle_lengths(cycles, config)
    if len(lengths) < 2:
        return 0.0
    return round_half_up(_pstdev(lengths), 1)


def average_period_length(cycles: Sequence[CycleRecord], config: AnalysisConfig) -> int:
    bounds = config.period_length
    lengths = remove_outliers(period_lengths(cycles, bounds), config.outliers)
    if not lengths:
        return bounds.default_days
    return int(round_half_up(statistics.mean(lengths)))


def period_variation(cycles: Sequence[CycleRecord], config: AnalysisConfig) -> float:
    if len(cycles) < 2:
        return 0.0
    lengths = remove_outliers(period_lengths(cycles, config.period_length), config.outliers)
    if len(lengths) < 2:
        return 0.0
    return round_half_up(_pstdev(lengths), 1)


def median_cycle_length(cycles: Sequence[CycleRecord], config: AnalysisConfig) -> float:
    bounds = config.cycle_length
    if len(cycles) < 2:
        return bounds.default_days
    lengths = filtered_cycle_lengths(cycles, config)
    if not lengths:
        return bounds.default_days
    return statistics.median(lengths)


def consistency_index(cycles: Sequence[CycleRecord], config: AnalysisConfig) -> int:
    """``max(0, round((1 - stddev/mean) × 100))`` over the filtered cycle lengths."""
    if len(cycles) < 2:
        return 0
    lengths = filtered_cycle_lengths(cycles, config)
    if not lengths:
        return 0
    cv = _pstdev(lengths) / statistics.mean(lengths)
    return max(0, int(round_half_up((1 - cv) * 100)))


def compute_statistics(cycles: Sequence[CycleRecord], config: AnalysisConfig) -> CycleStatistics:
    """Compute every cycle metric in one pass over the sorted cycles."""
    stats = CycleStatistics(
        cycle_count=len(cycles),
        average_cycle_length=average_cycle_length(cycles, config),
        cycle_variation=cycle_variation(cycles, config),
        average_period_length=average_period_length(cycles, config),
        period_variation=period_variation(cycles, config),
        median_cycle_length=median_cycle_length(cycles, config),
        consistency_index=consistency_index(cycles, config),
    )
    logger.debug(
        "Cycle stats: n=%d avg=%d var=%.1f period=%d",
        stats.cycle_count, stats.average_cycle_length,
        stats.cycle_variation, stats.average_period_length,
    )
    return stats
