"""Current cycle state: phase, day-in-cycle and period status.

Phases follow a fixed piecewise rule on the day in cycle:

    on a logged period day → menstrual
    day ≤ 7                → follicular
    12 ≤ day ≤ 16          → ovulatory
    day ≥ 17               → luteal
    otherwise (days 8–11)  → follicular

The boundaries come from ``AnalysisConfig.phase``.  With
``scale_to_cycle_length`` enabled, the ovulatory window and luteal start
shift by ``average_cycle_length - reference_cycle_length`` so that long or
short cycles are not forced onto a 28-day template.
"""

from __future__ import annotations

import bisect
import logging
from datetime import date
from typing import Sequence

from cyclesense.cycles.config_loader import AnalysisConfig, PhaseConfig
from cyclesense.cycles.cycle_stats import CycleStatistics
from cyclesense.cycles.results import CurrentState, CyclePhase
from cyclesense.models.records import CycleRecord

logger = logging.getLogger("cyclesense.cycles.current_state")


def classify_phase(
    day_in_cycle: int,
    is_on_period: bool,
    phase_config: PhaseConfig,
    average_cycle_length: int | None = None,
) -> CyclePhase:
    """Map a day in cycle to a phase.

    Args:
        day_in_cycle:          1-indexed day since the cycle started.
        is_on_period:          Whether the day is a period day.
        phase_config:          Phase boundaries.
        average_cycle_length:  Personal average; only used when
                               ``scale_to_cycle_length`` is enabled.
    """
    if is_on_period:
        return CyclePhase.menstrual

    shift = 0
    if phase_config.scale_to_cycle_length and average_cycle_length:
        shift = average_cycle_length - phase_config.reference_cycle_length

    if day_in_cycle <= phase_config.follicular_max_day:
        return CyclePhase.follicular
    if (
        phase_config.ovulatory_start_day + shift
        <= day_in_cycle
        <= phase_config.ovulatory_end_day + shift
    ):
        return CyclePhase.ovulatory
    if day_in_cycle >= phase_config.luteal_start_day + shift:
        return CyclePhase.luteal
    return CyclePhase.follicular


def resolve_current_state(
    cycles: Sequence[CycleRecord],
    today: date,
    stats: CycleStatistics,
    config: AnalysisConfig,
) -> CurrentState:
    """Derive today's phase from the most recent cycle.

    Args:
        cycles: Validated cycles, oldest first.
        today:  Reference date.
        stats:  Statistics for the same cycles.
        config: Analysis configuration.

    Returns:
        CurrentState; ``unknown`` phase and day 0 when there are no cycles.
    """
    if not cycles:
        return CurrentState(phase=CyclePhase.unknown, day_in_cycle=0, is_on_period=False)

    last = cycles[-1]
    day_in_cycle = (today - last.start_date).days + 1
    is_on_period = today in last.period_days

    period_day = None
    if is_on_period:
        period_day = (today - min(last.period_days)).days + 1

    phase = classify_phase(
        day_in_cycle, is_on_period, config.phase, stats.average_cycle_length
    )
    return CurrentState(
        phase=phase,
        day_in_cycle=day_in_cycle,
        is_on_period=is_on_period,
        period_day=period_day,
    )


def phase_confidence(
    stats: CycleStatistics,
    phase: CyclePhase,
    config: AnalysisConfig,
) -> int:
    """Confidence (10–95) that the derived phase is right.

    Starts from a base, loses points for cycle variation, gains points for
    phases that are easy to pin down (menstrual always, ovulatory once
    enough cycles are logged).
    """
    pc = config.phase.confidence
    if stats.cycle_count < config.forecast.min_cycles:
        return pc.no_data

    confidence = pc.base
    if stats.cycle_variation > pc.moderate_variation_days:
        confidence -= pc.variation_penalty
    if stats.cycle_variation > pc.high_variation_days:
        confidence -= pc.variation_penalty

    if phase == CyclePhase.menstrual:
        confidence += pc.menstrual_bonus
    if phase == CyclePhase.ovulatory and stats.cycle_count >= pc.ovulatory_min_cycles:
        confidence += pc.ovulatory_bonus

    return min(pc.ceiling, max(pc.floor, confidence))


def phase_for_date(
    cycles: Sequence[CycleRecord],
    day: date,
    stats: CycleStatistics,
    config: AnalysisConfig,
) -> CyclePhase:
    """Phase on an arbitrary calendar day.

    Days inside a logged cycle use that cycle's start and period days.  Days
    past the end of the latest cycle are projected forward with the average
    cycle and period lengths.  Days before the first cycle are ``unknown``.
    """
    if not cycles:
        return CyclePhase.unknown

    starts = [c.start_date for c in cycles]
    idx = bisect.bisect_right(starts, day) - 1
    if idx < 0:
        return CyclePhase.unknown

    anchor = cycles[idx]
    offset = (day - anchor.start_date).days
    avg = stats.average_cycle_length

    if idx == len(cycles) - 1 and offset >= avg:
        cycle_day = offset % avg + 1
        on_period = cycle_day <= stats.average_period_length
    else:
        cycle_day = offset + 1
        on_period = day in anchor.period_days

    return classify_phase(cycle_day, on_period, config.phase, avg)


def is_period_day(cycles: Sequence[CycleRecord], day: date) -> bool:
    """Whether any cycle logs ``day`` as a period day."""
    return any(day in c.period_days for c in cycles)
