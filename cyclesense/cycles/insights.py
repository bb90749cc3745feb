"""Regularity, health insights, data quality and symptom patterns.

Each function here is an independent rule set over the validated records
and the cycle statistics.  Insights are ranked by priority (highest first);
equal priorities keep the order in which the rules fired.
"""

from __future__ import annotations

import logging
import statistics
from collections import Counter
from datetime import date
from typing import Sequence

from cyclesense.cycles.config_loader import AnalysisConfig
from cyclesense.cycles.current_state import phase_for_date
from cyclesense.cycles.cycle_stats import CycleStatistics, round_half_up
from cyclesense.cycles.formatting import format_symptom_name
from cyclesense.cycles.results import (
    CyclePhase,
    DataMaturity,
    DataQuality,
    HealthInsight,
    InsightType,
    PredictionReliability,
    RegularityLevel,
    SymptomPattern,
)
from cyclesense.models.records import CycleRecord, DailyNote, SymptomRecord

logger = logging.getLogger("cyclesense.cycles.insights")

# Tie-break order when two phases have the same occurrence count
_PHASE_ORDER = [
    CyclePhase.menstrual,
    CyclePhase.follicular,
    CyclePhase.ovulatory,
    CyclePhase.luteal,
]


def assess_regularity(stats: CycleStatistics, config: AnalysisConfig) -> RegularityLevel:
    """Bucket the cycle variation; needs at least three cycles."""
    if stats.cycle_count < config.regularity.min_cycles:
        return RegularityLevel.insufficient_data
    return RegularityLevel(config.regularity.levels.lookup(stats.cycle_variation))


# ---------------------------------------------------------------------------
# Symptoms
# ---------------------------------------------------------------------------


def common_symptoms(symptoms: Sequence[SymptomRecord], config: AnalysisConfig) -> list[str]:
    """Display names of the symptom types present in ≥30% of records.

    A type is counted once per record.  The threshold is
    ``max(common_min_count, n × common_ratio)``; at most ``common_top_n``
    names are returned, most frequent first.
    """
    sc = config.symptoms
    counts: Counter[str] = Counter()
    for record in symptoms:
        counts.update({entry.type.value for entry in record.symptoms})

    threshold = max(sc.common_min_count, len(symptoms) * sc.common_ratio)
    frequent = [(name, n) for name, n in counts.items() if n >= threshold]
    frequent.sort(key=lambda item: item[1], reverse=True)
    return [format_symptom_name(name) for name, _ in frequent[: sc.common_top_n]]


def analyze_symptom_patterns(
    symptoms: Sequence[SymptomRecord],
    cycles: Sequence[CycleRecord],
    stats: CycleStatistics,
    config: AnalysisConfig,
) -> tuple[SymptomPattern, ...]:
    """Frequency, intensity and phase distribution per symptom type.

    Only types present in at least ``pattern_min_frequency`` of the records
    are kept, sorted by frequency descending.  Each occurrence is assigned
    the phase of its record date; occurrences outside any logged cycle do
    not contribute a phase.
    """
    if not symptoms:
        return ()

    record_counts: dict[str, int] = {}
    intensities: dict[str, list[int]] = {}
    phases: dict[str, Counter[CyclePhase]] = {}

    for record in symptoms:
        phase = phase_for_date(cycles, record.date, stats, config)
        seen: set[str] = set()
        for entry in record.symptoms:
            name = entry.type.value
            intensities.setdefault(name, []).append(entry.intensity)
            if name in seen:
                continue
            seen.add(name)
            record_counts[name] = record_counts.get(name, 0) + 1
            if phase != CyclePhase.unknown:
                phases.setdefault(name, Counter())[phase] += 1

    total = len(symptoms)
    frequent = [
        (count / total, name)
        for name, count in record_counts.items()
        if count / total >= config.symptoms.pattern_min_frequency
    ]
    # Sorted on the unrounded frequency
    frequent.sort(key=lambda item: item[0], reverse=True)

    patterns = []
    for frequency, name in frequent:
        phase_counts = phases.get(name, Counter())
        ordered_phases = sorted(
            phase_counts,
            key=lambda p: (-phase_counts[p], _PHASE_ORDER.index(p)),
        )
        patterns.append(
            SymptomPattern(
                type=name,
                frequency=round_half_up(frequency, 2),
                average_intensity=round_half_up(statistics.mean(intensities[name]), 2),
                phases=tuple(ordered_phases),
            )
        )
    return tuple(patterns)


# ---------------------------------------------------------------------------
# Health insights
# ---------------------------------------------------------------------------


def generate_health_insights(
    stats: CycleStatistics,
    symptoms: Sequence[SymptomRecord],
    config: AnalysisConfig,
) -> tuple[HealthInsight, ...]:
    """Run every insight rule and rank the results by priority."""
    insights: list[HealthInsight] = []
    cl = config.cycle_length

    if stats.cycle_count >= config.regularity.min_cycles:
        avg = stats.average_cycle_length
        if avg < cl.short_below_days:
            insights.append(
                HealthInsight(
                    type=InsightType.concern,
                    title="Short Cycles Detected",
                    message=(
                        f"Your average cycle length is {avg} days, which is shorter than "
                        "typical. Consider consulting a healthcare provider."
                    ),
                    actionable=True,
                    priority=8,
                )
            )
        elif avg > cl.long_above_days:
            insights.append(
                HealthInsight(
                    type=InsightType.concern,
                    title="Long Cycles Detected",
                    message=(
                        f"Your average cycle length is {avg} days, which is longer than "
                        "typical. Consider consulting a healthcare provider."
                    ),
                    actionable=True,
                    priority=8,
                )
            )

    if stats.average_period_length > config.period_length.extended_above_days:
        insights.append(
            HealthInsight(
                type=InsightType.warning,
                title="Extended Period Length",
                message=(
                    f"Your periods last an average of {stats.average_period_length} days. "
                    "If this is unusual for you, consider tracking symptoms and "
                    "consulting a healthcare provider."
                ),
                actionable=True,
                priority=6,
            )
        )

    regularity = assess_regularity(stats, config)
    if regularity in (RegularityLevel.irregular, RegularityLevel.very_irregular):
        insights.append(
            HealthInsight(
                type=InsightType.tip,
                title="Irregular Cycles",
                message=(
                    "Your cycles show some irregularity. This is normal for many people, "
                    "but tracking symptoms can help identify patterns."
                ),
                actionable=True,
                priority=4,
            )
        )

    if len(symptoms) >= config.symptoms.common_min_records:
        names = common_symptoms(symptoms, config)
        if names:
            insights.append(
                HealthInsight(
                    type=InsightType.info,
                    title="Common Symptoms Identified",
                    message=(
                        f"You frequently experience: {', '.join(names)}. Tracking these "
                        "patterns can help you prepare and manage symptoms."
                    ),
                    actionable=False,
                    priority=3,
                )
            )

    if stats.cycle_count < config.regularity.min_cycles:
        insights.append(
            HealthInsight(
                type=InsightType.tip,
                title="Keep Tracking",
                message=(
                    "Track a few more cycles to get more accurate predictions and "
                    "personalized insights."
                ),
                actionable=True,
                priority=2,
            )
        )

    # list.sort is stable: equal priorities keep rule order
    insights.sort(key=lambda i: i.priority, reverse=True)
    return tuple(insights)


def calculate_health_score(
    stats: CycleStatistics,
    symptoms: Sequence[SymptomRecord],
    config: AnalysisConfig,
) -> int:
    """Overall cycle-health score, clamped to [10, 100].

    Base 70, plus points for a cycle length in the optimal band and for
    regularity (both need ≥3 cycles), plus or minus points for the share of
    symptom logs containing a severe (≥4) entry.
    """
    hs = config.health_score
    cl = config.cycle_length
    score = hs.base

    if stats.cycle_count >= hs.min_cycles:
        avg = stats.average_cycle_length
        if cl.optimal_min_days <= avg <= cl.optimal_max_days:
            score += hs.optimal_length_bonus
        elif cl.min_days <= avg <= cl.max_days:
            score += hs.acceptable_length_bonus
        score += hs.regularity_bonus.lookup(stats.cycle_variation)

    severe = sum(
        1 for record in symptoms
        if any(entry.intensity >= hs.severe_intensity for entry in record.symptoms)
    )
    ratio = severe / len(symptoms) if symptoms else 0.0

    if ratio < hs.severe_ratio_low:
        score += hs.severe_ratio_low_bonus
    elif ratio > hs.severe_ratio_high:
        score -= hs.severe_ratio_high_penalty

    return min(hs.ceiling, max(hs.floor, score))


# ---------------------------------------------------------------------------
# Data quality
# ---------------------------------------------------------------------------


def assess_data_quality(
    cycles: Sequence[CycleRecord],
    symptoms: Sequence[SymptomRecord],
    notes: Sequence[DailyNote],
    stats: CycleStatistics,
    today: date,
    config: AnalysisConfig,
) -> DataQuality:
    """Score how complete and how consistent the logged data is.

    Completeness rewards logged cycles and symptom/note density per cycle.
    Consistency (needs ≥2 cycles) rewards low variation and a cycle start
    within the last 60 days.  The overall score is their rounded mean.
    """
    q = config.quality
    n_cycles = len(cycles)
    completeness = 0
    consistency = 0
    suggestions: list[str] = []

    # ── Completeness ──
    if n_cycles >= q.full_cycle_count:
        completeness += q.cycle_points_full
    elif n_cycles >= 1:
        completeness += q.cycle_points_partial
        suggestions.append("Track more cycles for better predictions")
    else:
        suggestions.append("Start tracking your cycles")

    if len(symptoms) >= n_cycles * q.symptoms_per_cycle:
        completeness += q.symptom_points_full
    elif symptoms:
        completeness += q.symptom_points_partial
        suggestions.append("Track symptoms more regularly")
    else:
        suggestions.append("Consider tracking symptoms")

    if len(notes) >= n_cycles * q.notes_per_cycle:
        completeness += q.note_points_full
    elif notes:
        completeness += q.note_points_partial
        suggestions.append("Add more notes about how you feel")
    else:
        suggestions.append("Consider adding daily notes")

    # ── Consistency ──
    if n_cycles >= config.forecast.min_cycles:
        points = q.variation_points.lookup(stats.cycle_variation)
        consistency += points
        if points != q.variation_points.top:
            suggestions.append("Log every period start to help explain cycle variation")

        has_recent = any((today - c.start_date).days <= q.recency_days for c in cycles)
        if has_recent:
            consistency += q.recency_points_full
        else:
            consistency += q.recency_points_partial
            suggestions.append("Update with recent cycle data")

    completeness = min(100, completeness)
    consistency = min(100, consistency)
    score = min(100, int(round_half_up((completeness + consistency) / 2)))

    return DataQuality(
        score=score,
        completeness=completeness,
        consistency=consistency,
        suggestions=tuple(suggestions),
    )


def generate_recommendations(
    stats: CycleStatistics,
    symptoms: Sequence[SymptomRecord],
    quality: DataQuality,
    config: AnalysisConfig,
) -> tuple[str, ...]:
    q = config.quality
    recommendations: list[str] = []

    if stats.cycle_count < config.regularity.min_cycles:
        recommendations.append("Continue tracking cycles for more accurate predictions")
    if quality.score < q.recommendation_score_below:
        recommendations.append("Improve tracking consistency for better insights")
    if len(symptoms) < stats.cycle_count * q.recommendation_symptoms_per_cycle:
        recommendations.append("Track symptoms to identify patterns and prepare better")
    if stats.cycle_variation > q.recommendation_variation_above:
        recommendations.append("Monitor for factors that might affect cycle regularity")

    return tuple(recommendations)


def assess_data_maturity(cycle_count: int, config: AnalysisConfig) -> DataMaturity:
    mt = config.maturity
    if cycle_count < mt.developing_cycles:
        return DataMaturity.new
    if cycle_count < mt.mature_cycles:
        return DataMaturity.developing
    if cycle_count < mt.extensive_cycles:
        return DataMaturity.mature
    return DataMaturity.extensive


def assess_prediction_reliability(
    quality: DataQuality, cycle_count: int, config: AnalysisConfig
) -> PredictionReliability:
    q = config.quality
    if cycle_count < config.forecast.min_cycles:
        return PredictionReliability.insufficient
    if quality.score >= q.high_reliability_score:
        return PredictionReliability.high
    if quality.score >= q.moderate_reliability_score:
        return PredictionReliability.moderate
    return PredictionReliability.low
