"""Cycle analysis assembler.

Runs the full pipeline over one profile's records:

    validate → statistics → current state / forecasts / insights → CycleAnalysis

The analyzer holds only its (immutable) configuration, so one instance can
serve any number of concurrent calls.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from datetime import date, datetime, timedelta
from typing import Any

from pydantic import ValidationError

from cyclesense.cycles.config_loader import AnalysisConfig, get_analysis_config
from cyclesense.cycles.current_state import phase_confidence, resolve_current_state
from cyclesense.cycles.cycle_stats import compute_statistics
from cyclesense.cycles.exceptions import CycleAnalysisError, RecordParseError
from cyclesense.cycles.forecaster import (
    is_in_fertile_window,
    ovulation_likelihood,
    predict_next_period,
    predict_ovulation,
)
from cyclesense.cycles.insights import (
    analyze_symptom_patterns,
    assess_data_maturity,
    assess_data_quality,
    assess_prediction_reliability,
    assess_regularity,
    calculate_health_score,
    generate_health_insights,
    generate_recommendations,
)
from cyclesense.cycles.results import (
    CycleAnalysis,
    CyclePhase,
    DataMaturity,
    DataQuality,
    PeriodPrediction,
    PredictionReliability,
    RegularityLevel,
)
from cyclesense.cycles.validation import validate_cycles, validate_notes, validate_symptoms
from cyclesense.models.records import CycleRecord, DailyNote, ProfileSettings, SymptomRecord

logger = logging.getLogger("cyclesense.cycles.analyzer")

SettingsInput = ProfileSettings | Mapping[str, Any] | None


def _as_day(now: date | datetime | None) -> date:
    if now is None:
        return date.today()
    if isinstance(now, datetime):
        return now.date()
    return now


def _coerce_settings(settings: SettingsInput) -> ProfileSettings | None:
    if settings is None or isinstance(settings, ProfileSettings):
        return settings
    try:
        return ProfileSettings.model_validate(settings)
    except ValidationError as exc:
        raise RecordParseError("settings", str(exc)) from exc


class CycleAnalyzer:
    """Derive phase, statistics, forecasts and insights from cycle records.

    Usage::

        analyzer = CycleAnalyzer()
        result = analyzer.analyze(
            cycles=profile_cycles,
            symptoms=profile_symptoms,
            notes=profile_notes,
            settings={"averageCycleLength": 30},
            now=date(2024, 3, 10),
        )
        print(result.current_phase, result.next_period_prediction.days_until)
    """

    def __init__(self, config: AnalysisConfig | None = None) -> None:
        self._config = config or get_analysis_config()

    @property
    def config(self) -> AnalysisConfig:
        return self._config

    def analyze(
        self,
        cycles: Iterable[CycleRecord | Mapping[str, Any]] | None,
        symptoms: Iterable[SymptomRecord | Mapping[str, Any]] | None = None,
        notes: Iterable[DailyNote | Mapping[str, Any]] | None = None,
        settings: SettingsInput = None,
        now: date | datetime | None = None,
    ) -> CycleAnalysis:
        """Run the full analysis.

        Args:
            cycles:   Cycle records (any order; models or raw mappings).
            symptoms: Symptom logs.
            notes:    Daily notes.
            settings: Profile settings (``average_cycle_length``).
            now:      Reference date or datetime (defaults to today).

        Returns:
            A fresh, immutable CycleAnalysis.

        Raises:
            CycleAnalysisError: If a record is non-conforming or the pipeline
                fails unexpectedly.  Sparse or empty input never raises.
        """
        try:
            return self._analyze(cycles, symptoms, notes, settings, _as_day(now))
        except CycleAnalysisError:
            raise
        except (TypeError, ValueError, OverflowError) as exc:
            raise CycleAnalysisError(f"Cycle analysis failed: {exc}") from exc

    def _analyze(
        self,
        raw_cycles: Iterable[CycleRecord | Mapping[str, Any]] | None,
        raw_symptoms: Iterable[SymptomRecord | Mapping[str, Any]] | None,
        raw_notes: Iterable[DailyNote | Mapping[str, Any]] | None,
        raw_settings: SettingsInput,
        today: date,
    ) -> CycleAnalysis:
        config = self._config

        cycles = validate_cycles(raw_cycles, config.cycle_length)
        symptoms = validate_symptoms(raw_symptoms)
        notes = validate_notes(raw_notes)
        settings = _coerce_settings(raw_settings)

        stats = compute_statistics(cycles, config)
        state = resolve_current_state(cycles, today, stats, config)

        next_period = predict_next_period(cycles, stats, settings, today, config)
        ovulation = predict_ovulation(stats, next_period, config)

        quality = assess_data_quality(cycles, symptoms, notes, stats, today, config)

        analysis = CycleAnalysis(
            current_phase=state.phase,
            day_in_cycle=state.day_in_cycle,
            is_on_period=state.is_on_period,
            period_day=state.period_day,
            phase_confidence=phase_confidence(stats, state.phase, config),
            is_in_fertile_window=is_in_fertile_window(stats, state.day_in_cycle, config),
            ovulation_likelihood=ovulation_likelihood(stats, state.day_in_cycle, config),
            cycle_count=stats.cycle_count,
            average_cycle_length=stats.average_cycle_length,
            cycle_variation=stats.cycle_variation,
            average_period_length=stats.average_period_length,
            period_variation=stats.period_variation,
            median_cycle_length=stats.median_cycle_length,
            consistency_index=stats.consistency_index,
            next_period_prediction=next_period,
            ovulation_prediction=ovulation,
            cycle_regularity=assess_regularity(stats, config),
            health_insights=generate_health_insights(stats, symptoms, config),
            health_score=calculate_health_score(stats, symptoms, config),
            symptom_patterns=analyze_symptom_patterns(symptoms, cycles, stats, config),
            data_quality=quality,
            recommended_actions=generate_recommendations(stats, symptoms, quality, config),
            data_maturity=assess_data_maturity(stats.cycle_count, config),
            prediction_reliability=assess_prediction_reliability(
                quality, stats.cycle_count, config
            ),
        )
        logger.info(
            "Analyzed %d cycle(s), %d symptom log(s), %d note(s): phase=%s day=%d "
            "next period in %d days (confidence %d)",
            len(cycles), len(symptoms), len(notes),
            analysis.current_phase.value, analysis.day_in_cycle,
            next_period.days_until, next_period.confidence_level,
        )
        return analysis


def analyze(
    cycles: Iterable[CycleRecord | Mapping[str, Any]] | None,
    symptoms: Iterable[SymptomRecord | Mapping[str, Any]] | None = None,
    notes: Iterable[DailyNote | Mapping[str, Any]] | None = None,
    settings: SettingsInput = None,
    now: date | datetime | None = None,
    config: AnalysisConfig | None = None,
) -> CycleAnalysis:
    """Analyze one profile's records with the global (or given) config."""
    return CycleAnalyzer(config).analyze(cycles, symptoms, notes, settings, now)


def placeholder_analysis(
    now: date | datetime | None = None,
    config: AnalysisConfig | None = None,
) -> CycleAnalysis:
    """The all-defaults analysis shown when a profile has no usable data.

    Unknown phase, default cycle and period lengths, zero scores, a
    zero-confidence forecast and a single encouragement recommendation.
    """
    config = config or get_analysis_config()
    today = _as_day(now)
    cycle_days = config.cycle_length.default_days
    start = today + timedelta(days=cycle_days)
    window = config.forecast.no_data_window_days

    return CycleAnalysis(
        current_phase=CyclePhase.unknown,
        day_in_cycle=0,
        is_on_period=False,
        period_day=None,
        phase_confidence=0,
        is_in_fertile_window=False,
        ovulation_likelihood=0,
        cycle_count=0,
        average_cycle_length=cycle_days,
        cycle_variation=0.0,
        average_period_length=config.period_length.default_days,
        period_variation=0.0,
        median_cycle_length=cycle_days,
        consistency_index=0,
        next_period_prediction=PeriodPrediction(
            predicted_start_date=start,
            predicted_end_date=start + timedelta(days=config.period_length.default_days - 1),
            confidence_level=0,
            confidence_reason="No tracking data available",
            earliest_possible_date=start - timedelta(days=window),
            latest_possible_date=start + timedelta(days=window),
            days_until=cycle_days,
            is_overdue=False,
        ),
        ovulation_prediction=None,
        cycle_regularity=RegularityLevel.insufficient_data,
        health_insights=(),
        health_score=0,
        symptom_patterns=(),
        data_quality=DataQuality(score=0, completeness=0, consistency=0),
        recommended_actions=("Start tracking your cycles to get personalized insights",),
        data_maturity=DataMaturity.new,
        prediction_reliability=PredictionReliability.insufficient,
    )


def analyze_or_placeholder(
    cycles: Iterable[CycleRecord | Mapping[str, Any]] | None,
    symptoms: Iterable[SymptomRecord | Mapping[str, Any]] | None = None,
    notes: Iterable[DailyNote | Mapping[str, Any]] | None = None,
    settings: SettingsInput = None,
    now: date | datetime | None = None,
    config: AnalysisConfig | None = None,
) -> CycleAnalysis:
    """Like :func:`analyze`, but substitutes the placeholder on failure."""
    try:
        return analyze(cycles, symptoms, notes, settings, now, config)
    except CycleAnalysisError as exc:
        logger.warning("Cycle analysis failed, showing placeholder: %s", exc)
        return placeholder_analysis(now, config)
