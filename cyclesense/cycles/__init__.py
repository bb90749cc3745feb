"""Cycle analysis engine for CycleSense.

A pure, synchronous pipeline over one profile's cycle records, symptom
logs and daily notes.  All thresholds come from ``analysis_config.yaml``.

Modules:
    validation     — Drop malformed records, sort by date
    cycle_stats    — Average/median cycle length, variation, consistency (IQR-filtered)
    current_state  — Today's phase, day in cycle, period status
    forecaster     — Next period and ovulation predictions with confidence
    insights       — Regularity, health insights, data quality, symptom patterns
    analyzer       — Assemble everything into one immutable CycleAnalysis
    formatting     — Display helpers (phase/regularity descriptions, dates)
    config_loader  — Load/validate/hot-reload analysis_config.yaml
"""

from cyclesense.cycles.analyzer import (
    CycleAnalyzer,
    analyze,
    analyze_or_placeholder,
    placeholder_analysis,
)
from cyclesense.cycles.config_loader import AnalysisConfig, get_analysis_config
from cyclesense.cycles.exceptions import CycleAnalysisError, RecordParseError
from cyclesense.cycles.formatting import (
    describe_phase,
    describe_regularity,
    format_date,
    format_symptom_name,
    is_date_in_range,
)
from cyclesense.cycles.results import (
    CycleAnalysis,
    CyclePhase,
    OvulationPrediction,
    PeriodPrediction,
    RegularityLevel,
)

__all__ = [
    "AnalysisConfig",
    "CycleAnalysis",
    "CycleAnalysisError",
    "CycleAnalyzer",
    "CyclePhase",
    "OvulationPrediction",
    "PeriodPrediction",
    "RecordParseError",
    "RegularityLevel",
    "analyze",
    "analyze_or_placeholder",
    "describe_phase",
    "describe_regularity",
    "format_date",
    "format_symptom_name",
    "get_analysis_config",
    "is_date_in_range",
    "placeholder_analysis",
]
