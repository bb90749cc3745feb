"""CycleSense — menstrual cycle analysis engine.

Subpackages:
    models/ — Pydantic input record schemas (cycles, symptoms, daily notes)
    cycles/ — The analysis engine: validation, statistics, current state,
              forecasting, insights, and the assembled CycleAnalysis

Usage::

    from cyclesense import analyze

    result = analyze(cycles, symptoms, notes, settings, now=date.today())
    print(result.current_phase, result.next_period_prediction.predicted_start_date)
"""

from cyclesense.cycles import (
    CycleAnalysis,
    CycleAnalysisError,
    analyze,
    analyze_or_placeholder,
    placeholder_analysis,
)

__version__ = "0.1.0"
__all__ = [
    "CycleAnalysis",
    "CycleAnalysisError",
    "analyze",
    "analyze_or_placeholder",
    "placeholder_analysis",
]
