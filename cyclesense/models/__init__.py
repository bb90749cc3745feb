"""Pydantic schemas for the records the analysis engine consumes."""

from cyclesense.models.records import (
    CycleRecord,
    DailyNote,
    EnergyLevel,
    FlowIntensity,
    MoodType,
    ProfileSettings,
    SymptomIntensity,
    SymptomRecord,
    SymptomType,
)

__all__ = [
    "CycleRecord",
    "DailyNote",
    "EnergyLevel",
    "FlowIntensity",
    "MoodType",
    "ProfileSettings",
    "SymptomIntensity",
    "SymptomRecord",
    "SymptomType",
]
