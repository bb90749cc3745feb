"""Record schemas for cycles, symptom logs, daily notes and profile settings.

These are the shapes the storage and sync layers hand to the analysis
engine.  The engine never mutates them.
"""

from __future__ import annotations

import datetime as dt
from enum import Enum

from pydantic import Field

from cyclesense.models.base import CycleSenseBase


class SymptomType(str, Enum):
    cramps = "cramps"
    headache = "headache"
    mood_swings = "mood_swings"
    bloating = "bloating"
    breast_tenderness = "breast_tenderness"
    fatigue = "fatigue"
    nausea = "nausea"
    acne = "acne"
    food_cravings = "food_cravings"
    backache = "backache"
    insomnia = "insomnia"
    diarrhea = "diarrhea"
    constipation = "constipation"
    hot_flashes = "hot_flashes"
    cold_chills = "cold_chills"
    dizziness = "dizziness"
    anxiety = "anxiety"
    depression = "depression"
    irritability = "irritability"
    joint_pain = "joint_pain"
    tender_skin = "tender_skin"


class MoodType(str, Enum):
    happy = "happy"
    sad = "sad"
    angry = "angry"
    anxious = "anxious"
    neutral = "neutral"
    excited = "excited"
    tired = "tired"


class EnergyLevel(str, Enum):
    very_low = "very_low"
    low = "low"
    normal = "normal"
    high = "high"
    very_high = "very_high"


class FlowIntensity(str, Enum):
    none = "none"
    light = "light"
    medium = "medium"
    heavy = "heavy"
    very_heavy = "very_heavy"


# ---------- Symptoms ----------

class SymptomIntensity(CycleSenseBase):
    """One logged symptom: 1 = very mild, 5 = severe."""

    type: SymptomType
    intensity: int = Field(ge=1, le=5)


class SymptomRecord(CycleSenseBase):
    id: str | None = None
    profile_id: str | None = None
    date: dt.date
    symptoms: list[SymptomIntensity] = Field(default_factory=list)
    notes: str | None = None


# ---------- Cycles ----------

class CycleRecord(CycleSenseBase):
    """One menstrual cycle, anchored on the first period day.

    ``length`` is an optional precomputed cycle length; the engine discards
    records whose length falls outside the configured bounds.
    """

    id: str | None = None
    profile_id: str | None = None
    start_date: dt.date
    end_date: dt.date | None = None
    length: int | None = None
    period_days: list[dt.date] = Field(default_factory=list)
    symptoms: dict[dt.date, list[SymptomIntensity]] = Field(default_factory=dict)
    notes: dict[dt.date, str] = Field(default_factory=dict)


# ---------- Daily notes ----------

class DailyNote(CycleSenseBase):
    id: str | None = None
    profile_id: str | None = None
    date: dt.date
    note: str = ""
    mood: MoodType = MoodType.neutral
    energy: EnergyLevel = EnergyLevel.normal
    flow: FlowIntensity = FlowIntensity.none


# ---------- Profile settings ----------

class ProfileSettings(CycleSenseBase):
    """The subset of profile settings the engine reads."""

    average_cycle_length: int | None = Field(default=None, gt=0)
