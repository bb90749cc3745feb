"""Tests for record validation and ordering."""

from __future__ import annotations

from datetime import date

import pytest

from cyclesense.cycles.config_loader import AnalysisConfig
from cyclesense.cycles.exceptions import CycleAnalysisError, RecordParseError
from cyclesense.cycles.validation import validate_cycles, validate_notes, validate_symptoms
from cyclesense.models.records import CycleRecord, DailyNote, ProfileSettings, SymptomRecord
from cyclesense.cycles.tests.conftest import make_cycle, make_symptom


class TestValidateCycles:
    def test_drops_cycle_without_period_days(self, analysis_config: AnalysisConfig) -> None:
        cycles = [
            make_cycle(date(2024, 1, 1)),
            CycleRecord(start_date=date(2024, 1, 15), period_days=[]),
            make_cycle(date(2024, 1, 29)),
        ]
        result = validate_cycles(cycles, analysis_config.cycle_length)
        assert [c.start_date for c in result] == [date(2024, 1, 1), date(2024, 1, 29)]

    def test_drops_length_outside_bounds(self, analysis_config: AnalysisConfig) -> None:
        cycles = [
            CycleRecord(start_date=date(2024, 1, 1), length=50, period_days=[date(2024, 1, 1)]),
            CycleRecord(start_date=date(2024, 3, 1), length=18, period_days=[date(2024, 3, 1)]),
            CycleRecord(start_date=date(2024, 4, 1), length=30, period_days=[date(2024, 4, 1)]),
        ]
        result = validate_cycles(cycles, analysis_config.cycle_length)
        assert len(result) == 1
        assert result[0].length == 30

    def test_sorts_by_start_date(self, analysis_config: AnalysisConfig) -> None:
        starts = [date(2024, 2, 26), date(2024, 1, 1), date(2024, 1, 29)]
        result = validate_cycles([make_cycle(s) for s in starts], analysis_config.cycle_length)
        assert [c.start_date for c in result] == sorted(starts)

    def test_accepts_camel_case_mappings(self, analysis_config: AnalysisConfig) -> None:
        raw = [{"startDate": "2024-01-01", "periodDays": ["2024-01-01", "2024-01-02"]}]
        result = validate_cycles(raw, analysis_config.cycle_length)
        assert result[0].start_date == date(2024, 1, 1)
        assert result[0].period_days == [date(2024, 1, 1), date(2024, 1, 2)]

    def test_accepts_snake_case_mappings(self, analysis_config: AnalysisConfig) -> None:
        raw = [{"start_date": "2024-01-01", "period_days": ["2024-01-01"]}]
        assert len(validate_cycles(raw, analysis_config.cycle_length)) == 1

    def test_drops_mapping_missing_start_date(self, analysis_config: AnalysisConfig) -> None:
        raw = [{"periodDays": ["2024-01-01"]}, {"startDate": "", "periodDays": ["2024-01-01"]}]
        assert validate_cycles(raw, analysis_config.cycle_length) == ()

    def test_drops_non_mapping_entries(self, analysis_config: AnalysisConfig) -> None:
        assert validate_cycles(["2024-01-01", 42, None], analysis_config.cycle_length) == ()

    def test_none_input_gives_empty_tuple(self, analysis_config: AnalysisConfig) -> None:
        assert validate_cycles(None, analysis_config.cycle_length) == ()

    def test_unparseable_date_raises(self, analysis_config: AnalysisConfig) -> None:
        raw = [{"startDate": "soon", "periodDays": ["2024-01-01"]}]
        with pytest.raises(RecordParseError, match="Unparseable cycle record"):
            validate_cycles(raw, analysis_config.cycle_length)

    def test_parse_error_is_an_analysis_error(self) -> None:
        assert issubclass(RecordParseError, CycleAnalysisError)


class TestValidateSymptoms:
    def test_drops_records_without_symptoms(self) -> None:
        records = [
            SymptomRecord(date=date(2024, 1, 2), symptoms=[]),
            make_symptom(date(2024, 1, 3), ("cramps", 3)),
        ]
        result = validate_symptoms(records)
        assert len(result) == 1
        assert result[0].date == date(2024, 1, 3)

    def test_sorted_by_date(self) -> None:
        records = [
            make_symptom(date(2024, 2, 1), ("headache", 2)),
            make_symptom(date(2024, 1, 1), ("cramps", 4)),
        ]
        assert [r.date for r in validate_symptoms(records)] == [date(2024, 1, 1), date(2024, 2, 1)]

    def test_intensity_out_of_range_raises(self) -> None:
        raw = [{"date": "2024-01-01", "symptoms": [{"type": "cramps", "intensity": 9}]}]
        with pytest.raises(RecordParseError):
            validate_symptoms(raw)


class TestValidateNotes:
    def test_drops_blank_notes(self) -> None:
        notes = [
            DailyNote(date=date(2024, 1, 1), note="Tired"),
            DailyNote(date=date(2024, 1, 2), note="   "),
            {"date": "2024-01-03", "note": "  "},
            {"date": "2024-01-04"},
        ]
        result = validate_notes(notes)
        assert [n.note for n in result] == ["Tired"]

    def test_mapping_with_mood_and_flow(self) -> None:
        raw = [{"date": "2024-01-05", "note": "Cramping", "mood": "tired", "flow": "heavy"}]
        (note,) = validate_notes(raw)
        assert note.mood.value == "tired"
        assert note.flow.value == "heavy"


class TestProfileSettings:
    def test_only_cycle_length_is_read(self) -> None:
        settings = ProfileSettings.model_validate(
            {"averageCycleLength": 30, "averagePeriodLength": 6, "theme": "dark"}
        )
        assert settings.average_cycle_length == 30
        assert "average_period_length" not in settings.model_dump()

    def test_non_positive_cycle_length_rejected(self) -> None:
        with pytest.raises(ValueError):
            ProfileSettings(average_cycle_length=0)
