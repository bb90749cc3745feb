"""Tests for next-period and ovulation forecasting."""

from __future__ import annotations

from datetime import date, timedelta

import pytest

from cyclesense.cycles.config_loader import AnalysisConfig
from cyclesense.cycles.cycle_stats import CycleStatistics, compute_statistics
from cyclesense.cycles.forecaster import (
    is_fertile_day,
    is_in_fertile_window,
    next_period_confidence,
    ovulation_likelihood,
    predict_next_period,
    predict_ovulation,
)
from cyclesense.models.records import CycleRecord, ProfileSettings
from cyclesense.cycles.tests.conftest import TEST_DATE, make_cycle, make_cycles, regular_starts


def forecast(cycles: list[CycleRecord], config: AnalysisConfig, today: date = TEST_DATE, settings=None):
    stats = compute_statistics(cycles, config)
    return stats, predict_next_period(cycles, stats, settings, today, config)


class TestPredictNextPeriod:
    def test_no_data(self, analysis_config: AnalysisConfig) -> None:
        _, prediction = forecast([], analysis_config)
        assert prediction.predicted_start_date == TEST_DATE + timedelta(days=28)
        assert prediction.confidence_level == 20
        assert prediction.confidence_reason == "No historical data available"
        assert prediction.earliest_possible_date == prediction.predicted_start_date - timedelta(days=7)
        assert prediction.latest_possible_date == prediction.predicted_start_date + timedelta(days=7)
        assert prediction.days_until == 28
        assert prediction.is_overdue is False
        assert prediction.overdue_by is None

    def test_single_cycle_uses_profile_setting(self, analysis_config: AnalysisConfig) -> None:
        cycles = [make_cycle(date(2024, 3, 1))]
        _, prediction = forecast(
            cycles, analysis_config, settings=ProfileSettings(average_cycle_length=30)
        )
        assert prediction.predicted_start_date == date(2024, 3, 31)
        assert prediction.confidence_level == 35
        assert prediction.confidence_reason == "Based on one cycle and user settings"

    def test_single_cycle_without_setting_uses_default(self, analysis_config: AnalysisConfig) -> None:
        _, prediction = forecast([make_cycle(date(2024, 3, 1))], analysis_config)
        assert prediction.predicted_start_date == date(2024, 3, 29)

    def test_three_regular_cycles(
        self, analysis_config: AnalysisConfig, scenario_cycles: list[CycleRecord]
    ) -> None:
        _, prediction = forecast(scenario_cycles, analysis_config)
        assert prediction.predicted_start_date == date(2024, 3, 25)
        assert prediction.predicted_end_date == date(2024, 3, 29)
        assert prediction.confidence_level == 65
        assert prediction.confidence_reason == "Based on 3 cycles"
        assert prediction.earliest_possible_date == date(2024, 3, 22)
        assert prediction.latest_possible_date == date(2024, 3, 28)
        assert prediction.days_until == 15

    def test_overdue(self, analysis_config: AnalysisConfig, scenario_cycles: list[CycleRecord]) -> None:
        _, prediction = forecast(scenario_cycles, analysis_config, today=date(2024, 4, 1))
        assert prediction.days_until == -7
        assert prediction.is_overdue is True
        assert prediction.overdue_by == 7

    def test_overdue_consistency(
        self, analysis_config: AnalysisConfig, scenario_cycles: list[CycleRecord]
    ) -> None:
        for offset in range(0, 60, 3):
            today = date(2024, 3, 1) + timedelta(days=offset)
            _, p = forecast(scenario_cycles, analysis_config, today=today)
            assert p.is_overdue == (p.days_until < 0)
            if p.is_overdue:
                assert p.overdue_by == abs(p.days_until)
            else:
                assert p.overdue_by is None

    def test_many_regular_cycles(self, analysis_config: AnalysisConfig) -> None:
        cycles = make_cycles(regular_starts(7))
        _, prediction = forecast(cycles, analysis_config, today=date(2024, 6, 20))
        assert prediction.confidence_level == 90
        assert prediction.confidence_reason == "Very regular cycles with sufficient data"


class TestNextPeriodConfidence:
    @pytest.mark.parametrize(
        "count, variation, expected",
        [
            (2, 0.0, 60),
            (3, 0.0, 65),
            (4, 1.0, 70),
            (5, 9.0, 70),
            (6, 3.0, 90),
            (6, 4.0, 75),
            (6, 6.0, 60),
        ],
    )
    def test_table(self, analysis_config: AnalysisConfig, count: int, variation: float, expected: int) -> None:
        confidence, _ = next_period_confidence(count, variation, analysis_config)
        assert confidence == expected

    def test_reasons(self, analysis_config: AnalysisConfig) -> None:
        assert next_period_confidence(8, 4.5, analysis_config)[1] == "Regular cycles with good data"
        assert next_period_confidence(8, 8.0, analysis_config)[1] == "Some irregularity detected"

    def test_non_decreasing_in_cycle_count(self, analysis_config: AnalysisConfig) -> None:
        for variation in (0.0, 1.5, 3.0):
            levels = [next_period_confidence(n, variation, analysis_config)[0] for n in range(2, 12)]
            assert levels == sorted(levels)

    def test_non_increasing_in_variation(self, analysis_config: AnalysisConfig) -> None:
        levels = [
            next_period_confidence(8, v, analysis_config)[0]
            for v in (0.0, 1.0, 3.0, 4.0, 5.0, 6.0, 10.0)
        ]
        assert levels == sorted(levels, reverse=True)


class TestOvulation:
    def test_none_with_fewer_than_two_cycles(self, analysis_config: AnalysisConfig) -> None:
        stats, prediction = forecast([make_cycle(date(2024, 3, 1))], analysis_config)
        assert predict_ovulation(stats, prediction, analysis_config) is None

    def test_fourteen_days_before_next_period(
        self, analysis_config: AnalysisConfig, scenario_cycles: list[CycleRecord]
    ) -> None:
        stats, prediction = forecast(scenario_cycles, analysis_config)
        ovulation = predict_ovulation(stats, prediction, analysis_config)
        assert ovulation is not None
        assert ovulation.predicted_date == date(2024, 3, 11)
        assert ovulation.fertile_window_start == date(2024, 3, 6)
        assert ovulation.fertile_window_end == date(2024, 3, 11)
        assert ovulation.confidence == 80

    def test_confidence_drops_with_variation(self, analysis_config: AnalysisConfig) -> None:
        stats = CycleStatistics(
            cycle_count=4, average_cycle_length=30, cycle_variation=4.2,
            average_period_length=5, period_variation=0.0,
            median_cycle_length=30, consistency_index=86,
        )
        _, prediction = forecast(make_cycles(regular_starts(4, 30)), analysis_config)
        assert predict_ovulation(stats, prediction, analysis_config).confidence == 65

    def test_is_fertile_day(
        self, analysis_config: AnalysisConfig, scenario_cycles: list[CycleRecord]
    ) -> None:
        stats, prediction = forecast(scenario_cycles, analysis_config)
        ovulation = predict_ovulation(stats, prediction, analysis_config)
        assert is_fertile_day(ovulation, date(2024, 3, 6))
        assert is_fertile_day(ovulation, date(2024, 3, 11))
        assert not is_fertile_day(ovulation, date(2024, 3, 12))
        assert not is_fertile_day(None, date(2024, 3, 8))


class TestLikelihoodAndWindow:
    @pytest.mark.parametrize(
        "day, expected",
        [(14, 95), (13, 70), (15, 70), (16, 40), (17, 20), (18, 0), (2, 0)],
    )
    def test_likelihood_by_distance(
        self, analysis_config: AnalysisConfig, scenario_cycles: list[CycleRecord], day: int, expected: int
    ) -> None:
        stats = compute_statistics(scenario_cycles, analysis_config)
        assert ovulation_likelihood(stats, day, analysis_config) == expected

    def test_likelihood_zero_without_history(self, analysis_config: AnalysisConfig) -> None:
        stats = compute_statistics([make_cycle(date(2024, 3, 1))], analysis_config)
        assert ovulation_likelihood(stats, 14, analysis_config) == 0

    def test_fertile_window(
        self, analysis_config: AnalysisConfig, scenario_cycles: list[CycleRecord]
    ) -> None:
        stats = compute_statistics(scenario_cycles, analysis_config)
        assert is_in_fertile_window(stats, 9, analysis_config)
        assert is_in_fertile_window(stats, 14, analysis_config)
        assert not is_in_fertile_window(stats, 8, analysis_config)
        assert not is_in_fertile_window(stats, 15, analysis_config)
