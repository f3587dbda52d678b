# tests/test_calculator.py

import pytest
from beymeta.calculator import StatsCalculator


class TestStatsCalculator:
    """Test suite for stats calculator."""

    @pytest.fixture
    def calculator(self):
        """Create calculator instance."""
        return StatsCalculator()

    def test_win_rate(self, calculator):
        assert calculator.win_rate(3, 1) == pytest.approx(0.75)
        assert calculator.win_rate(0, 0) == 0.0

    def test_ratio_zero_denominator(self, calculator):
        assert calculator.ratio(5, 0) == 0.0

    def test_wilson_zero_total(self, calculator):
        """No games means no confidence."""
        assert calculator.wilson(0, 0) == 0.0

    def test_wilson_known_values(self, calculator):
        assert calculator.wilson(1, 1) == pytest.approx(0.2065, abs=1e-4)
        assert calculator.wilson(45, 50) == pytest.approx(0.7864, abs=1e-3)
        assert calculator.wilson(0, 10) == pytest.approx(0.0, abs=1e-12)

    def test_wilson_bounds(self, calculator):
        for total in range(1, 30):
            for wins in range(0, total + 1):
                score = calculator.wilson(wins, total)
                assert 0.0 <= score <= 1.0
                assert score <= wins / total + 1e-12

    def test_wilson_monotonic_in_wins(self, calculator):
        scores = [calculator.wilson(wins, 20) for wins in range(21)]
        assert scores == sorted(scores)

    def test_wilson_penalizes_small_samples(self, calculator):
        """Same win rate, more games, higher lower bound."""
        assert calculator.wilson(1, 1) < calculator.wilson(10, 10) < calculator.wilson(100, 100)

    def test_finish_type(self, calculator):
        assert calculator.finish_type('Burst Finish (2 pts)') == 'Burst Finish'
        assert calculator.finish_type('Spin Finish') == 'Spin Finish'
        assert calculator.finish_type('') == ''
        assert calculator.finish_type(None) == ''

    def test_finish_points(self, calculator):
        assert calculator.finish_points('Spin Finish') == 1
        assert calculator.finish_points('Burst Finish') == 2
        assert calculator.finish_points('Over Finish') == 2
        assert calculator.finish_points('Extreme Finish') == 3
        assert calculator.finish_points('Unknown') == 0

    def test_points_for(self, calculator):
        assert calculator.points_for({'Spin Finish': 2, 'Extreme Finish': 1, 'Unknown': 4}) == 5

    def test_top_finish(self, calculator):
        assert calculator.top_finish({'Spin Finish': 1, 'Burst Finish': 3}) == 'Burst Finish'
        assert calculator.top_finish({'Over Finish': 2, 'Spin Finish': 2}) == 'Over Finish'
        assert calculator.top_finish({}) == ''
