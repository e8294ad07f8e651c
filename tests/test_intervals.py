"""
Unit Tests for Wald Interval Module

Tests interval construction including:
- Critical values
- Known occupancy and detection intervals
- Width and midpoint identities
- Input validation
- Collecting estimates
"""

import dataclasses

import pytest
import numpy as np

from occupancy.estimation.intervals import (
    ParameterEstimate,
    collect,
    compute_interval,
    critical_value,
    estimates_to_frame,
)
from occupancy.utils.exceptions import InvalidInputError, OccupancyError


class TestCriticalValue:
    """Tests for two-sided normal critical values."""

    def test_95_percent(self):
        assert critical_value(0.95) == pytest.approx(1.959964, abs=1e-6)

    def test_90_percent(self):
        assert critical_value(0.90) == pytest.approx(1.644854, abs=1e-6)

    def test_increases_with_level(self):
        assert critical_value(0.99) > critical_value(0.95) > critical_value(0.5)

    @pytest.mark.parametrize("level", [0.0, 1.0, -0.1, 1.5])
    def test_rejects_levels_outside_open_interval(self, level):
        with pytest.raises(InvalidInputError):
            critical_value(level)


class TestComputeInterval:
    """Tests for compute_interval."""

    @pytest.mark.parametrize("name,estimate,se,lower,upper", [
        ("Occupancy_1", 0.498, 0.075, 0.35100, 0.64500),
        ("Occupancy_cov1", 0.925, 0.0367, 0.85307, 0.99693),
        ("Detection_1", 0.502, 0.024, 0.45496, 0.54904),
    ])
    def test_known_intervals(self, name, estimate, se, lower, upper):
        """Intervals from the course example's back-transformed estimates."""
        result = compute_interval(estimate, se, 0.95, name)

        assert result.name == name
        assert result.estimate == estimate
        assert result.se == se
        assert result.lower == pytest.approx(lower, abs=1e-4)
        assert result.upper == pytest.approx(upper, abs=1e-4)

    @pytest.mark.parametrize("estimate,se,level", [
        (0.5, 0.02, 0.95),
        (-1.3, 0.4, 0.8),
        (2.7, 0.0, 0.99),
        (0.01, 0.3, 0.5),
    ])
    def test_width_is_twice_margin(self, estimate, se, level):
        result = compute_interval(estimate, se, level, "p")
        expected = 2 * critical_value(level) * se
        assert result.upper - result.lower == pytest.approx(expected, abs=1e-9)
        assert result.width() == pytest.approx(expected, abs=1e-9)

    @pytest.mark.parametrize("estimate,se,level", [
        (0.5, 0.02, 0.95),
        (-1.3, 0.4, 0.8),
        (0.99, 0.2, 0.999),
    ])
    def test_interval_is_centered(self, estimate, se, level):
        result = compute_interval(estimate, se, level, "p")
        assert (result.lower + result.upper) / 2 == pytest.approx(estimate, abs=1e-9)

    def test_zero_se_collapses_interval(self):
        result = compute_interval(0.3, 0.0, 0.95, "p")
        assert result.lower == result.upper == 0.3

    def test_interval_not_clipped_to_probability_range(self):
        """Wald bounds may leave [0, 1] near the boundary."""
        result = compute_interval(0.97, 0.05, 0.95, "Occupancy_high")
        assert result.upper > 1.0

        result = compute_interval(0.02, 0.03, 0.95, "Detection_low")
        assert result.lower < 0.0

    def test_default_level_is_95(self):
        result = compute_interval(0.5, 0.1, name="p")
        assert result.confidence_level == 0.95
        assert result.upper == pytest.approx(0.5 + 1.959964 * 0.1, abs=1e-6)

    def test_negative_se_rejected(self):
        with pytest.raises(InvalidInputError) as exc_info:
            compute_interval(0.5, -0.01, 0.95, "bad")
        assert exc_info.value.argument == 'se'

    def test_level_of_one_rejected(self):
        with pytest.raises(InvalidInputError):
            compute_interval(0.5, 0.02, 1.0, "bad")

    def test_level_of_zero_rejected(self):
        with pytest.raises(InvalidInputError):
            compute_interval(0.5, 0.02, 0.0, "bad")

    @pytest.mark.parametrize("name", ["", "   "])
    def test_empty_name_rejected(self, name):
        with pytest.raises(InvalidInputError):
            compute_interval(0.5, 0.02, 0.95, name)

    def test_non_finite_inputs_rejected(self):
        with pytest.raises(InvalidInputError):
            compute_interval(0.5, float('nan'), 0.95, "p")
        with pytest.raises(InvalidInputError):
            compute_interval(float('inf'), 0.1, 0.95, "p")

    def test_invalid_input_is_value_error(self):
        """Callers catching ValueError or the package base class both work."""
        with pytest.raises(ValueError):
            compute_interval(0.5, -1.0, 0.95, "bad")
        with pytest.raises(OccupancyError):
            compute_interval(0.5, -1.0, 0.95, "bad")

    def test_result_is_immutable(self):
        result = compute_interval(0.5, 0.1, 0.95, "p")
        with pytest.raises(dataclasses.FrozenInstanceError):
            result.lower = 0.0

    def test_accepts_numpy_scalars(self):
        result = compute_interval(np.float64(0.498), np.float64(0.075), 0.95, "Occupancy_1")
        assert isinstance(result.lower, float)
        assert result.lower == pytest.approx(0.351, abs=1e-4)


class TestCollect:
    """Tests for collecting estimates."""

    @pytest.fixture
    def estimates(self):
        return [
            compute_interval(0.498, 0.075, 0.95, "Occupancy_1"),
            compute_interval(0.925, 0.0367, 0.95, "Occupancy_cov1"),
            compute_interval(0.502, 0.024, 0.95, "Detection_1"),
        ]

    def test_empty_input_gives_empty_list(self):
        assert collect([]) == []
        assert collect() == []

    def test_preserves_order(self, estimates):
        reordered = [estimates[2], estimates[0], estimates[1]]
        assert [e.name for e in collect(reordered)] == ["Detection_1", "Occupancy_1", "Occupancy_cov1"]

    def test_concatenates_groups(self, estimates):
        result = collect(estimates[:2], [estimates[2]])
        assert result == estimates

    def test_accepts_individual_estimates(self, estimates):
        assert collect(*estimates) == estimates

    def test_keeps_duplicate_names(self, estimates):
        result = collect(estimates, estimates[:1])
        assert [e.name for e in result].count("Occupancy_1") == 2

    def test_returns_new_list(self, estimates):
        result = collect(estimates)
        assert result == estimates
        assert result is not estimates

    def test_rejects_non_estimates(self):
        with pytest.raises(InvalidInputError):
            collect([0.5, 0.1])


class TestEstimatesToFrame:
    """Tests for tabulating estimates."""

    def test_columns_and_order(self):
        estimates = collect([
            compute_interval(0.498, 0.075, 0.95, "Occupancy_1"),
            compute_interval(0.502, 0.024, 0.95, "Detection_1"),
        ])
        df = estimates_to_frame(estimates)

        assert list(df.columns[:5]) == ['parameter', 'estimate', 'se', 'lower', 'upper']
        assert list(df['parameter']) == ["Occupancy_1", "Detection_1"]
        assert df.loc[0, 'lower'] == pytest.approx(0.351, abs=1e-4)

    def test_empty_collection(self):
        df = estimates_to_frame([])
        assert df.empty
        assert 'parameter' in df.columns

    def test_to_dict_renames_name(self):
        row = ParameterEstimate("p", 0.5, 0.1, 0.3, 0.7).to_dict()
        assert row['parameter'] == "p"
        assert 'name' not in row
