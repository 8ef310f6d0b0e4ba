"""
Density Classification Tests
============================

Tests for occupancy percentage rounding and tier boundaries.
"""

import math

import pytest

from transit_pulse.crowd.density import (
    DensityClassifier,
    TierThresholds,
    occupancy_percentage,
    round_half_up,
)
from transit_pulse.errors import DivisionError, InvalidInput
from transit_pulse.models.crowd import DensityTier


class TestOccupancyPercentage:
    """Tests for occupancy_percentage."""

    def test_exact_values(self):
        """Verify whole-number percentages."""
        assert occupancy_percentage(285, 300) == 95
        assert occupancy_percentage(40, 200) == 20
        assert occupancy_percentage(0, 50) == 0

    def test_rounds_half_up(self):
        """Verify .5 rounds up, never to even."""
        assert occupancy_percentage(1, 200) == 1      # 0.5
        assert occupancy_percentage(1, 8) == 13       # 12.5
        assert occupancy_percentage(5, 200) == 3      # 2.5

    def test_round_half_up_helper(self):
        """Verify the shared rounding helper never rounds to even."""
        assert round_half_up(0.5) == 1
        assert round_half_up(2.5) == 3
        assert round_half_up(2.49) == 2
        assert round_half_up(7.0) == 7

    def test_not_clamped_above_100(self):
        """Verify over-capacity readings exceed 100."""
        assert occupancy_percentage(450, 300) == 150

    def test_zero_capacity_raises_division_error(self):
        """Verify zero capacity is a DivisionError."""
        with pytest.raises(DivisionError):
            occupancy_percentage(5, 0)

    def test_division_error_is_zero_division(self):
        """Verify DivisionError can be caught as ZeroDivisionError."""
        with pytest.raises(ZeroDivisionError):
            occupancy_percentage(5, -1)

    def test_negative_current_raises(self):
        """Verify negative head counts are rejected."""
        with pytest.raises(InvalidInput):
            occupancy_percentage(-1, 100)


class TestDensityClassifier:
    """Tests for DensityClassifier."""

    @pytest.mark.parametrize("percentage,expected", [
        (0, DensityTier.LOW),
        (29, DensityTier.LOW),
        (29.9, DensityTier.LOW),
        (30, DensityTier.MEDIUM),
        (59, DensityTier.MEDIUM),
        (60, DensityTier.HIGH),
        (84, DensityTier.HIGH),
        (85, DensityTier.CRITICAL),
        (150, DensityTier.CRITICAL),
    ])
    def test_tier_boundaries(self, percentage, expected):
        """Verify lower bounds are inclusive."""
        assert DensityClassifier().classify(percentage) == expected

    def test_monotonic(self):
        """Verify tiers never decrease as percentage grows."""
        order = list(DensityTier)
        classifier = DensityClassifier()
        tiers = [order.index(classifier.classify(p)) for p in range(0, 120)]
        assert tiers == sorted(tiers)

    def test_negative_percentage_raises(self):
        """Verify negative input is rejected."""
        with pytest.raises(InvalidInput):
            DensityClassifier().classify(-1)

    def test_nan_raises(self):
        """Verify NaN input is rejected."""
        with pytest.raises(InvalidInput):
            DensityClassifier().classify(math.nan)

    def test_custom_thresholds(self):
        """Verify thresholds are configurable."""
        classifier = DensityClassifier(TierThresholds(medium=10, high=20, critical=30))
        assert classifier.classify(15) == DensityTier.MEDIUM
        assert classifier.classify(30) == DensityTier.CRITICAL


class TestTierThresholds:
    """Tests for TierThresholds validation."""

    def test_defaults(self):
        """Verify default thresholds."""
        thresholds = TierThresholds()
        assert (thresholds.medium, thresholds.high, thresholds.critical) == (30, 60, 85)

    def test_rejects_unordered(self):
        """Verify thresholds must be ordered."""
        with pytest.raises(ValueError):
            TierThresholds(medium=60, high=30, critical=85)
