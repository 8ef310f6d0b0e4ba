"""
Density Classification
======================

Maps an occupancy percentage to a density tier.

Tier Rules (lower bound inclusive):
    percentage < 30        -> low
    30 <= percentage < 60  -> medium
    60 <= percentage < 85  -> high
    percentage >= 85       -> critical

Percentages above 100 are legal (over capacity) and classify as critical.
"""

import logging
import math
from dataclasses import dataclass

from transit_pulse.errors import DivisionError, InvalidInput
from transit_pulse.models.crowd import DensityTier


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TierThresholds:
    """
    Lower bounds of the medium, high and critical tiers.

    Loaded from configuration file.
    """

    medium: float = 30
    high: float = 60
    critical: float = 85

    def __post_init__(self) -> None:
        """Validate invariants."""
        if not 0 <= self.medium <= self.high <= self.critical:
            raise ValueError("thresholds must satisfy 0 <= medium <= high <= critical")


def round_half_up(value: float) -> int:
    """Round to the nearest integer with halves going up (0.5 -> 1, 2.5 -> 3)."""
    return math.floor(value + 0.5)


def occupancy_percentage(current: int, capacity: int) -> int:
    """
    Rounded occupancy percentage.

    Rounds half up in integer arithmetic, so 0.5 boundaries never depend
    on float representation. Not clamped above 100.

    Raises:
        DivisionError: If capacity is zero or negative
        InvalidInput: If current is negative
    """
    if capacity <= 0:
        raise DivisionError(f"capacity must be positive, got {capacity}")
    if current < 0:
        raise InvalidInput(f"current must be non-negative, got {current}")
    return (200 * current + capacity) // (2 * capacity)


class DensityClassifier:
    """
    Pure classifier from occupancy percentage to DensityTier.

    Example:
        classifier = DensityClassifier()
        classifier.classify(95)   # DensityTier.CRITICAL
    """

    def __init__(self, thresholds: TierThresholds = TierThresholds()) -> None:
        self.thresholds = thresholds

    def classify(self, percentage: float) -> DensityTier:
        """
        Classify an occupancy percentage.

        Args:
            percentage: Occupancy percentage in [0, inf)

        Returns:
            DensityTier for the percentage

        Raises:
            InvalidInput: If percentage is negative or NaN
        """
        if math.isnan(percentage) or percentage < 0:
            raise InvalidInput(f"percentage must be non-negative, got {percentage}")

        th = self.thresholds
        if percentage < th.medium:
            return DensityTier.LOW
        if percentage < th.high:
            return DensityTier.MEDIUM
        if percentage < th.critical:
            return DensityTier.HIGH
        return DensityTier.CRITICAL
