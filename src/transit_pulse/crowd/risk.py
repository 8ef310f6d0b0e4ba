"""
Crowd Risk Assessment
=====================

Builds a full risk assessment from one occupancy reading.

Pipeline:
    1. percentage = round(100 * current / capacity)
    2. density    = DensityClassifier.classify(percentage)
    3. risk       = RiskPolicy.risk_level(density, factors)
    4. factors    = ["crowd_density", *extra_factors]
    5. recommendations:
           percentage > 75  -> ["avoid_location", "use_alternative_route"]
           otherwise        -> ["monitor_situation"]
    6. score      = min(100, floor(percentage * 1.2))

The risk level is produced by a separate RiskPolicy so it can later take
trend or location type into account. The default policy copies the
density tier.
"""

import logging
import math
from dataclasses import dataclass
from fractions import Fraction
from typing import Iterable, List, Optional, Protocol, Sequence

from transit_pulse.crowd.density import DensityClassifier, occupancy_percentage
from transit_pulse.errors import DivisionError
from transit_pulse.models.crowd import (
    DensityTier,
    OccupancyReading,
    RiskAssessment,
    RiskLevel,
)
from transit_pulse.models.reason_codes import Recommendation, RiskFactor


logger = logging.getLogger(__name__)


class RiskPolicy(Protocol):
    """
    Protocol for deriving a risk level.

    Any class with a matching `risk_level` method can be used.
    """

    def risk_level(self, density: DensityTier, factors: Sequence[str]) -> RiskLevel:
        ...


class DensityRiskPolicy:
    """Risk level equals the density tier; other factors are ignored."""

    def risk_level(self, density: DensityTier, factors: Sequence[str]) -> RiskLevel:
        return RiskLevel(density.value)


@dataclass(frozen=True)
class RiskParameters:
    """Tunable constants for the assessor."""

    avoid_above_percentage: float = 75
    score_multiplier: float = 1.2


class CrowdRiskAssessor:
    """
    Deterministic crowd risk assessor.

    No side effects. Identical readings always produce identical
    assessments.

    Example:
        assessor = CrowdRiskAssessor()
        result = assessor.assess(OccupancyReading(current=285, capacity=300))
        result.level            # RiskLevel.CRITICAL
        result.recommendations  # ["avoid_location", "use_alternative_route"]
    """

    def __init__(
        self,
        classifier: Optional[DensityClassifier] = None,
        policy: Optional[RiskPolicy] = None,
        parameters: RiskParameters = RiskParameters(),
    ) -> None:
        self.classifier = classifier or DensityClassifier()
        self.policy = policy or DensityRiskPolicy()
        self.parameters = parameters

    def assess(
        self,
        occupancy: OccupancyReading,
        extra_factors: Iterable[str] = (),
    ) -> RiskAssessment:
        """
        Assess a single occupancy reading.

        Args:
            occupancy: Raw reading
            extra_factors: Collaborator-supplied factors appended after
                the base crowd_density factor

        Returns:
            RiskAssessment

        Raises:
            DivisionError: If capacity is zero or negative
        """
        if occupancy.capacity <= 0:
            raise DivisionError(
                f"cannot assess occupancy with capacity {occupancy.capacity}"
            )

        percentage = occupancy_percentage(occupancy.current, occupancy.capacity)
        density = self.classifier.classify(percentage)
        factors = self._factors(extra_factors)
        level = self.policy.risk_level(density, factors)

        return RiskAssessment(
            percentage=percentage,
            density=density,
            level=level,
            factors=factors,
            recommendations=self._recommendations(percentage),
            score=self.risk_score(percentage),
        )

    def risk_score(self, percentage: int) -> int:
        """Bounded linear amplification of the percentage, clamped to [0, 100]."""
        # Fraction keeps the floor exact; 1.2 has no exact binary float form
        multiplier = Fraction(str(self.parameters.score_multiplier))
        raw = math.floor(percentage * multiplier)
        return max(0, min(100, raw))

    def _factors(self, extra_factors: Iterable[str]) -> List[str]:
        factors = [RiskFactor.CROWD_DENSITY.value]
        for factor in extra_factors:
            value = factor.value if isinstance(factor, RiskFactor) else str(factor)
            if value not in factors:
                factors.append(value)
        return factors

    def _recommendations(self, percentage: int) -> List[str]:
        if percentage > self.parameters.avoid_above_percentage:
            return [
                Recommendation.AVOID_LOCATION.value,
                Recommendation.USE_ALTERNATIVE_ROUTE.value,
            ]
        return [Recommendation.MONITOR_SITUATION.value]
