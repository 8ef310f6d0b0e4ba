"""
Analytics Module
================

Aggregate crowd analytics over a reading snapshot.

Analytics are for observability ONLY. They never feed back into density
classification, risk scoring, or route ranking.
"""

import logging
from dataclasses import asdict, dataclass
from typing import Iterable

import numpy as np

from transit_pulse.models.crowd import CrowdReading, RiskLevel


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CrowdOverview:
    """
    System-wide crowd summary.

    Attributes:
        total_locations: Distinct location ids in the snapshot
        average_occupancy: Mean occupancy percentage, one decimal
        high_risk_locations: Readings at high risk
        critical_locations: Readings at critical risk
        total_passengers: Sum of current head counts
    """

    total_locations: int
    average_occupancy: float
    high_risk_locations: int
    critical_locations: int
    total_passengers: int

    def to_dict(self) -> dict:
        return asdict(self)


class CrowdAnalytics:
    """Computes overview statistics from reading snapshots."""

    def overview(self, readings: Iterable[CrowdReading]) -> CrowdOverview:
        """
        Summarize a snapshot of readings.

        Args:
            readings: Readings to summarize (typically the recent window)

        Returns:
            CrowdOverview; all zeros for an empty snapshot
        """
        readings = list(readings)
        if not readings:
            return CrowdOverview(
                total_locations=0,
                average_occupancy=0.0,
                high_risk_locations=0,
                critical_locations=0,
                total_passengers=0,
            )

        percentages = np.array([r.percentage for r in readings], dtype=float)
        levels = [r.risk.level for r in readings]

        overview = CrowdOverview(
            total_locations=len({r.location_id for r in readings}),
            average_occupancy=round(float(percentages.mean()), 1),
            high_risk_locations=levels.count(RiskLevel.HIGH),
            critical_locations=levels.count(RiskLevel.CRITICAL),
            total_passengers=sum(r.occupancy.current for r in readings),
        )
        logger.debug(f"Crowd overview computed over {len(readings)} readings")
        return overview
