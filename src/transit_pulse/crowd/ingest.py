"""
Crowd Reading Ingest
====================

Turns a raw inbound reading into an immutable, fully derived CrowdReading.

Pipeline:
    CrowdIngestRequest
        → TrendTracker.update        (per-location trend)
        → CrowdRiskAssessor.assess   (density, risk, factors, score)
        → project_from_trend         (next 15/30/60 min)
        → CrowdReading               (frozen)

Density and risk are computed exactly once here and never revisited.
"""

import logging
import secrets
from datetime import datetime, timezone
from typing import Optional

from transit_pulse.crowd.forecast import project_from_trend
from transit_pulse.crowd.risk import CrowdRiskAssessor
from transit_pulse.crowd.trend import TrendTracker
from transit_pulse.models.crowd import (
    CrowdIngestRequest,
    CrowdReading,
    RiskLevel,
    TrendDirection,
)
from transit_pulse.models.reason_codes import RiskFactor


logger = logging.getLogger(__name__)


class CrowdIngestor:
    """
    Builds CrowdReadings from raw requests.

    Attributes:
        assessor: Stateless risk assessor
        trend_tracker: Optional per-location trend tracker. Without one,
            every reading gets a stable trend.
    """

    def __init__(
        self,
        assessor: Optional[CrowdRiskAssessor] = None,
        trend_tracker: Optional[TrendTracker] = None,
    ) -> None:
        self.assessor = assessor or CrowdRiskAssessor()
        self.trend_tracker = trend_tracker
        self._ingested: int = 0
        self._critical: int = 0

    def ingest(
        self,
        request: CrowdIngestRequest,
        now: Optional[datetime] = None,
    ) -> CrowdReading:
        """
        Derive a CrowdReading.

        Args:
            request: Raw reading
            now: Creation time (defaults to current UTC time)

        Returns:
            Frozen CrowdReading

        Raises:
            DivisionError: If capacity is not positive
        """
        created_at = now or datetime.now(timezone.utc)
        occupancy = request.occupancy

        extra_factors = []
        trend = None
        if self.trend_tracker is not None:
            trend = self.trend_tracker.update(
                request.location_id,
                occupancy.current,
                created_at.timestamp(),
            )
            if trend.direction == TrendDirection.INCREASING:
                extra_factors.append(RiskFactor.TREND_INCREASING)

        assessment = self.assessor.assess(occupancy, extra_factors=extra_factors)

        fields = dict(
            reading_id=f"crowd-{int(created_at.timestamp() * 1000)}-{secrets.token_hex(3)}",
            location_id=request.location_id,
            location_name=request.location_name,
            location_type=request.location_type,
            coordinates=list(request.coordinates),
            occupancy=occupancy,
            percentage=assessment.percentage,
            density=assessment.density,
            risk=assessment,
            data_source=request.data_source,
            created_at=created_at,
        )
        if trend is not None:
            fields["trend"] = trend
            fields["predictions"] = project_from_trend(
                occupancy.current, trend.rate_per_minute
            )
        reading = CrowdReading(**fields)

        self._ingested += 1
        if assessment.level == RiskLevel.CRITICAL:
            self._critical += 1
            logger.warning(
                f"Critical crowd level detected: location={request.location_id}, "
                f"percentage={assessment.percentage}"
            )
        else:
            logger.debug(
                f"Crowd reading ingested: location={request.location_id}, "
                f"density={assessment.density.value}"
            )

        return reading

    def get_metrics(self) -> dict:
        """Get ingest metrics for observability."""
        metrics = {
            "readings_ingested": self._ingested,
            "critical_readings": self._critical,
        }
        if self.trend_tracker is not None:
            metrics.update(self.trend_tracker.get_metrics())
        return metrics
