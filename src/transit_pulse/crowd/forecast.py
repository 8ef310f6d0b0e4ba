"""
Crowd Forecasting
=================

Fixed-formula crowd projections. No learning.

Functions:
    - project_from_trend: Extrapolate the current count along the trend rate
    - forecast_occupancy: Project from same-weekday, same-hour history
    - predict_segment_levels: Expected crowd level per route segment
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, List, Sequence

from transit_pulse.crowd.density import round_half_up
from transit_pulse.models.crowd import CrowdPredictions, CrowdReading
from transit_pulse.models.route import CrowdLevel


logger = logging.getLogger(__name__)


# Growth factors applied to the similar-time average
_GROWTH_15 = 1.05
_GROWTH_30 = 1.10
_GROWTH_60 = 1.15


@dataclass(frozen=True)
class OccupancyForecast:
    """
    History-based forecast for one location.

    Attributes:
        predictions: Projected counts for +15/+30/+60 minutes
        confidence: Confidence in [0, 0.9]
        samples: Number of similar-time readings used
    """

    predictions: CrowdPredictions
    confidence: float
    samples: int


@dataclass(frozen=True)
class SegmentPrediction:
    """Expected crowd level for one route segment."""

    segment: str
    level: CrowdLevel
    confidence: float
    percentage: int


def project_from_trend(current: int, rate_per_minute: float) -> CrowdPredictions:
    """Linear projection of the head count along the trend rate."""
    def at(minutes: int) -> int:
        return max(0, round_half_up(current + rate_per_minute * minutes))

    return CrowdPredictions(
        next_15min=at(15),
        next_30min=at(30),
        next_60min=at(60),
    )


def forecast_occupancy(
    history: Iterable[CrowdReading],
    now: datetime,
) -> OccupancyForecast:
    """
    Forecast a location's head count from similar-time history.

    Readings count as similar when taken on the same weekday within one
    hour of `now`. Their mean head count is projected forward with fixed
    growth factors.

    Args:
        history: Past readings for one location
        now: Reference time

    Returns:
        OccupancyForecast; zeros with confidence 0.7 when nothing matches
    """
    similar = [
        reading for reading in history
        if reading.created_at.weekday() == now.weekday()
        and abs(reading.created_at.hour - now.hour) <= 1
    ]

    if not similar:
        return OccupancyForecast(
            predictions=CrowdPredictions(),
            confidence=0.7,
            samples=0,
        )

    mean_current = sum(r.occupancy.current for r in similar) / len(similar)
    return OccupancyForecast(
        predictions=CrowdPredictions(
            next_15min=round_half_up(mean_current * _GROWTH_15),
            next_30min=round_half_up(mean_current * _GROWTH_30),
            next_60min=round_half_up(mean_current * _GROWTH_60),
        ),
        confidence=min(0.9, len(similar) / 10),
        samples=len(similar),
    )


def predict_segment_levels(
    segments: Sequence[str],
    history: Sequence[CrowdReading],
) -> List[SegmentPrediction]:
    """
    Predict the crowd level of each route segment.

    A reading belongs to a segment when its location name contains the
    segment name (case-insensitive).

    Level Rules:
        mean percentage < 50  -> low
        mean percentage < 75  -> medium
        otherwise             -> high

    Segments without history default to medium, 60%, confidence 0.5.
    """
    predictions = []
    for segment in segments:
        needle = segment.lower()
        matches = [r for r in history if needle in r.location_name.lower()]

        if not matches:
            predictions.append(SegmentPrediction(
                segment=segment,
                level=CrowdLevel.MEDIUM,
                confidence=0.5,
                percentage=60,
            ))
            continue

        mean_pct = sum(r.percentage for r in matches) / len(matches)
        if mean_pct < 50:
            level = CrowdLevel.LOW
        elif mean_pct < 75:
            level = CrowdLevel.MEDIUM
        else:
            level = CrowdLevel.HIGH

        predictions.append(SegmentPrediction(
            segment=segment,
            level=level,
            confidence=min(0.9, len(matches) / 50),
            percentage=round_half_up(mean_pct),
        ))

    logger.debug(f"Predicted crowd levels for {len(predictions)} segments")
    return predictions
