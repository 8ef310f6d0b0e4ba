"""
Crowd Trend Tracker
===================

Computes a smoothed occupancy trend per location from successive readings.

This tracker:
    - Takes (location_id, current, timestamp) for each reading
    - Computes rate of change in people per minute
    - Smooths the rate with an Exponential Moving Average (EMA)
    - Outputs CrowdTrend for the ingest pipeline

Smoothing (EMA):
    smoothed = α * raw + (1 - α) * prev_smoothed
    Where α ∈ (0, 1] controls responsiveness (higher = more responsive)

The tracker is a stateful collaborator of the ingest path. Its trend is
passed to the risk assessor as an extra factor; the assessor itself
stays stateless.

At most `max_locations` locations are tracked. The least recently
updated location is evicted first and starts over as stable if it
reports again.
"""

import logging
from collections import OrderedDict
from dataclasses import dataclass
from typing import Dict, Optional

from transit_pulse.models.crowd import CrowdTrend, TrendDirection


logger = logging.getLogger(__name__)


@dataclass
class _LocationTrendState:
    prev_current: int
    prev_timestamp: float
    smoothed_rate: float = 0.0
    samples: int = 1


class TrendTracker:
    """
    Per-location occupancy trend tracker.

    Attributes:
        smoothing_alpha: EMA smoothing factor (0, 1]
        stable_band: |rate| below this (people/minute) counts as stable
        max_locations: Locations tracked before the least recent is evicted

    Example:
        tracker = TrendTracker(smoothing_alpha=0.3)

        for reading in readings:
            trend = tracker.update(reading.location_id, reading.current, reading.ts)
            print(trend.direction, trend.rate_per_minute)
    """

    def __init__(
        self,
        smoothing_alpha: float = 0.3,
        stable_band: float = 0.5,
        log_every_n_updates: int = 50,
        max_locations: int = 1000,
    ) -> None:
        """
        Initialize trend tracker.

        Args:
            smoothing_alpha: EMA smoothing factor in (0, 1]
            stable_band: Rate magnitude treated as no change
            log_every_n_updates: Log tracker state every N updates
            max_locations: Upper bound on tracked locations
        """
        if not 0 < smoothing_alpha <= 1:
            raise ValueError("smoothing_alpha must be in (0, 1]")
        if stable_band < 0:
            raise ValueError("stable_band must be non-negative")
        if max_locations < 1:
            raise ValueError("max_locations must be at least 1")

        self.smoothing_alpha = smoothing_alpha
        self.stable_band = stable_band
        self.log_every_n_updates = log_every_n_updates
        self.max_locations = max_locations

        self._locations: Dict[str, _LocationTrendState] = OrderedDict()
        self._update_count: int = 0
        self._evicted_count: int = 0

    def update(self, location_id: str, current: int, timestamp: float) -> CrowdTrend:
        """
        Fold a new reading into the location's trend.

        Args:
            location_id: Location the reading belongs to
            current: People count
            timestamp: UNIX timestamp in seconds

        Returns:
            CrowdTrend for the location after this reading
        """
        self._update_count += 1
        state = self._locations.get(location_id)

        if state is None:
            self._locations[location_id] = _LocationTrendState(
                prev_current=current,
                prev_timestamp=timestamp,
            )
            while len(self._locations) > self.max_locations:
                evicted, _ = self._locations.popitem(last=False)
                self._evicted_count += 1
                logger.debug(f"TrendTracker evicted idle location {evicted}")
            return CrowdTrend(
                direction=TrendDirection.STABLE,
                rate_per_minute=0.0,
                confidence=0.5,
            )

        self._locations.move_to_end(location_id)

        dt_minutes = (timestamp - state.prev_timestamp) / 60.0
        if dt_minutes > 0:
            raw_rate = (current - state.prev_current) / dt_minutes
        else:
            # Out-of-order or duplicate timestamp
            raw_rate = 0.0

        state.smoothed_rate = (
            self.smoothing_alpha * raw_rate +
            (1 - self.smoothing_alpha) * state.smoothed_rate
        )
        state.prev_current = current
        state.prev_timestamp = max(timestamp, state.prev_timestamp)
        state.samples += 1

        if self._update_count % self.log_every_n_updates == 0:
            logger.info(
                f"TrendTracker [update {self._update_count}]: "
                f"locations={len(self._locations)}, "
                f"{location_id} rate={state.smoothed_rate:+.2f}/min"
            )

        return CrowdTrend(
            direction=self._direction(state.smoothed_rate),
            rate_per_minute=round(state.smoothed_rate, 2),
            confidence=round(min(0.95, 0.5 + 0.05 * (state.samples - 1)), 2),
        )

    def _direction(self, rate: float) -> TrendDirection:
        if rate >= self.stable_band:
            return TrendDirection.INCREASING
        if rate <= -self.stable_band:
            return TrendDirection.DECREASING
        return TrendDirection.STABLE

    def current_rate(self, location_id: str) -> Optional[float]:
        """Smoothed rate for a location, or None if never seen."""
        state = self._locations.get(location_id)
        return state.smoothed_rate if state else None

    def reset(self) -> None:
        """Reset tracker state."""
        self._locations.clear()
        self._update_count = 0
        self._evicted_count = 0
        logger.info("TrendTracker reset")

    def get_metrics(self) -> dict:
        """Get tracker metrics for observability."""
        return {
            "update_count": self._update_count,
            "tracked_locations": len(self._locations),
            "evicted_locations": self._evicted_count,
            "smoothing_alpha": self.smoothing_alpha,
        }
