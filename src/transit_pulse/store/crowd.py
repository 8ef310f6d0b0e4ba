"""
Crowd Reading Repository
========================

Bounded in-memory store for crowd readings.

This module provides the CrowdRepository protocol and its in-memory
implementation, which stands in for a database. The scoring core never
holds a repository; callers take snapshots and pass them in.

Design Rules:
    - Fixed maximum size (drops oldest on overflow)
    - Thread-safe (API handlers and the simulator both write)
    - Stored readings are frozen; nothing is mutated in place
    - Exposes minimal metrics for observability
"""

import logging
import threading
from collections import deque
from datetime import datetime, timedelta, timezone
from typing import Deque, List, Optional, Protocol

from transit_pulse.models.crowd import CrowdReading, LocationType, RiskLevel


logger = logging.getLogger(__name__)


class CrowdRepository(Protocol):
    """Protocol for crowd reading storage backends."""

    def add(self, reading: CrowdReading) -> bool:
        ...

    def query(
        self,
        location_type: Optional[LocationType] = None,
        risk_level: Optional[RiskLevel] = None,
        since: Optional[datetime] = None,
    ) -> List[CrowdReading]:
        ...

    def for_location(
        self,
        location_id: str,
        since: Optional[datetime] = None,
    ) -> List[CrowdReading]:
        ...

    def prune(self, now: Optional[datetime] = None) -> int:
        ...


class InMemoryCrowdRepository:
    """
    Bounded, thread-safe crowd reading store.

    Uses a drop-oldest policy when full so memory stays flat under a
    continuous feed.

    Attributes:
        maxsize: Maximum number of readings kept
        retention: Age after which prune() removes readings
        dropped_count: Readings dropped due to overflow

    Example:
        repo = InMemoryCrowdRepository(maxsize=100)
        repo.add(reading)
        recent = repo.query(since=now - timedelta(minutes=30))
    """

    def __init__(
        self,
        maxsize: int = 100,
        retention: timedelta = timedelta(days=7),
    ) -> None:
        """
        Initialize crowd repository.

        Args:
            maxsize: Maximum readings to keep. Must be >= 1.
            retention: Maximum reading age kept by prune()
        """
        if maxsize < 1:
            raise ValueError("maxsize must be >= 1")

        self._maxsize = maxsize
        self.retention = retention
        self._readings: Deque[CrowdReading] = deque()
        self._lock = threading.Lock()
        self._dropped_count: int = 0
        self._total_added: int = 0

    @property
    def maxsize(self) -> int:
        """Maximum store size."""
        return self._maxsize

    @property
    def size(self) -> int:
        """Current number of readings."""
        return len(self._readings)

    @property
    def dropped_count(self) -> int:
        """Number of readings dropped due to overflow."""
        return self._dropped_count

    def add(self, reading: CrowdReading) -> bool:
        """
        Store a reading, dropping the oldest if full.

        Returns:
            True if stored without dropping, False if the oldest reading
            was dropped to make room.
        """
        with self._lock:
            self._total_added += 1
            dropped = False
            if len(self._readings) >= self._maxsize:
                self._readings.popleft()
                self._dropped_count += 1
                dropped = True
            self._readings.append(reading)

        if dropped:
            logger.debug(f"Crowd store full, dropped oldest. Total dropped: {self._dropped_count}")
        return not dropped

    def query(
        self,
        location_type: Optional[LocationType] = None,
        risk_level: Optional[RiskLevel] = None,
        since: Optional[datetime] = None,
    ) -> List[CrowdReading]:
        """Readings matching all given filters, newest first."""
        with self._lock:
            snapshot = list(self._readings)

        results = [
            r for r in reversed(snapshot)
            if (location_type is None or r.location_type == location_type)
            and (risk_level is None or r.risk.level == risk_level)
            and (since is None or r.created_at >= since)
        ]
        return results

    def for_location(
        self,
        location_id: str,
        since: Optional[datetime] = None,
    ) -> List[CrowdReading]:
        """Readings for one location, newest first."""
        return [
            r for r in self.query(since=since)
            if r.location_id == location_id
        ]

    def prune(self, now: Optional[datetime] = None) -> int:
        """
        Remove readings older than the retention window.

        Returns:
            Number of readings removed
        """
        cutoff = (now or datetime.now(timezone.utc)) - self.retention
        with self._lock:
            before = len(self._readings)
            self._readings = deque(r for r in self._readings if r.created_at >= cutoff)
            removed = before - len(self._readings)

        if removed:
            logger.info(f"Pruned {removed} crowd readings older than {cutoff.isoformat()}")
        return removed

    def clear(self) -> None:
        """Remove all readings."""
        with self._lock:
            self._readings.clear()

    def metrics(self) -> dict:
        """Get store metrics for observability."""
        return {
            "size": self.size,
            "maxsize": self._maxsize,
            "dropped_count": self._dropped_count,
            "total_added": self._total_added,
        }
