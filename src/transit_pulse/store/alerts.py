"""
Alert Repository
================

In-memory alert store. Route optimization reads a snapshot of live
alerts from here before invoking the pipeline.
"""

import logging
import threading
from datetime import datetime, timedelta, timezone
from typing import Dict, List, Optional, Protocol

from transit_pulse.models.alert import Alert, AlertStatus


logger = logging.getLogger(__name__)


class AlertRepository(Protocol):
    """Protocol for alert storage backends."""

    def add(self, alert: Alert) -> Alert:
        ...

    def live(self) -> List[Alert]:
        ...

    def update_status(self, alert_id: str, status: AlertStatus) -> Optional[Alert]:
        ...


class InMemoryAlertRepository:
    """Thread-safe alert store keyed by alert_id."""

    def __init__(self) -> None:
        self._alerts: Dict[str, Alert] = {}
        self._resolved_at: Dict[str, datetime] = {}
        self._lock = threading.Lock()

    def add(self, alert: Alert) -> Alert:
        """Store (or replace) an alert."""
        with self._lock:
            self._alerts[alert.alert_id] = alert
        logger.info(
            f"Alert stored: id={alert.alert_id}, type={alert.type.value}, "
            f"severity={alert.severity.value}, location={alert.location_name}"
        )
        return alert

    def get(self, alert_id: str) -> Optional[Alert]:
        with self._lock:
            return self._alerts.get(alert_id)

    def list(self, status: Optional[AlertStatus] = None) -> List[Alert]:
        """All alerts, newest first, optionally filtered by status."""
        with self._lock:
            alerts = list(self._alerts.values())
        alerts.sort(key=lambda a: a.created_at, reverse=True)
        if status is not None:
            alerts = [a for a in alerts if a.status == status]
        return alerts

    def live(self) -> List[Alert]:
        """Snapshot of active and investigating alerts."""
        return [a for a in self.list() if a.is_live]

    def update_status(self, alert_id: str, status: AlertStatus) -> Optional[Alert]:
        """
        Replace an alert with a copy carrying the new status.

        Returns:
            The updated alert, or None if the id is unknown
        """
        with self._lock:
            alert = self._alerts.get(alert_id)
            if alert is None:
                return None
            updated = alert.model_copy(update={"status": status})
            self._alerts[alert_id] = updated
            if status == AlertStatus.RESOLVED:
                self._resolved_at[alert_id] = datetime.now(timezone.utc)
            else:
                self._resolved_at.pop(alert_id, None)
        return updated

    def prune_resolved(
        self,
        older_than: timedelta = timedelta(days=1),
        now: Optional[datetime] = None,
    ) -> int:
        """Drop alerts still resolved and resolved longer ago than `older_than`."""
        cutoff = (now or datetime.now(timezone.utc)) - older_than
        with self._lock:
            stale = [
                alert_id for alert_id, resolved_at in self._resolved_at.items()
                if resolved_at < cutoff
                and alert_id in self._alerts
                and self._alerts[alert_id].status == AlertStatus.RESOLVED
            ]
            for alert_id in stale:
                self._alerts.pop(alert_id, None)
                self._resolved_at.pop(alert_id, None)

        if stale:
            logger.info(f"Pruned {len(stale)} resolved alerts")
        return len(stale)

    def metrics(self) -> dict:
        """Get store metrics for observability."""
        with self._lock:
            alerts = list(self._alerts.values())
        return {
            "alerts_total": len(alerts),
            "alerts_live": sum(1 for a in alerts if a.is_live),
        }
