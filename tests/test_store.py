"""
Repository Tests
================

Tests for the in-memory crowd and alert repositories.
"""

from datetime import datetime, timedelta, timezone

import pytest

from transit_pulse.models.alert import Alert, AlertSeverity, AlertStatus, AlertType
from transit_pulse.models.crowd import LocationType, RiskLevel
from transit_pulse.store import InMemoryAlertRepository, InMemoryCrowdRepository


class TestInMemoryCrowdRepository:
    """Tests for InMemoryCrowdRepository."""

    def test_rejects_zero_maxsize(self):
        """Verify maxsize must be positive."""
        with pytest.raises(ValueError):
            InMemoryCrowdRepository(maxsize=0)

    def test_drops_oldest_when_full(self, make_reading, fixed_now):
        """Verify drop-oldest overflow policy."""
        repo = InMemoryCrowdRepository(maxsize=2)
        first = make_reading(10, created_at=fixed_now)
        second = make_reading(20, created_at=fixed_now + timedelta(minutes=1))
        third = make_reading(30, created_at=fixed_now + timedelta(minutes=2))

        assert repo.add(first) is True
        assert repo.add(second) is True
        assert repo.add(third) is False

        assert repo.size == 2
        assert repo.dropped_count == 1
        assert [r.occupancy.current for r in repo.query()] == [30, 20]

    def test_query_filters(self, make_reading, fixed_now):
        """Verify type, risk and time filters combine."""
        repo = InMemoryCrowdRepository()
        repo.add(make_reading(285, created_at=fixed_now - timedelta(hours=2)))
        repo.add(make_reading(285, created_at=fixed_now))
        repo.add(make_reading(10, created_at=fixed_now, location_type="stop"))

        critical = repo.query(risk_level=RiskLevel.CRITICAL)
        assert len(critical) == 2

        recent_critical = repo.query(
            risk_level=RiskLevel.CRITICAL,
            since=fixed_now - timedelta(minutes=30),
        )
        assert len(recent_critical) == 1

        stops = repo.query(location_type=LocationType.STOP)
        assert [r.occupancy.current for r in stops] == [10]

    def test_for_location(self, make_reading, fixed_now):
        """Verify per-location history, newest first."""
        repo = InMemoryCrowdRepository()
        repo.add(make_reading(10, created_at=fixed_now))
        repo.add(make_reading(50, created_at=fixed_now, location_id="other"))
        repo.add(make_reading(20, created_at=fixed_now + timedelta(minutes=1)))

        history = repo.for_location("central-station-platform-a")
        assert [r.occupancy.current for r in history] == [20, 10]

    def test_prune_removes_expired(self, make_reading, fixed_now):
        """Verify retention pruning."""
        repo = InMemoryCrowdRepository(retention=timedelta(days=7))
        repo.add(make_reading(10, created_at=fixed_now - timedelta(days=8)))
        repo.add(make_reading(20, created_at=fixed_now - timedelta(days=1)))

        assert repo.prune(now=fixed_now) == 1
        assert [r.occupancy.current for r in repo.query()] == [20]

    def test_metrics(self, make_reading):
        """Verify store metrics."""
        repo = InMemoryCrowdRepository(maxsize=1)
        repo.add(make_reading(10))
        repo.add(make_reading(20))

        metrics = repo.metrics()
        assert metrics == {"size": 1, "maxsize": 1, "dropped_count": 1, "total_added": 2}


class TestInMemoryAlertRepository:
    """Tests for InMemoryAlertRepository."""

    def test_live_excludes_resolved(self, downtown_hub_alert):
        """Verify only active and investigating alerts are live."""
        repo = InMemoryAlertRepository()
        repo.add(downtown_hub_alert)
        other = repo.add(Alert(
            type=AlertType.MAINTENANCE,
            severity=AlertSeverity.LOW,
            title="Planned works",
            location_name="University",
            status=AlertStatus.INVESTIGATING,
        ))

        assert {a.alert_id for a in repo.live()} == {downtown_hub_alert.alert_id, other.alert_id}

        repo.update_status(downtown_hub_alert.alert_id, AlertStatus.RESOLVED)
        assert [a.alert_id for a in repo.live()] == [other.alert_id]

    def test_update_status_returns_copy(self, downtown_hub_alert):
        """Verify status updates replace the stored alert."""
        repo = InMemoryAlertRepository()
        repo.add(downtown_hub_alert)

        updated = repo.update_status(downtown_hub_alert.alert_id, AlertStatus.CANCELLED)

        assert updated.status == AlertStatus.CANCELLED
        assert downtown_hub_alert.status == AlertStatus.ACTIVE
        assert repo.get(downtown_hub_alert.alert_id).status == AlertStatus.CANCELLED

    def test_update_unknown_alert(self):
        """Verify unknown ids return None."""
        assert InMemoryAlertRepository().update_status("missing", AlertStatus.RESOLVED) is None

    def test_list_by_status(self, downtown_hub_alert):
        """Verify status filtering."""
        repo = InMemoryAlertRepository()
        repo.add(downtown_hub_alert)

        assert len(repo.list(status=AlertStatus.ACTIVE)) == 1
        assert repo.list(status=AlertStatus.RESOLVED) == []

    def test_prune_resolved(self, downtown_hub_alert):
        """Verify resolved alerts are pruned after the grace period."""
        repo = InMemoryAlertRepository()
        repo.add(downtown_hub_alert)
        repo.update_status(downtown_hub_alert.alert_id, AlertStatus.RESOLVED)

        assert repo.prune_resolved(older_than=timedelta(days=1)) == 0
        assert repo.prune_resolved(older_than=timedelta(seconds=-1)) == 1
        assert repo.metrics() == {"alerts_total": 0, "alerts_live": 0}

    def test_reopened_alert_survives_prune(self, downtown_hub_alert):
        """Verify an alert reopened after resolution is never pruned."""
        repo = InMemoryAlertRepository()
        repo.add(downtown_hub_alert)
        repo.update_status(downtown_hub_alert.alert_id, AlertStatus.RESOLVED)
        repo.update_status(downtown_hub_alert.alert_id, AlertStatus.ACTIVE)

        later = datetime.now(timezone.utc) + timedelta(days=2)
        assert repo.prune_resolved(now=later) == 0
        assert [a.alert_id for a in repo.live()] == [downtown_hub_alert.alert_id]
