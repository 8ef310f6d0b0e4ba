"""
Test Configuration
==================

Pytest fixtures and test configuration for TransitPulse.
"""

from datetime import datetime, timezone

import pytest


@pytest.fixture
def central_station():
    """Provide the Central Station endpoint."""
    from transit_pulse.models.location import Location

    return Location(name="Central Station", coordinates=[-74.0060, 40.7128])


@pytest.fixture
def airport_terminal():
    """Provide the Airport Terminal endpoint."""
    from transit_pulse.models.location import Location

    return Location(name="Airport Terminal", coordinates=[-73.7781, 40.6413])


@pytest.fixture
def default_preferences():
    """Provide default rider preferences."""
    from transit_pulse.models.route import Preferences

    return Preferences()


@pytest.fixture
def downtown_hub_alert():
    """Provide a high-severity alert for Downtown Hub."""
    from transit_pulse.models.alert import Alert, AlertSeverity, AlertType

    return Alert(
        type=AlertType.EMERGENCY,
        severity=AlertSeverity.HIGH,
        title="Signal failure at Downtown Hub",
        location_name="Downtown Hub",
    )


@pytest.fixture
def fixed_now():
    """Provide a fixed reference time (a Wednesday, 08:30 UTC)."""
    return datetime(2026, 10, 14, 8, 30, tzinfo=timezone.utc)


@pytest.fixture
def make_ingest_request():
    """Factory for crowd ingest requests."""
    from transit_pulse.models.crowd import CrowdIngestRequest

    def _make(current, capacity=300, location_id="central-station-platform-a",
              location_name="Central Station - Platform A", location_type="platform"):
        return CrowdIngestRequest(
            location_id=location_id,
            location_name=location_name,
            location_type=location_type,
            coordinates=[-74.0060, 40.7128],
            occupancy={"current": current, "capacity": capacity},
        )

    return _make


@pytest.fixture
def make_reading(make_ingest_request):
    """Factory for derived crowd readings at a given time."""
    from transit_pulse.crowd import CrowdIngestor

    ingestor = CrowdIngestor()

    def _make(current, capacity=300, created_at=None, **kwargs):
        request = make_ingest_request(current, capacity, **kwargs)
        return ingestor.ingest(request, now=created_at)

    return _make


@pytest.fixture
def client():
    """Provide a TestClient with the application lifespan running."""
    from fastapi.testclient import TestClient

    from transit_pulse.main import app

    with TestClient(app) as test_client:
        yield test_client
