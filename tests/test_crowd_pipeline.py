"""
Crowd Pipeline Tests
====================

Tests for trend tracking, forecasting and reading ingest.
"""

from datetime import timedelta

import pytest

from transit_pulse.crowd import (
    CrowdIngestor,
    TrendTracker,
    forecast_occupancy,
    predict_segment_levels,
    project_from_trend,
)
from transit_pulse.models.crowd import DensityTier, RiskLevel, TrendDirection
from transit_pulse.models.route import CrowdLevel


class TestTrendTracker:
    """Tests for TrendTracker."""

    def test_first_reading_is_stable(self):
        """Verify a new location starts stable."""
        trend = TrendTracker().update("loc", 10, timestamp=0.0)

        assert trend.direction == TrendDirection.STABLE
        assert trend.rate_per_minute == 0.0
        assert trend.confidence == 0.5

    def test_rising_count_is_increasing(self):
        """Verify EMA rate follows a rising count."""
        tracker = TrendTracker(smoothing_alpha=0.3)
        tracker.update("loc", 10, timestamp=0.0)
        trend = tracker.update("loc", 40, timestamp=60.0)

        # raw rate 30/min, smoothed 0.3 * 30
        assert trend.rate_per_minute == pytest.approx(9.0)
        assert trend.direction == TrendDirection.INCREASING
        assert trend.confidence == pytest.approx(0.55)

    def test_falling_count_is_decreasing(self):
        """Verify EMA rate follows a falling count."""
        tracker = TrendTracker()
        tracker.update("loc", 100, timestamp=0.0)
        trend = tracker.update("loc", 40, timestamp=60.0)

        assert trend.direction == TrendDirection.DECREASING

    def test_locations_are_independent(self):
        """Verify trends are tracked per location."""
        tracker = TrendTracker()
        tracker.update("a", 10, timestamp=0.0)
        tracker.update("a", 100, timestamp=60.0)
        trend = tracker.update("b", 50, timestamp=60.0)

        assert trend.direction == TrendDirection.STABLE
        assert tracker.current_rate("b") == 0.0
        assert tracker.current_rate("missing") is None

    def test_duplicate_timestamp_adds_no_rate(self):
        """Verify zero elapsed time does not divide by zero."""
        tracker = TrendTracker()
        tracker.update("loc", 10, timestamp=5.0)
        trend = tracker.update("loc", 90, timestamp=5.0)

        assert trend.rate_per_minute == 0.0

    def test_confidence_is_capped(self):
        """Verify confidence never exceeds 0.95."""
        tracker = TrendTracker()
        trend = None
        for i in range(30):
            trend = tracker.update("loc", 50, timestamp=i * 60.0)
        assert trend.confidence == pytest.approx(0.95)

    def test_reset(self):
        """Verify reset clears all state."""
        tracker = TrendTracker()
        tracker.update("loc", 10, timestamp=0.0)
        tracker.reset()

        assert tracker.get_metrics()["tracked_locations"] == 0

    def test_rejects_bad_alpha(self):
        """Verify smoothing_alpha is validated."""
        with pytest.raises(ValueError):
            TrendTracker(smoothing_alpha=0.0)

    def test_tracked_locations_are_bounded(self):
        """Verify distinct locations never grow state past max_locations."""
        tracker = TrendTracker(max_locations=100)
        for i in range(5000):
            tracker.update(f"loc-{i}", 10, timestamp=float(i))

        metrics = tracker.get_metrics()
        assert metrics["tracked_locations"] == 100
        assert metrics["evicted_locations"] == 4900
        assert tracker.current_rate("loc-0") is None
        assert tracker.current_rate("loc-4999") == 0.0

    def test_eviction_is_least_recently_updated(self):
        """Verify an updated location outlives idle ones."""
        tracker = TrendTracker(max_locations=2)
        tracker.update("a", 10, timestamp=0.0)
        tracker.update("b", 10, timestamp=0.0)
        tracker.update("a", 20, timestamp=60.0)
        tracker.update("c", 10, timestamp=60.0)

        assert tracker.current_rate("a") is not None
        assert tracker.current_rate("b") is None

    def test_rejects_bad_max_locations(self):
        """Verify max_locations is validated."""
        with pytest.raises(ValueError):
            TrendTracker(max_locations=0)


class TestForecast:
    """Tests for forecast helpers."""

    def test_project_from_trend(self):
        """Verify linear projection and zero floor."""
        rising = project_from_trend(40, 2.0)
        assert (rising.next_15min, rising.next_30min, rising.next_60min) == (70, 100, 160)

        falling = project_from_trend(10, -1.0)
        assert falling.next_60min == 0

    def test_forecast_uses_similar_times(self, make_reading, fixed_now):
        """Verify only same-weekday readings within an hour are averaged."""
        last_week = fixed_now - timedelta(days=7)
        history = [
            make_reading(80, created_at=last_week - timedelta(minutes=30)),
            make_reading(120, created_at=last_week),
            # different weekday
            make_reading(290, created_at=fixed_now - timedelta(days=1)),
            # same weekday, three hours later
            make_reading(290, created_at=last_week + timedelta(hours=3)),
        ]

        forecast = forecast_occupancy(history, fixed_now)

        assert forecast.samples == 2
        assert forecast.predictions.next_15min == 105
        assert forecast.predictions.next_30min == 110
        assert forecast.predictions.next_60min == 115
        assert forecast.confidence == pytest.approx(0.2)

    def test_forecast_without_history(self, fixed_now):
        """Verify the empty forecast defaults."""
        forecast = forecast_occupancy([], fixed_now)

        assert forecast.samples == 0
        assert forecast.confidence == 0.7
        assert forecast.predictions.next_60min == 0

    def test_segment_levels(self, make_reading, fixed_now):
        """Verify segment matching and level buckets."""
        history = [
            make_reading(
                135, capacity=150, created_at=fixed_now,
                location_id="downtown-hub-east-exit",
                location_name="Downtown Hub - East Exit",
            ),
            make_reading(60, capacity=300, created_at=fixed_now),
        ]

        hub, central, unknown = predict_segment_levels(
            ["downtown hub", "Central Station", "Nowhere"], history,
        )

        assert hub.level == CrowdLevel.HIGH
        assert hub.percentage == 90
        assert central.level == CrowdLevel.LOW
        assert unknown.level == CrowdLevel.MEDIUM
        assert unknown.percentage == 60
        assert unknown.confidence == 0.5


class TestCrowdIngestor:
    """Tests for CrowdIngestor."""

    def test_derives_fields(self, make_ingest_request, fixed_now):
        """Verify density, risk and id are derived on ingest."""
        reading = CrowdIngestor().ingest(make_ingest_request(285), now=fixed_now)

        assert reading.percentage == 95
        assert reading.density == DensityTier.CRITICAL
        assert reading.risk.level == RiskLevel.CRITICAL
        assert reading.risk.score == 100
        assert reading.created_at == fixed_now
        assert reading.reading_id.startswith("crowd-")

    def test_without_tracker_trend_is_stable(self, make_ingest_request):
        """Verify readings default to a stable trend and zero predictions."""
        reading = CrowdIngestor().ingest(make_ingest_request(100))

        assert reading.trend.direction == TrendDirection.STABLE
        assert reading.predictions.next_15min == 0
        assert reading.risk.factors == ["crowd_density"]

    def test_increasing_trend_adds_factor(self, make_ingest_request, fixed_now):
        """Verify a rising location gets the trend_increasing factor."""
        ingestor = CrowdIngestor(trend_tracker=TrendTracker())
        ingestor.ingest(make_ingest_request(10), now=fixed_now)
        reading = ingestor.ingest(
            make_ingest_request(40), now=fixed_now + timedelta(minutes=1),
        )

        assert reading.trend.direction == TrendDirection.INCREASING
        assert reading.risk.factors == ["crowd_density", "trend_increasing"]
        assert reading.predictions.next_15min == 175

    def test_metrics_count_critical(self, make_ingest_request):
        """Verify ingest metrics."""
        ingestor = CrowdIngestor()
        ingestor.ingest(make_ingest_request(285))
        ingestor.ingest(make_ingest_request(10))

        metrics = ingestor.get_metrics()
        assert metrics["readings_ingested"] == 2
        assert metrics["critical_readings"] == 1

    def test_distinct_locations_keep_tracker_bounded(self, make_ingest_request):
        """Verify ingesting many location ids keeps trend state capped."""
        ingestor = CrowdIngestor(trend_tracker=TrendTracker(max_locations=100))
        for i in range(500):
            ingestor.ingest(make_ingest_request(10, location_id=f"stop-{i}"))

        assert ingestor.get_metrics()["tracked_locations"] == 100
