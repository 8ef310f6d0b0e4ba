"""
Route Optimization Graph Tests
==============================

End-to-end tests for the LangGraph generate → adjust → rank pipeline.
"""

from datetime import datetime, timezone

import pytest

from transit_pulse.errors import InvalidInput
from transit_pulse.models.location import Location
from transit_pulse.models.route import (
    CrowdLevel,
    OptimizationRequest,
    Preferences,
    Priority,
    RouteType,
)
from transit_pulse.routing import RouteOptimizationGraph, RoutingParameters


class TestRouteOptimizationGraph:
    """Tests for RouteOptimizationGraph.optimize."""

    def test_least_crowded_end_to_end(self, central_station, airport_terminal):
        """Verify least-crowded ranking from Central Station to the airport."""
        request = OptimizationRequest(
            origin=central_station,
            destination=airport_terminal,
            preferences=Preferences(priority=Priority.LEAST_CROWDED),
        )
        result = RouteOptimizationGraph().optimize(request)

        top = result.routes[0]
        assert top.crowd_level == CrowdLevel.LOW
        assert top.name == "Comfort Route"
        assert top.duration_minutes >= 15
        assert top.recommended is True
        assert len(result.routes) == 3

    def test_echoes_request(self, central_station, airport_terminal):
        """Verify origin, destination and preferences are echoed."""
        request = OptimizationRequest(origin=central_station, destination=airport_terminal)
        generated_at = datetime(2026, 10, 18, 12, 0, tzinfo=timezone.utc)
        result = RouteOptimizationGraph().optimize(request, generated_at=generated_at)

        assert result.origin == central_station
        assert result.destination == airport_terminal
        assert result.preferences.priority == Priority.BALANCED
        assert result.generated_at == generated_at

    def test_alert_applies_to_matching_route(self, central_station, airport_terminal, downtown_hub_alert):
        """Verify a Downtown Hub alert delays only the express route."""
        request = OptimizationRequest(
            origin=central_station,
            destination=airport_terminal,
            preferences=Preferences(priority=Priority.FASTEST),
        )
        graph = RouteOptimizationGraph()
        clean = {r.id: r for r in graph.optimize(request).routes}
        alerted = {r.id: r for r in graph.optimize(request, alerts=[downtown_hub_alert]).routes}

        assert alerted["fastest-route"].duration_minutes == clean["fastest-route"].duration_minutes + 5
        assert alerted["comfort-route"].duration_minutes == clean["comfort-route"].duration_minutes
        assert alerted["reliable-route"].duration_minutes == clean["reliable-route"].duration_minutes

    def test_avoid_crowded_moves_recommendation(self, central_station, airport_terminal):
        """Verify a demoted express route is not recommended."""
        request = OptimizationRequest(
            origin=central_station,
            destination=airport_terminal,
            preferences=Preferences(priority=Priority.FASTEST, avoid_crowded=True),
        )
        routes = RouteOptimizationGraph().optimize(request).routes

        assert routes[0].type == RouteType.FASTEST
        assert routes[0].recommended is False
        assert sum(r.recommended for r in routes) == 1

    def test_same_origin_destination_rejected(self, central_station):
        """Verify identical endpoints raise InvalidInput."""
        request = OptimizationRequest(
            origin=central_station,
            destination=Location(name="central station", coordinates=[-74.0060, 40.7128]),
        )
        graph = RouteOptimizationGraph()
        with pytest.raises(InvalidInput):
            graph.optimize(request)
        assert graph.get_metrics()["rejected_requests"] == 1

    def test_parameters_flow_through(self, central_station, airport_terminal, downtown_hub_alert):
        """Verify routing parameters reach the adjuster."""
        request = OptimizationRequest(
            origin=central_station,
            destination=airport_terminal,
            preferences=Preferences(priority=Priority.FASTEST),
        )
        default = RouteOptimizationGraph().optimize(request, alerts=[downtown_hub_alert])
        custom = RouteOptimizationGraph(
            RoutingParameters(delay_penalty_minutes=12),
        ).optimize(request, alerts=[downtown_hub_alert])

        default_fastest = next(r for r in default.routes if r.id == "fastest-route")
        custom_fastest = next(r for r in custom.routes if r.id == "fastest-route")
        assert custom_fastest.duration_minutes == default_fastest.duration_minutes + 7

    def test_concurrent_requests_do_not_share_routes(self, central_station, airport_terminal, downtown_hub_alert):
        """Verify one request's alerts never leak into another."""
        graph = RouteOptimizationGraph()
        request = OptimizationRequest(origin=central_station, destination=airport_terminal)

        graph.optimize(request, alerts=[downtown_hub_alert])
        clean = graph.optimize(request)

        assert all(not r.adjusted_for_delays for r in clean.routes)
        assert all(r.alerts == [] for r in clean.routes)
