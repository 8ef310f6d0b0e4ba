"""
Data Models
===========

Pydantic models for TransitPulse.

This module re-exports all data models for convenient access.

Models:
    Crowd:
        - OccupancyReading: People count against capacity
        - DensityTier, RiskLevel: Four-bucket classifications
        - RiskAssessment: Level, factors, recommendations, score
        - CrowdIngestRequest: Raw inbound reading
        - CrowdReading: Immutable derived reading

    Alerts:
        - Alert: Service alert consumed by the route adjuster

    Routes:
        - Location: Origin/destination endpoint
        - Preferences: Rider preferences
        - RouteOption: One candidate route
        - OptimizationRequest, OptimizationResult: Request/response contract

    Codes:
        - RiskFactor, Recommendation: Machine-readable codes
"""

from transit_pulse.models.alert import (
    Alert,
    AlertCreateRequest,
    AlertSeverity,
    AlertStatus,
    AlertStatusUpdate,
    AlertType,
)
from transit_pulse.models.crowd import (
    CrowdIngestRequest,
    CrowdPredictions,
    CrowdReading,
    CrowdTrend,
    DensityTier,
    LocationType,
    OccupancyReading,
    RiskAssessment,
    RiskLevel,
    TrendDirection,
)
from transit_pulse.models.location import Location
from transit_pulse.models.reason_codes import Recommendation, RiskFactor
from transit_pulse.models.route import (
    CrowdLevel,
    OptimizationRequest,
    OptimizationResult,
    Preferences,
    Priority,
    RouteAlert,
    RouteOption,
    RouteType,
)

__all__ = [
    # Crowd
    "OccupancyReading",
    "DensityTier",
    "RiskLevel",
    "RiskAssessment",
    "LocationType",
    "TrendDirection",
    "CrowdTrend",
    "CrowdPredictions",
    "CrowdIngestRequest",
    "CrowdReading",
    # Alerts
    "Alert",
    "AlertCreateRequest",
    "AlertStatusUpdate",
    "AlertType",
    "AlertSeverity",
    "AlertStatus",
    # Routes
    "Location",
    "Preferences",
    "Priority",
    "CrowdLevel",
    "RouteType",
    "RouteAlert",
    "RouteOption",
    "OptimizationRequest",
    "OptimizationResult",
    # Codes
    "RiskFactor",
    "Recommendation",
]
