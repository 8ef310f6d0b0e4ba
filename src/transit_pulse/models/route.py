"""
Route Models
============

Route options, rider preferences and the optimization request/result
contract.

Output Contract:
    {
        "routes": [
            {
                "id": "comfort-route",
                "name": "Comfort Route",
                "type": "least-crowded",
                "duration_minutes": 38,
                "crowd_level": "low",
                "reliability": 97,
                "steps": ["Walk to Green Line Station (4 min)", "..."],
                "alerts": [],
                "recommended": true,
                "adjusted_for_delays": false
            }
        ],
        "origin": {"name": "Central Station", "coordinates": [-74.006, 40.7128]},
        "destination": {"name": "Airport Terminal", "coordinates": [-73.7781, 40.6413]},
        "preferences": {"priority": "least-crowded"},
        "generated_at": "2026-10-18T08:15:00Z"
    }

Design Rules:
    - RouteOption is immutable; every pipeline stage returns a new copy
    - Route options are rebuilt on every request and never persisted
"""

from datetime import datetime, timezone
from enum import Enum
from typing import List, Literal, Optional, Union

from pydantic import BaseModel, Field

from transit_pulse.models.alert import AlertSeverity, AlertType
from transit_pulse.models.location import Location


class RouteType(str, Enum):
    """Route archetype."""

    FASTEST = "fastest"
    LEAST_CROWDED = "least-crowded"
    MOST_RELIABLE = "most-reliable"


class Priority(str, Enum):
    """Rider's ranking priority."""

    FASTEST = "fastest"
    LEAST_CROWDED = "least-crowded"
    MOST_RELIABLE = "most-reliable"
    BALANCED = "balanced"


class CrowdLevel(str, Enum):
    """Expected on-board crowding for a route."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


CROWD_ORDER = {CrowdLevel.LOW: 1, CrowdLevel.MEDIUM: 2, CrowdLevel.HIGH: 3}


class AlertImpact(str, Enum):
    """Impact of an alert on a route."""

    MINOR = "minor"
    MAJOR = "major"


class RouteAlert(BaseModel):
    """Alert attached to a route option."""

    type: AlertType
    severity: AlertSeverity
    message: str
    impact: AlertImpact = Field(default=AlertImpact.MINOR)

    class Config:
        """Pydantic model configuration."""

        frozen = True


class Accessibility(BaseModel):
    """Step-free access facts for a route."""

    wheelchair_accessible: bool = Field(default=True)
    elevator_required: bool = Field(default=False)

    class Config:
        """Pydantic model configuration."""

        frozen = True


class RouteOption(BaseModel):
    """
    One candidate route.

    Attributes:
        id: Stable archetype id
        name: Display name
        type: Archetype
        duration_minutes: Door-to-door duration (>= 15)
        walking_minutes: Walking share of the duration
        transfers: Number of vehicle changes
        crowd_level: Expected crowding
        reliability: Declared on-time reliability [90, 99]
        steps: Ordered step descriptions
        cost: Fare
        carbon_footprint_kg: Estimated kg CO2
        accessibility: Step-free access facts
        alerts: Alerts affecting this route
        recommended: True for the single primary suggestion
        recommendation_reason: Why the route was demoted, if it was
        adjusted_for_delays: True once the delay penalty has been applied
        savings: Time saved versus the baseline, if any
    """

    id: str
    name: str
    type: RouteType
    duration_minutes: int = Field(..., ge=15)
    walking_minutes: int = Field(default=0, ge=0)
    transfers: int = Field(default=0, ge=0)
    crowd_level: CrowdLevel
    reliability: float = Field(..., ge=90, le=99)
    steps: List[str] = Field(default_factory=list)
    cost: float = Field(default=0.0, ge=0.0)
    carbon_footprint_kg: float = Field(default=0.0, ge=0.0)
    accessibility: Accessibility = Field(default_factory=Accessibility)
    alerts: List[RouteAlert] = Field(default_factory=list)
    recommended: bool = Field(default=False)
    recommendation_reason: Optional[str] = Field(default=None)
    adjusted_for_delays: bool = Field(default=False)
    savings: Optional[str] = Field(default=None)

    @property
    def demoted(self) -> bool:
        """True if a preference check flagged this route as unsuitable."""
        return self.recommendation_reason is not None

    class Config:
        """Pydantic model configuration."""

        frozen = True


class Preferences(BaseModel):
    """
    Rider preferences.

    Attributes:
        priority: Ranking priority (default balanced)
        max_walking_distance_meters: Walking limit in meters
        avoid_crowded: Demote routes with high crowding
        accessibility_required: Flag routes that depend on elevators
    """

    priority: Priority = Field(default=Priority.BALANCED)
    max_walking_distance_meters: int = Field(default=800, ge=0, le=2000)
    avoid_crowded: bool = Field(default=False)
    accessibility_required: bool = Field(default=False)


class OptimizationRequest(BaseModel):
    """
    Route optimization request.

    `departure_time` of None or "now" means leave immediately; any
    explicit time is treated as off-peak.
    """

    origin: Location
    destination: Location
    preferences: Preferences = Field(default_factory=Preferences)
    departure_time: Optional[Union[datetime, Literal["now"]]] = Field(default=None)

    class Config:
        """Pydantic model configuration."""

        json_schema_extra = {
            "example": {
                "origin": {"name": "Central Station", "coordinates": [-74.0060, 40.7128]},
                "destination": {"name": "Airport Terminal", "coordinates": [-73.7781, 40.6413]},
                "preferences": {"priority": "least-crowded", "avoid_crowded": True},
            }
        }


class OptimizationResult(BaseModel):
    """Ranked routes plus the echoed request."""

    routes: List[RouteOption]
    origin: Location
    destination: Location
    preferences: Preferences
    generated_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
    )
