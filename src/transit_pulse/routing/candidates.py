"""
Route Candidate Generation
==========================

Builds the three fixed route archetypes for an origin/destination pair.

This is NOT pathfinding. No transit graph is searched; each archetype is
a template with a fixed duration offset, crowd level and reliability.

Archetypes:
    fastest        duration = max(15, base - 10)   crowd high    reliability 92
    least-crowded  duration = max(15, base + 8)    crowd low     reliability 97
    most-reliable  duration = max(15, base + 3)    crowd medium  reliability 98

Base Duration:
    Both endpoints have coordinates:
        base = walking_overhead + ETA(haversine distance, average speed)
    Otherwise:
        base = default_base_duration_minutes

Off-peak:
    Any explicit departure time (not None, not "now") demotes high crowd
    levels to medium for every candidate.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional, Tuple, Union

from transit_pulse.crowd.density import round_half_up
from transit_pulse.errors import InvalidInput
from transit_pulse.models.location import Location
from transit_pulse.models.route import (
    Accessibility,
    CrowdLevel,
    Preferences,
    RouteOption,
    RouteType,
)
from transit_pulse.routing.geo import eta_minutes, haversine_km, validate_coordinates


logger = logging.getLogger(__name__)


DepartureTime = Optional[Union[datetime, str]]


@dataclass(frozen=True)
class RoutingParameters:
    """
    Tunable constants for generation and adjustment.

    Loaded from configuration file.
    """

    default_base_duration_minutes: int = 30
    min_duration_minutes: int = 15
    delay_penalty_minutes: int = 5
    baseline_duration_minutes: int = 40
    average_speed_kmh: float = 30.0
    walking_overhead_minutes: int = 6
    walking_meters_per_minute: float = 80.0


@dataclass(frozen=True)
class _Leg:
    """One step template. Fixed legs keep their minutes; ride legs share the rest."""

    text: str
    minutes: int = 0
    share: float = 0.0


@dataclass(frozen=True)
class _Archetype:
    id: str
    name: str
    type: RouteType
    offset_minutes: int
    crowd_level: CrowdLevel
    reliability: float
    transfers: int
    walking_minutes: int
    cost: float
    carbon_footprint_kg: float
    accessibility: Accessibility
    legs: Tuple[_Leg, ...]


_ARCHETYPES: Tuple[_Archetype, ...] = (
    _Archetype(
        id="fastest-route",
        name="Express Route",
        type=RouteType.FASTEST,
        offset_minutes=-10,
        crowd_level=CrowdLevel.HIGH,
        reliability=92,
        transfers=1,
        walking_minutes=5,
        cost=3.50,
        carbon_footprint_kg=2.1,
        accessibility=Accessibility(wheelchair_accessible=True, elevator_required=False),
        legs=(
            _Leg("Walk {from}to Blue Line Station", minutes=3),
            _Leg("Blue Line Express to Downtown Hub", share=0.65),
            _Leg("Transfer to Airport Express", minutes=2),
            _Leg("Airport Express to {to}", share=0.35),
        ),
    ),
    _Archetype(
        id="comfort-route",
        name="Comfort Route",
        type=RouteType.LEAST_CROWDED,
        offset_minutes=8,
        crowd_level=CrowdLevel.LOW,
        reliability=97,
        transfers=2,
        walking_minutes=8,
        cost=4.25,
        carbon_footprint_kg=2.8,
        accessibility=Accessibility(wheelchair_accessible=True, elevator_required=True),
        legs=(
            _Leg("Walk {from}to Green Line Station", minutes=4),
            _Leg("Green Line to University", share=0.45),
            _Leg("Transfer to Local Bus 45", minutes=3),
            _Leg("Bus 45 to Transit Center", share=0.30),
            _Leg("Transfer to Airport Shuttle", minutes=2),
            _Leg("Airport Shuttle to {to}", share=0.25),
        ),
    ),
    _Archetype(
        id="reliable-route",
        name="Reliable Route",
        type=RouteType.MOST_RELIABLE,
        offset_minutes=3,
        crowd_level=CrowdLevel.MEDIUM,
        reliability=98,
        transfers=0,
        walking_minutes=6,
        cost=4.00,
        carbon_footprint_kg=1.9,
        accessibility=Accessibility(wheelchair_accessible=True, elevator_required=False),
        legs=(
            _Leg("Walk {from}to Red Line Station", minutes=6),
            _Leg("Red Line Direct to {to}", share=1.0),
        ),
    ),
)


def is_off_peak(departure_time: DepartureTime) -> bool:
    """Any explicit departure other than "now" counts as off-peak."""
    if departure_time is None:
        return False
    if isinstance(departure_time, str):
        return departure_time.strip().lower() != "now"
    return True


class RouteCandidateGenerator:
    """
    Generates the three route archetypes.

    Stateless: each call builds fresh RouteOption values.

    Example:
        generator = RouteCandidateGenerator()
        routes = generator.generate(origin, destination, Preferences())
        [r.type for r in routes]   # fastest, least-crowded, most-reliable
    """

    def __init__(self, parameters: RoutingParameters = RoutingParameters()) -> None:
        self.parameters = parameters

    def generate(
        self,
        origin: Location,
        destination: Location,
        preferences: Preferences,
        departure_time: DepartureTime = None,
    ) -> List[RouteOption]:
        """
        Build candidates for an origin/destination pair.

        Args:
            origin: Start of the trip
            destination: End of the trip
            preferences: Rider preferences (echoed, not used for ordering)
            departure_time: None/"now" for immediate departure

        Returns:
            Three RouteOptions in archetype order (not ranked)

        Raises:
            InvalidInput: If origin and destination are the same place
        """
        if origin.same_place(destination):
            raise InvalidInput("origin and destination must differ")

        base = self.base_duration(origin, destination)
        off_peak = is_off_peak(departure_time)

        routes = [
            self._build(archetype, base, origin, destination, off_peak)
            for archetype in _ARCHETYPES
        ]

        logger.debug(
            f"Generated {len(routes)} candidates: base={base}min, "
            f"off_peak={off_peak}, priority={preferences.priority.value}"
        )
        return routes

    def base_duration(self, origin: Location, destination: Location) -> int:
        """Base door-to-door estimate in minutes."""
        p = self.parameters
        if origin.coordinates is None or destination.coordinates is None:
            return p.default_base_duration_minutes

        validate_coordinates(origin.coordinates)
        validate_coordinates(destination.coordinates)
        distance = haversine_km(origin.coordinates, destination.coordinates)
        return p.walking_overhead_minutes + eta_minutes(distance, p.average_speed_kmh)

    def _build(
        self,
        archetype: _Archetype,
        base: int,
        origin: Location,
        destination: Location,
        off_peak: bool,
    ) -> RouteOption:
        duration = max(self.parameters.min_duration_minutes, base + archetype.offset_minutes)

        crowd_level = archetype.crowd_level
        if off_peak and crowd_level == CrowdLevel.HIGH:
            crowd_level = CrowdLevel.MEDIUM

        return RouteOption(
            id=archetype.id,
            name=archetype.name,
            type=archetype.type,
            duration_minutes=duration,
            walking_minutes=archetype.walking_minutes,
            transfers=archetype.transfers,
            crowd_level=crowd_level,
            reliability=archetype.reliability,
            steps=self._steps(archetype, duration, origin, destination),
            cost=archetype.cost,
            carbon_footprint_kg=archetype.carbon_footprint_kg,
            accessibility=archetype.accessibility,
        )

    def _steps(
        self,
        archetype: _Archetype,
        duration: int,
        origin: Location,
        destination: Location,
    ) -> List[str]:
        fixed = sum(leg.minutes for leg in archetype.legs)
        ride_legs = [leg for leg in archetype.legs if leg.share]
        ride_total = max(len(ride_legs), duration - fixed)

        # Ride legs split the remaining minutes; the last ride leg absorbs rounding
        ride_minutes = {}
        allocated = 0
        for leg in ride_legs[:-1]:
            minutes = max(1, round_half_up(ride_total * leg.share))
            ride_minutes[leg] = minutes
            allocated += minutes
        ride_minutes[ride_legs[-1]] = max(1, ride_total - allocated)

        origin_part = f"from {origin.name} " if origin.name else ""
        destination_name = destination.name or "destination"

        steps = []
        for leg in archetype.legs:
            minutes = leg.minutes if not leg.share else ride_minutes[leg]
            text = leg.text.format(**{"from": origin_part, "to": destination_name})
            steps.append(f"{text} ({minutes} min)")
        return steps
