"""
Route Adjustment
================

Applies live alerts and rider preferences to a candidate route.

Adjustment Rules:
    1. Match: a live alert applies when its location name appears
       (case-insensitive) in any step.
    2. Delay: any match with severity high or type warning adds the delay
       penalty once and sets adjusted_for_delays. The penalty also lands
       on the step passing the alert location, so step minutes keep
       summing to the duration.
    3. Alerts: route alerts are rebuilt from the matches,
       impact = major for severity high, minor otherwise.
    4. Crowding: avoid_crowded and crowd level high demotes the route
       (recommended = False, reason "High crowd levels detected").
    5. Savings: "N minutes faster" against the baseline when positive.
    6. Advisories: elevator-dependent routes under accessibility_required,
       and walks longer than max_walking_distance_meters, get a low
       severity advisory. Advisories never demote.

Idempotence:
    adjust(adjust(r, A, p), A, p) == adjust(r, A, p). The delay penalty is
    guarded by adjusted_for_delays and alerts are rebuilt, not appended.
"""

import logging
import re
from typing import Iterable, List, Optional

from transit_pulse.models.alert import Alert, AlertSeverity, AlertType
from transit_pulse.models.route import (
    AlertImpact,
    CrowdLevel,
    Preferences,
    RouteAlert,
    RouteOption,
)
from transit_pulse.routing.candidates import RoutingParameters


logger = logging.getLogger(__name__)


CROWDED_REASON = "High crowd levels detected"
ELEVATOR_ADVISORY = "Step-free access depends on elevator availability"
WALKING_ADVISORY = "Walking distance exceeds your preference"

_STEP_MINUTES = re.compile(r"\((\d+) min\)$")


def matching_alerts(route: RouteOption, alerts: Iterable[Alert]) -> List[Alert]:
    """Live alerts whose location name appears in any of the route's steps."""
    steps = [step.lower() for step in route.steps]
    matches = []
    for alert in alerts:
        if not alert.is_live:
            continue
        needle = alert.location_name.lower()
        if any(needle in step for step in steps):
            matches.append(alert)
    return matches


def delay_step(steps: List[str], location_name: str, minutes: int) -> List[str]:
    """
    Add delay minutes to the first step passing `location_name`.

    Steps end in "(N min)". Falls back to the last timed step when no
    timed step names the location.
    """
    needle = location_name.lower()
    timed = [i for i, step in enumerate(steps) if _STEP_MINUTES.search(step)]
    if not timed:
        return list(steps)

    target = next((i for i in timed if needle in steps[i].lower()), timed[-1])
    delayed = list(steps)
    delayed[target] = _STEP_MINUTES.sub(
        lambda m: f"({int(m.group(1)) + minutes} min)",
        steps[target],
    )
    return delayed


def _causes_delay(alert: Alert) -> bool:
    return alert.severity == AlertSeverity.HIGH or alert.type == AlertType.WARNING


class RouteAdjuster:
    """
    Stateless route adjuster.

    Never drops a route. Always returns a new RouteOption.
    """

    def __init__(self, parameters: RoutingParameters = RoutingParameters()) -> None:
        self.parameters = parameters

    def adjust(
        self,
        route: RouteOption,
        active_alerts: Iterable[Alert],
        preferences: Preferences,
    ) -> RouteOption:
        """
        Adjust one route.

        Args:
            route: Candidate route
            active_alerts: Current alert snapshot
            preferences: Rider preferences

        Returns:
            Adjusted copy of the route
        """
        p = self.parameters
        matches = matching_alerts(route, active_alerts)

        duration = route.duration_minutes
        steps = route.steps
        adjusted = route.adjusted_for_delays
        delays = [a for a in matches if _causes_delay(a)]
        if not adjusted and delays:
            duration += p.delay_penalty_minutes
            steps = delay_step(steps, delays[0].location_name, p.delay_penalty_minutes)
            adjusted = True
            logger.debug(
                f"Delay penalty applied to {route.id}: "
                f"+{p.delay_penalty_minutes}min ({len(matches)} alerts)"
            )

        route_alerts = [
            RouteAlert(
                type=alert.type,
                severity=alert.severity,
                message=alert.title,
                impact=(
                    AlertImpact.MAJOR if alert.severity == AlertSeverity.HIGH
                    else AlertImpact.MINOR
                ),
            )
            for alert in matches
        ]
        route_alerts.extend(self._advisories(route, preferences))

        recommended = route.recommended
        reason = route.recommendation_reason
        if preferences.avoid_crowded and route.crowd_level == CrowdLevel.HIGH:
            recommended = False
            reason = CROWDED_REASON

        return route.model_copy(update={
            "duration_minutes": duration,
            "steps": steps,
            "adjusted_for_delays": adjusted,
            "alerts": route_alerts,
            "recommended": recommended,
            "recommendation_reason": reason,
            "savings": self._savings(duration),
        })

    def _advisories(self, route: RouteOption, preferences: Preferences) -> List[RouteAlert]:
        advisories = []
        if preferences.accessibility_required and route.accessibility.elevator_required:
            advisories.append(RouteAlert(
                type=AlertType.INFO,
                severity=AlertSeverity.LOW,
                message=ELEVATOR_ADVISORY,
            ))

        walking_meters = route.walking_minutes * self.parameters.walking_meters_per_minute
        if walking_meters > preferences.max_walking_distance_meters:
            advisories.append(RouteAlert(
                type=AlertType.INFO,
                severity=AlertSeverity.LOW,
                message=WALKING_ADVISORY,
            ))
        return advisories

    def _savings(self, duration: int) -> Optional[str]:
        saved = self.parameters.baseline_duration_minutes - duration
        if saved > 0:
            return f"{saved} minutes faster"
        return None
