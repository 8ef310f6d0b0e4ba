"""
Route Ranking
=============

Orders adjusted routes by the rider's priority and picks the single
recommended route.

Sort Keys (stable; ties keep generator order):
    fastest        ascending duration_minutes
    least-crowded  ascending crowd ordinal (low=1, medium=2, high=3)
    most-reliable  descending reliability
    balanced       descending reliability (also any unrecognized priority)

Recommended Marker:
    The first route in ranked order without a demotion reason gets
    recommended = True; every other route gets False. If all routes are
    demoted, none is recommended.
"""

import logging
from typing import Callable, Dict, List, Sequence, Union

from transit_pulse.models.route import CROWD_ORDER, Priority, RouteOption


logger = logging.getLogger(__name__)


SortKey = Callable[[RouteOption], float]

_SORT_KEYS: Dict[Priority, SortKey] = {
    Priority.FASTEST: lambda r: r.duration_minutes,
    Priority.LEAST_CROWDED: lambda r: CROWD_ORDER[r.crowd_level],
    Priority.MOST_RELIABLE: lambda r: -r.reliability,
    # TODO: balanced should weigh duration and crowding once a scoring formula is agreed
    Priority.BALANCED: lambda r: -r.reliability,
}


def normalize_priority(priority: Union[Priority, str, None]) -> Priority:
    """Coerce a priority value, falling back to balanced."""
    if isinstance(priority, Priority):
        return priority
    try:
        return Priority(priority)
    except ValueError:
        logger.debug(f"Unrecognized priority {priority!r}, using balanced")
        return Priority.BALANCED


class RouteRanker:
    """Stateless route ranker."""

    def rank(
        self,
        routes: Sequence[RouteOption],
        priority: Union[Priority, str, None],
    ) -> List[RouteOption]:
        """
        Sort routes and assign the recommended marker.

        Args:
            routes: Adjusted routes in generator order
            priority: Ranking priority

        Returns:
            New list of route copies in ranked order
        """
        resolved = normalize_priority(priority)
        ordered = sorted(routes, key=_SORT_KEYS[resolved])

        ranked = []
        picked = False
        for route in ordered:
            is_pick = not picked and not route.demoted
            picked = picked or is_pick
            ranked.append(route.model_copy(update={"recommended": is_pick}))

        if not picked:
            logger.info(f"No eligible route to recommend ({len(ranked)} demoted)")

        return ranked
