"""
Reason Codes
============

Fixed machine-readable codes attached to crowd risk assessments.

Rules:
    - No free-text explanations
    - Factors explain why a location is risky
    - Recommendations tell riders and operators what to do
"""

from enum import Enum


class RiskFactor(str, Enum):
    """
    Contributing risk factors.

    Attributes:
        CROWD_DENSITY: Occupancy relative to capacity (always present)
        TREND_INCREASING: Occupancy is rising at the location
    """

    CROWD_DENSITY = "crowd_density"
    TREND_INCREASING = "trend_increasing"


class Recommendation(str, Enum):
    """
    Advice codes.

    Attributes:
        AVOID_LOCATION: Stay away from the location for now
        USE_ALTERNATIVE_ROUTE: Route around the location
        MONITOR_SITUATION: No action, keep watching
    """

    AVOID_LOCATION = "avoid_location"
    USE_ALTERNATIVE_ROUTE = "use_alternative_route"
    MONITOR_SITUATION = "monitor_situation"
