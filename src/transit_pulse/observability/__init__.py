"""
Observability Module
====================

Analytics for the transit pulse service.

DESIGN RULES:
    - Does NOT import routing logic
    - Does NOT influence decisions
"""

from transit_pulse.observability.analytics import CrowdAnalytics, CrowdOverview


__all__ = [
    "CrowdAnalytics",
    "CrowdOverview",
]
