"""
TransitPulse
============

Crowd-aware public transit routing service.

Scores crowd readings at transit locations and ranks candidate routes
against rider preferences and live service alerts.

Components:
    - crowd: Density classification, risk assessment, trend and forecast
    - routing: Candidate generation, alert adjustment, ranking (LangGraph)
    - store: Bounded in-memory repositories
    - observability: Aggregate crowd analytics
    - simulation: Synthetic crowd feed

Example:
    from transit_pulse.routing import RouteOptimizationGraph
    from transit_pulse.models import OptimizationRequest

    result = RouteOptimizationGraph().optimize(OptimizationRequest(...))
"""

__version__ = "0.1.0"

__all__ = [
    "__version__",
]
