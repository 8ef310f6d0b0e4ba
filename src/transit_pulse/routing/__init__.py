"""
Routing Module
==============

Route candidate generation, adjustment and ranking.

This module implements the route scoring pipeline:
    - candidates.py: Three fixed route archetypes
    - adjuster.py: Live alert and preference adjustments
    - ranker.py: Priority ordering and the recommended marker
    - graph.py: LangGraph pipeline wiring the three stages

Key Design Decisions:
    - No pathfinding; candidates come from fixed templates
    - Every stage is stateless and returns new RouteOption copies
    - LangGraph is used for STRUCTURE, not LLM reasoning
"""

from transit_pulse.routing.adjuster import RouteAdjuster
from transit_pulse.routing.candidates import RouteCandidateGenerator, RoutingParameters
from transit_pulse.routing.graph import RouteOptimizationGraph
from transit_pulse.routing.ranker import RouteRanker

__all__ = [
    "RoutingParameters",
    "RouteCandidateGenerator",
    "RouteAdjuster",
    "RouteRanker",
    "RouteOptimizationGraph",
]
