"""
Route Optimization Graph
========================

LangGraph pipeline for route optimization.

LangGraph is used for CONTROL FLOW only. There are no LLM calls.

Graph Structure:
    START → validate → generate → adjust → rank → END

    validate:  reject identical origin/destination before generation
    generate:  RouteCandidateGenerator builds the three archetypes
    adjust:    RouteAdjuster applies alerts and preferences per route
    rank:      RouteRanker orders routes and marks the recommendation

Concurrency:
    The graph is compiled once. Every call to `optimize` invokes it with a
    fresh state dict built from caller-supplied snapshots, so concurrent
    requests never share a route object.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Sequence, TypedDict

from langgraph.graph import END, StateGraph

from transit_pulse.errors import InvalidInput
from transit_pulse.models.alert import Alert
from transit_pulse.models.route import (
    OptimizationRequest,
    OptimizationResult,
    RouteOption,
)
from transit_pulse.routing.adjuster import RouteAdjuster
from transit_pulse.routing.candidates import RouteCandidateGenerator, RoutingParameters
from transit_pulse.routing.ranker import RouteRanker


logger = logging.getLogger(__name__)


class RouteGraphState(TypedDict):
    """
    State passed through the optimization graph.

    Attributes:
        request: Validated optimization request
        alerts: Alert snapshot for this request
        candidates: Generator output
        adjusted: Adjuster output, generator order
        routes: Ranked output
    """
    request: OptimizationRequest
    alerts: List[Alert]
    candidates: List[RouteOption]
    adjusted: List[RouteOption]
    routes: List[RouteOption]


class RouteOptimizationGraph:
    """
    Deterministic generate → adjust → rank pipeline.

    Example:
        graph = RouteOptimizationGraph()
        result = graph.optimize(request, alerts=alert_store.live())
        result.routes[0].recommended   # True unless every route was demoted
    """

    def __init__(
        self,
        parameters: Optional[RoutingParameters] = None,
        generator: Optional[RouteCandidateGenerator] = None,
        adjuster: Optional[RouteAdjuster] = None,
        ranker: Optional[RouteRanker] = None,
    ) -> None:
        self.parameters = parameters or RoutingParameters()
        self.generator = generator or RouteCandidateGenerator(self.parameters)
        self.adjuster = adjuster or RouteAdjuster(self.parameters)
        self.ranker = ranker or RouteRanker()

        self._graph = self._build_graph()
        self._requests: int = 0
        self._rejected: int = 0

        logger.info("RouteOptimizationGraph initialized")

    def _build_graph(self):
        """Build the LangGraph workflow."""
        workflow = StateGraph(RouteGraphState)

        workflow.add_node("validate", self._validate_node)
        workflow.add_node("generate", self._generate_node)
        workflow.add_node("adjust", self._adjust_node)
        workflow.add_node("rank", self._rank_node)

        workflow.set_entry_point("validate")
        workflow.add_edge("validate", "generate")
        workflow.add_edge("generate", "adjust")
        workflow.add_edge("adjust", "rank")
        workflow.add_edge("rank", END)

        return workflow.compile()

    def _validate_node(self, state: RouteGraphState) -> Dict[str, Any]:
        request = state["request"]
        if request.origin.same_place(request.destination):
            raise InvalidInput("origin and destination must differ")
        return {"request": request}

    def _generate_node(self, state: RouteGraphState) -> Dict[str, Any]:
        request = state["request"]
        candidates = self.generator.generate(
            request.origin,
            request.destination,
            request.preferences,
            request.departure_time,
        )
        return {"candidates": candidates}

    def _adjust_node(self, state: RouteGraphState) -> Dict[str, Any]:
        preferences = state["request"].preferences
        alerts = state.get("alerts", [])
        adjusted = [
            self.adjuster.adjust(route, alerts, preferences)
            for route in state["candidates"]
        ]
        return {"adjusted": adjusted}

    def _rank_node(self, state: RouteGraphState) -> Dict[str, Any]:
        priority = state["request"].preferences.priority
        return {"routes": self.ranker.rank(state["adjusted"], priority)}

    def optimize(
        self,
        request: OptimizationRequest,
        alerts: Sequence[Alert] = (),
        generated_at: Optional[datetime] = None,
    ) -> OptimizationResult:
        """
        Run the full pipeline for one request.

        Args:
            request: Optimization request
            alerts: Alert snapshot (non-live alerts are ignored)
            generated_at: Result timestamp (defaults to now, UTC)

        Returns:
            OptimizationResult with ranked routes

        Raises:
            InvalidInput: If origin and destination are the same place
        """
        self._requests += 1
        initial: RouteGraphState = {
            "request": request,
            "alerts": list(alerts),
            "candidates": [],
            "adjusted": [],
            "routes": [],
        }

        try:
            final = self._graph.invoke(initial)
        except InvalidInput:
            self._rejected += 1
            raise

        routes = final["routes"]
        logger.info(
            f"Optimized routes: priority={request.preferences.priority.value}, "
            f"top={routes[0].id if routes else None}, alerts={len(initial['alerts'])}"
        )

        return OptimizationResult(
            routes=routes,
            origin=request.origin,
            destination=request.destination,
            preferences=request.preferences,
            generated_at=generated_at or datetime.now(timezone.utc),
        )

    def get_metrics(self) -> Dict[str, Any]:
        """Get pipeline metrics for observability."""
        return {
            "optimization_requests": self._requests,
            "rejected_requests": self._rejected,
        }
