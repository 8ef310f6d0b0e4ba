"""
TransitPulse Main Application
=============================

FastAPI entry point for the crowd-aware transit service.

The scoring core (crowd, routing) is synchronous and stateless. This
module owns the repositories, takes snapshots from them and passes those
into the core.

Endpoints:
    GET   /                                   - Service information
    GET   /health                             - Liveness probe
    GET   /metrics                            - Component metrics
    POST  /api/optimization/routes            - Ranked route options
    POST  /api/crowd                          - Ingest a crowd reading
    GET   /api/crowd                          - List readings (filters, paging)
    GET   /api/crowd/stats/overview           - Aggregate crowd statistics
    GET   /api/crowd/location/{location_id}   - History for one location
    GET   /api/crowd/predictions/{location_id} - History-based forecast
    POST  /api/alerts                         - Create an alert
    GET   /api/alerts                         - List alerts
    PATCH /api/alerts/{alert_id}/status       - Change alert status
    WS    /ws/crowd                           - New crowd readings as they land
"""

import asyncio
import logging
import os
import signal
import threading
import time
from contextlib import asynccontextmanager
from datetime import datetime, timedelta, timezone
from typing import AsyncIterator, Optional, Set

from fastapi import FastAPI, HTTPException, Query, Request, WebSocket, WebSocketDisconnect
from fastapi.responses import JSONResponse

from transit_pulse.config import Settings, settings
from transit_pulse.crowd import (
    CrowdIngestor,
    CrowdRiskAssessor,
    DensityClassifier,
    RiskParameters,
    TierThresholds,
    TrendTracker,
    forecast_occupancy,
)
from transit_pulse.errors import DivisionError, InvalidInput
from transit_pulse.models.alert import AlertCreateRequest, AlertStatus, AlertStatusUpdate
from transit_pulse.models.crowd import CrowdIngestRequest, CrowdReading, LocationType, RiskLevel
from transit_pulse.models.route import OptimizationRequest
from transit_pulse.observability import CrowdAnalytics
from transit_pulse.routing import RouteOptimizationGraph, RoutingParameters
from transit_pulse.simulation import CrowdSimulator
from transit_pulse.store import InMemoryAlertRepository, InMemoryCrowdRepository


logger = logging.getLogger(__name__)


# =============================================================================
# Global State
# =============================================================================

_shutdown_flag: bool = False

# Repositories
_crowd_repo: Optional[InMemoryCrowdRepository] = None
_alert_repo: Optional[InMemoryAlertRepository] = None

# Core
_ingestor: Optional[CrowdIngestor] = None
_optimizer: Optional[RouteOptimizationGraph] = None
_analytics: Optional[CrowdAnalytics] = None

# Simulation
_simulator: Optional[CrowdSimulator] = None
_simulation_task: Optional[asyncio.Task] = None
_maintenance_task: Optional[asyncio.Task] = None

# WebSocket subscribers
_crowd_clients: Set[WebSocket] = set()

_startup_time: float = 0.0
_request_errors: int = 0


# =============================================================================
# Getters
# =============================================================================

def get_crowd_repo() -> InMemoryCrowdRepository:
    if _crowd_repo is None:
        raise HTTPException(status_code=503, detail="Service not initialized")
    return _crowd_repo

def get_alert_repo() -> InMemoryAlertRepository:
    if _alert_repo is None:
        raise HTTPException(status_code=503, detail="Service not initialized")
    return _alert_repo

def get_ingestor() -> CrowdIngestor:
    if _ingestor is None:
        raise HTTPException(status_code=503, detail="Service not initialized")
    return _ingestor

def get_optimizer() -> RouteOptimizationGraph:
    if _optimizer is None:
        raise HTTPException(status_code=503, detail="Service not initialized")
    return _optimizer


# =============================================================================
# Signal Handlers
# =============================================================================

def _handle_sigterm(signum, frame):
    """Handle SIGTERM for graceful shutdown."""
    global _shutdown_flag
    logger.info("Received SIGTERM, initiating graceful shutdown...")
    _shutdown_flag = True


# =============================================================================
# Component Factories
# =============================================================================

def create_ingestor(config: Settings) -> CrowdIngestor:
    """Build the ingest pipeline from config."""
    density = config.thresholds.density
    classifier = DensityClassifier(TierThresholds(
        medium=density.medium,
        high=density.high,
        critical=density.critical,
    ))
    assessor = CrowdRiskAssessor(
        classifier=classifier,
        parameters=RiskParameters(
            avoid_above_percentage=config.risk.avoid_above_percentage,
            score_multiplier=config.risk.score_multiplier,
        ),
    )
    # A location absent from the reading store has no history to trend against
    trend_tracker = TrendTracker(max_locations=config.store.max_readings)
    return CrowdIngestor(assessor=assessor, trend_tracker=trend_tracker)


def create_optimizer(config: Settings) -> RouteOptimizationGraph:
    """Build the route optimization graph from config."""
    routing = config.routing
    return RouteOptimizationGraph(RoutingParameters(
        default_base_duration_minutes=routing.default_base_duration_minutes,
        min_duration_minutes=routing.min_duration_minutes,
        delay_penalty_minutes=routing.delay_penalty_minutes,
        baseline_duration_minutes=routing.baseline_duration_minutes,
        average_speed_kmh=routing.average_speed_kmh,
        walking_overhead_minutes=routing.walking_overhead_minutes,
        walking_meters_per_minute=routing.walking_meters_per_minute,
    ))


# =============================================================================
# Crowd Pipeline
# =============================================================================

async def broadcast_reading(reading: CrowdReading) -> None:
    """Push a new reading to every /ws/crowd subscriber."""
    if not _crowd_clients:
        return

    payload = {"type": "crowd_update", "data": reading.model_dump(mode="json")}
    for websocket in list(_crowd_clients):
        try:
            await websocket.send_json(payload)
        except Exception as e:
            logger.warning(f"Dropping crowd subscriber after send error: {e}")
            _crowd_clients.discard(websocket)


async def record_reading(request: CrowdIngestRequest) -> CrowdReading:
    """Ingest, store and broadcast one reading."""
    reading = get_ingestor().ingest(request)
    get_crowd_repo().add(reading)
    await broadcast_reading(reading)
    return reading


async def run_simulation(interval_seconds: float) -> None:
    """Feed simulated readings through the normal ingest path."""
    if _simulator is None:
        logger.error("Simulation started without a simulator")
        return

    logger.info(f"Crowd simulation started: interval={interval_seconds}s")

    while not _shutdown_flag:
        try:
            for request in _simulator.tick():
                await record_reading(request)
            await asyncio.sleep(interval_seconds)

        except asyncio.CancelledError:
            logger.info("Crowd simulation cancelled")
            break
        except Exception as e:
            logger.error(f"Simulation error: {e}")
            await asyncio.sleep(interval_seconds)

    logger.info("Crowd simulation stopped")


async def run_maintenance(interval_seconds: float = 3600.0) -> None:
    """Prune expired readings and long-resolved alerts."""
    while not _shutdown_flag:
        try:
            await asyncio.sleep(interval_seconds)
            get_crowd_repo().prune()
            get_alert_repo().prune_resolved()

        except asyncio.CancelledError:
            break
        except Exception as e:
            logger.error(f"Maintenance error: {e}")


# =============================================================================
# Lifespan Management
# =============================================================================

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan manager with graceful shutdown."""
    global _crowd_repo, _alert_repo, _ingestor, _optimizer, _analytics
    global _simulator, _simulation_task, _maintenance_task, _startup_time, _shutdown_flag

    # Signal handlers can only be installed from the main thread
    if threading.current_thread() is threading.main_thread():
        signal.signal(signal.SIGTERM, _handle_sigterm)

    _startup_time = time.time()
    _shutdown_flag = False
    logger.info(f"Starting {settings.service.name} {settings.service.version}")

    _crowd_repo = InMemoryCrowdRepository(
        maxsize=settings.store.max_readings,
        retention=timedelta(days=settings.store.retention_days),
    )
    _alert_repo = InMemoryAlertRepository()
    _ingestor = create_ingestor(settings)
    _optimizer = create_optimizer(settings)
    _analytics = CrowdAnalytics()
    _maintenance_task = asyncio.create_task(run_maintenance(), name="store_maintenance")

    if settings.simulation.enabled:
        _simulator = CrowdSimulator(seed=settings.simulation.seed)
        _simulation_task = asyncio.create_task(
            run_simulation(settings.simulation.interval_seconds),
            name="crowd_simulation",
        )

    logger.info("All components started")

    yield

    logger.info("Shutting down gracefully...")
    _shutdown_flag = True

    for task in (_simulation_task, _maintenance_task):
        if task:
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass
    _simulation_task = None
    _maintenance_task = None

    _crowd_clients.clear()
    logger.info("Shutdown complete")


# =============================================================================
# FastAPI Application
# =============================================================================

app = FastAPI(
    title="TransitPulse",
    description="Crowd-aware public transit routing service",
    version=settings.service.version,
    lifespan=lifespan,
)


@app.exception_handler(InvalidInput)
async def invalid_input_handler(request: Request, exc: InvalidInput) -> JSONResponse:
    global _request_errors
    _request_errors += 1
    logger.info(f"Rejected request to {request.url.path}: {exc}")
    return JSONResponse({"success": False, "message": str(exc)}, status_code=400)


@app.exception_handler(DivisionError)
async def division_error_handler(request: Request, exc: DivisionError) -> JSONResponse:
    global _request_errors
    _request_errors += 1
    logger.warning(f"Unprocessable reading at {request.url.path}: {exc}")
    return JSONResponse({"success": False, "message": str(exc)}, status_code=422)


# =============================================================================
# HTTP Endpoints
# =============================================================================

@app.get("/")
async def root() -> JSONResponse:
    """Service information endpoint."""
    return JSONResponse({
        "service": "TransitPulse",
        "name": settings.service.name,
        "version": settings.service.version,
        "status": "running",
        "simulation_enabled": settings.simulation.enabled,
    })


@app.get("/health")
async def health() -> JSONResponse:
    """
    Liveness probe - is the process alive?

    Always returns 200 if the service is running.
    """
    return JSONResponse({
        "status": "healthy",
        "uptime_seconds": round(time.time() - _startup_time, 1),
    })


@app.get("/metrics")
async def metrics() -> JSONResponse:
    """Detailed metrics for observability."""
    component_metrics = {}
    if _crowd_repo:
        component_metrics.update({f"crowd_store_{k}": v for k, v in _crowd_repo.metrics().items()})
    if _alert_repo:
        component_metrics.update(_alert_repo.metrics())
    if _ingestor:
        component_metrics.update(_ingestor.get_metrics())
    if _optimizer:
        component_metrics.update(_optimizer.get_metrics())
    if _simulator:
        component_metrics.update(_simulator.get_metrics())

    return JSONResponse({
        "uptime_seconds": round(time.time() - _startup_time, 1),
        "request_errors": _request_errors,
        "crowd_subscribers": len(_crowd_clients),
        **component_metrics,
    })


# -----------------------------------------------------------------------------
# Route optimization
# -----------------------------------------------------------------------------

@app.post("/api/optimization/routes")
async def optimize_routes(request: OptimizationRequest) -> JSONResponse:
    """Generate, adjust and rank route options against live alerts."""
    result = get_optimizer().optimize(request, alerts=get_alert_repo().live())
    return JSONResponse({"success": True, "data": result.model_dump(mode="json")})


# -----------------------------------------------------------------------------
# Crowd
# -----------------------------------------------------------------------------

@app.post("/api/crowd", status_code=201)
async def ingest_crowd(request: CrowdIngestRequest) -> JSONResponse:
    """Ingest a raw crowd reading."""
    reading = await record_reading(request)
    return JSONResponse(
        {"success": True, "data": reading.model_dump(mode="json")},
        status_code=201,
    )


@app.get("/api/crowd")
async def list_crowd(
    location_type: Optional[LocationType] = None,
    risk_level: Optional[RiskLevel] = None,
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=20, ge=1, le=100),
) -> JSONResponse:
    """List stored readings, newest first."""
    readings = get_crowd_repo().query(location_type=location_type, risk_level=risk_level)
    start = (page - 1) * limit
    page_items = readings[start:start + limit]

    return JSONResponse({
        "success": True,
        "data": [r.model_dump(mode="json") for r in page_items],
        "pagination": {
            "page": page,
            "limit": limit,
            "total": len(readings),
            "pages": -(-len(readings) // limit),
        },
    })


@app.get("/api/crowd/stats/overview")
async def crowd_overview() -> JSONResponse:
    """Aggregate statistics over the recent window."""
    since = datetime.now(timezone.utc) - timedelta(minutes=settings.store.recent_window_minutes)
    analytics = _analytics or CrowdAnalytics()
    overview = analytics.overview(get_crowd_repo().query(since=since))
    return JSONResponse({"success": True, "data": overview.to_dict()})


@app.get("/api/crowd/location/{location_id}")
async def crowd_for_location(
    location_id: str,
    hours: int = Query(default=24, ge=1, le=168),
) -> JSONResponse:
    """Latest reading and recent history for one location."""
    since = datetime.now(timezone.utc) - timedelta(hours=hours)
    history = get_crowd_repo().for_location(location_id, since=since)
    if not history:
        raise HTTPException(status_code=404, detail="No crowd data found for this location")

    counts = [r.occupancy.current for r in history]
    return JSONResponse({
        "success": True,
        "data": {
            "latest": history[0].model_dump(mode="json"),
            "historical": [r.model_dump(mode="json") for r in history],
            "average": round(sum(counts) / len(counts)),
            "peak": max(counts),
            "low": min(counts),
            "count": len(history),
        },
    })


@app.get("/api/crowd/predictions/{location_id}")
async def crowd_predictions(location_id: str) -> JSONResponse:
    """Forecast a location from same-weekday, same-hour history."""
    repo = get_crowd_repo()
    history = repo.for_location(location_id, since=datetime.now(timezone.utc) - repo.retention)
    if not history:
        raise HTTPException(status_code=404, detail="Insufficient data for predictions")

    forecast = forecast_occupancy(history, datetime.now(timezone.utc))
    return JSONResponse({
        "success": True,
        "data": {
            "location_id": location_id,
            "current": history[0].occupancy.current,
            "predictions": forecast.predictions.model_dump(),
            "confidence": forecast.confidence,
            "samples": forecast.samples,
            "generated_at": datetime.now(timezone.utc).isoformat(),
        },
    })


# -----------------------------------------------------------------------------
# Alerts
# -----------------------------------------------------------------------------

@app.post("/api/alerts", status_code=201)
async def create_alert(request: AlertCreateRequest) -> JSONResponse:
    """Create an active alert."""
    alert = get_alert_repo().add(request.to_alert())
    return JSONResponse(
        {"success": True, "data": alert.model_dump(mode="json")},
        status_code=201,
    )


@app.get("/api/alerts")
async def list_alerts(status: Optional[AlertStatus] = None) -> JSONResponse:
    """List alerts, newest first."""
    alerts = get_alert_repo().list(status=status)
    return JSONResponse({
        "success": True,
        "data": [a.model_dump(mode="json") for a in alerts],
    })


@app.patch("/api/alerts/{alert_id}/status")
async def update_alert_status(alert_id: str, update: AlertStatusUpdate) -> JSONResponse:
    """Move an alert through its lifecycle."""
    alert = get_alert_repo().update_status(alert_id, update.status)
    if alert is None:
        raise HTTPException(status_code=404, detail="Alert not found")
    return JSONResponse({"success": True, "data": alert.model_dump(mode="json")})


# =============================================================================
# WebSocket Endpoints
# =============================================================================

@app.websocket("/ws/crowd")
async def crowd_stream(websocket: WebSocket) -> None:
    """WebSocket endpoint for new crowd readings."""
    await websocket.accept()
    _crowd_clients.add(websocket)
    logger.info("Client connected to /ws/crowd")

    try:
        while not _shutdown_flag:
            # Inbound messages are ignored; receiving detects disconnects
            await websocket.receive_text()
    except WebSocketDisconnect:
        pass
    finally:
        _crowd_clients.discard(websocket)
        logger.info("Client disconnected from /ws/crowd")


# =============================================================================
# Main Entry Point
# =============================================================================

if __name__ == "__main__":
    import uvicorn

    port = int(os.environ.get("PORT", settings.server.port))

    uvicorn.run(
        "transit_pulse.main:app",
        host=settings.server.host,
        port=port,
        reload=False,
    )
