"""
Surfacing Engine Main Application
=================================

FastAPI entry point exposing the significance engine to the operator
console. The engine stays a library; this module only routes payloads
to per-mission sessions and serializes decisions.

Endpoints:
    GET    /                                - Service information
    GET    /health                          - Liveness probe
    GET    /metrics                         - Session and engine metrics
    POST   /missions/{mission_id}/context   - Replace AOIs and assets
    POST   /missions/{mission_id}/events    - Submit one detection event
    POST   /missions/{mission_id}/peek      - Evaluate without committing
    GET    /missions/{mission_id}/alerts    - Surfaced decisions
    DELETE /missions/{mission_id}           - Close the session
"""

import logging
import os
import time
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Dict, Optional

from fastapi import Body, FastAPI
from fastapi.responses import JSONResponse

from surfacing_engine.config import settings
from surfacing_engine.engine import SurfacingThresholds
from surfacing_engine.errors import SessionNotFound
from surfacing_engine.models.decision import DecisionResult
from surfacing_engine.models.geometry import SurfacingContext
from surfacing_engine.presentation import describe
from surfacing_engine.session import SessionRegistry


logger = logging.getLogger(__name__)


# =============================================================================
# Global State
# =============================================================================

_registry: Optional[SessionRegistry] = None
_startup_time: float = time.time()


def get_registry() -> SessionRegistry:
    """Return the session registry, creating it on first use."""
    global _registry
    if _registry is None:
        _registry = SessionRegistry(
            thresholds=SurfacingThresholds.from_settings(settings),
            decision_log_size=settings.session.decision_log_size,
        )
    return _registry


def reset_state() -> None:
    """Close all sessions."""
    get_registry().clear()


# =============================================================================
# Serialization
# =============================================================================

def _serialize(result: DecisionResult, payload: Dict[str, Any]) -> Dict[str, Any]:
    """Decision payload for the console, with label presentation."""
    body = result.to_dict()
    label = payload.get("label")
    if isinstance(label, str):
        body["presentation"] = describe(label)
    return body


def _parse_context(payload: Dict[str, Any]) -> SurfacingContext:
    """Strictly parse a context payload (console or canonical shape)."""
    if "aois" in payload or "assets" in payload:
        return SurfacingContext.from_geojson(payload.get("aois"), payload.get("assets"))
    return SurfacingContext.model_validate(payload)


def _not_found(e: SessionNotFound) -> JSONResponse:
    return JSONResponse({"error": str(e)}, status_code=404)


# =============================================================================
# Lifespan Management
# =============================================================================

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan manager."""
    global _startup_time

    _startup_time = time.time()
    logger.info(f"Starting {settings.agent.name} {settings.agent.version}")
    get_registry()

    yield

    logger.info(f"Shutting down, closing {len(get_registry())} sessions")
    reset_state()


# =============================================================================
# FastAPI Application
# =============================================================================

app = FastAPI(
    title="DroneEventSurfacing",
    description="Event significance engine for drone mission detections",
    version=settings.agent.version,
    lifespan=lifespan,
)


# =============================================================================
# HTTP Endpoints
# =============================================================================

# Handlers that take a session lock are sync so they run in the threadpool

@app.get("/")
async def root() -> JSONResponse:
    """Service information endpoint."""
    return JSONResponse({
        "service": "DroneEventSurfacing",
        "version": settings.agent.version,
        "name": settings.agent.name,
        "status": "running",
    })


@app.get("/health")
async def health() -> JSONResponse:
    """Liveness probe - always 200 while the process is running."""
    return JSONResponse({
        "status": "healthy",
        "uptime_seconds": round(time.time() - _startup_time, 1),
    })


@app.get("/metrics")
def metrics() -> JSONResponse:
    """Detailed metrics for observability."""
    return JSONResponse({
        "uptime_seconds": round(time.time() - _startup_time, 1),
        **get_registry().metrics(),
    })


@app.post("/missions/{mission_id}/context")
def update_context(mission_id: str, payload: Dict[str, Any] = Body(...)) -> JSONResponse:
    """Replace the mission's areas of interest and critical assets."""
    try:
        context = _parse_context(payload)
    except (ValueError, TypeError, AttributeError) as e:
        logger.warning(f"Rejected context for mission {mission_id}: {e}")
        return JSONResponse({"error": "Invalid context"}, status_code=422)

    session = get_registry().open(mission_id)
    session.update_context(context)
    return JSONResponse({
        "mission_id": mission_id,
        "areas_of_interest": len(context.areas_of_interest),
        "critical_assets": len(context.critical_assets),
    })


@app.post("/missions/{mission_id}/events")
def submit_event(mission_id: str, payload: Dict[str, Any] = Body(...)) -> JSONResponse:
    """
    Submit one detection event.

    Malformed events are answered with an ``ignore`` decision and reason
    ``INVALID_INPUT`` rather than a validation error.
    """
    session = get_registry().open(mission_id)
    result = session.submit(payload)
    return JSONResponse(_serialize(result, payload))


@app.post("/missions/{mission_id}/peek")
def peek_event(mission_id: str, payload: Dict[str, Any] = Body(...)) -> JSONResponse:
    """Evaluate an event without recording it."""
    try:
        session = get_registry().get(mission_id)
    except SessionNotFound as e:
        return _not_found(e)
    result = session.peek(payload)
    return JSONResponse(_serialize(result, payload))


@app.get("/missions/{mission_id}/alerts")
def alerts(mission_id: str) -> JSONResponse:
    """Surfaced and auto-dispatch decisions, oldest first."""
    try:
        session = get_registry().get(mission_id)
    except SessionNotFound as e:
        return _not_found(e)
    return JSONResponse({
        "mission_id": mission_id,
        "alerts": [r.to_dict() for r in session.surfaced()],
    })


@app.delete("/missions/{mission_id}")
def close_mission(mission_id: str) -> JSONResponse:
    """Close the mission's session and discard its state."""
    try:
        get_registry().close(mission_id)
    except SessionNotFound as e:
        return _not_found(e)
    return JSONResponse({"mission_id": mission_id, "status": "closed"})


# =============================================================================
# Main Entry Point
# =============================================================================

if __name__ == "__main__":
    import uvicorn

    # Cloud Run uses PORT env var
    port = int(os.environ.get("PORT", settings.server.port))

    uvicorn.run(
        "surfacing_engine.main:app",
        host=settings.server.host,
        port=port,
        reload=False,
    )
