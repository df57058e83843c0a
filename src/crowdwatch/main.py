"""
CrowdWatch Main Application
===========================

FastAPI entry point exposing the monitoring core to a dashboard.

A single monitoring session runs for the process, fed by a manually set
location. The dashboard polls or subscribes for snapshots and renders
them; all presentation decisions stay on the client.

Endpoints:
    GET    /             - Service information
    GET    /health       - Liveness probe
    GET    /snapshot     - Latest monitoring snapshot
    GET    /metrics      - Session metrics
    POST   /location     - Set manual location {lat, lng}
    DELETE /location     - Clear manual location
    POST   /radius       - Change radius {radius}
    POST   /alert        - Raise a user alert (cooldown gated)
    WS     /ws/snapshot  - Real-time snapshot stream
"""

import asyncio
import logging
import os
import time
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from fastapi import FastAPI, HTTPException, WebSocket, WebSocketDisconnect
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from crowdwatch.config import settings
from crowdwatch.engine import CrowdMonitor, MonitoringSession
from crowdwatch.errors import InvalidConfiguration
from crowdwatch.location import ManualCoordinateProvider, format_coordinate_label
from crowdwatch.models.geo import Coordinate
from crowdwatch.models.snapshot import MonitoringSnapshot


logger = logging.getLogger(__name__)


# =============================================================================
# Global State
# =============================================================================

_monitor: Optional[CrowdMonitor] = None
_session: Optional[MonitoringSession] = None
_location = ManualCoordinateProvider()
_startup_time: float = 0.0
_subscribers: "set[asyncio.Queue[MonitoringSnapshot]]" = set()


def get_session() -> Optional[MonitoringSession]:
    return _session


def _require_session() -> MonitoringSession:
    if _session is None or _session.stopped:
        raise HTTPException(status_code=503, detail="Monitoring not running")
    return _session


async def _fan_out(snapshot: MonitoringSnapshot) -> None:
    """Push a snapshot to every websocket subscriber queue."""
    for queue in list(_subscribers):
        if queue.full():
            # Drop oldest for slow clients
            queue.get_nowait()
        queue.put_nowait(snapshot)


# =============================================================================
# Request Models
# =============================================================================

class LocationRequest(BaseModel):
    lat: float = Field(..., ge=-90.0, le=90.0)
    lng: float = Field(..., ge=-180.0, le=180.0)


class RadiusRequest(BaseModel):
    radius: int


# =============================================================================
# Lifespan Management
# =============================================================================

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan manager with graceful shutdown."""
    global _monitor, _session, _startup_time
    
    _startup_time = time.time()
    logger.info(f"Starting {settings.service.name} {settings.service.version}")
    
    _monitor = CrowdMonitor.from_settings(settings)
    _session = _monitor.start(settings.monitor.default_radius, _location)
    _session.subscribe_snapshot(_fan_out)
    
    yield
    
    logger.info("Shutting down gracefully...")
    await _monitor.stop_all()
    _session = None
    logger.info("Shutdown complete")


# =============================================================================
# FastAPI Application
# =============================================================================

app = FastAPI(
    title="CrowdWatch",
    description="Real-time crowd-density monitoring core",
    version=settings.service.version,
    lifespan=lifespan,
)


# =============================================================================
# HTTP Endpoints
# =============================================================================

@app.get("/")
async def root() -> JSONResponse:
    """Service information endpoint."""
    return JSONResponse({
        "service": "CrowdWatch",
        "version": settings.service.version,
        "name": settings.service.name,
        "status": "running",
        "sampling_backend": settings.sampling.backend,
    })


@app.get("/health")
async def health() -> JSONResponse:
    """Liveness probe - always 200 while the process is alive."""
    return JSONResponse({
        "status": "healthy",
        "uptime_seconds": round(time.time() - _startup_time, 1),
    })


@app.get("/snapshot")
async def snapshot() -> JSONResponse:
    """Latest monitoring snapshot."""
    session = _require_session()
    current = session.snapshot
    
    if current is None:
        return JSONResponse(
            {"error": "No snapshot available yet"},
            status_code=503,
        )
    
    return JSONResponse(current.model_dump(mode="json"))


@app.get("/metrics")
async def metrics() -> JSONResponse:
    """Detailed metrics for observability."""
    session = _require_session()
    return JSONResponse({
        "uptime_seconds": round(time.time() - _startup_time, 1),
        "websocket_clients": len(_subscribers),
        **session.get_metrics(),
    })


@app.post("/location")
async def set_location(request: LocationRequest) -> JSONResponse:
    """Set the manual location."""
    coordinate = Coordinate(lat=request.lat, lng=request.lng)
    _location.set(coordinate)
    return JSONResponse({
        "location": coordinate.model_dump(),
        "label": format_coordinate_label(coordinate),
    })


@app.delete("/location")
async def clear_location() -> JSONResponse:
    """Clear the manual location; ticks are skipped until set again."""
    _location.clear()
    return JSONResponse({"location": None})


@app.post("/radius")
async def set_radius(request: RadiusRequest) -> JSONResponse:
    """Change the monitoring radius."""
    session = _require_session()
    try:
        session.set_radius(request.radius)
    except InvalidConfiguration as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    return JSONResponse({"radius": int(session.radius)})


@app.post("/alert")
async def raise_alert() -> JSONResponse:
    """Raise a user alert, gated by the cooldown."""
    session = _require_session()
    result = session.raise_alert()
    return JSONResponse(result.model_dump())


# =============================================================================
# WebSocket Endpoints
# =============================================================================

@app.websocket("/ws/snapshot")
async def snapshot_stream(websocket: WebSocket) -> None:
    """WebSocket endpoint for real-time snapshots."""
    await websocket.accept()
    logger.info("Client connected to /ws/snapshot")
    
    queue: "asyncio.Queue[MonitoringSnapshot]" = asyncio.Queue(maxsize=10)
    _subscribers.add(queue)
    
    try:
        if _session is not None and _session.snapshot is not None:
            await websocket.send_json(_session.snapshot.model_dump(mode="json"))
        while True:
            current = await queue.get()
            await websocket.send_json(current.model_dump(mode="json"))
    except WebSocketDisconnect:
        pass
    except Exception as e:
        logger.warning(f"WebSocket error: {e}")
    finally:
        _subscribers.discard(queue)
        logger.info("Client disconnected from /ws/snapshot")


# =============================================================================
# Main Entry Point
# =============================================================================

if __name__ == "__main__":
    import uvicorn
    
    port = int(os.environ.get("PORT", settings.server.port))
    
    uvicorn.run(
        "crowdwatch.main:app",
        host=settings.server.host,
        port=port,
        reload=False,
    )
