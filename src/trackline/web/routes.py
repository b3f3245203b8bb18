"""API endpoints for web UI."""

import asyncio
import json
import queue
from typing import List, Optional

from fastapi import APIRouter, HTTPException, Query
from fastapi.responses import StreamingResponse
from pydantic import BaseModel, Field

from trackline.core.exceptions import (
    CapabilityUnavailable,
    NotAuthorized,
    WindowParseError,
)
from trackline.core.logger import log_error
from trackline.models.location import PositionSample
from trackline.models.window import TimeWindow
from trackline.services.map_layers import MapLayers
from trackline.services.map_projector import MapProjector
from trackline.services.map_view import MapView
from trackline.services.window_filter import local_today
from trackline.web.state import app_state, log_buffer

router = APIRouter()

KEEPALIVE_SECONDS = 30


class SessionInput(BaseModel):
    """Operator sign-in."""
    token: str


class PositionInput(BaseModel):
    """Position fix reported by the operator's device."""
    latitude: float = Field(ge=-90, le=90)
    longitude: float = Field(ge=-180, le=180)
    accuracy: Optional[float] = Field(default=None, ge=0)
    altitude: Optional[float] = None


class PositionErrorInput(BaseModel):
    """Position error reported by the operator's device."""
    message: str


def _parse_window(date: Optional[str], start: Optional[str], end: Optional[str]) -> TimeWindow:
    try:
        return TimeWindow.parse(date, start, end, today=local_today(app_state.window_filter.tz))
    except WindowParseError as e:
        raise HTTPException(status_code=400, detail=str(e))


def _require_operator() -> None:
    if not app_state.signed_in:
        raise HTTPException(status_code=403, detail="Only the operator can do this")


def _project(window: TimeWindow, view: Optional[MapView] = None) -> dict:
    """Projects the current history for a window into map layers."""
    if view is None:
        layers = MapLayers()
        view = _make_view(layers, window)
        view.refresh()
    else:
        layers = view.projector.surface
    return {
        "window": window.to_dict(),
        "count": len(view.visible),
        "map": layers.to_dict(),
    }


def _make_view(layers: MapLayers, window: TimeWindow) -> MapView:
    config = app_state.config
    projector = MapProjector(
        layers,
        world_zoom=config.world_zoom if config else 2,
        tz=app_state.window_filter.tz,
    )
    return MapView(app_state.stream, projector, app_state.window_filter, window)


def _sse(payload: dict) -> str:
    return f"data: {json.dumps(payload)}\n\n"


def _stop_tracking() -> None:
    app_state.controller.stop()
    # A start still waiting for its first fix must not outlive the stop
    if app_state.provider is not None:
        app_state.provider.report_error("Tracking stopped")


# --- Session endpoints ---

@router.post("/api/session")
async def sign_in(data: SessionInput):
    """Sign the operator in."""
    if not app_state.identity.sign_in(data.token):
        raise HTTPException(status_code=401, detail="Invalid operator token")
    return {"success": True, "operator": app_state.identity.current_operator()}


@router.delete("/api/session")
async def sign_out():
    """Sign the operator out. Tracking stops, history stays."""
    app_state.identity.sign_out()
    _stop_tracking()
    return {"success": True}


# --- Tracking endpoints ---

@router.get("/api/tracking")
async def tracking_status():
    """Get current tracking status."""
    return app_state.tracking_dict()


async def _run_start():
    """Background worker for starting the tracking."""
    try:
        await app_state.controller.start()
    except Exception as e:
        log_error(f"Tracking start failed: {e}")


@router.post("/api/tracking/start", status_code=202)
async def start_tracking():
    """Start live tracking (async, the first fix is awaited in background)."""
    try:
        app_state.controller.check_can_start()
    except NotAuthorized as e:
        raise HTTPException(status_code=401, detail=str(e))
    except CapabilityUnavailable as e:
        raise HTTPException(status_code=503, detail=str(e))

    task = asyncio.create_task(_run_start())
    app_state.background_tasks.add(task)
    task.add_done_callback(app_state.background_tasks.discard)
    return {"success": True, **app_state.tracking_dict()}


@router.post("/api/tracking/stop")
async def stop_tracking():
    """Stop live tracking."""
    _stop_tracking()
    return {"success": True, **app_state.tracking_dict()}


@router.delete("/api/tracking/error")
async def dismiss_tracking_error():
    """Dismiss the surfaced tracking error."""
    app_state.controller.dismiss_error()
    return {"success": True}


# --- Position endpoints ---

@router.post("/api/position")
async def report_position(data: PositionInput):
    """Answer pending position requests with a fix from the operator's device."""
    _require_operator()
    if app_state.provider is None:
        raise HTTPException(status_code=503, detail=str(CapabilityUnavailable()))

    sample = PositionSample(
        latitude=data.latitude,
        longitude=data.longitude,
        accuracy=data.accuracy,
        altitude=data.altitude,
    )
    answered = app_state.provider.report(sample)
    return {"success": True, "answered": answered}


@router.post("/api/position/error")
async def report_position_error(data: PositionErrorInput):
    """Fail pending position requests with the device's error message."""
    _require_operator()
    if app_state.provider is None:
        raise HTTPException(status_code=503, detail=str(CapabilityUnavailable()))

    failed = app_state.provider.report_error(data.message)
    return {"success": True, "failed": failed}


# --- History endpoints ---

@router.get("/api/history")
async def get_history():
    """Get the full ordered location history."""
    snapshot = app_state.stream.snapshot
    return {
        "count": len(snapshot),
        "locations": snapshot.to_list(),
        "error": app_state.stream.error,
    }


@router.get("/api/history/stream")
async def stream_history():
    """SSE stream of history snapshots."""
    async def event_generator():
        async for snapshot in app_state.stream.updates(keepalive=KEEPALIVE_SECONDS):
            if snapshot is None:
                yield ": keep-alive\n\n"
                continue
            yield _sse({"count": len(snapshot), "locations": snapshot.to_list()})

    return StreamingResponse(
        event_generator(),
        media_type="text/event-stream",
        headers={
            "Cache-Control": "no-cache",
            "Connection": "keep-alive",
        }
    )


# --- Map endpoints ---

@router.get("/api/map")
async def get_map(
    date: Optional[str] = Query(None, description="Day, YYYY-MM-DD (default today)"),
    start: Optional[str] = Query(None, description="Start time, HH:MM (default 19:00)"),
    end: Optional[str] = Query(None, description="End time, HH:MM (default 21:00)"),
):
    """Map layers of the history filtered by day and time of day."""
    window = _parse_window(date, start, end)
    return _project(window)


@router.get("/api/map/stream")
async def stream_map(
    date: Optional[str] = Query(None),
    start: Optional[str] = Query(None),
    end: Optional[str] = Query(None),
):
    """SSE stream of map layers, redrawn on every history change."""
    window = _parse_window(date, start, end)

    async def event_generator():
        view = _make_view(MapLayers(), window)
        async for snapshot in app_state.stream.updates(keepalive=KEEPALIVE_SECONDS):
            if snapshot is None:
                yield ": keep-alive\n\n"
                continue
            view.refresh(snapshot)
            yield _sse(_project(window, view))

    return StreamingResponse(
        event_generator(),
        media_type="text/event-stream",
        headers={
            "Cache-Control": "no-cache",
            "Connection": "keep-alive",
        }
    )


# --- Logs endpoints ---

@router.get("/api/logs")
async def get_logs(
    level: Optional[List[str]] = Query(None, description="Only these levels (call, result, info, warning, error)"),
):
    """Get buffered log entries."""
    return {"logs": log_buffer.get_all(level), "dropped": log_buffer.dropped}


@router.delete("/api/logs")
async def clear_logs():
    """Clear log buffer."""
    log_buffer.clear()
    return {"success": True}


@router.get("/api/logs/stream")
async def stream_logs():
    """SSE stream of log entries."""
    async def event_generator():
        q = log_buffer.subscribe()
        try:
            # First send existing logs
            for entry in log_buffer.get_all():
                yield _sse(entry)

            # Then stream new ones
            while True:
                try:
                    # Wait for new log entry (with timeout for keep-alive)
                    entry = await asyncio.get_running_loop().run_in_executor(
                        None, lambda: q.get(timeout=KEEPALIVE_SECONDS)
                    )
                    yield _sse(entry)
                except queue.Empty:
                    yield ": keep-alive\n\n"
        finally:
            log_buffer.unsubscribe(q)

    return StreamingResponse(
        event_generator(),
        media_type="text/event-stream",
        headers={
            "Cache-Control": "no-cache",
            "Connection": "keep-alive",
        }
    )
