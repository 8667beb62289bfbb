"""
Routes for globe sessions: creation, input events, ticks and the arc.

Each session owns its own pins, arc, airplane and rotation state.  The
client forwards discrete input events (pick, clear, rotation toggle)
as they happen and calls ``tick`` once per displayed frame to advance
the globe rotation and the airplane.
"""

from __future__ import annotations

import csv
import io
import logging

from fastapi import APIRouter, BackgroundTasks, HTTPException, Response

from .models import (
    ArcResponse,
    FrameResponse,
    HoverResponse,
    PickResponse,
    PointerRequest,
    SessionCreateRequest,
    SessionState,
    TickRequest,
    Vec3,
    pin_to_model,
    pose_to_model,
    session_to_state,
)
from ..services.arc_builder import arc_heights, arc_length
from ..services.session import (
    GlobeSession,
    create_globe_session,
    delete_globe_session,
    get_globe_session,
    list_globe_sessions,
)
from ..services.surface_loader import HttpTextureFetcher, load_surface

logger = logging.getLogger(__name__)

router = APIRouter()


def require_session(session_id: str) -> GlobeSession:
    """Look up a session or raise 404."""
    session = get_globe_session(session_id)
    if session is None:
        raise HTTPException(status_code=404, detail="Session not found")
    return session


@router.post("/sessions", response_model=SessionState, status_code=201)
async def create_session(
    body: SessionCreateRequest,
    background_tasks: BackgroundTasks,
) -> SessionState:
    """Create a globe session and start loading its surface texture.

    The session is usable immediately with a procedural surface.  The
    texture candidates are fetched in a background task after the
    response has been sent.
    """
    session = create_globe_session(
        viewport_width=body.viewportWidth,
        viewport_height=body.viewportHeight,
        rotating=body.rotating,
    )
    sources = (
        list(session.settings.texture_sources)
        if body.surfaceSources is None
        else body.surfaceSources
    )
    if sources:
        background_tasks.add_task(
            load_surface, session.appearance, sources, HttpTextureFetcher()
        )
    else:
        session.appearance.status = "fallback"
    return session_to_state(session)


@router.get("/sessions", response_model=list[str])
async def list_sessions() -> list[str]:
    return list_globe_sessions()


@router.get("/sessions/{session_id}", response_model=SessionState)
async def get_session_state(session_id: str) -> SessionState:
    return session_to_state(require_session(session_id))


@router.delete("/sessions/{session_id}", status_code=204)
async def delete_session(session_id: str) -> None:
    if not delete_globe_session(session_id):
        raise HTTPException(status_code=404, detail="Session not found")
    return None


@router.post("/sessions/{session_id}/pick", response_model=PickResponse)
async def pick(session_id: str, body: PointerRequest) -> PickResponse:
    """Place a pin where the pointer hits the globe.

    A miss, or a pick while both pins are placed, leaves the session
    unchanged and reports ``hit = false``.
    """
    session = require_session(session_id)
    pin = session.pick(body.x, body.y)
    return PickResponse(
        hit=pin is not None,
        pin=pin_to_model(pin) if pin is not None else None,
        state=session_to_state(session),
    )


@router.post("/sessions/{session_id}/hover", response_model=HoverResponse)
async def hover(session_id: str, body: PointerRequest) -> HoverResponse:
    session = require_session(session_id)
    pickable = session.hover(body.x, body.y)
    return HoverResponse(pickable=pickable, cursor="pointer" if pickable else "default")


@router.post("/sessions/{session_id}/clear", response_model=SessionState)
async def clear(session_id: str) -> SessionState:
    session = require_session(session_id)
    session.clear()
    return session_to_state(session)


@router.post("/sessions/{session_id}/rotation/toggle", response_model=SessionState)
async def toggle_rotation(session_id: str) -> SessionState:
    session = require_session(session_id)
    session.toggle_rotation()
    return session_to_state(session)


@router.post("/sessions/{session_id}/tick", response_model=FrameResponse)
async def tick(session_id: str, body: TickRequest | None = None) -> FrameResponse:
    """Advance the globe rotation and the airplane by ``steps`` frames."""
    session = require_session(session_id)
    steps = body.steps if body is not None else 1
    pose = session.tick(steps)
    return FrameResponse(
        rotationAngle=session.rotation.angle,
        rotating=session.rotating,
        flightActive=session.flight_active,
        pose=pose_to_model(pose) if session.flight_active else None,
        pins=[pin_to_model(p) for p in session.pins.pins],
    )


@router.get("/sessions/{session_id}/arc", response_model=ArcResponse)
async def get_arc(session_id: str) -> ArcResponse:
    """Return the current flight arc; 404 until both pins are placed."""
    session = require_session(session_id)
    if session.arc is None:
        raise HTTPException(status_code=404, detail="No flight arc; place two pins first")
    settings = session.settings
    heights = arc_heights(session.arc, settings.radius, settings.arc_base_offset)
    metadata = {
        "segments": len(session.arc) - 1,
        "length": arc_length(session.arc),
        "maxHeight": max(heights),
        "radius": settings.radius,
        "baseOffset": settings.arc_base_offset,
    }
    return ArcResponse(
        sessionId=session.id,
        points=[Vec3.from_array(p) for p in session.arc],
        metadata=metadata,
    )


@router.get("/sessions/{session_id}/arc/export")
async def export_arc(session_id: str) -> Response:
    """Export the current flight arc as CSV (``x,y,z`` per waypoint)."""
    session = require_session(session_id)
    if session.arc is None:
        raise HTTPException(status_code=404, detail="No flight arc; place two pins first")
    output = io.StringIO()
    writer = csv.writer(output, lineterminator="\n")
    writer.writerow(["x", "y", "z"])
    for x, y, z in session.arc:
        writer.writerow([f"{x:.6f}", f"{y:.6f}", f"{z:.6f}"])
    return Response(content=output.getvalue(), media_type="text/csv")
