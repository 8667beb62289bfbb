"""
Routes for viewport and camera gestures.

The browser forwards drag, wheel and pinch gestures here so the camera
used for picking always matches what the user sees.
"""

from __future__ import annotations

from fastapi import APIRouter

from .models import (
    OrbitRequest,
    PinchRequest,
    SessionState,
    ViewportRequest,
    ZoomRequest,
    session_to_state,
)
from .routes_sessions import require_session

router = APIRouter()


@router.post("/sessions/{session_id}/viewport", response_model=SessionState)
async def resize_viewport(session_id: str, body: ViewportRequest) -> SessionState:
    session = require_session(session_id)
    session.resize(body.width, body.height)
    return session_to_state(session)


@router.post("/sessions/{session_id}/camera/orbit", response_model=SessionState)
async def orbit_camera(session_id: str, body: OrbitRequest) -> SessionState:
    """Orbit the camera by a drag delta (pixels)."""
    session = require_session(session_id)
    session.orbit(body.dx, body.dy)
    return session_to_state(session)


@router.post("/sessions/{session_id}/camera/zoom", response_model=SessionState)
async def zoom_camera(session_id: str, body: ZoomRequest) -> SessionState:
    session = require_session(session_id)
    session.zoom(body.deltaY)
    return session_to_state(session)


@router.post("/sessions/{session_id}/camera/pinch", response_model=SessionState)
async def pinch_camera(session_id: str, body: PinchRequest) -> SessionState:
    """Feed a pinch sample, or end the gesture with ``end = true``."""
    session = require_session(session_id)
    if body.end:
        session.end_pinch()
    elif body.distance is not None:
        session.pinch(body.distance)
    return session_to_state(session)
