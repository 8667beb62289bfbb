"""
Routes exposing the globe's surface appearance.

The texture shown on the globe is either the procedural fallback
(served as a binary PPM) or the first remote texture that loaded
successfully (served with its original content type).
"""

from __future__ import annotations

from fastapi import APIRouter, Response

from .models import SurfaceAttemptModel, SurfaceResponse
from .routes_sessions import require_session

router = APIRouter()


@router.get("/sessions/{session_id}/surface", response_model=SurfaceResponse)
async def get_surface(session_id: str) -> SurfaceResponse:
    """Report which texture is shown and how each candidate fared."""
    session = require_session(session_id)
    appearance = session.appearance
    return SurfaceResponse(
        sessionId=session.id,
        source=appearance.source,
        status=appearance.status,
        attempts=[
            SurfaceAttemptModel(source=a.source, ok=a.ok, error=a.error)
            for a in appearance.attempts
        ],
    )


@router.get("/sessions/{session_id}/surface/texture")
async def get_surface_texture(session_id: str) -> Response:
    session = require_session(session_id)
    data, media_type = session.appearance.content()
    return Response(content=data, media_type=media_type)
