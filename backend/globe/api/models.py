"""
Pydantic data models for the globe flight API.

These models define the shapes of requests and responses used by the
backend.  Field names are camelCase to match the browser client.
Conversion helpers from the service layer objects live at the bottom of
the module so route handlers stay thin.
"""

from __future__ import annotations

from typing import Any, Dict, List, Literal, Optional

import numpy as np
from pydantic import BaseModel, Field


class Vec3(BaseModel):
    """Single 3D point or direction."""

    x: float
    y: float
    z: float

    @classmethod
    def from_array(cls, value) -> "Vec3":
        x, y, z = (float(c) for c in np.asarray(value, dtype=float).reshape(3))
        return cls(x=x, y=y, z=z)


class SessionCreateRequest(BaseModel):
    """Request body for creating a globe session."""

    viewportWidth: int = Field(default=1280, gt=0, description="Viewport width in device pixels")
    viewportHeight: int = Field(default=720, gt=0, description="Viewport height in device pixels")
    rotating: bool = Field(default=True, description="Whether the globe starts rotating")
    # Ordered texture candidates for the surface.  None uses the built-in
    # Earth texture list; an empty list keeps the procedural surface.
    surfaceSources: Optional[List[str]] = Field(
        default=None,
        description="Ordered list of texture URLs to try for the globe surface",
    )


class PointerRequest(BaseModel):
    """Pointer position in device pixels, origin at the top-left corner."""

    x: float
    y: float


class TickRequest(BaseModel):
    steps: int = Field(default=1, ge=1, le=10_000, description="Number of frames to advance")


class ViewportRequest(BaseModel):
    width: int = Field(..., gt=0)
    height: int = Field(..., gt=0)


class OrbitRequest(BaseModel):
    """Drag delta in device pixels."""

    dx: float = 0.0
    dy: float = 0.0


class ZoomRequest(BaseModel):
    deltaY: float = Field(..., description="Wheel delta; positive zooms out")


class PinchRequest(BaseModel):
    distance: Optional[float] = Field(
        default=None, gt=0, description="Current distance between the two touch points"
    )
    end: bool = Field(default=False, description="True when the pinch gesture ended")


class PinModel(BaseModel):
    """A placed pin, in the globe's local frame."""

    role: Literal["origin", "destination"]
    surfaceDirection: Vec3
    surfacePoint: Vec3
    markerPoint: Vec3
    scale: float = Field(..., description="Pop-in animation scale (settles at 1)")


class CameraModel(BaseModel):
    position: Vec3
    target: Vec3
    fov: float
    aspect: float
    near: float
    far: float


class FlightPoseModel(BaseModel):
    """Airplane pose in the globe's local frame."""

    position: Vec3
    forward: Vec3
    up: Vec3
    right: Vec3
    quaternion: List[float] = Field(..., description="Orientation as (x, y, z, w)")
    segmentIndex: int
    progress: float


class SessionState(BaseModel):
    """Observable state of a globe session."""

    sessionId: str
    pinCount: int = Field(..., ge=0, le=2)
    flightActive: bool
    rotating: bool
    rotationAngle: float
    pins: List[PinModel]
    camera: CameraModel
    viewport: Dict[str, int]
    surfaceSource: str
    surfaceStatus: str


class PickResponse(BaseModel):
    hit: bool = Field(..., description="Whether a new pin was placed")
    pin: Optional[PinModel] = None
    state: SessionState


class HoverResponse(BaseModel):
    pickable: bool
    cursor: Literal["pointer", "default"]


class FrameResponse(BaseModel):
    """State after one or more ticks, for rendering."""

    rotationAngle: float
    rotating: bool
    flightActive: bool
    pose: Optional[FlightPoseModel] = None
    pins: List[PinModel]


class ArcResponse(BaseModel):
    sessionId: str
    points: List[Vec3] = Field(..., description="Ordered waypoints in the globe's local frame")
    metadata: Dict[str, Any]


class SurfaceAttemptModel(BaseModel):
    source: str
    ok: bool
    error: Optional[str] = None


class SurfaceResponse(BaseModel):
    sessionId: str
    source: str
    status: str
    attempts: List[SurfaceAttemptModel]


# ---------------------------------------------------------------------------
# Conversion helpers


def pin_to_model(pin) -> PinModel:
    return PinModel(
        role=pin.role,
        surfaceDirection=Vec3.from_array(pin.surface_direction),
        surfacePoint=Vec3.from_array(pin.surface_point),
        markerPoint=Vec3.from_array(pin.marker_point),
        scale=pin.scale,
    )


def pose_to_model(pose) -> Optional[FlightPoseModel]:
    if pose is None:
        return None
    return FlightPoseModel(
        position=Vec3.from_array(pose.position),
        forward=Vec3.from_array(pose.forward),
        up=Vec3.from_array(pose.up),
        right=Vec3.from_array(pose.right),
        quaternion=list(pose.quaternion),
        segmentIndex=pose.segment_index,
        progress=pose.progress,
    )


def session_to_state(session) -> SessionState:
    snapshot = session.snapshot()
    camera = session.camera
    return SessionState(
        sessionId=session.id,
        pinCount=snapshot.pin_count,
        flightActive=snapshot.flight_active,
        rotating=snapshot.rotating,
        rotationAngle=snapshot.rotation_angle,
        pins=[pin_to_model(p) for p in session.pins.pins],
        camera=CameraModel(
            position=Vec3.from_array(camera.position),
            target=Vec3.from_array(camera.target),
            fov=camera.fov,
            aspect=camera.aspect,
            near=camera.near,
            far=camera.far,
        ),
        viewport={"width": session.viewport_width, "height": session.viewport_height},
        surfaceSource=session.appearance.source,
        surfaceStatus=session.appearance.status,
    )
