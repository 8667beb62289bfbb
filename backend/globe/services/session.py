"""
Per-user globe session: the single owner of all mutable globe state.

A :class:`GlobeSession` ties together the camera, the pin registry, the
current flight arc, the flight animator, the rotation controller and
the surface appearance.  Every input event (pick, clear, toggle,
camera gestures) and every per-frame tick is a method call on the
session, so there is no shared module-level state beyond the session
registry itself.

Sessions are kept in an in-memory registry keyed by a random hex id.
All route handlers are ``async`` and run on a single event loop, so a
session is never mutated by two requests at the same time.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import Dict, List, Optional

import numpy as np

from .. import config
from ..config import GlobeConfig
from .arc_builder import build_great_circle_arc
from .camera import OrbitControls, PerspectiveCamera
from .flight import FlightAnimator, FlightPose
from .pins import Pin, PinRegistry
from .rotation import RotationController
from .sphere_picker import pick_sphere
from .surface_loader import SurfaceAppearance

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SessionSnapshot:
    """Observable state handed to the UI layer."""

    pin_count: int
    flight_active: bool
    rotating: bool
    rotation_angle: float


class GlobeSession:
    """All state for one interactive globe."""

    def __init__(
        self,
        session_id: Optional[str] = None,
        viewport_width: int = 1280,
        viewport_height: int = 720,
        rotating: bool = True,
        settings: GlobeConfig = config.DEFAULT_CONFIG,
        appearance: Optional[SurfaceAppearance] = None,
    ) -> None:
        self.id = session_id or uuid.uuid4().hex
        self.settings = settings
        self.created_at = datetime.utcnow()
        self.viewport_width = viewport_width
        self.viewport_height = viewport_height

        self.camera = PerspectiveCamera(
            fov=settings.camera_fov,
            near=settings.camera_near,
            far=settings.camera_far,
            position=settings.camera_position,
        )
        self.camera.set_aspect(viewport_width, viewport_height)
        self.controls = OrbitControls(
            self.camera,
            min_distance=settings.orbit_min_distance,
            max_distance=settings.orbit_max_distance,
            rotate_speed=settings.orbit_rotate_speed,
        )

        self.arc: Optional[np.ndarray] = None
        self.animator = FlightAnimator(speed=settings.flight_speed)
        self.rotation = RotationController(rotating=rotating, step=settings.rotation_step)
        self.pins = PinRegistry(
            radius=settings.radius,
            pin_height=settings.pin_height,
            max_pins=settings.max_pins,
            tween_ticks=settings.pin_tween_ticks,
            on_complete=self._on_pins_complete,
            on_clear=self._on_pins_cleared,
        )
        self.appearance = appearance or SurfaceAppearance()

    # ------------------------------------------------------------------
    # Pin and arc lifecycle

    def _on_pins_complete(self, pins: List[Pin]) -> None:
        origin, destination = pins[0], pins[1]
        self.arc = build_great_circle_arc(
            origin.surface_direction,
            destination.surface_direction,
            segments=self.settings.arc_segments,
            radius=self.settings.radius,
            base_offset=self.settings.arc_base_offset,
            height=self.settings.arc_height,
        )
        logger.info("Session %s: built flight arc with %d waypoints", self.id, len(self.arc))
        self.animator.start(self.arc)

    def _on_pins_cleared(self) -> None:
        self.arc = None
        self.animator.reset()

    # ------------------------------------------------------------------
    # Input events

    def _pick_local(self, x: float, y: float) -> Optional[np.ndarray]:
        return pick_sphere(
            x,
            y,
            self.viewport_width,
            self.viewport_height,
            self.camera,
            self.settings.radius,
            self.rotation.matrix(),
        )

    def pick(self, x: float, y: float) -> Optional[Pin]:
        """Place a pin where the pointer at ``(x, y)`` hits the globe.

        Returns:
            The new pin, or ``None`` if the pointer missed the globe or
            both pins are already placed.
        """
        if self.pins.is_full:
            return None
        local_point = self._pick_local(x, y)
        if local_point is None:
            return None
        return self.pins.add(local_point)

    def hover(self, x: float, y: float) -> bool:
        """Whether a pick at ``(x, y)`` would place a pin."""
        if self.pins.is_full:
            return False
        return self._pick_local(x, y) is not None

    def clear(self) -> None:
        """Remove both pins, the arc and the airplane.  Idempotent."""
        if self.pins.clear():
            logger.info("Session %s: cleared pins", self.id)

    def toggle_rotation(self) -> bool:
        return self.rotation.toggle()

    def tick(self, steps: int = 1) -> Optional[FlightPose]:
        """Advance the simulation by ``steps`` frames.

        Returns:
            The airplane pose after the last step, or ``None`` when no
            flight is active.
        """
        pose = None
        for _ in range(max(steps, 0)):
            self.rotation.tick()
            self.pins.advance()
            pose = self.animator.tick()
        return pose if pose is not None else self.animator.pose

    # ------------------------------------------------------------------
    # Viewport and camera

    def resize(self, width: int, height: int) -> None:
        self.viewport_width = width
        self.viewport_height = height
        self.camera.set_aspect(width, height)

    def orbit(self, dx: float, dy: float) -> None:
        self.controls.rotate(dx, dy)

    def zoom(self, delta_y: float) -> None:
        self.controls.wheel(delta_y)

    def pinch(self, distance: float) -> None:
        self.controls.pinch(distance)

    def end_pinch(self) -> None:
        self.controls.end_pinch()

    # ------------------------------------------------------------------
    # Observable state

    @property
    def pin_count(self) -> int:
        return self.pins.count

    @property
    def flight_active(self) -> bool:
        return self.pins.count == self.settings.max_pins and self.animator.active

    @property
    def rotating(self) -> bool:
        return self.rotation.rotating

    def snapshot(self) -> SessionSnapshot:
        return SessionSnapshot(
            pin_count=self.pin_count,
            flight_active=self.flight_active,
            rotating=self.rotating,
            rotation_angle=self.rotation.angle,
        )


# In-memory registry of sessions keyed by session id.
session_registry: Dict[str, GlobeSession] = {}


def create_globe_session(**kwargs) -> GlobeSession:
    session = GlobeSession(**kwargs)
    session_registry[session.id] = session
    logger.info("Created globe session %s", session.id)
    return session


def get_globe_session(session_id: str) -> Optional[GlobeSession]:
    return session_registry.get(session_id)


def delete_globe_session(session_id: str) -> bool:
    removed = session_registry.pop(session_id, None)
    if removed is not None:
        removed.animator.stop()
        logger.info("Deleted globe session %s", session_id)
    return removed is not None


def list_globe_sessions() -> List[str]:
    return list(session_registry)
