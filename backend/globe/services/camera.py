"""
Perspective camera and spherical orbit controls.

The camera supplies the view and projection transforms that the
sphere picker needs to turn a pointer position into a world space ray.
:class:`OrbitControls` keeps the camera on a sphere around the origin
(the globe centre) and maps drag, wheel and pinch gestures onto the
spherical coordinates ``(radius, theta, phi)``:

* ``theta`` is the horizontal angle measured from +Z towards +X.
* ``phi`` is the polar angle measured from +Y; it is clamped away from
  the poles so the camera never flips over.
* ``radius`` is clamped to ``[min_distance, max_distance]``.
"""

from __future__ import annotations

import logging
import math
from typing import Optional, Tuple

import numpy as np

from .. import config
from .vector_math import as_vec3, clamp, look_at, perspective

logger = logging.getLogger(__name__)


class PerspectiveCamera:
    """A pinhole camera looking at a target point."""

    def __init__(
        self,
        fov: float = config.CAMERA_FOV,
        aspect: float = 1.0,
        near: float = config.CAMERA_NEAR,
        far: float = config.CAMERA_FAR,
        position: Tuple[float, float, float] = config.CAMERA_POSITION,
        target: Tuple[float, float, float] = (0.0, 0.0, 0.0),
    ) -> None:
        self.fov = fov
        self.aspect = aspect
        self.near = near
        self.far = far
        self.position = as_vec3(position)
        self.target = as_vec3(target)

    def set_aspect(self, width: float, height: float) -> None:
        """Match the aspect ratio to a viewport; ignores empty viewports."""
        if width > 0 and height > 0:
            self.aspect = width / height

    def look_at(self, target) -> None:
        self.target = as_vec3(target)

    def view_matrix(self) -> np.ndarray:
        return look_at(self.position, self.target)

    def projection_matrix(self) -> np.ndarray:
        return perspective(self.fov, self.aspect, self.near, self.far)


class OrbitControls:
    """Drag/zoom controls that orbit the camera around the origin."""

    def __init__(
        self,
        camera: PerspectiveCamera,
        min_distance: float = config.ORBIT_MIN_DISTANCE,
        max_distance: float = config.ORBIT_MAX_DISTANCE,
        rotate_speed: float = config.ORBIT_ROTATE_SPEED,
    ) -> None:
        self.camera = camera
        self.min_distance = min_distance
        self.max_distance = max_distance
        self.rotate_speed = rotate_speed
        self.phi_min = config.ORBIT_PHI_MARGIN
        self.phi_max = math.pi - config.ORBIT_PHI_MARGIN

        # Derive the starting spherical coordinates from the camera position
        x, y, z = camera.position
        self.radius = float(np.linalg.norm(camera.position)) or min_distance
        self.theta = math.atan2(x, z)
        self.phi = math.acos(clamp(y / self.radius, -1.0, 1.0))
        self._last_pinch: Optional[float] = None
        self.update()

    def rotate(self, dx: float, dy: float) -> None:
        """Apply a drag of ``(dx, dy)`` pixels."""
        self.theta -= dx * self.rotate_speed
        self.phi -= dy * self.rotate_speed
        self.phi = clamp(self.phi, self.phi_min, self.phi_max)
        self.update()

    def wheel(self, delta_y: float) -> None:
        """Zoom out for positive wheel deltas, in otherwise."""
        scale = config.ORBIT_WHEEL_OUT if delta_y > 0 else config.ORBIT_WHEEL_IN
        self._set_radius(self.radius * scale)

    def pinch(self, distance: float) -> None:
        """Feed the current distance between two touch points.

        The first sample of a gesture only records the distance; later
        samples zoom by the damped ratio between consecutive distances.
        """
        if distance <= 0:
            return
        if self._last_pinch:
            ratio = self._last_pinch / distance
            damped = 1.0 + (ratio - 1.0) * config.ORBIT_PINCH_DAMPING
            self._set_radius(self.radius * damped)
        self._last_pinch = distance

    def end_pinch(self) -> None:
        self._last_pinch = None

    def _set_radius(self, radius: float) -> None:
        self.radius = clamp(radius, self.min_distance, self.max_distance)
        self.update()

    def update(self) -> None:
        """Place the camera at the current spherical coordinates."""
        sin_phi = math.sin(self.phi)
        self.camera.position = np.array(
            [
                self.radius * sin_phi * math.sin(self.theta),
                self.radius * math.cos(self.phi),
                self.radius * sin_phi * math.cos(self.theta),
            ]
        )
        self.camera.look_at((0.0, 0.0, 0.0))
        if config.DEBUG:
            logger.debug(
                "Orbit: radius=%.3f theta=%.3f phi=%.3f", self.radius, self.theta, self.phi
            )
