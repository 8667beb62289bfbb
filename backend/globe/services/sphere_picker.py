"""
Pointer picking against a rotating sphere.

Converts a pointer position in device pixels into a point in the
sphere's local (rotating) frame.  The steps are:

1. Normalise the pixel position to normalised device coordinates in
   ``[-1, 1] x [-1, 1]``, flipping Y because device pixels grow
   downward.
2. Unproject the near and far plane points through the inverse of
   ``projection @ view`` to obtain a world space ray from the camera.
3. Intersect the ray with the sphere analytically.  The hit is the
   smallest positive root of ``|o + t d - c|^2 = R^2``.
4. Map the world hit into the sphere's local frame with the inverse of
   its current world rotation.  Pins stored in this frame stay attached
   to the surface however far the sphere has rotated since.

Every failure mode (miss, empty viewport, degenerate ray, non-finite
input, singular matrices) yields ``None``.  Nothing in this module
raises for bad input.
"""

from __future__ import annotations

import logging
import math
from typing import Optional, Tuple

import numpy as np
from numpy.linalg import norm

from .camera import PerspectiveCamera
from .vector_math import EPS

logger = logging.getLogger(__name__)

Ray = Tuple[np.ndarray, np.ndarray]


def pixel_to_ndc(
    x_px: float, y_px: float, width: float, height: float
) -> Optional[Tuple[float, float]]:
    """Map pixel coordinates to normalised device coordinates."""
    if not (width > 0 and height > 0):
        return None
    if not (math.isfinite(x_px) and math.isfinite(y_px)):
        return None
    return (x_px / width) * 2.0 - 1.0, -(y_px / height) * 2.0 + 1.0


def _unproject(inverse: np.ndarray, x: float, y: float, z: float) -> Optional[np.ndarray]:
    clip = inverse @ np.array([x, y, z, 1.0])
    w = clip[3]
    if not np.isfinite(w) or abs(w) < EPS:
        return None
    return clip[:3] / w


def ray_from_camera(
    ndc: Tuple[float, float],
    view: np.ndarray,
    projection: np.ndarray,
    eye: np.ndarray | None = None,
) -> Optional[Ray]:
    """Build a world space ray through ``ndc``.

    The ray starts at ``eye`` (the camera position) when given, otherwise
    at the unprojected point on the near plane.

    Returns:
        ``(origin, direction)`` with a unit ``direction``, or ``None``
        when the transforms are singular or the ray degenerates.
    """
    try:
        inverse = np.linalg.inv(projection @ view)
    except np.linalg.LinAlgError:
        return None
    x, y = ndc
    near = _unproject(inverse, x, y, -1.0)
    far = _unproject(inverse, x, y, 1.0)
    if near is None or far is None:
        return None
    direction = far - near
    length = norm(direction)
    if not np.isfinite(length) or length < EPS:
        return None
    origin = near if eye is None else np.asarray(eye, dtype=float)
    return origin, direction / length


def intersect_ray_sphere(
    origin: np.ndarray,
    direction: np.ndarray,
    radius: float,
    center: np.ndarray | None = None,
) -> Optional[float]:
    """Return the nearest positive ray parameter hitting the sphere.

    The ray is ``origin + t * direction``.  ``direction`` need not be
    unit length but must be non-zero; a zero direction is a miss.
    """
    if center is None:
        center = np.zeros(3)
    a = float(np.dot(direction, direction))
    if not np.isfinite(a) or a < EPS:
        return None
    oc = origin - center
    b = 2.0 * float(np.dot(direction, oc))
    c = float(np.dot(oc, oc)) - radius * radius
    disc = b * b - 4.0 * a * c
    if not np.isfinite(disc) or disc < 0.0:
        return None
    root = math.sqrt(disc)
    for t in ((-b - root) / (2.0 * a), (-b + root) / (2.0 * a)):
        if t > 0.0:
            return t
    return None


def pick_sphere(
    x_px: float,
    y_px: float,
    viewport_width: float,
    viewport_height: float,
    camera: PerspectiveCamera,
    radius: float,
    sphere_rotation: np.ndarray,
    center: np.ndarray | None = None,
) -> Optional[np.ndarray]:
    """Return the picked point in the sphere's local frame, or ``None``.

    Args:
        x_px, y_px: Pointer position in device pixels (origin top-left).
        viewport_width, viewport_height: Viewport size in device pixels.
        camera: Camera providing the view and projection transforms.
        radius: Sphere radius.
        sphere_rotation: The sphere's current 3x3 world rotation.
        center: Sphere centre in world space (default: origin).

    Returns:
        A local space point on the sphere surface or ``None`` on a miss.
    """
    ndc = pixel_to_ndc(x_px, y_px, viewport_width, viewport_height)
    if ndc is None:
        return None
    ray = ray_from_camera(
        ndc, camera.view_matrix(), camera.projection_matrix(), eye=camera.position
    )
    if ray is None:
        return None
    origin, direction = ray
    if center is None:
        center = np.zeros(3)
    t = intersect_ray_sphere(origin, direction, radius, center)
    if t is None:
        logger.debug("Pick at (%.1f, %.1f) missed the sphere", x_px, y_px)
        return None
    world_hit = origin + t * direction
    # Rotation matrices are orthonormal so the transpose is the inverse
    local_hit = np.asarray(sphere_rotation, dtype=float).T @ (world_hit - center)
    if not np.all(np.isfinite(local_hit)):
        return None
    return local_hit
