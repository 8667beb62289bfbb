"""
Great-circle flight arc generator.

This module builds the route an airplane follows between two pins.
Directions are interpolated along the great circle through both pins
(spherical linear interpolation) and lifted off the surface by a sine
shaped altitude profile that is zero at both ends and peaks at the
midpoint.

The result is expressed in the sphere's local frame so it rotates with
the globe without any further bookkeeping.
"""

from __future__ import annotations

import math
from typing import Iterable, List

import numpy as np

from .. import config
from .vector_math import angle_between, as_vec3, tangent_basis, unit

# Angles closer than this to 0 or pi are treated as coincident or
# antipodal directions respectively.  acos of a rounded unit dot
# product is already ~1.5e-8 for identical directions.
ANGLE_EPS: float = 1e-6


def _antipodal_tangent(origin: np.ndarray) -> np.ndarray:
    """Unit vector orthogonal to ``origin`` fixing the plane of an antipodal arc.

    Every great circle through ``origin`` is a shortest path to its
    antipode; the one through the east-like tangent of
    :func:`tangent_basis` is chosen so the result is deterministic.
    """
    east, _north = tangent_basis(origin)
    return east


def build_great_circle_arc(
    origin,
    destination,
    segments: int = config.ARC_SEGMENTS,
    radius: float = config.GLOBE_RADIUS,
    base_offset: float = config.ARC_BASE_OFFSET,
    height: float = config.ARC_HEIGHT,
) -> np.ndarray:
    """Generate the waypoints of a flight arc between two directions.

    Args:
        origin: Unit direction of the origin pin.
        destination: Unit direction of the destination pin.
        segments: Number of segments ``N``; ``N + 1`` points are returned.
        radius: Sphere radius.
        base_offset: Constant radial offset applied to every waypoint.
        height: Extra altitude reached at the midpoint.

    Returns:
        A read-only ``(N + 1, 3)`` array of waypoints.  The first and last
        rows are ``origin`` and ``destination`` scaled to
        ``radius + base_offset``.

    Raises:
        ValueError: If ``segments`` is less than one.
    """
    if segments < 1:
        raise ValueError(f"segments must be at least 1, got {segments}")

    a = unit(as_vec3(origin))
    b = unit(as_vec3(destination))
    theta = angle_between(a, b)
    sin_theta = math.sin(theta)

    coincident = theta < ANGLE_EPS
    antipodal = not coincident and math.pi - theta < ANGLE_EPS
    if antipodal:
        tangent = _antipodal_tangent(a)

    points = np.empty((segments + 1, 3))
    for i in range(segments + 1):
        t = i / segments
        if coincident:
            direction = a
        elif antipodal:
            direction = math.cos(t * theta) * a + math.sin(t * theta) * tangent
        else:
            direction = unit(
                (math.sin((1.0 - t) * theta) * a + math.sin(t * theta) * b) / sin_theta
            )
        # A zero-length route stays on the ground: all waypoints coincide
        arc_height = 0.0 if coincident else math.sin(t * math.pi) * height
        points[i] = direction * (radius + base_offset + arc_height)

    # Pin the endpoints exactly; slerp only reproduces them to rounding
    points[0] = a * (radius + base_offset)
    points[-1] = b * (radius + base_offset)
    points.setflags(write=False)
    return points


def arc_length(points: Iterable[Iterable[float]]) -> float:
    """Sum of chord lengths between consecutive waypoints."""
    arr = np.asarray(list(points), dtype=float)
    if len(arr) < 2:
        return 0.0
    return float(np.linalg.norm(np.diff(arr, axis=0), axis=1).sum())


def arc_heights(
    points: Iterable[Iterable[float]],
    radius: float = config.GLOBE_RADIUS,
    base_offset: float = config.ARC_BASE_OFFSET,
) -> List[float]:
    """Altitude of each waypoint above ``radius + base_offset``."""
    arr = np.asarray(list(points), dtype=float)
    return (np.linalg.norm(arr, axis=1) - radius - base_offset).tolist()
