"""Small 3-D vector and matrix helpers shared by the globe services."""

from __future__ import annotations

import math
from typing import Tuple

import numpy as np
from numpy.linalg import norm
from scipy.spatial.transform import Rotation

EPS = 1e-9

WORLD_UP = np.array([0.0, 1.0, 0.0])
WORLD_X = np.array([1.0, 0.0, 0.0])


def as_vec3(value) -> np.ndarray:
    """Return ``value`` as a float64 array of shape ``(3,)``."""
    return np.asarray(value, dtype=float).reshape(3)


def unit(v: np.ndarray) -> np.ndarray:
    """Normalise ``v``; a zero vector stays zero."""
    n = norm(v)
    if n < EPS:
        return v * 0.0
    return v / n


def safe_unit(v: np.ndarray, fallback: np.ndarray) -> np.ndarray:
    n = norm(v)
    if not np.isfinite(n) or n < EPS:
        return unit(fallback)
    return v / n


def clamp(x: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, x))


def angle_between(a: np.ndarray, b: np.ndarray) -> float:
    """Angle between two unit vectors, robust to rounding outside [-1, 1]."""
    return math.acos(clamp(float(np.dot(a, b)), -1.0, 1.0))


def tangent_basis(u: np.ndarray, up: np.ndarray = WORLD_UP) -> Tuple[np.ndarray, np.ndarray]:
    """
    Build a local tangent basis at the unit vector ``u``:
      e = (up x u) / ||up x u||   (east-like)
      n = u x e                   (north-like)
    Near the poles the X axis is used as reference instead of ``up``.
    """
    cross_up = np.cross(up, u)
    if norm(cross_up) < 1e-6:
        e = unit(np.cross(WORLD_X, u))
    else:
        e = unit(cross_up)
    n = unit(np.cross(u, e))
    return e, n


def rotation_y(angle: float) -> np.ndarray:
    """3x3 rotation matrix about the Y axis (right-hand rule)."""
    c = math.cos(angle)
    s = math.sin(angle)
    return np.array(
        [
            [c, 0.0, s],
            [0.0, 1.0, 0.0],
            [-s, 0.0, c],
        ]
    )


def look_at(eye: np.ndarray, target: np.ndarray, up: np.ndarray = WORLD_UP) -> np.ndarray:
    """Return a 4x4 view matrix for a camera at ``eye`` looking at ``target``.

    The camera looks down its local -Z axis, matching the OpenGL/Three.js
    convention.  When the viewing direction is parallel to ``up`` the X
    axis is used to pick the camera's right vector.
    """
    z_axis = safe_unit(eye - target, np.array([0.0, 0.0, 1.0]))
    x_axis = np.cross(up, z_axis)
    if norm(x_axis) < 1e-6:
        x_axis = np.cross(WORLD_X, z_axis)
        x_axis = np.cross(z_axis, x_axis)
    x_axis = unit(x_axis)
    y_axis = np.cross(z_axis, x_axis)

    view = np.identity(4)
    view[0, :3] = x_axis
    view[1, :3] = y_axis
    view[2, :3] = z_axis
    view[:3, 3] = -view[:3, :3] @ eye
    return view


def perspective(fov_deg: float, aspect: float, near: float, far: float) -> np.ndarray:
    """Return a 4x4 OpenGL-style perspective projection matrix."""
    f = 1.0 / math.tan(math.radians(fov_deg) / 2.0)
    proj = np.zeros((4, 4))
    proj[0, 0] = f / aspect
    proj[1, 1] = f
    proj[2, 2] = (far + near) / (near - far)
    proj[2, 3] = 2.0 * far * near / (near - far)
    proj[3, 2] = -1.0
    return proj


def basis_to_quaternion(rotation: np.ndarray) -> Tuple[float, float, float, float]:
    """Convert a 3x3 rotation matrix to an ``(x, y, z, w)`` quaternion with ``w >= 0``."""
    x, y, z, w = Rotation.from_matrix(np.asarray(rotation, dtype=float)).as_quat(canonical=True)
    return float(x), float(y), float(z), float(w)
