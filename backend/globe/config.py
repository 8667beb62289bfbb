"""
Configuration constants for the globe flight backend.

All tunables live here as module level constants so they can be
imported directly, and are also bundled into :class:`GlobeConfig` for
code that wants to carry a single configuration object around (each
:class:`~globe.services.session.GlobeSession` owns one).  None of the
values are reconfigured at runtime by the core itself.

Two environment variables are honoured:

* ``GLOBE_STORAGE_DIR`` overrides where the SQLite index and cached
  textures are written (default: ``<repo>/storage``).
* ``GLOBE_DEBUG`` enables additional debug logging in the picking and
  animation services.
"""

from __future__ import annotations

import math
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Tuple

# Sphere and markers
GLOBE_RADIUS: float = 2.0
PIN_HEIGHT: float = 0.01
MAX_PINS: int = 2

# Flight arc.  Waypoints sit at R + ARC_BASE_OFFSET at both ends and rise
# by up to ARC_HEIGHT at the midpoint.
ARC_SEGMENTS: int = 64
ARC_BASE_OFFSET: float = 0.02
ARC_HEIGHT: float = 0.2

# Animation, expressed per tick.  The host drives one tick per displayed
# frame, nominally at TICKS_PER_SECOND.
FLIGHT_SPEED: float = 0.32
ROTATION_STEP: float = 0.005
TICKS_PER_SECOND: int = 60
PIN_TWEEN_TICKS: int = 30  # 500 ms pop-in

# Camera
CAMERA_FOV: float = 75.0
CAMERA_NEAR: float = 0.1
CAMERA_FAR: float = 1000.0
CAMERA_POSITION: Tuple[float, float, float] = (0.0, 0.0, 5.0)

# Orbit controls
ORBIT_MIN_DISTANCE: float = 3.0
ORBIT_MAX_DISTANCE: float = 10.0
ORBIT_ROTATE_SPEED: float = 0.005
ORBIT_PHI_MARGIN: float = 0.1
ORBIT_WHEEL_IN: float = 0.98
ORBIT_WHEEL_OUT: float = 1.02
ORBIT_PINCH_DAMPING: float = 0.2

# Surface appearance.  Tried in order; the procedural texture is kept when
# every source fails.
EARTH_TEXTURE_SOURCES: Tuple[str, ...] = (
    "https://raw.githubusercontent.com/turban/webgl-earth/master/images/2_no_clouds_4k.jpg",
    "https://raw.githubusercontent.com/turban/webgl-earth/master/images/1_earth_8k.jpg",
    "https://threejs.org/examples/textures/planets/earth_atmos_2048.jpg",
    "https://threejs.org/examples/textures/planets/earth_normal_2048.jpg",
)
TEXTURE_FETCH_TIMEOUT: float = 20.0
PROCEDURAL_TEXTURE_SIZE: Tuple[int, int] = (512, 256)
PROCEDURAL_LANDMASSES: int = 50

# Storage for the texture cache and its SQLite index.
STORAGE_DIR: Path = Path(
    os.getenv("GLOBE_STORAGE_DIR")
    or Path(__file__).resolve().parents[2] / "storage"
)

DEBUG: bool = bool(os.getenv("GLOBE_DEBUG"))


@dataclass(frozen=True)
class GlobeConfig:
    """Immutable bundle of the constants above."""

    radius: float = GLOBE_RADIUS
    pin_height: float = PIN_HEIGHT
    max_pins: int = MAX_PINS
    arc_segments: int = ARC_SEGMENTS
    arc_base_offset: float = ARC_BASE_OFFSET
    arc_height: float = ARC_HEIGHT
    flight_speed: float = FLIGHT_SPEED
    rotation_step: float = ROTATION_STEP
    pin_tween_ticks: int = PIN_TWEEN_TICKS
    camera_fov: float = CAMERA_FOV
    camera_near: float = CAMERA_NEAR
    camera_far: float = CAMERA_FAR
    camera_position: Tuple[float, float, float] = CAMERA_POSITION
    orbit_min_distance: float = ORBIT_MIN_DISTANCE
    orbit_max_distance: float = ORBIT_MAX_DISTANCE
    orbit_rotate_speed: float = ORBIT_ROTATE_SPEED
    texture_sources: Tuple[str, ...] = field(default=EARTH_TEXTURE_SOURCES)

    @property
    def max_arc_radius(self) -> float:
        """Largest distance from the centre any arc waypoint can reach."""
        return self.radius + self.arc_base_offset + self.arc_height

    @property
    def orbit_phi_limits(self) -> Tuple[float, float]:
        return ORBIT_PHI_MARGIN, math.pi - ORBIT_PHI_MARGIN


DEFAULT_CONFIG = GlobeConfig()
