"""
Flight animation along a waypoint arc.

:class:`FlightAnimator` is a small ``idle -> active -> idle`` state
machine driven by the host's per-frame tick.  Each tick moves the
airplane a fixed fraction (``speed``) along the current segment and
orients it so that:

* its forward axis points along the segment (direction of travel);
* its up axis points away from the sphere centre, corrected to be
  orthogonal to forward, so the belly faces the globe;
* its right axis completes the right-handed frame.

The rotation matrix columns are ``(forward, up, right)``, i.e. the
airplane model's local +X is forward, +Y is up and +Z is right.

At the end of the arc the airplane wraps back to the first segment and
keeps flying in the same direction; it never reverses.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

import numpy as np

from .. import config
from .vector_math import basis_to_quaternion, safe_unit, tangent_basis, unit

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FlightPose:
    """Position and orientation of the airplane after a tick."""

    position: np.ndarray
    forward: np.ndarray
    up: np.ndarray
    right: np.ndarray
    segment_index: int
    progress: float

    @property
    def rotation(self) -> np.ndarray:
        """3x3 rotation with columns ``(forward, up, right)``."""
        return np.column_stack((self.forward, self.up, self.right))

    @property
    def quaternion(self) -> Tuple[float, float, float, float]:
        return basis_to_quaternion(self.rotation)


def orientation_basis(
    start: np.ndarray, end: np.ndarray, position: np.ndarray
) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    """Compute ``(forward, corrected_up, right)`` for a segment.

    Coincident waypoints or a forward axis parallel to the radial
    direction fall back to the local tangent basis, so the result is
    always orthonormal and finite.
    """
    radial = unit(position)
    if not np.any(radial):
        radial = np.array([0.0, 1.0, 0.0])
    east, north = tangent_basis(radial)

    forward = safe_unit(end - start, east)
    right = np.cross(forward, radial)
    if np.linalg.norm(right) < 1e-9:
        forward = east
        right = np.cross(forward, radial)
    right = unit(right)
    corrected_up = unit(np.cross(right, forward))
    return forward, corrected_up, right


class FlightAnimator:
    """Moves an object along an arc, one tick at a time."""

    def __init__(self, speed: float = config.FLIGHT_SPEED) -> None:
        self.speed = speed
        self.arc: Optional[np.ndarray] = None
        self.segment_index = 0
        self.progress = 0.0
        self.active = False
        self.pose: Optional[FlightPose] = None

    @property
    def last_index(self) -> int:
        """Index of the final waypoint (the segment count)."""
        if self.arc is None:
            return 0
        return len(self.arc) - 1

    def start(self, arc: Sequence) -> None:
        """Bind to ``arc`` and restart from its first waypoint.

        Any previous arc and animation state is replaced.
        """
        self.arc = np.asarray(arc, dtype=float)
        self.segment_index = 0
        self.progress = 0.0
        self.pose = None
        self.active = len(self.arc) >= 2
        if not self.active:
            logger.warning("Flight arc needs at least two waypoints; got %d", len(self.arc))
        else:
            logger.info("Flight started over %d segments", self.last_index)

    def stop(self) -> None:
        """Halt the animation.  Safe to call in any state, any number of times."""
        if self.active:
            logger.info("Flight stopped")
        self.active = False

    def reset(self) -> None:
        """Stop and forget the arc and the last pose."""
        self.stop()
        self.arc = None
        self.segment_index = 0
        self.progress = 0.0
        self.pose = None

    def tick(self) -> Optional[FlightPose]:
        """Advance one simulation step.

        Returns:
            The new :class:`FlightPose`, or ``None`` when inactive.
        """
        if not self.active or self.arc is None:
            return None

        if self.segment_index >= self.last_index:
            self.segment_index = 0
            self.progress = 0.0

        start = self.arc[self.segment_index]
        end = self.arc[self.segment_index + 1]
        position = start + (end - start) * self.progress
        forward, up, right = orientation_basis(start, end, position)
        self.pose = FlightPose(
            position=position,
            forward=forward,
            up=up,
            right=right,
            segment_index=self.segment_index,
            progress=self.progress,
        )

        self.progress += self.speed
        if self.progress >= 1.0:
            self.progress = 0.0
            self.segment_index += 1
            if self.segment_index >= self.last_index:
                self.segment_index = 0
        return self.pose
