"""
Pin placement on the globe.

A :class:`PinRegistry` holds at most ``max_pins`` (two) markers in the
sphere's local frame.  The first pin placed is the route origin and the
second the destination.  Once full, further ``add`` calls are ignored
until the registry is cleared.

The registry notifies its owner through two optional callbacks rather
than knowing about arcs or animation itself:

* ``on_complete(pins)`` fires when an ``add`` brings the count to two.
* ``on_clear()`` fires on every ``clear`` call, including when the
  registry is already empty, so the owner can discard derived state.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, List, Literal, Optional, Tuple

import numpy as np
from numpy.linalg import norm

from .. import config
from .easing import elastic_out, tween_progress
from .vector_math import EPS, as_vec3

logger = logging.getLogger(__name__)

PinRole = Literal["origin", "destination"]

_ROLES: Tuple[PinRole, PinRole] = ("origin", "destination")


@dataclass
class Pin:
    """A placed marker.

    Attributes:
        role: ``"origin"`` or ``"destination"``; fixed at creation.
        surface_direction: Unit vector from the centre in the local frame.
        surface_point: ``surface_direction * radius``.
        marker_point: Where the marker is drawn, slightly above the surface.
        age_ticks: Ticks since placement, drives the pop-in scale.
    """

    role: PinRole
    surface_direction: np.ndarray
    surface_point: np.ndarray
    marker_point: np.ndarray
    tween_ticks: int = config.PIN_TWEEN_TICKS
    age_ticks: int = field(default=0)

    @property
    def scale(self) -> float:
        """Current pop-in scale (elastic-out from 0 to 1)."""
        return elastic_out(tween_progress(self.age_ticks, self.tween_ticks))


class PinRegistry:
    """Ordered collection of at most two pins."""

    def __init__(
        self,
        radius: float = config.GLOBE_RADIUS,
        pin_height: float = config.PIN_HEIGHT,
        max_pins: int = config.MAX_PINS,
        tween_ticks: int = config.PIN_TWEEN_TICKS,
        on_complete: Optional[Callable[[List[Pin]], None]] = None,
        on_clear: Optional[Callable[[], None]] = None,
    ) -> None:
        self.radius = radius
        self.pin_height = pin_height
        self.max_pins = max_pins
        self.tween_ticks = tween_ticks
        self.on_complete = on_complete
        self.on_clear = on_clear
        self._pins: List[Pin] = []

    @property
    def pins(self) -> List[Pin]:
        return list(self._pins)

    @property
    def count(self) -> int:
        return len(self._pins)

    @property
    def is_full(self) -> bool:
        return len(self._pins) >= self.max_pins

    def __len__(self) -> int:
        return len(self._pins)

    def add(self, local_point) -> Optional[Pin]:
        """Place a pin at the direction of ``local_point``.

        Returns:
            The new :class:`Pin`, or ``None`` when the registry is full or
            the point has no direction (zero length or non-finite).
        """
        if self.is_full:
            logger.debug("Pin registry full; ignoring add")
            return None
        point = as_vec3(local_point)
        length = norm(point)
        if not np.isfinite(length) or length < EPS:
            return None
        direction = point / length
        pin = Pin(
            role=_ROLES[len(self._pins)],
            surface_direction=direction,
            surface_point=direction * self.radius,
            marker_point=direction * (self.radius + self.pin_height),
            tween_ticks=self.tween_ticks,
        )
        self._pins.append(pin)
        logger.info("Placed %s pin at %s", pin.role, np.round(pin.surface_point, 4).tolist())
        if self.is_full and self.on_complete is not None:
            self.on_complete(self.pins)
        return pin

    def clear(self) -> bool:
        """Remove all pins.

        Returns:
            True if any pins were removed.
        """
        removed = bool(self._pins)
        self._pins = []
        if self.on_clear is not None:
            self.on_clear()
        return removed

    def directions(self) -> List[np.ndarray]:
        return [p.surface_direction for p in self._pins]

    def advance(self, ticks: int = 1) -> None:
        """Age every pin by ``ticks`` for the pop-in tween."""
        for pin in self._pins:
            if pin.age_ticks < pin.tween_ticks:
                pin.age_ticks = min(pin.age_ticks + ticks, pin.tween_ticks)
