"""Automatic rotation of the globe about its Y axis."""

from __future__ import annotations

import logging

import numpy as np

from .. import config
from .vector_math import rotation_y

logger = logging.getLogger(__name__)


class RotationController:
    """Advances the sphere's rotation angle each tick while enabled.

    Pins and the flight arc are stored in the sphere's local frame, so
    nothing else needs updating when the angle changes.
    """

    def __init__(self, rotating: bool = True, step: float = config.ROTATION_STEP) -> None:
        self.rotating = rotating
        self.step = step
        self.angle = 0.0

    def toggle(self) -> bool:
        self.rotating = not self.rotating
        logger.info("Globe rotation %s", "resumed" if self.rotating else "paused")
        return self.rotating

    def tick(self) -> float:
        if self.rotating:
            self.angle += self.step
        return self.angle

    def matrix(self) -> np.ndarray:
        """Current world rotation of the sphere."""
        return rotation_y(self.angle)
