"""Easing curves for the pin pop-in tween."""

from __future__ import annotations

import math


def linear(t: float) -> float:
    return t


def elastic_out(t: float) -> float:
    """Elastic overshoot that settles at 1.

    ``elastic_out(0) == 0`` and ``elastic_out(1) == 1`` exactly; in
    between the curve overshoots 1 and oscillates back.
    """
    if t <= 0.0:
        return 0.0
    if t >= 1.0:
        return 1.0
    return 2.0 ** (-10.0 * t) * math.sin((t - 0.1) * 5.0 * math.pi) + 1.0


def tween_progress(elapsed_ticks: int, duration_ticks: int) -> float:
    """Fraction of a tween completed after ``elapsed_ticks``, in [0, 1]."""
    if duration_ticks <= 0:
        return 1.0
    return min(max(elapsed_ticks, 0) / duration_ticks, 1.0)
