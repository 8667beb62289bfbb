"""Tests for the two-slot pin registry and the pin pop-in tween."""

import sys
from pathlib import Path

import numpy as np
import pytest

sys.path.append(str(Path(__file__).resolve().parents[1]))

from globe.services.easing import elastic_out, linear, tween_progress  # type: ignore
from globe.services.pins import PinRegistry  # type: ignore


def test_roles_assigned_in_placement_order() -> None:
    registry = PinRegistry(radius=2.0, pin_height=0.01)
    first = registry.add((0.0, 0.0, 5.0))
    second = registry.add((3.0, 0.0, 0.0))
    assert first.role == "origin"
    assert second.role == "destination"
    assert registry.count == 2
    assert registry.is_full


def test_pin_direction_is_normalised_and_scaled() -> None:
    registry = PinRegistry(radius=2.0, pin_height=0.01)
    pin = registry.add((1.0, 2.0, 2.0))
    assert np.linalg.norm(pin.surface_direction) == pytest.approx(1.0)
    assert np.allclose(pin.surface_direction, (1 / 3, 2 / 3, 2 / 3))
    assert np.linalg.norm(pin.surface_point) == pytest.approx(2.0)
    assert np.linalg.norm(pin.marker_point) == pytest.approx(2.01)


def test_third_add_is_a_no_op() -> None:
    registry = PinRegistry()
    registry.add((0.0, 0.0, 1.0))
    registry.add((1.0, 0.0, 0.0))
    before = [p.surface_direction.copy() for p in registry.pins]
    for _ in range(5):
        assert registry.add((0.0, 1.0, 0.0)) is None
    assert registry.count == 2
    after = [p.surface_direction for p in registry.pins]
    for b, a in zip(before, after):
        assert np.array_equal(b, a)


def test_zero_length_point_rejected() -> None:
    registry = PinRegistry()
    assert registry.add((0.0, 0.0, 0.0)) is None
    assert registry.add((float("nan"), 0.0, 1.0)) is None
    assert registry.count == 0


def test_on_complete_fires_once_when_second_pin_placed() -> None:
    calls = []
    registry = PinRegistry(on_complete=lambda pins: calls.append([p.role for p in pins]))
    registry.add((0.0, 0.0, 1.0))
    assert calls == []
    registry.add((1.0, 0.0, 0.0))
    registry.add((0.0, 1.0, 0.0))
    assert calls == [["origin", "destination"]]


def test_clear_is_idempotent_and_signals_owner() -> None:
    cleared = []
    registry = PinRegistry(on_clear=lambda: cleared.append(True))
    registry.add((0.0, 0.0, 1.0))
    assert registry.clear() is True
    assert registry.count == 0
    assert registry.clear() is False
    assert registry.count == 0
    assert len(cleared) == 2
    # Roles restart after a clear
    assert registry.add((1.0, 0.0, 0.0)).role == "origin"


def test_pin_scale_pops_in_with_elastic_easing() -> None:
    registry = PinRegistry(tween_ticks=30)
    pin = registry.add((0.0, 0.0, 1.0))
    assert pin.scale == 0.0
    registry.advance(15)
    assert pin.scale == pytest.approx(elastic_out(0.5))
    registry.advance(100)
    assert pin.age_ticks == 30
    assert pin.scale == 1.0


def test_easing_curves() -> None:
    assert linear(0.25) == 0.25
    assert elastic_out(0.0) == 0.0
    assert elastic_out(1.0) == 1.0
    # Elastic overshoot above 1 before settling
    assert max(elastic_out(t / 100) for t in range(100)) > 1.0
    assert tween_progress(10, 0) == 1.0
    assert tween_progress(-5, 30) == 0.0
