"""Tests for the orbit camera controls and the globe rotation controller."""

import math
import sys
from pathlib import Path

import numpy as np
import pytest

sys.path.append(str(Path(__file__).resolve().parents[1]))

from globe.services.camera import OrbitControls, PerspectiveCamera  # type: ignore
from globe.services.rotation import RotationController  # type: ignore
from globe.services.vector_math import basis_to_quaternion, rotation_y  # type: ignore


def _controls() -> OrbitControls:
    return OrbitControls(PerspectiveCamera(position=(0.0, 0.0, 5.0)))


def test_initial_spherical_coordinates_match_camera() -> None:
    controls = _controls()
    assert controls.radius == pytest.approx(5.0)
    assert controls.theta == pytest.approx(0.0)
    assert controls.phi == pytest.approx(math.pi / 2)
    assert np.allclose(controls.camera.position, (0.0, 0.0, 5.0))


def test_drag_orbits_and_clamps_polar_angle() -> None:
    controls = _controls()
    controls.rotate(dx=-100.0, dy=0.0)
    assert controls.theta == pytest.approx(0.5)
    assert np.linalg.norm(controls.camera.position) == pytest.approx(5.0)
    assert controls.camera.position[0] > 0.0

    controls.rotate(dx=0.0, dy=10_000.0)
    assert controls.phi == pytest.approx(0.1)
    controls.rotate(dx=0.0, dy=-10_000.0)
    assert controls.phi == pytest.approx(math.pi - 0.1)


def test_wheel_zoom_respects_distance_limits() -> None:
    controls = _controls()
    controls.wheel(1.0)
    assert controls.radius == pytest.approx(5.0 * 1.02)
    controls.wheel(-1.0)
    assert controls.radius == pytest.approx(5.0 * 1.02 * 0.98)
    for _ in range(500):
        controls.wheel(1.0)
    assert controls.radius == pytest.approx(10.0)
    for _ in range(500):
        controls.wheel(-1.0)
    assert controls.radius == pytest.approx(3.0)
    assert np.linalg.norm(controls.camera.position) == pytest.approx(3.0)


def test_pinch_zoom_is_damped() -> None:
    controls = _controls()
    controls.pinch(100.0)
    assert controls.radius == pytest.approx(5.0)
    # Fingers move apart: ratio 0.5, damped to 0.9
    controls.pinch(200.0)
    assert controls.radius == pytest.approx(4.5)
    controls.end_pinch()
    controls.pinch(50.0)
    assert controls.radius == pytest.approx(4.5)


def test_camera_keeps_looking_at_origin() -> None:
    controls = _controls()
    controls.rotate(37.0, -21.0)
    view = controls.camera.view_matrix()
    origin_in_view = view @ np.array([0.0, 0.0, 0.0, 1.0])
    # The origin sits straight ahead on the camera's -Z axis
    assert origin_in_view[0] == pytest.approx(0.0, abs=1e-9)
    assert origin_in_view[1] == pytest.approx(0.0, abs=1e-9)
    assert origin_in_view[2] == pytest.approx(-controls.radius)


def test_set_aspect_ignores_empty_viewport() -> None:
    camera = PerspectiveCamera()
    camera.set_aspect(1280, 720)
    camera.set_aspect(0, 720)
    assert camera.aspect == pytest.approx(1280 / 720)


def test_rotation_toggle_and_tick() -> None:
    rotation = RotationController(rotating=True, step=0.005)
    rotation.tick()
    rotation.tick()
    assert rotation.angle == pytest.approx(0.01)
    assert rotation.toggle() is False
    rotation.tick()
    assert rotation.angle == pytest.approx(0.01)
    assert rotation.toggle() is True
    rotation.tick()
    assert rotation.angle == pytest.approx(0.015)
    assert np.allclose(rotation.matrix(), rotation_y(0.015))


def test_quaternion_of_identity_and_quarter_turn() -> None:
    assert basis_to_quaternion(np.identity(3)) == pytest.approx((0.0, 0.0, 0.0, 1.0))
    half = math.sqrt(0.5)
    assert basis_to_quaternion(rotation_y(math.pi / 2)) == pytest.approx((0.0, half, 0.0, half))
