"""
Tests for the flight animator state machine.

The airplane must move forward along the arc, wrap to the first
segment at the end, and keep an orthonormal, surface-tangent basis on
every tick.
"""

import sys
from pathlib import Path

import numpy as np
import pytest

sys.path.append(str(Path(__file__).resolve().parents[1]))

from globe.services.arc_builder import build_great_circle_arc  # type: ignore
from globe.services.flight import FlightAnimator, orientation_basis  # type: ignore


def _arc(segments: int = 64) -> np.ndarray:
    a = np.array([1.0, 0.0, 0.0])
    b = np.array([0.0, 0.6, 0.8])
    return build_great_circle_arc(a, b, segments=segments)


def test_start_resets_state() -> None:
    animator = FlightAnimator(speed=0.32)
    assert animator.active is False
    arc = _arc()
    animator.start(arc)
    assert animator.active is True
    assert animator.segment_index == 0
    assert animator.progress == 0.0
    for _ in range(10):
        animator.tick()
    animator.start(arc)
    assert animator.segment_index == 0
    assert animator.progress == 0.0


def test_first_tick_sits_on_first_waypoint() -> None:
    animator = FlightAnimator()
    arc = _arc()
    animator.start(arc)
    pose = animator.tick()
    assert np.allclose(pose.position, arc[0])
    assert pose.segment_index == 0
    assert pose.progress == 0.0


def test_progress_advances_by_speed_and_moves_to_next_segment() -> None:
    animator = FlightAnimator(speed=0.32)
    arc = _arc()
    animator.start(arc)
    progresses = [animator.tick().progress for _ in range(4)]
    assert progresses == pytest.approx([0.0, 0.32, 0.64, 0.96])
    pose = animator.tick()
    assert pose.segment_index == 1
    assert pose.progress == 0.0
    assert np.allclose(pose.position, arc[1])


def test_basis_orthonormal_over_full_loop() -> None:
    animator = FlightAnimator(speed=0.32)
    arc = _arc()
    animator.start(arc)
    ticks_per_loop = 64 * 4
    for _ in range(ticks_per_loop + 10):
        pose = animator.tick()
        f, u, r = pose.forward, pose.up, pose.right
        for v in (f, u, r):
            assert np.linalg.norm(v) == pytest.approx(1.0)
        assert float(np.dot(f, u)) == pytest.approx(0.0, abs=1e-9)
        assert float(np.dot(f, r)) == pytest.approx(0.0, abs=1e-9)
        assert float(np.dot(u, r)) == pytest.approx(0.0, abs=1e-9)
        # Belly faces the globe: up points away from the centre
        assert float(np.dot(u, pose.position)) > 0.0
        assert np.linalg.det(pose.rotation) == pytest.approx(1.0)
        q = np.array(pose.quaternion)
        assert np.linalg.norm(q) == pytest.approx(1.0)


def test_wraps_forward_after_last_segment() -> None:
    """After the final segment the airplane restarts at the origin, never reversing."""
    animator = FlightAnimator(speed=0.5)
    arc = _arc(segments=3)
    animator.start(arc)
    indices = [animator.tick().segment_index for _ in range(8)]
    assert indices == [0, 0, 1, 1, 2, 2, 0, 0]
    assert 0 <= animator.segment_index < len(arc) - 1


def test_forward_points_along_travel() -> None:
    animator = FlightAnimator()
    arc = _arc()
    animator.start(arc)
    pose = animator.tick()
    chord = arc[1] - arc[0]
    assert float(np.dot(pose.forward, chord)) > 0.0


def test_stop_is_idempotent_and_halts_ticks() -> None:
    animator = FlightAnimator()
    animator.stop()
    assert animator.tick() is None
    animator.start(_arc())
    animator.tick()
    animator.stop()
    animator.stop()
    assert animator.active is False
    assert animator.tick() is None


def test_reset_forgets_arc() -> None:
    animator = FlightAnimator()
    animator.start(_arc())
    animator.tick()
    animator.reset()
    assert animator.arc is None
    assert animator.pose is None
    assert animator.segment_index == 0
    assert animator.progress == 0.0


def test_coincident_arc_has_finite_basis() -> None:
    a = np.array([0.0, 0.0, 1.0])
    arc = build_great_circle_arc(a, a, segments=8)
    animator = FlightAnimator()
    animator.start(arc)
    for _ in range(40):
        pose = animator.tick()
        assert np.all(np.isfinite(pose.rotation))
        assert float(np.dot(pose.forward, pose.up)) == pytest.approx(0.0, abs=1e-9)


def test_orientation_basis_handles_radial_segment() -> None:
    """A segment pointing straight up falls back to a tangent forward axis."""
    start = np.array([0.0, 0.0, 2.0])
    end = np.array([0.0, 0.0, 2.5])
    forward, up, right = orientation_basis(start, end, start)
    assert np.all(np.isfinite([forward, up, right]))
    assert float(np.dot(forward, up)) == pytest.approx(0.0, abs=1e-9)
    assert np.allclose(up, (0.0, 0.0, 1.0))


def test_single_waypoint_arc_does_not_activate() -> None:
    animator = FlightAnimator()
    animator.start([[0.0, 0.0, 2.0]])
    assert animator.active is False
    assert animator.tick() is None
