"""
Scenario tests for a globe session: pick, pick, fly, clear.

These drive :class:`GlobeSession` directly, the same way the API
routes do, with a 1280x720 viewport and the default camera five units
in front of the globe.
"""

import sys
from pathlib import Path

import numpy as np
import pytest

sys.path.append(str(Path(__file__).resolve().parents[1]))

from globe.services.session import (  # type: ignore
    GlobeSession,
    create_globe_session,
    delete_globe_session,
    get_globe_session,
    list_globe_sessions,
)


CENTRE = (640.0, 360.0)
RIGHT_OF_CENTRE = (800.0, 360.0)
CORNER = (0.0, 0.0)


@pytest.fixture
def session() -> GlobeSession:
    return GlobeSession(viewport_width=1280, viewport_height=720, rotating=False)


def test_pick_pick_fly_clear(session: GlobeSession) -> None:
    assert session.pick(*CENTRE) is not None
    assert session.pin_count == 1
    assert session.flight_active is False
    assert session.arc is None

    assert session.pick(*RIGHT_OF_CENTRE) is not None
    assert session.pin_count == 2
    assert session.flight_active is True
    assert session.arc is not None
    assert len(session.arc) == session.settings.arc_segments + 1
    assert session.animator.segment_index == 0
    assert session.animator.progress == 0.0

    session.clear()
    assert session.pin_count == 0
    assert session.flight_active is False
    assert session.arc is None
    assert session.animator.active is False


def test_arc_endpoints_follow_pins(session: GlobeSession) -> None:
    origin = session.pick(*CENTRE)
    destination = session.pick(*RIGHT_OF_CENTRE)
    lift = session.settings.radius + session.settings.arc_base_offset
    assert np.allclose(session.arc[0], origin.surface_direction * lift)
    assert np.allclose(session.arc[-1], destination.surface_direction * lift)


def test_miss_and_full_registry_leave_state_unchanged(session: GlobeSession) -> None:
    assert session.pick(*CORNER) is None
    assert session.pin_count == 0
    session.pick(*CENTRE)
    session.pick(*RIGHT_OF_CENTRE)
    arc = session.arc
    assert session.pick(700.0, 400.0) is None
    assert session.pin_count == 2
    assert session.arc is arc


def test_clear_twice_matches_clear_once(session: GlobeSession) -> None:
    session.pick(*CENTRE)
    session.pick(*RIGHT_OF_CENTRE)
    session.clear()
    once = session.snapshot()
    session.clear()
    assert session.snapshot() == once
    # Empty session clear is a no-op as well
    fresh = GlobeSession(rotating=False)
    fresh.clear()
    assert fresh.pin_count == 0


def test_new_pair_replaces_arc_and_restarts_flight(session: GlobeSession) -> None:
    session.pick(*CENTRE)
    session.pick(*RIGHT_OF_CENTRE)
    first_arc = session.arc
    session.tick(20)
    session.clear()
    session.pick(*RIGHT_OF_CENTRE)
    session.pick(*CENTRE)
    assert session.arc is not first_arc
    assert session.animator.segment_index == 0
    assert session.animator.progress == 0.0


def test_tick_moves_airplane_and_rotation() -> None:
    session = GlobeSession(rotating=True)
    assert session.tick() is None
    assert session.rotation.angle == pytest.approx(session.settings.rotation_step)
    session.pick(*CENTRE)
    session.pick(*RIGHT_OF_CENTRE)
    pose = session.tick(5)
    assert pose is not None
    assert pose.segment_index == 1
    assert session.rotation.angle == pytest.approx(6 * session.settings.rotation_step)


def test_pins_stay_attached_through_rotation() -> None:
    """A pin picked after rotating is stored in the rotated local frame."""
    session = GlobeSession(rotating=True)
    session.tick(100)
    pin = session.pick(*CENTRE)
    assert pin is not None
    # The world point under the screen centre is (0, 0, R)
    world = session.rotation.matrix() @ pin.surface_point
    assert np.allclose(world, (0.0, 0.0, session.settings.radius), atol=1e-6)
    assert not np.allclose(pin.surface_direction, (0.0, 0.0, 1.0))


def test_toggle_rotation(session: GlobeSession) -> None:
    assert session.rotating is False
    assert session.toggle_rotation() is True
    session.tick()
    assert session.rotation.angle > 0.0


def test_hover_reports_pickability(session: GlobeSession) -> None:
    assert session.hover(*CENTRE) is True
    assert session.hover(*CORNER) is False
    session.pick(*CENTRE)
    session.pick(*RIGHT_OF_CENTRE)
    assert session.hover(*CENTRE) is False


def test_picking_follows_camera_orbit(session: GlobeSession) -> None:
    session.orbit(dx=-100.0, dy=0.0)
    pin = session.pick(*CENTRE)
    expected = session.camera.position / np.linalg.norm(session.camera.position)
    assert np.allclose(pin.surface_direction, expected, atol=1e-6)


def test_session_registry_round_trip() -> None:
    session = create_globe_session(rotating=False)
    assert get_globe_session(session.id) is session
    assert session.id in list_globe_sessions()
    assert delete_globe_session(session.id) is True
    assert get_globe_session(session.id) is None
    assert delete_globe_session(session.id) is False
