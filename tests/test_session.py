import logging
import random

import pytest
from panda3d.core import Point3D, Vec3D

from level import LOWER_LEVEL
from physics import Contact
from session import MazeSession, SessionState, TickResult


@pytest.fixture
def session():
    return MazeSession(rng=random.Random(42))


def test_new_session_waits_for_a_difficulty(session):
    assert session.state is SessionState.IDLE
    assert not session.running
    assert session.grid.cells_per_side == 4
    assert session.level_count == 0
    assert tuple(session.ball.position) == pytest.approx(tuple(session.geometry.start_pos))


def test_idle_ticks_only_spin_the_cube(session):
    start = tuple(session.ball.position)
    result = session.tick(1.0 / 60.0)

    assert not result.integrated
    assert result.contacts == []
    assert tuple(session.ball.position) == start
    assert session.orientation.yaw == pytest.approx(0.0008)


def test_select_difficulty_starts_a_fresh_level(session):
    preview = session.geometry
    session.select_difficulty("hard")

    assert session.running
    assert session.grid.cells_per_side == 6
    assert session.scale == pytest.approx(1.25)
    assert session.geometry is not preview
    assert session.geometry.layout.walls.n == 6
    assert tuple(session.ball.position) == pytest.approx(tuple(session.geometry.start_pos))
    assert tuple(session.ball.velocity) == (0, 0, 0)
    assert session.level_count == 1


def test_unknown_difficulty_leaves_the_session_idle(session):
    with pytest.raises(ValueError):
        session.select_difficulty("impossible")

    assert session.state is SessionState.IDLE
    assert session.grid.cells_per_side == 4


def test_running_ticks_integrate(session):
    session.select_difficulty("medium")
    result = session.tick(1.0 / 60.0)

    assert result.integrated
    assert session.geometry.containment.contains(session.ball.position)


def test_listeners_see_every_level(session):
    seen = []
    session.add_level_listener(seen.append)

    assert seen == [session.geometry]

    session.select_difficulty("easy")
    session.request_new_level()
    assert len(seen) == 3
    assert seen[-1] is session.geometry
    assert seen[1] is not seen[2]

    session.remove_level_listener(seen.append)
    session.request_new_level()
    assert len(seen) == 3


def test_new_level_replaces_obstacles_and_goal(session):
    session.select_difficulty("medium")
    old_obstacles = session.obstacles
    old_goal = session.goal
    session.ball.has_won = True

    session.request_new_level()

    assert session.obstacles is not old_obstacles
    assert session.goal is not old_goal
    assert not session.has_won
    assert session.running


def test_restart_returns_to_the_menu_and_keeps_the_difficulty(session):
    session.select_difficulty("hard")
    session.orientation.drag(40, 25)
    session.restart()

    assert session.state is SessionState.IDLE
    assert session.scale == 1.0
    assert session.difficulty.name == "hard"
    assert session.grid.cells_per_side == 6
    assert (session.orientation.pitch, session.orientation.yaw) == (0.0, 0.0)
    assert not session.has_won


def _park_on_goal(session):
    goal = session.geometry.goal
    cfg = session.maze_config
    floor_y = cfg.level_ys[session.geometry.layout.goal_cell.level_index]
    rest_y = floor_y + cfg.floor_thickness * 0.5 + session.ball.radius
    session.ball.position = Point3D(goal.position.x, rest_y, goal.position.z)


def test_reaching_the_goal_reports_the_win_once(session):
    session.select_difficulty("medium")
    assert session.geometry.layout.goal_cell.level_index == LOWER_LEVEL
    _park_on_goal(session)

    first = session.tick(1.0 / 60.0)
    assert first.won_now
    assert session.has_won

    for _ in range(10):
        result = session.tick(1.0 / 60.0)
        assert not result.won_now
        assert session.has_won


def test_win_survives_ticks_until_a_new_level(session):
    session.select_difficulty("easy")
    _park_on_goal(session)
    session.tick(1.0 / 60.0)
    session.ball.position = Point3D(session.geometry.start_pos)

    for _ in range(5):
        session.tick(1.0 / 30.0)
        assert session.has_won

    session.request_new_level()
    assert not session.has_won


def test_strongest_impact_picks_the_hardest_contact():
    normal = Vec3D(0, 1, 0)
    result = TickResult(contacts=[Contact(0, normal, 0.01, 0.4), Contact(3, normal, 0.02, 2.5), Contact(5, normal, 0.0)])

    assert result.strongest_impact == pytest.approx(2.5)
    assert TickResult().strongest_impact == 0.0


def test_dropping_onto_the_floor_registers_an_impact(session):
    session.select_difficulty("medium")
    impacts = [session.tick(1.0 / 30.0).strongest_impact for _ in range(30)]

    assert max(impacts) > 0.0


def test_running_ticks_log_their_contacts(session, caplog, monkeypatch):
    monkeypatch.setattr(logging.getLogger("session"), "propagate", True)
    caplog.set_level(logging.DEBUG, logger="session")

    session.tick(1.0 / 60.0)
    assert not [r for r in caplog.records if r.getMessage().startswith("tick ")]

    session.select_difficulty("easy")
    session.tick(1.0 / 60.0)
    tick_lines = [r for r in caplog.records if r.getMessage().startswith("tick ")]
    assert len(tick_lines) == 1
    assert tick_lines[0].levelno == logging.DEBUG
    assert "contacts=" in tick_lines[0].getMessage()
