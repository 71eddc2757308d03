import math

import pytest

from orientation import Orientation, Y_AXIS
from world import frame_matrix, from_panda, size_to_panda, to_panda


def test_y_up_maps_to_panda_z_up():
    assert tuple(to_panda((1.0, 2.0, 3.0))) == pytest.approx((1.0, -3.0, 2.0))
    assert from_panda(to_panda((1.0, 2.0, 3.0))) == pytest.approx((1.0, 2.0, 3.0))
    assert size_to_panda((4.0, 0.25, 1.5)) == (4.0, 1.5, 0.25)


def test_level_frame_is_a_pure_scale():
    mat = frame_matrix(Orientation.identity(), 1.25)

    for row in range(4):
        for col in range(4):
            expected = 0.0
            if row == col:
                expected = 1.0 if row == 3 else 1.25
            assert mat.getCell(row, col) == pytest.approx(expected, abs=1e-6)


def test_frame_matrix_matches_the_physics_rotation():
    orientation = Orientation.from_axis_angle(Y_AXIS, 0.7)
    mat = frame_matrix(orientation)
    local = (0.3, -1.2, 2.0)

    moved = mat.xformPoint(to_panda(local))
    assert from_panda(moved) == pytest.approx(tuple(orientation.apply(local)), abs=1e-5)


def test_half_turn_frame_puts_the_top_floor_below():
    mat = frame_matrix(Orientation.from_axis_angle((1.0, 0.0, 0.0), math.pi))
    top = mat.xformPoint(to_panda((0.0, 2.3, 0.0)))

    assert from_panda(top)[1] == pytest.approx(-2.3, abs=1e-5)
