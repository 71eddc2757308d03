import random

import numpy as np
import pytest

from level import (
    DIFFICULTY_PRESETS,
    LOWER_LEVEL,
    PLAY_LEVEL,
    Cell,
    GridLayout,
    MazeGenerator,
    WallGrid,
    bfs_farthest,
    generate_maze,
    get_difficulty,
    reconstruct_path,
    select_drop_cell,
)


@pytest.mark.parametrize("n", [2, 3, 4, 6])
@pytest.mark.parametrize("seed", range(20))
def test_carve_is_a_spanning_tree(n, seed):
    layout = generate_maze(n, random.Random(seed))
    walls = layout.walls

    assert walls.is_connected()
    assert walls.cleared_count() == n * n - 1
    assert walls.border_intact()
    assert (layout.distances >= 0).all()


@pytest.mark.parametrize("n", [2, 3, 4, 6])
@pytest.mark.parametrize("seed", range(20))
def test_goal_and_drop_follow_the_longest_route(n, seed):
    layout = generate_maze(n, random.Random(seed))
    dist = layout.distances

    assert layout.start_cell.level_index == PLAY_LEVEL
    assert layout.path[0] == layout.start_cell.coords
    assert layout.path[-1] == layout.goal_cell.coords
    assert dist[layout.goal_cell.coords] == dist.max()
    assert len(layout.path) == dist.max() + 1

    # Each consecutive pair on the route shares a cleared wall.
    for a, b in zip(layout.path, layout.path[1:]):
        assert b in layout.walls.open_neighbors(*a)

    if len(layout.path) >= 3:
        assert layout.has_drop
        assert layout.drop_cell.coords in layout.path[1:-1]
        assert layout.drop_cell.level_index == PLAY_LEVEL
        assert layout.goal_cell.level_index == LOWER_LEVEL
    else:
        assert layout.drop_cell is None
        assert layout.goal_cell.level_index == PLAY_LEVEL


def test_same_seed_same_maze():
    a = generate_maze(6, random.Random(99))
    b = generate_maze(6, random.Random(99))

    assert np.array_equal(a.walls.vertical, b.walls.vertical)
    assert np.array_equal(a.walls.horizontal, b.walls.horizontal)
    assert a.start_cell == b.start_cell
    assert a.goal_cell == b.goal_cell


def test_serpentine_carve(serpentine_rng):
    layout = MazeGenerator(serpentine_rng).generate(4)
    t, f = True, False

    assert np.array_equal(layout.walls.vertical, [[t] * 4, [f] * 4, [f] * 4, [f] * 4, [t] * 4])
    assert np.array_equal(
        layout.walls.horizontal,
        [[t, t, f, t, t], [t] * 5, [t] * 5, [t, f, t, f, t]],
    )
    assert layout.start_cell == Cell(0, 0, PLAY_LEVEL)
    assert layout.goal_cell == Cell(0, 3, LOWER_LEVEL)
    assert layout.drop_cell == Cell(0, 2, PLAY_LEVEL)
    assert len(layout.path) == 16
    assert layout.walls.cleared_count() == 15
    assert serpentine_rng.picks == []


def test_equal_distances_keep_the_first_cell_dequeued(tie_break_rng):
    layout = MazeGenerator(tie_break_rng).generate(3)
    t, f = True, False

    assert np.array_equal(layout.walls.vertical, [[t, t, t], [f, t, f], [t, f, t], [t, t, t]])
    assert np.array_equal(layout.walls.horizontal, [[t, f, f, t], [t, t, f, t], [t, f, f, t]])
    assert layout.distances[2, 0] == layout.distances[2, 2] == 7
    assert layout.start_cell == Cell(1, 0, PLAY_LEVEL)
    assert layout.goal_cell == Cell(2, 0, LOWER_LEVEL)
    assert layout.path == ((1, 0), (0, 0), (0, 1), (0, 2), (1, 2), (1, 1), (2, 1), (2, 0))
    assert layout.drop_cell == Cell(1, 2, PLAY_LEVEL)


def test_bfs_reports_unreached_cells():
    walls = WallGrid(3)
    walls.carve((0, 0), (1, 0))
    dist, prev, farthest = bfs_farthest(walls, (0, 0))

    assert dist[1, 0] == 1
    assert dist[2, 2] == -1
    assert farthest == (1, 0)
    assert reconstruct_path(prev, (0, 0), (1, 0)) == ((0, 0), (1, 0))
    assert not walls.is_connected()


def test_carve_rejects_non_adjacent_cells():
    with pytest.raises(ValueError):
        WallGrid(3).carve((0, 0), (2, 0))


def test_wall_grid_rejects_mismatched_matrices():
    with pytest.raises(ValueError):
        WallGrid(3, vertical=np.ones((3, 3), dtype=bool))


def test_short_routes_have_no_drop():
    assert select_drop_cell(()) is None
    assert select_drop_cell(((0, 0), (1, 0))) is None
    assert select_drop_cell(((0, 0), (1, 0), (1, 1))) == Cell(1, 0, PLAY_LEVEL)
    assert select_drop_cell(((0, 0), (1, 0), (1, 1), (0, 1))) == Cell(1, 1, PLAY_LEVEL)


@pytest.mark.parametrize("n", [0, 1, -3, 2.5])
def test_grid_needs_two_cells_per_side(n):
    with pytest.raises(ValueError):
        GridLayout(n)
    with pytest.raises(ValueError):
        generate_maze(n, random.Random(0))


def test_grid_spacing():
    grid = GridLayout(4)

    assert grid.usable_span == pytest.approx(7.8)
    assert grid.cell_size == pytest.approx(1.95)
    assert grid.cell_center(0, 0) == pytest.approx((-2.925, -2.925))
    assert grid.cell_center(3, 3) == pytest.approx((2.925, 2.925))
    assert grid.edge_offset == pytest.approx(-3.9)


def test_difficulty_presets():
    assert {name: (d.cells_per_side, d.scale) for name, d in DIFFICULTY_PRESETS.items()} == {
        "easy": (3, 0.8),
        "medium": (4, 1.0),
        "hard": (6, 1.25),
    }
    assert get_difficulty(" Hard ").cells_per_side == 6
    with pytest.raises(ValueError):
        get_difficulty("nightmare")
