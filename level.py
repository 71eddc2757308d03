from collections import deque
from dataclasses import dataclass, field
import logging
import random

import numpy as np

from config import MazeConfig

logger = logging.getLogger(__name__)

LOWER_LEVEL = 0
PLAY_LEVEL = 1


class MazeGenerationError(RuntimeError):
    """Raised when a generated wall grid leaves cells unreachable."""


@dataclass(frozen=True)
class Cell:
    ix: int
    iz: int
    level_index: int = PLAY_LEVEL

    @property
    def coords(self) -> tuple[int, int]:
        return self.ix, self.iz


@dataclass(frozen=True)
class Difficulty:
    name: str
    cells_per_side: int
    scale: float


DIFFICULTY_PRESETS: dict[str, Difficulty] = {
    "easy": Difficulty("easy", 3, 0.8),
    "medium": Difficulty("medium", 4, 1.0),
    "hard": Difficulty("hard", 6, 1.25),
}


def get_difficulty(name: str) -> Difficulty:
    key = str(name).strip().lower()
    if key not in DIFFICULTY_PRESETS:
        raise ValueError(f"unknown difficulty {name!r}; expected one of {sorted(DIFFICULTY_PRESETS)}")
    return DIFFICULTY_PRESETS[key]


@dataclass(frozen=True)
class GridLayout:
    cells_per_side: int
    config: MazeConfig = field(default_factory=MazeConfig)

    def __post_init__(self) -> None:
        if int(self.cells_per_side) != self.cells_per_side or self.cells_per_side < 2:
            raise ValueError(f"cells_per_side must be an integer >= 2, got {self.cells_per_side!r}")

    @property
    def usable_span(self) -> float:
        return self.config.usable_span

    @property
    def cell_size(self) -> float:
        return self.usable_span / self.cells_per_side

    @property
    def cell_offset(self) -> float:
        return -self.usable_span / 2.0 + self.cell_size / 2.0

    @property
    def edge_offset(self) -> float:
        return self.cell_offset - self.cell_size / 2.0

    def cell_center(self, ix: int, iz: int) -> tuple[float, float]:
        return self.cell_offset + ix * self.cell_size, self.cell_offset + iz * self.cell_size


for _preset in DIFFICULTY_PRESETS.values():
    GridLayout(_preset.cells_per_side)
    if _preset.scale <= 0.0:
        raise ValueError(f"difficulty {_preset.name!r} has a non-positive scale")


class WallGrid:
    """Wall presence for an N x N grid.

    ``vertical[ix, iz]`` separates column ``ix - 1`` from ``ix`` on row ``iz``
    (``ix`` in ``0..N``); ``horizontal[ix, iz]`` separates row ``iz - 1`` from
    ``iz`` on column ``ix`` (``iz`` in ``0..N``). Index 0 and N are the border.
    """

    def __init__(self, n: int, vertical: np.ndarray | None = None, horizontal: np.ndarray | None = None):
        self.n = int(n)
        self.vertical = np.ones((self.n + 1, self.n), dtype=bool) if vertical is None else np.array(vertical, dtype=bool)
        self.horizontal = np.ones((self.n, self.n + 1), dtype=bool) if horizontal is None else np.array(horizontal, dtype=bool)
        if self.vertical.shape != (self.n + 1, self.n) or self.horizontal.shape != (self.n, self.n + 1):
            raise ValueError("wall matrices do not match the grid size")

    def carve(self, a: tuple[int, int], b: tuple[int, int]) -> None:
        (x, z), (nx, nz) = a, b
        if nx == x + 1 and nz == z:
            self.vertical[x + 1, z] = False
        elif nx == x - 1 and nz == z:
            self.vertical[x, z] = False
        elif nz == z + 1 and nx == x:
            self.horizontal[x, z + 1] = False
        elif nz == z - 1 and nx == x:
            self.horizontal[x, z] = False
        else:
            raise ValueError(f"cells {a} and {b} are not adjacent")

    def open_neighbors(self, ix: int, iz: int) -> list[tuple[int, int]]:
        n = self.n
        out: list[tuple[int, int]] = []
        if ix > 0 and not self.vertical[ix, iz]:
            out.append((ix - 1, iz))
        if ix < n - 1 and not self.vertical[ix + 1, iz]:
            out.append((ix + 1, iz))
        if iz > 0 and not self.horizontal[ix, iz]:
            out.append((ix, iz - 1))
        if iz < n - 1 and not self.horizontal[ix, iz + 1]:
            out.append((ix, iz + 1))
        return out

    def cleared_count(self) -> int:
        return int(np.count_nonzero(~self.vertical) + np.count_nonzero(~self.horizontal))

    def border_intact(self) -> bool:
        return bool(
            self.vertical[0].all()
            and self.vertical[self.n].all()
            and self.horizontal[:, 0].all()
            and self.horizontal[:, self.n].all()
        )

    def distances_from(self, start: tuple[int, int]) -> np.ndarray:
        dist, _, _ = bfs_farthest(self, start)
        return dist

    def is_connected(self) -> bool:
        return bool((self.distances_from((0, 0)) >= 0).all())


@dataclass(frozen=True, eq=False)
class MazeLayout:
    start_cell: Cell
    goal_cell: Cell
    drop_cell: Cell | None
    walls: WallGrid
    path: tuple[tuple[int, int], ...] = ()
    distances: np.ndarray | None = None

    @property
    def has_drop(self) -> bool:
        return self.drop_cell is not None


def bfs_farthest(
    walls: WallGrid, start: tuple[int, int]
) -> tuple[np.ndarray, dict[tuple[int, int], tuple[int, int]], tuple[int, int]]:
    """Breadth-first search over cleared walls.

    Returns the distance matrix (-1 for unreached cells), the predecessor map
    and the farthest cell. Equal distances never replace the current farthest
    cell, so the first cell dequeued at the maximum distance wins.
    """
    n = walls.n
    dist = np.full((n, n), -1, dtype=np.int64)
    prev: dict[tuple[int, int], tuple[int, int]] = {}
    sx, sz = start
    dist[sx, sz] = 0
    queue: deque[tuple[int, int]] = deque([start])
    farthest = start

    while queue:
        x, z = queue.popleft()
        d = int(dist[x, z])
        if d > dist[farthest]:
            farthest = (x, z)
        for nx, nz in walls.open_neighbors(x, z):
            if dist[nx, nz] != -1:
                continue
            dist[nx, nz] = d + 1
            prev[(nx, nz)] = (x, z)
            queue.append((nx, nz))

    return dist, prev, farthest


def reconstruct_path(
    prev: dict[tuple[int, int], tuple[int, int]], start: tuple[int, int], end: tuple[int, int]
) -> tuple[tuple[int, int], ...]:
    path = [end]
    current = end
    while current != start:
        if current not in prev:
            raise MazeGenerationError(f"no recorded route from {start} to {end}")
        current = prev[current]
        path.append(current)
    path.reverse()
    return tuple(path)


def select_drop_cell(path: tuple[tuple[int, int], ...]) -> Cell | None:
    if len(path) < 3:
        return None
    ix, iz = path[len(path) // 2]
    return Cell(ix, iz, PLAY_LEVEL)


class MazeGenerator:
    def __init__(self, rng=None):
        self.rng = rng if rng is not None else random.Random()

    def _unvisited_neighbors(self, visited: np.ndarray, x: int, z: int) -> list[tuple[int, int]]:
        n = visited.shape[0]
        out: list[tuple[int, int]] = []
        if x > 0 and not visited[x - 1, z]:
            out.append((x - 1, z))
        if x < n - 1 and not visited[x + 1, z]:
            out.append((x + 1, z))
        if z > 0 and not visited[x, z - 1]:
            out.append((x, z - 1))
        if z < n - 1 and not visited[x, z + 1]:
            out.append((x, z + 1))
        return out

    def carve(self, n: int) -> tuple[WallGrid, tuple[int, int]]:
        walls = WallGrid(n)
        visited = np.zeros((n, n), dtype=bool)
        start = (self.rng.randrange(n), self.rng.randrange(n))
        visited[start] = True
        stack: list[tuple[int, int]] = [start]

        while stack:
            x, z = stack[-1]
            unvisited = self._unvisited_neighbors(visited, x, z)
            if not unvisited:
                stack.pop()
                continue
            nxt = unvisited[self.rng.randrange(len(unvisited))]
            walls.carve((x, z), nxt)
            visited[nxt] = True
            stack.append(nxt)

        return walls, start

    def generate(self, cells_per_side: int) -> MazeLayout:
        n = int(GridLayout(cells_per_side).cells_per_side)
        walls, start = self.carve(n)

        dist, prev, farthest = bfs_farthest(walls, start)
        if (dist < 0).any():
            unreached = [tuple(int(v) for v in idx) for idx in np.argwhere(dist < 0)]
            raise MazeGenerationError(f"carve left {len(unreached)} cell(s) unreachable, e.g. {unreached[0]}")

        path = reconstruct_path(prev, start, farthest)
        drop_cell = select_drop_cell(path)
        goal_level = LOWER_LEVEL if drop_cell is not None else PLAY_LEVEL

        layout = MazeLayout(
            start_cell=Cell(start[0], start[1], PLAY_LEVEL),
            goal_cell=Cell(farthest[0], farthest[1], goal_level),
            drop_cell=drop_cell,
            walls=walls,
            path=path,
            distances=dist,
        )
        logger.debug(
            "carved %dx%d maze: start=%s goal=%s drop=%s path=%d",
            n, n, layout.start_cell.coords, layout.goal_cell.coords,
            drop_cell.coords if drop_cell else None, len(path),
        )
        return layout


def generate_maze(cells_per_side: int, rng=None) -> MazeLayout:
    return MazeGenerator(rng).generate(cells_per_side)
