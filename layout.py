from dataclasses import dataclass, field

from panda3d.core import Point3D, Vec3D

from config import MazeConfig, PhysicsConfig
from level import Cell, GridLayout, MazeLayout, PLAY_LEVEL

FLOOR = "floor"
VERTICAL_WALL = "vertical"
HORIZONTAL_WALL = "horizontal"


@dataclass(frozen=True, eq=False)
class Obstacle:
    center: Point3D
    half_extents: Vec3D
    kind: str = FLOOR

    @classmethod
    def box(cls, x: float, y: float, z: float, w: float, h: float, d: float, kind: str = FLOOR) -> "Obstacle":
        return cls(Point3D(x, y, z), Vec3D(w * 0.5, h * 0.5, d * 0.5), kind)

    @property
    def size(self) -> Vec3D:
        return self.half_extents * 2.0


@dataclass(frozen=True, eq=False)
class GoalState:
    position: Point3D
    capture_radius: float
    footprint: float
    height: float
    floor_thickness: float


@dataclass(frozen=True)
class Containment:
    limit_x: float
    limit_z: float
    bottom_y: float
    top_y: float

    def contains(self, pos, eps: float = 1e-9) -> bool:
        return (
            abs(pos[0]) <= self.limit_x + eps
            and abs(pos[2]) <= self.limit_z + eps
            and self.bottom_y - eps <= pos[1] <= self.top_y + eps
        )


@dataclass(frozen=True, eq=False)
class LevelGeometry:
    grid: GridLayout
    layout: MazeLayout
    obstacles: tuple[Obstacle, ...]
    start_pos: Point3D
    goal_pos: Point3D
    goal: GoalState
    containment: Containment
    floors: tuple[Obstacle, ...] = field(default=())
    walls: tuple[Obstacle, ...] = field(default=())


def cell_position(grid: GridLayout, cell: Cell) -> Point3D:
    x, z = grid.cell_center(cell.ix, cell.iz)
    return Point3D(x, grid.config.level_ys[cell.level_index], z)


def containment_for(grid: GridLayout, physics: PhysicsConfig) -> Containment:
    cfg = grid.config
    r = physics.ball_radius
    outer_half = cfg.cube_size * 0.5 - r - physics.shell_margin
    maze_half = grid.usable_span * 0.5 - r * physics.footprint_inset
    limit = min(outer_half, maze_half)
    bottom_floor_y, top_floor_y = cfg.level_ys
    bottom_y = bottom_floor_y + cfg.floor_thickness * 0.5 - r * physics.vertical_slack
    # The ball rides partly inside the upper slab; the wall panels stop at that floor.
    top_y = top_floor_y + cfg.floor_thickness * 0.5 + r * physics.vertical_slack
    return Containment(limit, limit, bottom_y, top_y)


def goal_state_for(grid: GridLayout, physics: PhysicsConfig, position: Point3D) -> GoalState:
    return GoalState(
        position=Point3D(position),
        capture_radius=grid.cell_size * 0.45,
        footprint=grid.cell_size * 0.9,
        height=grid.config.floor_thickness + physics.ball_radius * 1.1,
        floor_thickness=grid.config.floor_thickness,
    )


def _floor_obstacles(layout: MazeLayout, grid: GridLayout) -> list[Obstacle]:
    cfg: MazeConfig = grid.config
    n = grid.cells_per_side
    cs = grid.cell_size
    drop = layout.drop_cell
    out: list[Obstacle] = []
    for li, y in enumerate(cfg.level_ys):
        for ix in range(n):
            for iz in range(n):
                if li == PLAY_LEVEL and drop is not None and (ix, iz) == drop.coords:
                    continue
                x, z = grid.cell_center(ix, iz)
                out.append(Obstacle.box(x, y, z, cs, cfg.floor_thickness, cs, FLOOR))
    return out


def _wall_obstacles(layout: MazeLayout, grid: GridLayout) -> list[Obstacle]:
    cfg: MazeConfig = grid.config
    n = grid.cells_per_side
    cs = grid.cell_size
    walls = layout.walls
    bottom_floor_y, top_floor_y = cfg.level_ys
    wall_y = (bottom_floor_y + top_floor_y) * 0.5
    wall_h = max(cfg.min_wall_height, top_floor_y - bottom_floor_y + cfg.floor_thickness)
    edge0 = grid.edge_offset
    out: list[Obstacle] = []

    for ix in range(n + 1):
        for iz in range(n):
            if not walls.vertical[ix, iz]:
                continue
            x = edge0 + ix * cs
            z = grid.cell_offset + iz * cs
            out.append(Obstacle.box(x, wall_y, z, cfg.wall_thickness, wall_h, cs, VERTICAL_WALL))

    for ix in range(n):
        for iz in range(n + 1):
            if not walls.horizontal[ix, iz]:
                continue
            x = grid.cell_offset + ix * cs
            z = edge0 + iz * cs
            out.append(Obstacle.box(x, wall_y, z, cs, wall_h, cfg.wall_thickness, HORIZONTAL_WALL))

    return out


def build_level(layout: MazeLayout, grid: GridLayout, physics: PhysicsConfig | None = None) -> LevelGeometry:
    """Place floors, wall panels, start and goal for a generated maze.

    Returns a fresh, immutable geometry set; nothing from a previous level is
    reused, so callers swap the whole result in one assignment.
    """
    physics = physics or PhysicsConfig()
    if layout.walls.n != grid.cells_per_side:
        raise ValueError(f"maze is {layout.walls.n} cells wide but the grid expects {grid.cells_per_side}")
    cfg = grid.config
    r = physics.ball_radius

    floors = tuple(_floor_obstacles(layout, grid))
    walls = tuple(_wall_obstacles(layout, grid))

    start_pos = cell_position(grid, layout.start_cell)
    start_pos.y = cfg.level_ys[layout.start_cell.level_index] + cfg.floor_thickness * 0.5 + r * 0.8

    goal_height = cfg.floor_thickness + r * 1.1
    goal_pos = cell_position(grid, layout.goal_cell)
    goal_pos.y = cfg.level_ys[layout.goal_cell.level_index] + cfg.floor_thickness * 0.5 + goal_height * 0.5
    goal = goal_state_for(grid, physics, goal_pos)

    return LevelGeometry(
        grid=grid,
        layout=layout,
        obstacles=floors + walls,
        start_pos=start_pos,
        goal_pos=Point3D(goal_pos),
        goal=goal,
        containment=containment_for(grid, physics),
        floors=floors,
        walls=walls,
    )

