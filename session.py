from dataclasses import dataclass, field
from enum import Enum
import logging
import random
from typing import Callable

from config import MazeConfig, PhysicsConfig
from layout import LevelGeometry, build_level
from level import Difficulty, GridLayout, MazeGenerator, get_difficulty
from orientation import OrientationProvider
from physics import BallState, Contact, PhysicsIntegrator

logger = logging.getLogger(__name__)


class SessionState(Enum):
    IDLE = "idle"
    RUNNING = "running"


@dataclass
class TickResult:
    contacts: list[Contact] = field(default_factory=list)
    integrated: bool = False
    won_now: bool = False

    @property
    def strongest_impact(self) -> float:
        return max((c.impact_speed for c in self.contacts), default=0.0)


LevelListener = Callable[[LevelGeometry], None]


class MazeSession:
    """Everything one playthrough owns: maze, obstacles, ball, goal and input frame.

    Rebuilds construct the complete new ``LevelGeometry`` before publishing it
    with a single assignment, so a tick never sees a half-built level.
    """

    def __init__(
        self,
        physics: PhysicsConfig | None = None,
        maze: MazeConfig | None = None,
        rng=None,
        difficulty: str = "medium",
        orientation: OrientationProvider | None = None,
    ):
        self.physics_config = physics or PhysicsConfig()
        self.maze_config = maze or MazeConfig()
        self.rng = rng if rng is not None else random.Random()
        self.generator = MazeGenerator(self.rng)
        self.integrator = PhysicsIntegrator(self.physics_config)
        self.orientation = orientation or OrientationProvider()
        self.state = SessionState.IDLE
        self.difficulty: Difficulty = get_difficulty(difficulty)
        self.grid = GridLayout(self.difficulty.cells_per_side, self.maze_config)
        self.scale = 1.0
        self.level_count = 0
        self._listeners: list[LevelListener] = []
        self.geometry: LevelGeometry = self._build_geometry()
        self.ball = BallState(self.geometry.start_pos, radius=self.physics_config.ball_radius)

    @property
    def running(self) -> bool:
        return self.state is SessionState.RUNNING

    @property
    def has_won(self) -> bool:
        return self.ball.has_won

    @property
    def obstacles(self):
        return self.geometry.obstacles

    @property
    def goal(self):
        return self.geometry.goal

    def add_level_listener(self, listener: LevelListener) -> None:
        self._listeners.append(listener)
        listener(self.geometry)

    def remove_level_listener(self, listener: LevelListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _build_geometry(self) -> LevelGeometry:
        layout = self.generator.generate(self.grid.cells_per_side)
        return build_level(layout, self.grid, self.physics_config)

    def _rebuild(self) -> None:
        geometry = self._build_geometry()
        self.geometry = geometry
        self.level_count += 1
        layout = geometry.layout
        logger.info(
            "Level %d built (%s, %dx%d): start=%s goal=%s drop=%s, %d obstacles",
            self.level_count,
            self.difficulty.name,
            self.grid.cells_per_side,
            self.grid.cells_per_side,
            layout.start_cell.coords,
            layout.goal_cell.coords,
            layout.drop_cell.coords if layout.drop_cell else None,
            len(geometry.obstacles),
        )
        for listener in list(self._listeners):
            listener(geometry)

    def reset_level(self) -> None:
        self._rebuild()
        self.ball.reset(self.geometry.start_pos)

    def select_difficulty(self, level: str) -> None:
        difficulty = get_difficulty(level)
        self.difficulty = difficulty
        self.grid = GridLayout(difficulty.cells_per_side, self.maze_config)
        self.scale = difficulty.scale
        self.reset_level()
        self.state = SessionState.RUNNING
        logger.info("Difficulty %s selected (scale %.2f)", difficulty.name, difficulty.scale)

    def request_new_level(self) -> None:
        self.reset_level()

    def restart(self) -> None:
        self.state = SessionState.IDLE
        self.orientation.reset()
        self.scale = 1.0
        self.reset_level()
        logger.info("Session restarted; waiting for a difficulty (last: %s)", self.difficulty.name)

    def tick(self, dt: float) -> TickResult:
        result = TickResult()
        if self.running:
            was_won = self.ball.has_won
            result.contacts = self.integrator.step(
                dt,
                self.ball,
                self.geometry.obstacles,
                self.geometry.containment,
                self.orientation.current_rotation(),
                self.geometry.goal,
            )
            result.integrated = True
            logger.debug(
                "tick dt=%.4f contacts=%d strongest=%.2f pos=%s",
                dt, len(result.contacts), result.strongest_impact, self.ball.position,
            )
            result.won_now = self.ball.has_won and not was_won
            if result.won_now:
                logger.info("Goal reached on level %d", self.level_count)
        self.orientation.idle_spin()
        return result
