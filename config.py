from dataclasses import dataclass
import logging
import math
import os


def env_flag(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return float(raw)


def env_int(name: str, default: int | None) -> int | None:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return int(raw)


def env_log_level(name: str, default: int = logging.INFO) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    level = logging.getLevelName(raw.strip().upper())
    if not isinstance(level, int):
        raise ValueError(f"{name}: unknown log level {raw!r}")
    return level


@dataclass(frozen=True)
class MazeConfig:
    """Fixed dimensions of the cube and the maze slabs, in maze-local units."""

    cube_size: float = 10.0
    inner_margin: float = 0.7
    footprint_margin: float = 0.8
    level_inset: float = 2.0
    floor_thickness: float = 0.25
    wall_thickness: float = 0.06
    min_wall_height: float = 0.5

    def __post_init__(self) -> None:
        for name in ("cube_size", "floor_thickness", "wall_thickness", "min_wall_height"):
            if getattr(self, name) <= 0.0:
                raise ValueError(f"{name} must be positive")
        if self.usable_span <= 0.0:
            raise ValueError("cube is too small for its margins")
        if self.level_ys[1] <= self.level_ys[0]:
            raise ValueError("level_inset leaves no room between the two levels")

    @property
    def inner(self) -> float:
        return self.cube_size * 0.5 - self.inner_margin

    @property
    def usable_span(self) -> float:
        return self.inner * 2.0 - self.footprint_margin

    @property
    def level_ys(self) -> tuple[float, float]:
        return (-self.inner + self.level_inset, self.inner - self.level_inset)


@dataclass(frozen=True)
class PhysicsConfig:
    gravity: float = 8.0
    restitution: float = 0.35
    damping: float = 0.995
    ball_radius: float = 0.45
    max_frame_dt: float = 1.0 / 30.0
    max_substep: float = 1.0 / 120.0
    shell_margin: float = 0.18
    footprint_inset: float = 0.3
    vertical_slack: float = 0.4

    def __post_init__(self) -> None:
        if not math.isfinite(self.gravity) or self.gravity < 0.0:
            raise ValueError("gravity must be a finite, non-negative magnitude")
        if not 0.0 <= self.restitution <= 1.0:
            raise ValueError("restitution must lie in [0, 1]")
        if not 0.0 < self.damping <= 1.0:
            raise ValueError("damping must lie in (0, 1]")
        if self.ball_radius <= 0.0:
            raise ValueError("ball_radius must be positive")
        if self.max_frame_dt <= 0.0 or self.max_substep <= 0.0:
            raise ValueError("time steps must be positive")


def load_maze_config() -> MazeConfig:
    return MazeConfig()


def load_physics_config() -> PhysicsConfig:
    defaults = PhysicsConfig()
    return PhysicsConfig(
        gravity=env_float("TILTMAZE_GRAVITY", defaults.gravity),
        restitution=env_float("TILTMAZE_RESTITUTION", defaults.restitution),
        damping=env_float("TILTMAZE_DAMPING", defaults.damping),
    )


def load_seed() -> int | None:
    return env_int("TILTMAZE_SEED", None)


def load_default_difficulty() -> str:
    return os.getenv("TILTMAZE_DIFFICULTY", "medium").strip().lower() or "medium"
