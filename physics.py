from dataclasses import dataclass, field
import logging
import math
from typing import Sequence

from panda3d.core import Point3D, Vec3D

from config import PhysicsConfig
from layout import Containment, GoalState, Obstacle
from orientation import Orientation

logger = logging.getLogger(__name__)


@dataclass
class BallState:
    position: Point3D
    velocity: Vec3D = field(default_factory=lambda: Vec3D(0, 0, 0))
    radius: float = 0.45
    has_won: bool = False

    def __post_init__(self) -> None:
        if self.radius <= 0.0:
            raise ValueError("ball radius must be positive")
        self.position = Point3D(*self.position)
        self.velocity = Vec3D(*self.velocity)

    def reset(self, position) -> None:
        self.position = Point3D(*position)
        self.velocity = Vec3D(0, 0, 0)
        self.has_won = False


@dataclass(frozen=True, eq=False)
class Contact:
    obstacle_index: int
    normal: Vec3D
    penetration: float
    impact_speed: float = 0.0


def _clamp(value: float, lo: float, hi: float) -> float:
    return max(lo, min(value, hi))


def sphere_vs_aabb(center, radius: float, obstacle: Obstacle, index: int = -1) -> Contact | None:
    """Contact between a sphere and an axis-aligned box, or None.

    When the sphere centre sits inside the box (the closest point coincides
    with the centre) the push-out axis is the one whose face is nearest.
    """
    c = obstacle.center
    half = obstacle.half_extents
    lx = center[0] - c[0]
    ly = center[1] - c[1]
    lz = center[2] - c[2]

    nx = lx - _clamp(lx, -half[0], half[0])
    ny = ly - _clamp(ly, -half[1], half[1])
    nz = lz - _clamp(lz, -half[2], half[2])
    dist_sq = nx * nx + ny * ny + nz * nz

    if dist_sq == 0.0:
        min_dist = half[0] - abs(lx)
        normal = Vec3D(-1.0 if lx < 0.0 else 1.0, 0, 0)
        face_y = half[1] - abs(ly)
        if face_y < min_dist:
            min_dist = face_y
            normal = Vec3D(0, -1.0 if ly < 0.0 else 1.0, 0)
        face_z = half[2] - abs(lz)
        if face_z < min_dist:
            min_dist = face_z
            normal = Vec3D(0, 0, -1.0 if lz < 0.0 else 1.0)
        if min_dist >= radius:
            return None
        return Contact(index, normal, radius - min_dist)

    if dist_sq >= radius * radius:
        return None

    dist = math.sqrt(dist_sq)
    return Contact(index, Vec3D(nx / dist, ny / dist, nz / dist), radius - dist)


def in_goal_zone(ball: BallState, goal: GoalState) -> bool:
    dx = ball.position[0] - goal.position[0]
    dz = ball.position[2] - goal.position[2]
    if dx * dx + dz * dz >= goal.capture_radius * goal.capture_radius:
        return False
    y = ball.position[1]
    gy = goal.position[1]
    return gy <= y <= gy + goal.floor_thickness + ball.radius * 1.5


def check_goal(ball: BallState, goal: GoalState) -> bool:
    """Latch the win flag when the ball rests on the goal floor.

    Never clears the flag; only ``BallState.reset`` does.
    """
    if ball.has_won:
        return True
    if not in_goal_zone(ball, goal):
        return False
    ball.has_won = True
    ball.velocity = Vec3D(0, 0, 0)
    return True


class PhysicsIntegrator:
    def __init__(self, config: PhysicsConfig | None = None):
        self.config = config or PhysicsConfig()
        self.gravity_world = Vec3D(0, -self.config.gravity, 0)

    def substeps_for(self, dt: float) -> int:
        return max(1, math.ceil(dt / self.config.max_substep))

    def _contain(self, pos: Point3D, vel: Vec3D, bounds: Containment) -> None:
        e = self.config.restitution
        limits = ((-bounds.limit_x, bounds.limit_x), (bounds.bottom_y, bounds.top_y), (-bounds.limit_z, bounds.limit_z))
        for axis, (lo, hi) in enumerate(limits):
            if pos[axis] < lo:
                pos[axis] = lo
                if vel[axis] < 0.0:
                    vel[axis] = vel[axis] * -e
            elif pos[axis] > hi:
                pos[axis] = hi
                if vel[axis] > 0.0:
                    vel[axis] = vel[axis] * -e

    @staticmethod
    def _clamp_into(pos: Point3D, bounds: Containment) -> None:
        pos[0] = _clamp(pos[0], -bounds.limit_x, bounds.limit_x)
        pos[1] = _clamp(pos[1], bounds.bottom_y, bounds.top_y)
        pos[2] = _clamp(pos[2], -bounds.limit_z, bounds.limit_z)

    def step(
        self,
        dt: float,
        ball: BallState,
        obstacles: Sequence[Obstacle],
        containment: Containment,
        orientation: Orientation,
        goal: GoalState | None = None,
    ) -> list[Contact]:
        """Advance the ball by one frame and return the contacts it made."""
        dt = min(float(dt), self.config.max_frame_dt)
        if not dt > 0.0:
            return []

        steps = self.substeps_for(dt)
        step_dt = dt / steps
        e = self.config.restitution
        gravity_local = orientation.apply_inverse(self.gravity_world)

        pos = Point3D(ball.position)
        vel = Vec3D(ball.velocity)
        radius = ball.radius
        contacts: list[Contact] = []

        for _ in range(steps):
            vel = vel + gravity_local * step_dt
            pos = pos + vel * step_dt

            self._contain(pos, vel, containment)

            for idx, obstacle in enumerate(obstacles):
                hit = sphere_vs_aabb(pos, radius, obstacle, idx)
                if hit is None:
                    continue
                normal = hit.normal
                pos = pos + normal * hit.penetration
                v_dot_n = vel.dot(normal)
                impact = 0.0
                if v_dot_n < 0.0:
                    vel = vel - normal * ((1.0 + e) * v_dot_n)
                    impact = -v_dot_n
                contacts.append(Contact(idx, normal, hit.penetration, impact))

            self._clamp_into(pos, containment)

        vel = vel * self.config.damping
        ball.position = pos
        ball.velocity = vel

        if goal is not None and not ball.has_won and check_goal(ball, goal):
            logger.debug("ball reached the goal at %s", ball.position)

        return contacts
