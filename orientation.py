import math

from panda3d.core import QuatD, Vec3D

X_AXIS = Vec3D(1, 0, 0)
Y_AXIS = Vec3D(0, 1, 0)
Z_AXIS = Vec3D(0, 0, 1)


class Orientation:
    """Immutable rotation of the maze frame relative to the world.

    ``apply`` maps maze-local vectors into the world; ``apply_inverse`` maps
    world vectors (such as gravity) into the maze-local frame.
    """

    __slots__ = ("_quat", "_inverse")

    def __init__(self, quat: QuatD | None = None):
        q = QuatD(QuatD.identQuat()) if quat is None else QuatD(quat)
        if q.lengthSquared() < 1e-12:
            q = QuatD(QuatD.identQuat())
        q.normalize()
        self._quat = q
        self._inverse = q.conjugate()

    @classmethod
    def identity(cls) -> "Orientation":
        return cls()

    @classmethod
    def from_axis_angle(cls, axis, angle_rad: float) -> "Orientation":
        axis_n = Vec3D(*axis)
        if axis_n.lengthSquared() < 1e-12:
            return cls()
        axis_n.normalize()
        q = QuatD()
        q.setFromAxisAngleRad(float(angle_rad), axis_n)
        return cls(q)

    @classmethod
    def from_euler_xy(cls, pitch_rad: float, yaw_rad: float) -> "Orientation":
        # Euler XYZ with no roll: local vectors are yawed about Y, then pitched about X.
        yaw = cls.from_axis_angle(Y_AXIS, yaw_rad)
        pitch = cls.from_axis_angle(X_AXIS, pitch_rad)
        return yaw.then(pitch)

    @property
    def quat(self) -> QuatD:
        return QuatD(self._quat)

    def then(self, other: "Orientation") -> "Orientation":
        """Rotation equal to applying ``self`` first and ``other`` second."""
        return Orientation(self._quat * other._quat)

    def apply(self, vec) -> Vec3D:
        return Vec3D(self._quat.xform(Vec3D(*vec)))

    def apply_inverse(self, vec) -> Vec3D:
        return Vec3D(self._inverse.xform(Vec3D(*vec)))

    def __repr__(self) -> str:
        q = self._quat
        return f"Orientation(w={q.getR():.4f}, x={q.getI():.4f}, y={q.getJ():.4f}, z={q.getK():.4f})"


class OrientationProvider:
    """Pointer-drag driven rotation of the cube, plus a slow idle spin."""

    def __init__(self, drag_speed: float = 0.005, idle_spin_rate: float = 0.0008):
        self.drag_speed = float(drag_speed)
        self.idle_spin_rate = float(idle_spin_rate)
        self.pitch = 0.0
        self.yaw = 0.0
        self._cached: Orientation | None = None

    def drag(self, dx_px: float, dy_px: float) -> None:
        if dx_px == 0 and dy_px == 0:
            return
        self.yaw += float(dx_px) * self.drag_speed
        self.pitch += float(dy_px) * self.drag_speed
        self._cached = None

    def idle_spin(self) -> None:
        if self.idle_spin_rate == 0.0:
            return
        self.yaw = math.remainder(self.yaw + self.idle_spin_rate, math.tau)
        self._cached = None

    def set_angles(self, pitch_rad: float, yaw_rad: float) -> None:
        self.pitch = float(pitch_rad)
        self.yaw = float(yaw_rad)
        self._cached = None

    def reset(self) -> None:
        self.set_angles(0.0, 0.0)

    def current_rotation(self) -> Orientation:
        if self._cached is None:
            self._cached = Orientation.from_euler_xy(self.pitch, self.yaw)
        return self._cached
