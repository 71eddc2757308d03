import logging

from panda3d.core import (
    Geom,
    GeomNode,
    GeomTriangles,
    GeomVertexData,
    GeomVertexFormat,
    GeomVertexWriter,
    LineSegs,
    Mat4,
    Material,
    NodePath,
    Point3,
    TransparencyAttrib,
)

from layout import FLOOR, LevelGeometry
from orientation import Orientation

logger = logging.getLogger(__name__)

WALL_COLOR = (0.12, 0.3, 0.61, 0.42)
FLOOR_COLOR = (0.1, 0.2, 0.42, 0.42)
EDGE_COLOR = (0.18, 0.36, 1.0, 0.9)
SHELL_COLOR = (0.12, 0.15, 0.25, 0.08)


def to_panda(vec) -> Point3:
    """Maze-local Y-up coordinates to Panda3D's Z-up render space."""
    return Point3(vec[0], -vec[2], vec[1])


def from_panda(vec) -> tuple[float, float, float]:
    return float(vec[0]), float(vec[2]), -float(vec[1])


def size_to_panda(size) -> tuple[float, float, float]:
    return float(size[0]), float(size[2]), float(size[1])


def frame_matrix(orientation: Orientation, scale: float = 1.0) -> Mat4:
    rows = []
    for axis in ((1.0, 0.0, 0.0), (0.0, 1.0, 0.0), (0.0, 0.0, 1.0)):
        rotated = to_panda(orientation.apply(from_panda(axis)))
        rows.append((rotated[0] * scale, rotated[1] * scale, rotated[2] * scale))
    return Mat4(
        rows[0][0], rows[0][1], rows[0][2], 0.0,
        rows[1][0], rows[1][1], rows[1][2], 0.0,
        rows[2][0], rows[2][1], rows[2][2], 0.0,
        0.0, 0.0, 0.0, 1.0,
    )


def create_unit_box_model(name: str = "unit-box") -> NodePath:
    vdata = GeomVertexData(name, GeomVertexFormat.getV3n3(), Geom.UHStatic)
    v_writer = GeomVertexWriter(vdata, "vertex")
    n_writer = GeomVertexWriter(vdata, "normal")
    tris = GeomTriangles(Geom.UHStatic)

    faces = [
        ((1, 0, 0), (0, 1, 0), (0, 0, 1)),
        ((-1, 0, 0), (0, 0, 1), (0, 1, 0)),
        ((0, 1, 0), (0, 0, 1), (1, 0, 0)),
        ((0, -1, 0), (1, 0, 0), (0, 0, 1)),
        ((0, 0, 1), (1, 0, 0), (0, 1, 0)),
        ((0, 0, -1), (0, 1, 0), (1, 0, 0)),
    ]
    for idx, (normal, u, v) in enumerate(faces):
        for su, sv in ((-1, -1), (1, -1), (1, 1), (-1, 1)):
            v_writer.addData3(
                (normal[0] + u[0] * su + v[0] * sv) * 0.5,
                (normal[1] + u[1] * su + v[1] * sv) * 0.5,
                (normal[2] + u[2] * su + v[2] * sv) * 0.5,
            )
            n_writer.addData3(*normal)
        base = idx * 4
        tris.addVertices(base, base + 1, base + 2)
        tris.addVertices(base, base + 2, base + 3)

    geom = Geom(vdata)
    geom.addPrimitive(tris)
    node = GeomNode(name)
    node.addGeom(geom)
    root = NodePath(node)
    root.setTwoSided(True)
    return root


def create_box_edges(name: str, size: tuple[float, float, float], color=EDGE_COLOR) -> NodePath:
    hx, hy, hz = size[0] * 0.5, size[1] * 0.5, size[2] * 0.5
    corners = [(sx * hx, sy * hy, sz * hz) for sx in (-1, 1) for sy in (-1, 1) for sz in (-1, 1)]
    segs = LineSegs(name)
    segs.setColor(*color)
    segs.setThickness(1.2)
    for i, a in enumerate(corners):
        for b in corners[i + 1:]:
            differing = sum(1 for k in range(3) if a[k] != b[k])
            if differing != 1:
                continue
            segs.moveTo(*a)
            segs.drawTo(*b)
    return NodePath(segs.create())


class MazeView:
    """Panda3D nodes for the cube shell and the current maze.

    Registered as a level listener: every published ``LevelGeometry``
    replaces all maze nodes built for the previous one.
    """

    def __init__(self, parent: NodePath, cube_size: float):
        self.root = parent.attachNewNode("maze-view")
        self.box_model = create_unit_box_model()
        self.maze_np: NodePath | None = None
        self.wall_material = Material()
        self.wall_material.setDiffuse((0.12, 0.3, 0.61, 1.0))
        self.wall_material.setEmission((0.04, 0.08, 0.2, 1.0))
        self.wall_material.setShininess(12.0)
        self._build_shell(cube_size)

    def _build_shell(self, cube_size: float) -> None:
        shell = self.box_model.copyTo(self.root)
        shell.setScale(cube_size)
        shell.setColor(*SHELL_COLOR)
        shell.setTransparency(TransparencyAttrib.MAlpha)
        shell.setDepthWrite(False)
        shell.setBin("transparent", 5)
        edges = create_box_edges("cube-edges", (cube_size, cube_size, cube_size))
        edges.reparentTo(self.root)
        edges.setLightOff(1)

    def clear(self) -> None:
        if self.maze_np is not None and not self.maze_np.isEmpty():
            self.maze_np.removeNode()
        self.maze_np = None

    def __call__(self, geometry: LevelGeometry) -> None:
        self.clear()
        maze_np = self.root.attachNewNode("maze")
        for idx, obstacle in enumerate(geometry.obstacles):
            size = size_to_panda(obstacle.size)
            holder = maze_np.attachNewNode(f"{obstacle.kind}-{idx}")
            holder.setPos(to_panda(obstacle.center))

            box = self.box_model.copyTo(holder)
            box.setScale(*size)
            box.setColor(*(FLOOR_COLOR if obstacle.kind == FLOOR else WALL_COLOR))
            box.setMaterial(self.wall_material, 1)
            box.setTransparency(TransparencyAttrib.MAlpha)
            box.setBin("transparent", 10)

            edges = create_box_edges(f"{obstacle.kind}-edges-{idx}", size)
            edges.reparentTo(holder)
            edges.setLightOff(1)
            edges.setTransparency(TransparencyAttrib.MAlpha)

        self.maze_np = maze_np
        logger.debug("maze view rebuilt with %d obstacle nodes", len(geometry.obstacles))

    def apply_frame(self, orientation: Orientation, scale: float) -> None:
        self.root.setMat(frame_matrix(orientation, scale))
