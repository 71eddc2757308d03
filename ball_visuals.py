import math

from panda3d.core import Geom, GeomNode, GeomTriangles, GeomVertexData, GeomVertexFormat, GeomVertexWriter
from panda3d.core import Material, NodePath, PointLight, TransparencyAttrib

from layout import GoalState
from world import create_box_edges, create_unit_box_model, size_to_panda, to_panda

GOAL_EDGE_COLOR = (0.62, 1.0, 0.69, 1.0)
BALL_EMISSION = (0.0, 0.88, 1.0, 1.0)
BALL_LIGHT_COLOR = (0.23 * 6.0, 1.0 * 6.0, 0.99 * 6.0, 1.0)
IMPACT_FLASH_MIN_SPEED = 0.6
IMPACT_FLASH_FULL_SPEED = 8.0
IMPACT_FLASH_DECAY = 3.5


def create_sphere_model(lat_segments: int = 16, lon_segments: int = 32) -> NodePath:
    vdata = GeomVertexData("ball-sphere", GeomVertexFormat.getV3n3t2(), Geom.UHStatic)
    v_writer = GeomVertexWriter(vdata, "vertex")
    n_writer = GeomVertexWriter(vdata, "normal")
    uv_writer = GeomVertexWriter(vdata, "texcoord")

    for lat in range(lat_segments + 1):
        theta = math.pi * (lat / lat_segments)
        sin_t = math.sin(theta)
        cos_t = math.cos(theta)
        for lon in range(lon_segments + 1):
            phi = (2.0 * math.pi) * (lon / lon_segments)
            x = sin_t * math.cos(phi)
            y = sin_t * math.sin(phi)
            z = cos_t
            v_writer.addData3(x, y, z)
            n_writer.addData3(x, y, z)
            uv_writer.addData2(lon / lon_segments, 1.0 - (lat / lat_segments))

    tris = GeomTriangles(Geom.UHStatic)
    row = lon_segments + 1
    for lat in range(lat_segments):
        for lon in range(lon_segments):
            a = lat * row + lon
            b = a + 1
            c = (lat + 1) * row + lon
            d = c + 1
            tris.addVertices(a, c, b)
            tris.addVertices(b, c, d)

    geom = Geom(vdata)
    geom.addPrimitive(tris)
    node = GeomNode("ball-sphere")
    node.addGeom(geom)
    return NodePath(node)


def spawn_ball_visual(game) -> None:
    radius = game.session.ball.radius
    game.ball_np = game.maze_view.root.attachNewNode("ball")
    ball_vis = create_sphere_model().copyTo(game.ball_np)
    ball_vis.setScale(radius)
    ball_vis.setColor(1, 1, 1, 1)

    game.ball_material = Material()
    game.ball_material.setEmission(BALL_EMISSION)
    game.ball_material.setAmbient((0.62, 0.68, 0.76, 1.0))
    game.ball_material.setDiffuse((1.0, 1.0, 1.0, 1.0))
    game.ball_material.setShininess(40.0)
    ball_vis.setMaterial(game.ball_material, 1)
    game.ball_visual = ball_vis

    light = PointLight("ball-light")
    light.setColor(BALL_LIGHT_COLOR)
    light.setAttenuation((1.0, 0.0, 1.8 / 12.0))
    game.ball_light_np = game.ball_np.attachNewNode(light)
    game.render.setLight(game.ball_light_np)
    game.ball_flash = 0.0
    sync_ball_visual(game)


def impact_flash_level(speed: float) -> float:
    """0..1 brightness boost for an impact of the given inbound speed."""
    if speed <= IMPACT_FLASH_MIN_SPEED:
        return 0.0
    level = (speed - IMPACT_FLASH_MIN_SPEED) / (IMPACT_FLASH_FULL_SPEED - IMPACT_FLASH_MIN_SPEED)
    return min(1.0, level)


def flash_ball_visual(game, impact_speed: float, dt: float) -> None:
    previous = game.ball_flash
    game.ball_flash = max(previous - IMPACT_FLASH_DECAY * max(0.0, dt), impact_flash_level(impact_speed), 0.0)
    flash = game.ball_flash
    if flash == previous:
        return
    # Applied materials are locked; swap in a copy.
    material = Material(game.ball_material)
    material.setEmission(tuple(c + (1.0 - c) * flash for c in BALL_EMISSION[:3]) + (1.0,))
    game.ball_visual.setMaterial(material, 1)
    game.ball_material = material
    boost = 1.0 + 1.5 * flash
    game.ball_light_np.node().setColor(tuple(c * boost for c in BALL_LIGHT_COLOR[:3]) + (1.0,))



def sync_ball_visual(game) -> None:
    game.ball_np.setPos(to_panda(game.session.ball.position))


def spawn_goal_visual(game) -> None:
    game.goal_np = game.maze_view.root.attachNewNode("goal")
    light = PointLight("goal-light")
    light.setColor((0.62 * 4.8, 1.0 * 4.8, 0.69 * 4.8, 1.0))
    light.setAttenuation((1.0, 0.0, 1.8 / 8.5))
    game.goal_light_np = game.goal_np.attachNewNode(light)
    game.render.setLight(game.goal_light_np)
    game.goal_body_np = None


def rebuild_goal_visual(game, goal: GoalState) -> None:
    if game.goal_body_np is not None and not game.goal_body_np.isEmpty():
        game.goal_body_np.removeNode()
    size = size_to_panda((goal.footprint, goal.height, goal.footprint))
    body = game.goal_np.attachNewNode("goal-body")
    marker = create_unit_box_model("goal-box").copyTo(body)
    marker.setScale(*size)
    marker.setColor(0.62, 1.0, 0.69, 0.12)
    marker.setTransparency(TransparencyAttrib.MAlpha)
    marker.setDepthWrite(False)
    marker.setLightOff(1)
    edges = create_box_edges("goal-edges", size, GOAL_EDGE_COLOR)
    edges.reparentTo(body)
    edges.setLightOff(1)
    game.goal_body_np = body
    game.goal_np.setPos(to_panda(goal.position))
