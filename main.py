import logging
import os
import random
import sys

from direct.showbase.ShowBase import ShowBase
from direct.showbase.ShowBaseGlobal import globalClock
from panda3d.core import AmbientLight, DirectionalLight, TextNode, Vec3, loadPrcFileData

from ball_visuals import flash_ball_visual, rebuild_goal_visual, spawn_ball_visual, spawn_goal_visual, sync_ball_visual
from config import env_flag, env_log_level, load_default_difficulty, load_maze_config, load_physics_config, load_seed
from layout import LevelGeometry
from level import DIFFICULTY_PRESETS
from logging_config import setup_logging
from session import MazeSession
from world import MazeView

logger = logging.getLogger("tiltmaze")

MENU_TEXT = "Tilt Maze\n\n1 - easy    2 - medium    3 - hard\n\nDrag with the left mouse button to tilt the cube"
WIN_TEXT = "Goal reached!\n\nN - new level    R - back to menu"
HUD_TEXT = "N - new level    R - menu"
DIFFICULTY_KEYS = {"1": "easy", "2": "medium", "3": "hard"}


def _configure_display_prc() -> None:
    vsync_on = env_flag("TILTMAZE_VSYNC", True)
    loadPrcFileData("", "window-title Tilt Maze")
    if env_flag("TILTMAZE_FULLSCREEN", False):
        loadPrcFileData("", "fullscreen 1")
    else:
        loadPrcFileData("", "win-size 1280 800")
        loadPrcFileData("", "fullscreen 0")
    loadPrcFileData("", f"sync-video {1 if vsync_on else 0}")
    loadPrcFileData("", "framebuffer-multisample 1")
    loadPrcFileData("", "multisamples 4")


class TiltMaze(ShowBase):
    def __init__(self, session: MazeSession):
        super().__init__()
        self.disableMouse()
        self.setBackgroundColor(0.008, 0.012, 0.04, 1)
        self.session = session

        self.camera.setPos(0, -16, 0)
        self.camera.lookAt(0, 0, 0)
        self.camLens.setFov(55)
        self.camLens.setNearFar(0.1, 100)

        self._setup_lights()
        self.render.setShaderAuto()

        self.maze_view = MazeView(self.render, session.maze_config.cube_size)
        spawn_ball_visual(self)
        spawn_goal_visual(self)
        session.add_level_listener(self.maze_view)
        session.add_level_listener(self._on_level_built)

        self.dragging = False
        self.last_mouse: tuple[float, float] | None = None

        self.menu_np = self._make_text("menu", MENU_TEXT, 0.07, 0.25)
        self.win_np = self._make_text("win", WIN_TEXT, 0.08, 0.15)
        self.hud_np = self._make_text("hud", HUD_TEXT, 0.045, -0.92)
        self._refresh_overlays()

        for key, name in DIFFICULTY_KEYS.items():
            self.accept(key, self._on_difficulty, [name])
        self.accept("n", self._on_new_level)
        self.accept("r", self._on_restart)
        self.accept("mouse1", self._on_drag_start)
        self.accept("mouse1-up", self._on_drag_end)
        self.accept("escape", sys.exit)

        self.taskMgr.add(self.update, "update")

    def _setup_lights(self) -> None:
        ambient = AmbientLight("ambient")
        ambient.setColor((0.125 * 0.55, 0.14 * 0.55, 0.22 * 0.55, 1))
        self.render.setLight(self.render.attachNewNode(ambient))

        fill = DirectionalLight("fill")
        fill.setColor((0.12 * 0.5, 0.23 * 0.5, 1.0 * 0.5, 1))
        fill_np = self.render.attachNewNode(fill)
        fill_np.lookAt(Vec3(0.2, 0.4, -1.0))
        self.render.setLight(fill_np)

    def _make_text(self, name: str, text: str, scale: float, z: float):
        node = TextNode(name)
        node.setText(text)
        node.setAlign(TextNode.ACenter)
        node.setTextColor(0.8, 0.9, 1.0, 1)
        node.setShadow(0.05, 0.05)
        node.setShadowColor(0, 0, 0, 0.8)
        text_np = self.aspect2d.attachNewNode(node)
        text_np.setScale(scale)
        text_np.setPos(0, 0, z)
        return text_np

    def _refresh_overlays(self) -> None:
        running = self.session.running
        won = self.session.has_won
        for node_np, visible in (
            (self.menu_np, not running),
            (self.win_np, running and won),
            (self.hud_np, running and not won),
        ):
            if visible:
                node_np.show()
            else:
                node_np.hide()

    def _on_level_built(self, geometry: LevelGeometry) -> None:
        rebuild_goal_visual(self, geometry.goal)

    def _on_difficulty(self, name: str) -> None:
        if self.session.running:
            return
        self.session.select_difficulty(name)
        sync_ball_visual(self)
        self._refresh_overlays()

    def _on_new_level(self) -> None:
        if not self.session.running:
            return
        self.session.request_new_level()
        sync_ball_visual(self)
        self._refresh_overlays()

    def _on_restart(self) -> None:
        self.session.restart()
        self.dragging = False
        sync_ball_visual(self)
        self._refresh_overlays()

    def _on_drag_start(self) -> None:
        self.dragging = True
        self.last_mouse = self._mouse_pixels()

    def _on_drag_end(self) -> None:
        self.dragging = False
        self.last_mouse = None

    def _mouse_pixels(self) -> tuple[float, float] | None:
        if not self.mouseWatcherNode.hasMouse() or self.win is None:
            return None
        mouse = self.mouseWatcherNode.getMouse()
        width = self.win.getXSize()
        height = self.win.getYSize()
        return (mouse.x + 1.0) * 0.5 * width, (1.0 - mouse.y) * 0.5 * height

    def _consume_drag(self) -> None:
        if not self.dragging:
            return
        current = self._mouse_pixels()
        if current is None:
            self.dragging = False
            self.last_mouse = None
            return
        if self.last_mouse is not None:
            self.session.orientation.drag(current[0] - self.last_mouse[0], current[1] - self.last_mouse[1])
        self.last_mouse = current

    def update(self, task):
        dt = globalClock.getDt()
        self._consume_drag()
        result = self.session.tick(dt)
        self.maze_view.apply_frame(self.session.orientation.current_rotation(), self.session.scale)
        sync_ball_visual(self)
        flash_ball_visual(self, result.strongest_impact, dt)
        if result.won_now:
            self._refresh_overlays()
        return task.cont


def run() -> None:
    setup_logging(env_log_level("TILTMAZE_LOG_LEVEL"), os.getenv("TILTMAZE_LOG_FILE") or None)
    _configure_display_prc()
    seed = load_seed()
    rng = random.Random(seed)
    difficulty = load_default_difficulty()
    if difficulty not in DIFFICULTY_PRESETS:
        logger.warning("Unknown TILTMAZE_DIFFICULTY %r; using medium", difficulty)
        difficulty = "medium"
    session = MazeSession(
        physics=load_physics_config(),
        maze=load_maze_config(),
        rng=rng,
        difficulty=difficulty,
    )
    logger.info("Starting Tilt Maze (seed=%s, preview difficulty=%s)", seed, difficulty)
    app = TiltMaze(session)
    app.run()


if __name__ == "__main__":
    run()
