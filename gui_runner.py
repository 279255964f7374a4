"""
GUI Runner for roomview (generator map viewer)
==============================================

Interactive viewer that runs an external map generator and draws the room it
prints.

Features:
- Pick the interpreter, generator and script with a file dialog
- Run the generator in the background (or synchronously, for debugging)
- Cancel a running generator
- Switch between every room generated in this session
- Pan with the right mouse button, zoom with the wheel

Controls:
- Right mouse drag: Pan
- Mouse wheel: Zoom (scrolls the room list while it is open)
- R: Reset camera
- ESC: Quit

Environment:
- ROOMVIEW_LOG_LEVEL=DEBUG   verbose logging
- ROOMVIEW_SYNC_RUN=1        block the UI while the generator runs
- ROOMVIEW_RUN_TIMEOUT=N     kill the generator after N seconds
"""

import os
import sys
import logging
from typing import Callable, Iterable, List, Optional

import pygame

from roomview.config import ViewerConfig, configure_logging
from roomview.core.definitions import GeneratorPaths, PathSlot
from roomview.gui.widgets import (
    ButtonWidget,
    DropdownWidget,
    RadioGroupWidget,
    WidgetManager,
)
from roomview.pipeline import AppContext, GenerationPipeline
from roomview.visualization.camera import CameraController, Viewport
from roomview.visualization.renderer import draw_tiles, make_minimap_surface

logger = logging.getLogger(__name__)

FileDialog = Callable[[str], Optional[str]]

PANEL_BG = (32, 32, 44)
TEXT_COLOR = (220, 220, 230)
MUTED_COLOR = (150, 150, 165)
ERROR_COLOR = (255, 110, 110)

_FOLLOW_LATEST = "(latest)"


def _ask_open_file(title: str) -> Optional[str]:
    """Native open-file dialog; returns None when cancelled or unavailable."""
    try:
        import tkinter as tk
        from tkinter import filedialog
    except ImportError:
        logger.warning('tkinter not available; cannot open a file dialog')
        return None

    try:
        root = tk.Tk()
    except tk.TclError as e:
        logger.warning('Cannot open file dialog: %s', e)
        return None
    root.withdraw()
    try:
        filename = filedialog.askopenfilename(
            title=title,
            filetypes=[("All files", "*.*")]
        )
    finally:
        root.destroy()
    return filename or None


class RoomViewerGUI:
    """
    Main window: generator panel on the left, map area on the right.

    Args:
        config: Viewer configuration (defaults to ViewerConfig.from_env())
        paths: Initial generator paths
        file_dialog: ``file_dialog(title) -> path or None``; defaults to a tkinter dialog
    """

    def __init__(self, config: Optional[ViewerConfig] = None,
                 paths: Optional[GeneratorPaths] = None,
                 file_dialog: Optional[FileDialog] = None):
        self.config = config or ViewerConfig.from_env()
        self.file_dialog = file_dialog or _ask_open_file

        pygame.init()
        pygame.display.set_caption(self.config.window_title)
        self.screen = pygame.display.set_mode((self.config.window_width, self.config.window_height))
        self.clock = pygame.time.Clock()
        self.font = pygame.font.Font(None, 20)
        self.title_font = pygame.font.Font(None, 26)

        camera = CameraController(
            Viewport(self.config.panel_width, 0,
                     self.config.window_width - self.config.panel_width,
                     self.config.window_height),
            pan_button=self.config.pan_button,
            zoom_step=self.config.zoom_step,
            min_zoom=self.config.min_zoom,
            max_zoom=self.config.max_zoom,
        )
        self.context = AppContext(config=self.config, paths=paths or GeneratorPaths(), camera=camera)
        self.pipeline = GenerationPipeline(self.context)

        self.active_slot = PathSlot.INTERPRETER
        self.running = True
        self.frame_count = 0
        self._known_rooms: List[str] = []
        self._minimap: Optional[pygame.Surface] = None
        self._minimap_generation = -1

        self._init_control_panel()
        logger.info('Viewer ready (%s run mode)', 'SYNC' if self.config.sync_run else 'ASYNC')

    # ==========================================
    # CONTROL PANEL
    # ==========================================

    def _init_control_panel(self) -> None:
        x = 16
        self.widget_manager = WidgetManager()
        self.slot_radio = self.widget_manager.add_widget(RadioGroupWidget(
            (x, 56), [slot.value for slot in PathSlot],
            selected=0, on_change=self._on_slot_change,
        ))
        self.open_button = self.widget_manager.add_widget(
            ButtonWidget((x, 90), "Open file...", self._pick_file, width=130))
        self.run_button = self.widget_manager.add_widget(
            ButtonWidget((x, 250), "Run generator", self._run_generator, width=130))
        self.cancel_button = self.widget_manager.add_widget(
            ButtonWidget((x + 140, 250), "Cancel", self._cancel_generator, width=100))
        self.room_dropdown = self.widget_manager.add_widget(DropdownWidget(
            (x, 330), "Room", [_FOLLOW_LATEST], selected=0,
            on_select=self._on_room_select, width=self.config.panel_width - 2 * x,
        ))
        self._sync_widgets()

    def _on_slot_change(self, index: int) -> None:
        self.active_slot = list(PathSlot)[index]
        logger.debug('Active path slot: %s', self.active_slot.value)

    def _pick_file(self) -> None:
        path = self.file_dialog(f"Select {self.active_slot.value}")
        if not path:
            logger.debug('File dialog cancelled')
            return
        self.context.paths.set(self.active_slot, path)
        logger.info('%s path set to %s', self.active_slot.value, path)

    def _run_generator(self) -> None:
        if self.config.sync_run:
            self.pipeline.run_sync()
        else:
            self.pipeline.start_async()

    def _cancel_generator(self) -> None:
        if not self.pipeline.cancel():
            logger.debug('Cancel pressed with no run in flight')

    def _on_room_select(self, index: int) -> None:
        name = self.room_dropdown.options[index]
        self.pipeline.select_room(None if name == _FOLLOW_LATEST else name)

    def _sync_widgets(self) -> None:
        """Keep button states and the room list in step with the context."""
        busy = self.pipeline.busy
        self.run_button.enabled = not busy
        self.open_button.enabled = not busy
        self.cancel_button.enabled = busy

        names = self.context.store.names()
        if names != self._known_rooms:
            self._known_rooms = names
            selected = self.context.selected_room or _FOLLOW_LATEST
            self.room_dropdown.set_options([_FOLLOW_LATEST] + names, selected_value=selected)

    # ==========================================
    # EVENTS
    # ==========================================

    def _in_map_area(self, pos) -> bool:
        return pos[0] >= self.config.panel_width

    def _handle_event(self, event) -> None:
        if event.type == pygame.QUIT:
            self.running = False
        elif event.type == pygame.KEYDOWN:
            if event.key == pygame.K_ESCAPE:
                self.running = False
            elif event.key == pygame.K_r:
                self.context.camera.reset()
                logger.debug('Camera reset')
        elif event.type == pygame.MOUSEBUTTONDOWN:
            if self.widget_manager.handle_mouse_down(event.pos, event.button):
                return
            if self._in_map_area(event.pos):
                self.context.camera.handle_event(event)
        elif event.type == pygame.MOUSEBUTTONUP:
            if self.widget_manager.handle_mouse_up(event.pos, event.button):
                return
            # Release the pan even when the pointer left the map area
            self.context.camera.handle_event(event)
        elif event.type == pygame.MOUSEMOTION:
            self.context.camera.handle_event(event)
        elif event.type == pygame.MOUSEWHEEL:
            mouse_pos = pygame.mouse.get_pos()
            if self.widget_manager.handle_scroll(mouse_pos, event.y):
                return
            if self._in_map_area(mouse_pos):
                self.context.camera.handle_event(event)

    def step(self, events: Iterable, dt: float = 0.0) -> None:
        """Process one frame: events, pipeline tick, widget sync and render."""
        for event in events:
            self._handle_event(event)
        self.pipeline.tick()
        self._sync_widgets()
        self.widget_manager.update(pygame.mouse.get_pos(), dt)
        self._render()
        self.frame_count += 1

    def run(self, max_frames: Optional[int] = None) -> None:
        """Main loop; ``max_frames`` bounds it for tests."""
        try:
            while self.running:
                dt = self.clock.tick(self.config.fps) / 1000.0
                self.step(pygame.event.get(), dt)
                pygame.display.flip()
                if max_frames is not None and self.frame_count >= max_frames:
                    break
        finally:
            self.pipeline.cancel()
            pygame.quit()

    # ==========================================
    # RENDERING
    # ==========================================

    def _render(self) -> None:
        self.screen.fill(self.config.background)

        map_rect = pygame.Rect(self.config.panel_width, 0,
                               self.config.window_width - self.config.panel_width,
                               self.config.window_height)
        self.screen.set_clip(map_rect)
        draw_tiles(self.screen, self.context.tiles.tiles, self.context.camera)
        self.screen.set_clip(None)

        self._render_control_panel()
        self._render_status_bar()

    def _blit_text(self, text: str, pos, color=TEXT_COLOR, font=None) -> int:
        surf = (font or self.font).render(text, True, color)
        self.screen.blit(surf, pos)
        return surf.get_height()

    def _render_control_panel(self) -> None:
        panel = pygame.Rect(0, 0, self.config.panel_width, self.config.window_height)
        pygame.draw.rect(self.screen, PANEL_BG, panel)
        self._blit_text("Generator", (16, 16), font=self.title_font)

        y = 134
        paths = self.context.paths
        for slot in PathSlot:
            value = paths.get(slot)
            label = f"{slot.value}: {os.path.basename(value) if value else '-'}"
            self._blit_text(label, (16, y), TEXT_COLOR if value else MUTED_COLOR)
            y += 22
        preview = paths.command_preview()
        if preview:
            self._blit_text(self._elide(preview), (16, y + 4), MUTED_COLOR)

        self._render_minimap((16, 380))
        self.widget_manager.render(self.screen)

    def _render_minimap(self, pos) -> None:
        tiles = self.context.tiles
        # Rebuilt only when the tile layer was redrawn
        if tiles.generation != self._minimap_generation:
            self._minimap_generation = tiles.generation
            room = self.context.store.get(tiles.room_name) if tiles.room_name else None
            self._minimap = None
            if room is not None and room.cell_count:
                surf = make_minimap_surface(room, cell_px=2, background=PANEL_BG)
                max_w = self.config.panel_width - 32
                max_h = self.config.window_height - pos[1] - 90
                w, h = surf.get_size()
                factor = min(1.0, max_w / w, max_h / h)
                if factor < 1.0:
                    surf = pygame.transform.scale(surf, (max(1, int(w * factor)), max(1, int(h * factor))))
                self._minimap = surf
        if self._minimap is not None:
            self.screen.blit(self._minimap, pos)

    def _render_status_bar(self) -> None:
        ctx = self.context
        y = self.config.window_height - 70
        self._blit_text(self._elide(ctx.status), (16, y))
        if ctx.last_error:
            self._blit_text(self._elide(ctx.last_error), (16, y + 22), ERROR_COLOR)
        zoom = f"zoom {1.0 / ctx.camera.scale:.2f}x  tiles {len(ctx.tiles)}"
        self._blit_text(zoom, (self.config.panel_width + 12, self.config.window_height - 28), MUTED_COLOR)

    def _elide(self, text: str) -> str:
        max_width = self.config.panel_width - 32
        if self.font.size(text)[0] <= max_width:
            return text
        while text and self.font.size(text + "...")[0] > max_width:
            text = text[:-1]
        return text + "..."


def main():
    configure_logging()
    config = ViewerConfig.from_env()
    gui = RoomViewerGUI(config)
    gui.run()
    return 0


if __name__ == "__main__":
    sys.exit(main())
