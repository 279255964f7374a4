"""
Camera System - Pan and Zoom for the Tile View
==============================================

Implements the viewer camera: a pan offset driven by right-button drags and a
zoom scale driven by the mouse wheel.

Key Features:
- Linear pan: pointer deltas accumulate straight into the world offset
- Linear zoom: each wheel notch changes the scale by a fixed step
- Scale clamped to [0.1, 5.0] after every input
- Translation and scale are separate fields; updating one never touches
  the other
- Coordinate transformation utilities

World convention:
----------------
World space is y-up: tile rows with larger indices sit higher on screen. A
drag to the right moves the view left (X inverted); the Y delta is added as
is because screen Y already grows downward.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Tuple

logger = logging.getLogger(__name__)

MIN_ZOOM = 0.1
MAX_ZOOM = 5.0
ZOOM_STEP = 0.1


@dataclass
class Viewport:
    """
    Represents the screen area the map is drawn into.

    Attributes:
        x: Left edge of the map area on screen
        y: Top edge of the map area on screen
        width: Width of the map area in pixels
        height: Height of the map area in pixels
    """
    x: int = 0
    y: int = 0
    width: int = 800
    height: int = 600

    @property
    def center(self) -> Tuple[float, float]:
        return (self.x + self.width / 2, self.y + self.height / 2)


@dataclass
class CameraState:
    """
    Pan offset and zoom scale.

    Attributes:
        pan_x: Camera X position in world units
        pan_y: Camera Y position in world units
        scale: World units per screen pixel (1.0 = no zoom, larger = zoomed out)
    """
    pan_x: float = 0.0
    pan_y: float = 0.0
    scale: float = 1.0


def clamp_zoom(scale: float, min_zoom: float = MIN_ZOOM, max_zoom: float = MAX_ZOOM) -> float:
    return max(min_zoom, min(scale, max_zoom))


class CameraController:
    """
    Camera controller updated once per frame from pointer input.

    Pan and zoom are independent: ``drag`` only writes the translation,
    ``scroll`` only writes the scale.

    Usage:
    ------
        camera = CameraController(Viewport(300, 0, 980, 720))

        # In event loop:
        camera.handle_event(event)

        # In render loop:
        sx, sy = camera.world_to_screen(tile.screen_x, tile.screen_y)
        side = camera.screen_size(tile.size)
    """

    def __init__(
        self,
        viewport: Viewport = None,
        pan_button: int = 3,
        zoom_step: float = ZOOM_STEP,
        min_zoom: float = MIN_ZOOM,
        max_zoom: float = MAX_ZOOM,
    ):
        """
        Initialize the camera.

        Args:
            viewport: Screen area used for the map
            pan_button: Mouse button that pans while held (3 = right)
            zoom_step: Scale change per wheel notch
            min_zoom: Lower scale bound
            max_zoom: Upper scale bound
        """
        if min_zoom <= 0 or min_zoom > max_zoom:
            raise ValueError(f"Invalid zoom bounds [{min_zoom}, {max_zoom}]")
        self.viewport = viewport or Viewport()
        self.pan_button = pan_button
        self.zoom_step = zoom_step
        self.min_zoom = min_zoom
        self.max_zoom = max_zoom
        self.state = CameraState()
        self._pan_held = False

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def translation(self) -> Tuple[float, float]:
        """Camera position in world units."""
        return (self.state.pan_x, self.state.pan_y)

    @property
    def scale(self) -> float:
        return self.state.scale

    @property
    def panning(self) -> bool:
        return self._pan_held

    # ------------------------------------------------------------------
    # Input
    # ------------------------------------------------------------------

    def drag(self, dx: float, dy: float) -> None:
        """
        Accumulate one pointer-motion delta into the pan offset.

        Args:
            dx: Pointer motion in screen pixels (right = positive)
            dy: Pointer motion in screen pixels (down = positive)
        """
        self.state.pan_x -= dx
        self.state.pan_y += dy

    def scroll(self, wheel_y: float) -> float:
        """
        Apply one wheel event to the zoom scale.

        Args:
            wheel_y: Wheel delta (up = positive, zooms in)

        Returns:
            The new, clamped scale
        """
        self.state.scale = clamp_zoom(
            self.state.scale - wheel_y * self.zoom_step, self.min_zoom, self.max_zoom
        )
        return self.state.scale

    def set_pan_held(self, held: bool) -> None:
        self._pan_held = held

    def handle_event(self, event) -> bool:
        """
        Feed one pygame event to the camera.

        MOUSEBUTTONDOWN/UP on the pan button toggle panning, MOUSEMOTION pans
        while it is held, MOUSEWHEEL zooms.

        Returns:
            True if the event was consumed
        """
        import pygame

        if event.type == pygame.MOUSEBUTTONDOWN and getattr(event, 'button', None) == self.pan_button:
            self._pan_held = True
            return True
        if event.type == pygame.MOUSEBUTTONUP and getattr(event, 'button', None) == self.pan_button:
            self._pan_held = False
            return True
        if event.type == pygame.MOUSEMOTION and self._pan_held:
            dx, dy = event.rel
            self.drag(dx, dy)
            return True
        if event.type == pygame.MOUSEWHEEL:
            self.scroll(event.y)
            return True
        return False

    # ------------------------------------------------------------------
    # Direct control
    # ------------------------------------------------------------------

    def set_translation(self, x: float, y: float) -> None:
        self.state.pan_x = float(x)
        self.state.pan_y = float(y)

    def set_scale(self, scale: float) -> None:
        self.state.scale = clamp_zoom(scale, self.min_zoom, self.max_zoom)

    def reset(self) -> None:
        """Back to the initial view: no pan, scale 1.0."""
        self.state = CameraState()
        self._pan_held = False

    def set_viewport_size(self, width: int, height: int) -> None:
        """
        Update viewport dimensions (e.g., on window resize).

        Args:
            width: New viewport width in pixels
            height: New viewport height in pixels
        """
        self.viewport.width = width
        self.viewport.height = height

    # ------------------------------------------------------------------
    # Coordinate transforms
    # ------------------------------------------------------------------

    def world_to_screen(self, world_x: float, world_y: float) -> Tuple[float, float]:
        """
        Convert world coordinates to screen coordinates.

        Args:
            world_x: X position in world units
            world_y: Y position in world units (y-up)

        Returns:
            (screen_x, screen_y) tuple
        """
        cx, cy = self.viewport.center
        screen_x = cx + (world_x - self.state.pan_x) / self.state.scale
        screen_y = cy - (world_y - self.state.pan_y) / self.state.scale
        return (screen_x, screen_y)

    def screen_to_world(self, screen_x: float, screen_y: float) -> Tuple[float, float]:
        """
        Convert screen coordinates to world coordinates.

        Use this for mouse input to determine the hovered world position.
        """
        cx, cy = self.viewport.center
        world_x = (screen_x - cx) * self.state.scale + self.state.pan_x
        world_y = (cy - screen_y) * self.state.scale + self.state.pan_y
        return (world_x, world_y)

    def screen_size(self, world_size: float) -> float:
        """On-screen side length of something ``world_size`` units wide."""
        return world_size / self.state.scale

    def is_visible(self, world_x: float, world_y: float, margin: float = 0) -> bool:
        """
        Check if a world position falls inside the viewport.

        Args:
            world_x: X position in world units
            world_y: Y position in world units
            margin: Extra screen-pixel margin around the viewport
        """
        sx, sy = self.world_to_screen(world_x, world_y)
        vp = self.viewport
        return (vp.x - margin <= sx <= vp.x + vp.width + margin
                and vp.y - margin <= sy <= vp.y + vp.height + margin)


__all__ = [
    'MIN_ZOOM',
    'MAX_ZOOM',
    'ZOOM_STEP',
    'Viewport',
    'CameraState',
    'CameraController',
    'clamp_zoom',
]
