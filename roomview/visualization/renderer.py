"""
roomview Visualization - Render Stage
=====================================

Turns a room's terrain grid into positioned, colored tiles.

Features:
- Fixed symbol -> color palette with a white fallback
- Pure tile emission (render_room) with no caching across draws
- TileLayer that replaces the previous draw instead of stacking on it
- numpy rasterization of a room for minimaps and quick previews
- pygame drawing through the camera transform

Every draw walks the whole grid: O(rows x cols) per render pass. Rows may be
ragged; each row is indexed only up to its own length.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Dict, Iterable, List, Optional, Tuple

import numpy as np

from roomview.core.definitions import (
    Room,
    SYMBOL_DEEP,
    SYMBOL_FLOOR,
    SYMBOL_VOID,
    SYMBOL_WALL,
    SYMBOL_WATER,
)

logger = logging.getLogger(__name__)

try:
    import pygame
    PYGAME_AVAILABLE = True
except ImportError:
    PYGAME_AVAILABLE = False
    logger.warning("Pygame not available - tile drawing disabled")

if TYPE_CHECKING:
    from roomview.visualization.camera import CameraController


# ==========================================
# PALETTE
# ==========================================

TILE_SIZE: float = 8.0

# Fixed centering offset subtracted from every tile position
ORIGIN: Tuple[float, float] = (400.0, 300.0)

Color = Tuple[int, int, int]

TILE_COLORS: Dict[str, Color] = {
    SYMBOL_WALL: (255, 0, 0),        # red
    SYMBOL_FLOOR: (204, 204, 204),   # light gray
    SYMBOL_WATER: (26, 179, 128),    # teal
    SYMBOL_DEEP: (26, 51, 77),       # dark navy
    SYMBOL_VOID: (0, 0, 0),          # black
}

FALLBACK_COLOR: Color = (255, 255, 255)  # white for any other symbol
BACKGROUND_COLOR: Color = (25, 25, 35)


def color_for(symbol: str) -> Color:
    """Palette color of a terrain symbol."""
    return TILE_COLORS.get(symbol, FALLBACK_COLOR)


# ==========================================
# TILE EMISSION
# ==========================================

@dataclass(frozen=True)
class PositionedTile:
    """
    One square tile ready to draw.

    Attributes:
        screen_x: World X of the tile center (x * size - origin_x)
        screen_y: World Y of the tile center (y * size - origin_y)
        color: RGB fill color
        size: Side length in world units
        grid_x: Terrain column
        grid_y: Terrain row
        symbol: Terrain symbol the tile was made from
    """
    screen_x: float
    screen_y: float
    color: Color
    size: float
    grid_x: int
    grid_y: int
    symbol: str


def render_room(
    room: Room,
    tile_size: float = TILE_SIZE,
    origin: Tuple[float, float] = ORIGIN,
) -> List[PositionedTile]:
    """
    Emit one tile per terrain cell, row-major.

    Args:
        room: Decoded room (not modified)
        tile_size: Tile side length
        origin: Centering offset subtracted from tile positions

    Returns:
        Tiles in row-major order
    """
    origin_x, origin_y = origin
    tiles: List[PositionedTile] = []
    for y, row in enumerate(room.terrain):
        for x, symbol in enumerate(row):
            tiles.append(PositionedTile(
                screen_x=x * tile_size - origin_x,
                screen_y=y * tile_size - origin_y,
                color=color_for(symbol),
                size=tile_size,
                grid_x=x,
                grid_y=y,
                symbol=symbol,
            ))
    return tiles


class TileLayer:
    """
    The tiles currently spawned for display.

    ``replace`` despawns everything from the previous draw before installing
    the new tiles, so drawing the same room twice shows the same tile set.
    """

    def __init__(self):
        self._tiles: List[PositionedTile] = []
        self.room_name: Optional[str] = None
        self.generation: int = 0

    @property
    def tiles(self) -> List[PositionedTile]:
        return list(self._tiles)

    def replace(self, room_name: Optional[str], tiles: Iterable[PositionedTile]) -> None:
        despawned = len(self._tiles)
        self._tiles = list(tiles)
        self.room_name = room_name
        self.generation += 1
        logger.debug('Tile layer redraw #%d: room=%r despawned=%d spawned=%d',
                     self.generation, room_name, despawned, len(self._tiles))

    def clear(self) -> None:
        self._tiles = []
        self.room_name = None
        self.generation += 1

    def bounds(self) -> Optional[Tuple[float, float, float, float]]:
        """(min_x, min_y, max_x, max_y) of tile centers, or None when empty."""
        if not self._tiles:
            return None
        xs = [t.screen_x for t in self._tiles]
        ys = [t.screen_y for t in self._tiles]
        return (min(xs), min(ys), max(xs), max(ys))

    def __len__(self) -> int:
        return len(self._tiles)


# ==========================================
# RASTER / PYGAME DRAWING
# ==========================================

def rasterize_room(room: Room, background: Color = BACKGROUND_COLOR) -> np.ndarray:
    """
    Room as an (height, width, 3) uint8 image, one pixel per cell.

    Cells missing from short rows are filled with ``background``.
    """
    image = np.empty((room.height, room.width, 3), dtype=np.uint8)
    image[:, :] = background
    for y, row in enumerate(room.terrain):
        for x, symbol in enumerate(row):
            image[y, x] = color_for(symbol)
    return image


def make_minimap_surface(room: Room, cell_px: int = 2, background: Color = BACKGROUND_COLOR):
    """pygame Surface of the rasterized room scaled by ``cell_px``."""
    if not PYGAME_AVAILABLE:
        raise RuntimeError("Pygame required for minimap rendering")
    image = rasterize_room(room, background)
    if image.size == 0:
        return pygame.Surface((1, 1))
    if cell_px > 1:
        image = np.repeat(np.repeat(image, cell_px, axis=0), cell_px, axis=1)
    # surfarray is indexed [x][y]
    return pygame.surfarray.make_surface(np.transpose(image, (1, 0, 2)))


def draw_tiles(surface, tiles: Iterable[PositionedTile], camera: 'CameraController') -> int:
    """
    Draw tiles through the camera transform.

    Tiles entirely outside the surface are skipped.

    Returns:
        Number of tiles drawn
    """
    if not PYGAME_AVAILABLE:
        raise RuntimeError("Pygame required for tile drawing")

    view_w, view_h = surface.get_size()
    drawn = 0
    for tile in tiles:
        cx, cy = camera.world_to_screen(tile.screen_x, tile.screen_y)
        side = camera.screen_size(tile.size)
        left = cx - side / 2
        top = cy - side / 2
        if left > view_w or top > view_h or left + side < 0 or top + side < 0:
            continue
        # ceil-ish width so adjacent tiles leave no seams when zoomed in
        rect = pygame.Rect(int(left), int(top), int(side) + 1, int(side) + 1)
        surface.fill(tile.color, rect)
        drawn += 1
    return drawn


__all__ = [
    'TILE_SIZE',
    'ORIGIN',
    'TILE_COLORS',
    'FALLBACK_COLOR',
    'BACKGROUND_COLOR',
    'color_for',
    'PositionedTile',
    'render_room',
    'TileLayer',
    'rasterize_room',
    'make_minimap_surface',
    'draw_tiles',
]
