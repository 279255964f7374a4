import os

import numpy as np
import pygame
import pytest

from roomview.core.definitions import Room
from roomview.visualization.camera import CameraController, Viewport
from roomview.visualization.renderer import (
    BACKGROUND_COLOR,
    FALLBACK_COLOR,
    ORIGIN,
    TILE_SIZE,
    TileLayer,
    color_for,
    draw_tiles,
    make_minimap_surface,
    rasterize_room,
    render_room,
)


@pytest.mark.parametrize("symbol,color", [
    ("#", (255, 0, 0)),
    (".", (204, 204, 204)),
    ("&", (26, 179, 128)),
    ("@", (26, 51, 77)),
    ("*", (0, 0, 0)),
    ("?", (255, 255, 255)),
    ("x", (255, 255, 255)),
])
def test_palette(symbol, color):
    assert color_for(symbol) == color


def test_fallback_is_white():
    assert FALLBACK_COLOR == (255, 255, 255)


def test_two_by_two_room_tiles():
    room = Room([["#", "."], [".", "&"]])
    tiles = render_room(room)
    by_cell = {(t.grid_x, t.grid_y): t for t in tiles}

    assert len(tiles) == 4
    assert by_cell[(0, 0)].color == (255, 0, 0)
    assert by_cell[(1, 0)].color == (204, 204, 204)
    assert by_cell[(0, 1)].color == (204, 204, 204)
    assert by_cell[(1, 1)].color == (26, 179, 128)


def test_tile_positions_use_size_and_origin():
    room = Room([["#", "."], [".", "&"]])
    tiles = render_room(room)
    ox, oy = ORIGIN
    for t in tiles:
        assert t.screen_x == t.grid_x * TILE_SIZE - ox
        assert t.screen_y == t.grid_y * TILE_SIZE - oy
        assert t.size == TILE_SIZE
    assert (tiles[1].screen_x, tiles[1].screen_y) == (8.0 - 400.0, -300.0)


def test_ragged_rows_emit_one_tile_per_cell():
    room = Room([["#"], ["#", ".", "."], []])
    tiles = render_room(room, tile_size=1.0, origin=(0.0, 0.0))
    assert [(t.grid_x, t.grid_y) for t in tiles] == [(0, 0), (0, 1), (1, 1), (2, 1)]


def test_render_does_not_modify_room():
    room = Room([["#", "."]])
    render_room(room)
    assert room.terrain == [["#", "."]]


def test_tile_layer_replace_is_idempotent():
    room = Room([["#", "."], [".", "&"]])
    layer = TileLayer()
    layer.replace("room1", render_room(room))
    first = layer.tiles
    layer.replace("room1", render_room(room))

    assert layer.tiles == first
    assert len(layer) == 4
    assert layer.generation == 2
    assert layer.room_name == "room1"


def test_tile_layer_replace_drops_previous_room():
    layer = TileLayer()
    layer.replace("big", render_room(Room([["#"] * 5] * 5)))
    layer.replace("small", render_room(Room([["."]])))
    assert len(layer) == 1
    assert layer.tiles[0].symbol == "."


def test_tile_layer_bounds_and_clear():
    layer = TileLayer()
    assert layer.bounds() is None
    layer.replace("r", render_room(Room([["#", "#"], ["#"]]), tile_size=2.0, origin=(0.0, 0.0)))
    assert layer.bounds() == (0.0, 0.0, 2.0, 2.0)
    layer.clear()
    assert layer.generation == 2
    assert len(layer) == 0
    assert layer.room_name is None


def test_rasterize_room_pads_short_rows():
    image = rasterize_room(Room([["#"], ["&", "."]]))
    assert image.shape == (2, 2, 3)
    assert image.dtype == np.uint8
    assert tuple(image[0, 0]) == (255, 0, 0)
    assert tuple(image[0, 1]) == BACKGROUND_COLOR
    assert tuple(image[1, 0]) == (26, 179, 128)


# ==========================================
# pygame drawing
# ==========================================

@pytest.fixture
def init_pygame():
    # Use dummy video driver to avoid opening windows in CI
    os.environ.setdefault('SDL_VIDEODRIVER', 'dummy')
    pygame.init()
    yield
    pygame.quit()


def test_draw_tiles_centers_world_origin(init_pygame):
    surface = pygame.Surface((100, 100))
    camera = CameraController(Viewport(0, 0, 100, 100))
    tiles = render_room(Room([["#", "."], [".", "&"]]), origin=(0.0, 0.0))

    drawn = draw_tiles(surface, tiles, camera)
    assert drawn == 4
    assert tuple(surface.get_at((50, 50)))[:3] == (255, 0, 0)


def test_draw_tiles_culls_offscreen(init_pygame):
    surface = pygame.Surface((100, 100))
    camera = CameraController(Viewport(0, 0, 100, 100))
    camera.set_translation(10000, 10000)
    tiles = render_room(Room([["#", "."]]), origin=(0.0, 0.0))
    assert draw_tiles(surface, tiles, camera) == 0


def test_minimap_surface_size(init_pygame):
    surface = make_minimap_surface(Room([["#", ".", "."], ["&"]]), cell_px=3)
    assert surface.get_size() == (9, 6)
    assert tuple(surface.get_at((0, 0)))[:3] == (255, 0, 0)
