"""
roomview Visualization Module
=============================

Architecture:
------------
- renderer: Terrain -> positioned colored tiles, tile layer, pygame drawing
- camera: Pan/zoom controller and world/screen transforms

Primary Entry Point:
--------------------
    from roomview.visualization import render_room, TileLayer, CameraController

    layer = TileLayer()
    layer.replace(name, render_room(room))
    draw_tiles(screen, layer.tiles, camera)
"""

from roomview.visualization.renderer import (
    TILE_SIZE,
    ORIGIN,
    TILE_COLORS,
    FALLBACK_COLOR,
    BACKGROUND_COLOR,
    color_for,
    PositionedTile,
    render_room,
    TileLayer,
    rasterize_room,
    make_minimap_surface,
    draw_tiles,
)
from roomview.visualization.camera import (
    MIN_ZOOM,
    MAX_ZOOM,
    ZOOM_STEP,
    Viewport,
    CameraState,
    CameraController,
    clamp_zoom,
)

__all__ = [
    # Renderer
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
    # Camera
    'MIN_ZOOM',
    'MAX_ZOOM',
    'ZOOM_STEP',
    'Viewport',
    'CameraState',
    'CameraController',
    'clamp_zoom',
]
