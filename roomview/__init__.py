"""
roomview Source Package
=======================

Runs an external map generator and visualizes the room it produces as a
colored tile grid with a pannable, zoomable camera.

Submodules:
- core: Data model (GeneratorPaths, Room, AppState) and the error taxonomy
- generation: Process runner and the cancellable asynchronous generation task
- data: JSON room decoder and the named map store
- pipeline: Application state machine and the generation pipeline context
- visualization: Tile render stage and camera controller
- gui: Interactive pygame widgets for the viewer panel

Pipeline:
    paths -> run generator -> decode output -> store room -> DRAW_TERRAIN
          -> render tiles -> IDLE
"""

__version__ = "0.3.0"
__author__ = "roomview contributors"

__all__ = ['core', 'generation', 'data', 'pipeline', 'visualization', 'gui', 'config']
