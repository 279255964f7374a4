"""
Viewer configuration and logging setup.

ViewerConfig holds every tunable of the viewer and the generation pipeline.
Defaults can be overridden through environment variables:

    ROOMVIEW_LOG_LEVEL=DEBUG     verbose logging
    ROOMVIEW_SYNC_RUN=1          run the generator on the UI thread (UI freezes)
    ROOMVIEW_RUN_TIMEOUT=30      kill the generator after N seconds
    ROOMVIEW_KEY_POLICY=strict   reject documents with more than one room key
"""

from __future__ import annotations

import os
import logging
from dataclasses import dataclass, replace
from typing import Mapping, Optional, Tuple

logger = logging.getLogger(__name__)

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def configure_logging(level: int = logging.INFO, environ: Optional[Mapping[str, str]] = None) -> None:
    """Configure root logging for an entry point (main.py, gui_runner.py)."""
    environ = os.environ if environ is None else environ
    logging.basicConfig(level=level, format=LOG_FORMAT)
    # Allow debug mode via env var ROOMVIEW_LOG_LEVEL=DEBUG for interactive troubleshooting
    if environ.get('ROOMVIEW_LOG_LEVEL', '').upper() == 'DEBUG':
        logging.getLogger().setLevel(logging.DEBUG)


@dataclass
class ViewerConfig:
    """Configuration for the viewer window and the generation pipeline."""

    # Window settings
    window_width: int = 1280
    window_height: int = 720
    window_title: str = "roomview - generator map viewer"
    fps: int = 60
    panel_width: int = 300

    # Tile rendering
    tile_size: float = 8.0
    origin: Tuple[float, float] = (400.0, 300.0)
    background: Tuple[int, int, int] = (25, 25, 35)

    # Camera
    pan_button: int = 3  # right mouse button
    zoom_step: float = 0.1
    min_zoom: float = 0.1
    max_zoom: float = 5.0

    # Generation
    key_policy: str = "first"
    run_timeout: Optional[float] = None
    sync_run: bool = False

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None, **overrides) -> 'ViewerConfig':
        """Build a config from defaults, environment variables and explicit overrides."""
        environ = os.environ if environ is None else environ
        config = cls()

        if environ.get('ROOMVIEW_SYNC_RUN', '0') == '1':
            config.sync_run = True

        timeout = environ.get('ROOMVIEW_RUN_TIMEOUT', '').strip()
        if timeout:
            try:
                config.run_timeout = float(timeout)
            except ValueError:
                logger.warning('Ignoring invalid ROOMVIEW_RUN_TIMEOUT=%r', timeout)
            else:
                if config.run_timeout <= 0:
                    config.run_timeout = None

        policy = environ.get('ROOMVIEW_KEY_POLICY', '').strip().lower()
        if policy in ('first', 'strict'):
            config.key_policy = policy
        elif policy:
            logger.warning('Ignoring unknown ROOMVIEW_KEY_POLICY=%r (expected first|strict)', policy)

        return replace(config, **overrides) if overrides else config
