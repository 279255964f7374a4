import logging

import pytest

from roomview.config import ViewerConfig, configure_logging


def test_defaults():
    config = ViewerConfig.from_env({})
    assert config.tile_size == 8.0
    assert config.origin == (400.0, 300.0)
    assert (config.min_zoom, config.max_zoom, config.zoom_step) == (0.1, 5.0, 0.1)
    assert config.pan_button == 3
    assert config.key_policy == "first"
    assert config.run_timeout is None
    assert config.sync_run is False


def test_env_overrides():
    config = ViewerConfig.from_env({
        'ROOMVIEW_SYNC_RUN': '1',
        'ROOMVIEW_RUN_TIMEOUT': '12.5',
        'ROOMVIEW_KEY_POLICY': 'STRICT',
    })
    assert config.sync_run is True
    assert config.run_timeout == 12.5
    assert config.key_policy == "strict"


@pytest.mark.parametrize("value", ["soon", "0", "-3"])
def test_bad_timeout_means_no_timeout(value):
    assert ViewerConfig.from_env({'ROOMVIEW_RUN_TIMEOUT': value}).run_timeout is None


def test_unknown_key_policy_ignored():
    assert ViewerConfig.from_env({'ROOMVIEW_KEY_POLICY': 'random'}).key_policy == "first"


def test_explicit_overrides_win():
    config = ViewerConfig.from_env({'ROOMVIEW_RUN_TIMEOUT': '5'}, run_timeout=1.0, fps=30)
    assert config.run_timeout == 1.0
    assert config.fps == 30


def test_configure_logging_debug_env():
    root = logging.getLogger()
    previous = root.level
    try:
        configure_logging(environ={'ROOMVIEW_LOG_LEVEL': 'debug'})
        assert root.level == logging.DEBUG
    finally:
        root.setLevel(previous)
