"""
roomview Core Module
====================

Data model and error taxonomy shared by every pipeline stage.

Usage:
    from roomview.core import GeneratorPaths, PathSlot, Room, AppState
    from roomview.core import GenerationError, ParseError
"""

from roomview.core.definitions import (
    SYMBOL_WALL,
    SYMBOL_FLOOR,
    SYMBOL_WATER,
    SYMBOL_DEEP,
    SYMBOL_VOID,
    SYMBOL_NAMES,
    SCRIPT_FLAG,
    Terrain,
    PathSlot,
    GeneratorPaths,
    Room,
    AppState,
)
from roomview.core.errors import (
    GenerationError,
    MissingPathsError,
    ProcessSpawnFailure,
    ProcessExitFailure,
    GenerationTimeout,
    GenerationCancelled,
    TextDecodeFailure,
    DecodeError,
    ParseError,
    ShapeError,
    SchemaError,
    StateTransitionError,
)

__all__ = [
    # Definitions
    'SYMBOL_WALL',
    'SYMBOL_FLOOR',
    'SYMBOL_WATER',
    'SYMBOL_DEEP',
    'SYMBOL_VOID',
    'SYMBOL_NAMES',
    'SCRIPT_FLAG',
    'Terrain',
    'PathSlot',
    'GeneratorPaths',
    'Room',
    'AppState',
    # Errors
    'GenerationError',
    'MissingPathsError',
    'ProcessSpawnFailure',
    'ProcessExitFailure',
    'GenerationTimeout',
    'GenerationCancelled',
    'TextDecodeFailure',
    'DecodeError',
    'ParseError',
    'ShapeError',
    'SchemaError',
    'StateTransitionError',
]
