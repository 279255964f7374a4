"""
Map Decoder - Generator Output to Room
======================================

Turns the generator's output text into a named Room.

Expected document:

    {
      "<roomName>": {
        "layers": {
          "terrain": [["#", ".", ...], ...]
        }
      }
    }

Failures are reported as DecodeError subclasses, never as crashes:

- ParseError:  text is not well-formed JSON
- ShapeError:  top level is not an object, is empty, or (STRICT policy) has
               more than one key
- SchemaError: ``layers.terrain`` is missing or mistyped, or a cell is not a
               single-character string

Key selection is explicit. KeyPolicy.FIRST takes the first key in document
order (json.loads keeps object order), KeyPolicy.STRICT requires exactly one.
"""

from __future__ import annotations

import json
import logging
from enum import Enum
from typing import Any, List, Tuple

from roomview.core.definitions import Room, Terrain
from roomview.core.errors import ParseError, SchemaError, ShapeError

logger = logging.getLogger(__name__)


class KeyPolicy(Enum):
    """How a room is chosen from the top-level object."""
    FIRST = "first"
    STRICT = "strict"

    @classmethod
    def from_name(cls, name: str) -> 'KeyPolicy':
        try:
            return cls(name.strip().lower())
        except ValueError:
            raise ValueError(f"Unknown key policy {name!r} (expected 'first' or 'strict')") from None


def decode(text: str, policy: KeyPolicy = KeyPolicy.FIRST) -> Tuple[str, Room]:
    """
    Decode generator output into ``(room_name, Room)``.

    Args:
        text: Output text of the generator
        policy: Which top-level key to honor

    Returns:
        The room name and a Room that shares no data with the input

    Raises:
        ParseError, ShapeError, SchemaError
    """
    document = parse_document(text)
    name, content = select_room(document, policy)
    room = room_from_content(name, content)
    logger.debug('Decoded room %r: %d rows, %d cells', name, room.height, room.cell_count)
    return name, room


def parse_document(text: str) -> Any:
    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        raise ParseError(f"Generator output is not valid JSON: {e.msg} "
                         f"(line {e.lineno}, column {e.colno})") from e
    except RecursionError as e:
        raise ParseError("Generator output is nested too deeply to parse") from e


def select_room(document: Any, policy: KeyPolicy = KeyPolicy.FIRST) -> Tuple[str, Any]:
    """Pick the (name, content) pair from the top-level object."""
    if not isinstance(document, dict):
        raise ShapeError(f"Expected a single map key and value, got a JSON {_json_type(document)}")
    if not document:
        raise ShapeError("Expected a single map key and value, got an empty object")
    if policy is KeyPolicy.STRICT and len(document) != 1:
        keys = ', '.join(repr(k) for k in document)
        raise ShapeError(f"Expected exactly one room key, got {len(document)}: {keys}")

    name = next(iter(document))
    if len(document) > 1:
        logger.warning('Document has %d room keys; using the first (%r)', len(document), name)
    return name, document[name]


def room_from_content(name: str, content: Any) -> Room:
    """Validate a room body and build an owned Room from it."""
    if not isinstance(content, dict):
        raise SchemaError(name, name, f"must be an object, got {_json_type(content)}")

    layers = content.get("layers")
    if layers is None:
        raise SchemaError(name, f"{name}.layers", "is missing")
    if not isinstance(layers, dict):
        raise SchemaError(name, f"{name}.layers", f"must be an object, got {_json_type(layers)}")

    if "terrain" not in layers:
        raise SchemaError(name, f"{name}.layers.terrain", "is missing")
    terrain = _terrain_from_json(name, layers["terrain"])
    return Room(terrain=terrain)


def _terrain_from_json(name: str, raw: Any) -> Terrain:
    path = f"{name}.layers.terrain"
    if not isinstance(raw, list):
        raise SchemaError(name, path, f"must be a list of rows, got {_json_type(raw)}")

    terrain: Terrain = []
    for y, row in enumerate(raw):
        if not isinstance(row, list):
            raise SchemaError(name, f"{path}[{y}]", f"must be a list of cells, got {_json_type(row)}")
        cells: List[str] = []
        for x, cell in enumerate(row):
            if not isinstance(cell, str) or len(cell) != 1:
                raise SchemaError(name, f"{path}[{y}][{x}]",
                                  f"must be a single-character string, got {cell!r}")
            cells.append(cell)
        terrain.append(cells)
    return terrain


def _json_type(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, list):
        return "array"
    if isinstance(value, dict):
        return "object"
    return type(value).__name__
