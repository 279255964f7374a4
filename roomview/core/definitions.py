"""
ROOMVIEW DEFINITIONS
====================
Central constants and type definitions for the generation-result pipeline.

This file is the SINGLE SOURCE OF TRUTH for:
- Terrain symbols and their names
- Generator path slots and the generator command line
- The Room model
- Application states

Import from here instead of duplicating constants across modules.

"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Dict, List, Optional

from roomview.core.errors import MissingPathsError

# ==========================================
# TERRAIN SYMBOLS
# ==========================================
# Generators emit one single-character string per cell.
# Anything not listed here still renders (as the fallback color).

SYMBOL_WALL = '#'
SYMBOL_FLOOR = '.'
SYMBOL_WATER = '&'
SYMBOL_DEEP = '@'
SYMBOL_VOID = '*'

SYMBOL_NAMES: Dict[str, str] = {
    SYMBOL_WALL: 'wall',
    SYMBOL_FLOOR: 'floor',
    SYMBOL_WATER: 'water',
    SYMBOL_DEEP: 'deep',
    SYMBOL_VOID: 'void',
}

# Row-major grid: terrain[y][x]
Terrain = List[List[str]]

# Flag passed before the script argument on the generator command line
SCRIPT_FLAG = "-p"


# ==========================================
# GENERATOR PATHS
# ==========================================

class PathSlot(Enum):
    """Which generator path the next file pick fills."""
    INTERPRETER = "Python"
    GENERATOR = "Binary"
    SCRIPT = "Script"


@dataclass
class GeneratorPaths:
    """
    The three paths needed to run a generator.

    Attributes:
        interpreter: Executable used to launch the generator (e.g. python3)
        generator: Generator program passed as the interpreter's first argument
        script: Script argument passed to the generator after ``-p``
    """
    interpreter: Optional[str] = None
    generator: Optional[str] = None
    script: Optional[str] = None

    def get(self, slot: PathSlot) -> Optional[str]:
        return getattr(self, _SLOT_FIELDS[slot])

    def set(self, slot: PathSlot, value: Optional[str]) -> None:
        setattr(self, _SLOT_FIELDS[slot], value)

    def missing(self) -> List[str]:
        """Names of the slots that are unset or empty."""
        return [slot.value for slot in PathSlot if not self.get(slot)]

    def is_complete(self) -> bool:
        return not self.missing()

    def require(self) -> None:
        """Raise MissingPathsError unless all three paths are set."""
        missing = self.missing()
        if missing:
            raise MissingPathsError(missing)

    def command(self) -> List[str]:
        """argv for the generator run: interpreter generator -p script."""
        self.require()
        return [self.interpreter, self.generator, SCRIPT_FLAG, self.script]

    def command_preview(self) -> Optional[str]:
        """Human-readable command line, or None until generator and script are chosen."""
        if not (self.generator and self.script):
            return None
        interpreter = self.interpreter or "python3"
        return f"{interpreter} {self.generator} {SCRIPT_FLAG} {self.script}"


_SLOT_FIELDS = {
    PathSlot.INTERPRETER: 'interpreter',
    PathSlot.GENERATOR: 'generator',
    PathSlot.SCRIPT: 'script',
}


# ==========================================
# ROOM MODEL
# ==========================================

@dataclass
class Room:
    """
    One decoded generator result.

    Rows may have different lengths; ``width`` is the longest row.
    """
    terrain: Terrain = field(default_factory=list)

    @property
    def height(self) -> int:
        return len(self.terrain)

    @property
    def width(self) -> int:
        return max((len(row) for row in self.terrain), default=0)

    @property
    def cell_count(self) -> int:
        return sum(len(row) for row in self.terrain)

    def symbols(self) -> Dict[str, int]:
        """Histogram of terrain symbols."""
        return dict(Counter(cell for row in self.terrain for cell in row))

    def to_ascii(self) -> str:
        return "\n".join("".join(row) for row in self.terrain)

    def to_dict(self) -> dict:
        """The room in the generator's document shape."""
        return {"layers": {"terrain": [list(row) for row in self.terrain]}}


# ==========================================
# APPLICATION STATE
# ==========================================

class AppState(Enum):
    """Process-wide application state gating the render pass."""
    IDLE = auto()
    DRAW_TERRAIN = auto()
