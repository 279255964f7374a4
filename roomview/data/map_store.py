"""
Map Store - named collection of decoded rooms.

Append-only: a successful run inserts (or overwrites) one entry, nothing is
ever removed. Re-inserting a name replaces the room and makes it the latest.
"""

from __future__ import annotations

import logging
from typing import Dict, Iterator, List, Optional

from roomview.core.definitions import Room

logger = logging.getLogger(__name__)


class MapStore:
    """Rooms keyed by name, remembering which one was inserted last."""

    def __init__(self):
        self._rooms: Dict[str, Room] = {}
        self._latest: Optional[str] = None

    def insert(self, name: str, room: Room) -> None:
        replaced = name in self._rooms
        # Move re-inserted names to the end so names() lists insertion recency
        self._rooms.pop(name, None)
        self._rooms[name] = room
        self._latest = name
        logger.info('Stored room %r (%dx%d)%s', name, room.width, room.height,
                    ' replacing previous entry' if replaced else '')

    def get(self, name: str) -> Optional[Room]:
        return self._rooms.get(name)

    def latest(self) -> Optional[Room]:
        """The most recently inserted room, or None when empty."""
        if self._latest is None:
            return None
        return self._rooms[self._latest]

    def latest_name(self) -> Optional[str]:
        return self._latest

    def names(self) -> List[str]:
        return list(self._rooms)

    def __len__(self) -> int:
        return len(self._rooms)

    def __contains__(self, name: object) -> bool:
        return name in self._rooms

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._rooms))

    def __repr__(self) -> str:
        return f"MapStore(rooms={self.names()!r}, latest={self._latest!r})"
