"""
roomview Data Module
====================

Decoding generator output and keeping the decoded rooms.

Components:
- decoder: JSON document -> (name, Room) with explicit key policy
- map_store: Rooms keyed by name, latest-inserted tracking
"""

from roomview.data.decoder import (
    KeyPolicy,
    decode,
    parse_document,
    select_room,
    room_from_content,
)
from roomview.data.map_store import MapStore

__all__ = [
    'KeyPolicy',
    'decode',
    'parse_document',
    'select_room',
    'room_from_content',
    'MapStore',
]
