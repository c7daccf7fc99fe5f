"""
Session Module - Manages in-memory game rooms.

A room holds one game:
- Created when the first player joins its id
- Holds the current game state
- Applies actions one at a time through the reducer
- Deleted when empty or explicitly closed

Rooms are EPHEMERAL: nothing is persisted.
"""

from .manager import RoomManager, Room, RoomStatus, RoomNotFoundError

__all__ = [
    "RoomManager",
    "Room",
    "RoomStatus",
    "RoomNotFoundError",
]
