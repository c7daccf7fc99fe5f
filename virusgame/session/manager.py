"""
Room Manager - Holds one game per room.

LIFECYCLE:
1. First player joins a room id -> room created, game dealt for them
2. Later joins -> JOIN action through the reducer
3. Every intent -> Action -> reducer -> new state stored on the room
4. Last member leaves, or someone closes the room -> room deleted

PERSISTENCE RULES:
- Rooms are in-memory only
- Nothing survives a process restart

The manager never mutates a GameState itself: every change goes
through the Reducer. Callers serialize actions per room with
`Room.lock` (apply and broadcast while holding it).
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
import asyncio
import logging
import random
import time

from ..engine_core.action import Action, ActionResult
from ..engine_core.reducer import Reducer
from ..engine_core.setup import setup_game
from ..engine_core.state import GameState

logger = logging.getLogger(__name__)


class RoomStatus(Enum):
    """State of a room."""
    OPEN = "open"
    CLOSED = "closed"


class RoomNotFoundError(KeyError):
    """No room with that id."""

    def __init__(self, room_id: str):
        super().__init__(room_id)
        self.room_id = room_id

    def __str__(self) -> str:
        return f"Room {self.room_id} not found"


@dataclass
class Room:
    """
    One table: its game state and who is connected to it.

    `members` holds the player ids currently attached to the room.
    Leaving does not remove the player from the game itself.
    """
    room_id: str
    state: GameState
    created_at: float
    status: RoomStatus = RoomStatus.OPEN
    members: set[str] = field(default_factory=set)
    lock: asyncio.Lock = field(default_factory=asyncio.Lock, repr=False)

    def player_id_for(self, player_name: str) -> str | None:
        """Resolve a seated player by name (case-insensitive)."""
        wanted = player_name.strip().lower()
        for player in self.state.players:
            if player.name.lower() == wanted:
                return player.player_id
        return None


class RoomManager:
    """
    Manages rooms.

    Responsibilities:
    - Create rooms on first join
    - Feed actions to the reducer, one room at a time
    - Delete rooms when empty or explicitly closed

    No persistence - rooms are in-memory only.
    """

    def __init__(self, rng: random.Random | None = None):
        self._rooms: dict[str, Room] = {}
        self._rng = rng or random.Random()
        self._reducer = Reducer(rng=self._rng)

    def get_room(self, room_id: str) -> Room | None:
        """Get a room by ID."""
        return self._rooms.get(room_id)

    def require_room(self, room_id: str) -> Room:
        room = self._rooms.get(room_id)
        if room is None:
            raise RoomNotFoundError(room_id)
        return room

    def join(self, room_id: str, player_name: str) -> tuple[Room, str | None]:
        """
        Seat a player, creating the room if needed.

        Returns the room and the player id of `player_name`. Joining
        with a name already seated reattaches to that seat.
        """
        name = player_name.strip()
        if not name:
            raise ValueError("Player name required")

        room = self._rooms.get(room_id)
        if room is None:
            room = Room(
                room_id=room_id,
                state=setup_game([name], rng=self._rng),
                created_at=time.time(),
            )
            self._rooms[room_id] = room
            logger.info("Created room %s with first player %s", room_id, name)
        else:
            self.dispatch(room_id, Action.join(name))

        player_id = room.player_id_for(name)
        if player_id:
            room.members.add(player_id)
        return room, player_id

    def dispatch(self, room_id: str, action: Action) -> ActionResult:
        """
        Apply one action to a room's game.

        The stored state is replaced by the reducer's output, which is
        the same object when the action was rejected.
        """
        room = self.require_room(room_id)
        result = self._reducer.apply(room.state, action)
        room.state = result.new_state

        if result.success:
            logger.info("Room %s applied %s", room_id, action.describe())
        else:
            logger.info(
                "Room %s ignored %s (%s)", room_id, action.describe(), result.error_code
            )
        return result

    def leave(self, room_id: str, player_id: str) -> bool:
        """
        Detach a member from a room.

        Returns True if the room was deleted because it became empty.
        """
        room = self.require_room(room_id)
        room.members.discard(player_id)
        if not room.members:
            self._rooms.pop(room_id, None)
            room.status = RoomStatus.CLOSED
            logger.info("Deleted empty room %s", room_id)
            return True
        return False

    def close_room(self, room_id: str) -> Room:
        """Explicitly close and delete a room."""
        room = self._rooms.pop(room_id, None)
        if room is None:
            raise RoomNotFoundError(room_id)
        room.status = RoomStatus.CLOSED
        room.members.clear()
        logger.info("Closed room %s", room_id)
        return room

    def list_rooms(self) -> list[str]:
        """List IDs of open rooms."""
        return list(self._rooms)
