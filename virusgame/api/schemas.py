"""
Pydantic Schemas for API - Request/response models for OpenAPI.

These models define the exact contract between the table UI and the
room server. The game state is replicated as a full snapshot after
every applied action, never as a diff.

Error Codes:
- ROOM_NOT_FOUND: Room does not exist or was closed
- INVALID_ACTION: Action body could not be parsed
- VALIDATION_ERROR: Request fields are invalid
"""

from enum import Enum
from typing import Optional, Any
from pydantic import BaseModel, Field


# =============================================================================
# Enums
# =============================================================================

class ErrorCode(str, Enum):
    """Structured error codes."""
    ROOM_NOT_FOUND = "ROOM_NOT_FOUND"
    INVALID_ACTION = "INVALID_ACTION"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    INTERNAL_ERROR = "INTERNAL_ERROR"


class ActionTypeName(str, Enum):
    """Action types accepted on the wire."""
    JOIN = "JOIN"
    START = "START"
    PLAY_CARD = "PLAY_CARD"
    DISCARD_CARDS = "DISCARD_CARDS"
    NEXT_TURN = "NEXT_TURN"
    RESET = "RESET"


# =============================================================================
# Snapshot Models
# =============================================================================

class CardInfo(BaseModel):
    """One card. `organ_type` is set for organs, viruses and medicines."""
    card_id: str
    name: str
    text: str
    kind: str = Field(description="organ, virus, medicine, treatment")
    organ_type: Optional[str] = Field(None, description="heart, brain, bone, stomach or wild")
    effect: Optional[str] = Field(None, description="Treatment effect")


class OrganSlotInfo(BaseModel):
    """An organ on the table with its attached cards."""
    organ: CardInfo
    viruses: list[CardInfo] = Field(default_factory=list)
    medicines: list[CardInfo] = Field(default_factory=list)
    is_immunized: bool = False


class PlayerInfo(BaseModel):
    """Player information for display."""
    player_id: str
    name: str
    hand: list[CardInfo] = Field(default_factory=list)
    organs: list[OrganSlotInfo] = Field(default_factory=list)


class GameStateResponse(BaseModel):
    """Full game snapshot."""
    players: list[PlayerInfo] = Field(default_factory=list)
    current_player_id: Optional[str] = None
    deck: list[CardInfo] = Field(default_factory=list)
    discard_pile: list[CardInfo] = Field(default_factory=list)
    winner_id: Optional[str] = None
    phase: str = "playing"
    log: list[str] = Field(default_factory=list)


# =============================================================================
# Requests
# =============================================================================

class JoinRoomRequest(BaseModel):
    """Join (or create) a room."""
    player_name: str = Field(min_length=1, max_length=40)


class LeaveRoomRequest(BaseModel):
    """Detach from a room."""
    player_id: str


class ActionRequest(BaseModel):
    """
    A game action in wire form.

    Only the fields relevant to `type` are read.
    """
    type: ActionTypeName
    player_id: Optional[str] = None
    card_id: Optional[str] = None
    target_player_id: Optional[str] = None
    target_organ_id: Optional[str] = None
    source_organ_id: Optional[str] = None
    card_ids: list[str] = Field(default_factory=list)
    player_name: Optional[str] = None
    player_names: list[str] = Field(default_factory=list)


# =============================================================================
# Responses
# =============================================================================

class JoinRoomResponse(BaseModel):
    """Result of joining a room."""
    room_id: str
    player_id: Optional[str] = Field(None, description="Seat assigned to the caller")
    state: GameStateResponse


class ActionResponse(BaseModel):
    """
    Result of submitting an action.

    `applied=false` means the engine ignored it; `state` is then the
    unchanged snapshot.
    """
    room_id: str
    applied: bool
    error: Optional[str] = None
    error_code: Optional[str] = None
    changes: list[str] = Field(default_factory=list)
    state: GameStateResponse


class RoomInfo(BaseModel):
    """Room summary."""
    room_id: str
    status: str
    members: list[str] = Field(default_factory=list)
    player_count: int = 0
    phase: str = "playing"
    created_at: float


class RoomListResponse(BaseModel):
    """List of open rooms."""
    rooms: list[str]
    count: int


class LeaveRoomResponse(BaseModel):
    room_id: str
    deleted: bool


class CloseRoomResponse(BaseModel):
    room_id: str
    closed: bool = True


class ErrorResponse(BaseModel):
    """Standard error response."""
    error: str
    error_code: ErrorCode
    details: Optional[dict[str, Any]] = None


class HealthResponse(BaseModel):
    """Health check response."""
    status: str = "healthy"
    service: str = "virusgame"
    version: str
    rooms: int = 0
