"""
API Module - Room server interface.

Exposes the engine via REST + WebSocket:
1. Players join a room by id (first join creates it)
2. Clients submit actions
3. Every applied action is broadcast as a full state snapshot
4. Rooms are deleted when empty or explicitly closed

All state is room-scoped and in-memory.
"""

from .schemas import (
    # Requests
    ActionRequest,
    JoinRoomRequest,
    LeaveRoomRequest,
    # Responses
    ActionResponse,
    JoinRoomResponse,
    LeaveRoomResponse,
    CloseRoomResponse,
    GameStateResponse,
    RoomInfo,
    RoomListResponse,
    ErrorResponse,
    ErrorCode,
    # Shared
    CardInfo,
    OrganSlotInfo,
    PlayerInfo,
)
from .service import APIService
from .app import create_app

__all__ = [
    # Requests
    "ActionRequest",
    "JoinRoomRequest",
    "LeaveRoomRequest",
    # Responses
    "ActionResponse",
    "JoinRoomResponse",
    "LeaveRoomResponse",
    "CloseRoomResponse",
    "GameStateResponse",
    "RoomInfo",
    "RoomListResponse",
    "ErrorResponse",
    "ErrorCode",
    # Shared
    "CardInfo",
    "OrganSlotInfo",
    "PlayerInfo",
    # Service
    "APIService",
    "create_app",
]
