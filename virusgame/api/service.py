"""
API Service - Business logic layer between API and engine.

The service:
1. Translates API requests to engine actions
2. Manages rooms through the RoomManager
3. Formats snapshots for clients

This layer is framework-agnostic (can be used with FastAPI, Flask, etc.)
"""

from __future__ import annotations
from dataclasses import dataclass, field

from .schemas import (
    ActionRequest,
    ActionResponse,
    CloseRoomResponse,
    ErrorCode,
    ErrorResponse,
    GameStateResponse,
    JoinRoomResponse,
    LeaveRoomResponse,
    RoomInfo,
)
from ..engine_core.action import Action
from ..engine_core.state import GameState
from ..session import Room, RoomManager, RoomNotFoundError


@dataclass
class APIService:
    """
    Main API service for the table UI.

    Usage:
        service = APIService()

        # Sit down at a table
        joined = service.join_room("mesa-1", "Ana")

        # Play
        response = service.submit_action("mesa-1", ActionRequest(...))
    """
    room_manager: RoomManager = field(default_factory=RoomManager)

    def join_room(self, room_id: str, player_name: str) -> JoinRoomResponse:
        """
        Join a room, creating it on first use.
        """
        room, player_id = self.room_manager.join(room_id, player_name)
        return JoinRoomResponse(
            room_id=room_id,
            player_id=player_id,
            state=self.snapshot(room.state),
        )

    def get_state(self, room_id: str) -> GameStateResponse | ErrorResponse:
        """
        Get the current snapshot of a room.
        """
        room = self.room_manager.get_room(room_id)
        if not room:
            return self.room_not_found(room_id)
        return self.snapshot(room.state)

    def get_room(self, room_id: str) -> RoomInfo | ErrorResponse:
        room = self.room_manager.get_room(room_id)
        if not room:
            return self.room_not_found(room_id)
        return self._room_to_info(room)

    def submit_action(self, room_id: str, request: ActionRequest) -> ActionResponse | ErrorResponse:
        """
        Feed one action to a room's engine.

        Rejections are not errors: the response says `applied=false`
        and carries the unchanged snapshot.
        """
        action = Action.from_dict(request.model_dump(mode="json"))
        try:
            result = self.room_manager.dispatch(room_id, action)
        except RoomNotFoundError:
            return self.room_not_found(room_id)

        return ActionResponse(
            room_id=room_id,
            applied=result.success,
            error=result.error,
            error_code=result.error_code,
            changes=result.state_changes,
            state=self.snapshot(result.new_state),
        )

    def leave_room(self, room_id: str, player_id: str) -> LeaveRoomResponse | ErrorResponse:
        try:
            deleted = self.room_manager.leave(room_id, player_id)
        except RoomNotFoundError:
            return self.room_not_found(room_id)
        return LeaveRoomResponse(room_id=room_id, deleted=deleted)

    def close_room(self, room_id: str) -> CloseRoomResponse | ErrorResponse:
        try:
            self.room_manager.close_room(room_id)
        except RoomNotFoundError:
            return self.room_not_found(room_id)
        return CloseRoomResponse(room_id=room_id)

    def list_rooms(self) -> list[str]:
        return self.room_manager.list_rooms()

    # =========================================================================
    # Conversion helpers
    # =========================================================================

    @staticmethod
    def snapshot(state: GameState) -> GameStateResponse:
        """Convert engine state to the wire snapshot."""
        return GameStateResponse.model_validate(state.to_dict())

    @staticmethod
    def _room_to_info(room: Room) -> RoomInfo:
        return RoomInfo(
            room_id=room.room_id,
            status=room.status.value,
            members=sorted(room.members),
            player_count=room.state.num_players,
            phase=room.state.phase.value,
            created_at=room.created_at,
        )

    @staticmethod
    def room_not_found(room_id: str) -> ErrorResponse:
        return ErrorResponse(
            error=f"Room {room_id} not found",
            error_code=ErrorCode.ROOM_NOT_FOUND,
        )
