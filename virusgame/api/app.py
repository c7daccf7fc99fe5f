"""
FastAPI Application - Room server for Virus! tables.

Endpoints:
    GET    /api/v1/rooms                    List open rooms
    GET    /api/v1/rooms/{id}               Room summary
    POST   /api/v1/rooms/{id}/join          Join (creates the room on first join)
    GET    /api/v1/rooms/{id}/state         Full game snapshot
    POST   /api/v1/rooms/{id}/actions       Submit a game action
    POST   /api/v1/rooms/{id}/leave         Leave the room
    DELETE /api/v1/rooms/{id}               Close the room
    WS     /api/v1/rooms/{id}/ws            Real-time snapshots

Every room applies its actions one at a time: the action is reduced and
the resulting snapshot broadcast while the room lock is held.

All responses are JSON with explicit Pydantic schemas.
"""

from typing import Optional, Union
import json
import logging
import os

from fastapi import FastAPI, WebSocket, WebSocketDisconnect
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .. import __version__
from .service import APIService
from .schemas import (
    ActionRequest,
    ActionResponse,
    CloseRoomResponse,
    ErrorCode,
    ErrorResponse,
    GameStateResponse,
    HealthResponse,
    JoinRoomRequest,
    JoinRoomResponse,
    LeaveRoomRequest,
    LeaveRoomResponse,
    RoomInfo,
    RoomListResponse,
)

logger = logging.getLogger(__name__)

# Environment configuration
VIRUS_ENV = os.getenv("VIRUS_ENV", "development")
ALLOWED_ORIGINS = [
    origin.strip()
    for origin in os.getenv("ALLOWED_ORIGINS", "http://localhost:3000").split(",")
    if origin.strip()
]


def create_app(service: Optional[APIService] = None) -> FastAPI:
    """
    Create the FastAPI application.

    Args:
        service: Optional APIService instance (creates new if not provided)

    Returns:
        FastAPI application instance
    """
    app = FastAPI(
        title="Virus! Room Server",
        description="""
Multiplayer rooms for the Virus! card game.

## Flow

1. `POST /join` seats a player (the first join creates the room and deals)
2. Clients open the room WebSocket and receive `state_update` snapshots
3. Each player intent is sent as an action (`PLAY_CARD`, `DISCARD_CARDS`, ...)
4. The engine applies it; illegal moves leave the state unchanged

## Error Codes

| Code | Description |
|------|-------------|
| `ROOM_NOT_FOUND` | Room does not exist or was closed |
| `INVALID_ACTION` | Action message could not be parsed |
| `VALIDATION_ERROR` | Request fields are invalid |
        """,
        version=__version__,
        docs_url="/api/docs",
        redoc_url="/api/redoc",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    api_service = service or APIService()
    app.state.api_service = api_service

    # WebSocket connections per room
    ws_connections: dict[str, list[WebSocket]] = {}

    # Open sockets attached to each seat, keyed by (room_id, player_id)
    seat_sockets: dict[tuple[str, str], int] = {}

    # =========================================================================
    # Helpers
    # =========================================================================

    def make_error_response(
        error_code: ErrorCode,
        message: str,
        status_code: int = 400,
        details: Optional[dict] = None,
    ) -> JSONResponse:
        """Create a standardized error response."""
        return JSONResponse(
            status_code=status_code,
            content=ErrorResponse(
                error=message,
                error_code=error_code,
                details=details,
            ).model_dump(mode="json"),
        )

    def error_to_response(error: ErrorResponse) -> JSONResponse:
        status_code = 404 if error.error_code == ErrorCode.ROOM_NOT_FOUND else 400
        return make_error_response(error.error_code, error.error, status_code, error.details)

    async def broadcast_to_room(room_id: str, message: dict):
        """Broadcast a message to all WebSocket connections for a room."""
        if room_id in ws_connections:
            dead_connections = []
            for ws in ws_connections[room_id]:
                try:
                    await ws.send_json(message)
                except Exception:
                    dead_connections.append(ws)
            for ws in dead_connections:
                ws_connections[room_id].remove(ws)

    async def broadcast_state(room_id: str, state: GameStateResponse):
        await broadcast_to_room(room_id, {
            "type": "state_update",
            "payload": state.model_dump(mode="json"),
        })

    async def join_and_broadcast(room_id: str, player_name: str) -> JoinRoomResponse:
        room = api_service.room_manager.get_room(room_id)
        if room is None:
            response = api_service.join_room(room_id, player_name)
        else:
            async with room.lock:
                response = api_service.join_room(room_id, player_name)
        await broadcast_state(room_id, response.state)
        return response

    async def act_and_broadcast(
        room_id: str, request: ActionRequest
    ) -> Union[ActionResponse, ErrorResponse]:
        """Reduce one action and broadcast while holding the room lock."""
        room = api_service.room_manager.get_room(room_id)
        if room is None:
            return api_service.room_not_found(room_id)

        async with room.lock:
            response = api_service.submit_action(room_id, request)
            if isinstance(response, ActionResponse) and response.applied:
                await broadcast_state(room_id, response.state)
        return response

    async def leave_and_broadcast(room_id: str, player_id: str) -> Union[LeaveRoomResponse, ErrorResponse]:
        response = api_service.leave_room(room_id, player_id)
        if isinstance(response, LeaveRoomResponse) and not response.deleted:
            state = api_service.get_state(room_id)
            if isinstance(state, GameStateResponse):
                await broadcast_state(room_id, state)
        return response

    def attach_seat(room_id: str, player_id: str):
        key = (room_id, player_id)
        seat_sockets[key] = seat_sockets.get(key, 0) + 1

    async def detach_seat(room_id: str, player_id: str):
        """Leave the room only when the last socket on this seat goes away."""
        key = (room_id, player_id)
        remaining = seat_sockets.get(key, 1) - 1
        if remaining > 0:
            seat_sockets[key] = remaining
            return
        seat_sockets.pop(key, None)
        if api_service.room_manager.get_room(room_id):
            await leave_and_broadcast(room_id, player_id)

    async def close_and_broadcast(room_id: str) -> Union[CloseRoomResponse, ErrorResponse]:
        response = api_service.close_room(room_id)
        if isinstance(response, CloseRoomResponse):
            await broadcast_to_room(room_id, {"type": "room_closed", "payload": {"room_id": room_id}})
        return response

    # =========================================================================
    # Room Endpoints
    # =========================================================================

    @app.get(
        "/api/v1/rooms",
        response_model=RoomListResponse,
        tags=["Rooms"],
        summary="List open rooms",
    )
    async def list_rooms() -> RoomListResponse:
        rooms = api_service.list_rooms()
        return RoomListResponse(rooms=rooms, count=len(rooms))

    @app.get(
        "/api/v1/rooms/{room_id}",
        response_model=RoomInfo,
        responses={404: {"model": ErrorResponse}},
        tags=["Rooms"],
        summary="Get room summary",
    )
    async def get_room(room_id: str) -> Union[RoomInfo, JSONResponse]:
        response = api_service.get_room(room_id)
        if isinstance(response, ErrorResponse):
            return error_to_response(response)
        return response

    @app.post(
        "/api/v1/rooms/{room_id}/join",
        response_model=JoinRoomResponse,
        responses={400: {"model": ErrorResponse}},
        tags=["Rooms"],
        summary="Join a room, creating it on first join",
    )
    async def join_room(room_id: str, body: JoinRoomRequest) -> Union[JoinRoomResponse, JSONResponse]:
        """
        Seat a player at the table.

        The first player to join a room id creates it and is dealt in.
        Players joining later start with an empty hand and are dealt
        cards when the turn comes around to them. Joining with a name
        that is already seated returns that seat.
        """
        try:
            return await join_and_broadcast(room_id, body.player_name)
        except ValueError as e:
            return make_error_response(ErrorCode.VALIDATION_ERROR, str(e))

    @app.get(
        "/api/v1/rooms/{room_id}/state",
        response_model=GameStateResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Game"],
        summary="Get the full game snapshot",
    )
    async def get_state(room_id: str) -> Union[GameStateResponse, JSONResponse]:
        response = api_service.get_state(room_id)
        if isinstance(response, ErrorResponse):
            return error_to_response(response)
        return response

    @app.post(
        "/api/v1/rooms/{room_id}/actions",
        response_model=ActionResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Game"],
        summary="Submit a game action",
    )
    async def submit_action(room_id: str, body: ActionRequest) -> Union[ActionResponse, JSONResponse]:
        """
        Apply one action to the room's game.

        **Request Body:**
        ```json
        {"type": "PLAY_CARD", "player_id": "p_0", "card_id": "c_12", "target_player_id": "p_1"}
        ```

        An illegal move is not an HTTP error: the response has
        `applied=false` and the unchanged state.
        """
        response = await act_and_broadcast(room_id, body)
        if isinstance(response, ErrorResponse):
            return error_to_response(response)
        return response

    @app.post(
        "/api/v1/rooms/{room_id}/leave",
        response_model=LeaveRoomResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Rooms"],
        summary="Leave a room",
    )
    async def leave_room(room_id: str, body: LeaveRoomRequest) -> Union[LeaveRoomResponse, JSONResponse]:
        """Detach from a room. The room is deleted when its last member leaves."""
        response = await leave_and_broadcast(room_id, body.player_id)
        if isinstance(response, ErrorResponse):
            return error_to_response(response)
        return response

    @app.delete(
        "/api/v1/rooms/{room_id}",
        response_model=CloseRoomResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Rooms"],
        summary="Close a room",
    )
    async def close_room(room_id: str) -> Union[CloseRoomResponse, JSONResponse]:
        response = await close_and_broadcast(room_id)
        if isinstance(response, ErrorResponse):
            return error_to_response(response)
        return response

    # =========================================================================
    # WebSocket Endpoint
    # =========================================================================

    @app.websocket("/api/v1/rooms/{room_id}/ws")
    async def websocket_endpoint(websocket: WebSocket, room_id: str):
        """
        WebSocket for real-time updates.

        Messages from server:
        - state_update: Game state changed (full snapshot)
        - joined: Seat assigned after a join message
        - action_result: Outcome of this client's action
        - room_closed: Room was closed
        - error: Error occurred

        Messages from client:
        - join: {"type": "join", "player_name": "Ana"}
        - action: {"type": "action", "action": {"type": "NEXT_TURN", ...}}
        - leave / close
        - ping: Keep-alive
        """
        await websocket.accept()
        ws_connections.setdefault(room_id, []).append(websocket)
        player_id: Optional[str] = None

        try:
            state = api_service.get_state(room_id)
            if isinstance(state, GameStateResponse):
                await websocket.send_json({
                    "type": "state_update",
                    "payload": state.model_dump(mode="json"),
                })

            while True:
                data = await websocket.receive_text()
                try:
                    message = json.loads(data)
                except json.JSONDecodeError:
                    await websocket.send_json({
                        "type": "error",
                        "payload": {"message": "Invalid JSON"},
                    })
                    continue

                message_type = message.get("type")
                if message_type == "ping":
                    await websocket.send_json({"type": "pong"})

                elif message_type == "join":
                    try:
                        joined = await join_and_broadcast(room_id, str(message.get("player_name", "")))
                    except ValueError as e:
                        await websocket.send_json({"type": "error", "payload": {"message": str(e)}})
                        continue
                    if joined.player_id != player_id:
                        if player_id:
                            await detach_seat(room_id, player_id)
                        if joined.player_id:
                            attach_seat(room_id, joined.player_id)
                    player_id = joined.player_id
                    await websocket.send_json({
                        "type": "joined",
                        "payload": {"room_id": room_id, "player_id": player_id},
                    })

                elif message_type == "action":
                    try:
                        request = ActionRequest.model_validate(message.get("action") or {})
                    except ValueError as e:
                        await websocket.send_json({
                            "type": "error",
                            "payload": {"message": str(e), "error_code": ErrorCode.INVALID_ACTION.value},
                        })
                        continue
                    response = await act_and_broadcast(room_id, request)
                    await websocket.send_json({
                        "type": "action_result" if isinstance(response, ActionResponse) else "error",
                        "payload": response.model_dump(mode="json"),
                    })

                elif message_type == "leave":
                    if player_id:
                        await detach_seat(room_id, player_id)
                        player_id = None

                elif message_type == "close":
                    await close_and_broadcast(room_id)

                else:
                    await websocket.send_json({
                        "type": "error",
                        "payload": {"message": f"Unknown message type: {message_type}"},
                    })

        except WebSocketDisconnect:
            logger.info("WebSocket disconnected from room %s", room_id)
        finally:
            connections = ws_connections.get(room_id, [])
            if websocket in connections:
                connections.remove(websocket)
            if not connections:
                ws_connections.pop(room_id, None)
            if player_id:
                await detach_seat(room_id, player_id)

    # =========================================================================
    # Health Check
    # =========================================================================

    @app.get(
        "/health",
        response_model=HealthResponse,
        tags=["System"],
        summary="Health check",
    )
    async def health_check() -> HealthResponse:
        """Health check endpoint for load balancers."""
        return HealthResponse(
            status="healthy",
            service="virusgame",
            version=__version__,
            rooms=len(api_service.list_rooms()),
        )

    @app.get("/", tags=["System"])
    async def root():
        """Root endpoint with API info."""
        return {
            "name": "Virus! Room Server",
            "version": __version__,
            "env": VIRUS_ENV,
            "docs": "/api/docs",
            "health": "/health",
        }

    return app


# For running directly: uvicorn virusgame.api.app:app
app = create_app()
