"""
Tests for API layer.

Tests:
- APIService methods
- REST endpoints via the FastAPI test client
- WebSocket broadcast of snapshots
"""

import random

import pytest
from fastapi.testclient import TestClient

from virusgame.api.app import create_app
from virusgame.api.schemas import (
    ActionRequest,
    ActionResponse,
    ErrorCode,
    ErrorResponse,
    GameStateResponse,
)
from virusgame.api.service import APIService
from virusgame.session import RoomManager


@pytest.fixture
def service():
    """Create a fresh API service with a seeded room manager."""
    return APIService(room_manager=RoomManager(rng=random.Random(7)))


@pytest.fixture
def client(service):
    # one portal for REST and WebSocket so broadcasts share an event loop
    with TestClient(create_app(service)) as test_client:
        yield test_client


def seat_two(client, room_id="mesa-1"):
    client.post(f"/api/v1/rooms/{room_id}/join", json={"player_name": "Ana"})
    return client.post(f"/api/v1/rooms/{room_id}/join", json={"player_name": "Luis"}).json()


class TestAPIService:
    """Tests for APIService."""

    def test_join_room(self, service):
        response = service.join_room("mesa-1", "Ana")

        assert response.room_id == "mesa-1"
        assert response.player_id == "p_0"
        assert isinstance(response.state, GameStateResponse)
        assert len(response.state.players[0].hand) == 3
        assert len(response.state.deck) == 61

    def test_snapshot_uses_wire_names(self, service):
        response = service.join_room("mesa-1", "Ana")
        card = response.state.players[0].hand[0]

        assert card.kind in {"organ", "virus", "medicine", "treatment"}
        assert response.state.phase == "playing"

    def test_submit_action(self, service):
        service.join_room("mesa-1", "Ana")
        service.join_room("mesa-1", "Luis")

        response = service.submit_action("mesa-1", ActionRequest(type="NEXT_TURN", player_id="p_0"))

        assert isinstance(response, ActionResponse)
        assert response.applied
        assert response.changes == ["Ana pasa turno"]
        assert response.state.current_player_id == "p_1"

    def test_rejected_action_is_not_an_error(self, service):
        service.join_room("mesa-1", "Ana")
        service.join_room("mesa-1", "Luis")

        response = service.submit_action("mesa-1", ActionRequest(type="NEXT_TURN", player_id="p_1"))

        assert isinstance(response, ActionResponse)
        assert not response.applied
        assert response.error_code == "NOT_YOUR_TURN"
        assert response.state.current_player_id == "p_0"

    def test_unknown_room(self, service):
        response = service.get_state("nonexistent")

        assert isinstance(response, ErrorResponse)
        assert response.error_code == ErrorCode.ROOM_NOT_FOUND

    def test_leave_and_close(self, service):
        service.join_room("mesa-1", "Ana")
        service.join_room("mesa-2", "Luis")

        assert service.leave_room("mesa-1", "p_0").deleted
        assert service.close_room("mesa-2").closed
        assert service.list_rooms() == []
        assert isinstance(service.close_room("mesa-2"), ErrorResponse)


class TestRestEndpoints:
    """Tests for the HTTP endpoints."""

    def test_health(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"
        assert response.json()["rooms"] == 0

    def test_join_creates_room(self, client):
        response = client.post("/api/v1/rooms/mesa-1/join", json={"player_name": "Ana"})

        assert response.status_code == 200
        body = response.json()
        assert body["player_id"] == "p_0"
        assert body["state"]["log"] == ["Partida creada con Ana"]
        assert client.get("/api/v1/rooms").json() == {"rooms": ["mesa-1"], "count": 1}

    def test_join_with_empty_name_is_422(self, client):
        response = client.post("/api/v1/rooms/mesa-1/join", json={"player_name": ""})
        assert response.status_code == 422

    def test_join_with_blank_name_is_400(self, client):
        response = client.post("/api/v1/rooms/mesa-1/join", json={"player_name": "   "})

        assert response.status_code == 400
        assert response.json()["error_code"] == "VALIDATION_ERROR"

    def test_room_summary(self, client):
        seat_two(client)

        body = client.get("/api/v1/rooms/mesa-1").json()

        assert body["members"] == ["p_0", "p_1"]
        assert body["player_count"] == 2
        assert body["status"] == "open"

    def test_submit_action(self, client):
        seat_two(client)

        response = client.post(
            "/api/v1/rooms/mesa-1/actions",
            json={"type": "NEXT_TURN", "player_id": "p_0"},
        )

        assert response.status_code == 200
        body = response.json()
        assert body["applied"] is True
        assert body["state"]["current_player_id"] == "p_1"
        assert client.get("/api/v1/rooms/mesa-1/state").json()["current_player_id"] == "p_1"

    def test_illegal_move_returns_unchanged_state(self, client):
        joined = seat_two(client)

        response = client.post(
            "/api/v1/rooms/mesa-1/actions",
            json={"type": "PLAY_CARD", "player_id": "p_0", "card_id": "not-a-card"},
        )

        assert response.status_code == 200
        body = response.json()
        assert body["applied"] is False
        assert body["error_code"] == "CARD_NOT_IN_HAND"
        assert body["state"] == joined["state"]

    def test_unknown_action_type_is_422(self, client):
        seat_two(client)

        response = client.post("/api/v1/rooms/mesa-1/actions", json={"type": "SHUFFLE"})

        assert response.status_code == 422

    def test_missing_room_is_404(self, client):
        assert client.get("/api/v1/rooms/nope/state").status_code == 404
        assert client.get("/api/v1/rooms/nope").status_code == 404
        response = client.post("/api/v1/rooms/nope/actions", json={"type": "NEXT_TURN", "player_id": "p_0"})
        assert response.status_code == 404
        assert response.json()["error_code"] == "ROOM_NOT_FOUND"

    def test_leave_last_member_deletes_room(self, client):
        client.post("/api/v1/rooms/mesa-1/join", json={"player_name": "Ana"})

        response = client.post("/api/v1/rooms/mesa-1/leave", json={"player_id": "p_0"})

        assert response.json() == {"room_id": "mesa-1", "deleted": True}
        assert client.get("/api/v1/rooms/mesa-1").status_code == 404

    def test_close_room(self, client):
        seat_two(client)

        assert client.delete("/api/v1/rooms/mesa-1").status_code == 200
        assert client.delete("/api/v1/rooms/mesa-1").status_code == 404


class TestWebSocket:
    """Tests for real-time updates."""

    def test_ping(self, client):
        with client.websocket_connect("/api/v1/rooms/mesa-1/ws") as ws:
            ws.send_json({"type": "ping"})
            assert ws.receive_json() == {"type": "pong"}

    def test_join_over_socket(self, client):
        with client.websocket_connect("/api/v1/rooms/mesa-1/ws") as ws:
            ws.send_json({"type": "join", "player_name": "Ana"})

            update = ws.receive_json()
            joined = ws.receive_json()

            assert update["type"] == "state_update"
            assert update["payload"]["players"][0]["name"] == "Ana"
            assert joined == {"type": "joined", "payload": {"room_id": "mesa-1", "player_id": "p_0"}}

    def test_connect_receives_current_snapshot(self, client):
        seat_two(client)

        with client.websocket_connect("/api/v1/rooms/mesa-1/ws") as ws:
            message = ws.receive_json()

            assert message["type"] == "state_update"
            assert [p["player_id"] for p in message["payload"]["players"]] == ["p_0", "p_1"]

    def test_rest_action_is_broadcast(self, client):
        seat_two(client)

        with client.websocket_connect("/api/v1/rooms/mesa-1/ws") as ws:
            ws.receive_json()
            client.post("/api/v1/rooms/mesa-1/actions", json={"type": "NEXT_TURN", "player_id": "p_0"})

            update = ws.receive_json()

            assert update["type"] == "state_update"
            assert update["payload"]["current_player_id"] == "p_1"
            assert update["payload"]["log"][-1] == "Ana pasa turno"

    def test_socket_action_result(self, client):
        seat_two(client)

        with client.websocket_connect("/api/v1/rooms/mesa-1/ws") as ws:
            ws.receive_json()
            ws.send_json({"type": "action", "action": {"type": "NEXT_TURN", "player_id": "p_1"}})

            result = ws.receive_json()

            # rejected, so no state_update precedes the result
            assert result["type"] == "action_result"
            assert result["payload"]["applied"] is False

    def test_invalid_action_message(self, client):
        with client.websocket_connect("/api/v1/rooms/mesa-1/ws") as ws:
            ws.send_json({"type": "action", "action": {"type": "SHUFFLE"}})

            error = ws.receive_json()

            assert error["type"] == "error"
            assert error["payload"]["error_code"] == "INVALID_ACTION"

    def test_unknown_message_type(self, client):
        with client.websocket_connect("/api/v1/rooms/mesa-1/ws") as ws:
            ws.send_text("not json")
            assert ws.receive_json()["payload"]["message"] == "Invalid JSON"

            ws.send_json({"type": "dance"})
            assert ws.receive_json()["type"] == "error"

    def test_second_socket_keeps_shared_seat(self, client, service):
        with client.websocket_connect("/api/v1/rooms/mesa-1/ws") as other:
            with client.websocket_connect("/api/v1/rooms/mesa-1/ws") as first:
                first.send_json({"type": "join", "player_name": "Ana"})
                first.receive_json()
                first.receive_json()

                other.receive_json()
                other.send_json({"type": "join", "player_name": "Ana"})
                assert other.receive_json()["type"] == "state_update"
                assert other.receive_json()["payload"]["player_id"] == "p_0"

            other.send_json({"type": "ping"})
            assert other.receive_json() == {"type": "pong"}

            room = service.room_manager.get_room("mesa-1")
            assert room is not None
            assert room.members == {"p_0"}
