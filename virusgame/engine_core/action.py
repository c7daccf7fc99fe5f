"""
Action System - Actions, payloads, and results.

Actions are what the room layer feeds the engine, one at a time:
1. Player actions (play a card, discard, pass)
2. Table actions (join, start, reset)

All state changes flow through actions.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ActionType(Enum):
    """Types of actions in the system."""
    # Table actions
    JOIN = "JOIN"
    START = "START"  # reserved, currently inert
    RESET = "RESET"

    # Player actions
    PLAY_CARD = "PLAY_CARD"
    DISCARD_CARDS = "DISCARD_CARDS"
    NEXT_TURN = "NEXT_TURN"


@dataclass
class ActionPayload:
    """
    Payload for an action - contains the action parameters.

    Different action types use different fields.
    This is a generic container; validation happens in the reducer.
    """
    player_id: str | None = None
    card_id: str | None = None

    # Targeting for PLAY_CARD
    target_player_id: str | None = None
    target_organ_id: str | None = None
    source_organ_id: str | None = None

    # For DISCARD_CARDS
    card_ids: list[str] = field(default_factory=list)

    # For JOIN / RESET
    player_name: str | None = None
    player_names: list[str] = field(default_factory=list)


@dataclass
class Action:
    """
    A complete action to be applied to the game state.

    Actions are applied atomically by the reducer.
    """
    action_type: ActionType
    payload: ActionPayload = field(default_factory=ActionPayload)

    @classmethod
    def join(cls, player_name: str) -> Action:
        return cls(
            action_type=ActionType.JOIN,
            payload=ActionPayload(player_name=player_name),
        )

    @classmethod
    def start(cls) -> Action:
        return cls(action_type=ActionType.START)

    @classmethod
    def play_card(
        cls,
        player_id: str,
        card_id: str,
        target_player_id: str | None = None,
        target_organ_id: str | None = None,
        source_organ_id: str | None = None,
    ) -> Action:
        """Factory for play card action."""
        return cls(
            action_type=ActionType.PLAY_CARD,
            payload=ActionPayload(
                player_id=player_id,
                card_id=card_id,
                target_player_id=target_player_id,
                target_organ_id=target_organ_id,
                source_organ_id=source_organ_id,
            ),
        )

    @classmethod
    def discard_cards(cls, player_id: str, card_ids: list[str]) -> Action:
        return cls(
            action_type=ActionType.DISCARD_CARDS,
            payload=ActionPayload(player_id=player_id, card_ids=list(card_ids)),
        )

    @classmethod
    def next_turn(cls, player_id: str) -> Action:
        return cls(
            action_type=ActionType.NEXT_TURN,
            payload=ActionPayload(player_id=player_id),
        )

    @classmethod
    def reset(cls, player_names: list[str]) -> Action:
        return cls(
            action_type=ActionType.RESET,
            payload=ActionPayload(player_names=list(player_names)),
        )

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Action:
        """
        Build an action from its wire form.

        Accepts `{"type": "PLAY_CARD", "player_id": ..., ...}`.
        Raises ValueError for an unknown type.
        """
        action_type = ActionType(data["type"])
        payload = ActionPayload(
            player_id=data.get("player_id"),
            card_id=data.get("card_id"),
            target_player_id=data.get("target_player_id"),
            target_organ_id=data.get("target_organ_id"),
            source_organ_id=data.get("source_organ_id"),
            card_ids=list(data.get("card_ids") or []),
            player_name=data.get("player_name"),
            player_names=list(data.get("player_names") or []),
        )
        return cls(action_type=action_type, payload=payload)

    def describe(self) -> str:
        """Short description for server logs."""
        parts = [self.action_type.value]
        if self.payload.player_id:
            parts.append(f"player={self.payload.player_id}")
        if self.payload.card_id:
            parts.append(f"card={self.payload.card_id}")
        return " ".join(parts)


@dataclass
class ActionResult:
    """
    Result of applying an action.

    A rejected action is not an error condition for the caller: the
    state comes back unchanged and `error`/`error_code` say why.
    """
    success: bool
    new_state: Any | None = None  # GameState
    error: str | None = None
    error_code: str | None = None

    # Human-readable log lines added by this action
    state_changes: list[str] = field(default_factory=list)

    @classmethod
    def failure(cls, state: Any, error: str, error_code: str | None = None) -> ActionResult:
        """Create a failure result carrying the untouched state."""
        return cls(success=False, new_state=state, error=error, error_code=error_code)

    @classmethod
    def success_with_state(
        cls,
        state: Any,
        changes: list[str] | None = None,
    ) -> ActionResult:
        """Create a success result with new state."""
        return cls(
            success=True,
            new_state=state,
            state_changes=changes or [],
        )
