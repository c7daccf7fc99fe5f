"""
Reducer - Applies actions to game state.

The reducer is the single point of state mutation.
All state changes must go through apply_action().

Design principles:
- Pure function: (state, action) -> new_state
- The input state is never touched; work happens on a clone
- A rejected action returns the input state unchanged, never raises
- Card effects are delegated to EffectResolver
"""

from __future__ import annotations
from dataclasses import dataclass, field
import logging
import random

from .action import Action, ActionResult, ActionType
from .deck import refill_hand
from .effect_resolver import EffectResolver, PlayOutcome
from .setup import setup_game
from .state import GamePhase, GameState, PlayerState

logger = logging.getLogger(__name__)

ORGANS_TO_WIN = 4


@dataclass
class Reducer:
    """
    Reducer applies actions to game state.

    Stateless apart from the random source used for shuffles
    (recycling the discard pile and RESET).
    """
    rng: random.Random = field(default_factory=random.Random)

    def apply(self, state: GameState, action: Action) -> ActionResult:
        """
        Apply an action to the game state.

        Returns ActionResult with the new state, or the unchanged
        state plus the reason it was rejected.
        """
        handler = self._get_handler(action.action_type)
        if not handler:
            return ActionResult.failure(
                state,
                f"No handler for action type: {action.action_type}",
                error_code="UNSUPPORTED_ACTION",
            )

        try:
            result = handler(state, action)
        except Exception as e:
            logger.exception("Handler failed for %s", action.describe())
            return ActionResult.failure(state, str(e), error_code="HANDLER_ERROR")

        if not result.success:
            logger.debug("Rejected %s: %s", action.describe(), result.error)
        return result

    def _get_handler(self, action_type: ActionType):
        """Get the handler function for an action type."""
        handlers = {
            ActionType.JOIN: self._handle_join,
            ActionType.START: self._handle_start,
            ActionType.PLAY_CARD: self._handle_play_card,
            ActionType.DISCARD_CARDS: self._handle_discard_cards,
            ActionType.NEXT_TURN: self._handle_next_turn,
            ActionType.RESET: self._handle_reset,
        }
        return handlers.get(action_type)

    def _validate_turn(self, state: GameState, player_id: str | None) -> ActionResult | None:
        """
        Gate shared by every turn-consuming action.

        Returns a failure result if the action may not proceed.
        """
        if state.phase != GamePhase.PLAYING:
            return ActionResult.failure(state, "Game is over", error_code="GAME_FINISHED")
        if not player_id or player_id != state.current_player_id:
            return ActionResult.failure(state, f"Not {player_id}'s turn", error_code="NOT_YOUR_TURN")
        if state.get_player(player_id) is None:
            return ActionResult.failure(state, f"Player {player_id} not found", error_code="PLAYER_NOT_FOUND")
        return None

    # =========================================================================
    # Turn actions
    # =========================================================================

    def _handle_play_card(self, state: GameState, action: Action) -> ActionResult:
        payload = action.payload
        rejection = self._validate_turn(state, payload.player_id)
        if rejection:
            return rejection

        if state.get_player(payload.player_id).find_card(payload.card_id) is None:
            return ActionResult.failure(
                state, f"Card {payload.card_id} not in hand", error_code="CARD_NOT_IN_HAND"
            )

        new_state = state.clone()
        actor = new_state.get_player(payload.player_id)
        card = actor.find_card(payload.card_id)
        actor.hand = [c for c in actor.hand if c.card_id != card.card_id]

        resolver = EffectResolver(state=new_state, actor=actor)
        outcome = resolver.resolve(card, payload)
        if outcome == PlayOutcome.REJECTED:
            return ActionResult.failure(
                state,
                f"{card.name} has no organ to apply to",
                error_code="NO_ELIGIBLE_ORGAN",
            )
        for note in resolver.notes:
            logger.debug(note)

        changes = [f"{actor.name} juega {card.name}"]
        new_state.log.append(changes[0])

        if actor.healthy_organ_count >= ORGANS_TO_WIN:
            new_state.winner_id = actor.player_id
            new_state.phase = GamePhase.FINISHED
            victory = f"{actor.name} gana la partida"
            new_state.log.append(victory)
            changes.append(victory)
            return ActionResult.success_with_state(new_state, changes=changes)

        self._end_turn(new_state, actor)
        return ActionResult.success_with_state(new_state, changes=changes)

    def _handle_discard_cards(self, state: GameState, action: Action) -> ActionResult:
        payload = action.payload
        rejection = self._validate_turn(state, payload.player_id)
        if rejection:
            return rejection

        wanted = set(payload.card_ids)
        if not any(c.card_id in wanted for c in state.get_player(payload.player_id).hand):
            return ActionResult.failure(state, "No cards to discard", error_code="NOTHING_TO_DISCARD")

        new_state = state.clone()
        player = new_state.get_player(payload.player_id)
        discarded = [c for c in player.hand if c.card_id in wanted]
        player.hand = [c for c in player.hand if c.card_id not in wanted]
        new_state.discard_pile.extend(discarded)

        line = f"{player.name} descarta {len(discarded)} carta(s)"
        new_state.log.append(line)
        self._end_turn(new_state, player)
        return ActionResult.success_with_state(new_state, changes=[line])

    def _handle_next_turn(self, state: GameState, action: Action) -> ActionResult:
        rejection = self._validate_turn(state, action.payload.player_id)
        if rejection:
            return rejection

        new_state = state.clone()
        player = new_state.get_player(action.payload.player_id)
        line = f"{player.name} pasa turno"
        new_state.log.append(line)
        self._end_turn(new_state, player)
        return ActionResult.success_with_state(new_state, changes=[line])

    def _end_turn(self, state: GameState, player: PlayerState):
        """
        Refill the actor, pass the turn, and refill the next player
        before they get control.
        """
        refill_hand(state, player, self.rng)

        current_idx = state.player_index(player.player_id)
        next_player = state.players[(current_idx + 1) % state.num_players]
        refill_hand(state, next_player, self.rng)
        state.current_player_id = next_player.player_id

    # =========================================================================
    # Table actions
    # =========================================================================

    def _handle_join(self, state: GameState, action: Action) -> ActionResult:
        name = (action.payload.player_name or "").strip()
        if state.phase != GamePhase.PLAYING:
            return ActionResult.failure(state, "Game is over", error_code="GAME_FINISHED")
        if not name:
            return ActionResult.failure(state, "Player name required", error_code="INVALID_NAME")
        if any(p.name.lower() == name.lower() for p in state.players):
            return ActionResult.failure(state, f"{name} already seated", error_code="DUPLICATE_PLAYER")

        new_state = state.clone()
        player = PlayerState(player_id=f"p_{len(new_state.players)}", name=name)
        new_state.players.append(player)
        if new_state.current_player_id is None:
            new_state.current_player_id = player.player_id

        line = f"{name} se une a la partida"
        new_state.log.append(line)
        return ActionResult.success_with_state(new_state, changes=[line])

    def _handle_start(self, state: GameState, action: Action) -> ActionResult:
        """Reserved; dealing already happens at setup."""
        return ActionResult.success_with_state(state)

    def _handle_reset(self, state: GameState, action: Action) -> ActionResult:
        names = [n for n in action.payload.player_names if n]
        if not names:
            return ActionResult.failure(state, "RESET needs at least one player", error_code="NO_PLAYERS")

        new_state = setup_game(names, rng=self.rng)
        return ActionResult.success_with_state(new_state, changes=list(new_state.log))


def apply_action(state: GameState, action: Action, rng: random.Random | None = None) -> GameState:
    """
    Convenience function to apply an action.

    Creates a Reducer and returns the next state (the input state
    itself when the action is rejected).
    """
    reducer = Reducer(rng=rng or random.Random())
    return reducer.apply(state, action).new_state
