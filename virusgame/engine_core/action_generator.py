"""
Action Generator - Enumerates candidate actions from a game state.

Used by:
1. The `simulate` CLI command to drive random games
2. Tests that walk long action sequences

Design: generates fully-specified Action objects for the current player.
Every generated action is accepted by the reducer; plays that would be
rejected (a medicine with no organ to land on) are left out.
"""

from __future__ import annotations
from dataclasses import dataclass

from .action import Action
from .state import CardKind, GamePhase, GameState, PlayerState


@dataclass
class ActionGenerator:
    """
    Generates actions for the current player.

    With `with_targets`, virus and treatment plays are emitted once per
    opponent instead of relying on default targeting.
    """
    with_targets: bool = True

    def generate(self, state: GameState) -> list[Action]:
        """Generate all candidate actions for the current player."""
        if state.phase != GamePhase.PLAYING:
            return []

        player = state.current_player
        if player is None:
            return []

        actions = []
        actions.extend(self._generate_play_actions(state, player))
        actions.extend(self._generate_discard_actions(player))

        # Passing is always available
        actions.append(Action.next_turn(player.player_id))
        return actions

    def _generate_play_actions(self, state: GameState, player: PlayerState) -> list[Action]:
        opponents = [p for p in state.players if p.player_id != player.player_id]
        actions = []

        for card in player.hand:
            if card.kind == CardKind.MEDICINE:
                if card.is_wild:
                    eligible = bool(player.organs)
                else:
                    eligible = player.has_organ_type(card.organ_type)
                if eligible:
                    actions.append(Action.play_card(player.player_id, card.card_id))
                continue

            if card.kind in (CardKind.VIRUS, CardKind.TREATMENT) and self.with_targets and opponents:
                for opponent in opponents:
                    actions.append(Action.play_card(
                        player.player_id,
                        card.card_id,
                        target_player_id=opponent.player_id,
                    ))
                continue

            actions.append(Action.play_card(player.player_id, card.card_id))

        return actions

    def _generate_discard_actions(self, player: PlayerState) -> list[Action]:
        """Discard each card on its own, plus the whole hand."""
        if not player.hand:
            return []
        actions = [Action.discard_cards(player.player_id, [c.card_id]) for c in player.hand]
        if len(player.hand) > 1:
            actions.append(Action.discard_cards(player.player_id, [c.card_id for c in player.hand]))
        return actions


def legal_actions(state: GameState, with_targets: bool = True) -> list[Action]:
    """Convenience function to generate candidate actions."""
    return ActionGenerator(with_targets=with_targets).generate(state)
