"""
Game Setup - Creates the initial game state.

This module handles:
- Building the 64-card catalog
- Shuffling with an injectable rng for determinism
- Dealing 3 cards to each player in table order

Solo play (1 player) is legal; several treatments do nothing then.
"""

from __future__ import annotations
import random

from .cards import build_catalog
from .deck import HAND_SIZE, shuffle_cards
from .state import Card, GamePhase, GameState, PlayerState


def create_deck(rng: random.Random | None = None) -> list[Card]:
    """Build and shuffle a full deck."""
    rng = rng or random.Random()
    return shuffle_cards(build_catalog(), rng)


def setup_game(
    player_names: list[str],
    rng: random.Random | None = None,
    random_seed: int | None = None,
) -> GameState:
    """
    Set up a new game.

    Args:
        player_names: Names in table order (1..N)
        rng: Random source used for the shuffle
        random_seed: Seed for a fresh rng when none is given

    Returns:
        Initial GameState ready for play
    """
    if not player_names:
        raise ValueError("A game needs at least one player")

    if rng is None:
        rng = random.Random(random_seed)

    deck = create_deck(rng)
    players = _deal_players(player_names, deck)

    return GameState(
        players=players,
        current_player_id=players[0].player_id,
        deck=deck,
        discard_pile=[],
        phase=GamePhase.PLAYING,
        winner_id=None,
        log=[f"Partida creada con {', '.join(player_names)}"],
    )


def _deal_players(player_names: list[str], deck: list[Card]) -> list[PlayerState]:
    """Create players and deal from the deck front, consuming it in place."""
    players = []
    for index, name in enumerate(player_names):
        hand = deck[:HAND_SIZE]
        del deck[:HAND_SIZE]
        players.append(PlayerState(
            player_id=f"p_{index}",
            name=name,
            hand=hand,
            organs=[],
        ))
    return players
