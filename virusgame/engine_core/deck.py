"""
Deck - Drawing, recycling and hand refill.

These helpers work in place on a GameState the reducer has already
cloned. They never touch the caller's original state.
"""

from __future__ import annotations
import random

from .state import Card, GameState, PlayerState


HAND_SIZE = 3


def shuffle_cards(cards: list[Card], rng: random.Random) -> list[Card]:
    """Return a uniformly shuffled copy (Fisher-Yates via Random.shuffle)."""
    shuffled = list(cards)
    rng.shuffle(shuffled)
    return shuffled


def recycle_deck(state: GameState, rng: random.Random) -> bool:
    """
    Turn the discard pile into a fresh deck when the deck is exhausted.

    Returns True if a recycle happened.
    """
    if state.deck or not state.discard_pile:
        return False
    state.deck = shuffle_cards(state.discard_pile, rng)
    state.discard_pile = []
    return True


def draw_card(state: GameState, rng: random.Random) -> Card | None:
    """Take the front card of the deck, recycling first if needed."""
    if not state.deck:
        recycle_deck(state, rng)
    if not state.deck:
        return None
    return state.deck.pop(0)


def refill_hand(state: GameState, player: PlayerState, rng: random.Random) -> int:
    """
    Top a player's hand up to HAND_SIZE.

    Stops early when deck and discard are both empty. Returns the
    number of cards drawn.
    """
    drawn = 0
    while len(player.hand) < HAND_SIZE:
        card = draw_card(state, rng)
        if card is None:
            break
        player.hand.append(card)
        drawn += 1
    return drawn
