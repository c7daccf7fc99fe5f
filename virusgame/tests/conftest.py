"""
Pytest fixtures for Virus! tests.
"""

import random

import pytest

from virusgame.engine_core.reducer import Reducer
from virusgame.engine_core.setup import setup_game
from virusgame.engine_core.state import GameState
from virusgame.session import RoomManager


@pytest.fixture
def rng() -> random.Random:
    """Seeded random source so shuffles are reproducible."""
    return random.Random(1234)


@pytest.fixture
def reducer(rng: random.Random) -> Reducer:
    return Reducer(rng=rng)


@pytest.fixture
def two_player_game(rng: random.Random) -> GameState:
    """A freshly dealt 2-player game."""
    return setup_game(["Ana", "Luis"], rng=rng)


@pytest.fixture
def solo_game(rng: random.Random) -> GameState:
    return setup_game(["Ana"], rng=rng)


@pytest.fixture
def room_manager() -> RoomManager:
    return RoomManager(rng=random.Random(99))
