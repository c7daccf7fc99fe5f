"""
Engine Core - Deterministic rules engine for Virus!.

The engine is the runtime that:
1. Builds the catalog and deals a new game
2. Holds the GameState
3. Applies actions via the reducer
4. Resolves card effects
5. Recycles the discard pile when the deck runs out
"""

from .state import (
    Card,
    CardKind,
    GamePhase,
    GameState,
    MedicineCard,
    OrganCard,
    OrganSlot,
    OrganType,
    PlayerState,
    TreatmentCard,
    TreatmentEffect,
    VirusCard,
)
from .action import Action, ActionType, ActionPayload, ActionResult
from .cards import CATALOG_SIZE, build_catalog
from .setup import create_deck, setup_game
from .reducer import Reducer, apply_action
from .effect_resolver import EffectResolver, PlayOutcome
from .action_generator import ActionGenerator, legal_actions

__all__ = [
    "Card",
    "CardKind",
    "GamePhase",
    "GameState",
    "MedicineCard",
    "OrganCard",
    "OrganSlot",
    "OrganType",
    "PlayerState",
    "TreatmentCard",
    "TreatmentEffect",
    "VirusCard",
    "Action",
    "ActionType",
    "ActionPayload",
    "ActionResult",
    "CATALOG_SIZE",
    "build_catalog",
    "create_deck",
    "setup_game",
    "Reducer",
    "apply_action",
    "EffectResolver",
    "PlayOutcome",
    "ActionGenerator",
    "legal_actions",
]
