"""
Game State - The single source of truth for one game of Virus!.

Design principles:
- Immutable-friendly: the reducer clones before it touches anything
- Serializable: to_dict() produces the full snapshot broadcast to rooms
- Closed card model: every card is one of four kinds, keyed by `kind`
"""

from __future__ import annotations
from dataclasses import dataclass, field
from copy import deepcopy
from enum import Enum
from typing import Any, Union


class GamePhase(Enum):
    """High-level game phases."""
    PLAYING = "playing"
    FINISHED = "finished"


class CardKind(Enum):
    """Discriminant for the card sum type."""
    ORGAN = "organ"
    VIRUS = "virus"
    MEDICINE = "medicine"
    TREATMENT = "treatment"


class OrganType(Enum):
    """The four organ types. WILD only appears on viruses and medicines."""
    HEART = "heart"
    BRAIN = "brain"
    BONE = "bone"
    STOMACH = "stomach"
    WILD = "wild"


BODY_ORGAN_TYPES = (OrganType.HEART, OrganType.BRAIN, OrganType.BONE, OrganType.STOMACH)


class TreatmentEffect(Enum):
    """Treatment card effects."""
    STEAL_ORGAN = "steal_organ"
    LATEX_GLOVE = "latex_glove"
    TRANSPLANT = "transplant"
    CONTAGION = "contagion"
    MEDICAL_ERROR = "medical_error"


@dataclass
class OrganCard:
    card_id: str
    name: str
    text: str
    organ_type: OrganType
    kind: CardKind = field(default=CardKind.ORGAN, init=False)

    def to_dict(self) -> dict[str, Any]:
        return {
            "card_id": self.card_id,
            "name": self.name,
            "text": self.text,
            "kind": self.kind.value,
            "organ_type": self.organ_type.value,
        }


@dataclass
class VirusCard:
    card_id: str
    name: str
    text: str
    organ_type: OrganType  # OrganType.WILD targets any organ
    kind: CardKind = field(default=CardKind.VIRUS, init=False)

    @property
    def is_wild(self) -> bool:
        return self.organ_type == OrganType.WILD

    def to_dict(self) -> dict[str, Any]:
        return {
            "card_id": self.card_id,
            "name": self.name,
            "text": self.text,
            "kind": self.kind.value,
            "organ_type": self.organ_type.value,
        }


@dataclass
class MedicineCard:
    card_id: str
    name: str
    text: str
    organ_type: OrganType
    kind: CardKind = field(default=CardKind.MEDICINE, init=False)

    @property
    def is_wild(self) -> bool:
        return self.organ_type == OrganType.WILD

    def to_dict(self) -> dict[str, Any]:
        return {
            "card_id": self.card_id,
            "name": self.name,
            "text": self.text,
            "kind": self.kind.value,
            "organ_type": self.organ_type.value,
        }


@dataclass
class TreatmentCard:
    card_id: str
    name: str
    text: str
    effect: TreatmentEffect
    kind: CardKind = field(default=CardKind.TREATMENT, init=False)

    def to_dict(self) -> dict[str, Any]:
        return {
            "card_id": self.card_id,
            "name": self.name,
            "text": self.text,
            "kind": self.kind.value,
            "effect": self.effect.value,
        }


Card = Union[OrganCard, VirusCard, MedicineCard, TreatmentCard]


@dataclass
class OrganSlot:
    """
    An organ a player has placed, with the cards attached to it.

    Viruses and medicines are kept in the order they were attached;
    cancellation always pops from the end.
    """
    organ: OrganCard
    viruses: list[VirusCard] = field(default_factory=list)
    medicines: list[MedicineCard] = field(default_factory=list)

    @property
    def organ_type(self) -> OrganType:
        return self.organ.organ_type

    @property
    def is_immunized(self) -> bool:
        """Two medicines make the organ immune to virus, theft and transplant."""
        return len(self.medicines) >= 2

    @property
    def is_healthy(self) -> bool:
        return not self.viruses

    @property
    def is_free(self) -> bool:
        """No virus and no medicine attached (contagion destination)."""
        return not self.viruses and not self.medicines

    def all_cards(self) -> list[Card]:
        return [self.organ, *self.viruses, *self.medicines]

    def to_dict(self) -> dict[str, Any]:
        return {
            "organ": self.organ.to_dict(),
            "viruses": [v.to_dict() for v in self.viruses],
            "medicines": [m.to_dict() for m in self.medicines],
            "is_immunized": self.is_immunized,
        }


@dataclass
class PlayerState:
    """State for a single player at the table."""
    player_id: str
    name: str
    hand: list[Card] = field(default_factory=list)
    organs: list[OrganSlot] = field(default_factory=list)

    def find_card(self, card_id: str) -> Card | None:
        """Get a card from hand by id."""
        for card in self.hand:
            if card.card_id == card_id:
                return card
        return None

    def find_slot(self, organ_type: OrganType) -> OrganSlot | None:
        """Get the slot holding an organ of the given type."""
        for slot in self.organs:
            if slot.organ_type == organ_type:
                return slot
        return None

    def find_slot_by_organ_id(self, organ_card_id: str) -> OrganSlot | None:
        for slot in self.organs:
            if slot.organ.card_id == organ_card_id:
                return slot
        return None

    def has_organ_type(self, organ_type: OrganType) -> bool:
        return self.find_slot(organ_type) is not None

    def first_vulnerable_slot(self) -> OrganSlot | None:
        """First slot that is not immunized (steal/transplant fallback)."""
        for slot in self.organs:
            if not slot.is_immunized:
                return slot
        return None

    @property
    def healthy_organ_count(self) -> int:
        return sum(1 for slot in self.organs if slot.is_healthy)

    def all_cards(self) -> list[Card]:
        cards: list[Card] = list(self.hand)
        for slot in self.organs:
            cards.extend(slot.all_cards())
        return cards

    def to_dict(self) -> dict[str, Any]:
        return {
            "player_id": self.player_id,
            "name": self.name,
            "hand": [c.to_dict() for c in self.hand],
            "organs": [s.to_dict() for s in self.organs],
        }


@dataclass
class GameState:
    """
    Complete game state at a point in time.

    This is the canonical state that the engine operates on.
    All state changes go through the reducer.
    """
    players: list[PlayerState] = field(default_factory=list)
    current_player_id: str | None = None

    # Shared zones
    deck: list[Card] = field(default_factory=list)  # front is the next draw
    discard_pile: list[Card] = field(default_factory=list)

    phase: GamePhase = GamePhase.PLAYING
    winner_id: str | None = None

    # Human-readable history, append-only
    log: list[str] = field(default_factory=list)

    @property
    def current_player(self) -> PlayerState | None:
        return self.get_player(self.current_player_id) if self.current_player_id else None

    @property
    def num_players(self) -> int:
        return len(self.players)

    @property
    def is_finished(self) -> bool:
        return self.phase == GamePhase.FINISHED

    def get_player(self, player_id: str) -> PlayerState | None:
        """Get player by ID."""
        for p in self.players:
            if p.player_id == player_id:
                return p
        return None

    def player_index(self, player_id: str) -> int:
        """Table position of a player, -1 if absent."""
        for idx, p in enumerate(self.players):
            if p.player_id == player_id:
                return idx
        return -1

    def all_cards(self) -> list[Card]:
        """Every card in the game, wherever it currently sits."""
        cards: list[Card] = [*self.deck, *self.discard_pile]
        for player in self.players:
            cards.extend(player.all_cards())
        return cards

    def clone(self) -> GameState:
        """Deep copy the state."""
        return deepcopy(self)

    def to_dict(self) -> dict[str, Any]:
        """Full snapshot, as broadcast to every room member."""
        return {
            "players": [p.to_dict() for p in self.players],
            "current_player_id": self.current_player_id,
            "deck": [c.to_dict() for c in self.deck],
            "discard_pile": [c.to_dict() for c in self.discard_pile],
            "winner_id": self.winner_id,
            "phase": self.phase.value,
            "log": list(self.log),
        }
