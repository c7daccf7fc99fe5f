"""
Effect Resolver - Resolves one played card against the table.

The reducer has already cloned the state and taken the card out of the
actor's hand. The resolver moves cards between hands, organ slots and
the discard pile; it never creates or destroys one.

Each resolution ends in one of three outcomes:
- APPLIED: the card had its effect
- WASTED: the card went to the discard pile without effect
- REJECTED: the play is illegal and the whole action must be undone
  (only a medicine with no organ to land on)
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable

from .action import ActionPayload
from .state import (
    Card,
    CardKind,
    GameState,
    MedicineCard,
    OrganCard,
    OrganSlot,
    PlayerState,
    TreatmentCard,
    TreatmentEffect,
    VirusCard,
)


class PlayOutcome(Enum):
    """How a card play resolved."""
    APPLIED = "applied"
    WASTED = "wasted"
    REJECTED = "rejected"


@dataclass
class EffectResolver:
    """
    Resolves a card for the acting player.

    Works in place on `state`, which must be a private copy.
    """
    state: GameState
    actor: PlayerState
    notes: list[str] = field(default_factory=list)

    def resolve(self, card: Card, payload: ActionPayload) -> PlayOutcome:
        """Dispatch on the card kind."""
        if card.kind == CardKind.ORGAN:
            return self._resolve_organ(card)
        if card.kind == CardKind.VIRUS:
            return self._resolve_virus(card, payload)
        if card.kind == CardKind.MEDICINE:
            return self._resolve_medicine(card)
        if card.kind == CardKind.TREATMENT:
            return self._resolve_treatment(card, payload)
        return self._waste(card, "unknown card kind")

    # =========================================================================
    # Helpers
    # =========================================================================

    @property
    def is_solo_game(self) -> bool:
        return self.state.num_players == 1

    def _discard(self, *cards: Card):
        self.state.discard_pile.extend(cards)

    def _waste(self, card: Card, reason: str) -> PlayOutcome:
        """Consume the card with no effect."""
        self._discard(card)
        self.notes.append(f"{card.name} wasted: {reason}")
        return PlayOutcome.WASTED

    def _resolve_target(self, target_player_id: str | None) -> PlayerState:
        """
        Explicit target if it names a seated player, else the first other
        player in table order, else the actor (solo table).
        """
        if target_player_id:
            target = self.state.get_player(target_player_id)
            if target is not None:
                return target
        for player in self.state.players:
            if player is not self.actor:
                return player
        return self.actor

    @staticmethod
    def _remove_slot(player: PlayerState, slot: OrganSlot):
        player.organs = [s for s in player.organs if s is not slot]

    @staticmethod
    def _slot_position(player: PlayerState, slot: OrganSlot) -> int:
        for idx, candidate in enumerate(player.organs):
            if candidate is slot:
                return idx
        return -1

    @staticmethod
    def _pick_vulnerable_slot(player: PlayerState, organ_card_id: str | None) -> OrganSlot | None:
        """Slot by organ card id if it exists and is not immunized, else the first such slot."""
        if organ_card_id:
            slot = player.find_slot_by_organ_id(organ_card_id)
            if slot is not None and not slot.is_immunized:
                return slot
        return player.first_vulnerable_slot()

    # =========================================================================
    # Organs, viruses, medicines
    # =========================================================================

    def _resolve_organ(self, card: OrganCard) -> PlayOutcome:
        if self.actor.has_organ_type(card.organ_type):
            return self._waste(card, "organ type already in body")
        self.actor.organs.append(OrganSlot(organ=card))
        return PlayOutcome.APPLIED

    def _resolve_virus(self, card: VirusCard, payload: ActionPayload) -> PlayOutcome:
        target = self._resolve_target(payload.target_player_id)

        if card.is_wild:
            slot = target.organs[0] if target.organs else None
        else:
            slot = target.find_slot(card.organ_type)

        if slot is None:
            return self._waste(card, f"{target.name} has no matching organ")
        if slot.is_immunized:
            return self._waste(card, "organ is immunized")

        slot.viruses.append(card)

        if slot.viruses and slot.medicines:
            # Medicine and virus cancel each other out.
            self._discard(slot.viruses.pop(), slot.medicines.pop())
            self.notes.append(f"{slot.organ.name} of {target.name} cured on contact")
        elif len(slot.viruses) >= 2:
            self._discard(slot.organ, *slot.viruses)
            self._remove_slot(target, slot)
            self.notes.append(f"{slot.organ.name} of {target.name} destroyed")
        return PlayOutcome.APPLIED

    def _resolve_medicine(self, card: MedicineCard) -> PlayOutcome:
        if card.is_wild:
            slot = self.actor.organs[0] if self.actor.organs else None
        else:
            slot = self.actor.find_slot(card.organ_type)

        if slot is None:
            return PlayOutcome.REJECTED

        if slot.viruses:
            self._discard(slot.viruses.pop(), card)
        else:
            slot.medicines.append(card)
        return PlayOutcome.APPLIED

    # =========================================================================
    # Treatments
    # =========================================================================

    def _resolve_treatment(self, card: TreatmentCard, payload: ActionPayload) -> PlayOutcome:
        handlers: dict[TreatmentEffect, Callable[[TreatmentCard, ActionPayload], PlayOutcome]] = {
            TreatmentEffect.STEAL_ORGAN: self._steal_organ,
            TreatmentEffect.LATEX_GLOVE: self._latex_glove,
            TreatmentEffect.TRANSPLANT: self._transplant,
            TreatmentEffect.CONTAGION: self._contagion,
            TreatmentEffect.MEDICAL_ERROR: self._medical_error,
        }
        handler = handlers.get(card.effect)
        if handler is None:
            return self._waste(card, f"unknown treatment {card.effect}")
        return handler(card, payload)

    def _opponent_or_none(self, payload: ActionPayload) -> PlayerState | None:
        """Target for treatments that need somebody else at the table."""
        if self.is_solo_game:
            return None
        target = self._resolve_target(payload.target_player_id)
        if target is self.actor:
            return None
        return target

    def _steal_organ(self, card: TreatmentCard, payload: ActionPayload) -> PlayOutcome:
        target = self._opponent_or_none(payload)
        if target is None:
            return self._waste(card, "no opponent to steal from")

        slot = self._pick_vulnerable_slot(target, payload.target_organ_id)
        if slot is None:
            return self._waste(card, f"{target.name} has no stealable organ")
        if self.actor.has_organ_type(slot.organ_type):
            return self._waste(card, "would duplicate an organ type")

        self._remove_slot(target, slot)
        self.actor.organs.append(slot)
        self._discard(card)
        return PlayOutcome.APPLIED

    def _latex_glove(self, card: TreatmentCard, payload: ActionPayload) -> PlayOutcome:
        for player in self.state.players:
            if player is self.actor or not player.hand:
                continue
            self._discard(*player.hand)
            player.hand = []
        self._discard(card)
        return PlayOutcome.APPLIED

    def _transplant(self, card: TreatmentCard, payload: ActionPayload) -> PlayOutcome:
        target = self._opponent_or_none(payload)
        if target is None:
            return self._waste(card, "no opponent to transplant with")

        own_slot = self._pick_vulnerable_slot(self.actor, payload.source_organ_id)
        other_slot = self._pick_vulnerable_slot(target, payload.target_organ_id)
        if own_slot is None or other_slot is None:
            return self._waste(card, "no transplantable pair")

        actor_dup = any(
            s.organ_type == other_slot.organ_type
            for s in self.actor.organs if s is not own_slot
        )
        target_dup = any(
            s.organ_type == own_slot.organ_type
            for s in target.organs if s is not other_slot
        )
        if actor_dup or target_dup:
            return self._waste(card, "would duplicate an organ type")

        own_idx = self._slot_position(self.actor, own_slot)
        other_idx = self._slot_position(target, other_slot)
        self.actor.organs[own_idx] = other_slot
        target.organs[other_idx] = own_slot
        self._discard(card)
        return PlayOutcome.APPLIED

    def _contagion(self, card: TreatmentCard, payload: ActionPayload) -> PlayOutcome:
        target = self._opponent_or_none(payload)
        if target is None:
            return self._waste(card, "no opponent to infect")

        moving: list[VirusCard] = []
        for slot in self.actor.organs:
            while slot.viruses:
                moving.append(slot.viruses.pop())

        for virus in moving:
            destination = None
            for slot in target.organs:
                if not slot.is_free:
                    continue
                if virus.is_wild or slot.organ_type == virus.organ_type:
                    destination = slot
                    break
            if destination is None:
                self._discard(virus)
            else:
                destination.viruses.append(virus)

        self._discard(card)
        return PlayOutcome.APPLIED

    def _medical_error(self, card: TreatmentCard, payload: ActionPayload) -> PlayOutcome:
        target = self._opponent_or_none(payload)
        if target is None:
            return self._waste(card, "no opponent to swap bodies with")

        self.actor.organs, target.organs = target.organs, self.actor.organs
        self._discard(card)
        return PlayOutcome.APPLIED
