"""
Card Catalog - The fixed card population of a Virus! deck.

Per organ type (heart, brain, bone, stomach):
- 5 organs
- 4 viruses
- 4 medicines

Plus one wild virus, one wild medicine, and two copies of each of the
five treatments. 64 cards in total.
"""

from __future__ import annotations
from dataclasses import dataclass

from .state import (
    BODY_ORGAN_TYPES,
    Card,
    MedicineCard,
    OrganCard,
    OrganType,
    TreatmentCard,
    TreatmentEffect,
    VirusCard,
)


ORGANS_PER_TYPE = 5
VIRUSES_PER_TYPE = 4
MEDICINES_PER_TYPE = 4
WILD_VIRUSES = 1
WILD_MEDICINES = 1
TREATMENT_COPIES = 2

ORGAN_TEXT = "Órgano sano. Consigue 4 diferentes para ganar."
VIRUS_TEXT = "Infecta un órgano del mismo tipo de otro jugador."
WILD_VIRUS_TEXT = "Infecta cualquier órgano de otro jugador."
MEDICINE_TEXT = (
    "Cura un virus de tu órgano de este tipo o añade una vacuna. "
    "Con 2 vacunas queda inmunizado."
)
WILD_MEDICINE_TEXT = "Cura un virus o vacuna cualquiera de tus órganos."


@dataclass(frozen=True)
class TreatmentDefinition:
    """Display data for one treatment effect."""
    effect: TreatmentEffect
    name: str
    text: str


TREATMENTS = (
    TreatmentDefinition(
        TreatmentEffect.STEAL_ORGAN,
        "Ladrón de órganos",
        "Roba un órgano no inmunizado de otro jugador.",
    ),
    TreatmentDefinition(
        TreatmentEffect.LATEX_GLOVE,
        "Guante de látex",
        "Todos los demás jugadores descartan su mano.",
    ),
    TreatmentDefinition(
        TreatmentEffect.TRANSPLANT,
        "Trasplante",
        "Intercambia un órgano no inmunizado tuyo con uno de otro jugador.",
    ),
    TreatmentDefinition(
        TreatmentEffect.CONTAGION,
        "Contagio",
        "Pasa todos tus virus a los órganos sanos de otro jugador.",
    ),
    TreatmentDefinition(
        TreatmentEffect.MEDICAL_ERROR,
        "Error médico",
        "Intercambia todo tu cuerpo con el de otro jugador.",
    ),
)

CATALOG_SIZE = (
    len(BODY_ORGAN_TYPES) * (ORGANS_PER_TYPE + VIRUSES_PER_TYPE + MEDICINES_PER_TYPE)
    + WILD_VIRUSES
    + WILD_MEDICINES
    + len(TREATMENTS) * TREATMENT_COPIES
)


class _CardIds:
    """Sequential card ids, local to one catalog build."""

    def __init__(self, prefix: str = "c"):
        self._prefix = prefix
        self._next = 0

    def __call__(self) -> str:
        card_id = f"{self._prefix}_{self._next}"
        self._next += 1
        return card_id


def organ_card(card_id: str, organ_type: OrganType) -> OrganCard:
    return OrganCard(
        card_id=card_id,
        name=organ_type.value.upper(),
        text=ORGAN_TEXT,
        organ_type=organ_type,
    )


def virus_card(card_id: str, organ_type: OrganType) -> VirusCard:
    if organ_type == OrganType.WILD:
        return VirusCard(card_id=card_id, name="Virus comodín", text=WILD_VIRUS_TEXT, organ_type=organ_type)
    return VirusCard(
        card_id=card_id,
        name=f"Virus {organ_type.value}",
        text=VIRUS_TEXT,
        organ_type=organ_type,
    )


def medicine_card(card_id: str, organ_type: OrganType) -> MedicineCard:
    if organ_type == OrganType.WILD:
        return MedicineCard(
            card_id=card_id, name="Vacuna comodín", text=WILD_MEDICINE_TEXT, organ_type=organ_type
        )
    return MedicineCard(
        card_id=card_id,
        name=f"Vacuna {organ_type.value}",
        text=MEDICINE_TEXT,
        organ_type=organ_type,
    )


def treatment_card(card_id: str, effect: TreatmentEffect) -> TreatmentCard:
    definition = get_treatment_definition(effect)
    return TreatmentCard(
        card_id=card_id,
        name=definition.name,
        text=definition.text,
        effect=effect,
    )


def get_treatment_definition(effect: TreatmentEffect) -> TreatmentDefinition:
    for definition in TREATMENTS:
        if definition.effect == effect:
            return definition
    raise KeyError(effect)


def build_catalog() -> list[Card]:
    """
    Build the full, unshuffled card population.

    Ids run c_0..c_63 in catalog order, so every build is identical.
    """
    next_id = _CardIds()
    cards: list[Card] = []

    for organ_type in BODY_ORGAN_TYPES:
        for _ in range(ORGANS_PER_TYPE):
            cards.append(organ_card(next_id(), organ_type))

    for organ_type in BODY_ORGAN_TYPES:
        for _ in range(VIRUSES_PER_TYPE):
            cards.append(virus_card(next_id(), organ_type))
    for _ in range(WILD_VIRUSES):
        cards.append(virus_card(next_id(), OrganType.WILD))

    for organ_type in BODY_ORGAN_TYPES:
        for _ in range(MEDICINES_PER_TYPE):
            cards.append(medicine_card(next_id(), organ_type))
    for _ in range(WILD_MEDICINES):
        cards.append(medicine_card(next_id(), OrganType.WILD))

    for definition in TREATMENTS:
        for _ in range(TREATMENT_COPIES):
            cards.append(treatment_card(next_id(), definition.effect))

    return cards
