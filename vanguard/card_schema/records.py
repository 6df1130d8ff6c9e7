"""
Card and Deck Records - Serializable card data and deck lists.

Card data arrives in the card database shape: text fields such as
"Grade 1", "Power 10000" or "Heal Trigger +10000", a comma separated
skill line, and an implemented_effects list naming registry indices.
Records turn that into engine Cards; every copy gets its own unique id.

Deck lists are JSON objects:

    {"name": "...", "ride_deck": [{"quantity": 1, "card_id": "DEMO/001"}], "main_deck": [...]}
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any
import logging
import re

from ..engine_core.state import Card, EffectDefinition, EffectCost, TriggerKind

logger = logging.getLogger(__name__)

CREST_TYPE = "Crest"

_NUMBER = re.compile(r"-?\d+")


def parse_value(raw: Any) -> int | None:
    """'Power 10000' -> 10000, 'Grade 1' -> 1, None/'-' -> None."""
    if raw is None:
        return None
    if isinstance(raw, bool):
        return None
    if isinstance(raw, int):
        return raw
    match = _NUMBER.search(str(raw))
    return int(match.group(0)) if match else None


def parse_skills(raw: Any) -> list[str]:
    if not raw:
        return []
    if isinstance(raw, list):
        return [s for s in raw if s and s != "-"]
    return [s.strip() for s in str(raw).split(",") if s.strip() and s.strip() != "-"]


def parse_trigger(raw: Any) -> TriggerKind | None:
    """'Heal Trigger +10000' -> TriggerKind.HEAL."""
    if not raw:
        return None
    word = str(raw).split()[0]
    for kind in TriggerKind:
        if kind.value.lower() == word.lower():
            return kind
    return None


def effect_from_dict(data: dict[str, Any]) -> EffectDefinition:
    cost = data.get("cost") or {}
    return EffectDefinition(
        trigger=data.get("trigger", ""),
        function_index=int(data["function_index"]),
        zone=data.get("zone"),
        condition=data.get("condition"),
        mandatory=data.get("mandatory", True),
        is_act=data.get("is_act", False),
        once_per_turn=data.get("once_per_turn", False),
        cost=EffectCost(energy=cost.get("energy", 0)),
        description=data.get("description", ""),
    )


def effect_to_dict(effect: EffectDefinition) -> dict[str, Any]:
    data: dict[str, Any] = {
        "trigger": effect.trigger,
        "function_index": effect.function_index,
        "mandatory": effect.mandatory,
        "is_act": effect.is_act,
        "once_per_turn": effect.once_per_turn,
    }
    if effect.zone:
        data["zone"] = effect.zone
    if effect.condition is not None:
        data["condition"] = effect.condition
    if effect.cost.energy:
        data["cost"] = {"energy": effect.cost.energy}
    if effect.description:
        data["description"] = effect.description
    return data


@dataclass
class CardRecord:
    """
    One card definition from the card database.

    Converted to Card instances (one per copy) with to_card().
    """
    id: str
    name: str
    grade: int | None = None
    power: int | None = None
    critical: int = 1
    shield: int | None = 0
    skills: list[str] = field(default_factory=list)
    trigger: TriggerKind | None = None
    card_type: str = "Unit"
    effects: list[EffectDefinition] = field(default_factory=list)
    text: str = ""
    nation: str | None = None

    @property
    def is_crest(self) -> bool:
        return self.card_type == CREST_TYPE

    @property
    def is_sentinel(self) -> bool:
        return "Sentinel" in self.skills

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> CardRecord:
        """Create from the card database format."""
        card_id = data.get("card_number_full") or data.get("id")
        if not card_id:
            raise ValueError("Card record has no id")
        critical = parse_value(data.get("critical"))
        shield = data.get("shield", 0)
        return cls(
            id=card_id,
            name=data.get("name_face") or data.get("name") or card_id,
            grade=parse_value(data.get("grade")),
            power=parse_value(data.get("power")),
            critical=1 if critical is None else critical,
            shield=None if shield is None else (parse_value(shield) or 0),
            skills=parse_skills(data.get("skill", data.get("skills"))),
            trigger=parse_trigger(data.get("gift", data.get("trigger"))),
            card_type=data.get("type", "Unit"),
            effects=[effect_from_dict(e) for e in data.get("implemented_effects", [])],
            text=data.get("effect", "") or "",
            nation=data.get("nation"),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "grade": self.grade,
            "power": self.power,
            "critical": self.critical,
            "shield": self.shield,
            "skills": list(self.skills),
            "trigger": self.trigger.value if self.trigger else None,
            "type": self.card_type,
            "implemented_effects": [effect_to_dict(e) for e in self.effects],
            "effect": self.text,
            "nation": self.nation,
        }

    def to_card(self, unique_id: str) -> Card:
        """Create one physical copy of this card."""
        return Card(
            unique_id=unique_id,
            id=self.id,
            name=self.name,
            grade=self.grade,
            power=self.power,
            critical=self.critical,
            shield=self.shield,
            skills=list(self.skills),
            trigger=self.trigger,
            effects=list(self.effects),
        )


CardDatabase = dict[str, CardRecord]


def build_database(records: list[CardRecord] | list[dict[str, Any]]) -> CardDatabase:
    """Index card records (or raw database dicts) by id."""
    database: CardDatabase = {}
    for record in records:
        if isinstance(record, dict):
            record = CardRecord.from_dict(record)
        database[record.id] = record
    return database


@dataclass
class DeckEntry:
    """A line of a deck list: quantity copies of one card id."""
    quantity: int
    card_id: str
    name: str = ""


@dataclass
class DeckRecord:
    """A deck list: ride deck entries and main deck entries."""
    name: str
    ride_deck: list[DeckEntry] = field(default_factory=list)
    main_deck: list[DeckEntry] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> DeckRecord:
        """Create from the JSON deck format."""
        def entries(items: list[dict[str, Any]]) -> list[DeckEntry]:
            return [
                DeckEntry(
                    quantity=int(item.get("quantity", 1)),
                    card_id=item["card_id"],
                    name=item.get("name", ""),
                )
                for item in items
            ]

        return cls(
            name=data.get("name", "Unnamed deck"),
            ride_deck=entries(data.get("ride_deck", [])),
            main_deck=entries(data.get("main_deck", [])),
        )

    def to_dict(self) -> dict[str, Any]:
        def entries(items: list[DeckEntry]) -> list[dict[str, Any]]:
            return [{"quantity": e.quantity, "card_id": e.card_id, "name": e.name} for e in items]

        return {
            "name": self.name,
            "ride_deck": entries(self.ride_deck),
            "main_deck": entries(self.main_deck),
        }

    @property
    def main_deck_size(self) -> int:
        return sum(e.quantity for e in self.main_deck)

    def to_cards(self, database: CardDatabase, owner: str = "p1") -> tuple[list[Card], list[Card]]:
        """
        Build (ride_deck, main_deck) card instances.

        Unknown card ids become bare cards with only a name and id.
        Crest cards only belong in the ride deck and are skipped elsewhere.
        """
        counter = 0

        def build(entries: list[DeckEntry], is_ride_deck: bool) -> list[Card]:
            nonlocal counter
            cards: list[Card] = []
            for entry in entries:
                record = database.get(entry.card_id)
                if record is None:
                    logger.warning(f"Card {entry.card_id} not found in database, creating a basic card")
                    record = CardRecord(id=entry.card_id, name=entry.name or entry.card_id)
                if record.is_crest and not is_ride_deck:
                    continue
                for _ in range(entry.quantity):
                    counter += 1
                    cards.append(record.to_card(f"{owner}-{counter:03d}"))
            return cards

        return build(self.ride_deck, True), build(self.main_deck, False)
