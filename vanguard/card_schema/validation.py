"""
Deck Validation - Checks deck lists against the card database.

Validates that:
1. Every card id resolves in the database
2. The ride deck starts at grade 0 and climbs one grade at a time
3. Trigger, heal and sentinel counts stay within the limits
4. Implemented effects reference registered effect indices
"""

from __future__ import annotations
from dataclasses import dataclass
from pathlib import Path
import json

from .records import CardDatabase, CardRecord, DeckRecord
from ..effects.registry import EffectRegistry, default_registry

MAIN_DECK_SIZE = 50
MAX_TRIGGERS = 16
MAX_HEALS = 4
MAX_SENTINELS = 4
MAX_COPIES = 4


class DeckValidationError(Exception):
    """Raised when deck validation fails."""

    def __init__(self, errors: list[str]):
        self.errors = errors
        super().__init__(f"Deck validation failed with {len(errors)} error(s)")


@dataclass
class ValidationResult:
    """Result of validation, with errors and warnings."""
    valid: bool
    errors: list[str]
    warnings: list[str]


def validate_deck(
    deck: DeckRecord,
    database: CardDatabase,
    registry: EffectRegistry | None = None,
) -> ValidationResult:
    """
    Validate a deck list.

    Returns ValidationResult with errors and warnings.
    """
    if registry is None:
        registry = default_registry()
    errors: list[str] = []
    warnings: list[str] = []

    ride_records = _resolve(deck.ride_deck, database, "ride deck", errors)
    main_records = _resolve(deck.main_deck, database, "main deck", errors)

    errors.extend(_validate_ride_deck(ride_records))

    # Main deck composition
    size = sum(quantity for _, quantity in main_records)
    if size != MAIN_DECK_SIZE:
        warnings.append(f"Main deck has {size} cards, expected {MAIN_DECK_SIZE}")

    triggers = sum(q for r, q in main_records if r.trigger is not None)
    heals = sum(q for r, q in main_records if r.trigger is not None and r.trigger.value == "Heal")
    sentinels = sum(q for r, q in main_records if r.is_sentinel)
    if triggers > MAX_TRIGGERS:
        errors.append(f"Main deck has {triggers} trigger units, limit is {MAX_TRIGGERS}")
    elif triggers < MAX_TRIGGERS:
        warnings.append(f"Main deck has only {triggers} trigger units")
    if heals > MAX_HEALS:
        errors.append(f"Main deck has {heals} heal triggers, limit is {MAX_HEALS}")
    if sentinels > MAX_SENTINELS:
        errors.append(f"Main deck has {sentinels} sentinels, limit is {MAX_SENTINELS}")

    copies: dict[str, int] = {}
    for record, quantity in ride_records + main_records:
        if record.is_crest:
            continue
        copies[record.id] = copies.get(record.id, 0) + quantity
    for card_id, count in copies.items():
        if count > MAX_COPIES:
            errors.append(f"Card '{card_id}' appears {count} times, limit is {MAX_COPIES}")

    # Card level checks
    for record, _ in ride_records + main_records:
        for effect in record.effects:
            if effect.function_index not in registry:
                errors.append(
                    f"Card '{record.id}': effect index {effect.function_index} is not registered"
                )
        if record.power is None and record.skills and not record.is_crest:
            warnings.append(f"Card '{record.id}' has skills but no power")

    return ValidationResult(
        valid=len(errors) == 0,
        errors=errors,
        warnings=warnings,
    )


def _resolve(entries, database: CardDatabase, zone: str, errors: list[str]) -> list[tuple[CardRecord, int]]:
    resolved = []
    for entry in entries:
        record = database.get(entry.card_id)
        if record is None:
            errors.append(f"Unknown card '{entry.card_id}' in {zone}")
            continue
        resolved.append((record, entry.quantity))
    return resolved


def _validate_ride_deck(records: list[tuple[CardRecord, int]]) -> list[str]:
    """The ride deck needs one unit per grade from 0 upwards, crests aside."""
    errors = []
    grades = sorted(
        r.grade for r, q in records for _ in range(q)
        if not r.is_crest and r.grade is not None
    )
    if not grades:
        return ["Ride deck has no units"]
    if grades[0] != 0:
        errors.append("Ride deck has no grade 0 starting vanguard")
    for expected, grade in enumerate(grades):
        if grade != expected:
            errors.append(f"Ride deck grades must climb one at a time, got {grades}")
            break
    return errors


def load_deck(
    path: str | Path,
    database: CardDatabase,
    strict: bool = False,
    registry: EffectRegistry | None = None,
) -> tuple[DeckRecord, CardDatabase, ValidationResult]:
    """
    Load a deck list from a JSON file and validate it.

    A deck may carry its own "cards" list, which extends the database;
    the extended database is returned with the deck.
    Raises DeckValidationError if strict=True and errors exist.
    """
    path = Path(path)
    data = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(data, dict):
        raise ValueError(f"{path} does not hold a deck object")

    database = dict(database)
    for card in data.get("cards", []):
        record = CardRecord.from_dict(card)
        database[record.id] = record
    deck = DeckRecord.from_dict({"name": path.stem, **data})

    result = validate_deck(deck, database, registry)
    if strict and not result.valid:
        raise DeckValidationError(result.errors)
    return deck, database, result
