"""
Card Schema - Card records, deck lists and deck validation.

Card data and deck lists are plain JSON; records convert them into
engine Cards.
"""

from .records import (
    CardRecord,
    CardDatabase,
    DeckEntry,
    DeckRecord,
    build_database,
    parse_value,
)
from .validation import (
    ValidationResult,
    DeckValidationError,
    validate_deck,
    load_deck,
)

__all__ = [
    "CardRecord",
    "CardDatabase",
    "DeckEntry",
    "DeckRecord",
    "build_database",
    "parse_value",
    "ValidationResult",
    "DeckValidationError",
    "validate_deck",
    "load_deck",
]
