"""
Standard - The built-in demo format.

This module contains:
- The demo card pool (one nation, every implemented effect)
- The demo deck list
- Match setup
"""

from .cards import STANDARD_CARDS, get_card_by_id
from .setup import standard_database, build_demo_deck, setup_match

__all__ = [
    "STANDARD_CARDS",
    "get_card_by_id",
    "standard_database",
    "build_demo_deck",
    "setup_match",
]
