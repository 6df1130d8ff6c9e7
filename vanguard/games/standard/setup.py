"""
Standard Game Setup - Creates the initial match state.

This module handles:
- Building the demo deck list
- Turning deck lists into per-player card instances
- Shuffling with a seed for determinism
- Dealing opening hands (the match starts in the mulligan phase)
"""

from __future__ import annotations

from ...card_schema.records import CardDatabase, DeckEntry, DeckRecord, build_database
from ...engine_core.state import GameState, PlayerState
from .cards import STANDARD_CARDS, RIDE_DECK_CARDS, MAIN_DECK_LIST


def standard_database() -> CardDatabase:
    """The demo card pool indexed by id."""
    return build_database(STANDARD_CARDS)


def build_demo_deck(name: str = "Demo Deck") -> DeckRecord:
    """
    The demo deck: one copy of each ride deck card and a 50 card main deck
    with 16 triggers (4 of them heals) and 4 sentinels.
    """
    return DeckRecord(
        name=name,
        ride_deck=[DeckEntry(quantity=1, card_id=c.id, name=c.name) for c in RIDE_DECK_CARDS],
        main_deck=[DeckEntry(quantity=n, card_id=c.id, name=c.name) for c, n in MAIN_DECK_LIST],
    )


def setup_match(
    seed: int | None = None,
    deck_a: DeckRecord | None = None,
    deck_b: DeckRecord | None = None,
    database: CardDatabase | None = None,
) -> GameState:
    """
    Set up a new two player match.

    Args:
        seed: Seed for deterministic shuffling and checks
        deck_a: Deck of the player going first (demo deck if not provided)
        deck_b: Deck of the player going second (demo deck if not provided)
        database: Card database the decks refer to (demo pool if not provided)

    Returns:
        GameState in the mulligan phase with opening hands dealt
    """
    database = database or standard_database()
    decks = [deck_a or build_demo_deck(), deck_b or build_demo_deck()]
    players = []
    for owner, deck in zip(("p1", "p2"), decks):
        ride_deck, main_deck = deck.to_cards(database, owner=owner)
        players.append(PlayerState.from_decks(ride_deck, main_deck))

    state = GameState(players=players, random_seed=seed)
    state.metadata["decks"] = [deck.name for deck in decks]
    state.start_game()
    return state
