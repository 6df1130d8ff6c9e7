"""
Effect Library - The implemented card effects.

Each function is one printed ability. The index in LIBRARY is the
function_index card data refers to.
"""

from __future__ import annotations
from typing import Any, TYPE_CHECKING
import logging

if TYPE_CHECKING:
    from ..engine_core.state import GameState

logger = logging.getLogger(__name__)

ENERGY_GENERATOR_NAME = "Energy Generator"
MAX_ENERGY_10 = "MAX_ENERGY_10"


def on_ride_if_second_draw(state: GameState, payload: Any = None) -> None:
    """
    Effect 0: [AUTO] When this unit rides as vanguard, if you went second, draw a card.

    The "went second" part is the card's condition; by the time this runs
    it has already passed.
    """
    player_index = state.current_player_index
    state.draw(player_index, 1)
    logger.debug(f"Player {player_index + 1} draws from a ride-upon effect")


def on_ride_energy_crest(state: GameState, payload: Any = None) -> None:
    """
    Effect 1: [AUTO] Ride Deck: When you ride, put this card into the crest zone,
    and if you went second, [Energy-Charge 3].
    """
    player_index = state.current_player_index
    player = state.players[player_index]

    for i, card in enumerate(player.ride_deck):
        if card.name == ENERGY_GENERATOR_NAME:
            crest = player.ride_deck.pop(i)
            crest.is_public = True
            player.crest.append(crest)
            if MAX_ENERGY_10 not in player.continuous_effects:
                player.continuous_effects.append(MAX_ENERGY_10)
            player.max_energy = 10
            logger.debug(f"{crest.name} moved to the crest zone")
            break

    if player_index == 1:
        player.energy_charge(3)


def on_ride_phase_start_energy_charge(state: GameState, payload: Any = None) -> None:
    """Effect 2: [AUTO] At the beginning of your ride phase, [Energy-Charge 3]."""
    state.current_player.energy_charge(3)


def act_energy_blast_draw(state: GameState, payload: Any = None) -> None:
    """Effect 3: [ACT][1/Turn] [COST][Energy-Blast 7], and draw a card."""
    player_index = state.current_player_index
    state.players[player_index].energy -= 7
    state.draw(player_index, 1)


LIBRARY = {
    0: on_ride_if_second_draw,
    1: on_ride_energy_crest,
    2: on_ride_phase_start_energy_charge,
    3: act_energy_blast_draw,
}
