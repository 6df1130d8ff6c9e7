"""
Checks - Damage checks, drive checks and trigger resolution.

A check reveals the top card of a deck into the trigger zone, resolves
its trigger (if any), then moves it on: damage checks end in the damage
zone, drive checks end in hand. Revealed cards become public.

Trigger rules:
- Front:    +10000 power to every own front-row unit, no choice
- Critical: +10000 power to a chosen unit, then +1 critical to a chosen unit
- Draw:     +10000 power to a chosen unit, then draw a card
- Heal:     +10000 power to a chosen unit, then, only if own damage is at
            least the opponent's, move a chosen damage card to the drop zone

Choices go through a TriggerChooser so drivers can plug in a human, a bot
policy or the fast rollout shortcut.
"""

from __future__ import annotations
from typing import Protocol
import logging
import random

from .state import GameState, Card, TriggerKind
from .effect_resolver import PendingChoice

logger = logging.getLogger(__name__)

TRIGGER_POWER = 10000


class TriggerChooser(Protocol):
    """Picks an option index for a PendingChoice raised during a check."""

    def choose(self, state: GameState, choice: PendingChoice) -> int:
        ...


class DefaultChooser:
    """
    Deterministic choices for non-interactive play.

    Power and critical go to the vanguard when it is an option;
    heal removes the oldest damage card.
    """

    def choose(self, state: GameState, choice: PendingChoice) -> int:
        if choice.choice_type == "unit" and "V" in choice.options:
            return choice.options.index("V")
        return 0


class RolloutChooser:
    """
    Fast choices used inside search rollouts.

    Units are picked at random; heal always removes the most recent damage.
    """

    def __init__(self, rng: random.Random | None = None):
        self.rng = rng or random.Random()

    def choose(self, state: GameState, choice: PendingChoice) -> int:
        if choice.choice_type == "damage_card":
            return len(choice.options) - 1
        return self.rng.randrange(len(choice.options))


def _choose(chooser: TriggerChooser, state: GameState, choice: PendingChoice) -> int:
    index = chooser.choose(state, choice)
    if not 0 <= index < len(choice.options):
        logger.warning(f"Chooser returned out-of-range option {index} for {choice.choice_id}; using 0")
        return 0
    return index


def _unit_choice(state: GameState, player_index: int, choice_id: str, prompt: str) -> PendingChoice | None:
    board = state.players[player_index].board
    options = [c.name for c in board.front_row + board.back_row if c.unit]
    if not options:
        return None
    return PendingChoice(
        choice_id=choice_id,
        player_index=player_index,
        choice_type="unit",
        prompt=prompt,
        options=options,
    )


def heal_available(state: GameState, player_index: int) -> bool:
    """Heal applies only with damage at least equal to the opponent's."""
    own = len(state.players[player_index].damage)
    other = len(state.players[1 - player_index].damage)
    return own > 0 and own >= other


def apply_trigger(
    state: GameState,
    kind: TriggerKind,
    player_index: int,
    chooser: TriggerChooser,
) -> list[str]:
    """Resolve one trigger for a player. Returns human-readable changes."""
    player = state.players[player_index]
    board = player.board
    changes: list[str] = []

    if kind == TriggerKind.FRONT:
        for circle in board.front_row:
            if circle.unit:
                circle.unit.bonus_power += TRIGGER_POWER
        changes.append("Front trigger: front row +10000 power")
        return changes

    choice = _unit_choice(state, player_index, f"{kind.value.lower()}_power", "Choose a unit to get +10000 power")
    if choice:
        circle_name = choice.options[_choose(chooser, state, choice)]
        unit = board.get_circle(circle_name).unit
        unit.bonus_power += TRIGGER_POWER
        changes.append(f"{unit.name} on {circle_name} gets +10000 power")

    if kind == TriggerKind.CRITICAL:
        choice = _unit_choice(state, player_index, "critical_bonus", "Choose a unit to get +1 critical")
        if choice:
            circle_name = choice.options[_choose(chooser, state, choice)]
            unit = board.get_circle(circle_name).unit
            unit.bonus_critical += 1
            changes.append(f"{unit.name} on {circle_name} gets +1 critical")

    elif kind == TriggerKind.DRAW:
        drawn = state.draw(player_index, 1)
        if drawn:
            changes.append(f"Player {player_index + 1} draws a card")

    elif kind == TriggerKind.HEAL:
        if heal_available(state, player_index):
            choice = PendingChoice(
                choice_id="heal",
                player_index=player_index,
                choice_type="damage_card",
                prompt="Choose a damage card to heal",
                options=[card.unique_id for card in player.damage],
            )
            healed = player.damage.pop(_choose(chooser, state, choice))
            player.drop.append(healed)
            changes.append(f"Healed {healed.label()}")
        else:
            changes.append("Heal condition not met")

    return changes


def _reveal(state: GameState, player_index: int) -> Card | None:
    player = state.players[player_index]
    if not player.deck:
        logger.warning(f"Player {player_index + 1} has no cards left to check")
        return None
    card = player.deck.pop()
    card.is_public = True
    player.trigger.append(card)
    return card


def damage_check(
    state: GameState,
    player_index: int,
    amount: int,
    chooser: TriggerChooser,
) -> list[str]:
    """Perform `amount` damage checks for a player."""
    player = state.players[player_index]
    changes: list[str] = []
    for i in range(amount):
        card = _reveal(state, player_index)
        if card is None:
            break
        changes.append(f"Damage check {i + 1}: {card.label()}")
        if card.trigger:
            changes.extend(apply_trigger(state, card.trigger, player_index, chooser))
        player.trigger.remove(card)
        player.damage.append(card)
    return changes


def drive_check(state: GameState, amount: int, chooser: TriggerChooser) -> list[str]:
    """Perform `amount` drive checks for the current player."""
    player_index = state.current_player_index
    player = state.players[player_index]
    changes: list[str] = []
    for i in range(amount):
        card = _reveal(state, player_index)
        if card is None:
            break
        changes.append(f"Drive check {i + 1}: {card.label()}")
        if card.trigger:
            changes.extend(apply_trigger(state, card.trigger, player_index, chooser))
        player.trigger.remove(card)
        player.hand.append(card)
    return changes
