"""
Action Generator - Generates all legal actions from a game state.

The action generator is used by:
1. Bots and the search engine to enumerate possible moves
2. UI to show available actions
3. Validation (is this action in legal_actions?)

Generation is a pure function of the state, dispatched on state.phase.
Every list it returns is non-empty and contains a pass option wherever
passing is legal.
"""

from __future__ import annotations
from dataclasses import dataclass, field

from .state import GameState, Phase, PlayerState, MOVE_COLUMNS
from .action import Action, ActionType, RideSource
from .effect_resolver import EventResolver


@dataclass
class ActionGenerator:
    """
    Generates legal actions for the current game state.

    The resolver is only used to read pending optional effects and the
    condition evaluator; generation never changes the state.
    """
    resolver: EventResolver = field(default_factory=EventResolver)

    def generate(self, state: GameState) -> list[Action]:
        """
        Generate all legal actions for the player who must act.

        Returns a list of fully-specified Action objects.
        """
        handlers = {
            Phase.MULLIGAN: self._generate_mulligan_actions,
            Phase.RIDE: self._generate_ride_actions,
            Phase.MAIN: self._generate_main_actions,
            Phase.BATTLE: self._generate_battle_actions,
            Phase.GUARD: self._generate_guard_actions,
            Phase.EFFECT_RESOLUTION: self._generate_effect_actions,
        }
        handler = handlers.get(state.phase)
        if handler is None:
            # Automatic or unhandled phase: PASS runs its step
            return [Action.simple(ActionType.PASS, f"Continue ({state.phase.value})")]
        return handler(state)

    def _generate_mulligan_actions(self, state: GameState) -> list[Action]:
        """Every subset of hand indices to redraw: bit j of i redraws card j."""
        hand_size = len(state.current_player.hand)
        actions = []
        for i in range(2 ** hand_size):
            redraw = tuple(j for j in range(hand_size) if (i >> j) & 1)
            actions.append(Action.mulligan(redraw))
        return actions

    def _generate_ride_actions(self, state: GameState) -> list[Action]:
        player = state.current_player
        vanguard = player.vanguard
        vanguard_grade = vanguard.grade if vanguard and vanguard.grade is not None else -1

        actions: list[Action] = []
        seen: set[tuple[str, RideSource]] = set()

        # Ride from hand: same grade or one higher
        for card in player.hand:
            if card.grade is None or card.grade not in (vanguard_grade, vanguard_grade + 1):
                continue
            key = (card.id, RideSource.HAND)
            if key in seen:
                continue
            seen.add(key)
            actions.append(Action.ride_from_hand(card.id, card.label()))

        # Ride from the ride deck, discarding a card from hand as cost
        ride_card = next(
            (c for c in player.ride_deck if c.grade == vanguard_grade + 1),
            None,
        )
        if ride_card is not None:
            discard_options: dict[str, str] = {}
            for card in player.hand:
                discard_options.setdefault(card.name, card.id)
            for discard_id in discard_options.values():
                actions.append(Action.ride_from_ride_deck(ride_card.id, discard_id, ride_card.label()))

        actions.append(Action.simple(ActionType.PASS_RIDE_PHASE, "End ride phase"))
        return actions

    def _generate_main_actions(self, state: GameState) -> list[Action]:
        player = state.current_player
        actions: list[Action] = []
        actions.extend(self._generate_call_actions(player))
        actions.extend(self._generate_move_actions(player))
        actions.extend(self._generate_act_actions(state, player))
        actions.append(Action.simple(ActionType.PASS_MAIN_PHASE, "End main phase"))
        return actions

    def _generate_call_actions(self, player: PlayerState) -> list[Action]:
        """Units of grade <= vanguard grade, onto any rear circle."""
        vanguard = player.vanguard
        if vanguard is None or vanguard.grade is None:
            return []

        actions = []
        for card in player.hand:
            if card.power is None or card.grade is None or card.grade > vanguard.grade:
                continue
            for circle in player.board.rear_circles:
                actions.append(Action.call(card.unique_id, circle.name, card.label()))
        return actions

    def _generate_move_actions(self, player: PlayerState) -> list[Action]:
        actions = []
        for front_name, back_name in MOVE_COLUMNS:
            front = player.board.get_circle(front_name)
            back = player.board.get_circle(back_name)
            if front.unit or back.unit:
                if front.unit:
                    actions.append(Action.move(front_name, back_name))
                else:
                    actions.append(Action.move(back_name, front_name))
        return actions

    def _generate_act_actions(self, state: GameState, player: PlayerState) -> list[Action]:
        """Activatable skills on the board or in the crest zone."""
        actions = []
        for card in player.board.units() + player.crest:
            for effect in card.effects:
                if not effect.is_act:
                    continue
                if effect.once_per_turn and effect.function_index in player.used_turnly_effects:
                    continue
                if not self.resolver.evaluator.evaluate(effect.condition, state):
                    continue
                label = effect.description or f"Activate skill of {card.name}"
                actions.append(Action.act(card.id, effect.function_index, label))
        return actions

    def _generate_battle_actions(self, state: GameState) -> list[Action]:
        player = state.current_player
        opponent = state.opponent
        targets = [c for c in opponent.board.front_row if c.unit]
        attackers = [c for c in player.board.front_row if c.unit and not c.unit.is_resting]

        actions: list[Action] = []
        if targets:
            for attacker in attackers:
                booster = player.board.booster_circle_for(attacker.name)
                can_boost = (
                    booster is not None
                    and booster.unit is not None
                    and not booster.unit.is_resting
                    and booster.unit.has_skill("Boost")
                )
                variants = (True, False) if can_boost else (False,)
                for boost in variants:
                    for target in targets:
                        actions.append(Action.attack(attacker.name, target.name, boost))

        actions.append(Action.simple(ActionType.PASS_BATTLE_PHASE, "End battle phase"))
        return actions

    def _generate_guard_actions(self, state: GameState) -> list[Action]:
        """Guard and intercept options for the defending player."""
        defender = state.opponent
        actions: list[Action] = []

        for card in defender.hand:
            if isinstance(card.shield, int):
                actions.append(Action.guard(card.unique_id, card.shield, card.label()))

        for circle in defender.board.front_row:
            unit = circle.unit
            if circle.name == "V":
                continue
            if unit and not unit.is_resting and unit.has_skill("Intercept"):
                actions.append(Action.intercept(unit.unique_id, circle.name, unit.shield or 0, unit.label()))

        actions.append(Action.simple(ActionType.PASS_GUARD_STEP, "Finish guarding"))
        return actions

    def _generate_effect_actions(self, state: GameState) -> list[Action]:
        actions = [
            Action.activate_effect(p.card_id, p.effect.function_index, p.card_name)
            for p in self.resolver.optional_effects(state)
        ]
        actions.append(Action.simple(ActionType.PASS_EFFECT, "Do not activate an effect"))
        return actions


_default_generator: ActionGenerator | None = None


def legal_actions(state: GameState) -> list[Action]:
    """
    Convenience function to get legal actions.

    Uses a shared ActionGenerator with the default effect registry.
    """
    global _default_generator
    if _default_generator is None:
        _default_generator = ActionGenerator()
    return _default_generator.generate(state)


def is_legal(state: GameState, action: Action) -> bool:
    """Check if a specific action is legal (structural comparison)."""
    return action in legal_actions(state)
