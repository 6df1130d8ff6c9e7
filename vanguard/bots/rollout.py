"""
Rollout - Fast playouts used by the search to score a position.

Playouts pick actions uniformly at random except in the guard step,
where a simple defender heuristic keeps games from being decided by
careless guarding:

- At 5 or more damage, always guard
- Otherwise guard two attacks out of three (skip when the attack count
  this turn is a multiple of 3)
- Guard with the largest shields first, and only if the hand can cover
  the gap between attacker power and the target's base power
"""

from __future__ import annotations
from dataclasses import dataclass, field
import random

from ..engine_core.state import GameState, Phase
from ..engine_core.action import Action, ActionType
from ..engine_core.action_generator import ActionGenerator
from ..engine_core.reducer import Reducer
from ..engine_core.checks import RolloutChooser
from .evaluator import grade_score, damage_score

DEFAULT_DEPTH = 20
DESPERATION_DAMAGE = 5


@dataclass
class RolloutResult:
    """Features of the position a playout ended in."""
    grade_score: float
    damage_score: float
    steps: int = 0
    finished: bool = False  # the game ended inside the playout


class RolloutPolicy:
    """Chooses playout actions."""

    def __init__(self, rng: random.Random | None = None):
        self.rng = rng or random.Random()

    def choose(self, state: GameState, actions: list[Action], attacks_this_turn: int = 0) -> Action:
        if not actions:
            raise ValueError("No legal actions available")
        if state.phase == Phase.GUARD:
            return self.choose_guard(state, actions, attacks_this_turn)
        return self.rng.choice(actions)

    def choose_guard(self, state: GameState, actions: list[Action], attacks_this_turn: int) -> Action:
        pass_action = next(
            (a for a in actions if a.action_type == ActionType.PASS_GUARD_STEP),
            actions[-1],
        )
        battle = state.current_battle
        if battle is None:
            return pass_action

        defender = state.opponent
        target = defender.board.get_circle(battle.target_circle).unit
        target_power = (target.power or 0) if target else 0
        placed = sum(card.shield or 0 for card in defender.guardian)
        power_needed = battle.attacker_power - target_power - placed

        if len(defender.damage) >= DESPERATION_DAMAGE:
            should_guard = True
        else:
            should_guard = attacks_this_turn % 3 != 0

        if not should_guard or power_needed <= 0:
            return pass_action

        guards = sorted(
            (a for a in actions if a.action_type == ActionType.GUARD),
            key=lambda a: a.payload.shield or 0,
            reverse=True,
        )
        covered = 0
        chosen: list[Action] = []
        for guard in guards:
            if covered >= power_needed:
                break
            chosen.append(guard)
            covered += guard.payload.shield or 0

        if chosen and covered >= power_needed:
            return chosen[0]
        return pass_action


@dataclass
class Rollout:
    """Runs a depth-capped playout and scores where it stopped."""
    policy: RolloutPolicy = field(default_factory=RolloutPolicy)
    generator: ActionGenerator = field(default_factory=ActionGenerator)
    reducer: Reducer | None = None
    depth: int = DEFAULT_DEPTH

    def __post_init__(self):
        if self.reducer is None:
            self.reducer = Reducer(
                resolver=self.generator.resolver,
                chooser=RolloutChooser(self.policy.rng),
            )

    def simulate(self, state: GameState, perspective: int | None = None) -> RolloutResult:
        """
        Play up to `depth` actions from state and score the result for
        `perspective` (the player to act in state when not given).
        """
        if perspective is None:
            perspective = state.current_player_index

        current = state
        steps = 0
        attacks_this_turn = 0
        last_player = -1

        while not current.is_game_over() and steps < self.depth:
            actions = self.generator.generate(current)
            if not actions:
                break

            if current.current_player_index != last_player:
                attacks_this_turn = 0
                last_player = current.current_player_index

            action = self.policy.choose(current, actions, attacks_this_turn)
            if action.action_type == ActionType.ATTACK:
                attacks_this_turn += 1

            result = self.reducer.apply(current, action)
            current = result.new_state
            steps += 1

        return RolloutResult(
            grade_score=grade_score(current, perspective),
            damage_score=damage_score(current, perspective),
            steps=steps,
            finished=current.is_game_over(),
        )
