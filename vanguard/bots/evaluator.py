"""
Heuristic Evaluator - Position scores shared by lookahead and search.

Two features, each in [0, 1]:
- grade: the player's vanguard grade over 4
- damage: the opponent's damage over the 6 that loses

Search rollouts report both features separately and blend them with
the same weights, so a tree statistic and a static evaluation of the
same position are directly comparable. A decided game adds or removes
win_bonus on top.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from ..engine_core.state import DAMAGE_TO_LOSE

if TYPE_CHECKING:
    from ..engine_core.state import GameState
    from ..engine_core.action import Action
    from ..engine_core.reducer import Reducer

MAX_GRADE = 4


@dataclass
class EvaluationWeights:
    """Blend of the two features; they need not sum to 1."""
    grade: float = 0.4
    damage: float = 0.6

    # Added (or subtracted) once the game is decided
    win_bonus: float = 1.0


@dataclass
class StateEvaluation:
    """Score of one position for one player."""
    total_score: float
    grade_score: float = 0.0
    damage_score: float = 0.0
    features: dict[str, float] = field(default_factory=dict)


def grade_score(state: GameState, player_index: int) -> float:
    """Vanguard grade as a fraction of the top grade."""
    vanguard = state.players[player_index].vanguard
    grade = vanguard.grade if vanguard and vanguard.grade is not None else 0
    return min(grade / MAX_GRADE, 1.0)


def damage_score(state: GameState, player_index: int) -> float:
    """Opponent damage as a fraction of the losing total."""
    opponent = state.players[1 - player_index]
    return min(len(opponent.damage) / DAMAGE_TO_LOSE, 1.0)


class HeuristicEvaluator:
    """Scores positions and, through evaluate_action, single moves."""

    def __init__(self, weights: EvaluationWeights | None = None):
        self.weights = weights or EvaluationWeights()

    def combine(self, grade: float, damage: float) -> float:
        """Blend the two rollout features into one score."""
        return self.weights.grade * grade + self.weights.damage * damage

    def evaluate(self, state: GameState, for_player: int) -> StateEvaluation:
        """Higher is better for for_player."""
        grade = grade_score(state, for_player)
        damage = damage_score(state, for_player)
        total = self.combine(grade, damage)

        features = {
            "grade": grade,
            "damage": damage,
            "own_damage": float(len(state.players[for_player].damage)),
        }

        winner = state.winner()
        if winner == for_player:
            total += self.weights.win_bonus
        elif winner is not None:
            total -= self.weights.win_bonus
        features["winner"] = -1.0 if winner is None else float(winner)

        return StateEvaluation(
            total_score=total,
            grade_score=grade,
            damage_score=damage,
            features=features,
        )

    def evaluate_action(
        self,
        state: GameState,
        action: Action,
        for_player: int,
        reducer: Reducer | None = None,
    ) -> float:
        """Score of the position action leads to; -inf when the reducer rejects it."""
        from ..engine_core.reducer import Reducer

        result = (reducer or Reducer()).apply(state, action)
        if not result.success:
            return float("-inf")

        return self.evaluate(result.new_state, for_player).total_score
