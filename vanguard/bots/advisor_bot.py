"""
Advisor Bot - Search-backed policy.

The advisor runs the evaluation engine on the position and returns the
most visited action together with the full ranking, so a UI can show a
human player what the engine would do and why.

Decision strategy:
1. A single legal action is returned without searching
2. With a zero iteration budget, fall back to 1-ply heuristic lookahead
3. Otherwise search and take the most visited root action
"""

from __future__ import annotations
from typing import TYPE_CHECKING
import logging

from ..config import SearchConfig
from ..engine_core.checks import DefaultChooser
from .policy import BotPolicy, BotDecision, ChoiceDecision
from .evaluator import HeuristicEvaluator, EvaluationWeights
from .mcts import EvaluationEngine, EvaluatedAction

if TYPE_CHECKING:
    from ..engine_core.state import GameState
    from ..engine_core.action import Action
    from ..engine_core.effect_resolver import PendingChoice

logger = logging.getLogger(__name__)


class AdvisorBot(BotPolicy):
    """
    Policy that asks the evaluation engine for every decision.

    The engine of the last decision is kept on self.engine for inspection.
    """

    def __init__(
        self,
        config: SearchConfig | None = None,
        weights: EvaluationWeights | None = None,
    ):
        self.config = config or SearchConfig()
        self.evaluator = HeuristicEvaluator(weights)
        self.engine: EvaluationEngine | None = None
        self._chooser = DefaultChooser()

    def get_name(self) -> str:
        return "Advisor"

    def select_action(
        self,
        state: GameState,
        legal_actions: list[Action],
    ) -> BotDecision:
        if not legal_actions:
            raise ValueError("No legal actions available")

        if len(legal_actions) == 1:
            return BotDecision(
                action=legal_actions[0],
                explanation="Only legal action",
                evaluated_actions=1,
            )

        if self.config.max_iterations <= 0:
            return self._greedy(state, legal_actions)

        self.engine = EvaluationEngine(state, self.config, evaluator=self.evaluator)
        ranked = self.engine.search(legal_actions)
        if not ranked:
            logger.warning("Search produced no ranking, falling back to lookahead")
            return self._greedy(state, legal_actions)

        best = ranked[0]
        total_visits = sum(r.visits for r in ranked) or 1
        return BotDecision(
            action=best.action,
            explanation=_explain(best, self.engine.iterations),
            confidence=best.visits / total_visits,
            evaluated_actions=len(ranked),
            best_score=best.score,
            alternatives=ranked,
            evaluation_details={
                "iterations": self.engine.iterations,
                "grade_score": best.grade_score,
                "damage_score": best.damage_score,
            },
        )

    def select_choice(
        self,
        state: GameState,
        pending_choice: PendingChoice,
    ) -> ChoiceDecision:
        if not pending_choice.options:
            raise ValueError("No options available")
        index = self._chooser.choose(state, pending_choice)
        return ChoiceDecision(
            choice_id=pending_choice.choice_id,
            chosen_indices=[index],
            explanation="Vanguard first",
        )

    def _greedy(self, state: GameState, legal_actions: list[Action]) -> BotDecision:
        """1-ply lookahead with the heuristic evaluator."""
        player = state.acting_player_index
        scored = [
            (self.evaluator.evaluate_action(state, action, player), i)
            for i, action in enumerate(legal_actions)
        ]
        best_score, best_index = max(scored)
        return BotDecision(
            action=legal_actions[best_index],
            explanation="Best immediate position",
            evaluated_actions=len(legal_actions),
            best_score=best_score,
        )


def _explain(best: EvaluatedAction, iterations: int) -> str:
    return (
        f"Visited {best.visits} times in {iterations} iterations "
        f"(grade {best.grade_score:.2f}, damage {best.damage_score:.2f})"
    )
