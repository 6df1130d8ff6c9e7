"""
Bot Policy - How a seat without a human picks its moves.

Every policy answers two kinds of question:
- select_action: which of the generated legal actions to play
- select_choice: which option to take when a check asks the seat for
  a unit or a damage card (critical and front bonuses, heal targets)

Decisions carry an explanation and, for the advisor, the ranking that
produced them.
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any
import random

if TYPE_CHECKING:
    from ..engine_core.state import GameState
    from ..engine_core.action import Action
    from ..engine_core.effect_resolver import PendingChoice
    from .mcts import EvaluatedAction


@dataclass
class BotDecision:
    """
    The move a policy settled on.

    confidence is the share of probability or search effort behind the
    move; search-backed policies fill alternatives with every root action
    they ranked, best first.
    """
    action: Action
    explanation: str = ""
    confidence: float = 1.0

    evaluated_actions: int = 0
    best_score: float = 0.0
    alternatives: list[EvaluatedAction] = field(default_factory=list)
    evaluation_details: dict[str, Any] = field(default_factory=dict)


@dataclass
class ChoiceDecision:
    """Indices picked for a PendingChoice raised during a check."""
    choice_id: str
    chosen_indices: list[int]
    explanation: str = ""


class BotPolicy(ABC):
    """
    Base class for bot seats.

    Subclasses must pick actions; check-time choices default to the
    first option offered.
    """

    @abstractmethod
    def select_action(self, state: GameState, legal_actions: list[Action]) -> BotDecision:
        """Pick one of legal_actions. Raises ValueError when there are none."""

    def select_choice(self, state: GameState, pending_choice: PendingChoice) -> ChoiceDecision:
        _require_options(pending_choice)
        return ChoiceDecision(pending_choice.choice_id, [0], "First option")

    def get_name(self) -> str:
        return self.__class__.__name__


def _require_actions(legal_actions: list[Action]) -> None:
    if not legal_actions:
        raise ValueError("No legal actions available")


def _require_options(pending_choice: PendingChoice) -> None:
    if not pending_choice.options:
        raise ValueError(f"Choice {pending_choice.choice_id} has no options")


class RandomPolicy(BotPolicy):
    """Uniformly random moves and choices; the baseline opponent."""

    def __init__(self, seed: int | None = None):
        self.rng = random.Random(seed)

    def select_action(self, state: GameState, legal_actions: list[Action]) -> BotDecision:
        _require_actions(legal_actions)
        return BotDecision(
            action=self.rng.choice(legal_actions),
            explanation="Random move",
            confidence=1.0 / len(legal_actions),
            evaluated_actions=len(legal_actions),
        )

    def select_choice(self, state: GameState, pending_choice: PendingChoice) -> ChoiceDecision:
        _require_options(pending_choice)
        count = min(pending_choice.max_choices, len(pending_choice.options))
        picked = self.rng.sample(range(len(pending_choice.options)), count)
        return ChoiceDecision(pending_choice.choice_id, picked, "Random option")


class FirstLegalPolicy(BotPolicy):
    """
    Always plays the first generated action.

    Fully deterministic, which makes it handy for replay tests. Main phase
    moves come before the phase pass, so it can shuffle rear-guards for as
    long as the loop's step limit allows.
    """

    def select_action(self, state: GameState, legal_actions: list[Action]) -> BotDecision:
        _require_actions(legal_actions)
        return BotDecision(
            action=legal_actions[0],
            explanation="First legal action",
            evaluated_actions=1,
        )


class PolicyChooser:
    """Adapts a BotPolicy to the TriggerChooser interface used by checks."""

    def __init__(self, policy: BotPolicy):
        self.policy = policy

    def choose(self, state: GameState, choice: PendingChoice) -> int:
        decision = self.policy.select_choice(state, choice)
        return decision.chosen_indices[0] if decision.chosen_indices else 0
