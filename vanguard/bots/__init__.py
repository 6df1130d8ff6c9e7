"""
Bots module - Automated players and the advisor.

Provides:
- BotPolicy: Interface for bot decision-making
- HeuristicEvaluator: Scores game states
- Determinizer: Samples hidden information
- EvaluationEngine: Monte Carlo tree search over determinized states
- AdvisorBot: Search-backed policy with ranked alternatives
"""

from .policy import (
    BotPolicy, BotDecision, ChoiceDecision, RandomPolicy, FirstLegalPolicy, PolicyChooser,
)
from .evaluator import HeuristicEvaluator, EvaluationWeights, StateEvaluation
from .determinizer import Determinizer
from .rollout import Rollout, RolloutPolicy, RolloutResult
from .mcts import EvaluationEngine, EvaluatedAction, SearchTree, Node
from .advisor_bot import AdvisorBot

__all__ = [
    "BotPolicy",
    "BotDecision",
    "ChoiceDecision",
    "RandomPolicy",
    "FirstLegalPolicy",
    "PolicyChooser",
    "HeuristicEvaluator",
    "EvaluationWeights",
    "StateEvaluation",
    "Determinizer",
    "Rollout",
    "RolloutPolicy",
    "RolloutResult",
    "EvaluationEngine",
    "EvaluatedAction",
    "SearchTree",
    "Node",
    "AdvisorBot",
]
