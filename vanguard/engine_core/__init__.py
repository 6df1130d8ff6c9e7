"""
Engine Core - Deterministic game state management and effect resolution.

The engine is the runtime that:
1. Holds the GameState (cards, circles, boards, players)
2. Generates legal actions
3. Applies actions via the reducer
4. Resolves triggered effects through the event queue
5. Performs damage and drive checks
"""

from .state import (
    GameState, PlayerState, Board, Circle, Card, EffectDefinition, EffectCost,
    Phase, TriggerKind, CardZone, EventType, Event, BattleRecord, UnknownCircleError,
)
from .action import Action, ActionType, ActionPayload, ActionResult, ErrorCode, RideSource
from .reducer import Reducer, apply_action
from .action_generator import ActionGenerator, legal_actions, is_legal
from .effect_resolver import EventResolver, PendingChoice, collect_effects_for_event, process_events
from .expression import ConditionEvaluator, parse_condition, evaluate_condition
from .checks import TriggerChooser, DefaultChooser, RolloutChooser

__all__ = [
    "GameState",
    "PlayerState",
    "Board",
    "Circle",
    "Card",
    "EffectDefinition",
    "EffectCost",
    "Phase",
    "TriggerKind",
    "CardZone",
    "EventType",
    "Event",
    "BattleRecord",
    "UnknownCircleError",
    "Action",
    "ActionType",
    "ActionPayload",
    "ActionResult",
    "ErrorCode",
    "RideSource",
    "Reducer",
    "apply_action",
    "ActionGenerator",
    "legal_actions",
    "is_legal",
    "EventResolver",
    "PendingChoice",
    "collect_effects_for_event",
    "process_events",
    "ConditionEvaluator",
    "parse_condition",
    "evaluate_condition",
    "TriggerChooser",
    "DefaultChooser",
    "RolloutChooser",
]
