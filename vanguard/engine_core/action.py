"""
Action System - Actions, payloads, and results.

Actions are produced by the ActionGenerator and consumed by the Reducer.
They are immutable and compare structurally, so the search tree can
match an action it already expanded against a freshly generated one.

All state changes flow through actions.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ActionType(Enum):
    """Types of actions in the system."""
    # Setup
    MULLIGAN = "MULLIGAN"

    # Ride phase
    RIDE = "RIDE"
    PASS_RIDE_PHASE = "PASS_RIDE_PHASE"

    # Main phase
    CALL = "CALL"
    MOVE = "MOVE"
    ACT = "ACT"
    PASS_MAIN_PHASE = "PASS_MAIN_PHASE"

    # Battle phase
    ATTACK = "ATTACK"
    PASS_BATTLE_PHASE = "PASS_BATTLE_PHASE"
    GUARD = "GUARD"
    INTERCEPT = "INTERCEPT"
    PASS_GUARD_STEP = "PASS_GUARD_STEP"

    # Effect resolution
    ACTIVATE_EFFECT = "ACTIVATE_EFFECT"
    PASS_EFFECT = "PASS_EFFECT"
    PROCESS_EVENTS = "PROCESS_EVENTS"

    # Generic
    PASS = "PASS"


class RideSource(Enum):
    HAND = "hand"
    RIDE_DECK = "rideDeck"


class ErrorCode(str, Enum):
    """Reasons an action left the state unchanged."""
    LOOKUP_FAILED = "LOOKUP_FAILED"
    UNAFFORDABLE_COST = "UNAFFORDABLE_COST"
    UNMATCHED_EFFECT = "UNMATCHED_EFFECT"
    UNHANDLED_ACTION = "UNHANDLED_ACTION"
    INVALID_ACTION = "INVALID_ACTION"


@dataclass(frozen=True)
class ActionPayload:
    """
    Identifying fields of an action.

    Different action types use different fields; unused ones stay None.
    """
    # Mulligan
    redraw_indices: tuple[int, ...] = ()

    # Card references
    card_id: str | None = None  # definition id
    instance_id: str | None = None  # unique id of one copy
    source: RideSource | None = None
    discard_card_id: str | None = None

    # Circles
    circle: str | None = None
    from_circle: str | None = None
    to_circle: str | None = None
    attacker: str | None = None
    target: str | None = None
    boost: bool = False

    # Effects
    function_index: int | None = None

    # Guard value, carried for heuristics
    shield: int | None = None


@dataclass(frozen=True)
class Action:
    """
    A complete action to be applied to the game state.

    The description is for display only and does not take part in equality.
    """
    action_type: ActionType
    payload: ActionPayload = field(default_factory=ActionPayload)
    description: str = field(default="", compare=False)

    @classmethod
    def mulligan(cls, redraw_indices: tuple[int, ...] | list[int]) -> Action:
        indices = tuple(redraw_indices)
        return cls(
            action_type=ActionType.MULLIGAN,
            payload=ActionPayload(redraw_indices=indices),
            description=f"Redraw cards {list(indices)}" if indices else "Keep hand",
        )

    @classmethod
    def ride_from_hand(cls, card_id: str, label: str = "") -> Action:
        return cls(
            action_type=ActionType.RIDE,
            payload=ActionPayload(card_id=card_id, source=RideSource.HAND),
            description=f"Ride {label or card_id} from hand",
        )

    @classmethod
    def ride_from_ride_deck(cls, card_id: str, discard_card_id: str, label: str = "") -> Action:
        return cls(
            action_type=ActionType.RIDE,
            payload=ActionPayload(
                card_id=card_id,
                source=RideSource.RIDE_DECK,
                discard_card_id=discard_card_id,
            ),
            description=f"Ride {label or card_id} from ride deck, discarding {discard_card_id}",
        )

    @classmethod
    def call(cls, instance_id: str, circle: str, label: str = "") -> Action:
        return cls(
            action_type=ActionType.CALL,
            payload=ActionPayload(instance_id=instance_id, circle=circle),
            description=f"Call {label or instance_id} to {circle}",
        )

    @classmethod
    def move(cls, from_circle: str, to_circle: str) -> Action:
        return cls(
            action_type=ActionType.MOVE,
            payload=ActionPayload(from_circle=from_circle, to_circle=to_circle),
            description=f"Move units between {from_circle} and {to_circle}",
        )

    @classmethod
    def act(cls, card_id: str, function_index: int, label: str = "") -> Action:
        return cls(
            action_type=ActionType.ACT,
            payload=ActionPayload(card_id=card_id, function_index=function_index),
            description=label or f"Activate skill of {card_id}",
        )

    @classmethod
    def attack(cls, attacker: str, target: str, boost: bool = False) -> Action:
        suffix = " (boosted)" if boost else ""
        return cls(
            action_type=ActionType.ATTACK,
            payload=ActionPayload(attacker=attacker, target=target, boost=boost),
            description=f"Attack {target} with {attacker}{suffix}",
        )

    @classmethod
    def guard(cls, instance_id: str, shield: int, label: str = "") -> Action:
        return cls(
            action_type=ActionType.GUARD,
            payload=ActionPayload(instance_id=instance_id, shield=shield),
            description=f"Guard with {label or instance_id} ({shield})",
        )

    @classmethod
    def intercept(cls, instance_id: str, from_circle: str, shield: int, label: str = "") -> Action:
        return cls(
            action_type=ActionType.INTERCEPT,
            payload=ActionPayload(instance_id=instance_id, from_circle=from_circle, shield=shield),
            description=f"Intercept with {label or instance_id} from {from_circle}",
        )

    @classmethod
    def activate_effect(cls, card_id: str, function_index: int, card_name: str = "") -> Action:
        return cls(
            action_type=ActionType.ACTIVATE_EFFECT,
            payload=ActionPayload(card_id=card_id, function_index=function_index),
            description=f"Activate effect of {card_name or card_id}",
        )

    @classmethod
    def simple(cls, action_type: ActionType, description: str = "") -> Action:
        """Factory for actions that carry no payload (the PASS_* family)."""
        return cls(action_type=action_type, description=description or action_type.value)


@dataclass
class ActionResult:
    """
    Result of applying an action.

    A failed result still carries the original, untouched state in
    new_state so drivers can keep going with a corrected action.
    """
    success: bool
    new_state: Any | None = None  # GameState
    error: str | None = None
    error_code: ErrorCode | None = None

    # Human-readable changes, for logs and UI
    state_changes: list[str] = field(default_factory=list)

    @classmethod
    def failure(
        cls,
        error: str,
        error_code: ErrorCode | None = None,
        state: Any | None = None,
    ) -> ActionResult:
        """Create a failure result."""
        return cls(success=False, new_state=state, error=error, error_code=error_code)

    @classmethod
    def success_with_state(
        cls,
        state: Any,
        changes: list[str] | None = None,
    ) -> ActionResult:
        """Create a success result with new state."""
        return cls(
            success=True,
            new_state=state,
            state_changes=changes or [],
        )
