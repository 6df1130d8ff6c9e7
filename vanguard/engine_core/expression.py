"""
Condition Evaluator - Boolean gates on card effects.

Conditions come from card data as nested lists:
- Leaf:      ["player.energy", ">=", 7]
- Composite: [<condition>, "and", <condition>] or [<condition>, "or", <condition>]

They are parsed into a small tagged AST (Leaf / And / Or) and evaluated
against a narrow, read-only view of the game state. Evaluation is
fail-closed: anything malformed is reported and counts as false.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Union, TYPE_CHECKING
import logging

if TYPE_CHECKING:
    from .state import GameState

logger = logging.getLogger(__name__)

OPERATORS = {
    "==": "==",
    "===": "==",
    "!=": "!=",
    "!==": "!=",
    ">=": ">=",
    "<=": "<=",
    ">": ">",
    "<": "<",
}


class MalformedConditionError(ValueError):
    """Raised by parse_condition for shapes it cannot decode."""


@dataclass(frozen=True)
class Leaf:
    path: str
    op: str
    value: Any


@dataclass(frozen=True)
class And:
    left: Condition
    right: Condition


@dataclass(frozen=True)
class Or:
    left: Condition
    right: Condition


Condition = Union[Leaf, And, Or]


def parse_condition(raw: Any) -> Condition | None:
    """
    Parse card-data condition lists into an AST.

    None stays None (no condition). Already-parsed nodes pass through.
    """
    if raw is None:
        return None
    if isinstance(raw, (Leaf, And, Or)):
        return raw
    if not isinstance(raw, (list, tuple)) or len(raw) != 3:
        raise MalformedConditionError(f"Condition must be a 3-element list: {raw!r}")

    left, middle, right = raw
    if isinstance(middle, str) and middle.lower() in ("and", "or"):
        left_node = parse_condition(left)
        right_node = parse_condition(right)
        if left_node is None or right_node is None:
            raise MalformedConditionError(f"Empty operand in composite condition: {raw!r}")
        if middle.lower() == "and":
            return And(left_node, right_node)
        return Or(left_node, right_node)

    if not isinstance(left, str):
        raise MalformedConditionError(f"Condition path must be a string: {left!r}")
    if middle not in OPERATORS:
        raise MalformedConditionError(f"Unsupported operator: {middle!r}")
    return Leaf(path=left, op=OPERATORS[middle], value=right)


@dataclass
class ConditionContext:
    """
    Read-only values a condition may look at.

    Built from the active player's point of view.
    """
    player: dict[str, Any]
    turn: int

    @classmethod
    def from_state(cls, state: GameState) -> ConditionContext:
        player = state.current_player
        return cls(
            player={
                "index": state.current_player_index,
                "energy": player.energy,
                "max_energy": player.max_energy,
                "damage": len(player.damage),
                "hand": len(player.hand),
                "soul": len(player.soul),
            },
            turn=state.turn,
        )


class ConditionEvaluator:
    """Evaluates condition trees against a game state."""

    def evaluate(self, condition: Any, state: GameState) -> bool:
        """
        Evaluate a raw or parsed condition.

        Absence of a condition is always true; malformed ones are false.
        """
        if condition is None:
            return True
        try:
            node = parse_condition(condition)
        except MalformedConditionError as e:
            logger.warning(f"Malformed condition treated as false: {e}")
            return False
        return self._evaluate_node(node, ConditionContext.from_state(state))

    def _evaluate_node(self, node: Condition, context: ConditionContext) -> bool:
        if isinstance(node, And):
            left = self._evaluate_node(node.left, context)
            right = self._evaluate_node(node.right, context)
            return left and right
        if isinstance(node, Or):
            left = self._evaluate_node(node.left, context)
            right = self._evaluate_node(node.right, context)
            return left or right

        value = self._resolve_property(node.path, context)
        if value is None:
            logger.warning(f"Unknown condition path treated as false: {node.path}")
            return False
        return self._compare(value, node.value, node.op)

    def _compare(self, left: Any, right: Any, op: str) -> bool:
        """Perform comparison operation."""
        try:
            if op == "==":
                return left == right
            elif op == "!=":
                return left != right
            elif op == "<":
                return left < right
            elif op == ">":
                return left > right
            elif op == "<=":
                return left <= right
            elif op == ">=":
                return left >= right
        except TypeError:
            logger.warning(f"Cannot compare {left!r} {op} {right!r}")
            return False
        return False

    def _resolve_property(self, path: str, context: ConditionContext) -> Any:
        """Resolve a property path like 'player.energy'."""
        parts = path.split(".")
        root = parts[0]

        if root == "player":
            obj: Any = context.player
        elif root == "turn":
            obj = context.turn
        else:
            return None

        for part in parts[1:]:
            if isinstance(obj, dict) and part in obj:
                obj = obj[part]
            else:
                return None
        return obj


_default_evaluator = ConditionEvaluator()


def evaluate_condition(condition: Any, state: GameState) -> bool:
    """Convenience function using a shared evaluator."""
    return _default_evaluator.evaluate(condition, state)
