"""
Effect Registry - Maps effect function indices to procedures.

An effect procedure receives the state the reducer already cloned and the
payload of the event that triggered it, and mutates that state in place.
It may draw, move cards between zones, change counters or enqueue further
events. Trigger, zone, condition and mandatory/optional gating have all
been checked before it is called.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Callable, TYPE_CHECKING
import logging

if TYPE_CHECKING:
    from ..engine_core.state import GameState

logger = logging.getLogger(__name__)

EffectFn = Callable[["GameState", Any], None]


@dataclass
class EffectRegistry:
    """Table of effect procedures keyed by function index."""
    effects: dict[int, EffectFn] = field(default_factory=dict)

    def register(self, function_index: int, effect: EffectFn) -> None:
        if function_index in self.effects:
            logger.warning(f"Replacing effect registered at index {function_index}")
        self.effects[function_index] = effect

    def get(self, function_index: int) -> EffectFn | None:
        return self.effects.get(function_index)

    def __contains__(self, function_index: object) -> bool:
        return function_index in self.effects

    def invoke(self, function_index: int, state: GameState, payload: Any = None) -> bool:
        """
        Run an effect against a state.

        Returns False (and logs) when nothing is registered at the index.
        """
        effect = self.get(function_index)
        if effect is None:
            logger.warning(f"No effect registered at index {function_index}")
            return False
        effect(state, payload)
        return True

    def copy(self) -> EffectRegistry:
        return EffectRegistry(effects=dict(self.effects))


def default_registry() -> EffectRegistry:
    """Registry preloaded with the bundled effect library."""
    from .library import LIBRARY

    registry = EffectRegistry()
    for function_index, effect in LIBRARY.items():
        registry.register(function_index, effect)
    return registry
