"""
Effect Resolver - Event queue and triggered-effect resolution.

When an action raises events (ON_RIDE, ON_RIDE_PHASE_START, ...), the
resolver works through the queue head-first:

1. Lazily collect the effects that respond to the head event
2. Auto-resolve mandatory effects one at a time
3. Pause in the effect_resolution phase while optional effects remain
4. Pop the event once nothing is pending for it
5. When the queue is empty, move to the deferred next phase

A mandatory effect is removed from the pending list BEFORE it is invoked,
so an effect that raises new events cannot re-trigger itself forever.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, TYPE_CHECKING
import logging

from .state import GameState, Event, PendingEffect, Phase, CardZone, Card
from .expression import ConditionEvaluator
from ..effects.registry import EffectRegistry, default_registry

if TYPE_CHECKING:
    from .state import EffectDefinition

logger = logging.getLogger(__name__)


@dataclass
class PendingChoice:
    """
    A decision the engine needs from a player mid-resolution.

    Returned to the UI/bot so it can pick among indexed options.
    """
    choice_id: str
    player_index: int
    choice_type: str  # "unit", "damage_card", ...
    prompt: str
    options: list[Any]  # Available choices
    min_choices: int = 1
    max_choices: int = 1
    optional: bool = False


def normalize_trigger_name(name: str) -> str:
    """'ON_RIDE', 'on-ride' and 'On Ride' all become 'on_ride'."""
    return name.strip().lower().replace("-", "_").replace(" ", "_")


def _zone_name(zone: CardZone | str | None) -> str | None:
    if isinstance(zone, CardZone):
        return zone.value
    return zone


@dataclass
class EventResolver:
    """
    Resolves the event queue of a state.

    Mutates the state it is given; the reducer only hands it clones.
    """
    registry: EffectRegistry = field(default_factory=default_registry)
    evaluator: ConditionEvaluator = field(default_factory=ConditionEvaluator)

    def cards_in_play(self, state: GameState, player_index: int) -> list[tuple[Card, CardZone]]:
        """Cards whose effects can respond to events, with their zone."""
        player = state.players[player_index]
        cards = [(card, CardZone.BOARD) for card in player.board.units()]
        cards.extend((card, CardZone.RIDE_DECK) for card in player.ride_deck)
        cards.extend((card, CardZone.CREST) for card in player.crest)
        cards.extend((card, CardZone.SOUL) for card in player.soul)
        return cards

    def collect_effects_for_event(self, event: Event, state: GameState) -> list[PendingEffect]:
        """Find every effect of the triggering player that responds to the event."""
        trigger_name = normalize_trigger_name(event.event_type.value)
        pending: list[PendingEffect] = []

        for card, zone in self.cards_in_play(state, state.current_player_index):
            for effect in card.effects:
                if normalize_trigger_name(effect.trigger) != trigger_name:
                    continue
                required_zone = _zone_name(effect.zone)
                if required_zone and required_zone != zone.value:
                    continue
                if not self.evaluator.evaluate(effect.condition, state):
                    continue
                pending.append(PendingEffect(
                    card_name=card.name,
                    card_id=card.id,
                    effect=effect,
                    event_payload=event.payload,
                ))

        return pending

    def process_events(self, state: GameState) -> GameState:
        """
        Drain the event queue as far as possible without a player decision.

        Returns the same state object, now either in effect_resolution
        (waiting for a choice) or in the deferred next phase.
        """
        while state.event_queue:
            event = state.event_queue[0]
            if event.pending_effects is None:
                event.pending_effects = self.collect_effects_for_event(event, state)

            mandatory = [p for p in event.pending_effects if p.effect.mandatory]
            if mandatory:
                to_resolve = mandatory[0]
                event.pending_effects.remove(to_resolve)
                logger.debug(f"Auto-resolving mandatory effect of {to_resolve.card_name}")
                self.registry.invoke(
                    to_resolve.effect.function_index, state, to_resolve.event_payload
                )
                continue

            if event.pending_effects:
                state.phase = Phase.EFFECT_RESOLUTION
                return state

            state.event_queue.pop(0)

        state.phase = state.next_phase or Phase.MAIN
        state.next_phase = None
        return state

    def optional_effects(self, state: GameState) -> list[PendingEffect]:
        """Optional effects waiting on the head event. Does not modify the state."""
        if not state.event_queue:
            return []
        event = state.event_queue[0]
        pending = event.pending_effects
        if pending is None:
            pending = self.collect_effects_for_event(event, state)
        return [p for p in pending if not p.effect.mandatory]

    def activate_optional(self, state: GameState, card_id: str, function_index: int) -> bool:
        """
        Resolve one optional effect of the head event.

        Returns False when no matching optional effect is pending.
        """
        if not state.event_queue:
            return False
        event = state.event_queue[0]
        if event.pending_effects is None:
            event.pending_effects = self.collect_effects_for_event(event, state)
        for pending in self.optional_effects(state):
            if pending.card_id == card_id and pending.effect.function_index == function_index:
                event.pending_effects.remove(pending)
                self.registry.invoke(function_index, state, pending.event_payload)
                return True
        return False

    def pass_optional(self, state: GameState) -> None:
        """Decline every optional effect of the head event."""
        if not state.event_queue:
            return
        event = state.event_queue[0]
        if event.pending_effects is None:
            event.pending_effects = self.collect_effects_for_event(event, state)
        event.pending_effects = [p for p in event.pending_effects if p.effect.mandatory]

    def effect_for(self, card: Card, function_index: int) -> EffectDefinition | None:
        for effect in card.effects:
            if effect.function_index == function_index:
                return effect
        return None


_default_resolver: EventResolver | None = None


def _resolver() -> EventResolver:
    global _default_resolver
    if _default_resolver is None:
        _default_resolver = EventResolver()
    return _default_resolver


def collect_effects_for_event(event: Event, state: GameState) -> list[PendingEffect]:
    """Convenience function using the default registry."""
    return _resolver().collect_effects_for_event(event, state)


def process_events(state: GameState) -> GameState:
    """Convenience function using the default registry."""
    return _resolver().process_events(state)
