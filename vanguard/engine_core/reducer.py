"""
Reducer - Applies actions to game state.

The reducer is the single point of state mutation.
All state changes must go through apply_action().

Design principles:
- Pure function: (state, action) -> new_state; the input is never touched
- Structural failures are reported, not raised: the caller gets the
  original state back together with an error code
- Triggered effects go through the EventResolver
- Phases without a player decision are advanced by a PASS action
"""

from __future__ import annotations
from dataclasses import dataclass, field
import logging

from .state import (
    GameState, Phase, Card, Event, EventType, BattleRecord, UnknownCircleError,
    MOVE_COLUMNS,
)
from .action import Action, ActionType, ActionResult, ErrorCode, RideSource
from .effect_resolver import EventResolver
from .checks import TriggerChooser, DefaultChooser, damage_check, drive_check

logger = logging.getLogger(__name__)


class LookupFailed(LookupError):
    """A card or circle named by an action is not where the action says."""


@dataclass
class Reducer:
    """
    Reducer applies actions to game state.

    Stateless - all state is in GameState. The resolver carries the effect
    registry, the chooser answers trigger choices during checks.
    """
    resolver: EventResolver = field(default_factory=EventResolver)
    chooser: TriggerChooser = field(default_factory=DefaultChooser)

    def apply(self, state: GameState, action: Action) -> ActionResult:
        """
        Apply an action to the game state.

        Returns ActionResult with the new state, or the original state and
        an error code when the action could not be applied.
        """
        handler = self._get_handler(action.action_type)
        if handler is None:
            logger.warning(f"No handler for action type: {action.action_type}")
            return ActionResult(
                success=False,
                new_state=state.clone(),
                error=f"No handler for action type: {action.action_type}",
                error_code=ErrorCode.UNHANDLED_ACTION,
            )

        new_state = state.clone()
        try:
            result = handler(new_state, action)
        except (LookupFailed, UnknownCircleError) as e:
            logger.warning(f"{action.action_type.value} failed: {e}")
            return ActionResult.failure(str(e), ErrorCode.LOOKUP_FAILED, state=state)

        if not result.success:
            logger.warning(f"{action.action_type.value} failed: {result.error}")
            return ActionResult.failure(result.error, result.error_code, state=state)

        new_state.history.append(action.description or action.action_type.value)
        return result

    def _get_handler(self, action_type: ActionType):
        """Get the handler function for an action type."""
        handlers = {
            ActionType.MULLIGAN: self._handle_mulligan,
            ActionType.RIDE: self._handle_ride,
            ActionType.PASS_RIDE_PHASE: self._handle_pass_ride_phase,
            ActionType.CALL: self._handle_call,
            ActionType.MOVE: self._handle_move,
            ActionType.ACT: self._handle_act,
            ActionType.PASS_MAIN_PHASE: self._handle_pass_main_phase,
            ActionType.ATTACK: self._handle_attack,
            ActionType.PASS_BATTLE_PHASE: self._handle_pass_battle_phase,
            ActionType.GUARD: self._handle_guard,
            ActionType.INTERCEPT: self._handle_intercept,
            ActionType.PASS_GUARD_STEP: self._handle_pass_guard_step,
            ActionType.ACTIVATE_EFFECT: self._handle_activate_effect,
            ActionType.PASS_EFFECT: self._handle_pass_effect,
            ActionType.PROCESS_EVENTS: self._handle_process_events,
            ActionType.PASS: self._handle_pass,
        }
        return handlers.get(action_type)

    def _continue_to(self, state: GameState, next_phase: Phase, changes: list[str]) -> ActionResult:
        """Defer the phase change until every queued event is resolved."""
        state.next_phase = next_phase
        self.resolver.process_events(state)
        if state.phase == Phase.EFFECT_RESOLUTION:
            changes.append("Waiting for optional effects")
        return ActionResult.success_with_state(state, changes)

    # ------------------------------------------------------------------
    # Setup
    # ------------------------------------------------------------------

    def _handle_mulligan(self, state: GameState, action: Action) -> ActionResult:
        player_index = state.current_player_index
        player = state.current_player
        indices = sorted(set(action.payload.redraw_indices), reverse=True)

        for index in indices:
            if not 0 <= index < len(player.hand):
                raise LookupFailed(f"No card at hand index {index}")

        returned = []
        for index in indices:
            card = player.hand.pop(index)
            card.reset_transient()
            returned.append(card)
        player.deck.extend(returned)
        state.shuffle_deck(player_index)
        state.draw(player_index, len(returned))

        changes = [f"Player {player_index + 1} redraws {len(returned)} card(s)"]
        if player_index == 0:
            state.current_player_index = 1
        else:
            state.current_player_index = 0
            state.phase = Phase.STAND
            changes.append("Mulligan complete")
        return ActionResult.success_with_state(state, changes)

    # ------------------------------------------------------------------
    # Ride phase
    # ------------------------------------------------------------------

    def _handle_ride(self, state: GameState, action: Action) -> ActionResult:
        player = state.current_player
        payload = action.payload
        changes = []

        if payload.source == RideSource.HAND:
            card = _take_by_id(player.hand, payload.card_id, "hand")
        elif payload.source == RideSource.RIDE_DECK:
            card = _take_by_id(player.ride_deck, payload.card_id, "ride deck")
            discarded = _take_by_id(player.hand, payload.discard_card_id, "hand")
            player.drop.append(discarded)
            changes.append(f"Discarded {discarded.label()}")
        else:
            return ActionResult.failure(
                f"Unknown ride source: {payload.source}", ErrorCode.INVALID_ACTION
            )

        vanguard_circle = player.board.get_circle("V")
        old_vanguard = vanguard_circle.unit
        if old_vanguard is not None:
            player.soul.append(old_vanguard)
        card.is_public = True
        vanguard_circle.unit = card
        changes.append(f"Rode {card.label()}")

        state.event_queue.append(Event(EventType.ON_RIDE, payload=[old_vanguard, card]))
        return self._continue_to(state, Phase.MAIN, changes)

    def _handle_pass_ride_phase(self, state: GameState, action: Action) -> ActionResult:
        return self._continue_to(state, Phase.MAIN, ["Ride phase ended"])

    # ------------------------------------------------------------------
    # Main phase
    # ------------------------------------------------------------------

    def _handle_call(self, state: GameState, action: Action) -> ActionResult:
        player = state.current_player
        circle = player.board.get_circle(action.payload.circle)
        if circle.name == "V":
            return ActionResult.failure("Cannot call to the vanguard circle", ErrorCode.INVALID_ACTION)

        card = _take_by_unique_id(player.hand, action.payload.instance_id, "hand")
        changes = []
        if circle.unit is not None:
            retired = circle.unit
            player.drop.append(retired)
            changes.append(f"Retired {retired.label()} from {circle.name}")
        card.is_public = True
        circle.unit = card
        changes.append(f"Called {card.label()} to {circle.name}")

        state.event_queue.append(Event(EventType.ON_CALL, payload=[circle.name, card]))
        return self._continue_to(state, Phase.MAIN, changes)

    def _handle_move(self, state: GameState, action: Action) -> ActionResult:
        board = state.current_player.board
        source = board.get_circle(action.payload.from_circle)
        target = board.get_circle(action.payload.to_circle)
        pair = (source.name, target.name)
        if pair not in MOVE_COLUMNS and pair[::-1] not in MOVE_COLUMNS:
            return ActionResult.failure(
                f"Cannot move between {source.name} and {target.name}", ErrorCode.INVALID_ACTION
            )
        source.unit, target.unit = target.unit, source.unit
        return ActionResult.success_with_state(
            state, [f"Swapped {source.name} and {target.name}"]
        )

    def _handle_act(self, state: GameState, action: Action) -> ActionResult:
        player = state.current_player
        card_id = action.payload.card_id
        function_index = action.payload.function_index

        effect = None
        for card in player.board.units() + player.crest:
            if card.id != card_id:
                continue
            candidate = self.resolver.effect_for(card, function_index)
            if candidate is not None and candidate.is_act:
                effect = candidate
                break
        if effect is None:
            raise LookupFailed(f"No activatable effect {function_index} on {card_id}")

        if effect.cost.energy > player.energy:
            return ActionResult.failure(
                f"Not enough energy: need {effect.cost.energy}, have {player.energy}",
                ErrorCode.UNAFFORDABLE_COST,
            )

        if effect.once_per_turn:
            player.used_turnly_effects.append(function_index)
        self.resolver.registry.invoke(function_index, state, None)
        return self._continue_to(state, Phase.MAIN, [f"Activated effect {function_index} of {card_id}"])

    def _handle_pass_main_phase(self, state: GameState, action: Action) -> ActionResult:
        if state.turn == 1:
            # No battle on the first turn
            return self._continue_to(state, Phase.END, ["Main phase ended, battle skipped"])
        return self._continue_to(state, Phase.BATTLE, ["Main phase ended"])

    # ------------------------------------------------------------------
    # Battle phase
    # ------------------------------------------------------------------

    def _handle_attack(self, state: GameState, action: Action) -> ActionResult:
        player = state.current_player
        payload = action.payload
        attacker_circle = player.board.get_circle(payload.attacker)
        target_circle = state.opponent.board.get_circle(payload.target)
        attacker = attacker_circle.unit
        if attacker is None:
            raise LookupFailed(f"No unit on {attacker_circle.name} to attack with")
        if target_circle.unit is None:
            raise LookupFailed(f"No unit on opposing {target_circle.name} to attack")

        attacker.is_resting = True
        power = attacker.total_power
        changes = [f"{attacker.name} attacks {target_circle.unit.name}"]

        if payload.boost:
            booster_circle = player.board.booster_circle_for(attacker_circle.name)
            booster = booster_circle.unit if booster_circle else None
            if booster is None:
                raise LookupFailed(f"No booster behind {attacker_circle.name}")
            booster.is_resting = True
            power += booster.total_power
            changes.append(f"{booster.name} boosts, power {power}")

        state.current_battle = BattleRecord(
            attacker_circle=attacker_circle.name,
            target_circle=target_circle.name,
            attacker_power=power,
            boosted=payload.boost,
        )
        state.event_queue.append(Event(EventType.ON_ATTACK, payload=[attacker_circle.name, target_circle.name]))
        return self._continue_to(state, Phase.GUARD, changes)

    def _handle_pass_battle_phase(self, state: GameState, action: Action) -> ActionResult:
        return self._continue_to(state, Phase.END, ["Battle phase ended"])

    def _handle_guard(self, state: GameState, action: Action) -> ActionResult:
        defender = state.opponent
        card = _take_by_unique_id(defender.hand, action.payload.instance_id, "hand")
        card.is_public = True
        defender.guardian.append(card)
        return ActionResult.success_with_state(state, [f"Guarded with {card.label()}"])

    def _handle_intercept(self, state: GameState, action: Action) -> ActionResult:
        defender = state.opponent
        circle = defender.board.get_circle(action.payload.from_circle)
        if circle.name == "V":
            return ActionResult.failure("The vanguard cannot intercept", ErrorCode.INVALID_ACTION)
        unit = circle.unit
        if unit is None or unit.unique_id != action.payload.instance_id:
            raise LookupFailed(f"Unit {action.payload.instance_id} is not on {circle.name}")
        circle.unit = None
        unit.is_resting = True
        defender.guardian.append(unit)
        return ActionResult.success_with_state(state, [f"Intercepted with {unit.label()}"])

    def _handle_pass_guard_step(self, state: GameState, action: Action) -> ActionResult:
        return self._continue_to(state, Phase.DRIVE_CHECK, ["Guard step ended"])

    # ------------------------------------------------------------------
    # Effect resolution
    # ------------------------------------------------------------------

    def _handle_activate_effect(self, state: GameState, action: Action) -> ActionResult:
        activated = self.resolver.activate_optional(
            state, action.payload.card_id, action.payload.function_index
        )
        if not activated:
            return ActionResult.failure(
                f"Effect {action.payload.function_index} of {action.payload.card_id} is not pending",
                ErrorCode.UNMATCHED_EFFECT,
            )
        self.resolver.process_events(state)
        return ActionResult.success_with_state(state, [action.description or "Activated effect"])

    def _handle_pass_effect(self, state: GameState, action: Action) -> ActionResult:
        self.resolver.pass_optional(state)
        self.resolver.process_events(state)
        return ActionResult.success_with_state(state, ["Declined optional effects"])

    def _handle_process_events(self, state: GameState, action: Action) -> ActionResult:
        self.resolver.process_events(state)
        return ActionResult.success_with_state(state, ["Processed events"])

    # ------------------------------------------------------------------
    # Automatic steps
    # ------------------------------------------------------------------

    def _handle_pass(self, state: GameState, action: Action) -> ActionResult:
        steps = {
            Phase.STAND: self._stand_step,
            Phase.DRAW: self._draw_step,
            Phase.DRIVE_CHECK: self._drive_check_step,
            Phase.CLOSE_STEP: self._close_step,
            Phase.END: self._end_step,
        }
        step = steps.get(state.phase)
        if step is None:
            logger.info(f"PASS has nothing to do in phase {state.phase.value}")
            return ActionResult.success_with_state(state, [f"Nothing to do in {state.phase.value}"])
        return step(state)

    def _stand_step(self, state: GameState) -> ActionResult:
        for unit in state.current_player.board.units():
            unit.is_resting = False
        state.phase = Phase.DRAW
        return ActionResult.success_with_state(
            state, [f"Player {state.current_player_index + 1} stands all units"]
        )

    def _draw_step(self, state: GameState) -> ActionResult:
        changes = []
        player = state.current_player
        if not player.deck:
            # Losing by deck out ends the game before the ride phase
            player.decked_out = True
            state.phase = Phase.END
            return ActionResult.success_with_state(
                state, [f"Player {state.current_player_index + 1} cannot draw and loses"]
            )
        state.draw(state.current_player_index, 1)
        changes.append(f"Player {state.current_player_index + 1} draws a card")
        state.event_queue.append(Event(EventType.ON_RIDE_PHASE_START))
        return self._continue_to(state, Phase.RIDE, changes)

    def _drive_check_step(self, state: GameState) -> ActionResult:
        battle = state.current_battle
        if battle is None:
            return ActionResult.failure("No battle in progress", ErrorCode.INVALID_ACTION)
        changes = []
        if battle.attacker_circle == "V":
            attacker = state.current_player.board.get_circle("V").unit
            if attacker is not None:
                changes.extend(drive_check(state, attacker.drive, self.chooser))
        state.phase = Phase.CLOSE_STEP
        return ActionResult.success_with_state(state, changes)

    def _close_step(self, state: GameState) -> ActionResult:
        battle = state.current_battle
        if battle is None:
            return ActionResult.failure("No battle in progress", ErrorCode.INVALID_ACTION)

        player = state.current_player
        defender_index = state.opponent_index
        defender = state.opponent
        attacker = player.board.get_circle(battle.attacker_circle).unit
        target_circle = defender.board.get_circle(battle.target_circle)
        target = target_circle.unit
        changes = []

        if target is not None:
            shield = sum(card.shield or 0 for card in defender.guardian)
            defense = target.total_power + shield
            if battle.attacker_power >= defense:
                changes.append(f"Attack hits ({battle.attacker_power} vs {defense})")
                if target_circle.name == "V":
                    damage = attacker.total_critical if attacker else 1
                    changes.extend(damage_check(state, defender_index, damage, self.chooser))
                else:
                    defender.drop.append(target)
                    target_circle.unit = None
                    changes.append(f"{target.name} is retired")
            else:
                changes.append(f"Attack does not hit ({battle.attacker_power} vs {defense})")

        defender.drop.extend(defender.guardian)
        defender.guardian = []
        state.current_battle = None

        can_attack = any(c.unit and not c.unit.is_resting for c in player.board.front_row)
        state.phase = Phase.BATTLE if can_attack else Phase.END
        return ActionResult.success_with_state(state, changes)

    def _end_step(self, state: GameState) -> ActionResult:
        for player in state.players:
            for unit in player.board.units():
                unit.reset_bonuses()
        ended = state.current_player_index
        state.next_turn()
        state.switch_player()
        state.phase = Phase.STAND
        return ActionResult.success_with_state(
            state, [f"Player {ended + 1} ends the turn", f"Turn {state.turn} begins"]
        )


def _take_by_id(cards: list[Card], card_id: str | None, zone: str) -> Card:
    """Remove the first card with a definition id."""
    for i, card in enumerate(cards):
        if card.id == card_id:
            return cards.pop(i)
    raise LookupFailed(f"Card {card_id} not found in {zone}")


def _take_by_unique_id(cards: list[Card], unique_id: str | None, zone: str) -> Card:
    for i, card in enumerate(cards):
        if card.unique_id == unique_id:
            return cards.pop(i)
    raise LookupFailed(f"Card {unique_id} not found in {zone}")


_default_reducer: Reducer | None = None


def apply_action(state: GameState, action: Action) -> GameState:
    """
    Convenience function to apply an action.

    Returns the new state, or the original state if the action failed.
    """
    global _default_reducer
    if _default_reducer is None:
        _default_reducer = Reducer()
    result = _default_reducer.apply(state, action)
    return result.new_state if result.success else state
