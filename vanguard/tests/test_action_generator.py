"""
Tests for legal action generation.

Tests:
- Every phase offers at least one action
- Mulligan, ride, call, move and act options
- Attack and guard options in battle
- Effect resolution options
"""

import pytest

from ..engine_core.state import (
    Phase, EffectDefinition, EffectCost, Event, EventType, PendingEffect,
)
from ..engine_core.action import Action, ActionType, RideSource
from ..engine_core.action_generator import ActionGenerator, legal_actions, is_legal
from .conftest import make_card, make_player


def types_of(actions):
    return [a.action_type for a in actions]


@pytest.fixture
def generator():
    return ActionGenerator()


class TestMulligan:
    """Tests for mulligan options."""

    def test_every_subset_of_the_hand(self, new_match, generator):
        """A five card hand gives 32 distinct redraw choices."""
        actions = generator.generate(new_match)

        assert len(actions) == 32
        assert len(set(actions)) == 32
        assert Action.mulligan(()) in actions
        assert Action.mulligan((0, 1, 2, 3, 4)) in actions


class TestRidePhase:
    """Tests for ride options."""

    def test_ride_options_are_deduplicated(self, battle_state, generator):
        """Copies of a card in hand give one option; discards are offered once per name."""
        player = battle_state.players[0]
        player.board.get_circle("V").unit = make_card("v", grade=1)
        player.hand = [
            make_card("k1", grade=2, card_id="K", name="Knight"),
            make_card("k2", grade=2, card_id="K", name="Knight"),
            make_card("s1", grade=1, card_id="S", name="Squire"),
            make_card("w1", grade=3, card_id="W", name="Warlord"),
        ]
        player.ride_deck = [make_card("rd2", grade=2, card_id="RD2"), make_card("rd3", grade=3, card_id="RD3")]
        battle_state.phase = Phase.RIDE

        actions = generator.generate(battle_state)

        from_hand = [a for a in actions if a.payload.source == RideSource.HAND]
        from_ride_deck = [a for a in actions if a.payload.source == RideSource.RIDE_DECK]
        assert sorted(a.payload.card_id for a in from_hand) == ["K", "S"]
        assert {a.payload.discard_card_id for a in from_ride_deck} == {"K", "S", "W"}
        assert all(a.payload.card_id == "RD2" for a in from_ride_deck)
        assert types_of(actions).count(ActionType.PASS_RIDE_PHASE) == 1
        assert len(actions) == 6

    def test_no_ride_deck_option_without_next_grade(self, battle_state, generator):
        player = battle_state.players[0]
        player.ride_deck = []
        player.hand = []
        battle_state.phase = Phase.RIDE

        actions = generator.generate(battle_state)
        assert types_of(actions) == [ActionType.PASS_RIDE_PHASE]


class TestMainPhase:
    """Tests for call, move and act options."""

    def test_calls_to_every_rear_circle(self, battle_state, generator):
        """Units up to the vanguard's grade can be called to any of the five rear circles."""
        player = battle_state.players[0]
        player.board = make_player("a", make_card("v", grade=1)).board
        player.hand = [
            make_card("low", grade=1),
            make_card("high", grade=2),
            make_card("crest", grade=None, power=None),
        ]
        battle_state.phase = Phase.MAIN

        calls = [a for a in generator.generate(battle_state) if a.action_type == ActionType.CALL]

        assert len(calls) == 5
        assert {a.payload.instance_id for a in calls} == {"low"}
        assert {a.payload.circle for a in calls} == {"R1", "R2", "R3", "R4", "R5"}

    def test_moves_within_columns(self, battle_state, generator):
        player = battle_state.players[0]
        player.board = make_player(
            "a", make_card("v"), rear={"R1": make_card("r1"), "R5": make_card("r5")},
        ).board
        battle_state.phase = Phase.MAIN

        moves = [a for a in generator.generate(battle_state) if a.action_type == ActionType.MOVE]
        assert Action.move("R1", "R3") in moves
        assert Action.move("R5", "R2") in moves
        assert len(moves) == 2

    def test_no_moves_on_empty_columns(self, battle_state, generator):
        player = battle_state.players[0]
        player.board = make_player("a", make_card("v")).board
        player.hand = []
        battle_state.phase = Phase.MAIN

        assert types_of(generator.generate(battle_state)) == [ActionType.PASS_MAIN_PHASE]

    def _crest_state(self, battle_state, energy):
        player = battle_state.players[0]
        player.crest = [make_card("crest", grade=None, power=None, card_id="CREST", effects=[
            EffectDefinition(
                trigger="act",
                function_index=3,
                is_act=True,
                once_per_turn=True,
                cost=EffectCost(energy=7),
                condition=["player.energy", ">=", 7],
            ),
        ])]
        player.max_energy = 10
        player.energy = energy
        battle_state.phase = Phase.MAIN
        return battle_state

    def test_act_offered_when_condition_holds(self, battle_state, generator):
        state = self._crest_state(battle_state, energy=7)
        acts = [a for a in generator.generate(state) if a.action_type == ActionType.ACT]
        assert acts == [Action.act("CREST", 3)]

    def test_act_hidden_when_condition_fails(self, battle_state, generator):
        state = self._crest_state(battle_state, energy=6)
        assert ActionType.ACT not in types_of(generator.generate(state))

    def test_act_hidden_after_use_this_turn(self, battle_state, generator):
        state = self._crest_state(battle_state, energy=10)
        state.players[0].used_turnly_effects = [3]
        assert ActionType.ACT not in types_of(generator.generate(state))


class TestBattlePhase:
    """Tests for attack options."""

    def test_attacks_with_and_without_boost(self, battle_state, generator):
        """R1 can attack boosted or not; the vanguard has no booster."""
        actions = generator.generate(battle_state)
        attacks = [a for a in actions if a.action_type == ActionType.ATTACK]

        assert len(attacks) == 6
        assert Action.attack("R1", "V", boost=True) in attacks
        assert Action.attack("R1", "R2", boost=False) in attacks
        assert Action.attack("V", "V", boost=False) in attacks
        assert Action.attack("V", "V", boost=True) not in attacks
        assert actions[-1].action_type == ActionType.PASS_BATTLE_PHASE

    def test_resting_units_cannot_attack_or_boost(self, battle_state, generator):
        board = battle_state.players[0].board
        board.get_circle("V").unit.is_resting = True
        board.get_circle("R3").unit.is_resting = True

        attacks = [a for a in generator.generate(battle_state) if a.action_type == ActionType.ATTACK]
        assert {a.payload.attacker for a in attacks} == {"R1"}
        assert not any(a.payload.boost for a in attacks)

    def test_booster_needs_boost_skill(self, battle_state, generator):
        battle_state.players[0].board.get_circle("R3").unit.skills = []
        attacks = [a for a in generator.generate(battle_state) if a.action_type == ActionType.ATTACK]
        assert not any(a.payload.boost for a in attacks)


class TestGuardStep:
    """Tests for guard options of the defender."""

    def test_guard_options(self, battle_state, generator):
        """Hand cards with a shield value and standing intercepts, plus one pass."""
        battle_state.players[1].board.vanguard.skills = ["Intercept"]
        battle_state.phase = Phase.GUARD

        actions = generator.generate(battle_state)

        guards = [a for a in actions if a.action_type == ActionType.GUARD]
        intercepts = [a for a in actions if a.action_type == ActionType.INTERCEPT]
        assert {a.payload.instance_id for a in guards} == {"d-h1", "d-h2"}
        assert [a.payload.from_circle for a in intercepts] == ["R2"]
        assert types_of(actions).count(ActionType.PASS_GUARD_STEP) == 1
        assert len(actions) == 4

    def test_guard_carries_shield(self, battle_state, generator):
        battle_state.phase = Phase.GUARD
        shields = {
            a.payload.instance_id: a.payload.shield
            for a in generator.generate(battle_state)
            if a.action_type == ActionType.GUARD
        }
        assert shields == {"d-h1": 10000, "d-h2": 5000}


class TestEffectResolution:
    """Tests for optional effect choices."""

    def test_optional_effects_and_pass(self, battle_state, generator):
        optional = EffectDefinition(trigger="on_ride", function_index=0, mandatory=False)
        battle_state.event_queue = [Event(
            EventType.ON_RIDE,
            pending_effects=[PendingEffect(card_name="Cadet", card_id="DEMO/002", effect=optional)],
        )]
        battle_state.phase = Phase.EFFECT_RESOLUTION

        actions = generator.generate(battle_state)
        assert actions == [
            Action.activate_effect("DEMO/002", 0),
            Action.simple(ActionType.PASS_EFFECT),
        ]


class TestAutomaticPhases:
    """Tests for phases without a decision."""

    @pytest.mark.parametrize(
        "phase",
        [Phase.STAND, Phase.DRAW, Phase.DRIVE_CHECK, Phase.CLOSE_STEP, Phase.END],
    )
    def test_single_pass(self, battle_state, generator, phase):
        battle_state.phase = phase
        assert types_of(generator.generate(battle_state)) == [ActionType.PASS]


class TestLegality:
    """Tests for the module level helpers."""

    def test_is_legal_compares_structurally(self, battle_state):
        assert is_legal(battle_state, Action.attack("V", "R2"))
        assert not is_legal(battle_state, Action.attack("R2", "V"))

    def test_description_does_not_matter(self, battle_state):
        action = Action(
            action_type=ActionType.PASS_BATTLE_PHASE,
            description="something else",
        )
        assert action in legal_actions(battle_state)
