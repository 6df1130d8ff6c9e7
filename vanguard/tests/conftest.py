"""
Pytest fixtures for Vanguard tests.
"""

import pytest

from ..engine_core.state import GameState, PlayerState, Board, Card, Phase
from ..engine_core.action import Action, ActionType
from ..engine_core.reducer import Reducer
from ..games.standard import setup_match


def make_card(
    unique_id,
    grade=1,
    power=8000,
    shield=5000,
    skills=None,
    trigger=None,
    name=None,
    card_id=None,
    critical=1,
    effects=None,
):
    """Build a card; the definition id defaults to one per unique id."""
    return Card(
        unique_id=unique_id,
        id=card_id or f"TEST/{unique_id}",
        name=name or f"Unit {unique_id}",
        grade=grade,
        power=power,
        critical=critical,
        shield=shield,
        skills=list(skills or []),
        trigger=trigger,
        effects=list(effects or []),
    )


def make_deck(prefix, count=20):
    """Plain grade 1 units without triggers, so checks resolve nothing."""
    return [make_card(f"{prefix}-deck{i}", power=7000) for i in range(count)]


def make_player(prefix, vanguard, hand=None, rear=None, deck=None):
    board = Board.with_vanguard(vanguard)
    for circle_name, unit in (rear or {}).items():
        board.get_circle(circle_name).unit = unit
    return PlayerState(
        deck=deck if deck is not None else make_deck(prefix),
        board=board,
        hand=list(hand or []),
    )


def fingerprint(state):
    """Everything observable about a state, for before/after comparisons."""
    players = []
    for player in state.players:
        zones = tuple(
            tuple(c.unique_id for c in zone)
            for zone in (
                player.deck, player.ride_deck, player.hand, player.drop,
                player.damage, player.soul, player.guardian, player.trigger,
                player.crest,
            )
        )
        board = tuple(
            (name, c.unit.unique_id, c.unit.is_resting, c.unit.bonus_power, c.unit.bonus_critical)
            if c.unit else (name, None)
            for name, c in player.board.circles.items()
        )
        players.append((zones, board, player.energy, player.max_energy, tuple(player.used_turnly_effects)))
    return (
        state.phase, state.turn, state.current_player_index,
        state.current_battle, len(state.event_queue), tuple(players),
    )


def card_ids(player):
    return sorted(c.unique_id for c in player.all_cards())


def resolve_attack(reducer, state, attack, guards=()):
    """Attack, guard with the given actions, then run drive check and close step."""
    result = reducer.apply(state, attack)
    assert result.success, result.error
    state = result.new_state
    for guard in guards:
        result = reducer.apply(state, guard)
        assert result.success, result.error
        state = result.new_state
    for action_type in (ActionType.PASS_GUARD_STEP, ActionType.PASS, ActionType.PASS):
        result = reducer.apply(state, Action.simple(action_type))
        assert result.success, result.error
        state = result.new_state
    return state


@pytest.fixture
def reducer() -> Reducer:
    return Reducer()


@pytest.fixture
def new_match() -> GameState:
    """A seeded match with opening hands dealt, in the mulligan phase."""
    return setup_match(seed=7)


@pytest.fixture
def ride_phase_match(new_match, reducer) -> GameState:
    """Both players keep their hands; player 1 stands and draws into the ride phase."""
    state = new_match
    for action in (
        Action.mulligan(()),
        Action.mulligan(()),
        Action.simple(ActionType.PASS),  # stand
        Action.simple(ActionType.PASS),  # draw
    ):
        result = reducer.apply(state, action)
        assert result.success, result.error
        state = result.new_state
    assert state.phase == Phase.RIDE
    return state


@pytest.fixture
def battle_state() -> GameState:
    """
    Turn 3, player 1 in the battle phase.

    Attacker: 12000 vanguard, 8000 rear-guard on R1 with a 5000 Boost
    booster on R3. Defender: 11000 vanguard, 9000 Intercept rear-guard on
    R2, a hand of two guards and one grade 3 without shield.
    """
    attacker = make_player(
        "a",
        make_card("a-v", grade=2, power=12000),
        rear={
            "R1": make_card("a-r1", power=8000),
            "R3": make_card("a-r3", grade=0, power=5000, skills=["Boost"]),
        },
    )
    defender = make_player(
        "d",
        make_card("d-v", grade=2, power=11000),
        hand=[
            make_card("d-h1", grade=0, power=5000, shield=10000),
            make_card("d-h2", grade=1, power=8000, shield=5000),
            make_card("d-h3", grade=3, power=13000, shield=None),
        ],
        rear={"R2": make_card("d-r2", grade=2, power=9000, skills=["Intercept"])},
    )
    return GameState(
        players=[attacker, defender],
        turn=3,
        current_player_index=0,
        phase=Phase.BATTLE,
        random_seed=1,
    )
