"""
Tests for the game state model.

Tests:
- Card runtime fields
- Board lookups
- Player construction from deck lists
- Win detection
- Cloning
"""

import pytest

from ..engine_core.state import (
    GameState, PlayerState, Board, Phase, UnknownCircleError, BOOSTER_FOR,
)
from .conftest import make_card


class TestCard:
    """Tests for card instances."""

    def test_drive_from_skills(self):
        """Drive follows the drive-tier skill tags."""
        assert make_card("c1").drive == 1
        assert make_card("c2", skills=["Twin Drive"]).drive == 2
        assert make_card("c3", skills=["Triple Drive", "Twin Drive"]).drive == 3

    def test_non_unit_has_no_drive(self):
        """A card without power never drives."""
        card = make_card("crest", grade=None, power=None, skills=["Twin Drive"])
        assert card.drive == 0
        assert not card.is_unit

    def test_equality_uses_unique_id(self):
        """Two copies of the same card are different cards."""
        a = make_card("x1", card_id="DEMO/020")
        b = make_card("x2", card_id="DEMO/020")
        assert a != b
        assert a == make_card("x1", power=1000)
        assert len({a, b, make_card("x1")}) == 2

    def test_totals_include_bonuses(self):
        card = make_card("c1", power=8000, critical=1)
        card.bonus_power = 10000
        card.bonus_critical = 1
        assert card.total_power == 18000
        assert card.total_critical == 2

        card.reset_bonuses()
        assert card.total_power == 8000
        assert card.total_critical == 1


class TestBoard:
    """Tests for board circles."""

    def test_six_circles(self):
        board = Board()
        assert [c.name for c in board.front_row] == ["R1", "V", "R2"]
        assert [c.name for c in board.back_row] == ["R3", "R4", "R5"]
        assert all(c.is_empty for c in board.circles.values())

    def test_unknown_circle_raises(self):
        """Looking up a circle outside the board fails loudly."""
        board = Board()
        with pytest.raises(UnknownCircleError):
            board.get_circle("R9")

    def test_boosters_sit_behind(self):
        board = Board()
        for front, back in BOOSTER_FOR.items():
            assert board.booster_circle_for(front).name == back
        assert board.booster_circle_for("R3") is None

    def test_units_and_find(self):
        vanguard = make_card("v")
        board = Board.with_vanguard(vanguard)
        board.get_circle("R5").unit = make_card("r5")

        assert [u.unique_id for u in board.units()] == ["v", "r5"]
        assert board.find_unit("r5").name == "R5"
        assert board.find_unit("missing") is None
        assert board.vanguard is vanguard
        assert "V" not in [c.name for c in board.rear_circles]


class TestPlayerState:
    """Tests for player construction."""

    def test_from_decks_takes_grade_zero_as_vanguard(self):
        ride = [
            make_card("g2", grade=2),
            make_card("crest", grade=None, power=None),
            make_card("g0", grade=0),
            make_card("g1", grade=1),
        ]
        player = PlayerState.from_decks(ride, [make_card("m1")])

        assert player.vanguard.unique_id == "g0"
        assert [c.unique_id for c in player.ride_deck] == ["g1", "g2", "crest"]
        assert len(player.deck) == 1

    def test_energy_is_capped(self):
        player = PlayerState()
        player.energy_charge(5)
        assert player.energy == 3

        player.max_energy = 10
        player.energy_charge(9)
        assert player.energy == 10


class TestGameState:
    """Tests for match level state."""

    def test_winner_on_six_damage(self, battle_state):
        state = battle_state
        assert state.winner() is None

        state.players[1].damage = [make_card(f"dmg{i}") for i in range(6)]
        assert state.winner() == 0
        assert state.is_game_over()

    def test_winner_on_deck_out(self, battle_state):
        battle_state.players[0].decked_out = True
        assert battle_state.winner() == 1

    def test_acting_player_is_defender_in_guard(self, battle_state):
        assert battle_state.acting_player_index == 0
        battle_state.phase = Phase.GUARD
        assert battle_state.acting_player_index == 1

    def test_start_game_deals_opening_hands(self, new_match):
        assert new_match.turn == 1
        assert new_match.phase == Phase.MULLIGAN
        for player in new_match.players:
            assert len(player.hand) == 5
            assert len(player.deck) == 45

    def test_same_seed_same_match(self):
        from ..games.standard import setup_match

        a = setup_match(seed=11)
        b = setup_match(seed=11)
        assert [c.unique_id for c in a.players[0].hand] == [c.unique_id for c in b.players[0].hand]
        assert [c.unique_id for c in a.players[1].deck] == [c.unique_id for c in b.players[1].deck]

    def test_clone_is_independent(self, battle_state):
        clone = battle_state.clone()
        clone.players[0].hand.append(make_card("extra"))
        clone.players[0].board.vanguard.is_resting = True

        assert not battle_state.players[0].hand
        assert not battle_state.players[0].board.vanguard.is_resting

    def test_clone_carries_rng(self):
        state = GameState(random_seed=3)
        state.rng.random()
        clone = state.clone()
        assert clone.rng.random() == state.rng.random()

    def test_draw_from_empty_deck_stops(self, battle_state):
        battle_state.players[0].deck = [make_card("last")]
        drawn = battle_state.draw(0, 3)
        assert [c.unique_id for c in drawn] == ["last"]
        assert not battle_state.players[0].deck

    def test_next_turn_resets_once_per_turn_after_second_player(self, battle_state):
        state = battle_state
        state.players[0].used_turnly_effects = [3]

        state.next_turn()
        assert state.players[0].used_turnly_effects == [3]

        state.current_player_index = 1
        state.next_turn()
        assert state.players[0].used_turnly_effects == []
