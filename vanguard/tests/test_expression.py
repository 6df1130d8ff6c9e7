"""
Tests for effect conditions.
"""

import logging

import pytest

from ..engine_core.expression import (
    Leaf, And, Or, ConditionEvaluator, MalformedConditionError, parse_condition, evaluate_condition,
)


class TestParseCondition:
    """Tests for turning card data into condition trees."""

    def test_leaf(self):
        assert parse_condition(["player.energy", ">=", 7]) == Leaf("player.energy", ">=", 7)

    def test_strict_operators_are_aliases(self):
        assert parse_condition(["player.index", "===", 1]).op == "=="
        assert parse_condition(["player.index", "!==", 1]).op == "!="

    def test_composite(self):
        node = parse_condition([["player.energy", ">=", 7], "and", [["turn", ">", 2], "or", ["player.soul", ">", 0]]])
        assert isinstance(node, And)
        assert isinstance(node.right, Or)

    def test_none_and_parsed_pass_through(self):
        leaf = Leaf("turn", ">", 1)
        assert parse_condition(None) is None
        assert parse_condition(leaf) is leaf

    @pytest.mark.parametrize("raw", [
        ["player.energy", ">="],
        ["player.energy", "~", 3],
        [3, ">=", 3],
        "player.energy >= 7",
        [None, "and", ["turn", ">", 1]],
    ])
    def test_malformed(self, raw):
        with pytest.raises(MalformedConditionError):
            parse_condition(raw)


class TestEvaluateCondition:
    """Tests for evaluation against a state."""

    def test_no_condition_is_true(self, battle_state):
        assert evaluate_condition(None, battle_state)

    def test_player_values(self, battle_state):
        battle_state.players[0].energy = 7
        assert evaluate_condition(["player.energy", ">=", 7], battle_state)
        assert not evaluate_condition(["player.energy", ">", 7], battle_state)
        assert evaluate_condition(["player.index", "===", 0], battle_state)
        assert evaluate_condition(["player.hand", "==", 0], battle_state)

    def test_turn(self, battle_state):
        assert evaluate_condition(["turn", "==", 3], battle_state)

    def test_reads_the_current_player(self, battle_state):
        battle_state.current_player_index = 1
        assert evaluate_condition(["player.hand", "==", 3], battle_state)

    def test_and_or(self, battle_state):
        true_leaf = ["turn", "==", 3]
        false_leaf = ["turn", "==", 4]
        assert evaluate_condition([true_leaf, "and", true_leaf], battle_state)
        assert not evaluate_condition([true_leaf, "and", false_leaf], battle_state)
        assert evaluate_condition([false_leaf, "or", true_leaf], battle_state)
        assert not evaluate_condition([false_leaf, "OR", false_leaf], battle_state)

    def test_malformed_is_false(self, battle_state, caplog):
        with caplog.at_level(logging.WARNING):
            assert not ConditionEvaluator().evaluate(["player.energy", "~", 1], battle_state)
        assert "Malformed" in caplog.text

    def test_unknown_path_is_false(self, battle_state):
        assert not evaluate_condition(["opponent.energy", ">=", 0], battle_state)
        assert not evaluate_condition(["player.luck", ">=", 0], battle_state)

    def test_incomparable_values_are_false(self, battle_state):
        assert not evaluate_condition(["player.energy", ">=", "seven"], battle_state)
