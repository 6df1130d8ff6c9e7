"""
Tests for the evaluation engine (tree search).

Tests:
- Arena tree operations
- Iteration accounting and ranking
- Advancing the root along the played action
- UCT values
"""

import math

import pytest

from ..config import SearchConfig
from ..engine_core.action import Action, ActionType
from ..engine_core.action_generator import ActionGenerator
from ..bots.mcts import EvaluationEngine, SearchTree, Node


def search_config(iterations=40, seed=1):
    return SearchConfig(time_limit=60.0, max_iterations=iterations, rollout_depth=10, seed=seed)


class TestSearchTree:
    """Tests for the node arena."""

    def _tree(self):
        tree = SearchTree()
        a = tree.add_child(0, Action.attack("V", "V"))
        b = tree.add_child(a, Action.guard("x", 5000))
        c = tree.add_child(0, Action.attack("R1", "V"))
        for index, visits in ((0, 10), (a, 6), (b, 2), (c, 4)):
            tree.get(index).visits = visits
        return tree, a, b, c

    def test_add_child(self):
        tree, a, b, c = self._tree()
        assert len(tree) == 4
        assert tree.root.children == [a, c]
        assert tree.get(b).parent == a

    def test_child_for_matches_structurally(self):
        tree, a, _, c = self._tree()
        relabelled = Action(action_type=ActionType.ATTACK, payload=Action.attack("R1", "V").payload)
        assert tree.child_for(0, relabelled) == c
        assert tree.child_for(0, Action.attack("V", "R2")) is None

    def test_path_to_root(self):
        tree, a, b, _ = self._tree()
        assert tree.path_to_root(b) == [b, a, 0]

    def test_reroot_keeps_subtree(self):
        tree, a, b, _ = self._tree()
        new_tree = tree.reroot(a)

        assert len(new_tree) == 2
        assert new_tree.root.action is None
        assert new_tree.root.parent is None
        assert new_tree.root.visits == 6
        child = new_tree.get(new_tree.root.children[0])
        assert child.parent == 0
        assert child.action == Action.guard("x", 5000)
        assert child.visits == 2


class TestUCT:
    """Tests for child values."""

    def test_unvisited_child_first(self):
        engine = EvaluationEngine(None, search_config())
        assert engine.uct(Node(), 10) == math.inf

    def test_value(self):
        engine = EvaluationEngine(None, search_config())
        node = Node(visits=4, grade_sum=2.0, damage_sum=2.0)
        expected = 0.5 + 1.41 * math.sqrt(math.log(16) / 4)
        assert engine.uct(node, 16) == pytest.approx(expected)


class TestSearch:
    """Tests for running the search."""

    def test_root_visits_equal_iterations(self, battle_state):
        engine = EvaluationEngine(battle_state, search_config(iterations=40))
        ranked = engine.search()

        assert engine.iterations == 40
        assert engine.tree.root.visits == 40
        assert sum(r.visits for r in ranked) == 40

    def test_every_root_action_is_ranked(self, battle_state):
        actions = ActionGenerator().generate(battle_state)
        engine = EvaluationEngine(battle_state, search_config(iterations=40))
        ranked = engine.search(actions)

        assert {r.action for r in ranked} == set(actions)
        visits = [r.visits for r in ranked]
        assert visits == sorted(visits, reverse=True)
        for r in ranked:
            assert 0.0 <= r.grade_score <= 1.0
            assert 0.0 <= r.damage_score <= 1.0
            assert r.score == pytest.approx(0.4 * r.grade_score + 0.6 * r.damage_score)

    def test_search_does_not_modify_state(self, battle_state):
        from .conftest import fingerprint

        before = fingerprint(battle_state)
        EvaluationEngine(battle_state, search_config(iterations=20)).search()
        assert fingerprint(battle_state) == before

    def test_seeded_search_is_reproducible(self, battle_state):
        first = EvaluationEngine(battle_state, search_config(iterations=30, seed=4)).search()
        second = EvaluationEngine(battle_state, search_config(iterations=30, seed=4)).search()
        assert [(r.action, r.visits) for r in first] == [(r.action, r.visits) for r in second]

    def test_zero_time_limit(self, battle_state):
        config = SearchConfig(time_limit=0.0, max_iterations=100)
        engine = EvaluationEngine(battle_state, config)
        assert engine.search() == []
        assert engine.iterations == 0

    def test_searcher_is_the_acting_player(self, reducer, battle_state):
        guard_state = reducer.apply(battle_state, Action.attack("V", "V")).new_state
        assert EvaluationEngine(guard_state, search_config()).searcher_index == 1
        assert EvaluationEngine(battle_state, search_config()).searcher_index == 0


class TestAdvance:
    """Tests for reusing the tree after a move."""

    def test_advance_reuses_subtree(self, battle_state):
        engine = EvaluationEngine(battle_state, search_config(iterations=40))
        ranked = engine.search()
        best = ranked[0]

        assert engine.advance(best.action)
        assert engine.tree.root.visits == best.visits
        assert engine.tree.root.action is None
        assert engine.state.phase.value == "guard" or best.action.action_type == ActionType.PASS_BATTLE_PHASE

        ranked_again = engine.search()
        assert engine.tree.root.visits == best.visits + 40
        assert ranked_again

    def test_advance_unknown_action_drops_tree(self, battle_state, caplog):
        engine = EvaluationEngine(battle_state, search_config(iterations=5))
        engine.search()

        assert not engine.advance(Action.simple(ActionType.PASS_MAIN_PHASE), new_state=battle_state)
        assert engine.tree is None
        assert "rebuilt" in caplog.text

        engine.search()
        assert engine.tree.root.visits == 5
