"""
Evaluation Engine - Monte Carlo tree search over determinized states.

Each iteration:
1. Determinize: deal the opponent's hidden cards at random
2. Select: walk down the tree by UCT, replaying each edge's action on the
   iteration's state, until a node still has an untried action
3. Expand: add a child for the first action not already represented
4. Simulate: depth-capped playout from the new child
5. Backpropagate: add the playout's grade and damage scores to every
   node on the path

The tree is an arena: nodes live in one list and refer to each other by
index, so re-rooting is a compaction and nothing holds a back-pointer.
Nodes do not store states; states only exist for one iteration.

UCT(child) = win_rate + C * sqrt(ln(parent visits) / child visits), with
win_rate the blended average score and unvisited children tried first.
"""

from __future__ import annotations
from dataclasses import dataclass, field
import logging
import math
import random
import time

from ..config import SearchConfig
from ..engine_core.state import GameState
from ..engine_core.action import Action
from ..engine_core.action_generator import ActionGenerator
from ..engine_core.reducer import Reducer
from ..engine_core.checks import RolloutChooser
from .determinizer import Determinizer
from .evaluator import HeuristicEvaluator, grade_score, damage_score
from .rollout import Rollout, RolloutPolicy, RolloutResult

logger = logging.getLogger(__name__)


@dataclass
class Node:
    """One tree node; parent and children are arena indices."""
    action: Action | None = None
    parent: int | None = None
    children: list[int] = field(default_factory=list)
    visits: int = 0
    grade_sum: float = 0.0
    damage_sum: float = 0.0
    terminal: bool = False

    @property
    def mean_grade(self) -> float:
        if self.visits <= 0:
            return 0.0
        return self.grade_sum / self.visits

    @property
    def mean_damage(self) -> float:
        if self.visits <= 0:
            return 0.0
        return self.damage_sum / self.visits


class SearchTree:
    """Arena of nodes. Index 0 is always the root."""

    def __init__(self):
        self.nodes: list[Node] = [Node()]

    def __len__(self) -> int:
        return len(self.nodes)

    @property
    def root(self) -> Node:
        return self.nodes[0]

    def get(self, index: int) -> Node:
        return self.nodes[index]

    def add_child(self, parent: int, action: Action) -> int:
        index = len(self.nodes)
        self.nodes.append(Node(action=action, parent=parent))
        self.nodes[parent].children.append(index)
        return index

    def child_for(self, parent: int, action: Action) -> int | None:
        """Child reached by a structurally equal action, if expanded."""
        for index in self.nodes[parent].children:
            if self.nodes[index].action == action:
                return index
        return None

    def path_to_root(self, index: int) -> list[int]:
        path = []
        cursor: int | None = index
        while cursor is not None:
            path.append(cursor)
            cursor = self.nodes[cursor].parent
        return path

    def reroot(self, index: int) -> SearchTree:
        """New compact tree holding only the subtree under index."""
        tree = SearchTree.__new__(SearchTree)
        tree.nodes = []
        remap: dict[int, int] = {}
        queue = [index]
        while queue:
            old = queue.pop(0)
            remap[old] = len(tree.nodes)
            node = self.nodes[old]
            tree.nodes.append(Node(
                action=node.action,
                visits=node.visits,
                grade_sum=node.grade_sum,
                damage_sum=node.damage_sum,
                terminal=node.terminal,
            ))
            queue.extend(node.children)
        for old, new in remap.items():
            node = self.nodes[old]
            copy = tree.nodes[new]
            copy.parent = None if old == index else remap[node.parent]
            copy.children = [remap[c] for c in node.children]
        tree.nodes[0].action = None
        return tree


@dataclass
class EvaluatedAction:
    """A root action with its search statistics."""
    action: Action
    score: float
    visits: int
    grade_score: float
    damage_score: float


class EvaluationEngine:
    """
    Ranks the actions available in a position.

    The engine keeps its tree between calls so a caller can advance()
    along the action actually played and reuse the statistics.
    """

    def __init__(
        self,
        state: GameState,
        config: SearchConfig | None = None,
        evaluator: HeuristicEvaluator | None = None,
        generator: ActionGenerator | None = None,
    ):
        self.config = config or SearchConfig()
        self.evaluator = evaluator or HeuristicEvaluator()
        self.generator = generator or ActionGenerator()
        self.rng = random.Random(self.config.seed)
        self.determinizer = Determinizer()
        self.reducer = Reducer(resolver=self.generator.resolver, chooser=RolloutChooser(self.rng))
        self.rollout = Rollout(
            policy=RolloutPolicy(self.rng),
            generator=self.generator,
            reducer=self.reducer,
            depth=self.config.rollout_depth,
        )
        self.state = state
        self.tree: SearchTree | None = SearchTree()
        self.iterations = 0

    @property
    def searcher_index(self) -> int:
        return self.state.acting_player_index

    def search(self, actions: list[Action] | None = None) -> list[EvaluatedAction]:
        """
        Run iterations until the time limit or iteration cap is reached.

        Returns the root's children ranked by visit count.
        """
        if self.tree is None:
            self.tree = SearchTree()
        root_actions = actions if actions is not None else self.generator.generate(self.state)

        started = time.monotonic()
        iterations = 0
        while iterations < self.config.max_iterations:
            if time.monotonic() - started >= self.config.time_limit:
                break
            self._iterate(root_actions)
            iterations += 1

        self.iterations += iterations
        logger.info(
            f"Search completed {iterations} iterations in {time.monotonic() - started:.2f}s "
            f"({len(self.tree)} nodes)"
        )
        return self.ranked()

    def ranked(self) -> list[EvaluatedAction]:
        """Root children as EvaluatedActions, most visited first."""
        if self.tree is None:
            return []
        results = []
        for index in self.tree.root.children:
            node = self.tree.get(index)
            results.append(EvaluatedAction(
                action=node.action,
                score=self.evaluator.combine(node.mean_grade, node.mean_damage),
                visits=node.visits,
                grade_score=node.mean_grade,
                damage_score=node.mean_damage,
            ))
        results.sort(key=lambda r: (r.visits, r.score), reverse=True)
        return results

    def advance(self, action: Action, new_state: GameState | None = None) -> bool:
        """
        Move the root along the action actually played.

        Keeps the matching subtree when it exists; otherwise the tree is
        dropped and rebuilt on the next search. Returns True when reused.
        """
        if new_state is None:
            result = self.reducer.apply(self.state, action)
            new_state = result.new_state
        self.state = new_state

        child = self.tree.child_for(0, action) if self.tree else None
        if child is None:
            logger.warning("No matching child to advance the search tree; it will be rebuilt")
            self.tree = None
            return False
        self.tree = self.tree.reroot(child)
        return True

    # ------------------------------------------------------------------
    # One iteration
    # ------------------------------------------------------------------

    def _iterate(self, root_actions: list[Action]):
        tree = self.tree
        state = self.determinizer.determinize(self.state, self.searcher_index, self.rng)
        index = 0

        # Selection and expansion
        while not state.is_game_over():
            actions = root_actions if index == 0 else self.generator.generate(state)
            if not actions:
                break

            untried = self._first_untried(tree, index, actions)
            if untried is not None:
                state = self.reducer.apply(state, untried).new_state
                index = tree.add_child(index, untried)
                tree.get(index).terminal = state.is_game_over()
                break

            child = self._select_child(tree, index, actions)
            if child is None:
                break
            state = self.reducer.apply(state, tree.get(child).action).new_state
            index = child

        # Simulation
        if state.is_game_over():
            result = RolloutResult(
                grade_score=grade_score(state, self.searcher_index),
                damage_score=damage_score(state, self.searcher_index),
                finished=True,
            )
        else:
            result = self.rollout.simulate(state, perspective=self.searcher_index)

        self._backpropagate(tree, index, result)

    def _first_untried(self, tree: SearchTree, index: int, actions: list[Action]) -> Action | None:
        expanded = {tree.get(c).action for c in tree.get(index).children}
        for action in actions:
            if action not in expanded:
                return action
        return None

    def _select_child(self, tree: SearchTree, index: int, actions: list[Action]) -> int | None:
        """UCT over the children whose action is legal in this determinization."""
        parent = tree.get(index)
        legal = set(actions)
        best, best_value = None, -math.inf
        for child_index in parent.children:
            child = tree.get(child_index)
            if child.action not in legal:
                continue
            value = self.uct(child, parent.visits)
            if value > best_value:
                best, best_value = child_index, value
        return best

    def uct(self, child: Node, parent_visits: int) -> float:
        if child.visits == 0:
            return math.inf
        win_rate = self.evaluator.combine(child.mean_grade, child.mean_damage)
        exploration = self.config.exploration * math.sqrt(math.log(max(parent_visits, 1)) / child.visits)
        return win_rate + exploration

    def _backpropagate(self, tree: SearchTree, index: int, result: RolloutResult):
        for node_index in tree.path_to_root(index):
            node = tree.get(node_index)
            node.visits += 1
            node.grade_sum += result.grade_score
            node.damage_sum += result.damage_score

