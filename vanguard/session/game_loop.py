"""
Game Loop - Drives a session between human decisions.

The loop:
1. Human picks one of the legal actions (by index)
2. Engine validates and applies it to the canonical state
3. Bot seats act until the human has a decision or the game ends
4. The loop reports what happened and whose turn it is
5. Repeat

Phases without a decision (stand, draw, drive check, close step, end)
are advanced by their PASS action like any other step, so a human seat
also sees them; `auto_pass` lets the loop take them on the human's behalf.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING
import logging

from ..engine_core.state import GameState, Phase
from ..engine_core.action import Action, ActionType
from ..engine_core.action_generator import ActionGenerator
from ..engine_core.reducer import Reducer
from ..engine_core.checks import DefaultChooser
from ..bots.policy import PolicyChooser
from .manager import SessionState

if TYPE_CHECKING:
    from .manager import Session
    from ..engine_core.effect_resolver import PendingChoice

logger = logging.getLogger(__name__)

MAX_STEPS = 2000  # safety limit per call
AUTOMATIC_PHASES = {
    Phase.STAND, Phase.DRAW, Phase.DRIVE_CHECK, Phase.CLOSE_STEP, Phase.END,
}


class LoopState(Enum):
    """State of the game loop."""
    WAITING_HUMAN_ACTION = "waiting_human_action"
    RUNNING_BOTS = "running_bots"
    GAME_OVER = "game_over"
    STALLED = "stalled"  # step limit reached or no legal action


@dataclass
class TurnResult:
    """
    Result of advancing the loop.

    Contains the actions taken and, when the human has to decide, how many
    options they have.
    """
    success: bool
    loop_state: LoopState

    # Descriptions of applied actions, human first
    human_actions: list[str] = field(default_factory=list)
    bot_actions: list[str] = field(default_factory=list)

    # Errors/warnings
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    phase: str | None = None
    acting_player: int | None = None
    legal_action_count: int = 0

    # Game over info
    winner: int | None = None


class SeatChooser:
    """Sends check-time choices to the bot of the choosing seat."""

    def __init__(self, session: Session):
        self.session = session
        self._default = DefaultChooser()

    def choose(self, state: GameState, choice: PendingChoice) -> int:
        bot = self.session.bot_for(choice.player_index)
        if bot is None:
            return self._default.choose(state, choice)
        return PolicyChooser(bot).choose(state, choice)


class GameLoop:
    """
    The main game loop driver.

    Usage:
        loop = GameLoop(session)
        result = loop.run_bots()

        while result.loop_state == LoopState.WAITING_HUMAN_ACTION:
            options = loop.legal_actions()
            result = loop.submit_action(pick(options))
    """

    def __init__(self, session: Session, max_steps: int = MAX_STEPS, auto_pass: bool = False):
        self.session = session
        self.max_steps = max_steps
        self.auto_pass = auto_pass
        self.generator = ActionGenerator()
        self.reducer = Reducer(resolver=self.generator.resolver, chooser=SeatChooser(session))
        self.state = LoopState.WAITING_HUMAN_ACTION

    def legal_actions(self) -> list[Action]:
        if not self.session.game_state:
            return []
        return self.generator.generate(self.session.game_state)

    def submit_action_index(self, index: int) -> TurnResult:
        """Apply the human's choice by its index in legal_actions()."""
        actions = self.legal_actions()
        if not 0 <= index < len(actions):
            return self._result(
                False,
                errors=[f"Action index {index} out of range (0-{len(actions) - 1})"],
            )
        return self.submit_action(actions[index])

    def submit_action(self, action: Action) -> TurnResult:
        """
        Apply an action for the human seat, then let the bots play.
        """
        game_state = self.session.game_state
        if game_state is None:
            return self._result(False, errors=["No game state"])
        if game_state.is_game_over():
            return self._result(False, errors=["Game is already over"])
        if not self.session.is_human_turn():
            return self._result(False, errors=["It is not the human player's turn"])

        result = self.reducer.apply(game_state, action)
        if not result.success:
            return self._result(False, errors=[result.error or "Action failed"])

        self.session.game_state = result.new_state
        description = self._log(game_state.acting_player_index, action)
        self.session.state = SessionState.ACTIVE

        turn = self.run_bots()
        turn.human_actions.insert(0, description)
        return turn

    def run_bots(self) -> TurnResult:
        """
        Run bot seats until it's the human's decision again.

        With auto_pass, automatic steps on the human's side are taken too.
        """
        bot_actions: list[str] = []
        if self.session.game_state is None:
            return self._result(False, errors=["No game state"])

        self.state = LoopState.RUNNING_BOTS
        self.session.state = SessionState.BOT_TURN

        for _ in range(self.max_steps):
            game_state = self.session.game_state
            if game_state.is_game_over():
                break

            acting = game_state.acting_player_index
            actions = self.generator.generate(game_state)
            if not actions:
                logger.warning(f"No legal actions in phase {game_state.phase.value}")
                self.state = LoopState.STALLED
                return self._result(False, bot_actions, errors=["No legal actions"])

            bot = self.session.bot_for(acting)
            if bot is None:
                if self.auto_pass and self._is_automatic(game_state, actions):
                    action = actions[0]
                else:
                    break
            else:
                action = bot.select_action(game_state, actions).action

            result = self.reducer.apply(game_state, action)
            if not result.success:
                # Shouldn't happen with generated actions
                logger.warning(f"Generated action was rejected: {result.error}")
                self.state = LoopState.STALLED
                return self._result(False, bot_actions, errors=[result.error or "Action failed"])

            self.session.game_state = result.new_state
            bot_actions.append(self._log(acting, action))
        else:
            logger.warning(f"Loop stopped after {self.max_steps} steps")
            self.state = LoopState.STALLED
            return self._result(True, bot_actions, warnings=["Step limit reached"])

        if self.session.game_state.is_game_over():
            self.state = LoopState.GAME_OVER
            self.session.state = SessionState.GAME_OVER
            winner = self.session.game_state.winner()
            logger.info(f"Game over after {self.session.game_state.turn} turns, winner: player {winner + 1}")
        else:
            self.state = LoopState.WAITING_HUMAN_ACTION
            self.session.state = SessionState.WAITING_INPUT
        return self._result(True, bot_actions)

    def _is_automatic(self, state: GameState, actions: list[Action]) -> bool:
        return (
            state.phase in AUTOMATIC_PHASES
            and len(actions) == 1
            and actions[0].action_type == ActionType.PASS
        )

    def _log(self, player_index: int, action: Action) -> str:
        entry = f"P{player_index + 1}: {action.description or action.action_type.value}"
        self.session.action_log.append(entry)
        return entry

    def _result(
        self,
        success: bool,
        bot_actions: list[str] | None = None,
        errors: list[str] | None = None,
        warnings: list[str] | None = None,
    ) -> TurnResult:
        game_state = self.session.game_state
        turn = TurnResult(
            success=success,
            loop_state=self.state,
            bot_actions=bot_actions or [],
            errors=errors or [],
            warnings=warnings or [],
        )
        if game_state is not None:
            turn.phase = game_state.phase.value
            turn.acting_player = game_state.acting_player_index
            turn.winner = game_state.winner()
            if self.state == LoopState.WAITING_HUMAN_ACTION:
                turn.legal_action_count = len(self.generator.generate(game_state))
        return turn
