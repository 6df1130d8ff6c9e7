"""
API Service - Request handling behind the HTTP routes.

Each session gets a GameLoop that seats its bots. Clients address legal
actions by index, see states masked to their own seat, and can ask for
an advisor ranking at any point. Errors such as an unknown session
or an out of range index come back as an ErrorResponse, which the
FastAPI layer maps to an HTTP status.
"""

from __future__ import annotations
from dataclasses import dataclass, field, replace
from typing import Any
import logging

from .schemas import (
    # Requests
    CreateSessionRequest,
    ApplyActionRequest,
    AdviceRequest,
    # Responses
    SessionResponse,
    GameStateResponse,
    LegalActionsResponse,
    ApplyActionResponse,
    AdviceResponse,
    ErrorResponse,
    # Shared
    ActionInfo,
    RankedActionInfo,
    # Enums
    SessionStatus,
    ErrorCode,
)
from ..engine_core.state import GameState, Card
from ..engine_core.action import Action
from ..session import SessionManager, Session, SessionState, GameLoop, LoopState
from ..bots.advisor_bot import AdvisorBot

logger = logging.getLogger(__name__)


# =============================================================================
# Snapshots
# =============================================================================

def card_info(card: Card) -> dict[str, Any]:
    """Display fields of one card."""
    return {
        "unique_id": card.unique_id,
        "card_id": card.id,
        "name": card.name,
        "grade": card.grade,
        "power": card.power,
        "critical": card.critical,
        "shield": card.shield,
        "trigger": card.trigger.value if card.trigger else None,
        "skills": list(card.skills),
        "is_resting": card.is_resting,
        "is_public": card.is_public,
        "bonus_power": card.bonus_power,
        "bonus_critical": card.bonus_critical,
    }


def snapshot_state(
    state: GameState,
    viewer: int | None = None,
    human_player_index: int | None = None,
) -> dict[str, Any]:
    """
    Read-only view of a state for presentation.

    The viewer sees their own hand; every other hand shows only its public
    cards. Deck order is never exposed. A viewer of None sees no hand.
    """
    players = []
    for index, player in enumerate(state.players):
        if viewer == index:
            hand = [card_info(c) for c in player.hand]
        else:
            hand = [card_info(c) for c in player.hand if c.is_public]

        players.append({
            "player_index": index,
            "is_human": index == human_player_index,
            "is_current_turn": index == state.current_player_index,
            "energy": player.energy,
            "max_energy": player.max_energy,
            "deck_count": len(player.deck),
            "ride_deck_count": len(player.ride_deck),
            "hand_count": len(player.hand),
            "hand": hand,
            "board": [
                {
                    "name": circle.name,
                    "row": circle.row,
                    "unit": card_info(circle.unit) if circle.unit else None,
                }
                for circle in player.board.circles.values()
            ],
            "damage": [card_info(c) for c in player.damage],
            "drop": [card_info(c) for c in player.drop],
            "soul": [card_info(c) for c in player.soul],
            "guardian": [card_info(c) for c in player.guardian],
            "crest": [card_info(c) for c in player.crest],
            "continuous_effects": list(player.continuous_effects),
        })

    battle = None
    if state.current_battle:
        battle = {
            "attacker_circle": state.current_battle.attacker_circle,
            "target_circle": state.current_battle.target_circle,
            "attacker_power": state.current_battle.attacker_power,
            "boosted": state.current_battle.boosted,
        }

    return {
        "viewer": viewer,
        "turn_number": state.turn,
        "phase": state.phase.value,
        "current_player": state.current_player_index,
        "acting_player": state.acting_player_index,
        "players": players,
        "current_battle": battle,
        "pending_events": len(state.event_queue),
        "winner": state.winner(),
    }


def action_info(index: int, action: Action) -> ActionInfo:
    return ActionInfo(
        index=index,
        action_type=action.action_type.value,
        description=action.description or action.action_type.value,
    )


# =============================================================================
# Service
# =============================================================================

@dataclass
class APIService:
    """
    Main API service.

    Usage:
        service = APIService()

        # Create session
        session_response = service.create_session(CreateSessionRequest())

        # Look at the options and pick one
        actions = service.get_legal_actions(session_id)
        result = service.apply_action(session_id, ApplyActionRequest(action_index=0))

        # Ask the engine what it would do
        advice = service.get_advice(session_id, AdviceRequest(max_iterations=200))
    """
    session_manager: SessionManager = field(default_factory=SessionManager)

    _game_loops: dict[str, GameLoop] = field(default_factory=dict)

    def create_session(self, request: CreateSessionRequest) -> SessionResponse:
        """
        Create a new game session.

        Bot seats that act first are run immediately, so the response
        describes the human's first decision.
        """
        session = self.session_manager.create_session(
            seed=request.random_seed,
            human_player_index=request.human_player_index,
            bot_kind=request.bot_kind.value,
        )

        game_loop = GameLoop(session, auto_pass=request.auto_pass)
        self._game_loops[session.session_id] = game_loop
        if request.human_player_index is not None:
            game_loop.run_bots()

        return self._session_to_response(session)

    def get_session(self, session_id: str) -> SessionResponse | ErrorResponse:
        """Status of one session."""
        session = self.session_manager.get_session(session_id)
        if not session:
            return self._not_found(session_id)
        return self._session_to_response(session)

    def get_game_state(
        self,
        session_id: str,
        viewer: int | None = None,
    ) -> GameStateResponse | ErrorResponse:
        """
        Get current game state, masked for the viewer (the human seat by default).
        """
        session = self.session_manager.get_session(session_id)
        if not session or session.game_state is None:
            return self._not_found(session_id)
        return self._build_game_state(session, viewer)

    def get_legal_actions(self, session_id: str) -> LegalActionsResponse | ErrorResponse:
        """
        List the actions available to the acting player.
        """
        session = self.session_manager.get_session(session_id)
        game_loop = self._game_loops.get(session_id)
        if not session or not game_loop or session.game_state is None:
            return self._not_found(session_id)

        actions = game_loop.legal_actions()
        return LegalActionsResponse(
            session_id=session_id,
            acting_player=session.game_state.acting_player_index,
            phase=session.game_state.phase.value,
            actions=[action_info(i, a) for i, a in enumerate(actions)],
        )

    def apply_action(
        self,
        session_id: str,
        request: ApplyActionRequest,
    ) -> ApplyActionResponse | ErrorResponse:
        """
        Apply the human's action by index, then run the bot seats.
        """
        session = self.session_manager.get_session(session_id)
        game_loop = self._game_loops.get(session_id)
        if not session or not game_loop or session.game_state is None:
            return self._not_found(session_id)

        if session.game_state.is_game_over():
            return ErrorResponse(error="The game is over", error_code=ErrorCode.GAME_OVER)
        if not session.is_human_turn():
            return ErrorResponse(
                error="The human seat does not have the next decision",
                error_code=ErrorCode.NOT_YOUR_TURN,
                details={"acting_player": session.game_state.acting_player_index},
            )

        count = len(game_loop.legal_actions())
        if request.action_index >= count:
            return ErrorResponse(
                error=f"Action index {request.action_index} out of range",
                error_code=ErrorCode.INVALID_ACTION_INDEX,
                details={"legal_action_count": count},
            )

        result = game_loop.submit_action_index(request.action_index)
        if not result.success and not result.human_actions:
            return ErrorResponse(
                error="; ".join(result.errors) or "Action failed",
                error_code=ErrorCode.ACTION_FAILED,
            )

        return ApplyActionResponse(
            session_id=session_id,
            success=result.success,
            status=self._loop_state_to_status(result.loop_state),
            human_actions=result.human_actions,
            bot_actions=result.bot_actions,
            errors=result.errors,
            warnings=result.warnings,
            game_state=self._build_game_state(session, None),
        )

    def get_advice(
        self,
        session_id: str,
        request: AdviceRequest | None = None,
    ) -> AdviceResponse | ErrorResponse:
        """
        Rank the acting player's legal actions with the evaluation engine.
        """
        session = self.session_manager.get_session(session_id)
        game_loop = self._game_loops.get(session_id)
        if not session or not game_loop or session.game_state is None:
            return self._not_found(session_id)
        if session.game_state.is_game_over():
            return ErrorResponse(error="The game is over", error_code=ErrorCode.GAME_OVER)

        request = request or AdviceRequest()
        config = session.search_config
        if request.time_limit is not None:
            config = replace(config, time_limit=request.time_limit)
        if request.max_iterations is not None:
            config = replace(config, max_iterations=request.max_iterations)
        if request.seed is not None:
            config = replace(config, seed=request.seed)

        state = session.game_state
        actions = game_loop.legal_actions()
        advisor = AdvisorBot(config)
        decision = advisor.select_action(state, actions)

        ranked = []
        for evaluated in decision.alternatives:
            index = actions.index(evaluated.action)
            ranked.append(RankedActionInfo(
                **action_info(index, actions[index]).model_dump(),
                score=evaluated.score,
                visits=evaluated.visits,
                grade_score=evaluated.grade_score,
                damage_score=evaluated.damage_score,
            ))

        chosen = actions.index(decision.action)
        recommended = next((r for r in ranked if r.index == chosen), None)
        if recommended is None:
            recommended = RankedActionInfo(
                **action_info(chosen, decision.action).model_dump(),
                score=decision.best_score,
            )

        return AdviceResponse(
            session_id=session_id,
            player=state.acting_player_index,
            iterations=decision.evaluation_details.get("iterations", 0),
            recommended=recommended,
            actions=ranked,
            explanation=decision.explanation,
        )

    def end_session(self, session_id: str, reason: str = "user_ended") -> bool:
        """Drop the session and its loop; False if it did not exist."""
        self._game_loops.pop(session_id, None)
        return self.session_manager.end_session(session_id, reason)

    def list_sessions(self) -> list[str]:
        """IDs of sessions still in play."""
        return self.session_manager.list_active_sessions()

    # =========================================================================
    # Helper methods
    # =========================================================================

    def _not_found(self, session_id: str) -> ErrorResponse:
        return ErrorResponse(
            error=f"Session {session_id} not found",
            error_code=ErrorCode.SESSION_NOT_FOUND,
        )

    def _session_to_response(self, session: Session) -> SessionResponse:
        """Convert Session to SessionResponse."""
        return SessionResponse(
            session_id=session.session_id,
            status=self._session_state_to_status(session),
            human_player_index=session.human_player_index,
            bot_kind=session.metadata.get("bot_kind", "random"),
            turn_number=session.game_state.turn if session.game_state else 0,
            phase=session.game_state.phase.value if session.game_state else None,
            created_at=session.created_at,
        )

    def _session_state_to_status(self, session: Session) -> SessionStatus:
        """Convert session state to API status."""
        if session.game_state is not None and session.game_state.is_game_over():
            return SessionStatus.GAME_OVER
        mapping = {
            SessionState.CREATED: SessionStatus.CREATED,
            SessionState.ACTIVE: SessionStatus.ACTIVE,
            SessionState.WAITING_INPUT: SessionStatus.YOUR_TURN,
            SessionState.BOT_TURN: SessionStatus.BOT_THINKING,
            SessionState.GAME_OVER: SessionStatus.GAME_OVER,
            SessionState.ABANDONED: SessionStatus.GAME_OVER,
        }
        return mapping.get(session.state, SessionStatus.ACTIVE)

    def _loop_state_to_status(self, loop_state: LoopState) -> SessionStatus:
        """Convert loop state to API status."""
        mapping = {
            LoopState.WAITING_HUMAN_ACTION: SessionStatus.YOUR_TURN,
            LoopState.RUNNING_BOTS: SessionStatus.BOT_THINKING,
            LoopState.GAME_OVER: SessionStatus.GAME_OVER,
            LoopState.STALLED: SessionStatus.ACTIVE,
        }
        return mapping.get(loop_state, SessionStatus.ACTIVE)

    def _build_game_state(self, session: Session, viewer: int | None) -> GameStateResponse:
        """Build complete game state response."""
        if viewer is None:
            viewer = session.human_player_index
        snapshot = snapshot_state(session.game_state, viewer, session.human_player_index)
        return GameStateResponse(
            session_id=session.session_id,
            status=self._session_state_to_status(session),
            **snapshot,
        )
