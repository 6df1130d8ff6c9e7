"""
Pydantic Schemas for API - Request/response models for OpenAPI.

These models define the exact contract between a client (a table-side
app, a web UI) and the engine.
All responses include explicit types for OpenAPI schema generation.

Error Codes:
- SESSION_NOT_FOUND: Session does not exist or has expired
- INVALID_ACTION_INDEX: Action index is not in the current legal action list
- NOT_YOUR_TURN: The human seat does not have the next decision
- ACTION_FAILED: The engine rejected the action
- GAME_OVER: The match has already ended
"""

from enum import Enum
from typing import Optional, Any
from pydantic import BaseModel, Field


# =============================================================================
# Enums
# =============================================================================

class SessionStatus(str, Enum):
    """Session status values."""
    CREATED = "created"
    ACTIVE = "active"
    YOUR_TURN = "your_turn"
    BOT_THINKING = "bot_thinking"
    GAME_OVER = "game_over"


class BotKind(str, Enum):
    """Policies available for bot seats."""
    RANDOM = "random"
    FIRST_LEGAL = "first_legal"
    ADVISOR = "advisor"


class ErrorCode(str, Enum):
    """Structured error codes."""
    SESSION_NOT_FOUND = "SESSION_NOT_FOUND"
    INVALID_ACTION_INDEX = "INVALID_ACTION_INDEX"
    NOT_YOUR_TURN = "NOT_YOUR_TURN"
    ACTION_FAILED = "ACTION_FAILED"
    GAME_OVER = "GAME_OVER"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    INTERNAL_ERROR = "INTERNAL_ERROR"


# =============================================================================
# Shared Models
# =============================================================================

class CardInfo(BaseModel):
    """Card information for display."""
    unique_id: str
    card_id: str
    name: str
    grade: Optional[int] = None
    power: Optional[int] = None
    critical: int = 1
    shield: Optional[int] = None
    trigger: Optional[str] = None
    skills: list[str] = Field(default_factory=list)
    is_resting: bool = False
    is_public: bool = False
    bonus_power: int = 0
    bonus_critical: int = 0

    model_config = {"from_attributes": True}


class CircleInfo(BaseModel):
    """One circle of a board."""
    name: str = Field(description="R1, V, R2 (front) or R3, R4, R5 (back)")
    row: str
    unit: Optional[CardInfo] = None


class PlayerInfo(BaseModel):
    """Player information for display, masked for the viewer."""
    player_index: int
    is_human: bool = False
    is_current_turn: bool = False
    energy: int = 0
    max_energy: int = 3
    deck_count: int = 0
    ride_deck_count: int = 0
    hand_count: int = 0
    hand: list[CardInfo] = Field(
        default_factory=list,
        description="Full hand for the viewer, public cards only for the opponent",
    )
    board: list[CircleInfo] = Field(default_factory=list)
    damage: list[CardInfo] = Field(default_factory=list)
    drop: list[CardInfo] = Field(default_factory=list)
    soul: list[CardInfo] = Field(default_factory=list)
    guardian: list[CardInfo] = Field(default_factory=list)
    crest: list[CardInfo] = Field(default_factory=list)
    continuous_effects: list[str] = Field(default_factory=list)


class BattleInfo(BaseModel):
    """The battle in progress."""
    attacker_circle: str
    target_circle: str
    attacker_power: int
    boosted: bool = False


class ActionInfo(BaseModel):
    """A legal action, addressed by its index."""
    index: int
    action_type: str
    description: str


class RankedActionInfo(ActionInfo):
    """A legal action with its search statistics."""
    score: float = Field(..., description="0.4 * grade score + 0.6 * damage score")
    visits: int = 0
    grade_score: float = 0.0
    damage_score: float = 0.0


# =============================================================================
# Request Models
# =============================================================================

class CreateSessionRequest(BaseModel):
    """Request to create a new game session."""
    human_player_index: Optional[int] = Field(
        0, ge=0, le=1, description="Seat played by the human; null for bot vs bot"
    )
    bot_kind: BotKind = Field(BotKind.RANDOM, description="Policy for the bot seat(s)")
    random_seed: Optional[int] = Field(None, description="Seed for reproducible games")
    auto_pass: bool = Field(
        True, description="Take automatic steps (stand, draw, checks) for the human"
    )


class ApplyActionRequest(BaseModel):
    """Request to apply one of the legal actions."""
    action_index: int = Field(..., ge=0, description="Index into the legal action list")


class AdviceRequest(BaseModel):
    """Request to rank the legal actions with the evaluation engine."""
    time_limit: Optional[float] = Field(None, gt=0, description="Seconds of search")
    max_iterations: Optional[int] = Field(None, ge=0, description="Iteration cap")
    seed: Optional[int] = Field(None, description="Seed for a reproducible search")


# =============================================================================
# Response Models
# =============================================================================

class ErrorResponse(BaseModel):
    """Standard error response."""
    error: str = Field(..., description="Human-readable error message")
    error_code: ErrorCode = Field(..., description="Machine-readable error code")
    details: Optional[dict[str, Any]] = Field(None, description="Additional error context")
    api_version: str = Field("v1", description="API version")


class SessionResponse(BaseModel):
    """Response containing session information."""
    session_id: str
    status: SessionStatus
    human_player_index: Optional[int] = None
    bot_kind: str = BotKind.RANDOM.value
    turn_number: int = 0
    phase: Optional[str] = None
    created_at: float = 0.0
    api_version: str = "v1"


class GameStateResponse(BaseModel):
    """Complete game state for display."""
    session_id: str
    status: SessionStatus
    viewer: Optional[int] = Field(None, description="Seat whose hidden cards are shown")
    turn_number: int
    phase: str
    current_player: int
    acting_player: int
    players: list[PlayerInfo] = Field(default_factory=list)
    current_battle: Optional[BattleInfo] = None
    pending_events: int = 0
    winner: Optional[int] = None
    api_version: str = "v1"


class LegalActionsResponse(BaseModel):
    """The actions available to the acting player."""
    session_id: str
    acting_player: int
    phase: str
    actions: list[ActionInfo] = Field(default_factory=list)
    api_version: str = "v1"


class ApplyActionResponse(BaseModel):
    """Response after applying an action and running the bots."""
    session_id: str
    success: bool
    status: SessionStatus
    human_actions: list[str] = Field(default_factory=list)
    bot_actions: list[str] = Field(default_factory=list)
    errors: list[str] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)
    game_state: Optional[GameStateResponse] = None
    api_version: str = "v1"


class AdviceResponse(BaseModel):
    """Ranked actions from the evaluation engine."""
    session_id: str
    player: int
    iterations: int = 0
    recommended: Optional[RankedActionInfo] = None
    actions: list[RankedActionInfo] = Field(default_factory=list)
    explanation: str = ""
    api_version: str = "v1"


class SessionListResponse(BaseModel):
    """Response listing active sessions."""
    sessions: list[str]
    count: int


class EndSessionResponse(BaseModel):
    """Response after ending a session."""
    success: bool
    session_id: str


class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    service: str
    version: str
