"""
API Module - HTTP interface.

Exposes the engine via REST API.
A client:
1. Creates a game session against a bot
2. Lists the legal actions and applies one by index
3. Receives the bot's actions and the updated state
4. Asks the advisor to rank its options

All state is session-scoped. No persistent user accounts required.
"""

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
    PlayerInfo,
    CircleInfo,
    CardInfo,
    ActionInfo,
    RankedActionInfo,
    # Enums
    ErrorCode,
    SessionStatus,
    BotKind,
)
from .service import APIService, snapshot_state
from .app import create_app

__all__ = [
    # Requests
    "CreateSessionRequest",
    "ApplyActionRequest",
    "AdviceRequest",
    # Responses
    "SessionResponse",
    "GameStateResponse",
    "LegalActionsResponse",
    "ApplyActionResponse",
    "AdviceResponse",
    "ErrorResponse",
    # Shared
    "PlayerInfo",
    "CircleInfo",
    "CardInfo",
    "ActionInfo",
    "RankedActionInfo",
    # Enums
    "ErrorCode",
    "SessionStatus",
    "BotKind",
    # Service
    "APIService",
    "snapshot_state",
    "create_app",
]
