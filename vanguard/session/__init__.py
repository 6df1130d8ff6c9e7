"""
Session Module - Manages ephemeral game sessions.

A session represents one play-through of a match:
- Created when a client starts a game
- Holds the current game state and the bots for the non-human seats
- Applies human actions and runs bot turns
- Destroyed when the game ends

Sessions are EPHEMERAL:
- No persistence to database
- A seeded session is reproducible from its seed and action log
"""

from .manager import SessionManager, Session, SessionState, make_bot, BOT_KINDS
from .game_loop import GameLoop, LoopState, TurnResult, SeatChooser

__all__ = [
    "SessionManager",
    "Session",
    "SessionState",
    "make_bot",
    "BOT_KINDS",
    "GameLoop",
    "LoopState",
    "TurnResult",
    "SeatChooser",
]
