"""
Session Manager - Matches held in memory between client requests.

A session pairs one match with the policies that play its non-human
seats. Sessions live only in this process: ending one (or letting it go
stale) drops the game state and the action log. A seeded session can be
replayed from its seed and the log of applied actions.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Any
import logging
import time
import uuid

from ..config import SearchConfig
from ..card_schema.records import CardDatabase, DeckRecord
from ..engine_core.state import GameState
from ..games.standard import setup_match
from ..bots import BotPolicy, RandomPolicy, FirstLegalPolicy, AdvisorBot

logger = logging.getLogger(__name__)

BOT_KINDS = ("random", "first_legal", "advisor")


class SessionState(Enum):
    CREATED = "created"  # dealt, nobody has acted
    ACTIVE = "active"
    WAITING_INPUT = "waiting_input"  # the human seat decides next
    BOT_TURN = "bot_turn"
    GAME_OVER = "game_over"
    ABANDONED = "abandoned"  # ended before a winner, or went stale


@dataclass
class Session:
    """
    One match and the seats playing it.

    Seats listed in bots are automated; human_player_index is the seat
    (if any) that waits for client input.
    """
    session_id: str
    created_at: float

    state: SessionState = SessionState.CREATED
    game_state: GameState | None = None

    bots: dict[int, BotPolicy] = field(default_factory=dict)
    human_player_index: int | None = 0

    search_config: SearchConfig = field(default_factory=SearchConfig)
    seed: int | None = None

    action_log: list[str] = field(default_factory=list)
    metadata: dict[str, Any] = field(default_factory=dict)

    def is_active(self) -> bool:
        return self.state not in (SessionState.GAME_OVER, SessionState.ABANDONED)

    def is_human_turn(self) -> bool:
        """True when the human seat is the acting player (the defender while guarding)."""
        if not self.game_state or self.human_player_index is None:
            return False
        return self.game_state.acting_player_index == self.human_player_index

    def bot_for(self, player_index: int) -> BotPolicy | None:
        return self.bots.get(player_index)


def make_bot(kind: str, seed: int | None = None, config: SearchConfig | None = None) -> BotPolicy:
    """Build the policy named by kind (one of BOT_KINDS)."""
    if kind == "random":
        return RandomPolicy(seed)
    if kind == "first_legal":
        return FirstLegalPolicy()
    if kind == "advisor":
        return AdvisorBot(config)
    raise ValueError(f"Unknown bot kind: {kind} (expected one of {', '.join(BOT_KINDS)})")


class SessionManager:
    """In-memory registry of sessions keyed by uuid."""

    def __init__(self, search_config: SearchConfig | None = None):
        self._sessions: dict[str, Session] = {}
        self.search_config = search_config or SearchConfig()

    def create_session(
        self,
        seed: int | None = None,
        human_player_index: int | None = 0,
        bot_kind: str = "random",
        deck_a: DeckRecord | None = None,
        deck_b: DeckRecord | None = None,
        database: CardDatabase | None = None,
    ) -> Session:
        """
        Deal a new match and seat bots in every non-human seat.

        Args:
            seed: Seed for the match shuffles; bot seat i is seeded with seed + i + 1
            human_player_index: Seat played by the human (None for bot vs bot)
            bot_kind: Policy for the bot seat(s): random, first_legal, advisor
            deck_a: Deck of the first player (demo deck if not provided)
            deck_b: Deck of the second player (demo deck if not provided)
            database: Card database the decks refer to

        Returns:
            Session whose match waits for the first mulligan
        """
        bots = {}
        for index in (0, 1):
            if index != human_player_index:
                bot_seed = None if seed is None else seed + index + 1
                bots[index] = make_bot(bot_kind, bot_seed, self.search_config)

        session = Session(
            session_id=str(uuid.uuid4()),
            created_at=time.time(),
            game_state=setup_match(seed, deck_a, deck_b, database),
            bots=bots,
            human_player_index=human_player_index,
            search_config=self.search_config,
            seed=seed,
            metadata={"bot_kind": bot_kind},
        )

        self._sessions[session.session_id] = session
        logger.info(f"Created session {session.session_id} (seed={seed}, bots={bot_kind})")
        return session

    def get_session(self, session_id: str) -> Session | None:
        return self._sessions.get(session_id)

    def end_session(self, session_id: str, reason: str = "completed") -> bool:
        """
        Forget a session and release its match.

        Any reason other than "completed" marks it abandoned.
        Returns False if no such session exists.
        """
        session = self._sessions.pop(session_id, None)
        if session is None:
            return False
        session.state = SessionState.GAME_OVER if reason == "completed" else SessionState.ABANDONED
        session.game_state = None
        session.action_log.clear()
        logger.info(f"Ended session {session_id} ({reason})")
        return True

    def list_active_sessions(self) -> list[str]:
        return [sid for sid, session in self._sessions.items() if session.is_active()]

    def cleanup_stale_sessions(self, max_age_seconds: int = 3600) -> int:
        """End every session created more than max_age_seconds ago; returns how many."""
        cutoff = time.time() - max_age_seconds
        stale = [sid for sid, session in self._sessions.items() if session.created_at < cutoff]
        for session_id in stale:
            self.end_session(session_id, reason="stale")
        return len(stale)
