"""
Configuration - Settings read from the environment.

Environment variables:
    VANGUARD_ENV                   development | production (default development)
    VANGUARD_LOG_LEVEL             logging level name (default INFO)
    VANGUARD_MCTS_TIME_LIMIT       search wall clock budget in seconds (default 10)
    VANGUARD_MCTS_MAX_ITERATIONS   search iteration cap (default 2000)
    VANGUARD_MCTS_EXPLORATION      UCT exploration constant (default 1.41)
    VANGUARD_ROLLOUT_DEPTH         rollout depth cap (default 20)
    ALLOWED_ORIGINS                comma separated CORS origins (default *)
"""

from __future__ import annotations
from dataclasses import dataclass, field
import logging
import os

logger = logging.getLogger(__name__)

DEFAULT_TIME_LIMIT = 10.0
DEFAULT_MAX_ITERATIONS = 2000
DEFAULT_EXPLORATION = 1.41
DEFAULT_ROLLOUT_DEPTH = 20


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    try:
        return float(raw)
    except ValueError:
        logger.warning(f"Ignoring {name}={raw!r}: not a number")
        return default


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError:
        logger.warning(f"Ignoring {name}={raw!r}: not an integer")
        return default


@dataclass
class SearchConfig:
    """Budget and tuning of the evaluation engine."""
    time_limit: float = DEFAULT_TIME_LIMIT  # seconds
    max_iterations: int = DEFAULT_MAX_ITERATIONS
    exploration: float = DEFAULT_EXPLORATION
    rollout_depth: int = DEFAULT_ROLLOUT_DEPTH
    seed: int | None = None


@dataclass
class Settings:
    """Process wide settings."""
    env: str = "development"
    log_level: str = "INFO"
    allowed_origins: list[str] = field(default_factory=lambda: ["*"])
    search: SearchConfig = field(default_factory=SearchConfig)

    @property
    def is_production(self) -> bool:
        return self.env == "production"

    @classmethod
    def from_env(cls) -> Settings:
        """Read settings from environment variables."""
        return cls(
            env=os.getenv("VANGUARD_ENV", "development"),
            log_level=os.getenv("VANGUARD_LOG_LEVEL", "INFO").upper(),
            allowed_origins=os.getenv("ALLOWED_ORIGINS", "*").split(","),
            search=SearchConfig(
                time_limit=_env_float("VANGUARD_MCTS_TIME_LIMIT", DEFAULT_TIME_LIMIT),
                max_iterations=_env_int("VANGUARD_MCTS_MAX_ITERATIONS", DEFAULT_MAX_ITERATIONS),
                exploration=_env_float("VANGUARD_MCTS_EXPLORATION", DEFAULT_EXPLORATION),
                rollout_depth=_env_int("VANGUARD_ROLLOUT_DEPTH", DEFAULT_ROLLOUT_DEPTH),
            ),
        )


def configure_logging(level: str | None = None) -> None:
    """Set up root logging for command line and server entry points."""
    level_name = (level or Settings.from_env().log_level).upper()
    logging.basicConfig(
        level=getattr(logging, level_name, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
