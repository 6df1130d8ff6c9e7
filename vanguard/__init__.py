"""
Vanguard - Card Game Engine and Advisor

A deterministic, replayable engine for a two-player Vanguard-style card game
with an AI advisor that ranks candidate moves. Provides:
- State management
- Legal action generation per phase
- Event queue and triggered effect resolution
- Bot policies and a Monte Carlo tree search advisor
"""

__version__ = "0.1.0"
