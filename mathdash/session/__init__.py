"""
Session Module - Live runs and their side effects.

The engine wraps the pure reducer with:
- A clock and a random source
- The time-attack countdown
- Audio cues and history persistence

Sessions are EPHEMERAL: runs live in memory only and are discarded
after their summary is written to history.
"""

from .engine import GameEngine
from .countdown import Countdown
from .manager import SessionManager, Session
from .summary import (
    GameStats,
    PerformanceRating,
    build_summary,
    compute_stats,
    performance_rating,
    format_duration,
)

__all__ = [
    "GameEngine",
    "Countdown",
    "SessionManager",
    "Session",
    "GameStats",
    "PerformanceRating",
    "build_summary",
    "compute_stats",
    "performance_rating",
    "format_duration",
]
