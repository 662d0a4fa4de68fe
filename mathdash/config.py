"""
Configuration - Game constants and environment settings.

Game constants live in GameConfig so tests and alternative rule sets can
inject their own values. Process-level settings come from the environment.
"""

from __future__ import annotations
from dataclasses import dataclass
from pathlib import Path
import logging
import os

# Environment configuration
MATHDASH_ENV = os.getenv("MATHDASH_ENV", "development")
MATHDASH_DATA_DIR = os.getenv("MATHDASH_DATA_DIR", str(Path.home() / ".mathdash"))
MATHDASH_LOG_LEVEL = os.getenv("MATHDASH_LOG_LEVEL", "INFO")
ALLOWED_ORIGINS = os.getenv("ALLOWED_ORIGINS", "*").split(",")


@dataclass(frozen=True)
class GameConfig:
    """
    Tunable rules for a run.

    Combo thresholds and multipliers are parallel: a combo below the first
    threshold gets the first multiplier, at or above the last threshold
    gets the last one.
    """
    questions_per_run_main: int = 15
    questions_per_run_quick: int = 10
    time_attack_question_cap: int = 50
    time_attack_seconds: int = 120
    soft_time_limit_sec: int = 6
    shield_per_run: int = 1
    retry_per_question: int = 1
    boss_count: int = 1
    boss_multiplier: float = 1.5
    base_score: int = 100
    speed_bonus: int = 20
    combo_thresholds: tuple[int, ...] = (2, 4, 6)
    combo_multipliers: tuple[float, ...] = (1.0, 1.2, 1.5, 2.0)

    # History
    history_limit: int = 10
    history_key: str = "mental-math-history"

    def questions_for_mode(self, mode) -> int:
        """Planned question count for a mode (time attack is only a cap)."""
        value = getattr(mode, "value", mode)
        if value == "main":
            return self.questions_per_run_main
        if value == "quick":
            return self.questions_per_run_quick
        return self.time_attack_question_cap


DEFAULT_CONFIG = GameConfig()


def configure_logging(level: str | None = None):
    """Configure root logging for the CLI and the ASGI app."""
    logging.basicConfig(
        level=(level or MATHDASH_LOG_LEVEL).upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
