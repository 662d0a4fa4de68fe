"""
Sound cues emitted by the reducer.
"""

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum


class CueName(Enum):
    CORRECT = "correct"
    WRONG = "wrong"
    COMBO = "combo"
    SHIELD = "shield"
    SPEED_STAR = "speed_star"
    FINISH = "finish"
    BOSS = "boss"


@dataclass(frozen=True)
class SoundCue:
    """A sound to play, optionally after a short delay."""
    name: CueName
    delay_ms: int = 0
    level: int = 0  # Combo level, for COMBO only

    @classmethod
    def correct(cls) -> SoundCue:
        return cls(CueName.CORRECT)

    @classmethod
    def wrong(cls) -> SoundCue:
        return cls(CueName.WRONG)

    @classmethod
    def combo(cls, level: int, delay_ms: int = 100) -> SoundCue:
        return cls(CueName.COMBO, delay_ms=delay_ms, level=level)

    @classmethod
    def shield(cls) -> SoundCue:
        return cls(CueName.SHIELD)

    @classmethod
    def speed_star(cls, delay_ms: int = 150) -> SoundCue:
        return cls(CueName.SPEED_STAR, delay_ms=delay_ms)

    @classmethod
    def finish(cls, delay_ms: int = 200) -> SoundCue:
        return cls(CueName.FINISH, delay_ms=delay_ms)

    @classmethod
    def boss(cls, delay_ms: int = 0) -> SoundCue:
        return cls(CueName.BOSS, delay_ms=delay_ms)
