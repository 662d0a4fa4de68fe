"""
Pytest fixtures for Mathdash tests.
"""

import random

import pytest

from ..audio.port import AudioPort
from ..config import GameConfig
from ..engine_core.state import (
    GameRun, GameMode, Difficulty, Question, QuestionState, new_run,
)
from ..session.engine import GameEngine
from ..storage import HistoryStore, MemoryStore


class FakeClock:
    """Millisecond clock advanced by hand."""

    def __init__(self, start: int = 1_000_000):
        self.now = start

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int):
        self.now += ms


class RecordingAudio(AudioPort):
    """Audio port that remembers what it was asked to play."""

    def __init__(self):
        super().__init__()
        self.played: list[str] = []

    def play_correct(self):
        self.played.append("correct")

    def play_wrong(self):
        self.played.append("wrong")

    def play_combo(self, level: int):
        self.played.append(f"combo:{level}")

    def play_shield(self):
        self.played.append("shield")

    def play_speed_star(self):
        self.played.append("speed_star")

    def play_finish(self):
        self.played.append("finish")

    def play_boss(self):
        self.played.append("boss")


def make_questions(count: int, boss_indices=()) -> list[Question]:
    """Questions i + i = 2i, so the answer to question i is 2 * i."""
    return [
        Question(index=i, expression=f"{i} + {i}", answer=2 * i, is_boss=i in boss_indices)
        for i in range(count)
    ]


def make_run(
    count: int = 5,
    mode: GameMode = GameMode.QUICK,
    boss_indices=(),
    now: int = 1_000_000,
    config: GameConfig | None = None,
    **changes,
) -> GameRun:
    """A fresh run in the input state with predictable answers."""
    run = new_run(
        mode,
        Difficulty.EASY,
        make_questions(count, boss_indices),
        now_ms=now,
        run_id="test_run",
        config=config or GameConfig(),
    )
    run = run._copy_with(question_state=QuestionState.INPUT)
    return run._copy_with(**changes) if changes else run


@pytest.fixture
def config() -> GameConfig:
    return GameConfig()


@pytest.fixture
def rng() -> random.Random:
    return random.Random(1234)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def audio() -> RecordingAudio:
    return RecordingAudio()


@pytest.fixture
def memory_store() -> MemoryStore:
    return MemoryStore()


@pytest.fixture
def history(memory_store) -> HistoryStore:
    return HistoryStore(memory_store)


@pytest.fixture
def engine(config, audio, history, clock, rng):
    """Engine with a fake clock; its countdown interval is long enough to never fire."""
    engine = GameEngine(
        config=config,
        audio=audio,
        history=history,
        clock=clock,
        rng=rng,
        tick_interval=3600,
    )
    yield engine
    engine.reset_game()
