"""
Game State - Run and question containers.

Design principles:
- Immutable-friendly: all mutations return new state
- Serializable: plain fields, enums with string values
- Owned by the reducer: nothing else replaces fields on a live run
"""

from __future__ import annotations
from dataclasses import dataclass, field, replace
from copy import deepcopy
from enum import Enum
import uuid

from ..config import GameConfig, DEFAULT_CONFIG


class GameMode(Enum):
    """Run modes."""
    MAIN = "main"
    QUICK = "quick"
    TIME_ATTACK = "time_attack"


class Difficulty(Enum):
    """Question difficulty levels."""
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


class QuestionResult(Enum):
    """Outcome of a single question."""
    PENDING = "pending"
    CORRECT = "correct"
    WRONG = "wrong"
    SKIP = "skip"


class RunState(Enum):
    """High-level run phases."""
    PLAYING = "playing"
    FINISHED = "finished"


class QuestionState(Enum):
    """
    Per-question flow.

    show -> input -> {wrong_soft, wrong_final}. A correct answer moves the
    run straight to the next question's show state.
    """
    SHOW = "show"
    INPUT = "input"
    WRONG_SOFT = "wrong_soft"
    WRONG_FINAL = "wrong_final"


@dataclass
class Question:
    """
    A quiz item.

    Created by the generator with result=PENDING and zeroed counters.
    Only the reducer touches it, and only while it is the active question.
    """
    index: int
    expression: str
    answer: int
    is_boss: bool = False
    attempts: int = 0
    result: QuestionResult = QuestionResult.PENDING
    user_value: int | None = None
    latency_ms: int = 0
    combo_before: int = 0
    combo_after: int = 0
    speed_star_gained: bool = False
    shield_used: bool = False
    retry_used: bool = False

    @property
    def is_terminal(self) -> bool:
        return self.result != QuestionResult.PENDING

    def _copy_with(self, **kwargs) -> Question:
        """Create a copy with some fields replaced."""
        return replace(self, **kwargs)


@dataclass
class GameRun:
    """
    Complete run state at a point in time.

    This is the canonical state the engine operates on.
    All state changes go through the reducer.
    """
    run_id: str
    mode: GameMode
    difficulty: Difficulty
    questions_planned: int
    questions: list[Question] = field(default_factory=list)

    questions_answered: int = 0
    start_at: int = 0  # ms timestamps
    end_at: int = 0  # 0 while playing

    score: int = 0
    max_combo: int = 0
    speed_stars: int = 0
    shield_used: int = 0
    shield_remaining: int = 0
    current_combo: int = 0

    current_question_index: int = 0
    run_state: RunState = RunState.PLAYING
    question_state: QuestionState = QuestionState.SHOW
    time_remaining: int = 0  # seconds, time attack only

    # Per-question clock (ms), reset whenever a question becomes answerable
    question_started_at: int = 0

    @property
    def is_playing(self) -> bool:
        return self.run_state == RunState.PLAYING

    @property
    def is_finished(self) -> bool:
        return self.run_state == RunState.FINISHED

    @property
    def current_question(self) -> Question | None:
        """Get the active question, if the index is in range."""
        if 0 <= self.current_question_index < len(self.questions):
            return self.questions[self.current_question_index]
        return None

    def with_question(self, question: Question) -> GameRun:
        """Return new run with one question replaced (matched by index)."""
        new_questions = [
            question if q.index == question.index else q
            for q in self.questions
        ]
        return self._copy_with(questions=new_questions)

    def _copy_with(self, **kwargs) -> GameRun:
        """Create a copy with some fields replaced."""
        return replace(self, **kwargs)

    def clone(self) -> GameRun:
        """Deep copy the run."""
        return deepcopy(self)


def generate_run_id() -> str:
    """Short unique run identifier."""
    return uuid.uuid4().hex[:13]


def new_run(
    mode: GameMode,
    difficulty: Difficulty,
    questions: list[Question],
    now_ms: int,
    run_id: str | None = None,
    config: GameConfig = DEFAULT_CONFIG,
) -> GameRun:
    """
    Build a fresh run around an already generated question sequence.

    Pure: the caller supplies the questions, the id and the clock reading.
    """
    return GameRun(
        run_id=run_id or generate_run_id(),
        mode=mode,
        difficulty=difficulty,
        questions_planned=len(questions),
        questions=list(questions),
        start_at=now_ms,
        end_at=0,
        shield_remaining=config.shield_per_run,
        current_combo=0,
        run_state=RunState.PLAYING,
        question_state=QuestionState.SHOW,
        time_remaining=config.time_attack_seconds if mode == GameMode.TIME_ATTACK else 0,
        question_started_at=now_ms,
    )
