"""
Run Summary - Stats and compact records for finished runs.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum

from ..engine_core.state import GameRun, Question, QuestionResult
from ..storage.schema import GameRunSummary


class PerformanceRating(Enum):
    """Results-screen verdict."""
    EXCELLENT = "excellent"
    GREAT = "great"
    KEEP_GOING = "keep_going"
    PRACTICE = "practice"


@dataclass
class GameStats:
    """Aggregates shown on the results screen."""
    total_score: int
    correct_count: int
    wrong_count: int
    accuracy: float
    max_combo: int
    speed_stars: int
    shield_used: int
    average_time_ms: float
    wrong_questions: list[Question] = field(default_factory=list)


def answered_questions(run: GameRun) -> list[Question]:
    """Questions that reached a result (correct, wrong or skip)."""
    return [q for q in run.questions if q.result != QuestionResult.PENDING]


def accuracy_of(run: GameRun) -> float:
    answered = answered_questions(run)
    if not answered:
        return 0.0
    correct = sum(1 for q in answered if q.result == QuestionResult.CORRECT)
    return correct / len(answered) * 100


def compute_stats(run: GameRun) -> GameStats:
    """
    Aggregate a run (finished or not).

    Skipped questions count as wrong.
    """
    answered = answered_questions(run)
    correct = [q for q in answered if q.result == QuestionResult.CORRECT]
    wrong = [q for q in answered if q.result in (QuestionResult.WRONG, QuestionResult.SKIP)]
    total_latency = sum(q.latency_ms for q in answered)

    return GameStats(
        total_score=run.score,
        correct_count=len(correct),
        wrong_count=len(wrong),
        accuracy=accuracy_of(run),
        max_combo=run.max_combo,
        speed_stars=run.speed_stars,
        shield_used=run.shield_used,
        average_time_ms=total_latency / len(answered) if answered else 0.0,
        wrong_questions=wrong,
    )


def performance_rating(stats: GameStats) -> PerformanceRating:
    if stats.accuracy >= 90 and stats.max_combo >= 5:
        return PerformanceRating.EXCELLENT
    if stats.accuracy >= 80:
        return PerformanceRating.GREAT
    if stats.accuracy >= 60:
        return PerformanceRating.KEEP_GOING
    return PerformanceRating.PRACTICE


def build_summary(run: GameRun | None) -> GameRunSummary | None:
    """
    Compact record of a finished run.

    Returns None for a missing or still-playing run.
    """
    if run is None or not run.is_finished:
        return None

    return GameRunSummary(
        run_id=run.run_id,
        mode=run.mode.value,
        difficulty=run.difficulty.value,
        score=run.score,
        accuracy=accuracy_of(run),
        max_combo=run.max_combo,
        speed_stars=run.speed_stars,
        shield_used=run.shield_used,
        questions_answered=run.questions_answered,
        time_taken_ms=max(0, run.end_at - run.start_at),
        completed_at=run.end_at,
    )


def format_duration(ms: int) -> str:
    """Format milliseconds as m:ss."""
    total_seconds = max(0, round(ms / 1000))
    minutes, seconds = divmod(total_seconds, 60)
    return f"{minutes}:{seconds:02d}"
