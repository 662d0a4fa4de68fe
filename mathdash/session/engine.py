"""
Game Engine - Owns the active run and serializes every mutation.

LIFECYCLE:
1. start_game -> generator builds questions, a fresh run is created
2. start_input / submit_answer / retry_question / next_question /
   skip_question -> each becomes an Action applied by the reducer
3. In time attack, the countdown feeds TICK actions through the same lock
4. On the transition to finished -> countdown stops, summary is built
   once and saved to history on a background thread (fire-and-forget)
5. reset_game -> countdown stops synchronously, run discarded

CONCURRENCY:
Single writer. Every operation, including the countdown tick, takes the
same re-entrant lock for the whole read-reduce-replace step, so no torn
run is ever observable.
"""

from __future__ import annotations
import logging
import random
import threading
import time
from typing import Callable

from ..audio.cues import SoundCue
from ..audio.port import AudioPort, NullAudio, play_cues
from ..config import GameConfig, DEFAULT_CONFIG
from ..engine_core.action import Action, ActionResult
from ..engine_core.question_generator import generate_questions
from ..engine_core.reducer import Reducer
from ..engine_core.state import GameRun, GameMode, Difficulty, new_run
from ..storage.history import HistoryStore
from ..storage.schema import GameRunSummary
from .countdown import Countdown
from .summary import GameStats, build_summary, compute_stats

logger = logging.getLogger(__name__)


def _now_ms() -> int:
    return int(time.time() * 1000)


class GameEngine:
    """
    Stateful front of the reducer for one player.

    Operations never raise for misuse: when an operation does not apply
    (no run, run finished, wrong question state) the reducer's failure
    result is returned and nothing changes.
    """

    def __init__(
        self,
        config: GameConfig = DEFAULT_CONFIG,
        audio: AudioPort | None = None,
        history: HistoryStore | None = None,
        clock: Callable[[], int] | None = None,
        rng: random.Random | None = None,
        tick_interval: float = 1.0,
    ):
        self.config = config
        self.audio = audio or NullAudio()
        self.history_store = history or HistoryStore(
            key=config.history_key, limit=config.history_limit
        )
        self.clock = clock or _now_ms
        self.rng = rng
        self.reducer = Reducer(config=config)

        self._lock = threading.RLock()
        self._run: GameRun | None = None
        self._summary: GameRunSummary | None = None
        self._countdown = Countdown(on_tick=self._on_tick, interval=tick_interval)
        self._tick_generation: int | None = None
        self._history_thread: threading.Thread | None = None

    # =========================================================================
    # Read-only views
    # =========================================================================

    @property
    def run(self) -> GameRun | None:
        """The live run. Treat as read-only; use snapshot() to keep a copy."""
        return self._run

    @property
    def summary(self) -> GameRunSummary | None:
        """Summary of the current run once it has finished."""
        return self._summary

    @property
    def countdown_running(self) -> bool:
        return self._countdown.running

    def snapshot(self) -> GameRun | None:
        """Deep copy of the current run."""
        with self._lock:
            return self._run.clone() if self._run else None

    def get_stats(self) -> GameStats | None:
        with self._lock:
            return compute_stats(self._run) if self._run else None

    def history(self) -> list[GameRunSummary]:
        return self.history_store.load()

    def clear_history(self) -> list[GameRunSummary]:
        return self.history_store.clear()

    # =========================================================================
    # Operations
    # =========================================================================

    def start_game(self, mode: GameMode, difficulty: Difficulty) -> GameRun:
        """
        Start a new run, discarding any current one.

        Returns a snapshot of the new run.
        """
        mode = GameMode(mode)
        difficulty = Difficulty(difficulty)
        count = self.config.questions_for_mode(mode)
        questions = generate_questions(count, difficulty, self.config.boss_count, self.rng)

        with self._lock:
            self._stop_countdown()
            now = self.clock()
            self._run = new_run(mode, difficulty, questions, now_ms=now, config=self.config)
            self._summary = None

            if mode == GameMode.TIME_ATTACK:
                self._tick_generation = self._countdown.start()

            logger.info(
                "Run %s started: mode=%s difficulty=%s questions=%d",
                self._run.run_id, mode.value, difficulty.value, count,
            )
            if self._run.current_question and self._run.current_question.is_boss:
                play_cues(self.audio, [SoundCue.boss()])
            return self._run.clone()

    def play_again(self) -> GameRun | None:
        """Start a new run with the current run's mode and difficulty."""
        with self._lock:
            if self._run is None:
                return None
            return self.start_game(self._run.mode, self._run.difficulty)

    def start_input(self) -> ActionResult:
        return self.dispatch(Action.start_input(self.clock()))

    def submit_answer(self, raw_input: str) -> ActionResult:
        return self.dispatch(Action.submit(raw_input, self.clock()))

    def retry_question(self) -> ActionResult:
        return self.dispatch(Action.retry(self.clock()))

    def next_question(self) -> ActionResult:
        return self.dispatch(Action.next(self.clock()))

    def skip_question(self) -> ActionResult:
        return self.dispatch(Action.skip(self.clock()))

    def reset_game(self):
        """Stop the countdown, then discard the run."""
        with self._lock:
            self._stop_countdown()
            if self._run is not None:
                logger.info("Run %s discarded", self._run.run_id)
            self._run = None
            self._summary = None

    def flush_history(self, timeout: float | None = 5.0) -> bool:
        """
        Wait for pending history writes.

        Returns False if a write is still running after `timeout` seconds.
        """
        thread = self._history_thread
        if thread is None:
            return True
        thread.join(timeout)
        return not thread.is_alive()

    def close(self):
        """Reset, let the last history write land, release the audio port."""
        self.reset_game()
        self.flush_history()
        self.audio.close()

    # =========================================================================
    # Dispatch
    # =========================================================================

    def dispatch(self, action: Action) -> ActionResult:
        """Apply one action atomically and run its side effects."""
        with self._lock:
            result = self.reducer.apply(self._run, action)
            if not result.success:
                return result

            was_playing = self._run is not None and self._run.is_playing
            self._run = result.new_state

            if was_playing and self._run.is_finished:
                self._on_finished()

        play_cues(self.audio, result.sound_cues)
        return result

    def _on_tick(self, generation: int) -> bool:
        """Countdown callback. Returns False when ticking should stop."""
        with self._lock:
            if generation != self._tick_generation or generation != self._countdown.generation:
                return False
            if self._run is None or not self._run.is_playing:
                return False
            self.dispatch(Action.tick(self.clock()))
            return self._run is not None and self._run.is_playing

    def _on_finished(self):
        """Stop the clock and record the summary exactly once."""
        self._stop_countdown()
        if self._summary is not None and self._summary.run_id == self._run.run_id:
            return

        self._summary = build_summary(self._run)
        logger.info(
            "Run %s finished: score=%d accuracy=%.0f%%",
            self._summary.run_id, self._summary.score, self._summary.accuracy,
        )
        self._save_in_background(self._summary)

    def _save_in_background(self, summary: GameRunSummary):
        """Hand the history write to a daemon thread, after any earlier write."""
        previous = self._history_thread

        def runner():
            if previous is not None:
                previous.join()
            # HistoryStore swallows its own write failures
            self.history_store.save(summary)

        self._history_thread = threading.Thread(
            target=runner, daemon=True, name=f"history-{summary.run_id}"
        )
        self._history_thread.start()

    def _stop_countdown(self):
        self._countdown.stop()
        self._tick_generation = None
