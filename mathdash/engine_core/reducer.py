"""
Reducer - Applies actions to a run.

The reducer is the single point of run mutation.
All state changes must go through apply_action().

Design principles:
- Pure function: (run, action) -> ActionResult carrying the new run
- No clock, no randomness, no I/O: "now" arrives on the action
- Validates before applying; invalid actions are failures, never exceptions
- Side effects (sounds) are described in the result, not performed
"""

from __future__ import annotations
from dataclasses import dataclass, field
import logging

from ..audio.cues import SoundCue
from ..config import GameConfig, DEFAULT_CONFIG
from .action import Action, ActionType, ActionResult
from .question_generator import parse_user_input
from .scoring import question_score
from .state import GameRun, GameMode, QuestionResult, QuestionState, RunState

logger = logging.getLogger(__name__)


@dataclass
class Reducer:
    """
    Reducer applies actions to a run.

    Stateless - all state is in GameRun.
    Config provides the scoring and retry/shield rules.
    """
    config: GameConfig = field(default_factory=lambda: DEFAULT_CONFIG)

    def apply(self, run: GameRun | None, action: Action) -> ActionResult:
        """
        Apply an action to the run.

        Returns ActionResult with new run or error.
        """
        validation_error = self._validate_action(run, action)
        if validation_error:
            message, code = validation_error
            logger.debug("Rejected %s: %s", action.action_type.value, message)
            return ActionResult.failure(message, error_code=code)

        handler = self._get_handler(action.action_type)
        if not handler:
            return ActionResult.failure(
                f"No handler for action type: {action.action_type}",
                error_code="NO_HANDLER",
            )

        try:
            return handler(run, action)
        except Exception as e:
            logger.exception("Handler for %s failed", action.action_type.value)
            return ActionResult.failure(str(e), error_code="HANDLER_ERROR")

    def _validate_action(
        self, run: GameRun | None, action: Action
    ) -> tuple[str, str] | None:
        """
        Validate that an action is legal in the current state.

        Returns (message, error code) if invalid, None if valid.
        """
        if run is None:
            return "No active run", "NO_ACTIVE_RUN"

        if run.run_state != RunState.PLAYING:
            return "Run is finished - no actions allowed", "RUN_NOT_PLAYING"

        if action.action_type == ActionType.TICK:
            return None

        question = run.current_question
        if question is None:
            return "No active question", "NO_ACTIVE_QUESTION"

        state = run.question_state
        action_type = action.action_type

        if action_type == ActionType.START_INPUT:
            if state != QuestionState.SHOW:
                return f"Cannot start input from {state.value}", "INVALID_STATE"

        elif action_type == ActionType.SUBMIT_ANSWER:
            if question.is_terminal or state == QuestionState.WRONG_FINAL:
                return "Question already decided", "INVALID_STATE"

        elif action_type == ActionType.RETRY:
            if state != QuestionState.WRONG_SOFT or question.shield_used:
                return "Retry is only available after a soft wrong answer", "INVALID_STATE"

        elif action_type == ActionType.NEXT:
            shielded = state == QuestionState.WRONG_SOFT and question.shield_used
            if state != QuestionState.WRONG_FINAL and not shielded:
                return f"Cannot advance from {state.value}", "INVALID_STATE"

        elif action_type == ActionType.SKIP:
            if question.is_terminal:
                return "Question already decided", "INVALID_STATE"

        return None

    def _get_handler(self, action_type: ActionType):
        """Get the handler function for an action type."""
        handlers = {
            ActionType.START_INPUT: self._handle_start_input,
            ActionType.SUBMIT_ANSWER: self._handle_submit_answer,
            ActionType.RETRY: self._handle_retry,
            ActionType.NEXT: self._handle_next,
            ActionType.SKIP: self._handle_skip,
            ActionType.TICK: self._handle_tick,
        }
        return handlers.get(action_type)

    # =========================================================================
    # Handlers
    # =========================================================================

    def _handle_start_input(self, run: GameRun, action: Action) -> ActionResult:
        """show -> input, stamping the question clock."""
        new_run = run._copy_with(
            question_state=QuestionState.INPUT,
            question_started_at=action.timestamp,
        )
        return ActionResult.success_with_state(
            new_run,
            changes=[f"Question {run.current_question_index + 1} ready for input"],
        )

    def _handle_submit_answer(self, run: GameRun, action: Action) -> ActionResult:
        """
        Judge an answer.

        The attempt is recorded on the question unconditionally, then the
        correct path, the retry path, the shield path or the final-wrong
        path applies.
        """
        question = run.current_question
        now = action.timestamp

        user_value = parse_user_input(action.payload.raw_input)
        latency = max(0, now - run.question_started_at)
        within_soft_limit = latency <= self.config.soft_time_limit_sec * 1000
        is_correct = user_value is not None and user_value == question.answer

        attempted = question._copy_with(
            attempts=question.attempts + 1,
            user_value=user_value,
            latency_ms=latency,
            combo_before=run.current_combo,
        )

        if is_correct:
            return self._answer_correct(run, attempted, within_soft_limit, now)
        return self._answer_wrong(run, attempted)

    def _answer_correct(self, run, question, speed_star: bool, now: int) -> ActionResult:
        new_combo = run.current_combo + 1
        gained = question_score(True, new_combo, question.is_boss, speed_star, self.config)

        decided = question._copy_with(
            result=QuestionResult.CORRECT,
            combo_after=new_combo,
            speed_star_gained=speed_star,
        )

        new_run = run.with_question(decided)._copy_with(
            score=run.score + gained,
            current_combo=new_combo,
            max_combo=max(run.max_combo, new_combo),
            speed_stars=run.speed_stars + (1 if speed_star else 0),
        )

        cues = [SoundCue.correct()]
        if new_combo >= 2:
            cues.append(SoundCue.combo(new_combo))
        if speed_star:
            cues.append(SoundCue.speed_star())

        changes = [f"Correct: {question.expression} = {question.answer} (+{gained})"]
        new_run, advance_changes, advance_cues = self._advance(new_run, now)

        return ActionResult.success_with_state(
            new_run,
            changes=changes + advance_changes,
            cues=cues + advance_cues,
            score_delta=gained,
        )

    def _answer_wrong(self, run: GameRun, question) -> ActionResult:
        can_retry = (
            question.attempts <= self.config.retry_per_question
            and not question.retry_used
        )

        if can_retry:
            # Score and combo wait until the retry is decided
            soft = question._copy_with(retry_used=True)
            new_run = run.with_question(soft)._copy_with(
                question_state=QuestionState.WRONG_SOFT,
            )
            return ActionResult.success_with_state(
                new_run,
                changes=["Wrong answer - retry available"],
                cues=[SoundCue.wrong()],
            )

        if run.shield_remaining > 0:
            shielded = question._copy_with(
                shield_used=True,
                result=QuestionResult.WRONG,
                combo_after=run.current_combo,
            )
            new_run = run.with_question(shielded)._copy_with(
                shield_remaining=run.shield_remaining - 1,
                shield_used=run.shield_used + 1,
                question_state=QuestionState.WRONG_SOFT,
            )
            return ActionResult.success_with_state(
                new_run,
                changes=[f"Shield used - combo {run.current_combo} kept"],
                cues=[SoundCue.shield()],
            )

        final = question._copy_with(result=QuestionResult.WRONG, combo_after=0)
        new_run = run.with_question(final)._copy_with(
            current_combo=0,
            question_state=QuestionState.WRONG_FINAL,
        )
        return ActionResult.success_with_state(
            new_run,
            changes=[f"Wrong: {question.expression} = {question.answer}, combo reset"],
            cues=[SoundCue.wrong()],
        )

    def _handle_retry(self, run: GameRun, action: Action) -> ActionResult:
        """wrong_soft -> input; the earlier wrong attempt stays recorded."""
        new_run = run._copy_with(
            question_state=QuestionState.INPUT,
            question_started_at=action.timestamp,
        )
        return ActionResult.success_with_state(new_run, changes=["Retrying question"])

    def _handle_next(self, run: GameRun, action: Action) -> ActionResult:
        """Advance past a decided wrong question."""
        new_run, changes, cues = self._advance(run, action.timestamp)
        return ActionResult.success_with_state(new_run, changes=changes, cues=cues)

    def _handle_skip(self, run: GameRun, action: Action) -> ActionResult:
        """Give up on the question: combo resets, no score."""
        question = run.current_question
        skipped = question._copy_with(result=QuestionResult.SKIP, combo_after=0)
        new_run = run.with_question(skipped)._copy_with(
            current_combo=0,
            question_state=QuestionState.WRONG_FINAL,
        )
        return ActionResult.success_with_state(
            new_run,
            changes=[f"Skipped: {question.expression} = {question.answer}"],
        )

    def _handle_tick(self, run: GameRun, action: Action) -> ActionResult:
        """One second of the time-attack countdown."""
        if run.mode != GameMode.TIME_ATTACK:
            return ActionResult.success_with_state(run)

        remaining = run.time_remaining - 1
        if remaining <= 0:
            new_run = run._copy_with(
                time_remaining=0,
                run_state=RunState.FINISHED,
                end_at=action.timestamp,
            )
            return ActionResult.success_with_state(
                new_run,
                changes=["Time is up"],
                cues=[SoundCue.finish()],
            )

        return ActionResult.success_with_state(run._copy_with(time_remaining=remaining))

    # =========================================================================
    # Helpers
    # =========================================================================

    def _is_exhausted(self, run: GameRun, next_index: int) -> bool:
        """Finish rule shared by the correct-answer path and advance."""
        if next_index >= run.questions_planned:
            return True
        return run.mode == GameMode.TIME_ATTACK and run.time_remaining <= 0

    def _advance(
        self, run: GameRun, now: int
    ) -> tuple[GameRun, list[str], list[SoundCue]]:
        """Move to the next question, or finish the run."""
        next_index = run.current_question_index + 1

        if self._is_exhausted(run, next_index):
            finished = run._copy_with(
                run_state=RunState.FINISHED,
                end_at=now,
                questions_answered=next_index,
            )
            return finished, [f"Run finished with {run.score} points"], [SoundCue.finish()]

        advanced = run._copy_with(
            current_question_index=next_index,
            questions_answered=next_index,
            question_state=QuestionState.SHOW,
            question_started_at=now,
        )
        cues = []
        if advanced.current_question is not None and advanced.current_question.is_boss:
            cues.append(SoundCue.boss())
        return advanced, [f"Question {next_index + 1} of {run.questions_planned}"], cues


def apply_action(
    run: GameRun | None,
    action: Action,
    config: GameConfig = DEFAULT_CONFIG,
) -> ActionResult:
    """
    Convenience function to apply an action.

    Creates a Reducer and applies the action.
    """
    reducer = Reducer(config=config)
    return reducer.apply(run, action)
