"""
API Service - Business logic layer between API and engine.

The service:
1. Translates API requests to engine operations
2. Manages sessions
3. Converts runs into read-only snapshots

This layer is framework-agnostic (can be used with FastAPI, Flask, etc.)
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Callable

from ..engine_core.action import ActionResult
from ..engine_core.scoring import combo_multiplier
from ..engine_core.state import GameRun, GameMode, Difficulty, Question
from ..session import SessionManager, Session, GameEngine
from ..session.summary import compute_stats, performance_rating
from .schemas import (
    # Requests
    StartRunRequest,
    AnswerRequest,
    # Responses
    SessionResponse,
    ActionResponse,
    StatsResponse,
    HistoryResponse,
    ErrorResponse,
    # Shared
    RunInfo,
    QuestionInfo,
    StatsInfo,
    # Enums
    ErrorCode,
)


@dataclass
class APIService:
    """
    Main API service.

    Usage:
        service = APIService()

        session = service.create_session(StartRunRequest(mode="quick"))
        service.start_input(session.session_id)
        service.submit_answer(session.session_id, AnswerRequest(input="42"))
    """
    session_manager: SessionManager = field(default_factory=SessionManager)

    def create_session(self, request: StartRunRequest) -> SessionResponse:
        """Create a session and start its first run."""
        session = self.session_manager.create_session()
        session.engine.start_game(
            GameMode(request.mode.value),
            Difficulty(request.difficulty.value),
        )
        return self._session_to_response(session)

    def get_session(self, session_id: str) -> SessionResponse | ErrorResponse:
        session = self.session_manager.get_session(session_id)
        if not session:
            return self._not_found(session_id)
        return self._session_to_response(session)

    def end_session(self, session_id: str) -> bool:
        """Reset the run and drop the session."""
        return self.session_manager.end_session(session_id)

    def list_sessions(self) -> list[str]:
        return self.session_manager.list_sessions()

    # =========================================================================
    # Run operations
    # =========================================================================

    def start_input(self, session_id: str) -> ActionResponse | ErrorResponse:
        return self._apply(session_id, lambda engine: engine.start_input())

    def submit_answer(
        self, session_id: str, request: AnswerRequest
    ) -> ActionResponse | ErrorResponse:
        return self._apply(session_id, lambda engine: engine.submit_answer(request.input))

    def retry_question(self, session_id: str) -> ActionResponse | ErrorResponse:
        return self._apply(session_id, lambda engine: engine.retry_question())

    def next_question(self, session_id: str) -> ActionResponse | ErrorResponse:
        return self._apply(session_id, lambda engine: engine.next_question())

    def skip_question(self, session_id: str) -> ActionResponse | ErrorResponse:
        return self._apply(session_id, lambda engine: engine.skip_question())

    def play_again(self, session_id: str) -> SessionResponse | ErrorResponse:
        session = self.session_manager.get_session(session_id)
        if not session:
            return self._not_found(session_id)
        if session.engine.play_again() is None:
            return ErrorResponse(error="No run to repeat", error_code=ErrorCode.NO_ACTIVE_RUN)
        return self._session_to_response(session)

    def reset_game(self, session_id: str) -> SessionResponse | ErrorResponse:
        """Discard the run but keep the session."""
        session = self.session_manager.get_session(session_id)
        if not session:
            return self._not_found(session_id)
        session.engine.reset_game()
        return self._session_to_response(session)

    def get_stats(self, session_id: str) -> StatsResponse | ErrorResponse:
        session = self.session_manager.get_session(session_id)
        if not session:
            return self._not_found(session_id)
        run = session.engine.snapshot()
        if run is None:
            return ErrorResponse(error="No active run", error_code=ErrorCode.NO_ACTIVE_RUN)

        stats = compute_stats(run)
        return StatsResponse(
            session_id=session_id,
            stats=StatsInfo(
                total_score=stats.total_score,
                correct_count=stats.correct_count,
                wrong_count=stats.wrong_count,
                accuracy=stats.accuracy,
                max_combo=stats.max_combo,
                speed_stars=stats.speed_stars,
                shield_used=stats.shield_used,
                average_time_ms=stats.average_time_ms,
                rating=performance_rating(stats).value,
                wrong_questions=[self._question_to_info(q) for q in stats.wrong_questions],
            ),
        )

    # =========================================================================
    # History
    # =========================================================================

    def get_history(self, limit: int | None = None) -> HistoryResponse:
        entries = self.session_manager.history.load()
        if limit is not None:
            entries = entries[:limit]
        return HistoryResponse(entries=entries, count=len(entries))

    def clear_history(self) -> HistoryResponse:
        self.session_manager.history.clear()
        return HistoryResponse(entries=[], count=0)

    # =========================================================================
    # Helper methods
    # =========================================================================

    def _apply(
        self,
        session_id: str,
        operation: Callable[[GameEngine], ActionResult],
    ) -> ActionResponse | ErrorResponse:
        """Run an engine operation and convert its result."""
        session = self.session_manager.get_session(session_id)
        if not session:
            return self._not_found(session_id)

        result = operation(session.engine)
        if not result.success:
            code = (
                ErrorCode.NO_ACTIVE_RUN
                if result.error_code == "NO_ACTIVE_RUN"
                else ErrorCode.INVALID_OPERATION
            )
            return ErrorResponse(
                error=result.error or "Operation not applicable",
                error_code=code,
                details={"reason": result.error_code},
            )

        run = session.engine.snapshot()
        return ActionResponse(
            session_id=session_id,
            success=True,
            score_delta=result.score_delta,
            changes=result.state_changes,
            run=self._run_to_info(run) if run else None,
            summary=session.engine.summary,
        )

    def _not_found(self, session_id: str) -> ErrorResponse:
        return ErrorResponse(
            error=f"Session {session_id} not found",
            error_code=ErrorCode.SESSION_NOT_FOUND,
        )

    def _session_to_response(self, session: Session) -> SessionResponse:
        run = session.engine.snapshot()
        return SessionResponse(
            session_id=session.session_id,
            run=self._run_to_info(run) if run else None,
            summary=session.engine.summary,
        )

    def _run_to_info(self, run: GameRun) -> RunInfo:
        current = run.current_question if run.is_playing else None
        return RunInfo(
            run_id=run.run_id,
            mode=run.mode.value,
            difficulty=run.difficulty.value,
            questions_planned=run.questions_planned,
            questions_answered=run.questions_answered,
            start_at=run.start_at,
            end_at=run.end_at,
            score=run.score,
            max_combo=run.max_combo,
            speed_stars=run.speed_stars,
            shield_used=run.shield_used,
            shield_remaining=run.shield_remaining,
            current_combo=run.current_combo,
            combo_multiplier=combo_multiplier(run.current_combo, self.session_manager.config),
            current_question_index=run.current_question_index,
            run_state=run.run_state.value,
            question_state=run.question_state.value,
            time_remaining=run.time_remaining,
            current_question=self._question_to_info(current) if current else None,
            questions=[self._question_to_info(q) for q in run.questions],
        )

    def _question_to_info(self, question: Question) -> QuestionInfo:
        return QuestionInfo(
            index=question.index,
            expression=question.expression,
            is_boss=question.is_boss,
            attempts=question.attempts,
            result=question.result.value,
            answer=question.answer if question.is_terminal else None,
            user_value=question.user_value,
            latency_ms=question.latency_ms,
            combo_before=question.combo_before,
            combo_after=question.combo_after,
            speed_star_gained=question.speed_star_gained,
            shield_used=question.shield_used,
            retry_used=question.retry_used,
        )
