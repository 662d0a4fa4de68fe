"""
Tests for API layer.

Tests:
- API service methods
- Request/response serialization
- Session lifecycle via API
- Error handling
"""

import pytest
from fastapi.testclient import TestClient

from ..api.app import create_app
from ..api.schemas import (
    ActionResponse,
    AnswerRequest,
    ErrorCode,
    ErrorResponse,
    SessionResponse,
    StartRunRequest,
)
from ..api.service import APIService
from ..session import SessionManager
from ..storage import HistoryStore
from .conftest import FakeClock


@pytest.fixture
def service():
    """Create a fresh API service with in-memory history."""
    manager = SessionManager(history=HistoryStore(), clock=FakeClock())
    yield APIService(session_manager=manager)
    manager.shutdown()


@pytest.fixture
def client(service):
    return TestClient(create_app(service))


def current_answer(service, session_id) -> str:
    engine = service.session_manager.get_session(session_id).engine
    return str(engine.run.current_question.answer)


def finish_run(service, session_id):
    engine = service.session_manager.get_session(session_id).engine
    response = None
    while engine.run.is_playing:
        response = service.submit_answer(
            session_id, AnswerRequest(input=current_answer(service, session_id))
        )
    assert engine.flush_history()
    return response


class TestAPIService:
    """Tests for APIService."""

    def test_create_session(self, service):
        response = service.create_session(StartRunRequest(mode="quick", difficulty="medium"))
        assert isinstance(response, SessionResponse)
        run = response.run
        assert run.mode.value == "quick"
        assert run.difficulty.value == "medium"
        assert run.questions_planned == 10
        assert run.question_state == "show"
        assert run.combo_multiplier == 1.0
        assert run.current_question.index == 0
        assert response.summary is None

    def test_answers_hidden_until_decided(self, service):
        session = service.create_session(StartRunRequest(mode="quick"))
        assert all(q.answer is None for q in session.run.questions)

        service.skip_question(session.session_id)
        response = service.get_session(session.session_id)
        assert response.run.questions[0].answer is not None
        assert response.run.questions[0].result == "skip"
        assert response.run.questions[1].answer is None

    def test_correct_answer(self, service):
        session_id = service.create_session(StartRunRequest(mode="quick")).session_id
        service.start_input(session_id)
        response = service.submit_answer(
            session_id, AnswerRequest(input=current_answer(service, session_id))
        )
        assert isinstance(response, ActionResponse)
        assert response.success
        assert response.score_delta == 120
        assert response.run.current_question_index == 1
        assert response.run.questions[0].result == "correct"
        assert response.changes

    def test_wrong_then_retry(self, service):
        session_id = service.create_session(StartRunRequest(mode="quick")).session_id
        response = service.submit_answer(session_id, AnswerRequest(input="-1"))
        assert response.run.question_state == "wrong_soft"
        response = service.retry_question(session_id)
        assert response.run.question_state == "input"

    def test_invalid_operation(self, service):
        session_id = service.create_session(StartRunRequest(mode="quick")).session_id
        response = service.next_question(session_id)
        assert isinstance(response, ErrorResponse)
        assert response.error_code == ErrorCode.INVALID_OPERATION
        assert response.details == {"reason": "INVALID_STATE"}

    def test_unknown_session(self, service):
        for response in (
            service.get_session("missing"),
            service.skip_question("missing"),
            service.get_stats("missing"),
            service.play_again("missing"),
            service.reset_game("missing"),
        ):
            assert isinstance(response, ErrorResponse)
            assert response.error_code == ErrorCode.SESSION_NOT_FOUND

    def test_reset_keeps_session(self, service):
        session_id = service.create_session(StartRunRequest()).session_id
        response = service.reset_game(session_id)
        assert response.run is None

        response = service.submit_answer(session_id, AnswerRequest(input="1"))
        assert response.error_code == ErrorCode.NO_ACTIVE_RUN
        assert service.get_stats(session_id).error_code == ErrorCode.NO_ACTIVE_RUN
        assert service.play_again(session_id).error_code == ErrorCode.NO_ACTIVE_RUN

    def test_finish_records_history(self, service):
        session_id = service.create_session(StartRunRequest(mode="quick")).session_id
        response = finish_run(service, session_id)
        assert response.run.run_state == "finished"
        assert response.summary is not None
        assert response.summary.accuracy == 100

        history = service.get_history()
        assert history.count == 1
        assert history.entries[0].run_id == response.run.run_id

        stats = service.get_stats(session_id).stats
        assert stats.correct_count == 10
        assert stats.rating == "excellent"

    def test_play_again(self, service):
        session_id = service.create_session(StartRunRequest(mode="quick", difficulty="hard")).session_id
        first = finish_run(service, session_id).run.run_id
        response = service.play_again(session_id)
        assert response.run.run_id != first
        assert response.run.difficulty.value == "hard"
        assert response.run.run_state == "playing"

    def test_history_limit_and_clear(self, service):
        for _ in range(3):
            session_id = service.create_session(StartRunRequest(mode="quick")).session_id
            finish_run(service, session_id)
        assert service.get_history(limit=2).count == 2
        assert service.get_history().count == 3
        assert service.clear_history().count == 0
        assert service.get_history().entries == []

    def test_end_session(self, service):
        session_id = service.create_session(StartRunRequest(mode="time_attack")).session_id
        assert service.end_session(session_id)
        assert not service.end_session(session_id)
        assert session_id not in service.list_sessions()


class TestHTTP:
    """Tests for the FastAPI routes."""

    def test_shutdown_ends_sessions(self, service):
        with TestClient(create_app(service)) as client:
            session_id = client.post(
                "/api/v1/sessions", json={"mode": "time_attack"}
            ).json()["session_id"]
            engine = service.session_manager.get_session(session_id).engine
            assert engine.countdown_running
        assert service.list_sessions() == []
        assert not engine.countdown_running

    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    def test_session_lifecycle(self, client, service):
        response = client.post("/api/v1/sessions", json={"mode": "quick", "difficulty": "easy"})
        assert response.status_code == 200
        body = response.json()
        session_id = body["session_id"]
        assert body["run"]["mode"] == "quick"
        assert body["run"]["questions_planned"] == 10

        assert client.post(f"/api/v1/sessions/{session_id}/start-input").status_code == 200
        response = client.post(
            f"/api/v1/sessions/{session_id}/answer",
            json={"input": current_answer(service, session_id)},
        )
        assert response.status_code == 200
        assert response.json()["run"]["score"] > 0

        response = client.get("/api/v1/sessions")
        assert session_id in response.json()["sessions"]

        response = client.delete(f"/api/v1/sessions/{session_id}")
        assert response.json() == {"success": True, "session_id": session_id}

    def test_unknown_session_is_404(self, client):
        response = client.get("/api/v1/sessions/nope")
        assert response.status_code == 404
        assert response.json()["error_code"] == "SESSION_NOT_FOUND"

    def test_invalid_operation_is_409(self, client):
        session_id = client.post("/api/v1/sessions", json={}).json()["session_id"]
        response = client.post(f"/api/v1/sessions/{session_id}/retry")
        assert response.status_code == 409
        assert response.json()["error_code"] == "INVALID_OPERATION"

    def test_no_run_is_409(self, client):
        session_id = client.post("/api/v1/sessions", json={}).json()["session_id"]
        response = client.post(f"/api/v1/sessions/{session_id}/reset")
        assert response.status_code == 200
        assert response.json()["run"] is None

        response = client.get(f"/api/v1/sessions/{session_id}/stats")
        assert response.status_code == 409
        assert response.json()["error_code"] == "NO_ACTIVE_RUN"

    def test_bad_request_body(self, client):
        response = client.post("/api/v1/sessions", json={"mode": "marathon"})
        assert response.status_code == 422

    def test_history_endpoints(self, client, service):
        session_id = client.post("/api/v1/sessions", json={"mode": "quick"}).json()["session_id"]
        finish_run(service, session_id)

        response = client.get("/api/v1/history")
        assert response.json()["count"] == 1

        assert client.get("/api/v1/history", params={"limit": 20}).status_code == 422

        response = client.delete("/api/v1/history")
        assert response.json()["count"] == 0

    def test_stats_endpoint(self, client, service):
        session_id = client.post("/api/v1/sessions", json={"mode": "quick"}).json()["session_id"]
        client.post(f"/api/v1/sessions/{session_id}/skip")
        response = client.get(f"/api/v1/sessions/{session_id}/stats")
        assert response.status_code == 200
        stats = response.json()["stats"]
        assert stats["wrong_count"] == 1
        assert stats["rating"] == "practice"
        assert stats["wrong_questions"][0]["answer"] is not None
