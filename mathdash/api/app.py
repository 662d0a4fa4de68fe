"""
FastAPI Application - REST API for quiz front ends.

Endpoints:
    POST   /api/v1/sessions                     Create session and start a run
    GET    /api/v1/sessions                     List sessions
    GET    /api/v1/sessions/{id}                Run snapshot
    DELETE /api/v1/sessions/{id}                Reset run and end session
    POST   /api/v1/sessions/{id}/start-input    Question shown, start its clock
    POST   /api/v1/sessions/{id}/answer         Submit an answer
    POST   /api/v1/sessions/{id}/retry          Retry after a soft wrong
    POST   /api/v1/sessions/{id}/next           Advance after a decided wrong
    POST   /api/v1/sessions/{id}/skip           Skip the current question
    POST   /api/v1/sessions/{id}/play-again     New run, same mode/difficulty
    POST   /api/v1/sessions/{id}/reset          Discard the run, keep session
    GET    /api/v1/sessions/{id}/stats          Results-screen stats
    GET    /api/v1/history                      Recent run summaries
    DELETE /api/v1/history                      Clear history

All responses are JSON with explicit Pydantic schemas.
"""

from contextlib import asynccontextmanager
from typing import Annotated, Optional, Union

from fastapi import FastAPI, Query
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .. import __version__
from ..config import ALLOWED_ORIGINS, MATHDASH_DATA_DIR, MATHDASH_ENV, configure_logging
from ..session import SessionManager
from ..storage import HistoryStore, JsonFileStore
from .service import APIService
from .schemas import (
    # Request models
    StartRunRequest,
    AnswerRequest,
    # Response models
    SessionResponse,
    ActionResponse,
    StatsResponse,
    HistoryResponse,
    ErrorResponse,
    SessionListResponse,
    EndSessionResponse,
    HealthResponse,
    # Enums
    ErrorCode,
)


def create_app(service: Optional[APIService] = None) -> FastAPI:
    """
    Create the FastAPI application.

    Args:
        service: Optional APIService instance (creates one with a file-backed
            history in MATHDASH_DATA_DIR if not provided)

    Returns:
        FastAPI application instance
    """
    if service is None:
        history = HistoryStore(JsonFileStore(MATHDASH_DATA_DIR))
        service = APIService(session_manager=SessionManager(history=history))
    api_service = service

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        api_service.session_manager.shutdown()

    app = FastAPI(
        title="Mathdash API",
        description="""
Timed mental-arithmetic runs with combos, shields, speed stars and boss questions.

## Question flow

1. `POST /start-input` once the question is visible (starts its clock)
2. `POST /answer`
   - correct: the run moves to the next question (`question_state=show`)
   - first wrong: `wrong_soft`, call `/retry`
   - second wrong with a shield: `wrong_soft` with the shield used, call `/next`
   - otherwise `wrong_final`, call `/next`

## Error Codes

| Code | Description |
|------|-------------|
| `SESSION_NOT_FOUND` | Session does not exist |
| `NO_ACTIVE_RUN` | Session has no run |
| `INVALID_OPERATION` | Operation does not apply right now; nothing changed |
        """,
        version=__version__,
        docs_url="/api/docs",
        redoc_url="/api/redoc",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # =========================================================================
    # Error helpers
    # =========================================================================

    status_codes = {
        ErrorCode.SESSION_NOT_FOUND: 404,
        ErrorCode.NO_ACTIVE_RUN: 409,
        ErrorCode.INVALID_OPERATION: 409,
        ErrorCode.VALIDATION_ERROR: 400,
        ErrorCode.INTERNAL_ERROR: 500,
    }

    def respond(response):
        """Pass models through; turn ErrorResponse into a JSON error."""
        if isinstance(response, ErrorResponse):
            return JSONResponse(
                status_code=status_codes.get(response.error_code, 400),
                content=response.model_dump(mode="json"),
            )
        return response

    error_responses = {
        404: {"model": ErrorResponse, "description": "Session not found"},
        409: {"model": ErrorResponse, "description": "Operation not applicable"},
    }

    # =========================================================================
    # Session Endpoints
    # =========================================================================

    @app.post(
        "/api/v1/sessions",
        response_model=SessionResponse,
        tags=["Sessions"],
        summary="Create a session and start a run",
    )
    async def create_session(body: StartRunRequest) -> SessionResponse:
        return api_service.create_session(body)

    @app.get(
        "/api/v1/sessions",
        response_model=SessionListResponse,
        tags=["Sessions"],
        summary="List sessions",
    )
    async def list_sessions() -> SessionListResponse:
        sessions = api_service.list_sessions()
        return SessionListResponse(sessions=sessions, count=len(sessions))

    @app.get(
        "/api/v1/sessions/{session_id}",
        response_model=SessionResponse,
        responses={404: error_responses[404]},
        tags=["Sessions"],
        summary="Get a run snapshot",
    )
    async def get_session(session_id: str) -> Union[SessionResponse, JSONResponse]:
        return respond(api_service.get_session(session_id))

    @app.delete(
        "/api/v1/sessions/{session_id}",
        response_model=EndSessionResponse,
        tags=["Sessions"],
        summary="Reset the run and end the session",
    )
    async def end_session(session_id: str) -> EndSessionResponse:
        success = api_service.end_session(session_id)
        return EndSessionResponse(success=success, session_id=session_id)

    # =========================================================================
    # Run Endpoints
    # =========================================================================

    @app.post(
        "/api/v1/sessions/{session_id}/start-input",
        response_model=ActionResponse,
        responses=error_responses,
        tags=["Run"],
        summary="Start the current question's clock",
    )
    async def start_input(session_id: str) -> Union[ActionResponse, JSONResponse]:
        return respond(api_service.start_input(session_id))

    @app.post(
        "/api/v1/sessions/{session_id}/answer",
        response_model=ActionResponse,
        responses=error_responses,
        tags=["Run"],
        summary="Submit an answer",
    )
    async def submit_answer(
        session_id: str, body: AnswerRequest
    ) -> Union[ActionResponse, JSONResponse]:
        return respond(api_service.submit_answer(session_id, body))

    @app.post(
        "/api/v1/sessions/{session_id}/retry",
        response_model=ActionResponse,
        responses=error_responses,
        tags=["Run"],
        summary="Retry after a soft wrong answer",
    )
    async def retry_question(session_id: str) -> Union[ActionResponse, JSONResponse]:
        return respond(api_service.retry_question(session_id))

    @app.post(
        "/api/v1/sessions/{session_id}/next",
        response_model=ActionResponse,
        responses=error_responses,
        tags=["Run"],
        summary="Advance past a decided wrong answer",
    )
    async def next_question(session_id: str) -> Union[ActionResponse, JSONResponse]:
        return respond(api_service.next_question(session_id))

    @app.post(
        "/api/v1/sessions/{session_id}/skip",
        response_model=ActionResponse,
        responses=error_responses,
        tags=["Run"],
        summary="Skip the current question",
    )
    async def skip_question(session_id: str) -> Union[ActionResponse, JSONResponse]:
        return respond(api_service.skip_question(session_id))

    @app.post(
        "/api/v1/sessions/{session_id}/play-again",
        response_model=SessionResponse,
        responses=error_responses,
        tags=["Run"],
        summary="Start a new run with the same mode and difficulty",
    )
    async def play_again(session_id: str) -> Union[SessionResponse, JSONResponse]:
        return respond(api_service.play_again(session_id))

    @app.post(
        "/api/v1/sessions/{session_id}/reset",
        response_model=SessionResponse,
        responses={404: error_responses[404]},
        tags=["Run"],
        summary="Discard the run and stop its timer",
    )
    async def reset_game(session_id: str) -> Union[SessionResponse, JSONResponse]:
        return respond(api_service.reset_game(session_id))

    @app.get(
        "/api/v1/sessions/{session_id}/stats",
        response_model=StatsResponse,
        responses=error_responses,
        tags=["Run"],
        summary="Results-screen stats",
    )
    async def get_stats(session_id: str) -> Union[StatsResponse, JSONResponse]:
        return respond(api_service.get_stats(session_id))

    # =========================================================================
    # History Endpoints
    # =========================================================================

    @app.get(
        "/api/v1/history",
        response_model=HistoryResponse,
        tags=["History"],
        summary="Recent run summaries, newest first",
    )
    async def get_history(
        limit: Annotated[Optional[int], Query(ge=1, le=10, description="Max entries")] = None,
    ) -> HistoryResponse:
        return api_service.get_history(limit)

    @app.delete(
        "/api/v1/history",
        response_model=HistoryResponse,
        tags=["History"],
        summary="Clear run history",
    )
    async def clear_history() -> HistoryResponse:
        return api_service.clear_history()

    # =========================================================================
    # Health Check
    # =========================================================================

    @app.get(
        "/health",
        response_model=HealthResponse,
        tags=["System"],
        summary="Health check",
    )
    async def health_check() -> HealthResponse:
        return HealthResponse(status="healthy", service="mathdash", version=__version__)

    @app.get("/", tags=["System"])
    async def root():
        """Root endpoint with API info."""
        return {
            "name": "Mathdash API",
            "version": __version__,
            "env": MATHDASH_ENV,
            "docs": "/api/docs",
            "health": "/health",
        }

    return app


# For running directly: uvicorn mathdash.api.app:app
configure_logging()
app = create_app()
