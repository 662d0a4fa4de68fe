"""
API Module - HTTP interface for quiz front ends.

Exposes the engine via REST. A front end:
1. Creates a session (starts a run)
2. Signals when each question is visible
3. Submits answers, retries, advances or skips
4. Reads the results and the recent history

Runs are session-scoped. Only run summaries are persisted.
"""

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
    ErrorCode,
)
from .service import APIService
from .app import create_app

__all__ = [
    # Requests
    "StartRunRequest",
    "AnswerRequest",
    # Responses
    "SessionResponse",
    "ActionResponse",
    "StatsResponse",
    "HistoryResponse",
    "ErrorResponse",
    # Shared
    "RunInfo",
    "QuestionInfo",
    "StatsInfo",
    "ErrorCode",
    # Service
    "APIService",
    "create_app",
]
