"""
Pydantic Schemas for API - Request/response models for OpenAPI.

These models define the exact contract between a front end and the engine.
Everything a client sees is a read-only snapshot; clients mutate runs only
through the operation endpoints.

Error Codes:
- SESSION_NOT_FOUND: Session does not exist or has ended
- NO_ACTIVE_RUN: Session has no run (reset or never started)
- INVALID_OPERATION: Operation does not apply in the current run state
- VALIDATION_ERROR: Request body is invalid
"""

from enum import Enum
from typing import Optional
from pydantic import BaseModel, Field

from ..storage.schema import GameRunSummary


# =============================================================================
# Enums
# =============================================================================

class GameModeName(str, Enum):
    MAIN = "main"
    QUICK = "quick"
    TIME_ATTACK = "time_attack"


class DifficultyName(str, Enum):
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


class ErrorCode(str, Enum):
    """Structured error codes."""
    SESSION_NOT_FOUND = "SESSION_NOT_FOUND"
    NO_ACTIVE_RUN = "NO_ACTIVE_RUN"
    INVALID_OPERATION = "INVALID_OPERATION"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    INTERNAL_ERROR = "INTERNAL_ERROR"


# =============================================================================
# Shared Models
# =============================================================================

class QuestionInfo(BaseModel):
    """A question as shown to the player. The answer appears once decided."""
    index: int
    expression: str
    is_boss: bool
    attempts: int = 0
    result: str = "pending"
    answer: Optional[int] = Field(None, description="Revealed once the question is decided")
    user_value: Optional[int] = None
    latency_ms: int = 0
    combo_before: int = 0
    combo_after: int = 0
    speed_star_gained: bool = False
    shield_used: bool = False
    retry_used: bool = False


class RunInfo(BaseModel):
    """Snapshot of a run."""
    run_id: str
    mode: GameModeName
    difficulty: DifficultyName
    questions_planned: int
    questions_answered: int
    start_at: int
    end_at: int
    score: int
    max_combo: int
    speed_stars: int
    shield_used: int
    shield_remaining: int
    current_combo: int
    combo_multiplier: float
    current_question_index: int
    run_state: str
    question_state: str
    time_remaining: int = 0
    current_question: Optional[QuestionInfo] = None
    questions: list[QuestionInfo] = Field(default_factory=list)


class StatsInfo(BaseModel):
    """Results-screen aggregates."""
    total_score: int
    correct_count: int
    wrong_count: int
    accuracy: float
    max_combo: int
    speed_stars: int
    shield_used: int
    average_time_ms: float
    rating: str
    wrong_questions: list[QuestionInfo] = Field(default_factory=list)


# =============================================================================
# Requests
# =============================================================================

class StartRunRequest(BaseModel):
    """Start a run in a new session."""
    mode: GameModeName = GameModeName.MAIN
    difficulty: DifficultyName = DifficultyName.EASY


class AnswerRequest(BaseModel):
    """A raw answer as typed or spoken by the player."""
    input: str = Field("", description="Digits, or a simple Chinese numeral")


# =============================================================================
# Responses
# =============================================================================

class ErrorResponse(BaseModel):
    """Standard error body."""
    error: str
    error_code: ErrorCode
    details: Optional[dict] = None
    api_version: str = Field("v1", description="API version")


class SessionResponse(BaseModel):
    session_id: str
    run: Optional[RunInfo] = None
    summary: Optional[GameRunSummary] = None
    api_version: str = "v1"


class ActionResponse(BaseModel):
    """Outcome of an operation on a run."""
    session_id: str
    success: bool
    score_delta: int = 0
    changes: list[str] = Field(default_factory=list)
    run: Optional[RunInfo] = None
    summary: Optional[GameRunSummary] = None
    api_version: str = "v1"


class StatsResponse(BaseModel):
    session_id: str
    stats: StatsInfo
    api_version: str = "v1"


class HistoryResponse(BaseModel):
    entries: list[GameRunSummary] = Field(default_factory=list)
    count: int = 0
    api_version: str = "v1"


class SessionListResponse(BaseModel):
    sessions: list[str] = Field(default_factory=list)
    count: int = 0


class EndSessionResponse(BaseModel):
    success: bool
    session_id: str


class HealthResponse(BaseModel):
    status: str
    service: str
    version: str
