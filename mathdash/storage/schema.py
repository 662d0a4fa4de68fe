"""
Persisted record of a finished run.
"""

from pydantic import BaseModel, Field


class GameRunSummary(BaseModel):
    """Compact, JSON-serializable summary of one finished run."""
    run_id: str
    mode: str
    difficulty: str
    score: int = Field(ge=0)
    accuracy: float = Field(ge=0, le=100)
    max_combo: int = Field(ge=0)
    speed_stars: int = Field(ge=0)
    shield_used: int = Field(ge=0)
    questions_answered: int = Field(ge=0)
    time_taken_ms: int = Field(ge=0)
    completed_at: int = Field(description="Completion timestamp, ms since epoch")
