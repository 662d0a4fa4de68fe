"""
Action System - Actions, payloads, and results.

Actions represent:
1. Player operations (start input, submit answer, retry, next, skip)
2. Clock events (the time-attack countdown tick)

All state changes on a live run flow through actions.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from ..audio.cues import SoundCue


class ActionType(Enum):
    """Types of actions in the system."""
    # Player actions
    START_INPUT = "start_input"
    SUBMIT_ANSWER = "submit_answer"
    RETRY = "retry"
    NEXT = "next"
    SKIP = "skip"

    # Clock actions
    TICK = "tick"


@dataclass
class ActionPayload:
    """
    Payload for an action.

    Only SUBMIT_ANSWER carries data today; validation happens in the reducer.
    """
    raw_input: str | None = None


@dataclass
class Action:
    """
    A complete action to be applied to a run.

    timestamp is "now" in milliseconds, supplied by the caller so the
    reducer never reads a clock.
    """
    action_type: ActionType
    payload: ActionPayload = field(default_factory=ActionPayload)
    timestamp: int = 0

    @classmethod
    def start_input(cls, now: int) -> Action:
        return cls(action_type=ActionType.START_INPUT, timestamp=now)

    @classmethod
    def submit(cls, raw_input: str, now: int) -> Action:
        """Factory for an answer submission."""
        return cls(
            action_type=ActionType.SUBMIT_ANSWER,
            payload=ActionPayload(raw_input=raw_input),
            timestamp=now,
        )

    @classmethod
    def retry(cls, now: int) -> Action:
        return cls(action_type=ActionType.RETRY, timestamp=now)

    @classmethod
    def next(cls, now: int) -> Action:
        return cls(action_type=ActionType.NEXT, timestamp=now)

    @classmethod
    def skip(cls, now: int) -> Action:
        return cls(action_type=ActionType.SKIP, timestamp=now)

    @classmethod
    def tick(cls, now: int) -> Action:
        """Factory for a one-second countdown tick."""
        return cls(action_type=ActionType.TICK, timestamp=now)


@dataclass
class ActionResult:
    """
    Result of applying an action.

    Contains:
    - Whether the action applied
    - New run (if it applied)
    - Error and error code (if it did not)
    - Side effects for presentation (changes, sound cues)
    """
    success: bool
    new_state: Any | None = None  # GameRun
    error: str | None = None
    error_code: str | None = None

    # For UI/presentation
    state_changes: list[str] = field(default_factory=list)
    sound_cues: list[SoundCue] = field(default_factory=list)

    # Score gained by this action
    score_delta: int = 0

    @property
    def finished(self) -> bool:
        """True when this action moved the run to finished."""
        return bool(self.success and self.new_state is not None and self.new_state.is_finished)

    @classmethod
    def failure(cls, error: str, error_code: str | None = None) -> ActionResult:
        """Create a failure result."""
        return cls(success=False, error=error, error_code=error_code)

    @classmethod
    def success_with_state(
        cls,
        state: Any,
        changes: list[str] | None = None,
        cues: list[SoundCue] | None = None,
        score_delta: int = 0,
    ) -> ActionResult:
        """Create a success result with new state."""
        return cls(
            success=True,
            new_state=state,
            state_changes=changes or [],
            sound_cues=cues or [],
            score_delta=score_delta,
        )
