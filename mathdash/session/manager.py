"""
Session Manager - Creates and tracks game engines for the HTTP surface.

A session is one player's engine. Sessions are in-memory only; the only
thing that outlives them is the shared run history.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Callable
import logging
import time
import uuid

from ..audio.port import AudioPort
from ..config import GameConfig, DEFAULT_CONFIG
from ..storage.history import HistoryStore
from .engine import GameEngine

logger = logging.getLogger(__name__)


@dataclass
class Session:
    """An engine plus bookkeeping."""
    session_id: str
    engine: GameEngine
    created_at: float

    def is_active(self) -> bool:
        """True while the session's run is still being played."""
        run = self.engine.run
        return run is not None and run.is_playing


class SessionManager:
    """
    Manages game sessions.

    Responsibilities:
    - Create engines sharing one history store
    - Look sessions up by id
    - Reset and drop ended sessions
    """

    def __init__(
        self,
        history: HistoryStore | None = None,
        config: GameConfig = DEFAULT_CONFIG,
        audio_factory: Callable[[], AudioPort] | None = None,
        clock: Callable[[], int] | None = None,
    ):
        self.config = config
        self.history = history or HistoryStore(
            key=config.history_key, limit=config.history_limit
        )
        self.audio_factory = audio_factory
        self.clock = clock
        self._sessions: dict[str, Session] = {}

    def create_session(self) -> Session:
        """Create a new session with an idle engine."""
        session_id = str(uuid.uuid4())
        engine = GameEngine(
            config=self.config,
            audio=self.audio_factory() if self.audio_factory else None,
            history=self.history,
            clock=self.clock,
        )
        session = Session(session_id=session_id, engine=engine, created_at=time.time())
        self._sessions[session_id] = session
        return session

    def get_session(self, session_id: str) -> Session | None:
        """Get a session by ID."""
        return self._sessions.get(session_id)

    def end_session(self, session_id: str) -> bool:
        """
        End a session and clean up.

        The engine is reset first so its countdown cannot fire afterwards.
        """
        session = self._sessions.pop(session_id, None)
        if not session:
            return False
        session.engine.close()
        logger.info("Session %s ended", session_id)
        return True

    def list_sessions(self) -> list[str]:
        return list(self._sessions.keys())

    def list_active_sessions(self) -> list[str]:
        """List IDs of sessions with a run in progress."""
        return [
            sid for sid, session in self._sessions.items()
            if session.is_active()
        ]

    def cleanup_stale_sessions(self, max_age_seconds: int = 3600):
        """Drop idle sessions older than max_age."""
        current_time = time.time()
        to_remove = [
            sid for sid, session in self._sessions.items()
            if current_time - session.created_at > max_age_seconds and not session.is_active()
        ]
        for session_id in to_remove:
            self.end_session(session_id)

    def shutdown(self):
        for session_id in list(self._sessions):
            self.end_session(session_id)
