"""
History Store - Bounded, most-recent-first list of run summaries.

Rules:
- Keyed by run_id: saving a run replaces any earlier entry for it
- Newest first, truncated to `limit` entries
- Reads are best-effort: missing, corrupt or non-list data reads as []
- Writes are fire-and-forget: failures are logged, never raised
- save() and clear() are serialized, so engines can share one store
"""

from __future__ import annotations
import json
import logging
import threading

from pydantic import ValidationError

from ..config import DEFAULT_CONFIG
from .kv import KeyValueStore, MemoryStore
from .schema import GameRunSummary

logger = logging.getLogger(__name__)


class HistoryStore:
    """
    Recent-run history on top of a KeyValueStore.

    Usage:
        history = HistoryStore(JsonFileStore("~/.mathdash"))
        history.save(summary)
        for entry in history.recent(5):
            ...
    """

    def __init__(
        self,
        store: KeyValueStore | None = None,
        key: str = DEFAULT_CONFIG.history_key,
        limit: int = DEFAULT_CONFIG.history_limit,
    ):
        self.store = store if store is not None else MemoryStore()
        self.key = key
        self.limit = limit
        self._lock = threading.Lock()

    def load(self) -> list[GameRunSummary]:
        """Read the stored list. Never raises."""
        try:
            raw = self.store.get(self.key)
        except Exception as e:
            logger.warning("Could not read history: %s", e)
            return []

        if not raw:
            return []

        try:
            data = json.loads(raw)
        except (json.JSONDecodeError, TypeError):
            logger.warning("Stored history is not valid JSON, ignoring it")
            return []

        if not isinstance(data, list):
            return []

        entries = []
        for item in data:
            try:
                entries.append(GameRunSummary.model_validate(item))
            except ValidationError:
                logger.debug("Dropping malformed history entry: %r", item)
        return entries[: self.limit]

    def save(self, summary: GameRunSummary) -> list[GameRunSummary]:
        """
        Insert-or-replace a summary at the front, truncate, persist.

        Returns the new list (also when persisting failed).
        """
        with self._lock:
            entries = [summary] + [e for e in self.load() if e.run_id != summary.run_id]
            entries = entries[: self.limit]
            self._persist(entries)
        return entries

    def clear(self) -> list[GameRunSummary]:
        """Empty the history."""
        with self._lock:
            self._persist([])
        return []

    def recent(self, limit: int = 5) -> list[GameRunSummary]:
        """The newest `limit` entries."""
        return self.load()[:limit]

    def _persist(self, entries: list[GameRunSummary]):
        try:
            payload = json.dumps([e.model_dump() for e in entries])
            self.store.set(self.key, payload)
        except Exception as e:
            logger.warning("Could not persist history: %s", e)
