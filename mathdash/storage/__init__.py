"""
Storage - Recent run history.

The only persistence in the system is a bounded list of run summaries
kept under one key of a key-value store. Game state itself is never
persisted.
"""

from .schema import GameRunSummary
from .kv import KeyValueStore, MemoryStore, JsonFileStore
from .history import HistoryStore

__all__ = [
    "GameRunSummary",
    "KeyValueStore",
    "MemoryStore",
    "JsonFileStore",
    "HistoryStore",
]
