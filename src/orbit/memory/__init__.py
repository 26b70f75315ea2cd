"""
Memory module - embedding-backed fact store.

Components:
- base: MemoryRecord, SearchResult, AddResult, bank serialization
- similarity: Cosine similarity with dimension checks
- kv: Key/value persistence (SQLite, in-memory)
- store: MemoryStore (add, search, flush)

Storage: one JSON blob per bank in a key/value slot
"""

from orbit.memory.base import AddResult, MemoryRecord, SearchResult
from orbit.memory.similarity import DegenerateVectorError, DimensionMismatchError
from orbit.memory.store import MemoryStore

__all__ = [
    "AddResult",
    "MemoryRecord",
    "MemoryStore",
    "SearchResult",
    "DegenerateVectorError",
    "DimensionMismatchError",
]
