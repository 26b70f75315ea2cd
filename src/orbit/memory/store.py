"""Embedding memory store with linear-scan cosine search and snapshot persistence."""

from typing import Protocol, runtime_checkable
from uuid import uuid4

from orbit.core.logging import get_logger
from orbit.memory.base import (
    AddResult,
    BankFormatError,
    MemoryRecord,
    SearchResult,
    dump_bank,
    load_bank,
)
from orbit.memory.kv import KeyValueStore, PersistenceError
from orbit.memory.similarity import check_embedding, cosine_similarity

logger = get_logger("memory.store")

DEFAULT_STORAGE_KEY = "orbit_memory_v1"


@runtime_checkable
class Embedder(Protocol):
    """Anything that turns text into a vector (the model manager)."""

    async def embed(self, text: str) -> list[float]:
        ...


class MemoryStore:
    """In-memory bank of facts, flushed whole to a key/value slot after each add."""

    def __init__(
        self,
        embedder: Embedder,
        kv: KeyValueStore,
        storage_key: str = DEFAULT_STORAGE_KEY,
    ):
        self.embedder = embedder
        self.kv = kv
        self.storage_key = storage_key
        self._bank: list[MemoryRecord] = []

    async def start(self) -> None:
        """Load the persisted snapshot; start empty if absent or corrupt."""
        blob = await self.kv.get(self.storage_key)
        if blob is None:
            logger.info(f"No memory snapshot under {self.storage_key}, starting empty")
            self._bank = []
            return

        try:
            self._bank = load_bank(blob)
        except BankFormatError as e:
            logger.error(f"Failed to load memory snapshot {self.storage_key}: {e}")
            self._bank = []
            return

        logger.info(f"Loaded {len(self._bank)} memories from {self.storage_key}")

    def __len__(self) -> int:
        return len(self._bank)

    @property
    def records(self) -> list[MemoryRecord]:
        return list(self._bank)

    @property
    def dimension(self) -> int | None:
        """Embedding length shared by all records, None when empty."""
        return len(self._bank[0].embedding) if self._bank else None

    async def flush(self) -> tuple[bool, str | None]:
        """Write the full bank to the key/value slot.

        Returns:
            (True, None) on success, (False, reason) when the write failed
        """
        try:
            await self.kv.set(self.storage_key, dump_bank(self._bank))
        except PersistenceError as e:
            logger.warning(f"Failed to save memory to storage: {e}")
            return False, str(e)
        return True, None

    async def add(self, text: str) -> AddResult:
        """Embed and store a fact, then persist the bank.

        Raises:
            DimensionMismatchError: embedding length differs from the bank's
            DegenerateVectorError: embedding is all zeros
        """
        embedding = await self.embedder.embed(text)
        check_embedding(embedding, self.dimension)

        record = MemoryRecord(id=uuid4().hex, text=text, embedding=embedding)
        self._bank.append(record)
        logger.debug(f"Stored memory {record.id}: {text[:80]}")

        persisted, error = await self.flush()
        return AddResult(id=record.id, persisted=persisted, error=error)

    async def search(self, query: str, top_k: int = 3) -> list[SearchResult]:
        """Return up to top_k records ranked by cosine similarity to query.

        Equal scores keep insertion order. A non-positive top_k or an empty
        bank returns [] without embedding the query.
        """
        if top_k < 1 or not self._bank:
            return []

        query_embedding = await self.embedder.embed(query)
        check_embedding(query_embedding, self.dimension)

        scored = [
            SearchResult(
                id=record.id,
                text=record.text,
                score=cosine_similarity(query_embedding, record.embedding),
            )
            for record in self._bank
        ]
        # sorted() is stable, so ties stay in insertion order
        ranked = sorted(scored, key=lambda r: -r.score)
        logger.debug(f"Search over {len(scored)} memories for: {query[:80]}")
        return ranked[:top_k]
