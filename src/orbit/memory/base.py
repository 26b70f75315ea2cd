"""
Memory record types and bank serialization.
"""

import json
from dataclasses import asdict, dataclass

from orbit.memory.similarity import check_embedding


@dataclass
class MemoryRecord:
    """Single stored fact with its embedding."""

    id: str
    text: str
    embedding: list[float]


@dataclass
class SearchResult:
    """Ranked search hit."""

    id: str
    text: str
    score: float


@dataclass
class AddResult:
    """Outcome of MemoryStore.add().

    The record is always kept in memory; persisted is False when the
    snapshot could not be written, with the reason in error.
    """

    id: str
    persisted: bool = True
    error: str | None = None


class BankFormatError(ValueError):
    """Serialized bank does not have the expected shape."""


def dump_bank(records: list[MemoryRecord]) -> str:
    """Serialize records as a JSON array of {id, text, embedding}."""
    return json.dumps([asdict(r) for r in records])


def load_bank(blob: str) -> list[MemoryRecord]:
    """Parse a serialized bank.

    Raises:
        BankFormatError: blob is not valid JSON, items lack required fields,
            or embeddings are degenerate or differ in length
    """
    try:
        data = json.loads(blob)
    except json.JSONDecodeError as e:
        raise BankFormatError(f"Invalid JSON: {e}") from e

    if not isinstance(data, list):
        raise BankFormatError(f"Expected a list of records, got {type(data).__name__}")

    records: list[MemoryRecord] = []
    for i, item in enumerate(data):
        try:
            embedding = [float(x) for x in item["embedding"]]
            # All records share the first record's dimension
            check_embedding(embedding, len(records[0].embedding) if records else None)
            records.append(
                MemoryRecord(id=str(item["id"]), text=str(item["text"]), embedding=embedding)
            )
        except (KeyError, TypeError, ValueError) as e:
            raise BankFormatError(f"Malformed record at index {i}: {e}") from e
    return records
