"""Protocol for vector store backends."""

from typing import Any, Optional, Protocol, Sequence, runtime_checkable

from coderag.models import IndexedRecord, StoredRecord

# Chroma-style metadata filter: {"sourcePath": "a.md"}, {"$and": [...]}, ...
Where = dict[str, Any]


@runtime_checkable
class VectorStore(Protocol):
    """Protocol for vector store backends.

    Every call is a single request/response; a failed ``add`` must not leave a
    partial batch behind. Failures surface as ``StoreFailure``.
    """

    def add(self, records: list[IndexedRecord]) -> None:
        """Write a batch of records, overwriting existing ids."""
        ...

    def query(
        self, embedding: Sequence[float], k: int, where: Optional[Where] = None
    ) -> list[StoredRecord]:
        """Return up to ``k`` nearest records, most relevant first."""
        ...

    def delete(
        self, ids: Optional[list[str]] = None, where: Optional[Where] = None
    ) -> None:
        """Delete records by id and/or metadata filter."""
        ...

    def get(self, where: Optional[Where] = None) -> list[StoredRecord]:
        """Return records (id, text, metadata) matching the filter."""
        ...

    def count(self) -> int:
        """Return the number of stored records."""
        ...
