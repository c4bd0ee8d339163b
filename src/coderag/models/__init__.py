"""Data models for coderag."""

from coderag.models.chunk import (
    Chunk,
    ChunkMetadata,
    ContentType,
    IndexedRecord,
    IndexReport,
    StoredRecord,
)

__all__ = [
    "Chunk",
    "ChunkMetadata",
    "ContentType",
    "IndexedRecord",
    "IndexReport",
    "StoredRecord",
]
