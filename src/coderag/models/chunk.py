"""Core data models for chunks and indexed records."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional, Sequence

# Metadata keys as persisted in the vector store (and used in query filters)
SOURCE_PATH_KEY = "sourcePath"
CONTENT_TYPE_KEY = "contentType"
LANGUAGE_KEY = "language"
CHUNK_INDEX_KEY = "chunkIndex"


class ContentType(str, Enum):
    """How a chunk's text should be interpreted downstream."""

    TEXT = "text"
    CODE = "code"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class ChunkMetadata:
    """Metadata attached to every chunk."""

    content_type: ContentType
    language: Optional[str] = None  # code chunks only
    source_path: Optional[str] = None  # stamped by the scanner


@dataclass
class Chunk:
    """A unit of retrievable content."""

    text: str
    metadata: ChunkMetadata
    chunk_index: int = 0

    @property
    def record_id(self) -> str:
        """Stable id of this chunk within the store: ``<sourcePath>-<ordinal>``."""
        return f"{self.metadata.source_path}-{self.chunk_index}"

    def store_metadata(self) -> dict[str, str | int | float | bool]:
        """Flatten metadata to the primitive scalars a vector store accepts."""
        raw: dict[str, Any] = {
            SOURCE_PATH_KEY: self.metadata.source_path,
            CONTENT_TYPE_KEY: self.metadata.content_type.value,
            LANGUAGE_KEY: self.metadata.language,
            CHUNK_INDEX_KEY: self.chunk_index,
        }
        return {
            key: value
            for key, value in raw.items()
            if isinstance(value, (str, int, float, bool))
        }


@dataclass
class IndexedRecord:
    """The persisted form of a chunk: id, vector, flat metadata and raw text."""

    id: str
    embedding: Sequence[float]
    metadata: dict[str, str | int | float | bool]
    text: str


@dataclass
class StoredRecord:
    """A record read back from the store.

    ``distance`` is only populated for nearest-neighbour query hits.
    """

    id: str
    text: str
    metadata: dict[str, Any] = field(default_factory=dict)
    distance: Optional[float] = None

    @property
    def source_path(self) -> Optional[str]:
        value = self.metadata.get(SOURCE_PATH_KEY)
        return value if isinstance(value, str) else None


@dataclass
class IndexReport:
    """Summary of one indexing run."""

    path: str
    files: int = 0
    chunks_indexed: int = 0
    chunks_skipped: int = 0
