"""Protocol for text chunking strategies."""

from typing import Protocol, runtime_checkable

from coderag.models import Chunk, ContentType


@runtime_checkable
class ChunkingStrategy(Protocol):
    """Protocol for text chunking strategies.

    One strategy is registered per content kind (text, code, markdown), so a
    structural parser can replace the code strategy without touching callers.
    """

    def chunk(self, text: str, extension: str, content_type: ContentType) -> list[Chunk]:
        """Split text into chunks tagged with content type (and language)."""
        ...
