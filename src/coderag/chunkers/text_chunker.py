"""Sliding-window chunking strategy for prose and unknown content."""

import logging

from coderag.config import DEFAULT_CHUNK_OVERLAP, DEFAULT_CHUNK_SIZE
from coderag.models import Chunk, ChunkMetadata, ContentType

logger = logging.getLogger(__name__)


def normalize_window(chunk_size: int, overlap: int) -> tuple[int, int]:
    """Return a (chunk_size, overlap) pair whose step is always positive."""
    if chunk_size <= 0:
        logger.warning(
            f"Chunk size ({chunk_size}) must be positive, using {DEFAULT_CHUNK_SIZE}"
        )
        chunk_size = DEFAULT_CHUNK_SIZE
    if overlap < 0:
        overlap = 0
    if overlap >= chunk_size:
        logger.warning(
            f"Overlap ({overlap}) must be smaller than chunk size ({chunk_size}), "
            f"using {chunk_size // 2}"
        )
        overlap = chunk_size // 2
    return chunk_size, overlap


class SlidingWindowChunker:
    """Fixed-size character windows with overlap between neighbours.

    Windows are ``chunk_size`` characters long and advance by
    ``chunk_size - overlap``. Whitespace-only windows are dropped. The loop
    stops at the first window that reaches the end of the content, so the
    tail is never emitted twice.
    """

    def __init__(
        self,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        overlap: int = DEFAULT_CHUNK_OVERLAP,
    ):
        self.chunk_size, self.overlap = normalize_window(chunk_size, overlap)

    @property
    def step(self) -> int:
        return self.chunk_size - self.overlap

    def windows(self, text: str) -> list[tuple[int, int]]:
        """Compute exact (start, end) bounds covering ``text``."""
        length = len(text)
        bounds: list[tuple[int, int]] = []
        covered = 0

        for start in range(0, length, self.step):
            end = min(start + self.chunk_size, length)
            bounds.append((start, end))
            covered = end
            if end >= length:
                break

        # Guard for the tail; unreachable while step <= chunk_size
        if covered < length:
            bounds.append((covered, length))

        return bounds

    def chunk(
        self,
        text: str,
        extension: str = "",
        content_type: ContentType = ContentType.TEXT,
    ) -> list[Chunk]:
        """Split text into overlapping windows.

        Args:
            text: The text content to chunk
            extension: File extension (unused, part of the strategy protocol)
            content_type: Tag for the produced chunks (text or unknown)

        Returns:
            List of non-blank Chunk objects in document order
        """
        if not text or not text.strip():
            return []

        metadata = ChunkMetadata(content_type=content_type)
        chunks = []
        for start, end in self.windows(text):
            window = text[start:end]
            if window.strip():
                chunks.append(Chunk(text=window, metadata=metadata))
        return chunks
