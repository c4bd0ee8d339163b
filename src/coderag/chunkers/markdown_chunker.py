"""Markdown chunking strategy aware of fenced code blocks."""

import logging
import re
from typing import Optional

from coderag.chunkers.text_chunker import SlidingWindowChunker
from coderag.models import Chunk, ChunkMetadata, ContentType

logger = logging.getLogger(__name__)

# ```lang\n body \n``` - the body group is lazy and optional so an empty fence
# (two delimiter lines back to back) still matches without swallowing later fences
_FENCE = re.compile(
    r"^```([\w+#.-]*)[ \t]*\r?\n(?:(.*?)\r?\n)??```[ \t]*\r?$",
    re.MULTILINE | re.DOTALL,
)


class MarkdownChunker:
    """Split markdown into prose windows and one chunk per fenced code block.

    Prose between fences goes through the sliding-window chunker and is tagged
    ``text``. Each fenced body becomes a single ``code`` chunk carrying the
    fence's language tag; the delimiter lines are not part of the chunk.
    Empty fences are skipped. An unterminated fence is treated as prose.
    """

    def __init__(self, text_chunker: Optional[SlidingWindowChunker] = None):
        self.text_chunker = text_chunker or SlidingWindowChunker()

    def _prose(self, segment: str, content_type: ContentType) -> list[Chunk]:
        segment = segment.strip()
        if not segment:
            return []
        return self.text_chunker.chunk(segment, content_type=content_type)

    def chunk(
        self,
        text: str,
        extension: str = ".md",
        content_type: ContentType = ContentType.TEXT,
    ) -> list[Chunk]:
        """Split markdown text into prose and code chunks.

        Args:
            text: Markdown source
            extension: File extension (unused, part of the strategy protocol)
            content_type: Tag for prose chunks

        Returns:
            List of Chunk objects in document order
        """
        if not text or not text.strip():
            return []

        chunks: list[Chunk] = []
        cursor = 0
        fences = 0

        for match in _FENCE.finditer(text):
            fences += 1
            chunks.extend(self._prose(text[cursor : match.start()], content_type))

            body = match.group(2) or ""
            if body.strip():
                language = match.group(1).lower() or None
                chunks.append(
                    Chunk(
                        text=body,
                        metadata=ChunkMetadata(
                            content_type=ContentType.CODE, language=language
                        ),
                    )
                )

            cursor = match.end()

        chunks.extend(self._prose(text[cursor:], content_type))

        logger.debug(f"Markdown: {fences} fenced blocks, {len(chunks)} chunks")
        return chunks
