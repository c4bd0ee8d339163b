"""Blank-line based chunking strategy for source code."""

import re

from coderag.models import Chunk, ChunkMetadata, ContentType

# One or more lines holding only whitespace
_BLANK_LINES = re.compile(r"\r?\n(?:[ \t\f\v]*\r?\n)+")


def language_for_extension(extension: str) -> str | None:
    """Derive a language tag from a file extension ('.PY' -> 'py')."""
    language = extension.lstrip(".").lower()
    return language or None


class BlankLineCodeChunker:
    """Split code into blocks separated by blank lines.

    Each block keeps its internal indentation. There is no size cap: a long
    function without blank lines stays one chunk.
    """

    def chunk(
        self,
        text: str,
        extension: str = "",
        content_type: ContentType = ContentType.CODE,
    ) -> list[Chunk]:
        """Split code text into blank-line separated blocks.

        Args:
            text: Source code
            extension: File extension, used as the language tag
            content_type: Tag for the produced chunks

        Returns:
            List of Chunk objects, one per non-blank block
        """
        if not text or not text.strip():
            return []

        metadata = ChunkMetadata(
            content_type=content_type,
            language=language_for_extension(extension),
        )

        chunks = []
        for block in _BLANK_LINES.split(text):
            if not block.strip():
                continue
            # Drop leading blank lines and trailing whitespace, keep indentation
            block = block.lstrip("\r\n").rstrip()
            chunks.append(Chunk(text=block, metadata=metadata))
        return chunks
