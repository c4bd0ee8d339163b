"""Content-type dispatch over the registered chunking strategies."""

import logging
from typing import Optional

from coderag.chunkers.code_chunker import BlankLineCodeChunker
from coderag.chunkers.markdown_chunker import MarkdownChunker
from coderag.chunkers.text_chunker import SlidingWindowChunker
from coderag.config import DEFAULT_CHUNK_OVERLAP, DEFAULT_CHUNK_SIZE
from coderag.models import Chunk, ContentType
from coderag.protocols import ChunkingStrategy

logger = logging.getLogger(__name__)

TEXT_EXTENSIONS = {
    ".md", ".markdown", ".txt", ".rst",
    ".json", ".yaml", ".yml", ".toml", ".ini", ".cfg", ".csv",
}

CODE_EXTENSIONS = {
    ".ts", ".js", ".jsx", ".tsx", ".mjs", ".cjs", ".vue",
    ".py", ".java", ".go", ".cs", ".rs", ".rb", ".php", ".kt", ".swift",
    ".c", ".h", ".cpp", ".hpp",
    ".html", ".css", ".scss",
    ".sh", ".sql",
}

MARKDOWN_EXTENSIONS = {".md", ".markdown"}


def normalize_extension(extension: str) -> str:
    """Lower-case an extension and make sure it starts with a dot."""
    extension = extension.strip().lower()
    if extension and not extension.startswith("."):
        extension = "." + extension
    return extension


def content_type_for(extension: str) -> ContentType:
    """Map a file extension to the content type of its chunks."""
    extension = normalize_extension(extension)
    if extension in TEXT_EXTENSIONS:
        return ContentType.TEXT
    if extension in CODE_EXTENSIONS:
        return ContentType.CODE
    return ContentType.UNKNOWN


class HierarchicalChunker:
    """Pick a chunking strategy from the file extension.

    Strategies are looked up by kind: ``markdown`` for .md files, ``code`` for
    code extensions and ``text`` for everything else (unknown extensions are
    chunked as text but tagged ``unknown``).
    """

    def __init__(
        self,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        overlap: int = DEFAULT_CHUNK_OVERLAP,
        strategies: Optional[dict[str, ChunkingStrategy]] = None,
    ):
        text_chunker = SlidingWindowChunker(chunk_size, overlap)
        self.strategies: dict[str, ChunkingStrategy] = {
            "text": text_chunker,
            "code": BlankLineCodeChunker(),
            "markdown": MarkdownChunker(text_chunker),
        }
        if strategies:
            self.strategies.update(strategies)

    def register(self, kind: str, strategy: ChunkingStrategy) -> None:
        """Replace or add the strategy used for a content kind."""
        self.strategies[kind] = strategy

    def chunk(self, content: str, extension: str) -> list[Chunk]:
        """Chunk file content according to its extension.

        Never raises: a failing strategy is logged and yields no chunks.
        """
        extension = normalize_extension(extension)
        content_type = content_type_for(extension)

        if extension in MARKDOWN_EXTENSIONS:
            kind = "markdown"
        elif content_type is ContentType.CODE:
            kind = "code"
        else:
            kind = "text"

        try:
            return self.strategies[kind].chunk(content, extension, content_type)
        except Exception:
            logger.exception(f"Chunking failed for extension {extension or '<none>'}")
            return []
