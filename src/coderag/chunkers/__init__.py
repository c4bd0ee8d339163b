"""Chunking strategies for coderag."""

from coderag.chunkers.code_chunker import BlankLineCodeChunker
from coderag.chunkers.hierarchical import (
    HierarchicalChunker,
    content_type_for,
    normalize_extension,
)
from coderag.chunkers.markdown_chunker import MarkdownChunker
from coderag.chunkers.text_chunker import SlidingWindowChunker, normalize_window

__all__ = [
    "BlankLineCodeChunker",
    "HierarchicalChunker",
    "MarkdownChunker",
    "SlidingWindowChunker",
    "content_type_for",
    "normalize_extension",
    "normalize_window",
]
