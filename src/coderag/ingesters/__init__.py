"""Filesystem ingestion: ignore rules and the folder scanner."""

from coderag.ingesters.folder_scanner import FolderScanner
from coderag.ingesters.ignore import (
    BUILTIN_PATTERNS,
    IgnoreFilter,
    build_ignore_filter,
    parse_ignore_lines,
)

__all__ = [
    "BUILTIN_PATTERNS",
    "FolderScanner",
    "IgnoreFilter",
    "build_ignore_filter",
    "parse_ignore_lines",
]
