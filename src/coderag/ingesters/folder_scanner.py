"""Breadth-first scanner turning a folder tree into chunks."""

import logging
import os
from collections import deque
from dataclasses import replace
from pathlib import Path
from typing import Callable, Optional

from coderag.chunkers import HierarchicalChunker
from coderag.config import DEFAULT_IGNORE_FILE
from coderag.errors import NotFoundError, ScanError
from coderag.ingesters.ignore import build_ignore_filter
from coderag.models import Chunk
from coderag.utils.binary import detect_binary

logger = logging.getLogger(__name__)

PathPredicate = Callable[..., bool]


class FolderScanner:
    """Walk a directory tree with an explicit work queue and chunk its files.

    The walk is breadth-first. Every path is enqueued at most once, keyed by
    its resolved absolute path, so symlink cycles terminate. Ignored
    directories are never descended into. Errors on individual entries are
    logged and skipped; only failing to enumerate the starting directory is
    fatal.
    """

    def __init__(
        self,
        root_dir: Path | str,
        chunker: Optional[HierarchicalChunker] = None,
        ignore_filter: Optional[PathPredicate] = None,
        ignore_file: str = DEFAULT_IGNORE_FILE,
    ):
        self.root_dir = Path(root_dir).resolve()
        self.chunker = chunker or HierarchicalChunker()
        self.ignore_filter = ignore_filter or build_ignore_filter(
            self.root_dir, ignore_file
        )

    def relative(self, path: Path) -> str:
        """Return ``path`` relative to the scan root, with forward slashes."""
        rel = Path(os.path.relpath(path, self.root_dir)).as_posix()
        return "" if rel == "." else rel

    def is_ignored(self, path: Path, is_dir: bool) -> bool:
        """Check a path under the root against the ignore rules."""
        rel = self.relative(path)
        return bool(rel) and self.ignore_filter(rel, is_dir=is_dir)

    def discover(self, start: Optional[Path | str] = None) -> list[Path]:
        """List every non-ignored file under ``start`` (default: the root).

        Args:
            start: Directory (or file) to start from, inside the root

        Returns:
            File paths in breadth-first order, siblings sorted by name

        Raises:
            NotFoundError: If ``start`` does not exist
            ScanError: If ``start`` cannot be enumerated
        """
        start_path = Path(start) if start is not None else self.root_dir
        if not start_path.is_absolute():
            start_path = self.root_dir / start_path
        if not start_path.exists():
            raise NotFoundError(f"Path does not exist: {start_path}")

        if start_path.is_file():
            return [] if self.is_ignored(start_path, is_dir=False) else [start_path]

        files: list[Path] = []
        queue: deque[Path] = deque([start_path])
        visited: set[Path] = {start_path.resolve()}

        while queue:
            current = queue.popleft()

            try:
                is_dir = current.is_dir()
            except OSError as e:
                logger.warning(f"Cannot stat {current}: {e}")
                continue

            if not is_dir:
                if current.is_file():
                    files.append(current)
                continue

            try:
                entries = sorted(current.iterdir(), key=lambda p: p.name)
            except OSError as e:
                if current == start_path:
                    raise ScanError(f"Cannot list directory {current}: {e}") from e
                logger.warning(f"Cannot list directory {current}: {e}")
                continue

            for entry in entries:
                try:
                    entry_is_dir = entry.is_dir()
                    resolved = entry.resolve()
                except (OSError, RuntimeError) as e:
                    logger.warning(f"Cannot access {entry}: {e}")
                    continue

                if self.is_ignored(entry, is_dir=entry_is_dir):
                    logger.debug(f"Ignoring {self.relative(entry)}")
                    continue
                if resolved in visited:
                    continue

                visited.add(resolved)
                queue.append(entry)

        return files

    def chunk_file(self, path: Path) -> list[Chunk]:
        """Read and chunk one file, stamping source path and chunk ordinals.

        Unreadable, binary and non-UTF-8 files are logged and yield no chunks.
        """
        rel = self.relative(path)

        try:
            raw = path.read_bytes()
        except OSError as e:
            logger.warning(f"Cannot read {rel}: {e}")
            return []

        if detect_binary(rel, raw):
            logger.debug(f"Skipping binary file {rel}")
            return []

        try:
            content = raw.decode("utf-8-sig")
        except UnicodeDecodeError as e:
            logger.warning(f"Skipping {rel}: not valid UTF-8 ({e.reason})")
            return []

        chunks = self.chunker.chunk(content, path.suffix)
        for index, chunk in enumerate(chunks):
            chunk.metadata = replace(chunk.metadata, source_path=rel)
            chunk.chunk_index = index
        return chunks

    def scan(self, start: Optional[Path | str] = None) -> list[Chunk]:
        """Chunk every non-ignored file under ``start`` into one batch."""
        files = self.discover(start)
        chunks: list[Chunk] = []
        files_with_chunks = 0

        for path in files:
            file_chunks = self.chunk_file(path)
            if file_chunks:
                files_with_chunks += 1
                chunks.extend(file_chunks)

        logger.info(
            f"Scanned {len(files)} files: {len(chunks)} chunks "
            f"from {files_with_chunks} files"
        )
        return chunks
