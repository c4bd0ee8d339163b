"""Gitignore-style path filtering for project scans."""

import logging
from pathlib import Path
from typing import Iterable

import pathspec

from coderag.config import DEFAULT_IGNORE_FILE, INDEX_DIR_NAME

logger = logging.getLogger(__name__)

# Always excluded, before any project rules are layered on top
BUILTIN_PATTERNS: tuple[str, ...] = (
    # Version control
    ".git",
    ".hg",
    ".svn",
    # Dependencies
    "node_modules",
    ".venv",
    "venv",
    "__pycache__",
    # Build output
    "dist",
    "build",
    "coverage",
    "*.egg-info",
    # Logs
    "*.log",
    # Lock files
    "package-lock.json",
    "yarn.lock",
    "pnpm-lock.yaml",
    "poetry.lock",
    "Cargo.lock",
    "*.lock",
    # Environment files
    ".env*",
    # Local index
    INDEX_DIR_NAME,
)


def to_posix(path: str | Path) -> str:
    """Normalize a relative path to forward slashes, whatever the host OS."""
    posix = str(path).replace("\\", "/")
    while posix.startswith("./"):
        posix = posix[2:]
    return posix.strip("/")


def parse_ignore_lines(lines: Iterable[str]) -> list[str]:
    """Keep pattern lines, dropping blanks and ``#`` comments."""
    patterns = []
    for line in lines:
        line = line.rstrip("\r\n")
        if not line.strip() or line.lstrip().startswith("#"):
            continue
        patterns.append(line)
    return patterns


class IgnoreFilter:
    """Predicate over relative paths built from an ordered rule set.

    Rules follow gitignore semantics: the last matching pattern wins and
    ``!pattern`` re-includes a path excluded earlier. The ignore file itself
    is always ignored.
    """

    def __init__(self, patterns: Iterable[str], ignore_file: str = DEFAULT_IGNORE_FILE):
        self.patterns: tuple[str, ...] = tuple(patterns)
        self.ignore_file = to_posix(ignore_file)
        self._spec = pathspec.GitIgnoreSpec.from_lines(self.patterns)

    def __call__(self, relative_path: str | Path, is_dir: bool = False) -> bool:
        return self.is_ignored(relative_path, is_dir)

    def is_ignored(self, relative_path: str | Path, is_dir: bool = False) -> bool:
        """Check whether a path relative to the scan root is excluded.

        Args:
            relative_path: Path relative to the root (either separator style)
            is_dir: True for directories, so ``name/`` patterns apply

        Returns:
            True if the path must not be scanned
        """
        posix = to_posix(relative_path)
        if not posix:
            return False
        if posix == self.ignore_file:
            return True
        if is_dir:
            posix += "/"
        return self._spec.match_file(posix)


def read_ignore_file(path: Path) -> list[str]:
    """Read patterns from an ignore file; a missing file yields none."""
    try:
        content = path.read_text(encoding="utf-8", errors="replace")
    except FileNotFoundError:
        return []
    except OSError as e:
        logger.warning(f"Could not read ignore file {path}: {e}")
        return []
    return parse_ignore_lines(content.splitlines())


def build_ignore_filter(
    root_dir: Path | str, ignore_file: str = DEFAULT_IGNORE_FILE
) -> IgnoreFilter:
    """Build the filter for a scan root.

    Built-in patterns come first; the project's ignore file is layered on top
    so its rules (including negations) take precedence.
    """
    project_patterns = read_ignore_file(Path(root_dir) / ignore_file)
    if project_patterns:
        logger.info(f"Loaded {len(project_patterns)} patterns from {ignore_file}")

    patterns = [*BUILTIN_PATTERNS, to_posix(ignore_file), *project_patterns]
    return IgnoreFilter(patterns, ignore_file=ignore_file)
