"""Runtime configuration for coderag."""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

DEFAULT_CHUNK_SIZE = 500
DEFAULT_CHUNK_OVERLAP = 50
DEFAULT_TOP_K = 15
DEFAULT_EMBED_CONCURRENCY = 4
DEFAULT_COLLECTION = "mcp-rag-unified"
DEFAULT_IGNORE_FILE = ".gitignore"
DEFAULT_CHROMA_URL = "http://localhost:8000"
INDEX_DIR_NAME = ".coderag"

VECTOR_STORE_BACKENDS = ("chroma", "sqlite")

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


def _get_int(env: Mapping[str, str], key: str, default: int) -> int:
    raw = env.get(key)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError as e:
        raise ValueError(f"{key} must be an integer, got {raw!r}") from e


def _get_bool(env: Mapping[str, str], key: str, default: bool) -> bool:
    raw = env.get(key)
    if raw is None or not raw.strip():
        return default
    value = raw.strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    raise ValueError(f"{key} must be a boolean, got {raw!r}")


@dataclass(frozen=True)
class Settings:
    """Settings for one coderag process.

    Defaults mirror the environment variables read by :meth:`from_env`.
    """

    project_root: Path
    chunk_size: int = DEFAULT_CHUNK_SIZE
    chunk_overlap: int = DEFAULT_CHUNK_OVERLAP
    embedding_model: Optional[str] = None
    embedding_device: Optional[str] = None
    embed_concurrency: int = DEFAULT_EMBED_CONCURRENCY
    vector_store: str = "chroma"
    chroma_url: str = DEFAULT_CHROMA_URL
    chroma_path: Optional[Path] = None
    sqlite_path: Optional[Path] = None
    collection_name: str = DEFAULT_COLLECTION
    ignore_file: str = DEFAULT_IGNORE_FILE
    top_k: int = DEFAULT_TOP_K
    index_on_startup: bool = True
    log_level: str = "INFO"

    def __post_init__(self) -> None:
        if self.vector_store not in VECTOR_STORE_BACKENDS:
            raise ValueError(
                f"Unknown vector store {self.vector_store!r}; "
                f"expected one of {', '.join(VECTOR_STORE_BACKENDS)}"
            )
        if self.embed_concurrency < 1:
            raise ValueError("EMBED_CONCURRENCY must be at least 1")

    @property
    def resolved_sqlite_path(self) -> Path:
        """SQLite index location, defaulting to ``<root>/.coderag/index.db``."""
        if self.sqlite_path is not None:
            return self.sqlite_path
        return self.project_root / INDEX_DIR_NAME / "index.db"

    @classmethod
    def from_env(
        cls,
        env: Optional[Mapping[str, str]] = None,
        project_root: Optional[Path | str] = None,
    ) -> "Settings":
        """Build settings from environment variables.

        Args:
            env: Mapping to read from (defaults to ``os.environ``)
            project_root: Explicit root, overriding ``RAG_PROJECT_ROOT``

        Returns:
            A validated Settings instance
        """
        env = os.environ if env is None else env

        root = project_root or env.get("RAG_PROJECT_ROOT") or os.getcwd()
        chroma_path = env.get("CHROMA_PATH")
        sqlite_path = env.get("SQLITE_PATH")

        return cls(
            project_root=Path(root).resolve(),
            chunk_size=_get_int(env, "CHUNK_SIZE", DEFAULT_CHUNK_SIZE),
            chunk_overlap=_get_int(env, "CHUNK_OVERLAP", DEFAULT_CHUNK_OVERLAP),
            embedding_model=env.get("EMBEDDING_MODEL") or None,
            embedding_device=env.get("EMBEDDING_DEVICE") or None,
            embed_concurrency=_get_int(
                env, "EMBED_CONCURRENCY", DEFAULT_EMBED_CONCURRENCY
            ),
            vector_store=env.get("VECTOR_STORE", "chroma").strip().lower(),
            chroma_url=env.get("CHROMA_URL", DEFAULT_CHROMA_URL),
            chroma_path=Path(chroma_path) if chroma_path else None,
            sqlite_path=Path(sqlite_path) if sqlite_path else None,
            collection_name=env.get("RAG_COLLECTION", DEFAULT_COLLECTION),
            ignore_file=env.get("RAG_IGNORE_FILE", DEFAULT_IGNORE_FILE),
            top_k=_get_int(env, "QUERY_TOP_K", DEFAULT_TOP_K),
            index_on_startup=_get_bool(env, "INDEX_PROJECT_ON_STARTUP", True),
            log_level=env.get("LOG_LEVEL", "INFO").upper(),
        )
