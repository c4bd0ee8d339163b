"""
coderag test configuration
==========================

Shared fixtures:
- embedder: deterministic hashing embedder (no model download)
- project: a small project tree with an ignore file
- settings / store / service: a RagService backed by SQLite in tmp_path
- recording_store: a fake store that records every call
"""

import hashlib
import threading
from pathlib import Path
from typing import Optional

import numpy as np
import pytest

from coderag.config import Settings
from coderag.service import RagService
from coderag.storage import SqliteVectorStore


# ============================================================================
# Fakes
# ============================================================================

class HashingEmbedder:
    """Bag-of-trigrams embedder: identical texts get identical vectors."""

    def __init__(self, dimension: int = 64, fail_on: tuple[str, ...] = ()):
        self._dimension = dimension
        self.fail_on = fail_on
        self.calls = 0
        self._lock = threading.Lock()

    @property
    def dimension(self) -> int:
        return self._dimension

    @property
    def model_name(self) -> str:
        return "hashing-test"

    def embed(self, texts: list[str]) -> np.ndarray:
        rows = []
        for text in texts:
            with self._lock:
                self.calls += 1
            if any(marker in text for marker in self.fail_on):
                raise RuntimeError("provider unavailable")
            vector = np.zeros(self._dimension)
            lowered = text.lower()
            for i in range(max(len(lowered) - 2, 1)):
                digest = hashlib.md5(lowered[i : i + 3].encode("utf-8")).hexdigest()
                vector[int(digest, 16) % self._dimension] += 1.0
            rows.append(vector)
        return np.vstack(rows)


class FailingEmbedder(HashingEmbedder):
    """Embedder whose every call fails."""

    def embed(self, texts: list[str]) -> np.ndarray:
        raise RuntimeError("provider unavailable")


class RecordingStore:
    """Vector store fake that records calls and holds nothing."""

    def __init__(self):
        self.calls: list[str] = []

    def add(self, records):
        self.calls.append("add")

    def query(self, embedding, k, where=None):
        self.calls.append("query")
        return []

    def delete(self, ids=None, where=None):
        self.calls.append("delete")

    def get(self, where=None):
        self.calls.append("get")
        return []

    def count(self):
        self.calls.append("count")
        return 0


class CountingFactory:
    """Store factory that counts how often it is invoked."""

    def __init__(self, store):
        self.store = store
        self.created = 0
        self._lock = threading.Lock()

    def __call__(self, settings: Settings):
        with self._lock:
            self.created += 1
        return self.store


# ============================================================================
# Fixtures
# ============================================================================

@pytest.fixture
def embedder() -> HashingEmbedder:
    return HashingEmbedder()


@pytest.fixture
def project(tmp_path: Path) -> Path:
    """A small project tree.

    project/
        .gitignore          -> ignores secret.txt
        README.md           -> prose + one fenced python block
        notes.txt
        secret.txt          -> ignored
        src/app.py          -> two code blocks
        src/util/helpers.js
        node_modules/lib/index.js  -> ignored (built-in)
        debug.log           -> ignored (built-in)
    """
    root = (tmp_path / "project").resolve()
    (root / "src" / "util").mkdir(parents=True)
    (root / "node_modules" / "lib").mkdir(parents=True)

    (root / ".gitignore").write_text("# local files\n\nsecret.txt\n")
    (root / "README.md").write_text(
        "# Demo\n\nThis project greets people.\n\n"
        "```python\nprint('hello')\n```\n\nSee src/app.py for details.\n"
    )
    (root / "notes.txt").write_text("The quick brown fox jumps over the lazy dog.")
    (root / "secret.txt").write_text("api-key-do-not-index")
    (root / "src" / "app.py").write_text(
        "import sys\n\n\ndef greet(name):\n    return f'hello {name}'\n"
    )
    (root / "src" / "util" / "helpers.js").write_text(
        "export function add(a, b) {\n  return a + b;\n}\n"
    )
    (root / "node_modules" / "lib" / "index.js").write_text("module.exports = 1;\n")
    (root / "debug.log").write_text("noise\n")
    return root


@pytest.fixture
def settings(project: Path, tmp_path: Path) -> Settings:
    return Settings(
        project_root=project,
        chunk_size=200,
        chunk_overlap=20,
        embed_concurrency=2,
        vector_store="sqlite",
        sqlite_path=tmp_path / "index" / "index.db",
    )


@pytest.fixture
def store(settings: Settings) -> SqliteVectorStore:
    return SqliteVectorStore(settings.resolved_sqlite_path)


@pytest.fixture
def service(settings: Settings, embedder: HashingEmbedder, store: SqliteVectorStore) -> RagService:
    return RagService(settings, embedder=embedder, store_factory=lambda _: store)


@pytest.fixture
def recording_store() -> RecordingStore:
    return RecordingStore()


def make_service(
    settings: Settings,
    store,
    embedder: Optional[HashingEmbedder] = None,
) -> tuple[RagService, CountingFactory]:
    """Build a service around ``store`` and return it with its factory."""
    factory = CountingFactory(store)
    return RagService(settings, embedder=embedder or HashingEmbedder(), store_factory=factory), factory
