"""Index pipeline: embed chunks, write them to the vector store, answer queries."""

import logging
import re
import threading
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Any, Callable, Optional

import numpy as np

from coderag.chunkers import HierarchicalChunker
from coderag.config import Settings
from coderag.errors import (
    CollectionNotFoundError,
    EmptyError,
    InvalidArgumentError,
    NotFoundError,
    ProviderFailure,
)
from coderag.ingesters import FolderScanner
from coderag.ingesters.ignore import to_posix
from coderag.models import Chunk, IndexedRecord, IndexReport, StoredRecord
from coderag.models.chunk import SOURCE_PATH_KEY
from coderag.protocols import EmbeddingProvider, VectorStore
from coderag.storage import create_vector_store
from coderag.storage.filters import validate_where

logger = logging.getLogger(__name__)

NO_RESULTS_MESSAGE = "No relevant documents found in the index."
NOT_INDEXED_MESSAGE = (
    "Error: Documents not indexed yet or index is not configured correctly. "
    "Please run index_documents first."
)

StoreFactory = Callable[[Settings], VectorStore]


def document_name(source_path: Optional[str], rank: int) -> str:
    """Name a query hit after its file and its 1-based rank in the results."""
    source_path = source_path or "unknown_source"
    file_name = re.split(r"[/\\]", source_path)[-1] or source_path
    return re.sub(r"[^a-zA-Z0-9_]", "_", f"{file_name}_chunk{rank}")


def format_results(hits: list[StoredRecord]) -> str:
    """Render hits as delimited blocks, keeping the store's relevance order."""
    blocks = []
    for rank, hit in enumerate(hits, 1):
        name = document_name(hit.source_path, rank)
        blocks.append(f"[DOCUMENT:{name}]\n{hit.text.strip()}\n[/DOCUMENT:{name}]")
    return "\n\n".join(blocks)


class RagService:
    """The indexing and query pipeline for one project root.

    Construct one instance per process and share it. The vector store handle
    is created on first use (once, under a lock) and then reused by
    concurrent calls. Every public operation is a single request/response
    against the store.
    """

    def __init__(
        self,
        settings: Settings,
        embedder: Optional[EmbeddingProvider] = None,
        store_factory: Optional[StoreFactory] = None,
    ):
        self.settings = settings
        self.chunker = HierarchicalChunker(settings.chunk_size, settings.chunk_overlap)
        self._embedder = embedder
        self._store_factory = store_factory or create_vector_store
        self._store: Optional[VectorStore] = None
        self._lock = threading.Lock()

    @property
    def embedder(self) -> EmbeddingProvider:
        """Embedding provider, defaulting to a sentence-transformers model."""
        if self._embedder is None:
            with self._lock:
                if self._embedder is None:
                    # Import here to avoid loading torch unless needed
                    from coderag.embedders import SentenceTransformerEmbedder

                    self._embedder = SentenceTransformerEmbedder(
                        self.settings.embedding_model,
                        device=self.settings.embedding_device,
                    )
        return self._embedder

    @property
    def store(self) -> VectorStore:
        """Vector store handle, connected on first access."""
        if self._store is None:
            with self._lock:
                if self._store is None:
                    self._store = self._store_factory(self.settings)
        return self._store

    def scanner(self) -> FolderScanner:
        """A scanner with ignore rules freshly read from the project root."""
        return FolderScanner(
            self.settings.project_root,
            chunker=self.chunker,
            ignore_file=self.settings.ignore_file,
        )

    def resolve(self, path: str) -> Path:
        """Resolve a caller path against the project root.

        Raises:
            InvalidArgumentError: If the path points outside the project root
        """
        root = self.settings.project_root.resolve()
        candidate = Path(path)
        if not candidate.is_absolute():
            candidate = root / candidate
        candidate = candidate.resolve()
        if not candidate.is_relative_to(root):
            raise InvalidArgumentError(f"Path is outside the project root: {path}")
        return candidate

    # Embedding

    def _embed_one(self, text: str) -> Optional[list[float]]:
        try:
            vectors = self.embedder.embed([text])
        except Exception as e:
            logger.warning(f"Embedding provider failed: {e}")
            return None

        if vectors is None or len(vectors) == 0:
            return None
        vector = np.asarray(vectors[0], dtype=np.float64).ravel()
        if vector.size == 0 or not np.all(np.isfinite(vector)):
            return None
        return vector.tolist()

    def _embed_chunks(self, chunks: list[Chunk]) -> list[Optional[list[float]]]:
        workers = max(1, min(self.settings.embed_concurrency, len(chunks)))
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="embed") as pool:
            return list(pool.map(lambda chunk: self._embed_one(chunk.text), chunks))

    def _write(self, chunks: list[Chunk], report: IndexReport) -> IndexReport:
        if not chunks:
            logger.info(f"No indexable chunks found in {report.path}")
            return report

        records = []
        for chunk, embedding in zip(chunks, self._embed_chunks(chunks)):
            if embedding is None:
                logger.warning(f"No embedding for chunk {chunk.record_id}, skipping")
                report.chunks_skipped += 1
                continue
            records.append(
                IndexedRecord(
                    id=chunk.record_id,
                    embedding=embedding,
                    metadata=chunk.store_metadata(),
                    text=chunk.text,
                )
            )

        if records:
            self.store.add(records)
        report.chunks_indexed = len(records)

        logger.info(
            f"Indexed {report.chunks_indexed} chunks from {report.files} files "
            f"in {report.path} ({report.chunks_skipped} skipped)"
        )
        return report

    # Operations

    def index(self, path: str) -> IndexReport:
        """Index a file, or every non-ignored file under a directory.

        Args:
            path: File or directory, relative to the project root

        Returns:
            IndexReport with file and chunk counts

        Raises:
            InvalidArgumentError: If ``path`` is blank, outside the project
                root or excluded by the ignore rules
            NotFoundError: If the resolved path does not exist
            EmptyError: If a directory holds no indexable files
        """
        if not isinstance(path, str) or not path.strip():
            raise InvalidArgumentError("A path to index is required")

        target = self.resolve(path)
        if not target.exists():
            raise NotFoundError(f"Path does not exist: {target}")

        scanner = self.scanner()
        report = IndexReport(path=scanner.relative(target) or ".")

        if scanner.is_ignored(target, is_dir=target.is_dir()):
            raise InvalidArgumentError(f"Path is excluded by ignore rules: {report.path}")

        if target.is_dir():
            files = scanner.discover(target)
            if not files:
                raise EmptyError(f"No files found in directory {target}")
        elif target.is_file():
            files = [target]
        else:
            raise InvalidArgumentError(
                f"Path is neither a file nor a directory: {target}"
            )

        chunks = [chunk for file_path in files for chunk in scanner.chunk_file(file_path)]
        report.files = len(files)
        return self._write(chunks, report)

    def index_project(self) -> IndexReport:
        """Index the whole project root (startup auto-indexing)."""
        logger.info(f"Indexing project at {self.settings.project_root}")
        chunks = self.scanner().scan()
        report = IndexReport(
            path=".",
            files=len({chunk.metadata.source_path for chunk in chunks}),
        )
        return self._write(chunks, report)

    def query(
        self,
        query: str,
        k: Optional[int] = None,
        where: Optional[dict[str, Any]] = None,
    ) -> str:
        """Return the ``k`` most similar chunks formatted as document blocks.

        Args:
            query: Natural-language query
            k: Number of results (default from settings, 15)
            where: Metadata filter passed through to the store

        Returns:
            Formatted result blocks, or a sentinel message when nothing
            matched or the index is not set up yet

        Raises:
            InvalidArgumentError: On a blank query, bad ``k`` or malformed filter
            ProviderFailure: If the query cannot be embedded
        """
        if not isinstance(query, str) or not query.strip():
            raise InvalidArgumentError("A non-empty query string is required")
        k = self.settings.top_k if k is None else k
        if isinstance(k, bool) or not isinstance(k, int) or k < 1:
            raise InvalidArgumentError(f"k must be a positive integer, got {k!r}")
        validate_where(where)

        embedding = self._embed_one(query)
        if embedding is None:
            raise ProviderFailure(f"Failed to get embedding for query: {query}")

        try:
            hits = self.store.query(embedding, k, where=where)
        except CollectionNotFoundError as e:
            logger.warning(f"Query before the index exists: {e}")
            return NOT_INDEXED_MESSAGE

        if not hits:
            logger.info(f"No relevant documents found for query: {query!r}")
            return NO_RESULTS_MESSAGE

        logger.info(f"Retrieved {len(hits)} chunks for query: {query!r}")
        return format_results(hits)

    def remove_document(self, path: str) -> None:
        """Delete every chunk indexed from ``path`` (no-op if none)."""
        if not isinstance(path, str) or not path.strip():
            raise InvalidArgumentError("A document path is required")

        source_path = to_posix(path)
        self.store.delete(where={SOURCE_PATH_KEY: source_path})
        logger.info(f"Removed chunks for document: {source_path}")

    def remove_all(self, confirm: bool) -> int:
        """Delete every record in the index.

        Raises:
            InvalidArgumentError: Unless ``confirm`` is exactly True; the store
                is not contacted in that case

        Returns:
            Number of records removed
        """
        if confirm is not True:
            raise InvalidArgumentError(
                "Confirmation flag `confirm: true` is required to remove all documents."
            )

        ids = [record.id for record in self.store.get()]
        if not ids:
            logger.info("Index was already empty")
            return 0

        self.store.delete(ids=ids)
        logger.info(f"Removed all {len(ids)} records from the index")
        return len(ids)

    def list_sources(self) -> list[str]:
        """Return the distinct source paths in the index, in first-seen order."""
        sources = dict.fromkeys(
            record.source_path for record in self.store.get() if record.source_path
        )
        logger.debug(f"Found {len(sources)} unique document paths")
        return list(sources)


def start_background_indexing(service: RagService) -> threading.Thread:
    """Index the project in a daemon thread; failures are logged only."""

    def run() -> None:
        try:
            service.index_project()
        except Exception:
            logger.exception("Background indexing failed")

    thread = threading.Thread(target=run, name="coderag-startup-index", daemon=True)
    thread.start()
    return thread
