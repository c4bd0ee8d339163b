"""ChromaDB vector store backend."""

import logging
from pathlib import Path
from typing import Any, Optional, Sequence
from urllib.parse import urlparse

import chromadb

from coderag.config import DEFAULT_CHROMA_URL, DEFAULT_COLLECTION
from coderag.errors import CollectionNotFoundError, StoreFailure
from coderag.models import IndexedRecord, StoredRecord
from coderag.protocols.vector_store import Where

logger = logging.getLogger(__name__)

_NOT_FOUND_MARKERS = ("does not exist", "not found", "notfound")


def http_client(url: str = DEFAULT_CHROMA_URL) -> Any:
    """Create a Chroma HTTP client from a URL such as ``http://host:8000``."""
    parsed = urlparse(url)
    ssl = parsed.scheme == "https"
    port = parsed.port or (443 if ssl else 8000)
    return chromadb.HttpClient(host=parsed.hostname or "localhost", port=port, ssl=ssl)


class ChromaVectorStore:
    """Vector store backed by a single Chroma collection (cosine space).

    Writes are upserts, so re-indexing a chunk with the same id overwrites it.
    Client errors are translated to ``StoreFailure``; a missing collection
    becomes ``CollectionNotFoundError``.
    """

    def __init__(
        self,
        collection_name: str = DEFAULT_COLLECTION,
        url: str = DEFAULT_CHROMA_URL,
        path: Optional[Path | str] = None,
        client: Any = None,
    ):
        self.collection_name = collection_name
        try:
            if client is None:
                client = (
                    chromadb.PersistentClient(path=str(path)) if path else http_client(url)
                )
            self.client = client
            self.collection = client.get_or_create_collection(
                name=collection_name,
                metadata={"hnsw:space": "cosine"},
            )
        except Exception as e:
            raise self._error("connect", e) from e

        target = path or url
        logger.info(f"Using Chroma collection '{collection_name}' at {target}")

    def _error(self, action: str, exc: Exception) -> StoreFailure:
        message = str(exc) or type(exc).__name__
        if any(marker in message.lower() for marker in _NOT_FOUND_MARKERS):
            return CollectionNotFoundError(
                f"Collection '{self.collection_name}' not found: {message}"
            )
        return StoreFailure(f"Chroma {action} failed: {message}")

    def add(self, records: list[IndexedRecord]) -> None:
        if not records:
            return
        try:
            self.collection.upsert(
                ids=[r.id for r in records],
                embeddings=[[float(x) for x in r.embedding] for r in records],
                metadatas=[r.metadata for r in records],
                documents=[r.text for r in records],
            )
        except Exception as e:
            raise self._error("add", e) from e

    def query(
        self, embedding: Sequence[float], k: int, where: Optional[Where] = None
    ) -> list[StoredRecord]:
        try:
            available = self.collection.count()
            if available == 0 or k <= 0:
                return []
            result = self.collection.query(
                query_embeddings=[[float(x) for x in embedding]],
                n_results=min(k, available),
                where=where or None,
                include=["metadatas", "documents", "distances"],
            )
        except Exception as e:
            raise self._error("query", e) from e

        ids = (result.get("ids") or [[]])[0]
        documents = (result.get("documents") or [[]])[0] or []
        metadatas = (result.get("metadatas") or [[]])[0] or []
        distances = (result.get("distances") or [[]])[0] or []

        hits = []
        for i, record_id in enumerate(ids):
            hits.append(
                StoredRecord(
                    id=record_id,
                    text=documents[i] if i < len(documents) and documents[i] else "",
                    metadata=dict(metadatas[i] or {}) if i < len(metadatas) else {},
                    distance=float(distances[i]) if i < len(distances) else None,
                )
            )
        return hits

    def delete(
        self, ids: Optional[list[str]] = None, where: Optional[Where] = None
    ) -> None:
        if ids is None and where is None:
            return
        if ids is not None and not ids:
            return
        try:
            self.collection.delete(ids=ids, where=where or None)
        except Exception as e:
            raise self._error("delete", e) from e

    def get(self, where: Optional[Where] = None) -> list[StoredRecord]:
        try:
            result = self.collection.get(
                where=where or None, include=["metadatas", "documents"]
            )
        except Exception as e:
            raise self._error("get", e) from e

        ids = result.get("ids") or []
        documents = result.get("documents") or []
        metadatas = result.get("metadatas") or []
        return [
            StoredRecord(
                id=record_id,
                text=documents[i] if i < len(documents) and documents[i] else "",
                metadata=dict(metadatas[i] or {}) if i < len(metadatas) else {},
            )
            for i, record_id in enumerate(ids)
        ]

    def count(self) -> int:
        try:
            return self.collection.count()
        except Exception as e:
            raise self._error("count", e) from e
