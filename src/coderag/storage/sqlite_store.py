"""SQLite-backed local vector store."""

import json
import logging
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional, Sequence

import numpy as np

from coderag.errors import StoreFailure
from coderag.models import IndexedRecord, StoredRecord
from coderag.models.chunk import SOURCE_PATH_KEY
from coderag.protocols.vector_store import Where
from coderag.storage.filters import matches
from coderag.storage.schema import SCHEMA

logger = logging.getLogger(__name__)

# Stay below SQLite's bound-parameter limit
_DELETE_BATCH = 500


class SqliteVectorStore:
    """Vector store kept in a single SQLite file.

    Embeddings are stored as float32 blobs and searched by brute-force cosine
    similarity with numpy; metadata filters are evaluated in Python. A
    connection is opened per call, so one instance can serve several threads.
    """

    def __init__(self, path: Path | str):
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.initialize()

    @contextmanager
    def connection(self) -> Iterator[sqlite3.Connection]:
        """Context manager for database connections (one transaction)."""
        try:
            conn = sqlite3.connect(self.path, timeout=30)
        except sqlite3.Error as e:
            raise StoreFailure(f"Cannot open index {self.path}: {e}") from e
        conn.row_factory = sqlite3.Row
        try:
            yield conn
            conn.commit()
        except sqlite3.Error as e:
            conn.rollback()
            raise StoreFailure(f"SQLite index error: {e}") from e
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    def initialize(self) -> None:
        """Create schema if not exists."""
        with self.connection() as conn:
            conn.executescript(SCHEMA)

    def _dimension(self, conn: sqlite3.Connection) -> Optional[int]:
        row = conn.execute(
            "SELECT value FROM metadata WHERE key = 'dimension'"
        ).fetchone()
        return int(row["value"]) if row else None

    def add(self, records: list[IndexedRecord]) -> None:
        """Write a batch of records in one transaction, replacing existing ids."""
        if not records:
            return

        dimension = len(records[0].embedding)
        for record in records:
            if len(record.embedding) != dimension:
                raise StoreFailure(
                    f"Record {record.id} has dimension {len(record.embedding)}, "
                    f"expected {dimension}"
                )

        with self.connection() as conn:
            existing = self._dimension(conn)
            if existing is not None and existing != dimension:
                raise StoreFailure(
                    f"Index at {self.path} holds {existing}-dimensional vectors, "
                    f"got {dimension}. Remove all documents and re-index."
                )
            if existing is None:
                conn.execute(
                    "INSERT OR REPLACE INTO metadata (key, value) VALUES ('dimension', ?)",
                    (str(dimension),),
                )

            conn.executemany(
                """INSERT OR REPLACE INTO records
                   (id, source_path, text, metadata, embedding)
                   VALUES (?, ?, ?, ?, ?)""",
                [
                    (
                        record.id,
                        record.metadata.get(SOURCE_PATH_KEY),
                        record.text,
                        json.dumps(record.metadata),
                        np.asarray(record.embedding, dtype=np.float32).tobytes(),
                    )
                    for record in records
                ],
            )

        logger.debug(f"Wrote {len(records)} records to {self.path}")

    def _rows(
        self, where: Optional[Where], with_embeddings: bool
    ) -> list[tuple[StoredRecord, Optional[np.ndarray]]]:
        columns = "id, text, metadata" + (", embedding" if with_embeddings else "")
        with self.connection() as conn:
            cursor = conn.execute(f"SELECT {columns} FROM records ORDER BY rowid")
            rows = cursor.fetchall()

        results = []
        for row in rows:
            metadata = json.loads(row["metadata"])
            if not matches(metadata, where):
                continue
            record = StoredRecord(id=row["id"], text=row["text"], metadata=metadata)
            embedding = (
                np.frombuffer(row["embedding"], dtype=np.float32)
                if with_embeddings
                else None
            )
            results.append((record, embedding))
        return results

    def query(
        self, embedding: Sequence[float], k: int, where: Optional[Where] = None
    ) -> list[StoredRecord]:
        """Find the ``k`` records most similar to ``embedding``."""
        candidates = self._rows(where, with_embeddings=True)
        if not candidates or k <= 0:
            return []

        query = np.asarray(embedding, dtype=np.float32)
        matrix = np.vstack([vector for _, vector in candidates])
        if matrix.shape[1] != query.shape[0]:
            raise StoreFailure(
                f"Query has dimension {query.shape[0]}, index holds {matrix.shape[1]}"
            )

        similarities = self._cosine_similarities(query, matrix)
        # Stable sort keeps insertion order among ties
        order = np.argsort(-similarities, kind="stable")[:k]

        hits = []
        for i in order:
            record, _ = candidates[int(i)]
            record.distance = float(1.0 - similarities[int(i)])
            hits.append(record)
        return hits

    def delete(
        self, ids: Optional[list[str]] = None, where: Optional[Where] = None
    ) -> None:
        """Delete records by id and/or metadata filter."""
        if ids is None and where is None:
            return

        if where is not None:
            targets = [record.id for record, _ in self._rows(where, with_embeddings=False)]
            if ids is not None:
                wanted = set(ids)
                targets = [record_id for record_id in targets if record_id in wanted]
        else:
            targets = list(ids or [])

        if not targets:
            return

        with self.connection() as conn:
            for i in range(0, len(targets), _DELETE_BATCH):
                batch = targets[i : i + _DELETE_BATCH]
                placeholders = ", ".join("?" for _ in batch)
                conn.execute(f"DELETE FROM records WHERE id IN ({placeholders})", batch)

        logger.debug(f"Deleted {len(targets)} records from {self.path}")

    def get(self, where: Optional[Where] = None) -> list[StoredRecord]:
        """Return stored records (without vectors) matching the filter."""
        return [record for record, _ in self._rows(where, with_embeddings=False)]

    def count(self) -> int:
        """Return the number of stored records."""
        with self.connection() as conn:
            return conn.execute("SELECT COUNT(*) FROM records").fetchone()[0]

    @staticmethod
    def _cosine_similarities(query: np.ndarray, matrix: np.ndarray) -> np.ndarray:
        """Compute cosine similarity between a vector and each matrix row."""
        norms = np.linalg.norm(matrix, axis=1) * np.linalg.norm(query)
        dots = matrix @ query
        with np.errstate(divide="ignore", invalid="ignore"):
            similarities = np.where(norms == 0, 0.0, dots / norms)
        return similarities.astype(np.float64)
