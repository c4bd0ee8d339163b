"""Vector store backends for coderag."""

from coderag.config import Settings
from coderag.protocols import VectorStore
from coderag.storage.sqlite_store import SqliteVectorStore


def create_vector_store(settings: Settings) -> VectorStore:
    """Create the vector store selected by ``settings.vector_store``.

    Args:
        settings: Process settings

    Returns:
        A connected VectorStore instance
    """
    if settings.vector_store == "sqlite":
        return SqliteVectorStore(settings.resolved_sqlite_path)

    # Import here to avoid loading chromadb unless needed
    from coderag.storage.chroma_store import ChromaVectorStore

    return ChromaVectorStore(
        collection_name=settings.collection_name,
        url=settings.chroma_url,
        path=settings.chroma_path,
    )


__all__ = ["SqliteVectorStore", "create_vector_store"]
