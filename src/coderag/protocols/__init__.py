"""Protocol definitions for extensible components."""

from coderag.protocols.chunker import ChunkingStrategy
from coderag.protocols.embedder import EmbeddingProvider
from coderag.protocols.vector_store import VectorStore

__all__ = ["ChunkingStrategy", "EmbeddingProvider", "VectorStore"]
