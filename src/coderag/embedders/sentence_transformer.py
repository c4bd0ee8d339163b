"""Local embedding provider backed by sentence-transformers."""

import logging
import threading
from typing import Optional

import numpy as np
from sentence_transformers import SentenceTransformer

logger = logging.getLogger(__name__)


class SentenceTransformerEmbedder:
    """Embed chunk and query text with a local sentence-transformers model.

    The indexing pipeline calls :meth:`embed` from several worker threads at
    once (one chunk per call). The first caller loads the model under a lock;
    the others wait and then share the same instance. Vectors are normalized
    so that cosine distance in the vector store equals ``1 - dot``.
    """

    DEFAULT_MODEL = "all-MiniLM-L6-v2"

    def __init__(self, model_name: Optional[str] = None, device: Optional[str] = None):
        """
        Args:
            model_name: Hugging Face model id (``EMBEDDING_MODEL``); defaults
                to all-MiniLM-L6-v2
            device: Torch device such as ``cpu`` or ``cuda``; None lets
                sentence-transformers pick
        """
        self._model_name = model_name or self.DEFAULT_MODEL
        self._device = device
        self._model: Optional[SentenceTransformer] = None
        self._load_lock = threading.Lock()

    @property
    def model(self) -> SentenceTransformer:
        """The loaded model; the download/load happens on first access only."""
        if self._model is None:
            with self._load_lock:
                if self._model is None:
                    logger.info(f"Loading embedding model {self._model_name}")
                    self._model = SentenceTransformer(self._model_name, device=self._device)
        return self._model

    @property
    def dimension(self) -> int:
        return self.model.get_sentence_embedding_dimension()

    @property
    def model_name(self) -> str:
        return self._model_name

    def embed(self, texts: list[str]) -> np.ndarray:
        """Encode texts into a ``(len(texts), dimension)`` float array.

        An empty input returns an empty array without loading the model.
        """
        if not texts:
            return np.array([])

        return self.model.encode(
            texts,
            convert_to_numpy=True,
            normalize_embeddings=True,
            show_progress_bar=False,
        )
