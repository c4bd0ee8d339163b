"""Protocol for the text-to-vector collaborator."""

from typing import Protocol, runtime_checkable

import numpy as np


@runtime_checkable
class EmbeddingProvider(Protocol):
    """Turns chunk or query text into fixed-size vectors.

    The index pipeline shares one provider between its embedding worker
    threads, so implementations must be safe to call concurrently and keep no
    per-call state. A failing call may raise any exception; the pipeline skips
    that chunk (or reports a provider failure for a query).
    """

    @property
    def dimension(self) -> int:
        """Length of every vector this provider returns."""
        ...

    @property
    def model_name(self) -> str:
        ...

    def embed(self, texts: list[str]) -> np.ndarray:
        """Return one row per input text, shape ``(len(texts), dimension)``."""
        ...
