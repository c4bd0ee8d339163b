"""Tests for the sentence-transformers embedding provider (model stubbed)."""

import threading

import numpy as np
import pytest

from coderag.embedders import SentenceTransformerEmbedder, sentence_transformer
from coderag.protocols import EmbeddingProvider

pytestmark = pytest.mark.unit


class StubModel:
    loads = 0
    lock = threading.Lock()

    def __init__(self, name, device=None):
        with StubModel.lock:
            StubModel.loads += 1
        self.name = name
        self.device = device
        self.encode_kwargs = None

    def get_sentence_embedding_dimension(self):
        return 3

    def encode(self, texts, **kwargs):
        self.encode_kwargs = kwargs
        return np.ones((len(texts), 3))


@pytest.fixture(autouse=True)
def stub_model(monkeypatch):
    StubModel.loads = 0
    monkeypatch.setattr(sentence_transformer, "SentenceTransformer", StubModel)


def test_model_is_loaded_lazily_once():
    embedder = SentenceTransformerEmbedder()
    assert StubModel.loads == 0

    threads = [threading.Thread(target=lambda: embedder.model) for _ in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert StubModel.loads == 1
    assert embedder.model.name == "all-MiniLM-L6-v2"


def test_embed_returns_one_row_per_text():
    embedder = SentenceTransformerEmbedder("custom-model")

    vectors = embedder.embed(["a", "b"])

    assert vectors.shape == (2, 3)
    assert embedder.dimension == 3
    assert embedder.model_name == "custom-model"
    assert embedder.model.encode_kwargs["normalize_embeddings"] is True


def test_embed_nothing():
    assert SentenceTransformerEmbedder().embed([]).size == 0
    assert StubModel.loads == 0


def test_satisfies_protocol():
    assert isinstance(SentenceTransformerEmbedder(), EmbeddingProvider)


def test_device_is_passed_to_model():
    embedder = SentenceTransformerEmbedder(device="cpu")

    assert embedder.model.device == "cpu"
