"""Embedding + vector search capability used for semantic trend matching.

`VectorStore` is the interface the trend engine depends on. `InMemoryVectorStore`
keeps collections in process memory, which is enough for per-request topic
matching; a database-backed store can implement the same three methods.

Embeddings come from OpenAI ``text-embedding-3-small`` via `OpenAIEmbedder`,
or from any callable mapping text to a vector.
"""

from abc import ABC, abstractmethod
from typing import Callable

import numpy as np

from .config import get_openai_key

EMBEDDING_MODEL = "text-embedding-3-small"


def cosine_similarity(a, b) -> float:
    """Cosine similarity of two vectors; 0.0 when either is all zeros."""
    va = np.asarray(a, dtype="float32")
    vb = np.asarray(b, dtype="float32")
    denom = float(np.linalg.norm(va) * np.linalg.norm(vb))
    if denom == 0.0:
        return 0.0
    return float(np.dot(va, vb) / denom)


class VectorStore(ABC):
    """Embed text, store vectors per collection, search by similarity."""

    @abstractmethod
    def embed(self, text: str) -> list[float]:
        ...

    @abstractmethod
    def search(self, collection: str, vector: list[float], limit: int,
               filter: dict | None = None) -> list[dict]:
        """Return up to `limit` items from `collection` nearest to `vector`."""
        ...

    @abstractmethod
    def add(self, collection: str, item: dict) -> None:
        ...


class OpenAIEmbedder:
    """Callable text -> embedding via the OpenAI embeddings endpoint."""

    def __init__(self, model: str = EMBEDDING_MODEL, api_key: str | None = None):
        self.model = model
        self._api_key = api_key
        self._client = None

    def _get_client(self):
        if self._client is None:
            import openai
            self._client = openai.OpenAI(api_key=self._api_key or get_openai_key())
        return self._client

    def __call__(self, text: str) -> list[float]:
        resp = self._get_client().embeddings.create(model=self.model, input=text)
        return list(resp.data[0].embedding)


class InMemoryVectorStore(VectorStore):
    """Process-local vector store keyed by collection name."""

    def __init__(self, embedder: Callable[[str], list[float]] | None = None):
        self._embedder = embedder or OpenAIEmbedder()
        self._collections: dict[str, list[dict]] = {}

    def embed(self, text: str) -> list[float]:
        return list(self._embedder(text))

    def add(self, collection: str, item: dict) -> None:
        """Store `item`; it must carry an `embedding` or a `text` to embed."""
        item = dict(item)
        if "embedding" not in item:
            if "text" not in item:
                raise ValueError("item needs an 'embedding' or a 'text' field")
            item["embedding"] = self.embed(item["text"])
        self._collections.setdefault(collection, []).append(item)

    def search(self, collection: str, vector: list[float], limit: int,
               filter: dict | None = None) -> list[dict]:
        filter = filter or {}
        hits = []
        for item in self._collections.get(collection, []):
            if any(item.get(k) != v for k, v in filter.items()):
                continue
            hit = {k: v for k, v in item.items() if k != "embedding"}
            hit["similarity"] = cosine_similarity(vector, item["embedding"])
            hits.append(hit)
        hits.sort(key=lambda h: h["similarity"], reverse=True)
        return hits[:limit]

    def count(self, collection: str) -> int:
        return len(self._collections.get(collection, []))
