"""Duplicate detection between trend candidates."""

from abc import ABC, abstractmethod

from ..config import DEFAULT_SIMILARITY_THRESHOLD
from ..log import get_logger
from ..vectors import VectorStore, cosine_similarity
from .base import Trend


class TopicMatcher(ABC):
    """Decides whether two candidates describe the same trend."""

    @abstractmethod
    def is_duplicate(self, a: Trend, b: Trend) -> bool:
        ...

    def reset(self) -> None:
        """Forget per-request state; called before each unification."""


class ExactTopicMatcher(TopicMatcher):
    """Same topic after case-folding and trimming."""

    def is_duplicate(self, a: Trend, b: Trend) -> bool:
        return a.normalized_topic == b.normalized_topic


class EmbeddingTopicMatcher(TopicMatcher):
    """Same topic when the topic embeddings are close enough.

    Exact matches short-circuit without embedding. Embeddings are cached per
    normalized topic for the current unification and dropped by reset().
    """

    def __init__(self, store: VectorStore, threshold: float = DEFAULT_SIMILARITY_THRESHOLD):
        self.store = store
        self.threshold = threshold
        self._cache: dict[str, list[float]] = {}

    def reset(self) -> None:
        self._cache.clear()

    def _embedding(self, trend: Trend) -> list[float]:
        key = trend.normalized_topic
        if key not in self._cache:
            self._cache[key] = self.store.embed(trend.topic)
        return self._cache[key]

    def is_duplicate(self, a: Trend, b: Trend) -> bool:
        if a.normalized_topic == b.normalized_topic:
            return True
        try:
            similarity = cosine_similarity(self._embedding(a), self._embedding(b))
        except Exception as e:
            get_logger().warning("Embedding failed, using exact match for %r: %s", a.topic, e)
            return False
        return similarity >= self.threshold
