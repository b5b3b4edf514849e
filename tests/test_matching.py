"""Tests for trendscout/trends/matching.py and trendscout/vectors.py."""

from unittest.mock import MagicMock

import pytest

from trendscout.trends.base import Trend
from trendscout.trends.engine import TrendAggregator
from trendscout.trends.matching import EmbeddingTopicMatcher, ExactTopicMatcher
from trendscout.vectors import InMemoryVectorStore, OpenAIEmbedder, cosine_similarity

VECTORS = {
    "ai regulation": [1.0, 0.0, 0.0],
    "government ai rules": [0.96, 0.28, 0.0],
    "remote work": [0.0, 1.0, 0.0],
}


def fake_embed(text):
    return VECTORS[text.strip().lower()]


class TestExactTopicMatcher:
    def test_case_and_whitespace_insensitive(self):
        matcher = ExactTopicMatcher()
        assert matcher.is_duplicate(Trend(topic="Future of AI"), Trend(topic="future of ai "))

    def test_different_topics(self):
        matcher = ExactTopicMatcher()
        assert not matcher.is_duplicate(Trend(topic="AI regulation"), Trend(topic="Government AI rules"))


class TestEmbeddingTopicMatcher:
    def test_semantic_duplicate(self):
        matcher = EmbeddingTopicMatcher(InMemoryVectorStore(fake_embed), threshold=0.9)
        assert matcher.is_duplicate(Trend(topic="AI Regulation"), Trend(topic="Government AI rules"))
        assert not matcher.is_duplicate(Trend(topic="AI Regulation"), Trend(topic="Remote Work"))

    def test_exact_match_skips_embedding(self):
        store = MagicMock()
        matcher = EmbeddingTopicMatcher(store)
        assert matcher.is_duplicate(Trend(topic="X"), Trend(topic=" x"))
        store.embed.assert_not_called()

    def test_embeddings_cached(self):
        store = MagicMock()
        store.embed.side_effect = fake_embed
        matcher = EmbeddingTopicMatcher(store)

        matcher.is_duplicate(Trend(topic="AI regulation"), Trend(topic="Remote work"))
        matcher.is_duplicate(Trend(topic="ai regulation "), Trend(topic="Remote work"))

        assert store.embed.call_count == 2

    def test_reset_clears_cache(self):
        store = MagicMock()
        store.embed.side_effect = fake_embed
        matcher = EmbeddingTopicMatcher(store)

        matcher.is_duplicate(Trend(topic="AI regulation"), Trend(topic="Remote work"))
        matcher.reset()
        matcher.is_duplicate(Trend(topic="AI regulation"), Trend(topic="Remote work"))

        assert store.embed.call_count == 4

    def test_cache_does_not_grow_across_discoveries(self, make_provider, niche_context):
        store = MagicMock()
        store.embed.side_effect = fake_embed
        matcher = EmbeddingTopicMatcher(store)
        providers = [make_provider("openai", [("AI regulation", 90), ("Remote work", 50)])]
        aggregator = TrendAggregator(providers, matcher=matcher)

        aggregator.discover_trends(niche_context)
        providers[0].topics = [("Government AI rules", 80), ("Remote work", 40)]
        aggregator.discover_trends(niche_context)

        assert set(matcher._cache) == {"government ai rules", "remote work"}

    def test_embed_failure_falls_back_to_exact(self):
        store = MagicMock()
        store.embed.side_effect = RuntimeError("quota exceeded")
        matcher = EmbeddingTopicMatcher(store)
        assert not matcher.is_duplicate(Trend(topic="A"), Trend(topic="B"))

    def test_aggregator_merges_semantic_duplicates(self):
        matcher = EmbeddingTopicMatcher(InMemoryVectorStore(fake_embed))
        aggregator = TrendAggregator([], matcher=matcher)

        trends = aggregator.unify([
            Trend(topic="Government AI rules", score=60, source="openai"),
            Trend(topic="AI regulation", score=90, source="firecrawl"),
            Trend(topic="Remote work", score=50, source="openai"),
        ])

        assert [t.topic for t in trends] == ["AI regulation", "Remote work"]


class TestCosineSimilarity:
    def test_identical(self):
        assert cosine_similarity([1, 2, 3], [1, 2, 3]) == pytest.approx(1.0)

    def test_orthogonal(self):
        assert cosine_similarity([1, 0], [0, 1]) == pytest.approx(0.0)

    def test_zero_vector(self):
        assert cosine_similarity([0, 0], [1, 1]) == 0.0


class TestInMemoryVectorStore:
    def test_add_and_search(self):
        store = InMemoryVectorStore(fake_embed)
        store.add("trends", {"text": "AI regulation", "user": "u1"})
        store.add("trends", {"text": "Remote work", "user": "u1"})
        store.add("trends", {"text": "Government AI rules", "user": "u2"})

        hits = store.search("trends", fake_embed("ai regulation"), limit=2)

        assert [h["text"] for h in hits] == ["AI regulation", "Government AI rules"]
        assert hits[0]["similarity"] == pytest.approx(1.0)
        assert "embedding" not in hits[0]

    def test_search_filter(self):
        store = InMemoryVectorStore(fake_embed)
        store.add("trends", {"text": "AI regulation", "user": "u1"})
        store.add("trends", {"text": "Government AI rules", "user": "u2"})

        hits = store.search("trends", [1.0, 0.0, 0.0], limit=5, filter={"user": "u2"})

        assert [h["text"] for h in hits] == ["Government AI rules"]

    def test_add_with_precomputed_embedding(self):
        embedder = MagicMock()
        store = InMemoryVectorStore(embedder)
        store.add("c", {"id": 1, "embedding": [0.5, 0.5]})
        embedder.assert_not_called()
        assert store.count("c") == 1

    def test_add_requires_text_or_embedding(self):
        with pytest.raises(ValueError):
            InMemoryVectorStore(fake_embed).add("c", {"id": 1})

    def test_unknown_collection(self):
        assert InMemoryVectorStore(fake_embed).search("missing", [1.0], limit=3) == []


class TestOpenAIEmbedder:
    def test_calls_embeddings_api(self):
        embedder = OpenAIEmbedder(api_key="sk-test")
        client = MagicMock()
        client.embeddings.create.return_value.data = [MagicMock(embedding=[0.1, 0.2])]
        embedder._client = client

        assert embedder("hello") == [0.1, 0.2]
        client.embeddings.create.assert_called_once_with(model="text-embedding-3-small", input="hello")
