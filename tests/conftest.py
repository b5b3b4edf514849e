"""Shared test fixtures."""

import os
import tempfile
import time

# Keep config + logs out of the real home directory
os.environ.setdefault("TRENDSCOUT_HOME", tempfile.mkdtemp(prefix="trendscout-test-"))

import pytest  # noqa: E402

from trendscout.trends.base import Trend, TrendContext, TrendProvider  # noqa: E402


class StaticProvider(TrendProvider):
    """Test double returning canned topics, optionally after a delay or with an error."""

    def __init__(self, name, topics=(), delay=0.0, error=None, available=True):
        super().__init__()
        self.name = name
        self.topics = list(topics)
        self.delay = delay
        self.error = error
        self.available = available
        self.calls = 0

    @property
    def is_available(self) -> bool:
        return self.available

    def fetch_trends(self, context):
        self.calls += 1
        if self.delay:
            time.sleep(self.delay)
        if self.error:
            raise self.error
        return [
            Trend(topic=topic, description=f"{topic} via {self.name}", score=score, source=self.name)
            for topic, score in self.topics
        ]


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    """Point config.json at an empty temp file location and clear provider keys."""
    monkeypatch.setattr("trendscout.config.CONFIG_FILE", tmp_path / "config.json")
    for key in ("OPENAI_API_KEY", "PERPLEXITY_API_KEY", "FIRECRAWL_API_KEY", "ANTHROPIC_API_KEY"):
        monkeypatch.delenv(key, raising=False)
    return tmp_path / "config.json"


@pytest.fixture
def niche_context():
    return TrendContext(niche="Tech & AI", audience="Entrepreneurs", geo="US")


@pytest.fixture
def topic_context():
    return TrendContext(niche="Tech & AI", audience="Entrepreneurs", geo="US", topic="AI agents")


@pytest.fixture
def make_provider():
    return StaticProvider
