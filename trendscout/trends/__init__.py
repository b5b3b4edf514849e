"""Multi-provider trend discovery and unification."""

from .base import Trend, TrendContext, TrendProvider
from .engine import TrendAggregator, absorb_errors, build_providers
from .matching import EmbeddingTopicMatcher, ExactTopicMatcher, TopicMatcher

__all__ = [
    "Trend", "TrendContext", "TrendProvider",
    "TrendAggregator", "absorb_errors", "build_providers",
    "TopicMatcher", "ExactTopicMatcher", "EmbeddingTopicMatcher",
]
