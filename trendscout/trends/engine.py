"""TrendAggregator — parallel provider fan-out, weighted ranking, dedup."""

import concurrent.futures
import math
from typing import Callable

from ..config import (
    DEFAULT_PROVIDER_TIMEOUT, DEFAULT_RESULT_LIMIT, DEFAULT_SIMILARITY_THRESHOLD,
    DEFAULT_SOURCE_WEIGHTS, load_config,
)
from ..log import get_provider_logger, log
from .base import Trend, TrendContext, TrendProvider, coerce_score
from .matching import EmbeddingTopicMatcher, ExactTopicMatcher, TopicMatcher

# Providers that need no opt-in; anything else must be enabled in config
ENABLED_BY_DEFAULT = ("openai", "perplexity", "firecrawl", "claude")


def _is_well_formed(trend) -> bool:
    return isinstance(trend, Trend) and isinstance(trend.topic, str) and bool(trend.topic.strip())


def absorb_errors(provider: TrendProvider) -> Callable[[TrendContext], list[Trend]]:
    """Wrap provider.fetch_trends so that exceptions and malformed candidates become nothing."""
    def fetch(context: TrendContext) -> list[Trend]:
        logger = get_provider_logger(provider.name)
        try:
            trends = list(provider.fetch_trends(context) or [])
        except Exception as e:
            logger.warning("error fetching trends: %s", e)
            return []
        valid = [t for t in trends if _is_well_formed(t)]
        if len(valid) < len(trends):
            logger.warning("dropped %d malformed candidates", len(trends) - len(valid))
        return valid
    return fetch


def build_providers(config: dict | None = None) -> list[TrendProvider]:
    """Instantiate the providers enabled under config["trend_providers"]."""
    config = load_config() if config is None else config
    provider_config = config.get("trend_providers", {})

    from .claude import ClaudeProvider
    from .firecrawl import FirecrawlProvider
    from .google_trends import GoogleTrendsProvider
    from .openai import OpenAIProvider
    from .perplexity import PerplexityProvider

    provider_map = {
        "openai": OpenAIProvider,
        "perplexity": PerplexityProvider,
        "firecrawl": FirecrawlProvider,
        "claude": ClaudeProvider,
        "google_trends": GoogleTrendsProvider,
    }

    providers = []
    for name, cls in provider_map.items():
        cfg = provider_config.get(name, {})
        if not cfg.get("enabled", name in ENABLED_BY_DEFAULT):
            continue
        try:
            providers.append(cls(cfg))
        except Exception as e:
            log(f"Failed to init provider {name}: {e}")
    return providers


class TrendAggregator:
    """Fetches from every provider, weights, ranks, deduplicates, truncates."""

    def __init__(
        self,
        providers: list[TrendProvider],
        weights: dict[str, float] | None = None,
        limit: int = DEFAULT_RESULT_LIMIT,
        timeout: float = DEFAULT_PROVIDER_TIMEOUT,
        matcher: TopicMatcher | None = None,
        max_workers: int = 5,
    ):
        self.providers = list(providers)
        self.weights = dict(DEFAULT_SOURCE_WEIGHTS if weights is None else weights)
        self.limit = limit
        self.timeout = timeout
        self.matcher = matcher or ExactTopicMatcher()
        self.max_workers = max_workers

        # Provider HTTP/SDK budgets end by the join deadline
        for provider in self.providers:
            if getattr(provider, "timeout", None) is None or provider.timeout > timeout:
                provider.timeout = timeout

    @classmethod
    def from_config(cls, config: dict | None = None, **overrides) -> "TrendAggregator":
        """Build an aggregator from config.json settings."""
        config = load_config() if config is None else config
        kwargs = {
            "providers": build_providers(config),
            "weights": {**DEFAULT_SOURCE_WEIGHTS, **config.get("source_weights", {})},
            "limit": int(config.get("result_limit", DEFAULT_RESULT_LIMIT)),
            "timeout": float(config.get("provider_timeout", DEFAULT_PROVIDER_TIMEOUT)),
        }
        if config.get("semantic_dedup"):
            from ..vectors import InMemoryVectorStore
            kwargs["matcher"] = EmbeddingTopicMatcher(
                InMemoryVectorStore(),
                float(config.get("similarity_threshold", DEFAULT_SIMILARITY_THRESHOLD)),
            )
        kwargs.update(overrides)
        return cls(**kwargs)

    def weighted_score(self, trend: Trend) -> float:
        weighted = coerce_score(trend.score) * self.weights.get(trend.source, 1.0)
        return weighted if math.isfinite(weighted) else 0.0

    def discover_trends(self, context: TrendContext) -> list[Trend]:
        """Fetch from all providers in parallel, then unify into a ranked list."""
        providers = [p for p in self.providers if p.is_available]
        log(f"Starting trend discovery with providers: {[p.name for p in providers]}")
        if not providers:
            return []

        candidates = []
        for provider, trends in zip(providers, self._fetch_all(providers, context)):
            log(f"{provider.name}: found {len(trends)} trends")
            candidates.extend(trends)

        if not candidates:
            return []
        return self.unify(candidates)

    def _fetch_all(self, providers: list[TrendProvider], context: TrendContext) -> list[list[Trend]]:
        """Run every provider concurrently; results come back in provider order."""
        pool = concurrent.futures.ThreadPoolExecutor(
            max_workers=min(self.max_workers, len(providers)),
            thread_name_prefix="trend-provider",
        )
        try:
            futures = [pool.submit(absorb_errors(p), context) for p in providers]
            concurrent.futures.wait(futures, timeout=self.timeout)
        finally:
            # Don't block on a hung provider
            pool.shutdown(wait=False, cancel_futures=True)

        results = []
        for provider, future in zip(providers, futures):
            if future.done() and not future.cancelled():
                results.append(future.result())
            else:
                get_provider_logger(provider.name).warning("timed out after %.1fs", self.timeout)
                results.append([])
        return results

    def unify(self, candidates: list[Trend]) -> list[Trend]:
        """Sort by weighted score, keep the best instance of each topic, cap at limit."""
        ranked = sorted(candidates, key=self.weighted_score, reverse=True)
        self.matcher.reset()

        unified: list[Trend] = []
        for trend in ranked:
            if len(unified) >= self.limit:
                break
            if not any(self.matcher.is_duplicate(trend, kept) for kept in unified):
                unified.append(trend)
        return unified
