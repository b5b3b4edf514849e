"""TrendContext + Trend dataclasses, TrendProvider ABC, LLM reply helpers."""

import json
import math
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, timezone

from ..config import DEFAULT_PROVIDER_TIMEOUT
from ..log import get_provider_logger

# Backoff before the single retry of a REST provider call
RETRY_DELAY = 0.5


@dataclass(frozen=True)
class TrendContext:
    """Targeting input for one discovery request."""
    niche: str
    audience: str
    geo: str
    topic: str | None = None  # free-text override of niche discovery

    @property
    def has_topic(self) -> bool:
        return bool(self.topic and self.topic.strip())


@dataclass(frozen=True)
class Trend:
    """A trending topic reported by one provider."""
    topic: str
    description: str = ""
    score: float = 0.0  # source-local, usually 0-100
    source: str = ""  # e.g. "openai", "firecrawl", "perplexity"
    url: str | None = None
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    metadata: dict = field(default_factory=dict)

    @property
    def normalized_topic(self) -> str:
        return self.topic.strip().lower()


class TrendProvider(ABC):
    """Abstract base class for trend providers."""

    name: str = "unknown"

    def __init__(self, config: dict | None = None):
        self.config = config or {}
        # Total seconds one fetch may take; the aggregator lowers it to its own deadline
        self.timeout = float(self.config.get("timeout", DEFAULT_PROVIDER_TIMEOUT))

    @property
    def logger(self):
        return get_provider_logger(self.name)

    def request_timeout(self, attempts: int = 1, delay: float = 0.0) -> float:
        """Per-attempt timeout so `attempts` tries plus backoff fit in self.timeout."""
        return max(0.1, (self.timeout - delay * (attempts - 1)) / attempts)

    @abstractmethod
    def fetch_trends(self, context: TrendContext) -> list[Trend]:
        """Fetch candidate trends for this context.

        Implementations log and return [] on failure instead of raising.
        """
        ...

    @property
    def is_available(self) -> bool:
        """Check if this provider is configured and available."""
        return True


# ─────────────────────────────────────────────────────
# Prompting + parsing shared by the LLM-backed providers
# ─────────────────────────────────────────────────────
JSON_SHAPE = '{ "trends": [{"topic": "...", "description": "...", "score": 1-100}] }'

SYSTEM_INSTRUCTION = "Return JSON only."


def build_trend_prompt(context: TrendContext, count: int = 5) -> str:
    """Prompt for `count` trends: topic search when set, else niche discovery."""
    if context.has_topic:
        topic = context.topic.strip()
        return (
            f"Identify {count} trending topics related to: '{topic}'.\n"
            f"If '{topic}' is a general query (e.g. 'what is trending'), find broad global trends.\n\n"
            f"Return JSON: {JSON_SHAPE}"
        )
    return (
        f"Identify {count} trending topics for:\n"
        f"- Niche: {context.niche}\n"
        f"- Audience: {context.audience}\n"
        f"- Geo: {context.geo}\n\n"
        f"Return JSON: {JSON_SHAPE}"
    )


_FENCE_RE = re.compile(r"^```(?:json)?\s*|\s*```$", re.IGNORECASE)


def strip_code_fences(raw: str) -> str:
    """Remove a ```json ... ``` wrapper the model may put around its JSON."""
    return _FENCE_RE.sub("", raw.strip()).strip()


def coerce_score(value) -> float:
    """Float score, or 0.0 for anything non-numeric or non-finite."""
    if isinstance(value, bool):
        return 0.0
    try:
        score = float(value)
    except (TypeError, ValueError):
        return 0.0
    # json.loads accepts NaN and Infinity, which would break the ranking sort
    return score if math.isfinite(score) else 0.0


def parse_trends_json(raw: str, source: str) -> list[Trend]:
    """Parse a `{"trends": [...]}` model reply into Trend objects.

    Raises ValueError when the reply is not JSON or not trend-shaped.
    Individual entries without a usable topic are skipped.
    """
    payload = json.loads(strip_code_fences(raw or "") or "{}")

    if isinstance(payload, dict):
        items = payload.get("trends", [])
    elif isinstance(payload, list):
        items = payload
    else:
        raise ValueError(f"unexpected {type(payload).__name__} payload")
    if not isinstance(items, list):
        raise ValueError("'trends' is not a list")

    now = datetime.now(timezone.utc)
    trends = []
    for item in items:
        if not isinstance(item, dict):
            continue
        topic = item.get("topic")
        if not isinstance(topic, str) or not topic.strip():
            continue
        description = item.get("description", "")
        trends.append(Trend(
            topic=topic.strip(),
            description=description if isinstance(description, str) else str(description),
            score=coerce_score(item.get("score")),
            source=source,
            timestamp=now,
        ))
    return trends
