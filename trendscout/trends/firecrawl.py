"""Firecrawl trend provider — web + news search results ranked by position."""

from datetime import datetime, timezone

import requests

from ..config import get_firecrawl_key
from ..retry import with_retry
from .base import RETRY_DELAY, Trend, TrendContext, TrendProvider

API_URL = "https://api.firecrawl.dev/v2/search"


@with_retry(max_retries=1, base_delay=RETRY_DELAY, exceptions=(requests.RequestException,))
def _search(api_key: str, query: str, limit: int, timeout: float) -> list[dict]:
    r = requests.post(
        API_URL,
        headers={"Authorization": f"Bearer {api_key}", "Content-Type": "application/json"},
        json={"query": query, "limit": limit, "sources": ["web", "news"]},
        timeout=timeout,
    )
    if r.status_code != 200:
        raise RuntimeError(f"Firecrawl API {r.status_code}: {r.text[:200]}")
    data = r.json().get("data") or []

    # v1 returns a flat list, v2 groups hits by source type
    if isinstance(data, dict):
        return list(data.get("web") or []) + list(data.get("news") or [])
    return list(data)


def _text(value, default: str) -> str:
    if value is None or value == "":
        return default
    return value.strip() if isinstance(value, str) else str(value)


class FirecrawlProvider(TrendProvider):
    name = "firecrawl"

    def __init__(self, config: dict | None = None):
        super().__init__(config)
        self.limit = self.config.get("limit", 5)
        self.base_score = self.config.get("base_score", 80)
        self.step = self.config.get("step", 5)
        self.api_key = self.config.get("api_key") or get_firecrawl_key()

    @property
    def is_available(self) -> bool:
        return bool(self.api_key)

    def build_query(self, context: TrendContext) -> str:
        subject = context.topic.strip() if context.has_topic else context.niche
        return f"trending news {subject} {context.geo}".strip()

    def fetch_trends(self, context: TrendContext) -> list[Trend]:
        try:
            hits = _search(
                self.api_key, self.build_query(context), self.limit,
                timeout=self.request_timeout(attempts=2, delay=RETRY_DELAY),
            )
        except Exception as e:
            self.logger.warning("fetch failed: %s", e)
            return []

        now = datetime.now(timezone.utc)
        trends = []
        for i, hit in enumerate(hits[:self.limit]):
            if not isinstance(hit, dict):
                continue
            url = hit.get("url")
            trends.append(Trend(
                topic=_text(hit.get("title"), "Unknown") or "Unknown",
                description=_text(hit.get("description") or hit.get("snippet"), "No description"),
                score=self.base_score - i * self.step,
                source=self.name,
                url=url if isinstance(url, str) else None,
                timestamp=now,
                metadata={"position": i + 1},
            ))
        return trends
