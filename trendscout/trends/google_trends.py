"""Google Trends provider via pytrends."""

from datetime import datetime, timezone

from .base import Trend, TrendContext, TrendProvider

# pytrends' trending_searches takes country names, not ISO codes
GEO_TO_PN = {
    "US": "united_states",
    "GB": "united_kingdom",
    "IN": "india",
    "AU": "australia",
    "CA": "canada",
    "DE": "germany",
    "FR": "france",
    "JP": "japan",
    "BR": "brazil",
}


class GoogleTrendsProvider(TrendProvider):
    name = "google_trends"

    def __init__(self, config: dict | None = None):
        super().__init__(config)
        self.limit = self.config.get("limit", 5)
        self.timeframe = self.config.get("timeframe", "now 7-d")

    @property
    def is_available(self) -> bool:
        try:
            from pytrends.request import TrendReq  # noqa: F401
            return True
        except ImportError:
            return False

    def fetch_trends(self, context: TrendContext) -> list[Trend]:
        try:
            from pytrends.request import TrendReq

            # Topic lookups take three sequential requests (token, widgets, related)
            per_request = self.request_timeout(attempts=3 if context.has_topic else 1)
            pytrends = TrendReq(hl="en-US", tz=0, timeout=(min(5.0, per_request), per_request), retries=0)
            if context.has_topic:
                titles = self._rising_queries(pytrends, context.topic.strip(), context.geo)
            else:
                titles = self._trending_searches(pytrends, context.geo)
        except Exception as e:
            self.logger.warning("fetch failed: %s", e)
            return []

        now = datetime.now(timezone.utc)
        return [
            Trend(
                topic=title,
                description=f"Trending on Google in {context.geo or 'the world'}",
                # Score decreases with rank
                score=max(10.0, 100.0 - i * 10.0),
                source=self.name,
                timestamp=now,
                metadata={"rank": i + 1, "geo": context.geo},
            )
            for i, title in enumerate(titles[:self.limit])
        ]

    def _trending_searches(self, pytrends, geo: str) -> list[str]:
        frame = pytrends.trending_searches(pn=GEO_TO_PN.get((geo or "").upper(), "united_states"))
        return [str(value) for value in frame.iloc[:, 0].tolist() if str(value).strip()]

    def _rising_queries(self, pytrends, topic: str, geo: str) -> list[str]:
        pytrends.build_payload([topic], timeframe=self.timeframe, geo=(geo or "").upper())
        related = pytrends.related_queries().get(topic) or {}
        rising = related.get("rising")
        if rising is None or rising.empty:
            return []
        return [str(q) for q in rising["query"].tolist()]
