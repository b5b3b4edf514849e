"""Claude trend provider — Anthropic messages API prompted for JSON trends."""

from ..config import get_anthropic_key
from .base import SYSTEM_INSTRUCTION, Trend, TrendContext, TrendProvider, build_trend_prompt, parse_trends_json


class ClaudeProvider(TrendProvider):
    name = "claude"

    def __init__(self, config: dict | None = None):
        super().__init__(config)
        self.model = self.config.get("model", "claude-sonnet-4-6")
        self.count = self.config.get("count", 5)
        self.api_key = self.config.get("api_key") or get_anthropic_key()
        self._client = None

    @property
    def is_available(self) -> bool:
        return bool(self.api_key)

    def _get_client(self):
        if self._client is None:
            import anthropic
            self._client = anthropic.Anthropic(api_key=self.api_key, timeout=self.timeout, max_retries=0)
        return self._client

    def fetch_trends(self, context: TrendContext) -> list[Trend]:
        try:
            msg = self._get_client().messages.create(
                model=self.model,
                max_tokens=1024,
                system=SYSTEM_INSTRUCTION,
                messages=[{"role": "user", "content": build_trend_prompt(context, self.count)}],
            )
            return parse_trends_json(msg.content[0].text, self.name)
        except Exception as e:
            self.logger.warning("fetch failed: %s", e)
            return []
