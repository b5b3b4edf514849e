"""OpenAI trend provider — GPT prompted for JSON trends."""

from ..config import get_openai_key
from .base import SYSTEM_INSTRUCTION, Trend, TrendContext, TrendProvider, build_trend_prompt, parse_trends_json


class OpenAIProvider(TrendProvider):
    name = "openai"

    def __init__(self, config: dict | None = None):
        super().__init__(config)
        self.model = self.config.get("model", "gpt-4o")
        self.count = self.config.get("count", 5)
        self.api_key = self.config.get("api_key") or get_openai_key()
        self._client = None

    @property
    def is_available(self) -> bool:
        return bool(self.api_key)

    def _get_client(self):
        if self._client is None:
            import openai
            # Single attempt within the fetch budget
            self._client = openai.OpenAI(api_key=self.api_key, timeout=self.timeout, max_retries=0)
        return self._client

    def fetch_trends(self, context: TrendContext) -> list[Trend]:
        try:
            response = self._get_client().chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": SYSTEM_INSTRUCTION},
                    {"role": "user", "content": build_trend_prompt(context, self.count)},
                ],
                response_format={"type": "json_object"},
            )
            return parse_trends_json(response.choices[0].message.content, self.name)
        except Exception as e:
            self.logger.warning("fetch failed: %s", e)
            return []
