"""Perplexity trend provider — web-grounded chat completions over REST."""

import re

import requests

from ..config import get_perplexity_key
from ..retry import with_retry
from .base import (
    JSON_SHAPE, RETRY_DELAY, SYSTEM_INSTRUCTION, Trend, TrendContext, TrendProvider, parse_trends_json,
)

API_URL = "https://api.perplexity.ai/chat/completions"

# Reasoning models prepend their chain of thought
_THINK_RE = re.compile(r"<think>.*?</think>", re.DOTALL)


@with_retry(max_retries=1, base_delay=RETRY_DELAY, exceptions=(requests.RequestException,))
def _chat(api_key: str, model: str, prompt: str, timeout: float) -> str:
    r = requests.post(
        API_URL,
        headers={"Authorization": f"Bearer {api_key}", "Content-Type": "application/json"},
        json={
            "model": model,
            "messages": [
                {"role": "system", "content": SYSTEM_INSTRUCTION},
                {"role": "user", "content": prompt},
            ],
            "temperature": 0.1,
        },
        timeout=timeout,
    )
    if r.status_code != 200:
        raise RuntimeError(f"Perplexity API {r.status_code}: {r.text[:200]}")
    choices = r.json().get("choices") or [{}]
    return choices[0].get("message", {}).get("content") or ""


class PerplexityProvider(TrendProvider):
    name = "perplexity"

    def __init__(self, config: dict | None = None):
        super().__init__(config)
        self.model = self.config.get("model", "sonar-reasoning-pro")
        self.count = self.config.get("count", 5)
        self.api_key = self.config.get("api_key") or get_perplexity_key()

    @property
    def is_available(self) -> bool:
        return bool(self.api_key)

    def _prompt(self, context: TrendContext) -> str:
        if context.has_topic:
            subject = f"related to '{context.topic.strip()}'"
        else:
            subject = f"for {context.niche} targeting {context.audience} in {context.geo}"
        return f"Identify {self.count} currently trending topics {subject}. Return strictly JSON: {JSON_SHAPE}"

    def fetch_trends(self, context: TrendContext) -> list[Trend]:
        try:
            content = _chat(
                self.api_key, self.model, self._prompt(context),
                timeout=self.request_timeout(attempts=2, delay=RETRY_DELAY),
            )
            return parse_trends_json(_THINK_RE.sub("", content), self.name)
        except Exception as e:
            self.logger.warning("fetch failed: %s", e)
            return []
