"""
Anthropic Messages API adapter.
"""
from typing import Any, Dict

from ..interfaces import ProviderIdentity
from ..registry import DEFAULT_MODELS
from .base import ProviderAdapter, WireRequest, is_text, DEFAULT_MAX_TOKENS

ANTHROPIC_VERSION = "2023-06-01"


class AnthropicAdapter(ProviderAdapter):
    """``/v1/messages`` authenticated with the ``x-api-key`` header."""

    identity = ProviderIdentity.ANTHROPIC
    default_model = DEFAULT_MODELS[ProviderIdentity.ANTHROPIC]
    url = "https://api.anthropic.com/v1/messages"

    def build_request(self, prompt: str, model: str, credential: str) -> WireRequest:
        return WireRequest(
            url=self.url,
            headers={
                "Content-Type": "application/json",
                "x-api-key": credential,
                "anthropic-version": ANTHROPIC_VERSION,
            },
            body={
                "model": model,
                "max_tokens": DEFAULT_MAX_TOKENS,
                "messages": [{"role": "user", "content": prompt}],
            },
        )

    def extract_text(self, payload: Dict[str, Any]) -> str:
        content = payload.get("content")
        if not isinstance(content, list) or not content:
            if payload.get("stop_reason") == "refusal":
                raise self._blocked("refusal")
            raise self._malformed("Unexpected response format from Anthropic")

        block = content[0]
        text = block.get("text") if isinstance(block, dict) else None
        if not is_text(text):
            raise self._malformed("Empty response from API")
        return text
