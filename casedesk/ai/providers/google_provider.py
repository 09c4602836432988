"""
Google Gemini ``generateContent`` adapter.
"""
from typing import Any, Dict

from ..interfaces import ProviderIdentity
from ..registry import DEFAULT_MODELS
from .base import ProviderAdapter, WireRequest, is_text, DEFAULT_MAX_TOKENS, DEFAULT_TEMPERATURE

GENERATE_CONTENT_URL = "https://generativelanguage.googleapis.com/v1beta/models/{model}:generateContent"

# finishReason values that mean the candidate was withheld
BLOCKING_FINISH_REASONS = frozenset({"SAFETY", "BLOCKLIST", "PROHIBITED_CONTENT", "SPII", "RECITATION"})


class GoogleAdapter(ProviderAdapter):
    """Gemini REST API; the key travels as the ``key`` query parameter."""

    identity = ProviderIdentity.GOOGLE
    default_model = DEFAULT_MODELS[ProviderIdentity.GOOGLE]

    def build_request(self, prompt: str, model: str, credential: str) -> WireRequest:
        return WireRequest(
            url=GENERATE_CONTENT_URL.format(model=model),
            headers={"Content-Type": "application/json"},
            body={
                "contents": [{"parts": [{"text": prompt}]}],
                "generationConfig": {
                    "temperature": DEFAULT_TEMPERATURE,
                    "maxOutputTokens": DEFAULT_MAX_TOKENS,
                },
            },
            params={"key": credential},
        )

    def extract_text(self, payload: Dict[str, Any]) -> str:
        candidates = payload.get("candidates")
        if not isinstance(candidates, list) or not candidates:
            # Prompts rejected by the safety filters come back without candidates
            feedback = payload.get("promptFeedback")
            block_reason = feedback.get("blockReason") if isinstance(feedback, dict) else None
            if block_reason:
                raise self._blocked(block_reason)
            raise self._malformed("Unexpected response format from Google")

        candidate = candidates[0] if isinstance(candidates[0], dict) else {}
        content = candidate.get("content")
        parts = content.get("parts") if isinstance(content, dict) else None
        first = parts[0] if isinstance(parts, list) and parts else None
        text = first.get("text") if isinstance(first, dict) else None
        if not is_text(text):
            finish_reason = candidate.get("finishReason")
            if finish_reason in BLOCKING_FINISH_REASONS:
                raise self._blocked(finish_reason)
            raise self._malformed("Empty response from API")
        return text
