"""
Groq adapter. Groq serves an OpenAI-compatible API under ``/openai/v1``.
"""
from ..interfaces import ProviderIdentity
from ..registry import DEFAULT_MODELS
from .base import ChatCompletionsAdapter, DEFAULT_MAX_TOKENS


class GroqAdapter(ChatCompletionsAdapter):
    """Groq chat completions; same body as OpenAI plus an explicit token cap."""

    identity = ProviderIdentity.GROQ
    default_model = DEFAULT_MODELS[ProviderIdentity.GROQ]
    url = "https://api.groq.com/openai/v1/chat/completions"
    max_tokens = DEFAULT_MAX_TOKENS
