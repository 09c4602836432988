"""
OpenAI chat completions adapter.
"""
from ..interfaces import ProviderIdentity
from ..registry import DEFAULT_MODELS
from .base import ChatCompletionsAdapter


class OpenAIAdapter(ChatCompletionsAdapter):
    """OpenAI ``/v1/chat/completions`` with bearer authentication."""

    identity = ProviderIdentity.OPENAI
    default_model = DEFAULT_MODELS[ProviderIdentity.OPENAI]
    url = "https://api.openai.com/v1/chat/completions"
