"""
AI provider adapters.
Contains one adapter per provider identity, collected in a lookup table.
"""
from typing import Dict, Optional

from ..interfaces import ProviderIdentity
from .base import ProviderAdapter, ChatCompletionsAdapter, WireRequest, ResponseFormatError, ContentBlockedError
from .openai_provider import OpenAIAdapter
from .groq_provider import GroqAdapter
from .anthropic_provider import AnthropicAdapter
from .google_provider import GoogleAdapter
from .lovable_provider import LovableGatewayAdapter

AdapterTable = Dict[ProviderIdentity, ProviderAdapter]


def build_adapter_table(gateway_key: Optional[str] = None, gateway_url: Optional[str] = None) -> AdapterTable:
    """Build the adapter table. New providers only need a new entry here."""
    adapters = [
        OpenAIAdapter(),
        GroqAdapter(),
        AnthropicAdapter(),
        GoogleAdapter(),
        LovableGatewayAdapter(gateway_key=gateway_key, gateway_url=gateway_url),
    ]
    return {adapter.identity: adapter for adapter in adapters}


__all__ = [
    'ProviderAdapter', 'ChatCompletionsAdapter', 'WireRequest',
    'ResponseFormatError', 'ContentBlockedError',
    'OpenAIAdapter', 'GroqAdapter', 'AnthropicAdapter', 'GoogleAdapter', 'LovableGatewayAdapter',
    'AdapterTable', 'build_adapter_table',
]
