"""
Static provider metadata: capabilities, model catalogue and defaults.
"""
from typing import Dict, List, FrozenSet

from .interfaces import ProviderIdentity, ContentCategory

# Provider that every category falls back to. Supports all categories.
FALLBACK_PROVIDER = ProviderIdentity.LOVABLE

# Providers that authenticate with a server-side key instead of a user credential
CREDENTIAL_FREE_PROVIDERS: FrozenSet[ProviderIdentity] = frozenset({ProviderIdentity.LOVABLE})

PROVIDER_CAPABILITIES: Dict[ProviderIdentity, FrozenSet[ContentCategory]] = {
    ProviderIdentity.LOVABLE: frozenset(ContentCategory),
    ProviderIdentity.OPENAI: frozenset({
        ContentCategory.TEXT, ContentCategory.IMAGE, ContentCategory.AUDIO, ContentCategory.MIXED
    }),
    ProviderIdentity.GROQ: frozenset({ContentCategory.TEXT, ContentCategory.AUDIO}),
    ProviderIdentity.ANTHROPIC: frozenset({
        ContentCategory.TEXT, ContentCategory.IMAGE, ContentCategory.MIXED
    }),
    ProviderIdentity.GOOGLE: frozenset({
        ContentCategory.TEXT, ContentCategory.IMAGE, ContentCategory.VIDEO,
        ContentCategory.AUDIO, ContentCategory.MIXED
    }),
}

PROVIDER_MODELS: Dict[ProviderIdentity, List[Dict[str, str]]] = {
    ProviderIdentity.OPENAI: [
        {"id": "gpt-4o", "name": "GPT-4o (multimodal, most capable)"},
        {"id": "gpt-4o-mini", "name": "GPT-4o Mini (fast, economical)"},
        {"id": "gpt-4-turbo", "name": "GPT-4 Turbo (balanced)"},
        {"id": "gpt-3.5-turbo", "name": "GPT-3.5 Turbo (fastest)"},
    ],
    ProviderIdentity.GROQ: [
        {"id": "llama-3.3-70b-versatile", "name": "Llama 3.3 70B (recommended)"},
        {"id": "llama-3.1-70b-versatile", "name": "Llama 3.1 70B"},
        {"id": "llama-3.1-8b-instant", "name": "Llama 3.1 8B (ultra fast)"},
        {"id": "mixtral-8x7b-32768", "name": "Mixtral 8x7B"},
    ],
    ProviderIdentity.ANTHROPIC: [
        {"id": "claude-3-5-sonnet-20241022", "name": "Claude 3.5 Sonnet (recommended)"},
        {"id": "claude-3-opus-20240229", "name": "Claude 3 Opus (most capable)"},
        {"id": "claude-3-sonnet-20240229", "name": "Claude 3 Sonnet"},
        {"id": "claude-3-haiku-20240307", "name": "Claude 3 Haiku (fast)"},
    ],
    ProviderIdentity.GOOGLE: [
        {"id": "gemini-2.0-flash-exp", "name": "Gemini 2.0 Flash (recommended)"},
        {"id": "gemini-1.5-pro", "name": "Gemini 1.5 Pro (most capable)"},
        {"id": "gemini-1.5-flash", "name": "Gemini 1.5 Flash (fast)"},
        {"id": "gemini-1.0-pro", "name": "Gemini 1.0 Pro"},
    ],
    ProviderIdentity.LOVABLE: [
        {"id": "google/gemini-2.5-flash", "name": "Gemini 2.5 Flash (default)"},
        {"id": "google/gemini-2.5-pro", "name": "Gemini 2.5 Pro (most capable)"},
        {"id": "openai/gpt-5-mini", "name": "GPT-5 Mini (balanced)"},
    ],
}

DEFAULT_MODELS: Dict[ProviderIdentity, str] = {
    ProviderIdentity.OPENAI: "gpt-4o-mini",
    ProviderIdentity.GROQ: "llama-3.3-70b-versatile",
    ProviderIdentity.ANTHROPIC: "claude-3-5-sonnet-20241022",
    ProviderIdentity.GOOGLE: "gemini-2.0-flash-exp",
    ProviderIdentity.LOVABLE: "google/gemini-2.5-flash",
}

# Speech-to-text models for providers exposing a Whisper-compatible endpoint
TRANSCRIPTION_MODELS: Dict[ProviderIdentity, str] = {
    ProviderIdentity.OPENAI: "whisper-1",
    ProviderIdentity.GROQ: "whisper-large-v3",
}


def capabilities_for(provider: ProviderIdentity) -> List[ContentCategory]:
    """Capability list for a provider in declaration order of ContentCategory."""
    supported = PROVIDER_CAPABILITIES[provider]
    return [category for category in ContentCategory if category in supported]


def get_supported_providers() -> Dict[str, Dict[str, object]]:
    """Get information about supported providers."""
    return {
        provider.value: {
            "capabilities": [category.value for category in capabilities_for(provider)],
            "models": PROVIDER_MODELS[provider],
            "default_model": DEFAULT_MODELS[provider],
            "requires_api_key": provider not in CREDENTIAL_FREE_PROVIDERS,
            "supports_transcription": provider in TRANSCRIPTION_MODELS,
        }
        for provider in ProviderIdentity
    }
