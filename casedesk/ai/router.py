"""
Auto-router: picks the preferred provider for each content category.

Selection is a walk over a fixed, hand-ordered priority list per category.
There is no scoring and no state; the same inputs always produce the same
routing.
"""
import logging
from typing import Dict, Iterable, List

from .interfaces import ProviderIdentity, ContentCategory
from .registry import FALLBACK_PROVIDER
from .schemas import ProviderConfig, RoutingTable

logger = logging.getLogger(__name__)

# Preferred providers per category, best first
ROUTING_PRIORITIES: Dict[ContentCategory, List[ProviderIdentity]] = {
    ContentCategory.TEXT: [
        ProviderIdentity.GROQ,
        ProviderIdentity.ANTHROPIC,
        ProviderIdentity.OPENAI,
        ProviderIdentity.GOOGLE,
        ProviderIdentity.LOVABLE,
    ],
    ContentCategory.IMAGE: [
        ProviderIdentity.OPENAI,
        ProviderIdentity.GOOGLE,
        ProviderIdentity.ANTHROPIC,
        ProviderIdentity.LOVABLE,
    ],
    ContentCategory.AUDIO: [
        ProviderIdentity.GROQ,
        ProviderIdentity.OPENAI,
        ProviderIdentity.GOOGLE,
        ProviderIdentity.LOVABLE,
    ],
    ContentCategory.VIDEO: [
        ProviderIdentity.GOOGLE,
        ProviderIdentity.OPENAI,
        ProviderIdentity.LOVABLE,
    ],
    ContentCategory.MIXED: [
        ProviderIdentity.GOOGLE,
        ProviderIdentity.OPENAI,
        ProviderIdentity.ANTHROPIC,
        ProviderIdentity.LOVABLE,
    ],
}


def route(enabled_providers: Iterable[ProviderConfig], category: ContentCategory) -> ProviderIdentity:
    """
    Pick the provider for a content category.

    Args:
        enabled_providers: Candidate provider configurations
        category: Content category to route

    Returns:
        The first provider in the category's priority list that is present,
        enabled and capable of the category; the fallback provider otherwise.
    """
    candidates = {
        entry.provider: entry
        for entry in enabled_providers
        if entry.enabled and entry.supports(category)
    }

    for provider in ROUTING_PRIORITIES[category]:
        if provider in candidates:
            return provider

    return FALLBACK_PROVIDER


def compute_routing(providers: Iterable[ProviderConfig]) -> RoutingTable:
    """Recompute the full routing table for a provider list."""
    providers = list(providers)
    table = RoutingTable.from_mapping({
        category: route(providers, category) for category in ContentCategory
    })
    logger.debug(f"Routing recomputed: {table.model_dump(mode='json')}")
    return table
