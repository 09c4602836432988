"""
AI provider configuration management.
Holds the enabled providers, their credentials and the routing table, persisted
as a single JSON record in a key-value backend.
"""
import json
import logging
from typing import List, Optional

from pydantic import ValidationError

from .interfaces import ProviderIdentity, ContentCategory
from .registry import FALLBACK_PROVIDER, capabilities_for
from .router import compute_routing
from .schemas import ProviderConfig, MultiProviderConfiguration, RoutingTable
from ..data.store_interface import KeyValueStore

logger = logging.getLogger(__name__)

MULTI_AI_CONFIG_KEY = "multi-ai-config"


def default_configuration() -> MultiProviderConfiguration:
    """Built-in provider only, enabled and routed for every category."""
    return MultiProviderConfiguration(
        providers=[
            ProviderConfig(
                provider=FALLBACK_PROVIDER,
                enabled=True,
                capabilities=capabilities_for(FALLBACK_PROVIDER),
            )
        ],
        routing=RoutingTable(),
    )


class ConfigurationStore:
    """
    Persisted multi-provider configuration.

    The store owns the configuration: every read returns a fresh copy and
    every mutation is a synchronous load-modify-save, with the routing table
    recomputed from the resulting provider list before it is written.
    """

    def __init__(self, backend: KeyValueStore, key: str = MULTI_AI_CONFIG_KEY):
        self.backend = backend
        self.key = key

    def load(self) -> MultiProviderConfiguration:
        """
        Return the persisted configuration.

        Falls back to the default configuration when nothing is stored or the
        stored record cannot be read, parsed or validated.
        """
        try:
            raw = self.backend.get(self.key)
        except Exception as e:
            logger.error(f"❌ Failed to read AI configuration: {e}")
            return default_configuration()

        if raw is None:
            return default_configuration()

        try:
            return MultiProviderConfiguration.model_validate(json.loads(raw))
        except (json.JSONDecodeError, ValidationError, TypeError) as e:
            logger.warning(f"⚠️ Stored AI configuration is invalid, using default: {e}")
            return default_configuration()

    def save(self, config: MultiProviderConfiguration) -> None:
        """Persist the full configuration, replacing whatever was stored."""
        record = config.to_record()
        self.backend.set(self.key, json.dumps(record, ensure_ascii=False))
        logger.debug(f"💾 AI configuration saved ({len(config.providers)} providers)")

    def upsert_provider(self, provider_config: ProviderConfig) -> MultiProviderConfiguration:
        """
        Insert or replace a provider entry, recompute routing and persist.

        Returns:
            The configuration as saved
        """
        config = self.load()
        entry = provider_config.model_copy(deep=True)

        providers = list(config.providers)
        for index, existing in enumerate(providers):
            if existing.provider == entry.provider:
                providers[index] = entry
                break
        else:
            providers.append(entry)

        updated = MultiProviderConfiguration(providers=providers, routing=compute_routing(providers))
        self.save(updated)
        logger.info(f"✅ Provider {entry.provider.value} saved (enabled={entry.enabled})")
        return updated.model_copy(deep=True)

    def remove_provider(self, provider: ProviderIdentity) -> MultiProviderConfiguration:
        """
        Remove a provider entry, recompute routing and persist.

        Removing a provider that is not configured changes nothing.
        """
        config = self.load()
        if config.find(provider) is None:
            logger.debug(f"Provider {provider.value} not configured, nothing to remove")
            return config

        providers = [entry for entry in config.providers if entry.provider != provider]
        updated = MultiProviderConfiguration(providers=providers, routing=compute_routing(providers))
        self.save(updated)
        logger.info(f"🗑️  Provider {provider.value} removed")
        return updated.model_copy(deep=True)

    def get_enabled_providers(self) -> List[ProviderConfig]:
        return self.load().enabled_providers()

    def get_provider(self, provider: ProviderIdentity) -> Optional[ProviderConfig]:
        return self.load().find(provider)

    def get_provider_for_content(self, category: ContentCategory) -> Optional[ProviderConfig]:
        """
        Resolve the provider configuration for a content category.

        Uses the routing table; when the routed provider is missing or
        disabled, the first enabled provider able to serve the category is
        used instead. Returns None when no provider qualifies.
        """
        config = self.load()
        routed = config.routing.get(category)
        entry = config.find(routed)
        if entry is not None and entry.enabled:
            return entry

        logger.warning(f"[AI Router] Provider {routed.value} not found/enabled for {category.value}")
        for candidate in config.providers:
            if candidate.enabled and candidate.supports(category):
                return candidate
        return None
