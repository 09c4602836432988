"""
Pydantic schemas for the persisted multi-provider configuration.

Field aliases follow the persisted JSON record
``{providers: [{provider, apiKey, model, enabled, capabilities}], routing: {texto, imagem, audio, video, misto}}``.
"""
import logging
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from .interfaces import ProviderIdentity, ContentCategory
from .registry import FALLBACK_PROVIDER, PROVIDER_CAPABILITIES, capabilities_for

logger = logging.getLogger(__name__)

MASK_PREFIX = "••••"


def mask_secret(secret: Optional[str]) -> Optional[str]:
    """Mask a credential for display, keeping the last 4 characters."""
    if not secret:
        return secret
    return f"{MASK_PREFIX}{secret[-4:]}"


class ProviderConfig(BaseModel):
    """Configuration record for a single provider."""

    model_config = ConfigDict(populate_by_name=True)

    provider: ProviderIdentity
    api_key: Optional[str] = Field(default=None, alias="apiKey")
    model: Optional[str] = None
    enabled: bool = True
    capabilities: List[ContentCategory] = Field(default_factory=list)

    @model_validator(mode="after")
    def _default_capabilities(self) -> "ProviderConfig":
        supported = PROVIDER_CAPABILITIES[self.provider]
        if not self.capabilities:
            self.capabilities = capabilities_for(self.provider)
            return self

        kept = []
        for category in self.capabilities:
            if category not in supported:
                logger.warning(f"Dropping unsupported capability '{category.value}' for {self.provider.value}")
            elif category not in kept:
                kept.append(category)
        self.capabilities = kept or capabilities_for(self.provider)
        return self

    def supports(self, category: ContentCategory) -> bool:
        return category in self.capabilities

    def masked(self) -> "ProviderConfig":
        """Copy with the credential masked for display."""
        return self.model_copy(update={"api_key": mask_secret(self.api_key)})

    def to_record(self) -> Dict[str, object]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class RoutingTable(BaseModel):
    """One provider per content category. Derived state, recomputed on change."""

    texto: ProviderIdentity = FALLBACK_PROVIDER
    imagem: ProviderIdentity = FALLBACK_PROVIDER
    audio: ProviderIdentity = FALLBACK_PROVIDER
    video: ProviderIdentity = FALLBACK_PROVIDER
    misto: ProviderIdentity = FALLBACK_PROVIDER

    @classmethod
    def from_mapping(cls, mapping: Dict[ContentCategory, ProviderIdentity]) -> "RoutingTable":
        return cls(**{category.value: provider for category, provider in mapping.items()})

    def get(self, category: ContentCategory) -> ProviderIdentity:
        return getattr(self, category.value)

    def as_mapping(self) -> Dict[ContentCategory, ProviderIdentity]:
        return {category: self.get(category) for category in ContentCategory}


class MultiProviderConfiguration(BaseModel):
    """Providers plus routing table; the unit of persistence."""

    providers: List[ProviderConfig] = Field(default_factory=list)
    routing: RoutingTable = Field(default_factory=RoutingTable)

    @field_validator("providers")
    @classmethod
    def _unique_providers(cls, providers: List[ProviderConfig]) -> List[ProviderConfig]:
        seen = set()
        for entry in providers:
            if entry.provider in seen:
                raise ValueError(f"Duplicate provider entry: {entry.provider.value}")
            seen.add(entry.provider)
        return providers

    def find(self, provider: ProviderIdentity) -> Optional[ProviderConfig]:
        for entry in self.providers:
            if entry.provider == provider:
                return entry
        return None

    def enabled_providers(self) -> List[ProviderConfig]:
        return [entry for entry in self.providers if entry.enabled]

    def masked(self) -> "MultiProviderConfiguration":
        return MultiProviderConfiguration(
            providers=[entry.masked() for entry in self.providers],
            routing=self.routing.model_copy()
        )

    def to_record(self) -> Dict[str, object]:
        return {
            "providers": [entry.to_record() for entry in self.providers],
            "routing": self.routing.model_dump(mode="json"),
        }
