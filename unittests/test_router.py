"""
Tests for the auto-router and the routing table it produces.
"""
import pytest

from casedesk.ai.interfaces import ContentCategory, ProviderIdentity
from casedesk.ai.router import ROUTING_PRIORITIES, compute_routing, route
from casedesk.ai.schemas import ProviderConfig


def _provider(identity: ProviderIdentity, enabled: bool = True, **kwargs) -> ProviderConfig:
    return ProviderConfig(provider=identity, api_key=f"{identity.value}-key-0123456789", enabled=enabled, **kwargs)


class TestRoute:

    @pytest.mark.parametrize("category", list(ContentCategory))
    def test_empty_provider_list_falls_back_to_builtin(self, category):
        assert route([], category) == ProviderIdentity.LOVABLE

    def test_text_prefers_groq_over_openai(self):
        providers = [_provider(ProviderIdentity.OPENAI), _provider(ProviderIdentity.GROQ)]
        assert route(providers, ContentCategory.TEXT) == ProviderIdentity.GROQ

    def test_image_prefers_openai(self):
        providers = [_provider(ProviderIdentity.ANTHROPIC), _provider(ProviderIdentity.GOOGLE),
                     _provider(ProviderIdentity.OPENAI)]
        assert route(providers, ContentCategory.IMAGE) == ProviderIdentity.OPENAI

    def test_video_goes_to_google_when_enabled(self):
        providers = [_provider(ProviderIdentity.OPENAI), _provider(ProviderIdentity.GOOGLE)]
        assert route(providers, ContentCategory.VIDEO) == ProviderIdentity.GOOGLE

    def test_disabled_provider_is_skipped(self):
        providers = [_provider(ProviderIdentity.GROQ, enabled=False), _provider(ProviderIdentity.OPENAI)]
        assert route(providers, ContentCategory.TEXT) == ProviderIdentity.OPENAI

    def test_provider_without_capability_is_skipped(self):
        # Groq has no image support
        providers = [_provider(ProviderIdentity.GROQ)]
        assert route(providers, ContentCategory.IMAGE) == ProviderIdentity.LOVABLE

    def test_restricted_capabilities_are_respected(self):
        providers = [_provider(ProviderIdentity.OPENAI, capabilities=[ContentCategory.TEXT])]
        assert route(providers, ContentCategory.IMAGE) == ProviderIdentity.LOVABLE
        assert route(providers, ContentCategory.TEXT) == ProviderIdentity.OPENAI

    def test_routing_is_independent_of_input_order(self):
        forward = [_provider(p) for p in ProviderIdentity]
        backward = list(reversed(forward))
        for category in ContentCategory:
            assert route(forward, category) == route(backward, category)

    def test_every_priority_list_ends_with_fallback(self):
        for priorities in ROUTING_PRIORITIES.values():
            assert priorities[-1] == ProviderIdentity.LOVABLE


class TestComputeRouting:

    def test_table_covers_every_category(self):
        table = compute_routing([_provider(ProviderIdentity.GROQ)])
        mapping = table.as_mapping()
        assert set(mapping) == set(ContentCategory)
        assert mapping[ContentCategory.TEXT] == ProviderIdentity.GROQ
        assert mapping[ContentCategory.AUDIO] == ProviderIdentity.GROQ
        assert mapping[ContentCategory.VIDEO] == ProviderIdentity.LOVABLE

    def test_table_serializes_with_category_tokens(self):
        table = compute_routing([])
        assert table.model_dump(mode="json") == {
            "texto": "lovable",
            "imagem": "lovable",
            "audio": "lovable",
            "video": "lovable",
            "misto": "lovable",
        }
