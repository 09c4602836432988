"""
Built-in AI gateway adapter.

The gateway is OpenAI-compatible and authenticated with a server-side key,
so users never configure a credential for it. It is the routing fallback.
"""
from typing import Optional

from ..interfaces import ProviderIdentity
from ..registry import DEFAULT_MODELS
from .base import ChatCompletionsAdapter

DEFAULT_GATEWAY_URL = "https://ai.gateway.lovable.dev/v1/chat/completions"


class LovableGatewayAdapter(ChatCompletionsAdapter):
    """Chat completions against the built-in gateway."""

    identity = ProviderIdentity.LOVABLE
    default_model = DEFAULT_MODELS[ProviderIdentity.LOVABLE]
    requires_user_credential = False

    def __init__(self, gateway_key: Optional[str] = None, gateway_url: Optional[str] = None):
        self.gateway_key = gateway_key
        self.url = gateway_url or DEFAULT_GATEWAY_URL

    def server_credential(self) -> Optional[str]:
        return self.gateway_key
