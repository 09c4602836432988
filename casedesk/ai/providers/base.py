"""
Base class for provider adapters.

An adapter translates a prompt into one vendor's wire request and pulls the
generated text back out of that vendor's JSON response. Adapters do no I/O;
the HTTP call and status handling live in ``casedesk.ai.dispatch``.
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from ..interfaces import ProviderError, ProviderIdentity, ErrorKind

DEFAULT_TEMPERATURE = 0.7
DEFAULT_MAX_TOKENS = 4096


@dataclass
class WireRequest:
    """A fully built vendor request."""
    url: str
    headers: Dict[str, str]
    body: Dict[str, Any]
    params: Dict[str, str] = field(default_factory=dict)


class ResponseFormatError(ProviderError):
    """Raised when the expected content path is missing from a response."""

    error_kind = ErrorKind.MALFORMED_RESPONSE


class ContentBlockedError(ResponseFormatError):
    """Raised when the vendor withheld the answer for content-safety reasons."""

    error_kind = ErrorKind.CONTENT_BLOCKED


def is_text(value: Any) -> bool:
    """True for a non-empty string."""
    return isinstance(value, str) and bool(value)


class ProviderAdapter(ABC):
    """One adapter per ProviderIdentity."""

    identity: ProviderIdentity
    default_model: str
    # False for providers authenticated with a server-side key
    requires_user_credential: bool = True

    def resolve_model(self, model: Optional[str]) -> str:
        return model or self.default_model

    def server_credential(self) -> Optional[str]:
        """Credential used when the provider does not take a user key."""
        return None

    @abstractmethod
    def build_request(self, prompt: str, model: str, credential: str) -> WireRequest:
        """
        Build the vendor request.

        Args:
            prompt: User prompt
            model: Resolved model name
            credential: API key to authenticate with

        Returns:
            WireRequest ready to send
        """
        pass

    @abstractmethod
    def extract_text(self, payload: Dict[str, Any]) -> str:
        """
        Extract the generated text from a successful response.

        Raises:
            ContentBlockedError: If the vendor blocked the content
            ResponseFormatError: If the expected path is absent or empty
        """
        pass

    def _malformed(self, message: Optional[str] = None) -> ResponseFormatError:
        return ResponseFormatError(
            message or f"Unexpected response format from {self.identity.value}",
            provider_name=self.identity.value,
            error_code="malformed_response"
        )

    def _blocked(self, reason: str) -> ContentBlockedError:
        return ContentBlockedError(
            f"Response blocked: {reason}",
            provider_name=self.identity.value,
            error_code="content_blocked"
        )


class ChatCompletionsAdapter(ProviderAdapter):
    """Adapter for OpenAI-compatible ``/chat/completions`` endpoints."""

    url: str
    max_tokens: Optional[int] = None

    def build_request(self, prompt: str, model: str, credential: str) -> WireRequest:
        body: Dict[str, Any] = {
            "model": model,
            "messages": [{"role": "user", "content": prompt}],
            "temperature": DEFAULT_TEMPERATURE,
        }
        if self.max_tokens:
            body["max_tokens"] = self.max_tokens

        return WireRequest(
            url=self.url,
            headers={
                "Content-Type": "application/json",
                "Authorization": f"Bearer {credential}",
            },
            body=body,
        )

    def extract_text(self, payload: Dict[str, Any]) -> str:
        choices = payload.get("choices")
        if not isinstance(choices, list) or not choices or not isinstance(choices[0], dict):
            raise self._malformed()

        choice = choices[0]
        message = choice.get("message")
        content = message.get("content") if isinstance(message, dict) else None
        if not is_text(content):
            if choice.get("finish_reason") == "content_filter":
                raise self._blocked("content_filter")
            raise self._malformed("Empty response from API")
        return content
