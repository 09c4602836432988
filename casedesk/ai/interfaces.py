"""
AI provider interfaces for the case-management service.
Defines the shared identities, categories, result types and exceptions used by
the router, the provider adapters and the media transcoder.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Dict, Any


class ProviderIdentity(str, Enum):
    """Backend vendors an analysis can be routed to."""
    LOVABLE = "lovable"  # Built-in gateway, no user credential
    OPENAI = "openai"
    GROQ = "groq"
    ANTHROPIC = "anthropic"
    GOOGLE = "google"


class ContentCategory(str, Enum):
    """Content categories. Values are the persisted routing tokens."""
    TEXT = "texto"
    IMAGE = "imagem"
    AUDIO = "audio"
    VIDEO = "video"
    MIXED = "misto"


class ErrorKind(str, Enum):
    """Failure classification returned to callers."""
    MISSING_CREDENTIAL = "missing_credential"
    MASKED_CREDENTIAL = "masked_credential"
    IMPLAUSIBLE_CREDENTIAL = "implausible_credential"
    AUTH_FAILURE = "auth_failure"
    RATE_LIMITED = "rate_limited"
    INSUFFICIENT_CREDIT = "insufficient_credit"
    MODEL_NOT_FOUND = "model_not_found"
    BAD_REQUEST = "bad_request"
    UPSTREAM_ERROR = "upstream_error"
    CONNECTIVITY_FAILURE = "connectivity_failure"
    MALFORMED_RESPONSE = "malformed_response"
    CONTENT_BLOCKED = "content_blocked"
    NO_AUDIO_TRACK = "no_audio_track"
    DECODE_FAILURE = "decode_failure"
    NO_PROVIDER_AVAILABLE = "no_provider_available"


@dataclass
class AnalysisRequest:
    """A single analysis call, built per request."""
    prompt: str
    category: ContentCategory = ContentCategory.TEXT
    provider_override: Optional[ProviderIdentity] = None


@dataclass
class AnalysisResult:
    """
    Outcome of an analysis or transcription call.

    Either ``text`` is set (success) or ``error`` is set (failure), never both.
    Use the ``success`` / ``failure`` constructors instead of building it by hand.
    """
    text: Optional[str] = None
    error: Optional[ErrorKind] = None
    detail: Optional[str] = None
    provider: Optional[ProviderIdentity] = None
    model: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def success(
        cls,
        text: str,
        provider: Optional[ProviderIdentity] = None,
        model: Optional[str] = None,
        **metadata
    ) -> "AnalysisResult":
        return cls(text=text, provider=provider, model=model, metadata=metadata)

    @classmethod
    def failure(
        cls,
        error: ErrorKind,
        detail: str,
        provider: Optional[ProviderIdentity] = None,
        model: Optional[str] = None
    ) -> "AnalysisResult":
        return cls(error=error, detail=detail, provider=provider, model=model)

    @property
    def ok(self) -> bool:
        return self.error is None

    def to_dict(self) -> Dict[str, Any]:
        """Serialize for API responses."""
        return {
            "ok": self.ok,
            "text": self.text,
            "error": self.error.value if self.error else None,
            "detail": self.detail,
            "provider": self.provider.value if self.provider else None,
            "model": self.model,
            "metadata": self.metadata,
        }


class ProviderError(Exception):
    """Base exception for provider errors."""

    def __init__(self, message: str, provider_name: str = None, error_code: str = None):
        super().__init__(message)
        self.provider_name = provider_name
        self.error_code = error_code


class ConfigurationError(ProviderError):
    """Raised when service configuration is invalid."""
    pass


class TranscodingError(ProviderError):
    """Raised when media cannot be converted for transcription."""

    error_kind = ErrorKind.DECODE_FAILURE


class NoAudioTrackError(TranscodingError):
    """Raised when the source media has no decodable audio stream."""

    error_kind = ErrorKind.NO_AUDIO_TRACK


class DecodeFailureError(TranscodingError):
    """Raised when decoding or capturing the media fails at any stage."""

    error_kind = ErrorKind.DECODE_FAILURE
