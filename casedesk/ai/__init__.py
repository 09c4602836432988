"""
AI module for the case-management service.
Routes analysis requests across configured providers and transcribes media.
"""

from .interfaces import (
    ProviderIdentity, ContentCategory, ErrorKind,
    AnalysisRequest, AnalysisResult,
    ProviderError, ConfigurationError, TranscodingError, NoAudioTrackError, DecodeFailureError
)

__all__ = [
    'ProviderIdentity', 'ContentCategory', 'ErrorKind',
    'AnalysisRequest', 'AnalysisResult',
    'ProviderError', 'ConfigurationError', 'TranscodingError', 'NoAudioTrackError', 'DecodeFailureError',
]
