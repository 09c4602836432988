"""
Audio transcription through Whisper-compatible APIs (OpenAI and Groq).

Uploads are first passed through the media transcoder so that formats the
APIs reject (OGG, most video containers) are converted to WAV.
"""
import io
import logging
from typing import Optional

import httpx
import openai

from .config import ConfigurationStore
from .dispatch import DEFAULT_TIMEOUT, check_credential, classify_http_error
from .interfaces import AnalysisResult, ErrorKind, ProviderIdentity, TranscodingError
from .registry import TRANSCRIPTION_MODELS
from .schemas import ProviderConfig
from ..media.transcoder import MediaFile, MediaTranscoder

logger = logging.getLogger(__name__)

MAX_TRANSCRIPTION_BYTES = 25 * 1024 * 1024

TRANSCRIPTION_BASE_URLS = {
    ProviderIdentity.OPENAI: None,  # SDK default
    ProviderIdentity.GROQ: "https://api.groq.com/openai/v1",
}


def _status_failure(error: openai.APIStatusError, provider: ProviderIdentity, model: str) -> AnalysisResult:
    if error.status_code == 413:
        return AnalysisResult.failure(
            ErrorKind.BAD_REQUEST,
            f"File too large for {provider.value}. Limit: 25MB",
            provider=provider,
            model=model
        )
    body = error.response.text if error.response is not None else str(error)
    return classify_http_error(error.status_code, body, provider, model)


async def transcribe(
    media: MediaFile,
    config: ProviderConfig,
    *,
    transcoder: MediaTranscoder,
    http_client: Optional[httpx.AsyncClient] = None,
    language: Optional[str] = None,
    timeout: float = DEFAULT_TIMEOUT
) -> AnalysisResult:
    """
    Transcribe a media file with one provider.

    Args:
        media: Uploaded media
        config: Provider configuration holding the user credential
        transcoder: Transcoder used to make the media acceptable
        http_client: HTTP client handed to the SDK (tests inject a mock transport here)
        language: Optional ISO-639-1 language hint
        timeout: Request timeout in seconds

    Returns:
        AnalysisResult with the transcript text or a classified failure
    """
    provider = config.provider
    model = TRANSCRIPTION_MODELS.get(provider)
    if model is None:
        return AnalysisResult.failure(
            ErrorKind.NO_PROVIDER_AVAILABLE,
            f"Provider not supported for transcription: {provider.value}",
            provider=provider
        )

    rejection = check_credential(provider, config.api_key)
    if rejection is not None:
        return rejection

    try:
        prepared = await transcoder.ensure_transcodable(media)
    except TranscodingError as e:
        logger.error(f"❌ Could not prepare {media.name} for transcription: {e}")
        return AnalysisResult.failure(e.error_kind, str(e), provider=provider, model=model)

    if len(prepared.data) > MAX_TRANSCRIPTION_BYTES:
        return AnalysisResult.failure(
            ErrorKind.BAD_REQUEST,
            f"File too large for {provider.value}. Limit: 25MB",
            provider=provider,
            model=model
        )

    client = openai.AsyncOpenAI(
        api_key=config.api_key.strip(),
        base_url=TRANSCRIPTION_BASE_URLS[provider],
        http_client=http_client,
        timeout=timeout,
        max_retries=0
    )

    logger.info(f"🎤 Transcribing {prepared.name} with {provider.value} ({model})")
    audio_buffer = io.BytesIO(prepared.data)
    kwargs = {"language": language} if language else {}
    try:
        response = await client.audio.transcriptions.create(
            model=model,
            file=(prepared.name, audio_buffer, prepared.content_type or "application/octet-stream"),
            **kwargs
        )
    except openai.APIStatusError as e:
        logger.error(f"❌ Transcription error {e.status_code} from {provider.value}")
        return _status_failure(e, provider, model)
    except openai.APIConnectionError as e:
        logger.error(f"❌ Connection error calling {provider.value}: {type(e).__name__}")
        return AnalysisResult.failure(
            ErrorKind.CONNECTIVITY_FAILURE,
            f"Connection error reaching {provider.value}. Check your internet connection "
            f"or whether the API is available.",
            provider=provider,
            model=model
        )
    finally:
        if http_client is None:
            await client.close()

    text = (getattr(response, "text", None) or "").strip()
    logger.info(f"✅ Transcription completed: {len(text)} characters")
    return AnalysisResult.success(
        text,
        provider=provider,
        model=model,
        file_name=prepared.name,
        converted=prepared is not media
    )


def select_transcription_provider(
    store: ConfigurationStore,
    provider: Optional[ProviderIdentity] = None
) -> Optional[ProviderConfig]:
    """
    Pick the provider configuration used for transcription.

    An explicit provider must be configured and enabled. Otherwise the first
    enabled provider with a transcription model is used, in configuration order.
    """
    if provider is not None:
        entry = store.get_provider(provider)
        return entry if entry is not None and entry.enabled else None

    for entry in store.get_enabled_providers():
        if entry.provider in TRANSCRIPTION_MODELS:
            return entry
    return None
