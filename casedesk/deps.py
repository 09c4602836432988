"""
Dependencies and dependency injection setup.
"""
import logging

import httpx
from fastapi import Request

from casedesk.settings import Settings, ConfigBackend
from casedesk.ai.config import ConfigurationStore
from casedesk.ai.interfaces import ConfigurationError
from casedesk.ai.providers import AdapterTable, build_adapter_table
from casedesk.ai.service import AnalysisService
from casedesk.data import (
    KeyValueStore,
    InMemoryKeyValueStore,
    JsonFileKeyValueStore,
    SupabaseKeyValueStore
)
from casedesk.media import FFmpegDecoder, MediaTranscoder

logger = logging.getLogger(__name__)


def get_key_value_store(settings: Settings) -> KeyValueStore:
    """Get the key-value backend selected by settings."""
    backend = ConfigBackend(settings.config_backend)

    if backend == ConfigBackend.SUPABASE:
        if not settings.supabase_url or not settings.supabase_service_key:
            raise ConfigurationError(
                "CONFIG_BACKEND=supabase requires SUPABASE_URL and SUPABASE_SERVICE_KEY",
                error_code="missing_supabase_settings"
            )
        logger.info(f"Using Supabase configuration store (table: {settings.supabase_config_table})")
        return SupabaseKeyValueStore(
            url=settings.supabase_url,
            service_key=settings.supabase_service_key,
            client_id=settings.config_client_id,
            table=settings.supabase_config_table
        )

    if backend == ConfigBackend.FILE:
        logger.info(f"Using file configuration store: {settings.config_file_path}")
        return JsonFileKeyValueStore(settings.config_file_path)

    logger.info("Using in-memory configuration store")
    return InMemoryKeyValueStore()


def build_config_store(settings: Settings) -> ConfigurationStore:
    """Configuration store on the backend selected by settings."""
    return ConfigurationStore(get_key_value_store(settings))


def build_adapters(settings: Settings) -> AdapterTable:
    if not settings.lovable_api_key:
        logger.warning("⚠️ LOVABLE_API_KEY not set, built-in AI gateway calls will fail")
    return build_adapter_table(
        gateway_key=settings.lovable_api_key or None,
        gateway_url=settings.lovable_gateway_url or None
    )


def build_transcoder(settings: Settings) -> MediaTranscoder:
    decoder = FFmpegDecoder(ffmpeg_binary=settings.ffmpeg_binary, ffprobe_binary=settings.ffprobe_binary)
    return MediaTranscoder(decoder=decoder, realtime_capture=settings.transcoder_realtime_capture)


def setup_dependencies(settings: Settings) -> dict:
    """Setup all dependencies and return them."""
    config_store = build_config_store(settings)
    adapters = build_adapters(settings)
    http_client = httpx.AsyncClient(timeout=httpx.Timeout(settings.ai_request_timeout))
    analysis_service = AnalysisService(
        store=config_store,
        adapters=adapters,
        client=http_client,
        timeout=settings.ai_request_timeout
    )

    return {
        "config_store": config_store,
        "http_client": http_client,
        "analysis_service": analysis_service,
        "transcoder": build_transcoder(settings),
        "settings": settings
    }


# FastAPI dependencies

def get_config_store(request: Request) -> ConfigurationStore:
    """Dependency to get the configuration store from app state."""
    return request.app.state.config_store


def get_analysis_service(request: Request) -> AnalysisService:
    """Dependency to get the analysis service from app state."""
    return request.app.state.analysis_service


def get_transcoder(request: Request) -> MediaTranscoder:
    """Dependency to get the media transcoder from app state."""
    return request.app.state.transcoder


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings
