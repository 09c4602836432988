"""
AI API routes.
Provides endpoints for provider configuration, content classification,
analysis and file transcription.
"""
import logging
from typing import Optional, List, Dict, Any

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile, status
from pydantic import BaseModel, Field

from .classifier import classify
from .config import ConfigurationStore
from .interfaces import AnalysisRequest, AnalysisResult, ContentCategory, ErrorKind, ProviderIdentity
from .registry import get_supported_providers
from .schemas import MASK_PREFIX, ProviderConfig, mask_secret
from .service import AnalysisService
from .transcription import select_transcription_provider, transcribe
from ..deps import get_analysis_service, get_app_settings, get_config_store, get_transcoder
from ..media.transcoder import MediaFile, MediaTranscoder
from ..settings import Settings

logger = logging.getLogger(__name__)

# Create router
router = APIRouter(prefix="/api/ai", tags=["ai"])


# Request/Response models
class ClassifyRequest(BaseModel):
    """Request model for content classification."""
    hint: str = Field("", description="Free-text task description")
    mime_type: Optional[str] = Field(None, description="MIME type of the attached file")
    has_images: bool = Field(False, description="Task carries images")
    has_text: bool = Field(False, description="Task carries text content")


class ClassifyResponse(BaseModel):
    category: ContentCategory


class AnalyzeRequest(BaseModel):
    """Request model for a routed analysis."""
    prompt: str = Field(..., min_length=1, description="Prompt sent to the provider")
    category: Optional[ContentCategory] = Field(None, description="Content category; classified from hint if absent")
    hint: Optional[str] = Field(None, description="Task description used for classification")
    provider: Optional[ProviderIdentity] = Field(None, description="Force a configured provider")


class TranscriptAnalysisRequest(BaseModel):
    transcript: str = Field(..., min_length=1)
    media_kind: str = Field("áudio", description="Source of the transcript, e.g. 'áudio' or 'vídeo'")


class EvidenceItem(BaseModel):
    tipo: str
    conteudo: str
    nome_arquivo: Optional[str] = None


class EvidenceAnalysisRequest(BaseModel):
    conversation_id: Optional[str] = None
    evidencias: List[EvidenceItem] = Field(..., min_length=1)


class ITReportRequest(BaseModel):
    cliente: str
    problema: str
    categoria: str
    urgencia: str
    investigacao: Optional[str] = None
    solucao: Optional[str] = None


class ImproveTextRequest(BaseModel):
    text: str = Field(..., min_length=1)
    type: str = Field("solution", description="investigation, analysis, solution or response")


class AnalysisResponse(BaseModel):
    """Uniform result body; failures are reported with ok=false."""
    ok: bool
    text: Optional[str] = None
    error: Optional[ErrorKind] = None
    detail: Optional[str] = None
    provider: Optional[ProviderIdentity] = None
    model: Optional[str] = None
    metadata: Dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def from_result(cls, result: AnalysisResult) -> "AnalysisResponse":
        return cls(**result.to_dict())


class ProvidersListResponse(BaseModel):
    """Response model for supported providers list."""
    providers: Dict[str, Dict[str, Any]]


def _config_response(store: ConfigurationStore) -> Dict[str, Any]:
    return store.load().masked().to_record()


# API Endpoints
@router.get("/config")
async def get_configuration(store: ConfigurationStore = Depends(get_config_store)):
    """Current provider configuration with masked credentials."""
    try:
        return _config_response(store)
    except Exception as e:
        logger.error(f"Error loading AI configuration: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to load AI configuration"
        )


@router.put("/providers")
async def upsert_provider(
    provider_config: ProviderConfig,
    store: ConfigurationStore = Depends(get_config_store)
):
    """Add or replace a provider; routing is recomputed."""
    # A masked key echoed back from GET /config keeps the stored credential
    if provider_config.api_key and provider_config.api_key.startswith(MASK_PREFIX):
        existing = store.get_provider(provider_config.provider)
        if existing is not None and mask_secret(existing.api_key) == provider_config.api_key:
            provider_config = provider_config.model_copy(update={"api_key": existing.api_key})

    try:
        updated = store.upsert_provider(provider_config)
    except Exception as e:
        logger.error(f"Error saving provider {provider_config.provider.value}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to save provider configuration"
        )
    return updated.masked().to_record()


@router.delete("/providers/{provider}")
async def remove_provider(
    provider: ProviderIdentity,
    store: ConfigurationStore = Depends(get_config_store)
):
    """Remove a provider; removing an unconfigured provider is a no-op."""
    try:
        updated = store.remove_provider(provider)
    except Exception as e:
        logger.error(f"Error removing provider {provider.value}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to remove provider"
        )
    return updated.masked().to_record()


@router.get("/providers", response_model=ProvidersListResponse)
async def list_supported_providers():
    """Get list of supported AI providers."""
    return ProvidersListResponse(providers=get_supported_providers())


@router.post("/classify", response_model=ClassifyResponse)
async def classify_content(request_data: ClassifyRequest):
    category = classify(
        request_data.hint,
        mime_type=request_data.mime_type,
        has_images=request_data.has_images,
        has_text=request_data.has_text
    )
    return ClassifyResponse(category=category)


@router.post("/analyze", response_model=AnalysisResponse)
async def analyze(
    request_data: AnalyzeRequest,
    service: AnalysisService = Depends(get_analysis_service)
):
    """Route a prompt by content category (or forced provider) and run it."""
    category = request_data.category or classify(request_data.hint or "")
    result = await service.analyze(AnalysisRequest(
        prompt=request_data.prompt,
        category=category,
        provider_override=request_data.provider
    ))
    return AnalysisResponse.from_result(result)


@router.post("/analyze-transcript", response_model=AnalysisResponse)
async def analyze_transcript(
    request_data: TranscriptAnalysisRequest,
    service: AnalysisService = Depends(get_analysis_service)
):
    """Classify a conversation transcript into urgency, category, sentiment and summary."""
    result = await service.analyze_transcript(request_data.transcript, request_data.media_kind)
    return AnalysisResponse.from_result(service.parse_classification(result))


@router.post("/analyze-evidence", response_model=AnalysisResponse)
async def analyze_evidence(
    request_data: EvidenceAnalysisRequest,
    service: AnalysisService = Depends(get_analysis_service)
):
    evidences = [item.model_dump(exclude_none=True) for item in request_data.evidencias]
    result = await service.analyze_evidence(evidences)
    return AnalysisResponse.from_result(result)


@router.post("/it-report", response_model=AnalysisResponse)
async def generate_it_report(
    request_data: ITReportRequest,
    service: AnalysisService = Depends(get_analysis_service)
):
    result = await service.generate_it_report(request_data.model_dump())
    return AnalysisResponse.from_result(result)


@router.post("/improve-text", response_model=AnalysisResponse)
async def improve_text(
    request_data: ImproveTextRequest,
    service: AnalysisService = Depends(get_analysis_service)
):
    result = await service.improve_text(request_data.text, request_data.type)
    return AnalysisResponse.from_result(result)


@router.post("/transcribe-file", response_model=AnalysisResponse)
async def transcribe_file(
    file: UploadFile = File(...),
    provider: Optional[ProviderIdentity] = Form(None),
    language: Optional[str] = Form(None),
    store: ConfigurationStore = Depends(get_config_store),
    transcoder: MediaTranscoder = Depends(get_transcoder),
    settings: Settings = Depends(get_app_settings)
):
    """Transcribe an uploaded audio or video file, converting it first when needed."""
    content = await file.read()
    if len(content) > settings.max_upload_bytes:
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail=f"File too large. Max size: {settings.max_upload_bytes / 1024 / 1024:.0f}MB"
        )

    entry = select_transcription_provider(store, provider)
    if entry is None:
        result = AnalysisResult.failure(
            ErrorKind.NO_PROVIDER_AVAILABLE,
            "No enabled transcription provider (openai or groq). Configure one in Settings.",
            provider=provider
        )
        return AnalysisResponse.from_result(result)

    media = MediaFile(
        name=file.filename or "upload",
        content_type=file.content_type or "",
        data=content
    )
    try:
        result = await transcribe(
            media,
            entry,
            transcoder=transcoder,
            language=language,
            timeout=settings.ai_request_timeout
        )
    except Exception as e:
        logger.error(f"Unexpected error during file transcription: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Internal transcription error"
        )
    return AnalysisResponse.from_result(result)


@router.get("/health")
async def health(store: ConfigurationStore = Depends(get_config_store)):
    enabled = store.get_enabled_providers()
    return {
        "status": "ok",
        "enabled_providers": [entry.provider.value for entry in enabled],
    }
