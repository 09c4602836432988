"""
Analysis service: the entry point for case analyses.

Resolves which provider handles a request (explicit override or content
routing), builds the prompt and hands it to the dispatch layer.
"""
import json
import logging
import re
from typing import Any, Dict, List, Mapping, Optional

import httpx
from pydantic import BaseModel, Field, ValidationError, field_validator

from .classifier import classify
from .config import ConfigurationStore
from .dispatch import DEFAULT_TIMEOUT, invoke
from .interfaces import AnalysisRequest, AnalysisResult, ContentCategory, ErrorKind
from .prompts import (
    CASE_CATEGORIES, SENTIMENTS, SUMMARY_MAX_CHARS, URGENCY_LEVELS,
    evidence_analysis_prompt, improve_text_prompt, it_report_prompt, transcript_analysis_prompt,
)
from .providers import AdapterTable
from .schemas import ProviderConfig

logger = logging.getLogger(__name__)

_CODE_FENCE = re.compile(r"^```[a-zA-Z]*\s*\n?(.*?)\n?```\s*$", re.DOTALL)


class ConversationClassification(BaseModel):
    """Structured classification of a transcribed conversation."""

    urgencia: str = "media"
    categoria: str = "outro"
    sentimento: str = "neutro"
    resumo_curto: str = ""
    contexto: str = ""
    problemas: List[str] = Field(default_factory=list)
    topicos: List[str] = Field(default_factory=list)
    insights: List[str] = Field(default_factory=list)

    @field_validator("urgencia", "categoria", "sentimento", mode="before")
    @classmethod
    def _normalize_label(cls, value: Any) -> Any:
        return value.strip().lower() if isinstance(value, str) else value

    @field_validator("urgencia")
    @classmethod
    def _check_urgency(cls, value: str) -> str:
        if value not in URGENCY_LEVELS:
            raise ValueError(f"urgencia must be one of {URGENCY_LEVELS}")
        return value

    @field_validator("categoria")
    @classmethod
    def _check_category(cls, value: str) -> str:
        # Unknown categories are kept as "outro" rather than rejected
        return value if value in CASE_CATEGORIES else "outro"

    @field_validator("sentimento")
    @classmethod
    def _check_sentiment(cls, value: str) -> str:
        if value not in SENTIMENTS:
            raise ValueError(f"sentimento must be one of {SENTIMENTS}")
        return value

    @field_validator("resumo_curto")
    @classmethod
    def _truncate_summary(cls, value: str) -> str:
        return value[:SUMMARY_MAX_CHARS]


def strip_code_fences(text: str) -> str:
    """Remove a Markdown code fence wrapped around a model answer."""
    stripped = text.strip()
    match = _CODE_FENCE.match(stripped)
    return match.group(1).strip() if match else stripped


class AnalysisService:
    """
    Routes analysis requests to the configured providers.

    Args:
        store: Configuration store holding providers and routing
        adapters: Adapter table keyed by provider identity
        client: Shared HTTP client; a short-lived client per call when omitted
        timeout: Request timeout used for short-lived clients
    """

    def __init__(
        self,
        store: ConfigurationStore,
        adapters: AdapterTable,
        client: Optional[httpx.AsyncClient] = None,
        timeout: float = DEFAULT_TIMEOUT
    ):
        self.store = store
        self.adapters = adapters
        self.client = client
        self.timeout = timeout

    def resolve_provider(self, request: AnalysisRequest) -> Optional[ProviderConfig]:
        """Pick the provider for a request, or None when nothing qualifies."""
        if request.provider_override is not None:
            entry = self.store.get_provider(request.provider_override)
            if entry is None or not entry.enabled:
                logger.warning(
                    f"⚠️ Requested provider {request.provider_override.value} is not configured or disabled"
                )
                return None
            return entry
        return self.store.get_provider_for_content(request.category)

    async def analyze(self, request: AnalysisRequest) -> AnalysisResult:
        """Run a prompt on the provider chosen for its category."""
        entry = self.resolve_provider(request)
        if entry is None:
            target = request.provider_override.value if request.provider_override else request.category.value
            return AnalysisResult.failure(
                ErrorKind.NO_PROVIDER_AVAILABLE,
                f"No enabled AI provider available for {target}. Configure one in Settings."
            )

        logger.info(f"🎯 Routing {request.category.value} analysis to {entry.provider.value}")
        return await invoke(
            request.prompt,
            entry,
            client=self.client,
            adapters=self.adapters,
            timeout=self.timeout
        )

    async def analyze_transcript(self, transcript: str, media_kind: str = "áudio") -> AnalysisResult:
        """
        Classify a transcribed conversation.

        Args:
            transcript: Transcribed text
            media_kind: Source description (e.g. "áudio", "vídeo"), also used for routing
        """
        category = classify(media_kind)
        prompt = transcript_analysis_prompt(transcript, media_kind)
        return await self.analyze(AnalysisRequest(prompt=prompt, category=category))

    async def analyze_evidence(self, evidences: List[Mapping[str, Any]]) -> AnalysisResult:
        """Analyze case evidences; mixed evidence types route as mixed content."""
        categories = {classify(str(evidence.get("tipo", ""))) for evidence in evidences}
        if len(categories) > 1:
            category = ContentCategory.MIXED
        elif categories:
            category = categories.pop()
        else:
            category = ContentCategory.TEXT

        prompt = evidence_analysis_prompt(evidences)
        return await self.analyze(AnalysisRequest(prompt=prompt, category=category))

    async def generate_it_report(self, report: Mapping[str, Any]) -> AnalysisResult:
        return await self.analyze(AnalysisRequest(prompt=it_report_prompt(report)))

    async def improve_text(self, text: str, kind: str = "solution") -> AnalysisResult:
        """Proofread a case text; the result text is stripped of surrounding whitespace."""
        result = await self.analyze(AnalysisRequest(prompt=improve_text_prompt(text, kind)))
        if result.ok:
            result.text = result.text.strip()
        return result

    @staticmethod
    def parse_classification(result: AnalysisResult) -> AnalysisResult:
        """
        Parse a transcript analysis answer into a ConversationClassification.

        Returns:
            The input failure unchanged, a success with ``metadata["classification"]``
            holding the parsed fields, or a MALFORMED_RESPONSE failure
        """
        if not result.ok:
            return result

        try:
            data = json.loads(strip_code_fences(result.text))
            if not isinstance(data, dict):
                raise ValueError("classification is not a JSON object")
            classification = ConversationClassification.model_validate(data)
        except (ValueError, ValidationError) as e:
            logger.error(f"❌ Could not parse conversation classification: {e}")
            return AnalysisResult.failure(
                ErrorKind.MALFORMED_RESPONSE,
                f"AI answer is not a valid classification JSON: {e}",
                provider=result.provider,
                model=result.model
            )

        payload: Dict[str, Any] = classification.model_dump()
        return AnalysisResult.success(
            result.text,
            provider=result.provider,
            model=result.model,
            classification=payload
        )
