"""
Provider dispatch: one analysis call against one configured provider.

``invoke`` checks the credential, sends exactly one request through the
provider's adapter and converts every outcome (vendor JSON, HTTP error,
transport failure) into an AnalysisResult. Nothing here raises past the
function boundary and nothing is retried.
"""
import json
import logging
import re
from typing import Optional

import httpx

from .interfaces import AnalysisResult, ErrorKind, ProviderIdentity
from .providers import AdapterTable, ResponseFormatError
from .schemas import ProviderConfig, MASK_PREFIX

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 60.0
MIN_CREDENTIAL_LENGTH = 10

_PLACEHOLDER_PATTERN = re.compile(r"^your_[a-z0-9_]*key_here$", re.IGNORECASE)

_STATUS_ERROR_KINDS = {
    400: ErrorKind.BAD_REQUEST,
    401: ErrorKind.AUTH_FAILURE,
    402: ErrorKind.INSUFFICIENT_CREDIT,
    403: ErrorKind.AUTH_FAILURE,
    404: ErrorKind.MODEL_NOT_FOUND,
    429: ErrorKind.RATE_LIMITED,
}

_STATUS_MESSAGES = {
    ErrorKind.AUTH_FAILURE: (
        "Invalid API key or missing permission for {provider}",
        "Check that the key is correct and active in Settings."
    ),
    ErrorKind.RATE_LIMITED: (
        "Request limit exceeded for {provider}",
        "Wait a few minutes or check your API plan."
    ),
    ErrorKind.INSUFFICIENT_CREDIT: (
        "Insufficient credits/balance for {provider}",
        "Add credits to your API account."
    ),
    ErrorKind.MODEL_NOT_FOUND: (
        "Model or endpoint not found for {provider}",
        "The model may have been discontinued. Choose another model in Settings."
    ),
}


def check_credential(provider: ProviderIdentity, api_key: Optional[str]) -> Optional[AnalysisResult]:
    """
    Validate a user credential before any network call.

    Returns:
        A failure result if the credential is unusable, None otherwise
    """
    if not api_key or not api_key.strip():
        return AnalysisResult.failure(
            ErrorKind.MISSING_CREDENTIAL,
            f"API key not configured for {provider.value}. Configure it in Settings.",
            provider=provider
        )

    stripped = api_key.strip()
    if stripped.startswith(MASK_PREFIX) or _PLACEHOLDER_PATTERN.match(stripped):
        return AnalysisResult.failure(
            ErrorKind.MASKED_CREDENTIAL,
            f"Masked API key detected for {provider.value}. Click \"Change\" and enter the full key again.",
            provider=provider
        )

    if len(stripped) < MIN_CREDENTIAL_LENGTH:
        return AnalysisResult.failure(
            ErrorKind.IMPLAUSIBLE_CREDENTIAL,
            f"Invalid API key for {provider.value} (too short). Check the key in Settings.",
            provider=provider
        )

    return None


def _extract_error_message(body: str) -> Optional[str]:
    """Pull a vendor-supplied message out of an error body."""
    try:
        data = json.loads(body)
    except (json.JSONDecodeError, TypeError):
        return None
    if not isinstance(data, dict):
        return None

    error = data.get("error")
    if isinstance(error, dict) and error.get("message"):
        return str(error["message"])
    if isinstance(error, str) and error:
        return error
    if data.get("message"):
        return str(data["message"])
    return None


def classify_http_error(status_code: int, body: str, provider: ProviderIdentity,
                        model: Optional[str] = None) -> AnalysisResult:
    """Map a non-2xx response to the failure taxonomy."""
    kind = _STATUS_ERROR_KINDS.get(status_code, ErrorKind.UPSTREAM_ERROR)

    if kind in _STATUS_MESSAGES:
        message, hint = _STATUS_MESSAGES[kind]
        detail = f"{message.format(provider=provider.value)}\n{hint}"
    elif kind == ErrorKind.BAD_REQUEST:
        specific = _extract_error_message(body)
        if specific:
            detail = f"Request error for {provider.value}\nDetails: {specific}"
        else:
            detail = f"Invalid request for {provider.value}\n{body[:200]}"
    else:
        detail = f"Error {status_code} from {provider.value} API\n{body[:300]}"

    return AnalysisResult.failure(kind, detail, provider=provider, model=model)


async def invoke(
    prompt: str,
    config: ProviderConfig,
    *,
    adapters: AdapterTable,
    client: Optional[httpx.AsyncClient] = None,
    timeout: float = DEFAULT_TIMEOUT
) -> AnalysisResult:
    """
    Run one prompt against one provider.

    Args:
        prompt: Prompt text
        config: Provider configuration (credential and optional model)
        adapters: Adapter table keyed by provider identity
        client: HTTP client to use; a short-lived one is created if omitted
        timeout: Request timeout in seconds for a created client

    Returns:
        AnalysisResult with the extracted text or a classified failure
    """
    provider = config.provider
    adapter = adapters.get(provider)
    if adapter is None:
        return AnalysisResult.failure(
            ErrorKind.NO_PROVIDER_AVAILABLE,
            f"AI provider not supported: {provider.value}",
            provider=provider
        )

    if adapter.requires_user_credential:
        rejection = check_credential(provider, config.api_key)
        if rejection is not None:
            logger.error(f"❌ {rejection.detail}")
            return rejection
        credential = config.api_key.strip()
    else:
        credential = adapter.server_credential()
        if not credential:
            return AnalysisResult.failure(
                ErrorKind.MISSING_CREDENTIAL,
                "Gateway key (LOVABLE_API_KEY) is not configured on the server.",
                provider=provider
            )

    model = adapter.resolve_model(config.model)
    request = adapter.build_request(prompt, model, credential)
    logger.info(f"🔄 Connecting to {provider.value} (model: {model})")

    try:
        if client is None:
            async with httpx.AsyncClient(timeout=httpx.Timeout(timeout)) as owned_client:
                response = await owned_client.post(
                    request.url, headers=request.headers, params=request.params, json=request.body
                )
        else:
            response = await client.post(
                request.url, headers=request.headers, params=request.params, json=request.body
            )
    except httpx.TransportError as e:
        logger.error(f"❌ Connection error calling {provider.value}: {type(e).__name__}")
        return AnalysisResult.failure(
            ErrorKind.CONNECTIVITY_FAILURE,
            f"Connection error reaching {provider.value}. Check your internet connection "
            f"or whether the API is available.",
            provider=provider,
            model=model
        )

    if not response.is_success:
        result = classify_http_error(response.status_code, response.text, provider, model)
        logger.error(f"❌ Error {response.status_code} from {provider.value} API: {result.error.value}")
        return result

    try:
        payload = response.json()
    except ValueError:
        return AnalysisResult.failure(
            ErrorKind.MALFORMED_RESPONSE,
            f"Response from {provider.value} is not valid JSON",
            provider=provider,
            model=model
        )

    try:
        if not isinstance(payload, dict):
            raise ResponseFormatError(
                f"Unexpected response format from {provider.value}",
                provider_name=provider.value,
                error_code="malformed_response"
            )
        text = adapter.extract_text(payload)
    except ResponseFormatError as e:
        logger.error(f"❌ Failed to process response from {provider.value}: {e}")
        return AnalysisResult.failure(
            e.error_kind,
            f"Failed to process response from {provider.value}: {e}",
            provider=provider,
            model=model
        )

    logger.info(f"✅ Analysis completed via {provider.value}")
    return AnalysisResult.success(text, provider=provider, model=model)
