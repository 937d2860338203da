"""
Completion service routes.

POST /completions answers a trigger event; POST /completions/prefetch warms
the cache for a likely-next request; POST /warmup prepares the backend;
POST /model/download starts the one user-requested model download.
"""

import structlog
from fastapi import APIRouter, Depends, HTTPException, status

from inline_completion.api.dependencies import (
    get_ollama_backend,
    get_orchestrator,
    get_provider_info,
    get_settings,
)
from inline_completion.api.models import (
    CompletionRequestPayload,
    CompletionResponsePayload,
    HealthResponse,
    ModelDownloadResponse,
    ProviderInfo,
    WarmupRequest,
    WarmupResponse,
)
from inline_completion.completion.orchestrator import CompletionOrchestrator
from inline_completion.completion.prefetch import should_prefetch_for_key
from inline_completion.completion.session_scope import derive_session_scope
from inline_completion.config import Settings
from inline_completion.llm.exceptions import CompletionError
from inline_completion.llm.ollama_backend import OllamaBackend
from inline_completion.models.completion_models import CompletionOptions
from inline_completion.models.enums import Availability

logger = structlog.get_logger(__name__)

router = APIRouter()


def _options(payload: CompletionRequestPayload) -> CompletionOptions:
    return CompletionOptions(
        response_timeout_ms=payload.response_timeout_ms,
        max_suggestions=payload.max_suggestions,
    )


@router.post(
    "/completions",
    response_model=CompletionResponsePayload,
    response_model_exclude_none=True,
    summary="Generate inline completions",
    description="""
    Ranked insertion strings for the caret position.
    
    Supersedes any completion still in flight: the older call answers with an
    empty suggestion list.
    """,
    responses={
        200: {"description": "Suggestions (possibly empty)"},
        499: {"description": "Aborted"},
        502: {"description": "Provider error"},
        503: {"description": "Backend not available, not downloaded or downloading"},
        504: {"description": "Backend timed out"},
    },
)
async def generate_completions(
    payload: CompletionRequestPayload,
    orchestrator: CompletionOrchestrator = Depends(get_orchestrator),
    provider_info: ProviderInfo = Depends(get_provider_info),
) -> CompletionResponsePayload:
    suggestions = await orchestrator.generate_completions(payload.to_request(), _options(payload))
    return CompletionResponsePayload(suggestions=suggestions, provider=provider_info)


@router.post(
    "/completions/prefetch",
    response_model=CompletionResponsePayload,
    response_model_exclude_none=True,
    summary="Prefetch completions into the cache",
)
async def prefetch_completions(
    payload: CompletionRequestPayload,
    orchestrator: CompletionOrchestrator = Depends(get_orchestrator),
    provider_info: ProviderInfo = Depends(get_provider_info),
) -> CompletionResponsePayload:
    request = payload.to_request()
    if payload.trigger_key is not None and not should_prefetch_for_key(payload.trigger_key, request.text_before):
        logger.debug("Prefetch skipped", trigger_key=payload.trigger_key)
        return CompletionResponsePayload(suggestions=[], provider=provider_info)
    suggestions = await orchestrator.prefetch_completions(request, _options(payload))
    return CompletionResponsePayload(suggestions=suggestions, provider=provider_info)


@router.post(
    "/warmup",
    response_model=WarmupResponse,
    response_model_exclude_none=True,
    summary="Check availability or pre-create a backend session",
)
async def warmup(
    payload: WarmupRequest,
    orchestrator: CompletionOrchestrator = Depends(get_orchestrator),
    provider_info: ProviderInfo = Depends(get_provider_info),
) -> WarmupResponse:
    """
    Warm up the backend.
    
    Never fails the HTTP call: problems are reported as ok=false, the same
    way the client treats an unavailable backend.
    """
    scope = payload.scope or derive_session_scope(payload.url, payload.page_title)
    try:
        availability = await orchestrator.warmup(payload.phase, scope)
    except CompletionError as e:
        logger.debug("Warmup request failed", status=e.status.value, error=e.message)
        return WarmupResponse(ok=False, provider=provider_info)
    return WarmupResponse(
        ok=availability is Availability.AVAILABLE,
        provider=provider_info,
        availability=availability,
        scope=scope,
    )


@router.post(
    "/model/download",
    response_model=ModelDownloadResponse,
    summary="Download the local model (explicit user action)",
    responses={
        409: {"description": "Local provider not configured"},
        502: {"description": "Download failed"},
    },
)
async def download_model(
    settings: Settings = Depends(get_settings),
    backend: OllamaBackend = Depends(get_ollama_backend),
) -> ModelDownloadResponse:
    if settings.PROVIDER != "local":
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Model download is only available for the local provider",
        )
    availability = await backend.availability()
    if availability is Availability.AVAILABLE:
        return ModelDownloadResponse(status="already_available", model=backend.model)
    if availability is Availability.DOWNLOADING:
        return ModelDownloadResponse(status="downloading", model=backend.model)
    await backend.pull_model()
    return ModelDownloadResponse(status="downloaded", model=backend.model)


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Service health check",
    responses={
        200: {"description": "Service healthy or degraded"},
    },
)
async def health_check(
    orchestrator: CompletionOrchestrator = Depends(get_orchestrator),
    settings: Settings = Depends(get_settings),
) -> HealthResponse:
    """
    Report backend availability without creating sessions.
    
    "degraded" means the service runs but completions will fail until the
    model is downloaded or the backend comes back.
    """
    availability = await orchestrator.provider.availability()
    healthy = availability is Availability.AVAILABLE
    return HealthResponse(
        status="healthy" if healthy else "degraded",
        version=settings.APP_VERSION,
        services={
            "provider": orchestrator.provider.name,
            "backend": availability.value,
        },
    )
