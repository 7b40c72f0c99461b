"""Health, Generation, Provider Status and Configuration — REST routers."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from starlette.responses import Response

from newsdesk.application.dtos import (
    ErrorResponse,
    GenerateJsonResponse,
    GenerateRequest,
    GenerateResponse,
    HealthResponse,
    ProvidersConfigResponse,
    ReactivateResponse,
    StatusSummaryResponse,
    UpdateProvidersConfigRequest,
)
from newsdesk.application.services import DraftGenerationService
from newsdesk.config import Settings
from newsdesk.dependencies import get_draft_service, get_orchestrator, get_settings_dep
from newsdesk.shared.providers import ProviderOrchestrator


# ═══════════════════════════════════════════════════════════════
#  Health
# ═══════════════════════════════════════════════════════════════
health_router = APIRouter(tags=["Health"])


@health_router.get("/health", response_model=HealthResponse)
async def health_check(
    settings: Settings = Depends(get_settings_dep),
    orchestrator: ProviderOrchestrator = Depends(get_orchestrator),
) -> HealthResponse:
    summary = orchestrator.summary()
    if summary.total_count == 0 or summary.all_providers_down:
        overall = "degraded"
    else:
        overall = "ok"
    return HealthResponse(
        status=overall,
        environment=settings.app_env.value,
        providers_available=summary.available_count,
        providers_total=summary.total_count,
    )


@health_router.get("/metrics")
async def metrics() -> Response:
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)


# ═══════════════════════════════════════════════════════════════
#  Generation
# ═══════════════════════════════════════════════════════════════
ai_router = APIRouter(prefix="/ai", tags=["AI Generation"])


@ai_router.post(
    "/generate",
    response_model=GenerateResponse,
    responses={503: {"model": ErrorResponse}},
)
async def generate(
    body: GenerateRequest,
    service: DraftGenerationService = Depends(get_draft_service),
) -> GenerateResponse:
    draft = await service.generate(
        body.prompt,
        force_provider_id=body.force_provider_id,
        allow_quarantined=body.allow_quarantined,
        preferred_provider_id=body.preferred_provider_id,
    )
    return GenerateResponse(
        text=draft.text,
        used_provider=draft.provider_id,
        latency_ms=round(draft.latency_s * 1000, 1),
    )


@ai_router.post(
    "/generate-json",
    response_model=GenerateJsonResponse,
    responses={502: {"model": ErrorResponse}, 503: {"model": ErrorResponse}},
)
async def generate_json(
    body: GenerateRequest,
    service: DraftGenerationService = Depends(get_draft_service),
) -> GenerateJsonResponse:
    data, draft = await service.generate_json(
        body.prompt,
        force_provider_id=body.force_provider_id,
        allow_quarantined=body.allow_quarantined,
        preferred_provider_id=body.preferred_provider_id,
    )
    return GenerateJsonResponse(
        data=data,
        used_provider=draft.provider_id,
        latency_ms=round(draft.latency_s * 1000, 1),
    )


# ═══════════════════════════════════════════════════════════════
#  Provider Status
# ═══════════════════════════════════════════════════════════════
providers_router = APIRouter(prefix="/providers", tags=["Provider Status"])


@providers_router.get("/status", response_model=StatusSummaryResponse)
async def provider_status(
    settings: Settings = Depends(get_settings_dep),
    orchestrator: ProviderOrchestrator = Depends(get_orchestrator),
) -> StatusSummaryResponse:
    """Snapshot for the status panel, polled every ``poll_interval_s``."""
    return StatusSummaryResponse.from_summary(
        orchestrator.summary(), settings.status_poll_interval_seconds
    )


@providers_router.post("/reactivate", response_model=ReactivateResponse)
async def reactivate_all(
    orchestrator: ProviderOrchestrator = Depends(get_orchestrator),
) -> ReactivateResponse:
    """Manual "reactivate all providers" action."""
    return ReactivateResponse(restored=orchestrator.reactivate_all())


@providers_router.get("/config", response_model=ProvidersConfigResponse)
async def provider_config(
    orchestrator: ProviderOrchestrator = Depends(get_orchestrator),
) -> ProvidersConfigResponse:
    """Enabled flags and the preferred provider, for the configuration panel."""
    return ProvidersConfigResponse.from_view(orchestrator.provider_config())


@providers_router.put(
    "/config",
    response_model=ProvidersConfigResponse,
    responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
async def update_provider_config(
    body: UpdateProvidersConfigRequest,
    orchestrator: ProviderOrchestrator = Depends(get_orchestrator),
) -> ProvidersConfigResponse:
    view = orchestrator.update_provider_config(
        body.enabled,
        preferred_provider_id=body.preferred_provider_id,
        clear_preferred=body.clears_preferred,
    )
    return ProvidersConfigResponse.from_view(view)


@providers_router.post("/config/reset", response_model=ProvidersConfigResponse)
async def reset_provider_config(
    orchestrator: ProviderOrchestrator = Depends(get_orchestrator),
) -> ProvidersConfigResponse:
    """Every provider enabled again, no preferred provider."""
    return ProvidersConfigResponse.from_view(orchestrator.reset_preferences())
