"""Dependency wiring — builds the orchestrator and exposes it to routes.

The orchestrator is created once in the application lifespan and kept on
``app.state``; route handlers receive it through ``Depends()`` instead of
reaching for a module-level instance.
"""

from __future__ import annotations

from dataclasses import dataclass

import httpx
from fastapi import Request

from newsdesk.adapters.outbound.llm import build_providers
from newsdesk.application.services import DraftGenerationService
from newsdesk.config import Settings
from newsdesk.shared.providers import ProviderOrchestrator, QuarantinePolicy


@dataclass
class Runtime:
    """Everything the lifespan owns and must close on shutdown."""

    orchestrator: ProviderOrchestrator
    http_client: httpx.AsyncClient | None = None

    async def close(self) -> None:
        await self.orchestrator.stop()
        if self.http_client is not None:
            await self.http_client.aclose()


def build_policy(settings: Settings) -> QuarantinePolicy:
    return QuarantinePolicy(
        network_base_s=settings.quarantine_network_s,
        backoff_factor=settings.quarantine_backoff_factor,
        max_s=settings.quarantine_max_s,
        rate_limit_default_s=settings.quarantine_rate_limit_s,
        invalid_response_s=settings.quarantine_invalid_response_s,
    )


def build_runtime(settings: Settings) -> Runtime:
    """Create the HTTP client, provider fleet and orchestrator from settings."""
    client = httpx.AsyncClient(timeout=settings.provider_timeout_seconds)
    orchestrator = ProviderOrchestrator(
        build_providers(settings, client),
        policy=build_policy(settings),
        timeout_s=settings.provider_timeout_seconds,
        reactivation_interval_s=settings.reactivation_interval_seconds,
        force_respects_quarantine=settings.force_respects_quarantine,
    )
    return Runtime(orchestrator=orchestrator, http_client=client)


# ── Request-scoped accessors ─────────────────────────────────
def get_settings_dep(request: Request) -> Settings:
    return request.app.state.settings  # type: ignore[no-any-return]


def get_orchestrator(request: Request) -> ProviderOrchestrator:
    return request.app.state.runtime.orchestrator  # type: ignore[no-any-return]


def get_draft_service(request: Request) -> DraftGenerationService:
    return DraftGenerationService(get_orchestrator(request))
