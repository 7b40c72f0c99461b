"""Provider orchestrator — composes registry, health, dispatch and scheduling.

One instance is built at application startup and handed to whichever
service issues generation requests::

    orchestrator = ProviderOrchestrator(providers, policy=QuarantinePolicy())
    await orchestrator.start()
    result = await orchestrator.dispatch(OrchestrationRequest(payload=prompt))
    ...
    await orchestrator.stop()
"""

from __future__ import annotations

import time
from typing import Iterable

import structlog

from newsdesk.domain.exceptions import ProviderDisabledError
from newsdesk.shared.providers.dispatcher import Dispatcher
from newsdesk.shared.providers.health import Clock, HealthTracker
from newsdesk.shared.providers.policy import QuarantinePolicy
from newsdesk.shared.providers.preferences import ProviderPreferences
from newsdesk.shared.providers.registry import ProviderRegistry
from newsdesk.shared.providers.scheduler import ReactivationScheduler
from newsdesk.shared.providers.status import StatusReporter
from newsdesk.shared.providers.types import (
    OrchestrationRequest,
    OrchestrationResult,
    Provider,
    ProviderPreferencesView,
    ProviderStatus,
    StatusSummary,
)

logger = structlog.get_logger(__name__)


class ProviderOrchestrator:
    """Owns the provider fleet state for the lifetime of the process."""

    def __init__(
        self,
        providers: Iterable[Provider] | ProviderRegistry,
        *,
        policy: QuarantinePolicy | None = None,
        timeout_s: float = 60.0,
        reactivation_interval_s: float = 60.0,
        force_respects_quarantine: bool = False,
        clock: Clock = time.monotonic,
    ) -> None:
        if isinstance(providers, ProviderRegistry):
            self._registry = providers
        else:
            self._registry = ProviderRegistry(providers)
        self._registry.freeze()

        self._health = HealthTracker(self._registry.ids, policy=policy, clock=clock)
        self._preferences = ProviderPreferences(self._registry)
        self._dispatcher = Dispatcher(
            self._registry,
            self._health,
            timeout_s=timeout_s,
            force_respects_quarantine=force_respects_quarantine,
            preferences=self._preferences,
        )
        self._scheduler = ReactivationScheduler(self._health, interval_s=reactivation_interval_s)
        self._status = StatusReporter(self._registry, self._health)

    # ── Components ───────────────────────────────────────────
    @property
    def registry(self) -> ProviderRegistry:
        return self._registry

    @property
    def health(self) -> HealthTracker:
        return self._health

    @property
    def preferences(self) -> ProviderPreferences:
        return self._preferences

    @property
    def scheduler(self) -> ReactivationScheduler:
        return self._scheduler

    # ── Lifecycle ────────────────────────────────────────────
    async def start(self) -> None:
        self._scheduler.start()
        logger.info("orchestrator_started", providers=self._registry.ids)

    async def stop(self) -> None:
        await self._scheduler.stop()
        logger.info("orchestrator_stopped")

    # ── Public surface ───────────────────────────────────────
    async def dispatch(self, request: OrchestrationRequest) -> OrchestrationResult:
        return await self._dispatcher.dispatch(request)

    def snapshot(self) -> list[ProviderStatus]:
        return self._status.snapshot()

    def summary(self) -> StatusSummary:
        return self._status.summary()

    def reactivate_all(self) -> list[str]:
        return self._status.reactivate_all()

    # ── Operator preferences ─────────────────────────────────
    def provider_config(self) -> ProviderPreferencesView:
        return self._preferences.view()

    def update_provider_config(
        self,
        enabled: dict[str, bool] | None = None,
        *,
        preferred_provider_id: str | None = None,
        clear_preferred: bool = False,
    ) -> ProviderPreferencesView:
        """Apply enable/disable toggles, then the preferred provider change.

        Toggles land first so a provider can be enabled and made preferred
        in one call.  A preferred provider that would end up disabled is
        rejected before anything changes.
        """
        enabled = enabled or {}
        if preferred_provider_id is not None and not clear_preferred:
            self._registry.get(preferred_provider_id)
            will_be_enabled = enabled.get(
                preferred_provider_id, self._preferences.is_enabled(preferred_provider_id)
            )
            if not will_be_enabled:
                raise ProviderDisabledError(preferred_provider_id)
        if enabled:
            self._preferences.update(enabled)
        if clear_preferred:
            self._preferences.set_preferred(None)
        elif preferred_provider_id is not None:
            self._preferences.set_preferred(preferred_provider_id)
        return self._preferences.view()

    def set_preferred_provider(self, provider_id: str | None) -> None:
        self._preferences.set_preferred(provider_id)

    def reset_preferences(self) -> ProviderPreferencesView:
        self._preferences.reset()
        return self._preferences.view()
