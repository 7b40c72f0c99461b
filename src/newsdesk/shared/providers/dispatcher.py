"""Dispatcher — the main entry-point for generation requests.

Walks the registry's priority order, skips disabled and quarantined
providers (a forced provider id bypasses the enabled set), invokes
each candidate under a bounded timeout and records every outcome with the
health tracker.  The first success wins; exhaustion is reported back to the
caller rather than retried against quarantined providers.

Caller cancellation propagates out of ``dispatch`` untouched and is never
recorded as a provider failure.
"""

from __future__ import annotations

import asyncio
import time

import structlog

from newsdesk.domain.enums import ErrorKind
from newsdesk.shared.observability.metrics import (
    DISPATCH_LATENCY,
    DISPATCH_TOTAL,
    PROVIDER_ATTEMPTS,
)
from newsdesk.shared.providers.classify import classify_error
from newsdesk.shared.providers.health import HealthTracker
from newsdesk.shared.providers.preferences import ProviderPreferences
from newsdesk.shared.providers.registry import ProviderRegistry
from newsdesk.shared.providers.types import (
    AttemptFailure,
    OrchestrationRequest,
    OrchestrationResult,
    Provider,
)

logger = structlog.get_logger(__name__)


class Dispatcher:
    """Priority failover across the registered providers."""

    def __init__(
        self,
        registry: ProviderRegistry,
        health: HealthTracker,
        *,
        timeout_s: float = 60.0,
        force_respects_quarantine: bool = False,
        preferences: ProviderPreferences | None = None,
    ) -> None:
        if timeout_s <= 0:
            raise ValueError("timeout_s must be positive")
        self._registry = registry
        self._health = health
        self._timeout_s = timeout_s
        self._force_respects_quarantine = force_respects_quarantine
        self._preferences = preferences

    @property
    def timeout_s(self) -> float:
        return self._timeout_s

    async def dispatch(self, request: OrchestrationRequest) -> OrchestrationResult:
        """Fulfil ``request`` with the first provider that succeeds.

        Returns:
            A successful result tagged with the provider id, or a result of
            kind ``all_providers_unavailable`` listing every failed attempt.
        """
        start = time.monotonic()
        attempts: list[AttemptFailure] = []

        chain, detail = self._build_chain(request)
        if not chain:
            return self._exhausted(attempts, start, detail)

        for provider in chain:
            result = await self._try_provider(provider, request, attempts)
            if result is not None:
                latency = time.monotonic() - start
                if attempts:
                    logger.info(
                        "provider_failover_success",
                        provider=provider.provider_id,
                        failed_providers=[a.provider_id for a in attempts],
                    )
                DISPATCH_TOTAL.labels(status="success").inc()
                DISPATCH_LATENCY.observe(latency)
                return OrchestrationResult.succeeded(
                    provider.provider_id, result.output, latency, attempts
                )

        return self._exhausted(attempts, start, None)

    # ── Candidate selection ──────────────────────────────────
    def _build_chain(
        self, request: OrchestrationRequest
    ) -> tuple[list[Provider], str | None]:
        """Ordered providers to try, plus a reason when the list is empty."""
        if request.force_provider_id:
            return self._forced_chain(request.force_provider_id)

        providers = self._registry.list()
        prefs = self._preferences
        enabled = [p for p in providers if prefs is None or prefs.is_enabled(p.provider_id)]
        if request.allow_quarantined:
            chain = list(enabled)
        else:
            chain = [p for p in enabled if self._health.is_available(p.provider_id)]

        if not chain:
            if not providers:
                reason = "no providers registered"
            elif not enabled:
                reason = "all providers disabled"
            else:
                reason = "all providers quarantined"
            return [], reason

        # Per-request preference wins over the operator default
        preferred = request.preferred_provider_id or (prefs.preferred_provider_id if prefs else None)
        if preferred:
            preferred_provider = next((p for p in chain if p.provider_id == preferred), None)
            if preferred_provider is not None:
                chain.remove(preferred_provider)
                chain.insert(0, preferred_provider)

        return chain, None

    def _forced_chain(self, provider_id: str) -> tuple[list[Provider], str | None]:
        if provider_id not in self._registry:
            return [], f"forced provider {provider_id!r} is not registered"
        if self._force_respects_quarantine and not self._health.is_available(provider_id):
            return [], f"forced provider {provider_id!r} is quarantined"
        return [self._registry.get(provider_id)], None

    # ── Single attempt ───────────────────────────────────────
    async def _try_provider(
        self,
        provider: Provider,
        request: OrchestrationRequest,
        attempts: list[AttemptFailure],
    ) -> _Attempt | None:
        pid = provider.provider_id
        timeout = provider.timeout_s or self._timeout_s
        log = logger.bind(provider=pid, attempt=len(attempts) + 1)

        start = time.monotonic()
        try:
            output = await asyncio.wait_for(provider.invoke(request.payload), timeout=timeout)
        except asyncio.TimeoutError:
            latency = time.monotonic() - start
            self._record_failure(pid, ErrorKind.TIMEOUT, None, f"Timeout after {timeout}s", latency, attempts)
            log.warning("provider_timeout", timeout_s=timeout)
            return None
        except Exception as exc:
            latency = time.monotonic() - start
            kind, retry_after = classify_error(exc)
            message = f"{type(exc).__name__}: {exc}"
            self._record_failure(pid, kind, retry_after, message, latency, attempts)
            log.warning(
                "provider_request_failed",
                error_kind=kind.value,
                error=message,
                latency_ms=round(latency * 1000, 1),
            )
            return None

        latency = time.monotonic() - start
        self._health.record_success(pid)
        PROVIDER_ATTEMPTS.labels(provider=pid, outcome="success").inc()
        log.info("provider_request_success", latency_ms=round(latency * 1000, 1))
        return _Attempt(output)

    def _record_failure(
        self,
        provider_id: str,
        kind: ErrorKind,
        retry_after: float | None,
        message: str,
        latency: float,
        attempts: list[AttemptFailure],
    ) -> None:
        self._health.record_failure(provider_id, kind, retry_after=retry_after)
        PROVIDER_ATTEMPTS.labels(provider=provider_id, outcome=kind.value).inc()
        attempts.append(AttemptFailure(provider_id, kind, message, latency))

    def _exhausted(
        self,
        attempts: list[AttemptFailure],
        start: float,
        detail: str | None,
    ) -> OrchestrationResult:
        latency = time.monotonic() - start
        DISPATCH_TOTAL.labels(status=ErrorKind.ALL_PROVIDERS_UNAVAILABLE.value).inc()
        DISPATCH_LATENCY.observe(latency)
        logger.error(
            "all_providers_unavailable",
            attempted={a.provider_id: a.error_kind.value for a in attempts},
            detail=detail,
        )
        return OrchestrationResult.unavailable(attempts, latency, detail)


class _Attempt:
    """Wraps a provider's output so that ``None`` remains a valid result."""

    __slots__ = ("output",)

    def __init__(self, output: object) -> None:
        self.output = output
