"""Status reporter — read-only view of the fleet for the status panel."""

from __future__ import annotations

from newsdesk.domain.enums import ProviderState
from newsdesk.shared.providers.health import HealthTracker
from newsdesk.shared.providers.registry import ProviderRegistry
from newsdesk.shared.providers.types import ProviderStatus, StatusSummary


class StatusReporter:
    def __init__(self, registry: ProviderRegistry, health: HealthTracker) -> None:
        self._registry = registry
        self._health = health

    def snapshot(self) -> list[ProviderStatus]:
        """Providers in priority order with their current availability.

        Reading a record applies lazy expiry, exactly like ``is_available``.
        """
        now = self._health.now()
        rows: list[ProviderStatus] = []
        for provider in self._registry.list():
            record = self._health.record(provider.provider_id)
            retry_in = None
            if record.quarantined_until is not None:
                retry_in = round(max(record.quarantined_until - now, 0.0), 1)
            rows.append(
                ProviderStatus(
                    provider_id=provider.provider_id,
                    display_name=provider.display_name,
                    priority=provider.priority,
                    is_available=record.state == ProviderState.AVAILABLE,
                    state=record.state,
                    consecutive_failures=record.consecutive_failures,
                    last_error=record.last_error,
                    retry_in_s=retry_in,
                    description=provider.description,
                )
            )
        return rows

    def summary(self) -> StatusSummary:
        return StatusSummary(self.snapshot())

    def reactivate_all(self) -> list[str]:
        """Manual "reactivate all providers" action."""
        return self._health.reactivate_all()
