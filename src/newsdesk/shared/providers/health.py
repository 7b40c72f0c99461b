"""Per-provider health tracker with quarantine and lazy expiry.

Each provider owns one ``_HealthCell`` guarded by its own lock, so updates to
unrelated providers never contend.  Reading availability may resolve an
expired quarantine as a side effect; the reactivation scheduler performs the
same transition proactively through ``expire_due``.
"""

from __future__ import annotations

import threading
import time
from typing import Callable, Iterable

import structlog

from newsdesk.domain.enums import ErrorKind, ProviderState
from newsdesk.domain.exceptions import UnknownProviderError
from newsdesk.shared.observability.metrics import (
    PROVIDER_AVAILABLE,
    PROVIDER_QUARANTINES,
    PROVIDER_REACTIVATIONS,
)
from newsdesk.shared.providers.policy import QuarantinePolicy
from newsdesk.shared.providers.types import HealthRecord

logger = structlog.get_logger(__name__)

Clock = Callable[[], float]


class _HealthCell:
    """Mutable record for one provider. Every field is guarded by ``lock``."""

    __slots__ = ("provider_id", "lock", "state", "quarantined_until", "consecutive_failures", "last_error")

    def __init__(self, provider_id: str) -> None:
        self.provider_id = provider_id
        self.lock = threading.Lock()
        self.state = ProviderState.AVAILABLE
        self.quarantined_until: float | None = None
        self.consecutive_failures = 0
        self.last_error: ErrorKind | None = None

    def expire_if_due(self, now: float) -> bool:
        """Caller holds lock. Returns True when a quarantine was lifted."""
        if (
            self.state == ProviderState.QUARANTINED
            and self.quarantined_until is not None
            and now >= self.quarantined_until
        ):
            self.state = ProviderState.AVAILABLE
            self.quarantined_until = None
            return True
        return False

    def snapshot(self) -> HealthRecord:
        """Caller holds lock."""
        return HealthRecord(
            provider_id=self.provider_id,
            state=self.state,
            quarantined_until=self.quarantined_until,
            consecutive_failures=self.consecutive_failures,
            last_error=self.last_error,
        )


class HealthTracker:
    """Thread-safe availability state for a fixed set of providers."""

    def __init__(
        self,
        provider_ids: Iterable[str],
        *,
        policy: QuarantinePolicy | None = None,
        clock: Clock = time.monotonic,
    ) -> None:
        self._policy = policy or QuarantinePolicy()
        self._clock = clock
        # Built once; the dict itself is never mutated afterwards.
        self._cells: dict[str, _HealthCell] = {pid: _HealthCell(pid) for pid in provider_ids}
        for pid in self._cells:
            PROVIDER_AVAILABLE.labels(provider=pid).set(1)

    @property
    def policy(self) -> QuarantinePolicy:
        return self._policy

    @property
    def provider_ids(self) -> list[str]:
        return list(self._cells)

    def now(self) -> float:
        return self._clock()

    # ── Queries ──────────────────────────────────────────────
    def is_available(self, provider_id: str) -> bool:
        cell = self._cell(provider_id)
        with cell.lock:
            if cell.expire_if_due(self._clock()):
                self._on_reactivated(cell, "lazy")
            return cell.state == ProviderState.AVAILABLE

    def record(self, provider_id: str) -> HealthRecord:
        """Snapshot of one provider, after applying lazy expiry."""
        cell = self._cell(provider_id)
        with cell.lock:
            if cell.expire_if_due(self._clock()):
                self._on_reactivated(cell, "lazy")
            return cell.snapshot()

    def records(self) -> list[HealthRecord]:
        return [self.record(pid) for pid in self._cells]

    # ── Outcome recording ────────────────────────────────────
    def record_success(self, provider_id: str) -> None:
        cell = self._cell(provider_id)
        with cell.lock:
            was_quarantined = cell.state == ProviderState.QUARANTINED
            cell.state = ProviderState.AVAILABLE
            cell.quarantined_until = None
            cell.consecutive_failures = 0
            if was_quarantined:
                self._on_reactivated(cell, "success")

    def record_failure(
        self,
        provider_id: str,
        error_kind: ErrorKind,
        *,
        retry_after: float | None = None,
    ) -> HealthRecord:
        """Quarantine a provider after a failed attempt and return its new record."""
        cell = self._cell(provider_id)
        with cell.lock:
            cell.consecutive_failures += 1
            cell.last_error = error_kind
            duration = self._policy.duration_for(
                error_kind, cell.consecutive_failures, retry_after
            )
            cell.state = ProviderState.QUARANTINED
            cell.quarantined_until = None if duration is None else self._clock() + duration
            record = cell.snapshot()

        PROVIDER_QUARANTINES.labels(provider=provider_id, error_kind=error_kind.value).inc()
        PROVIDER_AVAILABLE.labels(provider=provider_id).set(0)
        logger.warning(
            "provider_quarantined",
            provider=provider_id,
            error_kind=error_kind.value,
            consecutive_failures=record.consecutive_failures,
            duration_s=duration,
            indefinite=duration is None,
        )
        return record

    # ── Restoration ──────────────────────────────────────────
    def expire_due(self) -> list[str]:
        """Lift every elapsed, finite quarantine. Returns the restored ids."""
        restored: list[str] = []
        for cell in self._cells.values():
            with cell.lock:
                if cell.expire_if_due(self._clock()):
                    self._on_reactivated(cell, "scheduler")
                    restored.append(cell.provider_id)
        return restored

    def reactivate_all(self) -> list[str]:
        """Manual override: every provider becomes available immediately."""
        restored: list[str] = []
        for cell in self._cells.values():
            with cell.lock:
                if cell.state == ProviderState.QUARANTINED:
                    restored.append(cell.provider_id)
                cell.state = ProviderState.AVAILABLE
                cell.quarantined_until = None
                cell.consecutive_failures = 0
                PROVIDER_AVAILABLE.labels(provider=cell.provider_id).set(1)
        for pid in restored:
            PROVIDER_REACTIVATIONS.labels(provider=pid, trigger="manual").inc()
        logger.info("providers_reactivated_manually", restored=restored)
        return restored

    # ── Internals ────────────────────────────────────────────
    def _cell(self, provider_id: str) -> _HealthCell:
        try:
            return self._cells[provider_id]
        except KeyError:
            raise UnknownProviderError(provider_id) from None

    @staticmethod
    def _on_reactivated(cell: _HealthCell, trigger: str) -> None:
        """Caller holds lock."""
        PROVIDER_REACTIVATIONS.labels(provider=cell.provider_id, trigger=trigger).inc()
        PROVIDER_AVAILABLE.labels(provider=cell.provider_id).set(1)
        logger.info(
            "provider_reactivated",
            provider=cell.provider_id,
            trigger=trigger,
            consecutive_failures=cell.consecutive_failures,
        )
