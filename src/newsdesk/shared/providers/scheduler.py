"""Reactivation scheduler — lifts elapsed quarantines on a fixed interval.

Lazy expiry already happens whenever availability is read; the scheduler
makes the same transition proactively so the status panel is fresh even when
no request has touched a provider.  Indefinite quarantines are left alone.
"""

from __future__ import annotations

import asyncio
import contextlib

import structlog

from newsdesk.shared.providers.health import HealthTracker

logger = structlog.get_logger(__name__)


class ReactivationScheduler:
    """Background asyncio task calling ``HealthTracker.expire_due``."""

    def __init__(self, health: HealthTracker, *, interval_s: float = 60.0) -> None:
        if interval_s <= 0:
            raise ValueError("interval_s must be positive")
        self._health = health
        self._interval = interval_s
        self._task: asyncio.Task[None] | None = None

    @property
    def interval_s(self) -> float:
        return self._interval

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def tick(self) -> list[str]:
        """Run one evaluation pass; returns the provider ids restored."""
        restored = self._health.expire_due()
        if restored:
            logger.info("scheduler_reactivated_providers", restored=restored)
        return restored

    def start(self) -> None:
        if self.running:
            return
        self._task = asyncio.get_running_loop().create_task(
            self._run(), name="provider-reactivation"
        )
        logger.info("reactivation_scheduler_started", interval_s=self._interval)

    async def stop(self) -> None:
        task, self._task = self._task, None
        if task is None:
            return
        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task
        logger.info("reactivation_scheduler_stopped")

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self._interval)
            try:
                self.tick()
            except Exception:
                logger.exception("reactivation_tick_failed")
