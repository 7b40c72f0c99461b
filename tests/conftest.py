"""Shared test fixtures."""

from __future__ import annotations

import asyncio
import os
import sys
from typing import Any, Callable

import pytest

# Add src to path so imports work without an editable install
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "../src")))

from newsdesk.shared.providers.types import Provider


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class ScriptedBackend:
    """Async provider invoke that follows a script of outcomes.

    Each entry is either a value to return, an exception to raise, or the
    string ``"hang"`` to sleep past any reasonable timeout.  The last entry
    repeats once the script is exhausted.
    """

    def __init__(self, name: str, *outcomes: Any) -> None:
        self.name = name
        self.outcomes = list(outcomes) or [f"ok:{name}"]
        self.calls: list[Any] = []

    async def __call__(self, payload: Any) -> Any:
        self.calls.append(payload)
        idx = min(len(self.calls) - 1, len(self.outcomes) - 1)
        outcome = self.outcomes[idx]
        if outcome == "hang":
            await asyncio.sleep(10)
            return f"late:{self.name}"
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome

    @property
    def call_count(self) -> int:
        return len(self.calls)


def make_provider(
    provider_id: str,
    priority: int,
    backend: Callable[[Any], Any] | None = None,
    **kwargs: Any,
) -> Provider:
    return Provider(
        provider_id=provider_id,
        display_name=provider_id.title(),
        priority=priority,
        invoke=backend or ScriptedBackend(provider_id),
        **kwargs,
    )


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def backends() -> dict[str, ScriptedBackend]:
    return {
        "alpha": ScriptedBackend("alpha"),
        "beta": ScriptedBackend("beta"),
        "gamma": ScriptedBackend("gamma"),
    }


@pytest.fixture
def providers(backends: dict[str, ScriptedBackend]) -> list[Provider]:
    return [
        make_provider("alpha", 1, backends["alpha"]),
        make_provider("beta", 2, backends["beta"]),
        make_provider("gamma", 3, backends["gamma"]),
    ]
