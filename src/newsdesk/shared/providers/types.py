"""Core types for the provider orchestration layer."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable

from newsdesk.domain.enums import ErrorKind, ProviderState
from newsdesk.domain.exceptions import AllProvidersUnavailableError

InvokeFn = Callable[[Any], Awaitable[Any]]


@dataclass(frozen=True)
class Provider:
    """A registered generation backend.

    Attributes:
        provider_id:   Stable identifier (e.g. "gemini", "openrouter").
        display_name:  Human-readable label for the status panel.
        priority:      Lower = tried first.
        invoke:        Async callable receiving the opaque request payload.
        alias_of:      Id of the provider whose priority this one
                       intentionally shares (documented aliasing).
        timeout_s:     Per-attempt timeout override (None = dispatcher default).
        description:   Free text shown next to the provider in the UI.
        requires_api_key: Whether the backend needs a credential to be configured.
    """

    provider_id: str
    display_name: str
    priority: int
    invoke: InvokeFn = field(compare=False, repr=False)
    alias_of: str | None = None
    timeout_s: float | None = None
    description: str = ""
    requires_api_key: bool = True


@dataclass(frozen=True)
class HealthRecord:
    """Read-only copy of a provider's health at one instant."""

    provider_id: str
    state: ProviderState = ProviderState.AVAILABLE
    quarantined_until: float | None = None
    consecutive_failures: int = 0
    last_error: ErrorKind | None = None

    @property
    def indefinitely_quarantined(self) -> bool:
        return self.state == ProviderState.QUARANTINED and self.quarantined_until is None


@dataclass(frozen=True)
class OrchestrationRequest:
    """One generation request as handed to the dispatcher.

    ``payload`` is passed through to ``Provider.invoke`` untouched.
    """

    payload: Any
    force_provider_id: str | None = None
    allow_quarantined: bool = False
    preferred_provider_id: str | None = None


@dataclass(frozen=True)
class AttemptFailure:
    """Diagnostics for one failed provider attempt."""

    provider_id: str
    error_kind: ErrorKind
    message: str
    latency_s: float = 0.0


@dataclass
class OrchestrationResult:
    success: bool
    provider_id: str | None = None
    latency_s: float = 0.0
    output: Any = None
    error_kind: ErrorKind | None = None
    attempts: list[AttemptFailure] = field(default_factory=list)
    detail: str | None = None

    @classmethod
    def succeeded(
        cls,
        provider_id: str,
        output: Any,
        latency_s: float,
        attempts: list[AttemptFailure],
    ) -> OrchestrationResult:
        return cls(
            success=True,
            provider_id=provider_id,
            output=output,
            latency_s=latency_s,
            attempts=attempts,
        )

    @classmethod
    def unavailable(
        cls,
        attempts: list[AttemptFailure],
        latency_s: float,
        detail: str | None = None,
    ) -> OrchestrationResult:
        return cls(
            success=False,
            error_kind=ErrorKind.ALL_PROVIDERS_UNAVAILABLE,
            attempts=attempts,
            latency_s=latency_s,
            detail=detail,
        )

    @property
    def candidates_empty(self) -> bool:
        """True when the request failed without invoking any provider."""
        return not self.success and not self.attempts

    def raise_for_failure(self) -> OrchestrationResult:
        """Return self on success, raise ``AllProvidersUnavailableError`` otherwise."""
        if not self.success:
            raise AllProvidersUnavailableError(list(self.attempts), self.detail)
        return self


@dataclass(frozen=True)
class ProviderStatus:
    """One row of the status panel."""

    provider_id: str
    display_name: str
    priority: int
    is_available: bool
    state: ProviderState
    consecutive_failures: int = 0
    last_error: ErrorKind | None = None
    retry_in_s: float | None = None
    description: str = ""


@dataclass(frozen=True)
class StatusSummary:
    providers: list[ProviderStatus]

    @property
    def total_count(self) -> int:
        return len(self.providers)

    @property
    def available_count(self) -> int:
        return sum(1 for p in self.providers if p.is_available)

    @property
    def all_providers_down(self) -> bool:
        return self.total_count > 0 and self.available_count == 0


@dataclass(frozen=True)
class ProviderConfig:
    """One row of the provider configuration panel."""

    provider_id: str
    display_name: str
    priority: int
    is_enabled: bool
    requires_api_key: bool = True
    description: str = ""


@dataclass(frozen=True)
class ProviderPreferencesView:
    providers: list[ProviderConfig]
    preferred_provider_id: str | None = None
