"""Domain-specific exception hierarchy.

All exceptions inherit from ``DomainError`` so callers can catch the entire
family in one clause while still discriminating on subclass.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from newsdesk.domain.enums import ErrorKind

if TYPE_CHECKING:
    from newsdesk.shared.providers.types import AttemptFailure


class DomainError(Exception):
    """Base class for all domain-layer errors."""

    def __init__(self, message: str, *, code: str = "DOMAIN_ERROR") -> None:
        self.message = message
        self.code = code
        super().__init__(message)


# ── Configuration ────────────────────────────────────────────
class ConfigurationError(DomainError):
    """Provider fleet was configured inconsistently at startup."""

    def __init__(self, message: str) -> None:
        super().__init__(message, code="CONFIGURATION_ERROR")


class UnknownProviderError(DomainError):
    def __init__(self, provider_id: str) -> None:
        self.provider_id = provider_id
        super().__init__(f"Provider {provider_id!r} is not registered", code="UNKNOWN_PROVIDER")


class ProviderDisabledError(DomainError):
    """Operation needs an enabled provider but the operator disabled it."""

    def __init__(self, provider_id: str) -> None:
        self.provider_id = provider_id
        super().__init__(
            f"Provider {provider_id!r} is disabled and cannot be preferred",
            code="PROVIDER_DISABLED",
        )


# ── Single provider attempt ──────────────────────────────────
class ProviderError(DomainError):
    """A single provider attempt failed.

    Adapters raise one of the subclasses so the dispatcher can pick the
    matching quarantine window without inspecting transport details.
    """

    kind: ErrorKind = ErrorKind.NETWORK_ERROR

    def __init__(self, provider_id: str, message: str) -> None:
        self.provider_id = provider_id
        super().__init__(f"[{provider_id}] {message}", code=self.kind.value.upper())


class ProviderAuthenticationError(ProviderError):
    kind = ErrorKind.AUTHENTICATION_ERROR


class ProviderRateLimitedError(ProviderError):
    kind = ErrorKind.RATE_LIMITED

    def __init__(
        self, provider_id: str, message: str, *, retry_after: float | None = None
    ) -> None:
        self.retry_after = retry_after
        super().__init__(provider_id, message)


class ProviderTimeoutError(ProviderError):
    kind = ErrorKind.TIMEOUT


class ProviderNetworkError(ProviderError):
    kind = ErrorKind.NETWORK_ERROR


class InvalidProviderResponseError(ProviderError):
    kind = ErrorKind.INVALID_RESPONSE


# ── Request failure ──────────────────────────────────────────
class AllProvidersUnavailableError(DomainError):
    """No provider could fulfil the request."""

    def __init__(self, attempts: list[AttemptFailure], detail: str | None = None) -> None:
        self.attempts = attempts
        self.detail = detail
        if attempts:
            tried = ", ".join(f"{a.provider_id}={a.error_kind.value}" for a in attempts)
            message = f"All providers unavailable (attempted: {tried})"
        else:
            message = f"All providers unavailable ({detail or 'no candidates'})"
        super().__init__(message, code="ALL_PROVIDERS_UNAVAILABLE")
