"""Domain enumerations for the provider orchestration layer."""

from __future__ import annotations

import enum


class ErrorKind(str, enum.Enum):
    """Classification of a failed generation attempt."""

    AUTHENTICATION_ERROR = "authentication_error"
    RATE_LIMITED = "rate_limited"
    TIMEOUT = "timeout"
    NETWORK_ERROR = "network_error"
    INVALID_RESPONSE = "invalid_response"
    # Request-level only; never recorded against a single provider.
    ALL_PROVIDERS_UNAVAILABLE = "all_providers_unavailable"

    @property
    def is_indefinite(self) -> bool:
        """Quarantine for this kind never expires on its own."""
        return self is ErrorKind.AUTHENTICATION_ERROR


class ProviderState(str, enum.Enum):
    """Availability of a provider for selection."""

    AVAILABLE = "available"
    QUARANTINED = "quarantined"
