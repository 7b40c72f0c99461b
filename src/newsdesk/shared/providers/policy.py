"""Quarantine policy — maps a failure classification to a penalty window.

    authentication_error  → indefinite (manual reactivation only)
    rate_limited          → provider Retry-After (uncapped), else default window
    timeout/network_error → base * factor^(n-1), capped
    invalid_response      → short fixed window
"""

from __future__ import annotations

from dataclasses import dataclass

from newsdesk.domain.enums import ErrorKind
from newsdesk.domain.exceptions import ConfigurationError

_MIN_WINDOW_S = 0.001


@dataclass(frozen=True)
class QuarantinePolicy:
    """Quarantine durations in seconds.

    Attributes:
        network_base_s:      First timeout/network penalty.
        backoff_factor:      Growth per additional consecutive failure.
        max_s:               Ceiling for grown timeout/network windows.
        rate_limit_default_s: Used when a 429 carries no usable Retry-After.
        invalid_response_s:  Penalty for malformed or empty output.
    """

    network_base_s: float = 300.0
    backoff_factor: float = 2.0
    max_s: float = 3600.0
    rate_limit_default_s: float = 120.0
    invalid_response_s: float = 60.0

    def __post_init__(self) -> None:
        for name in ("network_base_s", "max_s", "rate_limit_default_s", "invalid_response_s"):
            if getattr(self, name) <= 0:
                raise ConfigurationError(f"Quarantine window {name} must be positive")
        if self.backoff_factor < 1.0:
            raise ConfigurationError("backoff_factor must be >= 1.0")
        if self.max_s < self.network_base_s:
            raise ConfigurationError("max_s must not be shorter than network_base_s")

    def duration_for(
        self,
        kind: ErrorKind,
        consecutive_failures: int,
        retry_after: float | None = None,
    ) -> float | None:
        """Seconds to quarantine for, or ``None`` for an indefinite quarantine.

        ``consecutive_failures`` already includes the failure being recorded.
        """
        if kind.is_indefinite:
            return None

        if kind == ErrorKind.RATE_LIMITED:
            if retry_after is not None and retry_after > 0:
                return max(retry_after, _MIN_WINDOW_S)
            return self.rate_limit_default_s

        if kind == ErrorKind.INVALID_RESPONSE:
            return self.invalid_response_s

        if kind in (ErrorKind.TIMEOUT, ErrorKind.NETWORK_ERROR):
            exponent = max(consecutive_failures - 1, 0)
            try:
                grown = self.network_base_s * (self.backoff_factor ** exponent)
            except OverflowError:
                grown = self.max_s
            return min(grown, self.max_s)

        raise ValueError(f"{kind.value} is not a per-provider failure")
