"""Data Transfer Objects — Pydantic models for API boundaries.

DTOs handle serialisation, validation, and documentation.  They live in the
application layer because they are *not* domain objects — they adapt between
the external world and the orchestration core.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field, field_validator

from newsdesk.shared.providers.types import (
    AttemptFailure,
    ProviderConfig,
    ProviderPreferencesView,
    ProviderStatus,
    StatusSummary,
)


# ═══════════════════════════════════════════════════════════════
#  Common
# ═══════════════════════════════════════════════════════════════
class ErrorResponse(BaseModel):
    code: str
    message: str
    details: dict | None = None  # type: ignore[type-arg]


class HealthResponse(BaseModel):
    status: str = "ok"
    version: str = "0.1.0"
    environment: str = "development"
    providers_available: int = 0
    providers_total: int = 0


# ═══════════════════════════════════════════════════════════════
#  Generation
# ═══════════════════════════════════════════════════════════════
class GenerateRequest(BaseModel):
    prompt: str = Field(..., min_length=1, max_length=100_000)
    force_provider_id: str | None = None
    allow_quarantined: bool = False
    preferred_provider_id: str | None = None

    @field_validator("force_provider_id", "preferred_provider_id")
    @classmethod
    def _blank_as_unset(cls, v: str | None) -> str | None:
        return v or None


class AttemptResponse(BaseModel):
    provider_id: str
    error_kind: str
    message: str
    latency_ms: float

    @classmethod
    def from_attempt(cls, attempt: AttemptFailure) -> AttemptResponse:
        return cls(
            provider_id=attempt.provider_id,
            error_kind=attempt.error_kind.value,
            message=attempt.message,
            latency_ms=round(attempt.latency_s * 1000, 1),
        )


class GenerateResponse(BaseModel):
    text: str
    used_provider: str
    latency_ms: float


class GenerateJsonResponse(BaseModel):
    data: Any
    used_provider: str
    latency_ms: float


# ═══════════════════════════════════════════════════════════════
#  Provider status
# ═══════════════════════════════════════════════════════════════
class ProviderStatusResponse(BaseModel):
    id: str
    display_name: str
    priority: int
    is_available: bool
    state: str
    consecutive_failures: int
    last_error: str | None = None
    retry_in_s: float | None = None
    description: str = ""

    @classmethod
    def from_status(cls, status: ProviderStatus) -> ProviderStatusResponse:
        return cls(
            id=status.provider_id,
            display_name=status.display_name,
            priority=status.priority,
            is_available=status.is_available,
            state=status.state.value,
            consecutive_failures=status.consecutive_failures,
            last_error=status.last_error.value if status.last_error else None,
            retry_in_s=status.retry_in_s,
            description=status.description,
        )


class StatusSummaryResponse(BaseModel):
    providers: list[ProviderStatusResponse]
    available_count: int
    total_count: int
    all_providers_down: bool
    poll_interval_s: float

    @classmethod
    def from_summary(cls, summary: StatusSummary, poll_interval_s: float) -> StatusSummaryResponse:
        return cls(
            providers=[ProviderStatusResponse.from_status(p) for p in summary.providers],
            available_count=summary.available_count,
            total_count=summary.total_count,
            all_providers_down=summary.all_providers_down,
            poll_interval_s=poll_interval_s,
        )


class ReactivateResponse(BaseModel):
    status: str = "reactivated"
    restored: list[str] = Field(default_factory=list)


# ═══════════════════════════════════════════════════════════════
#  Provider configuration
# ═══════════════════════════════════════════════════════════════
class ProviderConfigResponse(BaseModel):
    id: str
    display_name: str
    priority: int
    is_enabled: bool
    requires_api_key: bool
    description: str = ""

    @classmethod
    def from_config(cls, config: ProviderConfig) -> ProviderConfigResponse:
        return cls(
            id=config.provider_id,
            display_name=config.display_name,
            priority=config.priority,
            is_enabled=config.is_enabled,
            requires_api_key=config.requires_api_key,
            description=config.description,
        )


class ProvidersConfigResponse(BaseModel):
    providers: list[ProviderConfigResponse]
    preferred_provider_id: str | None = None

    @classmethod
    def from_view(cls, view: ProviderPreferencesView) -> ProvidersConfigResponse:
        return cls(
            providers=[ProviderConfigResponse.from_config(c) for c in view.providers],
            preferred_provider_id=view.preferred_provider_id,
        )


class UpdateProvidersConfigRequest(BaseModel):
    """Partial update: omitted fields are left alone.

    ``preferred_provider_id`` set to ``null`` explicitly clears the preference.
    """

    enabled: dict[str, bool] = Field(default_factory=dict)
    preferred_provider_id: str | None = None

    @field_validator("preferred_provider_id")
    @classmethod
    def _blank_as_unset(cls, v: str | None) -> str | None:
        return v or None

    @property
    def clears_preferred(self) -> bool:
        return "preferred_provider_id" in self.model_fields_set and self.preferred_provider_id is None
