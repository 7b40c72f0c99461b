"""Newsdesk — Application Configuration."""

from __future__ import annotations

import enum
from typing import Any

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Environment(str, enum.Enum):
    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"


class Settings(BaseSettings):
    """Centralised, validated configuration loaded from environment / .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ── Application ──────────────────────────────────────────
    app_name: str = "newsdesk"
    app_env: Environment = Environment.DEVELOPMENT
    log_level: str = "INFO"
    cors_origins: list[str] = Field(default_factory=lambda: ["http://localhost:5173"])

    # ── AI provider credentials ──────────────────────────────
    api_key: str = ""  # legacy name for the Gemini key
    gemini_api_key: str = ""
    openrouter_api_key: str = ""
    together_api_key: str = ""
    groq_api_key: str = ""
    openai_api_key: str = ""

    gemini_model: str = "gemini-1.5-flash"
    openrouter_model: str = "deepseek/deepseek-chat-v3-0324:free"
    together_model: str = "meta-llama/Llama-3.2-3B-Instruct-Turbo"
    groq_model: str = "llama-3.1-8b-instant"
    openai_model: str = "gpt-4o-mini"
    openai_base_url: str = "https://api.openai.com/v1"
    openrouter_referer: str = "https://recifemais.com"

    generation_max_tokens: int = 1000
    generation_temperature: float = 0.7

    # ── Provider orchestration ───────────────────────────────
    ai_provider_priority: str = "gemini,openrouter,together,groq,openai"
    ai_enabled_providers: str = ""  # empty = every configured provider

    provider_timeout_seconds: float = 60.0
    force_respects_quarantine: bool = False

    # Quarantine windows (seconds)
    quarantine_network_s: float = 300.0
    quarantine_backoff_factor: float = 2.0
    quarantine_max_s: float = 3600.0
    quarantine_rate_limit_s: float = 120.0
    quarantine_invalid_response_s: float = 60.0

    reactivation_interval_seconds: float = 60.0
    status_poll_interval_seconds: float = 30.0

    # ── Derived helpers ──────────────────────────────────────
    @property
    def is_production(self) -> bool:
        return self.app_env == Environment.PRODUCTION

    @property
    def resolved_gemini_api_key(self) -> str:
        return self.gemini_api_key or self.api_key

    @property
    def priority_order(self) -> list[str]:
        return [p.strip().lower() for p in self.ai_provider_priority.split(",") if p.strip()]

    @property
    def enabled_providers(self) -> set[str]:
        return {p.strip().lower() for p in self.ai_enabled_providers.split(",") if p.strip()}

    @field_validator("log_level")
    @classmethod
    def _upper_log_level(cls, v: str) -> str:
        return v.upper()

    @model_validator(mode="after")
    def _validate_quarantine_windows(self) -> Settings:
        windows = {
            "quarantine_network_s": self.quarantine_network_s,
            "quarantine_max_s": self.quarantine_max_s,
            "quarantine_rate_limit_s": self.quarantine_rate_limit_s,
            "quarantine_invalid_response_s": self.quarantine_invalid_response_s,
            "provider_timeout_seconds": self.provider_timeout_seconds,
            "reactivation_interval_seconds": self.reactivation_interval_seconds,
        }
        for name, value in windows.items():
            if value <= 0:
                raise ValueError(f"{name} must be positive")
        if self.quarantine_invalid_response_s >= self.quarantine_network_s:
            raise ValueError(
                "quarantine_invalid_response_s must be shorter than quarantine_network_s"
            )
        if self.quarantine_backoff_factor < 1.0:
            raise ValueError("quarantine_backoff_factor must be >= 1.0")
        return self


def get_settings(**overrides: Any) -> Settings:
    """Factory that allows test-time overrides."""
    return Settings(**overrides)
