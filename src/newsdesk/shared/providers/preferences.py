"""Operator preferences — which providers may be used, and which goes first.

Preferences live in memory for the lifetime of the process and start from
"every registered provider enabled, no preferred provider".  They shape the
dispatcher's candidate list; quarantine state is tracked separately by the
health tracker and is never changed here.
"""

from __future__ import annotations

import threading

import structlog

from newsdesk.domain.exceptions import ProviderDisabledError
from newsdesk.shared.providers.registry import ProviderRegistry
from newsdesk.shared.providers.types import ProviderConfig, ProviderPreferencesView

logger = structlog.get_logger(__name__)


class ProviderPreferences:
    """Thread-safe enabled set plus an optional default preferred provider."""

    def __init__(self, registry: ProviderRegistry) -> None:
        self._registry = registry
        self._lock = threading.Lock()
        self._enabled: set[str] = set(registry.ids)
        self._preferred: str | None = None

    # ── Reads ────────────────────────────────────────────────
    def is_enabled(self, provider_id: str) -> bool:
        with self._lock:
            return provider_id in self._enabled

    @property
    def preferred_provider_id(self) -> str | None:
        with self._lock:
            return self._preferred

    def view(self) -> ProviderPreferencesView:
        """Per-provider configuration rows in priority order."""
        with self._lock:
            enabled = set(self._enabled)
            preferred = self._preferred
        rows = [
            ProviderConfig(
                provider_id=p.provider_id,
                display_name=p.display_name,
                priority=p.priority,
                is_enabled=p.provider_id in enabled,
                requires_api_key=p.requires_api_key,
                description=p.description,
            )
            for p in self._registry.list()
        ]
        return ProviderPreferencesView(providers=rows, preferred_provider_id=preferred)

    # ── Writes ───────────────────────────────────────────────
    def set_enabled(self, provider_id: str, enabled: bool) -> None:
        """Enable or disable one provider.

        Disabling the preferred provider also clears the preference.

        Raises:
            UnknownProviderError: ``provider_id`` is not registered.
        """
        self._registry.get(provider_id)
        with self._lock:
            if enabled:
                self._enabled.add(provider_id)
            else:
                self._enabled.discard(provider_id)
                if self._preferred == provider_id:
                    self._preferred = None
                    logger.info("preferred_provider_cleared", provider=provider_id)
        logger.info("provider_preference_updated", provider=provider_id, enabled=enabled)

    def update(self, enabled: dict[str, bool]) -> None:
        """Apply several enable/disable toggles; unknown ids fail before any change."""
        for provider_id in enabled:
            self._registry.get(provider_id)
        for provider_id, flag in enabled.items():
            self.set_enabled(provider_id, flag)

    def set_preferred(self, provider_id: str | None) -> None:
        """Pick the provider tried first when a request names none; ``None`` clears.

        Raises:
            UnknownProviderError: ``provider_id`` is not registered.
            ProviderDisabledError: ``provider_id`` is currently disabled.
        """
        if provider_id is not None:
            self._registry.get(provider_id)
        with self._lock:
            if provider_id is not None and provider_id not in self._enabled:
                raise ProviderDisabledError(provider_id)
            self._preferred = provider_id
        logger.info("preferred_provider_set", provider=provider_id)

    def reset(self) -> None:
        """Back to every provider enabled and no preferred provider."""
        with self._lock:
            self._enabled = set(self._registry.ids)
            self._preferred = None
        logger.info("provider_preferences_reset")

