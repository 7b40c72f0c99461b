"""Provider registry — the static, priority-ordered provider fleet.

Providers are registered once at startup and the registry is frozen before
the first request is served; the order returned by ``list()`` never changes
afterwards.
"""

from __future__ import annotations

import threading
from typing import Iterable

import structlog

from newsdesk.domain.exceptions import ConfigurationError, UnknownProviderError
from newsdesk.shared.providers.types import Provider

logger = structlog.get_logger(__name__)


class ProviderRegistry:
    """Ordered collection of providers, ascending by priority."""

    def __init__(self, providers: Iterable[Provider] = ()) -> None:
        self._providers: dict[str, Provider] = {}
        self._ordered: list[Provider] = []
        self._frozen = False
        self._lock = threading.Lock()
        for provider in providers:
            self.register(provider)

    def register(self, provider: Provider) -> None:
        """Add a provider; rejects duplicate ids and undocumented priority clashes."""
        with self._lock:
            if self._frozen:
                raise ConfigurationError(
                    f"Cannot register {provider.provider_id!r}: registry is frozen"
                )
            if provider.provider_id in self._providers:
                raise ConfigurationError(
                    f"Provider {provider.provider_id!r} is already registered"
                )

            if provider.timeout_s is not None and provider.timeout_s <= 0:
                raise ConfigurationError(
                    f"Provider {provider.provider_id!r} timeout_s must be positive"
                )

            holders = [p for p in self._ordered if p.priority == provider.priority]
            if holders and provider.alias_of not in {p.provider_id for p in holders}:
                raise ConfigurationError(
                    f"Provider {provider.provider_id!r} priority {provider.priority} "
                    f"collides with {holders[0].provider_id!r}; declare alias_of="
                    f"{holders[0].provider_id!r} if this is intentional"
                )
            if provider.alias_of is not None and not holders:
                raise ConfigurationError(
                    f"Provider {provider.provider_id!r} declares alias_of="
                    f"{provider.alias_of!r} but no provider holds priority {provider.priority}"
                )

            self._providers[provider.provider_id] = provider
            self._ordered.append(provider)
            # sorted() is stable, so equal priorities keep registration order
            self._ordered = sorted(self._ordered, key=lambda p: p.priority)

        logger.info(
            "provider_registered",
            provider=provider.provider_id,
            priority=provider.priority,
            alias_of=provider.alias_of,
        )

    def freeze(self) -> None:
        with self._lock:
            self._frozen = True

    @property
    def frozen(self) -> bool:
        return self._frozen

    def list(self) -> list[Provider]:
        """Providers sorted ascending by priority, stable on ties."""
        return list(self._ordered)

    def get(self, provider_id: str) -> Provider:
        try:
            return self._providers[provider_id]
        except KeyError:
            raise UnknownProviderError(provider_id) from None

    def __contains__(self, provider_id: object) -> bool:
        return provider_id in self._providers

    def __len__(self) -> int:
        return len(self._ordered)

    @property
    def ids(self) -> list[str]:
        return [p.provider_id for p in self._ordered]
