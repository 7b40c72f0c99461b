"""Generation provider adapters over httpx.

Each adapter is a plain async callable ``(prompt) -> text`` that performs one
HTTP call and translates transport and status failures into the
``ProviderError`` family.  Failover, quarantine and health live in the
orchestrator, never here.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

import httpx
import structlog

from newsdesk.config import Settings
from newsdesk.domain.exceptions import (
    InvalidProviderResponseError,
    ProviderAuthenticationError,
    ProviderNetworkError,
    ProviderRateLimitedError,
    ProviderTimeoutError,
)
from newsdesk.shared.providers.classify import parse_retry_after
from newsdesk.shared.providers.types import Provider

logger = structlog.get_logger(__name__)

GEMINI_BASE_URL = "https://generativelanguage.googleapis.com/v1beta"


# ── Shared HTTP handling ─────────────────────────────────────
def _raise_for_status(provider_id: str, response: httpx.Response) -> None:
    if response.is_success:
        return
    body = response.text[:300]
    status = response.status_code
    if status in (401, 403) or (status == 400 and "API key not valid" in body):
        raise ProviderAuthenticationError(provider_id, f"HTTP {status}: invalid or expired API key")
    if status == 429:
        raise ProviderRateLimitedError(
            provider_id,
            f"HTTP 429: {body}",
            retry_after=parse_retry_after(response.headers.get("Retry-After")),
        )
    if status == 408:
        raise ProviderTimeoutError(provider_id, "HTTP 408: upstream timed out")
    raise ProviderNetworkError(provider_id, f"HTTP {status}: {body}")


async def _post(
    client: httpx.AsyncClient,
    provider_id: str,
    url: str,
    *,
    headers: dict[str, str],
    json: dict[str, Any],
) -> dict[str, Any]:
    try:
        response = await client.post(url, headers=headers, json=json)
    except httpx.TimeoutException as exc:
        raise ProviderTimeoutError(provider_id, f"{type(exc).__name__}: {exc}") from exc
    except httpx.TransportError as exc:
        raise ProviderNetworkError(provider_id, f"{type(exc).__name__}: {exc}") from exc

    _raise_for_status(provider_id, response)
    try:
        data = response.json()
    except ValueError as exc:
        raise InvalidProviderResponseError(provider_id, "response body is not JSON") from exc
    if not isinstance(data, dict):
        raise InvalidProviderResponseError(provider_id, "response body is not a JSON object")
    return data


def _require_text(provider_id: str, text: Any) -> str:
    if not isinstance(text, str) or not text.strip():
        raise InvalidProviderResponseError(provider_id, "provider returned empty text")
    return text


# ── Adapters ─────────────────────────────────────────────────
class GeminiAdapter:
    """Google Gemini ``generateContent``."""

    def __init__(
        self,
        client: httpx.AsyncClient,
        *,
        api_key: str,
        model: str,
        provider_id: str = "gemini",
        base_url: str = GEMINI_BASE_URL,
        temperature: float = 0.7,
        max_tokens: int = 1000,
    ) -> None:
        self.provider_id = provider_id
        self._client = client
        self._api_key = api_key
        self._model = model
        self._base_url = base_url.rstrip("/")
        self._temperature = temperature
        self._max_tokens = max_tokens

    async def __call__(self, prompt: str) -> str:
        data = await _post(
            self._client,
            self.provider_id,
            f"{self._base_url}/models/{self._model}:generateContent",
            headers={"Content-Type": "application/json", "x-goog-api-key": self._api_key},
            json={
                "contents": [{"parts": [{"text": prompt}]}],
                "generationConfig": {
                    "temperature": self._temperature,
                    "maxOutputTokens": self._max_tokens,
                },
            },
        )
        try:
            parts = data["candidates"][0]["content"]["parts"]
        except (KeyError, IndexError, TypeError) as exc:
            raise InvalidProviderResponseError(self.provider_id, "missing candidates in response") from exc
        text = "".join(p.get("text", "") for p in parts if isinstance(p, dict))
        return _require_text(self.provider_id, text)


class ChatCompletionsAdapter:
    """Any OpenAI-compatible ``/chat/completions`` endpoint."""

    def __init__(
        self,
        client: httpx.AsyncClient,
        *,
        provider_id: str,
        api_key: str,
        base_url: str,
        model: str,
        temperature: float = 0.7,
        max_tokens: int = 1000,
        extra_headers: dict[str, str] | None = None,
    ) -> None:
        self.provider_id = provider_id
        self._client = client
        self._api_key = api_key
        self._base_url = base_url.rstrip("/")
        self._model = model
        self._temperature = temperature
        self._max_tokens = max_tokens
        self._extra_headers = extra_headers or {}

    async def __call__(self, prompt: str) -> str:
        data = await _post(
            self._client,
            self.provider_id,
            f"{self._base_url}/chat/completions",
            headers={
                "Authorization": f"Bearer {self._api_key}",
                "Content-Type": "application/json",
                **self._extra_headers,
            },
            json={
                "model": self._model,
                "messages": [{"role": "user", "content": prompt}],
                "max_tokens": self._max_tokens,
                "temperature": self._temperature,
            },
        )
        try:
            text = data["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError) as exc:
            raise InvalidProviderResponseError(self.provider_id, "missing choices in response") from exc
        return _require_text(self.provider_id, text)


# ── Registry bootstrap ───────────────────────────────────────
@dataclass(frozen=True)
class _CatalogEntry:
    provider_id: str
    display_name: str
    description: str
    base_url: str = ""
    extra_headers: dict[str, str] = field(default_factory=dict)


_CATALOG: tuple[_CatalogEntry, ...] = (
    _CatalogEntry("gemini", "Google Gemini", "Google's model with high-quality answers"),
    _CatalogEntry(
        "openrouter",
        "OpenRouter",
        "Access to several free models through OpenRouter",
        base_url="https://openrouter.ai/api/v1",
        extra_headers={"X-Title": "Newsdesk AI Assistant"},
    ),
    _CatalogEntry(
        "together",
        "Together AI",
        "Open-source models with good performance",
        base_url="https://api.together.xyz/v1",
    ),
    _CatalogEntry(
        "groq",
        "Groq",
        "Open-source models with very fast responses",
        base_url="https://api.groq.com/openai/v1",
    ),
    _CatalogEntry("openai", "OpenAI", "OpenAI chat completions"),
)


def build_providers(settings: Settings, client: httpx.AsyncClient) -> list[Provider]:
    """Build the provider fleet from settings.

    A provider is included when its credential is set and it is enabled
    (an empty allow-list enables everything).  Priority follows
    ``ai_provider_priority``; unlisted providers go after the listed ones
    in catalog order.
    """
    order = settings.priority_order
    enabled = settings.enabled_providers
    credentials = {
        "gemini": settings.resolved_gemini_api_key,
        "openrouter": settings.openrouter_api_key,
        "together": settings.together_api_key,
        "groq": settings.groq_api_key,
        "openai": settings.openai_api_key,
    }
    models = {
        "gemini": settings.gemini_model,
        "openrouter": settings.openrouter_model,
        "together": settings.together_model,
        "groq": settings.groq_model,
        "openai": settings.openai_model,
    }
    common: dict[str, Any] = {
        "temperature": settings.generation_temperature,
        "max_tokens": settings.generation_max_tokens,
    }

    providers: list[Provider] = []
    for catalog_idx, entry in enumerate(_CATALOG):
        pid = entry.provider_id
        api_key = credentials[pid].strip()
        if not api_key:
            continue
        if enabled and pid not in enabled:
            logger.info("provider_disabled_by_config", provider=pid)
            continue

        if pid == "gemini":
            invoke: Any = GeminiAdapter(client, api_key=api_key, model=models[pid], **common)
        else:
            headers = dict(entry.extra_headers)
            if pid == "openrouter":
                headers["HTTP-Referer"] = settings.openrouter_referer
            invoke = ChatCompletionsAdapter(
                client,
                provider_id=pid,
                api_key=api_key,
                base_url=settings.openai_base_url if pid == "openai" else entry.base_url,
                model=models[pid],
                extra_headers=headers,
                **common,
            )

        priority = order.index(pid) + 1 if pid in order else len(order) + catalog_idx + 1
        providers.append(
            Provider(
                provider_id=pid,
                display_name=entry.display_name,
                priority=priority,
                invoke=invoke,
                description=entry.description,
            )
        )

    if not providers:
        logger.warning("no_ai_providers_configured")
    return providers


__all__ = [
    "ChatCompletionsAdapter",
    "GeminiAdapter",
    "build_providers",
]
