"""Draft generation service.

The editorial screens never talk to providers directly: they hand a prompt
to this service, which dispatches it through the orchestrator and turns an
exhausted fleet into ``AllProvidersUnavailableError``.  Most prompts ask the
model for a JSON object wrapped in a markdown fence, so ``generate_json``
also recovers that object from the raw text.
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass
from typing import Any, cast

import structlog

from newsdesk.domain.exceptions import InvalidProviderResponseError
from newsdesk.shared.providers.orchestrator import ProviderOrchestrator
from newsdesk.shared.providers.types import OrchestrationRequest

logger = structlog.get_logger(__name__)

_FENCE_RE = re.compile(r"```(?:json)?\s*")
_CONTROL_RE = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]")
_TRAILING_COMMA_RE = re.compile(r",\s*([}\]])")


def _outermost_json(text: str) -> str | None:
    """Slice from the first ``{``/``[`` to its matching closing bracket."""
    starts = [i for i in (text.find("{"), text.find("[")) if i != -1]
    if not starts:
        return None
    start = min(starts)
    opener = text[start]
    closer = "}" if opener == "{" else "]"
    end = text.rfind(closer)
    if end <= start:
        return None
    return text[start : end + 1]


def parse_json_response(text: str, *, provider_id: str) -> Any:
    """Best-effort recovery of a JSON value from model output.

    Strips markdown fences and control characters, keeps only the outermost
    object or array, and drops trailing commas before ``}``/``]``.

    Raises:
        InvalidProviderResponseError: attributed to ``provider_id`` if nothing
            parseable remains.
    """
    cleaned = _FENCE_RE.sub("", text).replace("```", "").strip()
    cleaned = _CONTROL_RE.sub("", cleaned)

    candidates = [cleaned]
    sliced = _outermost_json(cleaned)
    if sliced is not None and sliced != cleaned:
        candidates.append(sliced)

    for candidate in candidates:
        for attempt in (candidate, _TRAILING_COMMA_RE.sub(r"\1", candidate)):
            try:
                return json.loads(attempt, strict=False)
            except json.JSONDecodeError:
                continue

    logger.warning("json_response_unparseable", provider=provider_id, preview=text[:200])
    raise InvalidProviderResponseError(provider_id, "could not recover JSON from model output")


@dataclass(frozen=True)
class GeneratedDraft:
    text: str
    provider_id: str
    latency_s: float


class DraftGenerationService:
    """Prompt in, draft text out, with provider failover underneath."""

    def __init__(self, orchestrator: ProviderOrchestrator) -> None:
        self._orchestrator = orchestrator

    async def generate(
        self,
        prompt: str,
        *,
        force_provider_id: str | None = None,
        allow_quarantined: bool = False,
        preferred_provider_id: str | None = None,
    ) -> GeneratedDraft:
        """Raises ``AllProvidersUnavailableError`` when every provider failed."""
        result = await self._orchestrator.dispatch(
            OrchestrationRequest(
                payload=prompt,
                force_provider_id=force_provider_id,
                allow_quarantined=allow_quarantined,
                preferred_provider_id=preferred_provider_id,
            )
        )
        result.raise_for_failure()
        provider_id = cast(str, result.provider_id)
        logger.info(
            "draft_generated",
            provider=provider_id,
            latency_ms=round(result.latency_s * 1000, 1),
            failovers=len(result.attempts),
        )
        return GeneratedDraft(
            text=str(result.output),
            provider_id=provider_id,
            latency_s=result.latency_s,
        )

    async def generate_json(self, prompt: str, **options: Any) -> tuple[Any, GeneratedDraft]:
        draft = await self.generate(prompt, **options)
        return parse_json_response(draft.text, provider_id=draft.provider_id), draft
