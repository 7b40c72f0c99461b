"""Failure classification — turns whatever an attempt raised into an ErrorKind."""

from __future__ import annotations

import asyncio
import json
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime

import httpx

from newsdesk.domain.enums import ErrorKind
from newsdesk.domain.exceptions import ProviderError, ProviderRateLimitedError


def parse_retry_after(value: str | None) -> float | None:
    """Parse a Retry-After header (delta-seconds or HTTP-date) into seconds."""
    if not value:
        return None
    value = value.strip()
    try:
        return max(float(value), 0.0)
    except ValueError:
        pass
    try:
        when = parsedate_to_datetime(value)
    except (TypeError, ValueError):
        return None
    if when.tzinfo is None:
        when = when.replace(tzinfo=timezone.utc)
    return max((when - datetime.now(timezone.utc)).total_seconds(), 0.0)


def classify_status(status_code: int) -> ErrorKind:
    if status_code in (401, 403):
        return ErrorKind.AUTHENTICATION_ERROR
    if status_code == 429:
        return ErrorKind.RATE_LIMITED
    if status_code == 408:
        return ErrorKind.TIMEOUT
    return ErrorKind.NETWORK_ERROR


def classify_error(exc: BaseException) -> tuple[ErrorKind, float | None]:
    """Return ``(kind, retry_after_seconds)`` for a failed attempt."""
    if isinstance(exc, ProviderRateLimitedError):
        return exc.kind, exc.retry_after
    if isinstance(exc, ProviderError):
        return exc.kind, None

    if isinstance(exc, (asyncio.TimeoutError, httpx.TimeoutException)):
        return ErrorKind.TIMEOUT, None
    if isinstance(exc, httpx.HTTPStatusError):
        kind = classify_status(exc.response.status_code)
        retry_after = None
        if kind == ErrorKind.RATE_LIMITED:
            retry_after = parse_retry_after(exc.response.headers.get("Retry-After"))
        return kind, retry_after
    if isinstance(exc, (httpx.TransportError, ConnectionError, OSError)):
        return ErrorKind.NETWORK_ERROR, None
    if isinstance(exc, (json.JSONDecodeError, KeyError, IndexError, TypeError, ValueError)):
        return ErrorKind.INVALID_RESPONSE, None

    return ErrorKind.NETWORK_ERROR, None
