"""Global exception handlers — map domain errors to HTTP responses."""

from __future__ import annotations

from fastapi import FastAPI, Request
from fastapi.responses import ORJSONResponse
import structlog

from newsdesk.application.dtos import AttemptResponse
from newsdesk.domain.exceptions import (
    AllProvidersUnavailableError,
    ConfigurationError,
    DomainError,
    InvalidProviderResponseError,
    ProviderDisabledError,
    UnknownProviderError,
)

logger = structlog.get_logger(__name__)


def register_exception_handlers(app: FastAPI) -> None:
    """Register all domain→HTTP exception mappings."""

    @app.exception_handler(AllProvidersUnavailableError)
    async def handle_unavailable(
        request: Request, exc: AllProvidersUnavailableError
    ) -> ORJSONResponse:
        logger.error("all_providers_unavailable_http", message=exc.message)
        return ORJSONResponse(
            status_code=503,
            content={
                "code": exc.code,
                "message": exc.message,
                "details": {
                    "attempts": [
                        AttemptResponse.from_attempt(a).model_dump() for a in exc.attempts
                    ],
                    "candidates_empty": not exc.attempts,
                    "reason": exc.detail,
                },
            },
        )

    @app.exception_handler(UnknownProviderError)
    async def handle_unknown_provider(
        request: Request, exc: UnknownProviderError
    ) -> ORJSONResponse:
        return ORJSONResponse(
            status_code=404,
            content={"code": exc.code, "message": exc.message},
        )

    @app.exception_handler(ProviderDisabledError)
    async def handle_provider_disabled(
        request: Request, exc: ProviderDisabledError
    ) -> ORJSONResponse:
        return ORJSONResponse(
            status_code=409,
            content={"code": exc.code, "message": exc.message},
        )

    @app.exception_handler(InvalidProviderResponseError)
    async def handle_invalid_response(
        request: Request, exc: InvalidProviderResponseError
    ) -> ORJSONResponse:
        logger.warning("invalid_provider_response_http", message=exc.message)
        return ORJSONResponse(
            status_code=502,
            content={"code": exc.code, "message": exc.message},
        )

    @app.exception_handler(ConfigurationError)
    async def handle_configuration(
        request: Request, exc: ConfigurationError
    ) -> ORJSONResponse:
        logger.error("configuration_error_http", message=exc.message)
        return ORJSONResponse(
            status_code=500,
            content={"code": exc.code, "message": exc.message},
        )

    @app.exception_handler(DomainError)
    async def handle_domain(request: Request, exc: DomainError) -> ORJSONResponse:
        return ORJSONResponse(
            status_code=400,
            content={"code": exc.code, "message": exc.message},
        )

    @app.exception_handler(Exception)
    async def handle_unexpected(request: Request, exc: Exception) -> ORJSONResponse:
        logger.exception("unhandled_exception", error=str(exc))
        return ORJSONResponse(
            status_code=500,
            content={
                "code": "INTERNAL_ERROR",
                "message": "An unexpected error occurred",
            },
        )
