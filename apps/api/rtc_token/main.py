"""FastAPI application issuing RTC channel access tokens."""
from __future__ import annotations

import logging
from datetime import datetime, timezone

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response

from .core.config import settings
from .core.errors import ConfigurationError, TokenError, ValidationError
from .core.logging_config import configure_logging
from .routers import rtc as rtc_router

configure_logging(settings.log_level)

logger = logging.getLogger(__name__)

SERVICE_NAME = "rtc-token"

_FIELD_MESSAGES = {
    "channel": "Missing or invalid channel name",
    "uid": "Missing or invalid uid",
    "role": "Invalid role",
    "expireTime": "Invalid expireTime",
}

app = FastAPI(title="RTC Token API", version="0.1.0")

if settings.cors_allow_origins:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allow_origins,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
    )

app.include_router(rtc_router.router, prefix="/api/rtc", tags=["rtc"])


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


@app.exception_handler(RequestValidationError)
async def request_validation_handler(_request: Request, exc: RequestValidationError) -> JSONResponse:
    """Collapse pydantic's error list into the single message clients expect."""

    for error in exc.errors():
        loc = error.get("loc", ())
        if error.get("type") == "json_invalid":
            return _error(400, "Request body is not valid JSON")
        for part in loc:
            if part in _FIELD_MESSAGES:
                return _error(400, _FIELD_MESSAGES[part])
    return _error(400, "Invalid request body")


@app.exception_handler(ValidationError)
async def token_validation_handler(_request: Request, exc: ValidationError) -> JSONResponse:
    return _error(400, str(exc))


@app.exception_handler(ConfigurationError)
async def configuration_handler(_request: Request, exc: ConfigurationError) -> JSONResponse:
    logger.error("Missing Agora credentials in environment: %s", exc)
    return _error(500, "Server configuration error")


@app.exception_handler(TokenError)
async def token_error_handler(_request: Request, exc: TokenError) -> JSONResponse:
    logger.error("Token generation error: %s", exc, exc_info=exc)
    return _error(500, str(exc) or "Failed to generate token")


@app.get("/api/health", tags=["meta"])
async def health() -> dict[str, str]:
    """Simple liveness probe."""

    return {
        "status": "ok",
        "service": SERVICE_NAME,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


@app.head("/api/health", tags=["meta"])
async def health_head() -> Response:
    """Allow HEAD for uptime monitors that only need the status code."""

    return Response(status_code=200)
