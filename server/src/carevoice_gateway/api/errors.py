"""Response envelope and exception handlers.

Every response body carries ``success``; failures carry ``message`` plus
``error`` (upstream payload) or ``errors`` (field-level validation messages)
where relevant.
"""

import logging
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from carevoice_gateway.exceptions import (
    CareVoiceGatewayError,
    RateLimitExceededError,
    UpstreamAuthError,
)

logger = logging.getLogger(__name__)


def error_response(
    status_code: int,
    message: str,
    error: Any = None,
    errors: list[str] | None = None,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    content: dict[str, Any] = {"success": False, "message": message}
    if error is not None:
        content["error"] = error
    if errors is not None:
        content["errors"] = errors
    return JSONResponse(status_code=status_code, content=jsonable_encoder(content), headers=headers)


def _field_message(err: dict[str, Any]) -> str:
    loc = [str(part) for part in err.get("loc", ()) if part != "body"]
    field = ".".join(loc)
    return f"{field}: {err.get('msg', 'invalid')}" if field else str(err.get("msg", "invalid"))


async def gateway_error_handler(request: Request, exc: CareVoiceGatewayError) -> JSONResponse:
    headers = None
    error = None
    if isinstance(exc, UpstreamAuthError):
        error = exc.error
    elif isinstance(exc, RateLimitExceededError):
        headers = {"Retry-After": str(exc.retry_after)}
    return error_response(exc.status_code, exc.message, error=error, headers=headers)


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    messages = [_field_message(err) for err in exc.errors()]
    logger.info(f"Validation error on {request.method} {request.url.path}: {messages}")
    return error_response(status.HTTP_400_BAD_REQUEST, "Validation error", errors=messages)


async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    if exc.status_code == status.HTTP_404_NOT_FOUND:
        message = "Route not found"
    else:
        message = str(exc.detail)
    return error_response(exc.status_code, message, headers=getattr(exc, "headers", None))


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(f"Unhandled error on {request.method} {request.url.path}: {exc}")
    return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error")


def register_exception_handlers(app: FastAPI) -> None:
    """Attach the envelope-producing handlers to an app."""
    app.add_exception_handler(CareVoiceGatewayError, gateway_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
