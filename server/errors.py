"""Translate domain errors into {error, details?} JSON responses."""

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from models.errors import ContentError, ProviderError
from utils.logger import get_logger

logger = get_logger(__name__)


def error_body(error: str, details=None) -> dict:
    body = {"error": error}
    if details is not None:
        body["details"] = jsonable_encoder(details)
    return body


def route_failure(exc: ProviderError, message: str) -> ProviderError:
    """Re-label a provider failure with the route's user-facing message."""
    return ProviderError(
        message,
        provider=exc.provider,
        code=exc.code,
        transient=exc.transient,
        details=exc.details if exc.details is not None else exc.message,
    )


async def content_error_handler(request: Request, exc: ContentError) -> JSONResponse:
    request_id = getattr(request.state, "request_id", "unknown")
    log = logger.error if exc.status_code >= 500 else logger.warning
    log(
        f"Request failed: {exc.message}",
        extra={
            "extra_fields": {
                "request_id": request_id,
                "path": request.url.path,
                "status_code": exc.status_code,
                "error_type": type(exc).__name__,
            }
        },
    )
    return JSONResponse(status_code=exc.status_code, content=error_body(exc.message, exc.details))


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=error_body("Invalid request parameters", exc.errors()),
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ContentError, content_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
