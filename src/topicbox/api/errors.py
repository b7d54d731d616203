"""Exception handlers translating service errors into JSON responses.

Every error body has the shape {"error": str, "code": str, "details"?: ...}.
User-facing failures (validation, uniqueness, not found, unauthorized) carry
their specific message. External-check and store failures are logged in full
server-side and reach the client only as a generic message plus a code; so
do unexpected exceptions (500 INTERNAL_ERROR).
"""

import structlog
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from topicbox.services.exceptions import ExternalCheckFailure, ServiceError, StoreFailure

logger = structlog.get_logger()

GENERIC_MESSAGES = {
    ExternalCheckFailure.code: "Platform username verification is temporarily unavailable",
    StoreFailure.code: "Internal server error",
}


def _error_body(message: str, code: str, details=None) -> dict:
    body = {"error": message, "code": code}
    if details is not None:
        body["details"] = details
    return body


def _request_validation_details(exc: RequestValidationError) -> dict[str, str]:
    """Flatten pydantic errors to {field: message}, keyed by the body field name."""
    details: dict[str, str] = {}
    for error in exc.errors():
        loc = [str(part) for part in error.get("loc", ()) if part not in ("body", "query")]
        field = ".".join(loc) or "body"
        details.setdefault(field, error.get("msg", "Invalid value"))
    return details


def install_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(ServiceError)
    async def service_error_handler(request: Request, exc: ServiceError):
        if exc.status_code >= 500:
            logger.error(
                "request.service_failure",
                path=request.url.path,
                method=request.method,
                code=exc.code,
                error=exc.message,
                error_type=type(exc).__name__,
                cause=repr(exc.__cause__) if exc.__cause__ else None,
            )
            message = GENERIC_MESSAGES.get(exc.code, "Internal server error")
            return JSONResponse(status_code=exc.status_code, content=_error_body(message, exc.code))

        return JSONResponse(
            status_code=exc.status_code,
            content=_error_body(exc.message, exc.code, exc.details),
        )

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(_: Request, exc: RequestValidationError):
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=_error_body(
                "Validation failed", "VALIDATION_FAILED", _request_validation_details(exc)
            ),
        )

    @app.exception_handler(SQLAlchemyError)
    async def store_error_handler(request: Request, exc: SQLAlchemyError):
        logger.error(
            "request.store_failure",
            path=request.url.path,
            method=request.method,
            error=str(exc),
            error_type=type(exc).__name__,
            exc_info=exc,
        )
        return JSONResponse(
            status_code=StoreFailure.status_code,
            content=_error_body(GENERIC_MESSAGES[StoreFailure.code], StoreFailure.code),
        )

    @app.exception_handler(Exception)
    async def unexpected_error_handler(request: Request, exc: Exception):
        logger.error(
            "request.unexpected_failure",
            path=request.url.path,
            method=request.method,
            error=str(exc),
            error_type=type(exc).__name__,
            exc_info=exc,
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=_error_body("Internal server error", ServiceError.code),
        )
