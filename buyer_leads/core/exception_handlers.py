"""Exception handlers rendering every failure in one JSON envelope::

    {"error": {"code": ..., "message": ..., "request_id": ..., "details": ...}}

- ``AppError`` subclasses use their own ``status_code`` and headers.
- Request validation failures become 422 ``validation_error`` with the
  offending fields listed under ``details.fields``.
- Anything else becomes a generic 500; internals stay in the logs.
"""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from buyer_leads.core.errors import AppError
from buyer_leads.core.logging import get_request_id

logger = logging.getLogger(__name__)


def _error_body(code: str, message: str, details: dict | None = None) -> dict:
    body = {"code": code, "message": message, "request_id": get_request_id()}
    if details:
        body["details"] = details
    return {"error": body}


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    """Render an ``AppError`` with the status and headers it carries."""
    status_code = exc.status_code
    log = logger.error if status_code >= 500 else logger.warning
    log(
        "error.app",
        extra={
            "error_code": exc.code,
            "status_code": status_code,
            "method": request.method,
            "path": request.url.path,
        },
    )
    details = dict(exc.details) if exc.details else None
    return JSONResponse(
        status_code=status_code,
        content=_error_body(exc.code, exc.message, details),
        headers=exc.headers,
    )


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Turn FastAPI/pydantic request validation failures into 422 envelopes."""
    fields = [
        {
            # drop the "body"/"query" prefix so clients see plain field names
            "field": ".".join(str(part) for part in err.get("loc", ())[1:]) or "request",
            "message": err.get("msg", ""),
            "type": err.get("type", ""),
        }
        for err in exc.errors()
    ]
    logger.info(
        "error.request_validation",
        extra={"path": request.url.path, "field_count": len(fields)},
    )
    return JSONResponse(
        status_code=422,
        content=_error_body("validation_error", "Request validation failed", {"fields": fields}),
    )


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Last-resort handler: log the failure, answer with an opaque 500."""
    logger.error(
        "error.unhandled",
        exc_info=exc,
        extra={
            "error_type": type(exc).__name__,
            "method": request.method,
            "path": request.url.path,
        },
    )
    return JSONResponse(
        status_code=500,
        content=_error_body(
            "internal_server_error",
            "An unexpected error occurred. Please try again later.",
        ),
    )


def setup_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, general_exception_handler)
