"""HTTP middleware for request ID propagation and access logging.

Every request/response pair carries a correlation id:
- Accepts the incoming request id header or generates a UUID
- Stores it in contextvars so every log line of the request includes it
- Echoes it back with the request duration in the response headers
- Logs one ``request.completed`` event per request

Usage:
    app.middleware("http")(request_id_middleware)
"""

from __future__ import annotations

import logging
import time
import uuid

from fastapi import Request, Response

from buyer_leads.core.config import settings
from buyer_leads.core.logging import clear_request_id, set_request_id

logger = logging.getLogger(__name__)


def _log_completed(request: Request, status: int, start: float) -> float:
    duration_ms = (time.perf_counter() - start) * 1000
    logger.info(
        "request.completed",
        extra={
            "method": request.method,
            "path": request.url.path,
            "status": status,
            "duration_ms": round(duration_ms, 2),
        },
    )
    return duration_ms


async def request_id_middleware(request: Request, call_next) -> Response:
    """Assign a request id, time the request and log its outcome.

    Args:
        request: The incoming HTTP request object.
        call_next: The next middleware/route handler in the stack.

    Returns:
        Response with the request id header and ``X-Request-Duration-ms``.
    """

    header_name = settings.log.request_id_header
    request_id = request.headers.get(header_name) or str(uuid.uuid4())
    set_request_id(request_id)
    start = time.perf_counter()
    try:
        response: Response = await call_next(request)
    except Exception:
        # the error handler renders the 500 body after this middleware unwinds
        _log_completed(request, 500, start)
        raise
    else:
        duration_ms = _log_completed(request, response.status_code, start)
    finally:
        clear_request_id()

    response.headers[header_name] = request_id
    response.headers.setdefault("X-Request-Duration-ms", f"{duration_ms:.2f}")
    return response
