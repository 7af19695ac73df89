"""Request logging middleware."""

import time
import uuid
from typing import Callable

import structlog
from fastapi import Request

from email_json.utils.logging import get_logger

logger = get_logger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"


async def request_logging_middleware(request: Request, call_next: Callable):
    """
    Log all incoming requests with timing and response status.

    Binds a request ID to the structlog context so every log line emitted
    while serving the request carries it. An incoming ``X-Request-ID`` is
    reused, otherwise a new one is generated and echoed back.
    """
    start_time = time.time()

    request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex
    structlog.contextvars.clear_contextvars()
    structlog.contextvars.bind_contextvars(request_id=request_id)

    # Extract request info
    method = request.method
    path = request.url.path
    client_ip = request.client.host if request.client else None

    try:
        response = await call_next(request)
    except Exception as e:
        logger.error(
            "Request raised",
            method=method,
            path=path,
            error=str(e),
            duration_ms=round((time.time() - start_time) * 1000, 2),
        )
        structlog.contextvars.clear_contextvars()
        raise

    duration_ms = (time.time() - start_time) * 1000
    response.headers[REQUEST_ID_HEADER] = request_id

    log_data = {
        "method": method,
        "path": path,
        "status_code": response.status_code,
        "duration_ms": round(duration_ms, 2),
    }

    if client_ip:
        log_data["client_ip"] = client_ip

    # Log at appropriate level
    if response.status_code >= 500:
        logger.error("Request failed", **log_data)
    elif response.status_code >= 400:
        logger.warning("Request error", **log_data)
    else:
        logger.info("Request completed", **log_data)

    structlog.contextvars.clear_contextvars()
    return response
