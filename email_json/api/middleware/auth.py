"""Authentication middleware for API key validation."""

import secrets
from typing import Callable

from fastapi import Request, status
from fastapi.responses import JSONResponse

from email_json.config.settings import settings
from email_json.utils.logging import get_logger

logger = get_logger(__name__)


async def api_key_middleware(request: Request, call_next: Callable):
    """
    Validate API key for ``/api/`` endpoints.

    Only enforced when ``ADMIN_API_KEY`` is configured. Requires an
    ``X-API-Key`` header matching it.
    """
    expected = settings.admin.api_key
    if expected is None or not request.url.path.startswith("/api/"):
        return await call_next(request)

    api_key = request.headers.get("X-API-Key")

    if not api_key:
        logger.warning(
            "Missing API key",
            path=request.url.path,
            client_ip=request.client.host if request.client else None,
        )
        return JSONResponse(
            status_code=status.HTTP_401_UNAUTHORIZED,
            content={"detail": "Missing API key. Provide X-API-Key header."},
        )

    if not secrets.compare_digest(api_key.encode(), expected.get_secret_value().encode()):
        logger.warning(
            "Invalid API key",
            path=request.url.path,
            client_ip=request.client.host if request.client else None,
        )
        return JSONResponse(
            status_code=status.HTTP_403_FORBIDDEN,
            content={"detail": "Invalid API key"},
        )

    return await call_next(request)
