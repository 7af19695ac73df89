"""Exception handlers mapping extraction failures to HTTP responses."""

from fastapi import Request
from fastapi.responses import JSONResponse

from email_json.services.errors import ExtractionError
from email_json.utils.logging import get_logger

logger = get_logger(__name__)


async def extraction_error_handler(request: Request, exc: ExtractionError) -> JSONResponse:
    """
    Render a classified extraction failure.

    Returns:
        JSONResponse with the error's status code, message and error code
    """
    logger.warning(
        "Extraction failed",
        path=request.url.path,
        error_code=exc.error_code,
        status_code=exc.status_code,
        error=exc.message,
    )

    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error": exc.error_code,
            "detail": exc.message,
        },
    )
