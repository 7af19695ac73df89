"""Email JSON extraction endpoint."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import JSONResponse

from email_json.api.models import ErrorResponse, ExtractionQuery
from email_json.models.source import source_from_params
from email_json.services.extraction_service import ExtractionService
from email_json.services.http_client import HttpClient
from email_json.utils.logging import get_logger

logger = get_logger(__name__)
router = APIRouter(prefix="/email", tags=["Email"])

STRATEGY_HEADER = "X-Extraction-Strategy"
ORIGIN_HEADER = "X-Extraction-Origin"


def get_extraction_service(request: Request) -> ExtractionService:
    """Build a request-scoped service over the app's pooled HTTP client."""
    http_client: HttpClient = request.app.state.http_client
    return ExtractionService(http_client)


@router.get(
    "/json",
    responses={
        400: {"model": ErrorResponse, "description": "Bad input, unreachable source or malformed email"},
        404: {"model": ErrorResponse, "description": "Source file missing or no JSON located"},
    },
)
async def extract_json(
    query: Annotated[ExtractionQuery, Query()],
    service: Annotated[ExtractionService, Depends(get_extraction_service)],
) -> JSONResponse:
    """
    Locate the JSON payload of an email.

    **Source** (one of, ``url`` wins when both are given):
    - `url`: HTTP(S) location of the raw email
    - `path`: filesystem path of the raw email

    **Search order:** JSON attachment, then body links answering with JSON,
    then body links to HTML pages that link to a ``.json`` resource.

    Returns the JSON value itself. The strategy that produced it is reported
    in the ``X-Extraction-Strategy`` header.
    """
    source = source_from_params(url=query.url, path=query.path)
    result = await service.extract(source)

    logger.info(
        "JSON extracted",
        strategy=result.strategy.value,
        origin=result.origin,
        page_url=result.via,
    )

    headers = {STRATEGY_HEADER: result.strategy.value}
    if result.origin and result.origin.isascii() and result.origin.isprintable():
        headers[ORIGIN_HEADER] = result.origin
    return JSONResponse(content=result.value, headers=headers)
