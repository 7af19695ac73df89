"""API request/response models."""

from typing import Optional

from pydantic import BaseModel, Field


class ExtractionQuery(BaseModel):
    """Query parameters of the extraction endpoint."""

    url: Optional[str] = Field(default=None, description="HTTP(S) URL of the raw email")
    path: Optional[str] = Field(default=None, description="Filesystem path of the raw email")


class ErrorResponse(BaseModel):
    """Body returned for any classified extraction failure."""

    error: str = Field(description="Failure class: bad_input, not_found, fetch_error, read_error, parse_error")
    detail: str


class HealthResponse(BaseModel):
    """Liveness probe response."""

    status: str
    version: str
