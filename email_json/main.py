"""Main FastAPI application entry point."""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from email_json import __version__
from email_json.api.middleware import (
    api_key_middleware,
    extraction_error_handler,
    request_logging_middleware,
)
from email_json.api.models import HealthResponse
from email_json.api.routes import extraction_router
from email_json.config.settings import settings
from email_json.services.errors import ExtractionError
from email_json.services.http_client import HttpClient, build_async_client
from email_json.utils.logging import configure_logging, get_logger

# Configure logging
configure_logging()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator:
    """Application lifespan manager."""
    logger.info("Starting Email JSON Extractor", env=settings.app.env, version=__version__)

    # One pooled client per process; every request borrows it
    async_client = build_async_client(settings.fetch)
    app.state.http_client = HttpClient(async_client)
    logger.info(
        "HTTP client ready",
        link_timeout_seconds=settings.fetch.link_timeout_seconds,
        follow_redirects=settings.fetch.follow_redirects,
    )

    yield

    logger.info("Shutting down...")
    await async_client.aclose()
    logger.info("Application shutdown complete")


# Create FastAPI app
app = FastAPI(
    title="Email JSON Extractor",
    description="Locate the JSON payload attached to or linked from an email",
    version=__version__,
    lifespan=lifespan,
)

app.add_exception_handler(ExtractionError, extraction_error_handler)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.admin.cors_origins,
    allow_credentials=True,
    allow_methods=["GET"],
    allow_headers=["*"],
)

# Add custom middleware
app.middleware("http")(api_key_middleware)
app.middleware("http")(request_logging_middleware)

# Include API routers
app.include_router(extraction_router, prefix="/api/v1")


@app.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """Basic health check."""
    return HealthResponse(status="healthy", version=__version__)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "email_json.main:app",
        host="0.0.0.0",
        port=settings.admin.port,
        reload=settings.app.debug,
        log_level=settings.app.log_level.lower(),
    )
