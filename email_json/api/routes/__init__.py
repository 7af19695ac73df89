"""API route modules."""

from .extraction import router as extraction_router

__all__ = ["extraction_router"]
