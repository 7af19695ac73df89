"""API middleware modules."""

from .auth import api_key_middleware
from .errors import extraction_error_handler
from .logging import request_logging_middleware

__all__ = [
    "api_key_middleware",
    "extraction_error_handler",
    "request_logging_middleware",
]
