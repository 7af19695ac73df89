"""Resolve a source descriptor to the raw bytes of an email."""

from pathlib import Path
from stat import S_ISREG
from typing import Optional

import aiofiles
import structlog

from email_json.config.settings import FetchConfig, settings
from email_json.models.source import FileSource, SourceDescriptor, UrlSource
from email_json.services.errors import (
    BadInputError,
    LinkFetchError,
    SourceFetchError,
    SourceNotFoundError,
    SourceReadError,
)
from email_json.services.http_client import HttpClient
from email_json.utils.logging import get_logger


class ContentFetcher:
    """Reads emails from the local filesystem or a remote URL."""

    def __init__(
        self,
        http_client: HttpClient,
        config: Optional[FetchConfig] = None,
        logger: Optional[structlog.stdlib.BoundLogger] = None,
    ) -> None:
        self.http = http_client
        self.config = config or settings.fetch
        self.logger = logger or get_logger(__name__)

    async def fetch(self, source: SourceDescriptor) -> bytes:
        """
        Load the raw email document.

        Raises:
            BadInputError: Path outside the configured source root
            SourceNotFoundError: Local file does not exist
            SourceReadError: Local file unreadable or too large
            SourceFetchError: Remote source unreachable or non-2xx
        """
        if isinstance(source, UrlSource):
            return await self._fetch_url(source.url)
        if isinstance(source, FileSource):
            return await self._read_file(source.path)
        raise BadInputError(f"Unsupported source: {source!r}")

    async def _fetch_url(self, url: str) -> bytes:
        try:
            response = await self.http.get(
                url,
                timeout=self.config.source_timeout_seconds,
                max_bytes=self.config.max_source_bytes,
            )
        except LinkFetchError as e:
            self.logger.warning("Email source fetch failed", url=url, error=e.reason)
            raise SourceFetchError(f"Failed to fetch email from URL: {e.reason}") from e

        if not 200 <= response.status_code < 300:
            self.logger.warning("Email source returned error status", url=url, status=response.status_code)
            raise SourceFetchError(
                f"Failed to fetch email from URL: HTTP {response.status_code}"
            )

        self.logger.info("Email fetched from URL", url=url, size_bytes=len(response.body))
        return response.body

    async def _read_file(self, raw_path: str) -> bytes:
        path = self._resolve_path(raw_path)

        try:
            stat = path.stat()
        except (FileNotFoundError, NotADirectoryError) as e:
            raise SourceNotFoundError(f"File not found at path: {raw_path}") from e
        except (OSError, ValueError) as e:
            # Too-long names, permissions, embedded NUL bytes
            self.logger.error("Email file stat failed", path=raw_path, error=str(e))
            raise SourceReadError(f"Failed to read file: {e}") from e

        if not S_ISREG(stat.st_mode):
            raise SourceReadError(f"Failed to read file: {raw_path} is not a regular file")
        if stat.st_size > self.config.max_source_bytes:
            raise SourceReadError(
                f"Failed to read file: {stat.st_size} bytes exceeds limit of "
                f"{self.config.max_source_bytes} bytes"
            )

        try:
            async with aiofiles.open(path, "rb") as f:
                content = await f.read()
        except OSError as e:
            self.logger.error("Email file read failed", path=str(path), error=str(e))
            raise SourceReadError(f"Failed to read file: {e}") from e

        self.logger.info("Email read from file", path=str(path), size_bytes=len(content))
        return content

    def _resolve_path(self, raw_path: str) -> Path:
        """Expand the path and enforce ``SOURCE_ROOT`` when configured."""
        root = self.config.source_root
        try:
            path = Path(raw_path).expanduser()
            if root is None:
                return path
            root = root.expanduser().resolve()
            resolved = (root / path).resolve() if not path.is_absolute() else path.resolve()
        except (OSError, ValueError, RuntimeError) as e:
            # Unknown ~user, symlink loops, names the OS rejects
            raise SourceReadError(f"Failed to read file: {e}") from e

        if not resolved.is_relative_to(root):
            self.logger.warning("Rejected path outside source root", path=raw_path, root=str(root))
            raise BadInputError(f"Path is outside the allowed source directory: {raw_path}")
        return resolved
