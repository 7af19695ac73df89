"""Bounded single-attempt HTTP GET used by the fetcher and link strategies."""

import asyncio
from dataclasses import dataclass, field
from typing import Optional

import httpx
import structlog

from email_json.config.settings import FetchConfig, settings
from email_json.models.extraction import Probe, ProbeStatus
from email_json.services.errors import LinkFetchError
from email_json.utils.json_utils import loads_strict
from email_json.utils.logging import get_logger

JSON_CONTENT_TYPE = "application/json"
HTML_CONTENT_TYPE = "text/html"

# Only bodies opening like an object or array are sniffed for JSON
_STRUCTURED_PREFIXES = ("{", "[")


def build_async_client(config: Optional[FetchConfig] = None, **kwargs) -> httpx.AsyncClient:
    """Create the pooled client shared by every fetch of a process."""
    config = config or settings.fetch
    return httpx.AsyncClient(
        headers={"User-Agent": config.user_agent},
        follow_redirects=config.follow_redirects,
        timeout=config.link_timeout_seconds,
        **kwargs,
    )


@dataclass(frozen=True)
class FetchedResponse:
    """Fully read response of a single GET."""

    url: str
    status_code: int
    content_type: str = ""
    body: bytes = b""
    encoding: Optional[str] = None
    headers: dict[str, str] = field(default_factory=dict)

    @property
    def text(self) -> str:
        try:
            return self.body.decode(self.encoding or "utf-8", errors="replace")
        except LookupError:
            # Unknown charset label in Content-Type
            return self.body.decode("utf-8", errors="replace")

    @property
    def is_json_type(self) -> bool:
        return JSON_CONTENT_TYPE in self.content_type.lower()

    @property
    def is_html_type(self) -> bool:
        return HTML_CONTENT_TYPE in self.content_type.lower()

    def json_probe(self, via: Optional[str] = None) -> Probe:
        """
        Classify the body as JSON.

        A JSON content type is always parsed. Any other content type is
        sniffed: the body counts as JSON only if it parses to an object or
        an array.

        Returns:
            FOUND probe with the parsed value, PARSE_FAILED when a JSON
            content type carries an invalid document, NOT_JSON otherwise
        """
        stripped = self.text.lstrip("\ufeff \t\r\n")
        if self.is_json_type:
            try:
                return Probe.hit(loads_strict(stripped), origin=self.url, via=via)
            except ValueError as e:
                return Probe.miss(ProbeStatus.PARSE_FAILED, origin=self.url, detail=str(e))

        if stripped.startswith(_STRUCTURED_PREFIXES):
            try:
                value = loads_strict(stripped)
            except ValueError:
                value = None
            if isinstance(value, (dict, list)):
                return Probe.hit(value, origin=self.url, via=via)

        return Probe.miss(ProbeStatus.NOT_JSON, origin=self.url, detail=self.content_type or None)


class HttpClient:
    """
    Thin wrapper over ``httpx.AsyncClient``.

    Non-2xx statuses are returned, never raised. Transport failures,
    timeouts, malformed URLs and oversized bodies raise ``LinkFetchError``.
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        max_response_bytes: Optional[int] = None,
        logger: Optional[structlog.stdlib.BoundLogger] = None,
    ) -> None:
        self.client = client
        self.max_response_bytes = max_response_bytes or settings.fetch.max_link_response_bytes
        self.logger = logger or get_logger(__name__)

    async def get(
        self,
        url: str,
        timeout: Optional[float] = None,
        max_bytes: Optional[int] = None,
    ) -> FetchedResponse:
        """
        Issue one GET and read the whole body.

        Args:
            url: Absolute URL to fetch
            timeout: Overall deadline in seconds (defaults to the link timeout)
            max_bytes: Body size cap (defaults to the client's cap)

        Raises:
            LinkFetchError: On any transport-level failure
        """
        timeout = timeout if timeout is not None else settings.fetch.link_timeout_seconds
        limit = max_bytes or self.max_response_bytes

        try:
            return await asyncio.wait_for(self._get(url, timeout, limit), timeout=timeout)
        except (asyncio.TimeoutError, httpx.TimeoutException) as e:
            raise LinkFetchError(url, f"timed out after {timeout}s") from e
        except httpx.InvalidURL as e:
            raise LinkFetchError(url, f"invalid URL: {e}") from e
        except httpx.HTTPError as e:
            raise LinkFetchError(url, str(e) or type(e).__name__) from e

    async def _get(self, url: str, timeout: float, limit: int) -> FetchedResponse:
        async with self.client.stream("GET", url, timeout=timeout) as response:
            chunks: list[bytes] = []
            received = 0
            async for chunk in response.aiter_bytes():
                received += len(chunk)
                if received > limit:
                    raise LinkFetchError(url, f"response exceeds {limit} bytes")
                chunks.append(chunk)

            fetched = FetchedResponse(
                url=str(response.url),
                status_code=response.status_code,
                content_type=response.headers.get("content-type", ""),
                body=b"".join(chunks),
                encoding=response.charset_encoding,
                headers=dict(response.headers),
            )

        self.logger.debug(
            "Fetched URL",
            url=url,
            final_url=fetched.url,
            status=fetched.status_code,
            content_type=fetched.content_type,
            size_bytes=received,
        )
        return fetched
