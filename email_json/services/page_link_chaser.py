"""Indirect-link strategy: find a JSON link on an intermediate HTML page."""

from typing import Optional
from urllib.parse import urljoin, urlsplit

import httpx
import structlog

from email_json.config.settings import FetchConfig, settings
from email_json.models.extraction import Probe, ProbeStatus
from email_json.services.errors import LinkFetchError
from email_json.services.http_client import HttpClient
from email_json.services.link_harvester import extract_html_links
from email_json.utils.logging import get_logger

JSON_SUFFIX = ".json"
_FETCHABLE_SCHEMES = ("http", "https")


def resolve_link(link: str, base_url: str) -> Optional[str]:
    """
    Resolve ``link`` against ``base_url``.

    Returns:
        Absolute URL, or None when the result is malformed or not HTTP(S)
    """
    try:
        absolute = urljoin(base_url, link.strip())
        parts = urlsplit(absolute)
        if parts.scheme.lower() not in _FETCHABLE_SCHEMES or not parts.netloc:
            return None
        httpx.URL(absolute)
    except (ValueError, httpx.InvalidURL):
        return None
    return absolute


def looks_like_json_url(url: str) -> bool:
    """True when the URL, ignoring its query string, ends in ``.json``."""
    return url.lower().split("?", 1)[0].endswith(JSON_SUFFIX)


class PageLinkChaser:
    """
    Follow one hop from an HTML page to a JSON resource.

    Only links that look like ``.json`` files are fetched. The first one
    answering 200 with a JSON body wins.
    """

    def __init__(
        self,
        http_client: HttpClient,
        config: Optional[FetchConfig] = None,
        logger: Optional[structlog.stdlib.BoundLogger] = None,
    ) -> None:
        self.http = http_client
        self.config = config or settings.fetch
        self.logger = logger or get_logger(__name__)

    async def chase(self, html: str, base_url: str) -> Probe:
        """
        Search the page for a reachable JSON link.

        Args:
            html: Page body
            base_url: URL of the page, used for relative links

        Returns:
            FOUND probe (with ``via`` set to the page URL), or NO_CANDIDATE
        """
        links = extract_html_links(html)
        candidates = 0

        for link in links:
            absolute = resolve_link(link, base_url)
            if absolute is None:
                self.logger.debug("Skipping unresolvable page link", link=link, base_url=base_url)
                continue
            if not looks_like_json_url(absolute):
                continue

            candidates += 1
            probe = await self._check(absolute, base_url)
            if probe.found:
                self.logger.info("JSON found via page link", page_url=base_url, link=absolute)
                return probe

        self.logger.debug(
            "No JSON link on page",
            page_url=base_url,
            page_links=len(links),
            json_candidates=candidates,
        )
        return Probe.miss(ProbeStatus.NO_CANDIDATE, origin=base_url)

    async def _check(self, url: str, page_url: str) -> Probe:
        self.logger.debug("Checking indirect link", link=url, page_url=page_url)
        try:
            response = await self.http.get(url, timeout=self.config.link_timeout_seconds)
        except LinkFetchError as e:
            self.logger.debug("Indirect link fetch failed", link=url, error=e.reason)
            return Probe.miss(ProbeStatus.FETCH_FAILED, origin=url, detail=e.reason)

        if response.status_code != 200:
            return Probe.miss(ProbeStatus.BAD_STATUS, origin=url, detail=str(response.status_code))

        return response.json_probe(via=page_url)
