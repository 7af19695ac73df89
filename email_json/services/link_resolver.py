"""Direct-link strategy: fetch a harvested link and classify the response."""

from typing import Iterable, Optional

import structlog

from email_json.config.settings import FetchConfig, settings
from email_json.models.extraction import Probe, ProbeStatus
from email_json.services.errors import LinkFetchError
from email_json.services.http_client import HttpClient
from email_json.services.page_link_chaser import PageLinkChaser, resolve_link
from email_json.utils.logging import get_logger


class LinkResolver:
    """
    Resolve body links to JSON.

    Each link gets a single bounded GET. A JSON response is returned as is;
    an HTML page is handed to the ``PageLinkChaser`` for one more hop.
    """

    def __init__(
        self,
        http_client: HttpClient,
        page_chaser: Optional[PageLinkChaser] = None,
        config: Optional[FetchConfig] = None,
        logger: Optional[structlog.stdlib.BoundLogger] = None,
    ) -> None:
        self.http = http_client
        self.config = config or settings.fetch
        self.logger = logger or get_logger(__name__)
        self.page_chaser = page_chaser or PageLinkChaser(http_client, config=self.config, logger=self.logger)

    async def resolve_all(self, links: Iterable[str]) -> Probe:
        """Try links in order and stop at the first one yielding JSON."""
        checked = 0
        for link in links:
            checked += 1
            probe = await self.resolve(link)
            if probe.found:
                return probe
            self.logger.debug("Link yielded no JSON", link=link, status=probe.status.value, detail=probe.detail)

        self.logger.info("No JSON found via links", links_checked=checked)
        return Probe.miss(ProbeStatus.NO_CANDIDATE)

    async def resolve(self, link: str) -> Probe:
        """
        Fetch one link and classify the response.

        Returns:
            FOUND probe for a direct or chased JSON document, otherwise a miss
            describing why the link was rejected
        """
        self.logger.debug("Checking link", link=link)
        url = resolve_link(link, "")
        if url is None:
            return Probe.miss(ProbeStatus.INVALID_URL, origin=link, detail="not an absolute http(s) URL")

        try:
            response = await self.http.get(url, timeout=self.config.link_timeout_seconds)
        except LinkFetchError as e:
            self.logger.debug("Failed to check link", link=link, error=e.reason)
            return Probe.miss(ProbeStatus.FETCH_FAILED, origin=url, detail=e.reason)

        if response.status_code != 200:
            return Probe.miss(ProbeStatus.BAD_STATUS, origin=url, detail=str(response.status_code))

        probe = response.json_probe()
        if probe.found:
            self.logger.info("JSON found at link", link=link, final_url=response.url)
            return probe
        if probe.status is ProbeStatus.PARSE_FAILED:
            self.logger.debug("Link declared JSON but body did not parse", link=link, error=probe.detail)
            return probe

        if response.is_html_type:
            # Relative links on the page resolve against where we landed
            return await self.page_chaser.chase(response.text, response.url)

        return probe
