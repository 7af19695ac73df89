"""Orchestrates the attachment, direct-link and indirect-link strategies."""

from typing import Optional

import structlog

from email_json.models.email import DecodedMessage
from email_json.models.extraction import ExtractionResult, ExtractionStrategy
from email_json.models.source import SourceDescriptor
from email_json.services.attachment_scanner import AttachmentScanner
from email_json.services.content_fetcher import ContentFetcher
from email_json.services.email_decoder import EmailDecoder
from email_json.services.errors import JSONNotFoundError
from email_json.services.http_client import HttpClient
from email_json.services.link_harvester import LinkHarvester
from email_json.services.link_resolver import LinkResolver
from email_json.utils.logging import get_logger


class ExtractionService:
    """
    Locate the JSON payload of one email.

    Strategies run in a fixed order and the first success wins:

    1. a JSON attachment,
    2. a body link answering with JSON,
    3. a body link to an HTML page that links to JSON.

    All work for a request is sequential; nothing is shared between
    requests except the pooled HTTP client.
    """

    def __init__(
        self,
        http_client: HttpClient,
        fetcher: Optional[ContentFetcher] = None,
        decoder: Optional[EmailDecoder] = None,
        scanner: Optional[AttachmentScanner] = None,
        harvester: Optional[LinkHarvester] = None,
        resolver: Optional[LinkResolver] = None,
        logger: Optional[structlog.stdlib.BoundLogger] = None,
    ) -> None:
        self.logger = logger or get_logger(__name__)
        self.fetcher = fetcher or ContentFetcher(http_client, logger=self.logger)
        self.decoder = decoder or EmailDecoder(logger=self.logger)
        self.scanner = scanner or AttachmentScanner(logger=self.logger)
        self.harvester = harvester or LinkHarvester(logger=self.logger)
        self.resolver = resolver or LinkResolver(http_client, logger=self.logger)

    async def extract(self, source: SourceDescriptor) -> ExtractionResult:
        """
        Fetch, decode and search an email for JSON.

        Raises:
            BadInputError, SourceNotFoundError, SourceFetchError,
            SourceReadError, EmailParseError: Source could not be loaded
            JSONNotFoundError: Every strategy was exhausted
        """
        self.logger.info("Processing email", source=source.model_dump())

        raw = await self.fetcher.fetch(source)
        message = self.decoder.decode(raw)
        return await self.extract_from_message(message)

    async def extract_from_message(self, message: DecodedMessage) -> ExtractionResult:
        """Run the strategies against an already decoded message."""
        self.logger.info("Checking attachments for JSON", attachment_count=len(message.attachments))
        probe = self.scanner.scan(message.attachments)
        if probe.found:
            self.logger.info("JSON found in attachments", filename=probe.origin)
            return ExtractionResult.from_probe(probe, ExtractionStrategy.ATTACHMENT)

        self.logger.info("Checking links for JSON", attachment_outcome=probe.status.value)
        links = self.harvester.harvest(message.html, message.text)
        probe = await self.resolver.resolve_all(links)
        if probe.found:
            strategy = ExtractionStrategy.INDIRECT_LINK if probe.via else ExtractionStrategy.DIRECT_LINK
            self.logger.info("JSON found via links", strategy=strategy.value, url=probe.origin, page_url=probe.via)
            return ExtractionResult.from_probe(probe, strategy)

        self.logger.warning("No JSON located", message_id=message.message_id, links_checked=len(links))
        raise JSONNotFoundError("No JSON found in email attachments or links")
