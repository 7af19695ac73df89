"""Attachment strategy: JSON carried directly in the email."""

from typing import Iterable, Optional

import structlog

from email_json.config.settings import ExtractionConfig, settings
from email_json.models.email import Attachment
from email_json.models.extraction import Probe, ProbeStatus
from email_json.utils.json_utils import loads_strict
from email_json.utils.logging import get_logger

JSON_CONTENT_TYPE = "application/json"
JSON_SUFFIX = ".json"


def is_json_attachment(attachment: Attachment) -> bool:
    """
    Classify an attachment as a JSON candidate.

    Content type is checked first, then the filename suffix. Either one is
    enough.
    """
    if JSON_CONTENT_TYPE in (attachment.content_type or "").lower():
        return True
    return (attachment.filename or "").lower().endswith(JSON_SUFFIX)


def parse_attachment(attachment: Attachment) -> Probe:
    """Decode an attachment as UTF-8 and parse it as one JSON document."""
    try:
        text = attachment.content.decode("utf-8-sig")
        value = loads_strict(text)
    except ValueError as e:
        # UnicodeDecodeError and JSONDecodeError are both ValueErrors
        return Probe.miss(ProbeStatus.PARSE_FAILED, origin=attachment.filename, detail=str(e))
    return Probe.hit(value, origin=attachment.filename)


class AttachmentScanner:
    """
    Find the first JSON attachment of a message.

    With fallthrough disabled (the default) the first candidate decides the
    outcome: if it does not parse, later attachments are not examined.
    """

    def __init__(
        self,
        config: Optional[ExtractionConfig] = None,
        logger: Optional[structlog.stdlib.BoundLogger] = None,
    ) -> None:
        self.config = config or settings.extraction
        self.logger = logger or get_logger(__name__)

    def scan(self, attachments: Iterable[Attachment]) -> Probe:
        """
        Scan attachments in document order.

        Returns:
            FOUND probe with the parsed value, PARSE_FAILED if the deciding
            candidate is not valid JSON, NO_CANDIDATE if nothing looks like JSON
        """
        last_failure: Optional[Probe] = None

        for index, attachment in enumerate(attachments):
            if not is_json_attachment(attachment):
                continue

            probe = parse_attachment(attachment)
            if probe.found:
                self.logger.info(
                    "JSON attachment parsed",
                    filename=attachment.filename,
                    content_type=attachment.content_type,
                    index=index,
                )
                return probe

            self.logger.warning(
                "Found JSON attachment but failed to parse",
                filename=attachment.filename,
                content_type=attachment.content_type,
                index=index,
                error=probe.detail,
            )
            if not self.config.attachment_fallthrough:
                return probe
            last_failure = probe

        if last_failure is not None:
            return last_failure
        return Probe.miss(ProbeStatus.NO_CANDIDATE)
