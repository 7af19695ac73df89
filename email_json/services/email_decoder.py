"""MIME decoding of raw email bytes."""

from email import policy
from email.errors import MessageError
from email.message import EmailMessage
from email.parser import BytesParser
from typing import Optional

import structlog

from email_json.models.email import Attachment, DecodedMessage
from email_json.services.errors import EmailParseError
from email_json.utils.logging import get_logger


class EmailDecoder:
    """
    Turn an RFC 822 document into a ``DecodedMessage``.

    The first non-attachment ``text/html`` and ``text/plain`` parts become
    the bodies. Every other leaf part (and any part marked as an attachment
    or carrying a filename) becomes an attachment, in MIME tree order.
    Attached ``message/rfc822`` parts are kept whole, not descended into.
    """

    def __init__(self, logger: Optional[structlog.stdlib.BoundLogger] = None) -> None:
        self.logger = logger or get_logger(__name__)
        self.parser = BytesParser(policy=policy.default)

    def decode(self, raw: bytes) -> DecodedMessage:
        """
        Parse raw bytes into a structured message.

        Raises:
            EmailParseError: Empty input or a structure that cannot be parsed
        """
        if not raw or not raw.strip():
            raise EmailParseError("Failed to parse email: document is empty")

        try:
            message = self.parser.parsebytes(raw)
            html, text, attachments = self._collect_parts(message)
        except (MessageError, ValueError, TypeError, LookupError, IndexError, AttributeError) as e:
            self.logger.warning("Email structure could not be parsed", error=str(e))
            raise EmailParseError(f"Failed to parse email: {e}") from e

        if not message.keys() and not html and not text and not attachments:
            raise EmailParseError("Failed to parse email: no headers or content found")

        if message.defects:
            self.logger.debug(
                "Email parsed with defects",
                defects=[type(d).__name__ for d in message.defects],
            )

        decoded = DecodedMessage(
            attachments=tuple(attachments),
            html=html,
            text=text,
            subject=_header(message, "Subject"),
            sender=_header(message, "From"),
            message_id=_header(message, "Message-ID"),
        )

        self.logger.info(
            "Email decoded",
            message_id=decoded.message_id,
            attachment_count=len(decoded.attachments),
            has_html=decoded.html is not None,
            has_text=decoded.text is not None,
        )
        return decoded

    def _collect_parts(
        self, message: EmailMessage
    ) -> tuple[Optional[str], Optional[str], list[Attachment]]:
        html: Optional[str] = None
        text: Optional[str] = None
        attachments: list[Attachment] = []

        stack = [message]
        while stack:
            part = stack.pop(0)
            content_type = part.get_content_type()
            is_attachment = part.is_attachment() or part.get_filename() is not None

            # message/rfc822 reports itself as multipart, so check it first
            if part.get_content_maintype() == "message" and part is not message:
                attachments.append(self._attachment(part, _embedded_message_bytes(part)))
                continue

            if part.is_multipart():
                # Depth-first, keeping document order
                stack[:0] = list(part.iter_parts())
                continue

            if not is_attachment and content_type == "text/html" and html is None:
                html = _text_payload(part)
                continue

            if not is_attachment and content_type == "text/plain" and text is None:
                text = _text_payload(part)
                continue

            # Inline text alternatives beyond the first are not attachments
            if not is_attachment and content_type in ("text/html", "text/plain"):
                continue

            attachments.append(self._attachment(part, part.get_payload(decode=True) or b""))

        return html, text, attachments

    def _attachment(self, part: EmailMessage, content: bytes) -> Attachment:
        return Attachment(
            content_type=part.get_content_type(),
            filename=part.get_filename(),
            content=content,
        )


def _header(message: EmailMessage, name: str) -> Optional[str]:
    # Headers are parsed lazily on access; a malformed one is only diagnostic
    try:
        value = message.get(name)
        return str(value) if value is not None else None
    except (MessageError, IndexError, AttributeError, ValueError):
        return None


def _text_payload(part: EmailMessage) -> str:
    payload = part.get_payload(decode=True) or b""
    charset = part.get_content_charset() or "utf-8"
    try:
        return payload.decode(charset, errors="replace")
    except LookupError:
        return payload.decode("utf-8", errors="replace")


def _embedded_message_bytes(part: EmailMessage) -> bytes:
    payload = part.get_payload()
    if isinstance(payload, list) and payload:
        return payload[0].as_bytes()
    return part.get_payload(decode=True) or b""
