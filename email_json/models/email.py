"""Decoded email models."""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class Attachment(BaseModel):
    """Single decoded attachment part."""

    model_config = ConfigDict(frozen=True)

    content_type: str
    filename: Optional[str] = None
    content: bytes = b""

    @property
    def size_bytes(self) -> int:
        return len(self.content)


class DecodedMessage(BaseModel):
    """
    Read-only view over a parsed email.

    Attachments keep the order they appear in the MIME tree. ``html`` and
    ``text`` hold the first HTML and plain-text bodies, if any.
    """

    model_config = ConfigDict(frozen=True)

    attachments: tuple[Attachment, ...] = Field(default_factory=tuple)
    html: Optional[str] = None
    text: Optional[str] = None

    # Header metadata, used for logging only
    subject: Optional[str] = None
    sender: Optional[str] = None
    message_id: Optional[str] = None
