"""Data models for the email JSON extractor."""

from .email import Attachment, DecodedMessage
from .extraction import (
    ExtractionResult,
    ExtractionStrategy,
    JSONValue,
    Probe,
    ProbeStatus,
)
from .source import FileSource, SourceDescriptor, UrlSource, parse_source, source_from_params

__all__ = [
    "Attachment",
    "DecodedMessage",
    "ExtractionResult",
    "ExtractionStrategy",
    "JSONValue",
    "Probe",
    "ProbeStatus",
    "FileSource",
    "UrlSource",
    "SourceDescriptor",
    "parse_source",
    "source_from_params",
]
