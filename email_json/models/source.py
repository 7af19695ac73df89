"""Source descriptors for the raw email document."""

from typing import Literal, Optional, Union

from pydantic import BaseModel, ConfigDict

from email_json.services.errors import BadInputError

_URL_PREFIXES = ("http://", "https://")


class FileSource(BaseModel):
    """Email stored on the local filesystem."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["file"] = "file"
    path: str


class UrlSource(BaseModel):
    """Email served from a remote HTTP(S) location."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["url"] = "url"
    url: str


SourceDescriptor = Union[FileSource, UrlSource]


def parse_source(value: str) -> SourceDescriptor:
    """
    Classify a raw source string.

    Strings starting with ``http://`` or ``https://`` are remote URLs,
    everything else is treated as a filesystem path.

    Raises:
        BadInputError: If the value is empty
    """
    value = (value or "").strip()
    if not value:
        raise BadInputError('Either "url" or "path" query parameter is required')
    if value.startswith(_URL_PREFIXES):
        return UrlSource(url=value)
    return FileSource(path=value)


def source_from_params(url: Optional[str] = None, path: Optional[str] = None) -> SourceDescriptor:
    """
    Build a descriptor from the ``url`` / ``path`` request parameters.

    ``url`` takes precedence when both are supplied.
    """
    return parse_source(url or path or "")
