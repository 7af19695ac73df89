"""Classified failures of an extraction request."""


class ExtractionError(Exception):
    """Base class for request-fatal extraction errors."""

    error_code = "extraction_error"
    status_code = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class BadInputError(ExtractionError):
    """Neither a usable path nor a URL was supplied."""

    error_code = "bad_input"
    status_code = 400


class SourceNotFoundError(ExtractionError):
    """Local email file does not exist."""

    error_code = "not_found"
    status_code = 404


class JSONNotFoundError(ExtractionError):
    """All strategies were exhausted without locating JSON."""

    error_code = "not_found"
    status_code = 404


class SourceFetchError(ExtractionError):
    """Remote email source unreachable or answered with an error."""

    error_code = "fetch_error"
    status_code = 400


class SourceReadError(ExtractionError):
    """Local email file could not be read."""

    error_code = "read_error"
    status_code = 400


class EmailParseError(ExtractionError):
    """Raw bytes are not a usable email document."""

    error_code = "parse_error"
    status_code = 400


class LinkFetchError(Exception):
    """
    Transport failure while fetching a harvested link.

    Never escapes the link strategies; callers turn it into a probe miss.
    """

    def __init__(self, url: str, reason: str) -> None:
        super().__init__(f"{url}: {reason}")
        self.url = url
        self.reason = reason
