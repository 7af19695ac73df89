"""Extraction outcome models."""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional, Union

from pydantic import BaseModel

# Arbitrary JSON document as produced by json.loads
JSONValue = Union[None, bool, int, float, str, list["JSONValue"], dict[str, "JSONValue"]]


class ExtractionStrategy(str, Enum):
    """Which fallback strategy produced the result."""

    ATTACHMENT = "attachment"
    DIRECT_LINK = "direct_link"
    INDIRECT_LINK = "indirect_link"


class ProbeStatus(str, Enum):
    """Outcome of examining a single candidate."""

    FOUND = "found"
    NO_CANDIDATE = "no_candidate"
    NOT_JSON = "not_json"
    PARSE_FAILED = "parse_failed"
    BAD_STATUS = "bad_status"
    FETCH_FAILED = "fetch_failed"
    INVALID_URL = "invalid_url"


@dataclass(frozen=True)
class Probe:
    """
    Result of probing one attachment or link for JSON.

    Only ``FOUND`` probes carry a value. ``value`` may legitimately be
    ``None`` (a JSON ``null`` document), so callers must check ``found``
    rather than the value itself.
    """

    status: ProbeStatus
    value: Any = None
    origin: Optional[str] = None
    via: Optional[str] = None
    detail: Optional[str] = None

    @property
    def found(self) -> bool:
        return self.status is ProbeStatus.FOUND

    @classmethod
    def hit(cls, value: JSONValue, origin: Optional[str] = None, via: Optional[str] = None) -> "Probe":
        return cls(ProbeStatus.FOUND, value=value, origin=origin, via=via)

    @classmethod
    def miss(cls, status: ProbeStatus, origin: Optional[str] = None, detail: Optional[str] = None) -> "Probe":
        return cls(status, origin=origin, detail=detail)


class ExtractionResult(BaseModel):
    """The single JSON value located for a request."""

    value: Any = None
    strategy: ExtractionStrategy
    origin: Optional[str] = None
    via: Optional[str] = None

    @classmethod
    def from_probe(cls, probe: Probe, strategy: ExtractionStrategy) -> "ExtractionResult":
        return cls(value=probe.value, strategy=strategy, origin=probe.origin, via=probe.via)
