"""Strict JSON parsing shared by the attachment and link strategies."""

import json
from typing import NoReturn

from email_json.models.extraction import JSONValue


def _reject_constant(name: str) -> NoReturn:
    raise ValueError(f"{name} is not a valid JSON value")


def loads_strict(text: str) -> JSONValue:
    """Parse one JSON document, rejecting ``NaN``, ``Infinity`` and ``-Infinity``.

    Raises:
        ValueError: If ``text`` is not a standards-compliant JSON document
    """
    return json.loads(text, parse_constant=_reject_constant)
