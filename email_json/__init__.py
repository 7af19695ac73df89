"""Locate the JSON payload attached to or linked from an email."""

__version__ = "1.0.0"
