"""Error taxonomy for Word HTML conversion.

Only two conditions are fatal: a field payload that cannot be decoded and a
jurisdiction definition source that cannot be read. Everything else the
walker meets (unknown tags, empty elements, ordinary comments) is skipped.
"""
from __future__ import annotations


class ConversionError(RuntimeError):
    """Base class for conditions that abort a conversion run."""


class FieldDecodeError(ConversionError, ValueError):
    """Raised when an embedded citation field payload is malformed."""


class JurisdictionSourceError(ConversionError):
    """Raised when a jurisdiction definition file is missing or unreadable."""
