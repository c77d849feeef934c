"""Custom exception hierarchy for the deobfuscator."""

from __future__ import annotations


class DeobfuscationError(Exception):
    """Base class for all deobfuscation related errors."""


class SourceParseError(DeobfuscationError):
    """Raised when the JavaScript parser rejects the input program."""


class ExtractionError(DeobfuscationError):
    """Raised when a required literal table cannot be located in the tree."""


class TableDecodeError(DeobfuscationError):
    """Raised when a literal table cannot be decoded into structured data."""


class SchemaError(DeobfuscationError):
    """Raised when a proxy schema file is unreadable or malformed."""


__all__ = [
    "DeobfuscationError",
    "ExtractionError",
    "SchemaError",
    "SourceParseError",
    "TableDecodeError",
]
