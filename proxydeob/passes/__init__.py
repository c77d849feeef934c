"""Pass modules orchestrated by :mod:`proxydeob.pipeline`."""

from __future__ import annotations

from . import (
    extract,
    decode_tables,
    resolve_properties,
    inline_aliases,
    render,
)

__all__ = [
    "extract",
    "decode_tables",
    "resolve_properties",
    "inline_aliases",
    "render",
]
