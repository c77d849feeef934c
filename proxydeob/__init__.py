"""Recover literals and aliased expressions hidden behind proxy namespaces."""

from __future__ import annotations

from .exceptions import (
    DeobfuscationError,
    ExtractionError,
    SchemaError,
    SourceParseError,
    TableDecodeError,
)
from .pipeline import Context, PipelineExecutionError, recover_source, run_pipeline
from .schema import ProxySchema, load_schema

__version__ = "0.1.0"

__all__ = [
    "Context",
    "DeobfuscationError",
    "ExtractionError",
    "PipelineExecutionError",
    "ProxySchema",
    "SchemaError",
    "SourceParseError",
    "TableDecodeError",
    "load_schema",
    "recover_source",
    "run_pipeline",
]
