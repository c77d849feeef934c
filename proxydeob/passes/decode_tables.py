"""Decode the literal tables the program actually reads.

A read-only scan first collects the table identifiers referenced through the
proxy namespace; only those are decoded, and all of them are decoded before
any later pass mutates the tree.  A referenced table whose array was never
extracted is left undecoded and its reads become resolution misses.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional, TYPE_CHECKING

from tree_sitter import Node

from ..decoders import decode_config_table, decode_table, key_for_table
from ..exceptions import ExtractionError
from ..js_ast import walk
from ..schema import ProxySchema
from .extract import RawTable
from .resolve_properties import proxy_access

if TYPE_CHECKING:  # pragma: no cover - typing only
    from ..pipeline import Context

LOG = logging.getLogger(__name__)


def referenced_tables(root: Node, schema: ProxySchema) -> List[str]:
    """Return encoded table identifiers read through the proxy namespace under ``root``."""

    seen = set()
    for node in walk(root):
        match = proxy_access(node, schema)
        if match is not None:
            seen.add(match[0])
    return [table_id for table_id in schema.encoded_tables if table_id in seen]


def decode_tables(
    raw_tables: Mapping[str, RawTable],
    schema: ProxySchema,
    wanted: Optional[Iterable[str]] = None,
) -> Dict[str, Any]:
    """Decode ``wanted`` tables (every extracted encoded table when ``None``)."""

    if wanted is None:
        wanted = [table_id for table_id in schema.encoded_tables if table_id in raw_tables]

    decoded: Dict[str, Any] = {}
    config: Any = None
    for table_id in wanted:
        raw = raw_tables.get(table_id)
        if raw is None:
            LOG.warning("table %s is referenced but was not extracted", table_id)
            continue
        if config is None:
            config_raw = raw_tables.get(schema.config_table)
            if config_raw is None:
                raise ExtractionError(
                    f"config table {schema.config_table!r} not found; cannot decode {table_id!r}"
                )
            config = decode_config_table(config_raw, label=schema.config_table)
        key = key_for_table(config, schema.key_positions[table_id], label=table_id)
        decoded[table_id] = decode_table(raw, key, label=table_id)
    return decoded


def run(ctx: "Context") -> Dict[str, object]:
    assert ctx.tree is not None

    wanted = referenced_tables(ctx.tree.root, ctx.schema)
    ctx.decoded_tables = decode_tables(ctx.raw_tables, ctx.schema, wanted)
    ctx.report.tables_decoded = sorted(ctx.decoded_tables)
    return {
        "referenced": wanted,
        "decoded": sorted(ctx.decoded_tables),
    }


__all__ = ["decode_tables", "referenced_tables", "run"]
