"""Replace ``<root>.<proxy>.<table>.<field>`` reads with decoded literals."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping, Optional, Tuple, TYPE_CHECKING

from tree_sitter import Node

from ..js_ast import (
    SourceTree,
    TextEdit,
    collect_edits,
    is_write_target,
    namespace_key,
    replacement,
    static_property_name,
    unwrap_parens,
)
from ..rehydrate import rehydrate
from ..schema import ProxySchema

if TYPE_CHECKING:  # pragma: no cover - typing only
    from ..pipeline import Context

LOG = logging.getLogger(__name__)

MISSING = object()


def proxy_access(node: Node, schema: ProxySchema) -> Optional[Tuple[str, str]]:
    """Match a proxied table read and return ``(table_id, field)``."""

    if node.type not in ("member_expression", "subscript_expression"):
        return None
    table_id = namespace_key(
        unwrap_parens(node.child_by_field_name("object")), schema.root, schema.proxy_namespace
    )
    if table_id is None or table_id not in schema.key_positions:
        return None
    if node.child_by_field_name("optional_chain") is not None:
        return None
    field = static_property_name(node)
    if field is None:
        return None
    return table_id, field


def lookup_field(table: Any, field: str) -> Any:
    """Return ``table[field]`` with JavaScript indexing rules, or ``MISSING``."""

    if isinstance(table, dict):
        return table.get(field, MISSING)
    if isinstance(table, list):
        if field == "length":
            return len(table)
        if field.isascii() and field.isdigit() and (field == "0" or not field.startswith("0")):
            index = int(field)
            if index < len(table):
                return table[index]
    return MISSING


class PropertyResolver:
    """Single-scan rewriter; counters end up in the pass metadata."""

    def __init__(self, schema: ProxySchema, tables: Mapping[str, Any]) -> None:
        self.schema = schema
        self.tables = tables
        self.resolved = 0
        self.misses = 0
        self.skipped_writes = 0
        self.unrepresentable = 0

    def visit(self, node: Node) -> Optional[List[TextEdit]]:
        match = proxy_access(node, self.schema)
        if match is None:
            return None
        if is_write_target(node):
            self.skipped_writes += 1
            return None

        table_id, name = match
        table = self.tables.get(table_id)
        value = MISSING if table is None else lookup_field(table, name)
        if value is MISSING:
            self.misses += 1
            LOG.debug("no decoded entry for %s.%s", table_id, name)
            return None

        literal = rehydrate(value)
        if literal is None:
            self.unrepresentable += 1
            return None
        self.resolved += 1
        return [replacement(node, *literal)]

    def resolve(self, tree: SourceTree) -> SourceTree:
        return tree.rewrite(collect_edits(tree.root, self.visit))


def run(ctx: "Context") -> Dict[str, object]:
    assert ctx.tree is not None

    resolver = PropertyResolver(ctx.schema, ctx.decoded_tables)
    ctx.tree = resolver.resolve(ctx.tree)

    ctx.report.properties_resolved = resolver.resolved
    ctx.report.resolution_misses = resolver.misses
    ctx.report.skipped_writes += resolver.skipped_writes
    return {
        "resolved": resolver.resolved,
        "misses": resolver.misses,
        "skipped_writes": resolver.skipped_writes,
        "unrepresentable": resolver.unrepresentable,
    }


__all__ = ["MISSING", "PropertyResolver", "lookup_field", "proxy_access", "run"]
