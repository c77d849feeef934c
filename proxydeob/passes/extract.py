"""Harvest the raw literal tables from ``<root>.<ns>.<id> = function`` stubs.

The obfuscator ships every table as a tiny function returning an array of
character codes::

    a.i.z = function () { return [72, 101, , 108]; };

Matching is purely structural; the function is never executed.  Holes and
non-numeric elements are recorded as ``None``.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Optional, TYPE_CHECKING

from tree_sitter import Node

from ..js_ast import (
    FUNCTION_TYPES,
    expression_children,
    is_identifier,
    is_member,
    js_number_value,
    node_text,
    unwrap_parens,
    walk,
)
from ..schema import ProxySchema

if TYPE_CHECKING:  # pragma: no cover - typing only
    from ..pipeline import Context

LOG = logging.getLogger(__name__)

RawTable = List[Optional[float]]


def _returned_array(fn: Node) -> Optional[Node]:
    if fn.type not in FUNCTION_TYPES:
        return None
    body = fn.child_by_field_name("body")
    if body is None:
        return None
    if body.type != "statement_block":
        body = unwrap_parens(body)
        return body if body is not None and body.type == "array" else None
    for statement in expression_children(body):
        if statement.type == "return_statement":
            values = expression_children(statement)
            argument = unwrap_parens(values[0]) if values else None
            if argument is not None and argument.type == "array":
                return argument
            return None
    return None


def array_elements(array: Node) -> List[Optional[Node]]:
    """Return the element slots of an array literal; holes are ``None``."""

    elements: List[Optional[Node]] = []
    current: Optional[Node] = None
    for child in array.children[1:-1]:
        if child.type == ",":
            elements.append(current)
            current = None
        elif child.type != "comment":
            current = child
    if current is not None:
        elements.append(current)
    return elements


def returned_numeric_array(fn: Node) -> Optional[RawTable]:
    """Return the numbers of the array literal ``fn`` returns, if it returns one."""

    array = _returned_array(fn)
    if array is None:
        return None
    values: RawTable = []
    for element in array_elements(array):
        if element is not None and element.type == "number":
            values.append(js_number_value(node_text(element)))
        else:
            values.append(None)
    return values


def _table_id(target: Optional[Node], schema: ProxySchema) -> Optional[str]:
    if not is_member(target) or target.type != "member_expression":
        return None
    head = target.child_by_field_name("object")
    if not is_member(head) or head.type != "member_expression":
        return None
    if not is_identifier(head.child_by_field_name("object"), schema.root):
        return None
    if node_text(head.child_by_field_name("property")) != schema.array_namespace:
        return None
    name = node_text(target.child_by_field_name("property"))
    return name if name in schema.table_ids else None


def extract_tables(root: Node, schema: ProxySchema) -> Dict[str, RawTable]:
    """Scan ``root`` once and return the raw arrays keyed by table identifier."""

    tables: Dict[str, RawTable] = {}
    for node in walk(root):
        if node.type != "assignment_expression":
            continue
        table_id = _table_id(node.child_by_field_name("left"), schema)
        if table_id is None:
            continue
        right = unwrap_parens(node.child_by_field_name("right"))
        values = returned_numeric_array(right) if right is not None else None
        if values is None:
            LOG.debug("assignment to table %s does not return a numeric array", table_id)
            continue
        if table_id in tables:
            LOG.debug("table %s assigned more than once; keeping the last array", table_id)
        tables[table_id] = values
    return tables


def run(ctx: "Context") -> Dict[str, object]:
    assert ctx.tree is not None

    schema = ctx.schema
    tables = extract_tables(ctx.tree.root, schema)
    missing = [table_id for table_id in schema.table_ids if table_id not in tables]

    ctx.raw_tables = tables
    ctx.report.tables_extracted = sorted(tables)
    ctx.report.tables_missing = list(missing)
    if missing:
        message = f"literal tables not found: {', '.join(missing)}"
        LOG.warning(message)
        ctx.report.warnings.append(message)

    return {
        "extracted": sorted(tables),
        "missing": missing,
        "codes": sum(len(values) for values in tables.values()),
    }


__all__ = ["RawTable", "array_elements", "extract_tables", "returned_numeric_array", "run"]
