"""Inline ``<root>.<alias>.<key>`` references with the expression assigned to them.

Two passes over the tree: the collect pass records the right-hand side of
every ``<root>.<alias>.<key> = expr`` (last assignment wins) and the
substitute pass replaces each read of the same reference with that
expression's source text, parenthesised where the surrounding syntax needs it.
The assignments themselves stay in the output.

Aliases nested inside a substituted expression are expanded too; a key already
being expanded further up, or whose own assignment encloses the read, is left
as a plain reference.  That keeps ``a.G.x = a.G.x + 1`` from looping.
"""

from __future__ import annotations

import logging
from typing import Dict, FrozenSet, List, Optional, Tuple, TYPE_CHECKING

from tree_sitter import Node

from ..js_ast import (
    SourceTree,
    TextEdit,
    apply_edits,
    collect_edits,
    expression_kind,
    is_write_target,
    namespace_key,
    replacement,
    walk,
)
from ..schema import ProxySchema

if TYPE_CHECKING:  # pragma: no cover - typing only
    from ..pipeline import Context

LOG = logging.getLogger(__name__)

AliasMap = Dict[str, Node]


def collect_aliases(root: Node, schema: ProxySchema) -> AliasMap:
    """Return ``key -> right-hand side`` for every alias assignment under ``root``."""

    aliases: AliasMap = {}
    for node in walk(root):
        if node.type != "assignment_expression":
            continue
        key = namespace_key(node.child_by_field_name("left"), schema.root, schema.alias_namespace)
        if key is None:
            continue
        if key in aliases:
            LOG.debug("alias %s reassigned; keeping the later expression", key)
        aliases[key] = node.child_by_field_name("right")
    return aliases


class AliasInliner:
    def __init__(self, schema: ProxySchema, aliases: AliasMap) -> None:
        self.schema = schema
        self.aliases = aliases
        self.inlined = 0
        self.skipped_writes = 0
        self.cycles = 0

    def _key(self, node: Optional[Node]) -> Optional[str]:
        return namespace_key(node, self.schema.root, self.schema.alias_namespace)

    def _expand(self, key: str, active: FrozenSet[str]) -> Tuple[str, str]:
        rhs = self.aliases[key]
        edits = collect_edits(rhs, self._visitor(active | {key}))
        return apply_edits(rhs.text, edits, offset=rhs.start_byte), expression_kind(rhs)

    def _visitor(self, active: FrozenSet[str]):
        def visit(node: Node) -> Optional[List[TextEdit]]:
            if node.type == "assignment_expression":
                target = self._key(node.child_by_field_name("left"))
                if target is not None and target not in active:
                    # reads of the alias inside its own definition stay as they are
                    self.skipped_writes += 1
                    right = node.child_by_field_name("right")
                    return collect_edits(right, self._visitor(active | {target}))

            key = self._key(node)
            if key is None or key not in self.aliases:
                return None
            if is_write_target(node):
                self.skipped_writes += 1
                return None
            if key in active:
                self.cycles += 1
                return None
            self.inlined += 1
            return [replacement(node, *self._expand(key, active))]

        return visit

    def inline(self, tree: SourceTree) -> SourceTree:
        return tree.rewrite(collect_edits(tree.root, self._visitor(frozenset())))


def run(ctx: "Context") -> Dict[str, object]:
    assert ctx.tree is not None

    aliases = collect_aliases(ctx.tree.root, ctx.schema)
    inliner = AliasInliner(ctx.schema, aliases)
    ctx.tree = inliner.inline(ctx.tree)

    ctx.report.aliases_collected = len(aliases)
    ctx.report.aliases_inlined = inliner.inlined
    ctx.report.skipped_writes += inliner.skipped_writes
    return {
        "collected": len(aliases),
        "inlined": inliner.inlined,
        "skipped_writes": inliner.skipped_writes,
        "cycles": inliner.cycles,
    }


__all__ = ["AliasInliner", "AliasMap", "collect_aliases", "run"]
