"""Helpers around the tree-sitter JavaScript syntax tree.

The tree is a read-only concrete syntax tree, so passes never mutate it.  They
collect :class:`TextEdit` replacements keyed by byte range and
:meth:`SourceTree.rewrite` applies them from the end of the file backwards,
then re-parses.  Text outside an edit, comments included, is kept byte for
byte.  :func:`generate_source` only reformats the final text with
:mod:`jsbeautifier`.
"""

from __future__ import annotations

import logging
import math
import re
from dataclasses import dataclass
from typing import Callable, Iterable, Iterator, List, Optional, Union

import jsbeautifier
import tree_sitter_javascript as tsjs
from tree_sitter import Language, Node, Parser, Tree

from .exceptions import SourceParseError

LOG = logging.getLogger(__name__)

JS_LANGUAGE = Language(tsjs.language())

MEMBER_TYPES = frozenset({"member_expression", "subscript_expression"})
FUNCTION_TYPES = frozenset({"function", "function_expression", "arrow_function"})

# Expressions that can stand anywhere without extra parentheses.
PRIMARY_TYPES = frozenset(
    {
        "identifier",
        "string",
        "template_string",
        "array",
        "call_expression",
        "member_expression",
        "subscript_expression",
        "parenthesized_expression",
        "true",
        "false",
        "null",
        "undefined",
        "this",
        "regex",
    }
)

# Parents in which any expression may be dropped without parentheses.
_SAFE_PARENTS = frozenset(
    {
        "arguments",
        "array",
        "pair",
        "variable_declarator",
        "parenthesized_expression",
        "return_statement",
        "template_substitution",
        "computed_property_name",
        "field_definition",
    }
)

PRIMARY = "primary"
NUMBER = "number"
COMPOUND = "compound"

_SIMPLE_ESCAPES = {
    "n": "\n",
    "t": "\t",
    "r": "\r",
    "b": "\b",
    "f": "\f",
    "v": "\v",
    "0": "\0",
}
_LINE_BREAKS = ("\r\n", "\n", "\r", "\u2028", "\u2029")
_OCTAL_RE = re.compile(r"[0-7]+")


@dataclass
class TextEdit:
    """Replace ``source[start_byte:end_byte]`` with ``new_text``."""

    start_byte: int
    end_byte: int
    new_text: str


Visitor = Callable[[Node], Optional[List[TextEdit]]]


def apply_edits(source: bytes, edits: Iterable[TextEdit], offset: int = 0) -> str:
    """Apply ``edits`` to ``source``, whose first byte sits at ``offset``.

    Edits must not overlap.  They are applied from the highest start byte down
    so earlier offsets stay valid.
    """

    result = bytearray(source)
    for edit in sorted(edits, key=lambda item: item.start_byte, reverse=True):
        result[edit.start_byte - offset : edit.end_byte - offset] = edit.new_text.encode("utf-8")
    return result.decode("utf-8")


# ---------------------------------------------------------------------------
# Parser / printer boundary


@dataclass
class SourceTree:
    """Parsed program together with the exact bytes it was parsed from."""

    source: bytes
    tree: Tree

    @property
    def root(self) -> Node:
        return self.tree.root_node

    @property
    def code(self) -> str:
        return self.source.decode("utf-8")

    def rewrite(self, edits: List[TextEdit]) -> "SourceTree":
        """Return the program with ``edits`` applied, parsed again."""

        if not edits:
            return self
        return parse_program(apply_edits(self.source, edits))


def _first_error(root: Node) -> Optional[Node]:
    stack = [root]
    while stack:
        node = stack.pop()
        if node.type == "ERROR" or node.is_missing:
            return node
        if node.has_error:
            stack.extend(reversed(node.children))
    return None


def parse_program(source: str) -> SourceTree:
    """Parse ``source`` as JavaScript.

    Scripts and modules share one grammar, so imports, exports and a
    top-level ``return`` all parse without declaring a source type.  Any
    syntax error aborts with :class:`SourceParseError`.
    """

    data = source.encode("utf-8")
    tree = Parser(JS_LANGUAGE).parse(data)
    if tree.root_node.has_error:
        bad = _first_error(tree.root_node) or tree.root_node
        row, column = bad.start_point
        kind = "missing " + bad.type if bad.is_missing else "unexpected input"
        raise SourceParseError(f"cannot parse input: {kind} at line {row + 1}, column {column + 1}")
    LOG.debug("parsed %d bytes into %d top-level nodes", len(data), tree.root_node.named_child_count)
    return SourceTree(data, tree)


def generate_source(tree: Union[SourceTree, str], *, beautify: bool = True) -> str:
    """Return the program text, reformatted unless ``beautify`` is false."""

    code = tree.code if isinstance(tree, SourceTree) else tree
    if not beautify:
        return code
    options = jsbeautifier.default_options()
    options.indent_size = 2
    return jsbeautifier.beautify(code, options)


# ---------------------------------------------------------------------------
# Walking


def walk(root: Node) -> Iterator[Node]:
    """Yield every named node below ``root`` in source order without recursion."""

    stack = [root]
    while stack:
        node = stack.pop()
        yield node
        stack.extend(reversed(node.named_children))


def collect_edits(root: Node, visit: Visitor) -> List[TextEdit]:
    """Walk ``root`` pre-order gathering the edits ``visit`` returns.

    A node for which ``visit`` returns a list (even an empty one) is not
    descended into.
    """

    edits: List[TextEdit] = []
    stack = [root]
    while stack:
        node = stack.pop()
        found = visit(node)
        if found is not None:
            edits.extend(found)
            continue
        stack.extend(reversed(node.named_children))
    return edits


# ---------------------------------------------------------------------------
# Literals


def node_text(node: Node) -> str:
    return node.text.decode("utf-8")


def expression_children(node: Node) -> List[Node]:
    return [child for child in node.named_children if child.type != "comment"]


def unwrap_parens(node: Optional[Node]) -> Optional[Node]:
    while node is not None and node.type == "parenthesized_expression":
        inner = expression_children(node)
        node = inner[0] if inner else None
    return node


def js_number_value(text: str) -> Optional[Union[int, float]]:
    """Return the value of a numeric literal, ``None`` for BigInt literals."""

    text = text.replace("_", "")
    if text.endswith("n"):
        return None
    lower = text.lower()
    if lower.startswith(("0x", "0o", "0b")):
        return int(text[2:], {"x": 16, "o": 8, "b": 2}[lower[1]])
    if len(text) > 1 and text.startswith("0") and text.isdigit():
        return int(text, 8) if _OCTAL_RE.fullmatch(text) else int(text)
    value = float(text)
    if value.is_integer() and not any(char in text for char in ".eE"):
        return int(text)
    return value


def js_number_text(value: Union[int, float]) -> str:
    """Return ``String(value)`` as JavaScript would print a finite number."""

    if isinstance(value, int):
        if abs(value) < 10**21:
            return str(value)
        value = float(value)
    if math.isfinite(value) and value.is_integer() and abs(value) < 1e21:
        return str(int(value))
    text = repr(value)
    if "e" in text:
        mantissa, exponent = text.split("e")
        sign = "-" if exponent.startswith("-") else "+"
        text = f"{mantissa}e{sign}{exponent.lstrip('+-').lstrip('0') or '0'}"
    return text


def _cook_escape(text: str) -> str:
    body = text[1:]
    if body.startswith(_LINE_BREAKS):
        return ""
    if body.startswith("u{"):
        return chr(int(body[2:-1], 16))
    if body.startswith(("u", "x")) and len(body) > 1:
        return chr(int(body[1:], 16))
    if body in _SIMPLE_ESCAPES:
        return _SIMPLE_ESCAPES[body]
    if _OCTAL_RE.fullmatch(body):
        return chr(int(body, 8))
    return body


def js_string_value(node: Node) -> str:
    """Return the cooked value of a ``string`` node."""

    parts = []
    for child in node.named_children:
        text = node_text(child)
        parts.append(_cook_escape(text) if child.type == "escape_sequence" else text)
    joined = "".join(parts)
    return joined.encode("utf-16-le", "surrogatepass").decode("utf-16-le", "surrogatepass")


# ---------------------------------------------------------------------------
# Matching


def is_identifier(node: Optional[Node], name: Optional[str] = None) -> bool:
    if node is None or node.type != "identifier":
        return False
    return name is None or node_text(node) == name


def is_member(node: Optional[Node]) -> bool:
    """Plain (non-optional) property access, dotted or bracketed."""

    return (
        node is not None
        and node.type in MEMBER_TYPES
        and node.child_by_field_name("optional_chain") is None
    )


def static_property_name(member: Node) -> Optional[str]:
    """Return the statically known property name of ``member`` if any."""

    if member.type == "member_expression":
        prop = member.child_by_field_name("property")
        if prop is None or prop.type != "property_identifier":
            return None
        return node_text(prop)
    index = unwrap_parens(member.child_by_field_name("index"))
    if index is None:
        return None
    if index.type == "string":
        return js_string_value(index)
    if index.type == "number":
        value = js_number_value(node_text(index))
        return None if value is None else js_number_text(value)
    return None


def namespace_key(node: Optional[Node], root: str, namespace: str) -> Optional[str]:
    """Match ``<root>.<namespace>.<key>`` and return ``key``."""

    if not is_member(node):
        return None
    head = unwrap_parens(node.child_by_field_name("object"))
    if not is_member(head) or head.type != "member_expression":
        return None
    if not is_identifier(unwrap_parens(head.child_by_field_name("object")), root):
        return None
    if static_property_name(head) != namespace:
        return None
    return static_property_name(node)


def _is_field(parent: Node, name: str, node: Node) -> bool:
    child = parent.child_by_field_name(name)
    return (
        child is not None
        and child.start_byte == node.start_byte
        and child.end_byte == node.end_byte
    )


def _enclosing(node: Node):
    slot, parent = node, node.parent
    while parent is not None and parent.type == "parenthesized_expression":
        slot, parent = parent, parent.parent
    return slot, parent


def is_write_target(node: Node) -> bool:
    """Return ``True`` when ``node`` is written, not read."""

    slot, parent = _enclosing(node)
    if parent is None:
        return False
    kind = parent.type
    if kind in ("assignment_expression", "augmented_assignment_expression", "for_in_statement"):
        return _is_field(parent, "left", slot)
    if kind == "update_expression":
        return _is_field(parent, "argument", slot)
    if kind == "unary_expression":
        operator = parent.child_by_field_name("operator")
        return operator is not None and operator.type == "delete"
    return False


def expression_kind(node: Node) -> str:
    node_type = node.type
    if node_type in PRIMARY_TYPES:
        return PRIMARY
    if node_type == "number":
        return NUMBER
    return COMPOUND


def needs_parens(node: Node, kind: str) -> bool:
    """Whether text of ``kind`` put in place of ``node`` must be parenthesised."""

    if kind == PRIMARY:
        return False
    parent = node.parent
    if parent is None:
        return False
    if kind == NUMBER:
        return parent.type == "member_expression" and _is_field(parent, "object", node)
    if parent.type in _SAFE_PARENTS:
        return False
    if parent.type in ("assignment_expression", "augmented_assignment_expression"):
        return not _is_field(parent, "right", node)
    if parent.type == "subscript_expression":
        return not _is_field(parent, "index", node)
    return True


def replacement(node: Node, text: str, kind: str) -> TextEdit:
    """Build the edit replacing ``node`` with ``text``."""

    if needs_parens(node, kind):
        text = f"({text})"
    return TextEdit(node.start_byte, node.end_byte, text)


__all__ = [
    "COMPOUND",
    "FUNCTION_TYPES",
    "NUMBER",
    "PRIMARY",
    "SourceTree",
    "TextEdit",
    "apply_edits",
    "collect_edits",
    "expression_children",
    "expression_kind",
    "generate_source",
    "is_identifier",
    "is_member",
    "is_write_target",
    "js_number_text",
    "js_number_value",
    "js_string_value",
    "namespace_key",
    "needs_parens",
    "node_text",
    "parse_program",
    "replacement",
    "static_property_name",
    "unwrap_parens",
    "walk",
]
