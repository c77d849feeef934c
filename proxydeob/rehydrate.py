"""Turn decoded table values back into JavaScript literal source."""

from __future__ import annotations

import json
import math
import re
from typing import Any, Optional, Tuple

from .js_ast import COMPOUND, NUMBER, PRIMARY, js_number_text

_LONE_SURROGATE_RE = re.compile("[\ud800-\udfff]")


def string_literal(value: str) -> str:
    text = json.dumps(value, ensure_ascii=False)
    return _LONE_SURROGATE_RE.sub(lambda match: f"\\u{ord(match.group()):04x}", text)


def _number_literal(value: float) -> Optional[str]:
    if isinstance(value, float) and not math.isfinite(value):
        return None
    if value < 0 or (value == 0 and math.copysign(1.0, value) < 0):
        return "-" + js_number_text(-value)
    return js_number_text(value)


def value_to_source(value: Any) -> Optional[str]:
    """Return literal source for ``value`` or ``None`` when it has no literal form.

    Object keys become string-literal property keys in insertion order.  A
    container holding any unrepresentable item is rejected as a whole.
    """

    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, str):
        return string_literal(value)
    if isinstance(value, (int, float)):
        return _number_literal(value)
    if isinstance(value, list):
        elements = []
        for item in value:
            element = value_to_source(item)
            if element is None:
                return None
            elements.append(element)
        return "[" + ", ".join(elements) + "]"
    if isinstance(value, dict):
        properties = []
        for key, item in value.items():
            element = value_to_source(item)
            if element is None:
                return None
            properties.append(f"{string_literal(str(key))}: {element}")
        return "{" + ", ".join(properties) + "}"
    return None


def value_kind(value: Any) -> str:
    """Classify the literal for parenthesisation at the substitution site."""

    if isinstance(value, dict):
        return COMPOUND
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        negative = value < 0 or (value == 0 and math.copysign(1.0, value) < 0)
        return COMPOUND if negative else NUMBER
    return PRIMARY


def rehydrate(value: Any) -> Optional[Tuple[str, str]]:
    """Return ``(source, kind)`` for ``value`` or ``None``."""

    text = value_to_source(value)
    if text is None:
        return None
    return text, value_kind(value)


__all__ = ["rehydrate", "string_literal", "value_kind", "value_to_source"]
