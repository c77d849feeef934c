"""Rolling partial-XOR cipher guarding the obfuscator's literal tables.

Only code units with one of the top three bits set are XORed, and only with the
low five bits of the key byte, so control characters survive untouched.  The
rolling key index advances for every code unit regardless, which keeps the
transform its own inverse for a fixed key.
"""

from __future__ import annotations

import base64
import binascii
import json
import logging
import math
import re
from typing import Any, List, Optional, Sequence

from ..exceptions import TableDecodeError

LOG = logging.getLogger(__name__)

MAX_KEY_LENGTH = 32
_HIGH_BITS = 0xE0
_KEY_MASK = 0x1F
_ASCII_WHITESPACE_RE = re.compile(r"[\t\n\f\r ]+")

RawCodes = Sequence[Optional[float]]


def code_unit(code: Optional[float]) -> int:
    """Coerce a raw table entry to a UTF-16 code unit like ``String.fromCharCode``."""

    if code is None or not math.isfinite(code):
        return 0
    return int(code) & 0xFFFF


def b64_key_bytes(text: str) -> bytes:
    """Decode ``text`` the way ``atob`` does."""

    cleaned = _ASCII_WHITESPACE_RE.sub("", text or "")
    if len(cleaned) % 4 == 1:
        raise TableDecodeError(f"invalid base64 key length: {text!r}")
    padded = cleaned + "=" * (-len(cleaned) % 4)
    try:
        return base64.b64decode(padded, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise TableDecodeError(f"invalid base64 key {text!r}: {exc}") from exc


def xor_transform(codes: Sequence[int], key: bytes) -> List[int]:
    """Apply the rolling cipher to ``codes`` using the raw ``key`` bytes."""

    if not key:
        return list(codes)

    active = [byte & _KEY_MASK for byte in key[:MAX_KEY_LENGTH]]
    length = len(active)
    out: List[int] = []
    index = 0
    for code in codes:
        out.append(code ^ active[index] if code & _HIGH_BITS else code)
        index = (index + 1) % length
    return out


def codes_to_text(codes: RawCodes) -> str:
    """Return the text spelled by UTF-16 code units ``codes``.

    Holes read as ``0``.  Surrogate pairs are joined; a lone surrogate is
    kept as is, the way ``String.fromCharCode`` keeps it.
    """

    units = "".join(chr(code_unit(code)) for code in codes)
    return units.encode("utf-16-le", "surrogatepass").decode("utf-16-le", "surrogatepass")


def _parse_json(text: str, label: str) -> Any:
    try:
        return json.loads(text)
    except json.JSONDecodeError as exc:
        raise TableDecodeError(f"table {label} did not decode to JSON: {exc}") from exc


def decode_config_table(raw: RawCodes, *, label: str = "config") -> Any:
    """Parse the plaintext config table whose codes are the JSON text itself."""

    return _parse_json(codes_to_text(raw), label)


def decode_table(raw: RawCodes, b64_key: str, *, label: str = "table") -> Any:
    """Decode one encoded table with the base64 key taken from the config table."""

    key = b64_key_bytes(b64_key)
    codes = [code_unit(code) for code in raw]
    plain = xor_transform(codes, key)
    LOG.debug("decoded %d codes of table %s with a %d byte key", len(plain), label, len(key))
    return _parse_json(codes_to_text(plain), label)


def key_for_table(config: Any, position: int, *, label: str) -> str:
    """Return the key string stored at ``position`` of the config table."""

    if not isinstance(config, list):
        raise TableDecodeError("config table did not decode to a JSON array")
    if position >= len(config):
        raise TableDecodeError(
            f"config table has no key for {label} at index {position} (length {len(config)})"
        )
    key = config[position]
    if not isinstance(key, str):
        raise TableDecodeError(f"config entry {position} for {label} is not a string: {key!r}")
    return key


__all__ = [
    "MAX_KEY_LENGTH",
    "b64_key_bytes",
    "code_unit",
    "codes_to_text",
    "decode_config_table",
    "decode_table",
    "key_for_table",
    "xor_transform",
]
