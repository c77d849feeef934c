"""Build obfuscated programs for tests by running the cipher forwards."""

from __future__ import annotations

import base64
import json
from typing import Any, Dict, List, Mapping, Optional

from proxydeob.decoders import xor_transform

DEFAULT_KEYS = {
    "uB": b"uB-secret-key-material",
    "I": b"I-secret",
    "z": b"z-secret-key-that-is-definitely-longer-than-32-bytes",
    "u": b"\x01\x02\x03",
    "l": b"l",
}
KEY_POSITIONS = {"uB": 0, "I": 2, "z": 4, "u": 6, "l": 8}


def text_codes(text: str) -> List[int]:
    return [ord(char) for char in text]


def encode_value(value: Any, key: bytes) -> List[int]:
    """Return the raw table codes that decode back to ``value``."""

    return xor_transform(text_codes(json.dumps(value, separators=(",", ":"))), key)


def config_codes(keys: Mapping[str, bytes]) -> List[int]:
    config: List[Any] = [f"filler-{index}" for index in range(10)]
    for table_id, key in keys.items():
        config[KEY_POSITIONS[table_id]] = base64.b64encode(key).decode("ascii")
    return text_codes(json.dumps(config))


def table_stub(table_id: str, codes: List[Optional[int]]) -> str:
    rendered = ", ".join("" if code is None else str(code) for code in codes)
    return f"a.i.{table_id} = function () {{ return [{rendered}]; }};"


def build_sample(
    tables: Dict[str, Any],
    body: str,
    *,
    keys: Optional[Mapping[str, bytes]] = None,
    include_config: bool = True,
) -> str:
    keys = dict(keys or DEFAULT_KEYS)
    lines = ["var a = { i: {}, H: {}, G: {} };"]
    if include_config:
        lines.append(table_stub("t", config_codes(keys)))
    for table_id, value in tables.items():
        lines.append(table_stub(table_id, encode_value(value, keys[table_id])))
    lines.append(body.strip())
    return "\n".join(lines) + "\n"
