"""Decoders for the obfuscator's literal tables."""

from .xor_table import (
    MAX_KEY_LENGTH,
    b64_key_bytes,
    code_unit,
    codes_to_text,
    decode_config_table,
    decode_table,
    key_for_table,
    xor_transform,
)

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
