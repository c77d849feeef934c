from __future__ import annotations

import base64
import json

import pytest

from proxydeob.decoders import (
    MAX_KEY_LENGTH,
    b64_key_bytes,
    codes_to_text,
    decode_config_table,
    decode_table,
    key_for_table,
    xor_transform,
)
from proxydeob.exceptions import TableDecodeError


def _b64(raw: bytes) -> str:
    return base64.b64encode(raw).decode("ascii")


def test_transform_is_an_involution_for_high_bytes() -> None:
    data = list(range(32, 256)) * 3
    key = b"some key bytes"

    once = xor_transform(data, key)
    assert once != data
    assert xor_transform(once, key) == data


def test_control_bytes_pass_through_and_still_advance_the_key() -> None:
    key = bytes([0x01, 0x02, 0x04])
    data = [0x41, 0x05, 0x41, 0x41]

    out = xor_transform(data, key)

    # key index 1 is consumed by the control byte, so the third byte uses key[2]
    assert out == [0x41 ^ 0x01, 0x05, 0x41 ^ 0x04, 0x41 ^ 0x01]


def test_only_low_five_key_bits_are_used() -> None:
    assert xor_transform([0x61], bytes([0xE3])) == [0x61 ^ 0x03]


def test_key_is_truncated_to_thirty_two_bytes() -> None:
    key = bytes([1]) * MAX_KEY_LENGTH + bytes([2]) * 8
    data = [0x40] * (MAX_KEY_LENGTH + 1)

    out = xor_transform(data, key)

    assert out[MAX_KEY_LENGTH] == 0x40 ^ 1


def test_empty_key_is_identity() -> None:
    data = [0x7B, 0x7D, 0x03]
    assert xor_transform(data, b"") == data
    assert decode_table(data[:2], "") == {}


def test_decode_table_round_trips_structured_text() -> None:
    value = {"name": "proxy", "items": [1, 2.5, None, True], "nested": {"x": "y"}}
    key = b"k3y"
    codes = xor_transform([ord(c) for c in json.dumps(value)], key)

    assert decode_table(codes, _b64(key)) == value


def test_holes_read_as_nul_code_units() -> None:
    assert codes_to_text([0x61, None, 0x62]) == "a\x00b"


def test_surrogate_pairs_are_joined() -> None:
    assert codes_to_text([0xD83D, 0xDE00]) == "\U0001F600"


def test_b64_key_tolerates_missing_padding_and_whitespace() -> None:
    assert b64_key_bytes("YWJj ZA") == b"abcd"


@pytest.mark.parametrize("bad", ["a", "!!!!", "YW=J"])
def test_invalid_base64_key_raises(bad: str) -> None:
    with pytest.raises(TableDecodeError):
        b64_key_bytes(bad)


def test_malformed_json_raises_decode_error() -> None:
    with pytest.raises(TableDecodeError):
        decode_table([ord(c) for c in "{nope"], "")


def test_config_table_is_plain_json() -> None:
    codes = [ord(c) for c in json.dumps(["a", "b"])]
    assert decode_config_table(codes) == ["a", "b"]


def test_key_for_table_validates_position() -> None:
    config = ["k0", 5]
    assert key_for_table(config, 0, label="uB") == "k0"
    with pytest.raises(TableDecodeError):
        key_for_table(config, 1, label="I")
    with pytest.raises(TableDecodeError):
        key_for_table(config, 4, label="z")
    with pytest.raises(TableDecodeError):
        key_for_table({"not": "a list"}, 0, label="uB")


def test_lone_surrogates_survive_decoding() -> None:
    assert codes_to_text([0x61, 0xD800, 0x62]) == "a\ud800b"
    codes = [ord(c) for c in '["x'] + [0xDC00] + [ord(c) for c in '"]']
    assert decode_config_table(codes) == ["x\udc00"]
