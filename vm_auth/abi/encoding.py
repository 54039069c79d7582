"""
Canonical value encoding for authorization payloads.

Design goals:
- Total over the supported value set, deterministic, and injective: two
  different logical values never share an encoding.
- Every value starts with a one-byte tag; every variable-length body carries
  an unsigned LEB128 length (or count) prefix. No implicit padding.

Layout
------
    void        0x00
    bool        0x01 || 0x00|0x01
    int         0x02 || LEB128(len) || sign(0x00|0x01) || big-endian minimal |value|
    bytes       0x03 || LEB128(len) || raw
    string      0x04 || LEB128(len) || UTF-8
    symbol      0x05 || LEB128(len) || ASCII
    vec         0x06 || LEB128(count) || item_1 || ... || item_n
    map         0x07 || LEB128(count) || (key || value)*   sorted by encoded key
    address     0x08 || kind(0 account | 1 contract) || LEB128(32) || raw
    identifier  0x09 || variant(0 key holder | 1 contract) || LEB128(32) || raw

Addresses encode their *value* (kind + raw id), never the env-local object
handle, so the same address produces the same bytes in every Env.

Anything else raises `ConversionError`.
"""

from __future__ import annotations

from typing import Any, List, Sequence

from vm_auth.address import Address
from vm_auth.errors import ConversionError
from vm_auth.identity import Identifier

from .types import Symbol, coerce_int

TAG_VOID = 0x00
TAG_BOOL = 0x01
TAG_INT = 0x02
TAG_BYTES = 0x03
TAG_STRING = 0x04
TAG_SYMBOL = 0x05
TAG_VEC = 0x06
TAG_MAP = 0x07
TAG_ADDRESS = 0x08
TAG_IDENTIFIER = 0x09

__all__ = [
    "uvarint_encode",
    "encode_value",
    "encode_args",
    "TAG_VOID",
    "TAG_BOOL",
    "TAG_INT",
    "TAG_BYTES",
    "TAG_STRING",
    "TAG_SYMBOL",
    "TAG_VEC",
    "TAG_MAP",
    "TAG_ADDRESS",
    "TAG_IDENTIFIER",
]


# ──────────────────────────────────────────────────────────────────────────────
# Varint (unsigned LEB128) for length prefixes and counts
# ──────────────────────────────────────────────────────────────────────────────

def uvarint_encode(n: int) -> bytes:
    """
    Unsigned LEB128 encoding.

    - n must be >= 0
    - returns minimal-length representation
    """
    if isinstance(n, bool) or not isinstance(n, int):
        raise ConversionError("uvarint value must be int")
    if n < 0:
        raise ConversionError("uvarint cannot encode negative values")
    out = bytearray()
    while True:
        b = n & 0x7F
        n >>= 7
        if n:
            out.append(b | 0x80)
        else:
            out.append(b)
            break
    return bytes(out)


def _minimal_be_unsigned(n: int) -> bytes:
    """Big-endian minimal bytes for a non-negative integer (0 → b'\\x00')."""
    if n == 0:
        return b"\x00"
    return n.to_bytes((n.bit_length() + 7) // 8, "big", signed=False)


def _framed(tag: int, body: bytes) -> bytes:
    return bytes([tag]) + uvarint_encode(len(body)) + body


# ──────────────────────────────────────────────────────────────────────────────
# Encoders
# ──────────────────────────────────────────────────────────────────────────────

def _encode_int(value: int) -> bytes:
    v = coerce_int(value)
    sign = 0x00 if v >= 0 else 0x01
    return _framed(TAG_INT, bytes([sign]) + _minimal_be_unsigned(abs(v)))


def _encode_address(value: Address) -> bytes:
    sc = value.to_sc_address()
    return bytes([TAG_ADDRESS, int(sc.kind)]) + uvarint_encode(len(sc.raw)) + sc.raw


def _encode_identifier(value: Identifier) -> bytes:
    return bytes([TAG_IDENTIFIER, int(value.kind)]) + uvarint_encode(len(value.raw)) + value.raw


def encode_value(value: Any) -> bytes:
    """Encode a single value according to its runtime type."""
    if value is None:
        return bytes([TAG_VOID])
    if isinstance(value, bool):
        return bytes([TAG_BOOL, 0x01 if value else 0x00])
    if isinstance(value, int):
        return _encode_int(value)
    if isinstance(value, (bytes, bytearray, memoryview)):
        return _framed(TAG_BYTES, bytes(value))
    if isinstance(value, Symbol):
        return _framed(TAG_SYMBOL, value.encode("ascii"))
    if isinstance(value, str):
        return _framed(TAG_STRING, value.encode("utf-8"))
    if isinstance(value, (list, tuple)):
        return encode_args(value)
    if isinstance(value, dict):
        pairs = sorted((encode_value(k), encode_value(v)) for k, v in value.items())
        return bytes([TAG_MAP]) + uvarint_encode(len(pairs)) + b"".join(k + v for k, v in pairs)
    if isinstance(value, Address):
        return _encode_address(value)
    if isinstance(value, Identifier):
        return _encode_identifier(value)
    raise ConversionError(f"unsupported value type for encoding: {type(value).__name__}")


def encode_args(values: Sequence[Any]) -> bytes:
    """
    Encode an argument tuple as a vec:
        0x06 || LEB128(count) || item1 || item2 || ... || itemN
    """
    if not isinstance(values, (list, tuple)):
        raise ConversionError(f"arguments must be a list or tuple, got {type(values).__name__}")
    items: List[bytes] = [encode_value(v) for v in values]
    return bytes([TAG_VEC]) + uvarint_encode(len(items)) + b"".join(items)
