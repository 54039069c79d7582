"""
vm_auth.abi.types — value types understood by the canonical encoder.

Only one type needs a dedicated wrapper: `Symbol`, the function selector
naming a contract entry point. Everything else maps onto plain Python values:

    None              → void
    bool              → bool
    int               → integer (|value| < 2**256)
    bytes-like        → bytes
    str               → UTF-8 string
    Symbol            → symbol
    list / tuple      → vec
    dict              → map (keys sorted by their encoding)
    Address           → address (kind + raw id; never the env-local handle)
    Identifier        → identifier (variant + raw id)
"""

from __future__ import annotations

import re
from typing import Any, Optional

from vm_auth.config import load_config
from vm_auth.errors import ConversionError

INT_BITS = 256
_SYMBOL_RE = re.compile(r"^[A-Za-z0-9_]+$")


class Symbol(str):
    """
    A short ASCII identifier ([A-Za-z0-9_], 1..max_len chars).

    `max_len` defaults to the process-wide `max_symbol_len`; code running
    inside an Env passes `env.config.max_symbol_len`.

    Symbols compare equal to the plain strings they wrap, but encode with a
    distinct tag, so `Symbol("transfer")` and `"transfer"` never hash alike
    inside an authorization payload.
    """

    __slots__ = ()

    def __new__(cls, value: Any, max_len: Optional[int] = None) -> "Symbol":
        if isinstance(value, Symbol) and (max_len is None or len(value) <= max_len):
            return value
        if not isinstance(value, str):
            raise ConversionError(f"symbol must be str, got {type(value).__name__}")
        if max_len is None:
            max_len = load_config().max_symbol_len
        if not value or len(value) > max_len:
            raise ConversionError(f"symbol length must be 1..{max_len}, got {len(value)}")
        if not _SYMBOL_RE.match(value):
            raise ConversionError(f"symbol has invalid characters: {value!r}")
        return super().__new__(cls, value)

    def __repr__(self) -> str:
        return f"Symbol({str.__repr__(self)})"


def coerce_int(value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ConversionError(f"expected int, got {type(value).__name__}")
    if abs(value) >= (1 << INT_BITS):
        raise ConversionError(f"integer magnitude must be < 2**{INT_BITS}")
    return value


def coerce_uint(value: Any) -> int:
    v = coerce_int(value)
    if v < 0:
        raise ConversionError(f"expected non-negative int, got {v}")
    return v


__all__ = ["Symbol", "INT_BITS", "coerce_int", "coerce_uint"]
