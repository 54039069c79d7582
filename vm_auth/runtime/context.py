"""
vm_auth.runtime.context — network/ledger metadata carried by an Env.

These lightweight environments are injected into the runtime so the
authorization core can read network metadata deterministically. They contain
only pure data (ints/bytes/str) and perform strict validation.

- `network_id` (sha256 of the network passphrase) is folded into every
  authorization payload's domain separator.
- Hex strings (with or without "0x") are accepted by helpers and normalized to
  bytes.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Union

from vm_auth.config import network_id_for
from vm_auth.errors import ConversionError

ID_LEN = 32


def _strip_0x(s: str) -> str:
    return s[2:] if s.startswith(("0x", "0X")) else s


def to_bytes(value: Union[bytes, bytearray, memoryview, str]) -> bytes:
    """
    Coerce `value` to bytes.
    - If str, interpret as hex (with or without '0x'); odd-length hex is rejected.
    - If a bytes-like object, copy to immutable bytes.
    """
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value)
    if isinstance(value, str):
        h = _strip_0x(value.strip())
        if len(h) % 2 != 0:
            raise ConversionError(f"hex string must have even length, got {len(h)}")
        try:
            return bytes.fromhex(h)
        except ValueError as e:
            raise ConversionError(f"invalid hex string: {value!r}") from e
    raise ConversionError(f"cannot convert type {type(value).__name__} to bytes")


def to_id32(value: Union[bytes, bytearray, memoryview, str], *, name: str = "id") -> bytes:
    """Coerce to exactly 32 bytes (contract ids, Ed25519 public keys)."""
    b = to_bytes(value)
    if len(b) != ID_LEN:
        raise ConversionError(f"{name} must be {ID_LEN} bytes, got {len(b)}")
    return b


def to_hex(b: Union[bytes, bytearray, memoryview]) -> str:
    """Encode bytes as 0x-prefixed lowercase hex."""
    return "0x" + bytes(b).hex()


def _require_non_negative_int(name: str, v: Any) -> int:
    if isinstance(v, bool) or not isinstance(v, int):
        raise ConversionError(f"{name} must be int, got {type(v).__name__}")
    if v < 0:
        raise ConversionError(f"{name} must be non-negative, got {v}")
    return v


@dataclass(frozen=True)
class LedgerInfo:
    """
    Deterministic ledger metadata visible to contracts.

    Fields
    ------
    sequence:          Ledger sequence number.
    timestamp:         Consensus close time (seconds).
    protocol_version:  Host protocol version.
    """
    sequence: int = 0
    timestamp: int = 0
    protocol_version: int = 1

    def __post_init__(self) -> None:
        _require_non_negative_int("sequence", self.sequence)
        _require_non_negative_int("timestamp", self.timestamp)
        _require_non_negative_int("protocol_version", self.protocol_version)


@dataclass(frozen=True)
class NetworkEnv:
    """Network identity plus ledger metadata."""
    passphrase: str
    ledger: LedgerInfo = field(default_factory=LedgerInfo)

    def __post_init__(self) -> None:
        if not isinstance(self.passphrase, str) or not self.passphrase:
            raise ConversionError("network passphrase must be a non-empty str")

    @property
    def network_id(self) -> bytes:
        return network_id_for(self.passphrase)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "passphrase": self.passphrase,
            "network_id": to_hex(self.network_id),
            "ledger": {
                "sequence": self.ledger.sequence,
                "timestamp": self.ledger.timestamp,
                "protocol_version": self.ledger.protocol_version,
            },
        }


__all__ = [
    "ID_LEN",
    "to_bytes",
    "to_id32",
    "to_hex",
    "LedgerInfo",
    "NetworkEnv",
]
