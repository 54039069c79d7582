"""
vm_auth.runtime.storage_api — persistent key/value state with nested checkpoints.

Layers
------
- `StorageBackend`: the external `get/set` capability (default: in-memory).
- `JournaledStorage`: a stack of write overlays over a backend. Every contract
  invocation opens a checkpoint (`begin`); a committed invocation merges its
  overlay into the parent (`commit`), an aborted one discards it (`revert`).
  Only the outermost commit reaches the backend, so a nonce increment survives
  only if the whole invocation chain commits.
- `ContractStorage`: the contract-facing view bound to the currently executing
  contract; keys are namespaced per contract so two contracts never alias.

Backend key layout
------------------
    b"c:" || contract_id(32) || key     contract data
    b"h:" || key                        host data (host-native auth nonces)

Public API (ContractStorage)
----------------------------
- get(key) -> Optional[bytes]
- set(key, value) -> None
- delete(key) -> None
- exists(key) -> bool
- get_int(key) -> Optional[int]      # big-endian, unsigned
- set_int(key, value) -> None        # big-endian, unsigned, < 2**256
"""

from __future__ import annotations

from typing import Callable, Dict, List, Optional, Protocol, runtime_checkable

from vm_auth.errors import ConversionError, InvocationError

_U256_MAX = (1 << 256) - 1
_CONTRACT_NS = b"c:"
_HOST_NS = b"h:"


# ---------------------------- Backend API ---------------------------- #


@runtime_checkable
class StorageBackend(Protocol):
    """Minimal backend interface for persistent state."""

    def get(self, key: bytes) -> Optional[bytes]: ...
    def set(self, key: bytes, value: bytes) -> None: ...
    def delete(self, key: bytes) -> None: ...
    def exists(self, key: bytes) -> bool: ...


class MemoryBackend:
    """In-memory backend for local runs and tests (single-threaded use)."""

    def __init__(self) -> None:
        self._store: Dict[bytes, bytes] = {}

    def get(self, key: bytes) -> Optional[bytes]:
        return self._store.get(key)

    def set(self, key: bytes, value: bytes) -> None:
        self._store[key] = value

    def delete(self, key: bytes) -> None:
        self._store.pop(key, None)

    def exists(self, key: bytes) -> bool:
        return key in self._store

    def __len__(self) -> int:
        return len(self._store)

    def snapshot(self) -> Dict[bytes, bytes]:
        return dict(self._store)


# --------------------------- Int encoding ---------------------------- #


def encode_uint(value: int) -> bytes:
    """Minimal big-endian unsigned encoding (zero -> b'\\x00')."""
    if isinstance(value, bool) or not isinstance(value, int):
        raise ConversionError("stored integer must be int")
    if value < 0 or value > _U256_MAX:
        raise ConversionError("stored integer out of range (must fit in 256 bits)")
    if value == 0:
        return b"\x00"
    return value.to_bytes((value.bit_length() + 7) // 8, "big")


def decode_uint(raw: Optional[bytes]) -> Optional[int]:
    if raw is None:
        return None
    if len(raw) == 0:
        return 0
    return int.from_bytes(raw, "big", signed=False)


# ------------------------- Journaled storage ------------------------- #

_DELETED = None  # overlay marker for deletions


class JournaledStorage:
    """
    Copy-on-write journal with nested checkpoints over a `StorageBackend`.

    Reads consult overlays from top → bottom and then the backend. Writes go to
    the top overlay; outside any checkpoint they go straight to the backend.
    """

    def __init__(self, backend: Optional[StorageBackend] = None, *,
                 max_key_bytes: int = 64, max_value_bytes: int = 131_072) -> None:
        self.backend: StorageBackend = backend if backend is not None else MemoryBackend()
        self.max_key_bytes = int(max_key_bytes)
        self.max_value_bytes = int(max_value_bytes)
        self._overlays: List[Dict[bytes, Optional[bytes]]] = []

    # --- checkpoints ---

    @property
    def depth(self) -> int:
        return len(self._overlays)

    def begin(self) -> None:
        self._overlays.append({})

    def commit(self) -> None:
        if not self._overlays:
            raise InvocationError("commit without an open checkpoint")
        top = self._overlays.pop()
        if self._overlays:
            self._overlays[-1].update(top)
            return
        for key, value in top.items():
            if value is _DELETED:
                self.backend.delete(key)
            else:
                self.backend.set(key, value)

    def revert(self) -> None:
        if not self._overlays:
            raise InvocationError("revert without an open checkpoint")
        self._overlays.pop()

    # --- raw access (namespaced keys) ---

    def _read(self, key: bytes) -> Optional[bytes]:
        for overlay in reversed(self._overlays):
            if key in overlay:
                return overlay[key]
        return self.backend.get(key)

    def _write(self, key: bytes, value: Optional[bytes]) -> None:
        if self._overlays:
            self._overlays[-1][key] = value
        elif value is _DELETED:
            self.backend.delete(key)
        else:
            self.backend.set(key, value)

    # --- validation ---

    def _check_key(self, key: object) -> bytes:
        if not isinstance(key, (bytes, bytearray)):
            raise ConversionError("storage key must be bytes")
        if len(key) == 0:
            raise ConversionError("storage key must be non-empty")
        if len(key) > self.max_key_bytes:
            raise ConversionError(f"storage key too long (>{self.max_key_bytes} bytes)")
        return bytes(key)

    def _check_value(self, value: object) -> bytes:
        if not isinstance(value, (bytes, bytearray)):
            raise ConversionError("storage value must be bytes")
        if len(value) > self.max_value_bytes:
            raise ConversionError(f"storage value too large (>{self.max_value_bytes} bytes)")
        return bytes(value)

    # --- namespaced API ---

    def contract_get(self, contract_id: bytes, key: bytes) -> Optional[bytes]:
        return self._read(_CONTRACT_NS + contract_id + self._check_key(key))

    def contract_set(self, contract_id: bytes, key: bytes, value: bytes) -> None:
        self._write(_CONTRACT_NS + contract_id + self._check_key(key), self._check_value(value))

    def contract_delete(self, contract_id: bytes, key: bytes) -> None:
        self._write(_CONTRACT_NS + contract_id + self._check_key(key), _DELETED)

    def host_get(self, key: bytes) -> Optional[bytes]:
        return self._read(_HOST_NS + self._check_key(key))

    def host_set(self, key: bytes, value: bytes) -> None:
        self._write(_HOST_NS + self._check_key(key), self._check_value(value))


class ContractStorage:
    """
    Contract-facing storage bound to whichever contract is executing.

    `contract_id` is resolved lazily through `current_contract`, so a single
    view can be handed to contract code and stays correct across nested calls.
    """

    def __init__(self, journal: JournaledStorage, current_contract: Callable[[], bytes]) -> None:
        self._journal = journal
        self._current = current_contract

    def get(self, key: bytes) -> Optional[bytes]:
        """Return the value for `key`, or None if not set."""
        return self._journal.contract_get(self._current(), key)

    def set(self, key: bytes, value: bytes) -> None:
        self._journal.contract_set(self._current(), key, value)

    def delete(self, key: bytes) -> None:
        """Delete `key` if present (no-op otherwise)."""
        self._journal.contract_delete(self._current(), key)

    def exists(self, key: bytes) -> bool:
        return self.get(key) is not None

    def get_int(self, key: bytes) -> Optional[int]:
        """Read a big-endian unsigned integer at `key`. Returns None if not set."""
        return decode_uint(self.get(key))

    def set_int(self, key: bytes, value: int) -> None:
        self.set(key, encode_uint(value))


__all__ = [
    "StorageBackend",
    "MemoryBackend",
    "JournaledStorage",
    "ContractStorage",
    "encode_uint",
    "decode_uint",
]
