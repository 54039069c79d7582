"""
vm_auth.runtime.hash_api — deterministic hashing wrappers.

Goals
-----
- Strictly bytes-in, bytes-out (no implicit text/encoding).
- Optional domain separation prefix for safer composition across subsystems.

Provided APIs
-------------
- sha3_256(data: bytes, *, domain: bytes = b"") -> bytes
- sha256(data: bytes, *, domain: bytes = b"") -> bytes

Domain Separation
-----------------
If a non-empty `domain` is provided, the hash input becomes:

    b"\\x19vm_auth:" || domain || b"\\x00" || data

The authorization payload digest uses `domain=b"vm_auth/payload/v1"`, so a
signature over a payload can never be confused with a signature over any other
hashed structure in the host.
"""

from __future__ import annotations

import hashlib
from vm_auth.errors import ConversionError

_PREFIX = b"\x19vm_auth:"


def _ensure_bytes(buf: object, name: str) -> bytes:
    if isinstance(buf, (bytes, bytearray, memoryview)):
        return bytes(buf)
    raise ConversionError(f"{name} must be bytes-like (got {type(buf).__name__})")


def _apply_domain(h, domain: bytes) -> None:
    if domain:
        h.update(_PREFIX)
        h.update(domain)
        h.update(b"\x00")


def sha3_256(data: bytes | bytearray | memoryview, *, domain: bytes = b"") -> bytes:
    h = hashlib.sha3_256()
    _apply_domain(h, _ensure_bytes(domain, "domain"))
    h.update(_ensure_bytes(data, "data"))
    return h.digest()


def sha256(data: bytes | bytearray | memoryview, *, domain: bytes = b"") -> bytes:
    h = hashlib.sha256()
    _apply_domain(h, _ensure_bytes(domain, "domain"))
    h.update(_ensure_bytes(data, "data"))
    return h.digest()


__all__ = [
    "sha3_256",
    "sha256",
]
