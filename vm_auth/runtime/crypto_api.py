"""
vm_auth.runtime.crypto_api — signature verification capability.

The authorization core treats signature checking as a black box:

    verify_signature(public_key, message, signature) -> bool

`CryptoProvider` is the protocol an `Env` holds; `Ed25519Provider` is the
default implementation, backed by the `cryptography` package. Verification
never raises for malformed keys or signatures: anything that does not verify
is simply `False`, and the engine turns that into `InvalidSignature`.

Key generation and signing live in `vm_auth.testutils.ed25519`; contract code
only ever verifies.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from cryptography.exceptions import InvalidSignature as _CryptoInvalidSignature
from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PublicKey

ED25519_PUBLIC_KEY_LEN = 32
ED25519_SIGNATURE_LEN = 64


@runtime_checkable
class CryptoProvider(Protocol):
    """Minimal crypto capability consumed by the verification engine."""

    def verify_signature(self, public_key: bytes, message: bytes, signature: bytes) -> bool: ...


class Ed25519Provider:
    """Ed25519 (RFC 8032) verification via `cryptography`."""

    name = "ed25519"

    def verify_signature(self, public_key: bytes, message: bytes, signature: bytes) -> bool:
        if len(public_key) != ED25519_PUBLIC_KEY_LEN or len(signature) != ED25519_SIGNATURE_LEN:
            return False
        try:
            pub = Ed25519PublicKey.from_public_bytes(bytes(public_key))
        except ValueError:
            return False
        try:
            pub.verify(bytes(signature), bytes(message))
        except _CryptoInvalidSignature:
            return False
        return True


__all__ = [
    "CryptoProvider",
    "Ed25519Provider",
    "ED25519_PUBLIC_KEY_LEN",
    "ED25519_SIGNATURE_LEN",
]
