"""
vm_auth.testutils.ed25519 — key generation and signing for tests.

    identifier, signer = generate(env)
    sig = sign(env, signer, contract_id, "examplefn", (identifier, 1, 2))
    client.examplefn(sig, 1, 2)

`sign` reads the signer's current nonce as stored by `contract_id` (the
contract that will call `verify`) and signs the payload that contract will
rebuild. It does not advance anything; only a successful verification does.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Optional, Sequence, Tuple

from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PrivateKey

from vm_auth.abi.types import Symbol
from vm_auth.address import Address
from vm_auth.identity import Identifier, KeyHolderIdentifier, KeyHolderSignature
from vm_auth.nonce import read_nonce
from vm_auth.payload import AuthorizationPayload, DomainSeparator
from vm_auth.runtime.context import to_id32
from vm_auth.runtime.host_auth import HostAuthorization

if TYPE_CHECKING:
    from vm_auth.runtime.env import Env


class Signer:
    """An Ed25519 private key usable from tests."""

    def __init__(self, private_key: Optional[Ed25519PrivateKey] = None) -> None:
        self._sk = private_key if private_key is not None else Ed25519PrivateKey.generate()
        self.public_key: bytes = self._sk.public_key().public_bytes(
            encoding=serialization.Encoding.Raw,
            format=serialization.PublicFormat.Raw,
        )

    @classmethod
    def from_seed(cls, seed: bytes) -> "Signer":
        return cls(Ed25519PrivateKey.from_private_bytes(bytes(seed)))

    def identifier(self) -> KeyHolderIdentifier:
        return KeyHolderIdentifier(self.public_key)

    def sign(self, message: bytes) -> bytes:
        return self._sk.sign(bytes(message))

    def __repr__(self) -> str:
        return f"Signer(0x{self.public_key.hex()})"


def generate(env: "Env") -> Tuple[Identifier, Signer]:
    signer = Signer()
    return signer.identifier(), signer


def payload_digest(env: "Env", contract_id: bytes, nonce: int, function: str, args: Sequence[Any]) -> bytes:
    """Digest `contract_id` will compute when verifying (function, args) at `nonce`."""
    domain = DomainSeparator(env.network_id, to_id32(contract_id, name="contract id"))
    payload = AuthorizationPayload(domain, nonce, Symbol(function, env.config.max_symbol_len), tuple(args))
    return payload.digest(max_bytes=env.config.max_payload_bytes)


def sign(
    env: "Env",
    signer: Signer,
    contract_id: bytes,
    function: str,
    args: Sequence[Any],
    *,
    nonce: Optional[int] = None,
) -> KeyHolderSignature:
    """
    Sign an authorization of `function(*args)` on `contract_id`.

    The nonce defaults to the one currently stored by that contract for the
    signer; pass `nonce=` to produce deliberately stale or future signatures.
    """
    if nonce is None:
        identifier = signer.identifier()
        nonce = env.as_contract(contract_id, lambda: read_nonce(env, identifier))
    digest = payload_digest(env, contract_id, nonce, function, args)
    return KeyHolderSignature(signer.public_key, signer.sign(digest), nonce)


def sign_host_authorization(
    env: "Env",
    signer: Signer,
    contract_id: bytes,
    function: str,
    args: Sequence[Any],
    *,
    nonce: Optional[int] = None,
) -> HostAuthorization:
    """Build an enforcing-mode authorization for the signer's account address."""
    identifier = signer.identifier()
    if nonce is None:
        nonce = env.auth.host_nonce(identifier)
    digest = payload_digest(env, contract_id, nonce, function, args)
    return HostAuthorization(
        address=Address.from_account(env, signer.public_key),
        contract_id=contract_id,
        function=Symbol(function, env.config.max_symbol_len),
        args=tuple(args),
        signature=KeyHolderSignature(signer.public_key, signer.sign(digest), nonce),
    )


__all__ = ["Signer", "generate", "payload_digest", "sign", "sign_host_authorization"]
