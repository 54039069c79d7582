"""
vm_auth.payload — the bytes a signature must cover.

    AuthorizationPayload = (domain_separator, nonce, function_selector, args)
    domain_separator     = (network_id, contract_id)

Encoding is the canonical vec encoding of

    [network_id: bytes, contract_id: bytes, nonce: int, function: Symbol, args: vec]

and the signed message is its domain-separated SHA3-256 digest
(`hash_api.sha3_256(encoded, domain=PAYLOAD_DOMAIN)`).

`network_id` is sha256 of the network passphrase and `contract_id` is the id of
the contract performing the check, so a signature made for one contract or one
network never verifies against another. Payloads are built, encoded, hashed
and discarded within a single verification; they are never persisted.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Dict, Sequence, Tuple

from vm_auth.abi.encoding import encode_args
from vm_auth.abi.types import Symbol, coerce_uint
from vm_auth.errors import ConversionError
from vm_auth.runtime.context import to_hex, to_id32
from vm_auth.runtime.hash_api import sha3_256

if TYPE_CHECKING:
    from vm_auth.runtime.env import Env

PAYLOAD_DOMAIN = b"vm_auth/payload/v1"


@dataclass(frozen=True)
class DomainSeparator:
    network_id: bytes
    contract_id: bytes

    def __post_init__(self) -> None:
        object.__setattr__(self, "network_id", to_id32(self.network_id, name="network id"))
        object.__setattr__(self, "contract_id", to_id32(self.contract_id, name="contract id"))

    @classmethod
    def for_env(cls, env: "Env") -> "DomainSeparator":
        """Domain of the contract currently executing in `env`."""
        return cls(network_id=env.network_id, contract_id=env.current_contract_id())


@dataclass(frozen=True)
class AuthorizationPayload:
    domain: DomainSeparator
    nonce: int
    function: Symbol
    args: Tuple[Any, ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "nonce", coerce_uint(self.nonce))
        object.__setattr__(self, "function", Symbol(self.function))
        if not isinstance(self.args, (list, tuple)):
            raise ConversionError(f"payload args must be a tuple, got {type(self.args).__name__}")
        object.__setattr__(self, "args", tuple(self.args))

    @classmethod
    def build(cls, env: "Env", nonce: int, function: str, args: Sequence[Any]) -> "AuthorizationPayload":
        return cls(DomainSeparator.for_env(env), nonce, Symbol(function, env.config.max_symbol_len), tuple(args))

    def encode(self, *, max_bytes: int | None = None) -> bytes:
        encoded = encode_args(
            (
                self.domain.network_id,
                self.domain.contract_id,
                self.nonce,
                self.function,
                self.args,
            )
        )
        if max_bytes is not None and len(encoded) > max_bytes:
            raise ConversionError(f"authorization payload too large ({len(encoded)} > {max_bytes} bytes)")
        return encoded

    def digest(self, *, max_bytes: int | None = None) -> bytes:
        """32-byte message that key holders sign."""
        return sha3_256(self.encode(max_bytes=max_bytes), domain=PAYLOAD_DOMAIN)

    def describe(self) -> Dict[str, Any]:
        return {
            "network_id": to_hex(self.domain.network_id),
            "contract_id": to_hex(self.domain.contract_id),
            "nonce": self.nonce,
            "function": str(self.function),
            "argc": len(self.args),
        }


__all__ = ["PAYLOAD_DOMAIN", "DomainSeparator", "AuthorizationPayload"]
