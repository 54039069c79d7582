"""
vm_auth.identity — who may authorize a call, and the proof they offer.

Identifier
----------
A closed set of two variants:

    Identifier.KeyHolder(public_key)    32-byte Ed25519 public key
    Identifier.Contract(contract_id)    32-byte id of a contract acting as authorizer

Identifiers are immutable and compare structurally *including the variant*:
`KeyHolder(x) != Contract(x)` for the same 32 bytes.

Signature
---------
    Signature.KeyHolder(public_key, signature, nonce)
    Signature.Contract(contract_id, nonce)

A signature carries enough to recover the claimed Identifier without any
lookup (`signature.identifier()`), plus the nonce the signer committed to. A
contract "signature" has no proof bytes: the contract is asked to authorize
the payload itself through its `check_auth` entry point.

Callers typically put `signature.identifier()` into the argument tuple they
ask to have verified, which binds *whose* approval is claimed into the signed
payload.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import IntEnum
from typing import TYPE_CHECKING, Any, ClassVar, Type, Union

from vm_auth.errors import ConversionError
from vm_auth.runtime.context import to_bytes, to_hex, to_id32
from vm_auth.runtime.crypto_api import ED25519_SIGNATURE_LEN
from vm_auth.runtime.objects import AddressKind

if TYPE_CHECKING:
    from vm_auth.address import Address
    from vm_auth.runtime.env import Env


class IdentifierKind(IntEnum):
    KEY_HOLDER = 0
    CONTRACT = 1


def _nonce(value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise ConversionError(f"nonce must be a non-negative int, got {value!r}")
    return value


# ----------------------------- Identifier ------------------------------ #


class Identifier(ABC):
    """Abstract base of the two identifier variants."""

    kind: ClassVar[IdentifierKind]
    KeyHolder: ClassVar[Type["KeyHolderIdentifier"]]
    Contract: ClassVar[Type["ContractIdentifier"]]

    __slots__ = ()

    @property
    @abstractmethod
    def raw(self) -> bytes:
        """The 32 raw bytes behind the variant."""

    def to_address(self, env: "Env") -> "Address":
        """Materialize as an Address in `env` (account for key holders)."""
        from vm_auth.address import Address

        if self.kind is IdentifierKind.KEY_HOLDER:
            return Address.from_account(env, self.raw)
        return Address.from_contract_id(env, self.raw)

    @staticmethod
    def from_address(address: "Address") -> "Identifier":
        sc = address.to_sc_address()
        if sc.kind is AddressKind.ACCOUNT:
            return KeyHolderIdentifier(sc.raw)
        return ContractIdentifier(sc.raw)


@dataclass(frozen=True)
class KeyHolderIdentifier(Identifier):
    public_key: bytes

    kind: ClassVar[IdentifierKind] = IdentifierKind.KEY_HOLDER

    def __post_init__(self) -> None:
        object.__setattr__(self, "public_key", to_id32(self.public_key, name="public key"))

    @property
    def raw(self) -> bytes:
        return self.public_key

    def __repr__(self) -> str:
        return f"Identifier.KeyHolder({to_hex(self.public_key)})"


@dataclass(frozen=True)
class ContractIdentifier(Identifier):
    contract_id: bytes

    kind: ClassVar[IdentifierKind] = IdentifierKind.CONTRACT

    def __post_init__(self) -> None:
        object.__setattr__(self, "contract_id", to_id32(self.contract_id, name="contract id"))

    @property
    def raw(self) -> bytes:
        return self.contract_id

    def __repr__(self) -> str:
        return f"Identifier.Contract({to_hex(self.contract_id)})"


Identifier.KeyHolder = KeyHolderIdentifier
Identifier.Contract = ContractIdentifier


# ----------------------------- Signature ------------------------------- #


class Signature(ABC):
    """Abstract base of the two signature variants."""

    KeyHolder: ClassVar[Type["KeyHolderSignature"]]
    Contract: ClassVar[Type["ContractSignature"]]

    __slots__ = ()

    nonce: int

    @abstractmethod
    def identifier(self) -> Identifier:
        """The claimed identity. Pure; verifies nothing."""


@dataclass(frozen=True)
class KeyHolderSignature(Signature):
    public_key: bytes
    signature: bytes
    nonce: int

    def __post_init__(self) -> None:
        object.__setattr__(self, "public_key", to_id32(self.public_key, name="public key"))
        sig = to_bytes(self.signature)
        if len(sig) != ED25519_SIGNATURE_LEN:
            raise ConversionError(f"signature must be {ED25519_SIGNATURE_LEN} bytes, got {len(sig)}")
        object.__setattr__(self, "signature", sig)
        object.__setattr__(self, "nonce", _nonce(self.nonce))

    def identifier(self) -> Identifier:
        return KeyHolderIdentifier(self.public_key)


@dataclass(frozen=True)
class ContractSignature(Signature):
    contract_id: bytes
    nonce: int

    def __post_init__(self) -> None:
        object.__setattr__(self, "contract_id", to_id32(self.contract_id, name="contract id"))
        object.__setattr__(self, "nonce", _nonce(self.nonce))

    def identifier(self) -> Identifier:
        return ContractIdentifier(self.contract_id)


Signature.KeyHolder = KeyHolderSignature
Signature.Contract = ContractSignature

AnySignature = Union[KeyHolderSignature, ContractSignature]

__all__ = [
    "IdentifierKind",
    "Identifier",
    "KeyHolderIdentifier",
    "ContractIdentifier",
    "Signature",
    "KeyHolderSignature",
    "ContractSignature",
    "AnySignature",
]
