"""
vm_auth.runtime.objects — host object table entries and handles.

Values such as addresses live in the Env's object table; contract-side code
only ever holds an `ObjectHandle` (env id + type + slot). Handles are
meaningless outside the Env that issued them, which is what makes Address
comparison a host operation rather than a local one.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, IntEnum

from vm_auth.errors import ConversionError

from .context import ID_LEN


class ObjectType(str, Enum):
    ADDRESS = "address"
    BYTES = "bytes"


class AddressKind(IntEnum):
    """Order matters: accounts sort before contracts in `obj_cmp`."""

    ACCOUNT = 0
    CONTRACT = 1


@dataclass(frozen=True, order=True)
class ScAddress:
    """Raw address value stored in the object table (Ed25519 key or contract id)."""

    kind: AddressKind
    raw: bytes

    def __post_init__(self) -> None:
        object.__setattr__(self, "kind", AddressKind(self.kind))
        if not isinstance(self.raw, (bytes, bytearray)) or len(self.raw) != ID_LEN:
            raise ConversionError(f"address payload must be {ID_LEN} bytes")
        object.__setattr__(self, "raw", bytes(self.raw))

    @classmethod
    def account(cls, public_key: bytes) -> "ScAddress":
        return cls(AddressKind.ACCOUNT, public_key)

    @classmethod
    def contract(cls, contract_id: bytes) -> "ScAddress":
        return cls(AddressKind.CONTRACT, contract_id)


@dataclass(frozen=True)
class ObjectHandle:
    env_id: int
    obj_type: ObjectType
    index: int


__all__ = ["ObjectType", "AddressKind", "ScAddress", "ObjectHandle"]
