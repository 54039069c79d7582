"""
vm_auth.address — Address, the universal opaque identity handle.

Address can be used as an input argument (e.g. the payment recipient), as a
data key (e.g. to store a balance), and as the subject of authorization
(e.g. to authorize a token transfer).

Internally an Address is `(env, object handle)`. The handle points into the
env's object table, where the actual value (`ScAddress`: an Ed25519 account
key or a contract id) lives. Consequences:

- Equality and ordering are computed by the env (`env.obj_cmp`), not locally.
- Addresses from two different envs cannot be compared: doing so is a
  programming error and raises `ContextMismatch`. They are therefore never
  reported equal, even when their raw bytes coincide.
- Copies share the handle; nothing is deep-copied.

Authorization
-------------
`require_auth()` / `require_auth_for_args(args)` assert that this Address
approved the current invocation (with its actual arguments, or with `args`).
The env's host authorization manager performs the signature and replay checks
(enforcing mode) or merely records the request (recording mode, for tests).
Both raise on failure and return None on success.

In tests, Addresses are generated with `vm_auth.testutils.address.random(env)`.
"""

from __future__ import annotations

import functools
from typing import TYPE_CHECKING, Any, Sequence

from vm_auth.errors import ConversionError
from vm_auth.runtime.context import to_hex, to_id32
from vm_auth.runtime.objects import AddressKind, ObjectHandle, ObjectType, ScAddress

if TYPE_CHECKING:
    from vm_auth.identity import Identifier
    from vm_auth.runtime.env import Env


@functools.total_ordering
class Address:
    __slots__ = ("_env", "_obj")

    def __init__(self, env: "Env", obj: ObjectHandle) -> None:
        # Validates env ownership and object type.
        env.get_object(obj, ObjectType.ADDRESS)
        self._env = env
        self._obj = obj

    # ---- conversions ---- #

    @classmethod
    def try_from_val(cls, env: "Env", val: Any) -> "Address":
        """
        Interpret `val` as an Address of `env`.

        Accepts an Address (same env), an ObjectHandle of type ADDRESS, or a raw
        `ScAddress`. Anything else raises ConversionError.
        """
        if isinstance(val, Address):
            env.check_same_env(val._env)
            return val
        if isinstance(val, ObjectHandle):
            return cls(env, val)
        if isinstance(val, ScAddress):
            return cls(env, env.add_object(ObjectType.ADDRESS, val))
        raise ConversionError(f"cannot interpret {type(val).__name__} as Address")

    @classmethod
    def from_account(cls, env: "Env", public_key: bytes) -> "Address":
        return cls.try_from_val(env, ScAddress.account(to_id32(public_key, name="public key")))

    @classmethod
    def from_contract_id(cls, env: "Env", contract_id: bytes) -> "Address":
        return cls.try_from_val(env, ScAddress.contract(to_id32(contract_id, name="contract id")))

    def to_sc_address(self) -> ScAddress:
        return self._env.get_object(self._obj, ObjectType.ADDRESS)

    def to_identifier(self) -> "Identifier":
        from vm_auth.identity import Identifier

        return Identifier.from_address(self)

    # ---- accessors ---- #

    @property
    def env(self) -> "Env":
        return self._env

    def as_object(self) -> ObjectHandle:
        return self._obj

    @property
    def kind(self) -> AddressKind:
        return self.to_sc_address().kind

    @property
    def raw(self) -> bytes:
        return self.to_sc_address().raw

    def is_contract(self) -> bool:
        return self.kind is AddressKind.CONTRACT

    def is_account(self) -> bool:
        return self.kind is AddressKind.ACCOUNT

    # ---- authorization ---- #

    def require_auth_for_args(self, args: Sequence[Any]) -> None:
        """
        Ensure this Address authorized the current contract invocation with
        the provided arguments.

        The arguments don't have to match the invocation arguments, but a
        well-defined, deterministic, ledger-state-independent mapping from the
        invocation arguments lets callers build the payload to sign up front.

        Raises if the invocation is not authorized.
        """
        self._env.require_auth_for_args(self, args)

    def require_auth(self) -> None:
        """
        Same as `require_auth_for_args`, with the arguments of the current
        contract invocation.

        Raises if the invocation is not authorized.
        """
        self._env.require_auth(self)

    # ---- comparison (host-delegated) ---- #

    def _cmp(self, other: "Address") -> int:
        self._env.check_same_env(other._env)
        return self._env.obj_cmp(self._obj, other._obj)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Address):
            return NotImplemented
        return self._cmp(other) == 0

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, Address):
            return NotImplemented
        return self._cmp(other) < 0

    def __hash__(self) -> int:
        return hash((self._env.env_id, self.to_sc_address()))

    def __copy__(self) -> "Address":
        return self

    def __deepcopy__(self, memo: dict) -> "Address":
        return self

    def __repr__(self) -> str:
        sc = self.to_sc_address()
        label = "Account" if sc.kind is AddressKind.ACCOUNT else "Contract"
        return f"Address({label}({to_hex(sc.raw)}))"


__all__ = ["Address"]
