"""
vm_auth.runtime.env — the execution context every operation receives.

An `Env` bundles:

- network metadata (`NetworkEnv`: network id, ledger info);
- the crypto capability (`CryptoProvider`, Ed25519 by default);
- journaled storage plus the contract-facing `storage` view;
- an object table holding host values (addresses) behind `ObjectHandle`s;
- a registry of contracts and the stack of invocation frames;
- the host authorization manager (`env.auth`).

Atomic invocation
-----------------
`invoke_contract` pushes a frame, opens a storage checkpoint and snapshots the
host auth state. If the contract raises, all three are rolled back and the
exception propagates unchanged; otherwise storage is committed into the
parent checkpoint (or the backend, for the outermost call). Nonce increments
made by `verify` are ordinary storage writes and follow the same rule.

Contracts are plain Python objects. Public methods are entry points and take
the env as their first argument:

    class Counter:
        def bump(self, env, sig):
            verify(env, sig, "bump", (sig.identifier(),))

The method named `CHECK_AUTH_FN` is reserved: it cannot be called through
`invoke_contract` and is only reached by the verification engine when the
contract acts as an authorizer (`invoke_check_auth`).

Envs share nothing. Handles and Addresses from one env are rejected by every
other env with `ContextMismatch`.
"""

from __future__ import annotations

import itertools
import secrets
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple, TypeVar, Union

from vm_auth import logging as alog
from vm_auth.abi.types import Symbol
from vm_auth.address import Address
from vm_auth.config import AuthConfig, load_config
from vm_auth.errors import ContextMismatch, ConversionError, InvocationError
from vm_auth.runtime.context import LedgerInfo, NetworkEnv, to_hex, to_id32
from vm_auth.runtime.crypto_api import CryptoProvider, Ed25519Provider
from vm_auth.runtime.host_auth import AuthMode, AuthRecord, HostAuthManager, HostAuthorization
from vm_auth.runtime.objects import ObjectHandle, ObjectType, ScAddress
from vm_auth.runtime.storage_api import ContractStorage, JournaledStorage, StorageBackend

log = alog.get_logger("vm_auth.env")

CHECK_AUTH_FN = "check_auth"

_ENV_IDS = itertools.count(1)

T = TypeVar("T")


@dataclass(frozen=True)
class Frame:
    contract_id: bytes
    function: Symbol
    args: Tuple[Any, ...]


class Env:
    def __init__(
        self,
        *,
        network: Optional[NetworkEnv] = None,
        auth_mode: Union[AuthMode, str, None] = None,
        crypto: Optional[CryptoProvider] = None,
        backend: Optional[StorageBackend] = None,
        config: Optional[AuthConfig] = None,
    ) -> None:
        self.config = config if config is not None else load_config()
        self.env_id = next(_ENV_IDS)
        self.network = network if network is not None else NetworkEnv(self.config.network_passphrase)
        self.crypto: CryptoProvider = crypto if crypto is not None else Ed25519Provider()
        self.journal = JournaledStorage(
            backend,
            max_key_bytes=self.config.max_storage_key_bytes,
            max_value_bytes=self.config.max_storage_value_bytes,
        )
        self.storage = ContractStorage(self.journal, self.current_contract_id)
        self._objects: List[Tuple[ObjectType, Any]] = []
        self._contracts: Dict[bytes, Any] = {}
        self._frames: List[Frame] = []
        self.auth = HostAuthManager(self, AuthMode(auth_mode or self.config.default_auth_mode))

    def __repr__(self) -> str:
        return f"Env(id={self.env_id}, mode={self.auth.mode.value}, depth={len(self._frames)})"

    # ---- network ---- #

    @property
    def network_id(self) -> bytes:
        return self.network.network_id

    @property
    def ledger(self) -> LedgerInfo:
        return self.network.ledger

    # ---- object table ---- #

    def add_object(self, obj_type: ObjectType, value: Any) -> ObjectHandle:
        obj_type = ObjectType(obj_type)
        if obj_type is ObjectType.ADDRESS and not isinstance(value, ScAddress):
            raise ConversionError(f"address object must be ScAddress, got {type(value).__name__}")
        if obj_type is ObjectType.BYTES:
            if not isinstance(value, (bytes, bytearray)):
                raise ConversionError(f"bytes object must be bytes, got {type(value).__name__}")
            value = bytes(value)
        self._objects.append((obj_type, value))
        return ObjectHandle(self.env_id, obj_type, len(self._objects) - 1)

    def add_bytes(self, value: bytes) -> ObjectHandle:
        return self.add_object(ObjectType.BYTES, value)

    def get_object(self, handle: ObjectHandle, expected: Optional[ObjectType] = None) -> Any:
        if not isinstance(handle, ObjectHandle):
            raise ConversionError(f"expected ObjectHandle, got {type(handle).__name__}")
        if handle.env_id != self.env_id:
            raise ContextMismatch(context={"handle_env": handle.env_id, "env": self.env_id})
        if not 0 <= handle.index < len(self._objects):
            raise ConversionError(f"unknown object handle {handle.index}")
        obj_type, value = self._objects[handle.index]
        if obj_type is not handle.obj_type or (expected is not None and obj_type is not expected):
            raise ConversionError(f"object {handle.index} is {obj_type.value}, expected {(expected or handle.obj_type).value}")
        return value

    def obj_cmp(self, a: ObjectHandle, b: ObjectHandle) -> int:
        """Total order over objects of one type: -1, 0 or 1."""
        va = self.get_object(a)
        vb = self.get_object(b, a.obj_type)
        if va == vb:
            return 0
        return -1 if va < vb else 1

    def check_same_env(self, other: "Env") -> None:
        if other is not self:
            raise ContextMismatch(context={"env": self.env_id, "other": getattr(other, "env_id", None)})

    # ---- contracts ---- #

    def register_contract(self, contract_id: Optional[bytes], contract: Any) -> Address:
        """
        Register `contract` under `contract_id` (random if None) and return its
        Address. Ids are unique per env.
        """
        cid = secrets.token_bytes(32) if contract_id is None else to_id32(contract_id, name="contract id")
        if cid in self._contracts:
            raise InvocationError("contract id already registered", context={"contract_id": to_hex(cid)})
        self._contracts[cid] = contract
        log.debug("contract registered", extra={"contract_id": to_hex(cid), "type": type(contract).__name__})
        return Address.from_contract_id(self, cid)

    def contract(self, contract_id: bytes) -> Any:
        cid = to_id32(contract_id, name="contract id")
        try:
            return self._contracts[cid]
        except KeyError:
            raise InvocationError("unknown contract", context={"contract_id": to_hex(cid)}) from None

    # ---- frames ---- #

    def current_frame(self) -> Frame:
        if not self._frames:
            raise InvocationError("no contract is executing")
        return self._frames[-1]

    def current_contract_id(self) -> bytes:
        return self.current_frame().contract_id

    def current_contract_address(self) -> Address:
        return Address.from_contract_id(self, self.current_contract_id())

    def invoker_id(self) -> Optional[bytes]:
        """Contract id of the frame that invoked the current one (None at top level)."""
        if len(self._frames) < 2:
            return None
        return self._frames[-2].contract_id

    @property
    def call_depth(self) -> int:
        return len(self._frames)

    # ---- invocation ---- #

    def invoke_contract(self, contract_id: bytes, function: str, args: Sequence[Any] = ()) -> Any:
        fn = Symbol(function, self.config.max_symbol_len)
        if fn.startswith("_") or fn == CHECK_AUTH_FN:
            raise InvocationError(f"{fn} is not a callable entry point")
        cid = to_id32(contract_id, name="contract id")
        method = getattr(self.contract(cid), fn, None)
        if not callable(method):
            raise InvocationError("unknown function", context={"contract_id": to_hex(cid), "function": str(fn)})
        call_args = tuple(args)
        return self._invoke(cid, fn, call_args, lambda: method(self, *call_args))

    def invoke_check_auth(self, contract_id: bytes, digest: bytes, payload: Any) -> Any:
        """Run `contract_id`'s authorization entry point on a payload digest."""
        cid = to_id32(contract_id, name="contract id")
        method = getattr(self.contract(cid), CHECK_AUTH_FN, None)
        if not callable(method):
            raise InvocationError("contract cannot act as an authorizer", context={"contract_id": to_hex(cid)})
        return self._invoke(cid, Symbol(CHECK_AUTH_FN, self.config.max_symbol_len), (digest,), lambda: method(self, digest, payload))

    def as_contract(self, contract_id: bytes, fn: Callable[[], T]) -> T:
        """Run `fn` inside a frame of `contract_id` (storage and auth see that contract)."""
        cid = to_id32(contract_id, name="contract id")
        self.contract(cid)
        return self._invoke(cid, Symbol("as_contract", self.config.max_symbol_len), (), fn)

    def _invoke(self, contract_id: bytes, function: Symbol, args: Tuple[Any, ...], call: Callable[[], T]) -> T:
        if len(self._frames) >= self.config.max_call_depth:
            raise InvocationError("maximum call depth exceeded", context={"depth": len(self._frames)})

        auth_state = self.auth.checkpoint()
        self.journal.begin()
        self._frames.append(Frame(contract_id, function, args))
        try:
            with alog.bound(contract=to_hex(contract_id), function=str(function), depth=len(self._frames)):
                log.debug("invoke")
                result = call()
        except Exception as exc:
            self._frames.pop()
            self.journal.revert()
            self.auth.restore(auth_state)
            log.debug(
                "invocation reverted",
                extra={"contract_id": to_hex(contract_id), "selector": str(function),
                       "code": getattr(exc, "code", type(exc).__name__)},
            )
            raise
        self._frames.pop()
        self.journal.commit()
        return result

    # ---- host authorization ---- #

    def require_auth_for_args(self, address: Address, args: Sequence[Any]) -> None:
        self.auth.require(address, args)

    def require_auth(self, address: Address) -> None:
        self.auth.require(address, self.current_frame().args)

    def set_authorizations(self, entries: Sequence[HostAuthorization]) -> None:
        self.auth.set_authorizations(entries)

    def verify_top_authorization(self, address: Address, contract_id: bytes, function: str,
                                 args: Sequence[Any]) -> bool:
        return self.auth.verify_top_authorization(address, contract_id, function, args)

    def recorded_authorizations(self) -> List[AuthRecord]:
        return self.auth.recorded()


__all__ = ["Env", "Frame", "CHECK_AUTH_FN"]
