"""
vm_auth.runtime.host_auth — host-native authorization behind `Address.require_auth`.

Two modes (`AuthMode`):

ENFORCE
    The host carries the authorizations supplied with the top-level call
    (`Env.set_authorizations([...HostAuthorization])`). When contract code asks
    `address.require_auth_for_args(args)`:

      * a contract address that directly invoked the current frame is
        authorized implicitly;
      * otherwise a pending entry for (address, current contract, current
        function, args) must exist, else MissingAuthorization;
      * the entry's signature must name `address` and commit to the address's
        host nonce, and must authenticate the payload through the same
        authenticators as `vm_auth.verify` (Ed25519 or nested `check_auth`);
      * the entry is consumed and the host nonce advanced.

    Host nonces live in the host storage namespace of the journal, so they are
    rolled back together with the invocation that consumed them.

RECORD
    Nothing is enforced; each request is recorded so tests can assert on it
    with `Env.verify_top_authorization(...)` afterwards.

Pending entries and records are snapshotted at every invocation boundary and
restored if the invocation aborts.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any, List, Optional, Sequence, Tuple

from vm_auth.abi.encoding import encode_args, encode_value
from vm_auth.abi.types import Symbol
from vm_auth.address import Address
from vm_auth.errors import InvalidSignature, MissingAuthorization, StaleOrReplayedNonce
from vm_auth.identity import Identifier, Signature
from vm_auth.logging import get_logger
from vm_auth.payload import AuthorizationPayload
from vm_auth.runtime.context import to_hex, to_id32
from vm_auth.runtime.objects import ScAddress
from vm_auth.runtime.storage_api import decode_uint, encode_uint
from vm_auth.verify import authenticator_for

if TYPE_CHECKING:
    from vm_auth.runtime.env import Env

log = get_logger("vm_auth.host_auth")

HOST_NONCE_PREFIX = b"auth:host_nonce:"


class AuthMode(str, Enum):
    ENFORCE = "enforce"
    RECORD = "record"


@dataclass(frozen=True)
class HostAuthorization:
    """
    One authorization supplied with a top-level call: `address` approves
    calling `function(*args)` on `contract_id`, proven by `signature` (which
    commits to the address's host nonce).
    """

    address: Address
    contract_id: bytes
    function: Symbol
    args: Tuple[Any, ...]
    signature: Signature

    def __post_init__(self) -> None:
        object.__setattr__(self, "contract_id", to_id32(self.contract_id, name="contract id"))
        object.__setattr__(self, "function", Symbol(self.function, self.address.env.config.max_symbol_len))
        object.__setattr__(self, "args", tuple(self.args))

    @property
    def nonce(self) -> int:
        return self.signature.nonce


@dataclass(frozen=True)
class AuthRecord:
    """A `require_auth` request observed in recording mode."""

    address: ScAddress
    contract_id: bytes
    function: Symbol
    args: Tuple[Any, ...]
    encoded_args: bytes

    def matches(self, address: ScAddress, contract_id: bytes, function: Symbol, encoded_args: bytes) -> bool:
        return (
            self.address == address
            and self.contract_id == contract_id
            and self.function == function
            and self.encoded_args == encoded_args
        )


_Snapshot = Tuple[Tuple[HostAuthorization, ...], Tuple[AuthRecord, ...]]


def host_nonce_key(identifier: Identifier) -> bytes:
    return HOST_NONCE_PREFIX + encode_value(identifier)


class HostAuthManager:
    def __init__(self, env: "Env", mode: AuthMode) -> None:
        self._env = env
        self.mode = AuthMode(mode)
        self._pending: List[HostAuthorization] = []
        self._records: List[AuthRecord] = []

    # ---- invocation boundaries ---- #

    def checkpoint(self) -> _Snapshot:
        return tuple(self._pending), tuple(self._records)

    def restore(self, snapshot: _Snapshot) -> None:
        pending, records = snapshot
        self._pending = list(pending)
        self._records = list(records)

    # ---- enforcing-mode inputs ---- #

    def set_authorizations(self, entries: Sequence[HostAuthorization]) -> None:
        """Replace the pending authorizations (entries must belong to this env)."""
        checked: List[HostAuthorization] = []
        for entry in entries:
            if not isinstance(entry, HostAuthorization):
                raise InvalidSignature(f"expected HostAuthorization, got {type(entry).__name__}")
            self._env.check_same_env(entry.address.env)
            checked.append(entry)
        self._pending = checked

    def pending(self) -> List[HostAuthorization]:
        return list(self._pending)

    def host_nonce(self, identifier: Identifier) -> int:
        value = decode_uint(self._env.journal.host_get(host_nonce_key(identifier)))
        return 0 if value is None else value

    # ---- require_auth ---- #

    def require(self, address: Address, args: Sequence[Any]) -> None:
        self._env.check_same_env(address.env)
        frame = self._env.current_frame()
        encoded = encode_args(tuple(args))
        if self.mode is AuthMode.RECORD:
            self._records.append(
                AuthRecord(address.to_sc_address(), frame.contract_id, frame.function, tuple(args), encoded)
            )
            log.debug("authorization recorded", extra={"address": repr(address), "selector": str(frame.function)})
            return
        self._enforce(address, frame.contract_id, frame.function, tuple(args), encoded)

    def _enforce(self, address: Address, contract_id: bytes, function: Symbol,
                 args: Tuple[Any, ...], encoded: bytes) -> None:
        if address.is_contract() and self._env.invoker_id() == address.raw:
            return

        sc = address.to_sc_address()
        entry: Optional[HostAuthorization] = None
        for candidate in self._pending:
            if (
                candidate.address.to_sc_address() == sc
                and candidate.contract_id == contract_id
                and candidate.function == function
                and encode_args(candidate.args) == encoded
            ):
                entry = candidate
                break
        if entry is None:
            raise MissingAuthorization(
                context={"address": repr(address), "contract_id": to_hex(contract_id), "function": str(function)}
            )

        identifier = address.to_identifier()
        if entry.signature.identifier() != identifier:
            raise InvalidSignature("authorization signed by a different identity",
                                   context={"address": repr(address)})
        stored = self.host_nonce(identifier)
        if entry.signature.nonce != stored:
            raise StaleOrReplayedNonce(expected=stored, got=entry.signature.nonce)

        payload = AuthorizationPayload.build(self._env, stored, function, args)
        authenticator_for(entry.signature).authorize(self._env, payload)

        self._pending.remove(entry)
        self._env.journal.host_set(host_nonce_key(identifier), encode_uint(stored + 1))
        log.debug("host authorization consumed", extra={"address": repr(address), "nonce": stored})

    # ---- recording-mode inspection ---- #

    def verify_top_authorization(self, address: Address, contract_id: bytes, function: str,
                                 args: Sequence[Any]) -> bool:
        """True (and the record is consumed) if a matching request was recorded."""
        self._env.check_same_env(address.env)
        sc = address.to_sc_address()
        cid = to_id32(contract_id, name="contract id")
        fn = Symbol(function, self._env.config.max_symbol_len)
        encoded = encode_args(tuple(args))
        for i, record in enumerate(self._records):
            if record.matches(sc, cid, fn, encoded):
                del self._records[i]
                return True
        return False

    def recorded(self) -> List[AuthRecord]:
        return list(self._records)


__all__ = [
    "AuthMode",
    "HostAuthorization",
    "AuthRecord",
    "HostAuthManager",
    "HOST_NONCE_PREFIX",
    "host_nonce_key",
]
