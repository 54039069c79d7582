"""
vm_auth.verify — the verification engine.

    verify(env, signature, function, args)

checks that `signature.identifier()` approved a call to `function` of the
currently executing contract with exactly `args`:

1. read the identifier's stored nonce (0 if absent); the signature must commit
   to that exact value, otherwise StaleOrReplayedNonce;
2. build the AuthorizationPayload (network id, contract id, nonce, function,
   args), encode and hash it;
3. authenticate it with the signature's Authenticator:
     key holder → Ed25519 check of the digest      (InvalidSignature)
     contract   → the contract's `check_auth` entry point is invoked with
                  (digest, payload) and must complete without raising and
                  without returning False          (NestedAuthorizationFailed)
4. store nonce + 1.

Any failure raises before step 4, so a rejected signature never moves the
nonce. The increment itself is journaled with the rest of the invocation and
is discarded if the invocation later aborts.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Protocol, Sequence, runtime_checkable

from vm_auth.errors import AuthError, InvalidSignature, NestedAuthorizationFailed
from vm_auth.identity import ContractSignature, KeyHolderSignature, Signature
from vm_auth.logging import get_logger
from vm_auth.nonce import advance_nonce, check_nonce
from vm_auth.payload import AuthorizationPayload
from vm_auth.runtime.context import to_hex, to_id32

if TYPE_CHECKING:
    from vm_auth.runtime.env import Env

log = get_logger("vm_auth.verify")


# ---------------------------- Authenticators ---------------------------- #


@runtime_checkable
class Authenticator(Protocol):
    """Capability: approve `payload` or raise."""

    def authorize(self, env: "Env", payload: AuthorizationPayload) -> None: ...


@dataclass(frozen=True)
class KeyHolderAuthenticator:
    public_key: bytes
    signature: bytes

    def authorize(self, env: "Env", payload: AuthorizationPayload) -> None:
        digest = payload.digest(max_bytes=env.config.max_payload_bytes)
        if not env.crypto.verify_signature(self.public_key, digest, self.signature):
            raise InvalidSignature(context={"public_key": to_hex(self.public_key), **payload.describe()})


@dataclass(frozen=True)
class ContractAuthenticator:
    contract_id: bytes

    def __post_init__(self) -> None:
        object.__setattr__(self, "contract_id", to_id32(self.contract_id, name="contract id"))

    def authorize(self, env: "Env", payload: AuthorizationPayload) -> None:
        digest = payload.digest(max_bytes=env.config.max_payload_bytes)
        ctx = {"authorizer": to_hex(self.contract_id), **payload.describe()}
        try:
            approved = env.invoke_check_auth(self.contract_id, digest, payload)
        except Exception as exc:
            raise NestedAuthorizationFailed(context={**ctx, "cause": type(exc).__name__}) from exc
        if approved is False:
            raise NestedAuthorizationFailed("contract declined authorization", context=ctx)


def authenticator_for(signature: Signature) -> Authenticator:
    if isinstance(signature, KeyHolderSignature):
        return KeyHolderAuthenticator(signature.public_key, signature.signature)
    if isinstance(signature, ContractSignature):
        return ContractAuthenticator(signature.contract_id)
    raise InvalidSignature(f"unsupported signature type {type(signature).__name__}")


# -------------------------------- Engine -------------------------------- #


def verify(env: "Env", signature: Signature, function: str, args: Sequence[Any]) -> None:
    """
    Ensure `signature` authorizes calling `function` on the current contract
    with `args`. Returns None on success; raises an AuthError otherwise.
    """
    identifier = signature.identifier()
    try:
        nonce = check_nonce(env, identifier, signature.nonce)
        payload = AuthorizationPayload.build(env, nonce, function, args)
        authenticator_for(signature).authorize(env, payload)
        advance_nonce(env, identifier, nonce)
    except AuthError as exc:
        log.info(
            "authorization rejected",
            extra={"code": exc.code, "identity": repr(identifier), "selector": str(function)},
        )
        raise
    log.debug(
        "authorization verified",
        extra={"identity": repr(identifier), "selector": str(function), "nonce": nonce},
    )


__all__ = [
    "Authenticator",
    "KeyHolderAuthenticator",
    "ContractAuthenticator",
    "authenticator_for",
    "verify",
]
