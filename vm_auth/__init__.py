"""
vm_auth — call authorization for contracts.

A contract uses this package to check, at invocation time, that a specific
identity (an Ed25519 key holder or another contract) approved the exact call
being made: the function selector and its arguments. Approvals are bound to
the network and the verifying contract, and a per-identity nonce stored by the
contract makes each one single-use.

Public surface
--------------
- verify(env, signature, function, args)          the verification engine
- read_nonce(env, identifier)                      next nonce a signature must use
- Identifier.KeyHolder / Identifier.Contract       who approves
- Signature.KeyHolder / Signature.Contract         the proof they offer
- Address                                          opaque account/contract handle
                                                   with require_auth()/require_auth_for_args()
- Env                                              execution context (storage, crypto,
                                                   contracts, host authorization)
- errors: AuthError and subclasses

Example
-------
    from vm_auth import Env, Identifier, Signature, verify

    class Example:
        def examplefn(self, env, sig, arg1, arg2):
            verify(env, sig, "examplefn", (sig.identifier(), arg1, arg2))

Test helpers (key generation, signing, random addresses) live in
`vm_auth.testutils`.
"""

from __future__ import annotations

from .version import __version__
from .abi.types import Symbol
from .address import Address
from .config import AuthConfig, load_config
from .contract import ContractClient, ContractError, register, require
from .errors import (AuthError, ContextMismatch, ConversionError, InvalidSignature,
                     InvocationError, MissingAuthorization, NestedAuthorizationFailed,
                     StaleOrReplayedNonce)
from .identity import (ContractIdentifier, ContractSignature, Identifier, KeyHolderIdentifier,
                       KeyHolderSignature, Signature)
from .nonce import read_nonce
from .payload import AuthorizationPayload, DomainSeparator
from .runtime.env import CHECK_AUTH_FN, Env
from .runtime.host_auth import AuthMode, HostAuthorization
from .verify import verify


def version() -> str:
    """Return the vm_auth version string."""
    return __version__


__all__ = [
    "__version__",
    "version",
    "verify",
    "read_nonce",
    "Identifier",
    "KeyHolderIdentifier",
    "ContractIdentifier",
    "Signature",
    "KeyHolderSignature",
    "ContractSignature",
    "Address",
    "Symbol",
    "Env",
    "AuthMode",
    "HostAuthorization",
    "CHECK_AUTH_FN",
    "AuthorizationPayload",
    "DomainSeparator",
    "ContractClient",
    "ContractError",
    "require",
    "register",
    "AuthConfig",
    "load_config",
    "AuthError",
    "StaleOrReplayedNonce",
    "InvalidSignature",
    "NestedAuthorizationFailed",
    "ContextMismatch",
    "ConversionError",
    "MissingAuthorization",
    "InvocationError",
]
