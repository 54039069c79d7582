"""
Minimal authorized entry point.

    examplefn(sig, arg1, arg2)
        Succeeds only if `sig` approves calling `examplefn` on this contract
        with `(sig.identifier(), arg1, arg2)` at the signer's current nonce.

    nonce(identifier) -> int
        The nonce the next signature from `identifier` must use here.
"""

from __future__ import annotations

from vm_auth.identity import Identifier, Signature
from vm_auth.nonce import read_nonce
from vm_auth.verify import verify


class ExampleContract:
    def examplefn(self, env, sig: Signature, arg1: int, arg2: int) -> None:
        verify(env, sig, "examplefn", (sig.identifier(), arg1, arg2))

    def nonce(self, env, identifier: Identifier) -> int:
        return read_nonce(env, identifier)
