"""
vm_auth.nonce — per-identifier replay counters in contract storage.

Each Identifier has one unsigned counter, stored in the storage namespace of
the contract doing the verification under

    b"auth:nonce:" || encode_value(identifier)

The key embeds the variant tag, so a key holder and a contract sharing the same
32 bytes get independent counters. A missing key reads as 0. The counter only
moves through `advance_nonce`, which the verification engine calls after a
signature has been authenticated; it is never deleted.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from vm_auth.abi.encoding import encode_value
from vm_auth.errors import StaleOrReplayedNonce
from vm_auth.identity import Identifier

if TYPE_CHECKING:
    from vm_auth.runtime.env import Env

NONCE_PREFIX = b"auth:nonce:"


def nonce_key(identifier: Identifier) -> bytes:
    return NONCE_PREFIX + encode_value(identifier)


def read_nonce(env: "Env", identifier: Identifier) -> int:
    """
    The nonce the next signature from `identifier` must commit to, as seen by
    the contract currently executing in `env`.
    """
    value = env.storage.get_int(nonce_key(identifier))
    return 0 if value is None else value


def check_nonce(env: "Env", identifier: Identifier, declared: int) -> int:
    """Return the stored nonce, raising StaleOrReplayedNonce unless it equals `declared`."""
    stored = read_nonce(env, identifier)
    if declared != stored:
        raise StaleOrReplayedNonce(expected=stored, got=declared)
    return stored


def advance_nonce(env: "Env", identifier: Identifier, expected: int) -> int:
    """Move the counter from `expected` to `expected + 1`; returns the new value."""
    stored = check_nonce(env, identifier, expected)
    env.storage.set_int(nonce_key(identifier), stored + 1)
    return stored + 1


__all__ = ["NONCE_PREFIX", "nonce_key", "read_nonce", "check_nonce", "advance_nonce"]
