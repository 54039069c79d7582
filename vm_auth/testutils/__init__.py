"""
vm_auth.testutils — helpers for writing tests against contracts.

- `default_env()`      a fresh Env in recording mode (require_auth is recorded,
                       not enforced)
- `ed25519`            key generation and payload signing
- `address`            random / contract Addresses

Not for production use: private keys live in memory.
"""

from __future__ import annotations

from typing import Any

from vm_auth.runtime.env import Env
from vm_auth.runtime.host_auth import AuthMode

from . import address, ed25519


def default_env(**kwargs: Any) -> Env:
    kwargs.setdefault("auth_mode", AuthMode.RECORD)
    return Env(**kwargs)


def enforcing_env(**kwargs: Any) -> Env:
    kwargs.setdefault("auth_mode", AuthMode.ENFORCE)
    return Env(**kwargs)


__all__ = ["default_env", "enforcing_env", "address", "ed25519"]
