"""Address constructors for tests."""

from __future__ import annotations

import secrets
from typing import TYPE_CHECKING

from vm_auth.address import Address

if TYPE_CHECKING:
    from vm_auth.runtime.env import Env


def random(env: "Env") -> Address:
    """A fresh account Address with a random 32-byte key (not a valid signer)."""
    return Address.from_account(env, secrets.token_bytes(32))


def random_contract(env: "Env") -> Address:
    return Address.from_contract_id(env, secrets.token_bytes(32))


def from_contract_id(env: "Env", contract_id: bytes) -> Address:
    return Address.from_contract_id(env, contract_id)


__all__ = ["random", "random_contract", "from_contract_id"]
