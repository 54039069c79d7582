"""
Token whose holders authorize transfers with signatures.

Public functions:

    init(admin: Identifier) -> None
        One-time initializer.

    mint(sig, to: Identifier, amount: int) -> None
        Admin only; `sig` must approve ("mint", (admin, to, amount)).

    transfer(sig, to: Identifier, amount: int) -> None
        Moves `amount` from `sig.identifier()` to `to`; `sig` must approve
        ("transfer", (from, to, amount)). The signature is verified before the
        balance check, so an overdraft aborts *after* the nonce was advanced and
        relies on the invocation revert to put it back.

    balance(id: Identifier) -> int
    nonce(id: Identifier) -> int
"""

from __future__ import annotations

from typing import Final

from vm_auth.abi.encoding import encode_value
from vm_auth.contract import require
from vm_auth.identity import ContractIdentifier, Identifier, KeyHolderIdentifier, Signature
from vm_auth.nonce import read_nonce
from vm_auth.verify import verify

K_ADMIN: Final[bytes] = b"token:admin"
K_BALANCE: Final[bytes] = b"token:bal:"


def _balance_key(who: Identifier) -> bytes:
    return K_BALANCE + encode_value(who)


def _load_admin(env) -> Identifier:
    raw = env.storage.get(K_ADMIN)
    require(raw is not None, b"token: not initialized")
    kind, body = raw[0], raw[1:]
    return KeyHolderIdentifier(body) if kind == 0 else ContractIdentifier(body)


class TokenContract:
    def init(self, env, admin: Identifier) -> None:
        require(env.storage.get(K_ADMIN) is None, b"token: already initialized")
        env.storage.set(K_ADMIN, bytes([int(admin.kind)]) + admin.raw)

    def mint(self, env, sig: Signature, to: Identifier, amount: int) -> None:
        admin = _load_admin(env)
        require(sig.identifier() == admin, b"token: only admin can mint")
        require(isinstance(amount, int) and amount > 0, b"token: bad amount")
        verify(env, sig, "mint", (admin, to, amount))
        env.storage.set_int(_balance_key(to), self.balance(env, to) + amount)

    def transfer(self, env, sig: Signature, to: Identifier, amount: int) -> None:
        from_id = sig.identifier()
        require(isinstance(amount, int) and amount > 0, b"token: bad amount")
        verify(env, sig, "transfer", (from_id, to, amount))

        available = self.balance(env, from_id)
        require(available >= amount, b"token: insufficient balance",
                context={"available": available, "amount": amount})
        env.storage.set_int(_balance_key(from_id), available - amount)
        env.storage.set_int(_balance_key(to), self.balance(env, to) + amount)

    def balance(self, env, who: Identifier) -> int:
        return env.storage.get_int(_balance_key(who)) or 0

    def nonce(self, env, who: Identifier) -> int:
        return read_nonce(env, who)
