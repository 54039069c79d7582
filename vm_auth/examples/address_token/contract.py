"""
Token keyed by Address, authorized through the host (`require_auth`).

Public functions:

    init(admin: Address) -> None
    mint(to: Address, amount: int) -> None          admin.require_auth()
    transfer(from_: Address, to: Address, amount: int) -> None
                                                    from_.require_auth()
    burn(from_: Address, amount: int) -> None       from_.require_auth_for_args((amount,))
    balance(id: Address) -> int

Contracts calling `transfer` with their own address as `from_` are
authorized implicitly (direct invoker).
"""

from __future__ import annotations

from typing import Final

from vm_auth.abi.encoding import encode_value
from vm_auth.address import Address
from vm_auth.contract import require
from vm_auth.runtime.objects import ScAddress

K_ADMIN: Final[bytes] = b"atoken:admin"
K_BALANCE: Final[bytes] = b"atoken:bal:"


def _balance_key(who: Address) -> bytes:
    return K_BALANCE + encode_value(who)


def _admin(env) -> Address:
    raw = env.storage.get(K_ADMIN)
    require(raw is not None, b"atoken: not initialized")
    return Address.try_from_val(env, ScAddress(raw[0], raw[1:]))


def _add(env, who: Address, delta: int) -> None:
    current = env.storage.get_int(_balance_key(who)) or 0
    require(current + delta >= 0, b"atoken: insufficient balance",
            context={"available": current, "amount": -delta})
    env.storage.set_int(_balance_key(who), current + delta)


class AddressToken:
    def init(self, env, admin: Address) -> None:
        require(env.storage.get(K_ADMIN) is None, b"atoken: already initialized")
        sc = admin.to_sc_address()
        env.storage.set(K_ADMIN, bytes([int(sc.kind)]) + sc.raw)

    def mint(self, env, to: Address, amount: int) -> None:
        _admin(env).require_auth()
        require(amount > 0, b"atoken: bad amount")
        _add(env, to, amount)

    def transfer(self, env, from_: Address, to: Address, amount: int) -> None:
        from_.require_auth()
        require(amount > 0, b"atoken: bad amount")
        _add(env, from_, -amount)
        _add(env, to, amount)

    def burn(self, env, from_: Address, amount: int) -> None:
        from_.require_auth_for_args((amount,))
        require(amount > 0, b"atoken: bad amount")
        _add(env, from_, -amount)

    def balance(self, env, who: Address) -> int:
        return env.storage.get_int(_balance_key(who)) or 0
