"""
vm_auth.contract — calling registered contracts like local objects.

    token = register(env, TokenContract())
    token.transfer(sig, to, 10)          # env.invoke_contract(token.contract_id, "transfer", (sig, to, 10))

Every call goes through `Env.invoke_contract`, so it runs in its own frame and
is atomic: an exception from the contract reverts its storage writes (nonce
increments included) before propagating to the caller.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Callable, Dict, Mapping, Optional

from vm_auth.address import Address
from vm_auth.runtime.context import to_hex, to_id32
from vm_auth.runtime.env import CHECK_AUTH_FN

if TYPE_CHECKING:
    from vm_auth.runtime.env import Env


class ContractError(Exception):
    """Raised by contract code to abort its invocation (state is reverted)."""

    def __init__(self, message: str, *, code: str = "contract.require_failed",
                 context: Optional[Mapping[str, Any]] = None) -> None:
        super().__init__(message)
        self.message = message
        self.code = code
        self.context: Dict[str, Any] = dict(context or {})

    def __str__(self) -> str:
        return f"{self.code}: {self.message}"


def _to_message(msg: Any) -> str:
    if isinstance(msg, (bytes, bytearray)):
        return msg.decode("utf-8", errors="replace")
    return str(msg)


def require(
    condition: bool,
    message: Any = "require failed",
    *,
    code: str = "contract.require_failed",
    context: Optional[Mapping[str, Any]] = None,
) -> None:
    """
    Assertion helper for contracts:

        require(amount > 0, b"token: amount must be positive")
    """
    if condition:
        return
    raise ContractError(_to_message(message), code=code, context=context)


class ContractClient:
    def __init__(self, env: "Env", contract_id: bytes) -> None:
        self.env = env
        self.contract_id = to_id32(contract_id, name="contract id")

    @property
    def address(self) -> Address:
        return Address.from_contract_id(self.env, self.contract_id)

    def invoke(self, function: str, *args: Any) -> Any:
        return self.env.invoke_contract(self.contract_id, function, args)

    def __getattr__(self, name: str) -> Callable[..., Any]:
        if name.startswith("_"):
            raise AttributeError(name)

        def call(*args: Any) -> Any:
            return self.env.invoke_contract(self.contract_id, name, args)

        call.__name__ = name
        return call

    def __repr__(self) -> str:
        return f"ContractClient({to_hex(self.contract_id)})"


def register(env: "Env", contract: Any, contract_id: Optional[bytes] = None) -> ContractClient:
    """Register `contract` in `env` (random id if none given) and return a client."""
    address = env.register_contract(contract_id, contract)
    return ContractClient(env, address.raw)


__all__ = ["ContractClient", "ContractError", "register", "require", "CHECK_AUTH_FN"]
