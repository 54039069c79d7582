from __future__ import annotations

import pytest

from vm_auth.contract import register
from vm_auth.errors import InvocationError, StaleOrReplayedNonce
from vm_auth.examples.example_contract import ExampleContract
from vm_auth.identity import Identifier
from vm_auth.nonce import NONCE_PREFIX, advance_nonce, check_nonce, nonce_key, read_nonce
from vm_auth.testutils import ed25519

KEY = b"\x11" * 32


def test_nonce_key_depends_on_variant() -> None:
    holder = nonce_key(Identifier.KeyHolder(KEY))
    contract = nonce_key(Identifier.Contract(KEY))
    assert holder.startswith(NONCE_PREFIX) and contract.startswith(NONCE_PREFIX)
    assert holder != contract


def test_missing_nonce_reads_zero(env, example) -> None:
    ident = Identifier.KeyHolder(KEY)
    assert env.as_contract(example.contract_id, lambda: read_nonce(env, ident)) == 0
    assert example.nonce(ident) == 0


def test_advance_moves_by_exactly_one(env, example) -> None:
    ident = Identifier.KeyHolder(KEY)

    def bump_twice():
        advance_nonce(env, ident, 0)
        return advance_nonce(env, ident, 1)

    assert env.as_contract(example.contract_id, bump_twice) == 2
    assert example.nonce(ident) == 2


def test_check_nonce_reports_expected_and_got(env, example) -> None:
    ident = Identifier.KeyHolder(KEY)
    with pytest.raises(StaleOrReplayedNonce) as ei:
        env.as_contract(example.contract_id, lambda: check_nonce(env, ident, 4))
    assert ei.value.expected == 0
    assert ei.value.got == 4
    assert ei.value.code == "auth.stale_nonce"


def test_nonces_are_per_contract(env, example) -> None:
    other = register(env, ExampleContract())
    ident, signer = ed25519.generate(env)
    sig = ed25519.sign(env, signer, example.contract_id, "examplefn", (ident, 1, 2))
    example.examplefn(sig, 1, 2)
    assert example.nonce(ident) == 1
    assert other.nonce(ident) == 0


def test_nonce_needs_an_executing_contract(env) -> None:
    with pytest.raises(InvocationError):
        read_nonce(env, Identifier.KeyHolder(KEY))
