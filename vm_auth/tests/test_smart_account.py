"""
Contract identities: an M-of-N account authorizing calls to other contracts
through its `check_auth` entry point.
"""

from __future__ import annotations

import pytest

from vm_auth.contract import ContractError, register
from vm_auth.errors import InvocationError, NestedAuthorizationFailed, StaleOrReplayedNonce
from vm_auth.examples.smart_account import SmartAccount
from vm_auth.identity import Identifier, Signature
from vm_auth.testutils import ed25519


class Grumpy:
    def check_auth(self, env, digest, payload):
        raise ValueError("never")


@pytest.fixture
def signers():
    return [ed25519.Signer() for _ in range(3)]


@pytest.fixture
def account(env, signers):
    client = register(env, SmartAccount())
    client.init([s.public_key for s in signers], 2)
    return client


def _approve(env, account, signer, digest: bytes) -> None:
    sig = ed25519.sign(env, signer, account.contract_id, "approve", (signer.identifier(), digest))
    account.approve(sig, digest)


def test_threshold_of_approvals_authorizes_call(env, example, account, signers) -> None:
    account_id = Identifier.Contract(account.contract_id)
    nonce = example.nonce(account_id)
    digest = ed25519.payload_digest(env, example.contract_id, nonce, "examplefn", (account_id, 1, 2))
    sig = Signature.Contract(account.contract_id, nonce)

    _approve(env, account, signers[0], digest)
    _approve(env, account, signers[0], digest)  # same signer twice counts once
    assert account.approvals(digest) == 1
    with pytest.raises(NestedAuthorizationFailed):
        example.examplefn(sig, 1, 2)
    assert example.nonce(account_id) == 0

    _approve(env, account, signers[2], digest)
    example.examplefn(sig, 1, 2)
    assert example.nonce(account_id) == 1
    assert account.approvals(digest) == 0  # consumed by check_auth

    with pytest.raises(StaleOrReplayedNonce):
        example.examplefn(sig, 1, 2)


def test_approvals_for_other_arguments_do_not_help(env, example, account, signers) -> None:
    account_id = Identifier.Contract(account.contract_id)
    digest = ed25519.payload_digest(env, example.contract_id, 0, "examplefn", (account_id, 1, 2))
    for s in signers[:2]:
        _approve(env, account, s, digest)

    with pytest.raises(NestedAuthorizationFailed):
        example.examplefn(Signature.Contract(account.contract_id, 0), 1, 3)
    assert account.approvals(digest) == 2


def test_unknown_signer_cannot_approve(env, account) -> None:
    outsider = ed25519.Signer()
    with pytest.raises(ContractError):
        _approve(env, account, outsider, b"\x00" * 32)


def test_check_auth_is_not_an_entry_point(account) -> None:
    with pytest.raises(InvocationError):
        account.check_auth(b"\x00" * 32, None)


def test_raising_check_auth_is_reported_with_cause(env, example) -> None:
    grumpy = register(env, Grumpy())
    with pytest.raises(NestedAuthorizationFailed) as ei:
        example.examplefn(Signature.Contract(grumpy.contract_id, 0), 1, 2)
    assert isinstance(ei.value.__cause__, ValueError)
    assert ei.value.context["cause"] == "ValueError"


@pytest.mark.parametrize("threshold", [0, 4])
def test_init_validates_threshold(env, signers, threshold: int) -> None:
    client = register(env, SmartAccount())
    with pytest.raises(ContractError):
        client.init([s.public_key for s in signers], threshold)


def test_uninitialized_account_authorizes_nothing(env, example) -> None:
    blank = register(env, SmartAccount())
    account_id = Identifier.Contract(blank.contract_id)
    with pytest.raises(NestedAuthorizationFailed) as ei:
        example.examplefn(Signature.Contract(blank.contract_id, 0), 1, 2)
    assert isinstance(ei.value.__cause__, ContractError)
    assert example.nonce(account_id) == 0
