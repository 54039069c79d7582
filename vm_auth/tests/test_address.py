from __future__ import annotations

import copy

import pytest

from vm_auth.address import Address
from vm_auth.errors import ContextMismatch, ConversionError
from vm_auth.identity import Identifier
from vm_auth.runtime.objects import AddressKind, ObjectHandle, ObjectType, ScAddress
from vm_auth.testutils import address as test_address
from vm_auth.testutils import default_env

LOW = b"\x01" * 32
HIGH = b"\xfe" * 32


def test_equality_is_by_value_not_handle(env) -> None:
    a = Address.from_account(env, LOW)
    b = Address.from_account(env, LOW)
    assert a.as_object() != b.as_object()
    assert a == b
    assert hash(a) == hash(b)
    assert {a: 1}[b] == 1


def test_account_and_contract_with_same_bytes_differ(env) -> None:
    assert Address.from_account(env, LOW) != Address.from_contract_id(env, LOW)


def test_ordering_is_total_and_host_defined(env) -> None:
    acc_low = Address.from_account(env, LOW)
    acc_high = Address.from_account(env, HIGH)
    con_low = Address.from_contract_id(env, LOW)
    assert acc_low < acc_high
    assert acc_high < con_low  # accounts sort before contracts
    assert acc_low <= Address.from_account(env, LOW)
    assert sorted([con_low, acc_high, acc_low]) == [acc_low, acc_high, con_low]
    assert env.obj_cmp(acc_high.as_object(), acc_low.as_object()) == 1


def test_cross_env_comparison_is_an_error() -> None:
    env1, env2 = default_env(), default_env()
    a = Address.from_account(env1, LOW)
    b = Address.from_account(env2, LOW)
    with pytest.raises(ContextMismatch):
        a == b  # noqa: B015
    with pytest.raises(ContextMismatch):
        a < b  # noqa: B015
    assert hash(a) != hash(b)


def test_non_address_comparison_is_not_supported(env) -> None:
    a = Address.from_account(env, LOW)
    assert (a == LOW) is False
    with pytest.raises(TypeError):
        a < LOW  # noqa: B015


def test_try_from_val(env) -> None:
    a = Address.from_account(env, LOW)
    assert Address.try_from_val(env, a) is a
    assert Address.try_from_val(env, a.as_object()) == a
    assert Address.try_from_val(env, ScAddress(AddressKind.CONTRACT, HIGH)).is_contract()

    with pytest.raises(ConversionError):
        Address.try_from_val(env, 42)
    with pytest.raises(ConversionError):
        Address.try_from_val(env, env.add_bytes(b"not an address"))
    with pytest.raises(ConversionError):
        Address.try_from_val(env, ObjectHandle(env.env_id, ObjectType.ADDRESS, 10_000))


def test_foreign_values_are_rejected() -> None:
    env1, env2 = default_env(), default_env()
    a = Address.from_account(env1, LOW)
    with pytest.raises(ContextMismatch):
        Address.try_from_val(env2, a)
    with pytest.raises(ContextMismatch):
        Address.try_from_val(env2, a.as_object())


def test_bad_payloads_are_conversion_errors(env) -> None:
    with pytest.raises(ConversionError):
        Address.from_account(env, b"\x00" * 31)
    with pytest.raises(ConversionError):
        ScAddress(AddressKind.ACCOUNT, b"short")


def test_copies_share_the_handle(env) -> None:
    a = Address.from_account(env, LOW)
    assert copy.copy(a) is a
    assert copy.deepcopy([a])[0] is a


def test_accessors_and_identifier(env) -> None:
    a = Address.from_account(env, LOW)
    c = Address.from_contract_id(env, HIGH)
    assert a.env is env
    assert a.kind is AddressKind.ACCOUNT and a.raw == LOW
    assert a.to_identifier() == Identifier.KeyHolder(LOW)
    assert c.to_identifier() == Identifier.Contract(HIGH)
    assert repr(a) == f"Address(Account(0x{LOW.hex()}))"
    assert repr(c) == f"Address(Contract(0x{HIGH.hex()}))"


def test_testutils_addresses(env) -> None:
    a = test_address.random(env)
    b = test_address.random(env)
    assert a.is_account() and b.is_account()
    assert a != b
    c = test_address.from_contract_id(env, HIGH)
    assert c == Address.from_contract_id(env, HIGH)
    assert test_address.random_contract(env).is_contract()
