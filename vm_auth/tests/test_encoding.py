from __future__ import annotations

import pytest
from hypothesis import given, settings, strategies as st

from vm_auth.abi import (TAG_ADDRESS, TAG_IDENTIFIER, TAG_STRING, TAG_SYMBOL, Symbol, encode_args,
                         encode_value, uvarint_encode)
from vm_auth.address import Address
from vm_auth.errors import ConversionError
from vm_auth.identity import Identifier
from vm_auth.testutils import default_env

KEY = b"\x42" * 32


# -----------------------------------------------------------------------------
# Scalars & framing
# -----------------------------------------------------------------------------

def test_uvarint_is_leb128() -> None:
    assert uvarint_encode(0) == b"\x00"
    assert uvarint_encode(127) == b"\x7f"
    assert uvarint_encode(300) == b"\xac\x02"
    with pytest.raises(ConversionError):
        uvarint_encode(-1)


def test_symbol_and_string_encode_differently() -> None:
    sym = encode_value(Symbol("transfer"))
    text = encode_value("transfer")
    assert sym[0] == TAG_SYMBOL and text[0] == TAG_STRING
    assert sym != text


def test_bool_is_not_int() -> None:
    assert encode_value(True) != encode_value(1)
    assert encode_value(False) != encode_value(0)


def test_int_sign_and_range() -> None:
    assert encode_value(5) != encode_value(-5)
    assert encode_value(-0) == encode_value(0)
    encode_value((1 << 256) - 1)
    with pytest.raises(ConversionError):
        encode_value(1 << 256)


def test_nesting_is_unambiguous() -> None:
    assert encode_args(((1, 2), 3)) != encode_args((1, (2, 3)))
    assert encode_args((b"ab", b"c")) != encode_args((b"a", b"bc"))
    assert encode_args(()) != encode_args((None,))


def test_map_encoding_ignores_insertion_order() -> None:
    assert encode_value({"b": 2, "a": 1}) == encode_value({"a": 1, "b": 2})


@pytest.mark.parametrize("bad", [1.5, object(), {1, 2}])
def test_unsupported_values_raise(bad) -> None:
    with pytest.raises(ConversionError):
        encode_value(bad)


def test_encode_args_requires_sequence() -> None:
    with pytest.raises(ConversionError):
        encode_args(b"not a tuple")  # type: ignore[arg-type]


# -----------------------------------------------------------------------------
# Identities
# -----------------------------------------------------------------------------

def test_identifier_variants_encode_differently() -> None:
    a = encode_value(Identifier.KeyHolder(KEY))
    b = encode_value(Identifier.Contract(KEY))
    assert a[0] == b[0] == TAG_IDENTIFIER
    assert a != b


def test_address_encodes_value_not_handle() -> None:
    env1, env2 = default_env(), default_env()
    first = Address.from_account(env1, KEY)
    # occupy a few slots so the handle indexes differ
    for _ in range(3):
        env2.add_bytes(b"x")
    second = Address.from_account(env2, KEY)
    assert first.as_object().index != second.as_object().index
    assert encode_value(first) == encode_value(second)
    assert encode_value(first)[0] == TAG_ADDRESS
    assert encode_value(first) != encode_value(Address.from_contract_id(env1, KEY))


# -----------------------------------------------------------------------------
# Symbols
# -----------------------------------------------------------------------------

@pytest.mark.parametrize("name", ["", "has-dash", "with space", "x" * 33, "ünï"])
def test_symbol_rejects_invalid_names(name: str) -> None:
    with pytest.raises(ConversionError):
        Symbol(name)


def test_symbol_behaves_like_str() -> None:
    s = Symbol("examplefn")
    assert s == "examplefn"
    assert Symbol(s) is s
    assert repr(s) == "Symbol('examplefn')"


# -----------------------------------------------------------------------------
# Property: distinct argument tuples never share an encoding
# -----------------------------------------------------------------------------

SCALAR = st.one_of(
    st.none(),
    st.integers(min_value=-(1 << 64), max_value=1 << 64),
    st.binary(max_size=8),
    st.text(max_size=8),
)
ARGS = st.lists(st.one_of(SCALAR, st.lists(SCALAR, max_size=3).map(tuple)), max_size=4).map(tuple)


@settings(max_examples=200, deadline=None)
@given(a=ARGS, b=ARGS)
def test_encoding_is_injective(a, b) -> None:
    if a == b:
        assert encode_args(a) == encode_args(b)
    else:
        assert encode_args(a) != encode_args(b)
