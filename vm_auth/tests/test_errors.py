from __future__ import annotations

import pytest

from vm_auth.errors import (AuthError, ContextMismatch, ConversionError, InvalidSignature,
                            InvocationError, MissingAuthorization, NestedAuthorizationFailed,
                            StaleOrReplayedNonce)


@pytest.mark.parametrize(
    "exc, code",
    [
        (InvalidSignature(), "auth.invalid_signature"),
        (NestedAuthorizationFailed(), "auth.nested_failed"),
        (ContextMismatch(), "auth.context_mismatch"),
        (ConversionError(), "auth.conversion"),
        (MissingAuthorization(), "auth.missing"),
        (InvocationError(), "auth.invocation"),
        (StaleOrReplayedNonce(expected=1, got=0), "auth.stale_nonce"),
    ],
)
def test_codes_and_hierarchy(exc: AuthError, code: str) -> None:
    assert isinstance(exc, AuthError)
    assert exc.code == code
    assert str(exc).startswith(code + ": ")
    assert exc.to_dict()["code"] == code


def test_stale_nonce_context() -> None:
    exc = StaleOrReplayedNonce(expected=3, got=1)
    assert exc.to_dict() == {
        "code": "auth.stale_nonce",
        "message": "stale or replayed nonce",
        "context": {"expected": 3, "got": 1},
    }


def test_conversion_error_is_a_type_error() -> None:
    with pytest.raises(TypeError):
        raise ConversionError("nope")


def test_errors_are_hashable_and_chain() -> None:
    try:
        try:
            raise ValueError("inner")
        except ValueError as e:
            raise NestedAuthorizationFailed(context={"cause": "ValueError"}) from e
    except NestedAuthorizationFailed as outer:
        assert isinstance(outer.__cause__, ValueError)
        assert outer in {outer}
