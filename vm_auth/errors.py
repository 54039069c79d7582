"""
vm_auth.errors — authorization failures raised out of a contract invocation.

Every failure of the authorization core is a *hard abort*: the exception
propagates out of the contract method, `Env.invoke_contract` reverts all state
written by the invocation (nonce increments included) and re-raises. Nothing in
this package catches these errors to retry or degrade.

Hierarchy
---------
AuthError (base)
 ├─ StaleOrReplayedNonce      : declared nonce != stored nonce
 ├─ InvalidSignature          : cryptographic check failed
 ├─ NestedAuthorizationFailed : a contract identity refused (or failed) to authorize
 ├─ ContextMismatch           : values from two different Env instances were mixed
 ├─ ConversionError           : a value has the wrong shape for the requested type
 ├─ MissingAuthorization      : host-native auth found no matching authorization
 └─ InvocationError           : bad use of the invocation machinery (no frame,
                                unknown contract/function, depth exceeded)
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional


@dataclass(eq=False)
class AuthError(Exception):
    """
    Root error for the authorization core.

    Attributes:
        message: human-readable explanation.
        code:    stable machine code (e.g. 'auth.stale_nonce').
        context: optional JSON-friendly details (hex strings, ints).
    """

    message: str = "authorization failed"
    code: str = "auth.error"
    context: Optional[Dict[str, Any]] = None

    def __post_init__(self) -> None:
        super().__init__(self.message)

    def __str__(self) -> str:
        if self.context:
            return f"{self.code}: {self.message} ({self.context})"
        return f"{self.code}: {self.message}"

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"code": self.code, "message": self.message}
        if self.context:
            out["context"] = dict(self.context)
        return out


def _ctx(context: Optional[Mapping[str, Any]]) -> Optional[Dict[str, Any]]:
    return dict(context) if context else None


class StaleOrReplayedNonce(AuthError):
    """The nonce a signature commits to is not the nonce currently stored."""

    def __init__(self, message: str = "stale or replayed nonce", *, expected: int, got: int,
                 context: Optional[Mapping[str, Any]] = None):
        ctx = {"expected": expected, "got": got, **(context or {})}
        super().__init__(message=message, code="auth.stale_nonce", context=ctx)
        self.expected = expected
        self.got = got


class InvalidSignature(AuthError):
    def __init__(self, message: str = "signature does not verify", *,
                 context: Optional[Mapping[str, Any]] = None):
        super().__init__(message=message, code="auth.invalid_signature", context=_ctx(context))


class NestedAuthorizationFailed(AuthError):
    """A contract identity's own authorization entry point rejected the payload."""

    def __init__(self, message: str = "nested contract authorization failed", *,
                 context: Optional[Mapping[str, Any]] = None):
        super().__init__(message=message, code="auth.nested_failed", context=_ctx(context))


class ContextMismatch(AuthError):
    def __init__(self, message: str = "values belong to different environments", *,
                 context: Optional[Mapping[str, Any]] = None):
        super().__init__(message=message, code="auth.context_mismatch", context=_ctx(context))


class ConversionError(AuthError, TypeError):
    def __init__(self, message: str = "value cannot be converted", *,
                 context: Optional[Mapping[str, Any]] = None):
        super().__init__(message=message, code="auth.conversion", context=_ctx(context))


class MissingAuthorization(AuthError):
    def __init__(self, message: str = "no matching authorization", *,
                 context: Optional[Mapping[str, Any]] = None):
        super().__init__(message=message, code="auth.missing", context=_ctx(context))


class InvocationError(AuthError):
    def __init__(self, message: str = "invalid invocation", *,
                 context: Optional[Mapping[str, Any]] = None):
        super().__init__(message=message, code="auth.invocation", context=_ctx(context))


__all__ = [
    "AuthError",
    "StaleOrReplayedNonce",
    "InvalidSignature",
    "NestedAuthorizationFailed",
    "ContextMismatch",
    "ConversionError",
    "MissingAuthorization",
    "InvocationError",
]
