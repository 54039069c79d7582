from __future__ import annotations

import hashlib

import pytest

from vm_auth.abi.types import Symbol
from vm_auth.errors import ConversionError
from vm_auth.payload import PAYLOAD_DOMAIN, AuthorizationPayload, DomainSeparator
from vm_auth.runtime import crypto, hashing
from vm_auth.runtime.storage_api import decode_uint, encode_uint
from vm_auth.testutils import ed25519

NET = b"\x01" * 32
CID = b"\x02" * 32


# -----------------------------------------------------------------------------
# hashing
# -----------------------------------------------------------------------------

def test_hash_without_domain_matches_hashlib() -> None:
    assert hashing.sha3_256(b"abc") == hashlib.sha3_256(b"abc").digest()
    assert hashing.sha256(b"abc") == hashlib.sha256(b"abc").digest()


def test_domain_separation_changes_digest() -> None:
    plain = hashing.sha3_256(b"abc")
    a = hashing.sha3_256(b"abc", domain=b"a")
    b = hashing.sha3_256(b"abc", domain=b"b")
    assert len({plain, a, b}) == 3
    assert a == hashlib.sha3_256(b"\x19vm_auth:a\x00abc").digest()


def test_hash_requires_bytes() -> None:
    with pytest.raises(ConversionError):
        hashing.sha3_256("abc")  # type: ignore[arg-type]


# -----------------------------------------------------------------------------
# crypto
# -----------------------------------------------------------------------------

def test_ed25519_provider() -> None:
    provider = crypto.Ed25519Provider()
    assert isinstance(provider, crypto.CryptoProvider)
    signer = ed25519.Signer.from_seed(b"\x09" * 32)
    sig = signer.sign(b"msg")
    assert provider.verify_signature(signer.public_key, b"msg", sig)
    assert not provider.verify_signature(signer.public_key, b"other", sig)
    assert not provider.verify_signature(signer.public_key[:31], b"msg", sig)
    assert not provider.verify_signature(signer.public_key, b"msg", sig[:63])


def test_signer_from_seed_is_deterministic() -> None:
    a = ed25519.Signer.from_seed(b"\x09" * 32)
    b = ed25519.Signer.from_seed(b"\x09" * 32)
    assert a.public_key == b.public_key
    assert a.sign(b"m") == b.sign(b"m")


# -----------------------------------------------------------------------------
# payload
# -----------------------------------------------------------------------------

def _payload(**over) -> AuthorizationPayload:
    fields = dict(domain=DomainSeparator(NET, CID), nonce=0, function=Symbol("transfer"), args=(1, 2))
    fields.update(over)
    return AuthorizationPayload(**fields)


def test_payload_digest_is_domain_separated_hash_of_encoding() -> None:
    p = _payload()
    assert p.digest() == hashing.sha3_256(p.encode(), domain=PAYLOAD_DOMAIN)
    assert len(p.digest()) == 32


@pytest.mark.parametrize(
    "change",
    [
        {"domain": DomainSeparator(b"\x03" * 32, CID)},
        {"domain": DomainSeparator(NET, b"\x03" * 32)},
        {"nonce": 1},
        {"function": Symbol("transfer2")},
        {"args": (1, 3)},
        {"args": (1, 2, None)},
    ],
)
def test_every_payload_field_is_covered(change) -> None:
    assert _payload(**change).digest() != _payload().digest()


def test_payload_validation_and_size_cap() -> None:
    with pytest.raises(ConversionError):
        _payload(nonce=-1)
    with pytest.raises(ConversionError):
        _payload(function="not a symbol")
    with pytest.raises(ConversionError):
        DomainSeparator(NET[:5], CID)
    big = _payload(args=(b"\x00" * 2048,))
    with pytest.raises(ConversionError):
        big.encode(max_bytes=1024)
    assert big.describe()["argc"] == 1


def test_uint_storage_encoding() -> None:
    assert encode_uint(0) == b"\x00"
    assert decode_uint(encode_uint(258)) == 258
    assert decode_uint(None) is None
    with pytest.raises(ConversionError):
        encode_uint(-1)
    with pytest.raises(ConversionError):
        encode_uint(True)
