"""
M-of-N smart account: a contract identity that authorizes payloads once enough
of its signers have approved them.

Public functions:

    init(signers: list[bytes], threshold: int) -> None
        One-time initializer; signers are Ed25519 public keys.

    approve(sig, digest: bytes) -> None
        A signer approves a payload digest; `sig` must be a key-holder
        signature over ("approve", (signer, digest)) verified by this account.

    approvals(digest: bytes) -> int

    check_auth(digest, payload) -> bool
        Authorization entry point, reached only through the verification
        engine. True (and the approvals are consumed) once `threshold`
        distinct signers approved `digest`.

Other contracts accept this account as `Signature.Contract(account_id, nonce)`.
"""

from __future__ import annotations

from typing import Final, List

from vm_auth.contract import require
from vm_auth.identity import KeyHolderIdentifier, Signature
from vm_auth.logging import get_logger
from vm_auth.runtime.context import ID_LEN
from vm_auth.verify import verify

K_SIGNERS: Final[bytes] = b"acct:signers"
K_THRESHOLD: Final[bytes] = b"acct:threshold"
K_APPROVALS: Final[bytes] = b"acct:ap:"

log = get_logger("vm_auth.examples.smart_account")


def _split(raw: bytes) -> List[bytes]:
    return [raw[i:i + ID_LEN] for i in range(0, len(raw), ID_LEN)]


def _signers(env) -> List[bytes]:
    raw = env.storage.get(K_SIGNERS)
    require(raw is not None, b"account: not initialized")
    return _split(raw)


class SmartAccount:
    def init(self, env, signers: List[bytes], threshold: int) -> None:
        require(env.storage.get(K_SIGNERS) is None, b"account: already initialized")
        keys = [KeyHolderIdentifier(pk).public_key for pk in signers]
        require(len(set(keys)) == len(keys), b"account: duplicate signer")
        require(0 < threshold <= len(keys), b"account: bad threshold")
        env.storage.set(K_SIGNERS, b"".join(keys))
        env.storage.set_int(K_THRESHOLD, threshold)

    def approve(self, env, sig: Signature, digest: bytes) -> None:
        signer = sig.identifier()
        require(isinstance(signer, KeyHolderIdentifier), b"account: signer must be a key holder")
        require(signer.public_key in _signers(env), b"account: unknown signer")
        require(isinstance(digest, bytes) and len(digest) == ID_LEN, b"account: bad digest")
        verify(env, sig, "approve", (signer, digest))

        approved = _split(env.storage.get(K_APPROVALS + digest) or b"")
        if signer.public_key not in approved:
            approved.append(signer.public_key)
            env.storage.set(K_APPROVALS + digest, b"".join(approved))

    def approvals(self, env, digest: bytes) -> int:
        return len(_split(env.storage.get(K_APPROVALS + digest) or b""))

    def check_auth(self, env, digest: bytes, payload) -> bool:
        threshold = env.storage.get_int(K_THRESHOLD)
        require(threshold is not None and threshold > 0, b"account: not initialized")
        count = self.approvals(env, digest)
        if count < threshold:
            log.info("approval threshold not met", extra={"approvals": count, "threshold": threshold})
            return False
        env.storage.delete(K_APPROVALS + digest)
        return True
