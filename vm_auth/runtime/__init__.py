"""
vm_auth runtime package

Host-facing capabilities the authorization core is built on: hashing,
signature verification, journaled storage, network metadata and the object
table. The execution context itself lives in `vm_auth.runtime.env` and is
re-exported from the top-level package (`vm_auth.Env`).

Convenience namespaces:

    from vm_auth.runtime import hashing, storage, crypto
"""

from __future__ import annotations

from . import crypto_api as crypto
from . import hash_api as hashing  # avoid shadowing builtin `hash`
from . import storage_api as storage
from .context import LedgerInfo, NetworkEnv
from .objects import AddressKind, ObjectHandle, ObjectType, ScAddress

__all__ = [
    "crypto",
    "hashing",
    "storage",
    "LedgerInfo",
    "NetworkEnv",
    "AddressKind",
    "ObjectHandle",
    "ObjectType",
    "ScAddress",
]
