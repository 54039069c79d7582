"""vm_auth.version — package version.

`VM_AUTH_VERSION` overrides everything; otherwise the installed distribution's
metadata is used, and a source checkout reports `BASE_VERSION+dev`.
"""

from __future__ import annotations

import os
from functools import lru_cache
from importlib import metadata as importlib_metadata

# Bump whenever the payload encoding or nonce key derivation changes:
# signatures produced for one encoding never verify under another.
BASE_VERSION = "0.5.0"

DIST_NAME = "vm-auth"


@lru_cache(maxsize=1)
def compute_version() -> str:
    override = os.getenv("VM_AUTH_VERSION")
    if override:
        return override
    try:
        return importlib_metadata.version(DIST_NAME)
    except importlib_metadata.PackageNotFoundError:
        return f"{BASE_VERSION}+dev"


__version__ = compute_version()

__all__ = ["__version__", "BASE_VERSION", "compute_version"]
