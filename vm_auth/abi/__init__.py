"""
vm_auth.abi
===========

Canonical value model and encoder used to build authorization payloads.

Everything here is pure-Python and deterministic. Encoding is a tagged,
length-prefixed scheme (see `encoding`), so distinct argument tuples can never
produce the same payload bytes.
"""

from __future__ import annotations

from .encoding import *  # noqa: F401,F403
from .encoding import __all__ as _all_encoding
from .types import *  # noqa: F401,F403
from .types import __all__ as _all_types

__all__ = tuple(dict.fromkeys((*_all_types, *_all_encoding)))
