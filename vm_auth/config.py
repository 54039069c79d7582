"""
vm_auth.config — network identity, default auth mode and numeric caps.

This module centralizes configuration for the authorization core. It has NO
third-party deps and is safe to import very early.

Configuration precedence:
  1) Environment variables (VM_AUTH_*)
  2) Hardcoded safe defaults below

Key env vars (case-insensitive where enum/bool):
  - VM_AUTH_NETWORK_PASSPHRASE       (str)    default: "Standalone Network ; local"
  - VM_AUTH_MODE                     (enum)   default: "enforce"   ("enforce" | "record")
  - VM_AUTH_MAX_CALL_DEPTH           (int)    default: 64
  - VM_AUTH_MAX_PAYLOAD_BYTES        (int)    default: 256_000
  - VM_AUTH_MAX_SYMBOL_LEN           (int)    default: 32   (minimum 16)
  - VM_AUTH_MAX_STORAGE_KEY_BYTES    (int)    default: 64   (minimum 64)
  - VM_AUTH_MAX_STORAGE_VAL_BYTES    (int)    default: 131_072   (128 KiB)
  - VM_AUTH_LOG_FORMAT               (enum)   default: auto      ("json" | "text")
  - VM_AUTH_LOG_LEVEL                (str)    default: "INFO"

The network passphrase is hashed into every authorization payload's domain
separator; two deployments sharing a passphrase accept each other's
signatures, so production networks must set a unique one.

Usage:
    from vm_auth.config import load_config
    CFG = load_config()
    if CFG.default_auth_mode == "record": ...
"""

from __future__ import annotations

import hashlib
import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Any, Dict, Optional

DEFAULT_NETWORK_PASSPHRASE = "Standalone Network ; local"
AUTH_MODES = ("enforce", "record")

# Floor for the storage key cap: the host nonce key is a 16-byte prefix plus a
# 35-byte encoded identifier, and contract keys built from an encoded
# Address need the same room.
MIN_STORAGE_KEY_BYTES = 64

# Floor for the symbol cap: host-invoked entry points ("check_auth",
# "as_contract") must always be expressible.
MIN_SYMBOL_LEN = 16


# ----------------------------- helpers ---------------------------------------


def _env_str(name: str, default: str) -> str:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip()


def _env_choice(name: str, default: str, choices: tuple[str, ...]) -> str:
    val = _env_str(name, default).lower()
    return val if val in choices else default


def _env_int(name: str, default: int, *, min_v: int, max_v: int) -> int:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        v = int(raw, 0)
    except ValueError:
        return default
    if v < min_v:
        return min_v
    if v > max_v:
        return max_v
    return v


def network_id_for(passphrase: str) -> bytes:
    """32-byte network identifier folded into every domain separator."""
    return hashlib.sha256(passphrase.encode("utf-8")).digest()


# ------------------------------- config --------------------------------------


@dataclass(frozen=True)
class AuthConfig:
    network_passphrase: str
    default_auth_mode: str

    max_call_depth: int
    max_payload_bytes: int
    max_symbol_len: int
    max_storage_key_bytes: int
    max_storage_value_bytes: int

    log_format: Optional[str]
    log_level: str

    def __post_init__(self) -> None:
        if self.max_storage_key_bytes < MIN_STORAGE_KEY_BYTES:
            raise ValueError(f"max_storage_key_bytes must be >= {MIN_STORAGE_KEY_BYTES}")
        if self.max_symbol_len < MIN_SYMBOL_LEN:
            raise ValueError(f"max_symbol_len must be >= {MIN_SYMBOL_LEN}")

    @property
    def network_id(self) -> bytes:
        return network_id_for(self.network_passphrase)

    def as_dict(self) -> Dict[str, Any]:
        return {
            "network_passphrase": self.network_passphrase,
            "network_id": self.network_id.hex(),
            "default_auth_mode": self.default_auth_mode,
            "max_call_depth": self.max_call_depth,
            "max_payload_bytes": self.max_payload_bytes,
            "max_symbol_len": self.max_symbol_len,
            "max_storage_key_bytes": self.max_storage_key_bytes,
            "max_storage_value_bytes": self.max_storage_value_bytes,
            "log_format": self.log_format,
            "log_level": self.log_level,
        }


@lru_cache(maxsize=1)
def load_config() -> AuthConfig:
    """
    Build and cache an AuthConfig from environment + safe defaults.
    Call `load_config.cache_clear()` after changing the environment.
    """
    log_format = os.getenv("VM_AUTH_LOG_FORMAT", "").strip().lower()
    return AuthConfig(
        network_passphrase=_env_str("VM_AUTH_NETWORK_PASSPHRASE", DEFAULT_NETWORK_PASSPHRASE),
        default_auth_mode=_env_choice("VM_AUTH_MODE", "enforce", AUTH_MODES),
        max_call_depth=_env_int("VM_AUTH_MAX_CALL_DEPTH", 64, min_v=2, max_v=1024),
        max_payload_bytes=_env_int("VM_AUTH_MAX_PAYLOAD_BYTES", 256_000, min_v=1_024, max_v=8_388_608),
        max_symbol_len=_env_int("VM_AUTH_MAX_SYMBOL_LEN", 32, min_v=MIN_SYMBOL_LEN, max_v=256),
        max_storage_key_bytes=_env_int("VM_AUTH_MAX_STORAGE_KEY_BYTES", 64, min_v=MIN_STORAGE_KEY_BYTES, max_v=256),
        max_storage_value_bytes=_env_int("VM_AUTH_MAX_STORAGE_VAL_BYTES", 131_072, min_v=32, max_v=1_048_576),
        log_format=log_format if log_format in ("json", "text") else None,
        log_level=_env_str("VM_AUTH_LOG_LEVEL", "INFO").upper(),
    )


__all__ = ["AuthConfig", "load_config", "network_id_for", "DEFAULT_NETWORK_PASSPHRASE", "AUTH_MODES",
           "MIN_STORAGE_KEY_BYTES", "MIN_SYMBOL_LEN"]
