from __future__ import annotations

import pytest

from vm_auth.config import load_config
from vm_auth.contract import ContractClient, register
from vm_auth.examples.example_contract import ExampleContract
from vm_auth.runtime.env import Env
from vm_auth.testutils import default_env


@pytest.fixture
def fresh_config():
    """Drop the cached AuthConfig around a test that edits VM_AUTH_* variables."""
    load_config.cache_clear()
    yield load_config
    load_config.cache_clear()


@pytest.fixture
def env() -> Env:
    return default_env()


@pytest.fixture
def example(env: Env) -> ContractClient:
    return register(env, ExampleContract())
