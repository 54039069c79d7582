"""Example contracts built on vm_auth (used by the test-suite and as documentation)."""
