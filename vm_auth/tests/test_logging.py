from __future__ import annotations

import io
import json
import logging

import pytest

from vm_auth import logging as alog
from vm_auth.errors import StaleOrReplayedNonce
from vm_auth.testutils import ed25519


@pytest.fixture
def restore_vm_auth_logger():
    logger = logging.getLogger("vm_auth")
    saved = (logger.level, logger.propagate, list(logger.handlers))
    yield logger
    logger.setLevel(saved[0])
    logger.propagate = saved[1]
    logger.handlers[:] = saved[2]


def _record(msg: str = "hello", **extra) -> logging.LogRecord:
    return logging.makeLogRecord({"name": "vm_auth.test", "msg": msg, "levelname": "INFO",
                                  "levelno": logging.INFO, **extra})


def test_bound_context_is_scoped() -> None:
    alog.clear_context()
    with alog.bound(contract="0xab", depth=1):
        assert alog.context() == {"contract": "0xab", "depth": 1}
        with alog.trace_scope("t-1") as tid:
            assert tid == "t-1"
            assert alog.context()["trace_id"] == "t-1"
        assert "trace_id" not in alog.context()
    assert alog.context() == {}


def test_bind_coerces_bytes() -> None:
    alog.clear_context()
    alog.bind(identity=b"\x01\x02")
    try:
        assert alog.context()["identity"] == "0102"
    finally:
        alog.unbind("identity")
    assert "identity" not in alog.context()


def test_json_formatter_merges_context_and_extras() -> None:
    with alog.bound(contract="0xab"):
        out = json.loads(alog.JSONFormatter().format(_record(nonce=3, digest=b"\xff")))
    assert out["msg"] == "hello"
    assert out["level"] == "INFO"
    assert out["contract"] == "0xab"
    assert out["nonce"] == 3
    assert out["digest"] == "ff"


def test_text_formatter_is_one_line() -> None:
    with alog.bound(function="examplefn"):
        line = alog.TextFormatter().format(_record(code="auth.stale_nonce"))
    assert "\n" not in line
    assert "function=examplefn" in line
    assert "code=auth.stale_nonce" in line
    assert line.endswith("| hello")


def test_configure_installs_single_handler(restore_vm_auth_logger) -> None:
    stream = io.StringIO()
    logger = alog.configure(json=True, level="DEBUG", stream=stream)
    alog.configure(json=True, level="DEBUG", stream=stream)
    assert len(logger.handlers) == 1
    alog.get_logger("vm_auth.child").debug("ping", extra={"n": 1})
    payload = json.loads(stream.getvalue().strip())
    assert payload["logger"] == "vm_auth.child"
    assert payload["n"] == 1


def test_with_fields_adapter(restore_vm_auth_logger) -> None:
    stream = io.StringIO()
    alog.configure(json=True, level="INFO", stream=stream, propagate=False)
    adapter = alog.with_fields(alog.get_logger("vm_auth.x"), contract=b"\xaa")
    adapter.info("hi", extra={"k": "v"})
    payload = json.loads(stream.getvalue().strip())
    assert payload["contract"] == "aa"
    assert payload["k"] == "v"


def test_rejections_are_logged_with_code(env, example, caplog) -> None:
    caplog.set_level(logging.DEBUG, logger="vm_auth")
    identifier, signer = ed25519.generate(env)
    sig = ed25519.sign(env, signer, example.contract_id, "examplefn", (identifier, 1, 2))
    example.examplefn(sig, 1, 2)
    with pytest.raises(StaleOrReplayedNonce):
        example.examplefn(sig, 1, 2)

    verify_records = [r for r in caplog.records if r.name == "vm_auth.verify"]
    assert any(r.getMessage() == "authorization verified" and r.levelno == logging.DEBUG for r in verify_records)
    rejected = [r for r in verify_records if r.getMessage() == "authorization rejected"]
    assert rejected and rejected[0].levelno == logging.INFO
    assert rejected[0].code == "auth.stale_nonce"
