from __future__ import annotations

import io
import json
import logging

from multisig import logging as mlog
from multisig.wallet import MultisigWallet

from .conftest import A, B, DEST, STRANGER


def _json_lines(buf: io.StringIO):
    return [json.loads(line) for line in buf.getvalue().splitlines() if line.strip()]


def test_trace_scope_nests_and_restores():
    mlog.clear_context()
    with mlog.trace_scope(op="outer") as tid:
        assert mlog.context()["op"] == "outer"
        with mlog.trace_scope(op="inner", tx_id=3) as inner_tid:
            assert inner_tid == tid
            assert mlog.context()["tx_id"] == 3
        assert mlog.context() == {"trace_id": tid, "op": "outer"}
    assert mlog.context() == {}


def test_bind_coerces_bytes():
    mlog.clear_context()
    mlog.bind(caller=b"\x01\x02")
    assert mlog.context()["caller"] == "0x0102"
    mlog.unbind("caller")
    assert "caller" not in mlog.context()


def test_json_lines_carry_call_context(cfg):
    buf = io.StringIO()
    mlog.configure(json=True, level="DEBUG", stream=buf)

    w = MultisigWallet(b"\x77" * 20, config=cfg)
    w.initialize([A, B], 2)
    w.submit(A, DEST, 5)
    try:
        w.submit(STRANGER, DEST, 5)
    except Exception:
        pass

    lines = _json_lines(buf)
    submitted = [l for l in lines if l["msg"] == "transaction submitted"]
    assert len(submitted) == 1
    entry = submitted[0]
    assert entry["op"] == "submit"
    assert entry["logger"] == "multisig.engine"
    assert entry["tx_id"] == 0
    assert entry["level"] == "INFO"
    assert entry["trace_id"]

    rejected = [l for l in lines if l["msg"] == "call rejected"]
    assert rejected and rejected[-1]["code"] == "UNAUTHORIZED"
    assert rejected[-1]["level"] == "DEBUG"


def test_text_formatter_one_liner():
    buf = io.StringIO()
    logger = mlog.configure(json=False, level="INFO", stream=buf)
    with mlog.trace_scope("t-1", op="confirm"):
        logging.getLogger("multisig.engine").info("transaction confirmed", extra={"tx_id": 7})
    line = buf.getvalue().strip()
    assert "| INFO  | multisig.engine |" in line
    assert "trace_id=t-1" in line and "op=confirm" in line
    assert line.endswith("transaction confirmed tx_id=7")
    assert logger.propagate is False


def test_configure_from_config():
    from multisig.config import load_config

    cfg = load_config(env={"MULTISIG_LOG_LEVEL": "WARNING", "MULTISIG_LOG_FORMAT": "json"})
    logger = mlog.configure_from_config(cfg)
    assert logger.level == logging.WARNING
    assert isinstance(logger.handlers[0].formatter, mlog.JSONFormatter)
