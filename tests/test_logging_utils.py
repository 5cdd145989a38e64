# tests/test_logging_utils.py
import json
import os

from freezegun import freeze_time

from modules.posting_watch.lib import logging_bridge
from service import logging_utils as L


def _read_jsonl(path):
    with open(path, encoding="utf-8") as f:
        return [json.loads(line) for line in f if line.strip()]


@freeze_time("2025-01-01 12:00:00")
def test_daily_file_names_follow_env_prefix():
    assert os.path.basename(L.activity_log_path()) == "activity-test-2025-01-01.jsonl"
    assert os.path.basename(L.error_log_path()) == "error-test-2025-01-01.jsonl"
    assert os.path.dirname(L.activity_log_path()) == os.environ["LOG_DIR"]


def test_records_append_with_meta():
    L.write_activity_log({"event": "one"})
    L.write_activity_log({"event": "two"})
    rows = _read_jsonl(L.activity_log_path())
    assert [r["event"] for r in rows] == ["one", "two"]
    assert rows[0]["_meta"]["pid"] == os.getpid()


def test_redaction_is_deep_and_does_not_mutate():
    record = {
        "smtp_password": "hunter2",
        "nested": {"api_key": "abc", "ok": "fine"},
        "headers": [{"Authorization": "Bearer xyz"}],
        "note": "Bearer leaked",
    }
    out = L.redact(record)
    assert out["smtp_password"] == "***REDACTED***"
    assert out["nested"] == {"api_key": "***REDACTED***", "ok": "fine"}
    assert out["headers"] == [{"Authorization": "***REDACTED***"}]
    assert out["note"] == "Bearer ***REDACTED***"
    assert record["smtp_password"] == "hunter2"


def test_bridge_writes_component_records():
    logging_bridge.activity({"component": "posting_watch.engine", "op": "checking", "client": "Acme"})
    logging_bridge.error({"component": "posting_watch.engine", "op": "extract", "password": "x"})

    act = _read_jsonl(L.activity_log_path())[-1]
    err = _read_jsonl(L.error_log_path())[-1]
    assert act["op"] == "checking" and act["client"] == "Acme"
    assert err["op"] == "extract"
    assert err["password"] == "***REDACTED***"


def test_bridge_survives_unwritable_log_dir(tmp_path, monkeypatch):
    blocker = tmp_path / "file"
    blocker.write_text("x", encoding="utf-8")
    monkeypatch.setenv("LOG_DIR", str(blocker / "logs"))
    # Logging trouble must never break a run
    logging_bridge.activity({"component": "posting_watch.engine", "op": "summary"})
