# tests/test_config.py

from __future__ import annotations

from config import Settings


def test_defaults(monkeypatch) -> None:
    for name in (
        "DATABASE_URL",
        "TASKFLOW_LOG_LEVEL",
        "TASKFLOW_SUCCESS_NOTICE_SECONDS",
        "TASKFLOW_ERROR_NOTICE_SECONDS",
        "TASKFLOW_ALLOW_SUBTASK_DRAG",
    ):
        monkeypatch.delenv(name, raising=False)
    s = Settings.from_env()
    assert s.database_url == "sqlite:///taskflow.db"
    assert s.log_level == "INFO"
    assert (s.success_notice_seconds, s.error_notice_seconds) == (3.0, 5.0)
    assert s.allow_subtask_drag is False


def test_overrides(monkeypatch) -> None:
    monkeypatch.setenv("DATABASE_URL", "sqlite:///other.db")
    monkeypatch.setenv("TASKFLOW_LOG_LEVEL", "debug")
    monkeypatch.setenv("TASKFLOW_SUCCESS_NOTICE_SECONDS", "1.5")
    monkeypatch.setenv("TASKFLOW_ERROR_NOTICE_SECONDS", "not-a-number")
    monkeypatch.setenv("TASKFLOW_ALLOW_SUBTASK_DRAG", "yes")
    s = Settings.from_env()
    assert s.database_url == "sqlite:///other.db"
    assert s.log_level == "DEBUG"
    assert s.success_notice_seconds == 1.5
    assert s.error_notice_seconds == 5.0
    assert s.allow_subtask_drag is True
