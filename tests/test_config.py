import tempfile

import pytest
from pydantic import ValidationError

from virtual_notify.config import NotifySettings


def test_defaults() -> None:
    s = NotifySettings()
    assert s.base_dir == tempfile.gettempdir()
    assert s.poll_interval_seconds == 0.1
    assert s.queue_maxsize == 32
    assert s.lock_timeout_seconds == -1
    assert s.log_level == "INFO"


def test_reads_environment(monkeypatch, tmp_path) -> None:
    monkeypatch.setenv("VIRTUAL_NOTIFY_DIR", "'%s'" % tmp_path)
    monkeypatch.setenv("VIRTUAL_NOTIFY_POLL_INTERVAL", "0.25")
    monkeypatch.setenv("VIRTUAL_NOTIFY_QUEUE_MAXSIZE", "0")
    monkeypatch.setenv("VIRTUAL_NOTIFY_LOG_LEVEL", "debug")
    s = NotifySettings()
    assert s.base_dir == str(tmp_path)
    assert s.poll_interval_seconds == 0.25
    assert s.queue_maxsize == 0
    assert s.log_level == "debug"


def test_reads_dotenv(tmp_path) -> None:
    (tmp_path / ".env").write_text("VIRTUAL_NOTIFY_LOCK_TIMEOUT=2.5\n", encoding="utf-8")
    assert NotifySettings().lock_timeout_seconds == 2.5


def test_empty_dir_falls_back_to_tempdir(monkeypatch) -> None:
    monkeypatch.setenv("VIRTUAL_NOTIFY_DIR", "")
    assert NotifySettings().base_dir == tempfile.gettempdir()


def test_rejects_non_positive_interval(monkeypatch) -> None:
    monkeypatch.setenv("VIRTUAL_NOTIFY_POLL_INTERVAL", "0")
    with pytest.raises(ValidationError):
        NotifySettings()
