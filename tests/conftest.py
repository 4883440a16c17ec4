from __future__ import annotations

import time
from typing import Callable

import pytest


def wait_until(cond: Callable[[], bool], timeout: float = 3.0, step: float = 0.01) -> bool:
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if cond():
            return True
        time.sleep(step)
    return cond()


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch, tmp_path) -> None:
    # Keep a developer's .env / VIRTUAL_NOTIFY_* out of the tests.
    monkeypatch.chdir(tmp_path)
    for name in (
        "VIRTUAL_NOTIFY_DIR",
        "VIRTUAL_NOTIFY_POLL_INTERVAL",
        "VIRTUAL_NOTIFY_QUEUE_MAXSIZE",
        "VIRTUAL_NOTIFY_LOCK_TIMEOUT",
        "VIRTUAL_NOTIFY_PUBLISH_RETRY_INTERVAL",
        "VIRTUAL_NOTIFY_LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def shared_dir(tmp_path):
    d = tmp_path / "shared"
    d.mkdir()
    return d
