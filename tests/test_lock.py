import threading

import pytest

from virtual_notify.core.lock import NamespaceLock
from virtual_notify.errors import LockError


def test_acquire_is_reentrant_and_releases(tmp_path) -> None:
    lock = NamespaceLock(tmp_path / "vn_x.lock")
    with lock.acquire():
        with lock.acquire():
            assert lock.is_locked
        assert lock.is_locked
    assert not lock.is_locked
    assert (tmp_path / "vn_x.lock").exists()


def test_releases_on_error(tmp_path) -> None:
    lock = NamespaceLock(tmp_path / "vn_x.lock")
    with pytest.raises(RuntimeError):
        with lock.acquire():
            raise RuntimeError("boom")
    assert not lock.is_locked


def test_contended_lock_times_out(tmp_path) -> None:
    holder = NamespaceLock(tmp_path / "vn_x.lock")
    waiter = NamespaceLock(tmp_path / "vn_x.lock", timeout=0.1)
    errors = []

    def contend() -> None:
        try:
            with waiter.acquire():
                pass
        except LockError as e:
            errors.append(e)

    with holder.acquire():
        t = threading.Thread(target=contend)
        t.start()
        t.join(5.0)
    assert len(errors) == 1


def test_missing_directory_surfaces_lock_error(tmp_path) -> None:
    blocker = tmp_path / "not_a_dir"
    blocker.write_text("")
    lock = NamespaceLock(blocker / "vn_x.lock", timeout=0.1)
    with pytest.raises(LockError):
        with lock.acquire():
            pass
