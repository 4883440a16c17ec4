from __future__ import annotations

from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Union

from filelock import FileLock, Timeout

from virtual_notify.errors import LockError


class NamespaceLock:
    """
    Advisory lock shared by every participant of one namespace.

    Only processes going through this class (or the same flock-style lock file)
    respect it. Re-entrant within a thread, so cleanup() may unsubscribe while
    already holding it.
    """

    def __init__(self, path: Union[str, Path], *, timeout: float = -1) -> None:
        self._path = Path(path)
        self._timeout = float(timeout)
        self._lock = FileLock(str(self._path), timeout=self._timeout)

    @property
    def path(self) -> Path:
        return self._path

    @property
    def is_locked(self) -> bool:
        return bool(self._lock.is_locked)

    @contextmanager
    def acquire(self) -> Iterator[None]:
        try:
            self._lock.acquire()
        except Timeout as e:
            raise LockError("timed out after %.3fs acquiring %s" % (self._timeout, self._path)) from e
        except OSError as e:
            raise LockError("cannot acquire %s: %s" % (self._path, e)) from e
        try:
            yield
        finally:
            self._lock.release()
