from __future__ import annotations

import os
import threading
from datetime import timedelta
from pathlib import Path
from time import monotonic
from typing import Dict, Iterator, Optional, Tuple, Union

from tenacity import RetryError, retry, retry_if_exception_type, stop_before_delay, wait_fixed

from virtual_notify.config import NotifySettings
from virtual_notify.core.events import Event, EventQueue, Received
from virtual_notify.core.lock import NamespaceLock
from virtual_notify.core.logging import get_logger
from virtual_notify.core.paths import hashstr, lock_path, marker_path
from virtual_notify.errors import ClosedError, LockError, NextTimeout, NotifyIOError, PublishTimeout

Duration = Union[float, int, timedelta]


def _seconds(d: Duration) -> float:
    if isinstance(d, timedelta):
        return d.total_seconds()
    return float(d)


def _arm(path: Path) -> None:
    # Create-if-absent, truncate to zero length.
    with open(path, "wb"):
        pass


def _is_armed(path: Path) -> bool:
    # Only a definite not-found counts as fired.
    try:
        path.stat()
    except FileNotFoundError:
        return False
    except OSError:
        return True
    return True


def _io_error(e: OSError, what: str, path: Path) -> NotifyIOError:
    return NotifyIOError(e.errno, "%s: %s" % (what, e.strerror or e), str(path))


class VirtualNotify:
    """
    Filesystem-backed notifications for one namespace.

    subscribe() arms a marker file, publish() deletes it, and the poller
    (run()/start()) turns a missing marker into an Event on the local queue and
    re-arms it. Every participant of a namespace shares one advisory lock file.

    Delivery is best-effort: a publish reaches every subscriber whose poller sees
    the marker missing before someone re-arms it, so events can be duplicated or
    missed under contention.
    """

    def __init__(
        self,
        namespace: str,
        *,
        settings: Optional[NotifySettings] = None,
        base_dir: Optional[Union[str, Path]] = None,
        queue_maxsize: Optional[int] = None,
        lock_timeout: Optional[float] = None,
    ) -> None:
        self._settings = settings or NotifySettings()
        self._namespace = namespace
        self._ns_hash = hashstr(namespace)
        self._base_dir = Path(base_dir if base_dir is not None else self._settings.base_dir)
        self._base_dir.mkdir(parents=True, exist_ok=True)

        self._lock = NamespaceLock(
            lock_path(self._base_dir, self._ns_hash),
            timeout=lock_timeout if lock_timeout is not None else self._settings.lock_timeout_seconds,
        )
        self._events = EventQueue(queue_maxsize if queue_maxsize is not None else self._settings.queue_maxsize)

        # Guards _subs. Always taken before the file lock; the poller never takes
        # the file lock at all.
        self._mu = threading.RLock()
        self._subs: Dict[str, Path] = {}

        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self._closed = False
        self._close_lock = threading.Lock()
        self._last_error: Optional[Exception] = None
        self._log = get_logger(component="virtual_notify", namespace=namespace)

    def __repr__(self) -> str:
        return "VirtualNotify(namespace=%r, base_dir=%r)" % (self._namespace, str(self._base_dir))

    def __enter__(self) -> "VirtualNotify":
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()

    def __iter__(self) -> Iterator[Event]:
        while True:
            r = self.receive()
            if r.event is None:
                return
            yield r.event

    @property
    def namespace(self) -> str:
        return self._namespace

    @property
    def namespace_hash(self) -> str:
        return self._ns_hash

    @property
    def base_dir(self) -> Path:
        return self._base_dir

    @property
    def lock_path(self) -> Path:
        return self._lock.path

    @property
    def subscriptions(self) -> Tuple[str, ...]:
        with self._mu:
            return tuple(sorted(self._subs))

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def is_running(self) -> bool:
        t = self._thread
        return t is not None and t.is_alive()

    @property
    def last_error(self) -> Optional[Exception]:
        """Why the poller loop last ended early, if it did."""
        return self._last_error

    def marker_path(self, event_name: str) -> Path:
        return marker_path(self._base_dir, self._ns_hash, event_name)

    def _ensure_open(self) -> None:
        if self._closed:
            raise ClosedError("namespace %r is closed" % (self._namespace,))

    # Subscriptions

    def subscribe(self, event_name: str) -> None:
        self._ensure_open()
        path = self.marker_path(event_name)
        with self._mu, self._lock.acquire():
            if self._subs.get(event_name) == path:
                return
            try:
                _arm(path)
            except OSError as e:
                raise _io_error(e, "cannot arm marker", path) from e
            self._subs[event_name] = path
        self._log.debug("subscribed", event_name=event_name)

    def unsubscribe(self, event_name: str) -> None:
        """Best-effort: never raises."""
        path = self.marker_path(event_name)
        with self._mu:
            self._subs.pop(event_name, None)
            try:
                with self._lock.acquire():
                    try:
                        os.remove(path)
                    except OSError as e:
                        # Usually already gone (published and not yet re-armed).
                        self._log.debug("marker_remove_skipped", event_name=event_name, error=str(e))
            except LockError as e:
                self._log.warning("unsubscribe_failed", event_name=event_name, error=str(e))
                return
        self._log.debug("unsubscribed", event_name=event_name)

    def cleanup(self) -> None:
        """Unsubscribe from everything. Best-effort: never raises."""
        with self._mu:
            try:
                with self._lock.acquire():
                    for name in list(self._subs):
                        self.unsubscribe(name)
            except LockError as e:
                self._subs.clear()
                self._log.warning("cleanup_failed", error=str(e))

    # Poller

    def run(self, interval: Optional[Duration] = None) -> None:
        """
        Poll until stop()/close(). Blocks the calling thread; see start().
        Returns early if a marker cannot be re-armed (see last_error).
        """
        self._ensure_open()
        seconds = _seconds(interval if interval is not None else self._settings.poll_interval_seconds)
        if seconds <= 0:
            raise ValueError("poll interval must be > 0")

        self._log.info("poller_started", interval=seconds)
        try:
            while not self._stop.wait(seconds):
                if not self._tick():
                    break
        finally:
            self._log.info("poller_stopped")

    def _tick(self) -> bool:
        # Instance mutex only, never the file lock: every subscriber sharing a
        # marker must get a chance to see it missing before one re-arms it.
        with self._mu:
            for name, path in list(self._subs.items()):
                if _is_armed(path):
                    continue

                self._log.debug("event_detected", event_name=name)
                if not self._events.put(Event(name=name, path=str(path)), abandon=self._stop.is_set):
                    return False
                try:
                    _arm(path)
                except OSError as e:
                    self._last_error = _io_error(e, "cannot re-arm marker", path)
                    self._log.error("rearm_failed", event_name=name, error=str(e))
                    return False
        return True

    def start(self, interval: Optional[Duration] = None) -> threading.Thread:
        self._ensure_open()
        t = self._thread
        if t is not None and t.is_alive():
            if not self._stop.is_set():
                return t
            # A stop is pending; the old loop must exit before clearing the flag.
            t.join()
        self._stop.clear()
        self._last_error = None
        t = threading.Thread(target=self.run, args=(interval,), name="virtual-notify-poller", daemon=True)
        self._thread = t
        t.start()
        return t

    def stop(self, timeout: Optional[float] = None) -> None:
        self._stop.set()
        t = self._thread
        if t is not None and t is not threading.current_thread():
            t.join(timeout)

    # Publishing

    def _fire(self, path: Path) -> None:
        with self._lock.acquire():
            try:
                os.remove(path)
            except FileNotFoundError:
                raise
            except OSError as e:
                raise _io_error(e, "cannot remove marker", path) from e

    def publish(self, event_name: str, timeout: Optional[Duration] = None) -> bool:
        """
        Fire `event_name`. Returns True if an armed marker was removed.

        Without a timeout this never waits: with nobody armed it is a no-op.
        With a timeout it retries until some subscriber has armed the marker,
        raising PublishTimeout at the deadline. The lock is released between
        attempts.
        """
        self._ensure_open()
        path = self.marker_path(event_name)
        seconds = _seconds(timeout) if timeout is not None else 0.0

        if seconds <= 0:
            try:
                self._fire(path)
            except FileNotFoundError:
                self._log.debug("published", event_name=event_name, armed=False)
                return False
            self._log.debug("published", event_name=event_name, armed=True)
            return True

        fire = retry(
            stop=stop_before_delay(seconds),
            wait=wait_fixed(self._settings.publish_retry_interval_seconds),
            retry=retry_if_exception_type(FileNotFoundError),
        )(self._fire)
        try:
            fire(path)
        except RetryError as e:
            raise PublishTimeout(
                "no subscriber armed %r in namespace %r within %.3fs" % (event_name, self._namespace, seconds)
            ) from e
        self._log.debug("published", event_name=event_name, armed=True)
        return True

    # Consumer side

    def receive(self, timeout: Optional[Duration] = None) -> Received:
        return self._events.receive(None if timeout is None else _seconds(timeout))

    def next(self, timeout: Optional[Duration] = None) -> Event:
        r = self.receive(timeout)
        if r.closed:
            raise ClosedError("namespace %r is closed" % (self._namespace,))
        if r.event is None:
            raise NextTimeout("no event in namespace %r within %.3fs" % (self._namespace, _seconds(timeout or 0)))
        return r.event

    def close(self) -> None:
        """Stop polling, unsubscribe everything, and wake any blocked next()."""
        with self._close_lock:
            if self._closed:
                return
            self._closed = True
        self.stop()
        self.cleanup()
        self._events.close()
        self._log.debug("closed")

    def stats(self) -> Dict[str, int]:
        out = dict(self._events.stats())
        out["subscriptions"] = len(self._subs)
        out["running"] = 1 if self.is_running else 0
        return out


def wait_for_event(
    namespace: str,
    event_name: str,
    *,
    interval: Duration = 0.1,
    timeout: Optional[Duration] = None,
    settings: Optional[NotifySettings] = None,
    base_dir: Optional[Union[str, Path]] = None,
) -> Event:
    """
    Subscribe, poll, and block until `event_name` fires once; always cleans up.
    """
    deadline = None if timeout is None else monotonic() + _seconds(timeout)
    with VirtualNotify(namespace, settings=settings, base_dir=base_dir) as vn:
        vn.subscribe(event_name)
        vn.start(interval)
        while True:
            remaining = None if deadline is None else max(0.0, deadline - monotonic())
            ev = vn.next(remaining)
            if ev.name == event_name:
                return ev
