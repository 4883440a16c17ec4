from __future__ import annotations

import threading
from collections import deque
from dataclasses import dataclass, field
from time import monotonic
from typing import Callable, Deque, Optional


@dataclass(frozen=True)
class Event:
    name: str
    path: str = field(default="", repr=False, compare=False)


@dataclass(frozen=True)
class Received:
    """
    Tagged result of EventQueue.receive(): exactly one of `event` / `closed`
    is set, or neither when a bounded wait timed out.
    """

    event: Optional[Event] = None
    closed: bool = False

    @property
    def timed_out(self) -> bool:
        return self.event is None and not self.closed


class EventQueue:
    """
    Hand-off between the poller thread and consumer threads.

    maxsize <= 0 means unbounded. Once closed, blocked and future receivers get
    a closed result right away; anything still queued is discarded.
    """

    def __init__(self, maxsize: int = 32) -> None:
        self._maxsize = int(maxsize)
        self._items: Deque[Event] = deque()
        self._cond = threading.Condition()
        self._closed = False
        self._put_total = 0

    @property
    def maxsize(self) -> int:
        return self._maxsize

    @property
    def closed(self) -> bool:
        return self._closed

    def qsize(self) -> int:
        with self._cond:
            return len(self._items)

    def _full(self) -> bool:
        return self._maxsize > 0 and len(self._items) >= self._maxsize

    def put(
        self,
        event: Event,
        *,
        abandon: Optional[Callable[[], bool]] = None,
        poll_seconds: float = 0.05,
    ) -> bool:
        """
        Block while full. Returns False (event dropped) if the queue is closed or
        `abandon()` turns true while waiting.
        """
        with self._cond:
            while not self._closed and self._full():
                if abandon is not None and abandon():
                    return False
                self._cond.wait(poll_seconds)
            if self._closed:
                return False
            self._items.append(event)
            self._put_total += 1
            self._cond.notify_all()
            return True

    def receive(self, timeout: Optional[float] = None) -> Received:
        deadline = None if timeout is None else monotonic() + max(0.0, timeout)
        with self._cond:
            while not self._items and not self._closed:
                if deadline is None:
                    self._cond.wait()
                    continue
                remaining = deadline - monotonic()
                if remaining <= 0:
                    return Received()
                self._cond.wait(remaining)
            if self._closed:
                return Received(closed=True)
            ev = self._items.popleft()
            self._cond.notify_all()
            return Received(event=ev)

    def close(self) -> None:
        with self._cond:
            self._closed = True
            self._items.clear()
            self._cond.notify_all()

    def stats(self) -> dict[str, int]:
        with self._cond:
            return {
                "queue_size": len(self._items),
                "queue_maxsize": self._maxsize,
                "put_total": self._put_total,
                "closed": 1 if self._closed else 0,
            }
