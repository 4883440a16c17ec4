from virtual_notify.core.events import Event, Received
from virtual_notify.errors import (
    ClosedError,
    LockError,
    NextTimeout,
    NotifyIOError,
    PublishTimeout,
    VirtualNotifyError,
)
from virtual_notify.notify import VirtualNotify, wait_for_event

__all__ = [
    "ClosedError",
    "Event",
    "LockError",
    "NextTimeout",
    "NotifyIOError",
    "PublishTimeout",
    "Received",
    "VirtualNotify",
    "VirtualNotifyError",
    "wait_for_event",
]
