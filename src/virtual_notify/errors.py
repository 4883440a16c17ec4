from __future__ import annotations


class VirtualNotifyError(Exception):
    """Base class for everything this package raises."""


class NotifyIOError(VirtualNotifyError, OSError):
    """Creating or removing a marker file failed for a reason other than not-found."""


class LockError(VirtualNotifyError):
    """The namespace lock could not be acquired."""


class PublishTimeout(VirtualNotifyError, TimeoutError):
    """No armed marker appeared before the publish deadline."""


class NextTimeout(VirtualNotifyError, TimeoutError):
    """A bounded wait for the next event elapsed."""


class ClosedError(VirtualNotifyError):
    """The instance (or its queue) has been closed."""
