"""Notification dispatcher registry.

Holds the process-wide dispatcher. The fake adapter is the default; a real
email/push adapter is installed with ``set_dispatcher`` at startup.
"""

from marketplace.notification.port import NotificationDispatcher

_dispatcher: NotificationDispatcher | None = None


def get_dispatcher() -> NotificationDispatcher:
    global _dispatcher
    if _dispatcher is None:
        from marketplace.notification.fake_adapter import FakeDispatcher

        _dispatcher = FakeDispatcher()
    return _dispatcher


def set_dispatcher(dispatcher: NotificationDispatcher) -> None:
    global _dispatcher
    _dispatcher = dispatcher


def reset_dispatcher() -> None:
    """Drop the current dispatcher (useful for testing)."""
    global _dispatcher
    _dispatcher = None
