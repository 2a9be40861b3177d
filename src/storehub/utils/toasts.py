import asyncio
import uuid
from typing import Any, Callable, Dict, List, Optional

from storehub.config import DEFAULT_TOAST_TTL
from storehub.db.models import Severity, Toast

# (delay, callback, *args) -> handle with .cancel(), like loop.call_later
CallLater = Callable[..., Any]


def _running_loop_call_later(delay: float, callback, *args):
    return asyncio.get_running_loop().call_later(delay, callback, *args)


class ToastQueue:
    """
    Transient notifications, never persisted.

    Each toast owns its own timer and expiry removes only that toast, so a
    new toast never resets an older one's countdown.
    """

    def __init__(
        self, ttl: float = DEFAULT_TOAST_TTL, call_later: Optional[CallLater] = None
    ):
        self.ttl = ttl
        self._call_later = call_later or _running_loop_call_later
        self._toasts: Dict[str, Toast] = {}
        self._timers: Dict[str, Any] = {}
        self._listeners: List[Callable[[Toast], None]] = []

    @property
    def entries(self) -> List[Toast]:
        return list(self._toasts.values())

    def __len__(self) -> int:
        return len(self._toasts)

    def __contains__(self, toast_id: str) -> bool:
        return toast_id in self._toasts

    def add_listener(self, callback: Callable[[Toast], None]) -> None:
        """callback(toast) runs for every newly enqueued toast."""
        self._listeners.append(callback)

    def enqueue(self, message: str, severity: Severity = "success") -> str:
        toast = Toast(id=uuid.uuid4().hex[:9], message=message, severity=severity)
        self._toasts[toast.id] = toast
        self._timers[toast.id] = self._call_later(self.ttl, self._expire, toast.id)
        for callback in self._listeners:
            callback(toast)
        return toast.id

    def _expire(self, toast_id: str) -> None:
        self._timers.pop(toast_id, None)
        self._toasts.pop(toast_id, None)

    def dismiss(self, toast_id: str) -> bool:
        """Early close; cancels the toast's timer."""
        timer = self._timers.pop(toast_id, None)
        if timer is not None:
            timer.cancel()
        return self._toasts.pop(toast_id, None) is not None

    def close(self) -> None:
        """Cancel every pending timer, e.g. when the owning view goes away."""
        for timer in self._timers.values():
            timer.cancel()
        self._timers.clear()
        self._toasts.clear()
