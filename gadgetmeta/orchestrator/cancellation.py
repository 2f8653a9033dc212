"""
CancellationToken — Cooperative cancellation for blocking waits

A token is handed to a long-running call. Another thread calls cancel();
every callback registered on the token runs once, which lets a blocked
waiter wake up immediately instead of polling a flag.
"""

import threading
from typing import Callable, List


class CancellationToken:
    """
    One-shot cancellation signal.

    Thread-safe. Callbacks registered after cancellation run immediately
    in the registering thread.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._cancelled = False
        self._reason = ""
        self._callbacks: List[Callable[[], None]] = []

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    @property
    def reason(self) -> str:
        return self._reason

    def cancel(self, reason: str = "cancelled") -> None:
        """Signal cancellation. Later calls are no-ops."""
        with self._lock:
            if self._cancelled:
                return
            self._cancelled = True
            self._reason = reason
            callbacks = list(self._callbacks)
            self._callbacks.clear()

        for callback in callbacks:
            callback()

    def add_callback(self, callback: Callable[[], None]) -> None:
        """Run callback on cancellation (now, if already cancelled)."""
        with self._lock:
            if not self._cancelled:
                self._callbacks.append(callback)
                return
        callback()

    def remove_callback(self, callback: Callable[[], None]) -> None:
        """Remove a previously added callback."""
        with self._lock:
            if callback in self._callbacks:
                self._callbacks.remove(callback)
