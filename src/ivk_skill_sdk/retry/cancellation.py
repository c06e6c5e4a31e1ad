"""Caller-owned cancellation signal for a single logical operation."""

import threading
from typing import Callable, Optional

from ivk_skill_sdk.errors import OperationCancelledError


class CancellationToken:
    """
    Thread-safe, one-shot cancellation flag.

    Can be cancelled from any thread. Blocking waits use ``wait``; async
    waits register a callback that wakes the event loop. Callbacks run on
    the thread that calls ``cancel``.
    """

    def __init__(self) -> None:
        self._event = threading.Event()
        self._lock = threading.Lock()
        self._callbacks: list[Callable[[], None]] = []
        self._reason: Optional[str] = None

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    @property
    def reason(self) -> Optional[str]:
        return self._reason

    def cancel(self, reason: Optional[str] = None) -> None:
        """Request cancellation. Only the first call has any effect."""
        with self._lock:
            if self._event.is_set():
                return
            self._reason = reason
            self._event.set()
            callbacks, self._callbacks = self._callbacks, []
        for callback in callbacks:
            callback()

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise OperationCancelledError(
                "Operation cancelled by caller",
                details={"reason": self._reason},
            )

    def wait(self, timeout: Optional[float] = None) -> bool:
        """Block up to ``timeout`` seconds; True if cancelled meanwhile."""
        return self._event.wait(timeout)

    def register(self, callback: Callable[[], None]) -> Callable[[], None]:
        """
        Call ``callback`` once when cancelled (immediately if already so).

        Returns a function that removes the callback again.
        """
        with self._lock:
            if not self._event.is_set():
                self._callbacks.append(callback)

                def unregister() -> None:
                    with self._lock:
                        if callback in self._callbacks:
                            self._callbacks.remove(callback)

                return unregister
        callback()
        return lambda: None

    def __repr__(self) -> str:
        return f"CancellationToken(cancelled={self.cancelled})"
