"""Cancellation tokens and timeout timers for HttpClient calls.

A call observes exactly one ``CancelToken``. The caller may pass its own
token; otherwise the client creates one when a timeout is configured. The
timeout timer cancels that same token with a ``RequestTimeoutError`` reason,
so a caller cancel and a timeout can never fire two independent signals.
"""

from __future__ import annotations

import threading
from typing import Callable

from .errors import RequestCancelledError, RequestTimeoutError


class CancelToken:
    """Cancellation handle shared between a caller and an in-flight call.

    ``cancel()`` is idempotent: only the first call records a reason and
    notifies subscribers.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._event = threading.Event()
        self._reason: BaseException | None = None
        self._callbacks: list[Callable[[], None]] = []

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    @property
    def reason(self) -> BaseException | None:
        return self._reason

    @property
    def timed_out(self) -> bool:
        return isinstance(self._reason, RequestTimeoutError)

    def cancel(self, reason: BaseException | None = None) -> bool:
        """Trigger the token. Returns False if it was already triggered."""
        with self._lock:
            if self._event.is_set():
                return False
            self._reason = reason or RequestCancelledError()
            self._event.set()
            callbacks, self._callbacks = self._callbacks, []
        for callback in callbacks:
            callback()
        return True

    def subscribe(self, callback: Callable[[], None]) -> Callable[[], None]:
        """Run ``callback`` on cancel; returns an unsubscribe function.

        If the token is already cancelled the callback runs immediately.
        """
        with self._lock:
            if not self._event.is_set():
                self._callbacks.append(callback)
                return lambda: self._unsubscribe(callback)
        callback()
        return lambda: None

    def _unsubscribe(self, callback: Callable[[], None]) -> None:
        with self._lock:
            if callback in self._callbacks:
                self._callbacks.remove(callback)

    def wait(self, timeout: float | None = None) -> bool:
        return self._event.wait(timeout)

    def raise_if_cancelled(self) -> None:
        if self._reason is not None:
            raise self._reason


class Deadline:
    """Context manager arming a timeout timer against a token.

    On exit the timer is cancelled whatever the outcome, so no pending timer
    outlives the call. Once cleared, a timer that was already due does not
    touch the token.
    """

    def __init__(self, token: CancelToken, timeout: float | None) -> None:
        self.token = token
        self.timeout = timeout
        self._lock = threading.Lock()
        self._timer: threading.Timer | None = None
        self._cleared = False

    @property
    def armed(self) -> bool:
        return self._timer is not None

    def _fire(self) -> None:
        with self._lock:
            if self._cleared:
                return
            self._cleared = True
        self.token.cancel(RequestTimeoutError(self.timeout))

    def __enter__(self) -> Deadline:
        if self.timeout:
            self._timer = threading.Timer(self.timeout, self._fire)
            self._timer.daemon = True
            self._timer.start()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.clear()

    def clear(self) -> None:
        """Disarm the timer. Safe to call from any thread, more than once."""
        with self._lock:
            self._cleared = True
            timer, self._timer = self._timer, None
        if timer is not None:
            timer.cancel()
