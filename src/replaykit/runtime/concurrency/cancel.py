"""Cooperative cancellation for blocking retry loops.

A CancelToken is shared between the thread running ``RetryExecutor.do`` and
whoever may want to stop it. Backoff waits sleep on the token, so cancelling
wakes the waiting thread immediately instead of after the full delay.

Example:
    >>> token = CancelToken()
    >>> threading.Timer(0.5, token.cancel).start()
    >>> executor.do(request, cancel=token)  # raises CancelledError once fired
"""

from __future__ import annotations

import threading

from replaykit.foundation.errors import CancelledError


class CancelToken:
    """Thread-safe, one-shot cancellation signal."""

    __slots__ = ("_event", "_reason")

    def __init__(self) -> None:
        self._event = threading.Event()
        self._reason = "cancelled"

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    @property
    def reason(self) -> str:
        return self._reason

    def cancel(self, reason: str | None = None) -> None:
        """Fire the token. Later calls are no-ops."""
        if not self._event.is_set():
            if reason:
                self._reason = reason
            self._event.set()

    def wait(self, timeout: float) -> bool:
        """Block up to ``timeout`` seconds. Returns True if cancelled meanwhile."""
        return self._event.wait(timeout)

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise CancelledError(self._reason)

    def __repr__(self) -> str:
        return f"CancelToken(cancelled={self.cancelled})"
