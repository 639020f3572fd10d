# topmark:header:start
#
#   project      : MagicScan
#   file         : cancellation.py
#   file_relpath : src/magicscan/cancellation.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Cooperative cancellation for scans.

A `CancellationToken` carries a cancel request and an optional deadline. Scans
only honor it at checkpoints: before the walk starts, at every directory entry,
and before a worker takes the next path from the queue.
"""

from __future__ import annotations

import threading
import time

from magicscan.errors import DeadlineExceededError, ScanCancelledError


class CancellationToken:
    """Thread-safe cancellation signal with an optional monotonic deadline.

    Args:
        deadline (float | None): Absolute deadline on the `time.monotonic()` clock.
            A deadline that is already reached counts as expired.
    """

    def __init__(self, *, deadline: float | None = None) -> None:
        self._event = threading.Event()
        self._deadline: float | None = deadline

    @classmethod
    def with_timeout(cls, seconds: float) -> CancellationToken:
        """Return a token whose deadline is `seconds` from now."""
        return cls(deadline=time.monotonic() + seconds)

    @property
    def deadline(self) -> float | None:
        """The monotonic deadline, or None when the token has none."""
        return self._deadline

    def cancel(self) -> None:
        """Request cancellation. Idempotent."""
        self._event.set()

    @property
    def cancelled(self) -> bool:
        """True once cancelled explicitly or once the deadline has elapsed."""
        return self.error() is not None

    def remaining(self) -> float | None:
        """Seconds left until the deadline (never negative), or None without one."""
        if self._deadline is None:
            return None
        return max(0.0, self._deadline - time.monotonic())

    def error(self) -> ScanCancelledError | None:
        """Return the error describing why the token fired, or None.

        Explicit cancellation wins over an elapsed deadline.
        """
        if self._event.is_set():
            return ScanCancelledError()
        if self._deadline is not None and time.monotonic() >= self._deadline:
            return DeadlineExceededError()
        return None

    def raise_if_cancelled(self) -> None:
        """Raise the token's error if it has fired.

        Raises:
            ScanCancelledError: If cancelled (`DeadlineExceededError` when the
                deadline elapsed).
        """
        err: ScanCancelledError | None = self.error()
        if err is not None:
            raise err

    def __repr__(self) -> str:
        return f"CancellationToken(cancelled={self._event.is_set()}, deadline={self._deadline})"
