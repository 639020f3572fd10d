# topmark:header:start
#
#   project      : MagicScan
#   file         : errors.py
#   file_relpath : src/magicscan/errors.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Error taxonomy for MagicScan scans.

Only two kinds of failure are observable from a scan invocation:

- `TooManySignaturesError`: the signature list is longer than
  [`MAX_SIGNATURES`][magicscan.constants.MAX_SIGNATURES]. Raised before any I/O.
- `ScanCancelledError` (and its subclass `DeadlineExceededError`): the
  cancellation token was triggered, or its deadline elapsed.

Per-file and per-directory I/O errors are logged and degrade to "no match".
Unexpected exceptions raised while a worker processes a single path are
captured as `WorkerFault` records and reported on the scan report.
"""

from __future__ import annotations

from dataclasses import dataclass


class MagicScanError(Exception):
    """Base class for all MagicScan errors."""


class TooManySignaturesError(MagicScanError):
    """Raised when a scan is requested with more signatures than allowed.

    Attributes:
        count (int): Number of signatures supplied.
        limit (int): Maximum number of signatures accepted.
    """

    def __init__(self, count: int, limit: int) -> None:
        self.count: int = count
        self.limit: int = limit
        super().__init__(f"Signature list length {count} exceeds the maximum of {limit}")


class ScanCancelledError(MagicScanError):
    """Raised when a scan observes that its cancellation token was cancelled."""

    def __init__(self, message: str = "scan cancelled") -> None:
        super().__init__(message)


class DeadlineExceededError(ScanCancelledError):
    """Raised when a scan observes that its cancellation deadline has elapsed."""

    def __init__(self, message: str = "scan deadline exceeded") -> None:
        super().__init__(message)


@dataclass(frozen=True)
class WorkerFault:
    """An unexpected exception raised while a worker processed one path.

    Attributes:
        worker (str): Name of the worker thread that hit the fault.
        path (str): The path being processed.
        error (BaseException): The exception that was caught.
    """

    worker: str
    path: str
    error: BaseException

    def describe(self) -> str:
        """Return a one-line, human-readable description of the fault."""
        return f"{self.worker}: {self.path}: {type(self.error).__name__}: {self.error}"
