# topmark:header:start
#
#   project      : MagicScan
#   file         : __init__.py
#   file_relpath : src/magicscan/__init__.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""MagicScan package.

MagicScan identifies file formats by their magic bytes. It walks a directory
tree, feeds every regular file to a pool of matcher threads through a bounded
queue, and reports each match to a caller-supplied callback.

Public API:
    - `search`: run a scan.
    - `Signature`, `BUILTIN_SIGNATURES`: what to look for.
    - `matches`, `classify`: single-file matching.
    - `CancellationToken`: cooperative cancellation with optional deadline.
    - Errors: `TooManySignaturesError`, `ScanCancelledError`,
      `DeadlineExceededError`, and the `WorkerFault` record.
"""

from __future__ import annotations

from magicscan.cancellation import CancellationToken
from magicscan.constants import MAX_SIGNATURES
from magicscan.errors import (
    DeadlineExceededError,
    MagicScanError,
    ScanCancelledError,
    TooManySignaturesError,
    WorkerFault,
)
from magicscan.matcher import classify, matches
from magicscan.scanner import ScanReport, search
from magicscan.signatures import BUILTIN_SIGNATURES, Signature, validate_signatures

__all__ = [
    "BUILTIN_SIGNATURES",
    "MAX_SIGNATURES",
    "CancellationToken",
    "DeadlineExceededError",
    "MagicScanError",
    "ScanCancelledError",
    "ScanReport",
    "Signature",
    "TooManySignaturesError",
    "WorkerFault",
    "classify",
    "matches",
    "search",
    "validate_signatures",
]
