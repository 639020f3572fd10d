# topmark:header:start
#
#   project      : MagicScan
#   file         : scanner.py
#   file_relpath : src/magicscan/scanner.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Scan coordinator: validate, spawn workers, walk, report.

`search` is the library entry point. It validates the signature list, starts a
`WorkerPool`, runs the walker on the calling thread to feed the pool, then
closes the pool and waits for the workers to drain the queue.

The walker's outcome is the scan's outcome: a cancellation or deadline error
raised by the walker propagates unchanged (after the pool has been stopped).
A token that fires after the walk, while queued paths are still waiting,
raises the same error once the workers have exited.
Otherwise `search` returns a `ScanReport`.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import TYPE_CHECKING

from pathspec import PathSpec

from magicscan.config.logging import MagicScanLogger, get_logger
from magicscan.constants import DEFAULT_POLL_INTERVAL
from magicscan.pool import WorkerPool
from magicscan.signatures.base import validate_signatures
from magicscan.walker import build_exclude_spec, walk

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from magicscan.cancellation import CancellationToken
    from magicscan.errors import ScanCancelledError, WorkerFault
    from magicscan.pool import OnMatch
    from magicscan.signatures.base import Signature

logger: MagicScanLogger = get_logger(__name__)


@dataclass(frozen=True)
class ScanReport:
    """Summary of a completed scan.

    Matches themselves are only delivered to the callback; the report carries
    counters and the faults recorded by the workers.

    Attributes:
        root (str): The scanned root path.
        files_published (int): Paths handed to the worker pool by the walker.
        files_processed (int): Paths the workers classified.
        matches (int): Matches delivered to the callback.
        stopped (bool): True if the callback asked the scan to stop.
        faults (tuple[WorkerFault, ...]): Unexpected per-path failures.
    """

    root: str
    files_published: int = 0
    files_processed: int = 0
    matches: int = 0
    stopped: bool = False
    faults: tuple[WorkerFault, ...] = ()

    @property
    def ok(self) -> bool:
        """True when no worker fault was recorded."""
        return not self.faults


def search(
    root: str | os.PathLike[str],
    signatures: Sequence[Signature],
    on_match: OnMatch,
    *,
    token: CancellationToken | None = None,
    workers: int | None = None,
    exclude: PathSpec | Iterable[str] | None = None,
    poll_interval: float = DEFAULT_POLL_INTERVAL,
) -> ScanReport:
    """Scan `root` recursively and report files that carry one of `signatures`.

    `on_match(path, type_name)` is called from worker threads, possibly
    concurrently. Returning False stops the whole scan.

    Args:
        root (str | os.PathLike[str]): Directory (or single file) to scan. A missing
            root is not an error; nothing is scanned.
        signatures (Sequence[Signature]): Ordered signature list; earlier entries
            win when several match the same file.
        on_match (OnMatch): Match callback.
        token (CancellationToken | None): Optional cancellation token.
        workers (int | None): Worker count; defaults to the host CPU count.
        exclude (PathSpec | Iterable[str] | None): Exclude spec or gitignore-style
            patterns, relative to `root`.
        poll_interval (float): Seconds between stop/cancel re-checks while blocked.

    Returns:
        ScanReport: Counters, stop state and recorded worker faults.

    Raises:
        TooManySignaturesError: If the signature list is too long. Raised before
            any filesystem access.
        ScanCancelledError: If the token was cancelled (or its deadline elapsed,
            as `DeadlineExceededError`) before or during the walk.
    """
    validate_signatures(signatures)

    root_path: str = os.fspath(root)
    if len(signatures) == 0:
        logger.debug("Empty signature list; nothing to scan")
        return ScanReport(root=root_path)

    exclude_spec: PathSpec | None
    if exclude is None or isinstance(exclude, PathSpec):
        exclude_spec = exclude
    else:
        exclude_spec = build_exclude_spec(exclude)

    pool = WorkerPool(
        signatures,
        on_match,
        workers=workers,
        token=token,
        poll_interval=poll_interval,
    )
    logger.info(
        "Scanning %s with %d signature(s) and %d worker(s)",
        root_path,
        len(signatures),
        pool.worker_count,
    )

    pool.start()
    try:
        published: int = walk(root_path, pool, token=token, exclude=exclude_spec)
    except BaseException:
        pool.stop()
        raise
    finally:
        pool.close()
        pool.join()

    if token is not None and not pool.stopped and pool.processed < published:
        # Workers left queued paths behind because the token fired after the walk.
        error: ScanCancelledError | None = token.error()
        if error is not None:
            logger.warning(
                "Scan of %s cancelled while draining: %d of %d file(s) processed",
                root_path,
                pool.processed,
                published,
            )
            raise error

    report = ScanReport(
        root=root_path,
        files_published=published,
        files_processed=pool.processed,
        matches=pool.matched,
        stopped=pool.stopped,
        faults=pool.faults,
    )
    if report.faults:
        logger.warning("Scan of %s finished with %d worker fault(s)", root_path, len(report.faults))
    logger.info(
        "Scan of %s done: %d file(s), %d match(es)%s",
        root_path,
        report.files_processed,
        report.matches,
        " (stopped early)" if report.stopped else "",
    )
    return report
