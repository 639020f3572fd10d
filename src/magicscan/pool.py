# topmark:header:start
#
#   project      : MagicScan
#   file         : pool.py
#   file_relpath : src/magicscan/pool.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Fixed-size pool of matcher threads fed by a bounded queue.

The queue capacity equals the number of workers, so a producer blocks in
`WorkerPool.put` while every worker is busy and the queue is full.

Lifecycle:
    1. `start()` spawns the workers.
    2. The producer calls `put(path)` for each candidate file.
    3. `close()` announces that no more paths will come; workers drain the
       queue and exit.
    4. `join()` waits for the workers.

Stopping:
    - `stop()` (or a match callback returning `False`) sets a pool-wide flag.
      Workers exit before taking their next path and `put` refuses new paths.
    - A fired cancellation token has the same effect.

Faults:
    An exception raised while processing one path, including one raised by the
    match callback, is logged, recorded as a `WorkerFault`, and the worker moves
    on to the next path. A `BaseException` that is not an `Exception`
    (`SystemExit`, `KeyboardInterrupt`) is recorded the same way, then the pool
    is stopped and the exception ends that worker.
"""

from __future__ import annotations

import os
import queue
import threading
from typing import TYPE_CHECKING, Callable

from magicscan.config.logging import MagicScanLogger, get_logger
from magicscan.constants import DEFAULT_POLL_INTERVAL, WORKER_THREAD_PREFIX
from magicscan.errors import WorkerFault
from magicscan.matcher import classify

if TYPE_CHECKING:
    from collections.abc import Sequence

    from magicscan.cancellation import CancellationToken
    from magicscan.signatures.base import Signature

logger: MagicScanLogger = get_logger(__name__)

#: Callback invoked for every match; return False to stop the scan.
OnMatch = Callable[[str, str], bool]


def default_worker_count() -> int:
    """Return the default number of workers: the host's CPU count (at least 1)."""
    return max(1, os.cpu_count() or 1)


class WorkerPool:
    """Matcher threads consuming paths from a bounded queue.

    Args:
        signatures (Sequence[Signature]): Ordered signature list used by `classify`.
        on_match (OnMatch): Callback invoked from worker threads as
            `on_match(path, type_name)`. It must be safe to call concurrently.
        workers (int | None): Number of worker threads; defaults to
            `default_worker_count()`.
        token (CancellationToken | None): Optional cancellation token checked by
            workers before taking each path.
        poll_interval (float): Seconds a blocked queue operation waits before
            re-checking the stop and cancellation flags.

    Raises:
        ValueError: If `workers` is less than 1 or `poll_interval` is not positive.
    """

    def __init__(
        self,
        signatures: Sequence[Signature],
        on_match: OnMatch,
        *,
        workers: int | None = None,
        token: CancellationToken | None = None,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
    ) -> None:
        count: int = default_worker_count() if workers is None else workers
        if count < 1:
            raise ValueError(f"Worker count must be at least 1 (got {count})")
        if poll_interval <= 0:
            raise ValueError(f"Poll interval must be positive (got {poll_interval})")

        self.signatures: tuple[Signature, ...] = tuple(signatures)
        self.worker_count: int = count
        self._on_match: OnMatch = on_match
        self._token: CancellationToken | None = token
        self._poll_interval: float = poll_interval

        self._queue: queue.Queue[str] = queue.Queue(maxsize=count)
        self._closed = threading.Event()
        self._stop = threading.Event()
        self._lock = threading.Lock()
        self._threads: list[threading.Thread] = []
        self._faults: list[WorkerFault] = []
        self._processed: int = 0
        self._matched: int = 0

    # ------------------------------------------------------------------ state

    @property
    def stopped(self) -> bool:
        """True once a stop was requested (explicitly or by the match callback)."""
        return self._stop.is_set()

    @property
    def processed(self) -> int:
        """Number of paths taken from the queue and processed."""
        with self._lock:
            return self._processed

    @property
    def matched(self) -> int:
        """Number of matches delivered to the callback."""
        with self._lock:
            return self._matched

    @property
    def faults(self) -> tuple[WorkerFault, ...]:
        """Faults recorded so far."""
        with self._lock:
            return tuple(self._faults)

    def _should_exit(self) -> bool:
        return self._stop.is_set() or (self._token is not None and self._token.cancelled)

    # -------------------------------------------------------------- lifecycle

    def start(self) -> None:
        """Spawn the worker threads.

        Raises:
            RuntimeError: If the pool was already started.
        """
        if self._threads:
            raise RuntimeError("WorkerPool already started")
        for index in range(self.worker_count):
            thread = threading.Thread(
                target=self._run,
                name=f"{WORKER_THREAD_PREFIX}-{index}",
                daemon=True,
            )
            self._threads.append(thread)
            thread.start()
        logger.debug("Started %d worker(s)", self.worker_count)

    def put(self, path: str) -> bool:
        """Queue `path` for matching, blocking while the queue is full.

        Args:
            path (str): Candidate file path.

        Returns:
            bool: False (and the path is dropped) once the pool was stopped or the
                cancellation token fired.

        Raises:
            RuntimeError: If called after `close()`.
        """
        if self._closed.is_set():
            raise RuntimeError("WorkerPool is closed")
        while not self._should_exit():
            try:
                self._queue.put(path, timeout=self._poll_interval)
            except queue.Full:
                continue
            return True
        return False

    def stop(self) -> None:
        """Ask every worker to exit before taking its next path."""
        if not self._stop.is_set():
            logger.debug("Stop requested")
        self._stop.set()

    def close(self) -> None:
        """Signal that no more paths will be published."""
        self._closed.set()

    def join(self, timeout: float | None = None) -> None:
        """Wait for the workers to exit.

        Args:
            timeout (float | None): Optional per-thread timeout in seconds.
        """
        for thread in self._threads:
            thread.join(timeout)

    # ----------------------------------------------------------------- worker

    def _run(self) -> None:
        name: str = threading.current_thread().name
        logger.trace("%s started", name)
        while not self._should_exit():
            try:
                path: str = self._queue.get(timeout=self._poll_interval)
            except queue.Empty:
                # Once closed, nothing is added any more; emptiness is final.
                if self._closed.is_set() and self._queue.empty():
                    break
                continue
            try:
                self._process(path)
            except Exception as exc:
                self._record_fault(name, path, exc)
            except BaseException as exc:
                # This worker is going away; release the producer and the other workers.
                self._record_fault(name, path, exc)
                self.stop()
                raise
            finally:
                self._queue.task_done()
        logger.trace("%s exiting", name)

    def _process(self, path: str) -> None:
        sig: Signature | None = classify(path, self.signatures)
        with self._lock:
            self._processed += 1
        if sig is None:
            return
        with self._lock:
            self._matched += 1
        keep_going: bool = self._on_match(path, sig.type_name)
        if keep_going is False:
            logger.debug("Match callback requested stop at %s", path)
            self.stop()

    def _record_fault(self, worker: str, path: str, exc: BaseException) -> None:
        logger.error("Worker %s failed on %s: %s", worker, path, exc, exc_info=exc)
        with self._lock:
            self._faults.append(WorkerFault(worker=worker, path=path, error=exc))
