"""Scanner façade: bounded concurrent dispatch of walk results to a handler.

One call to ``Scanner.scan`` runs the pipeline below and returns when every
piece of it has finished::

    walk() --emit--> files queue  --drain--> executor: handler.handle()
           --emit--> errors queue --drain--> executor: handler.handle_error()

Emitting an item takes a permit from a semaphore of size ``concurrency``
before the item is queued, and the handler task gives it back once the
handler returns. The walker therefore blocks whenever ``concurrency`` items
are in flight, and never buffers more than that.
"""

from __future__ import annotations

import logging
import os
import queue
import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any, Callable

from treescan import ConfigurationError, DirectoryReadError
from treescan.handler import Handler, NullHandler
from treescan.walker import walk

logger = logging.getLogger(__name__)

# End-of-stream marker put on each queue once the walk has returned.
_CLOSED = object()


class WaitGroup:
    """Counter of outstanding work that can be waited on until it is zero."""

    def __init__(self) -> None:
        self._count = 0
        self._cond = threading.Condition()

    def add(self, n: int = 1) -> None:
        with self._cond:
            self._count += n
            if self._count < 0:
                raise ValueError("WaitGroup counter went negative")
            if self._count == 0:
                self._cond.notify_all()

    def done(self) -> None:
        self.add(-1)

    def wait(self) -> None:
        with self._cond:
            self._cond.wait_for(lambda: self._count == 0)


class _ScanRun:
    """State for a single scan: streams, permits, barrier and workers."""

    def __init__(self, root: str, concurrency: int, handler: Handler) -> None:
        self._root = root
        self._handler = handler
        self._files: queue.Queue[Any] = queue.Queue()
        self._errors: queue.Queue[Any] = queue.Queue()
        self._permits = threading.BoundedSemaphore(concurrency)
        self._pending = WaitGroup()
        self._executor = ThreadPoolExecutor(
            max_workers=concurrency, thread_name_prefix="treescan-handler"
        )
        self._first_failure: BaseException | None = None
        self._failure_count = 0
        self._failures_lock = threading.Lock()

    def run(self) -> None:
        """Start the pipeline and block until it has fully drained.

        Raises:
            BaseException: The first exception raised by the handler or the
                walk, re-raised after all other work has completed.
        """
        threads = [
            threading.Thread(target=self._traverse, name="treescan-walk"),
            threading.Thread(
                target=self._drain,
                args=(self._files, self._handler.handle),
                name="treescan-files",
            ),
            threading.Thread(
                target=self._drain,
                args=(self._errors, self._handler.handle_error),
                name="treescan-errors",
            ),
        ]
        self._pending.add(len(threads))
        try:
            for thread in threads:
                thread.start()
            self._pending.wait()
        finally:
            self._executor.shutdown(wait=True)

        for thread in threads:
            thread.join()

        if self._first_failure is not None:
            if self._failure_count > 1:
                logger.warning(
                    "%d handler failures during scan of %s; raising the first",
                    self._failure_count,
                    self._root,
                )
            raise self._first_failure

    def _traverse(self) -> None:
        try:
            for item in walk(self._root):
                if isinstance(item, DirectoryReadError):
                    self._emit(self._errors, item)
                else:
                    self._emit(self._files, item)
        except BaseException as exc:
            self._record_failure(exc)
        finally:
            # Closed only after the walk has returned, on every exit path.
            self._files.put(_CLOSED)
            self._errors.put(_CLOSED)
            self._pending.done()

    def _emit(self, stream: queue.Queue[Any], item: Any) -> None:
        self._permits.acquire()
        stream.put(item)

    def _drain(self, stream: queue.Queue[Any], target: Callable[[Any], None]) -> None:
        try:
            for item in iter(stream.get, _CLOSED):
                self._pending.add()
                try:
                    self._executor.submit(self._invoke, target, item)
                except BaseException as exc:
                    # Keep draining so the walker is never left waiting on
                    # a permit that no task will release.
                    self._permits.release()
                    self._pending.done()
                    self._record_failure(exc)
        finally:
            self._pending.done()

    def _invoke(self, target: Callable[[Any], None], item: Any) -> None:
        try:
            target(item)
        except BaseException as exc:
            logger.debug("Handler failed on %s", item, exc_info=True)
            self._record_failure(exc)
        finally:
            self._permits.release()
            self._pending.done()

    def _record_failure(self, exc: BaseException) -> None:
        with self._failures_lock:
            self._failure_count += 1
            if self._first_failure is None:
                self._first_failure = exc


@dataclass
class Scanner:
    """Recursively scan a directory and pass its files to a handler.

    The configuration may be changed between calls to ``scan``; each call
    allocates its own queues, permits and barrier. A single instance must
    not run two scans at the same time.

    Attributes:
        path: Directory to scan. Discovered paths are joined onto it as
            given, so a relative path produces relative results.
        concurrency: Maximum number of handler calls (``handle`` and
            ``handle_error`` combined) running at once. With the default of
            1, handling is serialized and follows discovery order.
    """

    path: str | os.PathLike[str]
    concurrency: int = 1

    def scan(self, handler: Handler | None = None) -> None:
        """Scan ``path`` and block until every result has been handled.

        Files and directory-read errors are discovered in sorted depth-first
        order. With ``concurrency > 1`` the order in which the handler sees
        them is not guaranteed.

        Args:
            handler: Receives files and errors. ``None`` discards them.

        Raises:
            ConfigurationError: If ``concurrency`` is less than 1. Raised
                before the filesystem is touched.
            BaseException: Whatever the handler raised first, re-raised once
                the scan has otherwise completed.
        """
        if self.concurrency < 1:
            raise ConfigurationError(
                f"Scanner.concurrency must be >= 1, got {self.concurrency}"
            )
        if handler is None:
            handler = NullHandler()

        root = os.fspath(self.path)
        logger.debug("Scanning %s with concurrency %d", root, self.concurrency)
        _ScanRun(root, self.concurrency, handler).run()
        logger.debug("Finished scanning %s", root)


def scan(
    path: str | os.PathLike[str],
    handler: Handler | None = None,
    concurrency: int = 1,
) -> None:
    """Scan *path* with a one-off ``Scanner``.

    Args:
        path: Directory to scan.
        handler: Receives files and errors. ``None`` discards them.
        concurrency: Maximum number of concurrent handler calls.
    """
    Scanner(path, concurrency).scan(handler)
