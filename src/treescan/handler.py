"""Handler capability consumed by the scanner, plus stock implementations."""

from __future__ import annotations

import os
import sys
import threading
from typing import Protocol, Sequence, TextIO

from treescan import DirectoryReadError
from treescan.filter import PathFilter


class Handler(Protocol):
    """Protocol for objects that process scan results.

    Both methods may be called from worker threads. When the scanner runs
    with a concurrency above 1, implementations must serialize their own
    writes to shared state.
    """

    def handle(self, path: str) -> None: ...

    def handle_error(self, error: DirectoryReadError) -> None: ...


class NullHandler:
    """Handler that discards files and errors.

    Used when ``Scanner.scan`` is given no handler, and for benchmarking.
    """

    def handle(self, path: str) -> None:
        pass

    def handle_error(self, error: DirectoryReadError) -> None:
        pass


class MemoryHandler:
    """Handler that stores discovered files and errors in memory.

    Attributes:
        files: Discovered file paths in invocation order.
        errors: Directory-read errors in invocation order.
    """

    def __init__(self) -> None:
        self.files: list[str] = []
        self.errors: list[DirectoryReadError] = []
        self._lock = threading.Lock()

    def handle(self, path: str) -> None:
        with self._lock:
            self.files.append(path)

    def handle_error(self, error: DirectoryReadError) -> None:
        with self._lock:
            self.errors.append(error)


class PrintHandler:
    """Handler that writes each discovered path as a line of text.

    Errors are not printed; they are kept in ``errors`` for the caller.
    """

    def __init__(self, stream: TextIO | None = None) -> None:
        """Initialize print handler.

        Args:
            stream: Text stream to write to. Defaults to ``sys.stdout``
                at call time.
        """
        self._stream = stream
        self.errors: list[DirectoryReadError] = []
        self._lock = threading.Lock()

    def handle(self, path: str) -> None:
        stream = self._stream if self._stream is not None else sys.stdout
        with self._lock:
            stream.write(path + "\n")

    def handle_error(self, error: DirectoryReadError) -> None:
        with self._lock:
            self.errors.append(error)


class FilteringHandler:
    """Handler that drops excluded files before delegating.

    Each file path is made relative to *root* and checked against every
    filter; the file is forwarded only when no filter excludes it.
    Errors are always forwarded.
    """

    def __init__(
        self,
        handler: Handler,
        root: str | os.PathLike[str],
        filters: Sequence[PathFilter],
    ) -> None:
        """Initialize filtering handler.

        Args:
            handler: Handler receiving the files that pass.
            root: Scan root used to compute relative paths.
            filters: Exclusion filters, applied in order.
        """
        self._handler = handler
        self._root = os.fspath(root)
        self._filters = tuple(filters)

    def handle(self, path: str) -> None:
        relative = os.path.relpath(path, self._root)
        if any(f.should_exclude(relative) for f in self._filters):
            return
        self._handler.handle(path)

    def handle_error(self, error: DirectoryReadError) -> None:
        self._handler.handle_error(error)
