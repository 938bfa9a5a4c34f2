"""Shared fixtures for treescan tests."""

from __future__ import annotations

import os
import threading
import time
from pathlib import Path
from typing import Callable

import pytest

from treescan import DirectoryReadError


@pytest.fixture
def data_tree(tmp_path: Path) -> Path:
    """Create the minimal data directory.

    Structure::

        data/
        ├── file1.txt
        └── subdir/
            ├── file2.txt
            └── file3.txt
    """
    root = tmp_path / "data"
    (root / "subdir").mkdir(parents=True)
    (root / "file1.txt").write_text("1")
    (root / "subdir" / "file2.txt").write_text("2")
    (root / "subdir" / "file3.txt").write_text("3")
    return root


@pytest.fixture
def nested_tree(tmp_path: Path) -> Path:
    """Tree where directories sit between files in name order.

    Structure::

        root/
        ├── a.txt
        ├── b/
        │   ├── b1.txt
        │   └── c/
        │       └── c1.txt
        ├── b.txt
        ├── d/
        │   ├── d1.txt
        │   └── locked/
        │       └── secret.txt
        └── z.txt
    """
    root = tmp_path / "root"
    (root / "b" / "c").mkdir(parents=True)
    (root / "d" / "locked").mkdir(parents=True)
    (root / "a.txt").write_text("a")
    (root / "b" / "b1.txt").write_text("b1")
    (root / "b" / "c" / "c1.txt").write_text("c1")
    (root / "b.txt").write_text("b")
    (root / "d" / "d1.txt").write_text("d1")
    (root / "d" / "locked" / "secret.txt").write_text("s")
    (root / "z.txt").write_text("z")
    return root


@pytest.fixture
def deny_dirs(monkeypatch: pytest.MonkeyPatch) -> Callable[..., None]:
    """Make ``os.scandir`` raise ``PermissionError`` for the given paths.

    Works regardless of the user the tests run as, unlike ``chmod``.
    """
    real_scandir = os.scandir
    denied: set[str] = set()

    def fake_scandir(path: str = ".") -> object:
        if os.fspath(path) in denied:
            raise PermissionError(13, "Permission denied", os.fspath(path))
        return real_scandir(path)

    monkeypatch.setattr(os, "scandir", fake_scandir)

    def _deny(*paths: str | os.PathLike[str]) -> None:
        denied.update(os.fspath(p) for p in paths)

    return _deny


@pytest.fixture
def scandir_calls(monkeypatch: pytest.MonkeyPatch) -> list[str]:
    """Record every directory passed to ``os.scandir``."""
    real_scandir = os.scandir
    calls: list[str] = []

    def spy(path: str = ".") -> object:
        calls.append(os.fspath(path))
        return real_scandir(path)

    monkeypatch.setattr(os, "scandir", spy)
    return calls


class RecordingHandler:
    """Handler that records invocation order and peak concurrency.

    Attributes:
        events: ``("file", path)`` and ``("error", path)`` in call order.
        peak: Highest number of calls observed running at once.
    """

    def __init__(self, delay: float = 0.0) -> None:
        self.events: list[tuple[str, str]] = []
        self.peak = 0
        self._active = 0
        self._delay = delay
        self._lock = threading.Lock()

    def _enter(self, kind: str, path: str) -> None:
        with self._lock:
            self._active += 1
            self.peak = max(self.peak, self._active)
            self.events.append((kind, path))

    def _exit(self) -> None:
        with self._lock:
            self._active -= 1

    def handle(self, path: str) -> None:
        self._enter("file", path)
        time.sleep(self._delay)
        self._exit()

    def handle_error(self, error: DirectoryReadError) -> None:
        self._enter("error", error.path)
        time.sleep(self._delay)
        self._exit()


@pytest.fixture
def recorder() -> type[RecordingHandler]:
    """Return the ``RecordingHandler`` class for building instrumented handlers."""
    return RecordingHandler
