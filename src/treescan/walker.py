"""Traversal engine: sorted, depth-first directory walk with an explicit stack."""

from __future__ import annotations

import logging
import os
from typing import Iterator

from treescan import DirectoryReadError

logger = logging.getLogger(__name__)


def _list_dir(path: str) -> Iterator[os.DirEntry[str]]:
    """Return an iterator over the entries of *path*, sorted by name.

    Raises:
        OSError: If the directory cannot be listed.
    """
    with os.scandir(path) as it:
        entries = sorted(it, key=lambda e: e.name)
    return iter(entries)


def walk(root: str | os.PathLike[str]) -> Iterator[str | DirectoryReadError]:
    """Walk *root* and yield discovered files and directory-read errors.

    Entries are visited in name order. Directories are descended into as
    soon as they are met, before their next sibling, so the output is a
    pre-order depth-first listing. Symbolic links are skipped.

    Paths are built with ``os.path.join`` onto the root exactly as given,
    so a relative root produces relative paths.

    A directory that cannot be listed yields one ``DirectoryReadError`` and
    its subtree is abandoned. The walk itself never raises ``OSError``.

    Args:
        root: Directory to walk.

    Yields:
        str | DirectoryReadError: File paths and errors in discovery order.
    """
    top = os.fspath(root)

    # One iterator per open directory; the innermost is on top.
    stack: list[Iterator[os.DirEntry[str]]] = []
    try:
        stack.append(_list_dir(top))
    except OSError as exc:
        logger.debug("Cannot read root directory: %s", top)
        yield DirectoryReadError(top, exc)
        return

    while stack:
        entry = next(stack[-1], None)
        if entry is None:
            stack.pop()
            continue

        try:
            if entry.is_symlink():
                # Not followed and not reported.
                logger.debug("Skipping symlink: %s", entry.path)
                continue
            is_dir = entry.is_dir(follow_symlinks=False)
        except OSError:
            logger.debug("Cannot stat: %s", entry.path)
            continue

        if not is_dir:
            yield entry.path
            continue

        try:
            stack.append(_list_dir(entry.path))
        except OSError as exc:
            logger.debug("Cannot read directory: %s", entry.path)
            yield DirectoryReadError(entry.path, exc)
