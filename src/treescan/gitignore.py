"""Gitignore integration — exclude files matched by the root .gitignore."""

from __future__ import annotations

import logging
import os
from pathlib import Path, PurePath

from pathspec import GitIgnoreSpec

logger = logging.getLogger(__name__)


def load_gitignore_spec(root: str | os.PathLike[str]) -> GitIgnoreSpec | None:
    """Compile the ``.gitignore`` found directly in *root*.

    Args:
        root: Scan root directory.

    Returns:
        The compiled spec, or ``None`` when the file is missing or unreadable.
    """
    gitignore_path = Path(root) / ".gitignore"
    try:
        lines = gitignore_path.read_text(encoding="utf-8").splitlines()
    except OSError:
        logger.debug("Cannot read .gitignore: %s", gitignore_path)
        return None
    return GitIgnoreSpec.from_lines(lines)


class GitignoreFilter:
    """Path filter backed by a compiled gitignore spec."""

    def __init__(self, spec: GitIgnoreSpec) -> None:
        self._spec = spec

    def should_exclude(self, relative_path: str) -> bool:
        # gitignore patterns are written with forward slashes
        return self._spec.match_file(PurePath(relative_path).as_posix())
