"""Path filtering: fnmatch-based exclusion on path components."""

from __future__ import annotations

import os
from fnmatch import fnmatch
from typing import Protocol


class PathFilter(Protocol):
    """Protocol for exclusion filters applied to scan results.

    Paths are relative to the scan root and use the OS separator.
    """

    def should_exclude(self, relative_path: str) -> bool: ...


class PatternFilter:
    """Filter files by fnmatch patterns.

    A pattern matching any component of the path excludes it, so naming
    a directory excludes every file below it.
    """

    def __init__(self, patterns: list[str] | None = None) -> None:
        """Initialize pattern filter.

        Args:
            patterns: Optional fnmatch pattern list.
        """
        self._patterns: list[str] = list(patterns) if patterns else []

    def should_exclude(self, relative_path: str) -> bool:
        """Return whether a path should be excluded.

        Args:
            relative_path: File path relative to the scan root.

        Returns:
            bool: ``True`` when any configured pattern matches a component.
        """
        if not self._patterns:
            return False
        parts = relative_path.split(os.sep)
        return any(fnmatch(part, pat) for part in parts for pat in self._patterns)
