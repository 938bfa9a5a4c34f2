"""treescan — recursive file scanner with bounded concurrent handling."""

from __future__ import annotations

__version__ = "0.1.0"


class TreescanError(Exception):
    """Base class for errors raised by treescan."""


class ConfigurationError(TreescanError):
    """Invalid scanner configuration.

    Raised synchronously by ``Scanner.scan`` before any filesystem access.
    This is a programming error on the caller's side and is never retried.
    """


class DirectoryReadError(TreescanError):
    """A directory could not be listed during a scan.

    Delivered to ``Handler.handle_error`` rather than raised. Traversal of
    the failing subtree stops; siblings and ancestors are unaffected.

    Attributes:
        path: The directory path, joined from the scan root as given.
        error: The underlying ``OSError``.
    """

    def __init__(self, path: str, error: OSError) -> None:
        super().__init__(path, error)
        self.path = path
        self.error = error
        self.__cause__ = error

    @property
    def errno(self) -> int | None:
        return self.error.errno

    def __str__(self) -> str:
        reason = self.error.strerror or str(self.error)
        return f"cannot read directory '{self.path}': {reason}"
