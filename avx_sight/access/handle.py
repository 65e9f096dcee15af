"""Scoped read access to a granted library folder."""

import os
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

from avx_sight.exceptions import AccessDeniedError
from avx_sight.models import Grant


class AccessibleDirectory:
    """Handle to a folder the process has been granted permission to read.

    Reads must happen inside an ``access()`` bracket. Beginning the bracket
    verifies the folder is still a readable, searchable directory; ending it
    is guaranteed even when the body raises. Brackets nest, so several
    concurrent readers may share one handle.

    Example:
        >>> directory = AccessibleDirectory(Path("/Library"))
        >>> with directory.access():
        ...     entries = os.listdir(directory.path)
    """

    def __init__(self, path: Path | str, grant: Grant | None = None):
        """Initialize the handle.

        Args:
            path: Folder this handle grants access to. An empty string is
                  accepted and yields a handle with nothing to read.
            grant: Persisted grant backing this handle, if any
        """
        self._raw_path = str(path)
        self.path = Path(path).expanduser()
        self.grant = grant
        self._depth = 0
        self._lock = threading.Lock()

    @property
    def empty(self) -> bool:
        """True when the handle was created for a zero-length path."""
        return not self._raw_path

    @property
    def in_use(self) -> bool:
        """True while at least one access bracket is open."""
        with self._lock:
            return self._depth > 0

    @contextmanager
    def access(self) -> Iterator[Path]:
        """Open an access bracket around reads of this folder.

        Yields:
            The folder path

        Raises:
            AccessDeniedError: If access cannot begin
        """
        self._begin()
        try:
            yield self.path
        finally:
            self._end()

    def _begin(self) -> None:
        if not self.empty:
            if not self.path.is_dir():
                raise AccessDeniedError(
                    str(self.path), "Failed to start access: not a directory"
                )
            if not os.access(self.path, os.R_OK | os.X_OK):
                raise AccessDeniedError(
                    str(self.path), "Failed to start access: permission denied"
                )
        with self._lock:
            self._depth += 1

    def _end(self) -> None:
        with self._lock:
            self._depth -= 1

    def __repr__(self) -> str:
        return f"AccessibleDirectory({str(self.path)!r})"
