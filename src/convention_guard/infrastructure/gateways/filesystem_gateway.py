"""Filesystem Gateway - Infrastructure implementation of FileSystemProtocol."""

import os
import tempfile
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

from convention_guard.domain.protocols import FileSystemProtocol, PathLockProtocol


class FileSystemGateway(FileSystemProtocol):
    """Infrastructure implementation of FileSystemProtocol using pathlib."""

    def read_bytes(self, path: Path) -> bytes:
        """Read a file's raw bytes."""
        return path.read_bytes()

    def write_atomic(self, path: Path, content: bytes) -> None:
        """Write to a temp file in the same directory, then rename over path."""
        fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "wb") as f:
                f.write(content)
                f.flush()
                os.fsync(f.fileno())
            if path.exists():
                os.chmod(tmp_name, path.stat().st_mode & 0o7777)
            os.replace(tmp_name, path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    def exists(self, path: Path) -> bool:
        """Check if path exists."""
        return path.exists()

    def is_directory(self, path: Path) -> bool:
        """Check if path is a directory."""
        return path.is_dir()

    def make_dir(self, path: Path) -> None:
        """Create one directory; its parent must exist."""
        path.mkdir()

    def remove_empty_dir(self, path: Path) -> None:
        """Remove a directory, failing if anything was put in it."""
        path.rmdir()

    def create_file(self, path: Path, content: bytes = b"") -> None:
        """Create a new file exclusively. Raises FileExistsError rather than overwrite."""
        with path.open("xb") as f:
            f.write(content)


class PathLockRegistry(PathLockProtocol):
    """
    One lock per resolved path, created on demand.

    A single registry is shared by every fixer in the process so two runs
    never write the same file at once.
    """

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._locks: dict[str, threading.Lock] = {}

    @contextmanager
    def lock_for(self, path: Path) -> Iterator[threading.Lock]:
        """Hold the lock of path for the duration of the with-block."""
        key = os.path.realpath(path)
        with self._guard:
            lock = self._locks.setdefault(key, threading.Lock())
        with lock:
            yield lock
