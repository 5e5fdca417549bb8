"""Ports implemented by Infrastructure and consumed by use cases."""

from collections.abc import Callable
from contextlib import AbstractContextManager
from pathlib import Path
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from convention_guard.domain.catalog import RuleCatalog
    from convention_guard.domain.constants import ImportBucket
    from convention_guard.domain.entities import ProjectTree, ReportSummary


ImportClassifier = Callable[[str, int], "ImportBucket"]


class TelemetryPort(Protocol):
    """User-visible progress on stderr. Never carries report content."""

    def step(self, message: str) -> None: ...
    def warning(self, message: str) -> None: ...
    def error(self, message: str) -> None: ...


class ProjectLoaderProtocol(Protocol):
    """Builds the immutable ProjectTree for a run."""

    def load(self, root: Path, include: tuple[str, ...], ignore: tuple[str, ...]) -> "ProjectTree":
        """Walk root and return the tree. Raises RootNotFoundError/RootNotReadableError."""
        ...


class FileSystemProtocol(Protocol):
    """Filesystem operations the auto-fixer needs. Writes are atomic."""

    def read_bytes(self, path: Path) -> bytes:
        """Read a file's raw bytes."""
        ...

    def write_atomic(self, path: Path, content: bytes) -> None:
        """Replace path's content via a temp file and rename."""
        ...

    def exists(self, path: Path) -> bool:
        """Check if path exists."""
        ...

    def is_directory(self, path: Path) -> bool:
        """Check if path is a directory."""
        ...

    def make_dir(self, path: Path) -> None:
        """Create a single directory. Raises FileExistsError if present."""
        ...

    def remove_empty_dir(self, path: Path) -> None:
        """Remove a directory created by a failed mutation."""
        ...

    def create_file(self, path: Path, content: bytes = b"") -> None:
        """Create a new file. Raises FileExistsError rather than overwrite."""
        ...


class FixerGatewayProtocol(Protocol):
    """Source-level transformations behind the auto-fixer."""

    def import_buckets(self, source: str, classify: ImportClassifier) -> set["ImportBucket"]:
        """Buckets present in the leading module-level import block."""
        ...

    def reorder_imports(self, source: str, classify: ImportClassifier) -> str:
        """Return source with the leading import block grouped by bucket."""
        ...


class ReporterProtocol(Protocol):
    """Renders a ReportSummary to stdout."""

    def render(self, summary: "ReportSummary") -> None:
        """Write the report."""
        ...

    def render_catalog(self, catalog: "RuleCatalog") -> None:
        """Write the effective rule catalog."""
        ...


class PathLockProtocol(Protocol):
    """Per-path mutual exclusion shared by every writer in the process."""

    def lock_for(self, path: Path) -> AbstractContextManager[object]:
        """Context manager holding the exclusive lock for path."""
        ...
