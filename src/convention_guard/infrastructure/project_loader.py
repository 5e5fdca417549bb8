"""Project Tree Loader - walk a root directory into an immutable ProjectTree."""

import logging
import os
from collections.abc import Callable
from pathlib import Path
from typing import Optional

from convention_guard.domain.constants import FILE_UNREADABLE_RULE_ID, Category, Severity
from convention_guard.domain.entities import Finding, ProjectTree, SourceFile
from convention_guard.domain.exceptions import RootNotFoundError, RootNotReadableError
from convention_guard.domain.patterns import PathPatterns
from convention_guard.domain.protocols import ProjectLoaderProtocol

logger = logging.getLogger(__name__)


class ProjectTreeLoader(ProjectLoaderProtocol):
    """
    Builds ProjectTree instances from the filesystem.

    Symbolic links are followed only while they resolve inside the root, and
    a directory reached twice (a link loop) is pruned. File contents are not
    read here; each SourceFile reads itself on first access.
    """

    def __init__(self, reader: Optional[Callable[[Path], bytes]] = None) -> None:
        self._reader = reader or Path.read_bytes

    def load(self, root: Path, include: tuple[str, ...], ignore: tuple[str, ...]) -> ProjectTree:
        """
        Walk root and return the tree.

        Args:
            root: Project root directory.
            include: File patterns to keep.
            ignore: Directory and file patterns to skip.

        Returns:
            ProjectTree with files sorted by relative path.

        Raises:
            RootNotFoundError: If root is missing or not a directory.
            RootNotReadableError: If root cannot be listed.
        """
        if not root.is_dir():
            raise RootNotFoundError(str(root))
        real_root = root.resolve()
        try:
            os.listdir(real_root)
        except OSError as exc:
            raise RootNotReadableError(str(root), exc.strerror or str(exc)) from exc

        files: dict[str, SourceFile] = {}
        directories: set[str] = set()
        load_findings: list[Finding] = []
        visited: set[Path] = {real_root}

        def on_error(exc: OSError) -> None:
            rel = self._relative(Path(exc.filename), real_root) if exc.filename else "."
            logger.warning("Cannot list directory %s: %s", rel, exc.strerror or exc)
            load_findings.append(
                Finding(
                    rule_id=FILE_UNREADABLE_RULE_ID,
                    category=Category.STRUCTURE,
                    severity=Severity.WARNING,
                    path=rel,
                    message=f"Directory could not be listed: {exc.strerror or exc}",
                )
            )

        for dirpath, dirnames, filenames in os.walk(real_root, onerror=on_error, followlinks=True):
            current = Path(dirpath)
            rel_dir = self._relative(current, real_root)
            kept: list[str] = []
            # Real directories first, so a link never shadows its own target.
            for name in sorted(dirnames, key=lambda n: ((current / n).is_symlink(), n)):
                rel = self._join(rel_dir, name)
                if PathPatterns.matches(rel, ignore):
                    continue
                real = (current / name).resolve()
                if not self._is_within(real, real_root) or real in visited:
                    logger.debug("Not following %s -> %s", rel, real)
                    continue
                visited.add(real)
                directories.add(rel)
                kept.append(name)
            # Pruning in place stops os.walk from descending.
            dirnames[:] = kept
            for name in sorted(filenames):
                rel = self._join(rel_dir, name)
                if not PathPatterns.applies(rel, include, ignore):
                    continue
                absolute = current / name
                if absolute.is_symlink() and not self._is_within(absolute.resolve(), real_root):
                    logger.debug("Skipping %s: link escapes the root", rel)
                    continue
                files[rel] = SourceFile(path=rel, absolute_path=absolute, reader=self._reader)

        logger.debug("Loaded %d files and %d directories from %s", len(files), len(directories), real_root)
        return ProjectTree(
            root=real_root,
            files=tuple(files[p] for p in sorted(files)),
            directories=frozenset(directories),
            load_findings=tuple(load_findings),
        )

    @staticmethod
    def _relative(path: Path, root: Path) -> str:
        rel = path.relative_to(root).as_posix()
        return rel if rel else "."

    @staticmethod
    def _join(rel_dir: str, name: str) -> str:
        return name if rel_dir == "." else f"{rel_dir}/{name}"

    @staticmethod
    def _is_within(path: Path, root: Path) -> bool:
        return path == root or root in path.parents
