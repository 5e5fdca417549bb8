"""Run-scoped state threaded explicitly through the engine. Nothing here is process-wide."""

import os
import threading
from dataclasses import dataclass
from pathlib import Path

from convention_guard.domain.catalog import RuleCatalog
from convention_guard.domain.entities import FileFacts, ProjectTree, SourceFile
from convention_guard.domain.matchers.facts_builder import FileFactsBuilder


class CancellationToken:
    """Cooperative cancellation flag shared by the scheduler and the caller."""

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        """Request cancellation. Idempotent."""
        self._event.set()

    @property
    def is_cancelled(self) -> bool:
        """True once cancel() was called."""
        return self._event.is_set()


@dataclass(frozen=True)
class RunContext:
    """Everything one evaluation needs: tree, resolved catalog, facts builder and token."""

    tree: ProjectTree
    catalog: RuleCatalog
    facts_builder: FileFactsBuilder
    token: CancellationToken
    workers: int = 0

    @property
    def root(self) -> Path:
        """Project root of the tree."""
        return self.tree.root

    @property
    def pool_size(self) -> int:
        """Configured workers, or the available parallelism."""
        return self.workers if self.workers > 0 else (os.cpu_count() or 1)

    def facts_for(self, source_file: SourceFile) -> FileFacts:
        """Memoized facts of source_file, built on first access."""
        return source_file.get_facts(self.facts_builder)

    @classmethod
    def create(
        cls,
        tree: ProjectTree,
        catalog: RuleCatalog,
        token: CancellationToken | None = None,
        workers: int = 0,
    ) -> "RunContext":
        """Build a context with a facts builder bound to the catalog settings and tree."""
        return cls(
            tree=tree,
            catalog=catalog,
            facts_builder=FileFactsBuilder(catalog.settings, tree.top_level_names),
            token=token or CancellationToken(),
            workers=workers,
        )
