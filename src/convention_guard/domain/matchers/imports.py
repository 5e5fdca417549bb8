"""Import matcher: module-level imports, bucket classification, order and unused candidates."""

from __future__ import annotations

import re
import sys
from collections.abc import Iterator

import astroid

from convention_guard.domain.config import MatcherSettings
from convention_guard.domain.constants import ImportBucket
from convention_guard.domain.entities import ImportRecord

_IDENTIFIER = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")


class ImportMatcher:
    """
    Extract module-level imports and classify them as stdlib, external or local.

    Imports inside `if TYPE_CHECKING:` blocks and inside functions are not
    part of the module's import block and are skipped. `__future__` imports
    are skipped too because they must come first regardless of bucket.
    """

    def __init__(self, settings: MatcherSettings, local_names: frozenset[str]) -> None:
        self._settings = settings
        self._local_names = local_names
        self._stdlib = frozenset(sys.stdlib_module_names) | frozenset(settings.stdlib_extra)

    def classify(self, module: str, level: int = 0) -> ImportBucket:
        """Bucket for a module name. Relative imports are always local."""
        if level > 0:
            return ImportBucket.LOCAL
        top = module.split(".", 1)[0]
        for prefix in self._settings.local_prefixes:
            if module == prefix or module.startswith(prefix + "."):
                return ImportBucket.LOCAL
        if top in self._stdlib:
            return ImportBucket.STDLIB
        if top in self._local_names:
            return ImportBucket.LOCAL
        return ImportBucket.EXTERNAL

    def extract(self, module: astroid.nodes.Module) -> tuple[ImportRecord, ...]:
        """Return module-level import records in source order."""
        records: list[ImportRecord] = []
        leading_end = self.leading_block_end(module)
        for node in self._module_level_imports(module):
            leading = node.lineno < leading_end
            if isinstance(node, astroid.nodes.ImportFrom):
                if node.modname == "__future__":
                    continue
                bound = tuple(alias or name for name, alias in node.names)
                records.append(
                    ImportRecord(
                        module=node.modname,
                        bound_names=bound,
                        bucket=self.classify(node.modname, node.level or 0),
                        line=node.lineno,
                        level=node.level or 0,
                        is_from=True,
                        leading=leading,
                    )
                )
                continue
            for name, alias in node.names:
                records.append(
                    ImportRecord(
                        module=name,
                        bound_names=(alias or name.split(".", 1)[0],),
                        bucket=self.classify(name),
                        line=node.lineno,
                        leading=leading,
                    )
                )
        return tuple(records)

    @staticmethod
    def order_violations(records: tuple[ImportRecord, ...]) -> tuple[ImportRecord, ...]:
        """Records that appear after an import of a later bucket."""
        violations: list[ImportRecord] = []
        highest = -1
        for record in records:
            if record.bucket.order < highest:
                violations.append(record)
            highest = max(highest, record.bucket.order)
        return tuple(violations)

    @staticmethod
    def leading_block_end(module: astroid.nodes.Module) -> int:
        """
        First line after the leading import block.

        The block is the run of source lines holding only imports after the
        module docstring. An import sharing a line with any other statement
        ends it, since only whole import lines can be regrouped.
        """
        shared: set[int] = set()
        for node in module.body:
            if not isinstance(node, (astroid.nodes.Import, astroid.nodes.ImportFrom)):
                shared.update((node.fromlineno, node.tolineno))
        for node in module.body:
            is_import = isinstance(node, (astroid.nodes.Import, astroid.nodes.ImportFrom))
            if not is_import or node.fromlineno in shared or node.tolineno in shared:
                return node.fromlineno
        return sys.maxsize

    @staticmethod
    def unused_candidates(
        module: astroid.nodes.Module,
        source: str,
        records: tuple[ImportRecord, ...],
        exported: frozenset[str],
    ) -> tuple[tuple[str, int], ...]:
        """
        Naive token scan for imported names never mentioned elsewhere.

        Import statement lines are blanked before scanning, so a name used only
        in its own import counts as unused. Names in `__all__` and star imports
        are never reported.
        """
        lines = source.splitlines()
        for node in ImportMatcher._module_level_imports(module):
            start = node.fromlineno or node.lineno
            end = node.tolineno or start
            for idx in range(start - 1, min(end, len(lines))):
                lines[idx] = ""
        used = set(_IDENTIFIER.findall("\n".join(lines)))
        unused: list[tuple[str, int]] = []
        for record in records:
            for name in record.bound_names:
                if name == "*" or name in exported or name in used:
                    continue
                unused.append((name, record.line))
        return tuple(unused)

    @staticmethod
    def exported_names(module: astroid.nodes.Module) -> frozenset[str]:
        """String entries of a literal module-level `__all__`."""
        names: set[str] = set()
        for node in module.body:
            if not isinstance(node, (astroid.nodes.Assign, astroid.nodes.AugAssign, astroid.nodes.AnnAssign)):
                continue
            targets = node.targets if isinstance(node, astroid.nodes.Assign) else [node.target]
            if not any(getattr(t, "name", None) == "__all__" for t in targets):
                continue
            value = node.value
            if isinstance(value, (astroid.nodes.List, astroid.nodes.Tuple)):
                for elt in value.elts:
                    if isinstance(elt, astroid.nodes.Const) and isinstance(elt.value, str):
                        names.add(elt.value)
        return frozenset(names)

    @staticmethod
    def _module_level_imports(
        module: astroid.nodes.Module,
    ) -> Iterator[astroid.nodes.Import | astroid.nodes.ImportFrom]:
        for node in module.body:
            if isinstance(node, (astroid.nodes.Import, astroid.nodes.ImportFrom)):
                yield node
