"""LibCST Transformers for code fixes."""

from collections.abc import Sequence
from itertools import takewhile
from typing import Optional, Union

import libcst as cst
from libcst.helpers import get_full_name_for_node

from convention_guard.domain.constants import ImportBucket
from convention_guard.domain.protocols import ImportClassifier

ModuleStatement = Union[cst.SimpleStatementLine, cst.BaseCompoundStatement]


class ReorderImportsTransformer(cst.CSTTransformer):
    """
    Stable re-sort of the leading module-level import block by bucket.

    The block is the run of import-only statement lines after the module
    docstring. `__future__` imports stay first. Relative order inside a bucket
    is preserved, comments above an import move with it, and buckets are
    separated by one blank line. An already ordered block is returned as is.
    """

    def __init__(self, classify: ImportClassifier) -> None:
        self.classify = classify
        self.buckets: set[ImportBucket] = set()
        self.changed = False

    def leave_Module(self, original_node: cst.Module, updated_node: cst.Module) -> cst.Module:
        body = list(updated_node.body)
        start, end = self.import_block(body)
        futures = sum(1 for _ in takewhile(self._is_future, body[start:end]))
        units, split = self._units(body[start + futures:end])
        if not units:
            return updated_node
        self.buckets = {bucket for bucket, _ in units}
        ordered = sorted(units, key=lambda unit: unit[0].order)
        if not split and all(a[1] is b[1] for a, b in zip(units, ordered)):
            return updated_node
        self.changed = True
        prefix = list(takewhile(lambda line: line.comment is None, units[0][1].leading_lines))
        relaid: list[ModuleStatement] = []
        previous: Optional[ImportBucket] = None
        for bucket, stmt in ordered:
            comments = [line for line in stmt.leading_lines if line.comment is not None]
            if previous is None:
                lines = prefix + comments
            elif bucket != previous:
                lines = [cst.EmptyLine()] + comments
            else:
                lines = comments
            relaid.append(stmt.with_changes(leading_lines=lines))
            previous = bucket
        return updated_node.with_changes(body=[*body[: start + futures], *relaid, *body[end:]])

    @staticmethod
    def import_block(body: Sequence[ModuleStatement]) -> tuple[int, int]:
        """Index range [start, end) of the leading import statement lines."""
        start = 1 if body and ReorderImportsTransformer._is_docstring(body[0]) else 0
        end = start
        while end < len(body) and ReorderImportsTransformer._is_import_line(body[end]):
            end += 1
        return start, end

    def _units(
        self, statements: Sequence[ModuleStatement]
    ) -> tuple[list[tuple[ImportBucket, cst.SimpleStatementLine]], bool]:
        """Classified statement lines. `import a, b` spanning buckets is split into one line per name."""
        units: list[tuple[ImportBucket, cst.SimpleStatementLine]] = []
        split = False
        for stmt in statements:
            if not isinstance(stmt, cst.SimpleStatementLine):
                raise TypeError(f"Expected an import line, got {type(stmt).__name__}")
            first = stmt.body[0]
            if isinstance(first, cst.Import) and len(stmt.body) == 1 and len(first.names) > 1:
                buckets = [self.classify(self._alias_name(alias), 0) for alias in first.names]
                if len(set(buckets)) > 1:
                    split = True
                    last = len(first.names) - 1
                    for index, (alias, bucket) in enumerate(zip(first.names, buckets)):
                        single = cst.Import(names=[alias.with_changes(comma=cst.MaybeSentinel.DEFAULT)])
                        units.append(
                            (
                                bucket,
                                cst.SimpleStatementLine(
                                    body=[single],
                                    leading_lines=stmt.leading_lines if index == 0 else [],
                                    trailing_whitespace=(
                                        stmt.trailing_whitespace if index == last else cst.TrailingWhitespace()
                                    ),
                                ),
                            )
                        )
                    continue
            units.append((self._bucket_of(first), stmt))
        return units, split

    def _bucket_of(self, node: cst.BaseSmallStatement) -> ImportBucket:
        if isinstance(node, cst.Import):
            return self.classify(self._alias_name(node.names[0]), 0)
        if isinstance(node, cst.ImportFrom):
            module = get_full_name_for_node(node.module) if node.module is not None else ""
            return self.classify(module or "", len(node.relative))
        raise TypeError(f"Expected an import statement, got {type(node).__name__}")

    @staticmethod
    def _alias_name(alias: cst.ImportAlias) -> str:
        return get_full_name_for_node(alias.name) or ""

    @staticmethod
    def _is_docstring(stmt: ModuleStatement) -> bool:
        return (
            isinstance(stmt, cst.SimpleStatementLine)
            and len(stmt.body) == 1
            and isinstance(stmt.body[0], cst.Expr)
            and isinstance(stmt.body[0].value, (cst.SimpleString, cst.ConcatenatedString))
        )

    @staticmethod
    def _is_import_line(stmt: ModuleStatement) -> bool:
        return isinstance(stmt, cst.SimpleStatementLine) and all(
            isinstance(small, (cst.Import, cst.ImportFrom)) for small in stmt.body
        )

    @staticmethod
    def _is_future(stmt: ModuleStatement) -> bool:
        if not isinstance(stmt, cst.SimpleStatementLine):
            return False
        first = stmt.body[0]
        return (
            isinstance(first, cst.ImportFrom)
            and not first.relative
            and first.module is not None
            and get_full_name_for_node(first.module) == "__future__"
        )
