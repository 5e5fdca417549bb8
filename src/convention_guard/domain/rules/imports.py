"""Import rules: bucket order (stdlib, external, local) and unused imports."""

from __future__ import annotations

from typing import TYPE_CHECKING

from convention_guard.domain.catalog import SCOPE_FILE
from convention_guard.domain.constants import FixKind
from convention_guard.domain.entities import Finding, FixDescriptor

if TYPE_CHECKING:
    from convention_guard.domain.catalog import RuleDefinition
    from convention_guard.domain.config import MatcherSettings
    from convention_guard.domain.entities import FileFacts, ProjectTree, SourceFile


class ImportOrderRule:
    """
    One finding per file, at the first import that breaks bucket order.

    The reorder fix is offered only when a misplaced import sits in the
    leading import block; imports after other statements are reported for a
    manual move.
    """

    check: str = "import-order"
    scope: str = SCOPE_FILE
    requires_syntax: bool = True

    def evaluate(
        self,
        tree: ProjectTree,
        source_file: SourceFile | None,
        facts: FileFacts | None,
        rule: RuleDefinition,
        settings: MatcherSettings,
    ) -> list[Finding]:
        if source_file is None or facts is None or not facts.import_order_violations:
            return []
        first = facts.import_order_violations[0]
        count = len(facts.import_order_violations)
        fix: FixDescriptor | None = None
        if first.leading:
            fix = FixDescriptor(
                kind=FixKind.REORDER_IMPORTS,
                path=source_file.path,
                description="Regroup imports: stdlib, external, local",
            )
        return [
            Finding.from_rule(
                rule,
                path=source_file.path,
                line=first.line,
                message=(
                    f"Import '{first.module or '.'}' ({first.bucket.value}) is out of order; "
                    f"group imports as stdlib, external, local ({count} misplaced)"
                ),
                suggested_fix=fix,
            )
        ]


class UnusedImportRule:
    """Imported names never referenced in the module."""

    check: str = "unused-import"
    scope: str = SCOPE_FILE
    requires_syntax: bool = True

    def evaluate(
        self,
        tree: ProjectTree,
        source_file: SourceFile | None,
        facts: FileFacts | None,
        rule: RuleDefinition,
        settings: MatcherSettings,
    ) -> list[Finding]:
        if source_file is None or facts is None:
            return []
        # Package markers re-export by convention.
        if source_file.name in rule.option_list("exempt_files", ("__init__.py",)):
            return []
        return [
            Finding.from_rule(
                rule,
                path=source_file.path,
                line=line,
                message=f"'{name}' imported but unused",
            )
            for name, line in facts.unused_imports
        ]
