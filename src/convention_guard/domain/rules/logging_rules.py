"""Logging rules: no print() and the project's structured logging library."""

from __future__ import annotations

from typing import TYPE_CHECKING

from convention_guard.domain.catalog import SCOPE_FILE
from convention_guard.domain.entities import Finding

if TYPE_CHECKING:
    from convention_guard.domain.catalog import RuleDefinition
    from convention_guard.domain.config import MatcherSettings
    from convention_guard.domain.entities import FileFacts, ProjectTree, SourceFile


class PrintCallRule:
    """print() is not a logging call."""

    check: str = "print-call"
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
        names = rule.option_list("calls", ("print", "pprint.pprint"))
        preferred = rule.option_str("preferred", "a logger")
        return [
            Finding.from_rule(
                rule,
                path=source_file.path,
                line=call.line,
                message=f"'{call.name}()' call; use {preferred} instead",
            )
            for call in facts.calls
            if call.name in names
        ]


class LoggingLibraryRule:
    """Modules should log through the preferred library, not a discouraged one."""

    check: str = "logging-library"
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
        preferred = rule.option_str("preferred", "structlog")
        discouraged = set(rule.option_list("discouraged", ("logging",)))
        for record in facts.imports:
            if record.level == 0 and record.module.split(".", 1)[0] in discouraged:
                return [
                    Finding.from_rule(
                        rule,
                        path=source_file.path,
                        line=record.line,
                        message=f"Module logs through '{record.module}'; use {preferred}",
                    )
                ]
        return []
