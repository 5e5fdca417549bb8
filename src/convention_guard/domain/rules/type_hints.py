"""Typing rules: complete signatures and modern annotation spellings."""

from __future__ import annotations

from typing import TYPE_CHECKING

from convention_guard.domain.catalog import SCOPE_FILE
from convention_guard.domain.entities import Finding

if TYPE_CHECKING:
    from convention_guard.domain.catalog import RuleDefinition
    from convention_guard.domain.config import MatcherSettings
    from convention_guard.domain.entities import FileFacts, ProjectTree, SourceFile


class MissingAnnotationsRule:
    """All function and method signatures must be fully annotated."""

    check: str = "missing-annotations"
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
        """One finding per incomplete signature naming what is missing."""
        if source_file is None or facts is None:
            return []
        findings: list[Finding] = []
        for func in facts.functions:
            missing = [f"parameter '{name}'" for name in func.missing_param_annotations]
            if func.missing_return_annotation:
                missing.append("return type")
            if not missing:
                continue
            findings.append(
                Finding.from_rule(
                    rule,
                    path=source_file.path,
                    line=func.line,
                    message=f"Missing annotation in {func.qualname}: {', '.join(missing)}",
                )
            )
        return findings


class DeprecatedTypingSpellingRule:
    """Legacy typing aliases (List, Optional, ...) in signatures."""

    check: str = "deprecated-typing-spelling"
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
        return [
            Finding.from_rule(
                rule,
                path=source_file.path,
                line=spelling.line,
                message=f"Use '{spelling.replacement}' instead of '{spelling.spelling}' in {func.qualname}",
            )
            for func in facts.functions
            for spelling in func.deprecated_spellings
        ]
