"""Docstring rules: presence on public API and Google-style sections."""

from __future__ import annotations

from typing import TYPE_CHECKING

from convention_guard.domain.catalog import SCOPE_FILE
from convention_guard.domain.entities import Finding

if TYPE_CHECKING:
    from convention_guard.domain.catalog import RuleDefinition
    from convention_guard.domain.config import MatcherSettings
    from convention_guard.domain.entities import FileFacts, ProjectTree, SourceFile

SECTION_ARGS = "args"
SECTION_RETURNS = "returns"
SECTION_RAISES = "raises"


class MissingDocstringRule:
    """Public functions, methods and top-level classes need a docstring."""

    check: str = "missing-docstring"
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
        findings: list[Finding] = []
        for declaration in facts.types:
            if declaration.is_public and declaration.docstring is None:
                findings.append(
                    Finding.from_rule(
                        rule,
                        path=source_file.path,
                        line=declaration.line,
                        message=f"Public class '{declaration.name}' has no docstring",
                    )
                )
        for func in facts.functions:
            if func.is_public and func.docstring is None:
                kind = "method" if func.is_method else "function"
                findings.append(
                    Finding.from_rule(
                        rule,
                        path=source_file.path,
                        line=func.line,
                        message=f"Public {kind} '{func.qualname}' has no docstring",
                    )
                )
        return findings


class DocstringSectionsRule:
    """
    Docstrings must document parameters, return values and raised errors.

    Args is required when the function takes parameters (self/cls excluded),
    Returns when it returns or yields a value, Raises when it raises
    explicitly. Set the `skip_single_line` option to accept one-line
    docstrings as summaries.
    """

    check: str = "docstring-sections"
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
        skip_single_line = rule.option_bool("skip_single_line", False)
        findings: list[Finding] = []
        for func in facts.functions:
            doc = func.docstring
            if doc is None or not func.is_public:
                continue
            if skip_single_line and not doc.sections and doc.is_single_line:
                continue
            required: list[tuple[str, str]] = []
            if func.params:
                required.append((SECTION_ARGS, "Args"))
            if func.returns_value:
                required.append((SECTION_RETURNS, "Returns"))
            if func.raises:
                required.append((SECTION_RAISES, "Raises"))
            for section, header in required:
                if section in doc.sections:
                    continue
                findings.append(
                    Finding.from_rule(
                        rule,
                        path=source_file.path,
                        line=func.line,
                        message=f"Docstring of '{func.qualname}' is missing a {header} section",
                    )
                )
        return findings
