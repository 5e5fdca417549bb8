"""Naming rules: casing of files, directories and declared identifiers."""

from __future__ import annotations

from fnmatch import fnmatchcase
from typing import TYPE_CHECKING

from convention_guard.domain.catalog import SCOPE_FILE, SCOPE_PROJECT
from convention_guard.domain.constants import NamingConvention
from convention_guard.domain.entities import Finding
from convention_guard.domain.matchers.naming import KIND_CLASS, KIND_CONSTANT, KIND_FUNCTION, KIND_VARIABLE
from convention_guard.domain.patterns import Casing, PathPatterns

if TYPE_CHECKING:
    from convention_guard.domain.catalog import RuleDefinition
    from convention_guard.domain.config import MatcherSettings
    from convention_guard.domain.entities import FileFacts, ProjectTree, SourceFile

_CONVENTION_LABELS: dict[NamingConvention, str] = {
    NamingConvention.LOWER_SNAKE: "snake_case",
    NamingConvention.UPPER_CAMEL: "UpperCamelCase",
    NamingConvention.UPPER_SNAKE: "UPPER_SNAKE_CASE",
}


class FileNamingRule:
    """Module file names must be snake_case."""

    check: str = "file-naming"
    scope: str = SCOPE_FILE
    requires_syntax: bool = False

    def evaluate(
        self,
        tree: ProjectTree,
        source_file: SourceFile | None,
        facts: FileFacts | None,
        rule: RuleDefinition,
        settings: MatcherSettings,
    ) -> list[Finding]:
        if source_file is None:
            return []
        stem = source_file.name.rsplit(".", 1)[0]
        if Casing.conforms(stem, NamingConvention.LOWER_SNAKE):
            return []
        return [
            Finding.from_rule(
                rule,
                path=source_file.path,
                message=f"File name '{source_file.name}' is not snake_case",
            )
        ]


class DirectoryNamingRule:
    """Directories that hold Python files must be snake_case."""

    check: str = "directory-naming"
    scope: str = SCOPE_PROJECT
    requires_syntax: bool = False

    def evaluate(
        self,
        tree: ProjectTree,
        source_file: SourceFile | None,
        facts: FileFacts | None,
        rule: RuleDefinition,
        settings: MatcherSettings,
    ) -> list[Finding]:
        exempt = rule.option_list("exempt")
        directories: set[str] = set()
        for f in tree.files:
            parts = f.path.split("/")[:-1]
            for depth in range(1, len(parts) + 1):
                directories.add("/".join(parts[:depth]))
        findings: list[Finding] = []
        for directory in sorted(directories):
            name = directory.rsplit("/", 1)[-1]
            if PathPatterns.matches(directory, exempt) or Casing.conforms(name, NamingConvention.LOWER_SNAKE):
                continue
            findings.append(
                Finding.from_rule(
                    rule,
                    path=directory,
                    message=f"Directory name '{name}' is not snake_case",
                )
            )
        return findings


class DeclaredNameRule:
    """
    Declared names of one kind must follow one casing convention.

    Registered four times: functions and variables in snake_case, classes in
    UpperCamelCase, constants in UPPER_SNAKE_CASE. Names matching a pattern
    in the `allow` option are skipped (unittest's setUp, visitor methods).
    """

    scope: str = SCOPE_FILE
    requires_syntax: bool = True

    def __init__(self, check: str, kind: str, expected: NamingConvention) -> None:
        self.check = check
        self.kind = kind
        self.expected = expected

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
        allow = rule.option_list("allow")
        label = _CONVENTION_LABELS[self.expected]
        findings: list[Finding] = []
        for declared in facts.names:
            if declared.kind != self.kind:
                continue
            if any(fnmatchcase(declared.name, pattern) for pattern in allow):
                continue
            if Casing.conforms(declared.name, self.expected):
                continue
            findings.append(
                Finding.from_rule(
                    rule,
                    path=source_file.path,
                    line=declared.line,
                    message=f"{self.kind.capitalize()} name '{declared.name}' is not {label}",
                )
            )
        return findings

    @classmethod
    def defaults(cls) -> list[DeclaredNameRule]:
        """The four declared-name evaluators."""
        return [
            cls("function-naming", KIND_FUNCTION, NamingConvention.LOWER_SNAKE),
            cls("variable-naming", KIND_VARIABLE, NamingConvention.LOWER_SNAKE),
            cls("class-naming", KIND_CLASS, NamingConvention.UPPER_CAMEL),
            cls("constant-naming", KIND_CONSTANT, NamingConvention.UPPER_SNAKE),
        ]
