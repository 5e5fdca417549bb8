"""Configuration-safety rules over the literal scan results."""

from __future__ import annotations

from typing import TYPE_CHECKING

from convention_guard.domain.catalog import SCOPE_FILE
from convention_guard.domain.entities import Finding
from convention_guard.domain.matchers.configuration_safety import (
    KIND_CONFIG_LOAD,
    KIND_CONNECTION_STRING,
    KIND_SECRET_ASSIGNMENT,
)

if TYPE_CHECKING:
    from convention_guard.domain.catalog import RuleDefinition
    from convention_guard.domain.config import MatcherSettings
    from convention_guard.domain.entities import FileFacts, LiteralMatch, ProjectTree, SourceFile


class LiteralRule:
    """
    Report one kind of configuration-safety literal.

    The scan is textual, so these rules still run when the file does not
    parse. Excluded paths (tests, examples, templates) are never scanned.
    """

    scope: str = SCOPE_FILE
    requires_syntax: bool = False

    def __init__(self, check: str, kind: str, label: str, advice: str) -> None:
        self.check = check
        self.kind = kind
        self.label = label
        self.advice = advice

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
                line=literal.line,
                message=self._message(literal),
            )
            for literal in facts.literals
            if literal.kind == self.kind
        ]

    def _message(self, literal: LiteralMatch) -> str:
        subject = f"{self.label} '{literal.identifier}'" if literal.identifier else self.label
        return f"{subject}: {literal.snippet} ({self.advice})"

    @classmethod
    def defaults(cls) -> list[LiteralRule]:
        """The three configuration-safety evaluators."""
        return [
            cls(
                "hardcoded-connection-string",
                KIND_CONNECTION_STRING,
                "Hardcoded connection string",
                "read it from the environment",
            ),
            cls(
                "hardcoded-secret",
                KIND_SECRET_ASSIGNMENT,
                "Hardcoded secret",
                "read it from the environment or a secret store",
            ),
            cls(
                "static-config-load",
                KIND_CONFIG_LOAD,
                "Static config file load",
                "use environment-driven settings",
            ),
        ]
