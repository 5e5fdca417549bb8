"""Exception rules: domain-specific hierarchies, naming, placement and handler hygiene."""

from __future__ import annotations

from typing import TYPE_CHECKING

from convention_guard.domain.catalog import SCOPE_FILE
from convention_guard.domain.entities import Finding

if TYPE_CHECKING:
    from convention_guard.domain.catalog import RuleDefinition
    from convention_guard.domain.config import MatcherSettings
    from convention_guard.domain.entities import FileFacts, ProjectTree, SourceFile, TypeDeclaration

_EXCEPTION_SUFFIXES = ("Error", "Exception")


class ExceptionClasses:
    """Identify exception classes among a file's type declarations."""

    @staticmethod
    def find(facts: FileFacts, settings: MatcherSettings) -> list[TypeDeclaration]:
        """Classes whose base looks like an exception, or is a local exception class."""
        builtin = set(settings.builtin_error_bases) | set(settings.broad_exception_names)
        local: set[str] = set()
        found: list[TypeDeclaration] = []
        for declaration in facts.types:
            if any(
                base in builtin or base in local or base.endswith(_EXCEPTION_SUFFIXES)
                for base in declaration.bases
            ):
                local.add(declaration.name)
                found.append(declaration)
        return found


class ExceptionBaseTypeRule:
    """
    Errors derive from a module base error, and code raises domain errors.

    In each file at most one class (the module's base error) may derive
    directly from a builtin error base. Raising a broad builtin such as
    Exception is flagged as well.
    """

    check: str = "exception-base-type"
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
        builtin = set(settings.builtin_error_bases)
        roots = [t for t in ExceptionClasses.find(facts, settings) if builtin.intersection(t.bases)]
        for declaration in roots[1:]:
            findings.append(
                Finding.from_rule(
                    rule,
                    path=source_file.path,
                    line=declaration.line,
                    message=(
                        f"'{declaration.name}' derives from a builtin error base; "
                        f"derive from the module base error '{roots[0].name}'"
                    ),
                )
            )
        broad = set(settings.broad_exception_names)
        for func in facts.functions:
            for name in func.raises:
                if name in broad:
                    findings.append(
                        Finding.from_rule(
                            rule,
                            path=source_file.path,
                            line=func.line,
                            message=f"'{func.qualname}' raises {name}; raise a domain-specific error",
                        )
                    )
        return findings


class ExceptionNamingRule:
    """Exception classes carry the configured suffix (Error)."""

    check: str = "exception-naming"
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
        if source_file is None or facts is None or not settings.error_suffix:
            return []
        return [
            Finding.from_rule(
                rule,
                path=source_file.path,
                line=declaration.line,
                message=f"Exception class '{declaration.name}' should end with '{settings.error_suffix}'",
            )
            for declaration in ExceptionClasses.find(facts, settings)
            if not declaration.name.endswith(settings.error_suffix)
        ]


class DomainExceptionsFileRule:
    """Exception classes live in the module's exceptions file."""

    check: str = "domain-exceptions-file"
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
        if source_file is None or facts is None or source_file.name in settings.exception_files:
            return []
        target = settings.exception_files[0] if settings.exception_files else "exceptions.py"
        return [
            Finding.from_rule(
                rule,
                path=source_file.path,
                line=declaration.line,
                message=f"Exception class '{declaration.name}' is declared outside {target}",
            )
            for declaration in ExceptionClasses.find(facts, settings)
        ]


class ExceptionHygieneRule:
    """Bare except, broad except without re-raise, or empty except body."""

    check: str = "exception-hygiene"
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
        """Check every except handler. A bare handler yields one finding only."""
        if source_file is None or facts is None:
            return []
        findings: list[Finding] = []
        for handler in facts.except_handlers:
            messages: list[str] = []
            if handler.is_bare:
                messages.append("Bare 'except:' catches everything; catch a specific error or re-raise")
            else:
                if handler.is_broad and not handler.reraises and not handler.is_empty:
                    caught = "/".join(handler.type_names)
                    messages.append(f"'except {caught}:' without re-raise may swallow errors; re-raise or narrow")
                if handler.is_empty:
                    messages.append("Empty except body swallows errors; log, handle or re-raise")
            for message in messages:
                findings.append(
                    Finding.from_rule(rule, path=source_file.path, line=handler.line, message=message)
                )
        return findings
