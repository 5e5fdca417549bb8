"""Structure rules: expected directories, package markers and one class per file."""

from __future__ import annotations

from typing import TYPE_CHECKING

from convention_guard.domain.catalog import SCOPE_FILE, SCOPE_PROJECT
from convention_guard.domain.constants import FixKind
from convention_guard.domain.entities import Finding, FixDescriptor
from convention_guard.domain.patterns import PathPatterns

if TYPE_CHECKING:
    from convention_guard.domain.catalog import RuleDefinition
    from convention_guard.domain.config import MatcherSettings
    from convention_guard.domain.entities import FileFacts, ProjectTree, SourceFile

PACKAGE_MARKER = "__init__.py"


class ExpectedDirectoryRule:
    """Every directory in the `required` option must exist under the root."""

    check: str = "expected-directory"
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
        """One finding per missing directory, with a create-directory fix."""
        markers = rule.options.get("markers", {})
        findings: list[Finding] = []
        for directory in rule.option_list("required", ("src", "tests")):
            if tree.has_directory(directory):
                continue
            marker = markers.get(directory, "") if isinstance(markers, dict) else ""
            findings.append(
                Finding.from_rule(
                    rule,
                    path=directory,
                    message=f"Expected directory '{directory}' is missing",
                    suggested_fix=FixDescriptor(
                        kind=FixKind.CREATE_DIRECTORY,
                        path=directory,
                        description=f"Create {directory}/" + (f" with {marker}" if marker else ""),
                        marker_file=str(marker),
                    ),
                )
            )
        return findings


class PackageMarkerRule:
    """
    Directories holding Python files below a package root must be packages.

    The `package_roots` option lists the roots ("src" by default; "." means
    every directory in the tree). The roots themselves are not packages.
    """

    check: str = "package-marker"
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
        """One finding per directory missing its marker, with a create-marker fix."""
        roots = rule.option_list("package_roots", ("src",))
        exempt = rule.option_list("exempt")
        findings: list[Finding] = []
        for directory in sorted({f.directory for f in tree.files}):
            if directory == "." or directory in roots:
                continue
            if not self._under_root(directory, roots) or PathPatterns.matches(directory, exempt):
                continue
            marker = f"{directory}/{PACKAGE_MARKER}"
            if tree.has_file(marker):
                continue
            findings.append(
                Finding.from_rule(
                    rule,
                    path=directory,
                    message=f"Package directory '{directory}' has no {PACKAGE_MARKER}",
                    suggested_fix=FixDescriptor(
                        kind=FixKind.CREATE_MARKER,
                        path=marker,
                        description=f"Create {marker}",
                    ),
                )
            )
        return findings

    @staticmethod
    def _under_root(directory: str, roots: tuple[str, ...]) -> bool:
        return any(root == "." or directory.startswith(root + "/") for root in roots)


class OneClassPerFileRule:
    """A module should declare at most `max_classes` public top-level classes."""

    check: str = "one-class-per-file"
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
        limit = rule.option_int("max_classes", 1)
        public = [t for t in facts.types if t.is_public]
        if len(public) <= limit:
            return []
        names = ", ".join(t.name for t in public)
        return [
            Finding.from_rule(
                rule,
                path=source_file.path,
                line=public[limit].line,
                message=f"{len(public)} public classes in one module ({names}); split one concern per file",
            )
        ]
