"""Domain entities: project tree, file facts, findings, reports and fix plans."""

import threading
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Optional, TypedDict

from convention_guard.domain.constants import (
    Category,
    FixKind,
    FixStatus,
    ImportBucket,
    NamingConvention,
    Severity,
    Status,
)
from convention_guard.domain.exceptions import FileUnreadableError

if TYPE_CHECKING:
    from convention_guard.domain.catalog import RuleDefinition


# -----------------------------------------------------------------------------
# File facts. Each record is produced by one matcher and never mutated.
# -----------------------------------------------------------------------------


@dataclass(frozen=True)
class ImportRecord:
    """One module-level import. `leading` is False once a non-import statement came before it."""

    module: str
    bound_names: tuple[str, ...]
    bucket: ImportBucket
    line: int
    level: int = 0
    is_from: bool = False
    leading: bool = True


@dataclass(frozen=True)
class DeclaredName:
    """A declared identifier with the kind it was declared as and its casing."""

    name: str
    kind: str  # function | variable | class | constant
    convention: NamingConvention
    line: int


@dataclass(frozen=True)
class DocstringBlock:
    """A docstring and the section headers detected in it."""

    line: int
    sections: frozenset[str]
    is_single_line: bool = False


@dataclass(frozen=True)
class DeprecatedSpelling:
    """A legacy annotation spelling and its preferred replacement."""

    spelling: str
    replacement: str
    line: int


@dataclass(frozen=True)
class FunctionSignature:
    """Annotation, docstring and raise facts for one function-like declaration."""

    name: str
    qualname: str
    line: int
    is_method: bool
    is_public: bool
    params: tuple[str, ...]
    missing_param_annotations: tuple[str, ...]
    missing_return_annotation: bool
    deprecated_spellings: tuple[DeprecatedSpelling, ...]
    docstring: Optional[DocstringBlock]
    returns_value: bool
    raises: tuple[str, ...]


@dataclass(frozen=True)
class TypeDeclaration:
    """A class declaration with its base-type references."""

    name: str
    line: int
    bases: tuple[str, ...]
    decorators: tuple[str, ...]
    is_public: bool
    docstring: Optional[DocstringBlock]
    is_nested: bool = False


@dataclass(frozen=True)
class DecoratorUse:
    """A decorator applied to a method of a model-like type."""

    name: str
    method: str
    line: int


@dataclass(frozen=True)
class ModelDeclaration:
    """A model-like type recognised by base name or marker decorator."""

    name: str
    line: int
    bases: tuple[str, ...]
    validators: tuple[DecoratorUse, ...]
    config_markers: tuple[str, ...]


@dataclass(frozen=True)
class ExceptHandlerFact:
    """An except clause and the hygiene-relevant shape of its body."""

    line: int
    type_names: tuple[str, ...]
    is_bare: bool
    is_broad: bool
    is_empty: bool
    reraises: bool


@dataclass(frozen=True)
class CallFact:
    """A call site by dotted callee name."""

    name: str
    line: int


@dataclass(frozen=True)
class LiteralMatch:
    """A configuration-safety literal hit. The matched value is redacted."""

    kind: str  # connection-string | config-load | secret-assignment
    line: int
    snippet: str
    identifier: str = ""


@dataclass(frozen=True)
class ParseDegraded:
    """Marker recorded when a matcher could not extract facts for a file."""

    reason: str
    line: Optional[int] = None


@dataclass(frozen=True)
class FileFacts:
    """Memoized structural extraction results for one source file."""

    imports: tuple[ImportRecord, ...] = ()
    import_order_violations: tuple[ImportRecord, ...] = ()
    unused_imports: tuple[tuple[str, int], ...] = ()
    names: tuple[DeclaredName, ...] = ()
    types: tuple[TypeDeclaration, ...] = ()
    models: tuple[ModelDeclaration, ...] = ()
    functions: tuple[FunctionSignature, ...] = ()
    except_handlers: tuple[ExceptHandlerFact, ...] = ()
    calls: tuple[CallFact, ...] = ()
    literals: tuple[LiteralMatch, ...] = ()
    exported_names: frozenset[str] = frozenset()
    degraded: Optional[ParseDegraded] = None

    @property
    def is_degraded(self) -> bool:
        """True when the syntax tree could not be built for this file."""
        return self.degraded is not None


# -----------------------------------------------------------------------------
# Project tree.
# -----------------------------------------------------------------------------


class SourceFile:
    """
    A source file in the project tree.

    Content is read lazily on first access and memoized; facts are computed
    once by the first caller of get_facts() and owned by the file afterwards.
    """

    def __init__(
        self,
        path: str,
        absolute_path: Path,
        reader: Callable[[Path], bytes],
    ) -> None:
        self.path = path
        self.absolute_path = absolute_path
        self._reader = reader
        self._content: Optional[str] = None
        self._facts: Optional[FileFacts] = None
        self._lock = threading.Lock()

    @property
    def name(self) -> str:
        """Basename of the file."""
        return self.path.rsplit("/", 1)[-1]

    @property
    def directory(self) -> str:
        """Relative directory of the file ('.' for the root)."""
        return self.path.rsplit("/", 1)[0] if "/" in self.path else "."

    @property
    def content(self) -> str:
        """Decoded UTF-8 content. Raises FileUnreadableError on failure."""
        if self._content is None:
            try:
                raw = self._reader(self.absolute_path)
            except OSError as exc:
                raise FileUnreadableError(self.path, exc.strerror or str(exc)) from exc
            try:
                self._content = raw.decode("utf-8")
            except UnicodeDecodeError as exc:
                raise FileUnreadableError(self.path, "not valid UTF-8") from exc
        return self._content

    def get_facts(self, builder: Callable[["SourceFile"], FileFacts]) -> FileFacts:
        """Return memoized facts, building them with builder on first access."""
        with self._lock:
            if self._facts is None:
                self._facts = builder(self)
            return self._facts

    def __repr__(self) -> str:
        return f"SourceFile({self.path!r})"


@dataclass(frozen=True)
class ProjectTree:
    """Immutable in-memory model of a project directory for one run."""

    root: Path
    files: tuple[SourceFile, ...]
    directories: frozenset[str] = frozenset()
    load_findings: tuple["Finding", ...] = ()

    def has_directory(self, path: str) -> bool:
        """True if the relative directory was seen while loading."""
        return path in self.directories

    def has_file(self, path: str) -> bool:
        """True if a loaded file has this relative path."""
        return any(f.path == path for f in self.files)

    def files_in(self, directory: str) -> list[SourceFile]:
        """Files whose parent directory is exactly directory."""
        return [f for f in self.files if f.directory == directory]

    @property
    def top_level_names(self) -> frozenset[str]:
        """Importable top-level package/module names found in the tree."""
        names: set[str] = set()
        for f in self.files:
            parts = f.path.split("/")
            if len(parts) == 1:
                names.add(parts[0].removesuffix(".py"))
                continue
            # Packages directly at the root or under a src/ layout.
            if parts[0] == "src" and len(parts) > 2:
                names.add(parts[1])
            elif parts[0] == "src":
                names.add(parts[1].removesuffix(".py"))
            else:
                names.add(parts[0])
        return frozenset(names)


# -----------------------------------------------------------------------------
# Findings and reports.
# -----------------------------------------------------------------------------


@dataclass(frozen=True)
class FixDescriptor:
    """A mechanical correction attached to a finding of a fixable rule."""

    kind: FixKind
    path: str
    description: str = ""
    marker_file: str = ""


class FindingDict(TypedDict):
    """Serialization shape of a Finding."""

    rule_id: str
    category: str
    severity: str
    path: str
    line: Optional[int]
    message: str
    suggested_fix: Optional[dict[str, str]]


@dataclass(frozen=True)
class Finding:
    """A single reported rule violation or observation. Immutable once produced."""

    rule_id: str
    category: Category
    severity: Severity
    path: str
    message: str
    line: Optional[int] = None
    suggested_fix: Optional[FixDescriptor] = None

    @classmethod
    def from_rule(
        cls,
        rule: "RuleDefinition",
        path: str,
        message: str,
        line: Optional[int] = None,
        suggested_fix: Optional[FixDescriptor] = None,
    ) -> "Finding":
        """Build a Finding carrying the category and severity of rule."""
        return cls(
            rule_id=rule.id,
            category=rule.category,
            severity=rule.severity,
            path=path,
            message=message,
            line=line,
            suggested_fix=suggested_fix if rule.fixable else None,
        )

    def sort_key(self) -> tuple[int, str, int, str, str]:
        """Severity desc, then path, then line asc, then rule id, then message."""
        return (
            -self.severity.rank,
            self.path,
            self.line if self.line is not None else -1,
            self.rule_id,
            self.message,
        )

    def to_dict(self) -> FindingDict:
        """Convert to dictionary for serialization."""
        fix: Optional[dict[str, str]] = None
        if self.suggested_fix is not None:
            fix = {
                "kind": self.suggested_fix.kind.value,
                "path": self.suggested_fix.path,
                "description": self.suggested_fix.description,
            }
        return {
            "rule_id": self.rule_id,
            "category": self.category.value,
            "severity": self.severity.value,
            "path": self.path,
            "line": self.line,
            "message": self.message,
            "suggested_fix": fix,
        }


@dataclass(frozen=True)
class CategorySummary:
    """Per-category counts and status."""

    category: Category
    status: Status
    counts: dict[Severity, int]

    def to_dict(self) -> dict[str, object]:
        """Convert to dictionary for serialization."""
        return {
            "status": self.status.value,
            "counts": {sev.value: self.counts.get(sev, 0) for sev in Severity},
        }


# -----------------------------------------------------------------------------
# Fix plans.
# -----------------------------------------------------------------------------


@dataclass(frozen=True)
class FixMutation:
    """One file-level mutation derived from fixable findings."""

    kind: FixKind
    path: str
    rule_ids: tuple[str, ...]
    pre_image_hash: Optional[str]
    description: str
    order_insensitive_buckets: tuple[str, ...] = ()
    marker_file: str = ""

    def to_dict(self) -> dict[str, object]:
        """Convert to dictionary for serialization."""
        return {
            "kind": self.kind.value,
            "path": self.path,
            "rule_ids": list(self.rule_ids),
            "pre_image_hash": self.pre_image_hash,
            "description": self.description,
        }


@dataclass(frozen=True)
class FixResult:
    """Outcome of applying (or planning) one mutation."""

    mutation: FixMutation
    status: FixStatus
    reason: str = ""

    def to_dict(self) -> dict[str, object]:
        """Convert to dictionary for serialization."""
        out = self.mutation.to_dict()
        out["status"] = self.status.value
        out["reason"] = self.reason
        return out


@dataclass(frozen=True)
class FixPlan:
    """Ordered mutations plus their results once applied."""

    mutations: tuple[FixMutation, ...] = ()
    results: tuple[FixResult, ...] = ()

    @property
    def is_empty(self) -> bool:
        """True when no mutation was planned."""
        return not self.mutations

    @property
    def has_failures(self) -> bool:
        """True when any mutation failed to apply."""
        return any(r.status == FixStatus.FAILED for r in self.results)

    def to_list(self) -> list[dict[str, object]]:
        """Results if applied, otherwise the bare mutations."""
        if self.results:
            return [r.to_dict() for r in self.results]
        return [m.to_dict() for m in self.mutations]


@dataclass(frozen=True)
class ReportSummary:
    """Complete, deterministically ordered outcome of a run."""

    overall_status: Status
    categories: tuple[CategorySummary, ...]
    findings: tuple[Finding, ...]
    fix_plan: Optional[FixPlan] = None

    def to_dict(self) -> dict[str, object]:
        """Convert to dictionary for the structured output format."""
        out: dict[str, object] = {
            "overall_status": self.overall_status.value,
            "categories": {c.category.value: c.to_dict() for c in self.categories},
            "findings": [f.to_dict() for f in self.findings],
        }
        if self.fix_plan is not None:
            out["fix_plan"] = self.fix_plan.to_list()
        return out

