"""Domain constants: categories, severities, statuses and engine rule ids."""

from enum import Enum


class Category(str, Enum):
    """The nine convention domains a rule can belong to."""

    STRUCTURE = "structure"
    TYPING = "typing"
    DATA_MODEL = "data-model"
    IMPORTS = "imports"
    NAMING = "naming"
    DOCSTRINGS = "docstrings"
    LOGGING = "logging"
    EXCEPTIONS = "exceptions"
    CONFIGURATION = "configuration"


class Severity(str, Enum):
    """Finding severity. Compare with rank, not with string ordering."""

    CRITICAL = "critical"
    WARNING = "warning"
    SUGGESTION = "suggestion"

    @property
    def rank(self) -> int:
        """Numeric rank: critical=3, warning=2, suggestion=1."""
        return SEVERITY_RANK[self]


SEVERITY_RANK: dict[Severity, int] = {
    Severity.CRITICAL: 3,
    Severity.WARNING: 2,
    Severity.SUGGESTION: 1,
}


class Status(str, Enum):
    """Category and overall report status."""

    PASS = "pass"
    FAIL = "fail"
    CRITICAL_FAIL = "critical-fail"


class RunMode(str, Enum):
    """CLI run mode."""

    REPORT = "report"
    FIX = "fix"
    FIX_DRY_RUN = "fix-dry-run"


class OutputFormat(str, Enum):
    """CLI output format."""

    TABLE = "table"
    STRUCTURED = "structured"


class ImportBucket(str, Enum):
    """Import classification buckets, in their required order."""

    STDLIB = "stdlib"
    EXTERNAL = "external"
    LOCAL = "local"

    @property
    def order(self) -> int:
        """Position of this bucket in a correctly ordered import block."""
        return BUCKET_ORDER[self]


BUCKET_ORDER: dict[ImportBucket, int] = {
    ImportBucket.STDLIB: 0,
    ImportBucket.EXTERNAL: 1,
    ImportBucket.LOCAL: 2,
}


class NamingConvention(str, Enum):
    """Casing conventions recognised by the naming matcher."""

    LOWER_SNAKE = "lower_snake"
    UPPER_CAMEL = "upper_camel"
    UPPER_SNAKE = "upper_snake"
    OTHER = "other"


class FixKind(str, Enum):
    """Whitelisted mutation kinds the auto-fixer knows how to apply."""

    REORDER_IMPORTS = "reorder-imports"
    CREATE_DIRECTORY = "create-directory"
    CREATE_MARKER = "create-marker"


class FixStatus(str, Enum):
    """Outcome of a single fix mutation."""

    PLANNED = "planned"
    APPLIED = "applied"
    UNCHANGED = "unchanged"
    SKIPPED = "skipped"
    FAILED = "failed"


# Rule ids emitted by the engine itself rather than by catalog evaluators.
FILE_UNREADABLE_RULE_ID = "file-unreadable"
RULE_EVALUATION_FAILED_RULE_ID = "rule-evaluation-failed"

EXIT_PASS = 0
EXIT_FAIL = 1
EXIT_CRITICAL_FAIL = 2
EXIT_SETUP_ERROR = 3
EXIT_CANCELLED = 130

STATUS_EXIT_CODES: dict[Status, int] = {
    Status.PASS: EXIT_PASS,
    Status.FAIL: EXIT_FAIL,
    Status.CRITICAL_FAIL: EXIT_CRITICAL_FAIL,
}

DEFAULT_INCLUDE_PATTERNS: tuple[str, ...] = ("*.py",)

DEFAULT_IGNORE_PATTERNS: tuple[str, ...] = (
    ".git",
    ".hg",
    ".svn",
    ".venv",
    "venv",
    "env",
    ".env",
    ".tox",
    ".nox",
    "__pycache__",
    ".mypy_cache",
    ".pytest_cache",
    ".ruff_cache",
    "build",
    "dist",
    "node_modules",
    "*.egg-info",
)

CONFIG_TOOL_SECTION = "convention-guard"
