"""Unit tests for typing, data-model, import, docstring, logging, exception and configuration rules."""

from convention_guard.domain.catalog import RuleDefinition
from convention_guard.domain.config import MatcherSettings
from convention_guard.domain.constants import Category, FixKind, Severity
from convention_guard.domain.rules.configuration import LiteralRule
from convention_guard.domain.rules.data_model import (
    DeprecatedValidatorRule,
    LegacyModelConfigRule,
    ModelBaseTypeRule,
)
from convention_guard.domain.rules.docstrings import DocstringSectionsRule, MissingDocstringRule
from convention_guard.domain.rules.exceptions import (
    DomainExceptionsFileRule,
    ExceptionBaseTypeRule,
    ExceptionHygieneRule,
    ExceptionNamingRule,
)
from convention_guard.domain.rules.imports import ImportOrderRule, UnusedImportRule
from convention_guard.domain.rules.logging_rules import LoggingLibraryRule, PrintCallRule
from convention_guard.domain.rules.type_hints import DeprecatedTypingSpellingRule, MissingAnnotationsRule

SETTINGS = MatcherSettings()


def _rule(
    check: str,
    category: Category,
    severity: Severity = Severity.WARNING,
    fixable: bool = False,
    **options: object,
) -> RuleDefinition:
    return RuleDefinition(
        id=check, category=category, severity=severity, check=check, fixable=fixable, options=options
    )


def _messages(evaluator, rule: RuleDefinition, analyzed, settings: MatcherSettings = SETTINGS) -> list[str]:
    tree, source_file, facts = analyzed
    return [f.message for f in evaluator.evaluate(tree, source_file, facts, rule, settings)]


class TestTypingRules:
    """Test MissingAnnotationsRule and DeprecatedTypingSpellingRule."""

    def test_missing_annotations(self, analyze) -> None:
        """One finding per signature listing every gap."""
        analyzed = analyze("def f(x, y: int):\n    return x\n")
        messages = _messages(MissingAnnotationsRule(), _rule("missing-annotations", Category.TYPING), analyzed)
        assert messages == ["Missing annotation in f: parameter 'x', return type"]

    def test_fully_annotated(self, analyze) -> None:
        """Complete signatures are fine."""
        analyzed = analyze("def f(x: int) -> int:\n    return x\n")
        assert _messages(MissingAnnotationsRule(), _rule("missing-annotations", Category.TYPING), analyzed) == []

    def test_deprecated_spelling(self, analyze) -> None:
        """typing.List in a signature is reported with its replacement."""
        analyzed = analyze("from typing import List\n\n\ndef f(x: List[int]) -> None:\n    pass\n")
        messages = _messages(
            DeprecatedTypingSpellingRule(), _rule("deprecated-typing-spelling", Category.TYPING), analyzed
        )
        assert messages == ["Use 'list' instead of 'List' in f"]


MODEL_SOURCE = '''
from pydantic import BaseModel, validator


class BaseSchema(BaseModel):
    model_config = {"frozen": True}


class Raw(BaseModel):
    name: str

    @validator("name")
    def check_name(cls, value):
        return value

    class Config:
        frozen = True
'''


class TestDataModelRules:
    """Test the three data-model rules."""

    def test_model_base_type(self, analyze) -> None:
        """BaseSchema itself may derive from BaseModel; other models may not."""
        messages = _messages(ModelBaseTypeRule(), _rule("model-base-type", Category.DATA_MODEL), analyze(MODEL_SOURCE))
        assert messages == ["Model 'Raw' derives from BaseModel; derive from BaseSchema"]

    def test_deprecated_validator(self, analyze) -> None:
        """@validator is the legacy API."""
        messages = _messages(
            DeprecatedValidatorRule(), _rule("deprecated-validator", Category.DATA_MODEL), analyze(MODEL_SOURCE)
        )
        assert len(messages) == 1
        assert "'Raw.check_name' uses deprecated @validator" in messages[0]

    def test_legacy_config(self, analyze) -> None:
        """An inner Config class is the legacy marker."""
        messages = _messages(
            LegacyModelConfigRule(), _rule("legacy-model-config", Category.DATA_MODEL), analyze(MODEL_SOURCE)
        )
        assert messages == ["Model 'Raw' uses legacy 'Config'; use model_config"]


class TestImportRules:
    """Test ImportOrderRule and UnusedImportRule."""

    def test_order_finding_carries_fix(self, analyze) -> None:
        """One finding per file, at the first misplaced import."""
        tree, source_file, facts = analyze("import pkg\nimport os\nimport requests\n\nos, pkg, requests\n")
        rule = _rule("import-order", Category.IMPORTS, fixable=True)
        findings = ImportOrderRule().evaluate(tree, source_file, facts, rule, SETTINGS)
        assert len(findings) == 1
        assert findings[0].line == 2
        assert "(2 misplaced)" in findings[0].message
        assert findings[0].suggested_fix is not None
        assert findings[0].suggested_fix.kind == FixKind.REORDER_IMPORTS

    def test_late_import_has_no_fix(self, analyze) -> None:
        """An import misplaced after other statements is reported for a manual move."""
        source = "import pkg\n\n__all__ = ['join', 'pkg']\n\nfrom os.path import join\n"
        tree, source_file, facts = analyze(source)
        rule = _rule("import-order", Category.IMPORTS, fixable=True)
        findings = ImportOrderRule().evaluate(tree, source_file, facts, rule, SETTINGS)
        assert [(f.line, f.suggested_fix) for f in findings] == [(5, None)]

    def test_leading_violation_keeps_fix_with_late_one(self, analyze) -> None:
        """A misplaced import in the leading block is still fixable."""
        source = "import pkg\nimport os\n\n__all__ = ['join', 'os', 'pkg']\n\nfrom os.path import join\n"
        tree, source_file, facts = analyze(source)
        rule = _rule("import-order", Category.IMPORTS, fixable=True)
        findings = ImportOrderRule().evaluate(tree, source_file, facts, rule, SETTINGS)
        assert findings[0].line == 2
        assert findings[0].suggested_fix is not None

    def test_unused_import(self, analyze) -> None:
        """Imported names never referenced are reported."""
        analyzed = analyze("import os\nimport sys\n\nsys.exit(0)\n")
        assert _messages(UnusedImportRule(), _rule("unused-import", Category.IMPORTS), analyzed) == [
            "'os' imported but unused"
        ]

    def test_package_marker_exempt(self, analyze) -> None:
        """__init__.py re-exports by convention."""
        analyzed = analyze("from pkg.core import Engine\n", path="src/pkg/__init__.py")
        assert _messages(UnusedImportRule(), _rule("unused-import", Category.IMPORTS), analyzed) == []


class TestDocstringRules:
    """Test MissingDocstringRule and DocstringSectionsRule."""

    def test_missing_docstring_public_only(self, analyze) -> None:
        """Public classes and methods need docstrings; private helpers do not."""
        analyzed = analyze(
            "class A:\n    def run(self) -> None:\n        pass\n\n\ndef _private() -> None:\n    pass\n"
        )
        messages = _messages(MissingDocstringRule(), _rule("missing-docstring", Category.DOCSTRINGS), analyzed)
        assert messages == ["Public class 'A' has no docstring", "Public method 'A.run' has no docstring"]

    def test_missing_sections(self, analyze) -> None:
        """Returns and Raises are required when the function returns and raises."""
        source = '''
def parse(text: str) -> int:
    """
    Parse text.

    Args:
        text: Input.
    """
    if not text:
        raise ValueError("empty")
    return int(text)
'''
        messages = _messages(DocstringSectionsRule(), _rule("docstring-sections", Category.DOCSTRINGS), analyze(source))
        assert messages == [
            "Docstring of 'parse' is missing a Returns section",
            "Docstring of 'parse' is missing a Raises section",
        ]

    def test_missing_section_reported_at_def_line(self, analyze) -> None:
        """Findings point at the function, not at its docstring."""
        source = 'X = 1\n\n\ndef double(value: int) -> int:\n    """Double a value."""\n    return value * 2\n'
        tree, source_file, facts = analyze(source)
        rule = _rule("docstring-sections", Category.DOCSTRINGS)
        findings = DocstringSectionsRule().evaluate(tree, source_file, facts, rule, SETTINGS)
        assert [f.line for f in findings] == [4, 4]

    def test_single_line_summary_option(self, analyze) -> None:
        """skip_single_line accepts one-line summaries."""
        analyzed = analyze('def add(a: int, b: int) -> int:\n    """Add two numbers."""\n    return a + b\n')
        strict = _rule("docstring-sections", Category.DOCSTRINGS)
        relaxed = _rule("docstring-sections", Category.DOCSTRINGS, skip_single_line=True)
        assert len(_messages(DocstringSectionsRule(), strict, analyzed)) == 2
        assert _messages(DocstringSectionsRule(), relaxed, analyzed) == []


class TestLoggingRules:
    """Test PrintCallRule and LoggingLibraryRule."""

    def test_print_call(self, analyze) -> None:
        """print() names the preferred logger."""
        rule = _rule("print-call", Category.LOGGING, preferred="structlog")
        assert _messages(PrintCallRule(), rule, analyze("print('hi')\n")) == [
            "'print()' call; use structlog instead"
        ]

    def test_logging_library(self, analyze) -> None:
        """Importing the discouraged library is one suggestion per file."""
        rule = _rule("logging-library", Category.LOGGING, Severity.SUGGESTION, preferred="structlog")
        analyzed = analyze("import logging\nimport logging.handlers\n\nlogging.handlers\n")
        assert _messages(LoggingLibraryRule(), rule, analyzed) == ["Module logs through 'logging'; use structlog"]


HYGIENE_SOURCE = '''
def run() -> None:
    try:
        work()
    except:
        pass
    try:
        work()
    except Exception:
        log()
    try:
        work()
    except KeyError:
        pass
    try:
        work()
    except Exception:
        raise
'''


class TestExceptionRules:
    """Test the four exception rules."""

    def test_base_type_single_root(self, analyze) -> None:
        """Only one class per file may derive from the builtin base."""
        analyzed = analyze(
            "class AppError(Exception):\n    pass\n\n\nclass OtherError(Exception):\n    pass\n\n\n"
            "class ChildError(AppError):\n    pass\n"
        )
        messages = _messages(ExceptionBaseTypeRule(), _rule("exception-base-type", Category.EXCEPTIONS), analyzed)
        assert len(messages) == 1
        assert "'OtherError' derives from a builtin error base" in messages[0]

    def test_raising_broad_exception(self, analyze) -> None:
        """raise Exception(...) is flagged."""
        analyzed = analyze("def f() -> None:\n    raise Exception('boom')\n")
        messages = _messages(ExceptionBaseTypeRule(), _rule("exception-base-type", Category.EXCEPTIONS), analyzed)
        assert messages == ["'f' raises Exception; raise a domain-specific error"]

    def test_exception_naming(self, analyze) -> None:
        """Exception classes end with Error."""
        analyzed = analyze("class Oops(ValueError):\n    pass\n")
        messages = _messages(ExceptionNamingRule(), _rule("exception-naming", Category.EXCEPTIONS), analyzed)
        assert messages == ["Exception class 'Oops' should end with 'Error'"]

    def test_domain_exceptions_file(self, analyze) -> None:
        """Exception classes outside exceptions.py are reported."""
        rule = _rule("domain-exceptions-file", Category.EXCEPTIONS)
        source = "class PaymentError(Exception):\n    pass\n"
        assert len(_messages(DomainExceptionsFileRule(), rule, analyze(source, path="src/pkg/service.py"))) == 1
        assert _messages(DomainExceptionsFileRule(), rule, analyze(source, path="src/pkg/exceptions.py")) == []

    def test_hygiene(self, analyze) -> None:
        """Bare, broad-without-raise and empty handlers; a broad re-raise is fine."""
        messages = _messages(ExceptionHygieneRule(), _rule("exception-hygiene", Category.EXCEPTIONS), analyze(HYGIENE_SOURCE))
        assert len(messages) == 3
        assert messages[0].startswith("Bare 'except:'")
        assert messages[1].startswith("'except Exception:' without re-raise")
        assert messages[2].startswith("Empty except body")


class TestLiteralRules:
    """Test the configuration-safety evaluators."""

    SETTINGS = MatcherSettings(
        safety_exclusions=("tests",),
        connection_schemes=("postgres",),
        secret_name_pattern=r"(?i)(?:^|_)(?:secret|password)$",
    )

    def setup_method(self) -> None:
        self.rules = {r.check: r for r in LiteralRule.defaults()}

    def test_secret_message_redacted(self, analyze) -> None:
        """The message names the identifier and never the value."""
        rule = _rule("hardcoded-secret", Category.CONFIGURATION, Severity.CRITICAL)
        analyzed = analyze('SECRET = "abc123"\n', settings=self.SETTINGS)
        messages = _messages(self.rules["hardcoded-secret"], rule, analyzed, self.SETTINGS)
        assert messages == [
            "Hardcoded secret 'SECRET': SECRET = \"***\" (read it from the environment or a secret store)"
        ]

    def test_runs_on_unparsable_file(self, analyze) -> None:
        """The scan is textual and needs no syntax tree."""
        rule = _rule("hardcoded-connection-string", Category.CONFIGURATION, Severity.CRITICAL)
        analyzed = analyze('URL = "postgres://u:p@h/db"\ndef broken(:\n', settings=self.SETTINGS)
        assert analyzed[2].is_degraded
        assert len(_messages(self.rules["hardcoded-connection-string"], rule, analyzed, self.SETTINGS)) == 1
        assert self.rules["hardcoded-connection-string"].requires_syntax is False

    def test_excluded_path(self, analyze) -> None:
        """Test files are never scanned."""
        rule = _rule("hardcoded-secret", Category.CONFIGURATION, Severity.CRITICAL)
        analyzed = analyze('PASSWORD = "hunter2"\n', path="tests/test_login.py", settings=self.SETTINGS)
        assert _messages(self.rules["hardcoded-secret"], rule, analyzed, self.SETTINGS) == []

    def test_triple_quoted_secrets(self, analyze) -> None:
        """Triple-quoted values are caught in assignments and dict entries."""
        rule = _rule("hardcoded-secret", Category.CONFIGURATION, Severity.CRITICAL)
        source = 'PASSWORD = """hunter2"""\nCREDS = {"db_password": \'\'\'hunter2\'\'\'}\n'
        analyzed = analyze(source, settings=self.SETTINGS)
        messages = _messages(self.rules["hardcoded-secret"], rule, analyzed, self.SETTINGS)
        assert messages == [
            "Hardcoded secret 'PASSWORD': PASSWORD = \"\"\"***\"\"\" (read it from the environment or a secret store)",
            "Hardcoded secret 'db_password': CREDS = {\"db_password\": '''***'''} "
            "(read it from the environment or a secret store)",
        ]

    def test_value_holding_other_quote(self, analyze) -> None:
        """A double-quoted value may contain a single quote."""
        rule = _rule("hardcoded-secret", Category.CONFIGURATION, Severity.CRITICAL)
        analyzed = analyze('SECRET = "it\'s-hunter2"\n', settings=self.SETTINGS)
        messages = _messages(self.rules["hardcoded-secret"], rule, analyzed, self.SETTINGS)
        assert len(messages) == 1
        assert "hunter2" not in messages[0]
