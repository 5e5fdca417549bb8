"""Unit tests for ReportBuilder."""

import json
import random

import pytest

from convention_guard.domain.catalog import RuleCatalog, RuleDefinition
from convention_guard.domain.config import MatcherSettings
from convention_guard.domain.constants import Category, Severity, Status
from convention_guard.domain.entities import Finding, FixPlan
from convention_guard.use_cases.build_report import ReportBuilder


def _catalog(thresholds: dict[Category, Severity] | None = None) -> RuleCatalog:
    rules = [
        RuleDefinition(id="one-class-per-file", category=Category.STRUCTURE, severity=Severity.WARNING, check="x"),
        RuleDefinition(id="print-call", category=Category.LOGGING, severity=Severity.WARNING, check="y"),
        RuleDefinition(
            id="hardcoded-secret", category=Category.CONFIGURATION, severity=Severity.CRITICAL, check="z"
        ),
    ]
    return RuleCatalog("1", "python", MatcherSettings(), rules, thresholds)


def _finding(category: Category, severity: Severity, path: str = "src/a.py", line: int | None = 1, rule_id: str = "r") -> Finding:
    return Finding(rule_id=rule_id, category=category, severity=severity, path=path, message="m", line=line)


def _status(summary, category: Category) -> Status:
    return next(c.status for c in summary.categories if c.category == category)


class TestReportBuilder:
    """Test status aggregation and ordering."""

    def setup_method(self) -> None:
        self.builder = ReportBuilder()

    def test_no_findings_pass(self) -> None:
        """Every catalog category passes with zero counts."""
        summary = self.builder.build([], _catalog())
        assert summary.overall_status == Status.PASS
        assert [c.category for c in summary.categories] == [
            Category.STRUCTURE,
            Category.LOGGING,
            Category.CONFIGURATION,
        ]
        assert all(sum(c.counts.values()) == 0 for c in summary.categories)

    def test_suggestion_below_threshold_passes(self) -> None:
        """Suggestions do not fail a category at the default threshold."""
        summary = self.builder.build([_finding(Category.LOGGING, Severity.SUGGESTION)], _catalog())
        assert _status(summary, Category.LOGGING) == Status.PASS
        assert summary.overall_status == Status.PASS

    def test_warning_fails(self) -> None:
        """A warning fails its category and the run."""
        summary = self.builder.build([_finding(Category.LOGGING, Severity.WARNING)], _catalog())
        assert _status(summary, Category.LOGGING) == Status.FAIL
        assert summary.overall_status == Status.FAIL

    def test_configuration_critical_is_critical_fail(self) -> None:
        """Any critical configuration finding makes the run critical-fail."""
        findings = [
            _finding(Category.CONFIGURATION, Severity.CRITICAL),
            _finding(Category.LOGGING, Severity.WARNING),
        ]
        summary = self.builder.build(findings, _catalog())
        assert _status(summary, Category.CONFIGURATION) == Status.CRITICAL_FAIL
        assert summary.overall_status == Status.CRITICAL_FAIL

    def test_critical_outside_configuration_is_fail(self) -> None:
        """Only the configuration category can escalate to critical-fail."""
        summary = self.builder.build([_finding(Category.STRUCTURE, Severity.CRITICAL)], _catalog())
        assert _status(summary, Category.STRUCTURE) == Status.FAIL
        assert summary.overall_status == Status.FAIL

    def test_threshold_override(self) -> None:
        """A suggestion threshold makes suggestions fail the category."""
        catalog = _catalog({Category.LOGGING: Severity.SUGGESTION})
        summary = self.builder.build([_finding(Category.LOGGING, Severity.SUGGESTION)], catalog)
        assert _status(summary, Category.LOGGING) == Status.FAIL

    def test_category_from_findings_only(self) -> None:
        """Engine findings in a category without catalog rules still get a summary."""
        summary = self.builder.build([_finding(Category.NAMING, Severity.WARNING)], _catalog())
        assert Category.NAMING in [c.category for c in summary.categories]
        assert summary.overall_status == Status.FAIL

    def test_sort_order(self) -> None:
        """Severity descending, then path, then line (None first), then rule id."""
        findings = [
            _finding(Category.LOGGING, Severity.WARNING, "src/b.py", 3),
            _finding(Category.LOGGING, Severity.SUGGESTION, "src/a.py", 1),
            _finding(Category.LOGGING, Severity.WARNING, "src/a.py", 9, rule_id="b"),
            _finding(Category.LOGGING, Severity.WARNING, "src/a.py", 9, rule_id="a"),
            _finding(Category.STRUCTURE, Severity.WARNING, "src/a.py", None),
            _finding(Category.CONFIGURATION, Severity.CRITICAL, "z.py", 1),
        ]
        ordered = self.builder.build(findings, _catalog()).findings
        assert [(f.severity, f.path, f.line, f.rule_id) for f in ordered] == [
            (Severity.CRITICAL, "z.py", 1, "r"),
            (Severity.WARNING, "src/a.py", None, "r"),
            (Severity.WARNING, "src/a.py", 9, "a"),
            (Severity.WARNING, "src/a.py", 9, "b"),
            (Severity.WARNING, "src/b.py", 3, "r"),
            (Severity.SUGGESTION, "src/a.py", 1, "r"),
        ]

    @pytest.mark.parametrize("seed", [1, 2, 3])
    def test_structured_output_independent_of_input_order(self, seed: int) -> None:
        """Shuffled input serializes to the same document."""
        findings = [
            _finding(Category.LOGGING, Severity.WARNING, f"src/m{i % 4}.py", i, rule_id=f"r{i % 3}")
            for i in range(12)
        ]
        expected = json.dumps(self.builder.build(findings, _catalog()).to_dict(), sort_keys=True)
        shuffled = list(findings)
        random.Random(seed).shuffle(shuffled)
        assert json.dumps(self.builder.build(shuffled, _catalog()).to_dict(), sort_keys=True) == expected

    def test_fix_plan_attached(self) -> None:
        """The fix plan only appears in the document when given."""
        assert "fix_plan" not in self.builder.build([], _catalog()).to_dict()
        assert self.builder.build([], _catalog(), FixPlan()).to_dict()["fix_plan"] == []

    def test_counts_serialized_for_every_severity(self) -> None:
        """Counts include zero entries."""
        summary = self.builder.build([_finding(Category.LOGGING, Severity.WARNING)], _catalog())
        counts = summary.to_dict()["categories"]["logging"]["counts"]
        assert counts == {"critical": 0, "warning": 1, "suggestion": 0}
