"""Use Case: Build Report - aggregate findings into per-category and overall status."""

from collections.abc import Iterable
from typing import Optional

from convention_guard.domain.catalog import RuleCatalog
from convention_guard.domain.constants import Category, Severity, Status
from convention_guard.domain.entities import CategorySummary, Finding, FixPlan, ReportSummary


class ReportBuilder:
    """
    Aggregate findings deterministically.

    A category fails when any of its findings reaches the category threshold.
    The configuration category is critical-fail on any critical finding, and
    that alone makes the overall status critical-fail.
    """

    def build(
        self,
        findings: Iterable[Finding],
        catalog: RuleCatalog,
        fix_plan: Optional[FixPlan] = None,
    ) -> ReportSummary:
        """
        Build the run summary.

        Args:
            findings: Findings in any order.
            catalog: Resolved catalog; provides categories and thresholds.
            fix_plan: Plan and results in fix modes.

        Returns:
            ReportSummary with findings sorted by severity, path, line, rule id.
        """
        ordered = tuple(sorted(findings, key=Finding.sort_key))
        present = set(catalog.categories) | {f.category for f in ordered}
        summaries = tuple(
            self._summarize(category, [f for f in ordered if f.category == category], catalog)
            for category in Category
            if category in present
        )
        return ReportSummary(
            overall_status=self._overall(summaries),
            categories=summaries,
            findings=ordered,
            fix_plan=fix_plan,
        )

    @staticmethod
    def _summarize(category: Category, findings: list[Finding], catalog: RuleCatalog) -> CategorySummary:
        counts = {severity: 0 for severity in Severity}
        for finding in findings:
            counts[finding.severity] += 1
        if category == Category.CONFIGURATION and counts[Severity.CRITICAL]:
            status = Status.CRITICAL_FAIL
        elif any(f.severity.rank >= catalog.threshold_for(category).rank for f in findings):
            status = Status.FAIL
        else:
            status = Status.PASS
        return CategorySummary(category=category, status=status, counts=counts)

    @staticmethod
    def _overall(summaries: tuple[CategorySummary, ...]) -> Status:
        statuses = {s.status for s in summaries}
        if Status.CRITICAL_FAIL in statuses:
            return Status.CRITICAL_FAIL
        if Status.FAIL in statuses:
            return Status.FAIL
        return Status.PASS
