"""Report renderers - table (rich) and structured (JSON) output on stdout."""

import json
from typing import Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from convention_guard.domain.catalog import RuleCatalog
from convention_guard.domain.constants import FixStatus, Severity, Status
from convention_guard.domain.entities import FixPlan, ReportSummary
from convention_guard.domain.protocols import ReporterProtocol

_STATUS_STYLES: dict[Status, str] = {
    Status.PASS: "bold green",
    Status.FAIL: "bold #F9A602",
    Status.CRITICAL_FAIL: "bold #C41E3A",
}

_SEVERITY_STYLES: dict[Severity, str] = {
    Severity.CRITICAL: "#C41E3A",
    Severity.WARNING: "#F9A602",
    Severity.SUGGESTION: "#00EEFF",
}

_FIX_STYLES: dict[FixStatus, str] = {
    FixStatus.PLANNED: "#00EEFF",
    FixStatus.APPLIED: "green",
    FixStatus.UNCHANGED: "dim",
    FixStatus.SKIPPED: "#F9A602",
    FixStatus.FAILED: "#C41E3A",
}


class TerminalReporter(ReporterProtocol):
    """Human-readable report: category summary, findings and fix plan tables."""

    def __init__(self, console: Optional[Console] = None) -> None:
        self._console = console

    def render(self, summary: ReportSummary) -> None:
        """Print the report tables to stdout."""
        # Created per call so the console binds to the current stdout.
        console = self._console or Console(highlight=False)
        console.print(self._category_table(summary))
        if summary.findings:
            console.print(self._findings_table(summary))
        else:
            console.print("No findings.")
        if summary.fix_plan is not None:
            if summary.fix_plan.is_empty:
                console.print("Fix plan: nothing to fix.")
            else:
                console.print(self._fix_table(summary.fix_plan))
        style = _STATUS_STYLES[summary.overall_status]
        console.print(f"Overall status: [{style}]{summary.overall_status.value}[/]")

    def render_catalog(self, catalog: RuleCatalog) -> None:
        """Print one row per rule of the effective catalog."""
        console = self._console or Console(highlight=False)
        table = Table(
            title=f"Rule Catalog {catalog.version} ({catalog.language})", header_style="bold #007BFF"
        )
        table.add_column("Rule ID", style="#00EEFF")
        table.add_column("Category")
        table.add_column("Severity")
        table.add_column("Fix?")
        table.add_column("Scope")
        table.add_column("Description")
        for rule in catalog.rules:
            style = _SEVERITY_STYLES[rule.severity]
            table.add_row(
                rule.id,
                rule.category.value,
                f"[{style}]{rule.severity.value}[/]",
                "auto" if rule.fixable else "manual",
                rule.scope,
                escape(rule.description),
            )
        console.print(table)

    @staticmethod
    def _category_table(summary: ReportSummary) -> Table:
        table = Table(title="Convention Compliance", header_style="bold #007BFF")
        table.add_column("Category", style="#00EEFF")
        table.add_column("Status")
        for severity in Severity:
            table.add_column(severity.value.capitalize(), justify="right")
        for category in summary.categories:
            style = _STATUS_STYLES[category.status]
            table.add_row(
                category.category.value,
                f"[{style}]{category.status.value}[/]",
                *(str(category.counts.get(severity, 0)) for severity in Severity),
            )
        return table

    @staticmethod
    def _findings_table(summary: ReportSummary) -> Table:
        table = Table(title="Findings", header_style="bold #007BFF")
        table.add_column("Severity")
        table.add_column("Location", style="#00EEFF")
        table.add_column("Rule ID")
        table.add_column("Fix?")
        table.add_column("Message")
        for finding in summary.findings:
            location = finding.path if finding.line is None else f"{finding.path}:{finding.line}"
            style = _SEVERITY_STYLES[finding.severity]
            table.add_row(
                f"[{style}]{finding.severity.value}[/]",
                escape(location),
                finding.rule_id,
                "auto" if finding.suggested_fix is not None else "manual",
                escape(finding.message),
            )
        return table

    @staticmethod
    def _fix_table(plan: FixPlan) -> Table:
        table = Table(title="Fix Plan", header_style="bold #007BFF")
        table.add_column("Kind")
        table.add_column("Path", style="#00EEFF")
        table.add_column("Rules")
        table.add_column("Status")
        table.add_column("Detail")
        results = plan.results
        for index, mutation in enumerate(plan.mutations):
            result = results[index] if index < len(results) else None
            status = result.status if result is not None else FixStatus.PLANNED
            table.add_row(
                mutation.kind.value,
                escape(mutation.path),
                ", ".join(mutation.rule_ids),
                f"[{_FIX_STYLES[status]}]{status.value}[/]",
                escape(result.reason if result is not None and result.reason else mutation.description),
            )
        return table


class StructuredReporter(ReporterProtocol):
    """Machine-readable report. Byte-identical for identical summaries."""

    def render(self, summary: ReportSummary) -> None:
        """Print the report as indented JSON to stdout."""
        typer.echo(json.dumps(summary.to_dict(), indent=2))

    def render_catalog(self, catalog: RuleCatalog) -> None:
        """Print the effective catalog as indented JSON to stdout."""
        payload = {
            "version": catalog.version,
            "language": catalog.language,
            "rules": [rule.to_dict() for rule in catalog.rules],
        }
        typer.echo(json.dumps(payload, indent=2))
