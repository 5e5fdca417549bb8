"""End-to-end compliance scenarios run through the CLI against projects on disk."""

import json
from pathlib import Path

import pytest
from typer.testing import CliRunner

from convention_guard.domain.constants import EXIT_CRITICAL_FAIL, EXIT_FAIL, EXIT_PASS
from convention_guard.interface.cli import CLIAppFactory, CLIDependencies

UNORDERED_REPORT = '''"""Price report."""

import json

from shop.pricing import gross_price
from decimal import Decimal


def price_report(net: Decimal) -> str:
    """
    Render a price report.

    Args:
        net: Net price.

    Returns:
        The report as JSON.
    """
    return json.dumps({"gross": str(gross_price(net))})
'''

ORDERED_REPORT_HEAD = '''"""Price report."""

import json
from decimal import Decimal

from shop.pricing import gross_price


def price_report'''

DISCOUNT = '''"""Discounts."""

from decimal import Decimal


def apply_discount(price: Decimal, rate: Decimal) -> Decimal:
    """
    Apply a discount rate.

    Args:
        price: Price before discount.
        rate: Discount rate.
    """
    return price * (1 - rate)
'''

LATE_IMPORT = '''"""Re-exports."""

from shop.pricing import gross_price
import json

__all__ = ["gross_price", "join", "json"]

from os.path import join
'''

runner = CliRunner()


@pytest.fixture
def run(cli_deps: CLIDependencies):
    """Invoke `check` in structured format and return (exit code, document)."""

    def _run(root: Path, *args: str) -> tuple[int, dict]:
        app = CLIAppFactory.create_app(cli_deps)
        result = runner.invoke(app, ["check", str(root), "--format", "structured", *args])
        return result.exit_code, json.loads(result.stdout)

    return _run


class TestComplianceScenarios:
    """Scenarios over the default catalog."""

    def test_clean_project(self, run, clean_project: Path) -> None:
        """A compliant project has no findings and passes."""
        code, document = run(clean_project)
        assert code == EXIT_PASS
        assert document["overall_status"] == "pass"
        assert document["findings"] == []
        assert len(document["categories"]) == 9

    def test_misordered_imports_reported(self, run, clean_project: Path) -> None:
        """One fixable import-order warning at the first misplaced import."""
        (clean_project / "src/shop/report.py").write_text(UNORDERED_REPORT)
        code, document = run(clean_project)
        assert code == EXIT_FAIL
        assert [(f["rule_id"], f["path"], f["line"]) for f in document["findings"]] == [
            ("import-order", "src/shop/report.py", 6)
        ]
        assert document["findings"][0]["suggested_fix"]["kind"] == "reorder-imports"
        assert document["categories"]["imports"]["status"] == "fail"

    def test_fix_mode_regroups_imports(self, run, clean_project: Path) -> None:
        """Fix mode rewrites the file, re-scans, and a second run has nothing to do."""
        target = clean_project / "src/shop/report.py"
        target.write_text(UNORDERED_REPORT)
        code, document = run(clean_project, "--mode", "fix")
        assert code == EXIT_PASS
        assert document["findings"] == []
        assert [(m["path"], m["status"]) for m in document["fix_plan"]] == [("src/shop/report.py", "applied")]
        assert target.read_text().startswith(ORDERED_REPORT_HEAD)
        code, document = run(clean_project, "--mode", "fix")
        assert code == EXIT_PASS
        assert document["fix_plan"] == []

    def test_fix_mode_settles_with_late_import(self, run, clean_project: Path) -> None:
        """Only the leading block is regrouped; a late import stays a manual finding."""
        target = clean_project / "src/shop/late.py"
        target.write_text(LATE_IMPORT)
        code, document = run(clean_project, "--mode", "fix")
        assert [(m["path"], m["status"]) for m in document["fix_plan"]] == [("src/shop/late.py", "applied")]
        assert code == EXIT_FAIL
        assert [(f["rule_id"], f["line"], f["suggested_fix"]) for f in document["findings"]] == [
            ("import-order", 9, None)
        ]
        code, document = run(clean_project, "--mode", "fix")
        assert code == EXIT_FAIL
        assert document["fix_plan"] == []
        assert target.read_text().startswith('"""Re-exports."""\n\nimport json\n\nfrom shop.pricing import gross_price\n')

    def test_dry_run_changes_nothing(self, run, clean_project: Path) -> None:
        """fix-dry-run plans but never writes."""
        target = clean_project / "src/shop/report.py"
        target.write_text(UNORDERED_REPORT)
        code, document = run(clean_project, "--mode", "fix-dry-run")
        assert code == EXIT_FAIL
        assert [m["status"] for m in document["fix_plan"]] == ["planned"]
        assert target.read_text() == UNORDERED_REPORT

    def test_hardcoded_secret_is_critical(self, cli_deps: CLIDependencies, clean_project: Path) -> None:
        """A hardcoded secret is critical-fail and its value is never printed."""
        (clean_project / "src/shop/settings.py").write_text('"""Settings."""\n\nSECRET = "abc123"\n')
        app = CLIAppFactory.create_app(cli_deps)
        result = runner.invoke(app, ["check", str(clean_project), "--format", "structured"])
        assert result.exit_code == EXIT_CRITICAL_FAIL
        document = json.loads(result.stdout)
        assert document["overall_status"] == "critical-fail"
        assert document["categories"]["configuration"]["status"] == "critical-fail"
        assert [f["rule_id"] for f in document["findings"]] == ["hardcoded-secret"]
        assert "abc123" not in result.output

    def test_docstring_without_returns(self, run, clean_project: Path) -> None:
        """A documented function that returns a value needs a Returns section."""
        (clean_project / "src/shop/discount.py").write_text(DISCOUNT)
        code, document = run(clean_project)
        assert code == EXIT_FAIL
        assert [(f["category"], f["severity"]) for f in document["findings"]] == [("docstrings", "warning")]
        assert "Returns" in document["findings"][0]["message"]

    def test_examples_and_tests_may_hold_credentials(self, run, clean_project: Path, write_tree) -> None:
        """Excluded paths never contribute configuration findings."""
        write_tree(
            clean_project,
            {
                "tests/test_settings.py": 'PASSWORD = "hunter2"\n',
                "examples/demo.py": 'DATABASE_URL = "postgres://user:pw@db/app"\n',
            },
        )
        code, document = run(clean_project)
        assert code == EXIT_PASS
        assert document["categories"]["configuration"]["counts"]["critical"] == 0

    def test_structured_output_is_reproducible(self, cli_deps: CLIDependencies, clean_project: Path, write_tree) -> None:
        """Two runs over an unchanged tree print identical bytes."""
        write_tree(
            clean_project,
            {
                "src/shop/report.py": UNORDERED_REPORT,
                "src/shop/discount.py": DISCOUNT,
                "src/shop/BadName.py": "print('x')\n",
            },
        )
        app = CLIAppFactory.create_app(cli_deps)
        args = ["check", str(clean_project), "--format", "structured", "--workers", "3"]
        first = runner.invoke(app, args)
        second = runner.invoke(app, args)
        assert first.exit_code == EXIT_FAIL
        assert first.stdout == second.stdout
