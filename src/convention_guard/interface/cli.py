"""CLI entry points for Convention Guard - Thin Controller using Typer."""

import logging
import sys
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional, TypeVar

import typer

from convention_guard.domain.catalog import RuleCatalog
from convention_guard.domain.config import ConfigurationLoader
from convention_guard.domain.constants import (
    EXIT_CANCELLED,
    EXIT_FAIL,
    EXIT_SETUP_ERROR,
    STATUS_EXIT_CODES,
    Category,
    OutputFormat,
    RunMode,
)
from convention_guard.domain.entities import ReportSummary
from convention_guard.domain.exceptions import ConfigurationError, RunCancelledError, SetupError
from convention_guard.domain.protocols import (
    FileSystemProtocol,
    FixerGatewayProtocol,
    PathLockProtocol,
    ProjectLoaderProtocol,
    ReporterProtocol,
    TelemetryPort,
)
from convention_guard.domain.rules.registry import EvaluatorRegistry
from convention_guard.infrastructure.catalog_loader import CatalogLoader
from convention_guard.infrastructure.config_file_loader import ConfigFileLoader
from convention_guard.use_cases.apply_fixes import ApplyFixesUseCase
from convention_guard.use_cases.build_report import ReportBuilder
from convention_guard.use_cases.check_compliance import CheckComplianceUseCase, ComplianceRequest
from convention_guard.use_cases.evaluate_rules import RuleEngine
from convention_guard.use_cases.plan_fixes import PlanFixesUseCase

E = TypeVar("E", bound=Enum)

# B008: avoid function call in default; use module-level singletons for Typer options
_ROOT_ARGUMENT = typer.Argument(Path("."), help="Project root to scan (default: current directory)")
_MODE_OPTION = typer.Option(
    RunMode.REPORT.value, "--mode", "-m", help="report, fix (apply fixable mutations) or fix-dry-run"
)
_CATEGORY_OPTION = typer.Option(None, "--category", "-c", help="Restrict to a category (repeatable)")
_FORMAT_OPTION = typer.Option(OutputFormat.TABLE.value, "--format", "-f", help="table or structured")
_CATALOG_OPTION = typer.Option(None, "--catalog", help="Rule catalog YAML replacing the default catalog")
_WORKERS_OPTION = typer.Option(None, "--workers", "-w", help="Worker threads (default: available parallelism)")
_VERBOSE_OPTION = typer.Option(False, "--verbose", "-v", help="Debug logging on stderr")


@dataclass(frozen=True)
class CLIDependencies:
    """Explicit dependencies for the CLI. All dependencies injected at composition root."""

    telemetry: TelemetryPort
    registry: EvaluatorRegistry
    catalog_loader: CatalogLoader
    config_file_loader: ConfigFileLoader
    project_loader: ProjectLoaderProtocol
    filesystem: FileSystemProtocol
    fixer_gateway: FixerGatewayProtocol
    path_locks: PathLockProtocol
    reporters: dict[OutputFormat, ReporterProtocol]


class CLIAppFactory:
    """Creates the Typer app. No top-level functions."""

    @staticmethod
    def configure_logging(verbose: bool) -> None:
        """Send log records to stderr: DEBUG when verbose, otherwise WARNING."""
        logging.basicConfig(
            level=logging.DEBUG if verbose else logging.WARNING,
            format="%(levelname)s %(name)s: %(message)s",
            stream=sys.stderr,
        )
        logging.getLogger("convention_guard").setLevel(logging.DEBUG if verbose else logging.WARNING)

    @staticmethod
    def parse_choice(enum_type: type[E], value: str, option: str) -> E:
        """Convert an option value to enum_type. Raises ConfigurationError listing the choices."""
        try:
            return enum_type(value)
        except ValueError as exc:
            choices = ", ".join(str(member.value) for member in enum_type)
            raise ConfigurationError(f"Invalid value for {option}: '{value}' (choose from {choices})") from exc

    @staticmethod
    def load_catalog(deps: CLIDependencies, root: Path, catalog: Optional[Path]) -> tuple[ConfigurationLoader, RuleCatalog]:
        """Read [tool.convention-guard] near root and resolve the effective catalog."""
        config_dict, tool_section = deps.config_file_loader.load_config_from_fs(root)
        config = ConfigurationLoader(config_dict, tool_section)
        config_file = deps.config_file_loader.find_config_file(root)
        config_dir = config_file.parent if config_file is not None else root
        return config, deps.catalog_loader.load_resolved(config, catalog, config_dir)

    @staticmethod
    def exit_code(summary: ReportSummary) -> int:
        """Status exit code, raised to at least 1 when a fix failed."""
        code = STATUS_EXIT_CODES[summary.overall_status]
        if summary.fix_plan is not None and summary.fix_plan.has_failures:
            code = max(code, EXIT_FAIL)
        return code

    @staticmethod
    def create_app(deps: CLIDependencies) -> typer.Typer:
        """Create the Typer app with explicitly injected dependencies. No Service Locator."""
        app = typer.Typer(
            name="convention-guard",
            help="Convention Guard: severity-stratified convention compliance for Python projects",
            add_completion=False,
        )

        @app.command()
        def check(
            root: Path = _ROOT_ARGUMENT,
            mode: str = _MODE_OPTION,
            category: Optional[list[str]] = _CATEGORY_OPTION,
            output_format: str = _FORMAT_OPTION,
            catalog: Optional[Path] = _CATALOG_OPTION,
            workers: Optional[int] = _WORKERS_OPTION,
            verbose: bool = _VERBOSE_OPTION,
        ) -> None:
            """Scan ROOT against the rule catalog and report (exit 0 pass, 1 fail, 2 critical-fail)."""
            CLIAppFactory.configure_logging(verbose)
            try:
                run_mode = CLIAppFactory.parse_choice(RunMode, mode, "--mode")
                fmt = CLIAppFactory.parse_choice(OutputFormat, output_format, "--format")
                categories = [CLIAppFactory.parse_choice(Category, c, "--category") for c in category or []]
                if workers is not None and workers < 0:
                    raise ConfigurationError("Invalid value for --workers: must be 0 or more")
                config, resolved = CLIAppFactory.load_catalog(deps, root, catalog)
                use_case = CheckComplianceUseCase(
                    project_loader=deps.project_loader,
                    engine=RuleEngine(deps.registry, deps.telemetry),
                    report_builder=ReportBuilder(),
                    planner=PlanFixesUseCase(deps.filesystem),
                    applier=ApplyFixesUseCase(deps.filesystem, deps.fixer_gateway, deps.path_locks, deps.telemetry),
                    telemetry=deps.telemetry,
                )
                summary = use_case.execute(
                    ComplianceRequest(
                        root=root,
                        catalog=resolved.restricted_to(categories),
                        mode=run_mode,
                        include=config.include_patterns,
                        ignore=config.ignore_patterns,
                        workers=workers if workers is not None else config.workers,
                    )
                )
            except SetupError as exc:
                deps.telemetry.error(str(exc))
                sys.exit(EXIT_SETUP_ERROR)
            except RunCancelledError as exc:
                deps.telemetry.error(str(exc))
                sys.exit(EXIT_CANCELLED)
            except KeyboardInterrupt:
                deps.telemetry.error("Run cancelled")
                sys.exit(EXIT_CANCELLED)
            deps.reporters[fmt].render(summary)
            sys.exit(CLIAppFactory.exit_code(summary))

        @app.command()
        def rules(
            root: Path = _ROOT_ARGUMENT,
            catalog: Optional[Path] = _CATALOG_OPTION,
            output_format: str = _FORMAT_OPTION,
        ) -> None:
            """List the effective rule catalog for ROOT (defaults plus pyproject overrides)."""
            try:
                fmt = CLIAppFactory.parse_choice(OutputFormat, output_format, "--format")
                _, resolved = CLIAppFactory.load_catalog(deps, root, catalog)
            except SetupError as exc:
                deps.telemetry.error(str(exc))
                sys.exit(EXIT_SETUP_ERROR)
            deps.reporters[fmt].render_catalog(resolved)
            sys.exit(0)

        return app
