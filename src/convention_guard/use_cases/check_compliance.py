"""Use Case: Check Compliance - load, evaluate, optionally fix, and report."""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from convention_guard.domain.catalog import RuleCatalog
from convention_guard.domain.constants import (
    DEFAULT_IGNORE_PATTERNS,
    DEFAULT_INCLUDE_PATTERNS,
    FixStatus,
    RunMode,
)
from convention_guard.domain.entities import Finding, FixPlan, ProjectTree, ReportSummary
from convention_guard.domain.matchers.imports import ImportMatcher
from convention_guard.domain.protocols import ProjectLoaderProtocol, TelemetryPort
from convention_guard.use_cases.apply_fixes import ApplyFixesUseCase
from convention_guard.use_cases.build_report import ReportBuilder
from convention_guard.use_cases.evaluate_rules import RuleEngine
from convention_guard.use_cases.plan_fixes import PlanFixesUseCase
from convention_guard.use_cases.run_context import CancellationToken, RunContext

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ComplianceRequest:
    """Inputs of one compliance run."""

    root: Path
    catalog: RuleCatalog
    mode: RunMode = RunMode.REPORT
    include: tuple[str, ...] = DEFAULT_INCLUDE_PATTERNS
    ignore: tuple[str, ...] = DEFAULT_IGNORE_PATTERNS
    workers: int = 0


class CheckComplianceUseCase:
    """
    Orchestrate Loader -> Rule Engine -> (Auto-Fixer) -> Report Builder.

    Each call builds its own RunContext, so concurrent runs in one process
    share nothing but the path lock registry behind the applier.
    """

    def __init__(
        self,
        project_loader: ProjectLoaderProtocol,
        engine: RuleEngine,
        report_builder: ReportBuilder,
        planner: PlanFixesUseCase,
        applier: ApplyFixesUseCase,
        telemetry: Optional[TelemetryPort] = None,
    ) -> None:
        self.project_loader = project_loader
        self.engine = engine
        self.report_builder = report_builder
        self.planner = planner
        self.applier = applier
        self.telemetry = telemetry

    def execute(self, request: ComplianceRequest, token: Optional[CancellationToken] = None) -> ReportSummary:
        """
        Run a compliance check in the requested mode.

        Args:
            request: Root, resolved catalog, mode and loader patterns.
            token: Cancellation token; a fresh one is used when omitted.

        Returns:
            The report. In fix mode its findings are those of a re-scan after
            the mutations were applied.

        Raises:
            SetupError: If the root cannot be loaded.
            RunCancelledError: If token was cancelled during evaluation.
        """
        token = token or CancellationToken()
        tree = self._load(request)
        findings = self._evaluate(tree, request, token)
        if request.mode == RunMode.REPORT:
            return self.report_builder.build(findings, request.catalog)

        plan = self.planner.execute(findings, request.catalog, tree.root)
        classify = ImportMatcher(request.catalog.settings, tree.top_level_names).classify
        if request.mode == RunMode.FIX_DRY_RUN:
            plan = self.applier.execute(plan, tree.root, classify, dry_run=True)
            return self.report_builder.build(findings, request.catalog, plan)

        plan = self.applier.execute(plan, tree.root, classify)
        if self._changed(plan):
            logger.debug("Re-scanning %s after fixes", tree.root)
            tree = self._load(request)
            findings = self._evaluate(tree, request, token)
        return self.report_builder.build(findings, request.catalog, plan)

    def _load(self, request: ComplianceRequest) -> ProjectTree:
        tree = self.project_loader.load(request.root, request.include, request.ignore)
        if self.telemetry is not None:
            self.telemetry.step(f"Loaded {len(tree.files)} files from {tree.root}")
        return tree

    def _evaluate(self, tree: ProjectTree, request: ComplianceRequest, token: CancellationToken) -> list[Finding]:
        context = RunContext.create(tree, request.catalog, token=token, workers=request.workers)
        return self.engine.evaluate(context)

    @staticmethod
    def _changed(plan: FixPlan) -> bool:
        return any(r.status == FixStatus.APPLIED for r in plan.results)
