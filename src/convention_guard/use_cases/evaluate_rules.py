"""Use Case: Evaluate Rules - run every applicable catalog rule over the project tree."""

import dataclasses
import logging
from concurrent.futures import FIRST_COMPLETED, Future, ThreadPoolExecutor, wait
from typing import Optional

from convention_guard.domain.catalog import SCOPE_FILE, SCOPE_PROJECT, RuleDefinition
from convention_guard.domain.constants import (
    FILE_UNREADABLE_RULE_ID,
    RULE_EVALUATION_FAILED_RULE_ID,
    Category,
    Severity,
)
from convention_guard.domain.entities import FileFacts, Finding, SourceFile
from convention_guard.domain.exceptions import FileUnreadableError, RunCancelledError
from convention_guard.domain.patterns import PathPatterns
from convention_guard.domain.protocols import TelemetryPort
from convention_guard.domain.rules.registry import EvaluatorRegistry
from convention_guard.use_cases.run_context import RunContext

logger = logging.getLogger(__name__)


class RuleEngine:
    """
    Evaluate a resolved catalog against a project tree.

    Project-scope rules run once on the calling thread. File-scope work runs
    on a bounded thread pool with at most two tasks per worker in flight.
    Every evaluator call is isolated: an exception becomes a single
    rule-evaluation-failed finding and the run continues.
    """

    def __init__(self, registry: EvaluatorRegistry, telemetry: Optional[TelemetryPort] = None) -> None:
        self.registry = registry
        self.telemetry = telemetry

    def evaluate(self, context: RunContext) -> list[Finding]:
        """
        Run all rules and return the unsorted findings.

        Args:
            context: Run-scoped tree, catalog, facts builder and cancellation token.

        Returns:
            Findings of loader (for categories the catalog holds), project-scope
            and file-scope evaluation.

        Raises:
            RunCancelledError: If the token was cancelled before every file finished.
        """
        categories = context.catalog.categories
        findings = [f for f in context.tree.load_findings if f.category in categories]
        file_rules = [r for r in context.catalog.rules if r.scope == SCOPE_FILE]
        project_rules = [r for r in context.catalog.rules if r.scope == SCOPE_PROJECT]
        for rule in project_rules:
            findings.extend(self._evaluate_project_rule(context, rule))
        completed = self._evaluate_files(context, file_rules, findings)
        total = len(context.tree.files)
        if context.token.is_cancelled and completed < total:
            raise RunCancelledError(completed, total)
        logger.debug("Evaluated %d files, %d findings", completed, len(findings))
        if self.telemetry is not None:
            self.telemetry.step(f"Evaluated {len(context.catalog.rules)} rules over {completed} files")
        return findings

    def _evaluate_files(
        self, context: RunContext, rules: list[RuleDefinition], findings: list[Finding]
    ) -> int:
        """Schedule files on the pool. Returns how many files finished."""
        workers = context.pool_size
        window = 2 * workers
        completed = 0
        pending: set[Future[list[Finding]]] = set()

        def collect(done: set[Future[list[Finding]]]) -> None:
            nonlocal completed
            for future in done:
                findings.extend(future.result())
                completed += 1

        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="convention-guard") as pool:
            try:
                for source_file in context.tree.files:
                    if context.token.is_cancelled:
                        break
                    pending.add(pool.submit(self.evaluate_file, context, rules, source_file))
                    if len(pending) >= window:
                        done, pending = wait(pending, return_when=FIRST_COMPLETED)
                        collect(done)
            except KeyboardInterrupt:
                logger.warning("Interrupted; finishing in-flight files")
                context.token.cancel()
            # In-flight tasks always finish; nothing new is scheduled after cancel.
            done, pending = wait(pending)
            collect(done)
        return completed

    def evaluate_file(
        self, context: RunContext, rules: list[RuleDefinition], source_file: SourceFile
    ) -> list[Finding]:
        """All findings of the applicable file-scope rules for one file."""
        applicable = [r for r in rules if PathPatterns.applies(source_file.path, r.applies_to, r.exclude)]
        if not applicable:
            return []
        try:
            facts = context.facts_for(source_file)
        except FileUnreadableError as exc:
            logger.warning("Skipping unreadable file %s: %s", source_file.path, exc.reason)
            return [
                Finding(
                    rule_id=FILE_UNREADABLE_RULE_ID,
                    category=Category.STRUCTURE,
                    severity=Severity.WARNING,
                    path=source_file.path,
                    message=f"File could not be read: {exc.reason}",
                )
            ]
        findings: list[Finding] = []
        for rule in applicable:
            findings.extend(self._evaluate_file_rule(context, rule, source_file, facts))
        return findings

    def _evaluate_file_rule(
        self, context: RunContext, rule: RuleDefinition, source_file: SourceFile, facts: FileFacts
    ) -> list[Finding]:
        evaluator = self.registry.get(rule.check)
        if facts.degraded is not None and evaluator.requires_syntax:
            return [
                Finding(
                    rule_id=rule.id,
                    category=rule.category,
                    severity=Severity.SUGGESTION,
                    path=source_file.path,
                    line=facts.degraded.line,
                    message=f"Cannot confirm compliance, file does not parse: {facts.degraded.reason}",
                )
            ]
        try:
            produced = list(evaluator.evaluate(context.tree, source_file, facts, rule, context.catalog.settings))
        except Exception as exc:  # noqa: BLE001
            logger.exception("Rule %s failed on %s", rule.id, source_file.path)
            return [self._failure(rule, source_file.path, exc)]
        return [self._enforce_tier(rule, f) for f in produced]

    def _evaluate_project_rule(self, context: RunContext, rule: RuleDefinition) -> list[Finding]:
        evaluator = self.registry.get(rule.check)
        try:
            produced = list(evaluator.evaluate(context.tree, None, None, rule, context.catalog.settings))
        except Exception as exc:  # noqa: BLE001
            logger.exception("Rule %s failed on the project tree", rule.id)
            return [self._failure(rule, ".", exc)]
        return [
            self._enforce_tier(rule, f)
            for f in produced
            if not PathPatterns.matches(f.path, rule.exclude)
        ]

    @staticmethod
    def _failure(rule: RuleDefinition, path: str, exc: Exception) -> Finding:
        """One rule-evaluation-failed finding. Critical rules cannot fail silently."""
        return Finding(
            rule_id=RULE_EVALUATION_FAILED_RULE_ID,
            category=rule.category,
            severity=Severity.CRITICAL if rule.is_locked else Severity.WARNING,
            path=path,
            message=f"Rule '{rule.id}' failed: {type(exc).__name__}: {exc}",
        )

    @staticmethod
    def _enforce_tier(rule: RuleDefinition, finding: Finding) -> Finding:
        """Findings of critical configuration rules are always critical."""
        if rule.is_locked and finding.severity != Severity.CRITICAL:
            return dataclasses.replace(finding, severity=Severity.CRITICAL)
        return finding
