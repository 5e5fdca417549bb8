"""Use Case: Apply Fixes - execute a FixPlan one file at a time."""

import logging
from pathlib import Path
from typing import Optional

from convention_guard.domain.constants import FixKind, FixStatus, ImportBucket
from convention_guard.domain.entities import FixMutation, FixPlan, FixResult
from convention_guard.domain.exceptions import FixApplicationError
from convention_guard.domain.protocols import (
    FileSystemProtocol,
    FixerGatewayProtocol,
    ImportClassifier,
    PathLockProtocol,
    TelemetryPort,
)
from convention_guard.use_cases.plan_fixes import PlanFixesUseCase

logger = logging.getLogger(__name__)


class ApplyFixesUseCase:
    """
    Apply whitelisted mutations under per-path locks.

    Every mutation either fully applies or leaves the file untouched; a
    failure is recorded on its FixResult and the next mutation still runs.
    """

    def __init__(
        self,
        filesystem: FileSystemProtocol,
        fixer_gateway: FixerGatewayProtocol,
        locks: PathLockProtocol,
        telemetry: Optional[TelemetryPort] = None,
    ) -> None:
        self.filesystem = filesystem
        self.fixer_gateway = fixer_gateway
        self.locks = locks
        self.telemetry = telemetry

    def execute(
        self,
        plan: FixPlan,
        root: Path,
        classify: ImportClassifier,
        dry_run: bool = False,
    ) -> FixPlan:
        """
        Apply plan and return it with one result per mutation.

        Args:
            plan: Mutations from PlanFixesUseCase.
            root: Project root the mutation paths are relative to.
            classify: Import bucket classifier of the run.
            dry_run: Mark every mutation planned and write nothing.

        Returns:
            A FixPlan carrying the same mutations and their results.
        """
        if dry_run:
            results = tuple(FixResult(mutation=m, status=FixStatus.PLANNED) for m in plan.mutations)
            return FixPlan(mutations=plan.mutations, results=results)
        results_list: list[FixResult] = []
        for mutation in plan.mutations:
            result = self._apply_one(mutation, root, classify)
            logger.debug("%s %s: %s %s", mutation.kind.value, mutation.path, result.status.value, result.reason)
            if result.status == FixStatus.FAILED and self.telemetry is not None:
                self.telemetry.warning(f"Fix failed for {mutation.path}: {result.reason}")
            results_list.append(result)
        if self.telemetry is not None:
            applied = sum(1 for r in results_list if r.status == FixStatus.APPLIED)
            self.telemetry.step(f"Applied {applied} of {len(results_list)} fixes")
        return FixPlan(mutations=plan.mutations, results=tuple(results_list))

    def _apply_one(self, mutation: FixMutation, root: Path, classify: ImportClassifier) -> FixResult:
        try:
            if mutation.kind == FixKind.REORDER_IMPORTS:
                return self._reorder_imports(mutation, root, classify)
            if mutation.kind == FixKind.CREATE_DIRECTORY:
                return self._create_directory(mutation, root)
            if mutation.kind == FixKind.CREATE_MARKER:
                return self._create_marker(mutation, root)
        except FixApplicationError as exc:
            return FixResult(mutation=mutation, status=FixStatus.FAILED, reason=exc.reason)
        except (OSError, UnicodeDecodeError) as exc:
            return FixResult(mutation=mutation, status=FixStatus.FAILED, reason=str(exc))
        return FixResult(mutation=mutation, status=FixStatus.SKIPPED, reason="unsupported fix kind")

    def _reorder_imports(self, mutation: FixMutation, root: Path, classify: ImportClassifier) -> FixResult:
        target = root / mutation.path
        with self.locks.lock_for(target):
            raw = self.filesystem.read_bytes(target)
            source = raw.decode("utf-8")
            allowed = {b for b in ImportBucket if b.value in mutation.order_insensitive_buckets}
            blocked = self.fixer_gateway.import_buckets(source, classify) - allowed
            if blocked:
                names = ", ".join(sorted(b.value for b in blocked))
                return FixResult(
                    mutation=mutation,
                    status=FixStatus.SKIPPED,
                    reason=f"imports in order-sensitive bucket(s): {names}",
                )
            fixed = self.fixer_gateway.reorder_imports(source, classify)
            if PlanFixesUseCase.hash_of(raw) != mutation.pre_image_hash:
                if fixed == source:
                    return FixResult(mutation=mutation, status=FixStatus.UNCHANGED, reason="already fixed")
                return FixResult(mutation=mutation, status=FixStatus.FAILED, reason="modified since plan")
            if fixed == source:
                return FixResult(mutation=mutation, status=FixStatus.UNCHANGED, reason="nothing to reorder")
            self.filesystem.write_atomic(target, fixed.encode("utf-8"))
        return FixResult(mutation=mutation, status=FixStatus.APPLIED)

    def _create_directory(self, mutation: FixMutation, root: Path) -> FixResult:
        target = root / mutation.path
        with self.locks.lock_for(target):
            if self.filesystem.exists(target):
                if not self.filesystem.is_directory(target):
                    return FixResult(
                        mutation=mutation, status=FixStatus.FAILED, reason="path exists and is not a directory"
                    )
                return FixResult(mutation=mutation, status=FixStatus.UNCHANGED, reason="already exists")
            self.filesystem.make_dir(target)
            if mutation.marker_file:
                try:
                    self.filesystem.create_file(target / mutation.marker_file)
                except OSError:
                    self.filesystem.remove_empty_dir(target)
                    raise
        return FixResult(mutation=mutation, status=FixStatus.APPLIED)

    def _create_marker(self, mutation: FixMutation, root: Path) -> FixResult:
        target = root / mutation.path
        with self.locks.lock_for(target):
            try:
                self.filesystem.create_file(target)
            except FileExistsError:
                return FixResult(mutation=mutation, status=FixStatus.UNCHANGED, reason="already exists")
        return FixResult(mutation=mutation, status=FixStatus.APPLIED)
