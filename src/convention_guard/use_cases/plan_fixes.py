"""Use Case: Plan Fixes - derive file-level mutations from fixable findings."""

import hashlib
import logging
from collections.abc import Iterable
from pathlib import Path

from convention_guard.domain.catalog import RuleCatalog
from convention_guard.domain.constants import FixKind
from convention_guard.domain.entities import Finding, FixDescriptor, FixMutation, FixPlan
from convention_guard.domain.protocols import FileSystemProtocol

logger = logging.getLogger(__name__)


class PlanFixesUseCase:
    """Build a de-duplicated, path-ordered FixPlan. Never writes."""

    def __init__(self, filesystem: FileSystemProtocol) -> None:
        self.filesystem = filesystem

    def execute(self, findings: Iterable[Finding], catalog: RuleCatalog, root: Path) -> FixPlan:
        """
        Plan one mutation per (kind, path).

        Only findings of rules flagged fixable that carry a suggested fix are
        considered. Rewrites record a SHA-256 of the file as planned against,
        or no pre-image when the file cannot be read. Create operations record
        no pre-image.

        Args:
            findings: Findings of the evaluation pass.
            catalog: Resolved catalog, for fixability and rule options.
            root: Project root the relative paths are resolved against.

        Returns:
            The plan, ordered by path then kind.
        """
        grouped: dict[tuple[FixKind, str], tuple[FixDescriptor, set[str]]] = {}
        for finding in findings:
            fix = finding.suggested_fix
            if fix is None or not catalog.is_fixable(finding.rule_id):
                continue
            _, rule_ids = grouped.setdefault((fix.kind, fix.path), (fix, set()))
            rule_ids.add(finding.rule_id)
        mutations: list[FixMutation] = []
        for _, (fix, rule_ids) in sorted(grouped.items(), key=lambda item: (item[0][1], item[0][0].value)):
            mutations.append(self._mutation(fix, tuple(sorted(rule_ids)), catalog, root))
        logger.debug("Planned %d mutations", len(mutations))
        return FixPlan(mutations=tuple(mutations))

    def _mutation(
        self, fix: FixDescriptor, rule_ids: tuple[str, ...], catalog: RuleCatalog, root: Path
    ) -> FixMutation:
        buckets: tuple[str, ...] = ()
        pre_image: str | None = None
        if fix.kind == FixKind.REORDER_IMPORTS:
            for rule_id in rule_ids:
                rule = catalog.get(rule_id)
                if rule is not None:
                    buckets = rule.option_list("order_insensitive_buckets")
                    break
            try:
                pre_image = self.hash_of(self.filesystem.read_bytes(root / fix.path))
            except OSError as exc:
                # A rewrite planned without a pre-image is never written.
                logger.warning("Cannot read %s while planning: %s", fix.path, exc.strerror or exc)
        return FixMutation(
            kind=fix.kind,
            path=fix.path,
            rule_ids=rule_ids,
            pre_image_hash=pre_image,
            description=fix.description,
            order_insensitive_buckets=buckets,
            marker_file=fix.marker_file,
        )

    @staticmethod
    def hash_of(content: bytes) -> str:
        """SHA-256 hex digest used as the pre-image of a rewrite."""
        return hashlib.sha256(content).hexdigest()
