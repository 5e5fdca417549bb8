"""LibCST based Fixer Gateway."""

import libcst as cst

from convention_guard.domain.constants import ImportBucket
from convention_guard.domain.exceptions import FixApplicationError
from convention_guard.domain.protocols import FixerGatewayProtocol, ImportClassifier
from convention_guard.infrastructure.gateways.transformers import ReorderImportsTransformer


class LibCSTFixerGateway(FixerGatewayProtocol):
    """Gateway for applying safe code modifications using LibCST."""

    def __init__(self, label: str = "<source>") -> None:
        self._label = label

    def _parse(self, source: str) -> cst.Module:
        try:
            return cst.parse_module(source)
        except cst.ParserSyntaxError as exc:
            raise FixApplicationError(self._label, f"cannot parse: {exc.message}") from exc

    def import_buckets(self, source: str, classify: ImportClassifier) -> set[ImportBucket]:
        """Buckets present in the leading module-level import block."""
        transformer = ReorderImportsTransformer(classify)
        self._parse(source).visit(transformer)
        return set(transformer.buckets)

    def reorder_imports(self, source: str, classify: ImportClassifier) -> str:
        """
        Regroup the leading import block as stdlib, external, local.

        Args:
            source: Module source code.
            classify: Bucket classifier of the run.

        Returns:
            The rewritten source, or source itself when already ordered.

        Raises:
            FixApplicationError: If the source cannot be parsed.
        """
        transformer = ReorderImportsTransformer(classify)
        module = self._parse(source).visit(transformer)
        if not transformer.changed:
            return source
        return module.code
