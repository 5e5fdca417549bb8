"""Rule evaluator protocol. Evaluators are registered by key and bound to catalog rules."""

from collections.abc import Iterable
from typing import TYPE_CHECKING, Optional, Protocol

__all__ = [
    "RuleEvaluator",
]

if TYPE_CHECKING:
    from convention_guard.domain.catalog import RuleDefinition
    from convention_guard.domain.config import MatcherSettings
    from convention_guard.domain.entities import FileFacts, Finding, ProjectTree, SourceFile


# -----------------------------------------------------------------------------
# Evaluators are stateless. The engine owns iteration, applicability and
# isolation; an evaluator only turns facts into findings for one rule.
# File-scope evaluators run once per applicable file; project-scope
# evaluators run once per run with source_file and facts set to None.
# -----------------------------------------------------------------------------


class RuleEvaluator(Protocol):
    """A registered check. `check` is the key catalog descriptors refer to."""

    check: str
    scope: str
    requires_syntax: bool

    def evaluate(
        self,
        tree: "ProjectTree",
        source_file: Optional["SourceFile"],
        facts: Optional["FileFacts"],
        rule: "RuleDefinition",
        settings: "MatcherSettings",
    ) -> Iterable["Finding"]:
        """Yield or return findings of rule for one file (or for the whole tree)."""
        ...
