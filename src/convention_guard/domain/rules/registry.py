"""Evaluator registry: maps catalog `check` keys to evaluator instances."""

from __future__ import annotations

from collections.abc import Iterable

from convention_guard.domain.exceptions import CatalogError
from convention_guard.domain.rules import RuleEvaluator
from convention_guard.domain.rules.configuration import LiteralRule
from convention_guard.domain.rules.data_model import (
    DeprecatedValidatorRule,
    LegacyModelConfigRule,
    ModelBaseTypeRule,
)
from convention_guard.domain.rules.docstrings import DocstringSectionsRule, MissingDocstringRule
from convention_guard.domain.rules.exceptions import (
    DomainExceptionsFileRule,
    ExceptionBaseTypeRule,
    ExceptionHygieneRule,
    ExceptionNamingRule,
)
from convention_guard.domain.rules.imports import ImportOrderRule, UnusedImportRule
from convention_guard.domain.rules.logging_rules import LoggingLibraryRule, PrintCallRule
from convention_guard.domain.rules.naming import DeclaredNameRule, DirectoryNamingRule, FileNamingRule
from convention_guard.domain.rules.structure import ExpectedDirectoryRule, OneClassPerFileRule, PackageMarkerRule
from convention_guard.domain.rules.type_hints import DeprecatedTypingSpellingRule, MissingAnnotationsRule


class EvaluatorRegistry:
    """
    Lookup from check key to evaluator.

    Adding a rule to the catalog needs no code when an existing evaluator
    fits; only a new kind of check needs a new evaluator registered here.
    """

    def __init__(self, evaluators: Iterable[RuleEvaluator] = ()) -> None:
        self._evaluators: dict[str, RuleEvaluator] = {}
        for evaluator in evaluators:
            self.register(evaluator)

    def register(self, evaluator: RuleEvaluator) -> None:
        """Add an evaluator. Keys are unique."""
        if evaluator.check in self._evaluators:
            raise CatalogError(f"Evaluator already registered: {evaluator.check}")
        self._evaluators[evaluator.check] = evaluator

    def get(self, check: str) -> RuleEvaluator:
        """Evaluator for check. Raises CatalogError for unknown keys."""
        try:
            return self._evaluators[check]
        except KeyError as exc:
            raise CatalogError(f"Unknown check: {check}") from exc

    @property
    def scopes(self) -> dict[str, str]:
        """Check key -> scope, used to validate catalog descriptors."""
        return {check: evaluator.scope for check, evaluator in self._evaluators.items()}

    @classmethod
    def default(cls) -> EvaluatorRegistry:
        """Registry with every built-in evaluator."""
        evaluators: list[RuleEvaluator] = [
            ExpectedDirectoryRule(),
            PackageMarkerRule(),
            OneClassPerFileRule(),
            MissingAnnotationsRule(),
            DeprecatedTypingSpellingRule(),
            ModelBaseTypeRule(),
            DeprecatedValidatorRule(),
            LegacyModelConfigRule(),
            ImportOrderRule(),
            UnusedImportRule(),
            FileNamingRule(),
            DirectoryNamingRule(),
            *DeclaredNameRule.defaults(),
            MissingDocstringRule(),
            DocstringSectionsRule(),
            PrintCallRule(),
            LoggingLibraryRule(),
            ExceptionBaseTypeRule(),
            ExceptionNamingRule(),
            DomainExceptionsFileRule(),
            ExceptionHygieneRule(),
            *LiteralRule.defaults(),
        ]
        return cls(evaluators)
