"""Declarative rule catalog: rule descriptors, category index and overrides."""

from __future__ import annotations

import dataclasses
import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field

from convention_guard.domain.config import ConfigurationLoader, MatcherSettings
from convention_guard.domain.constants import Category, Severity
from convention_guard.domain.exceptions import CatalogError

logger = logging.getLogger(__name__)

SCOPE_FILE = "file"
SCOPE_PROJECT = "project"

_DESCRIPTOR_KEYS = frozenset(
    {"id", "category", "severity", "check", "applies_to", "exclude", "fixable", "options", "description"}
)


@dataclass(frozen=True)
class RuleDefinition:
    """One catalog rule. New rules are data bound to a registered evaluator key."""

    id: str
    category: Category
    severity: Severity
    check: str
    applies_to: tuple[str, ...] = ("*.py",)
    exclude: tuple[str, ...] = ()
    fixable: bool = False
    options: Mapping[str, object] = field(default_factory=dict)
    description: str = ""
    scope: str = SCOPE_FILE

    @property
    def is_locked(self) -> bool:
        """Configuration-category critical rules cannot be downgraded or disabled."""
        return self.category == Category.CONFIGURATION and self.severity == Severity.CRITICAL

    def option_list(self, key: str, default: Iterable[str] = ()) -> tuple[str, ...]:
        """Read a list-of-strings option with a default."""
        raw = self.options.get(key)
        if isinstance(raw, list):
            return tuple(str(x) for x in raw)
        return tuple(default)

    def option_str(self, key: str, default: str = "") -> str:
        """Read a string option with a default."""
        raw = self.options.get(key)
        return raw if isinstance(raw, str) else default

    def option_int(self, key: str, default: int) -> int:
        """Read an integer option with a default."""
        raw = self.options.get(key)
        return raw if isinstance(raw, int) and not isinstance(raw, bool) else default

    def option_bool(self, key: str, default: bool) -> bool:
        """Read a boolean option with a default."""
        raw = self.options.get(key)
        return raw if isinstance(raw, bool) else default

    def to_dict(self) -> dict[str, object]:
        """Convert to dictionary for the rules listing."""
        return {
            "id": self.id,
            "category": self.category.value,
            "severity": self.severity.value,
            "fixable": self.fixable,
            "scope": self.scope,
            "applies_to": list(self.applies_to),
            "exclude": list(self.exclude),
            "description": self.description,
        }


class RuleCatalog:
    """
    Resolved catalog for one run.

    Holds the rule descriptors, the matcher settings, per-category pass
    thresholds and a lookup from category to ordered rule ids. Instances are
    never mutated; override methods return new catalogs.
    """

    def __init__(
        self,
        version: str,
        language: str,
        settings: MatcherSettings,
        rules: Iterable[RuleDefinition],
        thresholds: Mapping[Category, Severity] | None = None,
    ) -> None:
        self.version = version
        self.language = language
        self.settings = settings
        self._rules: dict[str, RuleDefinition] = {}
        for rule in rules:
            if rule.id in self._rules:
                raise CatalogError(f"Duplicate rule id: {rule.id}")
            self._rules[rule.id] = rule
        self._thresholds: dict[Category, Severity] = dict(thresholds or {})
        # Configuration threshold is fixed: any critical finding is a critical-fail.
        self._thresholds.pop(Category.CONFIGURATION, None)
        index: dict[Category, list[str]] = {c: [] for c in Category}
        for rule_id in sorted(self._rules):
            index[self._rules[rule_id].category].append(rule_id)
        self._index = {c: tuple(ids) for c, ids in index.items()}

    # Lookup

    @property
    def rules(self) -> tuple[RuleDefinition, ...]:
        """All rules sorted by id."""
        return tuple(self._rules[rid] for rid in sorted(self._rules))

    def get(self, rule_id: str) -> RuleDefinition | None:
        """Rule definition by id."""
        return self._rules.get(rule_id)

    def rule_ids_for(self, category: Category) -> tuple[str, ...]:
        """Ordered rule ids of a category."""
        return self._index.get(category, ())

    @property
    def categories(self) -> tuple[Category, ...]:
        """Categories with at least one rule, in declaration order of Category."""
        return tuple(c for c in Category if self._index.get(c))

    def is_fixable(self, rule_id: str) -> bool:
        """True if rule_id names a rule flagged fixable."""
        rule = self._rules.get(rule_id)
        return bool(rule and rule.fixable)

    def threshold_for(self, category: Category) -> Severity:
        """Minimum severity that makes a category fail (default: warning)."""
        return self._thresholds.get(category, Severity.WARNING)

    # Construction

    @classmethod
    def from_mapping(
        cls,
        raw: Mapping[str, object],
        evaluator_scopes: Mapping[str, str],
    ) -> RuleCatalog:
        """
        Build a catalog from a parsed YAML/TOML document.

        Args:
            raw: Document with version, language, settings, thresholds and rules.
            evaluator_scopes: Registered evaluator keys mapped to their scope.

        Returns:
            The validated catalog.

        Raises:
            CatalogError: On any structural problem in the document.
        """
        if not isinstance(raw, Mapping):
            raise CatalogError("Catalog must be a mapping")
        version = raw.get("version")
        if not isinstance(version, (str, int)):
            raise CatalogError("Catalog 'version' is required")
        language = raw.get("language", "python")
        if not isinstance(language, str):
            raise CatalogError("Catalog 'language' must be a string")
        settings_raw = raw.get("settings", {}) or {}
        if not isinstance(settings_raw, Mapping):
            raise CatalogError("Catalog 'settings' must be a mapping")
        settings = MatcherSettings.from_mapping(settings_raw)
        thresholds = cls._parse_thresholds(raw.get("thresholds", {}) or {})
        rules_raw = raw.get("rules")
        if not isinstance(rules_raw, list):
            raise CatalogError("Catalog 'rules' must be a list")
        rules = [cls.parse_rule(entry, evaluator_scopes) for entry in rules_raw]
        return cls(str(version), language, settings, rules, thresholds)

    @staticmethod
    def parse_rule(entry: object, evaluator_scopes: Mapping[str, str]) -> RuleDefinition:
        """Validate one rule descriptor and build its RuleDefinition."""
        if not isinstance(entry, Mapping):
            raise CatalogError("Each catalog rule must be a mapping")
        rule_id = entry.get("id")
        if not isinstance(rule_id, str) or not rule_id:
            raise CatalogError("Catalog rule is missing 'id'")
        unknown = sorted(set(entry) - _DESCRIPTOR_KEYS)
        if unknown:
            raise CatalogError(f"Rule '{rule_id}' has unknown keys: {', '.join(unknown)}")
        try:
            category = Category(entry.get("category"))
            severity = Severity(entry.get("severity"))
        except ValueError as exc:
            raise CatalogError(f"Rule '{rule_id}': {exc}") from exc
        check = entry.get("check", rule_id)
        if check not in evaluator_scopes:
            raise CatalogError(f"Rule '{rule_id}' references unknown check '{check}'")
        options = entry.get("options", {}) or {}
        if not isinstance(options, Mapping):
            raise CatalogError(f"Rule '{rule_id}': 'options' must be a mapping")
        return RuleDefinition(
            id=rule_id,
            category=category,
            severity=severity,
            check=str(check),
            applies_to=RuleCatalog._patterns(rule_id, entry, "applies_to", ("*.py",)),
            exclude=RuleCatalog._patterns(rule_id, entry, "exclude", ()),
            fixable=bool(entry.get("fixable", False)),
            options=dict(options),
            description=str(entry.get("description", "")),
            scope=evaluator_scopes[str(check)],
        )

    @staticmethod
    def _patterns(
        rule_id: str, entry: Mapping[str, object], key: str, default: tuple[str, ...]
    ) -> tuple[str, ...]:
        raw = entry.get(key)
        if raw is None:
            return default
        if isinstance(raw, str):
            return (raw,)
        if isinstance(raw, list) and all(isinstance(p, str) for p in raw):
            return tuple(raw)
        raise CatalogError(f"Rule '{rule_id}': '{key}' must be a pattern or list of patterns")

    @staticmethod
    def _parse_thresholds(raw: object) -> dict[Category, Severity]:
        if not isinstance(raw, Mapping):
            raise CatalogError("Catalog 'thresholds' must be a mapping")
        try:
            return {Category(k): Severity(v) for k, v in raw.items()}
        except ValueError as exc:
            raise CatalogError(f"Catalog thresholds: {exc}") from exc

    # Overrides

    def with_overrides(
        self,
        config: ConfigurationLoader,
        evaluator_scopes: Mapping[str, str],
    ) -> RuleCatalog:
        """
        Apply [tool.convention-guard] overrides: disable, re-tier, extend,
        thresholds, extra safety exclusions and local prefixes.
        """
        rules = dict(self._rules)
        for rule_id in config.disabled_rules:
            rule = rules.get(rule_id)
            if rule is None:
                logger.warning("Cannot disable unknown rule: %s", rule_id)
                continue
            if rule.is_locked:
                raise CatalogError(f"Rule '{rule_id}' is a critical configuration rule and cannot be disabled")
            del rules[rule_id]
        for rule_id, severity in config.severity_overrides.items():
            rule = rules.get(rule_id)
            if rule is None:
                logger.warning("Cannot re-tier unknown rule: %s", rule_id)
                continue
            if rule.is_locked and severity != Severity.CRITICAL:
                raise CatalogError(f"Rule '{rule_id}' is a critical configuration rule and cannot be downgraded")
            rules[rule_id] = dataclasses.replace(rule, severity=severity)
        for entry in config.extra_rules:
            rule = self.parse_rule(entry, evaluator_scopes)
            if rule.id in rules:
                raise CatalogError(f"Extended rule '{rule.id}' duplicates an existing rule id")
            rules[rule.id] = rule
        thresholds = dict(self._thresholds)
        thresholds.update(config.category_thresholds)
        settings = self.settings.with_extra_exclusions(config.safety_exclusions)
        settings = settings.with_local_prefixes(config.local_prefixes)
        return RuleCatalog(self.version, self.language, settings, rules.values(), thresholds)

    def restricted_to(self, categories: Iterable[Category]) -> RuleCatalog:
        """Return a catalog holding only rules of the given categories."""
        wanted = set(categories)
        if not wanted:
            return self
        kept = [r for r in self._rules.values() if r.category in wanted]
        return RuleCatalog(self.version, self.language, self.settings, kept, self._thresholds)
