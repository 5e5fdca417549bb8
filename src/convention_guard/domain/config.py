"""Configuration value objects. Created by Infrastructure; Domain never reads files."""

from __future__ import annotations

import dataclasses
import logging
from collections.abc import Mapping
from dataclasses import dataclass, field

from convention_guard.domain.constants import (
    DEFAULT_IGNORE_PATTERNS,
    DEFAULT_INCLUDE_PATTERNS,
    Category,
    Severity,
)
from convention_guard.domain.exceptions import CatalogError, ConfigurationError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MatcherSettings:
    """
    Marker-name and pattern tables consumed by the structural matchers.

    Every identifier a matcher looks for lives here so the matchers stay
    reusable across differently named conventions.
    """

    stdlib_extra: tuple[str, ...] = ()
    local_prefixes: tuple[str, ...] = ()
    deprecated_spellings: Mapping[str, str] = field(
        default_factory=lambda: {
            "List": "list",
            "Dict": "dict",
            "Set": "set",
            "FrozenSet": "frozenset",
            "Tuple": "tuple",
            "Type": "type",
            "Optional": "X | None",
            "Union": "X | Y",
        }
    )
    model_bases: tuple[str, ...] = ("BaseModel",)
    expected_model_bases: tuple[str, ...] = ("BaseSchema",)
    model_marker_decorators: tuple[str, ...] = ()
    modern_validators: tuple[str, ...] = ("field_validator", "model_validator")
    deprecated_validators: tuple[str, ...] = ("validator", "root_validator")
    config_markers: tuple[str, ...] = ("model_config",)
    deprecated_config_markers: tuple[str, ...] = ("Config",)
    docstring_sections: Mapping[str, tuple[str, ...]] = field(
        default_factory=lambda: {
            "args": ("Args", "Arguments", "Parameters"),
            "returns": ("Returns", "Return", "Yields", "Yield"),
            "raises": ("Raises", "Raise"),
        }
    )
    exception_files: tuple[str, ...] = ("exceptions.py", "errors.py")
    error_suffix: str = "Error"
    builtin_error_bases: tuple[str, ...] = ("Exception",)
    broad_exception_names: tuple[str, ...] = ("Exception", "BaseException")
    safety_exclusions: tuple[str, ...] = ()
    connection_schemes: tuple[str, ...] = ()
    config_load_patterns: tuple[str, ...] = ()
    secret_name_pattern: str = ""

    @classmethod
    def from_mapping(cls, raw: Mapping[str, object]) -> MatcherSettings:
        """Build settings from the catalog 'settings' mapping. Unknown keys are rejected."""
        known = set(cls.__dataclass_fields__)
        unknown = sorted(set(raw) - known)
        if unknown:
            raise CatalogError(f"Unknown catalog settings: {', '.join(unknown)}")
        kwargs: dict[str, object] = {}
        for key, value in raw.items():
            default = cls.__dataclass_fields__[key].default
            if key == "deprecated_spellings":
                kwargs[key] = MatcherSettings._string_map(key, value)
            elif key == "docstring_sections":
                kwargs[key] = MatcherSettings._section_map(value)
            elif isinstance(default, str):
                if not isinstance(value, str):
                    raise CatalogError(f"Catalog setting '{key}' must be a string")
                kwargs[key] = value
            else:
                kwargs[key] = MatcherSettings._string_tuple(key, value)
        return cls(**kwargs)  # type: ignore[arg-type]

    def with_extra_exclusions(self, extra: tuple[str, ...]) -> MatcherSettings:
        """Return a copy with additional safety exclusion patterns."""
        if not extra:
            return self
        return dataclasses.replace(self, safety_exclusions=self.safety_exclusions + extra)

    def with_local_prefixes(self, extra: tuple[str, ...]) -> MatcherSettings:
        """Return a copy with additional local-import prefixes."""
        if not extra:
            return self
        return dataclasses.replace(self, local_prefixes=self.local_prefixes + extra)

    @staticmethod
    def _string_tuple(key: str, value: object) -> tuple[str, ...]:
        if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
            raise CatalogError(f"Catalog setting '{key}' must be a list of strings")
        return tuple(value)

    @staticmethod
    def _string_map(key: str, value: object) -> dict[str, str]:
        if not isinstance(value, dict) or not all(
            isinstance(k, str) and isinstance(v, str) for k, v in value.items()
        ):
            raise CatalogError(f"Catalog setting '{key}' must map strings to strings")
        return dict(value)

    @staticmethod
    def _section_map(value: object) -> dict[str, tuple[str, ...]]:
        if not isinstance(value, dict):
            raise CatalogError("Catalog setting 'docstring_sections' must be a mapping")
        return {
            str(section): MatcherSettings._string_tuple(f"docstring_sections.{section}", synonyms)
            for section, synonyms in value.items()
        }


class ConfigurationLoader:
    """
    Immutable view of the [tool.convention-guard] section of pyproject.toml.

    Created by Infrastructure from (config_dict, tool_section). Domain does not
    read the filesystem; ConfigFileLoader reads the file and constructs this
    object at the composition root.
    """

    def __init__(
        self,
        config_dict: dict[str, object],
        tool_section: dict[str, object] | None = None,
    ) -> None:
        """Set config once at construction. No mutable state after init."""
        self._config = dict(config_dict)
        self._tool_section = dict(tool_section or {})
        if self._config:
            self.validate_config(self._config)

    def validate_config(self, config: dict[str, object]) -> None:
        """Validate value types. Raises ConfigurationError on the first problem."""
        for key in ("disable", "include", "ignore", "safety_exclusions", "local_prefixes"):
            value = config.get(key, [])
            if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
                raise ConfigurationError(f"'{key}' must be a list of strings")
        for key in ("severity", "category_thresholds"):
            value = config.get(key, {})
            if not isinstance(value, dict):
                raise ConfigurationError(f"'{key}' must be a table")
            for name, sev in value.items():
                if sev not in {s.value for s in Severity}:
                    raise ConfigurationError(f"'{key}.{name}' has unknown severity '{sev}'")
        thresholds = config.get("category_thresholds", {})
        if isinstance(thresholds, dict):
            valid = {c.value for c in Category}
            for name in thresholds:
                if name not in valid:
                    raise ConfigurationError(f"Unknown category in category_thresholds: '{name}'")
        extend = config.get("extend", [])
        if not isinstance(extend, list) or not all(isinstance(v, dict) for v in extend):
            raise ConfigurationError("'extend' must be an array of tables")
        workers = config.get("workers", 0)
        if not isinstance(workers, int) or isinstance(workers, bool) or workers < 0:
            raise ConfigurationError("'workers' must be a non-negative integer")
        catalog = config.get("catalog")
        if catalog is not None and not isinstance(catalog, str):
            raise ConfigurationError("'catalog' must be a path string")
        known = {
            "catalog", "disable", "severity", "extend", "include", "ignore",
            "safety_exclusions", "local_prefixes", "category_thresholds", "workers",
        }
        for key in sorted(set(config) - known):
            logger.warning("Ignoring unknown [tool.convention-guard] key: %s", key)

    @property
    def config(self) -> dict[str, object]:
        """Return the loaded configuration."""
        return self._config

    def get_tool_section(self) -> dict[str, object]:
        """Return the full [tool] section from pyproject.toml."""
        return self._tool_section

    def _get_list(self, key: str) -> tuple[str, ...]:
        """Helper to safely get a tuple of strings from config."""
        raw = self._config.get(key, [])
        if isinstance(raw, list):
            return tuple(str(item) for item in raw if isinstance(item, str))
        return ()

    @property
    def catalog_path(self) -> str | None:
        """Path of a catalog file replacing the default one, if configured."""
        raw = self._config.get("catalog")
        return raw if isinstance(raw, str) else None

    @property
    def disabled_rules(self) -> tuple[str, ...]:
        """Rule ids to remove from the catalog."""
        return self._get_list("disable")

    @property
    def severity_overrides(self) -> dict[str, Severity]:
        """Rule id -> re-tiered severity."""
        raw = self._config.get("severity", {})
        if not isinstance(raw, dict):
            return {}
        return {str(k): Severity(v) for k, v in raw.items()}

    @property
    def extra_rules(self) -> list[dict[str, object]]:
        """Additional rule descriptors appended to the catalog."""
        raw = self._config.get("extend", [])
        return [dict(r) for r in raw] if isinstance(raw, list) else []

    @property
    def include_patterns(self) -> tuple[str, ...]:
        """File patterns the loader keeps."""
        return self._get_list("include") or DEFAULT_INCLUDE_PATTERNS

    @property
    def ignore_patterns(self) -> tuple[str, ...]:
        """Directory/file patterns the loader skips (merged with defaults)."""
        return DEFAULT_IGNORE_PATTERNS + self._get_list("ignore")

    @property
    def safety_exclusions(self) -> tuple[str, ...]:
        """Extra example/template/test path patterns for configuration safety."""
        return self._get_list("safety_exclusions")

    @property
    def local_prefixes(self) -> tuple[str, ...]:
        """Extra module prefixes classified as local imports."""
        return self._get_list("local_prefixes")

    @property
    def category_thresholds(self) -> dict[Category, Severity]:
        """Per-category pass threshold overrides."""
        raw = self._config.get("category_thresholds", {})
        if not isinstance(raw, dict):
            return {}
        return {Category(k): Severity(v) for k, v in raw.items()}

    @property
    def workers(self) -> int:
        """Worker pool size; 0 means 'use available parallelism'."""
        raw = self._config.get("workers", 0)
        return raw if isinstance(raw, int) else 0

