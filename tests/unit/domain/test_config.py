"""Unit tests for MatcherSettings and ConfigurationLoader."""

import logging

import pytest

from convention_guard.domain.config import ConfigurationLoader, MatcherSettings
from convention_guard.domain.constants import (
    DEFAULT_IGNORE_PATTERNS,
    DEFAULT_INCLUDE_PATTERNS,
    Category,
    Severity,
)
from convention_guard.domain.exceptions import CatalogError, ConfigurationError


class TestMatcherSettings:
    """Test MatcherSettings.from_mapping validation."""

    def test_from_mapping_overrides_defaults(self) -> None:
        """Known keys replace defaults; others keep them."""
        settings = MatcherSettings.from_mapping(
            {"error_suffix": "Failure", "exception_files": ["errors.py"]}
        )
        assert settings.error_suffix == "Failure"
        assert settings.exception_files == ("errors.py",)
        assert settings.model_bases == ("BaseModel",)

    def test_from_mapping_parses_section_synonyms(self) -> None:
        """docstring_sections maps canonical names to tuples of headers."""
        settings = MatcherSettings.from_mapping({"docstring_sections": {"args": ["Params"]}})
        assert settings.docstring_sections == {"args": ("Params",)}

    def test_unknown_key_rejected(self) -> None:
        """Typos in settings are catalog errors."""
        with pytest.raises(CatalogError, match="Unknown catalog settings: model_base"):
            MatcherSettings.from_mapping({"model_base": ["X"]})

    def test_list_of_non_strings_rejected(self) -> None:
        """List settings must hold strings."""
        with pytest.raises(CatalogError, match="local_prefixes"):
            MatcherSettings.from_mapping({"local_prefixes": [1, 2]})

    def test_string_setting_type_checked(self) -> None:
        """String settings must be strings."""
        with pytest.raises(CatalogError, match="error_suffix"):
            MatcherSettings.from_mapping({"error_suffix": ["Error"]})

    def test_extra_exclusions_appended(self) -> None:
        """with_extra_exclusions keeps existing patterns and adds new ones."""
        settings = MatcherSettings(safety_exclusions=("tests",))
        assert settings.with_extra_exclusions(("fixtures",)).safety_exclusions == ("tests", "fixtures")
        assert settings.with_extra_exclusions(()) is settings


class TestConfigurationLoader:
    """Test ConfigurationLoader validation and accessors."""

    def test_defaults_without_config(self) -> None:
        """An empty section means defaults everywhere."""
        config = ConfigurationLoader({})
        assert config.include_patterns == DEFAULT_INCLUDE_PATTERNS
        assert config.ignore_patterns == DEFAULT_IGNORE_PATTERNS
        assert config.workers == 0
        assert config.catalog_path is None
        assert config.disabled_rules == ()

    def test_ignore_merges_with_defaults(self) -> None:
        """Configured ignore patterns extend the built-in ones."""
        config = ConfigurationLoader({"ignore": ["vendor"]})
        assert config.ignore_patterns[:-1] == DEFAULT_IGNORE_PATTERNS
        assert config.ignore_patterns[-1] == "vendor"

    def test_typed_accessors(self) -> None:
        """Severity and threshold tables are converted to enums."""
        config = ConfigurationLoader(
            {
                "severity": {"print-call": "suggestion"},
                "category_thresholds": {"logging": "critical"},
                "workers": 4,
            },
            {"convention-guard": {}},
        )
        assert config.severity_overrides == {"print-call": Severity.SUGGESTION}
        assert config.category_thresholds == {Category.LOGGING: Severity.CRITICAL}
        assert config.workers == 4
        assert config.get_tool_section() == {"convention-guard": {}}

    def test_list_keys_must_be_lists_of_strings(self) -> None:
        """'disable' given as a string is rejected."""
        with pytest.raises(ConfigurationError, match="'disable' must be a list of strings"):
            ConfigurationLoader({"disable": "print-call"})

    def test_unknown_severity_rejected(self) -> None:
        """Severity overrides must name a known severity."""
        with pytest.raises(ConfigurationError, match="unknown severity 'fatal'"):
            ConfigurationLoader({"severity": {"print-call": "fatal"}})

    def test_unknown_threshold_category_rejected(self) -> None:
        """category_thresholds keys must be categories."""
        with pytest.raises(ConfigurationError, match="Unknown category"):
            ConfigurationLoader({"category_thresholds": {"style": "warning"}})

    @pytest.mark.parametrize("workers", [-1, True, "4"])
    def test_workers_must_be_non_negative_int(self, workers: object) -> None:
        """workers rejects negatives, booleans and strings."""
        with pytest.raises(ConfigurationError, match="workers"):
            ConfigurationLoader({"workers": workers})

    def test_extend_must_be_tables(self) -> None:
        """extend entries are rule descriptor tables."""
        with pytest.raises(ConfigurationError, match="extend"):
            ConfigurationLoader({"extend": ["print-call"]})

    def test_unknown_key_only_warns(self, caplog: pytest.LogCaptureFixture) -> None:
        """Unknown keys are logged, not fatal."""
        with caplog.at_level(logging.WARNING):
            config = ConfigurationLoader({"colour": "red"})
        assert "colour" in caplog.text
        assert config.config == {"colour": "red"}
