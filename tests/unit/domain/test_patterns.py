"""Unit tests for path patterns and casing helpers."""

from convention_guard.domain.constants import NamingConvention
from convention_guard.domain.patterns import Casing, PathPatterns


class TestPathPatterns:
    """Test PathPatterns.matches and applies."""

    def test_component_pattern_matches_any_directory(self) -> None:
        """A pattern without '/' matches any single path component."""
        assert PathPatterns.matches("pkg/tests/test_x.py", ["tests"])

    def test_component_pattern_matches_basename_glob(self) -> None:
        """Basename globs match at any depth."""
        assert PathPatterns.matches("src/pkg/test_models.py", ["test_*.py"])
        assert not PathPatterns.matches("src/pkg/models.py", ["test_*.py"])

    def test_path_pattern_matches_whole_path(self) -> None:
        """A pattern with '/' is matched against the relative path."""
        assert PathPatterns.matches("a/b/c.py", ["a/*/c.py"])
        assert not PathPatterns.matches("x/a/b/c.py", ["a/*/c.py"])

    def test_double_star_prefix_matches_at_root(self) -> None:
        """'**/' also matches a path directly at the root."""
        assert PathPatterns.matches("c.py", ["**/c.py"])

    def test_empty_patterns_are_ignored(self) -> None:
        """Empty strings never match."""
        assert not PathPatterns.matches("a.py", [""])

    def test_applies_include_then_exclude(self) -> None:
        """Files must match include and must not match exclude."""
        assert PathPatterns.applies("src/a.py", ["*.py"], [])
        assert not PathPatterns.applies("README.md", ["*.py"], [])
        assert not PathPatterns.applies("build/a.py", ["*.py"], ["build"])

    def test_applies_with_empty_include_matches_everything(self) -> None:
        """No include patterns means every path is included."""
        assert PathPatterns.applies("anything", [], [])


class TestCasing:
    """Test Casing.classify and conforms."""

    def test_classify(self) -> None:
        """Each identifier maps to its most specific convention."""
        assert Casing.classify("snake_case") == NamingConvention.LOWER_SNAKE
        assert Casing.classify("_private") == NamingConvention.LOWER_SNAKE
        assert Casing.classify("__init__") == NamingConvention.LOWER_SNAKE
        assert Casing.classify("CamelCase") == NamingConvention.UPPER_CAMEL
        assert Casing.classify("HTTPServer") == NamingConvention.UPPER_CAMEL
        assert Casing.classify("UPPER_SNAKE") == NamingConvention.UPPER_SNAKE
        assert Casing.classify("T") == NamingConvention.UPPER_SNAKE
        assert Casing.classify("mixedCase") == NamingConvention.OTHER

    def test_all_caps_word_is_a_valid_type_name(self) -> None:
        """'ID' conforms to UpperCamelCase; 'MAX_SIZE' does not."""
        assert Casing.conforms("ID", NamingConvention.UPPER_CAMEL)
        assert not Casing.conforms("MAX_SIZE", NamingConvention.UPPER_CAMEL)

    def test_conforms_exact(self) -> None:
        """Same convention conforms; a different one does not."""
        assert Casing.conforms("load_file", NamingConvention.LOWER_SNAKE)
        assert not Casing.conforms("loadFile", NamingConvention.LOWER_SNAKE)
