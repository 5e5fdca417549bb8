"""Path-pattern and casing helpers shared by the loader, matchers and rules."""

import re
from collections.abc import Iterable
from fnmatch import fnmatchcase

from convention_guard.domain.constants import NamingConvention

_LOWER_SNAKE = re.compile(r"^_*[a-z][a-z0-9_]*$")
_UPPER_CAMEL = re.compile(r"^_*[A-Z][a-zA-Z0-9]*$")
_UPPER_SNAKE = re.compile(r"^_*[A-Z][A-Z0-9_]*$")
_DUNDER = re.compile(r"^__[a-z][a-z0-9_]*__$")


class PathPatterns:
    """
    Glob matching over relative POSIX paths.

    A pattern without '/' matches the basename or any single path component
    (so "tests" matches "pkg/tests/test_x.py"). A pattern with '/' is matched
    against the whole relative path; a leading "**/" also matches at the root.
    """

    @staticmethod
    def matches(path: str, patterns: Iterable[str]) -> bool:
        """True if path matches any of patterns."""
        parts = path.split("/")
        for pattern in patterns:
            if not pattern:
                continue
            if "/" not in pattern:
                if any(fnmatchcase(part, pattern) for part in parts):
                    return True
                continue
            if fnmatchcase(path, pattern):
                return True
            if pattern.startswith("**/") and fnmatchcase(path, pattern[3:]):
                return True
        return False

    @staticmethod
    def applies(path: str, include: Iterable[str], exclude: Iterable[str]) -> bool:
        """Include-then-exclude check. An empty include list matches everything."""
        include = list(include)
        if include and not PathPatterns.matches(path, include):
            return False
        return not PathPatterns.matches(path, exclude)


class Casing:
    """Classify identifiers by casing convention."""

    @staticmethod
    def classify(name: str) -> NamingConvention:
        """Return the most specific convention name satisfies."""
        if _DUNDER.match(name) or _LOWER_SNAKE.match(name):
            return NamingConvention.LOWER_SNAKE
        if _UPPER_SNAKE.match(name):
            # Single capital letters ("T") are valid as both; treat as constant.
            return NamingConvention.UPPER_SNAKE
        if _UPPER_CAMEL.match(name):
            return NamingConvention.UPPER_CAMEL
        return NamingConvention.OTHER

    @staticmethod
    def conforms(name: str, expected: NamingConvention) -> bool:
        """True if name is spelled in the expected convention."""
        actual = Casing.classify(name)
        if actual == expected:
            return True
        # An all-caps single word ("ID", "T") is a valid UpperCamel type name too.
        return expected == NamingConvention.UPPER_CAMEL and actual == NamingConvention.UPPER_SNAKE and "_" not in name.strip("_")