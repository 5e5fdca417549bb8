"""Configuration-safety matcher: line scan for hardcoded connection strings, secrets and config loads."""

from __future__ import annotations

import logging
import re

from convention_guard.domain.config import MatcherSettings
from convention_guard.domain.entities import LiteralMatch
from convention_guard.domain.exceptions import CatalogError
from convention_guard.domain.patterns import PathPatterns

logger = logging.getLogger(__name__)

KIND_CONNECTION_STRING = "connection-string"
KIND_CONFIG_LOAD = "config-load"
KIND_SECRET_ASSIGNMENT = "secret-assignment"

_REDACTED = "***"
_SNIPPET_LIMIT = 80

# name = "value", name: T = "value", f(name="value"). Triple quotes are tried first.
_ASSIGNMENT = re.compile(
    r"(?<!\w)([A-Za-z_]\w*)\s*(?::\s*[\w\[\], .|]+?)?\s*(?<![=!<>])=(?!=)\s*"
    r"[rbuRBU]{0,2}(\"\"\"|'''|[\"'])(.*?)\2"
)
# {"name": "value"}
_DICT_ENTRY = re.compile(r"([\"'])([A-Za-z_]\w*)\1\s*:\s*[rbuRBU]{0,2}(\"\"\"|'''|[\"'])(.*?)\3")


class ConfigurationSafetyMatcher:
    """
    Scan source lines for configuration values that belong in the environment.

    Files matching a safety exclusion pattern (tests, examples, templates)
    are never scanned. Comment lines are skipped. Matched values are
    redacted before they are stored.
    """

    def __init__(self, settings: MatcherSettings) -> None:
        self._exclusions = settings.safety_exclusions
        self._connection: re.Pattern[str] | None = None
        if settings.connection_schemes:
            schemes = "|".join(re.escape(s) for s in settings.connection_schemes)
            self._connection = re.compile(
                rf"[\"']((?:{schemes})(?:\+[\w-]+)?://[^\"'\s]+)[\"']", re.IGNORECASE
            )
        try:
            self._config_loads = tuple(re.compile(p) for p in settings.config_load_patterns)
            self._secret_name = (
                re.compile(settings.secret_name_pattern) if settings.secret_name_pattern else None
            )
        except re.error as exc:
            raise CatalogError(f"Invalid configuration-safety pattern: {exc}") from exc

    def is_excluded(self, path: str) -> bool:
        """True if path matches a safety exclusion pattern."""
        return PathPatterns.matches(path, self._exclusions)

    def extract(self, path: str, source: str) -> tuple[LiteralMatch, ...]:
        """All hits in line order. Empty for excluded paths."""
        if self.is_excluded(path):
            logger.debug("Skipping configuration-safety scan for excluded path %s", path)
            return ()
        matches: list[LiteralMatch] = []
        for lineno, line in enumerate(source.splitlines(), start=1):
            if line.lstrip().startswith("#"):
                continue
            matches.extend(self._scan_line(lineno, line))
        return tuple(matches)

    def _scan_line(self, lineno: int, line: str) -> list[LiteralMatch]:
        found: list[LiteralMatch] = []
        if self._connection is not None:
            for match in self._connection.finditer(line):
                value = match.group(1)
                scheme = value.split("://", 1)[0]
                found.append(
                    LiteralMatch(
                        kind=KIND_CONNECTION_STRING,
                        line=lineno,
                        snippet=self._snippet(line.replace(value, f"{scheme}://{_REDACTED}")),
                    )
                )
        for pattern in self._config_loads:
            if pattern.search(line):
                found.append(LiteralMatch(kind=KIND_CONFIG_LOAD, line=lineno, snippet=self._snippet(line)))
                break
        if self._secret_name is not None:
            found.extend(self._secrets(lineno, line))
        return found

    def _secrets(self, lineno: int, line: str) -> list[LiteralMatch]:
        hits: list[tuple[str, str]] = []
        for match in _ASSIGNMENT.finditer(line):
            hits.append((match.group(1), match.group(3)))
        for match in _DICT_ENTRY.finditer(line):
            hits.append((match.group(2), match.group(4)))
        found: list[LiteralMatch] = []
        for identifier, value in hits:
            if not value.strip() or self._secret_name is None or not self._secret_name.search(identifier):
                continue
            found.append(
                LiteralMatch(
                    kind=KIND_SECRET_ASSIGNMENT,
                    line=lineno,
                    snippet=self._snippet(line.replace(value, _REDACTED)),
                    identifier=identifier,
                )
            )
        return found

    @staticmethod
    def _snippet(line: str) -> str:
        text = line.strip()
        return text if len(text) <= _SNIPPET_LIMIT else text[: _SNIPPET_LIMIT - 3] + "..."
