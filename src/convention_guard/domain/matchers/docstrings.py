"""Docstring matcher: presence and section headers (Google and NumPy layouts)."""

from __future__ import annotations

import re
from collections.abc import Mapping

import astroid

from convention_guard.domain.entities import DocstringBlock

_GOOGLE_HEADER = re.compile(r"^\s*([A-Za-z][A-Za-z ]*?)\s*:\s*$")
_NUMPY_UNDERLINE = re.compile(r"^\s*-{3,}\s*$")


class DocstringMatcher:
    """Detect docstrings and map their section headers onto canonical names."""

    def __init__(self, sections: Mapping[str, tuple[str, ...]]) -> None:
        self._synonyms: dict[str, str] = {}
        for canonical, spellings in sections.items():
            self._synonyms[canonical.lower()] = canonical
            for spelling in spellings:
                self._synonyms[spelling.lower()] = canonical

    def extract(self, node: astroid.nodes.NodeNG) -> DocstringBlock | None:
        """DocstringBlock for a function, class or module node, or None if absent."""
        doc_node = getattr(node, "doc_node", None)
        if doc_node is None or not isinstance(doc_node.value, str):
            return None
        return DocstringBlock(
            line=doc_node.lineno or getattr(node, "lineno", 0) or 0,
            sections=self.sections(doc_node.value),
            is_single_line=len(doc_node.value.strip().splitlines()) <= 1,
        )

    def sections(self, text: str) -> frozenset[str]:
        """Canonical section names whose header appears in text."""
        found: set[str] = set()
        lines = text.splitlines()
        for idx, line in enumerate(lines):
            header: str | None = None
            match = _GOOGLE_HEADER.match(line)
            if match:
                header = match.group(1)
            elif idx + 1 < len(lines) and _NUMPY_UNDERLINE.match(lines[idx + 1]) and line.strip():
                header = line.strip()
            if header is None:
                continue
            canonical = self._synonyms.get(header.lower())
            if canonical is not None:
                found.add(canonical)
        return frozenset(found)
