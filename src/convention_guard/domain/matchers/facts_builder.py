"""Facts builder: parse a source file once and run every structural matcher over it."""

from __future__ import annotations

import logging

import astroid

from convention_guard.domain.config import MatcherSettings
from convention_guard.domain.entities import FileFacts, LiteralMatch, ParseDegraded, SourceFile
from convention_guard.domain.matchers.annotations import AnnotationMatcher
from convention_guard.domain.matchers.calls import CallMatcher
from convention_guard.domain.matchers.configuration_safety import ConfigurationSafetyMatcher
from convention_guard.domain.matchers.data_model import DataModelMatcher, TypeMatcher
from convention_guard.domain.matchers.docstrings import DocstringMatcher
from convention_guard.domain.matchers.exceptions import ExceptHandlerMatcher
from convention_guard.domain.matchers.imports import ImportMatcher
from convention_guard.domain.matchers.naming import NamingMatcher

logger = logging.getLogger(__name__)


class FileFactsBuilder:
    """
    Build FileFacts for a SourceFile.

    The builder is shared by all workers of a run and holds no per-file
    state. It never raises for source it cannot parse: the literal scan
    still runs (it needs no syntax tree) and the facts are marked degraded
    so syntax-dependent rules can report that compliance is unconfirmed.
    Read failures (FileUnreadableError) are left to the caller.
    """

    def __init__(self, settings: MatcherSettings, local_names: frozenset[str]) -> None:
        self._docstrings = DocstringMatcher(settings.docstring_sections)
        self._imports = ImportMatcher(settings, local_names)
        self._annotations = AnnotationMatcher(settings, self._docstrings)
        self._types = TypeMatcher(self._docstrings)
        self._models = DataModelMatcher(settings)
        self._naming = NamingMatcher()
        self._handlers = ExceptHandlerMatcher(settings)
        self._calls = CallMatcher()
        self._safety = ConfigurationSafetyMatcher(settings)

    def __call__(self, source_file: SourceFile) -> FileFacts:
        return self.build(source_file)

    def build(self, source_file: SourceFile) -> FileFacts:
        """Run all matchers over source_file's content."""
        source = source_file.content
        literals = self._safety.extract(source_file.path, source)
        try:
            module = astroid.parse(source, module_name=self.module_name(source_file.path), path=source_file.path)
            return self._structural_facts(module, source, literals)
        except astroid.AstroidBuildingError as exc:
            error = getattr(exc, "error", None)
            line = getattr(error, "lineno", None)
            reason = getattr(error, "msg", None) or str(exc)
            logger.debug("Parse degraded for %s: %s", source_file.path, reason)
            return FileFacts(literals=literals, degraded=ParseDegraded(reason=reason, line=line))
        except RecursionError:
            logger.debug("Parse degraded for %s: nesting too deep", source_file.path)
            return FileFacts(literals=literals, degraded=ParseDegraded(reason="nesting too deep"))
        except Exception as exc:  # noqa: BLE001
            logger.exception("Structural extraction failed for %s", source_file.path)
            return FileFacts(literals=literals, degraded=ParseDegraded(reason=f"{type(exc).__name__}: {exc}"))

    def _structural_facts(
        self, module: astroid.nodes.Module, source: str, literals: tuple[LiteralMatch, ...]
    ) -> FileFacts:
        imports = self._imports.extract(module)
        exported = ImportMatcher.exported_names(module)
        return FileFacts(
            imports=imports,
            import_order_violations=ImportMatcher.order_violations(imports),
            unused_imports=ImportMatcher.unused_candidates(module, source, imports, exported),
            names=self._naming.extract(module),
            types=self._types.extract(module),
            models=self._models.extract(module),
            functions=self._annotations.extract(module),
            except_handlers=self._handlers.extract(module),
            calls=self._calls.extract(module),
            literals=literals,
            exported_names=exported,
        )

    @staticmethod
    def module_name(path: str) -> str:
        """Dotted module name for a relative path ('src/' prefix and '__init__' dropped)."""
        parts = path.removesuffix(".py").split("/")
        if parts and parts[0] == "src" and len(parts) > 1:
            parts = parts[1:]
        if len(parts) > 1 and parts[-1] == "__init__":
            parts = parts[:-1]
        return ".".join(parts)
