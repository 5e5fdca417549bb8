"""Type and data-model matchers: class declarations, model-like types and their markers."""

from __future__ import annotations

import astroid

from convention_guard.domain.config import MatcherSettings
from convention_guard.domain.entities import DecoratorUse, ModelDeclaration, TypeDeclaration
from convention_guard.domain.matchers.annotations import AnnotationMatcher
from convention_guard.domain.matchers.docstrings import DocstringMatcher


class TypeMatcher:
    """Extract every class declaration with its base names."""

    def __init__(self, docstrings: DocstringMatcher) -> None:
        self._docstrings = docstrings

    def extract(self, module: astroid.nodes.Module) -> tuple[TypeDeclaration, ...]:
        """Class declarations in source order."""
        declarations: list[TypeDeclaration] = []
        for node in module.nodes_of_class(astroid.nodes.ClassDef):
            nested = not isinstance(node.parent, astroid.nodes.Module)
            declarations.append(
                TypeDeclaration(
                    name=node.name,
                    line=node.lineno,
                    bases=self.base_names(node),
                    decorators=AnnotationMatcher.decorator_names(node),
                    is_public=not node.name.startswith("_") and not nested,
                    docstring=self._docstrings.extract(node),
                    is_nested=nested,
                )
            )
        return tuple(declarations)

    @staticmethod
    def base_names(node: astroid.nodes.ClassDef) -> tuple[str, ...]:
        """Last dotted component of each base, subscripts stripped (Generic[T] -> Generic)."""
        names: list[str] = []
        for base in node.bases:
            target = base.value if isinstance(base, astroid.nodes.Subscript) else base
            if isinstance(target, astroid.nodes.Name):
                names.append(target.name)
            elif isinstance(target, astroid.nodes.Attribute):
                names.append(target.attrname)
        return tuple(names)


class DataModelMatcher:
    """
    Recognise model-like types and record their validators and config markers.

    A class is model-like when one of its bases is a configured model base,
    an expected model base, or another model-like class declared earlier in
    the same file, or when it carries a configured marker decorator.
    """

    def __init__(self, settings: MatcherSettings) -> None:
        self._settings = settings
        self._validator_names = frozenset(settings.modern_validators) | frozenset(settings.deprecated_validators)

    def extract(self, module: astroid.nodes.Module) -> tuple[ModelDeclaration, ...]:
        """Model declarations in source order."""
        known = set(self._settings.model_bases) | set(self._settings.expected_model_bases)
        markers = frozenset(self._settings.model_marker_decorators)
        models: list[ModelDeclaration] = []
        for node in module.nodes_of_class(astroid.nodes.ClassDef):
            bases = TypeMatcher.base_names(node)
            decorated = bool(markers.intersection(AnnotationMatcher.decorator_names(node)))
            if not decorated and not known.intersection(bases):
                continue
            known.add(node.name)
            models.append(
                ModelDeclaration(
                    name=node.name,
                    line=node.lineno,
                    bases=bases,
                    validators=self._validators(node),
                    config_markers=self._config_markers(node),
                )
            )
        return tuple(models)

    def _validators(self, node: astroid.nodes.ClassDef) -> tuple[DecoratorUse, ...]:
        uses: list[DecoratorUse] = []
        for stmt in node.body:
            if not isinstance(stmt, astroid.nodes.FunctionDef):
                continue
            for name in AnnotationMatcher.decorator_names(stmt):
                if name in self._validator_names:
                    uses.append(DecoratorUse(name=name, method=stmt.name, line=stmt.lineno))
        return tuple(uses)

    def _config_markers(self, node: astroid.nodes.ClassDef) -> tuple[str, ...]:
        wanted = set(self._settings.config_markers) | set(self._settings.deprecated_config_markers)
        found: list[str] = []
        for stmt in node.body:
            if isinstance(stmt, astroid.nodes.ClassDef) and stmt.name in wanted:
                found.append(stmt.name)
            elif isinstance(stmt, astroid.nodes.Assign):
                for target in stmt.targets:
                    if isinstance(target, astroid.nodes.AssignName) and target.name in wanted:
                        found.append(target.name)
            elif isinstance(stmt, astroid.nodes.AnnAssign) and isinstance(stmt.target, astroid.nodes.AssignName):
                if stmt.target.name in wanted:
                    found.append(stmt.target.name)
        return tuple(found)
