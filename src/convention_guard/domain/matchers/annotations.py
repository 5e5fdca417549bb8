"""Annotation matcher: per-function signature facts read from annotations only."""

from __future__ import annotations

from collections.abc import Iterator

import astroid

from convention_guard.domain.config import MatcherSettings
from convention_guard.domain.entities import DeprecatedSpelling, FunctionSignature
from convention_guard.domain.matchers.docstrings import DocstringMatcher

_NESTED_SCOPES = (astroid.nodes.FunctionDef, astroid.nodes.ClassDef, astroid.nodes.Lambda)


class AnnotationMatcher:
    """
    Build FunctionSignature facts for every function and method in a module.

    Nothing is inferred: a parameter is annotated only when the source spells
    an annotation for it. The implicit first parameter of methods (self/cls)
    is exempt unless the method is a staticmethod.
    """

    def __init__(self, settings: MatcherSettings, docstrings: DocstringMatcher) -> None:
        self._spellings = dict(settings.deprecated_spellings)
        self._docstrings = docstrings

    def extract(self, module: astroid.nodes.Module) -> tuple[FunctionSignature, ...]:
        """Signatures in source order, nested functions included."""
        signatures: list[FunctionSignature] = []
        for func in module.nodes_of_class(astroid.nodes.FunctionDef):
            signatures.append(self._signature(module, func))
        return tuple(signatures)

    def _signature(
        self, module: astroid.nodes.Module, func: astroid.nodes.FunctionDef
    ) -> FunctionSignature:
        is_method = isinstance(func.parent, astroid.nodes.ClassDef)
        decorators = self.decorator_names(func)
        params, missing, annotations = self._parameters(func, is_method and "staticmethod" not in decorators)
        if func.returns is not None:
            annotations.append(func.returns)
        return FunctionSignature(
            name=func.name,
            qualname=self._qualname(module, func),
            line=func.lineno,
            is_method=is_method,
            is_public=self._is_public(func),
            params=params,
            missing_param_annotations=missing,
            missing_return_annotation=func.returns is None,
            deprecated_spellings=self._deprecated(annotations),
            docstring=self._docstrings.extract(func),
            returns_value=self._returns_value(func),
            raises=self._raised_names(func),
        )

    def _parameters(
        self, func: astroid.nodes.FunctionDef, skip_first: bool
    ) -> tuple[tuple[str, ...], tuple[str, ...], list[astroid.nodes.NodeNG]]:
        """(all parameter names, unannotated names, annotation nodes)."""
        args = func.args
        pairs: list[tuple[str, astroid.nodes.NodeNG | None]] = []
        positional = list(zip(args.posonlyargs or [], args.posonlyargs_annotations or [])) + list(
            zip(args.args or [], args.annotations or [])
        )
        for idx, (arg, annotation) in enumerate(positional):
            if idx == 0 and skip_first:
                continue
            pairs.append((arg.name, annotation))
        if args.vararg:
            pairs.append(("*" + args.vararg, args.varargannotation))
        for arg, annotation in zip(args.kwonlyargs or [], args.kwonlyargs_annotations or []):
            pairs.append((arg.name, annotation))
        if args.kwarg:
            pairs.append(("**" + args.kwarg, args.kwargannotation))
        names = tuple(name for name, _ in pairs)
        missing = tuple(name for name, annotation in pairs if annotation is None)
        annotations = [annotation for _, annotation in pairs if annotation is not None]
        return names, missing, annotations

    def _deprecated(self, annotations: list[astroid.nodes.NodeNG]) -> tuple[DeprecatedSpelling, ...]:
        found: list[DeprecatedSpelling] = []
        for annotation in annotations:
            for node in annotation.nodes_of_class((astroid.nodes.Name, astroid.nodes.Attribute)):
                spelling = node.name if isinstance(node, astroid.nodes.Name) else node.attrname
                replacement = self._spellings.get(spelling)
                if replacement is not None:
                    found.append(DeprecatedSpelling(spelling, replacement, node.lineno or 0))
        return tuple(found)

    @staticmethod
    def decorator_names(node: astroid.nodes.FunctionDef | astroid.nodes.ClassDef) -> tuple[str, ...]:
        """Last dotted component of each decorator, calls unwrapped."""
        if node.decorators is None:
            return ()
        names: list[str] = []
        for decorator in node.decorators.nodes:
            target = decorator.func if isinstance(decorator, astroid.nodes.Call) else decorator
            if isinstance(target, astroid.nodes.Name):
                names.append(target.name)
            elif isinstance(target, astroid.nodes.Attribute):
                names.append(target.attrname)
        return tuple(names)

    @staticmethod
    def _qualname(module: astroid.nodes.Module, func: astroid.nodes.FunctionDef) -> str:
        qname = func.qname()
        prefix = f"{module.name}."
        return qname[len(prefix):] if qname.startswith(prefix) else qname

    @staticmethod
    def _is_public(func: astroid.nodes.FunctionDef) -> bool:
        """Not underscored and not nested inside a function or a private class."""
        if func.name.startswith("_"):
            return False
        parent = func.parent
        while parent is not None and not isinstance(parent, astroid.nodes.Module):
            if isinstance(parent, astroid.nodes.FunctionDef):
                return False
            if isinstance(parent, astroid.nodes.ClassDef) and parent.name.startswith("_"):
                return False
            parent = parent.parent
        return True

    @staticmethod
    def _own_nodes(func: astroid.nodes.FunctionDef, klass: type) -> Iterator[astroid.nodes.NodeNG]:
        """Nodes of klass in func's body, not descending into nested scopes."""
        for stmt in func.body:
            if isinstance(stmt, _NESTED_SCOPES):
                continue
            yield from stmt.nodes_of_class(klass, skip_klass=_NESTED_SCOPES)

    @staticmethod
    def _returns_value(func: astroid.nodes.FunctionDef) -> bool:
        yields = AnnotationMatcher._own_nodes(func, (astroid.nodes.Yield, astroid.nodes.YieldFrom))
        if next(yields, None) is not None:
            return True
        for node in AnnotationMatcher._own_nodes(func, astroid.nodes.Return):
            value = node.value
            if value is None:
                continue
            if isinstance(value, astroid.nodes.Const) and value.value is None:
                continue
            return True
        return False

    @staticmethod
    def _raised_names(func: astroid.nodes.FunctionDef) -> tuple[str, ...]:
        """Exception names raised explicitly (bare re-raises excluded)."""
        names: list[str] = []
        for node in AnnotationMatcher._own_nodes(func, astroid.nodes.Raise):
            exc = node.exc
            if exc is None:
                continue
            target = exc.func if isinstance(exc, astroid.nodes.Call) else exc
            if isinstance(target, astroid.nodes.Name):
                name = target.name
            elif isinstance(target, astroid.nodes.Attribute):
                name = target.attrname
            else:
                continue
            if name not in names:
                names.append(name)
        return tuple(names)
