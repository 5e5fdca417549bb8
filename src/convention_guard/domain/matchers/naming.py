"""Naming matcher: declared identifiers with their kind and casing."""

from __future__ import annotations

from collections import Counter

import astroid

from convention_guard.domain.constants import NamingConvention
from convention_guard.domain.entities import DeclaredName
from convention_guard.domain.patterns import Casing

KIND_FUNCTION = "function"
KIND_VARIABLE = "variable"
KIND_CLASS = "class"
KIND_CONSTANT = "constant"

_SCOPES = (astroid.nodes.FunctionDef, astroid.nodes.ClassDef, astroid.nodes.Lambda)


class NamingMatcher:
    """
    Classify declared names by kind.

    Module level: UpperCamel assignments are type aliases (class), literal
    values bound once and UPPER_SNAKE names are constants, everything else is
    a variable. Class bodies follow the same constant/variable split. Inside
    functions every binding, parameters included, is a variable.
    """

    def extract(self, module: astroid.nodes.Module) -> tuple[DeclaredName, ...]:
        """Declared names in source order. Dunder names and '_' are skipped."""
        names: list[DeclaredName] = []
        self._scope_assignments(module.body, names, module_level=True)
        for node in module.nodes_of_class((astroid.nodes.FunctionDef, astroid.nodes.ClassDef)):
            if isinstance(node, astroid.nodes.ClassDef):
                self._add(names, node.name, KIND_CLASS, node.lineno)
                self._scope_assignments(node.body, names, module_level=False)
                continue
            self._add(names, node.name, KIND_FUNCTION, node.lineno)
            self._function_bindings(node, names)
        return tuple(sorted(names, key=lambda n: (n.line, n.name)))

    def _scope_assignments(
        self, body: list[astroid.nodes.NodeNG], names: list[DeclaredName], module_level: bool
    ) -> None:
        bindings: list[tuple[astroid.nodes.AssignName, astroid.nodes.NodeNG | None]] = []
        for stmt in body:
            if isinstance(stmt, astroid.nodes.Assign):
                for target in stmt.targets:
                    for assign_name in target.nodes_of_class(astroid.nodes.AssignName):
                        bindings.append((assign_name, stmt.value))
            elif isinstance(stmt, astroid.nodes.AnnAssign) and isinstance(stmt.target, astroid.nodes.AssignName):
                bindings.append((stmt.target, stmt.value))
        counts = Counter(assign_name.name for assign_name, _ in bindings)
        for assign_name, value in bindings:
            name = assign_name.name
            convention = Casing.classify(name)
            if module_level and convention == NamingConvention.UPPER_CAMEL:
                kind = KIND_CLASS
            elif convention == NamingConvention.UPPER_SNAKE:
                kind = KIND_CONSTANT
            elif module_level and counts[name] == 1 and self._is_literal(value):
                kind = KIND_CONSTANT
            else:
                kind = KIND_VARIABLE
            self._add(names, name, kind, assign_name.lineno)

    def _function_bindings(self, func: astroid.nodes.FunctionDef, names: list[DeclaredName]) -> None:
        args = func.args
        for arg in (args.posonlyargs or []) + (args.args or []) + (args.kwonlyargs or []):
            self._add(names, arg.name, KIND_VARIABLE, arg.lineno or func.lineno)
        for extra in (args.vararg, args.kwarg):
            if extra:
                self._add(names, extra, KIND_VARIABLE, func.lineno)
        seen: set[str] = set()
        for stmt in func.body:
            if isinstance(stmt, _SCOPES):
                continue
            for assign_name in stmt.nodes_of_class(astroid.nodes.AssignName, skip_klass=_SCOPES):
                if assign_name.name in seen:
                    continue
                seen.add(assign_name.name)
                self._add(names, assign_name.name, KIND_VARIABLE, assign_name.lineno)

    @staticmethod
    def _is_literal(value: astroid.nodes.NodeNG | None) -> bool:
        """Non-None constant, or a non-empty container of constants."""
        if isinstance(value, astroid.nodes.Const):
            return value.value is not None
        if isinstance(value, (astroid.nodes.List, astroid.nodes.Tuple, astroid.nodes.Set)):
            return bool(value.elts) and all(NamingMatcher._is_literal(e) for e in value.elts)
        return False

    @staticmethod
    def _add(names: list[DeclaredName], name: str, kind: str, line: int | None) -> None:
        if name == "_" or (name.startswith("__") and name.endswith("__")):
            return
        names.append(DeclaredName(name, kind, Casing.classify(name), line or 0))
