"""Exception matcher: except-handler shapes for hygiene checks."""

from __future__ import annotations

import astroid

from convention_guard.domain.config import MatcherSettings
from convention_guard.domain.entities import ExceptHandlerFact

_SCOPES = (astroid.nodes.FunctionDef, astroid.nodes.ClassDef, astroid.nodes.Lambda)


class ExceptHandlerMatcher:
    """Record each except clause: caught names, bare/broad/empty body and re-raise."""

    def __init__(self, settings: MatcherSettings) -> None:
        self._broad = frozenset(settings.broad_exception_names)

    def extract(self, module: astroid.nodes.Module) -> tuple[ExceptHandlerFact, ...]:
        """Handlers in source order."""
        facts: list[ExceptHandlerFact] = []
        for node in module.nodes_of_class(astroid.nodes.ExceptHandler):
            names = self._type_names(node.type)
            facts.append(
                ExceptHandlerFact(
                    line=node.lineno,
                    type_names=names,
                    is_bare=node.type is None,
                    is_broad=bool(self._broad.intersection(names)),
                    is_empty=self._body_is_empty(node),
                    reraises=self._body_reraises(node),
                )
            )
        return tuple(facts)

    def _type_names(self, type_node: astroid.nodes.NodeNG | None) -> tuple[str, ...]:
        if type_node is None:
            return ()
        if isinstance(type_node, astroid.nodes.Tuple):
            names: list[str] = []
            for elt in type_node.elts:
                names.extend(self._type_names(elt))
            return tuple(names)
        if isinstance(type_node, astroid.nodes.Name):
            return (type_node.name,)
        if isinstance(type_node, astroid.nodes.Attribute):
            return (type_node.attrname,)
        return ()

    @staticmethod
    def _body_reraises(node: astroid.nodes.ExceptHandler) -> bool:
        """True if any raise appears in the handler body, nested blocks included."""
        for stmt in node.body:
            if isinstance(stmt, _SCOPES):
                continue
            for _ in stmt.nodes_of_class(astroid.nodes.Raise, skip_klass=_SCOPES):
                return True
        return False

    @staticmethod
    def _body_is_empty(node: astroid.nodes.ExceptHandler) -> bool:
        """True if body is only pass or '...'."""
        for stmt in node.body:
            if isinstance(stmt, astroid.nodes.Pass):
                continue
            if (
                isinstance(stmt, astroid.nodes.Expr)
                and isinstance(stmt.value, astroid.nodes.Const)
                and stmt.value.value is Ellipsis
            ):
                continue
            return False
        return True
