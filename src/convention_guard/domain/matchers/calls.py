"""Call-site matcher used by the logging rules."""

from __future__ import annotations

import astroid

from convention_guard.domain.entities import CallFact


class CallMatcher:
    """Record call sites whose callee is a plain or dotted name."""

    def extract(self, module: astroid.nodes.Module) -> tuple[CallFact, ...]:
        """Calls in source order, e.g. 'print' or 'logging.getLogger'."""
        calls: list[CallFact] = []
        for node in module.nodes_of_class(astroid.nodes.Call):
            name = self.dotted_name(node.func)
            if name:
                calls.append(CallFact(name=name, line=node.lineno or 0))
        return tuple(calls)

    @staticmethod
    def dotted_name(node: astroid.nodes.NodeNG) -> str:
        """'a.b.c' for Name/Attribute chains, '' for anything else."""
        parts: list[str] = []
        while isinstance(node, astroid.nodes.Attribute):
            parts.append(node.attrname)
            node = node.expr
        if not isinstance(node, astroid.nodes.Name):
            return ""
        parts.append(node.name)
        return ".".join(reversed(parts))
