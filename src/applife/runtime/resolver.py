from __future__ import annotations

from typing import Any, Container, Iterator, List, Set, Tuple

from applife.core.registry import DeclarationRegistry
from applife.utils.diagnostics import CyclicDependencyError, UnknownIdentityError


class Resolver:
    """Construction ordering and cycle detection over a declaration registry."""

    def __init__(self, declarations: DeclarationRegistry) -> None:
        self.declarations = declarations

    def traversal_order(self) -> List[Any]:
        """Declared identities by ascending load order; ties keep declaration order."""
        ordered = sorted(self.declarations, key=lambda d: (d.load_order, d.sequence))
        return [declaration.identity for declaration in ordered]

    def plan(self, identity: Any, settled: Container[Any] = ()) -> List[Any]:
        """Return the identities to construct for ``identity``, dependencies first.

        The walk is an explicit depth-first traversal: ``path`` holds the chain
        currently being resolved, so revisiting a member of it is a cycle.
        Identities in ``settled`` are treated as already initialized. Every
        check runs before the caller constructs anything for this chain.
        """
        if identity in settled:
            return []
        if identity not in self.declarations:
            raise UnknownIdentityError(identity)

        order: List[Any] = []
        planned: Set[Any] = set()
        path: List[Any] = [identity]
        on_path: Set[Any] = {identity}
        stack: List[Tuple[Any, Iterator[Any]]] = [
            (identity, iter(self.declarations.dependencies_of(identity)))
        ]

        while stack:
            node, pending = stack[-1]
            for dep in pending:
                if dep in settled or dep in planned:
                    continue
                if dep in on_path:
                    raise CyclicDependencyError(path[path.index(dep):] + [dep])
                if dep not in self.declarations:
                    raise UnknownIdentityError(dep, required_by=node)
                stack.append((dep, iter(self.declarations.dependencies_of(dep))))
                path.append(dep)
                on_path.add(dep)
                break
            else:
                stack.pop()
                path.pop()
                on_path.discard(node)
                planned.add(node)
                order.append(node)

        return order

    def construction_order(self) -> List[Any]:
        """Full construction order for every declared identity, without constructing."""
        order: List[Any] = []
        settled: Set[Any] = set()
        for identity in self.traversal_order():
            for step in self.plan(identity, settled):
                settled.add(step)
                order.append(step)
        return order
