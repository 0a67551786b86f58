# src/typedprefs/engine/walker.py
"""InterfaceWalker: enumerate declared and inherited methods.

Traversal is depth-first in declaration order: the interface's own methods,
then each base and its ancestors before the next base. The first occurrence
of a key therefore comes from the most derived declaration.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

import structlog

from typedprefs.contracts.declarations import InterfaceDecl, MethodDecl
from typedprefs.contracts.enums import DiagnosticCode
from typedprefs.contracts.names import canonical_name, is_traversable_base
from typedprefs.engine.context import GenerationContext

logger = structlog.get_logger(__name__)


class AncestorResolver(Protocol):
    def resolve(self, qualified_name: str) -> InterfaceDecl | None: ...


@dataclass(frozen=True, slots=True)
class DeclaredMethod:
    """A method together with the interface that declares it."""

    owner: InterfaceDecl
    method: MethodDecl


class InterfaceWalker:
    """Depth-first traversal of an interface and its ancestors.

    Marker interfaces and typing plumbing (Protocol, Generic, object) are
    skipped. Each ancestor is visited once, even through diamonds.
    """

    def __init__(self, resolver: AncestorResolver) -> None:
        self._resolver = resolver

    def traverse(self, top: InterfaceDecl, context: GenerationContext) -> list[DeclaredMethod]:
        """Collect every method declared by ``top`` and its ancestors.

        Unresolvable ancestors are reported at ``top`` and their branch is
        skipped; sibling branches are still walked.
        """
        visited: set[str] = set()
        collected: list[DeclaredMethod] = []
        self._visit(top, top, context, visited, collected)
        logger.debug(
            "Traversed interface",
            interface=top.qualified_name,
            interfaces=len(visited),
            methods=len(collected),
        )
        return collected

    def _visit(
        self,
        decl: InterfaceDecl,
        top: InterfaceDecl,
        context: GenerationContext,
        visited: set[str],
        collected: list[DeclaredMethod],
    ) -> None:
        visited.add(decl.qualified_name)
        collected.extend(DeclaredMethod(decl, method) for method in decl.methods)

        for base in decl.bases:
            name = canonical_name(base)
            if not is_traversable_base(name) or name in visited:
                continue
            ancestor = self._resolver.resolve(name)
            if ancestor is None:
                visited.add(name)
                context.error(
                    f"Could not load interface '{name}' for generation.",
                    top.location,
                    DiagnosticCode.RESOLUTION,
                )
                continue
            if ancestor.qualified_name in visited:
                continue
            self._visit(ancestor, top, context, visited, collected)
