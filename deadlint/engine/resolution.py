"""Resolution pass: bind import specifiers to graph nodes."""

from __future__ import annotations

import os
from typing import Optional, Protocol

from ..graph import DependencyGraph
from ..logging import get_logger

_LOGGER = get_logger("engine.resolution")


class Resolver(Protocol):
    """Maps a specifier seen in ``directory`` to an absolute file path."""

    def resolve(self, directory: str, specifier: str) -> Optional[str]:
        ...


def resolve_imports(graph: DependencyGraph, resolver: Resolver) -> int:
    """Annotate every import edge whose target is a node in ``graph``.

    Edges that do not resolve, or resolve outside the scanned set, are left
    unresolved and take no part in reachability. Returns the resolved edge count.
    """
    resolved = 0
    unresolved = 0
    for node in graph.code_nodes():
        directory = os.path.dirname(node.identity)
        for item in node.imports:
            target = _resolve_one(resolver, directory, item.source_specifier)
            if target is not None and target in graph:
                item.resolved_identity = target
                resolved += 1
            else:
                item.resolved_identity = None
                unresolved += 1
    _LOGGER.debug("Resolved %d import edge(s); %d left unresolved", resolved, unresolved)
    return resolved


def _resolve_one(resolver: Resolver, directory: str, specifier: str) -> Optional[str]:
    try:
        target = resolver.resolve(directory, specifier)
    except (OSError, ValueError) as exc:
        _LOGGER.debug("Failed to resolve %s from %s: %s", specifier, directory, exc)
        return None
    if not target:
        return None
    return os.path.normpath(target)


__all__ = ["Resolver", "resolve_imports"]
