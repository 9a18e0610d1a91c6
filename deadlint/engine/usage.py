"""Cross-domain usage pass: style identifiers against reachable code literals."""

from __future__ import annotations

from typing import AbstractSet, Iterable, List, Set

from ..graph import DependencyGraph
from ..logging import get_logger
from ..models import DeadStyleIdentifier, NodeKind

_LOGGER = get_logger("engine.usage")


def collect_reachable_literals(graph: DependencyGraph, reachable: AbstractSet[str]) -> Set[str]:
    """Union of literal strings from reachable code, plus their whitespace tokens."""
    tokens: Set[str] = set()
    for node in graph:
        if node.kind is not NodeKind.CODE or node.identity not in reachable:
            continue
        for literal in node.literal_strings:
            tokens.add(literal)
            tokens.update(_split_tokens(literal))
    return tokens


def find_dead_style_identifiers(
    graph: DependencyGraph, reachable: AbstractSet[str]
) -> List[DeadStyleIdentifier]:
    """Report style identifiers of unreachable sheets, or unmatched ones in reachable sheets."""
    literals = collect_reachable_literals(graph, reachable)
    dead: List[DeadStyleIdentifier] = []
    for node in graph.style_nodes():
        identifiers = sorted(node.defined_style_identifiers)
        if node.identity not in reachable:
            dead.extend(DeadStyleIdentifier(node.identity, name) for name in identifiers)
            continue
        dead.extend(
            DeadStyleIdentifier(node.identity, name) for name in identifiers if name not in literals
        )
    _LOGGER.debug(
        "Checked style identifiers against %d literal token(s); %d unused",
        len(literals),
        len(dead),
    )
    return dead


def _split_tokens(literal: str) -> Iterable[str]:
    if any(char.isspace() for char in literal):
        return literal.split()
    return ()


__all__ = ["collect_reachable_literals", "find_dead_style_identifiers"]
