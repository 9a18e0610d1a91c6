"""Entry selection: seed reachability from path patterns."""

from __future__ import annotations

import os
from typing import Dict, List, Sequence

from .. import globs
from ..graph import DependencyGraph
from ..logging import get_logger
from .liveness import ExportLiveness

_LOGGER = get_logger("engine.entries")


def select_entries(
    graph: DependencyGraph,
    patterns: Sequence[str],
    base_dir: str | os.PathLike[str],
) -> List[str]:
    """Return identities whose base-relative path matches any pattern."""
    entries: List[str] = []
    hits: Dict[str, int] = {pattern: 0 for pattern in patterns}
    for node in graph:
        relative = graph.relative_path(node.identity, base_dir)
        matched = False
        for pattern in patterns:
            if globs.matches(relative, pattern):
                hits[pattern] += 1
                matched = True
        if matched:
            entries.append(node.identity)

    for pattern, count in hits.items():
        if count == 0:
            _LOGGER.debug("Entry pattern %r matched no files", pattern)
    _LOGGER.debug("Selected %d entry file(s)", len(entries))
    return entries


def seed_entry_liveness(graph: DependencyGraph, entries: Sequence[str]) -> Dict[str, ExportLiveness]:
    """Entry exports are public API: mark every one of them used."""
    liveness: Dict[str, ExportLiveness] = {}
    for identity in entries:
        node = graph.get(identity)
        if node is None:
            continue
        state = liveness.setdefault(identity, ExportLiveness())
        for name in node.export_names():
            state.mark(name)
    return liveness


__all__ = ["seed_entry_liveness", "select_entries"]
