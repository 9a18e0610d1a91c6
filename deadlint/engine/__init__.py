"""Liveness and reachability engine.

The engine runs four sequential stages over one :class:`DependencyGraph`:

1. :func:`resolve_imports` binds import specifiers to graph nodes;
2. :func:`select_entries` picks entry files and treats their exports as public;
3. :func:`sweep` walks resolved edges breadth-first, tracking export liveness;
4. :func:`find_dead_style_identifiers` matches style selectors against literals.

:func:`assemble_report` then derives the final dead-code lists. Callers that
have already picked their entries run stages 3 onward through
:func:`analyze_entries`.
"""

from __future__ import annotations

import os
from typing import Sequence

from ..graph import DependencyGraph
from ..logging import get_logger
from ..models import DeadCodeReport
from .entries import seed_entry_liveness, select_entries
from .liveness import ExportLiveness
from .report import assemble_report
from .resolution import Resolver, resolve_imports
from .sweep import SweepResult, sweep
from .usage import collect_reachable_literals, find_dead_style_identifiers

_LOGGER = get_logger("engine")


def find_dead_code(
    graph: DependencyGraph,
    entry_patterns: Sequence[str],
    base_dir: str | os.PathLike[str],
    resolver: Resolver | None = None,
) -> DeadCodeReport:
    """Run every engine stage and return the dead-code report.

    When ``resolver`` is None the imports are assumed to be resolved already.
    """
    if resolver is not None:
        resolve_imports(graph, resolver)

    entries = select_entries(graph, entry_patterns, base_dir)
    if not entries and len(graph):
        _LOGGER.warning("No entry files matched %s; every file will be reported dead", list(entry_patterns))
    return analyze_entries(graph, entries)


def analyze_entries(graph: DependencyGraph, entries: Sequence[str]) -> DeadCodeReport:
    """Sweep from already selected entry files and assemble the report."""
    result = sweep(graph, entries, seed_entry_liveness(graph, entries))
    dead_styles = find_dead_style_identifiers(graph, result.reachable)
    report = assemble_report(graph, result, dead_styles)
    _LOGGER.debug(
        "Dead files: %d, dead exports: %d, dead style identifiers: %d",
        len(report.dead_files),
        len(report.dead_exports),
        len(report.dead_css_classes),
    )
    return report


__all__ = [
    "ExportLiveness",
    "analyze_entries",
    "Resolver",
    "SweepResult",
    "assemble_report",
    "collect_reachable_literals",
    "find_dead_code",
    "find_dead_style_identifiers",
    "resolve_imports",
    "seed_entry_liveness",
    "select_entries",
    "sweep",
]
