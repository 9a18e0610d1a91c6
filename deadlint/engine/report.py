"""Assemble dead files, dead exports and dead style identifiers."""

from __future__ import annotations

from typing import List, Sequence

from ..graph import DependencyGraph
from ..models import DeadCodeReport, DeadExport, DeadStyleIdentifier
from .sweep import SweepResult


def assemble_report(
    graph: DependencyGraph,
    result: SweepResult,
    dead_styles: Sequence[DeadStyleIdentifier],
) -> DeadCodeReport:
    dead_files: List[str] = []
    dead_exports: List[DeadExport] = []

    for node in graph:
        if node.identity not in result.reachable:
            dead_files.append(node.identity)
            continue
        state = result.liveness_for(node.identity)
        if state is not None and state.all_used:
            continue
        for name in node.export_names():
            if state is None or not state.is_used(name):
                dead_exports.append(DeadExport(file=node.identity, export_name=name))

    return DeadCodeReport(
        dead_files=dead_files,
        dead_exports=dead_exports,
        dead_css_classes=list(dead_styles),
    )


__all__ = ["assemble_report"]
