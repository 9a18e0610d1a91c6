"""Breadth-first reachability sweep over resolved import edges."""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from typing import Deque, Dict, Iterable, Mapping, Optional, Set

from ..graph import DependencyGraph
from ..logging import get_logger
from ..models import ImportFact
from .liveness import ExportLiveness

_LOGGER = get_logger("engine.sweep")


@dataclass
class SweepResult:
    """Reachable identities plus the export liveness observed while sweeping."""

    reachable: Set[str] = field(default_factory=set)
    liveness: Dict[str, ExportLiveness] = field(default_factory=dict)

    def liveness_for(self, identity: str) -> Optional[ExportLiveness]:
        return self.liveness.get(identity)


def sweep(
    graph: DependencyGraph,
    entries: Iterable[str],
    seed_liveness: Optional[Mapping[str, ExportLiveness]] = None,
) -> SweepResult:
    """Visit every node reachable from ``entries`` exactly once.

    Each visited import edge marks its target reachable. Named imports mark the
    imported name live, namespace imports mark every export live, and
    side-effect imports mark nothing.
    """
    result = SweepResult()
    if seed_liveness:
        for identity, state in seed_liveness.items():
            if identity in graph:
                result.liveness[identity] = ExportLiveness(
                    names=set(state.names), all_used=state.all_used
                )

    queue: Deque[str] = deque()
    for identity in entries:
        if identity in graph and identity not in result.reachable:
            result.reachable.add(identity)
            queue.append(identity)

    visited = 0
    while queue:
        current = graph.get(queue.popleft())
        if current is None:
            continue
        visited += 1
        for item in current.imports:
            target = item.resolved_identity
            if target is None or target not in graph:
                continue
            if target not in result.reachable:
                result.reachable.add(target)
                queue.append(target)
            _record_usage(result.liveness, target, item)

    _LOGGER.debug("Sweep visited %d node(s); %d reachable", visited, len(result.reachable))
    return result


def _record_usage(liveness: Dict[str, ExportLiveness], target: str, item: ImportFact) -> None:
    if item.is_side_effect:
        return
    state = liveness.setdefault(target, ExportLiveness())
    if item.is_namespace:
        state.mark_all()
    else:
        state.mark(item.imported_name)


__all__ = ["SweepResult", "sweep"]
