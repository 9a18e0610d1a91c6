"""In-memory dependency graph keyed by absolute file identity."""

from __future__ import annotations

import os
from pathlib import PurePath
from typing import Dict, Iterator, List, Optional

from .errors import FactSchemaError
from .models import CodeFacts, ExportFact, FileNode, ImportFact, NodeKind, StyleFacts


def normalize_identity(path: str | os.PathLike[str]) -> str:
    """Return the canonical identity for an absolute path.

    Only lexical normalisation is applied: no case folding and no symlink resolution.
    """
    raw = os.fspath(path)
    if not isinstance(raw, str) or not raw:
        raise FactSchemaError(f"File identity must be a non-empty string, got {raw!r}")
    if not os.path.isabs(raw):
        raise FactSchemaError(f"File identity must be an absolute path: {raw}")
    return os.path.normpath(raw)


class DependencyGraph:
    """Maps file identity to the file node aggregating its facts.

    Nodes are inserted once during ingestion and never removed. Re-inserting an
    identity replaces the previous node.
    """

    def __init__(self) -> None:
        self._nodes: Dict[str, FileNode] = {}

    def add_code_node(self, facts: CodeFacts) -> FileNode:
        identity = normalize_identity(facts.identity)
        node = FileNode(
            identity=identity,
            kind=NodeKind.CODE,
            imports=[_validate_import(identity, item) for item in facts.imports],
            exports=[_validate_export(identity, item) for item in facts.exports],
            literal_strings=frozenset(_validate_strings(identity, facts.literal_strings)),
        )
        self._nodes[identity] = node
        return node

    def add_style_node(self, facts: StyleFacts) -> FileNode:
        identity = normalize_identity(facts.identity)
        identifiers = _validate_strings(identity, facts.defined_identifiers)
        node = FileNode(
            identity=identity,
            kind=NodeKind.STYLE,
            defined_style_identifiers=frozenset(identifiers),
        )
        self._nodes[identity] = node
        return node

    def get(self, identity: str) -> Optional[FileNode]:
        return self._nodes.get(identity)

    def __contains__(self, identity: object) -> bool:
        return identity in self._nodes

    def __len__(self) -> int:
        return len(self._nodes)

    def __iter__(self) -> Iterator[FileNode]:
        return iter(self._nodes.values())

    def identities(self) -> List[str]:
        return list(self._nodes)

    def code_nodes(self) -> List[FileNode]:
        return [node for node in self._nodes.values() if node.kind is NodeKind.CODE]

    def style_nodes(self) -> List[FileNode]:
        return [node for node in self._nodes.values() if node.kind is NodeKind.STYLE]

    @staticmethod
    def relative_path(identity: str, base_dir: str | os.PathLike[str]) -> str:
        """Return ``identity`` relative to ``base_dir`` using ``/`` separators."""
        relative = os.path.relpath(identity, os.fspath(base_dir))
        return PurePath(relative).as_posix().replace("\\", "/")


def _validate_import(identity: str, item: object) -> ImportFact:
    if not isinstance(item, ImportFact):
        raise FactSchemaError(f"{identity}: expected ImportFact, got {type(item).__name__}")
    if not isinstance(item.source_specifier, str) or not isinstance(item.imported_name, str):
        raise FactSchemaError(f"{identity}: import specifier and name must be strings")
    # Resolution is the only writer of resolved_identity.
    return ImportFact(
        source_specifier=item.source_specifier,
        imported_name=item.imported_name,
        local_name=str(item.local_name or ""),
        is_type_only=bool(item.is_type_only),
        resolved_identity=None,
    )


def _validate_export(identity: str, item: object) -> ExportFact:
    if not isinstance(item, ExportFact):
        raise FactSchemaError(f"{identity}: expected ExportFact, got {type(item).__name__}")
    if not isinstance(item.exported_name, str) or not item.exported_name:
        raise FactSchemaError(f"{identity}: export name must be a non-empty string")
    return ExportFact(
        exported_name=item.exported_name,
        local_name=item.local_name if isinstance(item.local_name, str) else None,
        is_type_only=bool(item.is_type_only),
    )


def _validate_strings(identity: str, values: object) -> List[str]:
    if isinstance(values, (str, bytes)) or not hasattr(values, "__iter__"):
        raise FactSchemaError(f"{identity}: expected a collection of strings")
    result: List[str] = []
    for value in values:  # type: ignore[union-attr]
        if not isinstance(value, str):
            raise FactSchemaError(f"{identity}: expected string, got {type(value).__name__}")
        result.append(value)
    return result


__all__ = ["DependencyGraph", "normalize_identity"]
