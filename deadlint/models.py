"""Core data models shared across deadlint components."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, FrozenSet, List, Optional, Set

SIDE_EFFECT_IMPORT = ""
NAMESPACE_IMPORT = "*"
DEFAULT_EXPORT = "default"


class NodeKind(str, Enum):
    """Kind of file tracked by the dependency graph."""

    CODE = "code"
    STYLE = "style"


@dataclass
class SourceFile:
    """A code or style file discovered by the repository scanner."""

    path: str
    identity: str
    kind: NodeKind
    size: int
    hash: str


@dataclass
class ProjectManifest:
    """Normalized view of the project files handed to the extractors."""

    root: str
    files: List[SourceFile]


@dataclass
class ImportFact:
    """One binding (or side effect) requested by an import statement."""

    source_specifier: str
    imported_name: str
    local_name: str = ""
    is_type_only: bool = False
    resolved_identity: Optional[str] = None

    @property
    def is_side_effect(self) -> bool:
        return self.imported_name == SIDE_EFFECT_IMPORT

    @property
    def is_namespace(self) -> bool:
        return self.imported_name == NAMESPACE_IMPORT


@dataclass
class ExportFact:
    """A name made visible to importers of a module."""

    exported_name: str
    local_name: Optional[str] = None
    is_type_only: bool = False


@dataclass
class CodeFacts:
    """Facts extracted from a source file, before resolution."""

    identity: str
    imports: List[ImportFact] = field(default_factory=list)
    exports: List[ExportFact] = field(default_factory=list)
    literal_strings: Set[str] = field(default_factory=set)
    syntax_errors: bool = False


@dataclass
class StyleFacts:
    """Selectors defined by a style sheet."""

    identity: str
    class_names: Set[str] = field(default_factory=set)
    ids: Set[str] = field(default_factory=set)
    syntax_errors: bool = False

    @property
    def defined_identifiers(self) -> Set[str]:
        return self.class_names | self.ids


@dataclass
class FileNode:
    """Aggregated facts for a single file in the graph."""

    identity: str
    kind: NodeKind
    imports: List[ImportFact] = field(default_factory=list)
    exports: List[ExportFact] = field(default_factory=list)
    literal_strings: FrozenSet[str] = frozenset()
    defined_style_identifiers: FrozenSet[str] = frozenset()

    def export_names(self) -> List[str]:
        """Distinct export names in declaration order."""
        seen: Dict[str, None] = {}
        for export in self.exports:
            seen.setdefault(export.exported_name, None)
        return list(seen)


@dataclass(frozen=True)
class DeadExport:
    """An export of a reachable file that no reachable importer consumes."""

    file: str
    export_name: str


@dataclass(frozen=True)
class DeadStyleIdentifier:
    """A class or id selector that no reachable literal references."""

    file: str
    class_name: str


@dataclass
class DeadCodeReport:
    """Final result of a dead code analysis run."""

    dead_files: List[str] = field(default_factory=list)
    dead_exports: List[DeadExport] = field(default_factory=list)
    dead_css_classes: List[DeadStyleIdentifier] = field(default_factory=list)

    @property
    def is_clean(self) -> bool:
        return not (self.dead_files or self.dead_exports or self.dead_css_classes)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "deadFiles": list(self.dead_files),
            "deadExports": [
                {"file": item.file, "exportName": item.export_name} for item in self.dead_exports
            ],
            "deadCssClasses": [
                {"file": item.file, "className": item.class_name}
                for item in self.dead_css_classes
            ],
        }
