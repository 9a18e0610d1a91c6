"""Pipeline orchestration for scan and prune flows."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Iterable, List, Optional, Sequence, Tuple, Union

from .config import ConfigError, DeadlintConfig, load_config
from .engine import analyze_entries, resolve_imports, select_entries
from .engine.resolution import Resolver
from .entrypoints import build_entry_patterns
from .errors import ExtractionError
from .extractors import Extractor, SourceExtractor, StyleExtractor
from .graph import DependencyGraph
from .logging import get_logger
from .models import CodeFacts, DeadCodeReport, ProjectManifest, SourceFile, StyleFacts
from .repo_scanner import RepoScanner
from .resolver import ModuleResolver
from .stores import FactsCache

Facts = Union[CodeFacts, StyleFacts]
ResolverFactory = Callable[[DeadlintConfig], Resolver]
ConfirmCallback = Callable[[List[str]], bool]


@dataclass
class ScanOutcome:
    """Result of a dead code scan."""

    root: Path
    report: DeadCodeReport
    entry_patterns: List[str]
    entries: List[str]
    warnings: List[str] = field(default_factory=list)
    files_scanned: int = 0

    def relative(self, identity: str) -> str:
        return DependencyGraph.relative_path(identity, self.root)


@dataclass
class PruneOutcome:
    """Result of deleting the dead files found by a scan."""

    deleted: List[str] = field(default_factory=list)
    failed: List[Tuple[str, str]] = field(default_factory=list)
    cancelled: bool = False


def _default_resolver_factory(config: DeadlintConfig) -> Resolver:
    return ModuleResolver(
        config.root,
        extensions=config.resolver.extensions,
        aliases=config.resolver.aliases,
        condition_names=config.resolver.condition_names,
    )


class Orchestrator:
    """Coordinates scanning, fact extraction and the liveness engine."""

    def __init__(
        self,
        scanner: RepoScanner | None = None,
        extractors: Optional[Iterable[Extractor]] = None,
        resolver_factory: ResolverFactory | None = None,
        use_cache: bool | None = None,
    ) -> None:
        self.scanner = scanner
        self.extractors: List[Extractor] = (
            list(extractors) if extractors is not None else [SourceExtractor(), StyleExtractor()]
        )
        self.resolver_factory = resolver_factory or _default_resolver_factory
        self._use_cache_override = use_cache
        self.logger = get_logger("orchestrator")

    def run_scan(
        self,
        path: str | os.PathLike[str],
        *,
        entries: Optional[Sequence[str]] = None,
        excludes: Optional[Sequence[str]] = None,
    ) -> ScanOutcome:
        """Scan a project and return its dead files, exports and style identifiers."""
        root = Path(path).expanduser().resolve()
        if not root.exists():
            raise FileNotFoundError(f"Project path not found: {path}")
        if not root.is_dir():
            raise NotADirectoryError(f"Project path is not a directory: {path}")
        self.logger.info("Scanning project at %s", root)

        config = self._load_config(root)
        use_cache = config.cache if self._use_cache_override is None else self._use_cache_override
        exclude_patterns = list(excludes) if excludes else list(config.exclude)

        scanner = self.scanner or RepoScanner(use_cache=use_cache)
        manifest = scanner.scan(str(root), exclude_patterns)

        cache = FactsCache(root / ".deadlint" / "facts_cache.json" if use_cache else None)
        graph, warnings = self._build_graph(manifest, cache)

        resolver = self.resolver_factory(config)
        resolved = resolve_imports(graph, resolver)
        self.logger.debug("Resolved %d import edges", resolved)

        entry_patterns = build_entry_patterns(config, entries)
        entry_files = select_entries(graph, entry_patterns, config.entry_base)
        if not entry_files and len(graph):
            self.logger.warning(
                "No entry files matched %s; every file will be reported dead", entry_patterns
            )
        report = analyze_entries(graph, entry_files)

        self.logger.info(
            "Scan complete: %d dead files, %d unused exports, %d unused style identifiers",
            len(report.dead_files),
            len(report.dead_exports),
            len(report.dead_css_classes),
        )
        return ScanOutcome(
            root=root,
            report=report,
            entry_patterns=entry_patterns,
            entries=entry_files,
            warnings=warnings,
            files_scanned=len(manifest.files),
        )

    def run_prune(
        self,
        path: str | os.PathLike[str],
        *,
        confirm: ConfirmCallback | None = None,
        entries: Optional[Sequence[str]] = None,
        excludes: Optional[Sequence[str]] = None,
        outcome: ScanOutcome | None = None,
    ) -> PruneOutcome:
        """Delete unreachable files.

        ``confirm`` receives the project-relative dead files and must return True
        for deletion to proceed; when omitted the files are deleted directly.
        """
        scan = outcome or self.run_scan(path, entries=entries, excludes=excludes)
        dead_files = list(scan.report.dead_files)
        result = PruneOutcome()
        if not dead_files:
            return result

        relative = [scan.relative(identity) for identity in dead_files]
        if confirm is not None and not confirm(relative):
            self.logger.info("Prune cancelled")
            result.cancelled = True
            return result

        for identity, rel_path in zip(dead_files, relative):
            try:
                os.unlink(identity)
            except OSError as exc:
                self.logger.warning("Failed to delete %s: %s", rel_path, exc)
                result.failed.append((rel_path, str(exc)))
                continue
            self.logger.debug("Deleted %s", rel_path)
            result.deleted.append(rel_path)
        return result

    # ------------------------------------------------------------------
    # Internal helpers

    def _load_config(self, root: Path) -> DeadlintConfig:
        try:
            return load_config(root)
        except ConfigError as exc:
            self.logger.warning("Ignoring invalid configuration: %s", exc)
            return DeadlintConfig(root=root)

    def _build_graph(
        self, manifest: ProjectManifest, cache: FactsCache
    ) -> Tuple[DependencyGraph, List[str]]:
        graph = DependencyGraph()
        warnings: List[str] = []
        used_keys: List[str] = []
        root = Path(manifest.root)

        for source in manifest.files:
            extractor = self._select_extractor(source)
            if extractor is None:
                self.logger.debug("No extractor for %s", source.path)
                continue
            signature = self._extractor_signature(extractor)
            used_keys.append(source.path)

            facts = cache.get(
                source.path, identity=source.identity, file_hash=source.hash, signature=signature
            )
            if facts is None:
                try:
                    facts = self._extract(extractor, root, source)
                except (ExtractionError, OSError, UnicodeDecodeError) as exc:
                    message = f"Failed to parse {source.path}: {exc}"
                    self.logger.warning(message)
                    warnings.append(message)
                    continue
                cache.store(source.path, file_hash=source.hash, signature=signature, facts=facts)
            else:
                self.logger.debug("Using cached facts for %s", source.path)

            if isinstance(facts, StyleFacts):
                graph.add_style_node(facts)
            else:
                graph.add_code_node(facts)

        cache.prune(used_keys)
        cache.persist()
        self.logger.debug("Graph built with %d nodes", len(graph))
        return graph, warnings

    def _select_extractor(self, source: SourceFile) -> Extractor | None:
        for extractor in self.extractors:
            if extractor.supports(source.path):
                return extractor
        return None

    @staticmethod
    def _extract(extractor: Extractor, root: Path, source: SourceFile) -> Facts:
        content = (root / source.path).read_text(encoding="utf-8")
        return extractor.extract(source.identity, content)

    @staticmethod
    def _extractor_signature(extractor: Extractor) -> str:
        cls = extractor.__class__
        return f"{cls.__module__}.{cls.__qualname__}:{extractor.cache_version}"


__all__ = ["Orchestrator", "PruneOutcome", "ScanOutcome"]
