"""Project scanning: collect the code and style files an analysis runs over."""

from __future__ import annotations

import hashlib
import json
import os
from dataclasses import dataclass
from fnmatch import fnmatchcase
from pathlib import Path
from typing import Dict, Iterator, List, Optional, Sequence, Tuple

from . import globs
from .extractors.source import CODE_SUFFIXES
from .extractors.style import STYLE_SUFFIXES
from .graph import normalize_identity
from .logging import get_logger
from .models import NodeKind, ProjectManifest, SourceFile

_EXCLUDED_DIRS = {
    ".git",
    ".hg",
    ".svn",
    "node_modules",
    ".deadlint",
    ".next",
    ".nuxt",
    ".turbo",
    ".cache",
    ".yarn",
}

_STATE_DIRNAME = ".deadlint"
_CACHE_FILENAME = "manifest_cache.json"
_CACHE_VERSION = 1

_LOGGER = get_logger("repo_scanner")


@dataclass
class IgnoreRule:
    """One line of a .gitignore file, scoped to the directory holding that file."""

    pattern: str
    base: str
    directory_only: bool
    anchored: bool
    negate: bool

    @classmethod
    def parse(cls, line: str, base: str = "") -> Optional["IgnoreRule"]:
        line = line.strip()
        if not line or line.startswith("#"):
            return None
        negate = line.startswith("!")
        if negate:
            line = line[1:]
        directory_only = line.endswith("/")
        line = line.rstrip("/")
        # A slash anywhere but the end pins the pattern to the .gitignore directory.
        anchored = "/" in line
        line = line.lstrip("/")
        if not line:
            return None
        return cls(
            pattern=line,
            base=base,
            directory_only=directory_only,
            anchored=anchored,
            negate=negate,
        )

    def matches(self, rel_path: str, is_dir: bool) -> bool:
        if self.directory_only and not is_dir:
            return False
        if self.base:
            prefix = f"{self.base}/"
            if not rel_path.startswith(prefix):
                return False
            rel_path = rel_path[len(prefix):]
        if self.anchored:
            return fnmatchcase(rel_path, self.pattern)
        return fnmatchcase(rel_path.rsplit("/", 1)[-1], self.pattern)


def _read_ignore_file(directory: Path, base: str) -> List[IgnoreRule]:
    ignore_file = directory / ".gitignore"
    if not ignore_file.is_file():
        return []
    try:
        lines = ignore_file.read_text(encoding="utf-8").splitlines()
    except (OSError, UnicodeDecodeError) as exc:
        _LOGGER.debug("Skipping unreadable %s: %s", ignore_file, exc)
        return []
    rules = [IgnoreRule.parse(line, base) for line in lines]
    return [rule for rule in rules if rule is not None]


def _is_ignored(rel_path: str, is_dir: bool, rules: Sequence[IgnoreRule]) -> bool:
    # Later rules override earlier ones, so a negation can re-include a path.
    ignored = False
    for rule in rules:
        if rule.matches(rel_path, is_dir):
            ignored = not rule.negate
    return ignored


class _HashCache:
    """Content hashes keyed by relative path, reused while size and mtime match."""

    def __init__(self, root: Path, enabled: bool) -> None:
        self.path = root / _STATE_DIRNAME / _CACHE_FILENAME
        self.enabled = enabled
        self._previous = self._load() if enabled else {}
        self._current: Dict[str, Dict[str, object]] = {}

    def hash_for(self, rel_path: str, path: Path, size: int, mtime_ns: int) -> str:
        previous = self._previous.get(rel_path)
        if previous and previous["size"] == size and previous["mtime_ns"] == mtime_ns:
            file_hash = str(previous["hash"])
        else:
            file_hash = _hash_file(path)
        self._current[rel_path] = {"size": size, "mtime_ns": mtime_ns, "hash": file_hash}
        return file_hash

    def save(self) -> None:
        if not self.enabled:
            return
        payload = {"version": _CACHE_VERSION, "files": self._current}
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(json.dumps(payload, indent=2, sort_keys=True), encoding="utf-8")
        except OSError as exc:
            _LOGGER.debug("Unable to write manifest cache: %s", exc)

    def _load(self) -> Dict[str, Dict[str, object]]:
        try:
            payload = json.loads(self.path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return {}
        except (OSError, ValueError):
            _LOGGER.debug("Ignoring unreadable manifest cache at %s", self.path)
            return {}
        if not isinstance(payload, dict) or payload.get("version") != _CACHE_VERSION:
            return {}
        files = payload.get("files")
        if not isinstance(files, dict):
            return {}
        return {
            rel_path: entry
            for rel_path, entry in files.items()
            if isinstance(entry, dict)
            and isinstance(entry.get("size"), int)
            and isinstance(entry.get("mtime_ns"), int)
            and isinstance(entry.get("hash"), str)
        }


def _hash_file(path: Path) -> str:
    digest = hashlib.sha256()
    with path.open("rb") as handle:
        for chunk in iter(lambda: handle.read(1024 * 1024), b""):
            digest.update(chunk)
    return digest.hexdigest()


def _detect_kind(name: str) -> Optional[NodeKind]:
    lowered = name.lower()
    suffix = os.path.splitext(lowered)[1]
    if suffix in CODE_SUFFIXES or lowered.endswith(".d.ts"):
        return NodeKind.CODE
    if suffix in STYLE_SUFFIXES:
        return NodeKind.STYLE
    return None


class RepoScanner:
    """Walks a project collecting code and style files.

    Directories are pruned when they are built-in tool directories, ignored by a
    ``.gitignore`` (nested files apply to their own subtree) or matched by an
    exclude glob.
    """

    def __init__(self, *, use_cache: bool = True) -> None:
        self.use_cache = use_cache

    def scan(self, root: str, excludes: Sequence[str] = ()) -> ProjectManifest:
        """Return a manifest of code and style files under ``root``."""
        root_path = Path(root).expanduser().resolve()
        if not root_path.exists():
            raise FileNotFoundError(f"Project path not found: {root}")
        if not root_path.is_dir():
            raise NotADirectoryError(f"Project path is not a directory: {root}")

        hashes = _HashCache(root_path, self.use_cache)
        files: List[SourceFile] = []
        for path, rel_path, kind in self._walk(root_path, excludes):
            stat_result = path.stat()
            files.append(
                SourceFile(
                    path=rel_path,
                    identity=normalize_identity(path),
                    kind=kind,
                    size=stat_result.st_size,
                    hash=hashes.hash_for(
                        rel_path, path, stat_result.st_size, stat_result.st_mtime_ns
                    ),
                )
            )
        hashes.save()

        _LOGGER.info("Found %d files.", len(files))
        return ProjectManifest(root=str(root_path), files=files)

    @staticmethod
    def _walk(
        root: Path, excludes: Sequence[str]
    ) -> Iterator[Tuple[Path, str, NodeKind]]:
        rules_by_dir: Dict[str, List[IgnoreRule]] = {}
        for dirpath, dirnames, filenames in os.walk(root):
            current = Path(dirpath)
            rel_dir = "" if current == root else current.relative_to(root).as_posix()
            parent_rules = rules_by_dir.get(rel_dir.rpartition("/")[0] if rel_dir else "", [])
            rules = parent_rules + _read_ignore_file(current, rel_dir)
            rules_by_dir[rel_dir] = rules

            kept = []
            for name in sorted(dirnames):
                rel_path = f"{rel_dir}/{name}" if rel_dir else name
                if name in _EXCLUDED_DIRS or _is_ignored(rel_path, True, rules):
                    continue
                if globs.matches_any(rel_path, excludes):
                    _LOGGER.debug("Excluding directory %s", rel_path)
                    continue
                kept.append(name)
            dirnames[:] = kept

            for name in sorted(filenames):
                kind = _detect_kind(name)
                if kind is None:
                    continue
                rel_path = f"{rel_dir}/{name}" if rel_dir else name
                if _is_ignored(rel_path, False, rules) or globs.matches_any(rel_path, excludes):
                    continue
                yield current / name, rel_path, kind


__all__ = ["IgnoreRule", "RepoScanner"]
