"""Filesystem module resolver for JavaScript/TypeScript import specifiers."""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Dict, Mapping, Optional, Sequence, Tuple

from .logging import get_logger

DEFAULT_EXTENSIONS: Tuple[str, ...] = (
    ".ts",
    ".tsx",
    ".js",
    ".jsx",
    ".json",
    ".d.ts",
    ".css",
    ".scss",
    ".less",
)

DEFAULT_CONDITION_NAMES: Tuple[str, ...] = ("node", "import", "require", "types", "style")

# ESM TypeScript imports name the emitted file ("./util.js") while the source is "./util.ts".
_EMITTED_TO_SOURCE: Dict[str, Tuple[str, ...]] = {
    ".js": (".ts", ".tsx"),
    ".jsx": (".tsx",),
    ".mjs": (".mts",),
    ".cjs": (".cts",),
}

_PACKAGE_ENTRY_FIELDS: Tuple[str, ...] = ("module", "main", "types", "style")

_LOGGER = get_logger("resolver")


class ModuleResolver:
    """Resolves relative, root-absolute, aliased and package specifiers to files on disk.

    Bare specifiers that match no alias are looked up in the ``node_modules``
    directories above the importer. Package results have their symlinks
    resolved, so a workspace package linked into ``node_modules`` maps back to
    its source file inside the project.
    """

    def __init__(
        self,
        root: str | os.PathLike[str],
        *,
        extensions: Sequence[str] = DEFAULT_EXTENSIONS,
        aliases: Optional[Mapping[str, str]] = None,
        condition_names: Sequence[str] = DEFAULT_CONDITION_NAMES,
    ) -> None:
        self.root = Path(root).expanduser().resolve()
        self.extensions = tuple(extensions)
        self.condition_names = tuple(condition_names)
        # Longest prefix wins.
        self.aliases = sorted((aliases or {}).items(), key=lambda item: len(item[0]), reverse=True)
        self._cache: Dict[Tuple[str, str], Optional[str]] = {}

    def resolve(self, directory: str, specifier: str) -> Optional[str]:
        key = (directory, specifier)
        if key in self._cache:
            return self._cache[key]
        resolved = self._resolve(directory, specifier)
        if resolved is None:
            _LOGGER.debug("Unresolved specifier %r from %s", specifier, directory)
        self._cache[key] = resolved
        return resolved

    def _resolve(self, directory: str, specifier: str) -> Optional[str]:
        request = _strip_query(specifier)
        if not request:
            return None

        if request.startswith(("./", "../")) or request in {".", ".."}:
            return self._resolve_path(os.path.join(directory, request))

        if request.startswith("/"):
            rooted = self._resolve_path(os.path.join(str(self.root), request.lstrip("/")))
            if rooted is not None:
                return rooted
            return self._resolve_path(request)

        for prefix, target in self.aliases:
            if request == prefix.rstrip("/"):
                return self._resolve_path(os.path.join(str(self.root), target))
            if request.startswith(prefix):
                remainder = request[len(prefix):].lstrip("/")
                return self._resolve_path(os.path.join(str(self.root), target, remainder))

        return self._resolve_package(directory, request)

    def _resolve_package(self, directory: str, request: str) -> Optional[str]:
        name, subpath = _split_package_request(request)
        if name is None:
            return None
        current = os.path.normpath(directory)
        while True:
            package_dir = os.path.join(current, "node_modules", name)
            if os.path.isdir(package_dir):
                resolved = self._resolve_in_package(package_dir, subpath)
                if resolved is not None:
                    return os.path.realpath(resolved)
            parent = os.path.dirname(current)
            if parent == current:
                return None
            current = parent

    def _resolve_in_package(self, package_dir: str, subpath: str) -> Optional[str]:
        if not subpath:
            return self._resolve_directory(package_dir)
        manifest = _load_package_manifest(Path(package_dir) / "package.json")
        target = self._pick_condition(_match_subpath_export(manifest.get("exports"), subpath))
        if target:
            resolved = self._resolve_path(os.path.join(package_dir, target), allow_directory=False)
            if resolved is not None:
                return resolved
        return self._resolve_path(os.path.join(package_dir, subpath))

    def _resolve_path(self, candidate: str, *, allow_directory: bool = True) -> Optional[str]:
        path = os.path.normpath(candidate)
        if os.path.isfile(path):
            return path

        for extension in self.extensions:
            if os.path.isfile(path + extension):
                return path + extension

        stem, suffix = os.path.splitext(path)
        for replacement in _EMITTED_TO_SOURCE.get(suffix, ()):
            if os.path.isfile(stem + replacement):
                return stem + replacement

        if allow_directory and os.path.isdir(path):
            return self._resolve_directory(path)
        return None

    def _resolve_directory(self, directory: str) -> Optional[str]:
        manifest = _load_package_manifest(Path(directory) / "package.json")
        for entry in self._package_entries(manifest):
            resolved = self._resolve_path(os.path.join(directory, entry), allow_directory=False)
            if resolved is not None:
                return resolved
        return self._resolve_path(os.path.join(directory, "index"), allow_directory=False)

    def _package_entries(self, manifest: Mapping[str, object]) -> list[str]:
        entries: list[str] = []
        exports = manifest.get("exports")
        if isinstance(exports, Mapping) and "." in exports:
            exports = exports["."]
        picked = self._pick_condition(exports)
        if picked:
            entries.append(picked)
        for field_name in _PACKAGE_ENTRY_FIELDS:
            value = manifest.get(field_name)
            if isinstance(value, str) and value:
                entries.append(value)
        return entries

    def _pick_condition(self, value: object) -> Optional[str]:
        if isinstance(value, str):
            return value
        if isinstance(value, list):
            for item in value:
                picked = self._pick_condition(item)
                if picked:
                    return picked
            return None
        if isinstance(value, Mapping):
            for condition in (*self.condition_names, "default"):
                if condition in value:
                    picked = self._pick_condition(value[condition])
                    if picked:
                        return picked
        return None


def _strip_query(specifier: str) -> str:
    for marker in ("?", "#"):
        index = specifier.find(marker)
        # "#internal" package imports are bare specifiers, not fragments.
        if index > 0:
            specifier = specifier[:index]
    return specifier.strip()


def _split_package_request(request: str) -> Tuple[Optional[str], str]:
    """Split ``@scope/name/sub/path`` into the package name and its subpath.

    Returns ``(None, "")`` for specifiers that cannot name a package, such as
    ``node:fs``, URLs and ``#internal`` imports.
    """
    if request.startswith("#") or ":" in request or "\\" in request:
        return None, ""
    parts = request.split("/")
    count = 2 if request.startswith("@") else 1
    if len(parts) < count or not all(parts[:count]):
        return None, ""
    return "/".join(parts[:count]), "/".join(parts[count:])


def _match_subpath_export(exports: object, subpath: str) -> object:
    if not isinstance(exports, Mapping):
        return None
    key = f"./{subpath}"
    if key in exports:
        return exports[key]
    # Single-wildcard patterns such as "./components/*": "./src/components/*.tsx".
    for pattern, target in exports.items():
        if not isinstance(pattern, str) or pattern.count("*") != 1:
            continue
        head, tail = pattern.split("*")
        if key.startswith(head) and key.endswith(tail) and len(key) >= len(head) + len(tail):
            matched = key[len(head): len(key) - len(tail)]
            return _substitute_wildcard(target, matched)
    return None


def _substitute_wildcard(target: object, matched: str) -> object:
    if isinstance(target, str):
        return target.replace("*", matched)
    if isinstance(target, list):
        return [_substitute_wildcard(item, matched) for item in target]
    if isinstance(target, Mapping):
        return {condition: _substitute_wildcard(value, matched) for condition, value in target.items()}
    return target


def _load_package_manifest(path: Path) -> Dict[str, object]:
    if not path.is_file():
        return {}
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError):
        return {}
    return data if isinstance(data, dict) else {}


__all__ = ["DEFAULT_CONDITION_NAMES", "DEFAULT_EXTENSIONS", "ModuleResolver"]
