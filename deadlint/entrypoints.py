"""Entry pattern assembly from defaults, configuration and package.json."""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Sequence

from .config import DeadlintConfig
from .logging import get_logger

_MANIFEST_FIELDS = ("main", "module", "types")

_LOGGER = get_logger("entrypoints")


def load_package_json(root: Path) -> Dict[str, object]:
    """Return the parsed package.json contents or an empty dict."""
    package_json = root / "package.json"
    if not package_json.exists():
        return {}
    try:
        data = json.loads(package_json.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError):
        _LOGGER.debug("Ignoring unreadable package.json at %s", package_json)
        return {}
    if isinstance(data, dict):
        return data
    return {}


def manifest_entry_patterns(root: Path) -> List[str]:
    """Entry files declared by package.json (main, module, types and bin)."""
    package_json = load_package_json(root)
    if not package_json:
        return []

    patterns: List[str] = []
    for field_name in _MANIFEST_FIELDS:
        value = package_json.get(field_name)
        if isinstance(value, str) and value:
            patterns.append(_normalise(value))

    bin_field = package_json.get("bin")
    if isinstance(bin_field, str) and bin_field:
        patterns.append(_normalise(bin_field))
    elif isinstance(bin_field, dict):
        for value in bin_field.values():
            if isinstance(value, str) and value:
                patterns.append(_normalise(value))
    return patterns


def build_entry_patterns(
    config: DeadlintConfig,
    cli_entries: Optional[Sequence[str]] = None,
) -> List[str]:
    """Merge entry patterns, keeping first-seen order and dropping duplicates.

    Patterns given on the command line replace the configured ones; package.json
    entries are appended unless disabled in the configuration.
    """
    patterns: List[str] = list(cli_entries) if cli_entries else list(config.entry)
    if config.use_package_json:
        for value in manifest_entry_patterns(config.root):
            patterns.append(_relative_to_base(config, value))
    return _dedupe(patterns)


def _relative_to_base(config: DeadlintConfig, value: str) -> str:
    if config.entry_base == config.root:
        return value
    relative = os.path.relpath(config.root / value, config.entry_base)
    return Path(relative).as_posix()


def _normalise(value: str) -> str:
    value = value.replace("\\", "/")
    while value.startswith("./"):
        value = value[2:]
    return value


def _dedupe(values: Iterable[str]) -> List[str]:
    seen: Dict[str, None] = {}
    for value in values:
        if value:
            seen.setdefault(value, None)
    return list(seen)


__all__ = ["build_entry_patterns", "load_package_json", "manifest_entry_patterns"]
