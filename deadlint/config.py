"""Configuration loading for deadlint (.deadlint.yml)."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import yaml

from .errors import ConfigError
from .resolver import DEFAULT_CONDITION_NAMES, DEFAULT_EXTENSIONS

CONFIG_FILENAME = ".deadlint.yml"

DEFAULT_ENTRY_PATTERNS: tuple[str, ...] = (
    "src/index.*",
    "src/main.*",
    "src/cli.*",
    "vite.config.*",
    "next.config.*",
    "bun.lock",
    "package.json",
)

DEFAULT_EXCLUDE_PATTERNS: tuple[str, ...] = (
    "node_modules/**",
    "dist/**",
    "build/**",
    "coverage/**",
)


@dataclass
class ResolverConfig:
    """Module resolution settings."""

    extensions: List[str] = field(default_factory=lambda: list(DEFAULT_EXTENSIONS))
    aliases: Dict[str, str] = field(default_factory=dict)
    condition_names: List[str] = field(default_factory=lambda: list(DEFAULT_CONDITION_NAMES))


@dataclass
class DeadlintConfig:
    """Represents the settings defined in .deadlint.yml."""

    root: Path
    entry: List[str] = field(default_factory=lambda: list(DEFAULT_ENTRY_PATTERNS))
    exclude: List[str] = field(default_factory=lambda: list(DEFAULT_EXCLUDE_PATTERNS))
    base_dir: Optional[Path] = None
    use_package_json: bool = True
    resolver: ResolverConfig = field(default_factory=ResolverConfig)
    cache: bool = True

    @property
    def entry_base(self) -> Path:
        """Directory entry patterns are matched against."""
        return self.base_dir or self.root


def load_config(config_path: Path) -> DeadlintConfig:
    """Load configuration from disk, falling back to defaults when absent."""
    config_file = _resolve_config_path(config_path)
    root = config_file.parent

    if not config_file.exists():
        return DeadlintConfig(root=root)

    data = _read_config(config_file)
    if not isinstance(data, dict):
        raise ConfigError(f"{CONFIG_FILENAME} must contain a mapping at the root")

    config = DeadlintConfig(root=root)

    if "entry" in data:
        config.entry = _as_str_list(data.get("entry"))
    config.entry.extend(_as_str_list(data.get("extra_entry")))

    if "exclude" in data:
        config.exclude = _as_str_list(data.get("exclude"))
    config.exclude.extend(_as_str_list(data.get("extra_exclude")))

    base_dir = _as_str(data.get("base_dir"))
    if base_dir:
        config.base_dir = (root / base_dir).resolve()

    use_package_json = _as_bool(data.get("use_package_json"))
    if use_package_json is not None:
        config.use_package_json = use_package_json

    cache = _as_bool(data.get("cache"))
    if cache is not None:
        config.cache = cache

    resolver_data = _as_dict(data.get("resolver"))
    if resolver_data:
        if "extensions" in resolver_data:
            config.resolver.extensions = _as_str_list(resolver_data.get("extensions"))
        if "condition_names" in resolver_data:
            config.resolver.condition_names = _as_str_list(resolver_data.get("condition_names"))
        aliases = _as_dict(resolver_data.get("aliases"))
        config.resolver.aliases = {
            str(key): str(value) for key, value in aliases.items() if _as_str(value) is not None
        }

    return config


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser().resolve()
    if config_path.is_dir():
        return config_path / CONFIG_FILENAME
    return config_path


def _read_config(path: Path) -> Any:
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise ConfigError(f"Failed to read {path.name}: {exc}") from exc
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    return loaded if loaded is not None else {}


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_str(value: Any) -> Optional[str]:
    return str(value) if isinstance(value, (str, int, float, bool)) else None


def _as_bool(value: Any) -> Optional[bool]:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in {"true", "yes", "1"}:
            return True
        if lowered in {"false", "no", "0"}:
            return False
    return None


def _as_str_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, Sequence):
        return [str(item) for item in value if isinstance(item, (str, int, float, bool))]
    return []


__all__ = [
    "CONFIG_FILENAME",
    "ConfigError",
    "DEFAULT_ENTRY_PATTERNS",
    "DEFAULT_EXCLUDE_PATTERNS",
    "DeadlintConfig",
    "ResolverConfig",
    "load_config",
]
