"""Persistent cache for extracted file facts."""

from __future__ import annotations

from datetime import UTC, datetime
import json
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Union

from ..logging import get_logger
from ..models import CodeFacts, ExportFact, ImportFact, StyleFacts

_CACHE_VERSION = 1

_LOGGER = get_logger("stores.facts_cache")

Facts = Union[CodeFacts, StyleFacts]


class FactsCache:
    """Stores extractor output keyed by project-relative path and content hash.

    Identities are absolute and therefore not stored; callers pass the identity
    back in when reading so a moved checkout can still reuse its cache.
    """

    def __init__(self, path: Path | None) -> None:
        self._path = path
        self._entries: Dict[str, Dict[str, object]] = {}
        self._dirty = False
        if self._path is not None:
            self._load(self._path)

    def __len__(self) -> int:
        return len(self._entries)

    def get(
        self, key: str, *, identity: str, file_hash: str, signature: str
    ) -> Optional[Facts]:
        entry = self._entries.get(key)
        if not entry:
            return None
        if entry.get("hash") != file_hash or entry.get("signature") != signature:
            return None
        payload = entry.get("facts")
        if not isinstance(payload, dict):
            return None
        return _facts_from_dict(identity, payload)

    def store(self, key: str, *, file_hash: str, signature: str, facts: Facts) -> None:
        self._entries[key] = {
            "hash": file_hash,
            "signature": signature,
            "facts": _facts_to_dict(facts),
            "updated_at": datetime.now(UTC).isoformat().replace("+00:00", "Z"),
        }
        self._dirty = True

    def prune(self, keys_to_keep: Iterable[str]) -> None:
        keep = set(keys_to_keep)
        removed = [key for key in self._entries if key not in keep]
        if removed:
            for key in removed:
                self._entries.pop(key, None)
            self._dirty = True

    def persist(self) -> None:
        if not self._dirty or self._path is None:
            return
        payload = {
            "version": _CACHE_VERSION,
            "entries": self._entries,
        }
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            self._path.write_text(
                json.dumps(payload, indent=2, sort_keys=True), encoding="utf-8"
            )
        except OSError as exc:
            _LOGGER.warning("Unable to write facts cache %s: %s", self._path, exc)
            return
        self._dirty = False

    def clear(self) -> None:
        self._entries.clear()
        self._dirty = True

    # ------------------------------------------------------------------
    # Internal helpers

    def _load(self, path: Path) -> None:
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return
        except (OSError, json.JSONDecodeError):
            _LOGGER.debug("Ignoring unreadable facts cache at %s", path)
            return
        if not isinstance(data, dict) or data.get("version") != _CACHE_VERSION:
            return
        entries = data.get("entries")
        if not isinstance(entries, dict):
            return
        valid_entries: Dict[str, Dict[str, object]] = {}
        for key, raw in entries.items():
            if not isinstance(key, str) or not isinstance(raw, dict):
                continue
            if "hash" not in raw or "signature" not in raw or "facts" not in raw:
                continue
            valid_entries[key] = raw
        self._entries = valid_entries
        self._dirty = False


def _facts_to_dict(facts: Facts) -> Dict[str, object]:
    if isinstance(facts, StyleFacts):
        return {
            "kind": "style",
            "class_names": sorted(facts.class_names),
            "ids": sorted(facts.ids),
            "syntax_errors": facts.syntax_errors,
        }
    return {
        "kind": "code",
        "imports": [
            {
                "source_specifier": item.source_specifier,
                "imported_name": item.imported_name,
                "local_name": item.local_name,
                "is_type_only": item.is_type_only,
            }
            for item in facts.imports
        ],
        "exports": [
            {
                "exported_name": item.exported_name,
                "local_name": item.local_name,
                "is_type_only": item.is_type_only,
            }
            for item in facts.exports
        ],
        "literal_strings": sorted(facts.literal_strings),
        "syntax_errors": facts.syntax_errors,
    }


def _facts_from_dict(identity: str, payload: Dict[str, object]) -> Optional[Facts]:
    kind = payload.get("kind")
    syntax_errors = bool(payload.get("syntax_errors", False))
    if kind == "style":
        return StyleFacts(
            identity=identity,
            class_names=set(_str_list(payload.get("class_names"))),
            ids=set(_str_list(payload.get("ids"))),
            syntax_errors=syntax_errors,
        )
    if kind != "code":
        return None

    imports: List[ImportFact] = []
    for raw in _dict_list(payload.get("imports")):
        specifier = raw.get("source_specifier")
        imported_name = raw.get("imported_name")
        if not isinstance(specifier, str) or not isinstance(imported_name, str):
            return None
        local_name = raw.get("local_name")
        imports.append(
            ImportFact(
                source_specifier=specifier,
                imported_name=imported_name,
                local_name=local_name if isinstance(local_name, str) else "",
                is_type_only=bool(raw.get("is_type_only", False)),
            )
        )

    exports: List[ExportFact] = []
    for raw in _dict_list(payload.get("exports")):
        exported_name = raw.get("exported_name")
        if not isinstance(exported_name, str):
            return None
        local_name = raw.get("local_name")
        exports.append(
            ExportFact(
                exported_name=exported_name,
                local_name=local_name if isinstance(local_name, str) else None,
                is_type_only=bool(raw.get("is_type_only", False)),
            )
        )

    return CodeFacts(
        identity=identity,
        imports=imports,
        exports=exports,
        literal_strings=set(_str_list(payload.get("literal_strings"))),
        syntax_errors=syntax_errors,
    )


def _str_list(value: object) -> List[str]:
    if not isinstance(value, list):
        return []
    return [item for item in value if isinstance(item, str)]


def _dict_list(value: object) -> List[Dict[str, object]]:
    if not isinstance(value, list):
        return []
    return [item for item in value if isinstance(item, dict)]


__all__ = ["FactsCache"]
