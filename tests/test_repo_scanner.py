"""Tests for deadlint.repo_scanner."""

from __future__ import annotations

import json
from hashlib import sha256
from pathlib import Path

import pytest

from deadlint.models import NodeKind
from deadlint.repo_scanner import RepoScanner


def _write(path: Path, content: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")


def test_scan_collects_code_and_style_files(tmp_path: Path) -> None:
    repo_root = tmp_path / "repo"
    _write(repo_root / "src" / "index.ts", "export {};\n")
    _write(repo_root / "src" / "App.tsx", "export const App = 1;\n")
    _write(repo_root / "src" / "legacy.cjs", "module.exports = {};\n")
    _write(repo_root / "src" / "types.d.ts", "declare const x: number;\n")
    _write(repo_root / "src" / "app.css", ".a {}\n")
    _write(repo_root / "src" / "theme.scss", ".b {}\n")
    _write(repo_root / "README.md", "# Readme\n")
    _write(repo_root / "src" / "data.json", "{}\n")
    _write(repo_root / "node_modules" / "react" / "index.js", "\n")

    manifest = RepoScanner(use_cache=False).scan(str(repo_root))

    assert manifest.root == str(repo_root.resolve())
    kinds = {file.path: file.kind for file in manifest.files}
    assert kinds == {
        "src/App.tsx": NodeKind.CODE,
        "src/app.css": NodeKind.STYLE,
        "src/index.ts": NodeKind.CODE,
        "src/legacy.cjs": NodeKind.CODE,
        "src/theme.scss": NodeKind.STYLE,
        "src/types.d.ts": NodeKind.CODE,
    }

    index = next(file for file in manifest.files if file.path == "src/index.ts")
    assert index.identity == str(repo_root.resolve() / "src" / "index.ts")
    assert index.hash == sha256((repo_root / "src" / "index.ts").read_bytes()).hexdigest()
    assert index.size == len("export {};\n")


def test_scan_applies_exclude_globs(tmp_path: Path) -> None:
    repo_root = tmp_path / "repo"
    _write(repo_root / "src" / "index.ts", "\n")
    _write(repo_root / "dist" / "bundle.js", "\n")
    _write(repo_root / "src" / "Button.stories.tsx", "\n")

    manifest = RepoScanner(use_cache=False).scan(
        str(repo_root), ["dist/**", "**/*.stories.tsx"]
    )

    assert [file.path for file in manifest.files] == ["src/index.ts"]


def test_scan_respects_gitignore(tmp_path: Path) -> None:
    repo_root = tmp_path / "repo"
    _write(repo_root / ".gitignore", "generated/\n*.min.js\n!keep.min.js\n")
    _write(repo_root / "src" / "main.ts", "\n")
    _write(repo_root / "generated" / "api.ts", "\n")
    _write(repo_root / "src" / "vendor.min.js", "\n")
    _write(repo_root / "src" / "keep.min.js", "\n")

    manifest = RepoScanner(use_cache=False).scan(str(repo_root))
    paths = {file.path for file in manifest.files}

    assert paths == {"src/main.ts", "src/keep.min.js"}


def test_scan_applies_nested_gitignore_to_its_subtree(tmp_path: Path) -> None:
    repo_root = tmp_path / "repo"
    _write(repo_root / "packages" / "web" / ".gitignore", "/generated\n*.gen.ts\n")
    _write(repo_root / "packages" / "web" / "generated" / "api.ts", "\n")
    _write(repo_root / "packages" / "web" / "src" / "model.gen.ts", "\n")
    _write(repo_root / "packages" / "web" / "src" / "index.ts", "\n")
    _write(repo_root / "generated" / "shared.ts", "\n")
    _write(repo_root / "src" / "other.gen.ts", "\n")

    manifest = RepoScanner(use_cache=False).scan(str(repo_root))
    paths = {file.path for file in manifest.files}

    assert paths == {"packages/web/src/index.ts", "generated/shared.ts", "src/other.gen.ts"}


def test_scan_rejects_missing_directory(tmp_path: Path) -> None:
    missing = tmp_path / "missing"
    with pytest.raises(FileNotFoundError) as excinfo:
        RepoScanner().scan(str(missing))
    assert str(missing) in str(excinfo.value)


def test_scan_rejects_file_path(tmp_path: Path) -> None:
    target = tmp_path / "file.ts"
    _write(target, "\n")
    with pytest.raises(NotADirectoryError):
        RepoScanner().scan(str(target))


def test_scan_writes_and_reuses_hash_cache(tmp_path: Path) -> None:
    repo_root = tmp_path / "repo"
    _write(repo_root / "src" / "index.ts", "export const a = 1;\n")

    first = RepoScanner().scan(str(repo_root))
    cache_path = repo_root / ".deadlint" / "manifest_cache.json"
    payload = json.loads(cache_path.read_text(encoding="utf-8"))
    assert payload["version"] == 1
    assert payload["files"]["src/index.ts"]["hash"] == first.files[0].hash

    # A matching size and mtime means the cached hash is trusted.
    payload["files"]["src/index.ts"]["hash"] = "cached-hash"
    cache_path.write_text(json.dumps(payload), encoding="utf-8")

    second = RepoScanner().scan(str(repo_root))
    assert second.files[0].hash == "cached-hash"
    assert [file.path for file in second.files] == ["src/index.ts"]
