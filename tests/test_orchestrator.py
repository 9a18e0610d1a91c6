"""Integration tests for the scan and prune pipelines."""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import List

import pytest

from deadlint import orchestrator as orchestrator_module
from deadlint.errors import ExtractionError
from deadlint.extractors import SourceExtractor, StyleExtractor
from deadlint.models import CodeFacts, DeadExport, DeadStyleIdentifier
from deadlint.orchestrator import Orchestrator
from tests._fixtures.repo_builder import RepoBuilder


def _write_scenario(repo_builder: RepoBuilder) -> None:
    repo_builder.write(
        {
            "src/entry.ts": """
                import { helper } from "./utils";
                import "./style.css";

                export const main = () => `${helper()} ${"used"}`;
                """,
            "src/utils.ts": """
                export function helper() {
                  return "ok";
                }

                export function unusedHelper() {
                  return "nope";
                }
                """,
            "src/dead.ts": """
                export const orphan = 1;
                """,
            "src/style.css": """
                .used { color: red; }
                .really-unused { color: blue; }
                """,
        }
    )


def test_run_scan_end_to_end(repo_builder: RepoBuilder) -> None:
    _write_scenario(repo_builder)

    outcome = Orchestrator(use_cache=False).run_scan(repo_builder.path(), entries=["**/entry.*"])

    report = outcome.report
    assert report.dead_files == [repo_builder.identity("src/dead.ts")]
    assert report.dead_exports == [DeadExport(repo_builder.identity("src/utils.ts"), "unusedHelper")]
    assert report.dead_css_classes == [
        DeadStyleIdentifier(repo_builder.identity("src/style.css"), "really-unused")
    ]
    assert outcome.entries == [repo_builder.identity("src/entry.ts")]
    assert outcome.entry_patterns == ["**/entry.*"]
    assert outcome.files_scanned == 4
    assert outcome.warnings == []
    assert outcome.root == repo_builder.path().resolve()


def test_run_scan_uses_defaults_and_package_json(repo_builder: RepoBuilder) -> None:
    repo_builder.write(
        {
            "package.json": json.dumps({"bin": {"tool": "./bin/tool.js"}}),
            "src/index.ts": 'import { a } from "./a";\nconsole.log(a);\n',
            "src/a.ts": "export const a = 1;\n",
            "bin/tool.js": 'require("../src/a");\n',
            "dist/bundle.js": "export const built = 1;\n",
        }
    )

    outcome = Orchestrator(use_cache=False).run_scan(repo_builder.path())

    assert "bin/tool.js" in outcome.entry_patterns
    assert set(outcome.entries) == {
        repo_builder.identity("src/index.ts"),
        repo_builder.identity("bin/tool.js"),
    }
    assert outcome.report.is_clean
    assert outcome.files_scanned == 3


def test_run_scan_honours_config_file(repo_builder: RepoBuilder) -> None:
    repo_builder.write(
        {
            ".deadlint.yml": """
                entry: ["app/main.ts"]
                use_package_json: false
                cache: false
                resolver:
                  aliases:
                    "@/": "app/"
                """,
            "app/main.ts": 'import { fmt } from "@/lib/fmt";\nfmt();\n',
            "app/lib/fmt.ts": "export const fmt = () => 1;\n",
            "src/index.ts": "export const legacy = 1;\n",
        }
    )

    outcome = Orchestrator().run_scan(repo_builder.path())

    assert outcome.report.dead_files == [repo_builder.identity("src/index.ts")]
    assert outcome.report.dead_exports == []
    assert not (repo_builder.path() / ".deadlint").exists()


def test_run_scan_cli_excludes_replace_config(repo_builder: RepoBuilder) -> None:
    _write_scenario(repo_builder)

    outcome = Orchestrator(use_cache=False).run_scan(
        repo_builder.path(), entries=["src/entry.ts"], excludes=["src/dead.ts"]
    )

    assert outcome.report.dead_files == []
    assert outcome.files_scanned == 3


def test_run_scan_skips_files_that_fail_extraction(repo_builder: RepoBuilder) -> None:
    _write_scenario(repo_builder)

    class _FlakySourceExtractor(SourceExtractor):
        def extract(self, identity: str, content: str) -> CodeFacts:
            if identity.endswith("dead.ts"):
                raise ExtractionError(identity, "boom")
            return super().extract(identity, content)

    orchestrator = Orchestrator(
        extractors=[_FlakySourceExtractor(), StyleExtractor()], use_cache=False
    )
    outcome = orchestrator.run_scan(repo_builder.path(), entries=["src/entry.ts"])

    assert outcome.report.dead_files == []
    assert len(outcome.warnings) == 1
    assert "src/dead.ts" in outcome.warnings[0]


def test_run_scan_reuses_cached_facts(repo_builder: RepoBuilder) -> None:
    _write_scenario(repo_builder)

    class _CountingExtractor(SourceExtractor):
        def __init__(self) -> None:
            super().__init__()
            self.calls: List[str] = []

        def extract(self, identity: str, content: str) -> CodeFacts:
            self.calls.append(identity)
            return super().extract(identity, content)

    first = _CountingExtractor()
    Orchestrator(extractors=[first, StyleExtractor()]).run_scan(
        repo_builder.path(), entries=["src/entry.ts"]
    )
    second = _CountingExtractor()
    outcome = Orchestrator(extractors=[second, StyleExtractor()]).run_scan(
        repo_builder.path(), entries=["src/entry.ts"]
    )

    assert len(first.calls) == 3
    assert second.calls == []
    assert outcome.report.dead_files == [repo_builder.identity("src/dead.ts")]
    assert (repo_builder.path() / ".deadlint" / "facts_cache.json").exists()


def test_run_scan_follows_linked_workspace_packages(repo_builder: RepoBuilder) -> None:
    repo_builder.write(
        {
            "packages/lib/package.json": json.dumps({"name": "@org/lib", "main": "index.ts"}),
            "packages/lib/index.ts": """
                export function helper() {
                  return 1;
                }

                export function spare() {
                  return 2;
                }
                """,
            "src/index.ts": """
                import { helper } from "@org/lib";

                helper();
                """,
        }
    )
    link = repo_builder.path() / "node_modules" / "@org" / "lib"
    link.parent.mkdir(parents=True)
    try:
        os.symlink(repo_builder.path() / "packages" / "lib", link, target_is_directory=True)
    except (OSError, NotImplementedError) as exc:
        pytest.skip(f"symlinks unavailable: {exc}")

    outcome = Orchestrator(use_cache=False).run_scan(repo_builder.path(), entries=["src/index.ts"])

    assert outcome.report.dead_files == []
    assert outcome.report.dead_exports == [
        DeadExport(repo_builder.identity("packages/lib/index.ts"), "spare")
    ]
    assert outcome.files_scanned == 2


def test_run_scan_rejects_missing_path(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        Orchestrator().run_scan(tmp_path / "missing")


def test_run_prune_deletes_after_confirmation(repo_builder: RepoBuilder) -> None:
    _write_scenario(repo_builder)
    seen: List[List[str]] = []

    def _confirm(files: List[str]) -> bool:
        seen.append(files)
        return True

    result = Orchestrator(use_cache=False).run_prune(
        repo_builder.path(), confirm=_confirm, entries=["src/entry.ts"]
    )

    assert seen == [["src/dead.ts"]]
    assert result.deleted == ["src/dead.ts"]
    assert result.failed == []
    assert not result.cancelled
    assert not (repo_builder.path() / "src" / "dead.ts").exists()
    assert (repo_builder.path() / "src" / "utils.ts").exists()


def test_run_prune_cancelled_keeps_files(repo_builder: RepoBuilder) -> None:
    _write_scenario(repo_builder)

    result = Orchestrator(use_cache=False).run_prune(
        repo_builder.path(), confirm=lambda files: False, entries=["src/entry.ts"]
    )

    assert result.cancelled
    assert result.deleted == []
    assert (repo_builder.path() / "src" / "dead.ts").exists()


def test_run_prune_with_nothing_dead(repo_builder: RepoBuilder) -> None:
    repo_builder.write({"src/index.ts": "console.log(1);\n"})

    def _never(files: List[str]) -> bool:  # pragma: no cover - must not be called
        raise AssertionError("confirmation requested for an empty prune")

    result = Orchestrator(use_cache=False).run_prune(repo_builder.path(), confirm=_never)

    assert result.deleted == [] and not result.cancelled


def test_run_scan_selects_entries_once(
    repo_builder: RepoBuilder, monkeypatch: pytest.MonkeyPatch
) -> None:
    _write_scenario(repo_builder)
    calls: List[List[str]] = []
    original = orchestrator_module.select_entries

    def _counting_select(graph, patterns, base_dir):
        calls.append(list(patterns))
        return original(graph, patterns, base_dir)

    monkeypatch.setattr(orchestrator_module, "select_entries", _counting_select)

    outcome = Orchestrator(use_cache=False).run_scan(repo_builder.path(), entries=["src/entry.ts"])

    assert calls == [["src/entry.ts"]]
    assert outcome.entries == [repo_builder.identity("src/entry.ts")]
    assert outcome.report.dead_files == [repo_builder.identity("src/dead.ts")]
