"""Tests for the reachability sweep and export liveness."""

from __future__ import annotations

from deadlint.engine import (
    ExportLiveness,
    resolve_imports,
    seed_entry_liveness,
    select_entries,
    sweep,
)
from tests._fixtures.graphs import ROOT, build_graph, code, ident, imp, resolver_for


def _sweep(graph, patterns):
    resolve_imports(graph, resolver_for(graph))
    entries = select_entries(graph, patterns, ROOT)
    return sweep(graph, entries, seed_entry_liveness(graph, entries))


def test_resolve_imports_only_binds_edges_into_the_graph() -> None:
    graph = build_graph(
        code("src/a.ts", imports=[imp("./b", "x"), imp("./missing", "y"), imp("react", "useState")]),
        code("src/b.ts", exports=["x"]),
    )

    resolved = resolve_imports(graph, resolver_for(graph))

    node = graph.get(ident("src/a.ts"))
    assert node is not None
    assert resolved == 1
    assert [item.resolved_identity for item in node.imports] == [ident("src/b.ts"), None, None]


def test_resolver_errors_are_treated_as_misses() -> None:
    class _Exploding:
        def resolve(self, directory: str, specifier: str) -> None:
            raise OSError("permission denied")

    graph = build_graph(code("src/a.ts", imports=[imp("./b", "x")]), code("src/b.ts"))

    assert resolve_imports(graph, _Exploding()) == 0


def test_entries_are_reachable_and_export_everything() -> None:
    graph = build_graph(code("src/index.ts", exports=["main", "default"]))

    result = _sweep(graph, ["src/index.*"])

    assert result.reachable == {ident("src/index.ts")}
    state = result.liveness_for(ident("src/index.ts"))
    assert state is not None
    assert state.is_used("main") and state.is_used("default")


def test_transitive_closure_through_reexport_only_module() -> None:
    graph = build_graph(
        code("src/index.ts", imports=[imp("./barrel", "helper")]),
        code("src/barrel.ts", imports=[imp("./helpers", "helper")], exports=["helper"]),
        code("src/helpers.ts", exports=["helper", "other"]),
    )

    result = _sweep(graph, ["src/index.ts"])

    assert result.reachable == {ident("src/index.ts"), ident("src/barrel.ts"), ident("src/helpers.ts")}
    helpers = result.liveness_for(ident("src/helpers.ts"))
    assert helpers is not None
    assert helpers.is_used("helper")
    assert not helpers.is_used("other")


def test_side_effect_import_reaches_without_marking_exports() -> None:
    graph = build_graph(
        code("src/index.ts", imports=[imp("./polyfill")]),
        code("src/polyfill.ts", exports=["install"]),
    )

    result = _sweep(graph, ["src/index.ts"])

    assert ident("src/polyfill.ts") in result.reachable
    assert result.liveness_for(ident("src/polyfill.ts")) is None


def test_namespace_import_marks_every_export_used() -> None:
    graph = build_graph(
        code("src/index.ts", imports=[imp("./utils", "*")]),
        code("src/utils.ts", exports=["a", "b"]),
    )

    result = _sweep(graph, ["src/index.ts"])

    state = result.liveness_for(ident("src/utils.ts"))
    assert state is not None
    assert state.all_used
    assert state.is_used("anything")


def test_sweep_terminates_on_cycles() -> None:
    graph = build_graph(
        code("src/index.ts", imports=[imp("./a", "a")]),
        code("src/a.ts", imports=[imp("./b", "b")], exports=["a"]),
        code("src/b.ts", imports=[imp("./a", "a")], exports=["b"]),
    )

    result = _sweep(graph, ["src/index.ts"])

    assert result.reachable == {ident("src/index.ts"), ident("src/a.ts"), ident("src/b.ts")}


def test_unreachable_importers_do_not_grant_liveness() -> None:
    graph = build_graph(
        code("src/index.ts"),
        code("src/orphan.ts", imports=[imp("./lib", "used")]),
        code("src/lib.ts", exports=["used"]),
    )

    result = _sweep(graph, ["src/index.ts"])

    assert result.reachable == {ident("src/index.ts")}
    assert result.liveness_for(ident("src/lib.ts")) is None


def test_seed_liveness_is_copied() -> None:
    graph = build_graph(code("src/index.ts", exports=["a"]))
    seed = {ident("src/index.ts"): ExportLiveness(names={"a"})}

    result = sweep(graph, [ident("src/index.ts")], seed)
    result.liveness[ident("src/index.ts")].mark("b")

    assert seed[ident("src/index.ts")].names == {"a"}


def test_export_literally_named_star_is_not_a_wildcard() -> None:
    state = ExportLiveness(names={"*"})

    assert not state.all_used
    assert not state.is_used("other")
