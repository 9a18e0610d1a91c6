"""Tests for the style identifier usage pass."""

from __future__ import annotations

from deadlint.engine import collect_reachable_literals, find_dead_style_identifiers
from deadlint.models import DeadStyleIdentifier
from tests._fixtures.graphs import build_graph, code, ident, style


def test_literals_are_split_on_whitespace() -> None:
    graph = build_graph(code("src/index.ts", literals=["foo bar", "baz"]))

    literals = collect_reachable_literals(graph, {ident("src/index.ts")})

    assert literals == {"foo bar", "foo", "bar", "baz"}


def test_token_split_matching_does_not_join_tokens() -> None:
    graph = build_graph(
        code("src/index.ts", literals=["foo bar"]),
        style("src/app.css", classes=["foo", "bar", "foobar"]),
    )

    dead = find_dead_style_identifiers(graph, {ident("src/index.ts"), ident("src/app.css")})

    assert dead == [DeadStyleIdentifier(ident("src/app.css"), "foobar")]


def test_unreachable_sheet_reports_every_identifier() -> None:
    graph = build_graph(
        code("src/index.ts", literals=["btn"]),
        style("src/legacy.css", classes=["btn", "card"], ids=["hero"]),
    )

    dead = find_dead_style_identifiers(graph, {ident("src/index.ts")})

    assert [item.class_name for item in dead] == ["btn", "card", "hero"]


def test_literals_from_unreachable_code_do_not_count() -> None:
    graph = build_graph(
        code("src/index.ts"),
        code("src/orphan.tsx", literals=["btn"]),
        style("src/app.css", classes=["btn"]),
    )

    dead = find_dead_style_identifiers(graph, {ident("src/index.ts"), ident("src/app.css")})

    assert dead == [DeadStyleIdentifier(ident("src/app.css"), "btn")]


def test_ids_are_matched_like_classes() -> None:
    graph = build_graph(
        code("src/index.ts", literals=["header"]),
        style("src/app.css", ids=["header", "footer"]),
    )

    dead = find_dead_style_identifiers(graph, {ident("src/index.ts"), ident("src/app.css")})

    assert dead == [DeadStyleIdentifier(ident("src/app.css"), "footer")]
