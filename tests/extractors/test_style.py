"""Tests for the tree-sitter style extractor."""

from __future__ import annotations

import pytest

from deadlint.errors import ExtractionError
from deadlint.extractors import StyleExtractor


@pytest.fixture(scope="module")
def extractor() -> StyleExtractor:
    return StyleExtractor()


def test_collects_class_and_id_selectors(extractor: StyleExtractor) -> None:
    facts = extractor.extract(
        "/p/src/app.css",
        """
.btn, .btn-primary:hover { color: red; }
#header .nav > .item { margin: 0; }
@media (max-width: 600px) {
  .mobile { display: none; }
}
""",
    )

    assert facts.class_names == {"btn", "btn-primary", "nav", "item", "mobile"}
    assert facts.ids == {"header"}
    assert facts.defined_identifiers == {"btn", "btn-primary", "nav", "item", "mobile", "header"}


def test_declaration_values_are_not_selectors(extractor: StyleExtractor) -> None:
    facts = extractor.extract("/p/src/app.css", ".box { color: #fff; background: url(a.png); }\n")

    assert facts.class_names == {"box"}
    assert facts.ids == set()


def test_scss_nested_rules(extractor: StyleExtractor) -> None:
    facts = extractor.extract(
        "/p/src/card.scss",
        """
.card {
  .inner {
    color: red;
  }
}
""",
    )

    assert {"card", "inner"} <= facts.class_names


def test_scss_parent_suffix_selectors_join_parent_class(extractor: StyleExtractor) -> None:
    facts = extractor.extract(
        "/p/src/block.scss",
        """
.block {
  &__elem {
    color: red;

    &--on {
      color: blue;
    }
  }
  .x:hover {
    color: green;
  }
}
#hero {
  margin: 0;
}
""",
    )

    assert facts.class_names == {"block", "block__elem", "block__elem--on", "x"}
    assert facts.ids == {"hero"}


def test_supports_only_style_sheets(extractor: StyleExtractor) -> None:
    assert extractor.supports("a.css")
    assert extractor.supports("a.scss")
    assert not extractor.supports("a.ts")
    with pytest.raises(ExtractionError):
        extractor.extract("/p/a.less", ".x {}")
