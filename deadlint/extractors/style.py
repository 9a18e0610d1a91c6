"""Tree-sitter powered selector extractor for style sheets."""

from __future__ import annotations

from pathlib import PurePath
from typing import Dict, List, Optional, Tuple

from tree_sitter import Node, Parser
from tree_sitter_language_pack import get_language

from ..errors import ExtractionError
from ..logging import get_logger
from ..models import StyleFacts
from .base import Extractor

STYLE_SUFFIXES: Dict[str, str] = {
    ".css": "css",
    ".scss": "scss",
}

_LOGGER = get_logger("extractors.style")


class StyleExtractor(Extractor[StyleFacts]):
    """Collects class and id selector names defined by a style sheet."""

    cache_version = "2"

    def __init__(self) -> None:
        self._parsers: Dict[str, Parser] = {}

    def supports(self, path: str) -> bool:
        return self._language_for_file(path) is not None

    def extract(self, identity: str, content: str) -> StyleFacts:
        language_key = self._language_for_file(identity)
        if language_key is None:
            raise ExtractionError(identity, "unsupported style sheet type")
        source_bytes = content.encode("utf-8")
        tree = self._get_parser(language_key).parse(source_bytes)
        if tree is None:
            raise ExtractionError(identity, "parser returned no syntax tree")

        facts = StyleFacts(identity=identity, syntax_errors=tree.root_node.has_error)
        if facts.syntax_errors:
            _LOGGER.debug("%s contains syntax errors; selectors may be partial", identity)

        # Each stack item carries the class names "&" refers to at that point.
        stack: List[Tuple[Node, List[str]]] = [(tree.root_node, [])]
        while stack:
            node, parents = stack.pop()
            if node.type == "rule_set":
                own = self._rule_class_names(node, parents, source_bytes)
                for child in node.children:
                    stack.append((child, own if child.type == "block" else parents))
                continue
            if node.type == "class_selector":
                facts.class_names.update(self._class_names(node, parents, source_bytes))
            elif node.type == "id_selector":
                name = self._selector_name(node, "id_name", source_bytes)
                if name:
                    facts.ids.add(name)
            stack.extend((child, parents) for child in node.children)
        return facts

    def _get_parser(self, language_key: str) -> Parser:
        parser = self._parsers.get(language_key)
        if parser is not None:
            return parser
        parser = Parser(get_language(language_key))
        self._parsers[language_key] = parser
        return parser

    @staticmethod
    def _language_for_file(path: str) -> Optional[str]:
        return STYLE_SUFFIXES.get(PurePath(path).suffix.lower())

    @classmethod
    def _class_names(cls, node: Node, parents: List[str], source_bytes: bytes) -> List[str]:
        name = cls._selector_name(node, "class_name", source_bytes)
        if not name:
            return []
        # "&__elem" appends to the parent selector; "&.active" and ".x" do not.
        is_suffix = any(child.type == "nesting_selector" for child in node.children) and not any(
            child.type == "." for child in node.children
        )
        if is_suffix:
            return [parent + name for parent in parents]
        return [name]

    @classmethod
    def _rule_class_names(cls, rule: Node, parents: List[str], source_bytes: bytes) -> List[str]:
        """Class names a nested ``&`` inside ``rule`` stands for."""
        names: List[str] = []
        for selectors in rule.children:
            if selectors.type != "selectors":
                continue
            for selector in selectors.named_children:
                last = _last_descendant(selector, "class_selector")
                if last is not None:
                    names.extend(cls._class_names(last, parents, source_bytes))
                elif _last_descendant(selector, "nesting_selector") is not None:
                    names.extend(parents)
        return names

    @staticmethod
    def _selector_name(node: Node, name_type: str, source_bytes: bytes) -> Optional[str]:
        for child in node.children:
            if child.type == name_type:
                name = source_bytes[child.start_byte : child.end_byte].decode("utf-8", errors="ignore")
                # Interpolated SCSS names (".btn-#{$size}") cannot be matched literally.
                if "#{" in name:
                    return None
                return name
        return None


def _last_descendant(node: Node, node_type: str) -> Optional[Node]:
    """Return the matching node (``node`` included) that ends last in the source."""
    found: Optional[Node] = None
    stack = [node]
    while stack:
        current = stack.pop()
        if current.type == node_type and (found is None or current.end_byte > found.end_byte):
            found = current
        stack.extend(current.children)
    return found


__all__ = ["STYLE_SUFFIXES", "StyleExtractor"]
