"""Tree-sitter powered import/export/literal extractor for JS and TS sources."""

from __future__ import annotations

import re
from pathlib import PurePath
from typing import Dict, Iterable, List, Optional

from tree_sitter import Node, Parser
from tree_sitter_language_pack import get_language

from ..errors import ExtractionError
from ..logging import get_logger
from ..models import (
    DEFAULT_EXPORT,
    NAMESPACE_IMPORT,
    SIDE_EFFECT_IMPORT,
    CodeFacts,
    ExportFact,
    ImportFact,
)
from .base import Extractor

CODE_SUFFIXES: Dict[str, str] = {
    ".js": "javascript",
    ".mjs": "javascript",
    ".cjs": "javascript",
    ".jsx": "javascript",
    ".ts": "typescript",
    ".mts": "typescript",
    ".cts": "typescript",
    ".tsx": "tsx",
}

_TYPE_ONLY_DECLARATIONS = {"interface_declaration", "type_alias_declaration"}

_ESCAPE_RE = re.compile(r"\\(u\{[0-9a-fA-F]+\}|u[0-9a-fA-F]{4}|x[0-9a-fA-F]{2}|0(?![0-9])|\r\n|[\s\S])")
_SIMPLE_ESCAPES: Dict[str, str] = {
    "b": "\b",
    "f": "\f",
    "n": "\n",
    "r": "\r",
    "t": "\t",
    "v": "\v",
    "0": "\0",
}

_LOGGER = get_logger("extractors.source")


class SourceExtractor(Extractor[CodeFacts]):
    """Extracts import, export and string literal facts using tree-sitter parsers."""

    cache_version = "2"

    def __init__(self) -> None:
        self._parsers: Dict[str, Parser] = {}

    def supports(self, path: str) -> bool:
        return self._language_for_file(path) is not None

    def extract(self, identity: str, content: str) -> CodeFacts:
        language_key = self._language_for_file(identity)
        if language_key is None:
            raise ExtractionError(identity, "unsupported source file type")
        source_bytes = content.encode("utf-8")
        tree = self._get_parser(language_key).parse(source_bytes)
        if tree is None:
            raise ExtractionError(identity, "parser returned no syntax tree")

        facts = CodeFacts(identity=identity, syntax_errors=tree.root_node.has_error)
        if facts.syntax_errors:
            _LOGGER.debug("%s contains syntax errors; facts may be partial", identity)
        self._walk(tree.root_node, source_bytes, facts)
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
        name = PurePath(path).name.lower()
        if name.endswith(".d.ts"):
            return "typescript"
        return CODE_SUFFIXES.get(PurePath(name).suffix)

    @staticmethod
    def _node_text(node: Node, source_bytes: bytes) -> str:
        return source_bytes[node.start_byte : node.end_byte].decode("utf-8", errors="ignore")

    def _walk(self, root: Node, source_bytes: bytes, facts: CodeFacts) -> None:
        # Explicit stack: deeply nested expressions must not exhaust the call stack.
        stack: List[Node] = [root]
        while stack:
            node = stack.pop()
            kind = node.type
            if kind == "import_statement":
                facts.imports.extend(self._imports_from_statement(node, source_bytes))
            elif kind == "export_statement":
                self._collect_export(node, source_bytes, facts)
            elif kind == "call_expression":
                dynamic = self._dynamic_import(node, source_bytes)
                if dynamic is not None:
                    facts.imports.append(dynamic)
            elif kind == "string":
                facts.literal_strings.add(self._string_value(node, source_bytes))
            elif kind == "template_string":
                if not any(child.type == "template_substitution" for child in node.children):
                    facts.literal_strings.add(self._string_value(node, source_bytes))
            stack.extend(reversed(node.children))

    # ------------------------------------------------------------------
    # Imports

    def _imports_from_statement(self, node: Node, source_bytes: bytes) -> List[ImportFact]:
        type_only = _has_keyword(node, "type")
        source_node = node.child_by_field_name("source")
        require_clause = _first_child_of_type(node, "import_require_clause")
        if require_clause is not None:
            # import x = require("./y")
            string_node = require_clause.child_by_field_name("source") or _first_child_of_type(
                require_clause, "string"
            )
            local = _first_child_of_type(require_clause, "identifier")
            if string_node is None:
                return []
            return [
                ImportFact(
                    source_specifier=self._string_value(string_node, source_bytes),
                    imported_name=NAMESPACE_IMPORT,
                    local_name=self._node_text(local, source_bytes) if local else "",
                    is_type_only=type_only,
                )
            ]
        if source_node is None:
            return []

        specifier = self._string_value(source_node, source_bytes)
        facts: List[ImportFact] = []
        clause = _first_child_of_type(node, "import_clause")
        if clause is not None:
            for child in clause.named_children:
                if child.type == "identifier":
                    facts.append(
                        ImportFact(
                            source_specifier=specifier,
                            imported_name=DEFAULT_EXPORT,
                            local_name=self._node_text(child, source_bytes),
                            is_type_only=type_only,
                        )
                    )
                elif child.type == "namespace_import":
                    local = _first_child_of_type(child, "identifier")
                    facts.append(
                        ImportFact(
                            source_specifier=specifier,
                            imported_name=NAMESPACE_IMPORT,
                            local_name=self._node_text(local, source_bytes) if local else "",
                            is_type_only=type_only,
                        )
                    )
                elif child.type == "named_imports":
                    facts.extend(self._named_imports(child, specifier, type_only, source_bytes))

        if not facts:
            facts.append(ImportFact(source_specifier=specifier, imported_name=SIDE_EFFECT_IMPORT))
        return facts

    def _named_imports(
        self, node: Node, specifier: str, type_only: bool, source_bytes: bytes
    ) -> Iterable[ImportFact]:
        for item in node.named_children:
            if item.type != "import_specifier":
                continue
            name_node = item.child_by_field_name("name")
            alias_node = item.child_by_field_name("alias")
            if name_node is None:
                continue
            imported = self._name_value(name_node, source_bytes)
            local = self._name_value(alias_node, source_bytes) if alias_node else imported
            yield ImportFact(
                source_specifier=specifier,
                imported_name=imported,
                local_name=local,
                is_type_only=type_only or _has_keyword(item, "type"),
            )

    def _dynamic_import(self, node: Node, source_bytes: bytes) -> Optional[ImportFact]:
        function = node.child_by_field_name("function")
        arguments = node.child_by_field_name("arguments")
        if function is None or arguments is None:
            return None
        if function.type == "import":
            pass
        elif function.type == "identifier" and self._node_text(function, source_bytes) == "require":
            pass
        else:
            return None
        args = arguments.named_children
        if not args or args[0].type != "string":
            return None
        # The whole module namespace escapes to runtime code.
        return ImportFact(
            source_specifier=self._string_value(args[0], source_bytes),
            imported_name=NAMESPACE_IMPORT,
        )

    # ------------------------------------------------------------------
    # Exports

    def _collect_export(self, node: Node, source_bytes: bytes, facts: CodeFacts) -> None:
        type_only = _has_keyword(node, "type")
        source_node = node.child_by_field_name("source")
        specifier = self._string_value(source_node, source_bytes) if source_node else None

        if _has_keyword(node, "default") or _has_keyword(node, "="):
            declaration = node.child_by_field_name("declaration") or node.child_by_field_name("value")
            facts.exports.append(
                ExportFact(
                    exported_name=DEFAULT_EXPORT,
                    local_name=self._declared_name(declaration, source_bytes),
                    is_type_only=type_only,
                )
            )
            return

        declaration = node.child_by_field_name("declaration")
        if declaration is not None:
            for name, declared_type_only in self._declaration_names(declaration, source_bytes):
                facts.exports.append(
                    ExportFact(
                        exported_name=name,
                        local_name=name,
                        is_type_only=type_only or declared_type_only,
                    )
                )
            return

        clause = _first_child_of_type(node, "export_clause")
        if clause is not None:
            for item in clause.named_children:
                if item.type != "export_specifier":
                    continue
                name_node = item.child_by_field_name("name")
                alias_node = item.child_by_field_name("alias")
                if name_node is None:
                    continue
                local = self._name_value(name_node, source_bytes)
                exported = self._name_value(alias_node, source_bytes) if alias_node else local
                item_type_only = type_only or _has_keyword(item, "type")
                facts.exports.append(
                    ExportFact(exported_name=exported, local_name=local, is_type_only=item_type_only)
                )
                if specifier is not None:
                    # Re-export: the named binding is consumed from the source module.
                    facts.imports.append(
                        ImportFact(
                            source_specifier=specifier,
                            imported_name=local,
                            local_name="",
                            is_type_only=item_type_only,
                        )
                    )
            if specifier is not None and not clause.named_children:
                facts.imports.append(
                    ImportFact(source_specifier=specifier, imported_name=SIDE_EFFECT_IMPORT)
                )
            return

        if specifier is None:
            return
        namespace = _first_child_of_type(node, "namespace_export")
        if namespace is not None:
            alias = namespace.named_children[-1] if namespace.named_children else None
            if alias is not None:
                facts.exports.append(
                    ExportFact(
                        exported_name=self._name_value(alias, source_bytes),
                        local_name=None,
                        is_type_only=type_only,
                    )
                )
        # export * from "./x" / export * as ns from "./x"
        facts.imports.append(
            ImportFact(
                source_specifier=specifier,
                imported_name=NAMESPACE_IMPORT,
                is_type_only=type_only,
            )
        )

    def _declaration_names(self, declaration: Node, source_bytes: bytes) -> List[tuple[str, bool]]:
        if declaration.type == "ambient_declaration":
            inner = [child for child in declaration.named_children if child.type != "comment"]
            names: List[tuple[str, bool]] = []
            for child in inner:
                names.extend(self._declaration_names(child, source_bytes))
            return names
        if declaration.type in {"lexical_declaration", "variable_declaration"}:
            names = []
            for declarator in declaration.named_children:
                if declarator.type != "variable_declarator":
                    continue
                target = declarator.child_by_field_name("name")
                if target is not None:
                    names.extend((name, False) for name in self._pattern_names(target, source_bytes))
            return names
        name = self._declared_name(declaration, source_bytes)
        if not name:
            return []
        return [(name, declaration.type in _TYPE_ONLY_DECLARATIONS)]

    def _declared_name(self, node: Optional[Node], source_bytes: bytes) -> Optional[str]:
        if node is None:
            return None
        if node.type == "identifier":
            return self._node_text(node, source_bytes)
        name_node = node.child_by_field_name("name")
        if name_node is None:
            return None
        return self._name_value(name_node, source_bytes)

    def _pattern_names(self, pattern: Node, source_bytes: bytes) -> List[str]:
        names: List[str] = []
        stack: List[Node] = [pattern]
        while stack:
            node = stack.pop()
            if node.type in {"identifier", "shorthand_property_identifier_pattern"}:
                names.append(self._node_text(node, source_bytes))
            elif node.type == "pair_pattern":
                value = node.child_by_field_name("value")
                if value is not None:
                    stack.append(value)
            elif node.type in {"assignment_pattern", "object_assignment_pattern"}:
                left = node.child_by_field_name("left")
                if left is not None:
                    stack.append(left)
            else:
                stack.extend(reversed(node.named_children))
        return names

    # ------------------------------------------------------------------
    # Literals

    def _name_value(self, node: Node, source_bytes: bytes) -> str:
        if node.type == "string":
            return self._string_value(node, source_bytes)
        return self._node_text(node, source_bytes)

    def _string_value(self, node: Node, source_bytes: bytes) -> str:
        text = self._node_text(node, source_bytes)
        if len(text) >= 2 and text[0] == text[-1] and text[0] in {'"', "'", "`"}:
            return _decode_escapes(text[1:-1])
        return text


def _decode_escapes(body: str) -> str:
    """Return the value of a JS string body, decoding its backslash escapes."""
    if "\\" not in body:
        return body
    decoded = _ESCAPE_RE.sub(_replace_escape, body)
    try:
        # Joins escaped surrogate pairs such as "\uD83D\uDE00" into one character.
        return decoded.encode("utf-16", "surrogatepass").decode("utf-16")
    except UnicodeDecodeError:
        return decoded


def _replace_escape(match: re.Match[str]) -> str:
    escape = match.group(1)
    if escape in _SIMPLE_ESCAPES:
        return _SIMPLE_ESCAPES[escape]
    if escape in {"\n", "\r", "\r\n", "\u2028", "\u2029"}:
        return ""
    if escape[0] in {"x", "u"} and len(escape) > 1:
        code_point = int(escape[1:].strip("{}"), 16)
        if code_point > 0x10FFFF:
            return match.group(0)
        return chr(code_point)
    return escape


def _first_child_of_type(node: Node, kind: str) -> Optional[Node]:
    for child in node.children:
        if child.type == kind:
            return child
    return None


def _has_keyword(node: Node, keyword: str) -> bool:
    return any(not child.is_named and child.type == keyword for child in node.children)


__all__ = ["CODE_SUFFIXES", "SourceExtractor"]
