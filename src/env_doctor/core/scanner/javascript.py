"""Structural scanning of JavaScript and TypeScript with tree-sitter."""

from __future__ import annotations

import tree_sitter_javascript as tsjs
import tree_sitter_typescript as tsts
from tree_sitter import Language, Node as TSNode, Parser

from env_doctor.core.scanner.base import ScanContext, StructuralScan
from env_doctor.models.env import AccessIdiom, InferredType, UsedVariable

JAVASCRIPT = Language(tsjs.language())
TYPESCRIPT = Language(tsts.language_typescript())
TSX = Language(tsts.language_tsx())

LANGUAGES = {
    ".js": JAVASCRIPT,
    ".jsx": JAVASCRIPT,
    ".mjs": JAVASCRIPT,
    ".cjs": JAVASCRIPT,
    ".ts": TYPESCRIPT,
    ".mts": TYPESCRIPT,
    ".cts": TYPESCRIPT,
    ".tsx": TSX,
}

NUMBER_FUNCTIONS = frozenset({"parseInt", "parseFloat", "Number"})
EQUALITY_OPERATORS = frozenset({"==", "===", "!=", "!=="})
BOOLEAN_LITERALS = frozenset({"true", "false"})
# Wrappers that do not change the value being read.
TRANSPARENT_WRAPPERS = frozenset({"parenthesized_expression", "non_null_expression"})

PROCESS_ENV = "process.env"
IMPORT_META_ENV = "import.meta.env"


def _text(node: TSNode | None) -> str:
    if node is None or node.text is None:
        return ""
    return node.text.decode("utf-8", errors="replace")


def _is_import_meta(node: TSNode) -> bool:
    if node.type == "meta_property":
        return _text(node).replace(" ", "") == "import.meta"
    if node.type == "member_expression":
        obj = node.child_by_field_name("object")
        prop = node.child_by_field_name("property")
        return obj is not None and obj.type == "import" and _text(prop) == "meta"
    return False


def env_accessor(node: TSNode | None) -> str | None:
    """Name the environment object a node denotes, if any."""
    while node is not None and node.type in TRANSPARENT_WRAPPERS:
        node = node.named_children[0] if node.named_children else None
    if node is None or node.type != "member_expression":
        return None
    obj = node.child_by_field_name("object")
    prop = node.child_by_field_name("property")
    if obj is None or _text(prop) != "env":
        return None
    if obj.type == "identifier" and _text(obj) == "process":
        return PROCESS_ENV
    if _is_import_meta(obj):
        return IMPORT_META_ENV
    return None


def _string_key(node: TSNode) -> str | None:
    """Literal value of a string or substitution-free template, else None."""
    if node.type == "string":
        return _text(node)[1:-1]
    if node.type == "template_string":
        if any(child.type == "template_substitution" for child in node.named_children):
            return None
        return _text(node)[1:-1]
    return None


def _key_start(node: TSNode) -> tuple[int, int]:
    """Start of the identifier inside a key node, skipping any opening quote."""
    row, column = node.start_point[0], node.start_point[1]
    if node.type in ("string", "template_string"):
        column += 1
    return row, column


def _outer(node: TSNode) -> TSNode:
    while node.parent is not None and node.parent.type in TRANSPARENT_WRAPPERS:
        node = node.parent
    return node


def infer_type(node: TSNode) -> InferredType:
    """Type suggested by the immediate parent of an env read."""
    node = _outer(node)
    parent = node.parent
    if parent is None:
        return InferredType.UNKNOWN

    if parent.type == "arguments" and parent.parent is not None:
        call = parent.parent
        function = call.child_by_field_name("function") if call.type == "call_expression" else None
        if function is not None:
            if function.type == "identifier" and _text(function) in NUMBER_FUNCTIONS:
                return InferredType.NUMBER
            if function.type == "member_expression" and _text(function).replace(" ", "") == "JSON.parse":
                return InferredType.JSON

    if parent.type == "binary_expression":
        operator = parent.child_by_field_name("operator")
        if _text(operator) in EQUALITY_OPERATORS:
            left = parent.child_by_field_name("left")
            right = parent.child_by_field_name("right")
            other = right if left is not None and left == node else left
            if other is not None and _string_key(other) in BOOLEAN_LITERALS:
                return InferredType.BOOLEAN

    if parent.type == "member_expression":
        obj = parent.child_by_field_name("object")
        prop = parent.child_by_field_name("property")
        if obj is not None and obj == node and _text(prop) == "split":
            return InferredType.ARRAY

    return InferredType.UNKNOWN


class JavaScriptScanner:
    """Collects env reads from a JavaScript or TypeScript syntax tree."""

    def __init__(self, context: ScanContext, language: Language):
        self.context = context
        self.language = language

    def scan(self, source: bytes) -> StructuralScan:
        tree = Parser(self.language).parse(source)
        if tree.root_node.has_error:
            return StructuralScan.failed("syntax errors in source")

        usages: list[UsedVariable] = []
        stack = [tree.root_node]
        while stack:
            node = stack.pop()
            usages.extend(self._visit(node))
            stack.extend(reversed(node.children))
        return StructuralScan.ok(usages)

    def _visit(self, node: TSNode) -> list[UsedVariable]:
        if node.type == "member_expression":
            return self._member(node)
        if node.type == "subscript_expression":
            return self._subscript(node)
        if node.type == "variable_declarator":
            return self._destructure(node.child_by_field_name("name"), node.child_by_field_name("value"))
        if node.type == "assignment_expression":
            return self._destructure(node.child_by_field_name("left"), node.child_by_field_name("right"))
        return []

    def _member(self, node: TSNode) -> list[UsedVariable]:
        accessor = env_accessor(node.child_by_field_name("object"))
        prop = node.child_by_field_name("property")
        if accessor is None or prop is None or prop.type != "property_identifier":
            return []
        return [
            self.context.usage(
                _text(prop),
                AccessIdiom.DIRECT,
                prop.start_point[0],
                prop.start_point[1],
                infer_type(node),
                via_import_meta=accessor == IMPORT_META_ENV,
            )
        ]

    def _subscript(self, node: TSNode) -> list[UsedVariable]:
        accessor = env_accessor(node.child_by_field_name("object"))
        index = node.child_by_field_name("index")
        if accessor is None or index is None:
            return []
        via_import_meta = accessor == IMPORT_META_ENV

        name = _string_key(index)
        if name is None:
            return [
                self.context.usage(
                    "",
                    AccessIdiom.DYNAMIC,
                    index.start_point[0],
                    index.start_point[1],
                    via_import_meta=via_import_meta,
                )
            ]
        if not name:
            return []
        row, column = _key_start(index)
        return [
            self.context.usage(
                name,
                AccessIdiom.BRACKET,
                row,
                column,
                infer_type(node),
                via_import_meta=via_import_meta,
            )
        ]

    def _destructure(self, pattern: TSNode | None, value: TSNode | None) -> list[UsedVariable]:
        if pattern is None or pattern.type != "object_pattern":
            return []
        accessor = env_accessor(value)
        if accessor is None:
            return []
        via_import_meta = accessor == IMPORT_META_ENV

        usages: list[UsedVariable] = []
        for element in pattern.named_children:
            key = self._pattern_key(element)
            if key is None:
                continue
            if key.type == "computed_property_name":
                usages.append(
                    self.context.usage(
                        "",
                        AccessIdiom.DYNAMIC,
                        key.start_point[0],
                        key.start_point[1],
                        via_import_meta=via_import_meta,
                    )
                )
                continue
            name = _string_key(key) if key.type in ("string", "template_string") else _text(key)
            if not name:
                continue
            row, column = _key_start(key)
            usages.append(
                self.context.usage(
                    name,
                    AccessIdiom.DESTRUCTURE,
                    row,
                    column,
                    via_import_meta=via_import_meta,
                )
            )
        return usages

    @staticmethod
    def _pattern_key(element: TSNode) -> TSNode | None:
        """Key node of one object pattern element; None for rest elements."""
        if element.type == "shorthand_property_identifier_pattern":
            return element
        if element.type == "pair_pattern":
            return element.child_by_field_name("key")
        if element.type == "object_assignment_pattern":
            left = element.child_by_field_name("left")
            if left is not None and left.type == "shorthand_property_identifier_pattern":
                return left
        return None


def scan_javascript(context: ScanContext, source: bytes, language: Language) -> StructuralScan:
    """Scan JavaScript-family source with the given grammar."""
    return JavaScriptScanner(context, language).scan(source)
