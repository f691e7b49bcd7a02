"""Structural scanning of Python source with the ast module."""

from __future__ import annotations

import ast
import re

from env_doctor.core.scanner.base import ScanContext, StructuralScan
from env_doctor.models.env import AccessIdiom, InferredType, UsedVariable

NUMBER_FUNCTIONS = frozenset({"int", "float"})
BOOLEAN_LITERALS = frozenset({"true", "false"})

_STRING_PREFIX = re.compile(rb"[rRbBuUfF]{0,2}(\"\"\"|'''|\"|')")


class _Imports(ast.NodeVisitor):
    """Local names bound to os, os.environ and os.getenv."""

    def __init__(self) -> None:
        self.os_names = {"os"}
        self.environ_names: set[str] = set()
        self.getenv_names: set[str] = set()

    def visit_Import(self, node: ast.Import) -> None:
        for alias in node.names:
            if alias.name == "os":
                self.os_names.add(alias.asname or "os")

    def visit_ImportFrom(self, node: ast.ImportFrom) -> None:
        if node.module != "os" or node.level:
            return
        for alias in node.names:
            if alias.name == "environ":
                self.environ_names.add(alias.asname or "environ")
            elif alias.name == "getenv":
                self.getenv_names.add(alias.asname or "getenv")


class PythonScanner:
    """Collects env reads from a Python syntax tree."""

    def __init__(self, context: ScanContext):
        self.context = context
        self.imports = _Imports()
        self.parents: dict[ast.AST, ast.AST] = {}

    def scan(self, source: bytes) -> StructuralScan:
        try:
            tree = ast.parse(source)
        except (SyntaxError, ValueError) as e:
            return StructuralScan.failed(f"syntax error: {e}")

        self.imports.visit(tree)
        for node in ast.walk(tree):
            for child in ast.iter_child_nodes(node):
                self.parents[child] = node

        usages: list[UsedVariable] = []
        for node in ast.walk(tree):
            usage = self._visit(node)
            if usage is not None:
                usages.append(usage)
        return StructuralScan.ok(usages)

    def _is_os(self, node: ast.AST) -> bool:
        return isinstance(node, ast.Name) and node.id in self.imports.os_names

    def _is_environ(self, node: ast.AST) -> bool:
        if isinstance(node, ast.Attribute):
            return node.attr == "environ" and self._is_os(node.value)
        return isinstance(node, ast.Name) and node.id in self.imports.environ_names

    def _is_getter(self, func: ast.AST) -> bool:
        if isinstance(func, ast.Attribute):
            if func.attr == "getenv" and self._is_os(func.value):
                return True
            return func.attr == "get" and self._is_environ(func.value)
        return isinstance(func, ast.Name) and func.id in self.imports.getenv_names

    def _visit(self, node: ast.AST) -> UsedVariable | None:
        if isinstance(node, ast.Call) and self._is_getter(node.func):
            if not node.args:
                return None
            return self._usage(node, node.args[0], AccessIdiom.DIRECT)
        if isinstance(node, ast.Subscript) and self._is_environ(node.value):
            if not isinstance(node.ctx, ast.Load):
                return None
            return self._usage(node, node.slice, AccessIdiom.BRACKET)
        return None

    def _usage(self, access: ast.AST, key: ast.AST, idiom: AccessIdiom) -> UsedVariable | None:
        row = key.lineno - 1
        column = key.col_offset
        if isinstance(key, ast.Constant) and isinstance(key.value, str):
            if not key.value:
                return None
            match = _STRING_PREFIX.match(self.context.line_bytes(row), column)
            if match:
                column = match.end()
            return self.context.usage(key.value, idiom, row, column, self._infer_type(access))
        return self.context.usage("", AccessIdiom.DYNAMIC, row, column)

    def _infer_type(self, node: ast.AST) -> InferredType:
        """Type suggested by the immediate parent of an env read."""
        parent = self.parents.get(node)

        if isinstance(parent, ast.Call) and node in parent.args:
            func = parent.func
            if isinstance(func, ast.Name) and func.id in NUMBER_FUNCTIONS:
                return InferredType.NUMBER
            if (
                isinstance(func, ast.Attribute)
                and func.attr == "loads"
                and isinstance(func.value, ast.Name)
                and func.value.id == "json"
            ):
                return InferredType.JSON

        if isinstance(parent, ast.Compare) and len(parent.ops) == 1:
            if isinstance(parent.ops[0], (ast.Eq, ast.NotEq)):
                other = parent.comparators[0] if parent.left is node else parent.left
                if isinstance(other, ast.Constant) and other.value in BOOLEAN_LITERALS:
                    return InferredType.BOOLEAN

        if isinstance(parent, ast.Attribute) and parent.value is node and parent.attr == "split":
            return InferredType.ARRAY

        return InferredType.UNKNOWN


def scan_python(context: ScanContext, source: bytes) -> StructuralScan:
    """Scan Python source."""
    return PythonScanner(context).scan(source)
