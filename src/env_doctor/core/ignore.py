"""Ignore pattern matching.

Patterns are ``NAME`` (exact), ``PREFIX*``, ``*SUFFIX``, or any of those
scoped to one analyzer as ``kind:PATTERN`` (for example ``unused:DEBUG``).
"""

from __future__ import annotations

from typing import Iterable


def matches_variable_pattern(name: str, pattern: str) -> bool:
    """Match a variable name against a single unscoped pattern."""
    if pattern.endswith("*"):
        return name.startswith(pattern[:-1])
    if pattern.startswith("*"):
        return name.endswith(pattern[1:])
    return name == pattern


def should_ignore(name: str, patterns: Iterable[str], kind: str | None = None) -> bool:
    """Whether a variable is ignored for an analyzer.

    Args:
        name: Variable name
        patterns: Ignore patterns
        kind: Issue kind of the asking analyzer; scoped patterns only
            apply when it matches

    Returns:
        True if any pattern covers the variable
    """
    for pattern in patterns:
        if ":" in pattern:
            scope, _, var_pattern = pattern.partition(":")
            if kind and scope == kind and matches_variable_pattern(name, var_pattern):
                return True
        elif matches_variable_pattern(name, pattern):
            return True
    return False
