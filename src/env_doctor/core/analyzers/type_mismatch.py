"""Type, pattern and enum validation of defined values."""

from __future__ import annotations

import re
from collections import Counter
from typing import Iterable
from urllib.parse import urlparse

from env_doctor.core.definitions import NUMBER_RE, is_json
from env_doctor.core.ignore import should_ignore
from env_doctor.core.secrets import mask_value
from env_doctor.models.env import (
    DefinedVariable,
    InferredType,
    Issue,
    IssueKind,
    Severity,
    UsedVariable,
)
from env_doctor.models.rules import RuleSet, VariableRule, VariableType

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

EXPLICIT_BOOLEANS = frozenset({"true", "false", "1", "0", "yes", "no"})
INFERRED_BOOLEANS = frozenset({"true", "false", "1", "0"})

_CHECKED_INFERRED_TYPES = frozenset({
    InferredType.NUMBER,
    InferredType.BOOLEAN,
    InferredType.JSON,
    InferredType.ARRAY,
})


def _is_url(value: str) -> bool:
    try:
        parsed = urlparse(value)
    except ValueError:
        return False
    return bool(parsed.scheme and parsed.netloc)


def most_common_type(usages: Iterable[UsedVariable]) -> InferredType | None:
    """Most frequent informative inferred type; ties go to the first seen."""
    counts = Counter(
        u.inferred_type for u in usages if u.inferred_type in _CHECKED_INFERRED_TYPES
    )
    if not counts:
        return None
    # Counter preserves insertion order, and max() keeps the first maximum.
    return max(counts, key=lambda t: counts[t])


def _issue(
    variable: DefinedVariable,
    severity: Severity,
    message: str,
    kind: IssueKind = IssueKind.TYPE_MISMATCH,
    fix: str | None = None,
    **context,
) -> Issue:
    return Issue(
        kind=kind,
        severity=severity,
        variable=variable.name,
        message=message,
        location=variable.location,
        fix=fix,
        context=context,
    )


def check_explicit_type(variable: DefinedVariable, expected: VariableType) -> Issue | None:
    """Validate a value against a type configured in a rule."""
    name, value = variable.name, variable.value
    shown = mask_value(value, variable.is_secret)

    if expected == VariableType.NUMBER and not NUMBER_RE.match(value):
        return _issue(
            variable,
            Severity.ERROR,
            f'Variable "{name}" should be a number but value "{shown}" is not numeric',
            fix="Update the value to be a valid number",
            expected="number",
        )
    if expected == VariableType.BOOLEAN and value.lower() not in EXPLICIT_BOOLEANS:
        return _issue(
            variable,
            Severity.ERROR,
            f'Variable "{name}" should be a boolean but value "{shown}" is not valid',
            fix="Use true, false, 1, 0, yes, or no",
            expected="boolean",
        )
    if expected == VariableType.JSON and not is_json(value):
        return _issue(
            variable,
            Severity.ERROR,
            f'Variable "{name}" should be valid JSON but value is not parseable',
            fix="Ensure the value is valid JSON",
            expected="json",
        )
    if expected == VariableType.URL and not _is_url(value):
        return _issue(
            variable,
            Severity.ERROR,
            f'Variable "{name}" should be a valid URL',
            fix="Provide a valid URL (e.g., https://example.com)",
            expected="url",
        )
    if expected == VariableType.EMAIL and not EMAIL_RE.match(value):
        return _issue(
            variable,
            Severity.ERROR,
            f'Variable "{name}" should be a valid email address',
            fix="Provide a valid email address",
            expected="email",
        )
    return None


def check_inferred_type(
    variable: DefinedVariable,
    expected: InferredType,
    usage: UsedVariable,
) -> Issue | None:
    """Validate a value against the type its usages suggest."""
    name, value = variable.name, variable.value
    if not value:
        return None
    used_at = f"{usage.file}:{usage.line}"
    shown = mask_value(value, variable.is_secret)

    if expected == InferredType.NUMBER and not NUMBER_RE.match(value):
        return _issue(
            variable,
            Severity.WARNING,
            f'Variable "{name}" is used as a number at {used_at} but value "{shown}" is not numeric',
            used_at=used_at,
            expected="number",
        )
    if expected == InferredType.BOOLEAN and value.lower() not in INFERRED_BOOLEANS:
        return _issue(
            variable,
            Severity.WARNING,
            f'Variable "{name}" is used as a boolean at {used_at} but value may not be valid',
            used_at=used_at,
            expected="boolean",
        )
    if expected == InferredType.JSON and not is_json(value):
        return _issue(
            variable,
            Severity.WARNING,
            f'Variable "{name}" is parsed as JSON at {used_at} but value is not valid JSON',
            used_at=used_at,
            expected="json",
        )
    if expected == InferredType.ARRAY and "," not in value:
        return _issue(
            variable,
            Severity.INFO,
            f'Variable "{name}" is used as an array at {used_at} but value doesn\'t contain comma separators',
            used_at=used_at,
            expected="array",
        )
    return None


def check_constraints(variable: DefinedVariable, rule: VariableRule) -> Issue | None:
    """Check a value against a rule's pattern and enum."""
    name, value = variable.name, variable.value
    shown = mask_value(value, variable.is_secret)

    if rule.pattern is not None and not rule.matches_pattern(value):
        return _issue(
            variable,
            Severity.ERROR,
            f"Value of \"{name}\" doesn't match required pattern",
            kind=IssueKind.INVALID_VALUE,
            fix=f"Update the value to match /{rule.pattern}/",
            pattern=rule.pattern,
            value=shown,
        )
    if rule.enum and value not in rule.enum:
        return _issue(
            variable,
            Severity.ERROR,
            f'Value of "{name}" must be one of: {", ".join(rule.enum)}',
            kind=IssueKind.INVALID_VALUE,
            fix=f"Use one of: {', '.join(rule.enum)}",
            expected=list(rule.enum),
            actual=shown,
        )
    return None


def analyze_type_mismatch(
    defined_variables: Iterable[DefinedVariable],
    used_variables: Iterable[UsedVariable],
    rules: RuleSet | None = None,
) -> list[Issue]:
    """Validate every defined and used variable's value.

    The expected type is the rule's ``type`` when configured, otherwise the
    most common type inferred from the usages. A type failure is the only
    issue reported for that variable; otherwise the rule's pattern and enum
    are checked.

    Args:
        defined_variables: Merged definitions
        used_variables: All usages
        rules: Variable rules and ignore patterns

    Returns:
        List of type-mismatch and invalid-value issues
    """
    rules = rules or RuleSet()
    defined = {v.name: v for v in defined_variables}

    usages_by_name: dict[str, list[UsedVariable]] = {}
    for usage in used_variables:
        if not usage.is_dynamic:
            usages_by_name.setdefault(usage.name, []).append(usage)

    issues: list[Issue] = []
    for name, usages in usages_by_name.items():
        variable = defined.get(name)
        if variable is None:
            continue
        if should_ignore(name, rules.ignore, IssueKind.TYPE_MISMATCH.value):
            continue

        rule = rules.get(name)
        if rule is not None and rule.type is not None:
            issue = check_explicit_type(variable, rule.type)
        else:
            inferred = most_common_type(usages)
            issue = None
            if inferred is not None:
                usage = next(u for u in usages if u.inferred_type == inferred)
                issue = check_inferred_type(variable, inferred, usage)

        if issue is None and rule is not None:
            issue = check_constraints(variable, rule)
        if issue is not None:
            issues.append(issue)

    return issues
