"""Missing definitions and dynamic access."""

from __future__ import annotations

from typing import Iterable

from env_doctor.core.ignore import should_ignore
from env_doctor.models.env import (
    DYNAMIC_NAME,
    DefinedVariable,
    Issue,
    IssueKind,
    Severity,
    UsedVariable,
)
from env_doctor.models.rules import RuleSet


def analyze_missing(
    defined_variables: Iterable[DefinedVariable],
    used_variables: Iterable[UsedVariable],
    rules: RuleSet | None = None,
) -> list[Issue]:
    """Find variables read in code but defined nowhere.

    One issue is reported per name, at its first usage. Names with a
    configured default are satisfied. Variables a rule marks required are
    also reported when nothing defines them, even if no code reads them.

    Args:
        defined_variables: Merged definitions
        used_variables: Usages, in scan order
        rules: Variable rules and ignore patterns

    Returns:
        List of missing issues
    """
    rules = rules or RuleSet()
    defined = {v.name for v in defined_variables}
    used: set[str] = set()
    issues: list[Issue] = []

    for usage in used_variables:
        if usage.is_dynamic:
            continue
        name = usage.name
        if name in used:
            continue
        used.add(name)

        if name in defined or rules.has_default(name):
            continue
        if should_ignore(name, rules.ignore, IssueKind.MISSING.value):
            continue

        required = rules.is_required(name)
        issues.append(
            Issue(
                kind=IssueKind.MISSING,
                severity=Severity.ERROR if required else Severity.WARNING,
                variable=name,
                message=f'Variable "{name}" is used in code but not defined in any .env file',
                location=usage.location,
                fix=f"Add {name}= to your .env file",
                context={"required": required},
            )
        )

    for name in rules.required_variables:
        if name in defined or name in used or rules.has_default(name):
            continue
        if should_ignore(name, rules.ignore, IssueKind.MISSING.value):
            continue
        issues.append(
            Issue(
                kind=IssueKind.MISSING,
                severity=Severity.ERROR,
                variable=name,
                message=f'Required variable "{name}" is not defined in any .env file',
                fix=f"Add {name}= to your .env file",
                context={"required": True},
            )
        )

    return issues


def analyze_dynamic_access(used_variables: Iterable[UsedVariable]) -> list[Issue]:
    """Report every read whose variable name is computed at runtime.

    Client-side dynamic reads are warnings: bundlers only inline literal
    names, so the value is undefined in the browser.
    """
    issues: list[Issue] = []
    for usage in used_variables:
        if not usage.is_dynamic:
            continue
        if usage.is_client_side:
            severity = Severity.WARNING
            message = "Dynamic environment variable access in client-side code cannot be resolved at build time"
        else:
            severity = Severity.INFO
            message = "Dynamic environment variable access; the variable name cannot be checked statically"
        issues.append(
            Issue(
                kind=IssueKind.DYNAMIC_ACCESS,
                severity=severity,
                variable=DYNAMIC_NAME,
                message=message,
                location=usage.location,
                fix="Access variables by literal name where possible",
                context={"snippet": usage.snippet} if usage.snippet else {},
            )
        )
    return issues


def get_missing_summary(issues: Iterable[Issue]) -> dict[str, list[str]]:
    """Split missing issues into required and optional variable names."""
    summary: dict[str, list[str]] = {"required": [], "optional": []}
    for issue in issues:
        if issue.kind != IssueKind.MISSING:
            continue
        key = "required" if issue.severity == Severity.ERROR else "optional"
        summary[key].append(issue.variable)
    return summary
