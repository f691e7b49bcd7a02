"""Definitions that no code reads."""

from __future__ import annotations

from typing import Iterable

from env_doctor.core.frameworks import FrameworkProfile, get_framework_profile
from env_doctor.core.ignore import should_ignore
from env_doctor.core.secrets import is_placeholder_value
from env_doctor.models.env import DefinedVariable, Issue, IssueKind, Severity, UsedVariable
from env_doctor.models.rules import RuleSet

# Read by runtimes and tooling rather than application code.
RUNTIME_VARIABLES = frozenset({
    "NODE_ENV",
    "PORT",
    "HOST",
    "DEBUG",
    "LOG_LEVEL",
    "TZ",
    "CI",
    "HOME",
    "PATH",
    "SHELL",
    "USER",
    "TERM",
})


def analyze_unused(
    defined_variables: Iterable[DefinedVariable],
    used_variables: Iterable[UsedVariable],
    rules: RuleSet | None = None,
    framework: str | FrameworkProfile | None = None,
) -> list[Issue]:
    """Find definitions that no source file reads.

    Runtime and framework variables, empty or placeholder values and
    ignored names are skipped.

    Args:
        defined_variables: Merged definitions
        used_variables: All usages
        rules: Ignore patterns
        framework: Framework name or profile

    Returns:
        List of unused issues
    """
    rules = rules or RuleSet()
    profile = framework if isinstance(framework, FrameworkProfile) else get_framework_profile(framework)

    used: set[str] = set()
    has_dynamic = False
    for usage in used_variables:
        if usage.is_dynamic:
            has_dynamic = True
        else:
            used.add(usage.name)

    issues: list[Issue] = []
    for variable in defined_variables:
        name = variable.name
        if name in used or name in RUNTIME_VARIABLES or name in profile.auto_ignore:
            continue
        if should_ignore(name, rules.ignore, IssueKind.UNUSED.value):
            continue
        if is_placeholder_value(variable.value):
            continue

        message = f'Variable "{name}" is defined in {variable.file} but never used in code'
        if has_dynamic:
            message += " (it may be read through dynamic access)"
        issues.append(
            Issue(
                kind=IssueKind.UNUSED,
                severity=Severity.WARNING,
                variable=name,
                message=message,
                location=variable.location,
                fix=f"Remove {name} from {variable.file} if it is no longer needed",
                context={"value": "[set]"},
            )
        )

    return issues


def get_unused_summary(issues: Iterable[Issue]) -> dict[str, object]:
    """Count unused issues and group their variable names by file."""
    by_file: dict[str, list[str]] = {}
    count = 0
    for issue in issues:
        if issue.kind != IssueKind.UNUSED:
            continue
        count += 1
        file = issue.location.file if issue.location else "unknown"
        by_file.setdefault(file, []).append(issue.variable)
    return {"count": count, "by_file": by_file}
