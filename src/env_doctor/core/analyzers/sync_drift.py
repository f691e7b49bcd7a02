"""Drift between live definitions and a template such as .env.example."""

from __future__ import annotations

from typing import Iterable

from env_doctor.core.ignore import should_ignore
from env_doctor.models.common import SourceLocation
from env_doctor.models.env import DefinedVariable, Issue, IssueKind, Severity
from env_doctor.models.result import SyncResult


def analyze_sync_drift(
    env_variables: Iterable[DefinedVariable],
    template_variables: Iterable[DefinedVariable],
    template_file: str = ".env.example",
    ignore: Iterable[str] = (),
) -> SyncResult:
    """Compare live definitions with a template.

    Args:
        env_variables: Merged live definitions
        template_variables: Template definitions
        template_file: Template name used in messages and fixes
        ignore: Ignore patterns (``sync-drift:`` scoped ones apply)

    Returns:
        SyncResult; ``in_sync`` is True when neither side has extra names
    """
    env_variables = list(env_variables)
    template_variables = list(template_variables)
    ignore = list(ignore)
    scope = IssueKind.SYNC_DRIFT.value

    env_names = {v.name for v in env_variables}
    template_names = {v.name for v in template_variables}

    issues: list[Issue] = []
    missing_from_template: list[str] = []
    missing_from_env: list[str] = []

    for variable in env_variables:
        if variable.name in template_names or should_ignore(variable.name, ignore, scope):
            continue
        missing_from_template.append(variable.name)
        issues.append(
            Issue(
                kind=IssueKind.SYNC_DRIFT,
                severity=Severity.WARNING,
                variable=variable.name,
                message=(
                    f'Variable "{variable.name}" is defined in {variable.file} '
                    f"but not in {template_file}"
                ),
                location=variable.location,
                fix=f"Add {variable.name}= to {template_file}",
            )
        )

    for variable in template_variables:
        if variable.name in env_names or should_ignore(variable.name, ignore, scope):
            continue
        missing_from_env.append(variable.name)
        issues.append(
            Issue(
                kind=IssueKind.SYNC_DRIFT,
                severity=Severity.INFO,
                variable=variable.name,
                message=f'Variable "{variable.name}" is in {template_file} but not defined in any .env file',
                location=SourceLocation(file=template_file, line=variable.line),
                fix=f"Add {variable.name}= to your .env file",
            )
        )

    return SyncResult(
        issues=issues,
        missing_from_template=missing_from_template,
        missing_from_env=missing_from_env,
        in_sync=not missing_from_template and not missing_from_env,
    )


def compare_template_with_env(
    template_variables: Iterable[DefinedVariable],
    env_variables: Iterable[DefinedVariable],
) -> dict[str, list]:
    """Name-level and value-level differences between a template and live env.

    Values of secret variables are never compared.

    Returns:
        Dict with ``added`` (live only), ``removed`` (template only) and
        ``changed`` (name, template value, live value) entries
    """
    template = {v.name: v for v in template_variables}
    live = {v.name: v for v in env_variables}

    added = [name for name in live if name not in template]
    removed = [name for name in template if name not in live]
    changed = []
    for name, variable in live.items():
        other = template.get(name)
        if other is None or not other.value or not variable.value or variable.is_secret:
            continue
        if other.value != variable.value:
            changed.append(
                {"name": name, "template_value": other.value, "env_value": variable.value}
            )

    return {"added": added, "removed": removed, "changed": changed}
