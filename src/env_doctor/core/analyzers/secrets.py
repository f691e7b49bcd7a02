"""Committed secret detection."""

from __future__ import annotations

from typing import Iterable

from env_doctor.core.ignore import should_ignore
from env_doctor.core.secrets import (
    DEFAULT_REVEAL_CHARS,
    classify_secret_value,
    find_secret_name_pattern,
    is_placeholder_value,
    matches_custom_pattern,
    redact_value,
)
from env_doctor.models.env import DefinedVariable, Issue, IssueKind, Severity
from env_doctor.models.rules import RuleSet

# Ignore scopes accepted by this analyzer.
SECRET_SCOPES = ("secret", IssueKind.SECRET_EXPOSED.value)


def analyze_secrets(
    defined_variables: Iterable[DefinedVariable],
    rules: RuleSet | None = None,
    reveal: int = DEFAULT_REVEAL_CHARS,
) -> list[Issue]:
    """Find definitions that hold real-looking secret values.

    A variable is a candidate when a rule marks it secret, its name or value
    looks like a credential, or a custom secret pattern matches. A rule with
    ``secret: false`` overrides every heuristic. Empty and placeholder values
    are never reported, and issues only carry a redacted preview.

    Args:
        defined_variables: Merged definitions
        rules: Variable rules, ignore and custom secret patterns
        reveal: Characters shown at each end of the preview

    Returns:
        List of secret-exposed issues
    """
    rules = rules or RuleSet()
    issues: list[Issue] = []

    for variable in defined_variables:
        name, value = variable.name, variable.value
        if not value or is_placeholder_value(value, for_secret=True):
            continue
        if any(should_ignore(name, rules.ignore, scope) for scope in SECRET_SCOPES):
            continue

        explicit = rules.explicit_secret(name)
        if explicit is False:
            continue

        name_match = find_secret_name_pattern(name)
        secret_type = classify_secret_value(value)
        custom = matches_custom_pattern(name, value, rules.secret_patterns)
        if not (explicit or variable.is_secret or name_match or secret_type or custom):
            continue

        provider = name_match.provider if name_match else None
        message = f'Variable "{name}" appears to be a secret'
        if provider:
            message += f" ({provider})"
        if secret_type:
            message += f" - detected as {secret_type}"
        message += ". Consider using a secure vault or removing from version control."

        issues.append(
            Issue(
                kind=IssueKind.SECRET_EXPOSED,
                severity=Severity.ERROR,
                variable=name,
                message=message,
                location=variable.location,
                fix="Use environment-specific configuration or a secrets manager",
                context={
                    "provider": provider,
                    "secret_type": secret_type,
                    "value_preview": redact_value(value, reveal),
                },
            )
        )

    return issues


def get_security_recommendations(issues: Iterable[Issue]) -> list[str]:
    """Recommendations for a set of issues, based on the secrets found."""
    secret_issues = [i for i in issues if i.kind == IssueKind.SECRET_EXPOSED]
    if not secret_issues:
        return []

    recommendations = [
        "Add .env files to .gitignore to prevent committing secrets",
        "Consider using a secrets manager like AWS Secrets Manager, HashiCorp Vault, or Doppler",
        "Use .env.example with placeholder values for documentation",
        "Enable git pre-commit hooks to scan for secrets before committing",
    ]
    providers = {i.context.get("provider") for i in secret_issues}
    if "AWS" in providers:
        recommendations.append("Consider using AWS IAM roles instead of access keys where possible")
    if "Stripe" in providers:
        recommendations.append("Use Stripe restricted API keys with minimal permissions in production")
    return recommendations
