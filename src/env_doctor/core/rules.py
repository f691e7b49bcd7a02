"""Lenient construction and loading of rule sets.

Rule input comes from user-edited files. A rule with an invalid field (a
regex that does not compile, an unknown type name, a malformed enum) keeps
its valid fields; the invalid ones are dropped and logged.
"""

from __future__ import annotations

import re
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError as PydanticValidationError

from env_doctor.models.rules import RuleSet, VariableRule
from env_doctor.utils.errors import ConfigurationError
from env_doctor.utils.logging import get_logger

logger = get_logger("rules")

_ALIASES = {
    field.alias: name
    for name, field in VariableRule.model_fields.items()
    if field.alias
}


def _canonical(key: Any) -> str:
    key = str(key)
    return _ALIASES.get(key, key)


def build_rule(raw: Any, name: str = "") -> VariableRule:
    """Build a VariableRule, treating invalid fields as absent.

    Args:
        raw: Mapping of rule fields (or an existing VariableRule)
        name: Variable name, used in log messages

    Returns:
        A valid VariableRule (possibly empty)
    """
    if isinstance(raw, VariableRule):
        return raw
    if raw is None:
        return VariableRule()
    if not isinstance(raw, dict):
        logger.warning("Rule for %s is not a mapping, ignoring it", name or "<unnamed>")
        return VariableRule()

    fields = dict(raw)
    while True:
        try:
            return VariableRule.model_validate(fields)
        except PydanticValidationError as e:
            bad = {_canonical(err["loc"][0]) for err in e.errors() if err.get("loc")}
            dropped = [k for k in fields if _canonical(k) in bad]
            if not dropped:
                logger.warning("Rule for %s is invalid, ignoring it: %s", name or "<unnamed>", e)
                return VariableRule()
            for key in dropped:
                logger.warning(
                    "Ignoring invalid field %r in rule for %s", key, name or "<unnamed>"
                )
                fields.pop(key)


def _valid_patterns(patterns: Any) -> list[str]:
    if patterns is None:
        return []
    if isinstance(patterns, str):
        patterns = [patterns]
    if not isinstance(patterns, (list, tuple)):
        logger.warning("secret_patterns must be a list, ignoring it")
        return []
    out: list[str] = []
    for pattern in patterns:
        try:
            re.compile(str(pattern))
        except re.error as e:
            logger.warning("Ignoring invalid secret pattern %r: %s", pattern, e)
            continue
        out.append(str(pattern))
    return out


def _string_list(values: Any, what: str) -> list[str]:
    if values is None:
        return []
    if isinstance(values, str):
        return [values]
    if not isinstance(values, (list, tuple)):
        logger.warning("%s must be a list, ignoring it", what)
        return []
    return [str(v) for v in values if v is not None]


def build_rule_set(
    variables: Any = None,
    ignore: Any = None,
    secret_patterns: Any = None,
) -> RuleSet:
    """Build a RuleSet from raw, possibly malformed, configuration values.

    Args:
        variables: Mapping of variable name to raw rule
        ignore: Ignore patterns
        secret_patterns: Extra secret regexes

    Returns:
        A valid RuleSet
    """
    rules: dict[str, VariableRule] = {}
    if isinstance(variables, dict):
        for name, raw in variables.items():
            rules[str(name)] = build_rule(raw, str(name))
    elif variables is not None:
        logger.warning("variables must be a mapping, ignoring it")

    return RuleSet(
        variables=rules,
        ignore=_string_list(ignore, "ignore"),
        secret_patterns=_valid_patterns(secret_patterns),
    )


def load_rules(path: str | Path | None) -> RuleSet:
    """Load a rule set from a YAML file.

    The file is either a mapping with ``variables``/``ignore``/``secret_patterns``
    keys, or a bare mapping of variable name to rule.

    Args:
        path: Path to the rules file; None returns an empty rule set

    Returns:
        Loaded RuleSet

    Raises:
        ConfigurationError: If the file cannot be read or is not valid YAML
    """
    if not path:
        return RuleSet()
    try:
        with open(path, "r", encoding="utf-8") as f:
            raw = yaml.safe_load(f) or {}
    except OSError as e:
        raise ConfigurationError(f"Failed to read rules file {path}: {e}", path=str(path)) from e
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in rules file {path}: {e}", path=str(path)) from e

    if not isinstance(raw, dict):
        logger.warning("Rules file %s does not contain a mapping, ignoring it", path)
        return RuleSet()

    if any(k in raw for k in ("variables", "ignore", "secret_patterns", "secretPatterns")):
        return build_rule_set(
            variables=raw.get("variables"),
            ignore=raw.get("ignore"),
            secret_patterns=raw.get("secret_patterns", raw.get("secretPatterns")),
        )
    return build_rule_set(variables=raw)
