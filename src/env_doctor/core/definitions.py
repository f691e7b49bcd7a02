"""Parsing of .env-style definition files."""

from __future__ import annotations

import json
import re
from pathlib import Path
from typing import Iterable

from env_doctor.core.secrets import is_secret_variable
from env_doctor.models.common import SourceLocation
from env_doctor.models.env import DefinedVariable, InferredType
from env_doctor.models.result import ParseError, ParseResult
from env_doctor.models.rules import RuleSet
from env_doctor.utils.errors import is_valid_env_var_name
from env_doctor.utils.logging import get_logger

logger = get_logger("definitions")

_ESCAPES = {"n": "\n", "r": "\r", "t": "\t", "\\": "\\", '"': '"'}
_ESCAPE_RE = re.compile(r"\\([nrt\\\"])")
NUMBER_RE = re.compile(r"^-?[0-9]+(\.[0-9]+)?$")
_INLINE_COMMENT_RE = re.compile(r"\s#")


def _unescape(value: str) -> str:
    return _ESCAPE_RE.sub(lambda m: _ESCAPES[m.group(1)], value)


def _closing_quote(value: str, quote: str) -> int:
    """Index of the quote closing ``value[0]``, or -1."""
    i = 1
    while i < len(value):
        ch = value[i]
        if ch == "\\" and quote == '"':
            i += 2
            continue
        if ch == quote:
            return i
        i += 1
    return -1


def parse_value(value: str) -> str:
    """Unquote a raw value.

    Single-quoted values are taken verbatim, double-quoted values have
    their escape sequences processed, and unquoted values lose any inline
    ``#`` comment.
    """
    value = value.strip()
    if value[:1] in ("'", '"'):
        quote = value[0]
        end = _closing_quote(value, quote)
        if end > 0:
            rest = value[end + 1 :].strip()
            if not rest or rest.startswith("#"):
                inner = value[1:end]
                return _unescape(inner) if quote == '"' else inner

    match = _INLINE_COMMENT_RE.search(value)
    if match:
        value = value[: match.start()]
    return value.strip()


def _parse_line(line: str) -> tuple[str, str] | str:
    """Return ``(name, value)`` or an error message."""
    if line.startswith("export ") or line.startswith("export\t"):
        line = line[len("export") :].lstrip()

    if "=" not in line:
        return "Invalid format: missing '=' sign"

    name, _, value = line.partition("=")
    name = name.strip()
    if not is_valid_env_var_name(name):
        return f'Invalid variable name: "{name}"'
    return name, parse_value(value)


def parse_definitions_content(content: str, file: str) -> ParseResult:
    """Parse the text of one definition file.

    Args:
        content: File contents
        file: Name recorded in locations and errors

    Returns:
        ParseResult; a name defined twice keeps its last definition
    """
    variables: dict[str, DefinedVariable] = {}
    errors: list[ParseError] = []

    for line_number, raw_line in enumerate(content.splitlines(), 1):
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue

        parsed = _parse_line(line)
        if isinstance(parsed, str):
            errors.append(ParseError(file=file, line=line_number, message=parsed))
            continue

        name, value = parsed
        variables[name] = DefinedVariable(
            name=name,
            value=value,
            location=SourceLocation(file=file, line=line_number),
            is_secret=is_secret_variable(name, value),
            raw=raw_line,
        )

    return ParseResult(variables=list(variables.values()), errors=errors)


def parse_definition_file(path: str | Path, root: str | Path | None = None) -> ParseResult:
    """Parse one definition file. Never raises.

    A file that is missing or unreadable yields a single ParseError at line 0.

    Args:
        path: File path, relative to ``root`` when given
        root: Directory relative paths are resolved against
    """
    file = Path(path).as_posix()
    absolute = Path(root) / path if root is not None else Path(path)

    if not absolute.is_file():
        logger.debug("Env file not found: %s", absolute)
        return ParseResult(errors=[ParseError(file=file, line=0, message=f"File not found: {file}")])

    try:
        content = absolute.read_text(encoding="utf-8", errors="replace")
    except OSError as e:
        return ParseResult(
            errors=[ParseError(file=file, line=0, message=f"Failed to read file: {e}")]
        )

    result = parse_definitions_content(content, file)
    logger.debug("Parsed %d variables from %s", len(result.variables), file)
    return result


def apply_rules(variables: Iterable[DefinedVariable], rules: RuleSet | None) -> list[DefinedVariable]:
    """Apply explicit rule ``secret`` flags and custom secret patterns."""
    out: list[DefinedVariable] = []
    for variable in variables:
        is_secret = variable.is_secret
        if rules is not None:
            explicit = rules.explicit_secret(variable.name)
            if explicit is not None:
                is_secret = explicit
            elif not is_secret and rules.secret_patterns:
                is_secret = is_secret_variable(variable.name, variable.value, rules.secret_patterns)
        if is_secret != variable.is_secret:
            variable = variable.model_copy(update={"is_secret": is_secret})
        out.append(variable)
    return out


def parse_definitions(
    files: Iterable[str | Path],
    root: str | Path | None = None,
    rules: RuleSet | None = None,
) -> ParseResult:
    """Parse several definition files in priority order.

    Later files override earlier ones by name, and the location points at
    the winning definition. Names keep the order they were first seen in.

    Args:
        files: Definition files, lowest priority first
        root: Directory relative paths are resolved against
        rules: Optional rules whose ``secret`` flags override the heuristic

    Returns:
        Merged ParseResult with the errors of every file
    """
    merged: dict[str, DefinedVariable] = {}
    errors: list[ParseError] = []

    for path in files:
        result = parse_definition_file(path, root)
        for variable in result.variables:
            merged[variable.name] = variable
        errors.extend(result.errors)

    return ParseResult(variables=apply_rules(merged.values(), rules), errors=errors)


def _reject_constant(name: str) -> float:
    raise ValueError(f"{name} is not valid JSON")


def is_json(value: str) -> bool:
    """Whether a value parses as strict JSON (no NaN or Infinity)."""
    try:
        json.loads(value, parse_constant=_reject_constant)
    except (ValueError, RecursionError):
        return False
    return True


def infer_value_type(value: str) -> InferredType | None:
    """Guess the type of a literal value; None for an empty value."""
    if not value:
        return None
    if value in ("true", "false"):
        return InferredType.BOOLEAN
    if NUMBER_RE.match(value):
        return InferredType.NUMBER
    if (value.startswith("{") and value.endswith("}")) or (
        value.startswith("[") and value.endswith("]")
    ):
        if is_json(value):
            return InferredType.JSON
    if "," in value and " " not in value:
        return InferredType.ARRAY
    return InferredType.STRING
