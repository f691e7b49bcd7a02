"""Rule set data models."""

from __future__ import annotations

import re
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field, field_validator


class VariableType(str, Enum):
    """Declared value type for a variable."""

    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    JSON = "json"
    URL = "url"
    EMAIL = "email"
    ARRAY = "array"


class VariableRule(BaseModel):
    """Constraints for a single variable.

    Every field is optional; an unset field leaves the variable unconstrained.
    Use ``env_doctor.core.rules.build_rule`` to build a rule from untrusted
    input, which drops invalid fields instead of failing.
    """

    model_config = {"frozen": True, "populate_by_name": True}

    required: bool = Field(default=False, description="Whether the variable must be defined")
    secret: bool | None = Field(default=None, description="Explicit secret flag")
    type: VariableType | None = Field(default=None, description="Expected value type")
    pattern: str | None = Field(default=None, description="Regex the value must match")
    enum: list[str] | None = Field(default=None, description="Allowed values")
    default: str | int | float | bool | None = Field(
        default=None, description="Value used when the variable is not defined"
    )
    description: str | None = Field(default=None, description="Documentation text")
    docs_url: str | None = Field(default=None, alias="docsUrl", description="Documentation URL")

    @field_validator("type", mode="before")
    @classmethod
    def _normalize_type(cls, v: Any) -> Any:
        if isinstance(v, str):
            return v.strip().lower()
        return v

    @field_validator("pattern", mode="before")
    @classmethod
    def _check_pattern(cls, v: Any) -> Any:
        if v is None:
            return None
        if not isinstance(v, str):
            raise ValueError("pattern must be a string")
        try:
            re.compile(v)
        except re.error as e:
            raise ValueError(f"invalid regular expression: {e}") from e
        return v

    @field_validator("enum", mode="before")
    @classmethod
    def _coerce_enum(cls, v: Any) -> Any:
        if isinstance(v, (list, tuple)):
            return [str(item) for item in v]
        return v

    @property
    def has_default(self) -> bool:
        """Whether a default value is configured."""
        return self.default is not None

    def matches_pattern(self, value: str) -> bool:
        """Check a value against the configured pattern (True when unset)."""
        if self.pattern is None:
            return True
        return re.search(self.pattern, value) is not None


class RuleSet(BaseModel):
    """Per-variable rules plus global ignore and secret patterns."""

    model_config = {"frozen": True, "populate_by_name": True}

    variables: dict[str, VariableRule] = Field(
        default_factory=dict, description="Rules by variable name"
    )
    ignore: list[str] = Field(
        default_factory=list,
        description="Ignore patterns (NAME, PREFIX*, *SUFFIX, kind:PATTERN)",
    )
    secret_patterns: list[str] = Field(
        default_factory=list,
        alias="secretPatterns",
        description="Extra regexes marking a name or value as secret",
    )

    @field_validator("secret_patterns")
    @classmethod
    def _check_secret_patterns(cls, v: list[str]) -> list[str]:
        for pattern in v:
            try:
                re.compile(pattern)
            except re.error as e:
                raise ValueError(f"invalid secret pattern {pattern!r}: {e}") from e
        return v

    def get(self, name: str) -> VariableRule | None:
        """Get the rule for a variable, if any."""
        return self.variables.get(name)

    def is_required(self, name: str) -> bool:
        rule = self.variables.get(name)
        return bool(rule and rule.required)

    def has_default(self, name: str) -> bool:
        rule = self.variables.get(name)
        return bool(rule and rule.has_default)

    def explicit_secret(self, name: str) -> bool | None:
        """Explicit secret flag for a variable, None when not configured."""
        rule = self.variables.get(name)
        return rule.secret if rule else None

    @property
    def required_variables(self) -> list[str]:
        """Names of all variables marked required, in declaration order."""
        return [name for name, rule in self.variables.items() if rule.required]
