"""Environment variable fact models: definitions, usages and issues."""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field

from env_doctor.models.common import SourceLocation

# Name carried by usages whose variable name cannot be determined statically.
DYNAMIC_NAME = "<dynamic>"


class AccessIdiom(str, Enum):
    """Syntactic shape of an environment variable read."""

    DIRECT = "direct"
    BRACKET = "bracket"
    DESTRUCTURE = "destructure"
    DYNAMIC = "dynamic"


class InferredType(str, Enum):
    """Value type suggested by the code surrounding a read."""

    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    JSON = "json"
    ARRAY = "array"
    UNKNOWN = "unknown"


class IssueKind(str, Enum):
    """Kinds of configuration defects."""

    MISSING = "missing"
    UNUSED = "unused"
    TYPE_MISMATCH = "type-mismatch"
    SYNC_DRIFT = "sync-drift"
    SECRET_EXPOSED = "secret-exposed"
    INVALID_VALUE = "invalid-value"
    DYNAMIC_ACCESS = "dynamic-access"


class Severity(str, Enum):
    """Severity level for issues."""

    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


class DefinedVariable(BaseModel):
    """A variable declared in a .env-style file."""

    model_config = {"frozen": True}

    name: str = Field(description="Variable name")
    value: str = Field(default="", description="Unquoted value, may be empty")
    location: SourceLocation = Field(description="Where the winning definition lives")
    is_secret: bool = Field(default=False, description="Whether the value is considered a secret")
    raw: str | None = Field(default=None, description="Raw line content")

    @property
    def file(self) -> str:
        """File holding the definition."""
        return self.location.file

    @property
    def line(self) -> int:
        """Line of the definition."""
        return self.location.line


class UsedVariable(BaseModel):
    """A single read of an environment variable in source code."""

    model_config = {"frozen": True}

    name: str = Field(description=f"Variable name or {DYNAMIC_NAME!r}")
    location: SourceLocation = Field(description="Start of the accessed identifier")
    access_idiom: AccessIdiom = Field(description="How the variable is read")
    inferred_type: InferredType = Field(
        default=InferredType.UNKNOWN, description="Type suggested by the usage context"
    )
    is_client_side: bool = Field(default=False, description="Whether the read reaches client code")
    snippet: str | None = Field(default=None, description="Source line for context")

    @property
    def is_dynamic(self) -> bool:
        """Whether the variable name is not statically known."""
        return self.access_idiom == AccessIdiom.DYNAMIC or self.name == DYNAMIC_NAME

    @property
    def file(self) -> str:
        return self.location.file

    @property
    def line(self) -> int:
        return self.location.line


class Issue(BaseModel):
    """A detected configuration defect."""

    model_config = {"frozen": True}

    kind: IssueKind = Field(description="Kind of defect")
    severity: Severity = Field(description="Severity level")
    variable: str = Field(description="Related variable name")
    message: str = Field(description="Human-readable message")
    location: SourceLocation | None = Field(default=None, description="Location, if any")
    fix: str | None = Field(default=None, description="Suggested fix")
    context: dict[str, Any] = Field(default_factory=dict, description="Additional context")

    def __str__(self) -> str:
        where = f" ({self.location})" if self.location else ""
        return f"{self.severity.value}: [{self.kind.value}] {self.message}{where}"
