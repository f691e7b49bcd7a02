"""Common model types shared across modules."""

from typing import Any

from pydantic import BaseModel, Field


class AuditError(BaseModel):
    """Represents an error that occurred during an analysis run."""

    model_config = {"frozen": True}

    code: str = Field(description="Error code for programmatic handling")
    message: str = Field(description="Human-readable error message")
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional error context",
    )

    def __str__(self) -> str:
        return f"[{self.code}] {self.message}"


class SourceLocation(BaseModel):
    """A position inside a source or definition file."""

    model_config = {"frozen": True}

    file: str = Field(description="File path, relative to the project root when known")
    line: int = Field(description="Line number (1-based, 0 for whole-file)")
    column: int | None = Field(default=None, description="Column number (0-based)")

    def __str__(self) -> str:
        if self.column is None:
            return f"{self.file}:{self.line}"
        return f"{self.file}:{self.line}:{self.column}"
