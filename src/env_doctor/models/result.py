"""Parse, scan and analysis result models."""

from __future__ import annotations

from pydantic import BaseModel, Field

from env_doctor.models.env import (
    DefinedVariable,
    Issue,
    IssueKind,
    Severity,
    UsedVariable,
)


class ParseError(BaseModel):
    """A recoverable error while parsing a definition file."""

    model_config = {"frozen": True}

    file: str = Field(description="Definition file")
    line: int = Field(description="Line number (0 for whole-file errors)")
    message: str = Field(description="What went wrong")

    def __str__(self) -> str:
        return f"{self.file}:{self.line}: {self.message}"


class ParseResult(BaseModel):
    """Result of parsing one or more definition files."""

    model_config = {"frozen": True}

    variables: list[DefinedVariable] = Field(default_factory=list, description="Parsed variables")
    errors: list[ParseError] = Field(default_factory=list, description="Per-line or per-file errors")

    def names(self) -> set[str]:
        """Names of all parsed variables."""
        return {v.name for v in self.variables}

    def get(self, name: str) -> DefinedVariable | None:
        for variable in self.variables:
            if variable.name == name:
                return variable
        return None


class ScanFailure(BaseModel):
    """A source file that could not be scanned."""

    model_config = {"frozen": True}

    file: str = Field(description="Source file")
    message: str = Field(description="Why scanning failed")

    def __str__(self) -> str:
        return f"{self.file}: {self.message}"


class ScanStats(BaseModel):
    """Statistics for one analysis run."""

    model_config = {"frozen": True}

    files_scanned: int = Field(default=0, description="Source files scanned")
    env_files_parsed: int = Field(default=0, description="Definition files parsed")
    duration_ms: float = Field(default=0.0, description="Wall time in milliseconds")
    error_count: int = Field(default=0, description="Error-severity issues")
    warning_count: int = Field(default=0, description="Warning-severity issues")
    info_count: int = Field(default=0, description="Info-severity issues")
    parse_error_count: int = Field(default=0, description="Definition parse errors")
    scan_failure_count: int = Field(default=0, description="Source files that failed to scan")
    fallback_count: int = Field(default=0, description="Files scanned with the regex fallback")


class SyncResult(BaseModel):
    """Result of comparing live definitions with a template."""

    model_config = {"frozen": True}

    issues: list[Issue] = Field(default_factory=list, description="Drift issues")
    missing_from_template: list[str] = Field(
        default_factory=list, description="Defined live but absent from the template"
    )
    missing_from_env: list[str] = Field(
        default_factory=list, description="In the template but not defined live"
    )
    in_sync: bool = Field(default=True, description="Whether both sides declare the same names")


class AnalysisResult(BaseModel):
    """Everything one analysis run produced.

    This is the only contract between the engine and its reporters.
    """

    model_config = {"frozen": True}

    issues: list[Issue] = Field(default_factory=list, description="All detected issues")
    defined_variables: list[DefinedVariable] = Field(
        default_factory=list, description="Merged definitions"
    )
    used_variables: list[UsedVariable] = Field(
        default_factory=list, description="Usages found in source code"
    )
    template_variables: list[DefinedVariable] | None = Field(
        default=None, description="Template definitions, when a template was compared"
    )
    framework: str = Field(default="node", description="Framework used for classification")
    stats: ScanStats = Field(default_factory=ScanStats, description="Run statistics")
    parse_errors: list[ParseError] = Field(
        default_factory=list, description="Definition parse errors"
    )
    scan_failures: list[ScanFailure] = Field(
        default_factory=list, description="Source files that failed to scan"
    )

    @property
    def passed(self) -> bool:
        """True when no error-severity issue was found."""
        return not any(i.severity == Severity.ERROR for i in self.issues)

    def has_failures(self, strict: bool = False) -> bool:
        """Whether a CI gate should fail; strict mode also fails on warnings."""
        if strict:
            return any(i.severity in (Severity.ERROR, Severity.WARNING) for i in self.issues)
        return not self.passed

    def issues_by_kind(self, kind: IssueKind | str) -> list[Issue]:
        kind = IssueKind(kind)
        return [i for i in self.issues if i.kind == kind]

    def issues_by_severity(self, severity: Severity | str) -> list[Issue]:
        severity = Severity(severity)
        return [i for i in self.issues if i.severity == severity]

    def issues_for(self, variable: str) -> list[Issue]:
        """Get all issues about one variable."""
        return [i for i in self.issues if i.variable == variable]
