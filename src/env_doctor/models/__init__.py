"""Data models for env-doctor.

All models are Pydantic BaseModel with frozen=True for immutability.
"""

from env_doctor.models.common import AuditError, SourceLocation
from env_doctor.models.env import (
    DYNAMIC_NAME,
    AccessIdiom,
    DefinedVariable,
    InferredType,
    Issue,
    IssueKind,
    Severity,
    UsedVariable,
)
from env_doctor.models.rules import RuleSet, VariableRule, VariableType
from env_doctor.models.result import (
    AnalysisResult,
    ParseError,
    ParseResult,
    ScanFailure,
    ScanStats,
    SyncResult,
)

__all__ = [
    # Common
    "AuditError",
    "SourceLocation",
    # Facts
    "DYNAMIC_NAME",
    "AccessIdiom",
    "DefinedVariable",
    "InferredType",
    "Issue",
    "IssueKind",
    "Severity",
    "UsedVariable",
    # Rules
    "RuleSet",
    "VariableRule",
    "VariableType",
    # Results
    "AnalysisResult",
    "ParseError",
    "ParseResult",
    "ScanFailure",
    "ScanStats",
    "SyncResult",
]
