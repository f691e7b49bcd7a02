"""Analyzers comparing definitions and usages.

Each analyzer is a pure function of its inputs and returns issues.
"""

from env_doctor.core.analyzers.missing import (
    analyze_dynamic_access,
    analyze_missing,
    get_missing_summary,
)
from env_doctor.core.analyzers.unused import (
    RUNTIME_VARIABLES,
    analyze_unused,
    get_unused_summary,
)
from env_doctor.core.analyzers.type_mismatch import analyze_type_mismatch
from env_doctor.core.analyzers.sync_drift import analyze_sync_drift, compare_template_with_env
from env_doctor.core.analyzers.secrets import analyze_secrets, get_security_recommendations

__all__ = [
    "analyze_dynamic_access",
    "analyze_missing",
    "get_missing_summary",
    "RUNTIME_VARIABLES",
    "analyze_unused",
    "get_unused_summary",
    "analyze_type_mismatch",
    "analyze_sync_drift",
    "compare_template_with_env",
    "analyze_secrets",
    "get_security_recommendations",
]
