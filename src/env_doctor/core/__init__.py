"""Core functionality for env-doctor."""

from env_doctor.core.definitions import (
    infer_value_type,
    parse_definition_file,
    parse_definitions,
    parse_definitions_content,
)
from env_doctor.core.discovery import discover_source_files
from env_doctor.core.engine import EnvDoctor, analyze, run_analysis
from env_doctor.core.frameworks import (
    FRAMEWORKS,
    FrameworkProfile,
    detect_framework,
    get_env_file_patterns,
    get_framework_profile,
    is_client_accessible,
    validate_framework_convention,
)
from env_doctor.core.ignore import should_ignore
from env_doctor.core.rules import build_rule, build_rule_set, load_rules
from env_doctor.core.scanner import get_unique_variable_names, scan_file, scan_usages

__all__ = [
    "infer_value_type",
    "parse_definition_file",
    "parse_definitions",
    "parse_definitions_content",
    "discover_source_files",
    "EnvDoctor",
    "analyze",
    "run_analysis",
    "FRAMEWORKS",
    "FrameworkProfile",
    "detect_framework",
    "get_env_file_patterns",
    "get_framework_profile",
    "is_client_accessible",
    "validate_framework_convention",
    "should_ignore",
    "build_rule",
    "build_rule_set",
    "load_rules",
    "get_unique_variable_names",
    "scan_file",
    "scan_usages",
]
