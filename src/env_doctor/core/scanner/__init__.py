"""Source code scanning for environment variable reads."""

from env_doctor.core.scanner.base import (
    MAX_FILE_BYTES,
    MAX_STRUCTURAL_BYTES,
    ScanContext,
    StructuralScan,
    is_client_side_file,
)
from env_doctor.core.scanner.core import (
    get_unique_variable_names,
    scan_file,
    scan_source,
    scan_usages,
)
from env_doctor.core.scanner.fallback import scan_with_regex

__all__ = [
    "MAX_FILE_BYTES",
    "MAX_STRUCTURAL_BYTES",
    "ScanContext",
    "StructuralScan",
    "is_client_side_file",
    "get_unique_variable_names",
    "scan_file",
    "scan_source",
    "scan_usages",
    "scan_with_regex",
]
