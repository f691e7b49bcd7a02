"""Error handling utilities for env-doctor."""

from __future__ import annotations

import re
from typing import Any

from env_doctor.models.common import AuditError

_ENV_VAR_NAME = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


class EnvDoctorError(Exception):
    """Base exception for env-doctor."""

    def __init__(self, message: str, code: str = "UNKNOWN_ERROR", details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details or {}

    def to_audit_error(self) -> AuditError:
        """Convert to AuditError model."""
        return AuditError(code=self.code, message=self.message, details=self.details)


class ConfigurationError(EnvDoctorError):
    """Configuration or rule file could not be used."""

    def __init__(self, message: str, path: str | None = None):
        details = {"path": path} if path else {}
        super().__init__(message, code="CONFIG_ERROR", details=details)


class RootNotFoundError(EnvDoctorError):
    """The project root directory does not exist."""

    def __init__(self, root: str):
        super().__init__(
            f"Root directory not found: {root}",
            code="ROOT_NOT_FOUND",
            details={"root": root},
        )


class DefinitionSourceError(EnvDoctorError):
    """None of the requested definition files could be read."""

    def __init__(self, files: list[str]):
        super().__init__(
            f"No definition file found (looked for: {', '.join(files) or 'nothing'})",
            code="NO_DEFINITIONS",
            details={"files": list(files)},
        )


class ScanError(EnvDoctorError):
    """A source file could not be scanned."""

    def __init__(self, message: str, file: str | None = None):
        details = {"file": file} if file else {}
        super().__init__(message, code="SCAN_ERROR", details=details)


def is_valid_env_var_name(name: str) -> bool:
    """Check a name against ``[A-Za-z_][A-Za-z0-9_]*`` (ASCII only)."""
    return _ENV_VAR_NAME.match(name) is not None


