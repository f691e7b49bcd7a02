"""Unit tests for error handling utilities."""

import pytest

from env_doctor.models.common import AuditError, SourceLocation
from env_doctor.utils.errors import (
    ConfigurationError,
    DefinitionSourceError,
    EnvDoctorError,
    RootNotFoundError,
    ScanError,
    is_valid_env_var_name,
)


class TestEnvDoctorError:
    """Tests for EnvDoctorError."""

    def test_basic_error(self):
        """Test basic error creation."""
        error = EnvDoctorError("Something went wrong")
        assert str(error) == "Something went wrong"
        assert error.message == "Something went wrong"
        assert error.code == "UNKNOWN_ERROR"
        assert error.details == {}

    def test_to_audit_error(self):
        """Test conversion to the AuditError model."""
        error = EnvDoctorError("Test", code="TEST", details={"key": "value"})
        audit_error = error.to_audit_error()

        assert isinstance(audit_error, AuditError)
        assert audit_error.code == "TEST"
        assert audit_error.details == {"key": "value"}
        assert str(audit_error) == "[TEST] Test"


class TestSpecificErrors:
    """Tests for specific error types."""

    def test_configuration_error(self):
        """Test ConfigurationError."""
        error = ConfigurationError("Invalid config", path="/tmp/.env-doctor.yaml")
        assert error.code == "CONFIG_ERROR"
        assert error.details["path"] == "/tmp/.env-doctor.yaml"
        assert ConfigurationError("No path").details == {}

    def test_root_not_found(self):
        """Test RootNotFoundError."""
        error = RootNotFoundError("/does/not/exist")
        assert error.code == "ROOT_NOT_FOUND"
        assert "/does/not/exist" in error.message
        assert error.details["root"] == "/does/not/exist"

    def test_definition_source_error(self):
        """Test DefinitionSourceError."""
        error = DefinitionSourceError([".env", ".env.local"])
        assert error.code == "NO_DEFINITIONS"
        assert error.message == "No definition file found (looked for: .env, .env.local)"
        assert error.details["files"] == [".env", ".env.local"]

    def test_scan_error(self):
        """Test ScanError."""
        error = ScanError("File too large", file="src/big.js")
        assert error.code == "SCAN_ERROR"
        assert error.details == {"file": "src/big.js"}

    def test_hierarchy(self):
        """Test that every error can be caught as EnvDoctorError."""
        for error in (
            ConfigurationError("x"),
            RootNotFoundError("x"),
            DefinitionSourceError([]),
            ScanError("x"),
        ):
            with pytest.raises(EnvDoctorError):
                raise error


class TestEnvVarNames:
    """Tests for is_valid_env_var_name."""

    @pytest.mark.parametrize("name", ["PATH", "_PRIVATE", "a1", "NEXT_PUBLIC_URL"])
    def test_valid(self, name):
        """Test valid names."""
        assert is_valid_env_var_name(name)

    @pytest.mark.parametrize("name", ["", "1ABC", "MY-VAR", "MY VAR", "NAMÉ"])
    def test_invalid(self, name):
        """Test invalid names."""
        assert not is_valid_env_var_name(name)


class TestSourceLocation:
    """Tests for SourceLocation rendering."""

    def test_str(self):
        """Test file:line[:column] rendering."""
        assert str(SourceLocation(file="src/a.ts", line=3, column=7)) == "src/a.ts:3:7"
        assert str(SourceLocation(file=".env", line=2)) == ".env:2"
