"""Unit tests for framework profiles and detection."""

import json

import pytest

from env_doctor.core.frameworks import (
    FRAMEWORKS,
    detect_framework,
    get_env_file_patterns,
    get_framework_profile,
    is_client_accessible,
    validate_framework_convention,
)


class TestDetectFramework:
    """Tests for detect_framework."""

    @pytest.mark.parametrize(
        "config_file,expected",
        [
            ("next.config.js", "nextjs"),
            ("next.config.mjs", "nextjs"),
            ("vite.config.ts", "vite"),
        ],
    )
    def test_config_files(self, write_files, config_file, expected):
        """Test detection from framework config files."""
        root = write_files({config_file: "export default {}\n"})
        assert detect_framework(root) == expected

    @pytest.mark.parametrize(
        "package,expected",
        [
            ({"dependencies": {"next": "14.0.0", "react": "18.0.0"}}, "nextjs"),
            ({"devDependencies": {"vite": "5.0.0"}}, "vite"),
            ({"dependencies": {"react-scripts": "5.0.1"}}, "cra"),
            ({"dependencies": {"express": "4.0.0"}}, "node"),
        ],
    )
    def test_package_json(self, write_files, package, expected):
        """Test detection from package.json dependencies."""
        root = write_files({"package.json": json.dumps(package)})
        assert detect_framework(root) == expected

    def test_python_project(self, write_files):
        """Test detection of Python projects."""
        root = write_files({"pyproject.toml": "[project]\nname = 'x'\n"})
        assert detect_framework(root) == "python"

    def test_package_json_wins_over_python_markers(self, write_files):
        """Test that a package.json rules out Python detection."""
        root = write_files({"package.json": "{}", "requirements.txt": "flask\n"})
        assert detect_framework(root) == "node"

    def test_invalid_package_json(self, write_files):
        """Test that an unreadable package.json falls back to node."""
        root = write_files({"package.json": "{not json"})
        assert detect_framework(root) == "node"

    def test_empty_directory(self, tmp_path):
        """Test the default."""
        assert detect_framework(tmp_path) == "node"


class TestProfiles:
    """Tests for profile lookup and conventions."""

    def test_lookup(self):
        """Test name normalisation and defaults."""
        assert get_framework_profile("NextJS").name == "nextjs"
        assert get_framework_profile(None).name == "node"
        assert get_framework_profile("auto").name == "node"
        assert get_framework_profile("rails").name == "node"

    def test_profiles_are_frozen(self):
        """Test that profiles cannot be modified."""
        with pytest.raises(Exception):
            FRAMEWORKS["vite"].client_prefixes = ("X_",)

    def test_client_accessible(self):
        """Test prefix-based client exposure."""
        assert is_client_accessible("NEXT_PUBLIC_URL", FRAMEWORKS["nextjs"])
        assert not is_client_accessible("DATABASE_URL", FRAMEWORKS["nextjs"])
        assert is_client_accessible("REACT_APP_API", FRAMEWORKS["cra"])
        assert not is_client_accessible("VITE_X", FRAMEWORKS["node"])

    def test_env_file_patterns(self):
        """Test framework env file conventions."""
        vite = get_env_file_patterns("vite")
        assert vite[0] == ".env"
        assert ".env.production.local" in vite
        assert ".env.test" not in vite
        assert ".env.test" in get_env_file_patterns("nextjs")
        assert get_env_file_patterns("node") == [".env", ".env.local"]

    def test_source_globs(self):
        """Test default include globs."""
        assert "src/**/*.tsx" in FRAMEWORKS["nextjs"].source_globs
        assert FRAMEWORKS["python"].source_globs == ("**/*.py",)

    def test_validate_convention(self):
        """Test the client prefix convention check."""
        nextjs = FRAMEWORKS["nextjs"]
        assert validate_framework_convention("NEXT_PUBLIC_URL", nextjs, True) == (True, None)
        assert validate_framework_convention("SECRET", nextjs, False) == (True, None)
        valid, message = validate_framework_convention("SECRET", nextjs, True)
        assert valid is False
        assert "NEXT_PUBLIC_" in message
        assert validate_framework_convention("SECRET", FRAMEWORKS["node"], True) == (True, None)
